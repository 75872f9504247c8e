"""Failures raised by the recipe parsing client.

Every kind carries a ``message`` fit to show a user as is.
"""


class ParseError(Exception):
    message = "Something went wrong parsing the recipe."

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


class MissingCredential(ParseError):
    message = "API key is missing. Set WHISK_GROQ_API_KEY."


class NetworkFailure(ParseError):
    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Could not reach the recipe parsing service: {detail}")


class ApiFailure(ParseError):
    def __init__(self, status_code: int, body: str = "") -> None:
        self.status_code = status_code
        self.body = body
        message = f"API Error: Status Code {status_code}"
        if body:
            message += f"\nDetails: {body}"
        super().__init__(message)


class NoData(ParseError):
    message = "No data received from the server."


class MalformedResponse(ParseError):
    def __init__(self, details: str) -> None:
        self.details = details
        super().__init__(f"Failed to parse data from the server: {details}")


class RecipeNotFound(LookupError):
    pass


class GroceryItemNotFound(LookupError):
    pass
