import logging
from typing import Any

import httpx
from openai.types.chat import (
    ChatCompletionMessageParam,
    ChatCompletionSystemMessageParam,
    ChatCompletionUserMessageParam,
)
from pydantic import ValidationError

from domain.aopenai import (
    BASE_URL,
    DEFAULT_MODEL,
    MAX_TOKENS,
    TEMPERATURE,
    TIMEOUT,
    TOP_P,
    has_token,
    openai_client_factory,
)
from domain.errors import (
    ApiFailure,
    MalformedResponse,
    MissingCredential,
    NetworkFailure,
    NoData,
)
from domain.prompts import ParseRecipePrompt
from domain.schemas import ChatCompletion, ParsedRecipe


logger = logging.getLogger(__name__)


class LLMService:
    """Turns recognized recipe text into a `ParsedRecipe`.

    One call, one request: either a `ParsedRecipe` comes back or one of the
    `ParseError` kinds is raised. Nothing is retried.
    """

    def __init__(
        self,
        token: str | None,
        *,
        model: str = DEFAULT_MODEL,
        base_url: str = BASE_URL,
        timeout: float = TIMEOUT,
        max_tokens: int = MAX_TOKENS,
        prompt: ParseRecipePrompt | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.token = token
        self.model = model
        self.base_url = base_url
        self.timeout = timeout
        self.max_tokens = max_tokens
        self.prompt = ParseRecipePrompt() if prompt is None else prompt
        self._http_client = http_client

    @property
    def http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = openai_client_factory(
                self.token or "",
                base_url=self.base_url,
                timeout=self.timeout,
            )
        return self._http_client

    def messages(self, text: str) -> list[ChatCompletionMessageParam]:
        system_message: ChatCompletionSystemMessageParam = {
            "role": "system",
            "content": str(self.prompt),
        }
        user_message: ChatCompletionUserMessageParam = {
            "role": "user",
            "content": self.prompt.user_message(text),
        }
        return [system_message, user_message]

    def payload(self, text: str) -> dict[str, Any]:
        return {
            "model": self.model,
            "messages": self.messages(text),
            "temperature": TEMPERATURE,
            "max_tokens": self.max_tokens,
            "top_p": TOP_P,
            "stop": None,
        }

    async def parse_recipe(self, text: str) -> ParsedRecipe:
        if not has_token(self.token):
            logger.error("No API key configured for recipe parsing.")
            raise MissingCredential()

        logger.debug("Requesting recipe parse from %s (%s)", self.base_url, self.model)
        try:
            resp = await self.http_client.post("chat/completions", json=self.payload(text))
        except httpx.RequestError as e:
            logger.warning("Recipe parsing request failed: %r", e)
            raise NetworkFailure(str(e) or type(e).__name__) from e

        if not resp.is_success:
            logger.warning(
                "Recipe parsing API returned %s: %s", resp.status_code, resp.text
            )
            raise ApiFailure(resp.status_code, resp.text)

        if not resp.content:
            raise NoData()

        try:
            completion = ChatCompletion.model_validate_json(resp.content)
        except ValidationError as e:
            logger.warning("Could not decode completion envelope: %s", resp.text)
            raise MalformedResponse(f"Failed to decode response: {e}") from e

        if not completion.choices:
            raise MalformedResponse("Missing content in response")

        content = completion.choices[0].message.content
        try:
            recipe = ParsedRecipe.model_validate_json(content)
        except ValidationError as e:
            logger.warning("Model content is not a recipe: %s", content)
            raise MalformedResponse(f"Failed to decode recipe: {e}") from e

        logger.info(
            "Parsed recipe %r with %d ingredients and %d steps",
            recipe.name,
            len(recipe.ingredients),
            len(recipe.steps),
        )
        return recipe

    async def aclose(self) -> None:
        if self._http_client is not None:
            await self._http_client.aclose()
