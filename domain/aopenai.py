"""Connection details for the OpenAI-compatible chat-completion API."""

import httpx


PLACEHOLDER_TOKEN = "API_KEY"
BASE_URL = "https://api.groq.com/openai/v1/"
DEFAULT_MODEL = "llama-3.3-70b-versatile"
MAX_TOKENS = 2048
TEMPERATURE = 0.2
TOP_P = 1.0
TIMEOUT = 60 * 2


def has_token(token: str | None) -> bool:
    return bool(token and token.strip() and token != PLACEHOLDER_TOKEN)


def openai_client_factory(
    token: str,
    *,
    base_url: str = BASE_URL,
    timeout: float = TIMEOUT,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        base_url=base_url,
        headers={
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        },
        timeout=timeout,
        transport=transport,
    )
