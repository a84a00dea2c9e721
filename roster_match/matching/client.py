from typing import Any, Dict, Optional, Protocol

import httpx
from loguru import logger


class MatchingServiceError(Exception):
    """Custom exception for matching service errors."""

    pass


class AuthenticationError(MatchingServiceError):
    """Exception raised for authentication failures (401, 403)."""

    pass


class RateLimitError(MatchingServiceError):
    """Exception raised for rate limit errors (429)."""

    pass


class MatchingService(Protocol):
    """Anything that turns a chat request into the model's answer text."""

    async def identify(self, request_body: Dict[str, Any]) -> str: ...


def extract_answer(payload: Dict[str, Any]) -> str:
    """Returns the first choice's message content, or "" if there is none."""
    choices = payload.get("choices")
    if not choices:
        return ""
    content = choices[0].get("message", {}).get("content")
    return content or ""


class ChatCompletionMatcher:
    """Calls a chat completions endpoint once per request, without retries."""

    def __init__(
        self,
        url: str,
        api_key: str,
        timeout: float = 60.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.url = url
        self.client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))
        self.client.headers.update(
            {
                "Accept": "application/json",
                "User-Agent": "roster-match",
                "Authorization": f"Bearer {api_key}",
            }
        )

    async def identify(self, request_body: Dict[str, Any]) -> str:
        logger.debug(f"Posting match request to {self.url}")
        try:
            response = await self.client.post(self.url, json=request_body)
        except httpx.RequestError as e:
            raise MatchingServiceError(f"Request to matching service failed: {e}") from e

        if response.status_code in {401, 403}:
            raise AuthenticationError(
                f"Authentication failed ({response.status_code}) for matching service"
            )
        if response.status_code == 429:
            retry_after = response.headers.get("Retry-After")
            raise RateLimitError(f"Rate limited by matching service. Retry-After: {retry_after}")

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise MatchingServiceError(f"HTTP error: {e.response.status_code}") from e

        return extract_answer(response.json())

    async def close(self):
        """Closes the underlying HTTP client."""
        await self.client.aclose()
        logger.debug("Closed matching service HTTP client")
