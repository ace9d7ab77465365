"""
Language model client: Gemini generateContent over REST.

Returns the raw JSON reply; interpreting candidates is the answer service's job.
"""

import logging
from typing import Any

import httpx

from app.core.config import GEMINI_API_BASE, GEMINI_MODEL, LLM_API_TIMEOUT
from app.core.errors import ModelCallError

logger = logging.getLogger(__name__)

DEFAULT_ERROR_MESSAGE = "Failed to fetch from Gemini API."


class GeminiClient:
    """Async client for one Gemini model."""

    def __init__(
        self,
        api_key: str,
        model: str = GEMINI_MODEL,
        timeout: float = LLM_API_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self._transport = transport

    @property
    def url(self) -> str:
        return f"{GEMINI_API_BASE}/models/{self.model}:generateContent"

    async def generate_content(self, contents: list[dict[str, Any]]) -> dict[str, Any]:
        """
        POST {"contents": contents} and return the decoded reply.

        Raises:
            ModelCallError: On transport failure, non-200 status, or a non-JSON body.
        """
        logger.info("[llm:gemini] IN  model=%s turns=%d", self.model, len(contents))
        payload = {"contents": contents}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(
                    self.url,
                    params={"key": self.api_key},
                    json=payload,
                    headers={"Content-Type": "application/json"},
                )
        except httpx.HTTPError as e:
            logger.warning("[llm:gemini] request failed: %s", e)
            raise ModelCallError(f"{DEFAULT_ERROR_MESSAGE} ({e.__class__.__name__})") from e

        if response.status_code != 200:
            logger.warning("[llm:gemini] error %s: %s", response.status_code, response.text[:200])
            raise ModelCallError(_error_message(response))
        try:
            data = response.json()
        except ValueError as e:
            raise ModelCallError("Gemini API returned a non-JSON response.") from e
        if not isinstance(data, dict):
            raise ModelCallError("Gemini API returned an unexpected response.")
        logger.info("[llm:gemini] OUT candidates=%d", len(data.get("candidates") or []))
        return data


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return DEFAULT_ERROR_MESSAGE
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    return DEFAULT_ERROR_MESSAGE
