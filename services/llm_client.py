from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any

import anthropic
from anthropic import Anthropic

from core.config import settings
from services.errors import EmptyModelOutput, ProviderError

logger = logging.getLogger(__name__)


def extract_text(resp: Any) -> str:
    parts = []
    for block in resp.content:
        if getattr(block, "text", None):
            parts.append(block.text)
    raw_text = "".join(parts)
    if not raw_text.strip():
        raise EmptyModelOutput()
    return raw_text.strip()


def _retry_after(err: anthropic.APIStatusError) -> int | None:
    value = err.response.headers.get("retry-after") if err.response is not None else None
    try:
        return max(1, int(float(value))) if value else None
    except ValueError:
        return None


class LLMClient:
    """Thin text-completion wrapper over the Anthropic Messages API.

    Provider failures are normalised into ``ProviderError`` so the HTTP layer
    never sees SDK exception types.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        base_url: str | None = None,
        timeout_seconds: float = 60.0,
        client: Any | None = None,
    ):
        self.model = model or settings.llm_model
        self.timeout_seconds = timeout_seconds
        self._api_key = api_key
        self._base_url = base_url
        self._client = client

    def _resolve_client(self) -> Any:
        if self._client is not None:
            return self._client
        if not self._api_key:
            raise ProviderError("AI service is not configured (missing API key).", status=503)
        self._client = Anthropic(api_key=self._api_key, base_url=self._base_url, timeout=self.timeout_seconds)
        return self._client

    def complete(self, prompt: str, max_tokens: int, system: str | None = None) -> str:
        client = self._resolve_client()
        params: dict[str, Any] = {
            "model": self.model,
            "max_tokens": max_tokens,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system:
            params["system"] = system

        try:
            resp = client.messages.create(**params)
        except anthropic.RateLimitError as e:
            logger.warning("LLM provider rate limited the request")
            raise ProviderError(
                "The AI service is busy right now. Please try again shortly.",
                status=429,
                retryable=True,
                retry_after_seconds=_retry_after(e),
            ) from e
        except anthropic.APITimeoutError as e:
            logger.warning("LLM request timed out after %ss", self.timeout_seconds)
            raise ProviderError("The AI service took too long to respond.", status=504, retryable=True) from e
        except anthropic.APIConnectionError as e:
            logger.warning("Could not reach LLM provider: %s", e)
            raise ProviderError("Could not reach the AI service.", status=503, retryable=True) from e
        except anthropic.APIStatusError as e:
            logger.warning("LLM provider returned %s", e.status_code)
            raise ProviderError(
                f"AI service error: {e.message}",
                status=e.status_code,
                retryable=e.status_code >= 500,
            ) from e

        return extract_text(resp)


@lru_cache
def get_llm_client() -> LLMClient:
    return LLMClient(
        api_key=settings.anthropic_api_key,
        model=settings.llm_model,
        base_url=settings.anthropic_base_url,
        timeout_seconds=settings.llm_timeout_seconds,
    )
