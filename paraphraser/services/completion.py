from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Protocol

import anthropic
import httpx

from paraphraser.core.config import get_settings
from paraphraser.core.logging import get_logger

logger = get_logger(__name__)


class FailureKind(str, Enum):
    TIMEOUT = "timeout"
    TRANSPORT = "transport"
    SERVICE_ERROR = "service_error"
    UNEXPECTED_RESPONSE_SHAPE = "unexpected_response_shape"
    EMPTY_RESPONSE = "empty_response"


@dataclass(frozen=True)
class CompletionResult:
    text: str | None = None
    failure: FailureKind | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None and self.text is not None

    @classmethod
    def success(cls, text: str) -> CompletionResult:
        return cls(text=text)

    @classmethod
    def failed(cls, kind: FailureKind) -> CompletionResult:
        return cls(failure=kind)


class CompletionClient(Protocol):
    async def complete(
        self,
        prompt: str,
        *,
        max_tokens: int,
        model: str,
        timeout: float | None = None,
    ) -> CompletionResult: ...


class AnthropicCompletionClient:
    """Single-turn text completions over the Anthropic Messages API.

    Every failure mode comes back as a ``CompletionResult`` with a
    ``FailureKind``; nothing raised by the SDK escapes ``complete``.
    """

    def __init__(
        self,
        api_key: str,
        *,
        max_retries: int = 2,
        default_timeout: float = 90.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.default_timeout = default_timeout
        self._client = anthropic.AsyncAnthropic(
            api_key=api_key or None,
            max_retries=max_retries,
            timeout=default_timeout,
            http_client=http_client,
        )

    async def complete(
        self,
        prompt: str,
        *,
        max_tokens: int,
        model: str,
        timeout: float | None = None,
    ) -> CompletionResult:
        try:
            message = await self._client.messages.create(
                model=model,
                max_tokens=max_tokens,
                messages=[{"role": "user", "content": prompt}],
                timeout=timeout or self.default_timeout,
            )
        except anthropic.APITimeoutError:
            logger.warning("completion_timeout", model=model, timeout=timeout or self.default_timeout)
            return CompletionResult.failed(FailureKind.TIMEOUT)
        except anthropic.APIConnectionError:
            logger.exception("completion_transport_failed", model=model)
            return CompletionResult.failed(FailureKind.TRANSPORT)
        except anthropic.APIStatusError as exc:
            logger.warning(
                "completion_service_error",
                model=model,
                status_code=exc.status_code,
                preview=str(exc)[:180],
            )
            return CompletionResult.failed(FailureKind.SERVICE_ERROR)
        except anthropic.APIError:
            logger.exception("completion_failed", model=model)
            return CompletionResult.failed(FailureKind.SERVICE_ERROR)

        block = next((b for b in message.content or [] if b.type == "text"), None)
        if block is None:
            logger.warning(
                "completion_unexpected_response_shape",
                model=model,
                block_types=[b.type for b in message.content or []],
            )
            return CompletionResult.failed(FailureKind.UNEXPECTED_RESPONSE_SHAPE)

        return CompletionResult.success(block.text)

    async def close(self) -> None:
        await self._client.close()


@lru_cache
def get_completion_client() -> AnthropicCompletionClient:
    settings = get_settings()
    return AnthropicCompletionClient(
        settings.anthropic_api_key,
        max_retries=settings.anthropic_max_retries,
        default_timeout=settings.paraphrase_timeout_seconds,
    )
