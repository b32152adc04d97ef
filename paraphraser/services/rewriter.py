from __future__ import annotations

from paraphraser.core.logging import get_logger
from paraphraser.services.completion import CompletionClient, CompletionResult, FailureKind
from paraphraser.services.prompts import RewriteStyle, build_paraphrase_prompt

logger = get_logger(__name__)


class Rewriter:
    def __init__(self, completion: CompletionClient, *, model: str, max_tokens: int, timeout: float | None = None) -> None:
        self.completion = completion
        self.model = model
        self.max_tokens = max_tokens
        self.timeout = timeout

    async def rewrite(self, chunk: str, style: RewriteStyle) -> CompletionResult:
        result = await self.completion.complete(
            build_paraphrase_prompt(chunk, style),
            max_tokens=self.max_tokens,
            model=self.model,
            timeout=self.timeout,
        )
        if not result.ok:
            logger.warning("rewrite_chunk_failed", failure=result.failure, chunk_chars=len(chunk))
            return result

        rewritten = result.text.strip()
        if not rewritten:
            logger.warning("rewrite_chunk_empty", chunk_chars=len(chunk))
            return CompletionResult.failed(FailureKind.EMPTY_RESPONSE)
        return CompletionResult.success(rewritten)
