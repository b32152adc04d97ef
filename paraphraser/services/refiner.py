from __future__ import annotations

from collections.abc import Sequence

from paraphraser.core.logging import get_logger
from paraphraser.services.completion import CompletionClient
from paraphraser.services.prompts import build_refinement_prompt

logger = get_logger(__name__)


class Refiner:
    """Second-pass rewrite that targets the patterns a detection flagged.

    Refinement is best effort: whenever no usable text comes back the
    original chunk is returned unchanged.
    """

    def __init__(self, completion: CompletionClient, *, model: str, max_tokens: int, timeout: float | None = None) -> None:
        self.completion = completion
        self.model = model
        self.max_tokens = max_tokens
        self.timeout = timeout

    async def refine(self, chunk: str, ai_score: int, patterns: Sequence[str]) -> str:
        try:
            result = await self.completion.complete(
                build_refinement_prompt(chunk, ai_score, tuple(patterns)),
                max_tokens=self.max_tokens,
                model=self.model,
                timeout=self.timeout,
            )
        except Exception:
            logger.exception("refine_chunk_error", chunk_chars=len(chunk))
            return chunk
        if not result.ok:
            logger.warning("refine_chunk_failed", failure=result.failure, chunk_chars=len(chunk))
            return chunk

        refined = result.text.strip()
        if not refined:
            logger.warning("refine_chunk_empty", chunk_chars=len(chunk))
            return chunk
        return refined
