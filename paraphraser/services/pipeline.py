from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass

from paraphraser.core.config import Settings, get_settings
from paraphraser.core.logging import get_logger
from paraphraser.services.chunker import chunk_text, join_chunks
from paraphraser.services.completion import CompletionClient, FailureKind
from paraphraser.services.detector import Detector
from paraphraser.services.prompts import RewriteStyle
from paraphraser.services.refiner import Refiner
from paraphraser.services.rewriter import Rewriter

logger = get_logger(__name__)


class RewriteFailed(Exception):
    def __init__(self, index: int, failure: FailureKind | None) -> None:
        super().__init__(f"rewrite of chunk {index} failed: {failure}")
        self.index = index
        self.failure = failure


@dataclass(frozen=True)
class PipelineResult:
    text: str
    ai_score: int | None
    refined: bool
    detection_failed: bool
    chunk_count: int


async def _drain(tasks: list[asyncio.Task]) -> None:
    pending = [task for task in tasks if not task.done()]
    for task in pending:
        task.cancel()
    if pending:
        await asyncio.gather(*pending, return_exceptions=True)


class ParaphrasePipeline:
    """Chunk, rewrite, score and, when the score is too high, refine once.

    One run makes at most two rewrite rounds and one detection call. The
    refined text is returned without being scored again, so its ``ai_score``
    is ``None``.
    """

    def __init__(self, completion: CompletionClient, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        timeout = self.settings.paraphrase_timeout_seconds
        self.rewriter = Rewriter(
            completion,
            model=self.settings.paraphrase_model,
            max_tokens=self.settings.paraphrase_max_tokens,
            timeout=timeout,
        )
        self.detector = Detector(completion, model=self.settings.detection_model, timeout=timeout)
        self.refiner = Refiner(
            completion,
            model=self.settings.paraphrase_model,
            max_tokens=self.settings.paraphrase_max_tokens,
            timeout=timeout,
        )

    def should_refine(self, ai_score: int) -> bool:
        return ai_score > self.settings.refine_threshold

    async def _rewrite_all(self, chunks: list[str], style: RewriteStyle) -> list[str]:
        tasks = [asyncio.create_task(self.rewriter.rewrite(chunk, style)) for chunk in chunks]
        index_of = {task: idx for idx, task in enumerate(tasks)}
        try:
            pending = set(tasks)
            while pending:
                done, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)
                for task in done:
                    outcome = task.result()
                    if not outcome.ok:
                        raise RewriteFailed(index_of[task], outcome.failure)
        finally:
            await _drain(tasks)
        return [task.result().text for task in tasks]

    async def _refine_all(self, chunks: list[str], ai_score: int, patterns: tuple[str, ...]) -> list[str]:
        tasks = [asyncio.create_task(self.refiner.refine(chunk, ai_score, patterns)) for chunk in chunks]
        try:
            return list(await asyncio.gather(*tasks))
        finally:
            await _drain(tasks)

    async def run(self, text: str, style: RewriteStyle) -> PipelineResult:
        start = time.perf_counter()
        chunks = chunk_text(text, self.settings.chunk_size)
        if not chunks:
            raise ValueError("cannot paraphrase empty text")

        pass1 = await self._rewrite_all(chunks, style)
        joined = join_chunks(pass1)
        logger.info("paraphrase_pass1_complete", mode=style.mode, chunks=len(chunks), output_chars=len(joined))

        verdict = await self.detector.detect(
            joined,
            sample_chars=self.settings.score_sample_chars,
            max_tokens=self.settings.score_max_tokens,
        )

        if verdict.failed or not self.should_refine(verdict.ai_score):
            logger.info(
                "paraphrase_complete",
                refined=False,
                ai_score=verdict.ai_score,
                latency_ms=round((time.perf_counter() - start) * 1000, 3),
            )
            return PipelineResult(
                text=joined,
                ai_score=None if verdict.failed else verdict.ai_score,
                refined=False,
                detection_failed=verdict.failed,
                chunk_count=len(chunks),
            )

        refine_chunks = chunk_text(joined, self.settings.chunk_size)
        pass2 = await self._refine_all(refine_chunks, verdict.ai_score, verdict.detected_patterns)
        logger.info(
            "paraphrase_complete",
            refined=True,
            ai_score=verdict.ai_score,
            refine_chunks=len(refine_chunks),
            latency_ms=round((time.perf_counter() - start) * 1000, 3),
        )
        return PipelineResult(
            text=join_chunks(pass2),
            ai_score=None,
            refined=True,
            detection_failed=False,
            chunk_count=len(chunks),
        )
