from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from typing import Any

from paraphraser.core.logging import get_logger
from paraphraser.services.completion import CompletionClient
from paraphraser.services.prompts import build_detection_prompt

logger = get_logger(__name__)

MAX_PATTERNS = 5
VALID_CONFIDENCE = frozenset({"low", "medium", "high"})
VALID_VERDICTS = frozenset({"AI-Generated", "Likely AI", "Mixed", "Likely Human", "Human-Written"})


@dataclass(frozen=True)
class DetectionVerdict:
    ai_score: int
    human_score: int
    confidence: str
    detected_patterns: tuple[str, ...] = field(default_factory=tuple)
    verdict: str = ""

    @property
    def failed(self) -> bool:
        return self.ai_score < 0


DETECTION_FAILED = DetectionVerdict(ai_score=-1, human_score=-1, confidence="", detected_patterns=(), verdict="")


def extract_json_object(raw: str) -> Any | None:
    """Decode the first JSON object in ``raw``, ignoring any surrounding commentary."""
    start = raw.find("{")
    if start < 0:
        return None
    try:
        payload, _ = json.JSONDecoder().raw_decode(raw, start)
    except json.JSONDecodeError:
        return None
    return payload


def _score(value: Any) -> int | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value) or value < 0 or value > 100:
        return None
    return int(round(value))


def validate_verdict(payload: Any) -> DetectionVerdict | None:
    if not isinstance(payload, dict):
        return None

    ai_score = _score(payload.get("aiScore"))
    human_score = _score(payload.get("humanScore"))
    if ai_score is None or human_score is None:
        return None

    confidence = payload.get("confidence")
    if not isinstance(confidence, str) or confidence not in VALID_CONFIDENCE:
        return None

    verdict = payload.get("verdict")
    if not isinstance(verdict, str) or verdict not in VALID_VERDICTS:
        return None

    patterns = payload.get("detectedPatterns")
    if not isinstance(patterns, list) or not all(isinstance(p, str) for p in patterns):
        return None

    return DetectionVerdict(
        ai_score=ai_score,
        human_score=human_score,
        confidence=confidence,
        detected_patterns=tuple(patterns[:MAX_PATTERNS]),
        verdict=verdict,
    )


def parse_verdict(raw: str) -> DetectionVerdict | None:
    return validate_verdict(extract_json_object(raw))


class Detector:
    def __init__(self, completion: CompletionClient, *, model: str, timeout: float | None = None) -> None:
        self.completion = completion
        self.model = model
        self.timeout = timeout

    async def detect(self, text: str, *, sample_chars: int | None, max_tokens: int) -> DetectionVerdict:
        sample = text[:sample_chars] if sample_chars is not None and len(text) > sample_chars else text
        result = await self.completion.complete(
            build_detection_prompt(sample),
            max_tokens=max_tokens,
            model=self.model,
            timeout=self.timeout,
        )
        if not result.ok:
            logger.warning("detection_call_failed", failure=result.failure)
            return DETECTION_FAILED

        verdict = parse_verdict(result.text)
        if verdict is None:
            logger.warning("detection_unparseable_response", preview=result.text[:180])
            return DETECTION_FAILED

        logger.info(
            "detection_complete",
            ai_score=verdict.ai_score,
            verdict=verdict.verdict,
            sample_chars=len(sample),
        )
        return verdict
