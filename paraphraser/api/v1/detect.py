from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from redis.asyncio import Redis

from paraphraser.api.deps import check_rate_limit, get_detector, set_rate_limit_headers
from paraphraser.core.config import get_settings
from paraphraser.core.logging import get_logger
from paraphraser.core.redis import get_redis
from paraphraser.schemas.detect import DetectResponse
from paraphraser.services.detector import Detector
from paraphraser.utils.request_body import read_json_body
from paraphraser.utils.validate import safe_error_message, validate_min_words, validate_text

router = APIRouter()
logger = get_logger(__name__)


@router.post("/detect", response_model=DetectResponse)
async def detect_content(
    request: Request,
    response: Response,
    redis: Redis = Depends(get_redis),
    detector: Detector = Depends(get_detector),
):
    settings = get_settings()
    limit = settings.detect_rate_limit
    rl = await check_rate_limit(request, redis, scope="detect", limit=limit)

    payload = await read_json_body(request)
    text = validate_text(payload.get("text"), max_chars=settings.max_text_chars)
    validate_min_words(text, min_words=settings.min_detect_words)

    verdict = await detector.detect(text, sample_chars=None, max_tokens=settings.detect_max_tokens)
    if verdict.failed:
        logger.error("detect_failed", input_chars=len(text))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=safe_error_message("detect"),
        )

    set_rate_limit_headers(response, rl, limit)
    return DetectResponse(
        ai_score=verdict.ai_score,
        human_score=verdict.human_score,
        confidence=verdict.confidence,
        detected_patterns=list(verdict.detected_patterns),
        verdict=verdict.verdict,
    )
