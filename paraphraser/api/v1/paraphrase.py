from __future__ import annotations

import time

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from redis.asyncio import Redis

from paraphraser.api.deps import check_rate_limit, get_pipeline, set_rate_limit_headers
from paraphraser.core.config import get_settings
from paraphraser.core.logging import get_logger
from paraphraser.core.redis import get_redis
from paraphraser.schemas.paraphrase import ParaphraseResponse
from paraphraser.services.pipeline import ParaphrasePipeline, RewriteFailed
from paraphraser.services.sessions import RequestSuperseded, session_registry
from paraphraser.utils.http import client_ip
from paraphraser.utils.request_body import read_json_body
from paraphraser.utils.validate import safe_error_message, validate_style, validate_text

router = APIRouter()
logger = get_logger(__name__)

SUPERSEDED_STATUS = 499


@router.post("/paraphrase", response_model=ParaphraseResponse)
async def paraphrase_content(
    request: Request,
    response: Response,
    redis: Redis = Depends(get_redis),
    pipeline: ParaphrasePipeline = Depends(get_pipeline),
):
    settings = get_settings()
    limit = settings.paraphrase_rate_limit
    rl = await check_rate_limit(request, redis, scope="paraphrase", limit=limit)

    payload = await read_json_body(request)
    text = validate_text(payload.get("text"), max_chars=settings.max_text_chars)
    style = validate_style(payload.get("mode"), payload.get("params"))

    session_id = (request.headers.get("x-session-id") or "").strip()
    start = time.perf_counter()
    try:
        if session_id:
            result = await session_registry.run(f"{client_ip(request)}:{session_id}", pipeline.run(text, style))
        else:
            result = await pipeline.run(text, style)
    except RequestSuperseded:
        return Response(status_code=SUPERSEDED_STATUS)
    except RewriteFailed as exc:
        logger.error("paraphrase_failed", chunk_index=exc.index, failure=exc.failure, mode=style.mode)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=safe_error_message("paraphrase"),
        ) from exc
    except Exception as exc:
        logger.exception("paraphrase_unexpected_error", mode=style.mode)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=safe_error_message("paraphrase"),
        ) from exc

    logger.info(
        "paraphrase_request_complete",
        mode=style.mode,
        input_chars=len(text),
        output_chars=len(result.text),
        refined=result.refined,
        latency_ms=round((time.perf_counter() - start) * 1000, 3),
    )
    set_rate_limit_headers(response, rl, limit)
    return ParaphraseResponse(result=result.text, ai_score=result.ai_score, refined=result.refined)
