import math

from fastapi import Depends, HTTPException, Request, Response, status
from redis.asyncio import Redis

from paraphraser.core.config import Settings, get_settings
from paraphraser.core.rate_limit import RateLimitResult, enforce_sliding_window
from paraphraser.services.completion import CompletionClient, get_completion_client
from paraphraser.services.detector import Detector
from paraphraser.services.pipeline import ParaphrasePipeline
from paraphraser.utils.http import client_ip


def get_completion() -> CompletionClient:
    return get_completion_client()


def get_pipeline(
    completion: CompletionClient = Depends(get_completion),
    settings: Settings = Depends(get_settings),
) -> ParaphrasePipeline:
    return ParaphrasePipeline(completion, settings)


def get_detector(
    completion: CompletionClient = Depends(get_completion),
    settings: Settings = Depends(get_settings),
) -> Detector:
    return Detector(completion, model=settings.detection_model, timeout=settings.detect_timeout_seconds)


async def check_rate_limit(request: Request, redis: Redis, *, scope: str, limit: int) -> RateLimitResult:
    settings = get_settings()
    rl = await enforce_sliding_window(
        redis,
        key=f"rl:{scope}:{client_ip(request)}",
        limit=limit,
        window_seconds=settings.rate_limit_window_seconds,
    )
    if not rl.allowed:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many requests. Please wait a moment.",
            headers={
                "Retry-After": str(math.ceil(rl.reset_in_ms / 1000)),
                "X-RateLimit-Limit": str(limit),
                "X-RateLimit-Remaining": "0",
            },
        )
    return rl


def set_rate_limit_headers(response: Response, rl: RateLimitResult, limit: int) -> None:
    response.headers["X-RateLimit-Limit"] = str(limit)
    response.headers["X-RateLimit-Remaining"] = str(rl.remaining)
