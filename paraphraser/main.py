from __future__ import annotations

import sentry_sdk
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from prometheus_fastapi_instrumentator import Instrumentator
from starlette.exceptions import HTTPException as StarletteHTTPException

from paraphraser.api.v1.router import router as v1_router
from paraphraser.core.config import get_settings
from paraphraser.core.logging import configure_logging, get_logger
from paraphraser.core.redis import close_redis
from paraphraser.schemas.common import ErrorResponse, HealthResponse
from paraphraser.services.completion import get_completion_client
from paraphraser.utils.trace import get_trace_id, trace_context_middleware

settings = get_settings()
configure_logging()
logger = get_logger(__name__)

if settings.sentry_dsn:
    sentry_sdk.init(dsn=settings.sentry_dsn, environment=settings.environment)


app = FastAPI(title=settings.app_name, default_response_class=ORJSONResponse)
app.middleware("http")(trace_context_middleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_origin_regex=settings.cors_origin_regex,
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["Retry-After", "X-RateLimit-Limit", "X-RateLimit-Remaining", "x-trace-id"],
)


@app.middleware("http")
async def security_headers(request: Request, call_next):
    response = await call_next(request)
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    response.headers["Content-Security-Policy"] = "default-src 'self'; img-src 'self' data:; style-src 'self' 'unsafe-inline';"
    response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
    return response


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(_: Request, exc: StarletteHTTPException):
    return ORJSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(detail=str(exc.detail), trace_id=get_trace_id()).model_dump(),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(_: Request, exc: RequestValidationError):
    logger.info("request_validation_failed", errors=exc.errors())
    return ORJSONResponse(
        status_code=400,
        content=ErrorResponse(detail="Invalid request body.", trace_id=get_trace_id()).model_dump(),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(_: Request, exc: Exception):
    logger.exception("unhandled_exception", error=str(exc), trace_id=get_trace_id())
    return ORJSONResponse(
        status_code=500,
        content=ErrorResponse(detail="Internal server error", trace_id=get_trace_id()).model_dump(),
    )


Instrumentator().instrument(app).expose(app)


@app.on_event("startup")
async def startup_event() -> None:
    logger.info(
        "startup_complete",
        environment=settings.environment,
        paraphrase_model=settings.paraphrase_model,
        detection_model=settings.detection_model,
    )


@app.on_event("shutdown")
async def shutdown_event() -> None:
    await close_redis()
    if get_completion_client.cache_info().currsize:
        await get_completion_client().close()
        get_completion_client.cache_clear()


@app.get("/healthz", response_model=HealthResponse)
async def healthz() -> HealthResponse:
    return HealthResponse(status="ok")


app.include_router(v1_router, prefix=settings.api_prefix)
