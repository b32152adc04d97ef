from __future__ import annotations

from fastapi import APIRouter, Depends, File, HTTPException, Request, Response, UploadFile, status
from redis.asyncio import Redis

from paraphraser.api.deps import check_rate_limit, set_rate_limit_headers
from paraphraser.core.config import get_settings
from paraphraser.core.logging import get_logger
from paraphraser.core.redis import get_redis
from paraphraser.schemas.files import ParseFileResponse
from paraphraser.utils.files import extract_text_from_upload
from paraphraser.utils.text import word_count

router = APIRouter()
logger = get_logger(__name__)


@router.post("/parse-file", response_model=ParseFileResponse)
async def parse_file(
    request: Request,
    response: Response,
    redis: Redis = Depends(get_redis),
    file: UploadFile | None = File(default=None),
):
    settings = get_settings()
    limit = settings.parse_file_rate_limit
    rl = await check_rate_limit(request, redis, scope="parse-file", limit=limit)

    if file is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file attached.")

    try:
        extracted = await extract_text_from_upload(file, settings.max_upload_bytes)
    except HTTPException:
        raise
    except Exception as exc:
        logger.exception("parse_file_failed", filename=file.filename, content_type=file.content_type)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Could not read the file. It may be encrypted or corrupted.",
        ) from exc

    set_rate_limit_headers(response, rl, limit)
    return ParseFileResponse(
        text=extracted.text,
        page_count=extracted.page_count,
        word_count=word_count(extracted.text),
    )
