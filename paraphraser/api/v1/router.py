from fastapi import APIRouter

from paraphraser.api.v1 import detect, files, paraphrase

router = APIRouter()
router.include_router(paraphrase.router, tags=["paraphrase"])
router.include_router(detect.router, tags=["detect"])
router.include_router(files.router, tags=["files"])
