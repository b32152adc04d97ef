from __future__ import annotations

import io
import re
from dataclasses import dataclass

from docx import Document
from fastapi import HTTPException, UploadFile, status
from pypdf import PdfReader
from starlette.concurrency import run_in_threadpool

from paraphraser.utils.text import sanitize_text

PDF_MIME = "application/pdf"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
DOC_MIME = "application/msword"
OCTET_STREAM_MIME = "application/octet-stream"

ALLOWED_CONTENT_TYPES = {PDF_MIME, DOCX_MIME, DOC_MIME, OCTET_STREAM_MIME}

PDF_MAGIC = b"%PDF"
DOCX_MAGIC = b"PK\x03\x04"
DOC_MAGIC = b"\xd0\xcf\x11\xe0"

_SPACE_RUN_RE = re.compile(r"[ \t]{2,}")
_NEWLINE_RUN_RE = re.compile(r"\n{3,}")
_HYPHEN_BREAK_RE = re.compile(r"-\n(\w)")


@dataclass
class ExtractedText:
    text: str
    page_count: int


def sniff_kind(raw: bytes) -> str | None:
    magic = raw[:4]
    if magic == PDF_MAGIC:
        return "pdf"
    if magic == DOCX_MAGIC:
        return "docx"
    if magic == DOC_MAGIC:
        return "doc"
    return None


def clean_extracted_text(raw: str) -> str:
    out = _SPACE_RUN_RE.sub(" ", raw)
    out = _NEWLINE_RUN_RE.sub("\n\n", out)
    out = _HYPHEN_BREAK_RE.sub(r"\1", out)
    return sanitize_text(out)


def _extract_pdf(raw: bytes) -> ExtractedText:
    reader = PdfReader(io.BytesIO(raw))
    pages = [page.extract_text() or "" for page in reader.pages]
    return ExtractedText(text="\n\n".join(pages), page_count=len(reader.pages))


def _extract_docx(raw: bytes) -> ExtractedText:
    doc = Document(io.BytesIO(raw))
    text = "\n".join(paragraph.text for paragraph in doc.paragraphs if paragraph.text.strip())
    return ExtractedText(text=text, page_count=1)


async def extract_text_from_upload(file: UploadFile, max_upload_bytes: int) -> ExtractedText:
    content_type = (file.content_type or "").lower()
    if content_type not in ALLOWED_CONTENT_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only PDF, .docx, and .doc files are supported.",
        )

    raw = await file.read(max_upload_bytes + 1)
    if len(raw) > max_upload_bytes:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"File too large. Maximum size is {max_upload_bytes // (1024 * 1024)} MB.",
        )

    kind = sniff_kind(raw)
    if kind is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="File does not appear to be a valid PDF or Word document.",
        )

    if kind == "doc":
        # python-docx only reads the OOXML container.
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Old .doc format could not be read. Please save as .docx and try again.",
        )

    extract = _extract_pdf if kind == "pdf" else _extract_docx
    extracted = await run_in_threadpool(extract, raw)
    text = clean_extracted_text(extracted.text)
    if not text:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="No readable text found. The file may be image-based or empty.",
        )
    return ExtractedText(text=text, page_count=extracted.page_count)
