import io
import threading

import pytest
from fastapi import HTTPException
from starlette.datastructures import Headers, UploadFile

from paraphraser.utils import files
from paraphraser.utils.files import DOCX_MIME, ExtractedText, extract_text_from_upload


def _upload(data: bytes, content_type: str) -> UploadFile:
    return UploadFile(file=io.BytesIO(data), filename="essay.docx", headers=Headers({"content-type": content_type}))


@pytest.mark.asyncio
async def test_document_parsing_runs_off_the_event_loop_thread(monkeypatch):
    loop_thread = threading.get_ident()
    parsed_on: list[int] = []

    def fake_extract(raw: bytes) -> ExtractedText:
        parsed_on.append(threading.get_ident())
        return ExtractedText(text="Parsed  body text.", page_count=1)

    monkeypatch.setattr(files, "_extract_docx", fake_extract)

    extracted = await extract_text_from_upload(_upload(b"PK\x03\x04" + b"\x00" * 32, DOCX_MIME), 1024)

    assert extracted.text == "Parsed body text."
    assert parsed_on and parsed_on[0] != loop_thread


@pytest.mark.asyncio
async def test_oversized_upload_is_rejected_before_parsing(monkeypatch):
    monkeypatch.setattr(files, "_extract_docx", lambda raw: pytest.fail("parser should not run"))

    one_mb = 1024 * 1024

    with pytest.raises(HTTPException) as exc:
        await extract_text_from_upload(_upload(b"PK\x03\x04" + b"\x00" * one_mb, DOCX_MIME), one_mb)

    assert exc.value.status_code == 400
    assert exc.value.detail == "File too large. Maximum size is 1 MB."
