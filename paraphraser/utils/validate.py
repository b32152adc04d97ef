from __future__ import annotations

import math
from typing import Any

from fastapi import HTTPException, status

from paraphraser.services.prompts import PARAM_FIELDS, VALID_MODES, RewriteStyle, StyleParams
from paraphraser.utils.text import sanitize_text, word_count

GENERIC_ERRORS = {
    "paraphrase": "Paraphrase failed. Please try again.",
    "detect": "Detection failed. Please try again.",
}


def safe_error_message(route: str) -> str:
    return GENERIC_ERRORS[route]


def _bad_request(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


def validate_text(raw: Any, *, max_chars: int) -> str:
    if not isinstance(raw, str) or not raw.strip():
        raise _bad_request("No text provided.")
    if len(raw) > max_chars:
        raise _bad_request(f"Text too long. Max {max_chars} characters.")
    text = sanitize_text(raw)
    if not text:
        raise _bad_request("No text provided.")
    return text


def validate_min_words(text: str, *, min_words: int) -> None:
    if word_count(text) < min_words:
        raise _bad_request(f"Text too short for accurate detection (minimum {min_words} words).")


def _is_finite_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def validate_style(mode: Any, params: Any) -> RewriteStyle:
    if not isinstance(mode, str) or mode not in VALID_MODES:
        raise _bad_request("Invalid mode.")

    if params is None:
        return RewriteStyle.for_mode(mode)

    if not isinstance(params, dict) or not all(_is_finite_number(params.get(name)) for name in PARAM_FIELDS):
        raise _bad_request("Invalid params. Each field must be a finite number.")

    return RewriteStyle.for_mode(mode, StyleParams.clamped(*(params[name] for name in PARAM_FIELDS)))
