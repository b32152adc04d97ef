from __future__ import annotations

import re

DEFAULT_CHUNK_SIZE = 3000
CHUNK_SEPARATOR = "\n\n"

_PARAGRAPH_BREAK_RE = re.compile(r"\n\s*\n")
# A sentence runs up to a terminal mark, optionally closed by a quote; a
# trailing remainder without a terminal is its own piece.
_SENTENCE_RE = re.compile(r"[^.!?]*[.!?]+[\"'”’]?|[^.!?]+\Z")


def split_sentences(paragraph: str) -> list[str]:
    pieces = _SENTENCE_RE.findall(paragraph)
    return pieces or [paragraph]


def chunk_text(text: str, max_chars: int = DEFAULT_CHUNK_SIZE) -> list[str]:
    """Split ``text`` into ordered chunks of at most ``max_chars`` characters.

    Paragraph breaks are preferred, then sentence breaks inside paragraphs that
    are too long on their own. A single sentence longer than ``max_chars`` is
    emitted as its own oversized chunk.
    """
    chunks: list[str] = []
    current = ""

    for raw_paragraph in _PARAGRAPH_BREAK_RE.split(text):
        paragraph = raw_paragraph.strip()
        if not paragraph:
            continue

        pieces = split_sentences(paragraph) if len(paragraph) > max_chars else [paragraph]
        for idx, piece in enumerate(pieces):
            separator = CHUNK_SEPARATOR if idx == 0 else ""
            if current and len(current + separator + piece) > max_chars:
                chunks.append(current.strip())
                current = piece.lstrip()
            elif current:
                current = current + separator + piece
            else:
                current = piece.lstrip()

    if current.strip():
        chunks.append(current.strip())
    return [chunk for chunk in chunks if chunk]


def join_chunks(chunks: list[str]) -> str:
    return CHUNK_SEPARATOR.join(chunks)
