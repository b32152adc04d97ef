import re

_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_LINE_ENDING_RE = re.compile(r"\r\n?")


def sanitize_text(raw: str) -> str:
    """Make user text safe to embed between the prompt's triple-quote delimiters."""
    out = _LINE_ENDING_RE.sub("\n", raw)
    out = _CONTROL_RE.sub("", out)
    out = out.replace('"""', "'''")
    return out.strip()


def word_count(text: str) -> int:
    return len(text.split())


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))
