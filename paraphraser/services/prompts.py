from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Literal, get_args

from paraphraser.utils.text import clamp

ParaphraseMode = Literal[
    "standard",
    "fluency",
    "humanize",
    "formal",
    "academic",
    "simple",
    "creative",
    "expand",
    "shorten",
]

PARAM_FIELDS = ("intensity", "creativity", "naturalness", "complexity")


@dataclass(frozen=True)
class StyleParams:
    intensity: float
    creativity: float
    naturalness: float
    complexity: float

    @classmethod
    def clamped(cls, intensity: float, creativity: float, naturalness: float, complexity: float) -> StyleParams:
        values = []
        for value in (intensity, creativity, naturalness, complexity):
            if not math.isfinite(value):
                raise ValueError("style parameters must be finite")
            values.append(float(clamp(value, 0.0, 1.0)))
        return cls(*values)


@dataclass(frozen=True)
class ModeProfile:
    description: str
    defaults: StyleParams


@dataclass(frozen=True)
class RewriteStyle:
    mode: ParaphraseMode
    params: StyleParams

    @classmethod
    def for_mode(cls, mode: ParaphraseMode, params: StyleParams | None = None) -> RewriteStyle:
        return cls(mode=mode, params=params if params is not None else MODES[mode].defaults)


MODES: dict[ParaphraseMode, ModeProfile] = {
    "standard": ModeProfile(
        "Rewrite naturally, keeping the original meaning while sounding like a real person wrote it.",
        StyleParams(0.5, 0.5, 0.6, 0.5),
    ),
    "fluency": ModeProfile(
        "Rewrite for smooth, flowing prose with easy readability and a natural rhythm.",
        StyleParams(0.4, 0.4, 0.7, 0.4),
    ),
    "humanize": ModeProfile(
        "Rewrite so it sounds unmistakably human: imperfect, warm and personal, with a genuine voice.",
        StyleParams(0.8, 0.6, 0.9, 0.4),
    ),
    "formal": ModeProfile(
        "Rewrite in formal, professional language suitable for business or official contexts.",
        StyleParams(0.5, 0.3, 0.2, 0.7),
    ),
    "academic": ModeProfile(
        "Rewrite in a scholarly academic style with fitting terminology and structure.",
        StyleParams(0.5, 0.4, 0.2, 0.8),
    ),
    "simple": ModeProfile(
        "Rewrite in clear, plain language that anyone can follow.",
        StyleParams(0.6, 0.2, 0.6, 0.1),
    ),
    "creative": ModeProfile(
        "Rewrite with creative flair, vivid imagery and an engaging personal voice.",
        StyleParams(0.8, 0.9, 0.7, 0.6),
    ),
    "expand": ModeProfile(
        "Rewrite with richer context, examples and elaboration while keeping it natural.",
        StyleParams(0.6, 0.6, 0.6, 0.6),
    ),
    "shorten": ModeProfile(
        "Rewrite as a tight, direct summary and cut every word that is not pulling its weight.",
        StyleParams(0.7, 0.3, 0.5, 0.3),
    ),
}

VALID_MODES: frozenset[str] = frozenset(get_args(ParaphraseMode))

DEFAULT_REFINEMENT_PATTERNS = (
    "Overly uniform sentence structure",
    "Formal transitional phrases",
    "Lack of personal voice",
)


def _level(value: float, high: str, mid: str, low: str) -> str:
    if value > 0.7:
        return high
    if value > 0.4:
        return mid
    return low


def _pct(value: float) -> int:
    return round(value * 100)


def build_paraphrase_prompt(text: str, style: RewriteStyle) -> str:
    params = style.params
    intensity_label = _level(params.intensity, "aggressively", "moderately", "lightly")
    creativity_label = _level(params.creativity, "rich and varied", "varied", "straightforward")
    naturalness_label = _level(params.naturalness, "conversational and personal", "natural", "neutral")

    return f'''You are a skilled human writer who never sounds like AI. Rewrite the text below in "{style.mode}" mode so it reads as though a real person wrote it from scratch.

Mode goal: {MODES[style.mode].description}

Tuning:
- Rewrite {intensity_label} (intensity {_pct(params.intensity)}%)
- Use {creativity_label} vocabulary (creativity {_pct(params.creativity)}%)
- Tone: {naturalness_label} (naturalness {_pct(params.naturalness)}%)
- Sentence complexity: {_pct(params.complexity)}%

Hard rules. Breaking ANY of these will flag the text as AI-written:
1. Mix sentence lengths aggressively. One sentence can be three words. The next might wander through a longer thought before landing somewhere unexpected.
2. Use contractions freely (don't, it's, you're, they've, we'd).
3. NEVER start more than one sentence in a row with "The", "This", "It", "There", "These", or "Those".
4. NEVER use: Furthermore, Additionally, Moreover, In conclusion, It is important to note, It should be mentioned, It is worth noting, Notably, Consequently, Subsequently.
5. Now and then begin a sentence with "And", "But", "So", or "Yet".
6. Drop in a parenthetical aside (like this one) or a dash to break up robotic flow.
7. Let the occasional rhetorical question slip through naturally. Why not?
8. Vary paragraph length. A paragraph can be one sentence.
9. Output ONLY the rewritten text. No intro, no labels, no explanations.

Text to rewrite:
"""
{text}
"""

Rewritten:'''


def build_refinement_prompt(text: str, ai_score: int, detected_patterns: list[str] | tuple[str, ...]) -> str:
    patterns = detected_patterns or DEFAULT_REFINEMENT_PATTERNS
    pattern_lines = "\n".join(f"- {pattern}" for pattern in patterns)

    return f'''This text was flagged as {ai_score}% AI-written. Rewrite it so it reads as unmistakably human.

Specific patterns that gave it away:
{pattern_lines}

Fix every one of those patterns, and go further than you think you need to. Human writing is unpredictable: it meanders, it gets direct, it contradicts itself slightly, it uses shorthand.

Techniques to use:
- Break up any sentence that follows a "topic + elaboration + conclusion" structure
- Replace ALL transitional phrases (furthermore, additionally, etc.) with natural connectors (and, but, so, which means, that's why)
- Add at least one very short sentence (under 6 words) per paragraph
- Use at least one dash or parenthetical per 150 words
- If a sentence starts with "The [noun] [verb]", rewrite it to start differently
- Use informal, first-person phrasing where it fits ("you'll notice", "think of it this way")

Output ONLY the rewritten text. No intro, no commentary.

Text to fix:
"""
{text}
"""

Fixed version:'''


def build_detection_prompt(text: str) -> str:
    return f'''You are an expert AI content detector. Analyze the following text and estimate the probability that it was generated by an AI (like GPT-4, Claude, Gemini, etc.).

Look for these AI writing patterns:
- Overly uniform sentence structure
- Excessive use of transitional phrases (Furthermore, Additionally, In conclusion, etc.)
- Lack of genuine personal voice or perspective
- Perfect grammar with no natural imperfections
- Predictable paragraph structure
- Hedging language (it's important to note, it should be mentioned, etc.)
- Repetitive sentence starters
- Absence of contractions in informal contexts
- Generic, safe language without strong opinions

Respond with a JSON object ONLY (no markdown, no explanation):
{{
  "aiScore": <number 0-100, where 100 = definitely AI>,
  "humanScore": <number 0-100, where 100 = definitely human>,
  "confidence": <"low"|"medium"|"high">,
  "detectedPatterns": [<up to 5 specific AI patterns found, or an empty array if human>],
  "verdict": <"AI-Generated"|"Likely AI"|"Mixed"|"Likely Human"|"Human-Written">
}}

Text to analyze:
"""
{text}
"""'''
