import pytest

from paraphraser.services.prompts import (
    DEFAULT_REFINEMENT_PATTERNS,
    MODES,
    VALID_MODES,
    RewriteStyle,
    StyleParams,
    build_detection_prompt,
    build_paraphrase_prompt,
    build_refinement_prompt,
)


def test_every_mode_has_a_profile():
    assert VALID_MODES == set(MODES)
    assert len(VALID_MODES) == 9
    for profile in MODES.values():
        assert profile.description
        for value in (
            profile.defaults.intensity,
            profile.defaults.creativity,
            profile.defaults.naturalness,
            profile.defaults.complexity,
        ):
            assert 0.0 <= value <= 1.0


def test_style_params_are_clamped_not_rejected():
    params = StyleParams.clamped(1.7, -0.2, 0.5, 1)

    assert params == StyleParams(1.0, 0.0, 0.5, 1.0)


def test_style_params_reject_non_finite():
    with pytest.raises(ValueError):
        StyleParams.clamped(float("inf"), 0.5, 0.5, 0.5)


def test_style_is_immutable():
    style = RewriteStyle.for_mode("formal")

    with pytest.raises(AttributeError):
        style.mode = "creative"  # type: ignore[misc]


def test_for_mode_uses_mode_defaults():
    assert RewriteStyle.for_mode("humanize").params == MODES["humanize"].defaults


@pytest.mark.parametrize(
    ("value", "intensity", "creativity", "naturalness"),
    [
        (0.2, "lightly", "straightforward", "neutral"),
        (0.4, "lightly", "straightforward", "neutral"),
        (0.55, "moderately", "varied", "natural"),
        (0.7, "moderately", "varied", "natural"),
        (0.9, "aggressively", "rich and varied", "conversational and personal"),
    ],
)
def test_paraphrase_prompt_labels_follow_thresholds(value, intensity, creativity, naturalness):
    style = RewriteStyle.for_mode("standard", StyleParams(value, value, value, value))

    prompt = build_paraphrase_prompt("Some input.", style)

    assert f"Rewrite {intensity} (intensity {round(value * 100)}%)" in prompt
    assert f"Use {creativity} vocabulary" in prompt
    assert f"Tone: {naturalness} (" in prompt
    assert f"Sentence complexity: {round(value * 100)}%" in prompt


def test_paraphrase_prompt_carries_mode_and_text():
    prompt = build_paraphrase_prompt("The input text.", RewriteStyle.for_mode("academic"))

    assert '"academic" mode' in prompt
    assert MODES["academic"].description in prompt
    assert '"""\nThe input text.\n"""' in prompt


def test_refinement_prompt_lists_patterns():
    prompt = build_refinement_prompt("chunk", 81, ["Hedging language", "Uniform rhythm"])

    assert prompt.startswith("This text was flagged as 81% AI-written.")
    assert "- Hedging language\n- Uniform rhythm" in prompt


def test_refinement_prompt_falls_back_to_default_patterns():
    prompt = build_refinement_prompt("chunk", 77, [])

    for pattern in DEFAULT_REFINEMENT_PATTERNS:
        assert f"- {pattern}" in prompt


def test_detection_prompt_requests_json_shape():
    prompt = build_detection_prompt("sample")

    assert '"aiScore"' in prompt
    assert '"verdict"' in prompt
    assert prompt.rstrip().endswith('"""\nsample\n"""')
