"""
Prompt enhancer tests.

Run with:
    python -m pytest tests/test_prompt_enhancer.py -v
"""

import os
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from services.orchestrator.state import CameraAngle, CameraMode
from services.prompting.enhancer import (
    ANGLE_PHRASES,
    MODE_PHRASES,
    describe_angle,
    describe_mode,
    enhance_prompt,
)

# Prompts that contain none of the enhancement keywords
PLAIN_PROMPTS = [
    "neon alley",
    "a fox in the snow",
    "an old sailboat at sea",
    "two cats playing chess",
    "a robot walking through a market",
]


class TestEnhancementClauses:
    """Each clause category is added once, in a fixed order."""

    def test_neon_alley_full_enhancement(self):
        assert enhance_prompt("neon alley") == (
            "Cinematic neon alley, smooth camera movement, "
            "professional lighting, cinematic color grading"
        )

    @pytest.mark.parametrize("prompt", PLAIN_PROMPTS)
    def test_plain_prompt_gains_each_clause_once(self, prompt):
        enhanced = enhance_prompt(prompt)

        assert len(enhanced) > len(prompt)
        assert enhanced.count("Cinematic ") == 1
        assert enhanced.count("professional lighting") == 1
        assert enhanced.count("cinematic color grading") == 1
        assert enhanced.startswith(f"Cinematic {prompt}")

    def test_existing_descriptors_only_add_motion(self):
        prompt = "A cinematic city at night with vibrant colors and soft lighting"

        enhanced = enhance_prompt(prompt)

        assert enhanced == f"{prompt}, smooth camera movement"
        assert "professional lighting" not in enhanced
        assert "color grading" not in enhanced
        assert not enhanced.startswith("Cinematic ")

    def test_prompt_is_trimmed(self):
        assert enhance_prompt("  neon alley  ").startswith("Cinematic neon alley,")

    def test_quality_prefix_is_seen_by_later_checks(self):
        # "Cinematic" is a quality term only; later scans still run on the prefixed text
        enhanced = enhance_prompt("a glowing lantern")
        assert enhanced == "Cinematic a glowing lantern, smooth camera movement, cinematic color grading"


class TestEmptyInput:
    """Enhancement never fabricates a prompt."""

    def test_empty_prompt_short_circuits_with_tags(self):
        assert enhance_prompt("", "wide", "pan") == ""

    def test_whitespace_prompt_returned_unchanged(self):
        assert enhance_prompt("   ", CameraAngle.WIDE) == "   "


class TestCameraTags:
    """Camera angle and mode phrases."""

    def test_angle_and_mode_appended_in_order(self):
        enhanced = enhance_prompt("a fox in the snow", CameraAngle.LOW_ANGLE, CameraMode.DOLLY)

        assert enhanced == (
            "Cinematic a fox in the snow, low angle shot, dolly shot, "
            "professional lighting, cinematic color grading"
        )

    def test_camera_mode_suppresses_motion_clause(self):
        enhanced = enhance_prompt("a fox in the snow", camera_mode=CameraMode.PAN)

        assert "panning camera" in enhanced
        assert "smooth camera movement" not in enhanced

    def test_static_in_text_suppresses_motion_clause(self):
        enhanced = enhance_prompt("a static view of a harbor")
        assert "smooth camera movement" not in enhanced

    def test_existing_angle_phrase_not_duplicated(self):
        enhanced = enhance_prompt("Close-Up Shot of a bee", CameraAngle.CLOSE_UP)
        assert enhanced.lower().count("close-up shot") == 1

    def test_string_tags_map_to_phrases(self):
        assert enhance_prompt("a fox", "bird-eye", "crane") == enhance_prompt(
            "a fox", CameraAngle.BIRD_EYE, CameraMode.CRANE
        )

    def test_unknown_tags_fall_back_to_raw_tag(self):
        enhanced = enhance_prompt("a fox in the snow", "fisheye", "whip-pan")

        assert ", fisheye" in enhanced
        assert ", whip-pan" in enhanced

    def test_every_vocabulary_entry_has_a_phrase(self):
        assert set(ANGLE_PHRASES) == set(CameraAngle)
        assert set(MODE_PHRASES) == set(CameraMode)
        assert describe_angle(CameraAngle.BIRD_EYE) == "bird's eye view"
        assert describe_mode("orbital") == "orbital camera movement"

    def test_phrase_tables_are_immutable(self):
        with pytest.raises(TypeError):
            ANGLE_PHRASES[CameraAngle.WIDE] = "ultra wide"


class TestIdempotence:
    """Re-running the enhancer on its own output adds no clauses."""

    @pytest.mark.parametrize("prompt", PLAIN_PROMPTS)
    @pytest.mark.parametrize(
        "angle,mode",
        [
            (None, None),
            (CameraAngle.WIDE, None),
            (None, CameraMode.PAN),
            (CameraAngle.DUTCH, CameraMode.ORBITAL),
        ],
    )
    def test_second_pass_is_stable(self, prompt, angle, mode):
        once = enhance_prompt(prompt, angle, mode)
        twice = enhance_prompt(once, angle, mode)

        assert twice == once

    def test_output_never_shrinks(self):
        for prompt in PLAIN_PROMPTS + ["A cinematic city with vibrant colors and soft lighting"]:
            assert len(enhance_prompt(prompt)) >= len(prompt)
