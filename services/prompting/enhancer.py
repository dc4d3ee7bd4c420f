"""
Prompt Enhancer

Deterministic text transform that enriches a user prompt with camera,
quality, motion, lighting and color-grading descriptors. Each clause is only
added when its category is not already present in the text, so running the
enhancer on its own output adds nothing new.

Usage:
    enhance_prompt("neon alley")
    # "Cinematic neon alley, smooth camera movement, professional lighting, cinematic color grading"

    enhance_prompt("a fox in the snow", CameraAngle.LOW_ANGLE, CameraMode.DOLLY)
"""

from types import MappingProxyType
from typing import Mapping, Optional, TypeVar

from services.orchestrator.state import AngleTag, CameraAngle, CameraMode, ModeTag

ANGLE_PHRASES: Mapping[CameraAngle, str] = MappingProxyType({
    CameraAngle.WIDE: "wide angle shot",
    CameraAngle.CLOSE_UP: "close-up shot",
    CameraAngle.MEDIUM: "medium shot",
    CameraAngle.EXTREME_CLOSE: "extreme close-up",
    CameraAngle.BIRD_EYE: "bird's eye view",
    CameraAngle.LOW_ANGLE: "low angle shot",
    CameraAngle.HIGH_ANGLE: "high angle shot",
    CameraAngle.DUTCH: "dutch angle",
    CameraAngle.OVER_SHOULDER: "over-the-shoulder shot",
    CameraAngle.POINT_OF_VIEW: "point of view shot",
})

MODE_PHRASES: Mapping[CameraMode, str] = MappingProxyType({
    CameraMode.HANDHELD: "handheld camera movement",
    CameraMode.STEADY: "steady camera movement",
    CameraMode.TRACKING: "tracking shot",
    CameraMode.DOLLY: "dolly shot",
    CameraMode.PAN: "panning camera",
    CameraMode.TILT: "tilting camera",
    CameraMode.ZOOM: "zoom effect",
    CameraMode.STATIC: "static camera",
    CameraMode.ORBITAL: "orbital camera movement",
    CameraMode.CRANE: "crane shot",
})

QUALITY_TERMS = ("cinematic", "high quality", "professional", "4k", "8k", "ultra hd", "stunning", "breathtaking")
MOTION_TERMS = ("smooth", "fluid", "dynamic", "motion", "movement", "animated")
LIGHTING_TERMS = ("lighting", "lit", "bright", "dark", "shadow", "glow", "illuminated")
COLOR_TERMS = ("color", "grading", "saturated", "vibrant", "palette", "tone")

QUALITY_PREFIX = "Cinematic "
MOTION_CLAUSE = "smooth camera movement"
LIGHTING_CLAUSE = "professional lighting"
COLOR_CLAUSE = "cinematic color grading"

E = TypeVar("E", CameraAngle, CameraMode)


def _phrase_for(tag: str, enum_cls: type[E], table: Mapping[E, str]) -> str:
    """Look up the descriptive phrase for a tag, falling back to the raw tag."""
    raw = getattr(tag, "value", tag)
    try:
        return table[enum_cls(raw)]
    except ValueError:
        return str(raw)


def describe_angle(angle: AngleTag) -> str:
    return _phrase_for(angle, CameraAngle, ANGLE_PHRASES)


def describe_mode(mode: ModeTag) -> str:
    return _phrase_for(mode, CameraMode, MODE_PHRASES)


def _contains_any(text: str, terms: tuple[str, ...]) -> bool:
    lowered = text.lower()
    return any(term in lowered for term in terms)


def _append_unless_present(text: str, phrase: str) -> str:
    if phrase.lower() in text.lower():
        return text
    return f"{text}, {phrase}"


def enhance_prompt(
    text: str,
    camera_angle: Optional[AngleTag] = None,
    camera_mode: Optional[ModeTag] = None,
) -> str:
    """
    Enrich a prompt with cinematic and technical details.

    Args:
        text: Raw user prompt
        camera_angle: Optional camera angle tag
        camera_mode: Optional camera movement tag

    Returns:
        The enhanced prompt, or ``text`` unchanged when it is blank
    """
    if not text.strip():
        return text

    enhanced = text.strip()

    if camera_angle:
        enhanced = _append_unless_present(enhanced, describe_angle(camera_angle))

    if camera_mode:
        enhanced = _append_unless_present(enhanced, describe_mode(camera_mode))

    # Prefix, so the later scans see "Cinematic" too
    if not _contains_any(enhanced, QUALITY_TERMS):
        enhanced = f"{QUALITY_PREFIX}{enhanced}"

    # An explicit camera mode already describes the motion
    if not camera_mode:
        if not _contains_any(enhanced, MOTION_TERMS) and "static" not in enhanced.lower():
            enhanced = f"{enhanced}, {MOTION_CLAUSE}"

    if not _contains_any(enhanced, LIGHTING_TERMS):
        enhanced = f"{enhanced}, {LIGHTING_CLAUSE}"

    if not _contains_any(enhanced, COLOR_TERMS):
        enhanced = f"{enhanced}, {COLOR_CLAUSE}"

    return enhanced
