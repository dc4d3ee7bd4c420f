"""
Request Builder

Turns the create form's current fields into a frozen GenerationRequest,
running the Prompt Enhancer when the enhance toggle is on.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Union

from services.orchestrator.state import (
    ALLOWED_DURATIONS,
    DEFAULT_DURATION,
    AngleTag,
    AspectRatio,
    CameraAngle,
    CameraMode,
    GenerationRequest,
    ModeTag,
    ReferenceFrame,
    Resolution,
)

from .enhancer import enhance_prompt

logger = logging.getLogger(__name__)


@dataclass
class FormState:
    """Fields of the create form, as the host UI holds them."""
    prompt: str = ""
    aspect_ratio: Union[AspectRatio, str] = AspectRatio.PORTRAIT
    resolution: Union[Resolution, str] = Resolution.HD
    duration: int = DEFAULT_DURATION
    camera_angle: Optional[AngleTag] = None
    camera_mode: Optional[ModeTag] = None
    start_frame: Optional[ReferenceFrame] = None
    end_frame: Optional[ReferenceFrame] = None
    enhance: bool = True


def can_submit(form: FormState) -> bool:
    """Whether the form holds enough input to start a generation."""
    return bool(form.prompt.strip()) or form.start_frame is not None or form.end_frame is not None


def _coerce_aspect_ratio(value: Union[AspectRatio, str]) -> AspectRatio:
    try:
        return AspectRatio(value)
    except ValueError:
        raise ValueError(f"Unsupported aspect ratio: {value!r}") from None


def _coerce_resolution(value: Union[Resolution, str]) -> Resolution:
    try:
        return Resolution(value)
    except ValueError:
        raise ValueError(f"Unsupported resolution: {value!r}") from None


def _coerce_tag(value, enum_cls):
    """Map a known tag onto its enum member, keep unknown tags as plain strings."""
    if not value:
        return None
    try:
        return enum_cls(value)
    except ValueError:
        logger.warning(f"Unknown {enum_cls.__name__} tag {value!r}, passing it through")
        return str(value)


def build_request(form: FormState) -> Optional[GenerationRequest]:
    """
    Build a validated, frozen generation request from the form.

    Args:
        form: Current form fields

    Returns:
        The request, or None when there is neither a prompt nor a frame

    Raises:
        ValueError: If aspect ratio, resolution or duration is not supported
    """
    if not can_submit(form):
        return None

    if form.duration not in ALLOWED_DURATIONS:
        raise ValueError(f"Unsupported duration: {form.duration}s")

    camera_angle = _coerce_tag(form.camera_angle, CameraAngle)
    camera_mode = _coerce_tag(form.camera_mode, CameraMode)

    prompt = form.prompt
    if form.enhance:
        prompt = enhance_prompt(prompt, camera_angle, camera_mode)

    return GenerationRequest(
        prompt=prompt,
        aspect_ratio=_coerce_aspect_ratio(form.aspect_ratio),
        resolution=_coerce_resolution(form.resolution),
        duration=form.duration,
        camera_angle=camera_angle,
        camera_mode=camera_mode,
        start_frame=form.start_frame,
        end_frame=form.end_frame,
    )
