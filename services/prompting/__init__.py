"""
Prompt Preparation

Everything that happens to user input before it reaches the orchestrator:
- enhancer: deterministic cinematic prompt enrichment
- builder: form fields -> frozen GenerationRequest
- presets: one-click style presets and history recall
"""

from .enhancer import enhance_prompt, describe_angle, describe_mode
from .builder import FormState, build_request, can_submit
from .presets import PRESETS, Preset, apply_preset, form_from_history, get_preset

__all__ = [
    "enhance_prompt",
    "describe_angle",
    "describe_mode",
    "FormState",
    "build_request",
    "can_submit",
    "PRESETS",
    "Preset",
    "apply_preset",
    "form_from_history",
    "get_preset",
]
