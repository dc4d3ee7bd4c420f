"""
Style presets and history recall for the create form.
"""

from dataclasses import dataclass
from typing import Optional

from services.orchestrator.state import AspectRatio, HistoryEntry, Resolution

from .builder import FormState


@dataclass(frozen=True)
class Preset:
    """A one-click starting point for the create form."""
    id: str
    name: str
    prompt: str
    aspect_ratio: AspectRatio
    resolution: Resolution
    icon: str = ""


PRESETS: tuple[Preset, ...] = (
    Preset(
        id="cinematic",
        name="Cinematic",
        prompt="Cinematic wide shot with dramatic lighting, shallow depth of field, film grain, anamorphic lens flare, golden hour atmosphere",
        aspect_ratio=AspectRatio.LANDSCAPE,
        resolution=Resolution.FULL_HD,
        icon="🎬",
    ),
    Preset(
        id="viral",
        name="Viral Short",
        prompt="Dynamic fast-paced action, energetic movement, vibrant colors, high contrast, motion blur, trending aesthetic",
        aspect_ratio=AspectRatio.PORTRAIT,
        resolution=Resolution.HD,
        icon="🔥",
    ),
    Preset(
        id="dreamy",
        name="Dreamy",
        prompt="Ethereal dreamy atmosphere, soft focus, pastel colors, floating particles, magical lighting, surreal ambiance",
        aspect_ratio=AspectRatio.PORTRAIT,
        resolution=Resolution.HD,
        icon="✨",
    ),
    Preset(
        id="cyberpunk",
        name="Cyberpunk",
        prompt="Futuristic cyberpunk cityscape, neon lights, rain-soaked streets, holographic displays, vibrant purple and cyan",
        aspect_ratio=AspectRatio.PORTRAIT,
        resolution=Resolution.FULL_HD,
        icon="🌃",
    ),
    Preset(
        id="nature",
        name="Nature",
        prompt="Stunning nature documentary, wildlife in natural habitat, breathtaking landscapes, golden hour lighting",
        aspect_ratio=AspectRatio.LANDSCAPE,
        resolution=Resolution.FULL_HD,
        icon="🌿",
    ),
    Preset(
        id="minimal",
        name="Minimal",
        prompt="Clean minimal aesthetic, simple composition, soft neutral colors, elegant movement, modern design",
        aspect_ratio=AspectRatio.PORTRAIT,
        resolution=Resolution.HD,
        icon="◯",
    ),
)


def get_preset(preset_id: str) -> Optional[Preset]:
    """Find a preset by id."""
    return next((p for p in PRESETS if p.id == preset_id), None)


def apply_preset(form: FormState, preset: Preset) -> FormState:
    """Load a preset into the form. Duration and camera tags are left as they are."""
    form.prompt = preset.prompt
    form.aspect_ratio = preset.aspect_ratio
    form.resolution = preset.resolution
    return form


def form_from_history(form: FormState, entry: HistoryEntry) -> FormState:
    """Recall a past prompt and its output settings into the form."""
    form.prompt = entry.prompt
    form.aspect_ratio = entry.aspect_ratio
    form.resolution = entry.resolution
    return form
