"""
Video Generation State

Defines the data model shared by the builder, the orchestrator and the
ledger. Transient job state uses dataclasses; anything that is persisted
through the key-value store is a Pydantic model.
"""

import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, Field


class GenerationStatus(str, Enum):
    """Lifecycle of a single generation job."""
    IDLE = "IDLE"
    PREPARING = "PREPARING"  # Confirming the credential
    GENERATING = "GENERATING"  # Submitted, polling the backend
    COMPLETE = "COMPLETE"
    FAILED = "FAILED"


class AspectRatio(str, Enum):
    LANDSCAPE = "16:9"
    PORTRAIT = "9:16"


class Resolution(str, Enum):
    HD = "720p"
    FULL_HD = "1080p"


class CameraAngle(str, Enum):
    """Camera angle presets offered by the create view."""
    WIDE = "wide"
    CLOSE_UP = "close-up"
    MEDIUM = "medium"
    EXTREME_CLOSE = "extreme-close"
    BIRD_EYE = "bird-eye"
    LOW_ANGLE = "low-angle"
    HIGH_ANGLE = "high-angle"
    DUTCH = "dutch"
    OVER_SHOULDER = "over-shoulder"
    POINT_OF_VIEW = "point-of-view"


class CameraMode(str, Enum):
    """Camera movement presets offered by the create view."""
    HANDHELD = "handheld"
    STEADY = "steady"
    TRACKING = "tracking"
    DOLLY = "dolly"
    PAN = "pan"
    TILT = "tilt"
    ZOOM = "zoom"
    STATIC = "static"
    ORBITAL = "orbital"
    CRANE = "crane"


ALLOWED_DURATIONS = (2, 4, 5, 8, 10)
DEFAULT_DURATION = 5

# Tags outside the fixed vocabulary are kept as raw strings
AngleTag = Union[CameraAngle, str]
ModeTag = Union[CameraMode, str]


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(time.time() * 1000)


def new_short_id() -> str:
    """Short opaque token used for history and gallery identifiers."""
    return uuid.uuid4().hex[:8]


@dataclass(frozen=True)
class ReferenceFrame:
    """A still image constraining the first or last frame of the video."""
    data: bytes
    mime_type: str = "image/png"
    preview_url: Optional[str] = None  # Locally displayable handle (path or URL)


@dataclass(frozen=True)
class GenerationRequest:
    """Frozen snapshot of everything the backend needs for one job."""
    prompt: str
    aspect_ratio: AspectRatio = AspectRatio.PORTRAIT
    resolution: Resolution = Resolution.HD
    duration: int = DEFAULT_DURATION
    camera_angle: Optional[AngleTag] = None
    camera_mode: Optional[ModeTag] = None
    start_frame: Optional[ReferenceFrame] = None
    end_frame: Optional[ReferenceFrame] = None

    def __post_init__(self):
        if not self.prompt.strip() and self.start_frame is None and self.end_frame is None:
            raise ValueError("A prompt or at least one reference frame is required")
        if self.duration not in ALLOWED_DURATIONS:
            raise ValueError(
                f"Unsupported duration {self.duration}s (allowed: {', '.join(map(str, ALLOWED_DURATIONS))})"
            )

    @property
    def has_start_frame(self) -> bool:
        return self.start_frame is not None

    @property
    def has_end_frame(self) -> bool:
        return self.end_frame is not None


@dataclass
class GenerationJob:
    """Transient state of the job currently owned by the orchestrator."""
    request: GenerationRequest
    job_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    status: GenerationStatus = GenerationStatus.PREPARING
    progress: float = 0.0
    step_index: int = 0
    error_message: Optional[str] = None
    error_kind: Optional[str] = None
    operation_name: Optional[str] = None
    started_at: int = field(default_factory=now_ms)


class VideoAsset(BaseModel):
    """A generated video; becomes a gallery entry once saved."""
    id: str = Field(description="Short opaque token, unique within the session")
    url: str = Field(description="Playable local handle for the video bytes")
    prompt: str
    created_at: int = Field(default_factory=now_ms, description="Epoch milliseconds")
    aspect_ratio: AspectRatio


# Gallery entries are persisted assets
GalleryEntry = VideoAsset


class HistoryEntry(BaseModel):
    """Record of a successful generation. Frame binaries are never stored."""
    id: str = Field(default_factory=new_short_id)
    timestamp: int = Field(default_factory=now_ms)
    prompt: str
    aspect_ratio: AspectRatio
    resolution: Resolution
    has_start_frame: bool = False
    has_end_frame: bool = False

    @classmethod
    def from_request(cls, request: GenerationRequest) -> "HistoryEntry":
        return cls(
            prompt=request.prompt,
            aspect_ratio=request.aspect_ratio,
            resolution=request.resolution,
            has_start_frame=request.has_start_frame,
            has_end_frame=request.has_end_frame,
        )
