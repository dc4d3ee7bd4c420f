"""
Generation Orchestrator Service

Job lifecycle for a single Veo generation:
- Credential confirmation before submission
- Long-running operation polling
- Error classification into one user-visible message
- History bookkeeping and preview staging
"""

from .state import (
    AspectRatio,
    CameraAngle,
    CameraMode,
    GalleryEntry,
    GenerationJob,
    GenerationRequest,
    GenerationStatus,
    HistoryEntry,
    ReferenceFrame,
    Resolution,
    VideoAsset,
)
from .orchestrator import CancellationToken, GenerationOrchestrator

__all__ = [
    "AspectRatio",
    "CameraAngle",
    "CameraMode",
    "GalleryEntry",
    "GenerationJob",
    "GenerationRequest",
    "GenerationStatus",
    "HistoryEntry",
    "ReferenceFrame",
    "Resolution",
    "VideoAsset",
    "CancellationToken",
    "GenerationOrchestrator",
]
