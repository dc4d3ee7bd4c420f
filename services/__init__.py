"""
Veo Studio Services

Core services for the generation pipeline:
- orchestrator: job lifecycle state machine
- prompting: prompt enhancement, request building, presets
- video_generation: Veo backend client and credentials
- streaming: simulated progress feedback
- storage: history/gallery ledger
"""

from .orchestrator import (
    GenerationOrchestrator,
    GenerationRequest,
    GenerationStatus,
)

__all__ = [
    "GenerationOrchestrator",
    "GenerationRequest",
    "GenerationStatus",
]
