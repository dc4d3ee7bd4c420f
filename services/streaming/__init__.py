"""
Progress Streaming Service

Cosmetic progress feedback while a Veo job is in flight.

Usage:
    from services.streaming import ProgressSimulator

    simulator = ProgressSimulator()
    simulator.on_event(render)
    async with simulator.running():
        ...
"""

from .progress_simulator import (
    LOADING_STEPS,
    ProgressSimulator,
    ProgressSnapshot,
    next_progress,
)

__all__ = [
    "LOADING_STEPS",
    "ProgressSimulator",
    "ProgressSnapshot",
    "next_progress",
]
