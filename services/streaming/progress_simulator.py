"""
Progress Simulator for Video Generation

The Veo backend reports no progress between submission and completion, so
the UI is fed a cosmetic indicator instead: a value that approaches 95%
asymptotically and a rotating list of status messages. Both run on their
own timers only while a job is GENERATING.

Usage:
    simulator = ProgressSimulator()
    simulator.on_event(lambda snap: print(snap.to_cli_line()))

    async with simulator.running():
        await poll_backend()
    # Timers are cancelled and progress is back to 0 here
"""

import asyncio
import logging
from contextlib import asynccontextmanager, suppress
from dataclasses import dataclass
from typing import AsyncIterator, Callable, Optional, Sequence

logger = logging.getLogger(__name__)

LOADING_STEPS = (
    "Initializing Veo neural engine...",
    "Parsing semantic structures...",
    "Synthesizing spatial geometry...",
    "Computing temporal motion vectors...",
    "Rendering high-fidelity textures...",
    "Applying cinematic lighting...",
    "Finalizing encoding stream...",
)

PROGRESS_CEILING = 95.0
MIN_INCREMENT = 0.1
APPROACH_RATE = 0.05


def next_progress(current: float, ceiling: float = PROGRESS_CEILING) -> float:
    """One simulation tick: close 5% of the remaining gap, at least 0.1, capped."""
    if current >= ceiling:
        return ceiling
    return min(ceiling, current + max(MIN_INCREMENT, (ceiling - current) * APPROACH_RATE))


@dataclass
class ProgressSnapshot:
    """What the presentation layer renders while a job is in flight."""
    progress: float
    step_index: int
    message: str

    def to_cli_line(self) -> str:
        bar_width = 20
        filled = int(self.progress / 100 * bar_width)
        bar = "█" * filled + "░" * (bar_width - filled)
        return f"⏳ [{bar}] {self.progress:.0f}% | {self.message}"


class ProgressSimulator:
    """
    Drives the cosmetic progress bar and status messages.

    The timers only exist inside ``running()``; leaving the context for any
    reason cancels them, so nothing mutates progress after a job ends.
    """

    def __init__(
        self,
        progress_interval: float = 0.2,
        step_interval: float = 3.0,
        steps: Sequence[str] = LOADING_STEPS,
        ceiling: float = PROGRESS_CEILING,
    ):
        self.progress_interval = progress_interval
        self.step_interval = step_interval
        self.steps = tuple(steps)
        self.ceiling = ceiling

        self.progress: float = 0.0
        self.step_index: int = 0
        self._tasks: list[asyncio.Task] = []
        self._callbacks: list[Callable[[ProgressSnapshot], None]] = []

    @classmethod
    def from_config(cls, config) -> "ProgressSimulator":
        return cls(
            progress_interval=config.progress.progress_interval,
            step_interval=config.progress.step_interval,
            ceiling=config.progress.ceiling,
        )

    @property
    def is_running(self) -> bool:
        return any(not task.done() for task in self._tasks)

    @property
    def message(self) -> str:
        return self.steps[self.step_index] if self.steps else ""

    def snapshot(self) -> ProgressSnapshot:
        return ProgressSnapshot(
            progress=self.progress,
            step_index=self.step_index,
            message=self.message,
        )

    def on_event(self, callback: Callable[[ProgressSnapshot], None]):
        """Register callback for progress snapshots."""
        self._callbacks.append(callback)

    def _emit(self):
        snapshot = self.snapshot()
        for callback in self._callbacks:
            try:
                callback(snapshot)
            except Exception as e:
                logger.warning(f"Progress callback failed: {e}")

    def tick_progress(self):
        self.progress = next_progress(self.progress, self.ceiling)
        self._emit()

    def tick_step(self):
        if self.steps:
            self.step_index = (self.step_index + 1) % len(self.steps)
        self._emit()

    async def _every(self, interval: float, action: Callable[[], None]):
        while True:
            await asyncio.sleep(interval)
            action()

    def start(self):
        """Reset and start both timers."""
        self.stop()
        self.progress = 0.0
        self.step_index = 0
        self._tasks = [
            asyncio.create_task(self._every(self.progress_interval, self.tick_progress)),
            asyncio.create_task(self._every(self.step_interval, self.tick_step)),
        ]
        self._emit()

    def stop(self):
        """Cancel the timers and reset progress."""
        for task in self._tasks:
            task.cancel()
        self._tasks = []
        self.progress = 0.0

    async def _drain(self, tasks: list[asyncio.Task]):
        for task in tasks:
            with suppress(asyncio.CancelledError):
                await task

    @asynccontextmanager
    async def running(self) -> AsyncIterator["ProgressSimulator"]:
        """Run the timers for the duration of the block."""
        self.start()
        tasks = list(self._tasks)
        try:
            yield self
        finally:
            self.stop()
            await self._drain(tasks)
            logger.debug("Progress simulation stopped")
