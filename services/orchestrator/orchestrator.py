"""
Generation Orchestrator

Owns the lifecycle of one Veo job at a time.

State machine:
    IDLE → PREPARING → GENERATING → COMPLETE ─┐
                                  ↘ FAILED ───┤
    IDLE ←──── save / discard / dismiss ──────┘

PREPARING always precedes GENERATING: the credential is confirmed (and
requested from the host if missing) before anything is submitted. Every
failure is caught at the top of ``submit`` and turned into one user-visible
message; nothing is raised to the presentation layer.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, Union

from core.config import get_config
from services.storage import Ledger
from services.streaming import ProgressSimulator, ProgressSnapshot
from services.video_generation import (
    CredentialProvider,
    ErrorKind,
    OperationHandle,
    VideoBackend,
    VideoGenerationError,
    classify_error,
    save_video_bytes,
)
from services.video_generation.client import PROVIDER

from .state import (
    GenerationJob,
    GenerationRequest,
    GenerationStatus,
    HistoryEntry,
    VideoAsset,
    new_short_id,
)

logger = logging.getLogger(__name__)

StatusCallback = Callable[[GenerationStatus], Union[None, Awaitable[None]]]


class CancellationToken:
    """Cooperative cancellation, checked once per poll iteration."""

    def __init__(self):
        self._event = asyncio.Event()

    def cancel(self):
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()


class GenerationOrchestrator:
    """
    Drives a GenerationRequest through credential check, submission,
    polling and download, and keeps the state the UI renders.

    Usage:
        orchestrator = GenerationOrchestrator(
            backend=VeoClient(),
            credentials=EnvCredentialProvider(),
            ledger=ledger,
        )
        orchestrator.on_status(lambda status: print(status.value))

        request = build_request(form)
        if request and not orchestrator.is_generating:
            asset = await orchestrator.submit(request)

        if orchestrator.status == GenerationStatus.COMPLETE:
            await orchestrator.save_preview()
        elif orchestrator.status == GenerationStatus.FAILED:
            print(orchestrator.error_message)
            await orchestrator.retry()
    """

    def __init__(
        self,
        backend: VideoBackend,
        credentials: CredentialProvider,
        ledger: Ledger,
        config: Optional[Any] = None,
        simulator: Optional[ProgressSimulator] = None,
        poll_interval: Optional[float] = None,
        max_poll_seconds: Optional[float] = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            backend: Video generation backend
            credentials: Credential provider
            ledger: History/gallery ledger (already loaded)
            config: Optional config override
            simulator: Progress simulator (built from config if None)
            poll_interval: Seconds between status polls (config default if None)
            max_poll_seconds: Optional overall polling bound (config default if None)
        """
        self.config = config or get_config()
        self.backend = backend
        self.credentials = credentials
        self.ledger = ledger
        self.simulator = simulator or ProgressSimulator.from_config(self.config)

        self.poll_interval = (
            poll_interval if poll_interval is not None else self.config.generation.poll_interval
        )
        self.max_poll_seconds = (
            max_poll_seconds if max_poll_seconds is not None else self.config.generation.max_poll_seconds
        )

        self.status = GenerationStatus.IDLE
        self.job: Optional[GenerationJob] = None
        self.last_request: Optional[GenerationRequest] = None
        self.preview: Optional[VideoAsset] = None
        self.error_message: Optional[str] = None
        self.error_kind: Optional[ErrorKind] = None
        self.credential_ready = False

        self._status_callbacks: list[StatusCallback] = []
        self._issued_ids: set[str] = set()

        self.simulator.on_event(self._track_progress)

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------

    @property
    def is_generating(self) -> bool:
        return self.status in (GenerationStatus.PREPARING, GenerationStatus.GENERATING)

    @property
    def progress(self) -> float:
        return self.simulator.progress

    @property
    def status_message(self) -> str:
        return self.simulator.message

    def on_status(self, callback: StatusCallback):
        """Register callback for status transitions (sync or async)."""
        self._status_callbacks.append(callback)

    def on_progress(self, callback: Callable[[ProgressSnapshot], None]):
        """Register callback for simulated progress snapshots."""
        self.simulator.on_event(callback)

    def _track_progress(self, snapshot: ProgressSnapshot):
        if self.job is not None:
            self.job.progress = snapshot.progress
            self.job.step_index = snapshot.step_index

    async def _set_status(self, status: GenerationStatus):
        previous = self.status
        self.status = status
        if self.job is not None:
            self.job.status = status
        logger.info(f"Generation status: {previous.value} -> {status.value}")

        for callback in self._status_callbacks:
            try:
                result = callback(status)
                if asyncio.iscoroutine(result):
                    await result
            except Exception as e:
                logger.warning(f"Status callback failed: {e}")

    # ------------------------------------------------------------------
    # Credential
    # ------------------------------------------------------------------

    async def check_credential(self) -> bool:
        """Refresh the credential-ready flag from the provider."""
        try:
            self.credential_ready = await self.credentials.has_credential()
        except Exception as e:
            logger.error(f"Failed to check API key status: {e}")
        return self.credential_ready

    async def connect(self) -> bool:
        """Ask the host for a key, then re-check."""
        try:
            await self.credentials.request_credential()
        except Exception as e:
            logger.error(f"Error selecting key: {e}")
        return await self.check_credential()

    def disconnect(self):
        self.credential_ready = False

    async def _prepare_credential(self) -> Optional[str]:
        """
        Make sure a key is available before submitting.

        Errors from the credential flow are logged only; a still-missing key
        fails the job at submission time.
        """
        try:
            if not await self.credentials.has_credential():
                await self.credentials.request_credential()
            self.credential_ready = await self.credentials.has_credential()
        except Exception as e:
            logger.error(f"Credential request failed: {e}")
        return self.credentials.get_credential()

    # ------------------------------------------------------------------
    # Job lifecycle
    # ------------------------------------------------------------------

    async def submit(
        self,
        request: GenerationRequest,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Optional[VideoAsset]:
        """
        Run one generation job to completion or failure.

        Args:
            request: Frozen request from the builder
            cancel_token: Optional cooperative cancellation token

        Returns:
            The staged preview asset, or None if the job failed or was refused
        """
        if self.is_generating:
            logger.warning("Generation already in progress, submit ignored")
            return None

        self.error_message = None
        self.error_kind = None
        self.preview = None
        self.last_request = request
        self.job = GenerationJob(request=request)
        await self._set_status(GenerationStatus.PREPARING)

        try:
            api_key = await self._prepare_credential()

            await self._set_status(GenerationStatus.GENERATING)
            async with self.simulator.running():
                video_bytes = await self._run_operation(request, api_key, cancel_token)

            asset = await self._stage_asset(request, video_bytes)
            # History first, so COMPLETE observers already see the entry
            self.ledger.append_history(HistoryEntry.from_request(request))
            self.preview = asset
            await self._set_status(GenerationStatus.COMPLETE)
            return asset

        except Exception as e:
            await self._fail(classify_error(e, provider=PROVIDER))
            return None

    async def _fail(self, error: VideoGenerationError):
        logger.error(f"Generation failed [{error.kind.value}]: {error}")
        self.error_message = str(error) or "Something went wrong during generation."
        self.error_kind = error.kind
        if self.job is not None:
            self.job.error_message = self.error_message
            self.job.error_kind = error.kind.value

        if error.kind == ErrorKind.CREDENTIAL_INVALID:
            self.credential_ready = False

        await self._set_status(GenerationStatus.FAILED)

    def _check_cancelled(self, cancel_token: Optional[CancellationToken]):
        if cancel_token is not None and cancel_token.is_cancelled:
            raise VideoGenerationError(
                "Generation cancelled",
                kind=ErrorKind.CANCELLED,
                provider=PROVIDER,
            )

    async def _run_operation(
        self,
        request: GenerationRequest,
        api_key: Optional[str],
        cancel_token: Optional[CancellationToken],
    ) -> bytes:
        """Submit, poll until done and download the clip."""
        handle: OperationHandle = await self.backend.submit(request, api_key)
        if self.job is not None:
            self.job.operation_name = handle.name

        loop = asyncio.get_running_loop()
        started = loop.time()
        polls = 0

        while not handle.done:
            self._check_cancelled(cancel_token)
            await asyncio.sleep(self.poll_interval)
            self._check_cancelled(cancel_token)

            if self.max_poll_seconds is not None and loop.time() - started >= self.max_poll_seconds:
                raise VideoGenerationError(
                    f"Job did not complete within {self.max_poll_seconds:g} seconds",
                    kind=ErrorKind.TIMEOUT,
                    provider=PROVIDER,
                )

            polls += 1
            logger.debug(f"Polling for video status (attempt {polls})")
            handle = await self.backend.poll(handle)

        if handle.error_message:
            raise VideoGenerationError(
                handle.error_message,
                kind=ErrorKind.OPERATION_FAILED,
                error_code="JOB_FAILED",
                provider=PROVIDER,
            )

        if not handle.video_uri:
            raise VideoGenerationError(
                "No video URI returned from successful operation.",
                kind=ErrorKind.NO_RESULT,
                provider=PROVIDER,
            )

        logger.info(f"Video generated after {polls} poll(s), fetching bytes")
        return await self.backend.fetch_video(handle.video_uri, api_key)

    def _new_asset_id(self) -> str:
        taken = self._issued_ids | self.ledger.known_ids()
        asset_id = new_short_id()
        while asset_id in taken:
            asset_id = new_short_id()
        self._issued_ids.add(asset_id)
        return asset_id

    async def _stage_asset(self, request: GenerationRequest, video_bytes: bytes) -> VideoAsset:
        asset_id = self._new_asset_id()
        # Off the event loop, clips can be large
        path = await asyncio.to_thread(
            save_video_bytes,
            video_bytes,
            filename=f"video_{asset_id}.mp4",
            output_dir=self.config.generation.output_dir,
        )
        return VideoAsset(
            id=asset_id,
            url=path,
            prompt=request.prompt,
            aspect_ratio=request.aspect_ratio,
        )

    async def retry(self) -> Optional[VideoAsset]:
        """Replay the last request verbatim (no re-enhancement)."""
        if self.last_request is None:
            logger.warning("Nothing to retry")
            return None
        return await self.submit(self.last_request)

    # ------------------------------------------------------------------
    # Disposing of the result
    # ------------------------------------------------------------------

    async def save_preview(self) -> Optional[VideoAsset]:
        """Move the staged preview into the gallery and return to IDLE."""
        if self.status != GenerationStatus.COMPLETE or self.preview is None:
            return None
        asset = self.preview
        self.ledger.append_gallery(asset)
        self.preview = None
        self.job = None
        await self._set_status(GenerationStatus.IDLE)
        return asset

    async def discard_preview(self):
        """Drop the staged preview. Only valid from COMPLETE."""
        if self.status != GenerationStatus.COMPLETE:
            return
        self.preview = None
        self.job = None
        await self._set_status(GenerationStatus.IDLE)

    async def dismiss_error(self):
        if self.status != GenerationStatus.FAILED:
            return
        self.error_message = None
        self.error_kind = None
        self.job = None
        await self._set_status(GenerationStatus.IDLE)
