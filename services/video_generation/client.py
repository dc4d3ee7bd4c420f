"""
Veo Video Generation Client

Single interface to the Veo long-running video API:
- submit: start a generation operation from a GenerationRequest
- poll: re-fetch the operation until it is done
- fetch_video: authenticated download of the finished clip

Features:
- Resolution-based model routing (standard model for 1080p, fast model otherwise)
- Start/end reference frames as conditioning images
- Transport-level retries on individual RPCs (never resubmits a job)
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Optional, Protocol

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    wait_exponential,
)

from core.config import get_config
from services.orchestrator.state import GenerationRequest

from .errors import CredentialMissingError, ErrorKind, VideoGenerationError

logger = logging.getLogger(__name__)

PROVIDER = "veo"

# Transient failures worth repeating a single RPC for
TRANSIENT_ERRORS = (httpx.TransportError, genai_errors.ServerError)


@dataclass
class OperationHandle:
    """Pollable reference to a backend-side generation job."""
    name: Optional[str]
    done: bool = False
    error_message: Optional[str] = None
    video_uri: Optional[str] = None
    raw: Any = field(default=None, repr=False)  # SDK operation object
    client: Any = field(default=None, repr=False)  # SDK client that owns it


class VideoBackend(Protocol):
    """What the orchestrator needs from a generation backend."""

    async def submit(self, request: GenerationRequest, api_key: str) -> OperationHandle:
        ...

    async def poll(self, handle: OperationHandle) -> OperationHandle:
        ...

    async def fetch_video(self, video_uri: str, api_key: str) -> bytes:
        ...


def build_frame_prompt(request: GenerationRequest) -> str:
    """Append reference-frame instructions to the prompt."""
    prompt = (request.prompt or "").strip()

    if request.start_frame and request.end_frame:
        if prompt:
            return f"{prompt} Start with the provided start frame and end with the provided end frame."
        return "Generate a video starting with the provided start frame and ending with the provided end frame."

    if request.start_frame:
        if prompt:
            return f"{prompt} Start with the provided start frame."
        return "Generate a video starting with the provided start frame."

    if request.end_frame:
        if prompt:
            return f"{prompt} End with the provided end frame."
        return "Generate a video ending with the provided end frame."

    return prompt


def _stop_after_configured_attempts(retry_state) -> bool:
    """tenacity stop condition reading the attempt limit from the client's config."""
    client = retry_state.args[0]
    return retry_state.attempt_number >= client.config.generation.rpc_retry_attempts


def _error_message(error: Any) -> str:
    """Pull a readable message out of an operation error payload."""
    if isinstance(error, dict):
        message = error.get("message")
    else:
        message = getattr(error, "message", None)
    return f"{message or 'Unknown generation error'}"


def _video_uri(operation: Any) -> Optional[str]:
    response = getattr(operation, "response", None) or getattr(operation, "result", None)
    videos = getattr(response, "generated_videos", None) or []
    if not videos:
        return None
    video = getattr(videos[0], "video", None)
    return getattr(video, "uri", None)


class VeoClient:
    """
    Veo backend client built on google-genai.

    Usage:
        client = VeoClient()

        handle = await client.submit(request, api_key)
        while not handle.done:
            await asyncio.sleep(5)
            handle = await client.poll(handle)

        video_bytes = await client.fetch_video(handle.video_uri, api_key)
        path = save_video_bytes(video_bytes, "clip.mp4")
    """

    def __init__(
        self,
        config: Optional[Any] = None,
        client_factory: Optional[Callable[[str], Any]] = None,
    ):
        """
        Initialize the Veo client.

        Args:
            config: Optional config override
            client_factory: Builds an SDK client for an API key (tests inject fakes)
        """
        self.config = config or get_config()
        self._client_factory = client_factory or (lambda api_key: genai.Client(api_key=api_key))

        # HTTP client for the byte download
        self._http_client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self.config.api.download_timeout)
        return self._http_client

    async def close(self):
        """Close the HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    def build_params(self, request: GenerationRequest) -> dict[str, Any]:
        """Translate a request into generate_videos keyword arguments."""
        generation_config = types.GenerateVideosConfig(
            number_of_videos=1,
            aspect_ratio=request.aspect_ratio.value,
            resolution=request.resolution.value,
            duration_seconds=request.duration,
        )

        params: dict[str, Any] = {
            "model": self.config.models.model_for_resolution(request.resolution.value),
            "config": generation_config,
        }

        prompt = build_frame_prompt(request)
        if prompt:
            params["prompt"] = prompt

        # Start frame leads; a lone end frame becomes the conditioning image
        primary = request.start_frame or request.end_frame
        if primary is not None:
            params["image"] = types.Image(image_bytes=primary.data, mime_type=primary.mime_type)

        if request.start_frame and request.end_frame:
            generation_config.last_frame = types.Image(
                image_bytes=request.end_frame.data,
                mime_type=request.end_frame.mime_type,
            )

        return params

    def _to_handle(self, operation: Any, client: Any) -> OperationHandle:
        done = bool(getattr(operation, "done", False))
        error = getattr(operation, "error", None)
        return OperationHandle(
            name=getattr(operation, "name", None),
            done=done,
            error_message=_error_message(error) if error else None,
            video_uri=_video_uri(operation) if done else None,
            raw=operation,
            client=client,
        )

    async def submit(self, request: GenerationRequest, api_key: str) -> OperationHandle:
        """
        Start a generation operation.

        Args:
            request: Frozen generation request
            api_key: Key to authenticate with

        Returns:
            Handle for the long-running operation

        Raises:
            CredentialMissingError: If no key is available
        """
        if not api_key:
            raise CredentialMissingError()

        # Fresh SDK client per job so a newly selected key is always used
        client = self._client_factory(api_key)
        params = self.build_params(request)

        logger.info(
            f"Veo request: model={params['model']}, aspect={request.aspect_ratio.value}, "
            f"resolution={request.resolution.value}, duration={request.duration}s, "
            f"prompt={request.prompt[:50]}..."
        )

        operation = await client.aio.models.generate_videos(**params)
        handle = self._to_handle(operation, client)
        logger.info(f"Veo operation created: {handle.name}")
        return handle

    @retry(
        stop=_stop_after_configured_attempts,
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type(TRANSIENT_ERRORS),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    async def poll(self, handle: OperationHandle) -> OperationHandle:
        """Re-fetch the operation status."""
        operation = await handle.client.aio.operations.get(operation=handle.raw)
        return self._to_handle(operation, handle.client)

    @retry(
        stop=_stop_after_configured_attempts,
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type(httpx.TransportError),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    async def fetch_video(self, video_uri: str, api_key: str) -> bytes:
        """
        Download the finished clip.

        Raises:
            VideoGenerationError: If the download does not succeed
        """
        client = await self._get_client()
        # Merge, the URI already carries alt=media
        url = httpx.URL(video_uri).copy_merge_params({"key": api_key})
        response = await client.get(url, follow_redirects=True)

        if not response.is_success:
            raise VideoGenerationError(
                f"Failed to download video bytes: {response.reason_phrase}",
                kind=ErrorKind.TRANSPORT_FAILURE,
                error_code=f"HTTP_{response.status_code}",
                provider=PROVIDER,
            )

        logger.info(f"Video downloaded from {video_uri.split('?')[0]}")
        return response.content


def save_video_bytes(
    video_bytes: bytes,
    filename: str,
    output_dir: str = "output",
) -> str:
    """
    Write downloaded bytes to local storage.

    Args:
        video_bytes: Raw clip content
        filename: Target file name
        output_dir: Base output directory

    Returns:
        Local path usable as a playable handle
    """
    base_dir = Path(output_dir)
    base_dir.mkdir(parents=True, exist_ok=True)

    output_path = base_dir / filename
    with open(output_path, "wb") as f:
        f.write(video_bytes)

    logger.info(f"Video saved: {output_path} ({len(video_bytes) / 1024 / 1024:.1f} MB)")
    return str(output_path)
