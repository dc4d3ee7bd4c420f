"""
Error kinds for the generation pipeline.

Every failure inside a job is converted to a VideoGenerationError carrying
an ErrorKind, so the orchestrator can surface one user-visible message and
react to the kinds that need it (an invalid credential resets the
credential-ready flag).
"""

from enum import Enum
from typing import Optional

import httpx
from google.genai import errors as genai_errors

# Message fragment the API returns when the key cannot see the model/project
INVALID_CREDENTIAL_SENTINEL = "Requested entity was not found"
API_KEY_INVALID = "API_KEY_INVALID"


class ErrorKind(str, Enum):
    """Classification of a failed generation job."""
    CREDENTIAL_MISSING = "CREDENTIAL_MISSING"
    CREDENTIAL_INVALID = "CREDENTIAL_INVALID"
    OPERATION_FAILED = "OPERATION_FAILED"  # Backend-reported job error
    NO_RESULT = "NO_RESULT"  # Done, but no video locator
    TRANSPORT_FAILURE = "TRANSPORT_FAILURE"  # Byte fetch or RPC transport
    TIMEOUT = "TIMEOUT"
    CANCELLED = "CANCELLED"
    UNEXPECTED = "UNEXPECTED"


class VideoGenerationError(Exception):
    """Raised when video generation fails."""

    def __init__(
        self,
        message: str,
        kind: ErrorKind = ErrorKind.UNEXPECTED,
        error_code: str = None,
        provider: str = None,
    ):
        self.kind = kind
        self.error_code = error_code or kind.value
        self.provider = provider
        super().__init__(message)


class CredentialMissingError(VideoGenerationError):
    def __init__(self, message: str = "API Key not found. Please select a key."):
        super().__init__(message, kind=ErrorKind.CREDENTIAL_MISSING)


class CredentialInvalidError(VideoGenerationError):
    def __init__(self, message: str = API_KEY_INVALID):
        super().__init__(message, kind=ErrorKind.CREDENTIAL_INVALID, error_code=API_KEY_INVALID)


def is_invalid_credential_message(message: Optional[str]) -> bool:
    return bool(message) and INVALID_CREDENTIAL_SENTINEL in message


def classify_error(exc: BaseException, provider: Optional[str] = None) -> VideoGenerationError:
    """
    Convert any exception raised inside a job into a VideoGenerationError.

    Args:
        exc: The exception caught at the top of the pipeline
        provider: Backend name to attach when the error has none

    Returns:
        A VideoGenerationError with a user-visible message and a kind
    """
    message = str(exc)

    # The invalid-key sentinel wins regardless of where it surfaced
    if is_invalid_credential_message(message):
        return CredentialInvalidError()

    if isinstance(exc, VideoGenerationError):
        if exc.provider is None:
            exc.provider = provider
        return exc

    if isinstance(exc, genai_errors.APIError):
        return VideoGenerationError(
            exc.message or message or "Unknown generation error",
            kind=ErrorKind.OPERATION_FAILED,
            error_code=f"HTTP_{exc.code}" if exc.code else None,
            provider=provider,
        )

    if isinstance(exc, httpx.TimeoutException):
        return VideoGenerationError(
            f"Request timed out: {type(exc).__name__}",
            kind=ErrorKind.TRANSPORT_FAILURE,
            error_code="TIMEOUT",
            provider=provider,
        )

    if isinstance(exc, httpx.HTTPError):
        return VideoGenerationError(
            f"Network error: {type(exc).__name__}: {exc}",
            kind=ErrorKind.TRANSPORT_FAILURE,
            error_code="REQUEST_ERROR",
            provider=provider,
        )

    return VideoGenerationError(
        message or "Something went wrong during generation.",
        kind=ErrorKind.UNEXPECTED,
        provider=provider,
    )
