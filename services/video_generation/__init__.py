"""
Video Generation Service

Access to the Veo long-running video API:
- client: submit / poll / fetch against google-genai
- credentials: API key presence and host key picker
- errors: failure kinds and classification

Usage:
    from services.video_generation import VeoClient, EnvCredentialProvider

    client = VeoClient()
    handle = await client.submit(request, api_key)
"""

from .errors import (
    API_KEY_INVALID,
    INVALID_CREDENTIAL_SENTINEL,
    CredentialInvalidError,
    CredentialMissingError,
    ErrorKind,
    VideoGenerationError,
    classify_error,
)
from .credentials import CredentialProvider, EnvCredentialProvider
from .client import (
    OperationHandle,
    VeoClient,
    VideoBackend,
    build_frame_prompt,
    save_video_bytes,
)

__all__ = [
    "API_KEY_INVALID",
    "INVALID_CREDENTIAL_SENTINEL",
    "CredentialInvalidError",
    "CredentialMissingError",
    "ErrorKind",
    "VideoGenerationError",
    "classify_error",
    "CredentialProvider",
    "EnvCredentialProvider",
    "OperationHandle",
    "VeoClient",
    "VideoBackend",
    "build_frame_prompt",
    "save_video_bytes",
]
