"""
Credential provider for the Veo backend.

The key either comes from the environment (GOOGLE_API_KEY / API_KEY) or from
a host-provided picker, e.g. an AI Studio style "select key" dialog. Hosts
without a picker simply have no way to request a key interactively.
"""

import logging
from typing import Awaitable, Callable, Optional, Protocol

from core.config import get_config

logger = logging.getLogger(__name__)

# Opens the host's key picker and resolves to the chosen key (None if dismissed)
KeyPicker = Callable[[], Awaitable[Optional[str]]]


class CredentialProvider(Protocol):
    """Checks for and requests the backend API credential."""

    async def has_credential(self) -> bool:
        ...

    async def request_credential(self) -> None:
        ...

    def get_credential(self) -> Optional[str]:
        ...


class EnvCredentialProvider:
    """
    Credential provider backed by configuration and an optional picker.

    Usage:
        provider = EnvCredentialProvider()                 # env only
        provider = EnvCredentialProvider(picker=open_key_dialog)

        if not await provider.has_credential():
            await provider.request_credential()
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        picker: Optional[KeyPicker] = None,
        config: Optional[object] = None,
    ):
        self.config = config or get_config()
        self._configured_key = api_key if api_key is not None else self.config.api.google_api_key
        self._picker = picker
        self._selected_key: Optional[str] = None

    def get_credential(self) -> Optional[str]:
        return self._configured_key or self._selected_key or None

    async def has_credential(self) -> bool:
        """True when a key is configured or one was selected through the picker."""
        return self.get_credential() is not None

    async def request_credential(self) -> None:
        """
        Ask the host to select a key.

        No-op when a key is configured out-of-band or the host has no picker.
        Waits for as long as the user takes.
        """
        if self._configured_key:
            return

        if self._picker is None:
            logger.warning("No API key configured and no key picker available")
            return

        key = await self._picker()
        if key:
            self._selected_key = key
            logger.info("API key selected through picker")
        else:
            logger.info("Key picker dismissed without a selection")

    def forget(self) -> None:
        """Drop a picker-selected key (configured keys are untouched)."""
        self._selected_key = None
