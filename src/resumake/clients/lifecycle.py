"""Ownership of the remote client handle for one wizard session."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable

from resumake.clients.llm_client import LLMClient, get_api_key

logger = logging.getLogger(__name__)


class ClientInitError(RuntimeError):
    """Raised when the client handle cannot be created."""


class HandleState(str, Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZED = "initialized"
    CLOSED = "closed"


class ClientLifecycle:
    """Lazily creates the LLM client once and releases it once.

    ``initialize`` is synchronous because building the client does no I/O;
    ``close`` is a coroutine because releasing the transport does. Both are
    safe to call repeatedly.
    """

    def __init__(
        self,
        factory: Callable[[str], LLMClient] | None = None,
        key_provider: Callable[[], str] = get_api_key,
    ):
        self._factory = factory or (lambda api_key: LLMClient(api_key=api_key))
        self._key_provider = key_provider
        self._handle: LLMClient | None = None
        self._state = HandleState.UNINITIALIZED
        self.close_calls = 0

    @property
    def state(self) -> HandleState:
        return self._state

    @property
    def handle(self) -> LLMClient | None:
        return self._handle

    def initialize(self) -> LLMClient:
        """Return the client, creating it on first use."""
        if self._handle is not None:
            return self._handle
        if self._state is HandleState.CLOSED:
            raise ClientInitError("API client was already closed for this session")

        try:
            api_key = self._key_provider()
        except ValueError as exc:
            raise ClientInitError(f"API key error: {exc}") from exc

        try:
            handle = self._factory(api_key)
        except Exception as exc:
            raise ClientInitError(f"failed to initialize API client: {exc}") from exc
        if handle is None:
            raise ClientInitError("failed to initialize API client: no client returned")

        self._handle = handle
        self._state = HandleState.INITIALIZED
        logger.debug("API client initialized")
        return handle

    async def close(self) -> None:
        """Release the client; later calls are no-ops."""
        self.close_calls += 1
        handle, self._handle = self._handle, None
        if handle is None:
            return
        self._state = HandleState.CLOSED
        try:
            await handle.aclose()
        except Exception:
            logger.warning("Error while closing API client", exc_info=True)
        logger.debug("API client closed")
