"""
Satchel - Session client.

SessionClient composes a driver with SessionData and drives one session
through its cycle:

    UNLOADED --load()--> LOADED --commit()--> COMMITTED --load()--> LOADED ...
         \                  \                      \
          `---------------- destroy() ------------> DESTROYED

Driver calls are awaited one at a time; a client never has two calls in
flight. Errors raised by a driver that are not already Faults surface as
SessionStorageFault. Nothing is retried.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Any, Awaitable, Dict, Mapping, Optional

from .config import SessionConfig
from .core import SessionData, generate_session_id
from .drivers.base import SessionDriver
from .faults import (
    Fault,
    SessionNotLoadedFault,
    SessionStorageFault,
    hash_session_id,
)
from .registry import DriverRegistry

logger = logging.getLogger("satchel.client")


class ClientState(str, Enum):
    """Lifecycle state of a SessionClient."""

    UNLOADED = "unloaded"
    LOADED = "loaded"
    COMMITTED = "committed"
    DESTROYED = "destroyed"


class SessionClient:
    """
    Reads, mutates and persists one session through a driver.

    ``merge``, ``flash`` and ``commit`` require the client to be loaded
    and raise SessionNotLoadedFault otherwise. There is no auto-commit.

    Example:
        >>> client = SessionClient(FileDriver(config))
        >>> await client.load()
        >>> client.merge({"user_id": 42}).flash({"notice": "Welcome back"})
        >>> await client.commit()
    """

    def __init__(
        self,
        driver: SessionDriver,
        session_id: Optional[str] = None,
        *,
        timeout: Optional[float] = None,
    ):
        """
        Initialize session client.

        Args:
            driver: Storage backend
            session_id: Existing session identifier; generated when omitted
            timeout: Optional deadline in seconds for each driver call
        """
        self.driver = driver
        self.timeout = timeout
        self._session_id = str(session_id) if session_id else generate_session_id()
        self._data = SessionData()
        self._state = ClientState.UNLOADED

    @classmethod
    def from_config(
        cls,
        config: SessionConfig,
        registry: Optional[DriverRegistry] = None,
        session_id: Optional[str] = None,
        *,
        timeout: Optional[float] = None,
    ) -> SessionClient:
        """
        Create a client whose driver is built from ``config.driver``.

        Raises:
            SessionConfigFault: Unknown driver or invalid driver options
        """
        registry = registry or DriverRegistry.with_defaults()
        driver = registry.create(config.driver, config)
        return cls(driver, session_id, timeout=timeout)

    def __repr__(self) -> str:
        return (
            f"SessionClient(driver={getattr(self.driver, 'name', '?')!r}, "
            f"session={hash_session_id(self._session_id)}, state={self._state.value})"
        )

    # ========================================================================
    # Properties
    # ========================================================================

    @property
    def session_id(self) -> str:
        return self._session_id

    @property
    def state(self) -> ClientState:
        return self._state

    @property
    def is_loaded(self) -> bool:
        return self._state is ClientState.LOADED

    @property
    def data(self) -> SessionData:
        return self._data

    @property
    def values(self) -> Dict[str, Any]:
        return self._data.values

    @property
    def flash_messages(self) -> Dict[str, Any]:
        return self._data.flash_messages

    # ========================================================================
    # Driver calls
    # ========================================================================

    async def _call(self, operation: str, awaitable: Awaitable[Any]) -> Any:
        """Await a driver call, mapping failures to SessionStorageFault."""
        driver_name = getattr(self.driver, "name", type(self.driver).__name__)
        try:
            if self.timeout is not None:
                return await asyncio.wait_for(awaitable, self.timeout)
            return await awaitable
        except Fault:
            raise
        except asyncio.TimeoutError as e:
            logger.error(
                f"Session {operation} timed out after {self.timeout}s "
                f"({hash_session_id(self._session_id)})"
            )
            raise SessionStorageFault(
                driver=driver_name,
                operation=operation,
                cause=f"timed out after {self.timeout}s",
                session_id=self._session_id,
            ) from e
        except Exception as e:
            logger.error(
                f"Session {operation} failed ({hash_session_id(self._session_id)}): {e}"
            )
            raise SessionStorageFault(
                driver=driver_name,
                operation=operation,
                cause=str(e),
                session_id=self._session_id,
            ) from e

    def _require_loaded(self, operation: str) -> None:
        if self._state is not ClientState.LOADED:
            raise SessionNotLoadedFault(operation=operation, state=self._state.value)

    # ========================================================================
    # Lifecycle
    # ========================================================================

    async def load(self) -> SessionData:
        """
        Load session data from the driver.

        No-op when already loaded. A missing session yields empty data.

        Returns:
            The loaded SessionData
        """
        if self._state is ClientState.LOADED:
            return self._data

        payload = await self._call("read", self.driver.read(self._session_id))
        self._data = SessionData.from_payload(payload)
        self._state = ClientState.LOADED

        logger.debug(
            f"Loaded session {hash_session_id(self._session_id)} "
            f"({'existing' if payload is not None else 'empty'})"
        )
        return self._data

    def merge(self, values: Mapping[str, Any]) -> SessionClient:
        """Shallow-merge ``values`` into the session values."""
        self._require_loaded("merge")
        self._data.merge(values)
        return self

    def flash(self, values: Mapping[str, Any]) -> SessionClient:
        """Shallow-merge ``values`` into the flash messages."""
        self._require_loaded("flash")
        self._data.flash(values)
        return self

    async def commit(self) -> None:
        """Write the current values and flash messages through the driver."""
        self._require_loaded("commit")
        await self._call("write", self.driver.write(self._session_id, self._data.to_payload()))
        self._state = ClientState.COMMITTED
        logger.debug(f"Committed session {hash_session_id(self._session_id)}")

    async def touch(self) -> None:
        """Refresh the stored session's expiry marker."""
        await self._call("touch", self.driver.touch(self._session_id))

    async def destroy(self) -> None:
        """Remove the stored session and clear in-memory data."""
        await self._call("destroy", self.driver.destroy(self._session_id))
        self._data = SessionData()
        self._state = ClientState.DESTROYED
        logger.debug(f"Destroyed session {hash_session_id(self._session_id)}")
