"""
Satchel - In-memory session driver.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, ClassVar, Dict

from ..config import SessionConfig

logger = logging.getLogger("satchel.drivers.memory")


class MemoryDriver:
    """
    In-memory session storage for development and testing.

    Sessions live in a mapping shared by every MemoryDriver in the process,
    so a test harness and the application see the same records. Payloads
    are deep-copied in and out.

    NOT suitable for production (no persistence across restarts).

    Example:
        >>> driver = MemoryDriver()
        >>> await driver.write("sess_1", {"values": {"cart": 3}})
        >>> await driver.read("sess_1")
        {'values': {'cart': 3}}
    """

    name = "memory"

    sessions: ClassVar[Dict[str, Any]] = {}

    def __init__(self, config: SessionConfig | None = None):
        self.config = config

    async def read(self, session_id: str) -> Any | None:
        """Read session from memory."""
        payload = self.sessions.get(str(session_id))
        if payload is None:
            return None
        return copy.deepcopy(payload)

    async def write(self, session_id: str, payload: Any) -> None:
        """Save session to memory."""
        self.sessions[str(session_id)] = copy.deepcopy(payload)

    async def touch(self, session_id: str) -> None:
        """Memory records never expire."""

    async def destroy(self, session_id: str) -> None:
        """Delete session from memory."""
        self.sessions.pop(str(session_id), None)

    @classmethod
    def clear(cls) -> None:
        """Drop every in-memory session (useful between tests)."""
        cls.sessions.clear()
        logger.debug("Cleared in-memory session store")
