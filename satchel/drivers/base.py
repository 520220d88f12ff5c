"""
Satchel - Session driver contract.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class SessionDriver(Protocol):
    """
    Abstract session storage interface.

    Drivers are responsible ONLY for persistence. Merging values, flash
    messages and commit ordering belong to SessionClient.

    "Not found" is a normal outcome, never an error: ``read`` returns None,
    ``touch`` and ``destroy`` silently do nothing. Any other storage error
    is raised as SessionStorageFault.
    """

    name: str

    async def read(self, session_id: str) -> Any | None:
        """
        Read the payload written for a session.

        Args:
            session_id: Session identifier

        Returns:
            Payload if a valid record exists, None otherwise (missing,
            expired, or written under another identifier)

        Raises:
            SessionStorageFault: Store is unavailable
        """
        ...

    async def write(self, session_id: str, payload: Any) -> None:
        """
        Persist a payload, replacing any previous record.

        Args:
            session_id: Session identifier
            payload: JSON-serializable payload

        Raises:
            SessionStorageFault: Store is unavailable
        """
        ...

    async def touch(self, session_id: str) -> None:
        """
        Refresh the record's recency/expiry without altering its payload.

        Args:
            session_id: Session identifier
        """
        ...

    async def destroy(self, session_id: str) -> None:
        """
        Remove the record. Idempotent.

        Args:
            session_id: Session identifier
        """
        ...
