"""
Satchel - File session driver.

One record file per session under ``file.location``::

    <location>/<session_id>.txt   ->   {"message":<payload>,"purpose":"<session_id>"}

Filesystem calls run in the default executor so the event loop is never
blocked. Missing directories and files are provisioned transparently;
every other OSError surfaces as SessionStorageFault.
"""

from __future__ import annotations

import asyncio
import logging
import os
import secrets
import time
from pathlib import Path
from typing import Any, Callable, Optional

from ..config import SessionConfig, parse_age
from ..core import Envelope
from ..faults import (
    SessionConfigFault,
    SessionInvalidFault,
    SessionStorageFault,
    hash_session_id,
)

logger = logging.getLogger("satchel.drivers.file")


class FileDriver:
    """
    File-based session storage.

    Features:
    - One JSON envelope per session
    - Lazy creation of the location and any intermediate directories
    - ``touch`` refreshes the file mtime, ``cleanup_expired`` reaps by mtime
    - Write goes through a temp file and ``os.replace``

    No locking: concurrent writers for the same session race and the last
    write wins.

    Example:
        >>> driver = FileDriver(build_session_config({
        ...     "driver": "file",
        ...     "file": {"location": "/var/lib/app/sessions"},
        ... }))
        >>> await driver.write("sess_1", {"values": {}})
        >>> await driver.read("sess_1")
        {'values': {}}
    """

    name = "file"
    file_extension = ".txt"

    def __init__(self, config: SessionConfig):
        """
        Initialize file driver.

        Args:
            config: Session configuration with ``file.location`` set

        Raises:
            SessionConfigFault: ``file.location`` is missing
        """
        location = (config.file or {}).get("location")
        if not location:
            raise SessionConfigFault(
                'Missing "file.location" for session file driver inside "config/session" file'
            )

        self.config = config
        self.location = Path(location).expanduser()

    def path_for(self, session_id: str) -> Path:
        """Get file path for session."""
        session_id = str(session_id)

        if not session_id:
            raise SessionInvalidFault(session_id, "identifier is empty")
        if "/" in session_id or "\\" in session_id or "\x00" in session_id:
            raise SessionInvalidFault(session_id, "identifier contains a path separator")

        return self.location / f"{session_id}{self.file_extension}"

    async def _run(
        self,
        operation: str,
        session_id: Optional[str],
        func: Callable[..., Any],
        *args: Any,
    ) -> Any:
        """Run a blocking filesystem call in the default executor."""
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, func, *args)
        except OSError as e:
            target = hash_session_id(session_id) if session_id is not None else str(self.location)
            logger.error(f"File session {operation} failed ({target}): {e}")
            raise SessionStorageFault(
                driver=self.name,
                operation=operation,
                cause=str(e),
                session_id=session_id,
            ) from e

    # ========================================================================
    # Blocking helpers (executor side)
    # ========================================================================

    @staticmethod
    def _read_file(path: Path) -> bytes:
        path.parent.mkdir(parents=True, exist_ok=True)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            # A read provisions the record slot for a new session.
            path.touch()
            return b""

    @staticmethod
    def _write_file(path: Path, contents: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = path.with_name(f"{path.name}.{secrets.token_hex(4)}.tmp")
        try:
            temp_path.write_text(contents, encoding="utf-8")
            os.replace(temp_path, path)
        except OSError:
            temp_path.unlink(missing_ok=True)
            raise

    @staticmethod
    def _touch_file(path: Path) -> bool:
        try:
            os.utime(path, None)
        except FileNotFoundError:
            return False
        return True

    @staticmethod
    def _delete_file(path: Path) -> None:
        path.unlink(missing_ok=True)

    def _remove_older_than(self, cutoff: float) -> int:
        if not self.location.is_dir():
            return 0

        removed = 0
        for path in self.location.glob(f"*{self.file_extension}"):
            try:
                if path.stat().st_mtime < cutoff:
                    path.unlink()
                    removed += 1
            except FileNotFoundError:
                # Destroyed concurrently
                continue
        return removed

    # ========================================================================
    # Driver contract
    # ========================================================================

    async def read(self, session_id: str) -> Any | None:
        """
        Read session payload from its file.

        A missing file is created empty and None is returned. Corrupted
        content and a purpose mismatch also return None.
        """
        path = self.path_for(session_id)
        contents = await self._run("read", session_id, self._read_file, path)

        if not contents:
            logger.debug(f"No session file for {hash_session_id(session_id)}")
            return None

        return Envelope.verify(contents, session_id)

    async def write(self, session_id: str, payload: Any) -> None:
        """Write session payload to its file, replacing previous contents."""
        path = self.path_for(session_id)
        contents = Envelope.build(payload, session_id).to_json()
        await self._run("write", session_id, self._write_file, path, contents)
        logger.debug(f"Wrote session file for {hash_session_id(session_id)}")

    async def touch(self, session_id: str) -> None:
        """Update the session file mtime. Missing file is a no-op."""
        path = self.path_for(session_id)
        touched = await self._run("touch", session_id, self._touch_file, path)
        if not touched:
            logger.debug(f"Touch skipped, no session file for {hash_session_id(session_id)}")

    async def destroy(self, session_id: str) -> None:
        """Delete session file. Missing file is a no-op."""
        path = self.path_for(session_id)
        await self._run("destroy", session_id, self._delete_file, path)

    # ========================================================================
    # Garbage collection
    # ========================================================================

    async def cleanup_expired(self, max_age: int | float | str | None = None) -> int:
        """
        Remove session files not touched within ``max_age``.

        Args:
            max_age: Seconds or duration string; defaults to the configured age

        Returns:
            Number of session files removed
        """
        seconds = parse_age(self.config.age if max_age is None else max_age)
        cutoff = time.time() - seconds

        removed = await self._run("cleanup", None, self._remove_older_than, cutoff)
        logger.info(f"Removed {removed} expired session files from {self.location}")
        return removed
