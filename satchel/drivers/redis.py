"""
Satchel - Redis session driver.

Stores the same JSON envelope as the file driver under
``<key_prefix><session_id>`` with a native TTL taken from ``age``:
``write`` uses SETEX, ``touch`` uses EXPIRE, ``destroy`` uses DEL.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from ..config import SessionConfig, parse_age
from ..core import Envelope
from ..faults import SessionStorageFault, hash_session_id

logger = logging.getLogger("satchel.drivers.redis")


class RedisDriver:
    """
    Redis-backed session storage using redis-py's asyncio client.

    Options (``config.redis``):
        url: Connection URL (default ``redis://localhost:6379/0``)
        key_prefix: Prefix for session keys (default ``satchel:session:``)
        max_connections: Pool size (default 10)
        socket_timeout: Seconds (default 5.0)
        connect_timeout: Seconds (default 5.0)

    A ready client may be passed as ``client`` instead of connecting from
    ``url``.
    """

    name = "redis"

    def __init__(self, config: SessionConfig, client: Optional[Any] = None):
        options = config.redis or {}

        self.config = config
        self.url = options.get("url", "redis://localhost:6379/0")
        self.key_prefix = options.get("key_prefix", "satchel:session:")
        self.max_connections = options.get("max_connections", 10)
        self.socket_timeout = options.get("socket_timeout", 5.0)
        self.connect_timeout = options.get("connect_timeout", 5.0)
        self.ttl = parse_age(config.age)
        self._redis = client

    def _key(self, session_id: str) -> str:
        return f"{self.key_prefix}{session_id}"

    def _connection(self) -> Any:
        """Return the client, creating the connection pool on first use."""
        if self._redis is None:
            try:
                import redis.asyncio as aioredis
            except ImportError:
                raise ImportError(
                    "Redis session driver requires 'redis' package. "
                    "Install with: pip install redis"
                )

            self._redis = aioredis.from_url(
                self.url,
                max_connections=self.max_connections,
                socket_timeout=self.socket_timeout,
                socket_connect_timeout=self.connect_timeout,
                decode_responses=False,
            )
            logger.info(f"Redis session driver connected: {self.url}")
        return self._redis

    def _fault(self, operation: str, session_id: str, error: Exception) -> SessionStorageFault:
        logger.error(
            f"Redis session {operation} failed ({hash_session_id(session_id)}): {error}"
        )
        return SessionStorageFault(
            driver=self.name,
            operation=operation,
            cause=str(error),
            session_id=session_id,
        )

    async def read(self, session_id: str) -> Any | None:
        """Read and verify the session envelope."""
        try:
            contents = await self._connection().get(self._key(session_id))
        except Exception as e:
            raise self._fault("read", session_id, e) from e

        if contents is None:
            return None

        return Envelope.verify(contents, session_id)

    async def write(self, session_id: str, payload: Any) -> None:
        """Store the session envelope with the configured TTL."""
        contents = Envelope.build(payload, session_id).to_json()
        try:
            await self._connection().setex(self._key(session_id), self.ttl, contents)
        except Exception as e:
            raise self._fault("write", session_id, e) from e

    async def touch(self, session_id: str) -> None:
        """Reset the key TTL. EXPIRE on a missing key does nothing."""
        try:
            await self._connection().expire(self._key(session_id), self.ttl)
        except Exception as e:
            raise self._fault("touch", session_id, e) from e

    async def destroy(self, session_id: str) -> None:
        """Delete the session key."""
        try:
            await self._connection().delete(self._key(session_id))
        except Exception as e:
            raise self._fault("destroy", session_id, e) from e

    async def shutdown(self) -> None:
        """Close the connection pool."""
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None
