"""
Satchel - Session drivers.

Every backend satisfies the SessionDriver contract:
- MemoryDriver: process-local storage (dev/testing)
- FileDriver: one JSON envelope file per session
- RedisDriver: redis-backed storage with native TTL

RedisDriver is imported lazily by the registry so ``redis`` is only
loaded when that driver is used.
"""

from .base import SessionDriver
from .memory import MemoryDriver
from .file import FileDriver

__all__ = [
    "SessionDriver",
    "MemoryDriver",
    "FileDriver",
]
