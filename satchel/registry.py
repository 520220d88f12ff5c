"""
Satchel - Driver registry.

Maps driver names to factories so new backends plug in without the
SessionClient knowing concrete driver types. A registry is an ordinary
object: build one at startup, register drivers, then hand it to whatever
creates session clients. Treat it as read-only once requests are served.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List

from .config import SessionConfig
from .drivers.base import SessionDriver
from .faults import SessionConfigFault

logger = logging.getLogger("satchel.registry")

DriverFactory = Callable[[SessionConfig], SessionDriver]


def _memory_driver(config: SessionConfig) -> SessionDriver:
    from .drivers.memory import MemoryDriver
    return MemoryDriver(config)


def _file_driver(config: SessionConfig) -> SessionDriver:
    from .drivers.file import FileDriver
    return FileDriver(config)


def _redis_driver(config: SessionConfig) -> SessionDriver:
    from .drivers.redis import RedisDriver
    return RedisDriver(config)


class DriverRegistry:
    """
    Registry of session driver factories.

    Example:
        >>> registry = DriverRegistry.with_defaults()
        >>> registry.register("custom", lambda config: CustomDriver(config))
        >>> driver = registry.create("file", config)
    """

    def __init__(self) -> None:
        self._factories: Dict[str, DriverFactory] = {}

    @classmethod
    def with_defaults(cls) -> DriverRegistry:
        """Registry with the bundled memory, file and redis drivers."""
        registry = cls()
        registry.register("memory", _memory_driver)
        registry.register("file", _file_driver)
        registry.register("redis", _redis_driver)
        return registry

    def register(self, name: str, factory: DriverFactory) -> None:
        """Add or replace the factory for ``name``."""
        if name in self._factories:
            logger.debug(f"Replacing session driver factory '{name}'")
        self._factories[name] = factory

    def unregister(self, name: str) -> None:
        self._factories.pop(name, None)

    def has(self, name: str) -> bool:
        return name in self._factories

    def names(self) -> List[str]:
        return sorted(self._factories)

    def create(self, name: str, config: SessionConfig) -> SessionDriver:
        """
        Instantiate the driver registered under ``name``.

        Raises:
            SessionConfigFault: No driver registered under ``name``, or the
                driver rejected the configuration
        """
        factory = self._factories.get(name)
        if factory is None:
            raise SessionConfigFault(
                f"Unknown session driver \"{name}\". "
                f"Registered drivers: {', '.join(self.names()) or 'none'}"
            )

        driver = factory(config)
        logger.info(f"Created session driver '{name}'")
        return driver
