"""
Satchel - Pluggable server-side session store.

Persists per-user session state (values plus one-shot flash messages)
under an opaque session identifier, across interchangeable drivers:
- memory: process-local (dev/testing)
- file: one JSON envelope per session on disk
- redis: distributed, with native TTL

Every stored record is bound to the identifier it was written under, so a
record read back under another identifier is treated as no session.

Cookies, request binding and configuration loading belong to the web
layer; Satchel only needs the driver contract.
"""

from .core import (
    Envelope,
    SessionData,
    generate_session_id,
)

from .config import (
    SessionConfig,
    build_session_config,
    parse_age,
)

from .drivers import (
    SessionDriver,
    MemoryDriver,
    FileDriver,
)

from .registry import DriverRegistry

from .client import (
    ClientState,
    SessionClient,
)

from .faults import (
    Fault,
    FaultDomain,
    Severity,
    SessionFault,
    SessionConfigFault,
    SessionStorageFault,
    SessionNotLoadedFault,
    SessionInvalidFault,
)

__all__ = [
    # Core types
    "Envelope",
    "SessionData",
    "generate_session_id",
    # Configuration
    "SessionConfig",
    "build_session_config",
    "parse_age",
    # Drivers
    "SessionDriver",
    "MemoryDriver",
    "FileDriver",
    "DriverRegistry",
    # Client
    "ClientState",
    "SessionClient",
    # Faults
    "Fault",
    "FaultDomain",
    "Severity",
    "SessionFault",
    "SessionConfigFault",
    "SessionStorageFault",
    "SessionNotLoadedFault",
    "SessionInvalidFault",
]

__version__ = "0.1.0"
