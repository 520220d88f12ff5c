"""
Satchel - Fault definitions.

Errors raised by Satchel are structured Faults, not bare exceptions:
- Fault: base class carrying code, message, domain, severity and retry semantics
- FaultDomain / Severity: taxonomy shared by every fault
- Session faults: configuration, storage, precondition and identifier errors

"Session not found" and "purpose mismatch" are never faults. Drivers fold
them into a ``None`` read result.
"""

from __future__ import annotations

import hashlib
from enum import Enum
from typing import Any, Optional


# ============================================================================
# Severity & Domain
# ============================================================================

class Severity(str, Enum):
    """
    Fault severity levels.

    Determines logging level and how callers should react.
    """
    INFO = "info"
    WARN = "warn"
    ERROR = "error"
    FATAL = "fatal"


class FaultDomain:
    """
    Fault domains (taxonomy).

    Identifies the functional area where a fault occurred.
    """

    def __init__(self, name: str, description: str = ""):
        self.name = name
        self.value = name
        self.description = description

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"FaultDomain(name='{self.name}')"

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, FaultDomain):
            return self.name == other.name
        return str(self) == str(other)

    def __hash__(self) -> int:
        return hash(self.name)


FaultDomain.CONFIG = FaultDomain("config", "Configuration errors")
FaultDomain.IO = FaultDomain("io", "I/O operations")
FaultDomain.SESSION = FaultDomain("session", "Session lifecycle errors")


DOMAIN_DEFAULTS = {
    FaultDomain.CONFIG: {"severity": Severity.FATAL, "retryable": False},
    FaultDomain.IO: {"severity": Severity.ERROR, "retryable": True},
    FaultDomain.SESSION: {"severity": Severity.ERROR, "retryable": False},
}


def hash_session_id(session_id: str) -> str:
    """Hash session ID for logging (privacy)."""
    return f"sha256:{hashlib.sha256(str(session_id).encode()).hexdigest()[:16]}"


# ============================================================================
# Fault - Base Class
# ============================================================================

class Fault(Exception):
    """
    Base fault class - structured, typed fault object.

    Attributes:
        code: Stable machine-readable identifier (e.g., "SESSION_INVALID")
        message: Human-readable summary
        severity: Fault severity (INFO, WARN, ERROR, FATAL)
        domain: Fault domain (CONFIG, IO, SESSION)
        retryable: Whether this fault can be retried
        public: Whether safe to expose to client
        metadata: Additional context data

    Subclasses may declare ``code``, ``message`` and ``domain`` as class
    attributes instead of passing them in.
    """

    def __init__(
        self,
        code: str | None = None,
        message: str | None = None,
        *,
        domain: FaultDomain | None = None,
        severity: Optional[Severity] = None,
        retryable: Optional[bool] = None,
        public: bool = False,
        metadata: Optional[dict[str, Any]] = None,
    ):
        self.code = code if code is not None else getattr(self, "code", None)
        self.message = message if message is not None else getattr(self, "message", None)
        self.domain = domain if domain is not None else getattr(self, "domain", None)

        if self.code is None or self.message is None or self.domain is None:
            raise TypeError(f"{self.__class__.__name__} missing required code, message, or domain")

        super().__init__(self.message)

        defaults = DOMAIN_DEFAULTS.get(self.domain, {"severity": Severity.ERROR, "retryable": False})
        self.severity = severity or getattr(type(self), "severity", None) or defaults["severity"]
        if retryable is None:
            retryable = getattr(type(self), "retryable", None)
        self.retryable = retryable if retryable is not None else defaults["retryable"]
        self.public = public
        self.metadata = metadata or {}

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(code={self.code!r}, domain={self.domain.value}, "
            f"severity={self.severity.value})"
        )

    def to_dict(self) -> dict[str, Any]:
        """
        Serialize fault to dictionary.

        Returns:
            Dictionary representation suitable for logging/serialization
        """
        return {
            "code": self.code,
            "message": self.message,
            "domain": self.domain.value,
            "severity": self.severity.value,
            "retryable": self.retryable,
            "public": self.public,
            "metadata": self.metadata,
        }


# ============================================================================
# Session Faults
# ============================================================================

class SessionFault(Fault):
    """Base class for session-related faults."""

    domain = FaultDomain.SESSION


class SessionConfigFault(SessionFault):
    """
    Session configuration is invalid.

    Raised synchronously at construction time (missing driver option,
    unknown driver name, unparseable age). Never retried.
    """

    code = "SESSION_CONFIG_INVALID"
    domain = FaultDomain.CONFIG

    def __init__(self, reason: str, **kwargs):
        super().__init__(message=reason, metadata={"reason": reason}, **kwargs)
        self.reason = reason


class SessionStorageFault(SessionFault):
    """
    Underlying storage failed during read/write/touch/destroy.

    Examples: permission denied, disk full, redis connection failure,
    a caller-imposed timeout.
    """

    code = "SESSION_STORAGE_FAILURE"
    domain = FaultDomain.IO

    def __init__(
        self,
        driver: str,
        operation: str,
        cause: str | None = None,
        session_id: str | None = None,
        **kwargs
    ):
        if cause:
            message = f"Session driver '{driver}' failed during {operation}: {cause}"
        else:
            message = f"Session driver '{driver}' failed during {operation}"
        metadata = {"driver": driver, "operation": operation, "cause": cause}
        if session_id is not None:
            metadata["session_id_hash"] = hash_session_id(session_id)
        super().__init__(message=message, metadata=metadata, **kwargs)
        self.driver = driver
        self.operation = operation
        self.cause = cause


class SessionNotLoadedFault(SessionFault):
    """
    Session data was mutated or committed before ``load()``.
    """

    code = "SESSION_NOT_LOADED"

    def __init__(self, operation: str, state: str, **kwargs):
        super().__init__(
            message=f"Cannot {operation} session in state '{state}': call load() first",
            metadata={"operation": operation, "state": state},
            **kwargs,
        )
        self.operation = operation
        self.state = state


class SessionInvalidFault(SessionFault):
    """
    Session identifier cannot be used as a storage key.

    Raised when an identifier would address a record outside the
    driver's storage root.
    """

    code = "SESSION_INVALID"
    message = "Invalid session identifier"

    def __init__(self, session_id: str, reason: str, **kwargs):
        super().__init__(
            message=f"Invalid session identifier: {reason}",
            metadata={"session_id_hash": hash_session_id(session_id), "reason": reason},
            **kwargs,
        )
        self.reason = reason
