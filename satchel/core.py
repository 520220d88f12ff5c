"""
Satchel - Core types.

Defines fundamental session data structures:
- SessionData: values plus flash messages held by a client
- Envelope: persisted record binding a payload to its session identifier
- generate_session_id: opaque random identifier
"""

from __future__ import annotations

import base64
import json
import logging
import secrets
from dataclasses import dataclass, field
from typing import Any, Mapping

logger = logging.getLogger("satchel.core")

# Keys of the payload a SessionClient commits.
VALUES_KEY = "values"
FLASH_MESSAGES_KEY = "flashMessages"


# ============================================================================
# Session identifiers
# ============================================================================

def generate_session_id() -> str:
    """
    Create a new opaque session identifier.

    32 random bytes, URL-safe encoded and prefixed with ``sess_``. The
    identifier never encodes meaning; stores treat it as an opaque key.

    Example:
        >>> generate_session_id()
        'sess_kJ8...'
    """
    raw = secrets.token_bytes(32)
    return f"sess_{base64.urlsafe_b64encode(raw).decode().rstrip('=')}"


# ============================================================================
# SessionData - values + flash messages
# ============================================================================

@dataclass
class SessionData:
    """
    In-memory session state.

    Attributes:
        values: Durable session values
        flash_messages: Values meant to be read once by the layer above.
            The store never clears them on its own.

    Example:
        >>> data = SessionData()
        >>> _ = data.merge({"user_id": 1}).flash({"notice": "Saved"})
        >>> data.to_payload()
        {'values': {'user_id': 1}, 'flashMessages': {'notice': 'Saved'}}
    """

    values: dict[str, Any] = field(default_factory=dict)
    flash_messages: dict[str, Any] = field(default_factory=dict)

    def merge(self, values: Mapping[str, Any]) -> SessionData:
        """Shallow-merge ``values`` into the session values."""
        self.values.update(values)
        return self

    def flash(self, values: Mapping[str, Any]) -> SessionData:
        """Shallow-merge ``values`` into the flash messages."""
        self.flash_messages.update(values)
        return self

    def clear(self) -> None:
        """Drop all values and flash messages."""
        self.values.clear()
        self.flash_messages.clear()

    def to_payload(self) -> dict[str, Any]:
        """Payload handed to a driver's ``write``."""
        return {
            VALUES_KEY: dict(self.values),
            FLASH_MESSAGES_KEY: dict(self.flash_messages),
        }

    @classmethod
    def from_payload(cls, payload: Any) -> SessionData:
        """
        Build session data from a driver's ``read`` result.

        ``None``, non-mapping payloads and missing keys all default to
        empty mappings.
        """
        if not isinstance(payload, Mapping):
            return cls()

        values = payload.get(VALUES_KEY)
        flash_messages = payload.get(FLASH_MESSAGES_KEY)

        return cls(
            values=dict(values) if isinstance(values, Mapping) else {},
            flash_messages=dict(flash_messages) if isinstance(flash_messages, Mapping) else {},
        )


# ============================================================================
# Envelope - persisted record format
# ============================================================================

@dataclass(frozen=True)
class Envelope:
    """
    Persisted record: ``{"message": <payload>, "purpose": <session id>}``.

    ``purpose`` binds the payload to the identifier it was written under,
    so a relocated or swapped record is never attributed to another
    session. This is an association check, not encryption.
    """

    message: Any
    purpose: str

    @classmethod
    def build(cls, message: Any, purpose: str) -> Envelope:
        return cls(message=message, purpose=str(purpose))

    def to_dict(self) -> dict[str, Any]:
        return {"message": self.message, "purpose": self.purpose}

    def to_json(self) -> str:
        """Compact JSON text, field order ``message`` then ``purpose``."""
        return json.dumps(self.to_dict(), separators=(",", ":"), ensure_ascii=False)

    @classmethod
    def verify(cls, text: str | bytes | None, purpose: str) -> Any | None:
        """
        Decode ``text`` and return its message if it belongs to ``purpose``.

        Empty text, invalid JSON, a malformed record and a purpose mismatch
        all return None.
        """
        if not text:
            return None

        if isinstance(text, bytes):
            try:
                text = text.decode("utf-8")
            except UnicodeDecodeError:
                logger.debug("Session envelope is not valid UTF-8, treating as missing")
                return None

        try:
            record = json.loads(text)
        except json.JSONDecodeError as e:
            logger.debug(f"Session envelope is not valid JSON ({e}), treating as missing")
            return None

        if not isinstance(record, dict) or "message" not in record or "purpose" not in record:
            logger.debug("Session envelope is malformed, treating as missing")
            return None

        if record["purpose"] != str(purpose):
            logger.debug("Session envelope purpose mismatch, treating as missing")
            return None

        return record["message"]
