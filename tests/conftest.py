"""
Shared test fixtures for the Satchel test suite.
"""

import pytest

from satchel.config import SessionConfig, build_session_config
from satchel.drivers.memory import MemoryDriver


@pytest.fixture(autouse=True)
def clear_memory_sessions():
    """The memory driver store is process-wide; isolate every test."""
    MemoryDriver.clear()
    yield
    MemoryDriver.clear()


@pytest.fixture
def session_location(tmp_path):
    return tmp_path / "sessions"


@pytest.fixture
def file_config(session_location) -> SessionConfig:
    """Session config pointing the file driver at a temp directory."""
    return build_session_config({
        "driver": "file",
        "age": 1000,
        "cookieName": "satchel-session",
        "clearWithBrowser": False,
        "enabled": True,
        "cookie": {},
        "file": {"location": str(session_location)},
    })


@pytest.fixture
def memory_config() -> SessionConfig:
    return build_session_config({"driver": "memory"})
