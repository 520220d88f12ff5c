"""
SessionClient tests: load/merge/flash/commit/destroy lifecycle.
"""

import asyncio
from unittest.mock import AsyncMock

import pytest

from satchel.client import ClientState, SessionClient
from satchel.config import build_session_config
from satchel.core import SessionData
from satchel.drivers import FileDriver, MemoryDriver
from satchel.faults import (
    SessionConfigFault,
    SessionInvalidFault,
    SessionNotLoadedFault,
    SessionStorageFault,
)
from satchel.registry import DriverRegistry


class SlowDriver(MemoryDriver):
    name = "slow"

    async def read(self, session_id):
        await asyncio.sleep(1)
        return None


class BrokenDriver(MemoryDriver):
    name = "broken"

    async def write(self, session_id, payload):
        raise RuntimeError("backend exploded")


# ============================================================================
# Construction
# ============================================================================

class TestConstruction:

    def test_generates_session_id(self):
        client = SessionClient(MemoryDriver())
        assert client.session_id.startswith("sess_")
        assert client.state is ClientState.UNLOADED

    def test_uses_given_session_id(self):
        assert SessionClient(MemoryDriver(), "abc").session_id == "abc"

    def test_session_id_is_read_only(self):
        client = SessionClient(MemoryDriver(), "abc")
        with pytest.raises(AttributeError):
            client.session_id = "other"

    def test_from_config(self, file_config):
        client = SessionClient.from_config(file_config, session_id="abc")
        assert isinstance(client.driver, FileDriver)
        assert client.session_id == "abc"

    def test_from_config_with_registry(self, memory_config):
        registry = DriverRegistry()
        registry.register("memory", lambda config: MemoryDriver(config))
        client = SessionClient.from_config(memory_config, registry)
        assert isinstance(client.driver, MemoryDriver)

    def test_from_config_unknown_driver(self):
        config = build_session_config({"driver": "nope"})
        with pytest.raises(SessionConfigFault):
            SessionClient.from_config(config)


# ============================================================================
# load
# ============================================================================

class TestLoad:

    @pytest.mark.asyncio
    async def test_load_missing_session_is_empty(self):
        client = SessionClient(MemoryDriver(), "abc")
        data = await client.load()

        assert isinstance(data, SessionData)
        assert data.values == {}
        assert data.flash_messages == {}
        assert client.is_loaded

    @pytest.mark.asyncio
    async def test_load_decodes_payload(self):
        await MemoryDriver().write("abc", {"values": {"a": 1}, "flashMessages": {"n": "hi"}})
        client = SessionClient(MemoryDriver(), "abc")

        data = await client.load()
        assert data.values == {"a": 1}
        assert data.flash_messages == {"n": "hi"}
        assert client.values == {"a": 1}
        assert client.flash_messages == {"n": "hi"}

    @pytest.mark.asyncio
    async def test_load_is_idempotent_while_loaded(self):
        driver = MemoryDriver()
        driver.read = AsyncMock(return_value={"values": {"a": 1}})
        client = SessionClient(driver, "abc")

        first = await client.load()
        second = await client.load()

        assert first is second
        driver.read.assert_awaited_once_with("abc")

    @pytest.mark.asyncio
    async def test_load_after_commit_rereads(self):
        driver = MemoryDriver()
        client = SessionClient(driver, "abc")
        await client.load()
        client.merge({"a": 1})
        await client.commit()
        assert client.state is ClientState.COMMITTED

        await driver.write("abc", {"values": {"a": 2}})
        data = await client.load()
        assert data.values == {"a": 2}

    @pytest.mark.asyncio
    async def test_load_file_driver_provisions_placeholder(self, file_config, session_location):
        client = SessionClient(FileDriver(file_config), "abc")
        await client.load()
        assert (session_location / "abc.txt").is_file()


# ============================================================================
# merge / flash / commit
# ============================================================================

class TestMutation:

    @pytest.mark.asyncio
    async def test_merge_commit_then_fresh_client_observes_values(self, file_config):
        client = SessionClient(FileDriver(file_config), "abc")
        await client.load()
        client.merge({"user_id": 42, "cart": [1, 2]})
        await client.commit()

        fresh = SessionClient(FileDriver(file_config), "abc")
        data = await fresh.load()
        assert data.values == {"user_id": 42, "cart": [1, 2]}
        assert data.flash_messages == {}

    @pytest.mark.asyncio
    async def test_flash_commit_then_fresh_client_observes_flash(self):
        client = SessionClient(MemoryDriver(), "abc")
        await client.load()
        client.flash({"notice": "Saved"})
        await client.commit()

        data = await SessionClient(MemoryDriver(), "abc").load()
        assert data.flash_messages == {"notice": "Saved"}
        assert data.values == {}

    @pytest.mark.asyncio
    async def test_merge_is_shallow_over_stored_values(self):
        await MemoryDriver().write("abc", {"values": {"a": 1, "nested": {"x": 1, "y": 2}}})
        client = SessionClient(MemoryDriver(), "abc")
        await client.load()

        client.merge({"nested": {"x": 9}, "b": 2})
        assert client.values == {"a": 1, "nested": {"x": 9}, "b": 2}

    @pytest.mark.asyncio
    async def test_chaining(self):
        client = SessionClient(MemoryDriver(), "abc")
        await client.load()
        assert client.merge({"a": 1}).flash({"b": 2}) is client

    @pytest.mark.asyncio
    async def test_commit_writes_payload(self):
        driver = MemoryDriver()
        client = SessionClient(driver, "abc")
        await client.load()
        client.merge({"a": 1}).flash({"b": 2})
        await client.commit()

        assert await driver.read("abc") == {"values": {"a": 1}, "flashMessages": {"b": 2}}

    @pytest.mark.asyncio
    async def test_no_auto_commit(self):
        client = SessionClient(MemoryDriver(), "abc")
        await client.load()
        client.merge({"a": 1})

        assert await MemoryDriver().read("abc") is None

    @pytest.mark.parametrize("operation", ["merge", "flash"])
    def test_mutation_before_load_is_rejected(self, operation):
        client = SessionClient(MemoryDriver(), "abc")
        with pytest.raises(SessionNotLoadedFault) as exc_info:
            getattr(client, operation)({"a": 1})
        assert exc_info.value.operation == operation
        assert exc_info.value.state == "unloaded"

    @pytest.mark.asyncio
    async def test_commit_before_load_is_rejected(self):
        driver = MemoryDriver()
        driver.write = AsyncMock()
        client = SessionClient(driver, "abc")

        with pytest.raises(SessionNotLoadedFault):
            await client.commit()
        driver.write.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_merge_after_commit_requires_reload(self):
        client = SessionClient(MemoryDriver(), "abc")
        await client.load()
        await client.commit()

        with pytest.raises(SessionNotLoadedFault):
            client.merge({"a": 1})

        await client.load()
        client.merge({"a": 1})
        assert client.values == {"a": 1}


# ============================================================================
# touch / destroy
# ============================================================================

class TestDestroy:

    @pytest.mark.asyncio
    async def test_destroy_removes_record_and_clears_data(self):
        driver = MemoryDriver()
        client = SessionClient(driver, "abc")
        await client.load()
        client.merge({"a": 1})
        await client.commit()

        await client.destroy()

        assert client.state is ClientState.DESTROYED
        assert client.values == {}
        assert await driver.read("abc") is None

    @pytest.mark.asyncio
    async def test_destroy_without_load(self):
        client = SessionClient(MemoryDriver(), "abc")
        await client.destroy()
        await client.destroy()
        assert client.state is ClientState.DESTROYED

    @pytest.mark.asyncio
    async def test_load_after_destroy_is_empty(self, file_config):
        client = SessionClient(FileDriver(file_config), "abc")
        await client.load()
        client.merge({"a": 1})
        await client.commit()
        await client.destroy()

        data = await client.load()
        assert data.values == {}

    @pytest.mark.asyncio
    async def test_touch_delegates(self):
        driver = MemoryDriver()
        driver.touch = AsyncMock()
        await SessionClient(driver, "abc").touch()
        driver.touch.assert_awaited_once_with("abc")


# ============================================================================
# Errors
# ============================================================================

class TestErrors:

    @pytest.mark.asyncio
    async def test_driver_exception_becomes_storage_fault(self):
        client = SessionClient(BrokenDriver(), "abc")
        await client.load()

        with pytest.raises(SessionStorageFault) as exc_info:
            await client.commit()

        fault = exc_info.value
        assert fault.driver == "broken"
        assert fault.operation == "write"
        assert isinstance(fault.__cause__, RuntimeError)
        assert client.state is ClientState.LOADED

    @pytest.mark.asyncio
    async def test_driver_faults_pass_through(self, file_config):
        client = SessionClient(FileDriver(file_config), "../escape")

        with pytest.raises(SessionInvalidFault):
            await client.load()
        assert client.state is ClientState.UNLOADED

    @pytest.mark.asyncio
    async def test_timeout_is_storage_fault(self):
        client = SessionClient(SlowDriver(), "abc", timeout=0.01)

        with pytest.raises(SessionStorageFault) as exc_info:
            await client.load()

        assert exc_info.value.operation == "read"
        assert "timed out" in exc_info.value.cause
        assert client.state is ClientState.UNLOADED
