"""Unit tests for the live presence registry."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from src.evaluator.exceptions import PersistenceError


def _status(key: str, online: bool) -> dict:
    return {"event": "member_status_change", "data": {"key": key, "isOnline": online}}


class TestRegister:
    @pytest.mark.asyncio
    async def test_register_broadcasts_online(self, presence, collected):
        assert await presence.register("c1", "m1") is True
        assert presence.online_keys() == {"m1"}
        assert collected.messages == [_status("m1", True)]

    @pytest.mark.asyncio
    async def test_unknown_keys_are_accepted(self, presence):
        await presence.register("c1", "not-in-roster")
        assert presence.online_keys() == {"not-in-roster"}

    @pytest.mark.asyncio
    async def test_key_is_trimmed(self, presence):
        await presence.register("c1", "  m1 ")
        assert presence.key_for("c1") == "m1"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("key", ["", "   ", None])
    async def test_blank_key_is_ignored(self, presence, collected, key):
        assert await presence.register("c1", key) is False
        assert presence.online_keys() == set()
        assert collected.events == []

    @pytest.mark.asyncio
    async def test_reregister_overwrites(self, presence):
        await presence.register("c1", "m1")
        await presence.register("c1", "m2")
        assert presence.online_keys() == {"m2"}


class TestUnregister:
    @pytest.mark.asyncio
    async def test_online_keys_after_unregister(self, presence):
        await presence.register("c1", "A")
        await presence.register("c2", "B")
        await presence.unregister("c1")
        assert presence.online_keys() == {"B"}

    @pytest.mark.asyncio
    async def test_unregister_broadcasts_offline(self, presence, collected):
        await presence.register("c1", "m1")
        assert await presence.unregister("c1") == "m1"
        assert collected.messages[-1] == _status("m1", False)

    @pytest.mark.asyncio
    async def test_unknown_connection_leaves_no_trace(self, presence, collected):
        assert await presence.unregister("never") is None
        assert collected.events == []

    @pytest.mark.asyncio
    async def test_same_key_on_two_connections(self, presence):
        await presence.register("c1", "m1")
        await presence.register("c2", "m1")
        await presence.unregister("c1")
        assert presence.online_keys() == {"m1"}


class TestStartEvaluation:
    @pytest.mark.asyncio
    async def test_admin_connection_broadcasts(self, presence, collected):
        await presence.register("c1", "admin")
        assert await presence.start_evaluation("c1") is True
        assert collected.messages[-1] == {"event": "evaluation_mode_started", "data": {}}

    @pytest.mark.asyncio
    async def test_member_connection_is_silent(self, presence, collected):
        await presence.register("c1", "m1")
        collected.events.clear()
        assert await presence.start_evaluation("c1") is False
        assert collected.events == []

    @pytest.mark.asyncio
    async def test_unknown_key_is_silent(self, presence, collected):
        await presence.register("c1", "ghost")
        collected.events.clear()
        assert await presence.start_evaluation("c1") is False
        assert collected.events == []

    @pytest.mark.asyncio
    async def test_unregistered_connection_is_silent(self, presence, collected, store):
        store.resolve_member = AsyncMock()
        assert await presence.start_evaluation("c9") is False
        store.resolve_member.assert_not_awaited()
        assert collected.events == []

    @pytest.mark.asyncio
    async def test_store_failure_propagates(self, presence, store):
        await presence.register("c1", "admin")
        store.resolve_member = AsyncMock(side_effect=PersistenceError("gone"))
        with pytest.raises(PersistenceError):
            await presence.start_evaluation("c1")
