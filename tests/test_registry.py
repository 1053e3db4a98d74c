"""Tests for the room registry."""

import random

import pytest

from game.config import GameConfig
from game.errors import GameAlreadyStarted, InsufficientPlayers, RoomFull, RoomNotFound
from game.registry import RoomRegistry
from game.rules import CODE_ALPHABET, Phase, Role


class _ScriptedRng:
    """choice() walks a fixed string, one character per call."""

    def __init__(self, chars: str):
        self._chars = iter(chars)

    def choice(self, seq):
        return next(self._chars)


class _Handle:
    cancelled = False

    def cancel(self):
        self.cancelled = True


def test_create_room_code_shape():
    registry = RoomRegistry(rng=random.Random(1))
    room = registry.create("h", "Host")
    assert len(room.code) == 6
    assert all(c in CODE_ALPHABET for c in room.code)
    assert room.host_id == "h"
    assert [p.id for p in room.players] == ["h"]
    assert room.players[0].role == Role.UNASSIGNED
    assert room.phase == Phase.LOBBY
    assert room.code in registry


def test_create_room_settings_defaults_and_override():
    registry = RoomRegistry(GameConfig(max_players=10))
    room = registry.create("h", "Host")
    assert room.settings.mafia_count == 1
    assert room.settings.min_players == 4
    assert room.settings.max_players == 10
    assert registry.create("h2", "Host2", mafia_count=3).settings.mafia_count == 3


def test_create_room_regenerates_on_collision():
    registry = RoomRegistry(rng=_ScriptedRng("AAAAAA" + "AAAAAA" + "BBBBBB"))
    first = registry.create("h1", "One")
    second = registry.create("h2", "Two")
    assert first.code == "AAAAAA"
    assert second.code == "BBBBBB"
    assert len(registry) == 2


def test_get_unknown_room_raises():
    registry = RoomRegistry()
    with pytest.raises(RoomNotFound):
        registry.get("NOPE00")
    assert registry.find("NOPE00") is None


def test_join_appends_in_order():
    registry = RoomRegistry()
    room = registry.create("h", "Host")
    registry.join(room.code, "a", "Ann")
    registry.join(room.code, "b", "Ben")
    assert [p.id for p in room.players] == ["h", "a", "b"]
    assert all(p.alive and p.role == Role.UNASSIGNED for p in room.players)


def test_join_twice_is_noop():
    registry = RoomRegistry()
    room = registry.create("h", "Host")
    registry.join(room.code, "a", "Ann")
    registry.join(room.code, "a", "Ann")
    assert [p.id for p in room.players] == ["h", "a"]


def test_join_unknown_room():
    with pytest.raises(RoomNotFound):
        RoomRegistry().join("ZZZZZZ", "a", "Ann")


def test_join_full_room():
    registry = RoomRegistry(GameConfig(min_players=2, max_players=2))
    room = registry.create("h", "Host")
    registry.join(room.code, "a", "Ann")
    with pytest.raises(RoomFull):
        registry.join(room.code, "b", "Ben")
    assert len(room.players) == 2


def test_join_started_room():
    registry = RoomRegistry()
    room = registry.create("h", "Host")
    room.phase = Phase.NIGHT_MAFIA
    with pytest.raises(GameAlreadyStarted):
        registry.join(room.code, "a", "Ann")


def test_host_leaves_transfers_to_earliest_joined():
    registry = RoomRegistry()
    room = registry.create("h", "Host")
    registry.join(room.code, "a", "Ann")
    registry.join(room.code, "b", "Ben")
    remaining = registry.remove_player(room.code, "h")
    assert remaining is room
    assert room.host_id == "a"
    assert [p.id for p in room.players] == ["a", "b"]


def test_non_host_leaves_keeps_host():
    registry = RoomRegistry()
    room = registry.create("h", "Host")
    registry.join(room.code, "a", "Ann")
    registry.remove_player(room.code, "a")
    assert room.host_id == "h"


def test_last_player_leaving_destroys_room_and_timer():
    registry = RoomRegistry()
    room = registry.create("h", "Host")
    handle = _Handle()
    room.timer = handle
    assert registry.remove_player(room.code, "h") is None
    assert room.code not in registry
    assert room.closed
    assert handle.cancelled
    assert room.timer is None


def test_rooms_for_player():
    registry = RoomRegistry()
    r1 = registry.create("h1", "One")
    r2 = registry.create("h2", "Two")
    registry.join(r2.code, "h1", "One")
    assert {r.code for r in registry.rooms_for("h1")} == {r1.code, r2.code}
    assert registry.rooms_for("nobody") == []


def test_clear_destroys_everything():
    registry = RoomRegistry()
    registry.create("h1", "One")
    registry.create("h2", "Two")
    registry.clear()
    assert len(registry) == 0
    assert registry.codes() == []


def test_create_room_mafia_count_beyond_capacity():
    registry = RoomRegistry(GameConfig(max_players=6))
    with pytest.raises(InsufficientPlayers):
        registry.create("h", "Host", mafia_count=5)
    assert len(registry) == 0


def test_create_room_large_mafia_count_fits_default_capacity():
    registry = RoomRegistry()
    room = registry.create("h", "Host", mafia_count=5)
    assert room.settings.mafia_count == 5
