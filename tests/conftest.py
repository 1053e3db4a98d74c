"""Shared fixtures: recording broadcaster, manual deadlines, seeded service."""

import random
from typing import Optional

import pytest

from game.broadcaster import Broadcaster
from game.config import GameConfig
from game.rules import Role
from game.service import GameService


class RecordingBroadcaster(Broadcaster):
    """Keeps every (player_id, event, data) sent, in order."""

    def __init__(self):
        self.sent: list[tuple[str, str, dict]] = []

    async def send_to_player(self, player_id, event):
        self.sent.append((player_id, event.event_name, event.model_dump(by_alias=True)))

    def events(self, name: str, player_id: Optional[str] = None) -> list[dict]:
        return [
            data for pid, ev, data in self.sent
            if ev == name and (player_id is None or pid == player_id)
        ]

    def recipients(self, name: str) -> list[str]:
        return [pid for pid, ev, _ in self.sent if ev == name]

    def clear(self) -> None:
        self.sent.clear()


class ManualTimer:
    def __init__(self, delay_ms, callback, args):
        self.delay_ms = delay_ms
        self.callback = callback
        self.args = args
        self.cancelled = False
        self.fired = False

    def cancel(self):
        self.cancelled = True

    @property
    def live(self) -> bool:
        return not (self.cancelled or self.fired)


class ManualTimers:
    """Deadlines that only elapse when a test fires them."""

    def __init__(self):
        self.scheduled: list[ManualTimer] = []

    def schedule(self, delay_ms, callback, *args):
        timer = ManualTimer(delay_ms, callback, args)
        self.scheduled.append(timer)
        return timer

    def live(self) -> list[ManualTimer]:
        return [t for t in self.scheduled if t.live]

    async def fire(self) -> ManualTimer:
        """Elapse the single live deadline."""
        live = self.live()
        assert len(live) == 1, f"expected one live deadline, found {len(live)}"
        timer = live[0]
        timer.fired = True
        await timer.callback(*timer.args)
        return timer


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def config():
    return GameConfig()


@pytest.fixture
def broadcaster():
    return RecordingBroadcaster()


@pytest.fixture
def timers():
    return ManualTimers()


@pytest.fixture
def service(broadcaster, config, timers):
    return GameService(broadcaster, config=config, rng=random.Random(7), timers=timers)


async def seat_players(service: GameService, count: int, mafia_count: Optional[int] = None):
    """Host p0 creates a room and p1..p{count-1} join. Returns the room."""
    room = await service.create_room("p0", "Player0", mafia_count)
    for i in range(1, count):
        await service.join_room(f"p{i}", f"Player{i}", room.code)
    return room


async def started_room(service: GameService, roles: list[Role]):
    """Room whose players p0..pN get exactly `roles`, already in the first night."""
    room = await seat_players(service, len(roles), mafia_count=roles.count(Role.MAFIA))
    room.apply_roles({f"p{i}": role for i, role in enumerate(roles)})
    async with room.lock:
        await service.scheduler.start(room)
    return room


@pytest.fixture
def seat(service):
    async def _seat(count: int, mafia_count: Optional[int] = None):
        return await seat_players(service, count, mafia_count)
    return _seat


@pytest.fixture
def start_with_roles(service):
    async def _start(roles: list[Role]):
        return await started_room(service, roles)
    return _start
