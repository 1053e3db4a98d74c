"""Room service: handles inbound player actions against the registry."""

import logging
import random
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from game.broadcaster import Broadcaster
from game.config import GameConfig
from game.engine import assign_roles
from game.errors import (
    ActionRejected,
    GameAlreadyStarted,
    InsufficientPlayers,
    NotHost,
    RoleMismatch,
    RoomNotFound,
)
from game.events import (
    ChatBroadcast,
    DetectiveResult,
    JoinedRoom,
    PhaseMessage,
    RoomCreated,
    UpdatePlayers,
    VoteUpdate,
    YourRole,
    lobby_state,
    roster,
)
from game.registry import RoomRegistry
from game.rules import PHASE_ROLES, Phase, Role
from game.scheduler import PhaseScheduler
from game.state import Room

logger = logging.getLogger(__name__)

# Night sub-phase in which each role may act
ROLE_PHASES = {role: phase for phase, role in PHASE_ROLES.items()}


class GameService:
    """
    Entry point for every player action. Each handler locks the target room so
    actions and phase deadlines for one room never interleave.
    Caller-facing failures raise GameError subclasses; the transport decides
    how to report them.
    """

    def __init__(
        self,
        broadcaster: Broadcaster,
        config: Optional[GameConfig] = None,
        rng: Optional[random.Random] = None,
        registry: Optional[RoomRegistry] = None,
        timers=None,
    ):
        self.config = config or GameConfig()
        self.rng = rng or random.Random()
        self.broadcaster = broadcaster
        self.registry = registry or RoomRegistry(self.config, self.rng)
        self.scheduler = PhaseScheduler(self.registry, broadcaster, self.config, self.rng, timers)

    @asynccontextmanager
    async def _locked(self, code: Optional[str]) -> AsyncIterator[Room]:
        room = self.registry.get(code)
        async with room.lock:
            if room.closed:
                raise RoomNotFound()
            yield room

    async def _broadcast_roster(self, room: Room) -> None:
        await self.broadcaster.send_to_room(room, lobby_state(room, UpdatePlayers))
        await self.broadcaster.send_to_room(room, lobby_state(room))

    async def create_room(self, player_id: str, username: str, mafia_count: Optional[int] = None) -> Room:
        room = self.registry.create(player_id, username, mafia_count)
        async with room.lock:
            await self.broadcaster.send_to_player(
                player_id,
                RoomCreated(room_code=room.code, host=room.host_id, players=roster(room)),
            )
            await self.broadcaster.send_to_room(room, lobby_state(room))
        return room

    async def join_room(self, player_id: str, username: str, code: str) -> Room:
        room = self.registry.get(code)
        async with room.lock:
            self.registry.join(code, player_id, username)
            await self._broadcast_roster(room)
            await self.broadcaster.send_to_player(
                player_id, JoinedRoom(room_code=room.code, players=roster(room))
            )
        return room

    async def request_lobby(self, player_id: str, code: str) -> None:
        async with self._locked(code) as room:
            await self.broadcaster.send_to_player(player_id, lobby_state(room))

    async def start_game(self, player_id: str, code: str) -> None:
        """Host only: deal roles and enter the first night."""
        async with self._locked(code) as room:
            if room.host_id != player_id:
                raise NotHost()
            if room.phase != Phase.LOBBY:
                raise GameAlreadyStarted()
            if len(room.players) < room.settings.min_players:
                raise InsufficientPlayers(
                    f"Not enough players to start (need {room.settings.min_players})."
                )
            roles = assign_roles(room.players, room.settings.mafia_count, self.rng)
            room.apply_roles(roles)
            await self.broadcaster.send_to_room(room, lobby_state(room))
            for p in room.players:
                await self.broadcaster.send_to_player(p.id, YourRole(role=p.role.value))
            await self.scheduler.start(room)

    async def mafia_choose(self, player_id: str, code: str, target_id: Optional[str]) -> None:
        await self._night_choice(player_id, code, Role.MAFIA, target_id)

    async def medic_choose(self, player_id: str, code: str, target_id: Optional[str]) -> None:
        await self._night_choice(player_id, code, Role.MEDIC, target_id)

    async def detective_choose(self, player_id: str, code: str, target_id: Optional[str]) -> None:
        await self._night_choice(player_id, code, Role.DETECTIVE, target_id)

    async def _night_choice(self, player_id: str, code: str, role: Role, target_id: Optional[str]) -> None:
        async with self._locked(code) as room:
            player = room.get_player(player_id)
            if player is None:
                raise ActionRejected("You are not in this room.")
            if player.role != role:
                raise RoleMismatch()
            if room.phase != ROLE_PHASES[role]:
                raise ActionRejected(f"The {role.value} cannot act during {room.phase.value}.")
            if not player.alive:
                raise ActionRejected("Eliminated players cannot act.")
            target = room.get_player(target_id)
            if target is None or not target.alive:
                raise ActionRejected("Invalid target.")

            if role == Role.MAFIA:
                room.choices.mafia_target = target.id
            elif role == Role.MEDIC:
                room.choices.medic_save = target.id
            else:
                room.choices.detective_target = target.id
            logger.debug("Room %s: %s chose %s", room.code, role.value, target.id)

            if role == Role.DETECTIVE:
                await self.broadcaster.send_to_player(
                    player_id,
                    DetectiveResult(target_id=target.id, is_mafia=target.role == Role.MAFIA),
                )
            await self.broadcaster.send_to_room(room, PhaseMessage(phase=f"{role.value}_done"))

    async def vote(self, player_id: str, code: str, target_id: Optional[str]) -> None:
        """Record or overwrite a day ballot. A None target is an abstention."""
        async with self._locked(code) as room:
            voter = room.get_player(player_id)
            if voter is None:
                raise ActionRejected("You are not in this room.")
            if room.phase != Phase.DAY:
                raise ActionRejected("Voting is only open during the day.")
            if not voter.alive:
                raise ActionRejected("Eliminated players cannot vote.")
            if target_id is not None:
                target = room.get_player(target_id)
                if target is None or not target.alive:
                    raise ActionRejected("Invalid target.")
            room.votes[player_id] = target_id
            await self.broadcaster.send_to_room(room, VoteUpdate(votes=dict(room.votes)))

    async def chat(self, player_id: str, code: str, text: str) -> None:
        async with self._locked(code) as room:
            sender = room.get_player(player_id)
            if sender is None:
                raise ActionRejected("You are not in this room.")
            await self.broadcaster.send_to_room(room, ChatBroadcast(sender=sender.name, text=text))

    async def disconnect(self, player_id: str) -> None:
        """Remove the player from every room they are seated in."""
        for room in self.registry.rooms_for(player_id):
            async with room.lock:
                if room.closed:
                    continue
                remaining = self.registry.remove_player(room.code, player_id)
                if remaining is not None:
                    await self._broadcast_roster(remaining)

    def shutdown(self) -> None:
        self.scheduler.shutdown()
        self.registry.clear()
