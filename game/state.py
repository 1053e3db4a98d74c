"""Room state types for Mafia rooms."""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Optional

from game.rules import (
    DEFAULT_MAFIA_COUNT,
    MAX_PLAYERS,
    MIN_PLAYERS,
    Phase,
    Role,
)


@dataclass
class Player:
    """A seated player. Identity is the stable player id, not a connection."""

    id: str
    name: str
    alive: bool = True
    role: Role = Role.UNASSIGNED


@dataclass
class RoomSettings:
    mafia_count: int = DEFAULT_MAFIA_COUNT
    min_players: int = MIN_PLAYERS
    max_players: int = MAX_PLAYERS


@dataclass
class NightChoices:
    """Collected night choices for one cycle (before resolution)."""

    mafia_target: Optional[str] = None
    medic_save: Optional[str] = None
    detective_target: Optional[str] = None

    def reset(self) -> None:
        self.mafia_target = None
        self.medic_save = None
        self.detective_target = None


@dataclass
class Room:
    """One game session."""

    code: str
    host_id: str
    players: list[Player] = field(default_factory=list)
    settings: RoomSettings = field(default_factory=RoomSettings)
    phase: Phase = Phase.LOBBY
    choices: NightChoices = field(default_factory=NightChoices)
    votes: dict[str, Optional[str]] = field(default_factory=dict)  # voter id -> target id, insertion ordered
    timer: Optional[Any] = field(default=None, repr=False, compare=False)  # the single live deadline handle
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False, compare=False)
    closed: bool = False

    def get_player(self, player_id: Optional[str]) -> Optional[Player]:
        """Return player by id or None."""
        for p in self.players:
            if p.id == player_id:
                return p
        return None

    def has_player(self, player_id: Optional[str]) -> bool:
        return self.get_player(player_id) is not None

    def alive_players(self) -> list[Player]:
        """Return list of alive players."""
        return [p for p in self.players if p.alive]

    def is_empty(self) -> bool:
        return not self.players

    def is_full(self) -> bool:
        return len(self.players) >= self.settings.max_players

    def add_player(self, player_id: str, name: str) -> Player:
        player = Player(id=player_id, name=name)
        self.players.append(player)
        return player

    def remove_player(self, player_id: str) -> Optional[Player]:
        """Remove a player; the earliest-joined remaining player becomes host if the host left.

        Ballots cast by or for the leaver are discarded.
        """
        player = self.get_player(player_id)
        if player is None:
            return None
        self.players.remove(player)
        self.votes = {
            voter: target for voter, target in self.votes.items()
            if voter != player_id and target != player_id
        }
        if self.host_id == player_id and self.players:
            self.host_id = self.players[0].id
        return player

    def mark_dead(self, player_id: str) -> Optional[Player]:
        player = self.get_player(player_id)
        if player is not None:
            player.alive = False
        return player

    def apply_roles(self, roles: dict[str, Role]) -> None:
        for p in self.players:
            p.role = roles[p.id]
            p.alive = True

    def reset_night_choices(self) -> None:
        self.choices.reset()

    def reset_votes(self) -> None:
        self.votes = {}

    def cancel_timer(self) -> None:
        """Drop the live deadline handle, cancelling it unless it is the task running now."""
        timer, self.timer = self.timer, None
        if timer is None:
            return
        try:
            current = asyncio.current_task()
        except RuntimeError:
            current = None
        if timer is not current:
            timer.cancel()
