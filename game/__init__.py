"""Room core for Mafia: roles, votes, wins, and the timed phase cycle."""

from game.engine import (
    CONTINUE,
    NightOutcome,
    Verdict,
    assign_roles,
    build_reveal,
    evaluate_win,
    pick_mafia_fallback,
    resolve_night,
    tally_votes,
)
from game.rules import Role, Phase, Winner
from game.state import Player, Room, RoomSettings, NightChoices
from game.broadcaster import Broadcaster
from game.config import GameConfig
from game.registry import RoomRegistry
from game.scheduler import PhaseScheduler
from game.service import GameService

__all__ = [
    "CONTINUE",
    "NightOutcome",
    "Verdict",
    "assign_roles",
    "build_reveal",
    "evaluate_win",
    "pick_mafia_fallback",
    "resolve_night",
    "tally_votes",
    "Role",
    "Phase",
    "Winner",
    "Player",
    "Room",
    "RoomSettings",
    "NightChoices",
    "Broadcaster",
    "GameConfig",
    "RoomRegistry",
    "PhaseScheduler",
    "GameService",
]
