"""Room configuration and environment loading."""

import os
from dataclasses import dataclass

from game.rules import (
    CODE_LENGTH,
    DAY_PHASE_MS,
    DEFAULT_MAFIA_COUNT,
    MAX_PLAYERS,
    MIN_PLAYERS,
    NIGHT_PHASE_MS,
)

# Env var names
ENV_DEFAULT_MAFIA_COUNT = "MAFIA_DEFAULT_MAFIA_COUNT"
ENV_MIN_PLAYERS = "MAFIA_MIN_PLAYERS"
ENV_MAX_PLAYERS = "MAFIA_MAX_PLAYERS"
ENV_NIGHT_PHASE_MS = "MAFIA_NIGHT_PHASE_MS"
ENV_DAY_PHASE_MS = "MAFIA_DAY_PHASE_MS"
ENV_REPORT_REJECTED_ACTIONS = "MAFIA_REPORT_REJECTED_ACTIONS"

_TRUE_VALUES = ("1", "true", "yes", "on")


@dataclass(frozen=True)
class GameConfig:
    """Defaults applied to every new room plus phase durations."""

    mafia_count: int = DEFAULT_MAFIA_COUNT
    min_players: int = MIN_PLAYERS
    max_players: int = MAX_PLAYERS
    night_phase_ms: int = NIGHT_PHASE_MS
    day_phase_ms: int = DAY_PHASE_MS
    code_length: int = CODE_LENGTH
    # Send errorMessage for dropped night actions/votes instead of ignoring them
    report_rejected_actions: bool = False

    def __post_init__(self):
        if self.min_players < 1 or self.max_players < self.min_players:
            raise ValueError(
                f"invalid player bounds: min_players={self.min_players}, max_players={self.max_players}"
            )
        if self.night_phase_ms <= 0 or self.day_phase_ms <= 0:
            raise ValueError("phase durations must be positive")

    @classmethod
    def from_env(cls) -> "GameConfig":
        """Build config from MAFIA_* env vars; unset vars keep the defaults."""
        return cls(
            mafia_count=_env_int(ENV_DEFAULT_MAFIA_COUNT, DEFAULT_MAFIA_COUNT),
            min_players=_env_int(ENV_MIN_PLAYERS, MIN_PLAYERS),
            max_players=_env_int(ENV_MAX_PLAYERS, MAX_PLAYERS),
            night_phase_ms=_env_int(ENV_NIGHT_PHASE_MS, NIGHT_PHASE_MS),
            day_phase_ms=_env_int(ENV_DAY_PHASE_MS, DAY_PHASE_MS),
            report_rejected_actions=_env_bool(ENV_REPORT_REJECTED_ACTIONS, False),
        )


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if not raw:
        return default
    return raw.strip().lower() in _TRUE_VALUES
