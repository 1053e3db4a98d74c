"""Game rules and constants for Mafia rooms."""

from enum import Enum


class Role(str, Enum):
    """Player roles in the game."""

    UNASSIGNED = "unassigned"
    MAFIA = "mafia"
    MEDIC = "medic"
    DETECTIVE = "detective"
    VILLAGER = "villager"


class Phase(str, Enum):
    """Current room phase."""

    LOBBY = "lobby"
    NIGHT_MAFIA = "night_mafia"
    NIGHT_MEDIC = "night_medic"
    NIGHT_DETECTIVE = "night_detective"
    NIGHT_RESOLVE = "night_resolve"
    DAY = "day"
    VOTE_RESOLVE = "vote_resolve"
    GAME_END = "game_end"


class Winner(str, Enum):
    """Winning side when the game is over."""

    TOWN = "town"
    MAFIA = "mafia"


# Night sub-phases in order; each one ends on its deadline
NIGHT_PHASES = (Phase.NIGHT_MAFIA, Phase.NIGHT_MEDIC, Phase.NIGHT_DETECTIVE)

# Phases driven by a timer (the rest resolve synchronously)
TIMED_PHASES = NIGHT_PHASES + (Phase.DAY,)

# Role allowed to act in each night sub-phase
PHASE_ROLES = {
    Phase.NIGHT_MAFIA: Role.MAFIA,
    Phase.NIGHT_MEDIC: Role.MEDIC,
    Phase.NIGHT_DETECTIVE: Role.DETECTIVE,
}

# Unique support roles dealt after the mafia
SUPPORT_ROLES = (Role.MEDIC, Role.DETECTIVE)

# Room defaults
DEFAULT_MAFIA_COUNT = 1
MIN_PLAYERS = 4
MAX_PLAYERS = 12
NIGHT_PHASE_MS = 30000
DAY_PHASE_MS = 120000

# Room codes
CODE_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
CODE_LENGTH = 6
