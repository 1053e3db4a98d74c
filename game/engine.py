"""Game engine: pure rules for roles, votes, night resolution and wins."""

import random
from collections import Counter
from dataclasses import dataclass
from typing import Iterable, Mapping, Optional

from game.errors import InsufficientPlayers
from game.rules import SUPPORT_ROLES, Role, Winner
from game.state import NightChoices, Player


@dataclass(frozen=True)
class Verdict:
    """Result of a win check."""

    over: bool
    winner: Optional[Winner] = None


CONTINUE = Verdict(over=False)


@dataclass(frozen=True)
class NightOutcome:
    """What happened during one night."""

    target_id: Optional[str]
    killed_id: Optional[str]
    medic_saved: bool
    killed_name: Optional[str] = None


def assign_roles(
    players: list[Player],
    mafia_count: int,
    rng: Optional[random.Random] = None,
) -> dict[str, Role]:
    """
    Deal roles: shuffle the players, first mafia_count are mafia, then one
    medic, one detective, everyone else villager.
    """
    if mafia_count < 1:
        raise InsufficientPlayers("At least one mafia is required.")
    needed = mafia_count + len(SUPPORT_ROLES)
    if len(players) < needed:
        raise InsufficientPlayers(
            f"Need at least {needed} players for {mafia_count} mafia."
        )

    rng = rng or random.Random()
    order = [p.id for p in players]
    rng.shuffle(order)

    deck = [Role.MAFIA] * mafia_count + list(SUPPORT_ROLES)
    deck.extend([Role.VILLAGER] * (len(order) - len(deck)))
    return dict(zip(order, deck))


def tally_votes(votes: Mapping[str, Optional[str]]) -> Optional[str]:
    """
    Plurality target of the ballots, or None when nobody voted.
    Ties go to the target that reached the top count first, in ballot order.
    """
    counts: Counter = Counter()
    leader: Optional[str] = None
    best = 0
    for target_id in votes.values():
        if not target_id:
            continue
        counts[target_id] += 1
        if counts[target_id] > best:
            best = counts[target_id]
            leader = target_id
    return leader


def evaluate_win(players: Iterable[Player]) -> Verdict:
    """Town wins when no mafia is alive; mafia wins at parity or majority."""
    alive = [p for p in players if p.alive]
    mafia_alive = sum(1 for p in alive if p.role == Role.MAFIA)
    others_alive = len(alive) - mafia_alive
    if mafia_alive == 0:
        return Verdict(over=True, winner=Winner.TOWN)
    if mafia_alive >= others_alive:
        return Verdict(over=True, winner=Winner.MAFIA)
    return CONTINUE


def pick_mafia_fallback(
    players: Iterable[Player],
    rng: Optional[random.Random] = None,
) -> Optional[str]:
    """Random alive non-mafia player id, used when the mafia did not choose in time."""
    candidates = [p.id for p in players if p.alive and p.role != Role.MAFIA]
    if not candidates:
        return None
    rng = rng or random.Random()
    return rng.choice(candidates)


def resolve_night(players: list[Player], choices: NightChoices) -> NightOutcome:
    """Work out the night kill. Does not mutate players."""
    target_id = choices.mafia_target or None
    victim = next((p for p in players if p.id == target_id and p.alive), None) if target_id else None
    # a save only counts against a living seated target
    medic_saved = victim is not None and choices.medic_save == target_id
    killed_id: Optional[str] = None
    killed_name: Optional[str] = None
    if victim is not None and not medic_saved:
        killed_id = victim.id
        killed_name = victim.name
    return NightOutcome(
        target_id=target_id,
        killed_id=killed_id,
        medic_saved=medic_saved,
        killed_name=killed_name,
    )


def build_reveal(players: Iterable[Player]) -> dict[str, dict[str, str]]:
    """End-of-game disclosure: player id -> {name, role}."""
    return {p.id: {"name": p.name, "role": p.role.value} for p in players}
