"""Phase scheduler: drives one room through the night/day cycle on deadlines.

Every timed phase (the three night sub-phases and the day vote) lasts its
full duration; submitted choices are recorded but never end a phase early.
Each room holds one current phase and at most one live deadline handle. A
deadline carries the phase it was scheduled for and is ignored if the room
has since been destroyed or moved on.
"""

import logging
import random
from typing import Any, Optional

from game.broadcaster import Broadcaster
from game.config import GameConfig
from game.engine import (
    Verdict,
    build_reveal,
    evaluate_win,
    pick_mafia_fallback,
    resolve_night,
    tally_votes,
)
from game.events import GameEnd, NightResult, PhaseMessage, PlayerKilled, VoteResult
from game.registry import RoomRegistry
from game.rules import Phase
from game.state import Room
from game.timers import AsyncioTimers

logger = logging.getLogger(__name__)


class PhaseScheduler:
    def __init__(
        self,
        registry: RoomRegistry,
        broadcaster: Broadcaster,
        config: Optional[GameConfig] = None,
        rng: Optional[random.Random] = None,
        timers: Optional[Any] = None,
    ):
        self._registry = registry
        self._broadcaster = broadcaster
        self._config = config or registry.config
        self._rng = rng or random.Random()
        self._timers = timers or AsyncioTimers()

    def duration_ms(self, phase: Phase) -> int:
        if phase == Phase.DAY:
            return self._config.day_phase_ms
        return self._config.night_phase_ms

    async def start(self, room: Room) -> None:
        """Enter the first night. Caller holds room.lock."""
        logger.info("Room %s: game started with %d players", room.code, len(room.players))
        await self._enter_night(room)

    async def on_deadline(self, code: str, phase: Phase) -> None:
        """Deadline for `phase` in room `code` elapsed (or is being fast-forwarded)."""
        room = self._registry.find(code)
        if room is None:
            logger.debug("Deadline %s for destroyed room %s ignored", phase.value, code)
            return
        async with room.lock:
            if room.closed or room.phase != phase:
                logger.debug("Stale deadline %s for room %s (now %s)", phase.value, code, room.phase.value)
                return
            room.cancel_timer()

            if phase == Phase.NIGHT_MAFIA:
                if not room.choices.mafia_target:
                    room.choices.mafia_target = pick_mafia_fallback(room.players, self._rng)
                    logger.info("Room %s: mafia did not choose; random target %s", code, room.choices.mafia_target)
                await self._enter_timed_phase(room, Phase.NIGHT_MEDIC)
            elif phase == Phase.NIGHT_MEDIC:
                await self._enter_timed_phase(room, Phase.NIGHT_DETECTIVE)
            elif phase == Phase.NIGHT_DETECTIVE:
                await self._resolve_night(room)
            elif phase == Phase.DAY:
                await self._resolve_vote(room)

    async def _enter_night(self, room: Room) -> None:
        room.reset_night_choices()
        room.reset_votes()
        await self._enter_timed_phase(room, Phase.NIGHT_MAFIA)

    async def _enter_timed_phase(self, room: Room, phase: Phase) -> None:
        room.cancel_timer()
        room.phase = phase
        timeout_ms = self.duration_ms(phase)
        room.timer = self._timers.schedule(timeout_ms, self.on_deadline, room.code, phase)
        logger.info("Room %s: %s (%d ms)", room.code, phase.value, timeout_ms)
        await self._broadcaster.send_to_room(room, PhaseMessage(phase=phase.value, timeout_ms=timeout_ms))

    async def _resolve_night(self, room: Room) -> None:
        room.phase = Phase.NIGHT_RESOLVE
        outcome = resolve_night(room.players, room.choices)
        if outcome.killed_id:
            room.mark_dead(outcome.killed_id)
        logger.info(
            "Room %s: night target=%s saved=%s killed=%s",
            room.code, outcome.target_id, outcome.medic_saved, outcome.killed_id,
        )
        await self._broadcaster.send_to_room(
            room,
            NightResult(
                killed_id=outcome.killed_id,
                medic_saved=outcome.medic_saved,
                killed_name=outcome.killed_name,
            ),
        )
        if outcome.killed_id:
            await self._broadcaster.send_to_player(outcome.killed_id, PlayerKilled(you=True))

        verdict = evaluate_win(room.players)
        if verdict.over:
            await self._end_game(room, verdict)
            return
        room.reset_votes()
        await self._enter_timed_phase(room, Phase.DAY)

    async def _resolve_vote(self, room: Room) -> None:
        room.phase = Phase.VOTE_RESOLVE
        lynched_id = tally_votes(room.votes)
        victim = room.get_player(lynched_id)
        if victim is not None and victim.alive:
            room.mark_dead(victim.id)
            logger.info("Room %s: %s lynched", room.code, victim.id)
            await self._broadcaster.send_to_room(room, VoteResult(lynched=True, reveal=victim.name))
        else:
            logger.info("Room %s: no one lynched", room.code)
            await self._broadcaster.send_to_room(room, VoteResult(lynched=False))

        verdict = evaluate_win(room.players)
        if verdict.over:
            await self._end_game(room, verdict)
            return
        await self._enter_night(room)

    async def _end_game(self, room: Room, verdict: Verdict) -> None:
        room.phase = Phase.GAME_END
        room.cancel_timer()
        logger.info("Room %s: game over, %s wins", room.code, verdict.winner.value)
        await self._broadcaster.send_to_room(
            room,
            GameEnd(winner=verdict.winner.value, reveal=build_reveal(room.players)),
        )
        self._registry.delete(room.code)

    def shutdown(self) -> None:
        """Cancel every live deadline."""
        for code in self._registry.codes():
            room = self._registry.find(code)
            if room is not None:
                room.cancel_timer()
