"""In-memory room registry: room code -> Room."""

import logging
import random
import threading
from typing import Optional

from game.config import GameConfig
from game.errors import GameAlreadyStarted, InsufficientPlayers, RoomFull, RoomNotFound
from game.rules import CODE_ALPHABET, Phase
from game.state import Room, RoomSettings

logger = logging.getLogger(__name__)


class RoomRegistry:
    """Owns every live room. Create/delete are serialized against lookups."""

    def __init__(self, config: Optional[GameConfig] = None, rng: Optional[random.Random] = None):
        self.config = config or GameConfig()
        self._rng = rng or random.Random()
        self._rooms: dict[str, Room] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._rooms)

    def __contains__(self, code: str) -> bool:
        return code in self._rooms

    def _generate_code(self) -> str:
        # caller holds self._lock
        while True:
            code = "".join(self._rng.choice(CODE_ALPHABET) for _ in range(self.config.code_length))
            if code not in self._rooms:
                return code
            logger.debug("Room code %s already live; regenerating", code)

    def create(self, host_id: str, host_name: str, mafia_count: Optional[int] = None) -> Room:
        """Create a room with the creator seated as host."""
        settings = RoomSettings(
            mafia_count=mafia_count or self.config.mafia_count,
            min_players=self.config.min_players,
            max_players=self.config.max_players,
        )
        if settings.mafia_count + 2 > settings.max_players:
            raise InsufficientPlayers(
                f"{settings.mafia_count} mafia need at least {settings.mafia_count + 2} players "
                f"(room holds {settings.max_players})."
            )
        with self._lock:
            code = self._generate_code()
            room = Room(code=code, host_id=host_id, settings=settings)
            room.add_player(host_id, host_name)
            self._rooms[code] = room
        logger.info("Room %s created by %s (mafia=%d)", code, host_id, settings.mafia_count)
        return room

    def find(self, code: Optional[str]) -> Optional[Room]:
        if code is None:
            return None
        with self._lock:
            return self._rooms.get(code)

    def get(self, code: Optional[str]) -> Room:
        """Return the live room or raise RoomNotFound."""
        room = self.find(code)
        if room is None:
            raise RoomNotFound()
        return room

    def join(self, code: str, player_id: str, name: str) -> Room:
        """Seat a player in a lobby. Joining twice with the same id is a no-op."""
        room = self.get(code)
        if room.has_player(player_id):
            return room
        if room.phase != Phase.LOBBY:
            raise GameAlreadyStarted()
        if room.is_full():
            raise RoomFull()
        room.add_player(player_id, name)
        logger.info("%s joined room %s (%d players)", player_id, code, len(room.players))
        return room

    def remove_player(self, code: str, player_id: str) -> Optional[Room]:
        """
        Remove a player. Returns the room, or None when it was destroyed
        because nobody is left (or it did not exist).
        """
        room = self.find(code)
        if room is None:
            return None
        removed = room.remove_player(player_id)
        if removed is not None:
            logger.info("%s left room %s", player_id, code)
        if room.is_empty():
            self.delete(code)
            return None
        return room

    def rooms_for(self, player_id: str) -> list[Room]:
        """Every live room the player is seated in."""
        with self._lock:
            rooms = list(self._rooms.values())
        return [r for r in rooms if r.has_player(player_id)]

    def delete(self, code: str) -> None:
        """Destroy a room; its pending deadline will never fire."""
        with self._lock:
            room = self._rooms.pop(code, None)
        if room is None:
            return
        room.closed = True
        room.cancel_timer()
        logger.info("Room %s destroyed", code)

    def codes(self) -> list[str]:
        with self._lock:
            return list(self._rooms.keys())

    def clear(self) -> None:
        for code in self.codes():
            self.delete(code)
