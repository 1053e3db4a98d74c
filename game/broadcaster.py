"""Outbound sink the room core calls to notify clients."""

from abc import ABC, abstractmethod

from game.events import OutboundEvent
from game.state import Room


class Broadcaster(ABC):
    """Delivers events to players. Delivery reliability belongs to the transport."""

    @abstractmethod
    async def send_to_player(self, player_id: str, event: OutboundEvent) -> None:
        """Send one event privately to a player."""

    async def send_to_room(self, room: Room, event: OutboundEvent) -> None:
        """Send one event to every current player of a room, in join order."""
        for player in list(room.players):
            await self.send_to_player(player.id, event)
