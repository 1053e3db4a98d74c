"""Outbound events sent to clients."""

from typing import Any, ClassVar, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from game.state import Player, Room


class OutboundEvent(BaseModel):
    """Base for every event; wire keys are camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    event_name: ClassVar[str] = ""

    def to_message(self) -> dict[str, Any]:
        return {"event": self.event_name, "data": self.model_dump(by_alias=True)}


class PlayerPublic(BaseModel):
    """Player as shown to clients: role only revealed when dead."""

    id: str
    name: str
    alive: bool
    role: Optional[str] = Field(default=None, description="Only set when not alive (revealed on death)")


class LobbyState(OutboundEvent):
    event_name: ClassVar[str] = "lobbyState"

    code: str
    host: str
    phase: str
    players: list[PlayerPublic]


class UpdatePlayers(LobbyState):
    event_name: ClassVar[str] = "updatePlayers"


class RoomCreated(OutboundEvent):
    event_name: ClassVar[str] = "roomCreated"

    room_code: str
    host: str
    players: list[PlayerPublic]


class JoinedRoom(OutboundEvent):
    event_name: ClassVar[str] = "joinedRoom"

    room_code: str
    players: list[PlayerPublic]


class YourRole(OutboundEvent):
    event_name: ClassVar[str] = "yourRole"

    role: str


class PhaseMessage(OutboundEvent):
    event_name: ClassVar[str] = "phaseMessage"

    phase: str
    timeout_ms: Optional[int] = None


class DetectiveResult(OutboundEvent):
    event_name: ClassVar[str] = "detectiveResult"

    target_id: str
    is_mafia: bool


class NightResult(OutboundEvent):
    event_name: ClassVar[str] = "nightResult"

    killed_id: Optional[str] = None
    medic_saved: bool = False
    killed_name: Optional[str] = None


class PlayerKilled(OutboundEvent):
    event_name: ClassVar[str] = "playerKilled"

    you: bool = True


class VoteUpdate(OutboundEvent):
    event_name: ClassVar[str] = "voteUpdate"

    votes: dict[str, Optional[str]]


class VoteResult(OutboundEvent):
    event_name: ClassVar[str] = "voteResult"

    lynched: bool
    reveal: Optional[str] = Field(default=None, description="Name of the lynched player")


class GameEnd(OutboundEvent):
    event_name: ClassVar[str] = "gameEnd"

    winner: str
    reveal: dict[str, dict[str, str]]


class ChatBroadcast(OutboundEvent):
    event_name: ClassVar[str] = "chatMessage"

    sender: str = Field(alias="from")
    text: str


class ErrorMessage(OutboundEvent):
    event_name: ClassVar[str] = "errorMessage"

    text: str


class Connected(OutboundEvent):
    event_name: ClassVar[str] = "connected"

    player_id: str


def player_to_public(player: Player) -> PlayerPublic:
    return PlayerPublic(
        id=player.id,
        name=player.name,
        alive=player.alive,
        role=None if player.alive else player.role.value,
    )


def roster(room: Room) -> list[PlayerPublic]:
    return [player_to_public(p) for p in room.players]


def lobby_state(room: Room, event_cls: type[LobbyState] = LobbyState) -> LobbyState:
    """Roster/phase snapshot of a room."""
    return event_cls(
        code=room.code,
        host=room.host_id,
        phase=room.phase.value,
        players=roster(room),
    )
