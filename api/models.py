"""Pydantic models for inbound WebSocket actions and HTTP responses."""

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from game.events import PlayerPublic

# Validation constants (no magic numbers in validation)
MAX_PLAYER_NAME_LENGTH = 50
MAX_ROOM_CODE_LENGTH = 16
MAX_CHAT_LENGTH = 500


class Action(BaseModel):
    """Base for inbound actions; wire field names are camelCase."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class RoomAction(Action):
    room_code: str = Field(..., alias="roomCode", min_length=1, max_length=MAX_ROOM_CODE_LENGTH)


class TargetAction(RoomAction):
    target_id: Optional[str] = Field(default=None, alias="targetId")


class CreateRoom(Action):
    event: Literal["createRoom"]
    username: str = Field(..., min_length=1, max_length=MAX_PLAYER_NAME_LENGTH)
    mafia_count: Optional[int] = Field(default=None, alias="mafiaCount", ge=1)


class JoinRoom(RoomAction):
    event: Literal["joinRoom"]
    username: str = Field(..., min_length=1, max_length=MAX_PLAYER_NAME_LENGTH)


class RequestLobby(RoomAction):
    event: Literal["requestLobby"]


class StartGame(RoomAction):
    event: Literal["startGame"]


class MafiaChoose(TargetAction):
    event: Literal["mafiaChoose"]


class MedicChoose(TargetAction):
    event: Literal["medicChoose"]


class DetectiveChoose(TargetAction):
    event: Literal["detectiveChoose"]


class Vote(TargetAction):
    event: Literal["vote"]


class ChatMessage(RoomAction):
    event: Literal["chatMessage"]
    text: str = Field(..., min_length=1, max_length=MAX_CHAT_LENGTH)


InboundAction = Annotated[
    Union[
        CreateRoom,
        JoinRoom,
        RequestLobby,
        StartGame,
        MafiaChoose,
        MedicChoose,
        DetectiveChoose,
        Vote,
        ChatMessage,
    ],
    Field(discriminator="event"),
]

_action_adapter = TypeAdapter(InboundAction)


def parse_action(raw: Union[str, bytes]) -> InboundAction:
    """Validate one JSON frame into an action variant. Raises pydantic.ValidationError."""
    return _action_adapter.validate_json(raw)


class RoomSnapshot(BaseModel):
    """Public room state for GET /rooms/{code}."""

    code: str
    host: str
    phase: str
    players: list[PlayerPublic]
    mafia_count: int
    min_players: int
    max_players: int
