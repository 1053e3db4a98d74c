"""Error kinds raised by the room core."""


class GameError(Exception):
    """Base error; the message is safe to show to the acting player."""

    message = "Something went wrong."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)
        self.message = message or self.message


class RoomNotFound(GameError):
    message = "Invalid room code."


class RoomFull(GameError):
    message = "Room full."


class NotHost(GameError):
    message = "Only the host can start the game."


class InsufficientPlayers(GameError):
    message = "Not enough players to start."


class GameAlreadyStarted(GameError):
    message = "Game already started."


class ActionRejected(GameError):
    """Action dropped without telling the player (wrong phase, dead actor, bad target)."""

    message = "Action not allowed right now."


class RoleMismatch(ActionRejected):
    message = "Your role cannot do that."
