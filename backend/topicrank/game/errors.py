"""
Game errors.

Every rejected action raises one of these before any room state is touched.
The realtime and HTTP layers turn them into a warning for the acting client.
"""


class GameError(Exception):
    """Base class for all rejected actions."""

    code = "game_error"

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code


# ============ Input ============

class ValidationError(GameError):
    """Malformed or disallowed input (names, entries, payload shapes)."""

    code = "invalid_payload"


class NameTaken(ValidationError):
    code = "name_taken"

    def __init__(self, name: str):
        self.name = name
        super().__init__("Name already taken in this room.")


# ============ Identity / role ============

class AuthorizationError(GameError):
    """The acting player's role or identity may not perform the action."""

    code = "not_allowed"


# ============ Room state ============

class PreconditionError(GameError):
    """Valid request, but the room is not ready for it."""

    code = "precondition_failed"


class RoomFull(PreconditionError):
    code = "room_full"

    def __init__(self, room_code: str):
        self.room_code = room_code
        super().__init__("Room is full.")


class DuplicateSubmission(GameError):
    """Second guess or ranking by the same player in one round."""

    code = "duplicate_submission"


class RoomNotFound(GameError):
    code = "room_not_found"

    def __init__(self, room_code: str):
        self.room_code = room_code
        super().__init__("Room not found.")
