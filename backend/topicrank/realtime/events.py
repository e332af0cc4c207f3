"""Inbound Socket.IO actions.

Each event name maps to one frozen dataclass. ``from_payload`` checks the
payload shape and raises ``ValidationError`` so malformed messages never
reach the state machine.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar

from ..game.errors import ValidationError
from ..game.validation import is_alphanumeric


def _require_dict(data: Any) -> dict:
    if not isinstance(data, dict):
        raise ValidationError("Invalid payload.", "invalid_payload")
    return data


def _room_code(data: dict) -> str:
    code = data.get("roomCode")
    if not isinstance(code, str) or not is_alphanumeric(code.strip()):
        raise ValidationError("Invalid room code.", "invalid_room")
    return code.strip().upper()


def _optional_str(data: dict, key: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"'{key}' must be a string.", "invalid_payload")
    return value.strip() or None


def _required_str(data: dict, key: str) -> str:
    value = _optional_str(data, key)
    if value is None:
        raise ValidationError(f"'{key}' is required.", "invalid_payload")
    return value


def _str_list(data: dict, key: str) -> list[str]:
    value = data.get(key)
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValidationError(f"'{key}' must be a list of strings.", "invalid_payload")
    return list(value)


@dataclass(frozen=True)
class JoinGameRoom:
    event: ClassVar[str] = "joinGameRoom"
    room_code: str
    player_name: str

    @classmethod
    def from_payload(cls, data: Any) -> "JoinGameRoom":
        data = _require_dict(data)
        return cls(room_code=_room_code(data), player_name=_required_str(data, "playerName"))


@dataclass(frozen=True)
class SetRole:
    event: ClassVar[str] = "setRole"
    room_code: str
    role: str
    player_name: str | None = None

    @classmethod
    def from_payload(cls, data: Any) -> "SetRole":
        data = _require_dict(data)
        return cls(
            room_code=_room_code(data),
            role=_required_str(data, "role"),
            player_name=_optional_str(data, "playerName"),
        )


@dataclass(frozen=True)
class StartGame:
    event: ClassVar[str] = "startGame"
    room_code: str
    round_limit: int | None = None

    @classmethod
    def from_payload(cls, data: Any) -> "StartGame":
        data = _require_dict(data)
        limit = data.get("roundLimit")
        if limit is not None and (isinstance(limit, bool) or not isinstance(limit, int)):
            raise ValidationError("'roundLimit' must be a number.", "invalid_rounds")
        return cls(room_code=_room_code(data), round_limit=limit)


@dataclass(frozen=True)
class SubmitEntry:
    event: ClassVar[str] = "submitEntry"
    room_code: str
    entry: str
    player_name: str | None = None

    @classmethod
    def from_payload(cls, data: Any) -> "SubmitEntry":
        data = _require_dict(data)
        entry = data.get("entry", data.get("text"))
        if not isinstance(entry, str):
            raise ValidationError("Entry must be alphanumeric.", "invalid_entry")
        return cls(
            room_code=_room_code(data),
            entry=entry,
            player_name=_optional_str(data, "playerName"),
        )


@dataclass(frozen=True)
class StartRankingPhase:
    event: ClassVar[str] = "startRankingPhase"
    room_code: str
    judge_name: str | None = None

    @classmethod
    def from_payload(cls, data: Any) -> "StartRankingPhase":
        data = _require_dict(data)
        return cls(room_code=_room_code(data), judge_name=_optional_str(data, "judgeName"))


@dataclass(frozen=True)
class SubmitRanking:
    event: ClassVar[str] = "submitRanking"
    room_code: str
    ranking: list[str]

    @classmethod
    def from_payload(cls, data: Any) -> "SubmitRanking":
        data = _require_dict(data)
        return cls(room_code=_room_code(data), ranking=_str_list(data, "ranking"))


@dataclass(frozen=True)
class RequestEntries:
    event: ClassVar[str] = "requestEntries"
    room_code: str

    @classmethod
    def from_payload(cls, data: Any) -> "RequestEntries":
        return cls(room_code=_room_code(_require_dict(data)))


@dataclass(frozen=True)
class SubmitGuess:
    event: ClassVar[str] = "submitGuess"
    room_code: str
    guess: list[str]
    player_name: str | None = None

    @classmethod
    def from_payload(cls, data: Any) -> "SubmitGuess":
        data = _require_dict(data)
        return cls(
            room_code=_room_code(data),
            guess=_str_list(data, "guess"),
            player_name=_optional_str(data, "playerName"),
        )


@dataclass(frozen=True)
class RestartGame:
    event: ClassVar[str] = "restartGame"
    room_code: str

    @classmethod
    def from_payload(cls, data: Any) -> "RestartGame":
        return cls(room_code=_room_code(_require_dict(data)))


ACTIONS: dict[str, type] = {
    cls.event: cls
    for cls in (
        JoinGameRoom,
        SetRole,
        StartGame,
        SubmitEntry,
        StartRankingPhase,
        SubmitRanking,
        RequestEntries,
        SubmitGuess,
        RestartGame,
    )
}


def parse_action(event: str, data: Any):
    cls = ACTIONS.get(event)
    if cls is None:
        raise ValidationError(f"Unknown action: {event}", "unknown_action")
    return cls.from_payload(data)
