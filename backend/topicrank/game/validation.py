from __future__ import annotations

import re
from typing import Any, Iterable

from ..config import Config
from .errors import ValidationError


_ALNUM = re.compile(r"[A-Za-z0-9]+")
_WHITESPACE = re.compile(r"\s+")

ROLES = ("player", "spectator")


def is_alphanumeric(text: str) -> bool:
    return isinstance(text, str) and _ALNUM.fullmatch(text) is not None


def validate_name(name: Any, max_length: int | None = None) -> str:
    limit = max_length or Config.NAME_MAX_LENGTH
    if not isinstance(name, str) or not is_alphanumeric(name):
        raise ValidationError("Name must be alphanumeric.", "invalid_name")
    if len(name) > limit:
        raise ValidationError(f"Name must be at most {limit} characters.", "invalid_name")
    return name


def validate_entry_text(text: Any) -> str:
    if not isinstance(text, str) or not text.strip():
        raise ValidationError("Entry must be alphanumeric.", "invalid_entry")
    if not is_alphanumeric(_WHITESPACE.sub("", text)):
        raise ValidationError("Entry must be alphanumeric.", "invalid_entry")
    return text.strip()


def validate_ordering(values: Any, allowed: Iterable[str], what: str = "ranking") -> list[str]:
    """Check an ordered submission: distinct strings, all drawn from ``allowed``."""
    if not isinstance(values, list) or not values:
        raise ValidationError(f"The {what} must be a non-empty list.", f"invalid_{what}")
    pool = set(allowed)
    seen: set[str] = set()
    for v in values:
        if not isinstance(v, str):
            raise ValidationError(f"The {what} may only contain entries.", f"invalid_{what}")
        if v not in pool:
            raise ValidationError(f"Unknown entry in {what}: {v}", f"invalid_{what}")
        if v in seen:
            raise ValidationError(f"Duplicate entry in {what}: {v}", f"invalid_{what}")
        seen.add(v)
    return list(values)


def validate_round_limit(value: Any) -> int:
    if value is None:
        return Config.DEFAULT_ROUND_LIMIT
    if isinstance(value, bool):
        raise ValidationError("Round limit must be a number.", "invalid_rounds")
    try:
        limit = int(value)
    except (TypeError, ValueError):
        raise ValidationError("Round limit must be a number.", "invalid_rounds") from None
    if limit < 1 or limit > Config.MAX_ROUND_LIMIT:
        raise ValidationError(
            f"Round limit must be between 1 and {Config.MAX_ROUND_LIMIT}.", "invalid_rounds"
        )
    return limit


def validate_role(role: Any) -> str:
    if role not in ROLES:
        raise ValidationError("Role must be 'player' or 'spectator'.", "invalid_role")
    return role
