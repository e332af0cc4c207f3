from __future__ import annotations

import logging
import random

from .models import Outbound
from .registry import RoomRegistry
from .service import expire_ranking


logger = logging.getLogger(__name__)


def is_stalled(room, now: float, timeout: float) -> bool:
    return (
        room.phase == "ranking"
        and not room.judge_ranking
        and now - room.phase_start_time > timeout
    )


def sweep(
    registry: RoomRegistry,
    now: float,
    timeout: float,
    empty_ttl: float = 0,
    rng: random.Random | None = None,
) -> list[Outbound]:
    """One timer tick over every room.

    Stalled ranking phases are revealed with a fallback ranking; rooms empty
    for longer than ``empty_ttl`` (when positive) are dropped.
    """
    rng = rng or registry.rng
    msgs: list[Outbound] = []

    with registry.lock:
        for room in registry.list_rooms():
            if empty_ttl > 0 and not room.players:
                if room.empty_since is None:
                    room.empty_since = now
                elif now - room.empty_since >= empty_ttl:
                    logger.info("[timer-evict] room=%s empty for %.0fs", room.code, now - room.empty_since)
                    registry.delete(room.code)
                    continue

            if is_stalled(room, now, timeout):
                logger.info(
                    "[timer-fire] room=%s round=%s ranking stalled for %.0fs",
                    room.code, room.round, now - room.phase_start_time,
                )
                msgs += expire_ranking(room, rng=rng, now=now)

    return msgs
