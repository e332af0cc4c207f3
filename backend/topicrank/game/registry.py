from __future__ import annotations

import logging
import random
import string
import time
from threading import RLock
from typing import Callable

from flask import current_app

from .errors import RoomNotFound
from .models import Player, Room


logger = logging.getLogger(__name__)

CODE_ALPHABET = string.digits + string.ascii_uppercase  # base 36
EXTENSION_KEY = "topicrank"


class RoomRegistry:
    """Process-wide map of room code -> Room.

    One instance lives on the Flask app. ``lock`` serializes every room
    mutation, including the round timer sweep.
    """

    def __init__(
        self,
        rng: random.Random | None = None,
        clock: Callable[[], float] = time.time,
        code_length: int = 6,
        max_players: int = 10,
        default_round_limit: int = 5,
    ):
        self.lock = RLock()
        self.rng = rng or random.Random()
        self.clock = clock
        self.code_length = code_length
        self.max_players = max_players
        self.default_round_limit = default_round_limit
        self._rooms: dict[str, Room] = {}

    def __len__(self) -> int:
        with self.lock:
            return len(self._rooms)

    def __contains__(self, code: str) -> bool:
        return self.get(code) is not None

    def generate_code(self) -> str:
        return "".join(self.rng.choice(CODE_ALPHABET) for _ in range(self.code_length))

    def create_room(self, host_name: str, host_id: str = "") -> Room:
        with self.lock:
            code = self.generate_code()
            while code in self._rooms:
                logger.warning("[registry] code collision %s, regenerating", code)
                code = self.generate_code()

            room = Room(
                code=code,
                host_id=host_id,
                host_name=host_name,
                players=[Player(id=host_id, name=host_name, connected=bool(host_id))],
                round_limit=self.default_round_limit,
                max_players=self.max_players,
                phase_start_time=self.clock(),
            )
            self._rooms[code] = room
            logger.info("[registry] room=%s created by %s", code, host_name)
            return room

    def get(self, code: str | None) -> Room | None:
        if not code:
            return None
        with self.lock:
            return self._rooms.get(code.strip().upper())

    def require(self, code: str | None) -> Room:
        room = self.get(code)
        if room is None:
            raise RoomNotFound(code or "")
        return room

    def delete(self, code: str) -> bool:
        with self.lock:
            if self._rooms.pop(code.strip().upper(), None) is not None:
                logger.info("[registry] room=%s deleted", code)
                return True
            return False

    def list_rooms(self) -> list[Room]:
        with self.lock:
            return list(self._rooms.values())

    def rooms_for_sid(self, sid: str) -> list[Room]:
        with self.lock:
            return [r for r in self._rooms.values() if r.player_by_id(sid) is not None]

    def clear(self) -> None:
        with self.lock:
            self._rooms.clear()


def current_registry() -> RoomRegistry:
    return current_app.extensions[EXTENSION_KEY]
