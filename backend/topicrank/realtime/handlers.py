from __future__ import annotations

import logging
from typing import Any, Callable, Mapping

from flask import request
from flask_socketio import SocketIO, join_room

from ..game import service
from ..game.errors import GameError
from ..game.models import Outbound, Room
from ..game.registry import RoomRegistry
from ..game.timer import sweep
from .events import parse_action


logger = logging.getLogger(__name__)


def register_socketio_handlers(
    socketio: SocketIO,
    registry: RoomRegistry,
    config: Mapping[str, Any] | None = None,
) -> None:
    config = config or {}
    _sweeper = {"running": False}

    def _dispatch(msgs: list[Outbound]) -> None:
        for m in msgs:
            socketio.emit(m.event, m.payload, to=m.to)

    def _reject(event: str, err: GameError, error_event: str) -> dict:
        logger.info("[reject] event=%s sid=%s error=%s: %s", event, request.sid, err.code, err.message)
        socketio.emit(error_event, {"message": err.message, "error": err.code}, to=request.sid)
        return {"ok": False, "error": err.code}

    def _run(
        event: str,
        data: Any,
        apply: Callable[[Room, Any], list[Outbound]],
        error_event: str = "toastWarning",
    ) -> dict:
        try:
            action = parse_action(event, data)
            with registry.lock:
                room = registry.require(action.room_code)
                msgs = apply(room, action)
        except GameError as err:
            return _reject(event, err, error_event)
        _dispatch(msgs)
        return {"ok": True}

    def _ensure_sweeper() -> None:
        if _sweeper["running"] or not config.get("TIMER_ENABLED", True):
            return
        _sweeper["running"] = True

        interval = int(config.get("TIMER_INTERVAL_SEC", 10))
        timeout = int(config.get("RANKING_TIMEOUT_SEC", 60))
        empty_ttl = int(config.get("EMPTY_ROOM_TTL_SEC", 0))

        def _runner() -> None:
            logger.info("[timer-start] interval=%ss ranking_timeout=%ss", interval, timeout)
            while True:
                socketio.sleep(interval)
                try:
                    msgs = sweep(registry, registry.clock(), timeout, empty_ttl)
                except Exception:
                    logger.exception("[timer-error] sweep failed")
                    continue
                _dispatch(msgs)

        socketio.start_background_task(_runner)

    @socketio.on("joinGameRoom")
    def join_game_room(data=None):
        sid = request.sid

        def apply(room: Room, action) -> list[Outbound]:
            msgs = service.join_game_room(room, sid, action.player_name)
            join_room(room.code)
            return msgs

        ack = _run("joinGameRoom", data, apply, error_event="joinError")
        if ack["ok"]:
            _ensure_sweeper()
        return ack

    @socketio.on("setRole")
    def set_role(data=None):
        return _run("setRole", data, lambda room, a: service.set_role(
            room, request.sid, a.role, player_name=a.player_name,
            rng=registry.rng, now=registry.clock(),
        ))

    @socketio.on("startGame")
    def start_game(data=None):
        return _run("startGame", data, lambda room, a: service.start_game(
            room, request.sid, a.round_limit, rng=registry.rng, now=registry.clock(),
        ))

    @socketio.on("submitEntry")
    def submit_entry(data=None):
        return _run("submitEntry", data, lambda room, a: service.submit_entry(
            room, request.sid, a.entry, player_name=a.player_name,
        ))

    @socketio.on("startRankingPhase")
    def start_ranking_phase(data=None):
        return _run("startRankingPhase", data, lambda room, a: service.start_ranking(
            room, request.sid, a.judge_name, now=registry.clock(),
        ))

    @socketio.on("submitRanking")
    def submit_ranking(data=None):
        return _run("submitRanking", data, lambda room, a: service.submit_ranking(
            room, request.sid, a.ranking, rng=registry.rng, now=registry.clock(),
        ))

    @socketio.on("requestEntries")
    def request_entries(data=None):
        return _run("requestEntries", data, lambda room, a: service.request_entries(room, request.sid))

    @socketio.on("submitGuess")
    def submit_guess(data=None):
        return _run("submitGuess", data, lambda room, a: service.submit_guess(
            room, request.sid, a.guess, player_name=a.player_name,
            rng=registry.rng, now=registry.clock(),
        ))

    @socketio.on("restartGame")
    def restart_game(data=None):
        return _run("restartGame", data, lambda room, a: service.restart(
            room, request.sid, rng=registry.rng, now=registry.clock(),
        ))

    @socketio.on("disconnect")
    def on_disconnect(reason=None):
        sid = request.sid
        # MVP linear scan; a connection normally sits in one room
        for room in registry.rooms_for_sid(sid):
            with registry.lock:
                msgs = service.remove_player(room, sid, rng=registry.rng, now=registry.clock())
            _dispatch(msgs)
