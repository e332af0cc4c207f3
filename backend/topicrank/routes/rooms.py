from __future__ import annotations

import logging

from flask import Blueprint, current_app, jsonify, request

from ..game import service
from ..game.errors import GameError, RoomNotFound, ValidationError
from ..game.registry import current_registry
from ..game.validation import is_alphanumeric, validate_name

bp = Blueprint("rooms", __name__)

logger = logging.getLogger(__name__)


def _error(err: GameError):
    status = 404 if isinstance(err, RoomNotFound) else 400
    return jsonify({"error": err.message, "code": err.code}), status


@bp.post("/create-room")
def create_room():
    data = request.get_json(silent=True) or {}
    host_name = data.get("hostName", data.get("hostId"))
    socket_id = data.get("socketId") or ""

    try:
        host_name = validate_name(host_name)
    except ValidationError:
        return jsonify({"error": "Host name must be alphanumeric.", "code": "invalid_name"}), 400

    # The host stays unbound until its socket sends joinGameRoom.
    room = current_registry().create_room(host_name=host_name, host_id=str(socket_id))
    return jsonify({"message": "Room created successfully!", "roomCode": room.code}), 201


@bp.post("/join-room")
def join_room():
    data = request.get_json(silent=True) or {}
    room_code = data.get("roomCode")
    player_name = data.get("playerName", data.get("playerId"))
    socket_id = data.get("socketId") or ""

    if not isinstance(room_code, str) or not is_alphanumeric(room_code):
        return jsonify({"error": "Invalid roomCode or playerName", "code": "invalid_payload"}), 400

    registry = current_registry()
    try:
        with registry.lock:
            room = registry.require(room_code)
            player = service.register_player(room, player_name, str(socket_id))
            players = room.player_names()
            roster = service.public_players(room)
    except GameError as err:
        logger.info("[join-room] rejected room=%s name=%r: %s", room_code, player_name, err.code)
        return _error(err)

    socketio = current_app.extensions.get("socketio")
    if socketio is not None:
        if socket_id:
            socketio.emit("playerJoined", {
                "success": True,
                "roomCode": room.code,
                "playerName": player.name,
                "players": roster,
                "message": f"{player.name} has joined the game.",
            }, to=str(socket_id))
        socketio.emit("playerList", {"players": players}, to=room.code)

    return jsonify({"message": "Successfully joined room!", "room": {"code": room.code}}), 200


@bp.get("/rooms/<code>")
def get_room(code: str):
    registry = current_registry()
    room = registry.get(code)
    if not room:
        return jsonify({"error": "Room not found", "code": "room_not_found"}), 404
    with registry.lock:
        return jsonify(service.room_state(room))
