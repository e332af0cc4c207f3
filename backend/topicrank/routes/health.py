from __future__ import annotations

from flask import Blueprint, jsonify

from ..game.registry import current_registry

bp = Blueprint("health", __name__)


@bp.get("/health")
def health():
    return jsonify({"status": "ok", "activeRooms": len(current_registry())})
