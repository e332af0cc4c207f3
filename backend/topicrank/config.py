import os


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev")
    TESTING = False

    # CORS
    CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*")

    # Reverse proxy / IP headers
    TRUST_PROXY_HEADERS = os.environ.get("TRUST_PROXY_HEADERS", "1") == "1"

    # Socket.IO ("" = pick per platform)
    SOCKETIO_ASYNC_MODE = os.environ.get("SOCKETIO_ASYNC_MODE", "").strip()

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Rooms
    MAX_PLAYERS = int(os.environ.get("MAX_PLAYERS", "10"))
    ROOM_CODE_LENGTH = int(os.environ.get("ROOM_CODE_LENGTH", "6"))
    NAME_MAX_LENGTH = int(os.environ.get("NAME_MAX_LENGTH", "20"))
    # 0 keeps rooms for the lifetime of the process
    EMPTY_ROOM_TTL_SEC = int(os.environ.get("EMPTY_ROOM_TTL_SEC", "0"))

    # Game
    MIN_PLAYERS = int(os.environ.get("MIN_PLAYERS", "2"))
    MIN_UNIQUE_ENTRIES = int(os.environ.get("MIN_UNIQUE_ENTRIES", "5"))
    DEFAULT_ROUND_LIMIT = int(os.environ.get("DEFAULT_ROUND_LIMIT", "5"))
    MAX_ROUND_LIMIT = int(os.environ.get("MAX_ROUND_LIMIT", "20"))
    PERFECT_BONUS = int(os.environ.get("PERFECT_BONUS", "3"))

    # Round timer
    TIMER_ENABLED = os.environ.get("TIMER_ENABLED", "1") == "1"
    TIMER_INTERVAL_SEC = int(os.environ.get("TIMER_INTERVAL_SEC", "10"))
    RANKING_TIMEOUT_SEC = int(os.environ.get("RANKING_TIMEOUT_SEC", "60"))
