import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv


logger = logging.getLogger("topicrank.app")


def _env_flag(name: str, default: str) -> bool:
    return os.environ.get(name, default) == "1"


def _use_eventlet() -> bool:
    mode = os.environ.get("SOCKETIO_ASYNC_MODE", "").strip()
    if mode not in ("", "eventlet"):
        return False
    return not sys.platform.startswith("win") and sys.version_info < (3, 13)


def main() -> None:
    load_dotenv(Path(__file__).resolve().parents[1] / ".env")

    if _use_eventlet():
        import eventlet

        eventlet.monkey_patch()

    # Imported late so Config sees the values from .env
    from topicrank.server import create_app

    app, socketio = create_app()

    host = os.environ.get("HOST", "0.0.0.0")
    port = int(os.environ.get("PORT", "10000"))
    logger.info("[boot] serving topicrank on %s:%s", host, port)

    socketio.run(
        app,
        host=host,
        port=port,
        debug=_env_flag("FLASK_DEBUG", "0"),
        use_reloader=_env_flag("FLASK_USE_RELOADER", "0"),
        allow_unsafe_werkzeug=_env_flag("ALLOW_UNSAFE_WERKZEUG", "1"),
    )


if __name__ == "__main__":
    main()
