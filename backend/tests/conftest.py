import random

import pytest

from topicrank.config import Config
from topicrank.game import service
from topicrank.game.registry import RoomRegistry
from topicrank.server import create_app


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret"
    SOCKETIO_ASYNC_MODE = "threading"
    TRUST_PROXY_HEADERS = False
    TIMER_ENABLED = False
    LOG_LEVEL = "WARNING"


class FakeClock:
    def __init__(self, start=1_000_000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def registry(clock):
    return RoomRegistry(rng=random.Random(1234), clock=clock)


@pytest.fixture()
def make_room(registry):
    """Room with the given players, each bound to socket id ``sid-<name>``."""

    def _make(*names, start=False, round_limit=3):
        host, *others = names
        room = registry.create_room(host, host_id=f"sid-{host}")
        for name in others:
            service.register_player(room, name, f"sid-{name}")
        if start:
            service.start_game(
                room, f"sid-{host}", round_limit, rng=registry.rng, now=registry.clock()
            )
        return room

    return _make


@pytest.fixture()
def flask_app(registry):
    application, _ = create_app(TestConfig, registry=registry)
    yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def socketio(flask_app):
    return flask_app.extensions["socketio"]


@pytest.fixture()
def sio_factory(flask_app, socketio):
    clients = []

    def _connect():
        test_client = socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
        clients.append(test_client)
        return test_client

    yield _connect

    for c in clients:
        try:
            if c.is_connected():
                c.disconnect()
        except Exception:
            pass
