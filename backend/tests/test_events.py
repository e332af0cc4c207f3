import pytest

from topicrank.game.errors import ValidationError
from topicrank.realtime.events import (
    ACTIONS,
    JoinGameRoom,
    SetRole,
    StartGame,
    SubmitEntry,
    SubmitGuess,
    SubmitRanking,
    parse_action,
)


def test_every_inbound_event_has_a_variant():
    assert set(ACTIONS) == {
        "joinGameRoom",
        "setRole",
        "startGame",
        "submitEntry",
        "startRankingPhase",
        "submitRanking",
        "requestEntries",
        "submitGuess",
        "restartGame",
    }


def test_room_code_is_upper_cased():
    action = parse_action("joinGameRoom", {"roomCode": " ab12cd ", "playerName": "Ann"})
    assert action == JoinGameRoom(room_code="AB12CD", player_name="Ann")


def test_submit_entry_accepts_text_alias():
    action = parse_action("submitEntry", {"roomCode": "ABC", "text": "ice cream"})
    assert action == SubmitEntry(room_code="ABC", entry="ice cream")


def test_optional_fields_default():
    assert parse_action("startGame", {"roomCode": "ABC"}) == StartGame(room_code="ABC")
    assert parse_action("setRole", {"roomCode": "ABC", "role": "spectator"}) == SetRole(
        room_code="ABC", role="spectator"
    )


def test_lists_are_copied():
    ranking = ["a", "b"]
    action = parse_action("submitRanking", {"roomCode": "ABC", "ranking": ranking})
    assert isinstance(action, SubmitRanking)
    ranking.append("c")
    assert action.ranking == ["a", "b"]


@pytest.mark.parametrize(
    "event,data",
    [
        ("joinGameRoom", None),
        ("joinGameRoom", "ABC"),
        ("joinGameRoom", {"playerName": "Ann"}),
        ("joinGameRoom", {"roomCode": "AB-C", "playerName": "Ann"}),
        ("joinGameRoom", {"roomCode": "ABC"}),
        ("startGame", {"roomCode": "ABC", "roundLimit": True}),
        ("startGame", {"roomCode": "ABC", "roundLimit": "3"}),
        ("submitEntry", {"roomCode": "ABC", "entry": 5}),
        ("submitRanking", {"roomCode": "ABC", "ranking": "a,b"}),
        ("submitGuess", {"roomCode": "ABC", "guess": ["a", 1]}),
        ("setRole", {"roomCode": "ABC"}),
    ],
)
def test_malformed_payloads_are_rejected(event, data):
    with pytest.raises(ValidationError):
        parse_action(event, data)


def test_unknown_action():
    with pytest.raises(ValidationError) as exc:
        parse_action("dropTables", {"roomCode": "ABC"})
    assert exc.value.code == "unknown_action"


def test_guess_carries_player_name():
    action = parse_action("submitGuess", {"roomCode": "ABC", "playerName": "Bob", "guess": ["x"]})
    assert action == SubmitGuess(room_code="ABC", guess=["x"], player_name="Bob")
