from topicrank.game import service
from topicrank.game.timer import is_stalled, sweep


ENTRIES = ["Pizza", "Tacos", "Sushi", "Ramen", "Curry"]
TIMEOUT = 60


def open_ranking(room, registry):
    for text in ENTRIES:
        service.submit_entry(room, "sid-Bob", text)
    service.start_ranking(room, "sid-Bob", "Ann", now=registry.clock())


def test_nothing_fires_before_timeout(make_room, registry, clock):
    room = make_room("Ann", "Bob", start=True)
    open_ranking(room, registry)

    clock.advance(TIMEOUT)
    assert not is_stalled(room, clock(), TIMEOUT)
    assert sweep(registry, clock(), TIMEOUT) == []
    assert room.phase == "ranking"


def test_stalled_judge_gets_fallback_ranking(make_room, registry, clock):
    room = make_room("Ann", "Bob", start=True, round_limit=1)
    open_ranking(room, registry)

    clock.advance(TIMEOUT + 1)
    msgs = sweep(registry, clock(), TIMEOUT)

    revealed = [m for m in msgs if m.event == "revealResults"][0].payload
    fallback = revealed["judgeRanking"]
    assert sorted(fallback) == sorted(ENTRIES)
    assert revealed["results"] == {}
    assert room.selected_entries == fallback
    assert room.phase == "reveal"
    assert room.total_scores == {"Ann": 0, "Bob": 0}
    assert [m.event for m in msgs if m.event == "finalScores"] == ["finalScores"]


def test_fallback_advances_to_next_round(make_room, registry, clock):
    room = make_room("Ann", "Bob", start=True, round_limit=2)
    open_ranking(room, registry)

    clock.advance(TIMEOUT + 1)
    sweep(registry, clock(), TIMEOUT)

    assert room.round == 2
    assert room.phase == "entry"
    assert room.judge_name == "Bob"


def test_ranked_room_is_left_alone(make_room, registry, clock):
    room = make_room("Ann", "Bob", "Cara", start=True)
    open_ranking(room, registry)
    service.submit_ranking(room, "sid-Ann", list(ENTRIES), now=clock())

    clock.advance(TIMEOUT * 10)
    assert sweep(registry, clock(), TIMEOUT) == []
    assert room.phase == "ranking"


def test_other_phases_are_ignored(make_room, registry, clock):
    lobby = make_room("Ann", "Bob")
    entry = make_room("Dee", "Eve", start=True)

    clock.advance(TIMEOUT * 10)
    assert sweep(registry, clock(), TIMEOUT) == []
    assert lobby.phase == "lobby"
    assert entry.phase == "entry"


def test_empty_rooms_evicted_after_ttl(make_room, registry, clock):
    room = make_room("Ann")
    service.remove_player(room, "sid-Ann", now=clock())

    clock.advance(30)
    sweep(registry, clock(), TIMEOUT, empty_ttl=60)
    assert room.code in registry

    clock.advance(31)
    sweep(registry, clock(), TIMEOUT, empty_ttl=60)
    assert room.code not in registry


def test_room_never_joined_gets_a_ttl_start(registry, clock):
    room = registry.create_room("Ann")
    room.players.clear()

    sweep(registry, clock(), TIMEOUT, empty_ttl=60)
    assert room.empty_since == clock.now
    assert room.code in registry


def test_no_eviction_without_ttl(make_room, registry, clock):
    room = make_room("Ann")
    service.remove_player(room, "sid-Ann", now=clock())

    clock.advance(10_000)
    sweep(registry, clock(), TIMEOUT)
    assert room.code in registry
