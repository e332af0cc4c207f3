ENTRIES = ["Pizza", "Tacos", "Sushi", "Ramen", "Curry"]


def received(sio_client):
    """Group everything a test client got since the last call by event name."""
    out = {}
    for msg in sio_client.get_received():
        out.setdefault(msg["name"], []).append(msg["args"][0] if msg["args"] else None)
    return out


def new_room(client, host="Ann"):
    return client.post("/api/create-room", json={"hostName": host}).get_json()["roomCode"]


def join(sio_client, code, name):
    return sio_client.emit("joinGameRoom", {"roomCode": code, "playerName": name}, callback=True)


def test_full_single_round_game(client, sio_factory, registry):
    code = new_room(client)
    ann = sio_factory()
    assert join(ann, code, "Ann") == {"ok": True}

    assert client.post("/api/join-room", json={"roomCode": code, "playerName": "Bob"}).status_code == 200
    bob = sio_factory()
    assert join(bob, code, "Bob") == {"ok": True}

    got = received(ann)
    assert got["roomState"][0]["hostName"] == "Ann"
    assert got["playerList"][-1] == {"players": ["Ann", "Bob"]}
    received(bob)

    assert ann.emit("startGame", {"roomCode": code, "roundLimit": 1}, callback=True) == {"ok": True}
    got = received(bob)
    assert got["phaseChange"] == [{"phase": "entry"}]
    assert got["gameStarted"][0]["round"] == 1

    for text in ENTRIES:
        ack = bob.emit("submitEntry", {"roomCode": code, "entry": text}, callback=True)
        assert ack == {"ok": True}

    ack = bob.emit("startRankingPhase", {"roomCode": code, "judgeName": "Ann"}, callback=True)
    assert ack == {"ok": True}
    got = received(ann)
    assert got["startRankingPhase"] == [{"judgeName": "Ann"}]
    assert got["sendAllEntries"][-1] == {"entries": ENTRIES}
    # the judge's entry list goes to the judge only
    assert "sendAllEntries" not in received(bob)

    assert ann.emit("submitRanking", {"roomCode": code, "ranking": ENTRIES}, callback=True) == {"ok": True}
    shuffled = received(bob)["sendAllEntries"][-1]["entries"]
    assert sorted(shuffled) == sorted(ENTRIES)

    assert bob.emit("submitGuess", {"roomCode": code, "guess": ENTRIES}, callback=True) == {"ok": True}
    got = received(bob)
    assert got["revealResults"][0]["results"]["Bob"] == {"guess": ENTRIES, "score": 8}
    assert got["finalScores"] == [{"scores": {"Ann": 0, "Bob": 8}}]
    assert registry.get(code).phase == "reveal"

    assert bob.emit("restartGame", {"roomCode": code}, callback=True) == {"ok": True}
    assert received(ann)["phaseChange"] == [{"phase": "entry"}]


def test_spectator_entry_gets_toast(client, sio_factory, registry):
    code = new_room(client)
    ann, bob = sio_factory(), sio_factory()
    join(ann, code, "Ann")
    join(bob, code, "Bob")

    assert bob.emit("setRole", {"roomCode": code, "role": "spectator"}, callback=True) == {"ok": True}
    assert ann.emit("startGame", {"roomCode": code}, callback=True) == {"ok": True}
    received(bob)

    ack = bob.emit("submitEntry", {"roomCode": code, "entry": "Pizza"}, callback=True)
    assert ack == {"ok": False, "error": "spectator_not_allowed"}
    assert received(bob)["toastWarning"][0]["error"] == "spectator_not_allowed"
    assert registry.get(code).entries == []


def test_spectator_sees_new_entries(client, sio_factory):
    code = new_room(client)
    ann, bob, cara = sio_factory(), sio_factory(), sio_factory()
    join(ann, code, "Ann")
    join(bob, code, "Bob")
    join(cara, code, "Cara")
    cara.emit("setRole", {"roomCode": code, "role": "spectator"}, callback=True)
    ann.emit("startGame", {"roomCode": code}, callback=True)
    received(cara)

    bob.emit("submitEntry", {"roomCode": code, "entry": "Pizza"}, callback=True)
    assert received(cara)["newEntry"] == [{"entry": "Pizza"}]


def test_join_unknown_room(sio_factory):
    sio = sio_factory()
    assert join(sio, "NOPE42", "Ann") == {"ok": False, "error": "room_not_found"}
    assert received(sio)["joinError"][0]["error"] == "room_not_found"


def test_malformed_payload_is_acked_with_error(client, sio_factory):
    code = new_room(client)
    ann = sio_factory()
    join(ann, code, "Ann")
    received(ann)

    ack = ann.emit("submitRanking", {"roomCode": code, "ranking": "Pizza"}, callback=True)
    assert ack == {"ok": False, "error": "invalid_payload"}
    assert "toastWarning" in received(ann)


def test_request_entries_outside_round(client, sio_factory):
    code = new_room(client)
    ann = sio_factory()
    join(ann, code, "Ann")
    received(ann)

    assert ann.emit("requestEntries", {"roomCode": code}, callback=True) == {"ok": True}
    assert received(ann)["sendAllEntries"] == [{"entries": []}]


def test_disconnect_broadcasts_player_list(client, sio_factory, registry):
    code = new_room(client)
    ann, bob = sio_factory(), sio_factory()
    join(ann, code, "Ann")
    join(bob, code, "Bob")
    received(ann)

    bob.disconnect()

    assert received(ann)["playerList"] == [{"players": ["Ann"]}]
    assert registry.get(code).player_names() == ["Ann"]


def test_host_leaving_hands_over_host(client, sio_factory, registry):
    code = new_room(client)
    ann, bob = sio_factory(), sio_factory()
    join(ann, code, "Ann")
    join(bob, code, "Bob")

    ann.disconnect()

    assert registry.get(code).host_name == "Bob"
