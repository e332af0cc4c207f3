from __future__ import annotations

import logging
import random
import time
from dataclasses import asdict
from typing import Any

from ..config import Config
from .categories import pick_category
from .errors import (
    AuthorizationError,
    DuplicateSubmission,
    NameTaken,
    PreconditionError,
    RoomFull,
    ValidationError,
)
from .models import Entry, Outbound, Phase, Player, Room
from .scoring import accumulate, score_round
from .validation import (
    validate_entry_text,
    validate_name,
    validate_ordering,
    validate_role,
    validate_round_limit,
)


logger = logging.getLogger(__name__)

_default_rng = random.Random()


def _rng(rng: random.Random | None) -> random.Random:
    return rng or _default_rng


def _now(now: float | None) -> float:
    return time.time() if now is None else now


def _shuffled(items: list[str], rng: random.Random) -> list[str]:
    out = list(items)
    rng.shuffle(out)
    return out


# ---------------------------------------------------------------------------
# Outbound helpers
# ---------------------------------------------------------------------------

def _to_room(room: Room, event: str, payload: dict[str, Any]) -> Outbound:
    return Outbound(event=event, payload=payload, to=room.code)


def _to_player(player: Player | None, event: str, payload: dict[str, Any]) -> list[Outbound]:
    if player is None or not player.connected or not player.id:
        return []
    return [Outbound(event=event, payload=payload, to=player.id)]


def public_players(room: Room) -> list[dict[str, Any]]:
    return [
        {
            "name": p.name,
            "role": p.role,
            "connected": p.connected,
            "hasGuessed": p.has_guessed,
            "hasRanked": p.has_ranked,
        }
        for p in room.players
    ]


def room_state(room: Room) -> dict[str, Any]:
    if room.phase == "lobby":
        state = "lobby"
    elif room.game_over:
        state = "ended"
    else:
        state = "active"

    return {
        "code": room.code,
        "hostName": room.host_name,
        "players": public_players(room),
        "phase": room.phase,
        "round": room.round,
        "roundLimit": room.round_limit,
        "judgeName": room.judge_name,
        "category": room.category,
        "state": state,
        "totalScores": dict(room.total_scores),
    }


def _room_state_to_room(room: Room) -> Outbound:
    return _to_room(room, "roomState", room_state(room))


def _player_list(room: Room) -> Outbound:
    return _to_room(room, "playerList", {"players": room.player_names()})


def _entries_for_judge(room: Room) -> list[Outbound]:
    judge = room.player_by_name(room.judge_name)
    return _to_player(judge, "sendAllEntries", {"entries": room.unique_entry_texts()})


def _round_started(room: Room) -> list[Outbound]:
    return [
        _to_room(room, "phaseChange", {"phase": room.phase}),
        _room_state_to_room(room),
        _to_room(room, "gameStarted", {"category": room.category, "round": room.round}),
    ]


# ---------------------------------------------------------------------------
# Guards
# ---------------------------------------------------------------------------

def _actor(room: Room, sid: str) -> Player:
    player = room.player_by_id(sid)
    if player is None:
        raise AuthorizationError("You are not in this room.", "not_in_room")
    return player


def _check_claimed_name(actor: Player, player_name: str | None) -> None:
    if player_name and player_name != actor.name:
        raise AuthorizationError("You can only act as yourself.", "not_allowed")


def _require_phase(room: Room, *phases: Phase) -> None:
    if room.phase not in phases:
        wanted = " or ".join(phases)
        raise PreconditionError(
            f"That is only possible during the {wanted} phase.", "wrong_phase"
        )


def _set_phase(room: Room, phase: Phase, now: float) -> None:
    previous = room.phase
    room.phase = phase
    room.phase_start_time = now
    logger.info("[phase] room=%s %s -> %s round=%s", room.code, previous, phase, room.round)


# ---------------------------------------------------------------------------
# Rotation / eligibility
# ---------------------------------------------------------------------------

def judge_for_round(room: Room) -> str | None:
    if not room.players:
        return None
    return room.players[(room.round - 1) % len(room.players)].name


def eligible_guessers(room: Room) -> list[Player]:
    return [
        p for p in room.players
        if p.is_guesser and p.connected and p.role == "player" and p.name != room.judge_name
    ]


def all_guesses_in(room: Room) -> bool:
    return all(p.name in room.guesses for p in eligible_guessers(room))


def begin_round(room: Room, rng: random.Random | None = None, now: float | None = None) -> None:
    """Reset every per-round collection and flag, then open the entry phase."""
    room.entries = []
    room.guesses = {}
    room.judge_ranking = []
    room.selected_entries = []
    room.shuffled_entries = []
    for p in room.players:
        p.is_guesser = p.role == "player"
        p.has_guessed = False
        p.has_ranked = False

    room.category = pick_category(_rng(rng))
    room.judge_name = judge_for_round(room)
    _set_phase(room, "entry", _now(now))


# ---------------------------------------------------------------------------
# Roster
# ---------------------------------------------------------------------------

def _resend_entries(room: Room, player: Player) -> list[Outbound]:
    """Catch a (re)connecting player up on the entries they should see."""
    if player.name == room.judge_name and room.phase == "entry":
        return _entries_for_judge(room)
    if room.phase != "ranking":
        return []
    if player.name == room.judge_name and not room.judge_ranking:
        return _entries_for_judge(room)
    if room.shuffled_entries:
        return _to_player(player, "sendAllEntries", {"entries": list(room.shuffled_entries)})
    return []


def register_player(room: Room, name: Any, sid: str = "") -> Player:
    """Add a player over HTTP; the socket binds to it later through join_game_room."""
    name = validate_name(name)
    if room.player_by_name(name) is not None:
        raise NameTaken(name)
    if len(room.players) >= room.max_players:
        raise RoomFull(room.code)

    player = Player(id=sid, name=name, connected=bool(sid))
    room.players.append(player)
    room.empty_since = None
    return player


def join_game_room(room: Room, sid: str, name: Any) -> list[Outbound]:
    name = validate_name(name)

    bound = room.player_by_id(sid)
    if bound is not None and bound.name != name:
        raise ValidationError(f"You already joined as {bound.name}.", "already_joined")

    player = room.player_by_name(name)
    if player is not None:
        if player.connected and player.id and player.id != sid:
            raise NameTaken(name)
        player.id = sid
        player.connected = True
        if room.host_name == name:
            room.host_id = sid
    else:
        player = register_player(room, name, sid)

    room.empty_since = None
    logger.info("[join] room=%s player=%s players=%d", room.code, name, len(room.players))

    msgs = [
        _to_room(room, "playerJoined", {
            "success": True,
            "roomCode": room.code,
            "playerName": name,
            "players": public_players(room),
            "message": f"{name} has joined the game.",
        }),
        _player_list(room),
    ]
    msgs += _to_player(player, "roomState", room_state(room))
    msgs += _resend_entries(room, player)
    return msgs


def set_role(room: Room, sid: str, role: Any, player_name: str | None = None,
             rng: random.Random | None = None, now: float | None = None) -> list[Outbound]:
    role = validate_role(role)
    actor = _actor(room, sid)
    _check_claimed_name(actor, player_name)

    actor.role = role
    logger.info("[role] room=%s player=%s role=%s", room.code, actor.name, role)

    msgs = [_room_state_to_room(room)]
    msgs += _resend_entries(room, actor)
    msgs += _maybe_reveal(room, rng, now)
    return msgs


def remove_player(room: Room, sid: str, rng: random.Random | None = None,
                  now: float | None = None) -> list[Outbound]:
    """Drop a disconnected player and repair host and judge references."""
    player = room.player_by_id(sid)
    if player is None:
        return []

    now = _now(now)
    room.players.remove(player)
    logger.info("[leave] room=%s player=%s remaining=%d", room.code, player.name, len(room.players))

    if not room.players:
        room.empty_since = now

    if room.host_name == player.name and room.players:
        room.host_id = room.players[0].id
        room.host_name = room.players[0].name

    msgs = [_player_list(room)]

    if player.name == room.judge_name:
        if room.phase == "entry":
            room.judge_name = judge_for_round(room)
            logger.info("[judge] room=%s judge left, promoted %s", room.code, room.judge_name)
            msgs.append(_room_state_to_room(room))
            msgs += _entries_for_judge(room)
        elif room.phase == "ranking" and not room.judge_ranking:
            logger.info("[judge] room=%s judge left before ranking, using fallback", room.code)
            msgs += expire_ranking(room, rng=rng, now=now)
        else:
            room.judge_name = None
    elif room.phase == "ranking":
        msgs += _maybe_reveal(room, rng, now)

    if room.judge_name and room.player_by_name(room.judge_name) is None:
        room.judge_name = None

    return msgs


# ---------------------------------------------------------------------------
# Game actions
# ---------------------------------------------------------------------------

def start_game(room: Room, sid: str, round_limit: Any = None,
               rng: random.Random | None = None, now: float | None = None) -> list[Outbound]:
    actor = _actor(room, sid)
    if actor.role != "player":
        raise AuthorizationError("Only players can start the game.", "spectator_not_allowed")
    if room.phase != "lobby" and not room.game_over:
        raise PreconditionError("The game is already running.", "game_in_progress")
    limit = validate_round_limit(round_limit)
    if len(room.players) < Config.MIN_PLAYERS:
        raise PreconditionError(
            f"At least {Config.MIN_PLAYERS} players are required to start the game.",
            "not_enough_players",
        )

    room.round_limit = limit
    room.round = 1
    room.total_scores = {p.name: 0 for p in room.players if p.role == "player"}
    room.last_results = {}
    begin_round(room, rng, now)

    logger.info(
        "[start] room=%s round=%s/%s judge=%s category=%r",
        room.code, room.round, room.round_limit, room.judge_name, room.category,
    )
    return _round_started(room)


def submit_entry(room: Room, sid: str, text: Any, player_name: str | None = None) -> list[Outbound]:
    text = validate_entry_text(text)
    actor = _actor(room, sid)
    _check_claimed_name(actor, player_name)
    if actor.role != "player":
        raise AuthorizationError("Spectators cannot submit entries.", "spectator_not_allowed")
    _require_phase(room, "entry")

    room.entries.append(Entry(player_name=actor.name, text=text))
    logger.info("[entry] room=%s player=%s entries=%d", room.code, actor.name, len(room.entries))

    msgs: list[Outbound] = []
    for p in room.players:
        if p.role == "spectator":
            msgs += _to_player(p, "newEntry", {"entry": text})
    msgs += _entries_for_judge(room)
    msgs += _to_player(actor, "roomState", room_state(room))
    return msgs


def start_ranking(room: Room, sid: str, judge_name: str | None = None,
                  now: float | None = None) -> list[Outbound]:
    actor = _actor(room, sid)
    if actor.role != "player":
        raise AuthorizationError("Spectators cannot start ranking phase.", "spectator_not_allowed")
    _require_phase(room, "entry")

    unique = room.unique_entry_texts()
    if len(unique) < Config.MIN_UNIQUE_ENTRIES:
        raise PreconditionError(
            f"Not enough unique entries yet. At least {Config.MIN_UNIQUE_ENTRIES} needed.",
            "not_enough_entries",
        )

    if judge_name:
        judge = room.player_by_name(judge_name)
        if judge is None:
            raise ValidationError(f"{judge_name} is not in this room.", "invalid_judge")
    else:
        judge = room.player_by_name(room.judge_name) or room.player_by_name(judge_for_round(room))
        if judge is None:
            raise PreconditionError("There is no judge for this round.", "no_judge")

    room.judge_name = judge.name
    _set_phase(room, "ranking", _now(now))
    logger.info("[ranking] room=%s judge=%s entries=%d", room.code, judge.name, len(unique))

    msgs = [
        _to_room(room, "phaseChange", {"phase": room.phase}),
        _to_room(room, "startRankingPhase", {"judgeName": judge.name}),
        _room_state_to_room(room),
    ]
    msgs += _to_player(judge, "sendAllEntries", {"entries": unique})
    return msgs


def submit_ranking(room: Room, sid: str, ranking: Any,
                   rng: random.Random | None = None, now: float | None = None) -> list[Outbound]:
    actor = _actor(room, sid)
    if actor.name != room.judge_name:
        raise AuthorizationError("Only the judge can submit rankings.", "not_judge")
    if actor.has_ranked or room.judge_ranking:
        raise DuplicateSubmission("You have already submitted your ranking.", "already_ranked")
    _require_phase(room, "ranking")
    ranking = validate_ordering(ranking, room.unique_entry_texts(), "ranking")

    actor.has_ranked = True
    room.judge_ranking = list(ranking)
    room.selected_entries = list(ranking)
    room.shuffled_entries = _shuffled(ranking, _rng(rng))
    logger.info("[ranking] room=%s judge=%s submitted %d entries", room.code, actor.name, len(ranking))

    # Guessers only ever see the shuffled copy before reveal.
    msgs = [
        _to_room(room, "sendAllEntries", {"entries": list(room.shuffled_entries)}),
        _room_state_to_room(room),
    ]
    msgs += _maybe_reveal(room, rng, now)
    return msgs


def request_entries(room: Room, sid: str) -> list[Outbound]:
    actor = _actor(room, sid)
    is_judge = actor.name == room.judge_name
    if is_judge and (room.phase == "entry" or (room.phase == "ranking" and not room.judge_ranking)):
        entries = room.unique_entry_texts()
    elif room.phase == "ranking":
        entries = list(room.shuffled_entries)
    else:
        entries = []
    return _to_player(actor, "sendAllEntries", {"entries": entries})


def submit_guess(room: Room, sid: str, guess: Any, player_name: str | None = None,
                 rng: random.Random | None = None, now: float | None = None) -> list[Outbound]:
    actor = _actor(room, sid)
    _check_claimed_name(actor, player_name)
    if actor.has_guessed or actor.name in room.guesses:
        raise DuplicateSubmission("You have already submitted a guess.", "already_guessed")
    if actor.role != "player":
        raise AuthorizationError("Spectators cannot submit guesses.", "spectator_not_allowed")
    _require_phase(room, "ranking")
    if actor.name == room.judge_name:
        raise AuthorizationError("The judge cannot submit a guess.", "judge_cannot_guess")
    if not actor.is_guesser:
        raise PreconditionError("You can guess from the next round on.", "not_a_guesser")
    if not room.judge_ranking:
        raise PreconditionError("Wait for the judge to submit a ranking.", "ranking_pending")
    guess = validate_ordering(guess, room.selected_entries, "guess")

    room.guesses[actor.name] = list(guess)
    actor.has_guessed = True
    logger.info(
        "[guess] room=%s player=%s received=%d/%d",
        room.code, actor.name, len(room.guesses), len(eligible_guessers(room)),
    )

    msgs = [_room_state_to_room(room)]
    msgs += _maybe_reveal(room, rng, now)
    return msgs


def restart(room: Room, sid: str, rng: random.Random | None = None,
            now: float | None = None) -> list[Outbound]:
    """Back to round 1 of the entry phase from any phase."""
    _actor(room, sid)
    room.round = 1
    room.total_scores = {p.name: 0 for p in room.players if p.role == "player"}
    room.last_results = {}
    begin_round(room, rng, now)
    logger.info("[restart] room=%s judge=%s", room.code, room.judge_name)
    return _round_started(room)


# ---------------------------------------------------------------------------
# Reveal
# ---------------------------------------------------------------------------

def _maybe_reveal(room: Room, rng: random.Random | None, now: float | None) -> list[Outbound]:
    if room.phase != "ranking" or not room.judge_ranking:
        return []
    if not all_guesses_in(room):
        return []
    return reveal(room, room.judge_ranking, rng=rng, now=now)


def reveal(room: Room, ranking: list[str], rng: random.Random | None = None,
           now: float | None = None) -> list[Outbound]:
    """Score the round against ``ranking`` and move on to the next round or the final scores."""
    now = _now(now)
    room.judge_ranking = list(ranking)
    if not room.selected_entries:
        room.selected_entries = list(ranking)
    _set_phase(room, "reveal", now)

    results = score_round(room.guesses, room.judge_ranking)
    room.last_results = results
    accumulate(room.total_scores, results)

    msgs = [
        _to_room(room, "phaseChange", {"phase": room.phase}),
        _to_room(room, "revealResults", {
            "judgeRanking": list(room.judge_ranking),
            "results": {name: asdict(r) for name, r in results.items()},
        }),
    ]

    if room.round < room.round_limit:
        room.round += 1
        begin_round(room, rng, now)
        msgs += _round_started(room)
    else:
        logger.info("[finish] room=%s final scores %s", room.code, room.total_scores)
        msgs.append(_to_room(room, "finalScores", {"scores": dict(room.total_scores)}))
        msgs.append(_room_state_to_room(room))
    return msgs


def expire_ranking(room: Room, rng: random.Random | None = None,
                   now: float | None = None) -> list[Outbound]:
    """Reveal with a random ranking when the judge never submitted one."""
    if room.phase != "ranking" or room.judge_ranking:
        return []
    fallback = _shuffled(room.unique_entry_texts(), _rng(rng))
    room.selected_entries = list(fallback)
    logger.info("[timeout] room=%s judge=%s stalled, fallback ranking used", room.code, room.judge_name)
    return reveal(room, fallback, rng=rng, now=now)
