from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal


Phase = Literal["lobby", "entry", "ranking", "reveal"]
Role = Literal["player", "spectator"]


@dataclass
class Player:
    id: str
    name: str
    role: Role = "player"
    connected: bool = True
    # Per-round flags; reset only by service.begin_round
    is_guesser: bool = False
    has_guessed: bool = False
    has_ranked: bool = False


@dataclass
class Entry:
    player_name: str
    text: str


@dataclass
class PlayerResult:
    guess: list[str]
    score: int


@dataclass(frozen=True)
class Outbound:
    """A message the transport should deliver to a room code or a connection id."""

    event: str
    payload: dict[str, Any]
    to: str


@dataclass
class Room:
    code: str
    host_id: str
    host_name: str
    players: list[Player] = field(default_factory=list)
    entries: list[Entry] = field(default_factory=list)
    guesses: dict[str, list[str]] = field(default_factory=dict)
    judge_ranking: list[str] = field(default_factory=list)
    selected_entries: list[str] = field(default_factory=list)
    shuffled_entries: list[str] = field(default_factory=list)
    total_scores: dict[str, int] = field(default_factory=dict)
    last_results: dict[str, PlayerResult] = field(default_factory=dict)
    round: int = 1
    round_limit: int = 5
    phase: Phase = "lobby"
    phase_start_time: float = 0.0
    judge_name: str | None = None
    category: str | None = None
    max_players: int = 10
    empty_since: float | None = None

    def player_by_id(self, player_id: str) -> Player | None:
        if not player_id:
            return None
        for p in self.players:
            if p.id == player_id:
                return p
        return None

    def player_by_name(self, name: str | None) -> Player | None:
        if not name:
            return None
        for p in self.players:
            if p.name == name:
                return p
        return None

    def player_names(self) -> list[str]:
        return [p.name for p in self.players]

    def unique_entry_texts(self) -> list[str]:
        seen: dict[str, None] = {}
        for e in self.entries:
            seen.setdefault(e.text, None)
        return list(seen)

    @property
    def game_over(self) -> bool:
        return self.phase == "reveal" and self.round >= self.round_limit
