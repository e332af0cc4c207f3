from __future__ import annotations

from ..config import Config
from .models import PlayerResult


def score_guess(guess: list[str], ranking: list[str], bonus: int | None = None) -> int:
    """One point per position matching the judge's ranking, plus a bonus for a perfect match."""
    if bonus is None:
        bonus = Config.PERFECT_BONUS
    score = sum(1 for g, r in zip(guess, ranking) if g == r)
    if ranking and len(guess) == len(ranking) and score == len(ranking):
        score += bonus
    return score


def score_round(guesses: dict[str, list[str]], ranking: list[str]) -> dict[str, PlayerResult]:
    return {
        name: PlayerResult(guess=list(guess), score=score_guess(guess, ranking))
        for name, guess in guesses.items()
    }


def accumulate(totals: dict[str, int], results: dict[str, PlayerResult]) -> None:
    for name, result in results.items():
        totals[name] = totals.get(name, 0) + result.score
