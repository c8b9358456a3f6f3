"""Scoring, option generation and final standings."""

from __future__ import annotations

import random
from typing import Sequence, TypeVar

from .models import Player, RoundResult, Standing

SCORE_FIRST_TRY = 2
SCORE_CHANGED_GUESS = 1
SCORE_WRONG = 0

DECOY_COUNT = 2

T = TypeVar("T")


def score(initial_guess: str | None, final_guess: str | None, correct_author_id: str) -> int:
    """Return the points for one round.

    Two points for a correct initial guess, one point when the final guess is
    correct after a wrong (or missing) initial guess, zero otherwise.
    """
    if initial_guess is not None and initial_guess == correct_author_id:
        return SCORE_FIRST_TRY
    if final_guess is not None and final_guess == correct_author_id:
        return SCORE_CHANGED_GUESS
    return SCORE_WRONG


def shuffle(items: Sequence[T], rng: random.Random | None = None) -> list[T]:
    """Fisher-Yates shuffle into a new list; every permutation equally likely."""
    rng = rng or random.Random()
    shuffled = list(items)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def build_choice_options(
    roster: Sequence[Player],
    author_id: str,
    local_player_id: str,
    rng: random.Random | None = None,
    decoy_count: int = DECOY_COUNT,
) -> list[Player]:
    """Return the correct author plus up to ``decoy_count`` decoys in random order.

    The author and the local player never appear as decoys. An empty list is
    returned when the author is not in the roster.
    """
    rng = rng or random.Random()
    correct = next((player for player in roster if player.id == author_id), None)
    if correct is None:
        return []

    candidates = [player for player in roster if player.id not in {author_id, local_player_id}]
    decoys = shuffle(candidates, rng)[:decoy_count]
    return shuffle([correct, *decoys], rng)


def rank_players(players: Sequence[Player]) -> list[Standing]:
    """Sort players by score and assign shared ranks to equal scores."""
    ordered = sorted(players, key=lambda player: player.score, reverse=True)
    top_score = ordered[0].score if ordered else 0
    standings: list[Standing] = []
    for player in ordered:
        ahead = sum(1 for other in ordered if other.score > player.score)
        standings.append(Standing(player=player, rank=ahead + 1, is_winner=player.score == top_score))
    return standings


def winners(standings: Sequence[Standing]) -> list[Player]:
    return [standing.player for standing in standings if standing.is_winner]


def is_tie(standings: Sequence[Standing]) -> bool:
    return len(winners(standings)) > 1


def rank_label(rank: int) -> str:
    if rank == 1:
        return "1st"
    if rank == 2:
        return "2nd"
    if rank == 3:
        return "3rd"
    return f"{rank}th"


def result_headline(result: RoundResult) -> str:
    if result.points_earned == SCORE_FIRST_TRY:
        return "Perfect! You got it on the first try!"
    if result.points_earned == SCORE_CHANGED_GUESS:
        return "Nice! You figured it out!"
    if result.initial_guess is None and result.final_guess is None:
        return "Time's up! No guess submitted."
    return "Not quite this time!"


def points_breakdown(result: RoundResult) -> str:
    if result.points_earned == SCORE_FIRST_TRY:
        return "+2 points (correct on first guess)"
    if result.points_earned == SCORE_CHANGED_GUESS:
        return "+1 point (correct after hint)"
    return "+0 points"
