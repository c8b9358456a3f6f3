import itertools
import random
from collections import Counter

import pytest

from guesswho.backend.models import Player, RoundResult
from guesswho.backend.scoring import (
    build_choice_options,
    is_tie,
    points_breakdown,
    rank_label,
    rank_players,
    result_headline,
    score,
    shuffle,
    winners,
)


def _roster(size: int) -> list[Player]:
    return [Player(id=f"p{index}", display_name=f"Player {index}") for index in range(size)]


@pytest.mark.parametrize(
    ("initial_guess", "final_guess", "expected"),
    [
        ("a", "a", 2),
        ("a", "b", 2),
        ("a", None, 2),
        ("b", "a", 1),
        (None, "a", 1),
        ("b", "b", 0),
        ("b", "c", 0),
        ("b", None, 0),
        (None, "b", 0),
        (None, None, 0),
    ],
)
def test_score_table(initial_guess, final_guess, expected) -> None:
    assert score(initial_guess, final_guess, "a") == expected


def test_score_randomized_properties() -> None:
    rng = random.Random(1234)
    ids = [None, "a", "b", "c"]
    for _ in range(500):
        initial_guess = rng.choice(ids)
        final_guess = rng.choice(ids)
        correct = rng.choice(["a", "b", "c"])

        points = score(initial_guess, final_guess, correct)

        assert points in {0, 1, 2}
        assert (points == 2) == (initial_guess == correct)
        assert (points == 1) == (final_guess == correct and initial_guess != correct)
        assert score(initial_guess, final_guess, correct) == points


def test_shuffle_returns_permutation_without_mutating_input() -> None:
    items = [1, 2, 3, 4, 5]

    shuffled = shuffle(items, random.Random(3))

    assert sorted(shuffled) == items
    assert items == [1, 2, 3, 4, 5]


def test_shuffle_is_roughly_uniform() -> None:
    rng = random.Random(99)
    counts = Counter(tuple(shuffle("abc", rng)) for _ in range(6000))

    assert set(counts) == set(itertools.permutations("abc"))
    assert all(800 < count < 1200 for count in counts.values())


def test_choice_options_hold_author_once_without_duplicates() -> None:
    rng = random.Random(7)
    for size in range(3, 9):
        roster = _roster(size)
        for author in roster:
            for local in (roster[0], roster[-1]):
                for _ in range(20):
                    options = build_choice_options(roster, author.id, local.id, rng)
                    option_ids = [player.id for player in options]

                    assert option_ids.count(author.id) == 1
                    assert len(option_ids) == len(set(option_ids))
                    assert len(option_ids) <= 3
                    if local.id != author.id:
                        assert local.id not in option_ids


def test_choice_options_place_author_at_every_position() -> None:
    rng = random.Random(11)
    roster = _roster(5)
    positions = Counter(
        [player.id for player in build_choice_options(roster, "p2", "p0", rng)].index("p2") for _ in range(600)
    )

    assert set(positions) == {0, 1, 2}


def test_choice_options_shrink_with_small_roster() -> None:
    roster = _roster(2)

    options = build_choice_options(roster, author_id="p1", local_player_id="p0", rng=random.Random(1))

    assert [player.id for player in options] == ["p1"]


def test_choice_options_empty_when_author_missing() -> None:
    assert build_choice_options(_roster(4), author_id="ghost", local_player_id="p0") == []


def test_rank_players_shares_rank_on_ties() -> None:
    players = [
        Player(id="A", display_name="A", score=10),
        Player(id="B", display_name="B", score=10),
        Player(id="C", display_name="C", score=7),
    ]

    standings = rank_players(players)

    assert [standing.player.id for standing in standings] == ["A", "B", "C"]
    assert [standing.rank for standing in standings] == [1, 1, 3]
    assert is_tie(standings) is True
    assert [player.id for player in winners(standings)] == ["A", "B"]


def test_rank_players_single_winner() -> None:
    players = [
        Player(id="A", display_name="A", score=3),
        Player(id="B", display_name="B", score=8),
        Player(id="C", display_name="C", score=3),
    ]

    standings = rank_players(players)

    assert [(standing.player.id, standing.rank) for standing in standings] == [("B", 1), ("A", 2), ("C", 2)]
    assert is_tie(standings) is False
    assert [player.id for player in winners(standings)] == ["B"]


def test_rank_players_handles_empty_roster() -> None:
    assert rank_players([]) == []


def test_rank_label() -> None:
    assert [rank_label(rank) for rank in (1, 2, 3, 4, 11)] == ["1st", "2nd", "3rd", "4th", "11th"]


def test_result_headline_and_breakdown() -> None:
    first_try = RoundResult(initial_guess="a", final_guess="a", correct_author_id="a", points_earned=2)
    corrected = RoundResult(initial_guess="b", final_guess="a", correct_author_id="a", points_earned=1)
    no_guess = RoundResult(initial_guess=None, final_guess=None, correct_author_id="a", points_earned=0)
    wrong = RoundResult(initial_guess="b", final_guess="c", correct_author_id="a", points_earned=0)

    assert result_headline(first_try) == "Perfect! You got it on the first try!"
    assert result_headline(corrected) == "Nice! You figured it out!"
    assert result_headline(no_guess) == "Time's up! No guess submitted."
    assert result_headline(wrong) == "Not quite this time!"
    assert points_breakdown(first_try) == "+2 points (correct on first guess)"
    assert points_breakdown(corrected) == "+1 point (correct after hint)"
    assert points_breakdown(wrong) == "+0 points"
