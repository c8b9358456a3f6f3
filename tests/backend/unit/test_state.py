import random
from datetime import datetime

from guesswho.backend.config import GameSettings
from guesswho.backend.content import InMemoryContentProvider
from guesswho.backend.models import Message, Participant
from guesswho.backend.roster import InMemoryRosterProvider
from guesswho.backend.session import GameSession
from guesswho.backend.state import build_snapshot, player_json

MESSAGE = Message(
    id="msg-1",
    content="fourth coffee of the day and i can hear colors",
    author_id="b",
    timestamp=datetime(2024, 11, 5, 14, 0),
)


def _session(total_rounds: int = 1) -> GameSession:
    roster = InMemoryRosterProvider(
        participants=[Participant(id=name, display_name=name.upper()) for name in ("a", "b", "c")],
        current_participant_id="a",
    )
    session = GameSession(
        roster=roster,
        content=InMemoryContentProvider(messages=[MESSAGE]),
        settings=GameSettings(total_rounds=total_rounds),
        rng=random.Random(2),
    )
    session.refresh_identity()
    session.reload_roster()
    return session


def test_lobby_snapshot_reports_players_and_host() -> None:
    state = build_snapshot(_session())

    assert state["phase"] == "lobby"
    assert state["roundPhase"] is None
    assert state["roundIndex"] == 1
    assert state["totalRounds"] == 1
    assert state["message"] is None
    assert state["localPlayerId"] == "a"
    assert state["isHost"] is True
    assert state["canStart"] is True
    assert state["minPlayers"] == 3
    assert [player["id"] for player in state["players"]] == ["a", "b", "c"]
    assert state["error"] is None


def test_initial_guess_snapshot_hides_date_and_author() -> None:
    session = _session()
    session.start_game()

    state = session.snapshot()

    assert state["phase"] == "playing"
    assert state["roundPhase"] == "initial-guess"
    assert state["timeRemaining"] == 15
    assert state["message"] == {"id": "msg-1", "content": MESSAGE.content}
    assert [player["id"] for player in state["candidateOptions"]] == ["b", "c"]
    assert state["selection"] is None
    assert state["canStart"] is False


def test_multiple_choice_snapshot_reveals_date() -> None:
    session = _session()
    session.start_game()
    session.select_candidate("c")
    session.lock_in()

    state = session.snapshot()

    assert state["roundPhase"] == "multiple-choice"
    assert state["message"]["timestamp"] == "2024-11-05T14:00:00"
    assert "authorId" not in state["message"]
    assert state["initialGuess"] == "c"
    assert state["selection"] == "c"
    assert state["lockedIn"] is False
    assert sorted(player["id"] for player in state["candidateOptions"]) == ["b", "c"]


def test_round_summary_snapshot_reveals_result() -> None:
    session = _session()
    session.start_game()
    session.select_candidate("c")
    session.lock_in()
    session.select_candidate("b")
    session.lock_in()

    state = session.snapshot()

    assert state["phase"] == "round-summary"
    assert state["message"]["authorId"] == "b"
    result = state["lastResult"]
    assert result["pointsEarned"] == 1
    assert result["headline"] == "Nice! You figured it out!"
    assert result["breakdown"] == "+1 point (correct after hint)"
    assert result["correctAuthor"]["displayName"] == "B"
    assert result["totalScore"] == 1
    assert result["isLastRound"] is True


def test_end_game_snapshot_lists_standings() -> None:
    session = _session()
    session.start_game()
    session.select_candidate("b")
    session.lock_in()
    session.lock_in()
    session.on_continue()

    state = session.snapshot()

    assert state["phase"] == "end-game"
    standings = state["standings"]
    assert standings["entries"][0]["player"]["id"] == "a"
    assert standings["entries"][0]["rankLabel"] == "1st"
    assert [entry["rank"] for entry in standings["entries"]] == [1, 2, 2]
    assert standings["winners"] == ["a"]
    assert standings["isTie"] is False
    assert standings["maxPossibleScore"] == 2


def test_player_json_uses_camel_case_keys() -> None:
    session = _session()

    assert player_json(session.players[0]) == {
        "id": "a",
        "displayName": "A",
        "avatarRef": None,
        "score": 0,
        "currentGuess": None,
    }
