"""Snapshot builders for the presentation layer."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .models import GamePhase, Message, Player, RoundPhase, RoundResult
from .scoring import SCORE_FIRST_TRY, is_tie, points_breakdown, rank_label, result_headline, winners

if TYPE_CHECKING:
    from .session import GameSession


def player_json(player: Player) -> dict[str, Any]:
    return {
        "id": player.id,
        "displayName": player.display_name,
        "avatarRef": player.avatar_ref,
        "score": player.score,
        "currentGuess": player.current_guess,
    }


def message_json(message: Message, show_date: bool, reveal_author: bool) -> dict[str, Any]:
    payload: dict[str, Any] = {"id": message.id, "content": message.content}
    if show_date:
        payload["timestamp"] = message.timestamp.isoformat()
    if reveal_author:
        payload["authorId"] = message.author_id
    return payload


def build_snapshot(session: GameSession) -> dict[str, Any]:
    """Return the full game state for the local player as plain JSON data."""
    engine = session.round if session.phase is GamePhase.PLAYING else None
    round_state = engine.state if engine is not None else None
    message = session.current_message

    snapshot: dict[str, Any] = {
        "phase": session.phase.value,
        "roundPhase": round_state.phase.value if round_state is not None else None,
        "roundIndex": session.current_round_index,
        "totalRounds": session.total_rounds,
        "timeRemaining": round_state.remaining_seconds if round_state is not None else 0,
        "phaseSeconds": session.settings.phase_seconds,
        "message": None,
        "candidateOptions": [],
        "selection": None,
        "initialGuess": None,
        "lockedIn": False,
        "lastResult": None,
        "standings": None,
        "players": [player_json(player) for player in session.players],
        "localPlayerId": session.local_player_id,
        "isHost": session.is_host,
        "minPlayers": session.settings.min_players,
        "canStart": session.can_start,
        "error": session.error,
    }

    if engine is not None and round_state is not None and message is not None:
        snapshot["message"] = message_json(
            message,
            show_date=round_state.phase is RoundPhase.MULTIPLE_CHOICE,
            reveal_author=False,
        )
        snapshot["candidateOptions"] = [player_json(player) for player in engine.candidates()]
        snapshot["selection"] = round_state.current_guess
        snapshot["initialGuess"] = round_state.initial_guess
        snapshot["lockedIn"] = round_state.locked_in

    if session.phase is GamePhase.ROUND_SUMMARY and session.last_round_result is not None and message is not None:
        snapshot["message"] = message_json(message, show_date=True, reveal_author=True)
        snapshot["lastResult"] = _result_json(session, session.last_round_result)

    if session.phase is GamePhase.END_GAME:
        snapshot["standings"] = _standings_json(session)

    return snapshot


def _result_json(session: GameSession, result: RoundResult) -> dict[str, Any]:
    correct_author = session.get_player(result.correct_author_id)
    local_player = session.get_player(session.local_player_id)
    return {
        "initialGuess": result.initial_guess,
        "finalGuess": result.final_guess,
        "correctAuthorId": result.correct_author_id,
        "correctAuthor": player_json(correct_author) if correct_author is not None else None,
        "pointsEarned": result.points_earned,
        "headline": result_headline(result),
        "breakdown": points_breakdown(result),
        "totalScore": local_player.score if local_player is not None else 0,
        "isLastRound": session.is_last_round,
    }


def _standings_json(session: GameSession) -> dict[str, Any]:
    standings = session.standings()
    return {
        "entries": [
            {
                "player": player_json(standing.player),
                "rank": standing.rank,
                "rankLabel": rank_label(standing.rank),
                "isWinner": standing.is_winner,
            }
            for standing in standings
        ],
        "winners": [player.id for player in winners(standings)],
        "isTie": is_tie(standings),
        "maxPossibleScore": session.total_rounds * SCORE_FIRST_TRY,
    }
