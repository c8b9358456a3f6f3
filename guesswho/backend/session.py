"""Game session controller: sequences rounds and owns the score totals."""

from __future__ import annotations

import logging
import random
from dataclasses import replace
from typing import Any, Callable, Protocol, Sequence, TypeVar

from .config import GameSettings
from .content import ContentProvider
from .engine import RoundEngine
from .errors import ContentExhaustedError, PreconditionError, ProviderError
from .models import GamePhase, Message, Participant, Player, RoundPhase, RoundResult, Standing
from .roster import RosterProvider
from .scoring import rank_players, score
from .state import build_snapshot

logger = logging.getLogger(__name__)

SnapshotListener = Callable[[dict[str, Any]], None]

T = TypeVar("T")


class ScoreRecorder(Protocol):
    accepts_reports: bool

    def targets(self, local_player_id: str, reporter_id: str | None) -> list[str]:
        """Return the ids of the players credited with a round result."""


class LocalScoreRecorder:
    """Every client simulates its own game and only credits the local player."""

    accepts_reports = False

    def targets(self, local_player_id: str, reporter_id: str | None) -> list[str]:
        return [local_player_id]


class ReporterScoreRecorder:
    """Credits whichever player reported the result, for a collecting server."""

    accepts_reports = True

    def targets(self, local_player_id: str, reporter_id: str | None) -> list[str]:
        return [reporter_id or local_player_id]


def create_score_recorder(scope: str) -> ScoreRecorder:
    if scope == "reporter":
        return ReporterScoreRecorder()
    return LocalScoreRecorder()


class GameSession:
    def __init__(
        self,
        roster: RosterProvider,
        content: ContentProvider,
        settings: GameSettings | None = None,
        score_recorder: ScoreRecorder | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.settings = settings or GameSettings()
        self._roster = roster
        self._content = content
        self._score_recorder = score_recorder or create_score_recorder(self.settings.scoring_scope)
        self._rng = rng or random.Random()
        self._listeners: list[SnapshotListener] = []

        self._players: dict[str, Player] = {}
        self.local_player_id: str | None = None
        self.is_host = False
        self.phase = GamePhase.LOBBY
        self.current_round_index = 1
        self.round_messages: tuple[Message, ...] = ()
        self.last_round_result: RoundResult | None = None
        self.round: RoundEngine | None = None
        self._reported_ids: set[str] = set()
        self.error: str | None = None

    @property
    def players(self) -> list[Player]:
        return list(self._players.values())

    def get_player(self, player_id: str | None) -> Player | None:
        if player_id is None:
            return None
        return self._players.get(player_id)

    @property
    def total_rounds(self) -> int:
        if self.round_messages:
            return min(self.settings.total_rounds, len(self.round_messages))
        return self.settings.total_rounds

    @property
    def current_message(self) -> Message | None:
        if self.phase not in (GamePhase.PLAYING, GamePhase.ROUND_SUMMARY) or not self.round_messages:
            return None
        return self.round_messages[self.current_round_index - 1]

    @property
    def is_last_round(self) -> bool:
        return self.current_round_index >= self.total_rounds

    @property
    def can_start(self) -> bool:
        return self.phase is GamePhase.LOBBY and len(self._players) >= self.settings.min_players

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def snapshot(self) -> dict[str, Any]:
        return build_snapshot(self)

    def refresh_identity(self) -> None:
        """Resolve the local participant and host flag from the roster provider."""
        local_player_id = self._call_roster(self._roster.get_current_participant_id)
        is_host = False
        if local_player_id:
            is_host = self._call_roster(lambda: self._roster.is_host(local_player_id))
        self.local_player_id = local_player_id
        self.is_host = is_host
        self._changed()

    def reload_roster(self) -> None:
        """Pull the participant list from the roster provider and merge it."""
        self.sync_roster(self._call_roster(self._roster.get_participants))

    def sync_roster(self, participants: Sequence[Participant]) -> None:
        """Merge a roster snapshot; scores and guesses of known players survive."""
        merged: dict[str, Player] = {}
        for participant in participants:
            existing = self._players.get(participant.id)
            if existing is None:
                merged[participant.id] = Player.from_participant(participant)
            else:
                merged[participant.id] = replace(
                    existing,
                    display_name=participant.display_name,
                    avatar_ref=participant.avatar_ref,
                )
        is_host = self.is_host
        if self.local_player_id:
            is_host = self._call_roster(lambda: self._roster.is_host(self.local_player_id))
        departed = set(self._players) - set(merged)
        if departed:
            logger.info("Players left: %s", ", ".join(sorted(departed)))
        self._players = merged
        self.is_host = is_host
        self._changed()

    def start_game(self, eligible_players: Sequence[Player] | None = None) -> None:
        if self.phase is not GamePhase.LOBBY:
            raise PreconditionError(f"A game can only start from the lobby, not from {self.phase.value}")
        players = list(eligible_players) if eligible_players is not None else self.players
        if len(players) < self.settings.min_players:
            raise PreconditionError(
                f"At least {self.settings.min_players} players are needed to start, {len(players)} present"
            )
        author_ids = {player.id for player in players}
        try:
            local_player_id = self._call_roster(self._roster.get_current_participant_id)
            if not local_player_id:
                raise PreconditionError("The local participant is unknown; the game cannot start")
            if not self._call_roster(lambda: self._roster.is_host(local_player_id)):
                raise PreconditionError("Only the host can start the game")
            messages = self._call_content(lambda: self._content.get_rounds(self.settings.total_rounds, author_ids))
        except ProviderError as exc:
            self._fail(str(exc))
            raise
        messages = messages[: self.settings.total_rounds]
        if not messages:
            message = "No messages are available for the players in this channel"
            self._fail(message)
            raise ContentExhaustedError(message)
        if len(messages) < self.settings.total_rounds:
            logger.info("Only %d of %d rounds have content", len(messages), self.settings.total_rounds)

        for player in players:
            if player.id not in self._players:
                self._players[player.id] = player
        self._players = {
            player_id: replace(player, score=0, current_guess=None) for player_id, player in self._players.items()
        }
        self.local_player_id = local_player_id
        self.round_messages = tuple(messages)
        self.current_round_index = 1
        self.last_round_result = None
        self.error = None
        self.phase = GamePhase.PLAYING
        logger.info("Game started with %d players and %d rounds", len(players), self.total_rounds)
        self._start_round()

    def on_round_complete(self, result: RoundResult, reporter_id: str | None = None) -> None:
        if self.phase is not GamePhase.PLAYING or self.local_player_id is None:
            raise PreconditionError("Round results are only accepted while a round is being played")
        self._credit(result, self._score_recorder.targets(self.local_player_id, reporter_id))
        if self.round is not None:
            self.round.cancel()
            self.round = None
        self.last_round_result = result
        self.phase = GamePhase.ROUND_SUMMARY
        logger.info("Round %d finished: %d points", self.current_round_index, result.points_earned)
        self._changed()

    def report_result(
        self,
        reporter_id: str,
        round_index: int,
        initial_guess: str | None,
        final_guess: str | None,
    ) -> RoundResult:
        """Credit a result played on another client for the current round.

        Points are recomputed from the guesses against the round's author. Each
        player is credited at most once per round, and reports are accepted
        until the next round starts.
        """
        if not self._score_recorder.accepts_reports or self.local_player_id is None:
            raise PreconditionError("Reported results need the reporter scoring scope")
        if self.phase not in (GamePhase.PLAYING, GamePhase.ROUND_SUMMARY):
            raise PreconditionError("Results can only be reported while a round is being played or summarized")
        if round_index != self.current_round_index:
            raise PreconditionError(f"Round {round_index} is not the current round {self.current_round_index}")
        if reporter_id not in self._players:
            raise PreconditionError(f"Unknown player {reporter_id}")
        if reporter_id in self._reported_ids:
            raise PreconditionError(f"A result for {reporter_id} was already recorded this round")
        author_id = self.round_messages[self.current_round_index - 1].author_id
        result = RoundResult(
            initial_guess=initial_guess,
            final_guess=final_guess,
            correct_author_id=author_id,
            points_earned=score(initial_guess, final_guess, author_id),
        )
        self._credit(result, self._score_recorder.targets(self.local_player_id, reporter_id))
        logger.info("Round %d result from %s: %d points", round_index, reporter_id, result.points_earned)
        self._changed()
        return result

    def on_continue(self) -> None:
        if self.phase is not GamePhase.ROUND_SUMMARY:
            raise PreconditionError("Continue is only possible from the round summary")
        if self.current_round_index >= self.settings.total_rounds or self.current_round_index >= len(
            self.round_messages
        ):
            self.phase = GamePhase.END_GAME
            logger.info("Game over after %d rounds", self.current_round_index)
            self._changed()
            return
        self.current_round_index += 1
        self.last_round_result = None
        self._players = {
            player_id: replace(player, current_guess=None) for player_id, player in self._players.items()
        }
        self.phase = GamePhase.PLAYING
        self._start_round()

    def on_play_again(self) -> None:
        if self.round is not None:
            self.round.cancel()
            self.round = None
        self.phase = GamePhase.LOBBY
        self.current_round_index = 1
        self.round_messages = ()
        self.last_round_result = None
        self.error = None
        self._changed()

    def select_candidate(self, player_id: str, phase: RoundPhase | None = None) -> bool:
        engine = self._active_round()
        if phase is not None and engine.phase is not phase:
            return False
        selected = engine.select_player(player_id)
        if selected:
            self._changed()
        return selected

    def lock_in(self, phase: RoundPhase | None = None) -> bool:
        """Lock in the current selection; a stale ``phase`` makes this a no-op."""
        engine = self._active_round()
        if phase is not None and engine.phase is not phase:
            return False
        if not engine.lock_in():
            return False
        engine.poll()
        # a completed round already emitted through on_round_complete
        if not engine.finished:
            self._changed()
        return True

    def tick(self) -> bool:
        """Advance the round timer by one tick; returns whether anything changed."""
        engine = self.round
        if self.phase is not GamePhase.PLAYING or engine is None or engine.finished:
            return False
        before = engine.state
        transitioned = engine.tick()
        if engine.finished:
            return True
        if transitioned or engine.state != before:
            self._changed()
            return True
        return False

    def standings(self) -> list[Standing]:
        return rank_players(self.players)

    def _start_round(self) -> None:
        message = self.round_messages[self.current_round_index - 1]
        self._reported_ids = set()
        self.round = RoundEngine(
            message=message,
            roster=self.players,
            local_player_id=self.local_player_id,
            on_complete=self.on_round_complete,
            phase_seconds=self.settings.phase_seconds,
            rng=self._rng,
        )
        logger.info("Round %d of %d started", self.current_round_index, self.total_rounds)
        self._changed()

    def _credit(self, result: RoundResult, player_ids: Sequence[str]) -> None:
        for player_id in player_ids:
            player = self._players.get(player_id)
            if player is None:
                logger.warning("Round result for %s dropped; player is no longer in the roster", player_id)
                continue
            if player_id in self._reported_ids:
                logger.warning("Round result for %s dropped; already credited this round", player_id)
                continue
            self._reported_ids.add(player_id)
            self._players[player_id] = replace(
                player,
                score=player.score + result.points_earned,
                current_guess=result.final_guess,
            )

    def _active_round(self) -> RoundEngine:
        if self.phase is not GamePhase.PLAYING or self.round is None or self.round.finished:
            raise PreconditionError("No round is being played")
        return self.round

    def _fail(self, message: str) -> None:
        logger.warning("Game could not start: %s", message)
        self.error = message
        self._changed()

    def _call_roster(self, call: Callable[[], T]) -> T:
        try:
            return call()
        except Exception as exc:
            raise ProviderError("roster", exc) from exc

    def _call_content(self, call: Callable[[], T]) -> T:
        try:
            return call()
        except Exception as exc:
            raise ProviderError("content", exc) from exc

    def _changed(self) -> None:
        if not self._listeners:
            return
        state = self.snapshot()
        for listener in list(self._listeners):
            listener(state)
