"""Round engine: the two-phase guess state machine for a single round."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Callable, Sequence

from .config import DEFAULT_PHASE_SECONDS
from .errors import PreconditionError
from .models import Message, Player, RoundPhase, RoundResult
from .scoring import build_choice_options, score

logger = logging.getLogger(__name__)

RoundCompleteCallback = Callable[[RoundResult], None]


@dataclass(frozen=True)
class RoundState:
    phase: RoundPhase
    remaining_seconds: int
    initial_guess: str | None
    current_guess: str | None
    multiple_choice_options: tuple[Player, ...]
    locked_in: bool


class RoundEngine:
    """Drives one round from the initial guess to exactly one emitted result.

    Transitions fire from ``poll()``, which ``tick()`` calls after every
    decrement. A lock-in only marks the phase as finished; the caller polls
    right after forwarding the intent so the transition happens without
    waiting for the timer.
    """

    def __init__(
        self,
        message: Message,
        roster: Sequence[Player],
        local_player_id: str | None,
        on_complete: RoundCompleteCallback,
        phase_seconds: int = DEFAULT_PHASE_SECONDS,
        rng: random.Random | None = None,
    ) -> None:
        if not local_player_id:
            raise PreconditionError("The local participant is unknown; a round cannot start")
        self.message = message
        self.local_player_id = local_player_id
        self._roster = tuple(roster)
        self._on_complete = on_complete
        self._phase_seconds = phase_seconds
        self._rng = rng or random.Random()

        self._phase = RoundPhase.INITIAL_GUESS
        self._remaining_seconds = phase_seconds
        self._initial_guess: str | None = None
        self._current_guess: str | None = None
        self._options: tuple[Player, ...] = ()
        self._locked_in = False
        self._finished = False
        self._cancelled = False

    @property
    def state(self) -> RoundState:
        return RoundState(
            phase=self._phase,
            remaining_seconds=self._remaining_seconds,
            initial_guess=self._initial_guess,
            current_guess=self._current_guess,
            multiple_choice_options=self._options,
            locked_in=self._locked_in,
        )

    @property
    def phase(self) -> RoundPhase:
        return self._phase

    @property
    def finished(self) -> bool:
        return self._finished or self._cancelled

    @property
    def phase_seconds(self) -> int:
        return self._phase_seconds

    def candidates(self) -> list[Player]:
        """Players that may be selected in the current phase."""
        if self._phase is RoundPhase.INITIAL_GUESS:
            return [player for player in self._roster if player.id != self.local_player_id]
        return list(self._options)

    def select_player(self, player_id: str) -> bool:
        if self.finished or self._locked_in:
            return False
        if all(player.id != player_id for player in self.candidates()):
            logger.debug("Ignoring selection of %s; not a candidate in %s", player_id, self._phase.value)
            return False
        self._current_guess = player_id
        return True

    def lock_in(self) -> bool:
        if self.finished or self._locked_in or self._current_guess is None:
            return False
        self._locked_in = True
        return True

    def tick(self) -> bool:
        """Advance the timer by one second. Returns True when a transition fired."""
        if self.finished:
            return False
        if not self._locked_in and self._remaining_seconds > 0:
            self._remaining_seconds -= 1
        return self.poll()

    def poll(self) -> bool:
        """Fire the pending transition, if the phase is locked in or timed out."""
        if self.finished:
            return False
        if not self._locked_in and self._remaining_seconds > 0:
            return False
        if self._phase is RoundPhase.INITIAL_GUESS:
            self._enter_multiple_choice()
        else:
            self._complete()
        return True

    def cancel(self) -> None:
        """Discard the round without emitting a result."""
        if not self._finished:
            self._cancelled = True

    def _enter_multiple_choice(self) -> None:
        self._initial_guess = self._current_guess
        self._options = tuple(
            build_choice_options(
                roster=self._roster,
                author_id=self.message.author_id,
                local_player_id=self.local_player_id,
                rng=self._rng,
            )
        )
        if not self._options:
            logger.warning("Author %s of message %s is not in the roster", self.message.author_id, self.message.id)
        self._phase = RoundPhase.MULTIPLE_CHOICE
        self._remaining_seconds = self._phase_seconds
        self._locked_in = False
        logger.debug("Round for message %s entered multiple choice", self.message.id)

    def _complete(self) -> None:
        self._finished = True
        result = RoundResult(
            initial_guess=self._initial_guess,
            final_guess=self._current_guess,
            correct_author_id=self.message.author_id,
            points_earned=score(self._initial_guess, self._current_guess, self.message.author_id),
        )
        logger.debug("Round for message %s completed with %s points", self.message.id, result.points_earned)
        self._on_complete(result)
