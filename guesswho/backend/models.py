"""Domain models shared by the round engine, the session and the API."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class RoundPhase(str, Enum):
    INITIAL_GUESS = "initial-guess"
    MULTIPLE_CHOICE = "multiple-choice"


class GamePhase(str, Enum):
    LOBBY = "lobby"
    PLAYING = "playing"
    ROUND_SUMMARY = "round-summary"
    END_GAME = "end-game"


@dataclass(frozen=True)
class Participant:
    """A member of the voice channel as reported by the roster provider."""

    id: str
    display_name: str
    avatar_ref: str | None = None
    bot: bool = False


@dataclass(frozen=True)
class Player:
    id: str
    display_name: str
    avatar_ref: str | None = None
    score: int = 0
    current_guess: str | None = None

    @classmethod
    def from_participant(cls, participant: Participant) -> "Player":
        return cls(
            id=participant.id,
            display_name=participant.display_name,
            avatar_ref=participant.avatar_ref,
        )


@dataclass(frozen=True)
class Message:
    id: str
    content: str
    author_id: str
    timestamp: datetime

    @property
    def word_count(self) -> int:
        return len(self.content.split())


@dataclass(frozen=True)
class RoundResult:
    initial_guess: str | None
    final_guess: str | None
    correct_author_id: str
    points_earned: int


@dataclass(frozen=True)
class Standing:
    player: Player
    rank: int
    is_winner: bool
