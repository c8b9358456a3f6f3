"""Backend package for the Guess Who Said It game."""

from .config import GameSettings, load_settings
from .context import ActivityContext
from .engine import RoundEngine, RoundState
from .errors import ContentExhaustedError, GameError, PreconditionError, ProviderError
from .models import GamePhase, Message, Participant, Player, RoundPhase, RoundResult, Standing
from .scoring import build_choice_options, rank_players, score
from .session import GameSession

__all__ = [
    "ActivityContext",
    "build_choice_options",
    "ContentExhaustedError",
    "GamePhase",
    "GameError",
    "GameSession",
    "GameSettings",
    "load_settings",
    "Message",
    "Participant",
    "Player",
    "PreconditionError",
    "ProviderError",
    "rank_players",
    "RoundEngine",
    "RoundPhase",
    "RoundResult",
    "RoundState",
    "score",
    "Standing",
]
