"""Configuration helpers for the game runtime."""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_MIN_PLAYERS = 3
DEV_MIN_PLAYERS = 1
DEFAULT_TOTAL_ROUNDS = 10
DEFAULT_PHASE_SECONDS = 15

MESSAGE_MIN_WORDS = 5
MESSAGE_MAX_WORDS = 20

SCORING_SCOPES = ("local", "reporter")


@dataclass(frozen=True)
class GameSettings:
    dev_mode: bool = False
    min_players: int = DEFAULT_MIN_PLAYERS
    total_rounds: int = DEFAULT_TOTAL_ROUNDS
    phase_seconds: int = DEFAULT_PHASE_SECONDS
    tick_seconds: float = 1.0
    roster_poll_seconds: float = 2.0
    scoring_scope: str = "local"
    host: str = "127.0.0.1"
    port: int = 8000


def _env_flag(name: str) -> bool:
    return os.getenv(name, "false").strip().lower() in {"1", "true", "yes", "on"}


def load_settings() -> GameSettings:
    dev_mode = _env_flag("GUESSWHO_DEV_MODE")
    min_players_default = DEV_MIN_PLAYERS if dev_mode else DEFAULT_MIN_PLAYERS
    scoring_scope = os.getenv("GUESSWHO_SCORING_SCOPE", "local").strip().lower()
    if scoring_scope not in SCORING_SCOPES:
        raise ValueError(f"GUESSWHO_SCORING_SCOPE must be one of {', '.join(SCORING_SCOPES)}")
    return GameSettings(
        dev_mode=dev_mode,
        min_players=int(os.getenv("GUESSWHO_MIN_PLAYERS", str(min_players_default))),
        total_rounds=int(os.getenv("GUESSWHO_TOTAL_ROUNDS", str(DEFAULT_TOTAL_ROUNDS))),
        phase_seconds=int(os.getenv("GUESSWHO_PHASE_SECONDS", str(DEFAULT_PHASE_SECONDS))),
        tick_seconds=float(os.getenv("GUESSWHO_TICK_SECONDS", "1.0")),
        roster_poll_seconds=float(os.getenv("GUESSWHO_ROSTER_POLL_SECONDS", "2.0")),
        scoring_scope=scoring_scope,
        host=os.getenv("GUESSWHO_HOST", "127.0.0.1"),
        port=int(os.getenv("GUESSWHO_PORT", "8000")),
    )
