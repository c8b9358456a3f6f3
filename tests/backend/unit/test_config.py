import pytest

from guesswho.backend.config import load_settings

ENV_NAMES = (
    "GUESSWHO_DEV_MODE",
    "GUESSWHO_MIN_PLAYERS",
    "GUESSWHO_TOTAL_ROUNDS",
    "GUESSWHO_PHASE_SECONDS",
    "GUESSWHO_TICK_SECONDS",
    "GUESSWHO_ROSTER_POLL_SECONDS",
    "GUESSWHO_SCORING_SCOPE",
    "GUESSWHO_HOST",
    "GUESSWHO_PORT",
)


def _clear_env(monkeypatch) -> None:
    for name in ENV_NAMES:
        monkeypatch.delenv(name, raising=False)


def test_load_settings_reads_expected_env(monkeypatch) -> None:
    _clear_env(monkeypatch)
    monkeypatch.setenv("GUESSWHO_MIN_PLAYERS", "4")
    monkeypatch.setenv("GUESSWHO_TOTAL_ROUNDS", "5")
    monkeypatch.setenv("GUESSWHO_PHASE_SECONDS", "20")
    monkeypatch.setenv("GUESSWHO_TICK_SECONDS", "0.5")
    monkeypatch.setenv("GUESSWHO_ROSTER_POLL_SECONDS", "3")
    monkeypatch.setenv("GUESSWHO_SCORING_SCOPE", "reporter")
    monkeypatch.setenv("GUESSWHO_HOST", "localhost")
    monkeypatch.setenv("GUESSWHO_PORT", "9000")

    settings = load_settings()

    assert settings.dev_mode is False
    assert settings.min_players == 4
    assert settings.total_rounds == 5
    assert settings.phase_seconds == 20
    assert settings.tick_seconds == 0.5
    assert settings.roster_poll_seconds == 3.0
    assert settings.scoring_scope == "reporter"
    assert settings.host == "localhost"
    assert settings.port == 9000


def test_load_settings_applies_defaults(monkeypatch) -> None:
    _clear_env(monkeypatch)

    settings = load_settings()

    assert settings.dev_mode is False
    assert settings.min_players == 3
    assert settings.total_rounds == 10
    assert settings.phase_seconds == 15
    assert settings.tick_seconds == 1.0
    assert settings.scoring_scope == "local"
    assert settings.host == "127.0.0.1"
    assert settings.port == 8000


def test_dev_mode_lowers_minimum_players(monkeypatch) -> None:
    _clear_env(monkeypatch)
    monkeypatch.setenv("GUESSWHO_DEV_MODE", "true")

    settings = load_settings()

    assert settings.dev_mode is True
    assert settings.min_players == 1


def test_explicit_minimum_wins_over_dev_mode(monkeypatch) -> None:
    _clear_env(monkeypatch)
    monkeypatch.setenv("GUESSWHO_DEV_MODE", "1")
    monkeypatch.setenv("GUESSWHO_MIN_PLAYERS", "2")

    assert load_settings().min_players == 2


def test_load_settings_rejects_unknown_scoring_scope(monkeypatch) -> None:
    _clear_env(monkeypatch)
    monkeypatch.setenv("GUESSWHO_SCORING_SCOPE", "everyone")

    with pytest.raises(ValueError):
        load_settings()
