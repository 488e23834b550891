"""Configuration settings behaviour tests."""

from __future__ import annotations

import pytest

from app.config import Settings


def test_defaults_describe_heuristic_only_mode() -> None:
    """Without credentials the inference service counts as unconfigured."""

    settings = Settings(_env_file=None, OPENROUTER_API_KEY=None)

    assert settings.inference_configured is False
    assert settings.candidate_limit == 5
    assert 0.4 <= settings.heuristic_low_confidence <= settings.heuristic_confidence <= 0.5


def test_blank_credentials_are_treated_as_missing() -> None:
    """Whitespace-only keys should not enable the inference branch."""

    settings = Settings(_env_file=None, OPENROUTER_API_KEY="   ", TMDB_API_KEY="")

    assert settings.openrouter_api_key is None
    assert settings.tmdb_api_key is None
    assert settings.inference_configured is False


def test_inference_configured_with_key() -> None:
    settings = Settings(_env_file=None, OPENROUTER_API_KEY="sk-test")

    assert settings.inference_configured is True


def test_log_level_is_normalised() -> None:
    settings = Settings(_env_file=None, LOG_LEVEL="debug")

    assert settings.log_level == "DEBUG"


def test_unknown_log_level_raises() -> None:
    with pytest.raises(ValueError, match="LOG_LEVEL"):
        Settings(_env_file=None, LOG_LEVEL="chatty")


def test_confidence_bands_must_stay_ordered() -> None:
    """The low-confidence constant may not exceed the confident one."""

    with pytest.raises(ValueError, match="HEURISTIC_LOW_CONFIDENCE"):
        Settings(
            _env_file=None,
            HEURISTIC_CONFIDENCE=0.4,
            HEURISTIC_LOW_CONFIDENCE=0.45,
        )


def test_rating_thresholds_must_stay_ordered() -> None:
    with pytest.raises(ValueError, match="GOOD_RATING_THRESHOLD"):
        Settings(
            _env_file=None,
            HIGH_RATING_THRESHOLD=6.0,
            GOOD_RATING_THRESHOLD=7.0,
        )
