"""Inference response normalisation tests."""

from __future__ import annotations

import pytest

from app.models import InvalidInference, ValidInference
from app.services.normalizer import normalize


def test_camel_case_payload_is_normalised() -> None:
    raw = """
    {
      "isAnime": true,
      "detectedTitle": "Demon Slayer: Kimetsu no Yaiba",
      "characters": ["Tanjiro Kamado", "Nezuko Kamado"],
      "genre": "anime",
      "confidence": 0.92,
      "keywords": ["demon slayer", "tanjiro"],
      "similarTitles": ["Jujutsu Kaisen", "Chainsaw Man"],
      "description": "A boy with a checkered haori holds a katana"
    }
    """

    result = normalize(raw)

    assert isinstance(result, ValidInference)
    assert result.raw_valid is True
    assert result.detected_title == "Demon Slayer: Kimetsu no Yaiba"
    assert result.characters == ("Tanjiro Kamado", "Nezuko Kamado")
    assert result.similar_titles == ("Jujutsu Kaisen", "Chainsaw Man")
    assert result.confidence == pytest.approx(0.92)
    assert result.category_positive is True
    assert result.category == "anime"


def test_fenced_block_inside_prose_is_recovered() -> None:
    raw = (
        "Sure! Here is my analysis:\n"
        "```json\n"
        '{"genre": "live-action", "confidence": 0.7, "keywords": ["heist"]}\n'
        "```\n"
        "Let me know if you need more."
    )

    result = normalize(raw)

    assert isinstance(result, ValidInference)
    assert result.category == "live-action"
    assert result.category_positive is False
    assert result.keywords == ("heist",)


def test_missing_fields_take_defaults() -> None:
    result = normalize('{"genre": "animation"}')

    assert isinstance(result, ValidInference)
    assert result.detected_title is None
    assert result.characters == ()
    assert result.keywords == ()
    assert result.similar_titles == ()
    assert result.confidence == 0.0
    assert result.is_anime is False


@pytest.mark.parametrize(
    "raw, expected",
    [
        ('{"confidence": 85}', 0.85),
        ('{"confidence": "85%"}', 0.85),
        ('{"confidence": "0.6"}', 0.6),
        ('{"confidence": 1.0}', 1.0),
        ('{"confidence": -3}', 0.0),
        ('{"confidence": 450}', 1.0),
        ('{"confidence": "high"}', 0.0),
    ],
)
def test_confidence_is_coerced_into_unit_range(raw: str, expected: float) -> None:
    result = normalize(raw)

    assert isinstance(result, ValidInference)
    assert result.confidence == pytest.approx(expected)


def test_placeholder_strings_count_as_absent() -> None:
    result = normalize(
        '{"detectedTitle": "null", "genre": "Unknown", "detectedMood": "none",'
        ' "confidence": 0.5}'
    )

    assert isinstance(result, ValidInference)
    assert result.detected_title is None
    assert result.genre is None
    assert result.mood is None
    assert result.category == "unknown"


def test_comma_separated_lists_are_split_and_deduplicated() -> None:
    result = normalize('{"keywords": "samurai, Demons, demons, , katana"}')

    assert isinstance(result, ValidInference)
    assert result.keywords == ("samurai", "Demons", "katana")


def test_string_booleans_are_understood() -> None:
    result = normalize('{"isAnime": "yes", "confidence": 0.8}')

    assert isinstance(result, ValidInference)
    assert result.is_anime is True
    assert result.category_positive is True


def test_zero_confidence_is_never_category_positive() -> None:
    result = normalize('{"isAnime": true, "confidence": 0}')

    assert isinstance(result, ValidInference)
    assert result.category_positive is False


@pytest.mark.parametrize(
    "raw",
    [
        None,
        "",
        "   ",
        "I could not identify this image.",
        '{"detectedTitle": "Demon Sla',
        '<html><body>{"genre": "anime"}</body></html>',
        "```json\n[1, 2, 3]\n```",
        '{"unrelated": 1}',
        "{not json at all}",
    ],
)
def test_unusable_responses_become_invalid_without_raising(raw: str | None) -> None:
    result = normalize(raw)

    assert isinstance(result, InvalidInference)
    assert result.raw_valid is False
    assert result.reason
    assert result.confidence == 0.0
    assert result.keywords == ()


def test_prose_with_angle_brackets_stays_valid() -> None:
    result = normalize('My guess for <title>: {"detectedTitle": "Akira", "confidence": 0.7}')

    assert isinstance(result, ValidInference)
    assert result.detected_title == "Akira"
