"""Turn free-form inference responses into ``InferenceResult`` values."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from pydantic import ValidationError

from ..models import InferenceResult, InvalidInference, ValidInference
from ..utils import extract_json_object, unique_ordered

logger = logging.getLogger(__name__)

# Field name -> accepted spellings in the model response.
_FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "detected_title": ("detectedTitle", "detected_title", "title"),
    "characters": ("characters",),
    "genre": ("genre",),
    "is_anime": ("isAnime", "is_anime"),
    "confidence": ("confidence",),
    "keywords": ("keywords",),
    "similar_titles": ("similarTitles", "similar_titles"),
    "mood": ("detectedMood", "mood"),
    "description": ("description",),
}

_NULL_STRINGS = {"", "null", "none", "unknown", "n/a"}
_MISSING = object()


def normalize(raw_text: str | None) -> InferenceResult:
    """Parse ``raw_text`` into a fully-defaulted inference result.

    Never raises: anything that cannot be read as a JSON object carrying at
    least one recognised field becomes an ``InvalidInference``.
    """

    if not isinstance(raw_text, str) or not raw_text.strip():
        return InvalidInference(reason="empty response")

    try:
        payload = extract_json_object(raw_text)
    except ValueError as exc:
        logger.info("Inference response could not be parsed: %s", exc)
        return InvalidInference(reason=str(exc))

    present = {
        field: _lookup(payload, aliases)
        for field, aliases in _FIELD_ALIASES.items()
    }
    if all(value is _MISSING for value in present.values()):
        return InvalidInference(reason="no recognised fields")

    try:
        return ValidInference(
            detected_title=_as_text(present["detected_title"]),
            characters=_as_strings(present["characters"]),
            genre=_as_text(present["genre"]),
            is_anime=_as_bool(present["is_anime"]),
            confidence=_as_confidence(present["confidence"]),
            keywords=_as_strings(present["keywords"]),
            similar_titles=_as_strings(present["similar_titles"]),
            mood=_as_text(present["mood"]),
            description=_as_text(present["description"]),
        )
    except ValidationError as exc:  # pragma: no cover - coercions keep fields valid
        logger.warning("Inference payload failed validation: %s", exc)
        return InvalidInference(reason="validation failed")


def _lookup(payload: Mapping[str, Any], aliases: tuple[str, ...]) -> Any:
    for alias in aliases:
        if alias in payload:
            return payload[alias]
    return _MISSING


def _as_text(value: Any) -> str | None:
    if value is _MISSING or value is None:
        return None
    if not isinstance(value, (str, int, float)) or isinstance(value, bool):
        return None
    text = str(value).strip()
    if text.casefold() in _NULL_STRINGS:
        return None
    return text


def _as_strings(value: Any) -> tuple[str, ...]:
    if value is _MISSING or value is None:
        return ()
    if isinstance(value, str):
        value = value.split(",")
    if not isinstance(value, (list, tuple)):
        return ()
    cleaned = [
        text
        for text in (_as_text(entry) for entry in value)
        if text is not None
    ]
    return tuple(unique_ordered(cleaned))


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in {"true", "yes", "1"}
    if isinstance(value, (int, float)):
        return bool(value)
    return False


def _as_confidence(value: Any) -> float:
    if value is _MISSING or value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(str(value).strip().rstrip("%"))
    except ValueError:
        return 0.0
    if number != number:  # NaN
        return 0.0
    if 1.0 < number <= 100.0:
        number /= 100.0
    return max(0.0, min(1.0, number))
