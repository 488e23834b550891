"""Utility helpers for the SceneSleuth service."""

from __future__ import annotations

import json
import re
import unicodedata
from typing import Any, Iterable


JSON_BLOCK_RE = re.compile(r"```(?:json|JSON)?\s*(\{.*?\})\s*```", re.DOTALL)
BARE_JSON_RE = re.compile(r"\{.*\}", re.DOTALL)
HTML_TAG_RE = re.compile(r"<[^>]+>")
TOKEN_RE = re.compile(r"[a-z0-9]+")


def tokenize(value: str | None) -> tuple[str, ...]:
    """Split free text or a filename into lowercase ASCII word tokens."""

    if not value:
        return ()
    value = unicodedata.normalize("NFKD", value)
    value = value.encode("ascii", "ignore").decode("ascii").lower()
    return tuple(TOKEN_RE.findall(value))


def contains_phrase(tokens: Iterable[str], phrase: str) -> bool:
    """Return whether ``phrase`` appears as whole words within ``tokens``."""

    wanted = tokenize(phrase)
    if not wanted:
        return False
    haystack = f" {' '.join(tokens)} "
    return f" {' '.join(wanted)} " in haystack


def unique_ordered(values: Iterable[str]) -> list[str]:
    """Deduplicate case-insensitively, keeping the first spelling seen."""

    seen: set[str] = set()
    ordered: list[str] = []
    for value in values:
        cleaned = value.strip()
        if not cleaned:
            continue
        key = cleaned.casefold()
        if key in seen:
            continue
        seen.add(key)
        ordered.append(cleaned)
    return ordered


def extract_json_object(content: str) -> dict[str, Any]:
    """Extract and parse the first JSON object from the model response."""

    match = JSON_BLOCK_RE.search(content)
    if match:
        payload = match.group(1)
    else:
        match = BARE_JSON_RE.search(content)
        if not match:
            raise ValueError("No JSON object found in response")
        outside = content[: match.start()] + content[match.end() :]
        # Only a reply that opens with a tag counts as an HTML page.
        if content.lstrip().startswith("<") and HTML_TAG_RE.search(outside):
            raise ValueError("Response JSON is wrapped in markup")
        payload = match.group(0)

    try:
        parsed = json.loads(payload)
    except json.JSONDecodeError as exc:
        raise ValueError("Invalid JSON payload produced by the model") from exc
    if not isinstance(parsed, dict):
        raise ValueError("Model response was not a JSON object")
    return parsed
