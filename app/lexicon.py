"""Category and mood vocabularies used by the heuristic stages."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal


Category = Literal["anime", "live-action", "animation", "unknown"]


@dataclass(frozen=True)
class CategoryProfile:
    """Describes how a category is recognised and searched for."""

    key: Category
    terms: tuple[str, ...]
    relevance_terms: tuple[str, ...]
    seed_terms: tuple[str, ...]
    physical_signals: bool = False


@dataclass(frozen=True)
class MoodProfile:
    """Keywords that reveal a mood and the broad genres that suit it."""

    key: str
    terms: tuple[str, ...]
    genres: tuple[str, ...]


ANIME = CategoryProfile(
    key="anime",
    terms=(
        "anime",
        "manga",
        "demon",
        "slayer",
        "kimetsu",
        "tanjiro",
        "nezuko",
        "naruto",
        "sasuke",
        "goku",
        "luffy",
        "ichigo",
        "natsu",
        "eren",
        "mikasa",
        "japanese",
        "otaku",
        "shounen",
        "seinen",
        "kawaii",
        "studio",
    ),
    relevance_terms=("anime", "animation", "japanese", "demon", "slayer", "studio"),
    seed_terms=(
        "demon slayer",
        "kimetsu no yaiba",
        "demon slayer mugen train",
        "spirited away",
        "your name",
        "princess mononoke",
        "akira",
        "ghost in the shell",
        "anime",
    ),
    physical_signals=True,
)

ANIMATION = CategoryProfile(
    key="animation",
    terms=(
        "animation",
        "animated",
        "cartoon",
        "pixar",
        "disney",
        "dreamworks",
        "claymation",
        "stopmotion",
    ),
    relevance_terms=("animation", "animated", "cartoon", "family"),
    seed_terms=("toy story", "how to train your dragon", "animation"),
)

LIVE_ACTION = CategoryProfile(
    key="live-action",
    terms=("film", "movie", "scene", "still", "screencap", "trailer", "actor"),
    relevance_terms=("film", "drama", "thriller"),
    seed_terms=("action adventure fantasy",),
)

# Checked in order; earlier profiles win ties.
CATEGORY_PROFILES: tuple[CategoryProfile, ...] = (ANIME, ANIMATION, LIVE_ACTION)

GENERIC_SEED_TERMS: tuple[str, ...] = ("action adventure fantasy",)

MOOD_PROFILES: tuple[MoodProfile, ...] = (
    MoodProfile(
        key="happy",
        terms=("happy", "joy", "cheerful", "upbeat", "fun", "comedy"),
        genres=("comedy", "family"),
    ),
    MoodProfile(
        key="sad",
        terms=("sad", "depressed", "melancholy", "crying", "emotional"),
        genres=("drama", "romance"),
    ),
    MoodProfile(
        key="excited",
        terms=("excited", "thrilled", "pumped", "energetic", "action"),
        genres=("action", "thriller"),
    ),
    MoodProfile(
        key="romantic",
        terms=("romantic", "love", "date night", "relationship", "heart"),
        genres=("romance", "romantic comedy"),
    ),
    MoodProfile(
        key="adventurous",
        terms=("adventure", "explore", "journey", "travel", "epic"),
        genres=("adventure", "fantasy"),
    ),
)


def category_profile(key: str | None) -> CategoryProfile | None:
    """Return the profile registered for ``key`` if there is one."""

    for profile in CATEGORY_PROFILES:
        if profile.key == key:
            return profile
    return None


def mood_profile(key: str | None) -> MoodProfile | None:
    for profile in MOOD_PROFILES:
        if profile.key == key:
            return profile
    return None
