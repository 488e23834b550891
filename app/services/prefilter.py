"""Cheap, local classification of an artifact from its metadata."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..config import Settings
from ..lexicon import CATEGORY_PROFILES, MOOD_PROFILES, CategoryProfile
from ..models import Artifact, CategoryHint
from ..utils import contains_phrase

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class _CategoryMatch:
    profile: CategoryProfile
    terms: list[str]
    signals: list[str]

    @property
    def score(self) -> int:
        return len(self.terms) + len(self.signals)

    @property
    def rank(self) -> tuple[int, int]:
        return (self.score, len(self.terms))


class HeuristicPrefilter:
    """Guess the artifact category without contacting any service.

    Only the artifact's metadata is inspected (tokens derived from the
    filename or a bounded text prefix, the declared media type and the byte
    size), so the cost does not grow with the artifact content.
    """

    def __init__(self, settings: Settings):
        self._settings = settings

    def prefilter(self, artifact: Artifact) -> CategoryHint:
        best: _CategoryMatch | None = None
        for profile in CATEGORY_PROFILES:
            match = self._match_profile(artifact, profile)
            if best is None or match.rank > best.rank:
                best = match

        mood = self._detect_mood(artifact)

        if best is None or best.score == 0:
            return CategoryHint(
                category="unknown",
                keywords=(),
                source="heuristic",
                confidence=0.0,
                confident=False,
                indicator_score=0,
                mood=mood,
            )

        score = best.score
        confident = score >= self._settings.confident_indicator_score
        confidence = (
            self._settings.heuristic_confidence
            if confident
            else self._settings.heuristic_low_confidence
        )
        logger.debug(
            "Pre-filter matched %s for %s (terms=%s signals=%s)",
            best.profile.key,
            artifact.describe(),
            best.terms,
            best.signals,
        )
        return CategoryHint(
            category=best.profile.key,
            keywords=tuple(best.terms),
            source="heuristic",
            confidence=confidence,
            confident=confident,
            indicator_score=score,
            mood=mood,
        )

    def _match_profile(
        self, artifact: Artifact, profile: CategoryProfile
    ) -> _CategoryMatch:
        terms = [
            term for term in profile.terms if contains_phrase(artifact.tokens, term)
        ]
        signals: list[str] = []
        # Physical signals only reinforce a profile that matched a term.
        if terms and profile.physical_signals and artifact.is_image:
            if "png" in artifact.media_type:
                signals.append("png")
            if 0 < artifact.size < self._settings.small_image_bytes:
                signals.append("small-size")
        return _CategoryMatch(profile=profile, terms=terms, signals=signals)

    def _detect_mood(self, artifact: Artifact) -> str | None:
        if artifact.kind != "text":
            return None
        for profile in MOOD_PROFILES:
            if any(contains_phrase(artifact.tokens, term) for term in profile.terms):
                return profile.key
        return None
