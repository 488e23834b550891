"""Deterministic relevance scoring for catalog entries."""

from __future__ import annotations

from ..config import Settings
from ..lexicon import category_profile
from ..models import CatalogEntry, CategoryHint
from ..utils import contains_phrase, tokenize, unique_ordered


class RelevanceScorer:
    """Weighted keyword and rating heuristics for ranking catalog entries."""

    def __init__(self, settings: Settings):
        self._settings = settings

    def terms_for(self, hint: CategoryHint) -> list[str]:
        """Return the lowercase terms that signal relevance for ``hint``."""

        profile = category_profile(hint.category)
        base = list(profile.relevance_terms) if profile else []
        return unique_ordered(term.casefold() for term in [*base, *hint.keywords])

    def score(self, entry: CatalogEntry, hint: CategoryHint) -> float:
        settings = self._settings
        title_tokens = tokenize(entry.title)
        overview_tokens = tokenize(entry.overview)

        total = 0.0
        for term in self.terms_for(hint):
            if contains_phrase(title_tokens, term):
                total += settings.title_weight
            if contains_phrase(overview_tokens, term):
                total += settings.synopsis_weight

        if entry.rating > settings.high_rating_threshold:
            total += settings.high_rating_bonus
        if entry.rating > settings.good_rating_threshold:
            total += settings.good_rating_bonus

        if hint.title and self._title_matches(entry.title, hint.title):
            total += settings.title_match_weight
        return total

    @staticmethod
    def _title_matches(candidate: str, wanted: str) -> bool:
        candidate_tokens = tokenize(candidate)
        wanted_tokens = tokenize(wanted)
        if not candidate_tokens or not wanted_tokens:
            return False
        return contains_phrase(candidate_tokens, " ".join(wanted_tokens))
