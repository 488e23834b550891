"""Fan catalog queries out, then merge, deduplicate and rank the results."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Sequence

from ..config import Settings
from ..models import CatalogEntry, CatalogQuery, CategoryHint, RankedCandidate
from ..ports import CatalogClient
from .scoring import RelevanceScorer

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class AggregateResult:
    """Merged catalog entries plus bookkeeping about failed queries."""

    entries: list[CatalogEntry] = field(default_factory=list)
    attempted: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)


class SearchAggregator:
    """Issue catalog queries concurrently and rank what comes back."""

    def __init__(
        self,
        settings: Settings,
        catalog: CatalogClient,
        scorer: RelevanceScorer | None = None,
    ):
        self._settings = settings
        self._catalog = catalog
        self._scorer = scorer or RelevanceScorer(settings)

    async def aggregate(
        self, queries: Sequence[CatalogQuery | str]
    ) -> AggregateResult:
        """Run every query and concatenate results in priority order.

        A query that raises or times out contributes nothing and is recorded
        in ``failed``; it never aborts the others.
        """

        normalised = [
            query if isinstance(query, CatalogQuery) else CatalogQuery.search(query)
            for query in queries
        ]
        result = AggregateResult(attempted=[query.label for query in normalised])
        if not normalised:
            return result

        outcomes = await asyncio.gather(
            *(self._run_query(query) for query in normalised),
            return_exceptions=True,
        )
        for query, outcome in zip(normalised, outcomes):
            if isinstance(outcome, BaseException):
                if isinstance(outcome, asyncio.CancelledError):
                    raise outcome
                logger.warning(
                    "Catalog query %r failed: %s",
                    query.label,
                    str(outcome) or type(outcome).__name__,
                )
                result.failed.append(query.label)
                continue
            result.entries.extend(
                entry.model_copy(update={"source_query": query.label})
                for entry in outcome
            )
        return result

    def dedupe_and_rank(
        self,
        entries: Sequence[CatalogEntry],
        hint: CategoryHint,
        *,
        limit: int | None = None,
    ) -> list[RankedCandidate]:
        """Keep the first entry per identity, then sort and truncate."""

        unique: dict[tuple[str, int], CatalogEntry] = {}
        for entry in entries:
            unique.setdefault(entry.identity, entry)

        scored = [
            (self._scorer.score(entry, hint), entry) for entry in unique.values()
        ]
        scored.sort(
            key=lambda pair: (
                -pair[0],
                -pair[1].popularity,
                pair[1].media_type,
                pair[1].id,
            )
        )
        cap = limit if limit is not None else self._settings.candidate_limit
        return [
            RankedCandidate(
                entry=entry, score=score, rank=index + 1, query=entry.source_query
            )
            for index, (score, entry) in enumerate(scored[:cap])
        ]

    async def _run_query(self, query: CatalogQuery) -> list[CatalogEntry]:
        if query.kind == "trending":
            call = self._catalog.get_trending()
        elif query.kind == "popular":
            call = self._catalog.get_popular()
        else:
            call = self._catalog.search_by_text(query.term or "")
        return await asyncio.wait_for(
            call, timeout=self._settings.catalog_timeout_seconds
        )
