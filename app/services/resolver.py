"""End-to-end resolution cascade for uploaded images and mood descriptions."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

from ..config import Settings
from ..errors import InferenceUnavailableError
from ..lexicon import GENERIC_SEED_TERMS, category_profile, mood_profile
from ..models import (
    Artifact,
    CatalogQuery,
    CategoryHint,
    RankedCandidate,
    ResolutionResult,
    ResolutionState,
    ValidInference,
)
from ..ports import CatalogClient, InferenceClient
from ..utils import unique_ordered
from .aggregator import AggregateResult, SearchAggregator
from .normalizer import normalize
from .prefilter import HeuristicPrefilter

logger = logging.getLogger(__name__)

# Keywords and similar titles taken from a single source.
MAX_TERMS_PER_SOURCE = 3

TRENDING = CatalogQuery(kind="trending")
POPULAR = CatalogQuery(kind="popular")


@dataclass(slots=True)
class _Run:
    """Mutable bookkeeping for a single resolution."""

    artifact: Artifact
    state: ResolutionState = ResolutionState.INIT
    explanation: list[str] = field(default_factory=list)
    hint: CategoryHint = field(default_factory=CategoryHint)
    inference: ValidInference | None = None
    attempted: int = 0
    failed: int = 0

    def advance(self, state: ResolutionState) -> None:
        logger.debug("%s: %s -> %s", self.artifact.describe(), self.state.value, state.value)
        self.state = state

    def note(self, message: str) -> None:
        self.explanation.append(message)

    def record(self, outcome: AggregateResult) -> None:
        self.attempted += len(outcome.attempted)
        self.failed += len(outcome.failed)


class ResolutionController:
    """Resolve an artifact into ranked catalog candidates.

    The controller owns no per-request state; concurrent calls to
    :meth:`resolve` are independent. Collaborator failures move the cascade to
    its next branch instead of propagating to the caller.
    """

    def __init__(
        self,
        settings: Settings,
        catalog: CatalogClient,
        inference: InferenceClient | None = None,
        *,
        prefilter: HeuristicPrefilter | None = None,
        aggregator: SearchAggregator | None = None,
    ):
        self._settings = settings
        self._inference = inference
        self._prefilter = prefilter or HeuristicPrefilter(settings)
        self._aggregator = aggregator or SearchAggregator(settings, catalog)

    @property
    def inference_enabled(self) -> bool:
        return self._inference is not None and self._inference.configured

    async def resolve(self, artifact: Artifact) -> ResolutionResult:
        run = _Run(artifact=artifact)

        run.hint = self._prefilter.prefilter(artifact)
        run.advance(ResolutionState.PREFILTERED)
        self._describe_hint(run)

        inference = await self._infer(run)
        if inference is not None:
            run.inference = inference
            run.hint = self._inference_hint(inference, run.hint)
            run.advance(ResolutionState.INFERRED)
            queries = self._inference_queries(inference, run.hint)
        else:
            run.advance(ResolutionState.INFERENCE_SKIPPED)
            queries = self._heuristic_queries(run.hint)

        candidates = await self._search(run, queries)
        run.advance(ResolutionState.SEARCHED)

        if run.attempted and run.failed == run.attempted:
            run.advance(ResolutionState.DEGRADED)
            run.note(
                "Catalog unavailable (catalog_unavailable): "
                f"all {run.attempted} catalog queries failed"
            )
            logger.warning("Resolution degraded for %s", artifact.describe())
            return ResolutionResult.degraded(run.explanation, hint=run.hint)

        run.advance(ResolutionState.DONE)
        return self._finish(run, candidates)

    async def _infer(self, run: _Run) -> ValidInference | None:
        """Ask the oracle about the artifact; ``None`` means no usable signal."""

        if self._inference is None or not self._inference.configured:
            run.note("Inference service not configured; using heuristic cascade")
            return None

        try:
            raw_text = await asyncio.wait_for(
                self._inference.analyze(run.artifact),
                timeout=self._settings.inference_timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning("Inference timed out for %s", run.artifact.describe())
            run.note("Inference service timed out; using heuristic cascade")
            return None
        except InferenceUnavailableError as exc:
            logger.warning("Inference unavailable for %s: %s", run.artifact.describe(), exc)
            run.note(f"Inference service unavailable ({exc.code}); using heuristic cascade")
            return None
        except Exception:  # pragma: no cover - defensive logging branch
            logger.exception("Inference failed for %s", run.artifact.describe())
            run.note("Inference service failed; using heuristic cascade")
            return None

        result = normalize(raw_text)
        if not isinstance(result, ValidInference):
            run.note(f"Inference response unusable ({result.reason}); using heuristic cascade")
            return None

        self._describe_inference(run, result)
        floor = self._skipped_confidence(run.hint)
        if result.confidence <= floor:
            run.note(
                f"Inference confidence {result.confidence:.0%} is not above the "
                f"heuristic level of {floor:.0%}; using heuristic cascade"
            )
            return None
        return result

    def _skipped_confidence(self, hint: CategoryHint) -> float:
        """Confidence reported when the heuristic branch answers."""

        if hint.confident:
            return self._settings.heuristic_confidence
        return self._settings.heuristic_low_confidence

    def _inference_hint(
        self, result: ValidInference, current: CategoryHint
    ) -> CategoryHint:
        candidate = CategoryHint(
            category=result.category,
            keywords=tuple(
                unique_ordered([*result.keywords, *result.characters])
            ),
            source="inference",
            confidence=result.confidence,
            confident=True,
            indicator_score=current.indicator_score,
            title=result.detected_title,
            mood=result.mood or current.mood,
        )
        return candidate if candidate.supersedes(current) else current

    def _inference_queries(
        self, result: ValidInference, hint: CategoryHint
    ) -> list[CatalogQuery]:
        keywords = list(result.keywords[:MAX_TERMS_PER_SOURCE])
        similar = list(result.similar_titles[:MAX_TERMS_PER_SOURCE])
        titles = [result.detected_title] if result.detected_title else []
        seeds = self._seed_terms(hint.category, hint.mood)

        if result.category_positive:
            terms = [*titles, *keywords, *similar, *seeds]
        elif titles or keywords:
            terms = [*titles, *keywords, *seeds]
        else:
            terms = [*similar, *seeds]
        return self._build_queries(terms)

    def _heuristic_queries(self, hint: CategoryHint) -> list[CatalogQuery]:
        if hint.confident:
            terms = [*hint.keywords, *self._seed_terms(hint.category, hint.mood)]
            return self._build_queries(terms)
        return self._build_queries(
            self._seed_terms("unknown", hint.mood), last_resort=TRENDING
        )

    def _seed_terms(self, category: str, mood: str | None) -> tuple[str, ...]:
        profile = category_profile(category)
        if profile is not None and category in {"anime", "animation"}:
            return profile.seed_terms
        moods = mood_profile(mood)
        if moods is not None:
            return moods.genres
        if profile is not None:
            return profile.seed_terms
        return GENERIC_SEED_TERMS

    def _build_queries(
        self, terms: list[str], *, last_resort: CatalogQuery | None = None
    ) -> list[CatalogQuery]:
        limit = self._settings.max_queries - (1 if last_resort else 0)
        queries = [CatalogQuery.search(term) for term in unique_ordered(terms)[:limit]]
        if last_resort is not None:
            queries.append(last_resort)
        return queries

    async def _search(
        self, run: _Run, queries: list[CatalogQuery]
    ) -> list[RankedCandidate]:
        outcome = await self._aggregator.aggregate(queries)
        run.record(outcome)
        run.note(self._describe_search(outcome))
        candidates = self._aggregator.dedupe_and_rank(outcome.entries, run.hint)
        if candidates:
            return candidates

        fallback = [query for query in (TRENDING, POPULAR) if query not in queries]
        if not fallback:
            return candidates
        labels = " and ".join(query.label for query in fallback)
        run.note(f"No matches from targeted queries; falling back to {labels}")
        outcome = await self._aggregator.aggregate(fallback)
        run.record(outcome)
        run.note(self._describe_search(outcome))
        return self._aggregator.dedupe_and_rank(outcome.entries, run.hint)

    def _finish(self, run: _Run, candidates: list[RankedCandidate]) -> ResolutionResult:
        if run.inference is not None:
            confidence = run.inference.confidence
        else:
            confidence = self._skipped_confidence(run.hint)

        if candidates:
            top = candidates[0]
            run.note(f"Top match: {top.entry.title} (score {top.score:g})")
        else:
            confidence = 0.0
            run.note("No catalog entries matched")

        return ResolutionResult(
            candidates=candidates,
            confidence=confidence,
            explanation=run.explanation,
            state=run.state,
            hint=run.hint,
        )

    def _describe_hint(self, run: _Run) -> None:
        hint = run.hint
        if hint.category == "unknown":
            run.note("Heuristic pre-filter found no category indicators")
        else:
            level = "confident" if hint.confident else "low confidence"
            run.note(
                f"Heuristic pre-filter: {hint.category} "
                f"(indicator score {hint.indicator_score}, {level})"
            )
        if hint.mood:
            run.note(f"Detected mood: {hint.mood}")

    def _describe_inference(self, run: _Run, result: ValidInference) -> None:
        if result.detected_title:
            run.note(f"Detected: {result.detected_title}")
        run.note(f"Genre: {result.genre or 'Unknown'}")
        run.note(f"Confidence: {result.confidence * 100:.1f}%")
        if result.similar_titles:
            run.note("Similar to: " + ", ".join(result.similar_titles))
        if result.description:
            run.note(f"Scene: {result.description}")

    @staticmethod
    def _describe_search(outcome: AggregateResult) -> str:
        labels = ", ".join(outcome.attempted)
        message = f"Searched {len(outcome.attempted)} catalog queries: {labels}"
        if outcome.failed:
            message += f" ({len(outcome.failed)} failed)"
        return message
