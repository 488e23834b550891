"""Pydantic models describing artifacts, hints and resolution payloads."""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .lexicon import Category
from .utils import tokenize

ArtifactKind = Literal["image", "text"]
HintSource = Literal["heuristic", "inference"]
QueryKind = Literal["search", "trending", "popular"]

# Only this much of a text artifact is tokenised; later stages never read
# the raw content.
TEXT_TOKEN_PREFIX = 2_000


class Artifact(BaseModel):
    """The image or text payload submitted for identification."""

    model_config = ConfigDict(frozen=True)

    kind: ArtifactKind
    content: bytes = b""
    text: str | None = None
    filename: str | None = None
    media_type: str = "application/octet-stream"
    size: int = Field(default=0, ge=0)
    tokens: tuple[str, ...] = ()

    @classmethod
    def from_upload(
        cls, content: bytes, *, filename: str | None, media_type: str | None
    ) -> "Artifact":
        return cls(
            kind="image",
            content=content,
            filename=filename,
            media_type=(media_type or "application/octet-stream").lower(),
            size=len(content),
            tokens=tokenize(filename),
        )

    @classmethod
    def from_text(cls, text: str, *, filename: str | None = None) -> "Artifact":
        encoded = text.encode("utf-8")
        return cls(
            kind="text",
            text=text,
            filename=filename,
            media_type="text/plain",
            size=len(encoded),
            tokens=tokenize(filename) + tokenize(text[:TEXT_TOKEN_PREFIX]),
        )

    @property
    def is_image(self) -> bool:
        return self.kind == "image"

    def describe(self) -> str:
        """Return a short label suitable for logs."""

        if self.filename:
            return f"{self.kind}:{self.filename}"
        return f"{self.kind}:{self.size}b"


class CategoryHint(BaseModel):
    """Provisional classification of an artifact."""

    model_config = ConfigDict(frozen=True)

    category: Category = "unknown"
    keywords: tuple[str, ...] = ()
    source: HintSource = "heuristic"
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    confident: bool = False
    indicator_score: int = 0
    title: str | None = None
    mood: str | None = None

    def supersedes(self, other: "CategoryHint") -> bool:
        """Later hints replace earlier ones unless they are less certain."""

        return self.confidence >= other.confidence


class _InferenceFields(BaseModel):
    model_config = ConfigDict(frozen=True)

    detected_title: str | None = None
    characters: tuple[str, ...] = ()
    genre: str | None = None
    is_anime: bool = False
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    keywords: tuple[str, ...] = ()
    similar_titles: tuple[str, ...] = ()
    mood: str | None = None
    description: str | None = None


class ValidInference(_InferenceFields):
    """A structured answer recovered from the inference service."""

    raw_valid: Literal[True] = True

    @property
    def category_positive(self) -> bool:
        """Whether the oracle reports the high-priority category."""

        is_anime = self.is_anime or (self.genre or "").casefold() == "anime"
        return is_anime and self.confidence > 0.0

    @property
    def category(self) -> Category:
        if self.category_positive:
            return "anime"
        genre = (self.genre or "").casefold()
        if genre in {"anime", "live-action", "animation"}:
            return genre  # type: ignore[return-value]
        return "unknown"


class InvalidInference(_InferenceFields):
    """Normalisation failed; carries defaults only and means "no signal"."""

    raw_valid: Literal[False] = False
    reason: str = "unparseable response"


InferenceResult = Union[ValidInference, InvalidInference]


class CatalogEntry(BaseModel):
    """An item returned by the media catalog."""

    model_config = ConfigDict(frozen=True)

    id: int
    title: str
    overview: str = ""
    popularity: float = 0.0
    rating: float = 0.0
    release_date: str | None = None
    poster_path: str | None = None
    media_type: str = "movie"
    source_query: str | None = Field(default=None, exclude=True)

    @field_validator("overview", mode="before")
    @classmethod
    def _none_overview(cls, value: object) -> object:
        return "" if value is None else value

    @property
    def identity(self) -> tuple[str, int]:
        return (self.media_type, self.id)

    @classmethod
    def from_tmdb(
        cls, data: dict[str, Any], *, media_type: str = "movie"
    ) -> "CatalogEntry":
        title = data.get("title") or data.get("name") or ""
        release = data.get("release_date") or data.get("first_air_date") or None
        return cls(
            id=int(data["id"]),
            title=str(title),
            overview=data.get("overview") or "",
            popularity=float(data.get("popularity") or 0.0),
            rating=float(data.get("vote_average") or 0.0),
            release_date=release,
            poster_path=data.get("poster_path"),
            media_type=str(data.get("media_type") or media_type),
        )


class CatalogQuery(BaseModel):
    """A single catalog request issued by the search aggregator."""

    model_config = ConfigDict(frozen=True)

    kind: QueryKind = "search"
    term: str | None = None

    @classmethod
    def search(cls, term: str) -> "CatalogQuery":
        return cls(kind="search", term=term)

    @property
    def label(self) -> str:
        if self.kind == "search":
            return self.term or ""
        return self.kind


class RankedCandidate(BaseModel):
    """A scored catalog entry in the final ordering."""

    entry: CatalogEntry
    score: float
    rank: int
    query: str | None = None


class ResolutionState(str, Enum):
    INIT = "INIT"
    PREFILTERED = "PREFILTERED"
    INFERRED = "INFERRED"
    INFERENCE_SKIPPED = "INFERENCE_SKIPPED"
    SEARCHED = "SEARCHED"
    DONE = "DONE"
    DEGRADED = "DEGRADED"


class ResolutionResult(BaseModel):
    """The final answer returned to the caller."""

    candidates: list[RankedCandidate] = Field(default_factory=list, max_length=5)
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    explanation: list[str] = Field(default_factory=list)
    state: ResolutionState = ResolutionState.DONE
    hint: CategoryHint | None = None

    @classmethod
    def degraded(
        cls, explanation: list[str], *, hint: CategoryHint | None = None
    ) -> "ResolutionResult":
        return cls(
            candidates=[],
            confidence=0.0,
            explanation=explanation,
            state=ResolutionState.DEGRADED,
            hint=hint,
        )

    @property
    def top(self) -> RankedCandidate | None:
        return self.candidates[0] if self.candidates else None
