import pytest
from pydantic import ValidationError

from app.models import (
    Artifact,
    CatalogEntry,
    CatalogQuery,
    CategoryHint,
    RankedCandidate,
    ResolutionResult,
    ResolutionState,
)


def test_catalog_entry_from_tmdb_payload():
    entry = CatalogEntry.from_tmdb(
        {
            "id": "129",
            "title": "Spirited Away",
            "overview": None,
            "popularity": 61.2,
            "vote_average": 8.5,
            "release_date": "2001-07-20",
            "poster_path": "/39wmItIWsg5sZMyRUHLkWBcuVCM.jpg",
        }
    )

    assert entry.id == 129
    assert entry.overview == ""
    assert entry.rating == 8.5
    assert entry.release_date == "2001-07-20"
    assert entry.identity == ("movie", 129)


def test_catalog_entry_uses_tv_names_and_dates():
    entry = CatalogEntry.from_tmdb(
        {"id": 85937, "name": "Demon Slayer", "first_air_date": "2019-04-06"},
        media_type="tv",
    )

    assert entry.title == "Demon Slayer"
    assert entry.release_date == "2019-04-06"
    assert entry.identity == ("tv", 85937)


def test_artifact_from_upload_tokenises_filename():
    artifact = Artifact.from_upload(
        b"abc", filename="Demon_Slayer-S01E19.PNG", media_type="IMAGE/PNG"
    )

    assert artifact.is_image
    assert artifact.size == 3
    assert artifact.media_type == "image/png"
    assert artifact.tokens == ("demon", "slayer", "s01e19", "png")
    assert artifact.describe() == "image:Demon_Slayer-S01E19.PNG"


def test_artifact_from_text_tokenises_bounded_prefix():
    artifact = Artifact.from_text("happy " * 1_000 + "anime")

    assert artifact.kind == "text"
    assert "anime" not in artifact.tokens
    assert artifact.describe().startswith("text:")


def test_hint_supersedes_only_when_at_least_as_confident():
    weak = CategoryHint(category="anime", confidence=0.4)
    strong = CategoryHint(category="live-action", confidence=0.8, source="inference")

    assert strong.supersedes(weak)
    assert not weak.supersedes(strong)
    assert weak.supersedes(weak)


def test_catalog_query_labels():
    assert CatalogQuery.search("akira").label == "akira"
    assert CatalogQuery(kind="trending").label == "trending"


def test_resolution_result_bounds():
    candidates = [
        RankedCandidate(entry=CatalogEntry(id=i, title=str(i)), score=0, rank=i + 1)
        for i in range(6)
    ]

    with pytest.raises(ValidationError):
        ResolutionResult(candidates=candidates)
    with pytest.raises(ValidationError):
        ResolutionResult(confidence=1.5)


def test_degraded_result_has_no_candidates():
    result = ResolutionResult.degraded(["catalog down"])

    assert result.state is ResolutionState.DEGRADED
    assert result.candidates == []
    assert result.confidence == 0.0
    assert result.top is None
