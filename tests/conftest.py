"""Pytest configuration and test helpers."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Callable

import pytest


# Ensure the application package is importable when running tests without an
# editable install. This mirrors the expected runtime layout where ``app`` sits
# at the project root.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


from app.config import Settings  # noqa: E402
from app.errors import CatalogUnavailableError, InferenceUnavailableError  # noqa: E402
from app.models import Artifact, CatalogEntry  # noqa: E402


@pytest.fixture
def anyio_backend() -> str:
    """Force AnyIO tests to run on asyncio without requiring trio."""

    return "asyncio"


def make_entry(
    entry_id: int,
    title: str,
    *,
    overview: str = "",
    popularity: float = 10.0,
    rating: float = 6.0,
) -> CatalogEntry:
    return CatalogEntry(
        id=entry_id,
        title=title,
        overview=overview,
        popularity=popularity,
        rating=rating,
    )


class FakeCatalog:
    """In-memory catalog keyed by lowercase query text."""

    def __init__(
        self,
        results: dict[str, list[CatalogEntry]] | None = None,
        *,
        trending: list[CatalogEntry] | None = None,
        popular: list[CatalogEntry] | None = None,
        failing: set[str] | None = None,
        fail_all: bool = False,
        slow: set[str] | None = None,
    ):
        self._results = {key.casefold(): value for key, value in (results or {}).items()}
        self._trending = trending or []
        self._popular = popular or []
        self._failing = {key.casefold() for key in (failing or set())}
        self._fail_all = fail_all
        self._slow = {key.casefold() for key in (slow or set())}
        self.calls: list[str] = []

    async def _answer(self, key: str, results: list[CatalogEntry]) -> list[CatalogEntry]:
        self.calls.append(key)
        if self._fail_all or key.casefold() in self._failing:
            raise CatalogUnavailableError(f"catalog down for {key}")
        if key.casefold() in self._slow:
            await asyncio.sleep(5)
        return list(results)

    async def search_by_text(self, query: str) -> list[CatalogEntry]:
        return await self._answer(query, self._results.get(query.casefold(), []))

    async def get_trending(self) -> list[CatalogEntry]:
        return await self._answer("trending", self._trending)

    async def get_popular(self) -> list[CatalogEntry]:
        return await self._answer("popular", self._popular)


class FakeInference:
    """Inference stub returning a canned response or raising."""

    def __init__(
        self,
        response: str | None = None,
        *,
        configured: bool = True,
        error: Exception | None = None,
        delay: float = 0.0,
    ):
        self._response = response
        self._configured = configured
        self._error = error
        self._delay = delay
        self.calls: list[Artifact] = []

    @property
    def configured(self) -> bool:
        return self._configured

    async def analyze(self, artifact: Artifact) -> str:
        self.calls.append(artifact)
        if self._delay:
            await asyncio.sleep(self._delay)
        if self._error is not None:
            raise self._error
        if self._response is None:
            raise InferenceUnavailableError("no canned response")
        return self._response


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from any local .env file."""

    return Settings(_env_file=None, TMDB_API_KEY="tmdb-key")


@pytest.fixture
def entry_factory() -> Callable[..., CatalogEntry]:
    return make_entry


@pytest.fixture
def fake_catalog_cls() -> type[FakeCatalog]:
    return FakeCatalog


@pytest.fixture
def fake_inference_cls() -> type[FakeInference]:
    return FakeInference
