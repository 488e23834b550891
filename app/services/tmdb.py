"""Media catalog client backed by The Movie Database (TMDB)."""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from ..config import Settings
from ..errors import CatalogUnavailableError
from ..models import CatalogEntry

logger = logging.getLogger(__name__)

POSTER_BASE_URL = "https://image.tmdb.org/t/p/w500"


class TMDBClient:
    """Client responsible for searching TMDB for catalog entries."""

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient):
        self._settings = settings
        self._client = http_client

    @property
    def configured(self) -> bool:
        return bool(self._settings.tmdb_api_key)

    async def search_by_text(self, query: str) -> list[CatalogEntry]:
        """Return movie results for a free-text title or keyword query."""

        cleaned = (query or "").strip()
        if not cleaned:
            return []
        payload = await self._get(
            "/search/movie",
            {
                "query": cleaned,
                "include_adult": "false",
                "language": self._settings.tmdb_language,
                "page": 1,
            },
        )
        return self._parse_results(payload, context=f"search {cleaned!r}")

    async def get_trending(self) -> list[CatalogEntry]:
        payload = await self._get(
            "/trending/movie/week", {"language": self._settings.tmdb_language}
        )
        return self._parse_results(payload, context="trending")

    async def get_popular(self) -> list[CatalogEntry]:
        payload = await self._get(
            "/movie/popular",
            {"language": self._settings.tmdb_language, "page": 1},
        )
        return self._parse_results(payload, context="popular")

    async def _get(self, endpoint: str, params: dict[str, Any]) -> dict[str, Any]:
        if not self._settings.tmdb_api_key:
            raise CatalogUnavailableError("TMDB API key is not configured")
        params = {**params, "api_key": self._settings.tmdb_api_key}
        try:
            response = await self._client.get(endpoint, params=params)
        except httpx.HTTPError as exc:
            raise CatalogUnavailableError(f"TMDB request failed: {exc}") from exc

        if response.status_code >= 400:
            logger.warning(
                "TMDB request %s failed (%s): %s",
                endpoint,
                response.status_code,
                response.text,
            )
            raise CatalogUnavailableError(
                f"TMDB returned HTTP {response.status_code} for {endpoint}"
            )
        try:
            data = response.json()
        except ValueError as exc:
            raise CatalogUnavailableError("TMDB returned a non-JSON body") from exc
        if not isinstance(data, dict):
            raise CatalogUnavailableError("TMDB returned an unexpected payload")
        return data

    def _parse_results(
        self, payload: dict[str, Any], *, context: str
    ) -> list[CatalogEntry]:
        results = payload.get("results", [])
        if not isinstance(results, list):
            return []

        entries: list[CatalogEntry] = []
        for candidate in results:
            if not isinstance(candidate, dict):
                continue
            media_type = candidate.get("media_type") or "movie"
            if media_type == "person":
                continue
            try:
                entry = CatalogEntry.from_tmdb(candidate, media_type=media_type)
            except (KeyError, TypeError, ValueError, ValidationError):
                logger.debug("Skipping malformed TMDB result in %s: %s", context, candidate)
                continue
            if not entry.title:
                continue
            entries.append(entry)
        return entries

    @staticmethod
    def build_poster_url(path: str | None) -> str | None:
        if not path:
            return None
        if path.startswith("http"):
            return path
        return f"{POSTER_BASE_URL}{path}"
