"""Interfaces the resolver expects from its external collaborators."""

from __future__ import annotations

from typing import Protocol

from .models import Artifact, CatalogEntry


class CatalogClient(Protocol):
    async def search_by_text(self, query: str) -> list[CatalogEntry]:
        ...

    async def get_trending(self) -> list[CatalogEntry]:
        ...

    async def get_popular(self) -> list[CatalogEntry]:
        ...


class InferenceClient(Protocol):
    @property
    def configured(self) -> bool:
        ...

    async def analyze(self, artifact: Artifact) -> str:
        ...
