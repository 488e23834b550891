"""Exceptions raised by the external collaborators of the resolver."""

from __future__ import annotations


class ResolverError(Exception):
    """Base class for recoverable collaborator failures."""

    code = "resolver_error"

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail or self.code)
        self.detail = detail


class CatalogUnavailableError(ResolverError):
    """The media catalog could not answer a query."""

    code = "catalog_unavailable"


class InferenceUnavailableError(ResolverError):
    """The inference service is unconfigured or failed to answer."""

    code = "inference_unavailable"
