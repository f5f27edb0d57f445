"""Exception hierarchy for the incident catalog tool."""

from __future__ import annotations


class CatalogError(Exception):
    """Base class for catalog errors that end a run."""


class AuthenticationError(CatalogError):
    """Raised when no Graph token could be obtained for the requested scope."""


class FetchError(CatalogError):
    """Raised when a page of incidents could not be retrieved or parsed."""

    def __init__(self, message: str, page: int = 0) -> None:
        super().__init__(message)
        self.page = page
