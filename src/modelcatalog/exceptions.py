"""
Error taxonomy for the catalog pipeline.

Only ``ProviderPipelineFailure`` is allowed to leave a provider run, and
the assembler catches it. Everything below it is handled where it occurs:
cache errors degrade to pass-through, fetch errors become a
``FetchResult`` outcome, row errors are collected and skipped.
"""
from __future__ import annotations

from typing import Optional


class CatalogError(Exception):
    """Base class for all catalog pipeline errors."""


class CacheIOError(CatalogError):
    """Reading or writing the on-disk cache failed."""


class FetchError(CatalogError):
    """Base class for failures that end a fetch."""

    def __init__(self, message: str, *, url: Optional[str] = None) -> None:
        super().__init__(message)
        self.url = url


class TransportError(FetchError):
    """Network-level failure (DNS, refused connection, bad status). Not retried."""

    def __init__(
        self,
        message: str,
        *,
        url: Optional[str] = None,
        status: Optional[int] = None,
    ) -> None:
        super().__init__(message, url=url)
        self.status = status


class FetchTimeoutError(FetchError):
    """Every attempt timed out."""

    def __init__(self, message: str, *, url: Optional[str] = None, attempts: int = 0) -> None:
        super().__init__(message, url=url)
        self.attempts = attempts


class EmptyOrUnparsableDocument(FetchError):
    """The response arrived but carried no usable document."""

    def __init__(self, message: str, *, url: Optional[str] = None, empty: bool = False) -> None:
        super().__init__(message, url=url)
        self.empty = empty


class ExtractionRowError(CatalogError):
    """A single table row, card or heading block could not be parsed."""

    def __init__(self, message: str, *, fragment: Optional[str] = None) -> None:
        super().__init__(message)
        self.fragment = fragment


class IdentifierValidationFailure(ExtractionRowError):
    """A candidate identifier does not match the provider's naming grammar."""

    def __init__(self, candidate: Optional[str], provider: str) -> None:
        super().__init__(f"invalid {provider} identifier: {candidate!r}", fragment=candidate)
        self.candidate = candidate
        self.provider = provider


class ProviderPipelineFailure(CatalogError):
    """A provider run failed as a whole; its previous output stays on disk."""

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider
