"""
Provider pipeline base class.

A pipeline fetches a provider's pages, extracts raw records, merges them
through a RecordNormalizer and writes the result. A run that produces no
records leaves the provider's previous catalog output untouched.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import ClassVar, Dict, List, Optional

from bs4 import BeautifulSoup

from ..catalog.openapi import OpenAPISpecCheck
from ..catalog.writer import CatalogWriter
from ..http.fetcher import ResilientFetcher
from ..logger import get_logger
from ..models import CatalogRecord, ProviderCapabilities, ProviderRunResult, RawRecord
from ..services.normalizer import RecordNormalizer

logger = get_logger(__name__)


class ProviderPipeline(ABC):
    """
    Per-provider orchestration.

    Subclasses declare what they can pull (static flags, independent of
    whether a run succeeds), how to extract model and pricing records, and
    how to normalize them.
    """

    key: ClassVar[str]
    display_name: ClassVar[str]
    can_pull_api_specs: ClassVar[bool] = False
    can_pull_model_info: ClassVar[bool] = False
    can_pull_pricing: ClassVar[bool] = False
    openapi_url: ClassVar[Optional[str]] = None

    def __init__(self, fetcher: ResilientFetcher, writer: CatalogWriter) -> None:
        self.fetcher = fetcher
        self.writer = writer

    @classmethod
    def capabilities(cls) -> ProviderCapabilities:
        return ProviderCapabilities(
            api_specs=cls.can_pull_api_specs,
            model_info=cls.can_pull_model_info,
            pricing=cls.can_pull_pricing,
        )

    @abstractmethod
    def fetch_model_records(self) -> List[RawRecord]:
        """Model-side records from the provider's live sources."""

    def fetch_pricing_records(self) -> Dict[str, RawRecord]:
        """Pricing-side records keyed by identifier."""
        return {}

    @abstractmethod
    def normalizer(self) -> RecordNormalizer:
        """Normalizer configured with this provider's defaults."""

    def fetch_document(self, url: str, description: str) -> Optional[BeautifulSoup]:
        """Parsed document, or None when the fetch failed for any reason."""
        result = self.fetcher.fetch_document(url, f"{self.display_name} {description}")
        return result.document if result.ok else None

    def build_records(self) -> List[CatalogRecord]:
        models = self.fetch_model_records()
        if not models:
            return []

        pricing = self.fetch_pricing_records() if self.can_pull_pricing else {}
        return self.normalizer().merge(models, pricing)

    def update_api_spec(self) -> bool:
        """Pull, check and write the provider's OpenAPI spec. Returns True if written."""
        if not self.can_pull_api_specs or not self.openapi_url:
            return False

        logger.info("PROVIDER Downloading %s OpenAPI spec...", self.display_name)
        result = self.fetcher.fetch_text(self.openapi_url, f"{self.display_name} OpenAPI spec")
        if not result.ok:
            return False

        errors = OpenAPISpecCheck.validate(result.body)
        if errors:
            logger.error("PROVIDER %s OpenAPI spec failed validation: %s",
                         self.display_name, "; ".join(errors))
            return False

        self.writer.write_spec(self.key, result.body)
        return True

    def run(self) -> ProviderRunResult:
        spec_updated = self.update_api_spec()

        records = self.build_records()
        if not records:
            logger.error("PROVIDER Failed to fetch %s models, keeping previous catalog", self.display_name)
            return ProviderRunResult(provider=self.key, spec_updated=spec_updated)

        self.writer.write_models(self.key, records)
        logger.info("PROVIDER Updated %s models data (%d records)", self.display_name, len(records))
        return ProviderRunResult(
            provider=self.key,
            records=tuple(records),
            updated=True,
            spec_updated=spec_updated,
        )
