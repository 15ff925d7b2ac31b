"""
Catalog assembly: run every provider pipeline and publish the results.

Providers run one after another. A failing provider is logged and
recorded in the summary; it never stops the remaining providers, and its
previous catalog output stays on disk.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Union

from ..config import Config
from ..exceptions import ProviderPipelineFailure
from ..http.cache import CacheStore
from ..http.fetcher import FetchSettings, ResilientFetcher
from ..logger import get_logger
from ..models import ProviderRunResult
from ..providers.base import ProviderPipeline
from ..providers.registry import PROVIDERS, create_pipeline
from .feature_matrix import FeatureMatrix
from .writer import CatalogWriter

logger = get_logger(__name__)


@dataclass
class CatalogSummary:
    """
    Outcome of one assembly run.

    Attributes:
        providers: Provider slugs with a catalog on disk, sorted
        counts: Record count per provider slug on disk
        failed: Slugs of providers whose run failed or produced nothing
        results: Per-provider run results in run order
    """

    providers: List[str] = field(default_factory=list)
    counts: Dict[str, int] = field(default_factory=dict)
    failed: List[str] = field(default_factory=list)
    results: List[ProviderRunResult] = field(default_factory=list)

    @property
    def total_records(self) -> int:
        return sum(self.counts.values())

    def to_dict(self) -> dict:
        return {
            "providers": self.providers,
            "counts": self.counts,
            "failed": self.failed,
            "total_records": self.total_records,
        }


class CatalogAssembler:
    """Runs provider pipelines and writes providers.json plus the feature matrix."""

    def __init__(
        self,
        writer: Optional[CatalogWriter] = None,
        feature_matrix_path: Optional[Union[str, Path]] = None,
    ) -> None:
        self.writer = writer or CatalogWriter()
        self.feature_matrix_path = feature_matrix_path or Config.FEATURE_MATRIX_FILE

    @classmethod
    def from_config(cls) -> "CatalogAssembler":
        return cls(CatalogWriter(Config.CATALOG_DIR), Config.FEATURE_MATRIX_FILE)

    def build_pipelines(
        self,
        keys: Optional[Sequence[str]] = None,
        fetcher: Optional[ResilientFetcher] = None,
    ) -> List[ProviderPipeline]:
        """Pipelines for ``keys`` (all registered providers by default) sharing one fetcher."""
        fetcher = fetcher or ResilientFetcher(
            CacheStore(Config.CACHE_DIR),
            settings=FetchSettings.from_config(),
        )
        return [create_pipeline(key, fetcher, self.writer) for key in (keys or sorted(PROVIDERS))]

    def run(self, pipelines: Iterable[ProviderPipeline]) -> CatalogSummary:
        summary = CatalogSummary()

        for pipeline in pipelines:
            result = self.run_one(pipeline)
            summary.results.append(result)
            if result.stale:
                summary.failed.append(result.provider)

        summary.providers = self.writer.write_provider_index()
        summary.counts = self.writer.model_counts()
        FeatureMatrix.from_pipelines(PROVIDERS.values()).write(self.feature_matrix_path)

        logger.info("CATALOG Catalog update complete: %d providers, %d records, %d failed",
                    len(summary.providers), summary.total_records, len(summary.failed))
        return summary

    def run_one(self, pipeline: ProviderPipeline) -> ProviderRunResult:
        logger.info("PROVIDER Running %s", pipeline.display_name)
        try:
            return pipeline.run()
        except ProviderPipelineFailure as e:
            logger.error("PROVIDER %s run failed: %s", pipeline.display_name, e)
            return ProviderRunResult(provider=pipeline.key, error=str(e))
        except Exception as e:
            logger.exception("PROVIDER Unexpected error in %s: %s", pipeline.display_name, e)
            return ProviderRunResult(provider=pipeline.key, error=f"{type(e).__name__}: {e}")
