"""
Unit tests for CatalogAssembler and the feature matrix.

Tests:
- A failing provider never stops the others
- Previous output of a failed provider is preserved
- Hand-maintained providers are skipped, not failed
- providers.json and FEATURE_MATRIX.md are written after every run
"""
import json

import pytest

from modelcatalog.catalog.assembler import CatalogAssembler, CatalogSummary
from modelcatalog.catalog.feature_matrix import FeatureMatrix
from modelcatalog.exceptions import ProviderPipelineFailure
from modelcatalog.models import CatalogRecord, ModelSpec, ProviderCapabilities, RawRecord, RecordKind
from modelcatalog.providers.base import ProviderPipeline
from modelcatalog.providers.manual import GooglePipeline
from modelcatalog.services.normalizer import RecordNormalizer, SpecTable


class StaticPipeline(ProviderPipeline):
    """Pipeline that serves canned records."""

    key = "static"
    display_name = "Static"
    can_pull_model_info = True

    def __init__(self, fetcher, writer, names=("Alpha",)):
        super().__init__(fetcher, writer)
        self.names = names

    def fetch_model_records(self):
        return [RawRecord(kind=RecordKind.MODEL, api_name=n.lower(), fields={"name": n}) for n in self.names]

    def normalizer(self):
        return RecordNormalizer(provider=self.key, specs=SpecTable(default=ModelSpec(1000, 100)))


class OtherPipeline(StaticPipeline):
    key = "other"
    display_name = "Other"


class ExplodingPipeline(StaticPipeline):
    key = "exploding"
    display_name = "Exploding"

    def fetch_model_records(self):
        raise RuntimeError("unexpected markup")


class FailingPipeline(StaticPipeline):
    key = "failing"
    display_name = "Failing"

    def run(self):
        raise ProviderPipelineFailure(self.key, "disk full")


@pytest.fixture
def assembler(writer, tmp_path):
    return CatalogAssembler(writer, tmp_path / "FEATURE_MATRIX.md")


class TestIsolation:
    def test_failures_do_not_stop_other_providers(self, assembler, fetcher, writer):
        pipelines = [
            ExplodingPipeline(fetcher, writer),
            StaticPipeline(fetcher, writer),
            FailingPipeline(fetcher, writer),
            OtherPipeline(fetcher, writer, names=("Beta", "Gamma")),
        ]

        summary = assembler.run(pipelines)

        assert summary.providers == ["other", "static"]
        assert summary.counts == {"other": 2, "static": 1}
        assert summary.failed == ["exploding", "failing"]
        assert summary.total_records == 3

    def test_failed_provider_keeps_previous_output(self, assembler, fetcher, writer):
        writer.write_models("exploding", [
            CatalogRecord(name="Old", family="old", provider="exploding", id="old",
                          context_window=1, max_output_tokens=1),
        ])

        summary = assembler.run([ExplodingPipeline(fetcher, writer)])

        assert summary.failed == ["exploding"]
        assert summary.providers == ["exploding"]
        assert writer.load_models("exploding")[0]["id"] == "old"

    def test_empty_run_counts_as_failed(self, assembler, fetcher, writer):
        summary = assembler.run([StaticPipeline(fetcher, writer, names=())])
        assert summary.failed == ["static"]
        assert summary.providers == []

    def test_hand_maintained_provider_is_not_failed(self, assembler, fetcher, writer):
        summary = assembler.run([GooglePipeline(fetcher, writer), StaticPipeline(fetcher, writer)])

        assert summary.failed == []
        assert summary.providers == ["static"]
        assert summary.results[0].skipped

    def test_errors_are_logged(self, assembler, fetcher, writer, caplog):
        assembler.run([ExplodingPipeline(fetcher, writer), FailingPipeline(fetcher, writer)])
        assert "Unexpected error in Exploding" in caplog.text
        assert "Failing run failed: failing: disk full" in caplog.text


class TestOutputs:
    def test_writes_provider_index_and_matrix(self, assembler, fetcher, writer, tmp_path):
        assembler.run([StaticPipeline(fetcher, writer)])

        assert json.loads((writer.catalog_dir / "providers.json").read_text()) == ["static"]
        matrix = (tmp_path / "FEATURE_MATRIX.md").read_text(encoding="utf-8")
        assert "| Anthropic | ✅ | ✅ | ✅ |" in matrix
        assert "| Perplexity | ❌ | ✅ | ✅ |" in matrix
        assert "| OpenRouter | ❌ | ✅ | ✅ |" in matrix
        assert "| OpenAI | ✅ | ❌ | ❌ |" in matrix
        assert "| Groq | ❌ | ✅ | ❌ |" in matrix
        assert "| Azure OpenAI | ❌ | ❌ | ❌ |" in matrix

    def test_summary_dict(self):
        summary = CatalogSummary(providers=["a"], counts={"a": 2}, failed=["b"])
        assert summary.to_dict() == {"providers": ["a"], "counts": {"a": 2}, "failed": ["b"], "total_records": 2}

    def test_build_pipelines(self, assembler, fetcher):
        pipelines = assembler.build_pipelines(["perplexity", "anthropic"], fetcher=fetcher)
        assert [p.key for p in pipelines] == ["perplexity", "anthropic"]
        assert all(p.fetcher is fetcher for p in pipelines)


class TestFeatureMatrix:
    def test_rows_sorted_by_name(self):
        matrix = FeatureMatrix([
            ("Perplexity", ProviderCapabilities(False, True, True)),
            ("anthropic", ProviderCapabilities(True, True, True)),
        ])
        assert [name for name, _ in matrix.rows] == ["anthropic", "Perplexity"]

    def test_markdown(self):
        markdown = FeatureMatrix([("Static", StaticPipeline.capabilities())]).to_markdown()

        lines = markdown.splitlines()
        assert lines[0] == "# Provider Feature Matrix"
        assert "| Provider | API Specs | Model Info | Pricing |" in lines
        assert lines[-1] == "| Static | ❌ | ✅ | ❌ |"

    def test_capabilities_are_static(self, fetcher, writer):
        """Flags do not depend on whether a run succeeded."""
        assert ExplodingPipeline.capabilities() == ExplodingPipeline(fetcher, writer).capabilities()
