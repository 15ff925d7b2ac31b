"""
Providers whose models.jsonl is maintained by hand.

None of these has a model or pricing source that can be read without an
API key, so their runs never rewrite models.jsonl. Some still pull a
public OpenAPI spec. All of them declare capability flags for the
feature matrix.
"""
from __future__ import annotations

from typing import List

from ..logger import get_logger
from ..models import ModelSpec, ProviderRunResult, RawRecord
from ..services.normalizer import RecordNormalizer, SpecTable
from .base import ProviderPipeline

logger = get_logger(__name__)


class ManualCatalogPipeline(ProviderPipeline):
    """Pipeline that only refreshes the API spec, if it has one."""

    def fetch_model_records(self) -> List[RawRecord]:
        return []

    def normalizer(self) -> RecordNormalizer:
        return RecordNormalizer(provider=self.key, specs=SpecTable(default=ModelSpec()))

    def run(self) -> ProviderRunResult:
        spec_updated = self.update_api_spec()
        logger.info("PROVIDER %s models data update skipped (maintained by hand)", self.display_name)

        if self.can_pull_api_specs and not spec_updated:
            return ProviderRunResult(
                provider=self.key,
                skipped=True,
                error=f"OpenAPI spec not updated from {self.openapi_url}",
            )
        return ProviderRunResult(provider=self.key, spec_updated=spec_updated, skipped=True)


# ============================================================================
# SPEC-PULLING PROVIDERS
# ============================================================================

class OpenAIPipeline(ManualCatalogPipeline):
    key = "openai"
    display_name = "OpenAI"
    can_pull_api_specs = True
    openapi_url = "https://raw.githubusercontent.com/api-evangelist/openai/main/openapi/chat-openapi-original.yml"


class CoherePipeline(ManualCatalogPipeline):
    key = "cohere"
    display_name = "Cohere"
    can_pull_api_specs = True
    openapi_url = (
        "https://raw.githubusercontent.com/cohere-ai/cohere-developer-experience/"
        "refs/heads/main/cohere-openapi.yaml"
    )


class DeepSeekPipeline(ManualCatalogPipeline):
    key = "deepseek"
    display_name = "DeepSeek"
    can_pull_api_specs = True
    openapi_url = (
        "https://raw.githubusercontent.com/api-evangelist/deepseek/refs/heads/main/"
        "openapi/deepseek-chat-completion-api-openapi.yml"
    )


class XAIPipeline(ManualCatalogPipeline):
    """xAI publishes its spec as JSON; it is stored as-is (JSON is valid YAML)."""

    key = "xai"
    display_name = "xAI"
    can_pull_api_specs = True
    openapi_url = "https://api.x.ai/api-docs/openapi.json"


# ============================================================================
# DECLARATION-ONLY PROVIDERS
# ============================================================================

class GroqPipeline(ManualCatalogPipeline):
    """The models endpoint needs an API key; flags declare what a keyed run pulls."""

    key = "groq"
    display_name = "Groq"
    can_pull_model_info = True


class MistralPipeline(ManualCatalogPipeline):
    """The models endpoint needs an API key; flags declare what a keyed run pulls."""

    key = "mistral"
    display_name = "Mistral"
    can_pull_model_info = True


class GooglePipeline(ManualCatalogPipeline):
    key = "google"
    display_name = "Google"


class TogetherPipeline(ManualCatalogPipeline):
    key = "together"
    display_name = "Together"


class AzureOpenAIPipeline(ManualCatalogPipeline):
    key = "azure-openai"
    display_name = "Azure OpenAI"
