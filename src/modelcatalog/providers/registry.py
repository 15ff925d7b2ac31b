"""
Provider registry.

Pipelines are listed explicitly; adding a provider means adding its
class here.
"""
from __future__ import annotations

from typing import Dict, List, Optional, Type

from ..catalog.writer import CatalogWriter
from ..http.fetcher import ResilientFetcher
from .anthropic import AnthropicPipeline
from .base import ProviderPipeline
from .fireworks import FireworksPipeline
from .manual import (
    AzureOpenAIPipeline,
    CoherePipeline,
    DeepSeekPipeline,
    GooglePipeline,
    GroqPipeline,
    MistralPipeline,
    OpenAIPipeline,
    TogetherPipeline,
    XAIPipeline,
)
from .opencode import OpencodePipeline
from .openrouter import OpenRouterPipeline
from .perplexity import PerplexityPipeline

# Live sources first, then providers whose models are maintained by hand.
PROVIDERS: Dict[str, Type[ProviderPipeline]] = {
    pipeline.key: pipeline
    for pipeline in (
        AnthropicPipeline,
        FireworksPipeline,
        OpencodePipeline,
        OpenRouterPipeline,
        PerplexityPipeline,
        AzureOpenAIPipeline,
        CoherePipeline,
        DeepSeekPipeline,
        GooglePipeline,
        GroqPipeline,
        MistralPipeline,
        OpenAIPipeline,
        TogetherPipeline,
        XAIPipeline,
    )
}


def build_registry() -> Dict[str, Type[ProviderPipeline]]:
    """Copy of the registry, keyed by provider slug."""
    return dict(PROVIDERS)


def provider_keys() -> List[str]:
    return sorted(PROVIDERS)


def create_pipeline(
    key: str,
    fetcher: Optional[ResilientFetcher] = None,
    writer: Optional[CatalogWriter] = None,
) -> ProviderPipeline:
    """
    Instantiate the pipeline registered under ``key``.

    Raises:
        KeyError: If no provider is registered under ``key``
    """
    try:
        pipeline_cls = PROVIDERS[key]
    except KeyError:
        raise KeyError(f"Unknown provider {key!r}; known providers: {', '.join(provider_keys())}") from None
    return pipeline_cls(fetcher or ResilientFetcher(), writer or CatalogWriter())
