"""
Provider pipelines and their registry.
"""
from .anthropic import AnthropicPipeline
from .base import ProviderPipeline
from .fireworks import FireworksPipeline
from .manual import ManualCatalogPipeline
from .opencode import OpencodePipeline
from .openrouter import OpenRouterPipeline
from .perplexity import PerplexityPipeline
from .registry import PROVIDERS, build_registry, create_pipeline, provider_keys

__all__ = [
    "AnthropicPipeline",
    "FireworksPipeline",
    "ManualCatalogPipeline",
    "OpencodePipeline",
    "OpenRouterPipeline",
    "PerplexityPipeline",
    "PROVIDERS",
    "ProviderPipeline",
    "build_registry",
    "create_pipeline",
    "provider_keys",
]
