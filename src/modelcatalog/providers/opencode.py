"""
OpenCode Zen: a curated gateway documented on a single page.

The page holds an endpoints table (name, model id, endpoint) and a
pricing table keyed by display name. Pricing names are mapped to model
ids through a fixed alias table, falling back to a slug of the name.
"""
from __future__ import annotations

from typing import Dict, List

from ..extractors import ColumnRule, IdentifierGrammar, TableExtractor, slug_synthesizer
from ..models import Capability, Modalities, Modality, ModelSpec, RawRecord, RecordKind
from ..services.normalizer import RecordNormalizer, SpecTable, index_by_identifier
from .base import ProviderPipeline

ZEN_URL = "https://opencode.ai/docs/zen/"

NAME_ALIASES = {
    "GPT 5": "gpt-5",
    "GPT 5 Codex": "gpt-5-codex",
    "Claude Sonnet 4.5": "claude-sonnet-4-5",
    "Claude Sonnet 4": "claude-sonnet-4",
    "Claude Haiku 3.5": "claude-3-5-haiku",
    "Claude Opus 4.1": "claude-opus-4-1",
    "Qwen3 Coder 480B": "qwen3-coder",
    "Grok Code Fast 1": "grok-code",
    "Kimi K2": "kimi-k2",
}

GRAMMAR = IdentifierGrammar("opencode-zen", r"^[a-z0-9][a-z0-9._-]*$", slug_synthesizer(NAME_ALIASES))

_CLAUDE_SPEC = ModelSpec(200000, 8192)

SPECS = SpecTable(
    default=ModelSpec(context_window=128000, max_output_tokens=4096),
    by_id={
        "gpt-5": ModelSpec(128000, 16384),
        "gpt-5-codex": ModelSpec(128000, 16384),
        "claude-sonnet-4-5": _CLAUDE_SPEC,
        "claude-sonnet-4": _CLAUDE_SPEC,
        "claude-3-5-haiku": _CLAUDE_SPEC,
        "claude-opus-4-1": ModelSpec(200000, 32000),
    },
)

PRICE_RULES = (
    ColumnRule.of("cache_hit_price", r"cached?\s*read"),
    ColumnRule.of("cache_write_price", r"cached?\s*write"),
    ColumnRule.of("input_price", r"input"),
    ColumnRule.of("output_price", r"output"),
)

# Model, Input, Output, Cached Read, Cached Write
POSITIONAL_PRICES = {1: "input_price", 2: "output_price", 3: "cache_hit_price", 4: "cache_write_price"}


def is_id_header(text: str) -> bool:
    lowered = text.lower()
    return "model" in lowered and "id" in lowered


def opencode_family(api_name: str) -> str:
    if api_name.startswith("gpt-"):
        return "gpt"
    if api_name.startswith("claude-"):
        return "-".join(api_name.split("-")[:3])
    special = {"qwen3-coder": "qwen3", "grok-code": "grok", "kimi-k2": "kimi"}
    return special.get(api_name, api_name.split("-")[0])


def opencode_modalities(record: RawRecord) -> Modalities:
    if (record.api_name or "").startswith("claude-"):
        return Modalities.of((Modality.TEXT, Modality.IMAGE), (Modality.TEXT,))
    return Modalities()


def model_extractor() -> TableExtractor:
    return TableExtractor(
        grammar=GRAMMAR,
        kind=RecordKind.MODEL,
        name="opencode endpoints table",
        required_headers=(r"model id|endpoint",),
        id_column=1,
        text_columns={2: "endpoint"},
        header_row=is_id_header,
    )


def pricing_extractor() -> TableExtractor:
    return TableExtractor(
        grammar=GRAMMAR,
        kind=RecordKind.PRICING,
        name="opencode pricing table",
        required_headers=(r"input|output",),
        price_rules=PRICE_RULES,
        positional_prices=POSITIONAL_PRICES,
        header_row=is_id_header,
        free_is_zero=True,
    )


class OpencodePipeline(ProviderPipeline):
    key = "opencode-zen"
    display_name = "OpenCode Zen"
    can_pull_model_info = True
    can_pull_pricing = True

    def fetch_model_records(self) -> List[RawRecord]:
        document = self.fetch_document(ZEN_URL, "models page")
        if document is None:
            return []
        return model_extractor().extract(document)

    def fetch_pricing_records(self) -> Dict[str, RawRecord]:
        # Same URL as the models page; the second fetch is a cache hit.
        document = self.fetch_document(ZEN_URL, "pricing page")
        if document is None:
            return {}
        return index_by_identifier(pricing_extractor().extract(document))

    def normalizer(self) -> RecordNormalizer:
        return RecordNormalizer(
            provider=self.key,
            specs=SPECS,
            family_for=opencode_family,
            modalities_for=opencode_modalities,
            capabilities_for=lambda record: (Capability.FUNCTION_CALLING,),
        )
