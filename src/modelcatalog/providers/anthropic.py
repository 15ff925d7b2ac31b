"""
Anthropic: models overview tables, pricing tables and the published OpenAPI spec.
"""
from __future__ import annotations

from typing import Dict, List

from ..extractors import (
    ColumnRule,
    CompositeExtractor,
    HeadingExtractor,
    IdentifierGrammar,
    TableExtractor,
    looks_like_header,
    versioned_family_synthesizer,
)
from ..models import Capability, Modalities, Modality, ModelSpec, RawRecord, RecordKind
from ..services.normalizer import PricingConvention, RecordNormalizer, SpecTable, default_family, index_by_identifier
from .base import ProviderPipeline

MODELS_URL = "https://docs.claude.com/en/docs/about-claude/models/overview"
PRICING_URL = "https://docs.claude.com/en/docs/about-claude/pricing"
OPENAPI_URL = (
    "https://storage.googleapis.com/stainless-sdk-openapi-specs/"
    "anthropic%2Fanthropic-9c7d1ea59095c76b24f14fe279825c2b0dc10f165a973a46b8a548af9aeda62e.yml"
)

GRAMMAR = IdentifierGrammar(
    "anthropic",
    r"^claude-[\w-]+$",
    versioned_family_synthesizer("claude", ("opus", "sonnet", "haiku")),
)

SPECS = SpecTable(
    default=ModelSpec(context_window=200000, max_output_tokens=4096),
    by_id={
        "claude-opus-4-1-20250805": ModelSpec(200000, 32000),
        "claude-opus-4-20250514": ModelSpec(200000, 32000),
        "claude-sonnet-4-20250514": ModelSpec(200000, 64000),
        "claude-3-7-sonnet-20250219": ModelSpec(200000, 64000),
        "claude-3-5-haiku-20241022": ModelSpec(200000, 8192),
        "claude-3-haiku-20240307": ModelSpec(200000, 4096),
    },
)

# Checked in order; "opus-4" would also match opus-4-1 ids.
FAMILIES = ("opus-4-1", "opus-4", "sonnet-4", "3-7-sonnet", "3-5-haiku", "3-haiku")

PRICE_RULES = (
    ColumnRule.of("input_price", r"input|base.*input"),
    ColumnRule.of("output_price", r"output"),
    ColumnRule.of("cache_write_price", r"cache.*write|write.*cache"),
    ColumnRule.of("cache_hit_price", r"cache.*hit|hit.*cache|refresh"),
)

# Base input, 5m cache write, ..., cache hit, output
POSITIONAL_PRICES = {1: "input_price", 2: "cache_write_price", -2: "cache_hit_price", -1: "output_price"}


def anthropic_family(api_name: str) -> str:
    for family in FAMILIES:
        if family in api_name:
            return f"claude-{family}"
    return default_family(api_name)


def model_extractor() -> CompositeExtractor:
    """Overview tables first; headings pick up models listed outside a table."""
    table = TableExtractor(
        grammar=GRAMMAR,
        kind=RecordKind.MODEL,
        name="anthropic models table",
        id_column=1,
        text_columns={2: "bedrock_name", 3: "vertex_name"},
        header_row=looks_like_header,
    )
    headings = HeadingExtractor(grammar=GRAMMAR, keyword=r"claude", name="anthropic model headings")
    return CompositeExtractor(table, headings, name="anthropic models")


def pricing_extractor() -> TableExtractor:
    return TableExtractor(
        grammar=GRAMMAR,
        kind=RecordKind.PRICING,
        name="anthropic pricing table",
        required_headers=(r"model|price|token",),
        price_rules=PRICE_RULES,
        positional_prices=POSITIONAL_PRICES,
        header_row=looks_like_header,
    )


class AnthropicPipeline(ProviderPipeline):
    key = "anthropic"
    display_name = "Anthropic"
    can_pull_api_specs = True
    can_pull_model_info = True
    can_pull_pricing = True
    openapi_url = OPENAPI_URL

    def fetch_model_records(self) -> List[RawRecord]:
        document = self.fetch_document(MODELS_URL, "models page")
        if document is None:
            return []
        return model_extractor().extract(document)

    def fetch_pricing_records(self) -> Dict[str, RawRecord]:
        document = self.fetch_document(PRICING_URL, "pricing page")
        if document is None:
            return {}
        return index_by_identifier(pricing_extractor().extract(document))

    def normalizer(self) -> RecordNormalizer:
        return RecordNormalizer(
            provider=self.key,
            specs=SPECS,
            convention=PricingConvention(cache_write_multiplier=1.25, cache_hit_from_output=True),
            family_for=anthropic_family,
            modalities_for=lambda record: Modalities.of(
                (Modality.TEXT, Modality.IMAGE), (Modality.TEXT,)
            ),
            capabilities_for=lambda record: (Capability.FUNCTION_CALLING,),
            match_dated_ids=True,
        )
