"""
Perplexity: Sonar model cards and the pricing tables.
"""
from __future__ import annotations

from typing import Dict, List

from ..extractors import (
    CardExtractor,
    ColumnRule,
    IdentifierGrammar,
    TableExtractor,
    phrase_synthesizer,
)
from ..models import Capability, ModelSpec, RawRecord, RecordKind
from ..services.normalizer import RecordNormalizer, SpecTable, index_by_identifier
from .base import ProviderPipeline

MODELS_URL = "https://docs.perplexity.ai/getting-started/models"
PRICING_URL = "https://docs.perplexity.ai/getting-started/pricing"

# Longer phrases first; "sonar" matches every name.
GRAMMAR = IdentifierGrammar(
    "perplexity",
    r"^sonar[\w-]*$",
    phrase_synthesizer((
        ("sonar deep research", "sonar-deep-research"),
        ("sonar reasoning pro", "sonar-reasoning-pro"),
        ("sonar reasoning", "sonar-reasoning"),
        ("sonar pro", "sonar-pro"),
        ("sonar", "sonar"),
    )),
)

SPECS = SpecTable(
    default=ModelSpec(context_window=127072, max_output_tokens=4096),
    by_id={
        "sonar": ModelSpec(127072, 4096),
        "sonar-pro": ModelSpec(200000, 8000),
        "sonar-reasoning": ModelSpec(127072, 4096),
        "sonar-reasoning-pro": ModelSpec(127072, 4096),
        "sonar-deep-research": ModelSpec(127072, 4096),
    },
)

EXACT_HEADERS = {
    "input tokens ($/1m)": "input_price",
    "output tokens ($/1m)": "output_price",
    "citation tokens ($/1m)": "citation_price",
    "search queries ($/1k)": "search_query_price",
    "reasoning tokens ($/1m)": "reasoning_price",
}

PRICE_RULES = (
    ColumnRule.of("input_price", r"input"),
    ColumnRule.of("output_price", r"output"),
    ColumnRule.of("citation_price", r"citation"),
    ColumnRule.of("search_query_price", r"search.*quer"),
    ColumnRule.of("reasoning_price", r"reasoning"),
)

POSITIONAL_PRICES = {
    1: "input_price",
    2: "output_price",
    3: "citation_price",
    4: "search_query_price",
    5: "reasoning_price",
}


def is_pricing_header(text: str) -> bool:
    lowered = text.lower()
    return "model" in lowered or lowered == "feature"


def model_extractor() -> CardExtractor:
    return CardExtractor(
        grammar=GRAMMAR,
        selector='a[href*="models/sonar"]',
        href_pattern=r"models/(sonar[-\w]*)",
        name="perplexity model cards",
        name_selectors=('div[class*="font-semibold"]',),
        require_name=False,
    )


def pricing_extractor() -> TableExtractor:
    return TableExtractor(
        grammar=GRAMMAR,
        kind=RecordKind.PRICING,
        name="perplexity pricing table",
        required_headers=(r"model|input|output|token",),
        exact_headers=EXACT_HEADERS,
        price_rules=PRICE_RULES,
        positional_prices=POSITIONAL_PRICES,
        header_row=is_pricing_header,
    )


class PerplexityPipeline(ProviderPipeline):
    key = "perplexity"
    display_name = "Perplexity"
    can_pull_model_info = True
    can_pull_pricing = True

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
            family_for=lambda api_name: api_name,
            capabilities_for=lambda record: (Capability.SEARCH_GROUNDING,),
        )
