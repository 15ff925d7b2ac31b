"""
OpenRouter: the public models listing API.

``GET /api/v1/models`` returns every routed model with its context length,
modalities and per-token prices; no key is needed. Prices arrive with
each entry, so there is no separate pricing source.
"""
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..extractors import IdentifierGrammar, JsonListingExtractor
from ..models import Capability, FieldValue, Modalities, Modality, ModelSpec, RawRecord
from ..services.normalizer import RecordNormalizer, SpecTable
from .base import ProviderPipeline

MODELS_URL = "https://openrouter.ai/api/v1/models"

# "<upstream>/<model>", optionally with a ":variant" such as ":free"
GRAMMAR = IdentifierGrammar("openrouter", r"^[\w.-]+/[\w.:-]+$")

# Limits come from the listing itself.
SPECS = SpecTable(default=ModelSpec())

TOKENS_PER_MILLION = 1_000_000

CAPABILITY_PARAMETERS = {
    "tools": Capability.FUNCTION_CALLING,
    "reasoning": Capability.REASONING,
}

_MODALITIES = {m.value: m for m in Modality}


def per_million(value: Any) -> Optional[float]:
    """
    Per-token price ("0.000003") as a per-million price.

    Negative prices mark variable-priced routers and count as no price.
    """
    if value is None or value == "":
        return None
    price = float(value)
    if price < 0:
        return None
    return round(price * TOKENS_PER_MILLION, 6)


def read_model(entry: Mapping[str, Any]) -> Tuple[Dict[str, FieldValue], Tuple[Capability, ...]]:
    architecture = entry.get("architecture") or {}
    pricing = entry.get("pricing") or {}
    top_provider = entry.get("top_provider") or {}

    fields: Dict[str, FieldValue] = {"name": entry.get("name") or entry["id"]}
    if entry.get("context_length"):
        fields["context_window"] = int(entry["context_length"])
    if top_provider.get("max_completion_tokens"):
        fields["max_output_tokens"] = int(top_provider["max_completion_tokens"])

    for field_name, key in (("input_price", "prompt"), ("output_price", "completion")):
        price = per_million(pricing.get(key))
        if price is not None:
            fields[field_name] = price

    fields["input_modalities"] = ",".join(architecture.get("input_modalities") or ())
    fields["output_modalities"] = ",".join(architecture.get("output_modalities") or ())

    parameters = entry.get("supported_parameters") or ()
    capabilities = tuple(cap for param, cap in CAPABILITY_PARAMETERS.items() if param in parameters)
    return fields, capabilities


def openrouter_family(api_name: str) -> str:
    """The upstream provider: "anthropic/claude-sonnet-4" -> "anthropic"."""
    return api_name.split("/", 1)[0]


def _modality_list(value: Any) -> List[Modality]:
    known = [_MODALITIES[name] for name in str(value or "").split(",") if name in _MODALITIES]
    return known or [Modality.TEXT]


def openrouter_modalities(record: RawRecord) -> Modalities:
    return Modalities.of(
        _modality_list(record.get("input_modalities")),
        _modality_list(record.get("output_modalities")),
    )


def model_extractor() -> JsonListingExtractor:
    return JsonListingExtractor(grammar=GRAMMAR, read_entry=read_model, name="openrouter models API")


class OpenRouterPipeline(ProviderPipeline):
    key = "openrouter"
    display_name = "OpenRouter"
    can_pull_model_info = True
    can_pull_pricing = True

    def fetch_model_records(self) -> List[RawRecord]:
        result = self.fetcher.fetch_json(MODELS_URL, f"{self.display_name} models API")
        if not result.ok:
            return []
        return model_extractor().extract(result.document)

    def normalizer(self) -> RecordNormalizer:
        return RecordNormalizer(
            provider=self.key,
            specs=SPECS,
            family_for=openrouter_family,
            modalities_for=openrouter_modalities,
        )
