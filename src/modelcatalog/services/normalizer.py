"""
Reconcile model records with pricing records into catalog records.

Handles:
- Join by validated identifier (optionally ignoring a trailing release date)
- First-wins deduplication of model records
- Spec defaults: record value, then per-id table, then provider default
- Derived cache prices from a provider convention
- Deterministic ordering by display name
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from ..extractors.base import dedupe_first
from ..logger import get_logger
from ..models import (
    Capability,
    CatalogRecord,
    Modalities,
    ModelSpec,
    PriceCategory,
    PricePoint,
    PriceTier,
    PricingTable,
    RawRecord,
)

logger = get_logger(__name__)

_DATE_SUFFIX = re.compile(r"(.+)-\d{8}")


@dataclass(frozen=True)
class PriceField:
    """Where a raw price field lands in a PricingTable."""

    category: PriceCategory
    tier: PriceTier
    side: str = "input"


PRICE_FIELDS: Dict[str, PriceField] = {
    "input_price": PriceField(PriceCategory.TEXT_TOKENS, PriceTier.STANDARD, "input"),
    "output_price": PriceField(PriceCategory.TEXT_TOKENS, PriceTier.STANDARD, "output"),
    "cache_write_price": PriceField(PriceCategory.TEXT_TOKENS, PriceTier.CACHED, "input"),
    "cache_hit_price": PriceField(PriceCategory.TEXT_TOKENS, PriceTier.CACHED, "output"),
    "batch_input_price": PriceField(PriceCategory.TEXT_TOKENS, PriceTier.BATCH, "input"),
    "batch_output_price": PriceField(PriceCategory.TEXT_TOKENS, PriceTier.BATCH, "output"),
    "citation_price": PriceField(PriceCategory.CITATION_TOKENS, PriceTier.STANDARD, "input"),
    "reasoning_price": PriceField(PriceCategory.REASONING_TOKENS, PriceTier.STANDARD, "input"),
    "search_query_price": PriceField(PriceCategory.SEARCH_QUERIES, PriceTier.STANDARD, "input"),
    "image_price": PriceField(PriceCategory.IMAGES, PriceTier.STANDARD, "input"),
    "minute_price": PriceField(PriceCategory.AUDIO_MINUTES, PriceTier.STANDARD, "input"),
    "step_price": PriceField(PriceCategory.DIFFUSION_STEPS, PriceTier.STANDARD, "input"),
}


@dataclass(frozen=True)
class PricingConvention:
    """
    Provider rules for prices the source does not list.

    Attributes:
        cache_write_multiplier: cache-write price = input price x multiplier
        cache_hit_from_output: cache-hit price = output price
    """

    cache_write_multiplier: Optional[float] = None
    cache_hit_from_output: bool = False

    def derive(self, fields: Mapping[str, object]) -> Dict[str, object]:
        derived = dict(fields)
        input_price = derived.get("input_price")
        output_price = derived.get("output_price")

        if self.cache_write_multiplier is not None and input_price is not None:
            derived.setdefault("cache_write_price", round(float(input_price) * self.cache_write_multiplier, 6))
        if self.cache_hit_from_output and output_price is not None:
            derived.setdefault("cache_hit_price", float(output_price))

        return derived


@dataclass(frozen=True)
class SpecTable:
    """
    Token limits by identifier.

    Lookup order per field: exact identifier, then the first keyword rule
    whose keyword occurs in the identifier, then the provider default.
    """

    default: ModelSpec
    by_id: Mapping[str, ModelSpec] = field(default_factory=dict)
    keyword_rules: Sequence[Tuple[Tuple[str, ...], ModelSpec]] = ()

    def resolve(self, api_name: str, context_window: Optional[int] = None,
                max_output_tokens: Optional[int] = None) -> ModelSpec:
        candidates = [ModelSpec(context_window, max_output_tokens)]
        if api_name in self.by_id:
            candidates.append(self.by_id[api_name])
        for keywords, spec in self.keyword_rules:
            if any(k in api_name for k in keywords):
                candidates.append(spec)
                break
        candidates.append(self.default)

        return ModelSpec(
            context_window=next((c.context_window for c in candidates if c.context_window), None),
            max_output_tokens=next((c.max_output_tokens for c in candidates if c.max_output_tokens), None),
        )


def default_family(api_name: str) -> str:
    return "-".join(api_name.split("-")[:2])


def index_by_identifier(records: Iterable[RawRecord]) -> Dict[str, RawRecord]:
    """Map identifier -> record, keeping the first record per identifier."""
    return {r.api_name: r for r in dedupe_first(r for r in records if r.api_name)}


class RecordNormalizer:
    """
    Merge model-side and pricing-side records for one provider.

    Args:
        provider: Provider slug written into every record
        specs: Token-limit defaults
        convention: Derived-price rules
        family_for: Family name for an identifier
        id_for: Catalog id for an identifier
        modalities_for: Modalities for a merged raw record
        capabilities_for: Capabilities for a merged raw record
        match_dated_ids: Also join a dated identifier ("claude-3-5-haiku-20241022")
            to the pricing identifier without its date ("claude-3-5-haiku")
    """

    def __init__(
        self,
        *,
        provider: str,
        specs: SpecTable,
        convention: PricingConvention = PricingConvention(),
        family_for: Callable[[str], str] = default_family,
        id_for: Callable[[str], str] = str,
        modalities_for: Optional[Callable[[RawRecord], Modalities]] = None,
        capabilities_for: Optional[Callable[[RawRecord], Tuple[Capability, ...]]] = None,
        match_dated_ids: bool = False,
    ) -> None:
        self.provider = provider
        self.specs = specs
        self.convention = convention
        self.family_for = family_for
        self.id_for = id_for
        self.modalities_for = modalities_for or (lambda record: Modalities())
        self.capabilities_for = capabilities_for or (lambda record: record.capabilities)
        self.match_dated_ids = match_dated_ids

    def merge(
        self,
        model_records: Iterable[RawRecord],
        pricing_records: Mapping[str, RawRecord],
    ) -> List[CatalogRecord]:
        """
        Merge the two record sets.

        Every model record with an identifier yields exactly one catalog
        record; a missing pricing record only leaves ``pricing`` empty.

        Returns:
            Catalog records sorted by display name
        """
        merged: List[CatalogRecord] = []
        priced = 0

        for model in dedupe_first(model_records):
            if not model.api_name:
                logger.debug("MERGE Skipping %s record without identifier", self.provider)
                continue

            pricing = self.find_pricing(model.api_name, pricing_records)
            record = self.build_record(model.merged_with(pricing))
            if record.pricing is not None:
                priced += 1
            merged.append(record)

        merged.sort(key=lambda r: (r.name, r.id))
        logger.info("MERGE %s: %d records, %d with pricing, %d pricing entries available",
                    self.provider, len(merged), priced, len(pricing_records))
        return merged

    def find_pricing(self, api_name: str, pricing_records: Mapping[str, RawRecord]) -> Optional[RawRecord]:
        if api_name in pricing_records:
            return pricing_records[api_name]
        if not self.match_dated_ids:
            return None

        dated = _DATE_SUFFIX.fullmatch(api_name)
        if dated is None:
            return None
        return pricing_records.get(dated.group(1))

    def build_record(self, record: RawRecord) -> CatalogRecord:
        api_name = record.api_name
        spec = self.specs.resolve(
            api_name,
            context_window=_as_int(record.get("context_window")),
            max_output_tokens=_as_int(record.get("max_output_tokens")),
        )
        name = str(record.get("name") or "").strip() or api_name

        return CatalogRecord(
            name=name,
            family=self.family_for(api_name),
            provider=self.provider,
            id=self.id_for(api_name),
            context_window=spec.context_window,
            max_output_tokens=spec.max_output_tokens,
            modalities=self.modalities_for(record),
            capabilities=tuple(dict.fromkeys(self.capabilities_for(record))),
            pricing=self.build_pricing(record.fields),
        )

    def build_pricing(self, fields: Mapping[str, object]) -> Optional[PricingTable]:
        """PricingTable from raw price fields, or None if there are none."""
        present = {k: v for k, v in fields.items() if k in PRICE_FIELDS and v is not None}
        if not present:
            return None

        sides: Dict[Tuple[PriceCategory, PriceTier], Dict[str, float]] = {}
        for name, value in self.convention.derive(present).items():
            target = PRICE_FIELDS.get(name)
            if target is None:
                continue
            sides.setdefault((target.category, target.tier), {})[target.side] = float(value)

        table = PricingTable.build({key: PricePoint(**values) for key, values in sides.items()})
        return None if table.is_empty else table


def _as_int(value: object) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
