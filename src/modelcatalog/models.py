"""
Data models for the model catalog pipeline.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Iterable, Mapping, Optional, Tuple, Union

if TYPE_CHECKING:
    from .exceptions import ExtractionRowError, FetchError


FieldValue = Union[str, float, int]


# ============================================================================
# HTTP CACHE / FETCH MODELS
# ============================================================================

@dataclass(frozen=True, slots=True)
class CacheEntry:
    """
    One persisted HTTP response.

    Attributes:
        key: Hash of the request URL
        stored_at: Unix timestamp of the live fetch that produced the entry
        status: HTTP status code
        headers: Response headers
        body: Raw response body
    """

    key: str
    stored_at: float
    status: int
    headers: Dict[str, str]
    body: bytes

    def is_fresh(self, now: float, ttl_s: float) -> bool:
        """An entry is fresh while strictly younger than the TTL."""
        return now - self.stored_at < ttl_s


@dataclass(frozen=True, slots=True)
class CachedResponse:
    """A response served either from the cache or from the network."""

    body: bytes
    status: int
    headers: Dict[str, str] = field(default_factory=dict)
    from_cache: bool = False

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


class FetchOutcome(str, Enum):
    SUCCESS = "success"
    TRANSPORT_FAILURE = "transport_failure"
    TIMEOUT = "timeout"
    EMPTY_BODY = "empty_body"
    PARSE_FAILURE = "parse_failure"


@dataclass(frozen=True, slots=True)
class FetchResult:
    """
    Result of fetching one document.

    Attributes:
        url: Requested URL
        outcome: Success or the failure class that ended the fetch
        document: Parsed HTML tree or decoded JSON value (text fetches leave it None)
        body: Decoded body text (successful fetches only)
        error: The error that ended the fetch, for diagnostics
        from_cache: Whether the body came from the cache
        attempts: Number of network attempts made (0 on a cache hit)
    """

    url: str
    outcome: FetchOutcome
    document: Any = None
    body: Optional[str] = None
    error: Optional["FetchError"] = None
    from_cache: bool = False
    attempts: int = 0

    @property
    def ok(self) -> bool:
        return self.outcome is FetchOutcome.SUCCESS


# ============================================================================
# EXTRACTION MODELS
# ============================================================================

class RecordKind(str, Enum):
    MODEL = "model-descriptor"
    PRICING = "pricing-descriptor"


class Modality(str, Enum):
    TEXT = "text"
    IMAGE = "image"
    AUDIO = "audio"
    VIDEO = "video"


class Capability(str, Enum):
    FUNCTION_CALLING = "function_calling"
    VISION = "vision"
    FINE_TUNING = "fine_tuning"
    IMAGE_GENERATION = "image_generation"
    SPEECH_TO_TEXT = "speech_to_text"
    SEARCH_GROUNDING = "search_grounding"
    REASONING = "reasoning"


@dataclass(frozen=True, slots=True)
class RawRecord:
    """
    Unvalidated record pulled out of one document fragment.

    Attributes:
        kind: Whether the fragment describes a model or its pricing
        api_name: Candidate identifier (may be missing or malformed)
        fields: Extracted values keyed by field name
        capabilities: Capability keywords found in the fragment
        context: Flattened fragment text, kept for provider-specific hints
    """

    kind: RecordKind
    api_name: Optional[str]
    fields: Dict[str, FieldValue] = field(default_factory=dict)
    capabilities: Tuple[Capability, ...] = ()
    context: str = ""

    def get(self, name: str, default: Any = None) -> Any:
        return self.fields.get(name, default)

    def merged_with(self, other: Optional["RawRecord"], *, keep: Tuple[str, ...] = ("name",)) -> "RawRecord":
        """Overlay another record's fields onto this one, except those in ``keep``."""
        if other is None:
            return self
        overlay = {k: v for k, v in other.fields.items() if k not in keep or k not in self.fields}
        capabilities = tuple(dict.fromkeys(self.capabilities + other.capabilities))
        return replace(
            self,
            fields={**self.fields, **overlay},
            capabilities=capabilities,
        )


@dataclass(frozen=True, slots=True)
class RowResult:
    """Outcome of parsing one row, card or heading block."""

    record: Optional[RawRecord] = None
    error: Optional["ExtractionRowError"] = None

    @property
    def ok(self) -> bool:
        return self.record is not None

    @classmethod
    def success(cls, record: RawRecord) -> "RowResult":
        return cls(record=record)

    @classmethod
    def failure(cls, error: "ExtractionRowError") -> "RowResult":
        return cls(error=error)

    @classmethod
    def skipped(cls) -> "RowResult":
        """Nothing to extract here (header row, empty row)."""
        return cls()


# ============================================================================
# PRICING MODELS
# ============================================================================

class PriceTier(str, Enum):
    STANDARD = "standard"
    CACHED = "cached"
    BATCH = "batch"


class PriceCategory(str, Enum):
    TEXT_TOKENS = "text_tokens"
    CITATION_TOKENS = "citation_tokens"
    REASONING_TOKENS = "reasoning_tokens"
    SEARCH_QUERIES = "search_queries"
    IMAGES = "images"
    AUDIO_MINUTES = "audio_minutes"
    DIFFUSION_STEPS = "diffusion_steps"

    @property
    def leaf_names(self) -> Tuple[str, Optional[str]]:
        """Serialized names of the input and output leaves."""
        return _CATEGORY_LEAVES[self]


_TOKEN_LEAVES = ("input_per_million", "output_per_million")

_CATEGORY_LEAVES: Dict[PriceCategory, Tuple[str, Optional[str]]] = {
    PriceCategory.TEXT_TOKENS: _TOKEN_LEAVES,
    PriceCategory.CITATION_TOKENS: _TOKEN_LEAVES,
    PriceCategory.REASONING_TOKENS: _TOKEN_LEAVES,
    PriceCategory.SEARCH_QUERIES: ("per_thousand", None),
    PriceCategory.IMAGES: ("per_image", None),
    PriceCategory.AUDIO_MINUTES: ("per_minute", None),
    PriceCategory.DIFFUSION_STEPS: ("per_step", None),
}


@dataclass(frozen=True, slots=True)
class PricePoint:
    """An input/output price pair; unit categories only use ``input``."""

    input: Optional[float] = None
    output: Optional[float] = None

    def __post_init__(self) -> None:
        for side in (self.input, self.output):
            if side is not None and side < 0:
                raise ValueError(f"price must be non-negative, got {side}")

    @property
    def is_empty(self) -> bool:
        return self.input is None and self.output is None


@dataclass(frozen=True, slots=True)
class PricingTable:
    """
    Prices by category and tier.

    Build through ``PricingTable.build`` so empty branches are pruned.
    """

    prices: Mapping[PriceCategory, Mapping[PriceTier, PricePoint]] = field(default_factory=dict)

    @classmethod
    def build(
        cls,
        points: Mapping[Tuple[PriceCategory, PriceTier], PricePoint],
    ) -> "PricingTable":
        prices: Dict[PriceCategory, Dict[PriceTier, PricePoint]] = {}
        for category in PriceCategory:
            tiers = {
                tier: points[(category, tier)]
                for tier in PriceTier
                if (category, tier) in points and not points[(category, tier)].is_empty
            }
            if tiers:
                prices[category] = tiers
        return cls(prices=prices)

    @property
    def is_empty(self) -> bool:
        return not self.prices

    def get(self, category: PriceCategory, tier: PriceTier = PriceTier.STANDARD) -> Optional[PricePoint]:
        return self.prices.get(category, {}).get(tier)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        result: Dict[str, Dict[str, Dict[str, float]]] = {}
        for category, tiers in self.prices.items():
            input_name, output_name = category.leaf_names
            serialized_tiers = {}
            for tier, point in tiers.items():
                leaves = {}
                if point.input is not None:
                    leaves[input_name] = point.input
                if output_name and point.output is not None:
                    leaves[output_name] = point.output
                if leaves:
                    serialized_tiers[tier.value] = leaves
            if serialized_tiers:
                result[category.value] = serialized_tiers
        return result


# ============================================================================
# CATALOG MODELS
# ============================================================================

@dataclass(frozen=True, slots=True)
class ModelSpec:
    """Token limits for one model."""

    context_window: Optional[int] = None
    max_output_tokens: Optional[int] = None


@dataclass(frozen=True, slots=True)
class Modalities:
    input: Tuple[Modality, ...] = (Modality.TEXT,)
    output: Tuple[Modality, ...] = (Modality.TEXT,)

    @classmethod
    def of(cls, inputs: Iterable[Modality], outputs: Iterable[Modality]) -> "Modalities":
        return cls(input=tuple(dict.fromkeys(inputs)), output=tuple(dict.fromkeys(outputs)))

    def to_dict(self) -> dict:
        return {
            "input": [m.value for m in self.input],
            "output": [m.value for m in self.output],
        }


@dataclass(frozen=True, slots=True)
class CatalogRecord:
    """
    Normalized description of one model, ready to be written to the catalog.

    Attributes:
        name: Display name
        family: Model family
        provider: Provider slug
        id: Identifier as used in the provider's API (unique per provider)
        context_window: Context window in tokens
        max_output_tokens: Maximum output tokens
        modalities: Input and output modalities
        capabilities: Capability flags
        pricing: Prices, or None when no price data was found
    """

    name: str
    family: str
    provider: str
    id: str
    context_window: Optional[int]
    max_output_tokens: Optional[int]
    modalities: Modalities = field(default_factory=Modalities)
    capabilities: Tuple[Capability, ...] = ()
    pricing: Optional[PricingTable] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "family": self.family,
            "provider": self.provider,
            "id": self.id,
            "context_window": self.context_window,
            "max_output_tokens": self.max_output_tokens,
            "modalities": self.modalities.to_dict(),
            "capabilities": [c.value for c in self.capabilities],
            "pricing": self.pricing.to_dict() if self.pricing else None,
        }

    def to_json_line(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)


@dataclass(frozen=True, slots=True)
class ProviderCapabilities:
    """Static declaration of what a provider pipeline is built to pull."""

    api_specs: bool = False
    model_info: bool = False
    pricing: bool = False

    def to_dict(self) -> dict:
        return {
            "api_specs": self.api_specs,
            "model_info": self.model_info,
            "pricing": self.pricing,
        }


@dataclass(frozen=True, slots=True)
class ProviderRunResult:
    """
    Outcome of one provider run.

    Attributes:
        provider: Provider slug
        records: Records written this run (empty when nothing was written)
        updated: Whether models.jsonl was rewritten
        spec_updated: Whether an API spec was written
        skipped: Whether the model data is maintained by hand and was not pulled
        error: Failure message when the run failed as a whole
    """

    provider: str
    records: Tuple[CatalogRecord, ...] = ()
    updated: bool = False
    spec_updated: bool = False
    skipped: bool = False
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.error is not None

    @property
    def stale(self) -> bool:
        """Whether this run left the provider without the data it is meant to pull."""
        return self.failed or not (self.updated or self.skipped)
