"""
Record reconciliation services.
"""
from .normalizer import (
    PRICE_FIELDS,
    PriceField,
    PricingConvention,
    RecordNormalizer,
    SpecTable,
    default_family,
    index_by_identifier,
)

__all__ = [
    "PRICE_FIELDS",
    "PriceField",
    "PricingConvention",
    "RecordNormalizer",
    "SpecTable",
    "default_family",
    "index_by_identifier",
]
