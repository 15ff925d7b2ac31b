"""
Model Catalog - AI model metadata collection.

Fetches provider documentation pages through a TTL cache, extracts model
and pricing records, and writes a normalized per-provider catalog.
"""

__version__ = "1.0.0"

from .models import CatalogRecord, PricingTable, RawRecord
from .http import CacheStore, ResilientFetcher
from .catalog.assembler import CatalogAssembler, CatalogSummary

__all__ = [
    "CacheStore",
    "CatalogAssembler",
    "CatalogRecord",
    "CatalogSummary",
    "PricingTable",
    "RawRecord",
    "ResilientFetcher",
]
