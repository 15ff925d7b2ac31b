"""
HTTP access: on-disk response cache and the retrying document fetcher.
"""
from .cache import CacheStore, cache_key
from .fetcher import FetchSettings, RequestsTransport, ResilientFetcher

__all__ = [
    "CacheStore",
    "cache_key",
    "FetchSettings",
    "RequestsTransport",
    "ResilientFetcher",
]
