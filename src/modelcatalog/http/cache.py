"""
TTL-bound on-disk cache for HTTP responses.

One JSON file per URL, named by the SHA-256 of the URL. Only successful
(2xx) responses with a non-empty body are written; failures always go back
to the network.
"""
from __future__ import annotations

import base64
import binascii
import hashlib
import json
import os
import tempfile
import time
from pathlib import Path
from typing import Callable, Optional, Union

from ..config import Config
from ..exceptions import CacheIOError
from ..logger import get_logger
from ..models import CacheEntry, CachedResponse

logger = get_logger(__name__)

FetchFn = Callable[[str], CachedResponse]

CACHE_FORMAT_VERSION = 1


def cache_key(url: str) -> str:
    """Fixed-width key for a URL."""
    return hashlib.sha256(url.encode("utf-8")).hexdigest()


class CacheStore:
    """
    Content-addressed response cache.

    A missing or unwritable cache directory turns the store into a
    pass-through: every lookup invokes the fetch function. That is logged
    once when the store is created.
    """

    def __init__(
        self,
        cache_dir: Optional[Union[str, Path]] = None,
        *,
        ttl_s: Optional[float] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """
        Args:
            cache_dir: Directory holding cache entries (None disables caching)
            ttl_s: Freshness window in seconds (defaults to Config.CACHE_TTL_S)
            clock: Source of the current Unix time
        """
        self.cache_dir = Path(cache_dir) if cache_dir else None
        self.ttl_s = Config.CACHE_TTL_S if ttl_s is None else ttl_s
        self.clock = clock
        self.enabled = self._setup_cache_dir()
        if not self.enabled:
            logger.warning("CACHE Cache disabled, all requests go to the network")

    def _setup_cache_dir(self) -> bool:
        if self.cache_dir is None:
            return False

        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error("CACHE Failed to set up cache directory %s: %s", self.cache_dir, e)
            return False

        if not os.access(self.cache_dir, os.W_OK | os.X_OK):
            logger.warning("CACHE Cache directory not writable: %s", self.cache_dir)
            return False

        logger.info("CACHE Cache enabled at %s", self.cache_dir)
        return True

    def path_for(self, url: str) -> Optional[Path]:
        if self.cache_dir is None:
            return None
        return self.cache_dir / cache_key(url)

    def get_or_fetch(self, url: str, fetch_fn: FetchFn) -> CachedResponse:
        """
        Return a fresh cached response for ``url`` or fetch and store a new one.

        Exceptions raised by ``fetch_fn`` propagate unchanged and leave the
        cache untouched.

        Returns:
            CachedResponse with ``from_cache`` set on a hit
        """
        if not self.enabled:
            return fetch_fn(url)

        entry = self.load(url)
        if entry is None:
            logger.info("CACHE Cache miss for %s", url)
        elif entry.is_fresh(self.clock(), self.ttl_s):
            logger.info("CACHE Cache hit for %s", url)
            return CachedResponse(
                body=entry.body,
                status=entry.status,
                headers=dict(entry.headers),
                from_cache=True,
            )
        else:
            logger.info("CACHE Cache stale for %s", url)

        response = fetch_fn(url)

        if response.ok and not response.body.strip():
            logger.info("CACHE Not caching empty response for %s", url)
        elif response.ok:
            try:
                self.store(url, response)
                logger.info("CACHE Cached response for %s", url)
            except CacheIOError as e:
                logger.warning("CACHE Failed to write cache entry for %s: %s", url, e)

        return response

    def load(self, url: str) -> Optional[CacheEntry]:
        """Read the entry for ``url``; unreadable or corrupt entries count as missing."""
        path = self.path_for(url)
        if path is None or not path.exists():
            return None

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            response = data["response"]
            return CacheEntry(
                key=path.name,
                stored_at=float(data["timestamp"]),
                status=int(response["status"]),
                headers={str(k): str(v) for k, v in (response.get("headers") or {}).items()},
                body=base64.b64decode(response["body"], validate=True),
            )
        except (OSError, ValueError, KeyError, TypeError, AttributeError, binascii.Error) as e:
            logger.debug("CACHE Ignoring corrupt cache entry %s: %s", path, e)
            return None

    def store(self, url: str, response: CachedResponse) -> CacheEntry:
        """
        Persist ``response`` for ``url``, replacing any previous entry.

        The file is written to a temporary name in the cache directory and
        moved into place, so readers never see a partial entry.

        Raises:
            CacheIOError: If the entry cannot be written
        """
        path = self.path_for(url)
        if path is None:
            raise CacheIOError("cache is disabled")

        entry = CacheEntry(
            key=path.name,
            stored_at=self.clock(),
            status=response.status,
            headers=dict(response.headers),
            body=response.body,
        )
        payload = {
            "version": CACHE_FORMAT_VERSION,
            "url": url,
            "timestamp": entry.stored_at,
            "response": {
                "status": entry.status,
                "headers": entry.headers,
                "body_encoding": "base64",
                "body": base64.b64encode(entry.body).decode("ascii"),
            },
        }

        tmp_name = None
        try:
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.cache_dir,
                prefix=f".{path.name}.",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                tmp_name = tmp.name
                json.dump(payload, tmp)
            os.replace(tmp_name, path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise CacheIOError(f"could not write {path}: {e}") from e

        return entry
