"""
Document fetching with per-attempt timeouts and bounded retry.

Attempt loop:

    Start -> Attempt -> Success
                     -> Timeout (retryable) -> sleep(base_delay * n) -> Attempt
                     -> TransportError / bad status (terminal)

After max_retries timeouts the chain ends with a timeout outcome. A
successful response must carry a non-empty body that parses into an
element tree (or a JSON value for JSON fetches), otherwise the fetch ends
as EMPTY_BODY or PARSE_FAILURE.
Cache hits never enter the loop.
"""
from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

import requests
from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup
from urllib3.exceptions import ReadTimeoutError

from ..config import Config
from ..exceptions import (
    EmptyOrUnparsableDocument,
    FetchError,
    FetchTimeoutError,
    TransportError,
)
from ..logger import get_logger
from ..models import CachedResponse, FetchOutcome, FetchResult
from .cache import CacheStore

logger = get_logger(__name__)

Transport = Callable[[str, float], CachedResponse]


@dataclass(frozen=True, slots=True)
class FetchSettings:
    """
    Retry and timeout settings for a fetcher.

    Attributes:
        timeout_s: Timeout for a single attempt
        max_retries: Retries allowed after the first timed-out attempt
        retry_delay_s: Base backoff delay, multiplied by the attempt number
    """

    timeout_s: float = 30.0
    max_retries: int = 3
    retry_delay_s: float = 2.0

    @classmethod
    def from_config(cls) -> "FetchSettings":
        return cls(
            timeout_s=Config.REQUEST_TIMEOUT_S,
            max_retries=Config.MAX_RETRIES,
            retry_delay_s=Config.RETRY_DELAY_S,
        )


class RequestsTransport:
    """Plain GET over a shared ``requests.Session``; no auth headers."""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        user_agent: Optional[str] = None,
    ) -> None:
        self.session = session or requests.Session()
        self.session.headers.setdefault("User-Agent", user_agent or Config.USER_AGENT)

    def __call__(self, url: str, timeout: float) -> CachedResponse:
        try:
            r = self.session.get(url, timeout=(timeout / 2, timeout))
        except requests.ConnectionError as e:
            # requests wraps a read timeout hit while streaming the body in ConnectionError
            if e.args and isinstance(e.args[0], ReadTimeoutError):
                raise requests.ReadTimeout(*e.args, request=e.request, response=e.response) from e
            raise
        logger.debug("FETCH Response: status=%d, content-type=%s, length=%d",
                     r.status_code, r.headers.get("Content-Type", "unknown"), len(r.content))
        return CachedResponse(
            body=r.content,
            status=r.status_code,
            headers=dict(r.headers),
        )


@dataclass(slots=True)
class AttemptChain:
    """Tagged result of running the attempt loop for one URL."""

    attempts: int
    response: Optional[CachedResponse] = None
    error: Optional[FetchError] = None
    delays: List[float] = field(default_factory=list)


class ResilientFetcher:
    """
    Fetch documents through a CacheStore with timeout, retry and backoff.

    Never raises for fetch failures: every call returns a ``FetchResult``
    whose outcome tells the caller what happened.
    """

    def __init__(
        self,
        cache: Optional[CacheStore] = None,
        *,
        transport: Optional[Transport] = None,
        settings: Optional[FetchSettings] = None,
        sleep: Callable[[float], None] = time.sleep,
        parser: str = "html.parser",
    ) -> None:
        self.cache = cache if cache is not None else CacheStore(Config.CACHE_DIR)
        self.transport = transport or RequestsTransport()
        self.settings = settings or FetchSettings.from_config()
        self.sleep = sleep
        self.parser = parser

    def backoff_delay(self, attempt: int) -> float:
        """Delay before the retry that follows timed-out attempt ``attempt``."""
        return self.settings.retry_delay_s * attempt

    def fetch_document(self, url: str, description: str = "document") -> FetchResult:
        """Fetch ``url`` and parse it into an HTML document tree."""
        return self._fetch(url, description, parse="html")

    def fetch_text(self, url: str, description: str = "document") -> FetchResult:
        """Fetch ``url`` and return its body as text without parsing."""
        return self._fetch(url, description, parse=None)

    def fetch_json(self, url: str, description: str = "document") -> FetchResult:
        """Fetch ``url`` and decode its body as JSON into ``document``."""
        return self._fetch(url, description, parse="json")

    def run_attempts(self, url: str, description: str = "document") -> AttemptChain:
        """Run the attempt loop against the network, bypassing the cache."""
        chain = AttemptChain(attempts=0)

        while True:
            chain.attempts += 1
            try:
                logger.debug("FETCH Fetching %s from %s (attempt %d)", description, url, chain.attempts)
                chain.response = self.transport(url, self.settings.timeout_s)
                return chain
            except requests.Timeout as e:
                if chain.attempts > self.settings.max_retries:
                    logger.error("FETCH Max retries reached for %s", description)
                    chain.error = FetchTimeoutError(
                        f"timed out after {chain.attempts} attempts: {e}",
                        url=url,
                        attempts=chain.attempts,
                    )
                    return chain

                delay = self.backoff_delay(chain.attempts)
                logger.warning("FETCH Timeout fetching %s, retry %d/%d in %.1fs",
                               description, chain.attempts, self.settings.max_retries, delay)
                chain.delays.append(delay)
                self.sleep(delay)
            except requests.RequestException as e:
                chain.error = TransportError(f"{type(e).__name__}: {e}", url=url)
                return chain

    def _fetch(self, url: str, description: str, *, parse: Optional[str]) -> FetchResult:
        attempts = 0

        def fetch_live(target: str) -> CachedResponse:
            nonlocal attempts
            chain = self.run_attempts(target, description)
            attempts = chain.attempts
            if chain.error is not None:
                raise chain.error
            return chain.response

        try:
            response = self.cache.get_or_fetch(url, fetch_live)
        except FetchTimeoutError as e:
            return self._failed(url, description, FetchOutcome.TIMEOUT, e, attempts)
        except TransportError as e:
            return self._failed(url, description, FetchOutcome.TRANSPORT_FAILURE, e, attempts)

        if not response.ok:
            error = TransportError(f"HTTP {response.status} for {description}",
                                   url=url, status=response.status)
            return self._failed(url, description, FetchOutcome.TRANSPORT_FAILURE, error, attempts)

        body = response.text
        if not body.strip():
            error = EmptyOrUnparsableDocument(f"Empty response body for {description}",
                                              url=url, empty=True)
            return self._failed(url, description, FetchOutcome.EMPTY_BODY, error, attempts)

        document = None
        if parse == "html":
            try:
                document = BeautifulSoup(body, self.parser)
            except ParserRejectedMarkup as e:
                error = EmptyOrUnparsableDocument(f"Failed to parse HTML for {description}: {e}", url=url)
                return self._failed(url, description, FetchOutcome.PARSE_FAILURE, error, attempts)

            if document.find(True) is None:
                error = EmptyOrUnparsableDocument(f"No elements in HTML for {description}", url=url)
                return self._failed(url, description, FetchOutcome.PARSE_FAILURE, error, attempts)
        elif parse == "json":
            try:
                document = json.loads(body)
            except ValueError as e:
                error = EmptyOrUnparsableDocument(f"Failed to parse JSON for {description}: {e}", url=url)
                return self._failed(url, description, FetchOutcome.PARSE_FAILURE, error, attempts)

        return FetchResult(
            url=url,
            outcome=FetchOutcome.SUCCESS,
            document=document,
            body=body,
            from_cache=response.from_cache,
            attempts=attempts,
        )

    def _failed(
        self,
        url: str,
        description: str,
        outcome: FetchOutcome,
        error: FetchError,
        attempts: int,
    ) -> FetchResult:
        logger.error("FETCH Failed to fetch %s (%s): %s", description, outcome.value, error)
        return FetchResult(url=url, outcome=outcome, error=error, attempts=attempts)
