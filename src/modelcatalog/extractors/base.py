"""
Shared plumbing for document extractors.

Every extractor splits a document into fragments (table rows, link cards,
heading blocks) and turns each fragment into a ``RowResult``. A fragment
that fails to parse yields a failed result; it never stops the scan of
the rest of the page.
"""
from __future__ import annotations

import re
from abc import ABC, abstractmethod
from typing import Any, Iterable, Iterator, List, Optional

from bs4 import BeautifulSoup, Tag

from ..exceptions import ExtractionRowError, IdentifierValidationFailure
from ..logger import get_logger
from ..models import RawRecord, RowResult
from ..utils.text_cleaning import normalize_whitespace

logger = get_logger(__name__)

_PRICE_PATTERN = re.compile(r"\$?(\d+(?:\.\d+)?)")
_NO_PRICE = {"-", "–", "—", "n/a", "na", "tbd", "contact us"}


def safe_text(element: Optional[Tag]) -> str:
    """Whitespace-normalized text of an element ('' for None)."""
    if element is None:
        return ""
    return normalize_whitespace(element.get_text(" ", strip=True))


def parse_price(text: Optional[str], *, free_is_zero: bool = False) -> Optional[float]:
    """
    Parse a price cell such as "$3 / MTok", "$0.56", "15.00" or "Free".

    Returns:
        The first number in the text, or None when the cell has no price
    """
    if not text:
        return None

    lowered = text.strip().lower()
    if lowered in _NO_PRICE:
        return None
    if lowered == "free":
        return 0.0 if free_is_zero else None

    cleaned = re.sub(r"[\s,]", "", text)
    match = _PRICE_PATTERN.search(cleaned)
    if not match:
        return None
    return float(match.group(1))


class FragmentExtractor(ABC):
    """
    Base class for extraction strategies.

    Subclasses yield fragments from a document and parse one fragment at a
    time. ``extract`` collects the successful records, dropping invalid
    identifiers and malformed fragments and keeping the first record for
    each identifier.
    """

    name = "fragment"

    @abstractmethod
    def fragments(self, document: Any) -> Iterator[Any]:
        """Yield the fragments of ``document`` this strategy understands."""

    @abstractmethod
    def parse(self, fragment: Any) -> RowResult:
        """Parse a single fragment."""

    def extract(self, document: Any) -> List[RawRecord]:
        return collect((self.parse_guarded(f) for f in self.fragments(document)), source=self.name)

    def parse_guarded(self, fragment: Any) -> RowResult:
        """Parse ``fragment``, turning markup surprises into a failed result."""
        try:
            return self.parse(fragment)
        except (AttributeError, IndexError, KeyError, TypeError, ValueError) as e:
            return RowResult.failure(
                ExtractionRowError(f"{type(e).__name__}: {e}", fragment=_describe(fragment))
            )


class CompositeExtractor:
    """Run several strategies over one document; earlier strategies win duplicates."""

    def __init__(self, *extractors: FragmentExtractor, name: str = "composite") -> None:
        self.extractors = extractors
        self.name = name

    def extract(self, document: BeautifulSoup) -> List[RawRecord]:
        return dedupe_first(
            record for extractor in self.extractors for record in extractor.extract(document)
        )


def collect(results: Iterable[RowResult], *, source: str) -> List[RawRecord]:
    """Keep successful records, log the rest, and drop later duplicates."""
    kept: List[RawRecord] = []
    dropped = malformed = 0

    for result in results:
        if result.error is not None:
            if isinstance(result.error, IdentifierValidationFailure):
                dropped += 1
                logger.debug("EXTRACT %s dropped candidate: %s", source, result.error)
            else:
                malformed += 1
                logger.warning("EXTRACT %s skipped malformed fragment: %s", source, result.error)
            continue
        if result.record is not None:
            kept.append(result.record)

    records = dedupe_first(kept)
    logger.info("EXTRACT %s: %d records (%d duplicates, %d invalid identifiers, %d malformed)",
                source, len(records), len(kept) - len(records), dropped, malformed)
    return records


def dedupe_first(records: Iterable[RawRecord]) -> List[RawRecord]:
    """Keep the first record seen for each identifier."""
    seen = set()
    unique: List[RawRecord] = []
    for record in records:
        if record.api_name in seen:
            logger.debug("EXTRACT Discarding duplicate record for %s", record.api_name)
            continue
        seen.add(record.api_name)
        unique.append(record)
    return unique


def _describe(fragment: Any) -> str:
    if isinstance(fragment, tuple):
        fragment = fragment[0]
    if isinstance(fragment, Tag):
        return safe_text(fragment)[:80]
    return repr(fragment)[:80]
