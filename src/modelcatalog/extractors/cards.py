"""
Linked-card extraction: one record per anchor that points at a model page.

The identifier comes from the link target, never from the visible text.
The card's text is then searched for labeled prices ("$0.56/M Input",
"$0.0005/step"), a context window ("128k Context") and capability
keywords.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, Iterator, Mapping, Optional, Sequence, Tuple

from bs4 import BeautifulSoup, Tag

from ..exceptions import ExtractionRowError, IdentifierValidationFailure
from ..models import Capability, RawRecord, RecordKind, RowResult
from ..utils.text_cleaning import parse_token_count
from .base import FragmentExtractor, safe_text
from .identifiers import IdentifierGrammar

_CONTEXT_PATTERN = re.compile(r"(\d+(?:\.\d+)?\s*[kKmM])\s+Context", re.IGNORECASE)
_PRICE_TEXT = re.compile(r"^\$[\d.]+")
_METADATA_TEXT = re.compile(r"Context|Input|Output|Serverless|Tunable", re.IGNORECASE)

DEFAULT_NAME_SELECTORS = (
    "h3", "h4", ".font-bold", ".font-semibold",
    "strong", '[class*="font-bold"]', '[class*="font-semibold"]',
)


@dataclass(frozen=True)
class PricePattern:
    """A labeled price in card text; the first group is the amount."""

    fields: Tuple[str, ...]
    pattern: re.Pattern

    @classmethod
    def of(cls, pattern: str, *fields: str) -> "PricePattern":
        return cls(fields=fields, pattern=re.compile(pattern, re.IGNORECASE))


class CardExtractor(FragmentExtractor):
    """
    Extract records from link cards.

    Args:
        grammar: Provider naming grammar
        selector: CSS selector for candidate anchors
        href_pattern: Regex over the href; group 1 is the identifier
        kind: Kind of record the cards describe
        name: Label used in logs
        name_selectors: Selectors tried in order for the display name
        price_patterns: Labeled price patterns, first match per field wins
        capability_keywords: Keywords that flag each capability
        require_name: Drop cards without a display name
    """

    def __init__(
        self,
        *,
        grammar: IdentifierGrammar,
        selector: str,
        href_pattern: str,
        kind: RecordKind = RecordKind.MODEL,
        name: str = "cards",
        name_selectors: Sequence[str] = DEFAULT_NAME_SELECTORS,
        price_patterns: Sequence[PricePattern] = (),
        capability_keywords: Optional[Mapping[Capability, Sequence[str]]] = None,
        require_name: bool = True,
    ) -> None:
        self.grammar = grammar
        self.selector = selector
        self.href_pattern = re.compile(href_pattern)
        self.kind = kind
        self.name = name
        self.name_selectors = tuple(name_selectors)
        self.price_patterns = list(price_patterns)
        self.capability_patterns = [
            (capability, re.compile(r"\b(?:%s)" % "|".join(re.escape(k) for k in keywords), re.IGNORECASE))
            for capability, keywords in (capability_keywords or {}).items()
            if keywords
        ]
        self.require_name = require_name

    def fragments(self, document: BeautifulSoup) -> Iterator[Tag]:
        yield from document.select(self.selector)

    def parse(self, fragment: Tag) -> RowResult:
        href = fragment.get("href")
        if not href:
            return RowResult.skipped()

        match = self.href_pattern.search(href)
        if not match:
            return RowResult.skipped()

        candidate = match.group(1).strip("/")
        if not self.grammar.is_valid(candidate):
            return RowResult.failure(IdentifierValidationFailure(candidate, self.grammar.provider))

        display_name = self.card_name(fragment)
        if self.require_name and not display_name:
            return RowResult.failure(ExtractionRowError(f"card for {candidate} has no display name", fragment=href))

        text = safe_text(fragment)
        fields: Dict[str, object] = {}
        if display_name:
            fields["name"] = display_name
        fields.update(self.card_prices(text))

        context_window = self.card_context_window(text)
        if context_window:
            fields["context_window"] = context_window

        return RowResult.success(RawRecord(
            kind=self.kind,
            api_name=candidate,
            fields=fields,
            capabilities=self.card_capabilities(text),
            context=text,
        ))

    def card_name(self, card: Tag) -> Optional[str]:
        for selector in self.name_selectors:
            element = card.select_one(selector)
            if element is None:
                continue

            text = safe_text(element)
            if not text or _PRICE_TEXT.match(text) or _METADATA_TEXT.search(text):
                continue
            if len(text) > 3:
                return text
        return None

    def card_prices(self, text: str) -> Dict[str, float]:
        prices: Dict[str, float] = {}
        for price_pattern in self.price_patterns:
            match = price_pattern.pattern.search(text)
            if not match:
                continue
            amount = float(match.group(1))
            for field in price_pattern.fields:
                prices.setdefault(field, amount)
        return prices

    def card_context_window(self, text: str) -> Optional[int]:
        match = _CONTEXT_PATTERN.search(text)
        return parse_token_count(match.group(1)) if match else None

    def card_capabilities(self, text: str) -> Tuple[Capability, ...]:
        return tuple(capability for capability, pattern in self.capability_patterns if pattern.search(text))
