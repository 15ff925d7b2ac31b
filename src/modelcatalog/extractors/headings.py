"""
Heading-proximity extraction.

Some documentation pages name a model in a heading ("Claude Sonnet 4")
and give its identifier in an inline code element a few siblings later.
The walk is bounded and stops at the next heading.
"""
from __future__ import annotations

import re
from typing import Iterator, Optional, Sequence

from bs4 import BeautifulSoup, Tag

from ..exceptions import IdentifierValidationFailure
from ..models import RawRecord, RecordKind, RowResult
from .base import FragmentExtractor, safe_text
from .identifiers import IdentifierGrammar

_HEADING = re.compile(r"^h[1-6]$", re.IGNORECASE)
_VERSION = re.compile(r"\d+")


class HeadingExtractor(FragmentExtractor):
    """
    Args:
        grammar: Provider naming grammar
        keyword: Pattern a heading must contain, alongside a version number
        heading_tags: Heading elements to scan
        max_hops: Maximum number of siblings to visit after a heading
        name: Label used in logs
    """

    def __init__(
        self,
        *,
        grammar: IdentifierGrammar,
        keyword: str,
        heading_tags: Sequence[str] = ("h2", "h3"),
        max_hops: int = 10,
        name: str = "headings",
    ) -> None:
        self.grammar = grammar
        self.keyword = re.compile(keyword, re.IGNORECASE)
        self.heading_tags = list(heading_tags)
        self.max_hops = max_hops
        self.name = name

    def fragments(self, document: BeautifulSoup) -> Iterator[Tag]:
        yield from document.find_all(self.heading_tags)

    def parse(self, fragment: Tag) -> RowResult:
        text = safe_text(fragment)
        if not self.keyword.search(text) or not _VERSION.search(text):
            return RowResult.skipped()

        api_name = self.find_identifier(fragment)
        if api_name is None:
            return RowResult.failure(IdentifierValidationFailure(None, self.grammar.provider))

        return RowResult.success(RawRecord(
            kind=RecordKind.MODEL,
            api_name=api_name,
            fields={"name": text},
        ))

    def find_identifier(self, heading: Tag) -> Optional[str]:
        """First valid identifier in a code element after ``heading``."""
        sibling = heading.find_next_sibling()
        hops = 0

        while sibling is not None and hops < self.max_hops:
            if _HEADING.match(sibling.name or ""):
                break

            codes = [sibling] if sibling.name == "code" else sibling.find_all("code")
            for code in codes:
                candidate = safe_text(code)
                if self.grammar.is_valid(candidate):
                    return candidate

            sibling = sibling.find_next_sibling()
            hops += 1

        return None
