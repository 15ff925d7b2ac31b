"""
Tabular extraction: one record per table row.

The first row of each table is its header. Price columns are identified
by keyword match on the header text; a column whose header matches no
keyword falls back to its position (e.g. first data column = input,
last = output). A positional guess never overrides a field that a
header keyword already assigned in the same row.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

from bs4 import BeautifulSoup, Tag

from ..exceptions import IdentifierValidationFailure
from ..models import RawRecord, RecordKind, RowResult
from .base import FragmentExtractor, parse_price, safe_text
from .identifiers import IdentifierGrammar

_HEADER_WORDS = ("model", "name", "api", "id")
_HEADER_CELLS = {"model", "models", "name", "model name", "model id", "api name", "api", "id", "feature"}


def looks_like_header(text: str) -> bool:
    """A first cell that repeats a header word ("Model", "API name")."""
    lowered = text.lower()
    return any(word in lowered for word in _HEADER_WORDS) or lowered == "feature"


def is_header_cell(text: str) -> bool:
    """A first cell that is exactly a header label; "Model A" is data."""
    return text.strip().lower() in _HEADER_CELLS


@dataclass(frozen=True)
class ColumnRule:
    """Map header text matching ``pattern`` to ``field``."""

    field: str
    pattern: re.Pattern

    @classmethod
    def of(cls, field: str, pattern: str) -> "ColumnRule":
        return cls(field=field, pattern=re.compile(pattern, re.IGNORECASE))


TableRow = Tuple[Tag, Tuple[str, ...]]


class TableExtractor(FragmentExtractor):
    """
    Extract records from HTML tables.

    Args:
        grammar: Provider naming grammar
        kind: Kind of record this table describes
        name: Label used in logs
        required_headers: Skip tables whose header row matches none of these patterns
        name_column: Column holding the display name
        id_column: Column holding the identifier; when None the identifier
            is synthesized from the display name
        text_columns: Extra text columns to keep, by index
        exact_headers: Header text (lowercased) mapped straight to a price field
        price_rules: Keyword rules for price columns, checked in order
        positional_prices: Fallback price fields by column index; negative
            indexes count from the end of the row
        header_row: Predicate for first cells that repeat the header
        free_is_zero: Read "Free" as a price of 0
    """

    def __init__(
        self,
        *,
        grammar: IdentifierGrammar,
        kind: RecordKind,
        name: str = "table",
        required_headers: Sequence[str] = (),
        name_column: int = 0,
        id_column: Optional[int] = None,
        text_columns: Optional[Mapping[int, str]] = None,
        exact_headers: Optional[Mapping[str, str]] = None,
        price_rules: Sequence[ColumnRule] = (),
        positional_prices: Optional[Mapping[int, str]] = None,
        header_row: Callable[[str], bool] = is_header_cell,
        free_is_zero: bool = False,
    ) -> None:
        self.grammar = grammar
        self.kind = kind
        self.name = name
        self.required_headers = [re.compile(p, re.IGNORECASE) for p in required_headers]
        self.name_column = name_column
        self.id_column = id_column
        self.text_columns = dict(text_columns or {})
        self.exact_headers = dict(exact_headers or {})
        self.price_rules = list(price_rules)
        self.positional_prices = dict(positional_prices or {})
        self.header_row = header_row
        self.free_is_zero = free_is_zero

    @property
    def reads_prices(self) -> bool:
        return bool(self.price_rules or self.exact_headers or self.positional_prices)

    def fragments(self, document: BeautifulSoup) -> Iterator[TableRow]:
        for table in document.find_all("table"):
            rows = table.find_all("tr")
            if not rows:
                continue

            headers = tuple(safe_text(cell).lower() for cell in rows[0].find_all(["th", "td"]))
            if not headers or not self._accepts(headers):
                continue

            for row in rows[1:]:
                yield row, headers

    def _accepts(self, headers: Sequence[str]) -> bool:
        if not self.required_headers:
            return True
        return any(p.search(h) for p in self.required_headers for h in headers)

    def parse(self, fragment: TableRow) -> RowResult:
        row, headers = fragment
        cells = row.find_all("td")
        if not cells or len(cells) <= self.name_column:
            return RowResult.skipped()

        display_name = safe_text(cells[self.name_column])
        if not display_name or self.header_row(display_name):
            return RowResult.skipped()

        if self.id_column is not None:
            candidate = safe_text(cells[self.id_column]) if len(cells) > self.id_column else ""
            if not candidate:
                return RowResult.skipped()
            api_name = candidate if self.grammar.is_valid(candidate) else None
        else:
            candidate = display_name
            api_name = self.grammar.normalize(display_name)

        if api_name is None:
            return RowResult.failure(IdentifierValidationFailure(candidate, self.grammar.provider))

        fields: Dict[str, object] = {"name": display_name}
        for index, field in self.text_columns.items():
            if index < len(cells):
                value = safe_text(cells[index])
                if value:
                    fields[field] = value

        if self.reads_prices:
            prices = self.map_prices(cells, headers)
            if self.kind is RecordKind.PRICING and not prices:
                return RowResult.skipped()
            fields.update(prices)

        return RowResult.success(RawRecord(kind=self.kind, api_name=api_name, fields=fields))

    def map_prices(self, cells: List[Tag], headers: Sequence[str]) -> Dict[str, float]:
        """Price fields of one row, by header keyword then by position."""
        prices: Dict[str, float] = {}
        unlabeled: List[Tuple[int, float]] = []

        for index, cell in enumerate(cells):
            if index in (self.name_column, self.id_column) or index in self.text_columns:
                continue

            price = parse_price(safe_text(cell), free_is_zero=self.free_is_zero)
            if price is None:
                continue

            header = headers[index] if index < len(headers) else ""
            field = self.field_for_header(header)
            if field:
                prices.setdefault(field, price)
            else:
                unlabeled.append((index, price))

        for index, price in unlabeled:
            field = self.field_for_position(index, len(cells))
            if field and field not in prices:
                prices[field] = price

        return prices

    def field_for_header(self, header: str) -> Optional[str]:
        if not header:
            return None
        if header in self.exact_headers:
            return self.exact_headers[header]
        for rule in self.price_rules:
            if rule.pattern.search(header):
                return rule.field
        return None

    def field_for_position(self, index: int, total_cells: int) -> Optional[str]:
        for position, field in self.positional_prices.items():
            resolved = position if position >= 0 else total_cells + position
            if resolved == index:
                return field
        return None
