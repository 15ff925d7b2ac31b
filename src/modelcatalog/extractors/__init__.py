"""
Document extraction strategies.

- TableExtractor: one record per table row, header-driven column mapping
- CardExtractor: one record per link card, identifier from the href
- HeadingExtractor: identifier from code near a model heading
- JsonListingExtractor: one record per entry of a JSON model listing
"""
from .base import CompositeExtractor, FragmentExtractor, dedupe_first, parse_price, safe_text
from .cards import CardExtractor, PricePattern
from .headings import HeadingExtractor
from .identifiers import (
    IdentifierGrammar,
    phrase_synthesizer,
    slug_synthesizer,
    versioned_family_synthesizer,
)
from .listings import JsonListingExtractor
from .tables import ColumnRule, TableExtractor, is_header_cell, looks_like_header

__all__ = [
    "CardExtractor",
    "ColumnRule",
    "CompositeExtractor",
    "FragmentExtractor",
    "HeadingExtractor",
    "IdentifierGrammar",
    "JsonListingExtractor",
    "PricePattern",
    "TableExtractor",
    "dedupe_first",
    "is_header_cell",
    "looks_like_header",
    "parse_price",
    "phrase_synthesizer",
    "safe_text",
    "slug_synthesizer",
    "versioned_family_synthesizer",
]
