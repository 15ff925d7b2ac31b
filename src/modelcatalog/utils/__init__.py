"""
Utility modules for the model catalog.
"""
from .text_cleaning import normalize_whitespace, parse_token_count, slugify

__all__ = [
    "normalize_whitespace",
    "parse_token_count",
    "slugify",
]
