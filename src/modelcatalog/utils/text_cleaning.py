"""
Text cleaning and normalization utilities.
"""
import re
from typing import Optional

_TOKEN_COUNT = re.compile(r"(\d+(?:\.\d+)?)\s*([kKmM])?\b")


def normalize_whitespace(text: str) -> str:
    """
    Normalize whitespace in text.

    Args:
        text: Text to normalize

    Returns:
        Text with normalized whitespace

    Examples:
        >>> normalize_whitespace("hello    world\\n\\ntest")
        'hello world test'
    """
    if not text:
        return ""

    return re.sub(r'\s+', ' ', text).strip()


def slugify(text: str) -> str:
    """
    Turn a display name into a lowercase hyphenated slug.

    Examples:
        >>> slugify("Model A")
        'model-a'
        >>> slugify("Qwen3 Coder 480B")
        'qwen3-coder-480b'
    """
    if not text:
        return ""

    slug = re.sub(r'\s+', '-', text.strip().lower())
    slug = re.sub(r'[^\w-]', '', slug)
    return re.sub(r'-{2,}', '-', slug).strip('-')


def parse_token_count(text: str) -> Optional[int]:
    """
    Parse a token count written as "128k", "1M" or "200000".

    Returns:
        Number of tokens, or None if the text holds no count

    Examples:
        >>> parse_token_count("160k")
        160000
        >>> parse_token_count("1.5M")
        1500000
    """
    if not text:
        return None

    match = _TOKEN_COUNT.search(text.replace(",", ""))
    if not match:
        return None

    number = float(match.group(1))
    unit = (match.group(2) or "").lower()
    if unit == "k":
        number *= 1_000
    elif unit == "m":
        number *= 1_000_000
    return int(number)
