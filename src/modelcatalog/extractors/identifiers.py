"""
Provider naming grammars and free-text name normalization.

An identifier is only accepted when it matches the provider's grammar in
full and contains no whitespace. Free-text names ("Claude Haiku 3.5",
"Sonar Pro", "Model A") are turned into identifiers by a provider
specific synthesizer; a name the synthesizer cannot handle yields None.
"""
from __future__ import annotations

import re
from typing import Callable, Mapping, Optional, Sequence, Tuple, Union

from ..exceptions import IdentifierValidationFailure
from ..utils.text_cleaning import slugify

Synthesizer = Callable[[str], Optional[str]]

_WHITESPACE = re.compile(r"\s")


class IdentifierGrammar:
    """
    Fixed naming grammar of one provider.

    Args:
        provider: Provider slug, used in diagnostics
        pattern: Regex the whole identifier must match
        synthesizer: Turns a free-text model name into a candidate identifier
    """

    def __init__(
        self,
        provider: str,
        pattern: Union[str, re.Pattern],
        synthesizer: Optional[Synthesizer] = None,
    ) -> None:
        self.provider = provider
        self.pattern = re.compile(pattern) if isinstance(pattern, str) else pattern
        self.synthesizer = synthesizer

    def is_valid(self, candidate: Optional[str]) -> bool:
        if not candidate or not isinstance(candidate, str):
            return False
        if _WHITESPACE.search(candidate):
            return False
        return self.pattern.fullmatch(candidate) is not None

    def validate(self, candidate: Optional[str]) -> str:
        """
        Return ``candidate`` unchanged if valid.

        Raises:
            IdentifierValidationFailure: If it does not match the grammar
        """
        if not self.is_valid(candidate):
            raise IdentifierValidationFailure(candidate, self.provider)
        return candidate

    def normalize(self, text: Optional[str]) -> Optional[str]:
        """Identifier for a free-text model name, or None if none can be made."""
        if not text:
            return None

        stripped = text.strip()
        if self.is_valid(stripped):
            return stripped

        if self.synthesizer is None:
            return None

        candidate = self.synthesizer(stripped)
        return candidate if self.is_valid(candidate) else None


def versioned_family_synthesizer(
    prefix: str,
    families: Sequence[str],
    *,
    flat_from: float = 4.0,
) -> Synthesizer:
    """
    Build identifiers from a family keyword plus a version number.

    Versions at or above ``flat_from`` put the family first
    ("Claude Opus 4.1" -> "claude-opus-4-1"); older versions put the
    version first ("Claude Haiku 3.5" -> "claude-3-5-haiku",
    "Claude 3 Opus" -> "claude-3-opus").
    """
    family_group = "|".join(re.escape(f) for f in families)
    family_first = re.compile(rf"\b({family_group})\b\D*?(\d+(?:\.\d+)?)")
    version_first = re.compile(rf"(\d+(?:\.\d+)?)\s*({family_group})\b")

    def synthesize(text: str) -> Optional[str]:
        lowered = text.lower()
        match = family_first.search(lowered)
        if match:
            family, version = match.group(1), match.group(2)
        else:
            match = version_first.search(lowered)
            if not match:
                return None
            version, family = match.group(1), match.group(2)

        major, _, minor = version.partition(".")
        if minor == "0":
            minor = ""
        if int(major) == 0 and not minor:
            return None

        segments = [major, minor] if minor else [major]
        if float(version) >= flat_from:
            return "-".join([prefix, family, *segments])
        return "-".join([prefix, *segments, family])

    return synthesize


def phrase_synthesizer(phrases: Sequence[Tuple[str, str]]) -> Synthesizer:
    """
    Map names to identifiers by the first matching phrase.

    Order matters: list longer phrases ("sonar reasoning pro") before the
    phrases they contain ("sonar").
    """
    compiled = [(re.compile(rf"\b{re.escape(p)}\b", re.IGNORECASE), ident) for p, ident in phrases]

    def synthesize(text: str) -> Optional[str]:
        for pattern, ident in compiled:
            if pattern.search(text):
                return ident
        return None

    return synthesize


def slug_synthesizer(aliases: Optional[Mapping[str, str]] = None) -> Synthesizer:
    """Use a fixed alias table, otherwise slugify the display name."""
    aliases = dict(aliases or {})

    def synthesize(text: str) -> Optional[str]:
        return aliases.get(text.strip()) or slugify(text) or None

    return synthesize
