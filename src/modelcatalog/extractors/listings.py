"""
JSON listing strategy: one record per entry of a model listing API.

The document is a decoded JSON payload such as ``{"data": [{...}, ...]}``.
A provider supplies ``read_entry`` to turn one entry into fields; the
identifier is read from ``id_key`` and must match the provider grammar.
"""
from __future__ import annotations

from typing import Any, Callable, Dict, Iterator, Mapping, Tuple

from ..exceptions import ExtractionRowError, IdentifierValidationFailure
from ..logger import get_logger
from ..models import Capability, FieldValue, RawRecord, RecordKind, RowResult
from .base import FragmentExtractor
from .identifiers import IdentifierGrammar

logger = get_logger(__name__)

EntryReader = Callable[[Mapping[str, Any]], Tuple[Dict[str, FieldValue], Tuple[Capability, ...]]]


class JsonListingExtractor(FragmentExtractor):
    """Entries of ``document[list_key]``, each parsed by ``read_entry``."""

    def __init__(
        self,
        *,
        grammar: IdentifierGrammar,
        read_entry: EntryReader,
        kind: RecordKind = RecordKind.MODEL,
        list_key: str = "data",
        id_key: str = "id",
        name: str = "json listing",
    ) -> None:
        self.grammar = grammar
        self.read_entry = read_entry
        self.kind = kind
        self.list_key = list_key
        self.id_key = id_key
        self.name = name

    def fragments(self, document: Any) -> Iterator[Any]:
        entries = document.get(self.list_key) if isinstance(document, Mapping) else None
        if not isinstance(entries, list):
            logger.warning("EXTRACT %s: payload has no %r list", self.name, self.list_key)
            return
        yield from entries

    def parse(self, fragment: Any) -> RowResult:
        if not isinstance(fragment, Mapping):
            return RowResult.failure(ExtractionRowError(
                f"expected an object, got {type(fragment).__name__}", fragment=repr(fragment)[:80],
            ))

        candidate = fragment.get(self.id_key)
        if not self.grammar.is_valid(candidate):
            return RowResult.failure(IdentifierValidationFailure(candidate, self.grammar.provider))

        fields, capabilities = self.read_entry(fragment)
        return RowResult.success(RawRecord(
            kind=self.kind,
            api_name=candidate,
            fields=fields,
            capabilities=capabilities,
        ))
