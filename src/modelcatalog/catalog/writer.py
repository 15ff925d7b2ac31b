"""
On-disk catalog layout.

    catalog/
      providers.json            sorted provider slugs
      <slug>/models.jsonl       one CatalogRecord per line, sorted by name
      <slug>/openapi.yaml       pulled API spec, when the provider has one

Files are written to a temporary name and moved into place, so a failed
run never leaves a half-written catalog behind.
"""
from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

from pydantic import ValidationError

from ..config import Config
from ..exceptions import ProviderPipelineFailure
from ..logger import get_logger
from ..models import CatalogRecord
from ..schemas import CatalogRecordSchema

logger = get_logger(__name__)

MODELS_FILE = "models.jsonl"
SPEC_FILE = "openapi.yaml"
PROVIDERS_FILE = "providers.json"


def write_atomic(path: Path, content: str) -> None:
    """Replace ``path`` with ``content`` in one step."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_name = None
    try:
        with tempfile.NamedTemporaryFile(
            "w", encoding="utf-8", dir=path.parent, prefix=f".{path.name}.", suffix=".tmp", delete=False
        ) as tmp:
            tmp_name = tmp.name
            tmp.write(content)
        os.replace(tmp_name, path)
    except OSError:
        if tmp_name and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise


class CatalogWriter:
    """Reads and writes the catalog directory."""

    def __init__(self, catalog_dir: Optional[Union[str, Path]] = None) -> None:
        self.catalog_dir = Path(catalog_dir or Config.CATALOG_DIR)

    def provider_dir(self, slug: str) -> Path:
        return self.catalog_dir / slug

    def write_models(self, slug: str, records: Sequence[CatalogRecord]) -> Path:
        """
        Validate and write a provider's records as newline-delimited JSON.

        Raises:
            ProviderPipelineFailure: If a record fails validation or the file
                cannot be written; the previous file is left in place
        """
        lines = []
        for record in records:
            try:
                CatalogRecordSchema.from_record(record)
            except ValidationError as e:
                raise ProviderPipelineFailure(slug, f"invalid record {record.id!r}: {e}") from e
            lines.append(record.to_json_line())

        path = self.provider_dir(slug) / MODELS_FILE
        try:
            write_atomic(path, "\n".join(lines) + "\n")
        except OSError as e:
            raise ProviderPipelineFailure(slug, f"could not write {path}: {e}") from e

        logger.info("CATALOG Wrote %d records to %s", len(records), path)
        return path

    def write_spec(self, slug: str, content: str) -> Path:
        path = self.provider_dir(slug) / SPEC_FILE
        try:
            write_atomic(path, content)
        except OSError as e:
            raise ProviderPipelineFailure(slug, f"could not write {path}: {e}") from e
        logger.info("CATALOG Wrote API spec to %s", path)
        return path

    def load_models(self, slug: str) -> List[dict]:
        """Records from a provider's models.jsonl, sorted by name."""
        path = self.provider_dir(slug) / MODELS_FILE
        if not path.exists():
            return []

        models = []
        with open(path, "r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if line:
                    models.append(json.loads(line))
        models.sort(key=lambda m: (m.get("name", ""), m.get("id", "")))
        return models

    def providers(self) -> List[str]:
        """Slugs of providers with a models.jsonl on disk, alphabetically."""
        if not self.catalog_dir.is_dir():
            return []
        return sorted(
            d.name for d in self.catalog_dir.iterdir()
            if d.is_dir() and (d / MODELS_FILE).exists()
        )

    def model_counts(self) -> Dict[str, int]:
        return {slug: len(self.load_models(slug)) for slug in self.providers()}

    def write_provider_index(self) -> List[str]:
        providers = self.providers()
        write_atomic(self.catalog_dir / PROVIDERS_FILE, json.dumps(providers, indent=2) + "\n")
        logger.info("CATALOG Updated %s (%d providers)", PROVIDERS_FILE, len(providers))
        return providers
