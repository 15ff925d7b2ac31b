"""
Provider feature matrix, rendered as Markdown.
"""
from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Type, Union

from ..config import Config
from ..logger import get_logger
from ..models import ProviderCapabilities
from .writer import write_atomic

logger = get_logger(__name__)

MatrixRow = Tuple[str, ProviderCapabilities]

TITLE = "# Provider Feature Matrix"
INTRO = (
    "This matrix shows which providers support dynamic pulling of API "
    "specifications, model information, and pricing data."
)


def _mark(flag: bool) -> str:
    return "✅" if flag else "❌"


class FeatureMatrix:
    """Capability flags of each provider pipeline, one row per provider."""

    def __init__(self, rows: Iterable[MatrixRow]) -> None:
        self.rows: List[MatrixRow] = sorted(rows, key=lambda row: row[0].lower())

    @classmethod
    def from_pipelines(cls, pipelines: Iterable[Type]) -> "FeatureMatrix":
        """Build from pipeline classes (or instances) exposing ``display_name`` and ``capabilities()``."""
        return cls((p.display_name, p.capabilities()) for p in pipelines)

    def to_markdown(self) -> str:
        lines = [
            TITLE,
            "",
            INTRO,
            "",
            "| Provider | API Specs | Model Info | Pricing |",
            "|----------|-----------|------------|---------|",
        ]
        for name, caps in self.rows:
            lines.append(f"| {name} | {_mark(caps.api_specs)} | {_mark(caps.model_info)} | {_mark(caps.pricing)} |")
        return "\n".join(lines) + "\n"

    def write(self, path: Optional[Union[str, Path]] = None) -> Path:
        target = Path(path or Config.FEATURE_MATRIX_FILE)
        write_atomic(target, self.to_markdown())
        logger.info("CATALOG Updated %s", target)
        return target
