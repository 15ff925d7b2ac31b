"""
Pydantic schemas for catalog records at the output boundary.

Internal code passes dataclasses around; every record is re-validated
against ``CatalogRecordSchema`` right before it is written to disk.
"""
from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models import Capability, CatalogRecord, Modality, PriceCategory, PriceTier

_CATEGORIES = {c.value for c in PriceCategory}
_TIERS = {t.value for t in PriceTier}
_LEAVES = {name for c in PriceCategory for name in c.leaf_names if name}


class ModalitiesSchema(BaseModel):
    """Input and output modalities of a model."""
    input: List[Modality] = Field(..., min_length=1, description="Input modalities")
    output: List[Modality] = Field(..., min_length=1, description="Output modalities")


class CatalogRecordSchema(BaseModel):
    """One line of a provider's models.jsonl."""
    name: str = Field(..., min_length=1, description="Display name")
    family: str = Field(..., min_length=1, description="Model family")
    provider: str = Field(..., min_length=1, description="Provider slug")
    id: str = Field(..., min_length=1, description="Identifier in the provider's API")
    context_window: Optional[int] = Field(default=None, gt=0, description="Context window in tokens")
    max_output_tokens: Optional[int] = Field(default=None, gt=0, description="Maximum output tokens")
    modalities: ModalitiesSchema
    capabilities: List[Capability] = Field(default_factory=list, description="Capability flags")
    pricing: Optional[Dict[str, Dict[str, Dict[str, float]]]] = Field(
        default=None,
        description="category -> tier -> leaf price",
    )

    model_config = ConfigDict(extra="forbid")

    @field_validator("pricing")
    @classmethod
    def validate_pricing(cls, v):
        """Closed category/tier/leaf names, non-negative leaves, no empty branches."""
        if v is None:
            return v
        for category, tiers in v.items():
            if category not in _CATEGORIES:
                raise ValueError(f"unknown price category: {category}")
            if not tiers:
                raise ValueError(f"empty price category: {category}")
            for tier, leaves in tiers.items():
                if tier not in _TIERS:
                    raise ValueError(f"unknown price tier: {tier}")
                if not leaves:
                    raise ValueError(f"empty price tier: {category}.{tier}")
                for leaf, price in leaves.items():
                    if leaf not in _LEAVES:
                        raise ValueError(f"unknown price field: {leaf}")
                    if price < 0:
                        raise ValueError(f"negative price for {category}.{tier}.{leaf}")
        return v

    @classmethod
    def from_record(cls, record: CatalogRecord) -> "CatalogRecordSchema":
        return cls.model_validate(record.to_dict())
