"""
Pydantic schemas for output validation and data contracts.
"""

from .catalog import CatalogRecordSchema, ModalitiesSchema

__all__ = [
    'CatalogRecordSchema',
    'ModalitiesSchema',
]
