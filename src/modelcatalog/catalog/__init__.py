"""
Catalog output: on-disk layout, feature matrix and OpenAPI checks.

The assembler lives in ``modelcatalog.catalog.assembler``; it depends on
the provider pipelines, which in turn write through this package.
"""
from .feature_matrix import FeatureMatrix
from .openapi import OpenAPISpecCheck
from .writer import CatalogWriter, write_atomic

__all__ = [
    "CatalogWriter",
    "FeatureMatrix",
    "OpenAPISpecCheck",
    "write_atomic",
]
