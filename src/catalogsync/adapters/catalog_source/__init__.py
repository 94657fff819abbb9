"""External catalog source adapters."""

from __future__ import annotations

from .categories import HttpCategorySource, parse_category_document
from .client import HttpCatalogSource
from .file import JsonFileCatalogSource

__all__ = [
    "HttpCatalogSource",
    "HttpCategorySource",
    "JsonFileCatalogSource",
    "parse_category_document",
]
