"""Catalogue service backends."""

from .base import BackendResult, CatalogBackend
from .http import HttpCatalogBackend
from .memory import InMemoryCatalogBackend, DUPLICATE_DOCUMENT_MESSAGE

__all__ = [
    "BackendResult",
    "CatalogBackend",
    "HttpCatalogBackend",
    "InMemoryCatalogBackend",
    "DUPLICATE_DOCUMENT_MESSAGE",
]
