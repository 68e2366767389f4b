"""Service layer - document store and search orchestration."""

from .document_store import DocumentStore
from .search_service import SearchService


__all__ = ["DocumentStore", "SearchService"]
