"""Domain layer - documents, search options and results.

No infrastructure dependencies: these models are shared by the index, the
service layer and the HTTP application.
"""

from emoji_search.domain.model import Document, DocumentMetadata, Geolocation, validate_metadata
from emoji_search.domain.search import (
    DEFAULT_LIMIT,
    BoundingBoxFence,
    CircleFence,
    GeoFence,
    ResultEntry,
    SearchOptions,
)


__all__ = [
    "DEFAULT_LIMIT",
    "BoundingBoxFence",
    "CircleFence",
    "Document",
    "DocumentMetadata",
    "GeoFence",
    "Geolocation",
    "ResultEntry",
    "SearchOptions",
    "validate_metadata",
]
