"""Domain models for search requests and responses.

Search options arrive with camelCase names (``enableFuzzySearch``) from HTTP
query strings and with snake_case names from Python callers; both are
accepted. Every option has an explicit default and the model is resolved
once per request.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from emoji_search.errors import ValidationError


DEFAULT_LIMIT = 50


class BoundingBoxFence(BaseModel):
    """Rectangle centred on a coordinate, extending ``±delta`` degrees on each axis."""

    model_config = ConfigDict(frozen=True, extra="forbid", alias_generator=to_camel, populate_by_name=True)

    latitude: float
    longitude: float
    latitude_delta: float
    longitude_delta: float

    def corners(self) -> list[tuple[float, float]]:
        """Return the four (latitude, longitude) corners in ring order."""
        return [
            (self.latitude - self.latitude_delta, self.longitude - self.longitude_delta),
            (self.latitude + self.latitude_delta, self.longitude - self.longitude_delta),
            (self.latitude + self.latitude_delta, self.longitude + self.longitude_delta),
            (self.latitude - self.latitude_delta, self.longitude + self.longitude_delta),
        ]


class CircleFence(BaseModel):
    """Circle around a coordinate; ``radius`` is in metres."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    latitude: float
    longitude: float
    radius: float = Field(ge=0)


GeoFence = BoundingBoxFence | CircleFence


class SearchOptions(BaseModel):
    """Per-request search configuration."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    limit: int = Field(default=DEFAULT_LIMIT, ge=0, description="Maximum number of results")
    enable_fuzzy_search: bool = Field(
        default=False,
        description="Add the normalized TF-IDF measure to the combined score",
    )
    persist_order: bool = Field(
        default=False,
        description="Match contiguous query substrings instead of single characters",
    )
    only_keep_perfect_match: bool = Field(
        default=True,
        description="Keep only documents containing every query subset",
    )
    truncate_small_matches: bool = Field(
        default=True,
        description="Keep only documents with the largest match list (needs only_keep_perfect_match=False)",
    )
    truncate_small_score: bool = Field(
        default=False,
        description="Keep only documents with the highest combined measure (needs only_keep_perfect_match=False)",
    )
    geofence: GeoFence | None = None

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any] | None) -> SearchOptions:
        """Build options from already-parsed request fields.

        Raises:
            ValidationError: unknown geofence shape, negative limit, or values
                of the wrong type.
        """
        try:
            return cls.model_validate(dict(payload or {}))
        except PydanticValidationError as exc:
            raise ValidationError.from_pydantic("Invalid search options", exc) from exc


class ResultEntry(BaseModel):
    """One ranked document in a search response."""

    model_config = ConfigDict(frozen=True)

    doc_id: str = Field(serialization_alias="id")
    emoji: str
    meta: dict[str, Any] | None = None
    measure1: float
    measure2: float | None = None
    measure: float
    matches: list[str] | None = None

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)
