"""Domain model - documents and their metadata.

Value objects are immutable pydantic models validated at construction, so a
``Document`` that exists is always well formed:

- the emoji sequence is non-empty
- ``metadata`` is either ``None`` or a JSON object that orjson can encode
- ``metadata["geolocation"]``, when present and not null, has exactly a
  numeric ``latitude`` and ``longitude``
"""

from __future__ import annotations

from typing import Any

import orjson
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from emoji_search.errors import ValidationError


class Geolocation(BaseModel):
    """A WGS84 coordinate attached to a document."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    latitude: float = Field(strict=True)
    longitude: float = Field(strict=True)

    @classmethod
    def parse(cls, raw: Any) -> Geolocation:
        try:
            return cls.model_validate(raw)
        except PydanticValidationError as exc:
            raise ValidationError.from_pydantic("Invalid geolocation", exc) from exc


class DocumentMetadata(BaseModel):
    """Open metadata object with one well-known optional field."""

    model_config = ConfigDict(frozen=True, extra="allow")

    geolocation: Geolocation | None = None


class Document(BaseModel):
    """An indexed emoji document. Never mutated after insertion.

    ``geolocation`` is parsed from ``metadata`` once, in ``create``.
    """

    model_config = ConfigDict(frozen=True)

    doc_id: str = Field(min_length=1)
    emoji: str
    metadata: dict[str, Any] | None = None
    geolocation: Geolocation | None = None

    @classmethod
    def create(cls, doc_id: str, emoji: str, metadata: Any = None) -> Document:
        """Validate raw input and build a document.

        Raises:
            ValidationError: empty emoji sequence or malformed metadata.
        """
        if not isinstance(emoji, str) or not emoji:
            raise ValidationError(
                "Emoji sequence must be a non-empty string",
                details=[{"loc": ["emoji"], "msg": "must be a non-empty string", "type": "value_error"}],
            )
        detached, parsed = _parse_metadata(metadata)
        geolocation = parsed.geolocation if parsed is not None else None
        return cls(doc_id=doc_id, emoji=emoji, metadata=detached, geolocation=geolocation)

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.doc_id, "emoji": self.emoji, "meta": self.metadata}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Document:
        return cls.create(str(data["id"]), data["emoji"], data.get("meta"))


def _parse_metadata(raw: Any) -> tuple[dict[str, Any] | None, DocumentMetadata | None]:
    if raw is None:
        return None, None
    if not isinstance(raw, dict):
        raise ValidationError(
            "Metadata must be an object or null",
            details=[{"loc": ["meta"], "msg": "must be an object or null", "type": "type_error"}],
        )
    # the snapshot is written with orjson; anything it cannot encode is rejected here
    try:
        detached = orjson.loads(orjson.dumps(raw))
    except orjson.JSONEncodeError as exc:
        raise ValidationError(
            "Metadata must be JSON-serializable",
            details=[{"loc": ["meta"], "msg": str(exc), "type": "json_invalid"}],
        ) from exc
    try:
        parsed = DocumentMetadata.model_validate(detached)
    except PydanticValidationError as exc:
        raise ValidationError.from_pydantic("Invalid document metadata", exc) from exc
    return detached, parsed


def validate_metadata(raw: Any) -> dict[str, Any] | None:
    """Check document metadata and return a deep, detached copy of it.

    ``None`` is accepted as "no metadata". A non-object value, a value orjson
    cannot encode (integers beyond 64 bits, non-string keys, sets), or a
    ``geolocation`` that is neither null nor ``{latitude, longitude}`` raises
    ``ValidationError``.
    """
    return _parse_metadata(raw)[0]
