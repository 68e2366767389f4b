"""Error hierarchy shared by the index, the service layer and the HTTP app."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any


if TYPE_CHECKING:
    from pydantic import ValidationError as PydanticValidationError


class EmojiSearchError(Exception):
    """Base class for every error raised by the emoji search core."""


class ValidationError(EmojiSearchError, ValueError):
    """Raised before any index mutation when a document or search request is malformed."""

    def __init__(self, message: str, *, details: list[dict[str, Any]] | None = None) -> None:
        super().__init__(message)
        self.details = list(details or [])

    @classmethod
    def from_pydantic(cls, message: str, exc: PydanticValidationError) -> ValidationError:
        details = [
            {"loc": [str(part) for part in error["loc"]], "msg": error["msg"], "type": error["type"]}
            for error in exc.errors(include_url=False, include_context=False, include_input=False)
        ]
        return cls(message, details=details)

    def to_dict(self) -> dict[str, Any]:
        return {"error": str(self), "details": self.details}


class PersistenceError(EmojiSearchError):
    """Raised when a snapshot cannot be written or read.

    When raised from an insert, the in-memory index already contains the new
    document; ``doc_id`` identifies it so callers can tell the write landed in
    memory but not on disk.
    """

    def __init__(self, message: str, *, doc_id: str | None = None) -> None:
        super().__init__(message)
        self.doc_id = doc_id
