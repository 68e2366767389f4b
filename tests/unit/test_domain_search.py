"""Unit tests for search option resolution and result entries."""

from __future__ import annotations

from pydantic import ValidationError as PydanticValidationError
import pytest

from emoji_search.domain.search import (
    DEFAULT_LIMIT,
    BoundingBoxFence,
    CircleFence,
    ResultEntry,
    SearchOptions,
)
from emoji_search.errors import ValidationError


def test_defaults() -> None:
    options = SearchOptions.from_mapping(None)

    assert options.limit == DEFAULT_LIMIT == 50
    assert options.enable_fuzzy_search is False
    assert options.persist_order is False
    assert options.only_keep_perfect_match is True
    assert options.truncate_small_matches is True
    assert options.truncate_small_score is False
    assert options.geofence is None


def test_camel_case_and_snake_case_are_accepted() -> None:
    camel = SearchOptions.from_mapping({"enableFuzzySearch": True, "persistOrder": True})
    snake = SearchOptions.from_mapping({"enable_fuzzy_search": True, "persist_order": True})

    assert camel == snake
    assert camel.enable_fuzzy_search and camel.persist_order


def test_query_string_values_are_coerced() -> None:
    options = SearchOptions.from_mapping({"limit": "5", "onlyKeepPerfectMatch": "false", "truncateSmallScore": "true"})

    assert options.limit == 5
    assert options.only_keep_perfect_match is False
    assert options.truncate_small_score is True


def test_unknown_options_are_ignored() -> None:
    assert SearchOptions.from_mapping({"colour": "blue"}) == SearchOptions()


def test_geofence_shapes() -> None:
    box = SearchOptions.from_mapping(
        {"geofence": {"latitude": 1, "longitude": 2, "latitudeDelta": 0.1, "longitudeDelta": 0.2}}
    )
    circle = SearchOptions.from_mapping({"geofence": {"latitude": 1, "longitude": 2, "radius": 500}})

    assert isinstance(box.geofence, BoundingBoxFence)
    assert box.geofence.longitude_delta == 0.2
    assert isinstance(circle.geofence, CircleFence)
    assert circle.geofence.radius == 500


@pytest.mark.parametrize(
    "payload",
    [
        {"limit": -1},
        {"limit": "many"},
        {"enableFuzzySearch": "perhaps"},
        {"geofence": {"latitude": 1, "longitude": 2}},
        {"geofence": {"latitude": 1, "longitude": 2, "radius": -5}},
        {"geofence": {"latitude": 1, "longitude": 2, "radius": 5, "colour": "red"}},
        {"geofence": "nearby"},
    ],
)
def test_invalid_options(payload) -> None:
    with pytest.raises(ValidationError) as exc_info:
        SearchOptions.from_mapping(payload)

    assert str(exc_info.value) == "Invalid search options"
    assert exc_info.value.details


def test_options_are_frozen() -> None:
    options = SearchOptions()

    with pytest.raises(PydanticValidationError):
        options.limit = 3


def test_result_entry_serializes_id() -> None:
    entry = ResultEntry(doc_id="abc", emoji="\U0001F600", measure1=0.25, measure=0.25)

    assert entry.to_dict() == {
        "id": "abc",
        "emoji": "\U0001F600",
        "meta": None,
        "measure1": 0.25,
        "measure2": None,
        "measure": 0.25,
        "matches": None,
    }
