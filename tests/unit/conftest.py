"""Unit tests are marked ``unit`` so they can be selected with ``-m unit``."""

import pytest


def pytest_collection_modifyitems(config, items):
    unit_marker = pytest.mark.unit
    for item in items:
        if "unit" in item.path.parts:
            item.add_marker(unit_marker)
