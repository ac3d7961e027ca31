"""Tests for Priority parsing and mappings."""

from __future__ import annotations

import pytest

from tasknest.models import PRIORITY_FILTERS, Priority


@pytest.mark.parametrize(
    "value, expected",
    [
        ("low", Priority.LOW),
        ("Medium", Priority.MEDIUM),
        ("  HIGH ", Priority.HIGH),
        ("urgent", Priority.URGENT),
        (3, Priority.HIGH),
        ("4", Priority.URGENT),
        (Priority.LOW, Priority.LOW),
        (None, Priority.NONE),
        ("", Priority.NONE),
        ("critical", Priority.NONE),
        (0, Priority.NONE),
        (9, Priority.NONE),
        (True, Priority.NONE),
    ],
)
def test_parse(value, expected):
    assert Priority.parse(value) is expected


def test_stored_values():
    assert Priority.NONE.stored is None
    assert [p.stored for p in Priority if p is not Priority.NONE] == [1, 2, 3, 4]


def test_from_stored_is_total():
    assert Priority.from_stored(None) is Priority.NONE
    assert Priority.from_stored(2) is Priority.MEDIUM
    assert Priority.from_stored(7) is Priority.NONE


def test_labels():
    assert Priority.URGENT.label == "urgent"
    assert Priority.NONE.label == "none"


def test_filter_values():
    assert PRIORITY_FILTERS == ("all", "none", "low", "medium", "high", "urgent")
