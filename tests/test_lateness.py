"""Tests for deadline parsing and the lateness verdict."""

from datetime import datetime, timezone

import pytest

from labgrader.lateness import is_late, parse_deadline, to_epoch_ms


@pytest.mark.parametrize(
    "resolved,expected",
    [(1000, False), (1001, True), (999, False), (None, False)],
)
def test_lateness_boundary(resolved, expected):
    assert is_late(resolved, 1000) is expected


def test_parse_deadline_keeps_offset():
    deadline = parse_deadline("2025-11-03T23:59:00+03:00")

    assert deadline.utcoffset().total_seconds() == 3 * 3600
    assert to_epoch_ms(deadline) == to_epoch_ms(datetime(2025, 11, 3, 20, 59, tzinfo=timezone.utc))


def test_parse_deadline_accepts_zulu():
    assert to_epoch_ms(parse_deadline("2025-11-03T20:59:00Z")) == to_epoch_ms(
        parse_deadline("2025-11-03T23:59:00+03:00")
    )


@pytest.mark.parametrize("value", ["2025-11-03T23:59:00", datetime(2025, 11, 3, 23, 59)])
def test_parse_deadline_rejects_naive(value):
    with pytest.raises(ValueError):
        parse_deadline(value)


def test_parse_deadline_rejects_garbage():
    with pytest.raises(ValueError):
        parse_deadline("next tuesday")
