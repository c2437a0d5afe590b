"""Tests for windowed sum/max."""
from datetime import datetime, timedelta, timezone
from window_aggregation import max_between, sum_between

START = datetime(2025, 10, 10, 0, 0, tzinfo=timezone.utc)


def _records(values):
    """(time, value) pairs one hour apart from START."""
    return [(START + timedelta(hours=offset), value) for offset, value in enumerate(values)]


def _value(record):
    return record[1]


def _time(record):
    return record[0]


def test_sum_between_half_open():
    """Test that the start is included and the end excluded."""
    records = _records([1.0, 2.0, 3.0, 4.0])

    total = sum_between(records, START, START + timedelta(hours=3), _value, _time)

    assert total == 6.0


def test_sum_between_empty_range():
    records = _records([1.0, 2.0])

    assert sum_between(records, START, START, _value, _time) == 0
    assert sum_between([], START, START + timedelta(hours=5), _value, _time, initial=10) == 10


def test_max_between():
    records = _records([3.0, 9.0, 5.0, 12.0])

    assert max_between(records, START, START + timedelta(hours=3), _value, _time) == 9.0
    assert max_between(records, START + timedelta(hours=2), START + timedelta(hours=4), _value, _time) == 12.0


def test_max_between_empty_range_defaults_to_zero():
    """Test that an empty range yields the default."""
    records = _records([3.0])
    later = START + timedelta(hours=5)

    assert max_between(records, later, later + timedelta(hours=1), _value, _time) == 0
    assert max_between(records, later, later + timedelta(hours=1), _value, _time, default=-1) == -1


def test_single_record_range():
    """Test a one-hour range picks out exactly the record at its start."""
    records = _records([1.0, 7.0, 3.0])
    start = START + timedelta(hours=1)
    end = START + timedelta(hours=2)

    assert sum_between(records, start, end, _value, _time) == 7.0
    assert max_between(records, start, end, _value, _time) == 7.0
