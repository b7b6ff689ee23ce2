from datetime import datetime

import pytest
import pytz

from utils.timeutils import parse_timestamp, utc_isoformat


@pytest.mark.parametrize(
    "value, expected",
    [
        ("2024-03-10T12:00:00Z", datetime(2024, 3, 10, 12, 0, tzinfo=pytz.utc)),
        ("2024-03-10T12:00:00.5Z", datetime(2024, 3, 10, 12, 0, 0, 500000, tzinfo=pytz.utc)),
        ("2024-03-10T12:00:00.123+03:00", datetime(2024, 3, 10, 9, 0, 0, 123000, tzinfo=pytz.utc)),
        ("2024-03-10", datetime(2024, 3, 10, tzinfo=pytz.utc)),
    ],
)
def test_parse_timestamp(value, expected):
    assert parse_timestamp(value) == expected


def test_parse_timestamp_empty_and_invalid():
    assert parse_timestamp(None) is None
    assert parse_timestamp("") is None
    with pytest.raises(ValueError):
        parse_timestamp("yarın")


def test_storage_format_has_microseconds():
    assert utc_isoformat(datetime(2024, 3, 10, 12, 0)) == "2024-03-10T12:00:00.000000+00:00"
