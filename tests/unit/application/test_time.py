# nosec B101


from datetime import UTC, datetime, timedelta

import pytest

from application.utils.time import time_ago

NOW = datetime(2025, 11, 5, 12, 0, 0, tzinfo=UTC)


@pytest.mark.parametrize(
    'age, expected',
    [
        (timedelta(seconds=0), 'just now'),
        (timedelta(seconds=59), 'just now'),
        (timedelta(minutes=1), '1 minute ago'),
        (timedelta(minutes=45), '45 minutes ago'),
        (timedelta(hours=1), '1 hour ago'),
        (timedelta(hours=23, minutes=59), '23 hours ago'),
        (timedelta(days=1), '1 day ago'),
        (timedelta(days=6, hours=5), '6 days ago'),
    ],
)
def test_time_ago(age, expected):
    assert time_ago(NOW - age, now=NOW) == expected


def test_naive_timestamps_are_treated_as_utc():
    assert time_ago(datetime(2025, 11, 5, 11, 0, 0), now=NOW) == '1 hour ago'
