from __future__ import annotations

from datetime import datetime

import pytest

from backend.app.schemas.analytics import range_start


@pytest.mark.parametrize(
    "time_range,now,expected",
    [
        ("week", datetime(2024, 6, 10, 8, 0), datetime(2024, 6, 3, 8, 0)),
        ("month", datetime(2024, 6, 10, 8, 0), datetime(2024, 5, 10, 8, 0)),
        ("month", datetime(2024, 1, 15), datetime(2023, 12, 15)),
        ("month", datetime(2024, 3, 31), datetime(2024, 2, 29)),
    ],
)
def test_range_start(time_range, now, expected) -> None:
    assert range_start(time_range, now) == expected
