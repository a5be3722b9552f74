from __future__ import annotations

import time
from datetime import datetime, timezone


class DurationMeasurement:
    """Monotonic duration measurement anchored to a wall-clock start time."""

    def __init__(self) -> None:
        self.start_timestamp = datetime.now(timezone.utc)
        self._start = time.perf_counter()

    @property
    def duration_in_ms(self) -> int:
        return int(round((time.perf_counter() - self._start) * 1000))


def start_duration_measurement() -> DurationMeasurement:
    return DurationMeasurement()
