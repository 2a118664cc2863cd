"""Wall-clock timestamps and the fixed-rate frame clock."""

import time
from datetime import datetime, timezone


def now_micros():
    """Current time in microseconds since Unix epoch."""
    return int(time.time() * 1_000_000)


def format_timestamp(epoch_us=None):
    """Format timestamp as ISO 8601 with microseconds."""
    if epoch_us is None:
        epoch_us = now_micros()

    dt = datetime.fromtimestamp(epoch_us / 1_000_000, tz=timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.%f") + "Z"


def elapsed_ms(start_perf):
    """Milliseconds since a time.perf_counter() reading."""
    return round((time.perf_counter() - start_perf) * 1000, 3)


class FrameClock:
    """Schedules frames on a fixed grid of ``interval`` seconds.

    A frame that starts after its slot is counted as an overrun and later
    frames catch up on the same grid. When the grid falls more than
    ``max_lag`` intervals behind (a stalled loop, a suspended laptop) it is
    moved up to the current time instead, so the loop does not run the
    missed frames back to back.
    """

    def __init__(self, interval, now=time.perf_counter, max_lag=3):
        self.interval = interval
        self.max_lag = max_lag
        self._now = now
        self.next_at = now()
        self.frames = 0
        self.overruns = 0
        self.resyncs = 0

    def until_next(self):
        """Seconds to wait before the next frame slot (0 when already due)."""
        return max(0.0, self.next_at - self._now())

    def advance(self):
        now = self._now()
        behind = now - self.next_at
        if behind > self.interval:
            self.overruns += 1
        if behind > self.max_lag * self.interval:
            self.resyncs += 1
            self.next_at = now
        self.next_at += self.interval
        self.frames += 1

    def stats(self):
        return {"frames": self.frames, "overruns": self.overruns, "resyncs": self.resyncs,
                "interval_s": self.interval}
