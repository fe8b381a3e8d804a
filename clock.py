# clock.py
# Measures real time between ticks and paces the loop toward a target frame rate.

import time

class SimulationClock:
    """
    Frame timer backed by a monotonic clock.

    tick() returns the seconds elapsed since the previous tick (0.0 on the very
    first one), so all motion scales with real time instead of frame count.
    The time source and sleep function can be swapped out for tests.
    """
    def __init__(self, fps=60, time_source=time.monotonic, sleep=time.sleep):
        self.frame_interval = 1.0 / fps
        self._time_source = time_source
        self._sleep = sleep
        self._last_tick = None
        self.elapsed = 0.0
        self.ticks = 0

    def now(self):
        return self._time_source()

    def tick(self):
        now = self._time_source()
        dt = 0.0 if self._last_tick is None else max(0.0, now - self._last_tick)
        self._last_tick = now
        self.elapsed += dt
        self.ticks += 1
        return dt

    def wait_for_next_frame(self):
        """Sleeps for whatever is left of the current frame interval, if anything."""
        if self._last_tick is None:
            return 0.0
        remaining = self.frame_interval - (self._time_source() - self._last_tick)
        if remaining > 0:
            self._sleep(remaining)
            return remaining
        return 0.0
