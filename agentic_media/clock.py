"""
Clocks that drive the fallback render loop.

RealtimeClock paces the loop against the wall clock at display refresh rate.
ManualClock advances by a fixed step per refresh and never sleeps; it makes
renders deterministic and fast, which is what the tests and offline renders
want.
"""
import time

DISPLAY_REFRESH_HZ = 60


class RealtimeClock:
    def __init__(self, refresh_hz: float = DISPLAY_REFRESH_HZ):
        self.interval_ms = 1000.0 / refresh_hz
        self._origin = time.monotonic()

    def now(self) -> float:
        return (time.monotonic() - self._origin) * 1000.0

    def wait_for_refresh(self) -> None:
        now = self.now()
        next_tick = (now // self.interval_ms + 1) * self.interval_ms
        time.sleep((next_tick - now) / 1000.0)

    def sleep(self, ms: float) -> None:
        time.sleep(ms / 1000.0)


class ManualClock:
    def __init__(self, step_ms: float = 1000.0 / DISPLAY_REFRESH_HZ, start_ms: float = 0.0):
        self.step_ms = step_ms
        self._now = start_ms

    def now(self) -> float:
        return self._now

    def advance(self, ms: float) -> None:
        self._now += ms

    def wait_for_refresh(self) -> None:
        self.advance(self.step_ms)

    def sleep(self, ms: float) -> None:
        self.advance(ms)
