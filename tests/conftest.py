import pytest

from main import World


class FakeTerminal:
    """Records what the game draws and feeds it scripted key batches."""

    def __init__(self, key_batches=None):
        self.key_batches = list(key_batches or [])
        self.enable_calls = 0
        self.disable_calls = 0
        self.frames = []
        self._current = None

    def __enter__(self):
        self.enable_raw_input()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.disable_raw_input()
        return False

    def enable_raw_input(self):
        self.enable_calls += 1

    def disable_raw_input(self):
        self.disable_calls += 1

    def poll_pending_keys(self):
        if self.key_batches:
            return list(self.key_batches.pop(0))
        return []

    def clear_screen(self):
        self._current = []

    def write_line(self, text):
        self._current.append(text)

    def flush(self):
        self.frames.append(self._current)
        self._current = None


class ManualClock:
    """A SimulationClock stand-in that advances by a fixed step every tick."""

    def __init__(self, step=0.1):
        self.step = step
        self.time = 0.0
        self.ticks = 0
        self.elapsed = 0.0
        self.waits = 0

    def tick(self):
        dt = 0.0 if self.ticks == 0 else self.step
        self.time += dt
        self.elapsed += dt
        self.ticks += 1
        return dt

    def now(self):
        return self.time

    def wait_for_next_frame(self):
        self.waits += 1
        return 0.0


@pytest.fixture
def world() -> World:
    return World()


@pytest.fixture
def fake_terminal() -> FakeTerminal:
    return FakeTerminal()
