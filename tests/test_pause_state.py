import threading
from concurrent.futures import ThreadPoolExecutor

from structlog.testing import capture_logs

from dadbot.responder.pause import PauseState


class _FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def test_idle_by_default() -> None:
    state = PauseState(clock=_FakeClock())

    assert state.is_active() is False
    assert state.expires_at is None
    assert state.remaining() == 0.0


def test_active_strictly_before_expiry_and_idle_at_expiry() -> None:
    clock = _FakeClock()
    state = PauseState(clock=clock)

    expires_at = state.pause(900)
    assert expires_at == 1900.0

    clock.now = 1899.999
    assert state.is_active() is True
    assert state.remaining() > 0

    clock.now = 1900.0
    assert state.is_active() is False
    assert state.expires_at is None


def test_expiry_is_logged_once_by_the_first_reader() -> None:
    clock = _FakeClock()
    state = PauseState(clock=clock)
    state.pause(60)
    clock.advance(61)

    with capture_logs() as logs:
        assert state.is_active() is False
        assert state.is_active() is False

    assert [entry["event"] for entry in logs] == ["pause.expired"]


def test_concurrent_reads_at_boundary_observe_one_transition() -> None:
    workers = 24
    clock = _FakeClock()
    state = PauseState(clock=clock)
    state.pause(60)
    clock.now = 1060.0
    barrier = threading.Barrier(workers)

    def read(_: int) -> bool:
        barrier.wait()
        return state.is_active()

    with capture_logs() as logs:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            results = list(pool.map(read, range(workers)))

    assert results == [False] * workers
    assert [entry["event"] for entry in logs].count("pause.expired") == 1


def test_retrigger_while_paused_keeps_original_expiry() -> None:
    clock = _FakeClock()
    state = PauseState(clock=clock)
    first = state.pause(900)

    clock.advance(300)
    second = state.pause(1200)

    assert second == first
    clock.now = first
    assert state.is_active() is False


def test_pause_after_expiry_starts_a_new_window() -> None:
    clock = _FakeClock()
    state = PauseState(clock=clock)
    state.pause(60)
    clock.advance(120)

    expires_at = state.pause(60)

    assert expires_at == clock.now + 60
    assert state.is_active() is True


def test_clear_returns_to_idle() -> None:
    state = PauseState(clock=_FakeClock())
    state.pause(60)

    state.clear()

    assert state.is_active() is False
