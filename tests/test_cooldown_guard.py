import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from dadbot.responder.cooldown import CooldownGuard


class _FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def test_first_acquire_always_succeeds() -> None:
    guard = CooldownGuard("joke", 5.0, clock=_FakeClock())

    assert guard.last_fired_at is None
    assert guard.try_acquire() is True
    assert guard.last_fired_at == 1000.0


def test_acquire_inside_window_is_rejected_without_state_change() -> None:
    clock = _FakeClock()
    guard = CooldownGuard("joke", 5.0, clock=clock)
    guard.try_acquire()

    clock.advance(4.999)
    assert guard.try_acquire() is False
    assert guard.last_fired_at == 1000.0


def test_acquire_at_exact_window_boundary_succeeds() -> None:
    clock = _FakeClock()
    guard = CooldownGuard("goodnight", 3.0, clock=clock)
    guard.try_acquire()

    clock.advance(3.0)
    assert guard.try_acquire() is True
    assert guard.last_fired_at == 1003.0


def test_explicit_window_overrides_default() -> None:
    clock = _FakeClock()
    guard = CooldownGuard("joke", 5.0, clock=clock)
    guard.try_acquire()
    clock.advance(2.0)

    assert guard.try_acquire(window=10.0) is False
    assert guard.try_acquire(window=1.0) is True


def test_remaining_and_reset() -> None:
    clock = _FakeClock()
    guard = CooldownGuard("joke", 5.0, clock=clock)
    assert guard.remaining() == 0.0

    guard.try_acquire()
    clock.advance(2.0)
    assert guard.remaining() == pytest.approx(3.0)

    guard.reset()
    assert guard.remaining() == 0.0
    assert guard.try_acquire() is True


def test_instances_do_not_share_state() -> None:
    clock = _FakeClock()
    joke = CooldownGuard("joke", 5.0, clock=clock)
    goodnight = CooldownGuard("goodnight", 3.0, clock=clock)

    assert joke.try_acquire() is True
    assert goodnight.try_acquire() is True
    assert joke.try_acquire() is False
    assert goodnight.try_acquire() is False


def test_negative_window_is_rejected() -> None:
    with pytest.raises(ValueError):
        CooldownGuard("broken", -1.0)


def test_concurrent_callers_at_same_instant_get_exactly_one_success() -> None:
    workers = 32
    guard = CooldownGuard("joke", 5.0, clock=_FakeClock())
    barrier = threading.Barrier(workers)

    def attempt(_: int) -> bool:
        barrier.wait()
        return guard.try_acquire()

    with ThreadPoolExecutor(max_workers=workers) as pool:
        results = list(pool.map(attempt, range(workers)))

    assert results.count(True) == 1
    assert results.count(False) == workers - 1


def test_concurrent_callers_after_elapsed_window_get_exactly_one_success() -> None:
    workers = 32
    clock = _FakeClock()
    guard = CooldownGuard("joke", 5.0, clock=clock)
    assert guard.try_acquire() is True
    clock.advance(7.5)
    barrier = threading.Barrier(workers)

    def attempt(_: int) -> bool:
        barrier.wait()
        return guard.try_acquire()

    with ThreadPoolExecutor(max_workers=workers) as pool:
        results = list(pool.map(attempt, range(workers)))

    assert results.count(True) == 1
    assert results.count(False) == workers - 1
    assert guard.last_fired_at == 1007.5
