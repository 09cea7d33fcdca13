"""
Login attempt tracker: counting, blocking, expiry and reset.
"""

import threading

import pytest

from app.services.auth.attempts import LoginAttemptTracker

EMAIL = "waiter@restaurant.com"


class FakeClock:
    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> dict:
    return {}


@pytest.fixture
def tracker(store, clock) -> LoginAttemptTracker:
    return LoginAttemptTracker(store=store, max_attempts=5, block_time=15 * 60, clock=clock)


def fail(tracker: LoginAttemptTracker, times: int, identifier: str = EMAIL) -> None:
    for _ in range(times):
        tracker.record_failed_attempt(identifier)


def test_unknown_identifier_can_login(tracker):
    check = tracker.check_login_attempts(EMAIL)

    assert check.can_login
    assert check.message is None


def test_four_failures_still_allowed(tracker):
    fail(tracker, 4)

    assert tracker.check_login_attempts(EMAIL).can_login
    assert tracker.remaining_attempts(EMAIL) == 1


def test_fifth_failure_blocks(tracker):
    fail(tracker, 5)

    check = tracker.check_login_attempts(EMAIL)
    assert not check.can_login
    assert "blocked" in check.message
    assert check.message == "Account blocked. Try again in 15 minutes"


def test_minutes_are_rounded_up(tracker, clock):
    fail(tracker, 5)
    clock.advance(14 * 60 + 1)

    check = tracker.check_login_attempts(EMAIL)
    assert not check.can_login
    assert check.message == "Account blocked. Try again in 1 minute"


def test_block_expires_and_entry_is_purged(tracker, clock):
    fail(tracker, 5)
    clock.advance(15 * 60)

    assert tracker.check_login_attempts(EMAIL).can_login
    assert tracker.failure_count(EMAIL) == 0


def test_checks_never_change_the_count(tracker):
    fail(tracker, 3)
    for _ in range(10):
        tracker.check_login_attempts(EMAIL)

    assert tracker.failure_count(EMAIL) == 3


def test_reset_allows_login_immediately(tracker):
    fail(tracker, 5)
    tracker.reset_login_attempts(EMAIL)

    assert tracker.check_login_attempts(EMAIL).can_login
    assert tracker.remaining_attempts(EMAIL) == 5


def test_identifiers_are_tracked_independently(tracker):
    fail(tracker, 5)

    assert tracker.check_login_attempts("other@restaurant.com").can_login


def test_failures_after_block_extend_it(tracker, clock):
    fail(tracker, 5)
    clock.advance(10 * 60)
    fail(tracker, 1)

    check = tracker.check_login_attempts(EMAIL)
    assert check.message == "Account blocked. Try again in 15 minutes"
    assert tracker.failure_count(EMAIL) == 6


def test_injected_store_holds_the_state(clock):
    store = {}
    tracker = LoginAttemptTracker(store=store, clock=clock)

    tracker.record_failed_attempt(EMAIL)

    assert store[EMAIL].count == 1
    assert store[EMAIL].block_until is None


def test_concurrent_failures_are_all_counted(tracker):
    threads = [
        threading.Thread(target=fail, args=(tracker, 20))
        for _ in range(8)
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert tracker.failure_count(EMAIL) == 160
    assert not tracker.check_login_attempts(EMAIL).can_login


def test_clear_forgets_everything(tracker):
    fail(tracker, 5)
    fail(tracker, 2, identifier="other@restaurant.com")
    tracker.clear()

    assert tracker.failure_count(EMAIL) == 0
    assert tracker.failure_count("other@restaurant.com") == 0


def test_failures_below_threshold_expire(tracker, store, clock):
    fail(tracker, 4)
    clock.advance(15 * 60)

    assert tracker.failure_count(EMAIL) == 0
    assert EMAIL not in store

    fail(tracker, 1)
    assert tracker.remaining_attempts(EMAIL) == 4


def test_recent_failure_keeps_the_count(tracker, clock):
    fail(tracker, 3)
    clock.advance(10 * 60)
    fail(tracker, 1)
    clock.advance(10 * 60)

    assert tracker.failure_count(EMAIL) == 4


def test_unknown_identifiers_do_not_accumulate(tracker, store, clock):
    for n in range(1000):
        tracker.record_failed_attempt(f"ghost{n}@x.com")
        tracker.check_login_attempts(f"ghost{n}@x.com")
    assert len(store) == 1000

    clock.advance(15 * 60)
    tracker.record_failed_attempt("late@x.com")

    assert list(store) == ["late@x.com"]


def test_purge_expired_keeps_active_blocks(tracker, store, clock):
    fail(tracker, 5)
    fail(tracker, 2, identifier="other@restaurant.com")
    clock.advance(15 * 60 - 1)
    fail(tracker, 1, identifier="fresh@restaurant.com")
    clock.advance(1)

    assert tracker.purge_expired() == 2
    assert list(store) == ["fresh@restaurant.com"]
