"""
Login Attempt Tracker

Process-wide failed-login counter keyed by account identifier, with a
time-based unblock. State lives in an injectable mapping (a plain dict by
default) and is lost on restart.

Each public method runs under a lock, so check-then-purge and
increment-then-block are atomic even when handlers run in threads.
"""

import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Callable, MutableMapping, Optional

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 5
BLOCK_TIME_SECONDS = 15 * 60
SWEEP_INTERVAL_SECONDS = 60


@dataclass
class LoginAttempt:
    """
    Failure count for one identifier.

    Invariant: count >= max_attempts implies block_until is set.
    """
    count: int = 0
    block_until: Optional[float] = None
    last_failure: Optional[float] = None


@dataclass(frozen=True)
class LoginCheck:
    can_login: bool
    message: Optional[str] = None


class LoginAttemptTracker:
    """
    Tracks failed logins and blocks an identifier after too many failures.

    An entry that never reached the threshold is forgotten once its last
    failure is older than the block window, so identifiers that never log
    in successfully do not accumulate.

    Attributes:
        max_attempts: Failures that trigger the block
        block_time: Block window in seconds
        clock: Returns the current time in seconds (time.time by default)

    Example:
        >>> tracker = LoginAttemptTracker()
        >>> tracker.record_failed_attempt("a@x.com")
        >>> tracker.check_login_attempts("a@x.com").can_login
        True
    """

    def __init__(
        self,
        store: Optional[MutableMapping[str, LoginAttempt]] = None,
        max_attempts: int = MAX_ATTEMPTS,
        block_time: float = BLOCK_TIME_SECONDS,
        clock: Callable[[], float] = time.time,
        sweep_interval: float = SWEEP_INTERVAL_SECONDS,
    ):
        self._store = store if store is not None else {}
        self._lock = threading.Lock()
        self.max_attempts = max_attempts
        self.block_time = block_time
        self.clock = clock
        self.sweep_interval = sweep_interval
        self._next_sweep = clock() + sweep_interval

    def check_login_attempts(self, identifier: str) -> LoginCheck:
        """
        Report whether the identifier may attempt a login.

        Purges the entry when its window has elapsed. Never changes the
        failure count otherwise.
        """
        with self._lock:
            attempt = self._live(identifier)
            if attempt is None or attempt.count < self.max_attempts:
                return LoginCheck(can_login=True)

            minutes = math.ceil((attempt.block_until - self.clock()) / 60)
            unit = "minute" if minutes == 1 else "minutes"
            return LoginCheck(
                can_login=False,
                message=f"Account blocked. Try again in {minutes} {unit}",
            )

    def record_failed_attempt(self, identifier: str) -> None:
        with self._lock:
            now = self.clock()
            if now >= self._next_sweep:
                self._sweep(now)

            attempt = self._live(identifier) or LoginAttempt()
            attempt.count += 1
            attempt.last_failure = now

            if attempt.count >= self.max_attempts:
                attempt.block_until = now + self.block_time
                logger.warning(
                    f"Account {identifier} blocked after {attempt.count} failed attempts"
                )

            self._store[identifier] = attempt

    def reset_login_attempts(self, identifier: str) -> None:
        with self._lock:
            self._store.pop(identifier, None)

    def remaining_attempts(self, identifier: str) -> int:
        """Failures left before the identifier is blocked."""
        with self._lock:
            attempt = self._live(identifier)
            if attempt is None:
                return self.max_attempts
            return max(0, self.max_attempts - attempt.count)

    def failure_count(self, identifier: str) -> int:
        with self._lock:
            attempt = self._live(identifier)
            return attempt.count if attempt else 0

    def purge_expired(self) -> int:
        """Drop every expired entry. Returns how many were removed."""
        with self._lock:
            return self._sweep(self.clock())

    def clear(self) -> None:
        """Forget every identifier."""
        with self._lock:
            self._store.clear()

    # Callers hold the lock.

    def _expired(self, attempt: LoginAttempt, now: float) -> bool:
        if attempt.count >= self.max_attempts:
            return (attempt.block_until or 0) <= now
        return (attempt.last_failure or 0) + self.block_time <= now

    def _live(self, identifier: str) -> Optional[LoginAttempt]:
        attempt = self._store.get(identifier)
        if attempt is None:
            return None
        if self._expired(attempt, self.clock()):
            del self._store[identifier]
            logger.info(f"Login attempts expired for {identifier}")
            return None
        return attempt

    def _sweep(self, now: float) -> int:
        stale = [key for key, attempt in self._store.items() if self._expired(attempt, now)]
        for key in stale:
            del self._store[key]
        self._next_sweep = now + self.sweep_interval
        if stale:
            logger.debug(f"Purged {len(stale)} expired login attempt entries")
        return len(stale)
