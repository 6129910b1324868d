import threading
from datetime import datetime, timedelta, timezone

import pytest

from dashauth.auth.rate_limit import LoginRateLimiter

T0 = datetime(2026, 3, 14, 9, 0, 0, tzinfo=timezone.utc)


def test_allows_until_limit():
    rl = LoginRateLimiter(max_attempts=3, window=timedelta(minutes=5))
    for i in range(3):
        assert rl.acquire("1.2.3.4", T0 + timedelta(seconds=i)) is None
    assert rl.acquire("1.2.3.4", T0 + timedelta(seconds=3)) == 297
    assert rl.acquire("5.6.7.8", T0) is None


def test_denied_attempts_are_not_counted():
    rl = LoginRateLimiter(max_attempts=1, window=timedelta(minutes=5))
    assert rl.acquire("ip", T0) is None
    for i in range(10):
        assert rl.acquire("ip", T0 + timedelta(seconds=i)) is not None
    assert rl.acquire("ip", T0 + timedelta(minutes=5, seconds=1)) is None


def test_window_expiry_unblocks():
    rl = LoginRateLimiter(max_attempts=2, window=timedelta(minutes=5))
    rl.acquire("ip", T0)
    rl.acquire("ip", T0 + timedelta(minutes=1))
    assert rl.acquire("ip", T0 + timedelta(minutes=2)) is not None
    assert rl.acquire("ip", T0 + timedelta(minutes=5, seconds=1)) is None


def test_reset_clears_attempts():
    rl = LoginRateLimiter(max_attempts=1)
    rl.acquire("ip", T0)
    assert rl.acquire("ip", T0) is not None
    rl.reset("ip")
    assert "ip" not in rl
    assert rl.acquire("ip", T0) is None


def test_retry_after_is_at_least_one_second():
    rl = LoginRateLimiter(max_attempts=1, window=timedelta(seconds=10))
    rl.acquire("ip", T0)
    assert rl.acquire("ip", T0 + timedelta(seconds=9, milliseconds=999)) == 1


def test_cleanup_drops_stale_clients():
    rl = LoginRateLimiter(max_attempts=5, window=timedelta(minutes=5))
    rl.acquire("old", T0)
    rl.acquire("new", T0 + timedelta(minutes=4))
    assert rl.cleanup(T0 + timedelta(minutes=6)) == 1
    assert "old" not in rl
    assert "new" in rl


def test_acquire_sweeps_clients_that_never_return():
    rl = LoginRateLimiter(max_attempts=5, window=timedelta(minutes=5))
    for i in range(50):
        rl.acquire(f"10.0.0.{i}", T0)
    assert len(rl) == 50
    rl.acquire("10.0.1.1", T0 + timedelta(minutes=10))
    assert len(rl) == 1


def test_concurrent_attempts_do_not_exceed_limit():
    rl = LoginRateLimiter(max_attempts=5, window=timedelta(minutes=5))
    allowed = []
    barrier = threading.Barrier(32)

    def _attempt():
        barrier.wait()
        if rl.acquire("ip", T0) is None:
            allowed.append(1)

    threads = [threading.Thread(target=_attempt) for _ in range(32)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(allowed) == 5


def test_rejects_non_positive_limit():
    with pytest.raises(ValueError):
        LoginRateLimiter(max_attempts=0)
