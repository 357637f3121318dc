import threading
import time

import pytest

from pywwcp.api_lock import acquire_lock_with_backoff, acquire_with_exponential_backoff
from pywwcp.exceptions import MutationConflict


def test_uncontended_lock_is_acquired():
    lock = threading.Lock()
    assert acquire_with_exponential_backoff(lock, timeout=0.1)
    assert lock.locked()
    lock.release()


def test_held_lock_times_out():
    lock = threading.Lock()
    lock.acquire()
    start = time.perf_counter()
    assert not acquire_with_exponential_backoff(lock, timeout=0.05)
    assert time.perf_counter() - start < 1.0
    lock.release()


def test_lock_released_by_other_thread_is_acquired():
    lock = threading.Lock()
    lock.acquire()
    timer = threading.Timer(0.02, lock.release)
    timer.start()
    assert acquire_with_exponential_backoff(lock, timeout=2.0)
    lock.release()
    timer.join()


def test_context_manager_raises_mutation_conflict():
    lock = threading.Lock()
    lock.acquire()
    with pytest.raises(MutationConflict):
        with acquire_lock_with_backoff(lock, 0.01):
            pass
    lock.release()


def test_context_manager_releases_on_error():
    lock = threading.Lock()
    with pytest.raises(RuntimeError):
        with acquire_lock_with_backoff(lock, 0.1):
            raise RuntimeError("boom")
    assert not lock.locked()
