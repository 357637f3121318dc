import functools
import logging
import random
import threading
import time
from contextlib import contextmanager

from pywwcp.exceptions import MutationConflict

log = logging.getLogger(__name__)


def acquire_with_exponential_backoff(
    lock: threading.Lock,
    timeout: float,
    initial_delay: float = 0.001,
    factor: int = 2,
    max_delay: float = 0.1,
    jitter: float = 0.001
) -> bool:
    """
    Attempts to acquire a lock using exponential backoff with jitter.

    This function repeatedly attempts to acquire the given lock without blocking.
    If the lock is not immediately available, it waits for a delay period that increases
    exponentially with each attempt, plus a random jitter to reduce contention. The process
    continues until the lock is acquired or the total elapsed time exceeds the specified timeout.

    Args:
        lock (threading.Lock): The lock instance to acquire.
        timeout (float): The total time (in seconds) to keep trying to acquire the lock.
        initial_delay (float, optional): The initial delay (in seconds) before retrying. Defaults to 0.001.
        factor (int, optional): The multiplier for the delay after each failed attempt. Defaults to 2.
        max_delay (float, optional): The maximum delay (in seconds) between retries. Defaults to 0.1.
        jitter (float, optional): The maximum additional random delay (in seconds). Defaults to 0.001.

    Returns:
        bool: True if the lock was acquired within the timeout period, otherwise False.
    """
    start_time = time.perf_counter()
    delay = initial_delay

    # Uncontended appends never sleep
    if lock.acquire(blocking=False):
        return True
    elapsed = time.perf_counter() - start_time
    while elapsed < timeout:
        remaining_time = timeout - elapsed
        sleep_time = min(delay, remaining_time) + random.uniform(0, jitter)
        time.sleep(sleep_time)
        if lock.acquire(blocking=False):
            return True
        delay = min(delay * factor, max_delay)
        log.debug(f"Waiting for {lock}")
        elapsed = time.perf_counter() - start_time

    return False


@contextmanager
def acquire_lock_with_backoff(lock: threading.Lock, timeout: float, **backoff_kwargs):
    """
    Context manager for acquiring a lock using exponential backoff with jitter.
    Raises MutationConflict if the lock is not acquired in the given timeout.
    """
    if not acquire_with_exponential_backoff(lock, timeout, **backoff_kwargs):
        raise MutationConflict("Unable to acquire history lock within the specified timeout.")
    try:
        yield
    finally:
        lock.release()


def uses_history_lock(func):
    """Serialise a method on the instance's api_lock, waiting at most self.timeout seconds."""
    @functools.wraps(func)
    def wrapper(self, *args, **kwargs):
        with acquire_lock_with_backoff(self.api_lock, self.timeout):
            return func(self, *args, **kwargs)
    return wrapper
