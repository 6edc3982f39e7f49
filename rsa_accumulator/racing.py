"""
Racing searches
===============

Randomized searches (safe primes, four-square and three-square witnesses) run
the same search function on several worker threads. The first worker to find
a witness claims the single result slot and signals every sibling to stop.

A search function has the signature ``search(worker, num_workers, token)`` and
returns a witness or ``None`` when it gave up (trial budget spent or the token
was cancelled). It must poll ``token.cancelled`` inside its loop.
"""

import itertools
import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Iterator, Optional

from .errors import TrialFailed

logger = logging.getLogger(__name__)


class FirstWins:
    """
    Cancellation token with a single-owner result slot.

    ``offer`` stores a value only if no winner was chosen yet; the stored value
    is never overwritten afterwards.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._done = threading.Event()
        self._has_result = False
        self._result = None

    @property
    def cancelled(self) -> bool:
        return self._done.is_set()

    @property
    def has_result(self) -> bool:
        with self._lock:
            return self._has_result

    @property
    def result(self):
        with self._lock:
            return self._result

    def cancel(self):
        self._done.set()

    def offer(self, value) -> bool:
        with self._lock:
            if self._done.is_set():
                return False
            self._result = value
            self._has_result = True
            self._done.set()
            return True


def trials(max_trials: Optional[int] = None) -> Iterator[int]:
    """Trial counter: ``range(max_trials)`` or an unbounded count."""
    if max_trials is None:
        return itertools.count()
    return iter(range(max_trials))


def _run(search: Callable, worker: int, num_workers: int, token: FirstWins):
    if token.cancelled:
        return
    found = search(worker, num_workers, token)
    if found is not None and token.offer(found):
        logger.debug("worker %d of %d won the race", worker, num_workers)


def race(search: Callable, num_workers: int, what: str = "witness"):
    """
    Run ``search`` on ``num_workers`` threads and return the first witness.

    Parameters
    ----------
    search : Callable
        ``search(worker, num_workers, token) -> Optional[witness]``
    num_workers : int
        Number of racing workers (at least 1)
    what : str
        Name of the searched object for error messages

    Returns
    -------
    Any
        The witness offered by the winning worker

    Raises
    ------
    TrialFailed
        If every worker returned without a witness
    """
    num_workers = max(1, num_workers)
    token = FirstWins()
    if num_workers == 1:
        _run(search, 0, 1, token)
    else:
        with ThreadPoolExecutor(max_workers=num_workers) as executor:
            futures = [executor.submit(_run, search, i, num_workers, token)
                       for i in range(num_workers)]
            try:
                for future in as_completed(futures):
                    future.result()
            except BaseException:
                token.cancel()
                raise
    if not token.has_result:
        raise TrialFailed(f"No {what} found within the trial budget")
    return token.result
