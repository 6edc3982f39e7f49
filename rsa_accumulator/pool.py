"""
Caches and Object Pools
=======================

Explicitly constructed helpers shared by the square-decomposition searches:

- ObjectPool: reusable scratch objects, reset on every acquire
- PrimeCache: small primes from a numpy sieve and cached prime products
- SquareCache: two-square decompositions of small integers
- ProofCache: the bundle handed to a search; one per long-lived context

Nothing here is a process-wide singleton; two ProofCache objects never share
state.
"""

import threading
from contextlib import contextmanager
from typing import Callable, Dict, List, Optional, Tuple

import numpy as np

from .bigint import is_square, isqrt
from .errors import PreconditionViolation
from .gaussian import GaussianInt
from .hurwitz import HurwitzInt

# product of the primes below 8, the smallest prime product used by the searches
MIN_PRIME_PRODUCT = 210


def primes_below(n: int) -> np.ndarray:
    """
    Sieve of Eratosthenes over numbers of the form 6k±1.

    Parameters
    ----------
    n : int
        Exclusive upper bound

    Returns
    -------
    np.ndarray
        Sorted int64 array of all primes p with 2 <= p < n
    """
    if n <= 2:
        return np.array([], dtype=np.int64)
    if n < 6:
        return np.array([p for p in (2, 3, 5) if p < n], dtype=np.int64)
    sieve = np.ones(n // 3 + (n % 6 == 2), dtype=bool)
    sieve[0] = False
    for i in range(int(n ** 0.5) // 3 + 1):
        if sieve[i]:
            k = 3 * i + 1 | 1
            sieve[k * k // 3::2 * k] = False
            sieve[(k * k + 4 * k - 2 * k * (i & 1)) // 3::2 * k] = False
    primes = np.r_[2, 3, (3 * np.nonzero(sieve)[0] + 1) | 1].astype(np.int64)
    return primes[primes < n]


class ObjectPool:
    """
    Thread-safe pool of reusable objects.

    Parameters
    ----------
    factory : Callable
        Creates a fresh object when the pool is empty
    reset : Callable
        Clears an object; applied on every acquire, so a pooled object never
        carries a previous value into a new computation
    max_size : int
        Released objects beyond this count are dropped
    """

    def __init__(self, factory: Callable, reset: Callable, max_size: int = 64):
        self._factory = factory
        self._reset = reset
        self._max_size = max_size
        self._items = []
        self._lock = threading.Lock()

    def __len__(self):
        with self._lock:
            return len(self._items)

    def acquire(self):
        with self._lock:
            obj = self._items.pop() if self._items else None
        if obj is None:
            obj = self._factory()
        self._reset(obj)
        return obj

    def release(self, obj):
        with self._lock:
            if len(self._items) < self._max_size:
                self._items.append(obj)

    @contextmanager
    def borrow(self):
        obj = self.acquire()
        try:
            yield obj
        finally:
            self.release(obj)


class PrimeCache:
    """Small primes and memoized products of the primes below a bound."""

    def __init__(self, limit: int = 4096):
        self._limit = limit
        self._primes = primes_below(limit)
        self._products: Dict[Tuple[int, bool], int] = {}
        self._lock = threading.Lock()

    def primes_below(self, bound: int) -> List[int]:
        with self._lock:
            if bound > self._limit:
                self._limit = max(bound, 2 * self._limit)
                self._primes = primes_below(self._limit)
            primes = self._primes
        return [int(p) for p in primes[primes < bound]]

    def prime_product(self, bound: int, odd_only: bool = False) -> int:
        """
        Product of all primes below ``bound``.

        The full product is never smaller than 210 = 2·3·5·7; with
        ``odd_only`` the prime 2 is left out and no minimum applies.
        """
        if not odd_only:
            bound = max(bound, 8)
        key = (bound, odd_only)
        with self._lock:
            cached = self._products.get(key)
        if cached is not None:
            return cached
        primes = [p for p in self.primes_below(bound) if not (odd_only and p == 2)]
        result = int(np.prod(np.array(primes, dtype=object))) if primes else 1
        with self._lock:
            self._products[key] = result
        return result

    def clear(self):
        with self._lock:
            self._products.clear()


class SquareCache:
    """Memoized two-square decompositions m = a² + b² (a >= b >= 0) of small m."""

    def __init__(self, limit: int = 10000):
        self.limit = limit
        self._cache: Dict[int, Optional[Tuple[int, int]]] = {}
        self._lock = threading.Lock()

    def two_squares(self, m: int) -> Optional[Tuple[int, int]]:
        """
        Find (a, b) with a² + b² = m, or None if m is not a sum of two squares.

        Raises
        ------
        PreconditionViolation
            If m is negative or above the cache limit
        """
        if m < 0 or m > self.limit:
            raise PreconditionViolation(f"{m} is outside the square cache range [0, {self.limit}]")
        with self._lock:
            if m in self._cache:
                return self._cache[m]
        found = None
        a = isqrt(m)
        while 2 * a * a >= m:
            rest = m - a * a
            if is_square(rest):
                found = (a, isqrt(rest))
                break
            a -= 1
        with self._lock:
            self._cache[m] = found
        return found

    def clear(self):
        with self._lock:
            self._cache.clear()


class ProofCache:
    """
    Scratch pools and caches for one search context.

    Examples
    --------
    >>> cache = ProofCache()
    >>> with cache.gaussian_pool.borrow() as g:
    ...     g.update(3, 4).norm()
    25
    """

    def __init__(self, prime_limit: int = 4096, square_limit: int = 10000):
        self.primes = PrimeCache(prime_limit)
        self.squares = SquareCache(square_limit)
        self.gaussian_pool = ObjectPool(GaussianInt, GaussianInt.reset)
        self.hurwitz_pool = ObjectPool(HurwitzInt, HurwitzInt.reset)

    def clear(self):
        self.primes.clear()
        self.squares.clear()
