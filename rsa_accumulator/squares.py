"""
Sum-of-Squares Decompositions
=============================

Randomized decompositions of integers into four, three or two squares using
Gaussian-integer GCD and Hurwitz-quaternion GCRD.

Four squares (Lagrange):
------------------------
Write n = 2^e · n' with n' odd. For n' <= 8 a fixed table answers directly.
Otherwise racing workers search for a prime p = M·n'·k - 1 (M the product of
the primes below log2(n), k odd and random), a square root s of -1 mod p, the
two squares A² + B² = p from gcd(s + i, p), and finally

    GCRD(A + Bi + j, n')

whose norm is n'. Multiplying by (1 + i)^e restores the factor 2^e.

Every answer is checked before it is returned; a failed check is a failed
trial, never a result.

Variants:
---------
- large_lagrange_four_squares: p = 2·n'·M_odd - l with l a random 25-bit prime
  l ≡ 1 mod 4, used for n >= 2^large_bits
- unconditional_four_squares: random x, y with -(x² + y²) mod n' written as a
  sum of two squares by stripping small primes; needs no prime-density
  assumption on a special progression
- three_squares / three_square_new: n = x² + y² + z² for n ≡ 1 mod 4 and the
  decomposition of 4n + 1
"""

import logging
from typing import NamedTuple, Optional, Tuple

from .bigint import is_probable_prime, isqrt, powmod, random_below, random_bits
from .config import Config, config
from .errors import PreconditionViolation, VerificationFailed
from .gaussian import GaussianInt, gaussian_gcd, one_plus_i_pow
from .hurwitz import HurwitzInt, hurwitz_gcrd
from .pool import ProofCache
from .racing import race, trials

logger = logging.getLogger(__name__)

# Miller-Rabin rounds for search candidates; false positives fail the final check
CANDIDATE_PRIME_ROUNDS = 10
# attempts at finding a quadratic non-residue modulo a candidate prime
MAX_U_FINDING_ITER = 10
# bit length of the auxiliary prime l in the large variant
LARGE_L_BITS = 25
# below this bound two-square decompositions come from the square cache
SMALL_SQUARE_BOUND = 10000

SMALL_TABLE = {
    0: (0, 0, 0, 0),
    1: (1, 0, 0, 0),
    2: (1, 1, 0, 0),
    3: (1, 1, 1, 0),
    4: (2, 0, 0, 0),
    5: (2, 1, 0, 0),
    6: (2, 1, 1, 0),
    7: (2, 1, 1, 1),
    8: (2, 2, 0, 0),
}


class FourInt(NamedTuple):
    """Four non-negative integers sorted in descending order."""
    w1: int
    w2: int
    w3: int
    w4: int

    @classmethod
    def of(cls, *values: int) -> 'FourInt':
        return cls(*sorted((abs(v) for v in values), reverse=True))

    def square_sum(self) -> int:
        return sum(w * w for w in self)


class ThreeInt(NamedTuple):
    """Three non-negative integers sorted in descending order."""
    w1: int
    w2: int
    w3: int

    @classmethod
    def of(cls, *values: int) -> 'ThreeInt':
        return cls(*sorted((abs(v) for v in values), reverse=True))

    def square_sum(self) -> int:
        return sum(w * w for w in self)


def split_twos(n: int) -> Tuple[int, int]:
    """Return (e, odd) with n = 2^e · odd."""
    if n <= 0:
        raise PreconditionViolation(f"Expected a positive integer, got {n}")
    e = (n & -n).bit_length() - 1
    return e, n >> e


def sqrt_minus_one(p: int) -> Optional[int]:
    """
    Find s with s² ≡ -1 mod p for a prime p ≡ 1 mod 4.

    Samples u until u^((p-1)/2) ≡ -1 (a non-residue) and returns u^((p-1)/4).
    Returns None after MAX_U_FINDING_ITER non-residue misses or when p turns
    out not to admit a root (composite p).
    """
    if p < 5 or p % 4 != 1:
        return None
    half = (p - 1) // 2
    for _ in range(MAX_U_FINDING_ITER):
        u = 2 + random_below(p - 3)
        if powmod(u, half, p) == p - 1:
            s = powmod(u, half // 2, p)
            if s * s % p == p - 1:
                return s
            return None
    return None


def prime_two_squares(p: int, cache: ProofCache) -> Optional[GaussianInt]:
    """
    Return A + Bi with A² + B² = p for a prime p ≡ 1 mod 4, or None.

    A gcd that is a unit or an associate of 1 + i is rejected through the
    norm check.
    """
    s = sqrt_minus_one(p)
    if s is None:
        return None
    with cache.gaussian_pool.borrow() as a, cache.gaussian_pool.borrow() as b:
        a.update(s, 1)
        b.update(p, 0)
        g = gaussian_gcd(a, b)
    if g.norm() != p:
        return None
    return g


def two_squares(m: int, cache: ProofCache) -> Optional[Tuple[int, int]]:
    """Two squares of ``m``: table lookup when small, prime route otherwise."""
    if m <= cache.squares.limit:
        return cache.squares.two_squares(m)
    if m % 4 != 1 or not is_probable_prime(m, CANDIDATE_PRIME_ROUNDS):
        return None
    g = prime_two_squares(m, cache)
    return None if g is None else (g.R, g.I)


def _gcrd_with(h: HurwitzInt, odd: int, cache: ProofCache) -> Optional[HurwitzInt]:
    with cache.hurwitz_pool.borrow() as n_quat:
        n_quat.update(odd, 0, 0, 0)
        d = hurwitz_gcrd(h, n_quat)
    if d.norm() != odd:
        return None
    return d.to_lipschitz()


def _finish(n: int, e: int, h: HurwitzInt) -> FourInt:
    result = HurwitzInt.from_gaussian(one_plus_i_pow(e)) * h
    w = FourInt.of(*result.value())
    if w.square_sum() != n:
        raise VerificationFailed(f"Four-square decomposition {w} does not sum to {n}")
    return w


def _decompose(n: int, make_search, label: str, cfg: Config) -> FourInt:
    if n < 0:
        raise PreconditionViolation(f"Cannot decompose negative integer {n}")
    if n == 0:
        return FourInt(0, 0, 0, 0)
    e, odd = split_twos(n)
    if odd <= 8:
        h = HurwitzInt(*SMALL_TABLE[odd])
    else:
        h = race(make_search(odd), cfg.workers, what=f"{label} witness for {n}")
    return _finish(n, e, h)


# ============================================================================
# Lagrange four squares
# ============================================================================

def lagrange_four_squares(n: int, cache: ProofCache = None, cfg: Config = None) -> FourInt:
    """
    Decompose n >= 0 into four squares.

    Parameters
    ----------
    n : int
        The integer to decompose
    cache : ProofCache, optional
        Prime-product cache and scratch pools; a fresh one if omitted
    cfg : Config, optional
        Worker count, trial budget and large-input threshold

    Returns
    -------
    FourInt
        (w1, w2, w3, w4), descending, with w1² + w2² + w3² + w4² = n

    Raises
    ------
    PreconditionViolation
        If n is negative
    TrialFailed
        If a finite trial budget is configured and every worker exhausted it

    Examples
    --------
    >>> lagrange_four_squares(7)
    FourInt(w1=2, w2=1, w3=1, w4=1)
    """
    cfg = cfg or config
    cache = cache or ProofCache()
    if n > 0 and n >> cfg.large_bits:
        return large_lagrange_four_squares(n, cache, cfg)

    def make_search(odd):
        prime_prod = cache.primes.prime_product(n.bit_length())
        pre = prime_prod * odd
        k_bound = odd ** 5 // 2

        def search(worker, num_workers, token):
            add, mul = 2 * worker + 1, 2 * num_workers
            bound = k_bound // num_workers + 1
            for trial in trials(cfg.max_trials):
                if token.cancelled:
                    return None
                p = pre * (random_below(bound) * mul + add) - 1
                if not is_probable_prime(p, CANDIDATE_PRIME_ROUNDS):
                    continue
                g = prime_two_squares(p, cache)
                if g is None:
                    continue
                found = _gcrd_with(HurwitzInt(g.R, g.I, 1, 0), odd, cache)
                if found is not None:
                    logger.debug("four squares of %d found after %d trials", odd, trial + 1)
                    return found
            return None

        return search

    return _decompose(n, make_search, "four-square", cfg)


def _random_prime_1mod4(bits: int) -> int:
    while True:
        l = random_bits(bits) | (1 << (bits - 1))
        l = l - l % 4 + 1
        if is_probable_prime(l, CANDIDATE_PRIME_ROUNDS):
            return l


def large_lagrange_four_squares(n: int, cache: ProofCache = None, cfg: Config = None) -> FourInt:
    """
    Four-square decomposition for large n.

    Searches p = 2·n'·M_odd - l with l a random prime ≡ 1 mod 4. Then
    A² + B² = p and C² + D² = l give A² + B² + C² + D² ≡ 0 mod n', and
    GCRD(A + Bi + Cj + Dk, n') has norm n'.

    Inputs below 2^large_bits are too small for p to stay positive and go
    to :func:`lagrange_four_squares`.
    """
    cfg = cfg or config
    cache = cache or ProofCache()
    if not n >> cfg.large_bits:
        return lagrange_four_squares(n, cache, cfg)

    def make_search(odd):
        pre = 2 * odd * cache.primes.prime_product(n.bit_length(), odd_only=True)

        def search(worker, num_workers, token):
            for _ in trials(cfg.max_trials):
                if token.cancelled:
                    return None
                l = _random_prime_1mod4(LARGE_L_BITS)
                p = pre - l
                if p < 5 or not is_probable_prime(p, CANDIDATE_PRIME_ROUNDS):
                    continue
                ab = prime_two_squares(p, cache)
                cd = prime_two_squares(l, cache) if ab is not None else None
                if cd is None:
                    continue
                found = _gcrd_with(HurwitzInt(ab.R, ab.I, cd.R, cd.I), odd, cache)
                if found is not None:
                    return found
            return None

        return search

    return _decompose(n, make_search, "large four-square", cfg)


def _sum_of_two_squares_by_factoring(r: int, small_primes, cache: ProofCache) -> Optional[GaussianInt]:
    # r = (product of small primes that are sums of two squares) · (1 or a prime ≡ 1 mod 4)
    acc = GaussianInt(1, 0)
    rest = r
    for q in small_primes:
        while rest % q == 0:
            rest //= q
            a, b = cache.squares.two_squares(q)
            acc = acc * GaussianInt(a, b)
    if rest == 1:
        return acc
    if rest <= cache.squares.limit:
        pair = cache.squares.two_squares(rest)
        return None if pair is None else acc * GaussianInt(*pair)
    if rest % 4 != 1 or not is_probable_prime(rest, CANDIDATE_PRIME_ROUNDS):
        return None
    g = prime_two_squares(rest, cache)
    return None if g is None else acc * g


def unconditional_four_squares(n: int, cache: ProofCache = None, cfg: Config = None) -> FourInt:
    """
    Four-square decomposition without assumptions on primes in progressions.

    Each trial picks random x, y < n' and writes r = -(x² + y²) mod n' as
    z² + w² by stripping small primes that are sums of two squares from r and
    requiring the cofactor to be 1, small, or a prime ≡ 1 mod 4. Then
    x² + y² + z² + w² ≡ 0 mod n' and GCRD(x + yi + zj + wk, n') has norm n'
    whenever the quaternion is primitive.
    """
    cfg = cfg or config
    cache = cache or ProofCache()

    def make_search(odd):
        bound = max(n.bit_length(), 8)
        small = [q for q in cache.primes.primes_below(bound) if q == 2 or q % 4 == 1]

        def search(worker, num_workers, token):
            for _ in trials(cfg.max_trials):
                if token.cancelled:
                    return None
                x, y = random_below(odd), random_below(odd)
                r = -(x * x + y * y) % odd
                zw = GaussianInt(0, 0) if r == 0 else _sum_of_two_squares_by_factoring(r, small, cache)
                if zw is None:
                    continue
                found = _gcrd_with(HurwitzInt(x, y, zw.R, zw.I), odd, cache)
                if found is not None:
                    return found
            return None

        return search

    return _decompose(n, make_search, "unconditional four-square", cfg)


# ============================================================================
# Three squares
# ============================================================================

def three_squares(n: int, cache: ProofCache = None, cfg: Config = None) -> ThreeInt:
    """
    Decompose n ≡ 1 mod 4 into three squares using only Gaussian GCD.

    Workers scan even x = 2·(rt - cnt) downward from rt = isqrt(n) // 2 over
    disjoint residues of cnt; the first x for which p = n - x² is a sum of two
    squares wins. Large p must be a probable prime; small p is looked up in
    the square cache.

    Raises
    ------
    PreconditionViolation
        If n is not positive or n % 4 != 1
    """
    if n <= 0 or n % 4 != 1:
        raise PreconditionViolation(f"Three-square decomposition needs n ≡ 1 mod 4, got {n}")
    cfg = cfg or config
    cache = cache or ProofCache()
    rt = isqrt(n) // 2

    def search(worker, num_workers, token):
        cnt = worker
        for _ in trials(cfg.max_trials):
            if token.cancelled:
                return None
            x = 2 * (rt - cnt)
            if x < 0:
                return None
            cnt += num_workers
            pair = two_squares(n - x * x, cache)
            if pair is not None:
                return ThreeInt.of(x, *pair)
        return None

    w = race(search, cfg.workers, what=f"three-square witness for {n}")
    if w.square_sum() != n:
        raise VerificationFailed(f"Three-square decomposition {w} does not sum to {n}")
    return w


def three_square_new(n: int, cache: ProofCache = None, cfg: Config = None) -> ThreeInt:
    """Three squares of 4n + 1 for n >= 0."""
    if n < 0:
        raise PreconditionViolation(f"Expected a non-negative integer, got {n}")
    return three_squares(4 * n + 1, cache, cfg)
