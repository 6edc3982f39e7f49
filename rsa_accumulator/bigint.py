"""
Big Integer Ring
================

Thin contracts over gmpy2 and the system entropy source. Every function here
returns plain Python ``int`` values so callers never mix ``mpz`` objects into
hashing or serialization.

Operations:
-----------
- mulmod, powmod (negative exponents use the modular inverse), invert
- gcd, jacobi, isqrt, is_square
- is_probable_prime with an explicit Miller-Rabin round count
- random_below, random_range, random_bits

Failures:
---------
- A modulus below 2 or a non-invertible base raises PreconditionViolation
- An ``OSError`` from the entropy source is re-raised as RandomnessExhausted
"""

import secrets
import gmpy2

from .errors import PreconditionViolation, RandomnessExhausted


def _check_modulus(N: int):
    if N < 2:
        raise PreconditionViolation(f"Modulus must be at least 2, got {N}")


def mulmod(a: int, b: int, N: int) -> int:
    """Return a·b mod N."""
    _check_modulus(N)
    return int(gmpy2.f_mod(gmpy2.mul(a, b), N))


def powmod(base: int, exp: int, N: int) -> int:
    """
    Compute base^exp mod N.

    Parameters
    ----------
    base : int
        The base; must be invertible modulo N when ``exp`` is negative
    exp : int
        The exponent, possibly negative
    N : int
        The modulus, N >= 2

    Returns
    -------
    int
        The result in [0, N)
    """
    _check_modulus(N)
    try:
        return int(gmpy2.powmod(base, exp, N))
    except (ZeroDivisionError, ValueError) as e:
        raise PreconditionViolation(f"Base {base} is not invertible modulo {N}") from e


def invert(a: int, N: int) -> int:
    """Return a^{-1} mod N."""
    _check_modulus(N)
    try:
        return int(gmpy2.invert(a, N))
    except ZeroDivisionError as e:
        raise PreconditionViolation(f"{a} is not invertible modulo {N}") from e


def gcd(a: int, b: int) -> int:
    return int(gmpy2.gcd(a, b))


def jacobi(a: int, n: int) -> int:
    """Jacobi symbol (a/n) for odd positive n."""
    if n <= 0 or n % 2 == 0:
        raise PreconditionViolation(f"Jacobi symbol needs an odd positive modulus, got {n}")
    return int(gmpy2.jacobi(a, n))


def isqrt(n: int) -> int:
    if n < 0:
        raise PreconditionViolation(f"Square root of negative number {n}")
    return int(gmpy2.isqrt(n))


def is_square(n: int) -> bool:
    return n >= 0 and bool(gmpy2.is_square(n))


def is_probable_prime(n: int, rounds: int) -> bool:
    """
    Probabilistic primality test.

    Parameters
    ----------
    n : int
        Candidate; values below 2 are never prime
    rounds : int
        Number of Miller-Rabin rounds (the security parameter)
    """
    if n < 2:
        return False
    return bool(gmpy2.is_prime(n, rounds))


# ============================================================================
# Randomness
# ============================================================================

def random_below(bound: int) -> int:
    """Uniform integer in [0, bound)."""
    if bound <= 0:
        raise PreconditionViolation(f"Sampling bound must be positive, got {bound}")
    try:
        return secrets.randbelow(bound)
    except OSError as e:
        raise RandomnessExhausted("Entropy source failed") from e


def random_range(low: int, high: int) -> int:
    """Uniform integer in the closed interval [low, high]."""
    if high < low:
        raise PreconditionViolation(f"Empty sampling range [{low}, {high}]")
    return low + random_below(high - low + 1)


def random_bits(k: int) -> int:
    """Uniform integer in [0, 2^k)."""
    if k <= 0:
        raise PreconditionViolation(f"Bit count must be positive, got {k}")
    try:
        return secrets.randbits(k)
    except OSError as e:
        raise RandomnessExhausted("Entropy source failed") from e


# ============================================================================
# Byte encoding
# ============================================================================

def int_to_bytes(x: int) -> bytes:
    """Minimal big-endian encoding of a non-negative integer; 0 encodes as b'\\x00'."""
    if x < 0:
        raise PreconditionViolation(f"Cannot byte-encode negative integer {x}")
    return x.to_bytes(max(1, (x.bit_length() + 7) // 8), 'big')


def bytes_to_int(data: bytes) -> int:
    return int.from_bytes(data, 'big')
