"""
Gaussian Integers
=================

Arithmetic in Z[i] with Euclidean division and GCD.

Division Convention:
--------------------
For a / b the exact quotient a·conj(b) / N(b) is rounded component-wise to the
nearest integer, ties rounded half away from zero. The rounding is done with
integer arithmetic only. The remainder is r = a - b·q and satisfies
N(r) <= N(b) / 2.

Objects are mutable through ``update`` and ``reset`` so they can be drawn from
an object pool; every arithmetic operator returns a new object.
"""

from typing import Tuple

from .errors import PreconditionViolation


def round_div(n: int, d: int) -> int:
    """
    Round n / d to the nearest integer, ties half away from zero.

    Parameters
    ----------
    n : int
        Numerator
    d : int
        Positive denominator

    Returns
    -------
    int
        The rounded quotient

    Examples
    --------
    >>> round_div(5, 2), round_div(-5, 2), round_div(7, 3)
    (3, -3, 2)
    """
    q, rem = divmod(abs(n), d)
    if 2 * rem >= d:
        q += 1
    return q if n >= 0 else -q


class GaussianInt:
    """The Gaussian integer R + I·i."""

    __slots__ = ('R', 'I')

    def __init__(self, R: int = 0, I: int = 0):
        self.R = R
        self.I = I

    def update(self, R: int, I: int) -> 'GaussianInt':
        self.R = R
        self.I = I
        return self

    def reset(self) -> 'GaussianInt':
        return self.update(0, 0)

    def copy(self) -> 'GaussianInt':
        return GaussianInt(self.R, self.I)

    def is_zero(self) -> bool:
        return self.R == 0 and self.I == 0

    def as_tuple(self) -> Tuple[int, int]:
        return self.R, self.I

    def __eq__(self, other):
        if not isinstance(other, GaussianInt):
            return NotImplemented
        return self.R == other.R and self.I == other.I

    __hash__ = None

    def __repr__(self):
        return f"GaussianInt({self.R}, {self.I})"

    def __str__(self):
        sign = '+' if self.I >= 0 else '-'
        return f"{self.R} {sign} {abs(self.I)}i"

    def __neg__(self):
        return GaussianInt(-self.R, -self.I)

    def __add__(self, other: 'GaussianInt') -> 'GaussianInt':
        return GaussianInt(self.R + other.R, self.I + other.I)

    def __sub__(self, other: 'GaussianInt') -> 'GaussianInt':
        return GaussianInt(self.R - other.R, self.I - other.I)

    def __mul__(self, other: 'GaussianInt') -> 'GaussianInt':
        # (a + bi)(c + di) = (ac - bd) + (ad + bc)i
        return GaussianInt(self.R * other.R - self.I * other.I,
                           self.R * other.I + self.I * other.R)

    def conj(self) -> 'GaussianInt':
        return GaussianInt(self.R, -self.I)

    def norm(self) -> int:
        return self.R * self.R + self.I * self.I

    def __divmod__(self, other: 'GaussianInt') -> Tuple['GaussianInt', 'GaussianInt']:
        """
        Euclidean division: return (q, r) with self = other·q + r.

        Raises
        ------
        PreconditionViolation
            If ``other`` is zero
        """
        d = other.norm()
        if d == 0:
            raise PreconditionViolation("Gaussian division by zero")
        num = self * other.conj()
        q = GaussianInt(round_div(num.R, d), round_div(num.I, d))
        r = self - other * q
        return q, r

    def __floordiv__(self, other: 'GaussianInt') -> 'GaussianInt':
        return divmod(self, other)[0]

    def __mod__(self, other: 'GaussianInt') -> 'GaussianInt':
        return divmod(self, other)[1]

    def gcd(self, other: 'GaussianInt') -> 'GaussianInt':
        return gaussian_gcd(self, other)


def gaussian_gcd(a: GaussianInt, b: GaussianInt) -> GaussianInt:
    """
    Greatest common divisor in Z[i] via the Euclidean algorithm.

    The result is unique up to multiplication by a unit (±1, ±i). The inputs
    are not modified.
    """
    a, b = a.copy(), b.copy()
    while not b.is_zero():
        _, r = divmod(a, b)
        a, b = b, r
    return a


def one_plus_i_pow(e: int) -> GaussianInt:
    """
    Return (1 + i)^e.

    Uses (1 + i)^2 = 2i, so (1 + i)^e = 2^(e // 2) · i^(e // 2) · (1 + i)^(e % 2).
    """
    if e < 0:
        raise PreconditionViolation(f"Exponent must be non-negative, got {e}")
    half = e // 2
    scale = 1 << half
    unit = [GaussianInt(1, 0), GaussianInt(0, 1),
            GaussianInt(-1, 0), GaussianInt(0, -1)][half % 4]
    result = GaussianInt(unit.R * scale, unit.I * scale)
    if e % 2:
        result = result * GaussianInt(1, 1)
    return result
