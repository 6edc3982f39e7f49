"""
Hurwitz Quaternions
===================

Arithmetic in the Hurwitz order: quaternions r + i·x + j·y + k·z whose four
coordinates are either all integers or all halves of odd integers.

Representation:
---------------
Each coordinate is stored doubled (dbl_r, dbl_i, dbl_j, dbl_k), so every
Hurwitz integer has integer storage and the four doubled values share the same
parity. All arithmetic stays in the doubled representation; ``value()`` is the
only place the doubling is undone.

Division Convention:
--------------------
Right division: a = q·b + r. The quotient q is the Hurwitz integer nearest to
a·conj(b) / N(b), so N(r) <= N(b) / 2. GCRD uses the same convention, hence a
greatest common right divisor d satisfies a = x·d and b = y·d.
"""

import itertools
from typing import Tuple

from .errors import PreconditionViolation, VerificationFailed
from .gaussian import GaussianInt, round_div


class HurwitzInt:
    """
    A Hurwitz integer.

    Parameters
    ----------
    r, i, j, k : int
        The coordinates, or the doubled coordinates when ``doubled`` is True
    doubled : bool
        Whether the arguments are already doubled

    Raises
    ------
    PreconditionViolation
        If doubled coordinates have mixed parity
    """

    __slots__ = ('dbl_r', 'dbl_i', 'dbl_j', 'dbl_k')

    def __init__(self, r: int = 0, i: int = 0, j: int = 0, k: int = 0, doubled: bool = False):
        self.dbl_r = self.dbl_i = self.dbl_j = self.dbl_k = 0
        if doubled:
            self.update_doubled(r, i, j, k)
        else:
            self.update(r, i, j, k)

    @classmethod
    def from_doubled(cls, dr: int, di: int, dj: int, dk: int) -> 'HurwitzInt':
        return cls(dr, di, dj, dk, doubled=True)

    @classmethod
    def from_gaussian(cls, g: GaussianInt) -> 'HurwitzInt':
        return cls(g.R, g.I, 0, 0)

    def update(self, r: int, i: int, j: int, k: int) -> 'HurwitzInt':
        return self.update_doubled(2 * r, 2 * i, 2 * j, 2 * k)

    def update_doubled(self, dr: int, di: int, dj: int, dk: int) -> 'HurwitzInt':
        parity = dr & 1
        if (di & 1) != parity or (dj & 1) != parity or (dk & 1) != parity:
            raise PreconditionViolation(
                f"Doubled coordinates ({dr}, {di}, {dj}, {dk}) do not form a Hurwitz integer")
        self.dbl_r, self.dbl_i, self.dbl_j, self.dbl_k = dr, di, dj, dk
        return self

    def reset(self) -> 'HurwitzInt':
        return self.update_doubled(0, 0, 0, 0)

    def copy(self) -> 'HurwitzInt':
        return HurwitzInt.from_doubled(*self.doubled())

    def doubled(self) -> Tuple[int, int, int, int]:
        return self.dbl_r, self.dbl_i, self.dbl_j, self.dbl_k

    def is_zero(self) -> bool:
        return not any(self.doubled())

    def is_lipschitz(self) -> bool:
        """True when all coordinates are integers."""
        return self.dbl_r % 2 == 0

    def __eq__(self, other):
        if not isinstance(other, HurwitzInt):
            return NotImplemented
        return self.doubled() == other.doubled()

    __hash__ = None

    def __repr__(self):
        return "HurwitzInt.from_doubled({}, {}, {}, {})".format(*self.doubled())

    def __neg__(self):
        return HurwitzInt.from_doubled(-self.dbl_r, -self.dbl_i, -self.dbl_j, -self.dbl_k)

    def __add__(self, other: 'HurwitzInt') -> 'HurwitzInt':
        return HurwitzInt.from_doubled(self.dbl_r + other.dbl_r, self.dbl_i + other.dbl_i,
                                       self.dbl_j + other.dbl_j, self.dbl_k + other.dbl_k)

    def __sub__(self, other: 'HurwitzInt') -> 'HurwitzInt':
        return HurwitzInt.from_doubled(self.dbl_r - other.dbl_r, self.dbl_i - other.dbl_i,
                                       self.dbl_j - other.dbl_j, self.dbl_k - other.dbl_k)

    def __mul__(self, other: 'HurwitzInt') -> 'HurwitzInt':
        """
        Hamilton product.

        With doubled inputs each raw component is 4x the true value; halving
        it gives the doubled result. The halving is exact because the Hurwitz
        order is closed under multiplication.
        """
        a1, b1, c1, d1 = self.doubled()
        a2, b2, c2, d2 = other.doubled()
        r = a1 * a2 - b1 * b2 - c1 * c2 - d1 * d2
        i = a1 * b2 + b1 * a2 + c1 * d2 - d1 * c2
        j = a1 * c2 - b1 * d2 + c1 * a2 + d1 * b2
        k = a1 * d2 + b1 * c2 - c1 * b2 + d1 * a2
        return HurwitzInt.from_doubled(r // 2, i // 2, j // 2, k // 2)

    def conj(self) -> 'HurwitzInt':
        return HurwitzInt.from_doubled(self.dbl_r, -self.dbl_i, -self.dbl_j, -self.dbl_k)

    def norm(self) -> int:
        """Sum of the squares of the true coordinates."""
        return sum(c * c for c in self.doubled()) // 4

    def divmod_right(self, other: 'HurwitzInt') -> Tuple['HurwitzInt', 'HurwitzInt']:
        """
        Right division: return (q, r) with self = q·other + r and N(r) < N(other).

        The exact quotient self·conj(other)/N(other) is rounded to the nearest
        point of the integer lattice and to the nearest point of the
        half-integer lattice; the candidate with the smaller remainder wins,
        the integer one on ties.
        """
        nb = other.norm()
        if nb == 0:
            raise PreconditionViolation("Hurwitz division by zero")
        num = (self * other.conj()).doubled()
        # true quotient coordinate c is num_c / (2·nb)
        den = 2 * nb
        lipschitz = HurwitzInt.from_doubled(*(2 * round_div(c, den) for c in num))
        half = HurwitzInt.from_doubled(*(2 * (c // den) + 1 for c in num))
        best_q, best_r = None, None
        for q in (lipschitz, half):
            r = self - q * other
            if best_r is None or r.norm() < best_r.norm():
                best_q, best_r = q, r
        return best_q, best_r

    def __floordiv__(self, other: 'HurwitzInt') -> 'HurwitzInt':
        return self.divmod_right(other)[0]

    def __mod__(self, other: 'HurwitzInt') -> 'HurwitzInt':
        return self.divmod_right(other)[1]

    def gcrd(self, other: 'HurwitzInt') -> 'HurwitzInt':
        return hurwitz_gcrd(self, other)

    def to_lipschitz(self) -> 'HurwitzInt':
        """
        Return an associate with integer coordinates and the same norm.

        A half-integer quaternion is multiplied on the right by the unit
        (±1 ± i ± j ± k)/2 that clears the halves.
        """
        if self.is_lipschitz():
            return self.copy()
        for signs in itertools.product((1, -1), repeat=4):
            candidate = self * HurwitzInt.from_doubled(*signs)
            if candidate.is_lipschitz():
                return candidate
        raise VerificationFailed(f"No integral associate found for {self!r}")

    def value(self) -> Tuple[int, int, int, int]:
        """
        The true integer coordinates (r, i, j, k).

        Half-integer quaternions are first moved to an integral associate, so
        the sum of squares of the result always equals ``norm()``.
        """
        h = self.to_lipschitz()
        return h.dbl_r // 2, h.dbl_i // 2, h.dbl_j // 2, h.dbl_k // 2


def hurwitz_gcrd(a: HurwitzInt, b: HurwitzInt) -> HurwitzInt:
    """
    Greatest common right divisor via the Euclidean algorithm.

    Parameters
    ----------
    a, b : HurwitzInt
        The operands; they are not modified

    Returns
    -------
    HurwitzInt
        d with a = x·d and b = y·d for Hurwitz integers x, y; unique up to a
        unit on the left
    """
    a, b = a.copy(), b.copy()
    while not b.is_zero():
        _, r = a.divmod_right(b)
        a, b = b, r
    return a
