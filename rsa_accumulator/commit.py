"""
Commitment Generation
=====================

Pedersen-style integer commitments in the hidden-order group:

- C = G^x · H^r mod N for an integer x and randomness r
- Four-square commitments c_i = G^{x_i} · H^{r_i} used by the range proof

Binding rests on the unknown order of QR_N and on nobody knowing log_G(H);
hiding on r being drawn from a range much larger than the group order.
"""

from typing import List, Sequence, Tuple

from .bigint import random_range
from .errors import PreconditionViolation
from .groups import PublicParameters
from .utils import multi_exp


def commit(pp: PublicParameters, x: int, r: int) -> int:
    """
    Commit to x with randomness r.

    Formula:
    --------
    C := G^x · H^r mod N

    Negative x or r are allowed; they use the inverse of G or H.
    """
    return multi_exp([pp.G, pp.H], [x, r], pp.N)


def random_commitment(pp: PublicParameters, x: int) -> Tuple[int, int]:
    """Commit to x with r uniform in [0, N]; return (C, r)."""
    r = random_range(0, pp.N)
    return commit(pp, x, r), r


def commit_four_squares(pp: PublicParameters, squares: Sequence[int],
                        randomizers: Sequence[int]) -> List[int]:
    """
    Commit to each root of a four-square decomposition.

    Parameters
    ----------
    pp : PublicParameters
        {N, G, H}
    squares : Sequence[int]
        (x_1, x_2, x_3, x_4) with x = Σ x_i²
    randomizers : Sequence[int]
        (r_1, r_2, r_3, r_4)

    Returns
    -------
    List[int]
        [c_1, c_2, c_3, c_4] with c_i = G^{x_i} · H^{r_i}
    """
    if len(squares) != 4 or len(randomizers) != 4:
        raise PreconditionViolation(
            f"Expected 4 squares and 4 randomizers, got {len(squares)} and {len(randomizers)}")
    return [commit(pp, x_i, r_i) for x_i, r_i in zip(squares, randomizers)]
