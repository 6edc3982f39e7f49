"""
Proof Generation
================

This module implements the provers of the exponentiation and range protocols
over the hidden-order group. Verification lives in ``verify.py``.

Proofs:
-------
- PoE: proof of exponentiation base^x = C for a public x (Wesolowski)
- PoKE*: proof of knowledge of x with G^x = C
- ZKPoKE: zero-knowledge proof of knowledge of x with u^x = w
- NonNegativeProof: x >= 0 for C = G^x · H^r, via four squares
- IntervalProof: a <= x <= b from two non-negativity proofs

Every challenge comes from the Fiat-Shamir oracles in ``fs_oracles.py``.
"""

import hashlib
from dataclasses import dataclass
from typing import Tuple

from .bigint import int_to_bytes, mulmod, powmod, random_range
from .commit import commit, commit_four_squares
from .config import Config, config
from .errors import PreconditionViolation
from .fs_oracles import H_poe, H_poke_star, H_range, H_zkpoke
from .groups import PublicParameters
from .pool import ProofCache
from .squares import lagrange_four_squares
from .utils import multi_exp

RANGE_STATEMENT = "c = (g^x)(h^r), x is non-negative"
# bit bound on committed values covered by the range proof masks
RANGE_BITS = 4096


@dataclass(frozen=True)
class PoEProof:
    Q: int


@dataclass(frozen=True)
class PoKEStarProof:
    Q: int
    r: int


@dataclass(frozen=True)
class ZKPoKEProof:
    z: int
    Ag: int
    Au: int
    Qg: int
    Qu: int
    rx: int
    rrho: int


@dataclass(frozen=True)
class NonNegativeProof:
    commitments: Tuple[int, int, int, int]
    delta: bytes
    z: Tuple[int, int, int, int]
    t: Tuple[int, int, int, int]
    tt: int


@dataclass(frozen=True)
class IntervalProof:
    lower: NonNegativeProof
    upper: NonNegativeProof


# ============================================================================
# PoE
# ============================================================================

def prove_poe(base: int, mod: int, C: int, x: int) -> PoEProof:
    """
    Prove base^x = C mod ``mod`` for a public exponent x.

    Formula:
    --------
    l := H_poe(base, mod, C, x)
    Q := base^{⌊x / l⌋} mod mod

    Returns
    -------
    PoEProof
        (Q,)
    """
    if x < 0:
        raise PreconditionViolation(f"PoE exponent must be non-negative, got {x}")
    if powmod(base, x, mod) != C % mod:
        raise PreconditionViolation("PoE statement base^x = C does not hold")
    l = H_poe(base, mod, C, x)
    return PoEProof(powmod(base, x // l, mod))


# ============================================================================
# PoKE*
# ============================================================================

def prove_poke_star(G: int, N: int, C: int, x: int) -> PoKEStarProof:
    """
    Prove knowledge of x with G^x = C mod N.

    Formula:
    --------
    l := H_poke_star(G, N, C)
    q, r := divmod(x, l)
    Q := G^q mod N

    The verifier checks Q^l · G^r = C without learning q.

    Raises
    ------
    PreconditionViolation
        If G^x != C mod N
    """
    if powmod(G, x, N) != C % N:
        raise PreconditionViolation("PoKE* statement G^x = C does not hold")
    l = H_poke_star(G, N, C)
    q, r = divmod(x, l)
    return PoKEStarProof(powmod(G, q, N), r)


# ============================================================================
# ZKPoKE
# ============================================================================

def blinding_bound(pp: PublicParameters, security_param: int = None) -> int:
    """B = N · 2^(2λ - 2)."""
    lam = security_param or config.security_param
    return pp.N << (2 * lam - 2)


def prove_zkpoke(pp: PublicParameters, u: int, w: int, x: int,
                 security_param: int = None) -> ZKPoKEProof:
    """
    Zero-knowledge proof of knowledge of x with u^x = w mod N.

    Formula:
    --------
    k, ρ_x, ρ_k ←$ [-B, B]
    z  := G^x · H^{ρ_x}
    Ag := G^k · H^{ρ_k}
    Au := u^k
    c, l := H_zkpoke(G, H, N, u, w, z, Ag, Au)
    q_x, r_x := divmod(k + c·x, l)
    q_ρ, r_ρ := divmod(ρ_k + c·ρ_x, l)
    Qg := G^{q_x} · H^{q_ρ}
    Qu := u^{q_x}

    Parameters
    ----------
    pp : PublicParameters
        {N, G, H}
    u, w : int
        The statement u^x = w; u must be invertible modulo N
    x : int
        The witness
    security_param : int, optional
        λ; ``config.security_param`` by default

    Returns
    -------
    ZKPoKEProof
        (z, Ag, Au, Qg, Qu, r_x, r_ρ)

    Raises
    ------
    PreconditionViolation
        If u^x != w mod N
    """
    N = pp.N
    if powmod(u, x, N) != w % N:
        raise PreconditionViolation("ZKPoKE statement u^x = w does not hold")
    B = blinding_bound(pp, security_param)
    k = random_range(-B, B)
    rho_x = random_range(-B, B)
    rho_k = random_range(-B, B)

    z = commit(pp, x, rho_x)
    Ag = commit(pp, k, rho_k)
    Au = powmod(u, k, N)
    c, l = H_zkpoke(pp.G, pp.H, N, u, w, z, Ag, Au)

    q_x, r_x = divmod(k + c * x, l)
    q_rho, r_rho = divmod(rho_k + c * rho_x, l)
    Qg = commit(pp, q_x, q_rho)
    Qu = powmod(u, q_x, N)
    return ZKPoKEProof(z, Ag, Au, Qg, Qu, r_x, r_rho)


# ============================================================================
# Range proof
# ============================================================================

def hash_group_elements(*elements: int) -> bytes:
    """SHA256(e_1) ‖ SHA256(e_2) ‖ ... over big-endian encodings."""
    return b"".join(hashlib.sha256(int_to_bytes(e)).digest() for e in elements)


def prove_nonnegative(pp: PublicParameters, x: int, r: int, cache: ProofCache = None,
                      cfg: Config = None) -> NonNegativeProof:
    """
    Prove that C = G^x · H^r commits to a non-negative x.

    Formula:
    --------
    x = x_1² + x_2² + x_3² + x_4²
    c_i := G^{x_i} · H^{r_i},                 r_i ←$ [0, N]
    d_i := G^{m_i} · H^{s_i},                 m_i ←$ [0, 2^{B/2+2κ}], s_i ←$ [0, 2^{2κ}·N]
    d   := ∏ c_i^{m_i} · H^s,                 s ←$ [0, 2^{B/2+2κ}·N]
    δ   := SHA256(d_1) ‖ ... ‖ SHA256(d_4) ‖ SHA256(d)
    e   := H_range(statement, G, H, N, C, c_1..c_4, δ)
    z_i := e·x_i + m_i,  t_i := e·r_i + s_i,  t := e·(r - Σ x_i·r_i) + s

    Parameters
    ----------
    pp : PublicParameters
        {N, G, H}
    x : int
        The committed value, 0 <= x < 2^RANGE_BITS
    r : int
        The commitment randomness (any integer)
    cache : ProofCache, optional
        Passed to the four-square search
    cfg : Config, optional
        Security parameter κ and search settings

    Returns
    -------
    NonNegativeProof
        (c_1..c_4, δ, z_1..z_4, t_1..t_4, t)

    Raises
    ------
    PreconditionViolation
        If x is negative or too large
    """
    cfg = cfg or config
    if x < 0:
        raise PreconditionViolation(f"Cannot prove non-negativity of {x}")
    if x.bit_length() > RANGE_BITS:
        raise PreconditionViolation(f"Committed value exceeds {RANGE_BITS} bits")
    N = pp.N
    kappa = cfg.security_param
    C = commit(pp, x, r)

    squares = lagrange_four_squares(x, cache, cfg)
    rs = [random_range(0, N) for _ in range(4)]
    cs = commit_four_squares(pp, squares, rs)

    m_bound = 1 << (RANGE_BITS // 2 + 2 * kappa)
    ms = [random_range(0, m_bound) for _ in range(4)]
    ss = [random_range(0, (1 << (2 * kappa)) * N) for _ in range(4)]
    s = random_range(0, m_bound * N)
    ds = [commit(pp, m_i, s_i) for m_i, s_i in zip(ms, ss)]
    d = mulmod(multi_exp(cs, ms, N), powmod(pp.H, s, N), N)
    delta = hash_group_elements(*ds, d)

    e = H_range(RANGE_STATEMENT, pp.G, pp.H, N, C, cs, delta, kappa)
    z = tuple(e * x_i + m_i for x_i, m_i in zip(squares, ms))
    t = tuple(e * r_i + s_i for r_i, s_i in zip(rs, ss))
    tt = e * (r - sum(x_i * r_i for x_i, r_i in zip(squares, rs))) + s
    return NonNegativeProof(tuple(cs), delta, z, t, tt)


def interval_commitments(pp: PublicParameters, C: int, a: int, b: int) -> Tuple[int, int]:
    """Commitments to x - a and b - x derived from C = G^x · H^r."""
    lower = mulmod(C, powmod(pp.G, -a, pp.N), pp.N)
    upper = mulmod(powmod(pp.G, b, pp.N), powmod(C, -1, pp.N), pp.N)
    return lower, upper


def prove_range(pp: PublicParameters, x: int, r: int, a: int, b: int,
                cache: ProofCache = None, cfg: Config = None) -> IntervalProof:
    """
    Prove a <= x <= b for C = G^x · H^r.

    The lower proof shows x - a >= 0 for C·G^{-a} (randomness r); the upper
    proof shows b - x >= 0 for G^b·C^{-1} (randomness -r).
    """
    if not a <= x <= b:
        raise PreconditionViolation(f"{x} is not in [{a}, {b}]")
    cache = cache or ProofCache()
    lower = prove_nonnegative(pp, x - a, r, cache, cfg)
    upper = prove_nonnegative(pp, b - x, -r, cache, cfg)
    return IntervalProof(lower, upper)
