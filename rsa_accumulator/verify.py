"""
Verification Equations
======================

This module implements the verifiers matching ``proofs.py``. Each verifier
recomputes the Fiat-Shamir challenges from public data and checks the
protocol equation mod N:

- PoE:        Q^l · base^{x mod l} = C
- PoKE*:      Q^l · G^r = C,  0 <= r < l
- ZKPoKE:     Qg^l · G^{r_x} · H^{r_ρ} = Ag · z^c  and  Qu^l · u^{r_x} = Au · w^c
- Range:      δ = H(G^{z_i} H^{t_i} c_i^{-e} ..., ∏ c_i^{z_i} · H^t · C^{-e})

Verifiers always return a bool. Malformed input (wrong shapes, elements not
invertible modulo N) yields False rather than an exception.
"""

from .bigint import mulmod, powmod
from .config import Config, config
from .errors import PreconditionViolation
from .fs_oracles import H_poe, H_poke_star, H_range, H_zkpoke
from .groups import PublicParameters
from .proofs import (RANGE_STATEMENT, IntervalProof, NonNegativeProof, PoEProof, PoKEStarProof,
                     ZKPoKEProof, hash_group_elements, interval_commitments)
from .utils import multi_exp


def verify_poe(base: int, mod: int, C: int, x: int, proof: PoEProof) -> bool:
    """
    Verify a proof of exponentiation base^x = C.

    Formula:
    --------
    l := H_poe(base, mod, C, x)
    Q^l · base^{x mod l} =? C mod mod
    """
    if x < 0 or mod < 2:
        return False
    l = H_poe(base, mod, C, x)
    lhs = mulmod(powmod(proof.Q, l, mod), powmod(base, x % l, mod), mod)
    return lhs == C % mod


def verify_poke_star(G: int, N: int, C: int, proof: PoKEStarProof) -> bool:
    """
    Verify knowledge of x with G^x = C.

    Formula:
    --------
    l := H_poke_star(G, N, C)
    Q^l · G^r =? C mod N, with 0 <= r < l
    """
    if N < 2:
        return False
    l = H_poke_star(G, N, C)
    if not 0 <= proof.r < l:
        return False
    try:
        lhs = mulmod(powmod(proof.Q, l, N), powmod(G, proof.r, N), N)
    except PreconditionViolation:
        return False
    return lhs == C % N


def verify_zkpoke(pp: PublicParameters, u: int, w: int, proof: ZKPoKEProof) -> bool:
    """
    Verify a zero-knowledge proof of knowledge of x with u^x = w.

    Formula:
    --------
    c, l := H_zkpoke(G, H, N, u, w, z, Ag, Au)
    Qg^l · G^{r_x} · H^{r_ρ} =? Ag · z^c mod N
    Qu^l · u^{r_x}          =? Au · w^c mod N
    with 0 <= r_x, r_ρ < l

    Returns
    -------
    bool
        True if both equations hold, False otherwise
    """
    N = pp.N
    c, l = H_zkpoke(pp.G, pp.H, N, u, w, proof.z, proof.Ag, proof.Au)
    if not (0 <= proof.rx < l and 0 <= proof.rrho < l):
        return False
    try:
        lhs_g = multi_exp([proof.Qg, pp.G, pp.H], [l, proof.rx, proof.rrho], N)
        rhs_g = mulmod(proof.Ag, powmod(proof.z, c, N), N)
        lhs_u = mulmod(powmod(proof.Qu, l, N), powmod(u, proof.rx, N), N)
        rhs_u = mulmod(proof.Au, powmod(w, c, N), N)
    except PreconditionViolation:
        return False
    return lhs_g == rhs_g and lhs_u == rhs_u


def verify_nonnegative(pp: PublicParameters, C: int, proof: NonNegativeProof,
                       cfg: Config = None) -> bool:
    """
    Verify that C commits to a non-negative integer.

    Formula:
    --------
    e    := H_range(statement, G, H, N, C, c_1..c_4, δ)
    d_i' := G^{z_i} · H^{t_i} · c_i^{-e}
    d'   := ∏ c_i^{z_i} · H^t · C^{-e}
    SHA256(d_1') ‖ ... ‖ SHA256(d_4') ‖ SHA256(d') =? δ

    Notes
    -----
    Substituting the responses gives d_i' = G^{m_i} H^{s_i} and, because
    Σ x_i² = x, d' = ∏ c_i^{m_i} · H^s: the prover's first message.
    """
    cfg = cfg or config
    N = pp.N
    if len(proof.commitments) != 4 or len(proof.z) != 4 or len(proof.t) != 4:
        return False
    e = H_range(RANGE_STATEMENT, pp.G, pp.H, N, C, proof.commitments, proof.delta,
                cfg.security_param)
    try:
        ds = [multi_exp([pp.G, pp.H, c_i], [z_i, t_i, -e], N)
              for c_i, z_i, t_i in zip(proof.commitments, proof.z, proof.t)]
        d = mulmod(multi_exp(list(proof.commitments), list(proof.z), N),
                   multi_exp([pp.H, C], [proof.tt, -e], N), N)
    except PreconditionViolation:
        return False
    return hash_group_elements(*ds, d) == proof.delta


def verify_range(pp: PublicParameters, C: int, a: int, b: int, proof: IntervalProof,
                 cfg: Config = None) -> bool:
    """Verify a <= x <= b for C = G^x · H^r."""
    if a > b:
        return False
    try:
        lower, upper = interval_commitments(pp, C, a, b)
    except PreconditionViolation:
        return False
    return (verify_nonnegative(pp, lower, proof.lower, cfg)
            and verify_nonnegative(pp, upper, proof.upper, cfg))
