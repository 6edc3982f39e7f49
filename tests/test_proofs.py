"""
Tests for Exponentiation and Range Proofs
=========================================

Completeness and tamper-rejection of PoE, PoKE*, ZKPoKE, the non-negativity
proof and the interval proof over the fixed 2048-bit group, plus the
commitment helpers they share.
"""

from dataclasses import replace

import pytest

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from rsa_accumulator.bigint import powmod, random_bits, random_range
from rsa_accumulator.commit import commit, commit_four_squares, random_commitment
from rsa_accumulator.config import Config
from rsa_accumulator.errors import PreconditionViolation
from rsa_accumulator.fs_oracles import H_poke_star
from rsa_accumulator.groups import trusted_setup
from rsa_accumulator.pool import ProofCache
from rsa_accumulator.proofs import (PoKEStarProof, blinding_bound, prove_nonnegative, prove_poe,
                                    prove_poke_star, prove_range, prove_zkpoke)
from rsa_accumulator.verify import (verify_nonnegative, verify_poe, verify_poke_star, verify_range,
                                    verify_zkpoke)


@pytest.fixture(scope="module")
def pp():
    return trusted_setup()


@pytest.fixture(scope="module")
def cfg():
    c = Config()
    c.workers = 2
    c.max_trials = None
    return c


@pytest.fixture(scope="module")
def cache():
    return ProofCache()


# ============================================================================
# Commitments
# ============================================================================

class TestCommit:

    def test_commit_formula(self, pp):
        x, r = 12345, 678
        assert commit(pp, x, r) == pow(pp.G, x, pp.N) * pow(pp.H, r, pp.N) % pp.N

    def test_commit_negative_values(self, pp):
        c = commit(pp, -5, -7)
        assert c * commit(pp, 5, 7) % pp.N == 1

    def test_random_commitment(self, pp):
        c, r = random_commitment(pp, 99)
        assert 0 <= r <= pp.N
        assert c == commit(pp, 99, r)

    def test_commit_four_squares(self, pp):
        cs = commit_four_squares(pp, [3, 2, 1, 1], [10, 20, 30, 40])
        assert cs == [commit(pp, 3, 10), commit(pp, 2, 20), commit(pp, 1, 30), commit(pp, 1, 40)]
        with pytest.raises(PreconditionViolation):
            commit_four_squares(pp, [3, 2, 1], [10, 20, 30, 40])


# ============================================================================
# PoE
# ============================================================================

class TestPoE:

    def test_completeness(self, pp):
        x = random_bits(1024)
        C = powmod(pp.G, x, pp.N)
        proof = prove_poe(pp.G, pp.N, C, x)
        assert verify_poe(pp.G, pp.N, C, x, proof)

    def test_small_exponent(self, pp):
        C = powmod(pp.G, 3, pp.N)
        assert verify_poe(pp.G, pp.N, C, 3, prove_poe(pp.G, pp.N, C, 3))

    def test_tampered(self, pp):
        x = random_bits(512)
        C = powmod(pp.G, x, pp.N)
        proof = prove_poe(pp.G, pp.N, C, x)
        assert not verify_poe(pp.G, pp.N, C, x + 1, proof)
        assert not verify_poe(pp.G, pp.N, C, x, replace(proof, Q=proof.Q + 1))
        assert not verify_poe(pp.G, pp.N, C * pp.G % pp.N, x, proof)

    def test_false_statement(self, pp):
        C = powmod(pp.G, 5, pp.N)
        with pytest.raises(PreconditionViolation):
            prove_poe(pp.G, pp.N, C, 6)

    def test_negative_exponent(self, pp):
        with pytest.raises(PreconditionViolation):
            prove_poe(pp.G, pp.N, 1, -1)
        assert not verify_poe(pp.G, pp.N, 1, -1, prove_poe(pp.G, pp.N, 1, 0))


# ============================================================================
# PoKE*
# ============================================================================

class TestPoKEStar:

    def test_completeness(self, pp):
        x = random_bits(2048)
        C = powmod(pp.G, x, pp.N)
        assert verify_poke_star(pp.G, pp.N, C, prove_poke_star(pp.G, pp.N, C, x))

    def test_wrong_witness(self, pp):
        x = random_bits(300)
        C = powmod(pp.G, x, pp.N)
        with pytest.raises(PreconditionViolation):
            prove_poke_star(pp.G, pp.N, C, x + 1)

    def test_tampered(self, pp):
        x = random_bits(300)
        C = powmod(pp.G, x, pp.N)
        proof = prove_poke_star(pp.G, pp.N, C, x)
        assert not verify_poke_star(pp.G, pp.N, C, replace(proof, r=proof.r + 1))
        assert not verify_poke_star(pp.G, pp.N, C, replace(proof, Q=proof.Q + 1))

    def test_remainder_out_of_range(self, pp):
        x = random_bits(300)
        C = powmod(pp.G, x, pp.N)
        proof = prove_poke_star(pp.G, pp.N, C, x)
        l = H_poke_star(pp.G, pp.N, C)
        # satisfies Q'^l · G^r' = C but r' >= l
        forged = PoKEStarProof(proof.Q * powmod(pp.G, -1, pp.N) % pp.N, proof.r + l)
        assert not verify_poke_star(pp.G, pp.N, C, forged)


# ============================================================================
# ZKPoKE
# ============================================================================

class TestZKPoKE:

    def test_blinding_bound(self, pp):
        assert blinding_bound(pp, 128) == pp.N * 2 ** 254

    def test_completeness(self, pp):
        x = random_bits(256)
        u = pp.H
        w = powmod(u, x, pp.N)
        proof = prove_zkpoke(pp, u, w, x)
        assert verify_zkpoke(pp, u, w, proof)

    def test_negative_witness(self, pp):
        x = -random_bits(128)
        u = pp.G
        w = powmod(u, x, pp.N)
        assert verify_zkpoke(pp, u, w, prove_zkpoke(pp, u, w, x, security_param=64))

    def test_wrong_statement(self, pp):
        x = random_bits(256)
        u = pp.H
        w = powmod(u, x, pp.N)
        proof = prove_zkpoke(pp, u, w, x)
        assert not verify_zkpoke(pp, u, w * pp.G % pp.N, proof)

    def test_false_statement(self, pp):
        w = powmod(pp.H, 5, pp.N)
        with pytest.raises(PreconditionViolation):
            prove_zkpoke(pp, pp.H, w, 6)
        with pytest.raises(PreconditionViolation):
            prove_zkpoke(pp, pp.H, w * pp.G % pp.N, 5)

    def test_tampered(self, pp):
        x = random_bits(256)
        u = pp.H
        w = powmod(u, x, pp.N)
        proof = prove_zkpoke(pp, u, w, x)
        assert not verify_zkpoke(pp, u, w, replace(proof, rx=proof.rx + 1))
        assert not verify_zkpoke(pp, u, w, replace(proof, rrho=proof.rrho + 1))
        assert not verify_zkpoke(pp, u, w, replace(proof, Qu=proof.Qu * pp.G % pp.N))
        assert not verify_zkpoke(pp, u, w, replace(proof, z=proof.z * pp.G % pp.N))

    def test_proofs_are_randomized(self, pp):
        u, x = pp.H, 77
        w = powmod(u, x, pp.N)
        assert prove_zkpoke(pp, u, w, x).z != prove_zkpoke(pp, u, w, x).z


# ============================================================================
# Non-negativity and interval proofs
# ============================================================================

class TestRangeProofs:

    @pytest.mark.parametrize("x", [0, 1, 7, 12345, 2 ** 200 + 3])
    def test_nonnegative_completeness(self, pp, cache, cfg, x):
        r = random_range(0, pp.N)
        C = commit(pp, x, r)
        proof = prove_nonnegative(pp, x, r, cache, cfg)
        assert len(proof.commitments) == 4 and len(proof.delta) == 5 * 32
        assert verify_nonnegative(pp, C, proof, cfg)

    def test_nonnegative_wrong_commitment(self, pp, cache, cfg):
        r = random_range(0, pp.N)
        proof = prove_nonnegative(pp, 99, r, cache, cfg)
        assert not verify_nonnegative(pp, commit(pp, 98, r), proof, cfg)
        assert not verify_nonnegative(pp, commit(pp, 99, r + 1), proof, cfg)

    def test_nonnegative_tampered(self, pp, cache, cfg):
        r = random_range(0, pp.N)
        C = commit(pp, 500, r)
        proof = prove_nonnegative(pp, 500, r, cache, cfg)
        z = (proof.z[0] + 1,) + proof.z[1:]
        t = (proof.t[0] + 1,) + proof.t[1:]
        assert not verify_nonnegative(pp, C, replace(proof, z=z), cfg)
        assert not verify_nonnegative(pp, C, replace(proof, t=t), cfg)
        assert not verify_nonnegative(pp, C, replace(proof, tt=proof.tt + 1), cfg)
        assert not verify_nonnegative(pp, C, replace(proof, delta=bytes(160)), cfg)

    def test_nonnegative_malformed(self, pp, cache, cfg):
        r = random_range(0, pp.N)
        C = commit(pp, 5, r)
        proof = prove_nonnegative(pp, 5, r, cache, cfg)
        assert not verify_nonnegative(pp, C, replace(proof, commitments=proof.commitments[:3]), cfg)
        assert not verify_nonnegative(pp, C, replace(proof, z=proof.z + (1,)), cfg)

    def test_negative_value_rejected(self, pp, cache, cfg):
        with pytest.raises(PreconditionViolation):
            prove_nonnegative(pp, -1, 5, cache, cfg)

    def test_interval_completeness(self, pp, cache, cfg):
        r = random_range(0, pp.N)
        x, a, b = 50, 10, 100
        C = commit(pp, x, r)
        proof = prove_range(pp, x, r, a, b, cache, cfg)
        assert verify_range(pp, C, a, b, proof, cfg)

    def test_interval_endpoints(self, pp, cache, cfg):
        r = random_range(0, pp.N)
        for x in (10, 100):
            C = commit(pp, x, r)
            assert verify_range(pp, C, 10, 100, prove_range(pp, x, r, 10, 100, cache, cfg), cfg)

    def test_interval_wrong_bounds(self, pp, cache, cfg):
        r = random_range(0, pp.N)
        C = commit(pp, 50, r)
        proof = prove_range(pp, 50, r, 10, 100, cache, cfg)
        assert not verify_range(pp, C, 60, 100, proof, cfg)
        assert not verify_range(pp, C, 10, 40, proof, cfg)
        assert not verify_range(pp, C, 100, 10, proof, cfg)

    def test_interval_out_of_range(self, pp, cache, cfg):
        with pytest.raises(PreconditionViolation):
            prove_range(pp, 5, 1, 10, 100, cache, cfg)
        with pytest.raises(PreconditionViolation):
            prove_range(pp, 101, 1, 10, 100, cache, cfg)
