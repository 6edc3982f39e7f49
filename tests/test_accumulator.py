"""
Tests for the RSA Accumulator
=============================

Accumulation, the four batch membership proof strategies, positional
stability of the proofs, and the element-level entry points.
"""

import pytest

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from rsa_accumulator.accumulator import (ProofTreeNode, RSAAccumulator, acc_and_prove, accumulate,
                                         accumulate_iter, prove_membership, prove_membership_iter,
                                         prove_membership_naive, prove_membership_parallel,
                                         verify_membership, zk_accumulate)
from rsa_accumulator.config import Config
from rsa_accumulator.encoding import EncodeType, gen_representatives, hash_to_prime
from rsa_accumulator.errors import PreconditionViolation
from rsa_accumulator.groups import trusted_setup
from rsa_accumulator.utils import chunked, multi_exp, set_product, set_product_parallel

# toy group: 11 generates QR_23
TOY_N = 23
TOY_G = 11
SIZES = [1, 2, 3, 4, 5, 16, 17]


@pytest.fixture(scope="module")
def params():
    return trusted_setup()


@pytest.fixture(scope="module")
def primes():
    """Distinct 256-bit prime representatives."""
    return [hash_to_prime(f"member-{i}") for i in range(17)]


def expected_proofs(base, reps, N):
    return [pow(base, set_product(reps[:i] + reps[i + 1:]), N) for i in range(len(reps))]


# ============================================================================
# Toy group
# ============================================================================

class TestToyGroup:

    def test_accumulate(self):
        assert accumulate(TOY_G, [3, 5, 7], TOY_N) == pow(11, 105, 23)

    def test_proof_of_three(self):
        proofs = prove_membership(TOY_G, TOY_N, [3, 5, 7])
        assert proofs[0] == pow(11, 35, 23)
        assert proofs[1] == pow(11, 21, 23)
        assert proofs[2] == pow(11, 15, 23)

    def test_proofs_verify(self):
        acc = accumulate(TOY_G, [3, 5, 7], TOY_N)
        for rep, proof in zip([3, 5, 7], prove_membership(TOY_G, TOY_N, [3, 5, 7])):
            assert verify_membership(acc, rep, proof, TOY_N)

    def test_accumulate_iter_agrees(self):
        assert accumulate_iter(TOY_G, [3, 5, 7], TOY_N) == accumulate(TOY_G, [3, 5, 7], TOY_N)

    def test_order_independent(self):
        assert accumulate(TOY_G, [7, 3, 5], TOY_N) == accumulate(TOY_G, [3, 5, 7], TOY_N)


# ============================================================================
# Batch proof strategies
# ============================================================================

class TestBatchProofs:

    @pytest.mark.parametrize("n", SIZES)
    def test_sequential_matches_definition(self, params, primes, n):
        reps = primes[:n]
        assert prove_membership(params.G, params.N, reps) == expected_proofs(params.G, reps, params.N)

    @pytest.mark.parametrize("n", SIZES)
    @pytest.mark.parametrize("budget", [0, 1, 2, 3])
    def test_parallel_matches_sequential(self, params, primes, n, budget):
        reps = primes[:n]
        sequential = prove_membership(params.G, params.N, reps)
        assert prove_membership_parallel(params.G, params.N, reps, budget) == sequential

    @pytest.mark.parametrize("n", SIZES)
    def test_iterative_and_naive_match(self, params, primes, n):
        reps = primes[:n]
        sequential = prove_membership(params.G, params.N, reps)
        assert prove_membership_iter(params.G, params.N, reps) == sequential
        assert prove_membership_naive(params.G, params.N, reps) == sequential

    def test_every_proof_verifies(self, params, primes):
        acc = accumulate(params.G, primes, params.N)
        proofs = prove_membership_parallel(params.G, params.N, primes, 2)
        for rep, proof in zip(primes, proofs):
            assert verify_membership(acc, rep, proof, params.N)

    def test_positional_stability(self, params, primes):
        reps = primes[:9]
        shuffled = reps[::-1]
        forward = prove_membership_parallel(params.G, params.N, reps, 2)
        backward = prove_membership_parallel(params.G, params.N, shuffled, 2)
        assert forward == backward[::-1]

    def test_duplicate_representatives(self, params, primes):
        reps = [primes[0], primes[1], primes[0]]
        acc = accumulate(params.G, reps, params.N)
        proofs = prove_membership(params.G, params.N, reps)
        assert proofs[0] == proofs[2]
        assert all(verify_membership(acc, e, w, params.N) for e, w in zip(reps, proofs))

    def test_wrong_representative_rejected(self, params, primes):
        reps = primes[:4]
        acc = accumulate(params.G, reps, params.N)
        proofs = prove_membership(params.G, params.N, reps)
        assert not verify_membership(acc, primes[5], proofs[0], params.N)
        assert not verify_membership(acc, reps[1], proofs[0], params.N)

    def test_verify_rejects_malformed(self, params):
        assert not verify_membership(5, 3, 0, params.N)
        assert not verify_membership(5, 3, params.N, params.N)
        assert not verify_membership(5, 0, 4, params.N)
        assert not verify_membership(5, 3, 4, 1)


# ============================================================================
# Edge cases and preconditions
# ============================================================================

class TestPreconditions:

    def test_empty_set(self, params):
        assert accumulate(params.G, [], params.N) == params.G
        assert accumulate_iter(params.G, [], params.N) == params.G
        assert prove_membership(params.G, params.N, []) == []
        assert prove_membership_parallel(params.G, params.N, [], 2) == []
        assert prove_membership_iter(params.G, params.N, []) == []

    def test_non_positive_representative(self):
        with pytest.raises(PreconditionViolation):
            accumulate(TOY_G, [3, 0, 7], TOY_N)
        with pytest.raises(PreconditionViolation):
            prove_membership(TOY_G, TOY_N, [3, -5])

    def test_bad_base_or_modulus(self):
        with pytest.raises(PreconditionViolation):
            accumulate(0, [3], TOY_N)
        with pytest.raises(PreconditionViolation):
            accumulate(TOY_N, [3], TOY_N)
        with pytest.raises(PreconditionViolation):
            prove_membership(TOY_G, 1, [3])

    def test_negative_budget(self):
        with pytest.raises(PreconditionViolation):
            prove_membership_parallel(TOY_G, TOY_N, [3, 5], -1)
        with pytest.raises(PreconditionViolation):
            accumulate(TOY_G, [3, 5], TOY_N, budget=-1)

    def test_proof_tree_node(self):
        node = ProofTreeNode(2, 7, 11)
        assert len(node) == 5
        assert node.mid == 4


# ============================================================================
# Element-level entry points
# ============================================================================

class TestAccAndProve:

    @pytest.mark.parametrize("encode_type", list(EncodeType))
    def test_acc_and_prove(self, params, encode_type):
        elements = [f"elem-{i}".encode() for i in range(6)]
        result = acc_and_prove(elements, encode_type, params, budget=1)
        assert result.representatives == gen_representatives(elements, encode_type)
        assert result.acc == accumulate(params.G, result.representatives, params.N)
        assert result.base == params.G
        for rep, proof in zip(result.representatives, result.proofs):
            assert verify_membership(result.acc, rep, proof, params.N)

    def test_acc_and_prove_empty(self, params):
        result = acc_and_prove([], EncodeType.HASH_TO_PRIME, params, budget=0)
        assert result.acc == params.G
        assert result.proofs == []

    def test_zk_accumulate(self, params):
        cfg = Config()
        cfg.workers = 2
        elements = [b"a", b"b", b"c", b"d"]
        result = zk_accumulate(elements, EncodeType.DI_HASH, params, cfg=cfg)
        assert result.base != params.G
        assert result.acc == accumulate(result.base, result.representatives, params.N)
        for rep, proof in zip(result.representatives, result.proofs):
            assert verify_membership(result.acc, rep, proof, params.N)

    def test_zk_accumulate_blinds(self, params):
        first = zk_accumulate([b"a", b"b"], EncodeType.HASH_TO_PRIME, params, budget=0)
        second = zk_accumulate([b"a", b"b"], EncodeType.HASH_TO_PRIME, params, budget=0)
        assert first.acc != second.acc
        assert first.representatives == second.representatives


class TestRSAAccumulator:

    def test_prove_and_verify(self, params):
        acc = RSAAccumulator(params, budget=1)
        elements = [b"alice", b"bob", b"carol"]
        result = acc.prove(elements)
        assert result.acc == acc.accumulate(elements)
        assert acc.verify(result.acc, b"bob", result.proofs[1])
        assert not acc.verify(result.acc, b"mallory", result.proofs[1])

    def test_prove_element(self, params):
        acc = RSAAccumulator(params, EncodeType.DI_HASH, budget=0)
        elements = [b"x", b"y", b"z"]
        result = acc.prove(elements)
        assert acc.prove_element(elements, 2) == result.proofs[2]
        with pytest.raises(PreconditionViolation):
            acc.prove_element(elements, 3)

    def test_encode(self, params):
        acc = RSAAccumulator(params)
        assert acc.encode(b"q") == hash_to_prime(b"q")


# ============================================================================
# Product helpers
# ============================================================================

class TestProducts:

    def test_set_product(self):
        assert set_product([]) == 1
        assert set_product([7]) == 7
        assert set_product([2, 3, 5, 7, 11]) == 2310

    @pytest.mark.parametrize("budget", [0, 1, 2, 4])
    def test_set_product_parallel(self, primes, budget):
        assert set_product_parallel(primes, budget) == set_product(primes)

    def test_big_factors(self, primes):
        expected = 1
        for p in primes:
            expected *= p
        assert set_product(primes) == expected

    def test_multi_exp(self):
        assert multi_exp([2, 3], [5, 4], 101) == (2 ** 5 * 3 ** 4) % 101
        assert multi_exp([], [], 101) == 1
        with pytest.raises(PreconditionViolation):
            multi_exp([2], [1, 2], 101)

    def test_chunked(self):
        assert chunked([1, 2, 3, 4, 5], 2) == [[1, 2], [3, 4], [5]]
