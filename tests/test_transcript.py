"""
Tests for the Fiat-Shamir Transcript
====================================

Determinism of challenges, the append-on-challenge rule, prime challenges,
and the protocol oracles built on top of the transcript.
"""

import hashlib

import gmpy2
import pytest

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from rsa_accumulator.errors import PreconditionViolation
from rsa_accumulator.fs_oracles import MAX_252, H_poe, H_poke_star, H_range, H_zkpoke, Transcript


# ============================================================================
# Transcript
# ============================================================================

class TestTranscript:

    def test_int_challenge_value(self):
        t = Transcript(["alpha", "beta"])
        expected = int.from_bytes(hashlib.sha256(b"alphabeta").digest(), 'big') % MAX_252
        assert t.int_challenge() == expected

    def test_bulk_and_incremental_agree(self):
        bulk = Transcript(["a", "b", 3])
        incremental = Transcript()
        incremental.append("a")
        incremental.extend(["b", 3])
        assert bulk.entries == incremental.entries
        assert bulk.int_challenge() == incremental.int_challenge()
        assert bulk.prime_challenge() == incremental.prime_challenge()

    def test_from_list(self):
        assert Transcript.from_list(["x", 1]).entries == ("x", "1")

    def test_challenge_is_appended(self):
        t = Transcript(["seed"])
        c = t.int_challenge()
        assert len(t) == 2
        assert t.entries[-1] == str(c)

    def test_consecutive_challenges_differ(self):
        t = Transcript(["seed"])
        values = [t.int_challenge() for _ in range(5)]
        assert len(set(values)) == 5

    def test_no_repeat_under_tiny_bound(self):
        t = Transcript(["seed"], max_value=2)
        values = [t.int_challenge() for _ in range(40)]
        assert set(values) == {0, 1}
        assert all(a != b for a, b in zip(values, values[1:]))

    def test_no_repeat_is_deterministic(self):
        a = Transcript(["seed"], max_value=3)
        b = Transcript(["seed"], max_value=3)
        assert [a.int_challenge() for _ in range(20)] == [b.int_challenge() for _ in range(20)]

    def test_prime_challenges_do_not_repeat(self):
        t = Transcript(["seed"], max_value=16)
        values = [t.prime_challenge() for _ in range(20)]
        assert set(values) <= {2, 3, 5, 7, 11, 13}
        assert all(a != b for a, b in zip(values, values[1:]))

    def test_bound_too_small(self):
        with pytest.raises(PreconditionViolation):
            Transcript(["seed"], max_value=1)

    def test_prime_challenge(self):
        t = Transcript(["prime", 42])
        for _ in range(3):
            l = t.prime_challenge()
            assert 0 < l < MAX_252
            assert gmpy2.is_prime(l, 30)
            assert t.entries[-1] == str(l)

    def test_custom_bound(self):
        t = Transcript(["small"], max_value=1 << 16)
        assert 0 <= t.int_challenge() < 1 << 16
        assert t.prime_challenge() < 1 << 16

    def test_reset(self):
        t = Transcript(["a", "b"])
        t.int_challenge()
        t.reset(["a", "b"])
        assert t.int_challenge() == Transcript(["a", "b"]).int_challenge()

    def test_iteration(self):
        assert list(Transcript(["p", "q"])) == ["p", "q"]

    def test_dump(self):
        text = Transcript(["x", "y"]).dump()
        lines = text.splitlines()
        assert lines[0] == "The transcript has 2 strings as info."
        assert lines[1] == "Info[0] = x"
        assert lines[2] == "Info[1] = y"

    def test_entries_are_a_snapshot(self):
        t = Transcript(["a"])
        snapshot = t.entries
        t.append("b")
        assert snapshot == ("a",)


# ============================================================================
# Oracles
# ============================================================================

class TestOracles:

    def test_poe_oracle(self):
        l = H_poe(4, 1081, 16, 2)
        assert l == H_poe(4, 1081, 16, 2)
        assert gmpy2.is_prime(l, 30)
        assert l != H_poe(4, 1081, 16, 3)

    def test_poke_star_oracle(self):
        l = H_poke_star(4, 1081, 16)
        assert gmpy2.is_prime(l, 30)
        assert l < MAX_252

    def test_domain_separation(self):
        assert H_poke_star(4, 1081, 16) != H_poe(4, 1081, 16, 2)

    def test_zkpoke_oracle(self):
        c, l = H_zkpoke(4, 9, 1081, 4, 16, 5, 6, 7)
        assert 0 <= c < MAX_252
        assert gmpy2.is_prime(l, 30)
        assert (c, l) == H_zkpoke(4, 9, 1081, 4, 16, 5, 6, 7)

    @pytest.mark.parametrize("kappa", [8, 64, 128])
    def test_range_oracle(self, kappa):
        e = H_range("statement", 4, 9, 1081, 16, [1, 2, 3, 4], b"\x01\x02", kappa)
        assert 0 <= e < 1 << kappa
        assert e == H_range("statement", 4, 9, 1081, 16, [1, 2, 3, 4], b"\x01\x02", kappa)

    def test_range_oracle_binds_commitment(self):
        args = ("statement", 4, 9, 1081)
        e1 = H_range(*args, 16, [1, 2, 3, 4], b"\x01", 128)
        e2 = H_range(*args, 17, [1, 2, 3, 4], b"\x01", 128)
        e3 = H_range(*args, 16, [1, 2, 3, 4], b"\x02", 128)
        assert len({e1, e2, e3}) == 3
