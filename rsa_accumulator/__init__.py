"""
RSA Accumulator and Proofs of Exponentiation
============================================

An accumulator over the hidden-order group Z*_N (N a product of two safe
primes) with O(n log n) batch membership proofs, sum-of-squares
decompositions in the Gaussian integers and Hurwitz quaternions, and the
PoE / PoKE* / ZKPoKE / range-proof protocols built on a Fiat-Shamir
transcript.

Modules:
--------
- groups: Safe-prime setup, QR_N generators, fixed 2048-bit parameters
- encoding: Hash-to-prime and division-intractable hash representatives
- accumulator: Accumulate, batch membership proofs (sequential, parallel, iterative)
- gaussian / hurwitz: Euclidean rings Z[i] and the Hurwitz order
- squares: Four-, three- and two-square decompositions
- fs_oracles: Fiat-Shamir transcript and protocol oracles
- commit: Pedersen-style integer commitments
- proofs: PoE, PoKE*, ZKPoKE and range-proof generation
- verify: Matching verifiers
- pool: Explicitly scoped caches and object pools
- serialization: Decimal/base64 JSON encodings
- utils: Product trees, multi-exponentiation, logging setup

Usage:
------
    from rsa_accumulator import trusted_setup, acc_and_prove, EncodeType
    from rsa_accumulator.accumulator import verify_membership

    params = trusted_setup()
    result = acc_and_prove([b"alice", b"bob"], EncodeType.HASH_TO_PRIME, params)
    assert verify_membership(result.acc, result.representatives[0], result.proofs[0], params.N)
"""

__version__ = "0.1.0"
__author__ = "RSA Accumulator Implementation"

from .accumulator import RSAAccumulator, acc_and_prove, accumulate, prove_membership_parallel
from .encoding import EncodeType, di_hash, hash_to_prime
from .groups import GroupSetup, PublicParameters, setup, trusted_setup
from .squares import lagrange_four_squares

__all__ = ['setup', 'trusted_setup', 'GroupSetup', 'PublicParameters', 'EncodeType',
           'hash_to_prime', 'di_hash', 'accumulate', 'prove_membership_parallel',
           'acc_and_prove', 'RSAAccumulator', 'lagrange_four_squares']
