"""
Error Taxonomy
==============

All failures raised by the library derive from :class:`AccumulatorError`.

- PreconditionViolation: invalid input shape (non-positive modulus, negative
  exponent, mismatched lengths). Never retried.
- RandomnessExhausted: the entropy source failed. Fatal.
- TrialFailed: a randomized search ran out of the trials its caller allowed.
- VerificationFailed: a freshly generated object failed its own self-check.

Verifiers never raise for a bad proof; they return False.
"""


class AccumulatorError(Exception):
    """Base class for every error raised by rsa_accumulator."""


class PreconditionViolation(AccumulatorError, ValueError):
    """Invalid input; rejected immediately."""


class RandomnessExhausted(AccumulatorError):
    """The system entropy source could not provide random bytes."""


class TrialFailed(AccumulatorError):
    """A randomized search exhausted its trial budget without a witness."""


class VerificationFailed(AccumulatorError):
    """A generated result did not pass its own consistency check."""
