"""
Library configuration.

Defaults are read from the environment once at import time and copied into a
:class:`Config` instance. Functions that accept a ``cfg`` argument fall back to
the module-level ``config`` object.
"""

import os

# Group parameters
DEFAULT_RSA_BITS = int(os.getenv('RSA_ACC_BITS', 2048))
DEFAULT_SECURITY_PARAM = int(os.getenv('RSA_ACC_SECURITY_PARAM', 128))

# Miller-Rabin rounds
DEFAULT_HASH_TO_PRIME_ROUNDS = int(os.getenv('RSA_ACC_HASH_ROUNDS', 10))
DEFAULT_CHALLENGE_PRIME_ROUNDS = int(os.getenv('RSA_ACC_CHALLENGE_ROUNDS', 30))
DEFAULT_SAFE_PRIME_ROUNDS = int(os.getenv('RSA_ACC_SAFE_PRIME_ROUNDS', 64))

# Workers for racing searches and proof trees; 0 means "use os.cpu_count()"
DEFAULT_WORKERS = int(os.getenv('RSA_ACC_WORKERS', 0))

# Per-worker trial budget for randomized searches; 0 means unbounded
DEFAULT_MAX_TRIALS = int(os.getenv('RSA_ACC_MAX_TRIALS', 0))

# Inputs at or above 2^DEFAULT_LARGE_BITS use the large four-square variant
DEFAULT_LARGE_BITS = int(os.getenv('RSA_ACC_LARGE_BITS', 1500))

DEFAULT_LOG_LEVEL = os.getenv('RSA_ACC_LOG_LEVEL', 'WARNING')


def cal_num_workers(cpus: int = None):
    """
    Return the largest power of two not above ``cpus`` and its log2.

    >>> cal_num_workers(12)
    (8, 3)
    """
    if cpus is None:
        cpus = os.cpu_count() or 1
    if cpus < 1:
        cpus = 1
    depth = cpus.bit_length() - 1
    return 1 << depth, depth


class Config:
    """Runtime settings shared by setup, search and proof routines."""

    def __init__(self):
        self.rsa_bits = DEFAULT_RSA_BITS
        self.security_param = DEFAULT_SECURITY_PARAM
        self.hash_to_prime_rounds = DEFAULT_HASH_TO_PRIME_ROUNDS
        self.challenge_prime_rounds = DEFAULT_CHALLENGE_PRIME_ROUNDS
        self.safe_prime_rounds = DEFAULT_SAFE_PRIME_ROUNDS
        self.workers = DEFAULT_WORKERS or (os.cpu_count() or 1)
        self.max_trials = DEFAULT_MAX_TRIALS or None
        self.large_bits = DEFAULT_LARGE_BITS
        self.log_level = DEFAULT_LOG_LEVEL

    @property
    def parallelism_budget(self):
        """Depth of the proof tree that is split into concurrent tasks."""
        return cal_num_workers(self.workers)[1]


# Global configuration instance
config = Config()
