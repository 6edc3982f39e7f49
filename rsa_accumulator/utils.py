"""
Utility Functions
=================

This module provides the product and multi-exponentiation helpers shared by
the accumulator, commitment and proof modules, plus logging setup.

Key Operations:
- Set product: ∏ e_i via a balanced product tree (numpy object arrays)
- Parallel set product: the leaves of the tree split across worker threads
- Multi-exponentiation: ∏ g_i^{e_i} mod N
- Logging: optional stream/rotating-file handlers for the package logger
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from logging.handlers import RotatingFileHandler
from typing import List, Sequence

import numpy as np

from .bigint import mulmod, powmod
from .errors import PreconditionViolation

_ONE = np.array([1], dtype=object)


def set_product(values: Sequence[int]) -> int:
    """
    Compute ∏ values with a balanced product tree.

    Formula:
    --------
    level_{t+1}[k] = level_t[2k] · level_t[2k+1]

    Parameters
    ----------
    values : Sequence[int]
        The factors (arbitrary size)

    Returns
    -------
    int
        The product; 1 for an empty sequence

    Notes
    -----
    Pairing factors of similar size keeps every big multiplication balanced,
    which is much faster than a left-to-right fold for thousands of 256-bit
    representatives.
    """
    if len(values) == 0:
        return 1
    level = np.array(list(values), dtype=object)
    while len(level) > 1:
        if len(level) % 2:
            level = np.concatenate([level, _ONE])
        level = level[0::2] * level[1::2]
    return int(level[0])


def set_product_parallel(values: Sequence[int], budget: int) -> int:
    """
    Product tree whose 2^budget subtrees run as concurrent tasks.

    Parameters
    ----------
    values : Sequence[int]
        The factors
    budget : int
        Depth of the split; 0 falls back to ``set_product``
    """
    if budget < 0:
        raise PreconditionViolation(f"Parallelism budget must be non-negative, got {budget}")
    chunks = min(1 << budget, len(values))
    if chunks <= 1:
        return set_product(values)
    size = -(-len(values) // chunks)
    parts = chunked(values, size)
    with ThreadPoolExecutor(max_workers=len(parts)) as executor:
        partials = list(executor.map(set_product, parts))
    return set_product(partials)


def multi_exp(bases: Sequence[int], exponents: Sequence[int], N: int) -> int:
    """
    Compute ∏ bases[i]^{exponents[i]} mod N.

    Negative exponents use the inverse of the base. An empty product is 1.
    """
    if len(bases) != len(exponents):
        raise PreconditionViolation(
            f"bases and exponents must have same length: {len(bases)} != {len(exponents)}")
    result = 1
    for b, e in zip(bases, exponents):
        result = mulmod(result, powmod(b, e, N), N)
    return result


def chunked(values: Sequence[int], size: int) -> List[Sequence[int]]:
    return [values[i:i + size] for i in range(0, len(values), size)]


def init_logging(level: str = "INFO", log_file: str = None, console: bool = True,
                 max_bytes: int = 10 * 1024 * 1024, backup_count: int = 5) -> logging.Logger:
    """
    Attach handlers to the ``rsa_accumulator`` logger.

    :param level: logging level name, e.g. "DEBUG"
    :param log_file: rotating log file; no file handler when None
    :param console: also log to stderr
    :param max_bytes: size at which the log file rotates
    :param backup_count: number of rotated files kept
    """
    logger = logging.getLogger("rsa_accumulator")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    fmt = logging.Formatter(fmt="%(asctime)s %(levelname)-7s %(name)s %(message)s", datefmt="%H:%M:%S")
    if log_file:
        fh = RotatingFileHandler(log_file, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8")
        fh.setFormatter(fmt)
        logger.addHandler(fh)
    if console:
        sh = logging.StreamHandler()
        sh.setFormatter(fmt)
        logger.addHandler(sh)
    return logger
