"""
Element Encoding
================

Maps application elements (byte strings) to accumulator representatives.

Encodings:
----------
- HASH_TO_PRIME: iterate SHA-256 starting from the element until the digest,
  read as a big-endian integer, passes a Miller-Rabin test
- DI_HASH: division-intractable hash DELTA + SHA256(element)

The same encoding must be used when building the accumulator and when proving
membership; both paths go through gen_representatives.
"""

import hashlib
from enum import IntEnum
from typing import Iterable, List, Union

from .bigint import is_probable_prime
from .config import config
from .errors import PreconditionViolation

Element = Union[bytes, str]

# fixed 2048-bit odd offset of the division-intractable hash
DELTA = int(
    "30731438344250145947882657666206403727243332864808664054575262055190442942812700108124167942976653745028212341196692947492080562974589240558404052155436479139607283861572110186639866316589725954212169900473106847592072353357762907262662369230376196184226071545259316873351199416881666739376881925207433619609913435128355340248285568061176332195286623104126482371089555666194830543043595601648501184952472930075767818065617175977748228906417030406830990961578747315754348300610520710090878042950122953510395835606916522592211024941845938097013497415239566963754154588561352876059012472806373183052035005766579987123343"
)


class EncodeType(IntEnum):
    HASH_TO_PRIME = 0
    DI_HASH = 1


def to_bytes(element: Element) -> bytes:
    if isinstance(element, str):
        return element.encode('utf-8')
    if isinstance(element, (bytes, bytearray)):
        return bytes(element)
    raise PreconditionViolation(f"Elements must be bytes or str, got {type(element).__name__}")


def sha256_int(data: bytes) -> int:
    """SHA-256 digest of data as a big-endian integer."""
    return int.from_bytes(hashlib.sha256(data).digest(), 'big')


def hash_to_prime(element: Element, rounds: int = None) -> int:
    """
    Hash an element to a 256-bit probable prime.

    The first digest hashes the element, every later digest hashes the
    previous digest. There is no iteration bound; primes have positive
    density among digests.

    Parameters
    ----------
    element : bytes or str
        The element to encode
    rounds : int, optional
        Miller-Rabin rounds, config.hash_to_prime_rounds by default

    Returns
    -------
    int
        The first digest value that is a probable prime
    """
    rounds = rounds or config.hash_to_prime_rounds
    digest = hashlib.sha256(to_bytes(element)).digest()
    while True:
        value = int.from_bytes(digest, 'big')
        if is_probable_prime(value, rounds):
            return value
        digest = hashlib.sha256(digest).digest()


def di_hash(element: Element) -> int:
    """DELTA + SHA256(element)."""
    return DELTA + sha256_int(to_bytes(element))


def encode(element: Element, encode_type: EncodeType = EncodeType.HASH_TO_PRIME) -> int:
    if encode_type == EncodeType.HASH_TO_PRIME:
        return hash_to_prime(element)
    if encode_type == EncodeType.DI_HASH:
        return di_hash(element)
    raise PreconditionViolation(f"Unknown encode type {encode_type!r}")


def gen_representatives(elements: Iterable[Element],
                        encode_type: EncodeType = EncodeType.HASH_TO_PRIME) -> List[int]:
    """Encode every element, preserving order."""
    return [encode(e, encode_type) for e in elements]
