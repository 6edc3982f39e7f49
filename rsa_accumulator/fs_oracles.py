"""
Fiat-Shamir Random Oracles
===========================

This module implements the transcript and the random oracles used to make
the interactive proofs non-interactive.

Transcript:
-----------
An ordered list of strings. A challenge is SHA-256 over the UTF-8
concatenation of all entries, reduced modulo ``max_value`` (2^252 by default).
The challenge's decimal string is appended before it is returned, so two
transcripts with the same history produce the same challenge sequence. A
value equal to the last entry is rejected and the digest is re-hashed, so
consecutive challenges never repeat even under a small ``max_value``.

Challenges come in two kinds:
- int_challenge: the reduced digest
- prime_challenge: the digest re-hashed until its reduction is a probable prime

Random Oracles:
---------------
Each protocol starts its transcript with its own name for domain separation:
- H_poe: ["PoE", base, mod, C, x] -> prime l
- H_poke_star: ["PoKEStar", G, N, C] -> prime l
- H_zkpoke: ["ZKPoKE", G, H, N, u, w, z, Ag, Au] -> (int c, prime l)
- H_range: [statement, G, H, N, C, c1..c4, δ] -> int e
"""

import hashlib
import threading
from typing import Iterable, List, Sequence, Tuple, Union

from .bigint import is_probable_prime
from .config import config
from .errors import PreconditionViolation

# challenges are reduced below 2^252
MAX_252 = 1 << 252

Entry = Union[str, int]


class Transcript:
    """
    Append-only Fiat-Shamir transcript.

    Parameters
    ----------
    entries : Iterable[str or int], optional
        Initial entries; integers are stored as decimal strings
    max_value : int
        Challenges are reduced modulo this bound
    rounds : int, optional
        Miller-Rabin rounds for prime challenges

    Examples
    --------
    >>> t1 = Transcript(["a", "b"])
    >>> t2 = Transcript(["a"]); t2.append("b")
    >>> t1.int_challenge() == t2.int_challenge()
    True
    """

    def __init__(self, entries: Iterable[Entry] = (), max_value: int = MAX_252, rounds: int = None):
        if max_value < 2:
            raise PreconditionViolation(f"Challenge bound must be at least 2, got {max_value}")
        self._entries: List[str] = [str(e) for e in entries]
        self.max_value = max_value
        self.rounds = rounds or config.challenge_prime_rounds
        self._lock = threading.Lock()

    @classmethod
    def from_list(cls, entries: Sequence[Entry], max_value: int = MAX_252) -> 'Transcript':
        return cls(entries, max_value)

    def append(self, entry: Entry):
        with self._lock:
            self._entries.append(str(entry))

    def extend(self, entries: Iterable[Entry]):
        items = [str(e) for e in entries]
        with self._lock:
            self._entries.extend(items)

    def reset(self, entries: Iterable[Entry] = ()):
        items = [str(e) for e in entries]
        with self._lock:
            self._entries = items

    @property
    def entries(self) -> Tuple[str, ...]:
        with self._lock:
            return tuple(self._entries)

    def __len__(self):
        with self._lock:
            return len(self._entries)

    def __iter__(self):
        return iter(self.entries)

    def dump(self) -> str:
        entries = self.entries
        lines = [f"The transcript has {len(entries)} strings as info."]
        lines += [f"Info[{i}] = {e}" for i, e in enumerate(entries)]
        return "\n".join(lines)

    def _digest(self) -> bytes:
        h = hashlib.sha256()
        for e in self._entries:
            h.update(e.encode('utf-8'))
        return h.digest()

    def _repeats(self, value: int) -> bool:
        return bool(self._entries) and self._entries[-1] == str(value)

    def _challenge(self, prime: bool) -> int:
        # re-hash the digest until the reduced value is acceptable
        digest = self._digest()
        while True:
            value = int.from_bytes(digest, 'big') % self.max_value
            if (not prime or is_probable_prime(value, self.rounds)) and not self._repeats(value):
                self._entries.append(str(value))
                return value
            digest = hashlib.sha256(digest).digest()

    def int_challenge(self) -> int:
        with self._lock:
            return self._challenge(prime=False)

    def prime_challenge(self) -> int:
        """A probable prime below ``max_value``; re-hashes the digest until prime."""
        with self._lock:
            return self._challenge(prime=True)


def H_poe(base: int, mod: int, C: int, x: int) -> int:
    """Prime challenge l for the proof of exponentiation base^x = C."""
    return Transcript(["PoE", base, mod, C, x]).prime_challenge()


def H_poke_star(G: int, N: int, C: int) -> int:
    """Prime challenge l for PoKE* on G^x = C."""
    return Transcript(["PoKEStar", G, N, C]).prime_challenge()


def H_zkpoke(G: int, H: int, N: int, u: int, w: int, z: int, Ag: int, Au: int) -> Tuple[int, int]:
    """Integer challenge c followed by prime challenge l for ZKPoKE."""
    transcript = Transcript(["ZKPoKE", G, H, N, u, w, z, Ag, Au])
    c = transcript.int_challenge()
    l = transcript.prime_challenge()
    return c, l


def H_range(statement: str, G: int, H: int, N: int, C: int, commitments: Sequence[int],
            delta: bytes, security_param: int) -> int:
    """Integer challenge e < 2^security_param for the non-negativity proof."""
    transcript = Transcript([statement, G, H, N, C], max_value=1 << security_param)
    transcript.extend(commitments)
    transcript.append(delta.hex())
    return transcript.int_challenge()
