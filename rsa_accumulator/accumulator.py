"""
RSA Accumulator
===============

Accumulates a set of representatives e_1..e_n into one group element and
produces every membership proof in O(n log n) exponentiations.

Definitions:
------------
- Acc = base^{∏ e_j} mod N
- proof_i = base^{∏_{j≠i} e_j} mod N, so proof_i^{e_i} = Acc

Batch proofs (divide and conquer):
----------------------------------
A node covering [left, right) carries base B = base^{∏ e_j for j outside
[left, right)}. With mid = (left + right) // 2:

    left child base  = B^{∏ e_j, j in [mid, right)}
    right child base = B^{∏ e_j, j in [left, mid)}

A node of length 1 stores B as the proof; a node of length 2 stores the two
cross exponentiations. Every node writes only into its own index range of
the output list, so proofs[i] always belongs to representatives[i].
"""

import logging
import time
from collections import deque
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, NamedTuple, Sequence

from .bigint import powmod, random_bits
from .config import Config, config
from .encoding import Element, EncodeType, encode, gen_representatives
from .errors import PreconditionViolation
from .groups import GroupSetup
from .utils import set_product, set_product_parallel

logger = logging.getLogger(__name__)


@dataclass
class ProofTreeNode:
    """A node of the batch proof tree: index range [left, right) and its base."""
    left: int
    right: int
    base: int

    def __len__(self):
        return self.right - self.left

    @property
    def mid(self) -> int:
        return (self.left + self.right) // 2


class BatchResult(NamedTuple):
    acc: int
    representatives: List[int]
    proofs: List[int]
    base: int


def _validate(base: int, N: int, reps: Sequence[int]):
    if N < 2:
        raise PreconditionViolation(f"Modulus must be at least 2, got {N}")
    if not 0 < base < N:
        raise PreconditionViolation(f"Base {base} must lie in (0, N)")
    for i, e in enumerate(reps):
        if e <= 0:
            raise PreconditionViolation(f"Representative {i} must be positive, got {e}")


def _check_budget(budget: int):
    if budget < 0:
        raise PreconditionViolation(f"Parallelism budget must be non-negative, got {budget}")


def accumulate(base: int, representatives: Sequence[int], N: int, budget: int = 0) -> int:
    """
    Compute base^{∏ representatives} mod N by exponentiating once by the product.

    Parameters
    ----------
    base : int
        The accumulator base, usually G
    representatives : Sequence[int]
        Positive exponents
    N : int
        The modulus
    budget : int
        Depth of the parallel product tree; 0 computes it sequentially

    Returns
    -------
    int
        The accumulator value; ``base`` itself for an empty set
    """
    _validate(base, N, representatives)
    _check_budget(budget)
    exponent = set_product_parallel(representatives, budget) if budget else set_product(representatives)
    return powmod(base, exponent, N)


def accumulate_iter(base: int, representatives: Sequence[int], N: int) -> int:
    """Same value as ``accumulate``, one exponentiation per representative."""
    _validate(base, N, representatives)
    acc = base
    for e in representatives:
        acc = powmod(acc, e, N)
    return acc


def _absorb(base: int, reps: Sequence[int], left: int, right: int, N: int) -> int:
    return powmod(base, set_product(reps[left:right]), N)


def _prove_small(node: ProofTreeNode, reps: Sequence[int], N: int, proofs: List[int]):
    if len(node) == 1:
        proofs[node.left] = node.base
    else:
        proofs[node.left] = powmod(node.base, reps[node.left + 1], N)
        proofs[node.left + 1] = powmod(node.base, reps[node.left], N)


def _split(node: ProofTreeNode, reps: Sequence[int], N: int):
    mid = node.mid
    left = ProofTreeNode(node.left, mid, _absorb(node.base, reps, mid, node.right, N))
    right = ProofTreeNode(mid, node.right, _absorb(node.base, reps, node.left, mid, N))
    return left, right


def _prove_node(node: ProofTreeNode, reps: Sequence[int], N: int, proofs: List[int]):
    if len(node) <= 2:
        _prove_small(node, reps, N, proofs)
        return
    left, right = _split(node, reps, N)
    _prove_node(left, reps, N, proofs)
    _prove_node(right, reps, N, proofs)


def prove_membership(base: int, N: int, representatives: Sequence[int]) -> List[int]:
    """
    Sequential divide-and-conquer batch membership proofs.

    Returns
    -------
    List[int]
        proofs[i] = base^{∏_{j≠i} e_j} mod N
    """
    _validate(base, N, representatives)
    proofs = [0] * len(representatives)
    if representatives:
        _prove_node(ProofTreeNode(0, len(representatives), base), representatives, N, proofs)
    return proofs


def _prove_node_parallel(executor, node: ProofTreeNode, reps: Sequence[int], N: int,
                         proofs: List[int], depth: int):
    if depth <= 0 or len(node) <= 2:
        _prove_node(node, reps, N, proofs)
        return
    mid = node.mid
    left_base = executor.submit(_absorb, node.base, reps, mid, node.right, N)
    right_base = _absorb(node.base, reps, node.left, mid, N)
    left = ProofTreeNode(node.left, mid, left_base.result())
    right = ProofTreeNode(mid, node.right, right_base)
    left_done = executor.submit(_prove_node_parallel, executor, left, reps, N, proofs, depth - 1)
    _prove_node_parallel(executor, right, reps, N, proofs, depth - 1)
    left_done.result()


def prove_membership_parallel(base: int, N: int, representatives: Sequence[int],
                              budget: int = None) -> List[int]:
    """
    Batch membership proofs with the top ``budget`` tree levels run concurrently.

    Parameters
    ----------
    base : int
        The accumulator base
    N : int
        The modulus
    representatives : Sequence[int]
        Positive exponents
    budget : int, optional
        Recursion depth at which subtrees stop being dispatched as tasks;
        depth k yields up to 2^k concurrent subtrees. Defaults to
        ``config.parallelism_budget``.

    Returns
    -------
    List[int]
        Proofs in the order of ``representatives``

    Notes
    -----
    Each split submits the left child (and the left child's base) to the pool
    and handles the right side in the calling thread. At most 2^(k+1) - 2
    tasks are ever submitted, so a pool of 2^(k+1) threads can never stall
    on a parent waiting for a queued child.
    """
    budget = config.parallelism_budget if budget is None else budget
    _check_budget(budget)
    _validate(base, N, representatives)
    proofs = [0] * len(representatives)
    if not representatives:
        return proofs
    root = ProofTreeNode(0, len(representatives), base)
    if budget == 0:
        _prove_node(root, representatives, N, proofs)
        return proofs
    with ThreadPoolExecutor(max_workers=2 << budget) as executor:
        _prove_node_parallel(executor, root, representatives, N, proofs, budget)
    return proofs


def prove_membership_iter(base: int, N: int, representatives: Sequence[int]) -> List[int]:
    """Batch proofs from a breadth-first work list of ProofTreeNodes instead of recursion."""
    _validate(base, N, representatives)
    proofs = [0] * len(representatives)
    if not representatives:
        return proofs
    work = deque([ProofTreeNode(0, len(representatives), base)])
    while work:
        node = work.popleft()
        if len(node) <= 2:
            _prove_small(node, representatives, N, proofs)
        else:
            work.extend(_split(node, representatives, N))
    return proofs


def prove_membership_naive(base: int, N: int, representatives: Sequence[int]) -> List[int]:
    """One exponentiation per proof by the product of all other representatives; O(n²)."""
    _validate(base, N, representatives)
    return [powmod(base, set_product(list(representatives[:i]) + list(representatives[i + 1:])), N)
            for i in range(len(representatives))]


def verify_membership(acc: int, representative: int, proof: int, N: int) -> bool:
    """Check proof^{representative} mod N == acc."""
    if N < 2 or representative <= 0 or not 0 < proof < N:
        return False
    return powmod(proof, representative, N) == acc


def acc_and_prove(elements: Sequence[Element], encode_type: EncodeType, setup: GroupSetup,
                  budget: int = None) -> BatchResult:
    """
    Encode elements, build all membership proofs and the accumulator.

    The accumulator is derived from the first proof as proofs[0]^{e_0}, which
    saves one full exponentiation by the set product.
    """
    return _acc_and_prove(elements, encode_type, setup.G, setup.N, budget)


def _acc_and_prove(elements, encode_type, base, N, budget) -> BatchResult:
    start = time.perf_counter()
    reps = gen_representatives(elements, encode_type)
    logger.debug("encoded %d elements in %.3f seconds", len(reps), time.perf_counter() - start)
    start = time.perf_counter()
    proofs = prove_membership_parallel(base, N, reps, budget)
    logger.debug("computed %d membership proofs in %.3f seconds", len(proofs), time.perf_counter() - start)
    acc = powmod(proofs[0], reps[0], N) if reps else base
    return BatchResult(acc, reps, proofs, base)


def zk_accumulate(elements: Sequence[Element], encode_type: EncodeType, setup: GroupSetup,
                  budget: int = None, cfg: Config = None) -> BatchResult:
    """
    Accumulate over a blinded base G^r with r uniform below 2^(bits - 1).

    The returned ``base`` is needed to recompute the accumulator; the proofs
    verify against ``acc`` exactly like unblinded ones.
    """
    cfg = cfg or config
    r = random_bits(setup.N.bit_length() - 1)
    base = powmod(setup.G, r, setup.N)
    while base <= 1:
        r = random_bits(setup.N.bit_length() - 1)
        base = powmod(setup.G, r, setup.N)
    budget = cfg.parallelism_budget if budget is None else budget
    return _acc_and_prove(elements, encode_type, base, setup.N, budget)


class RSAAccumulator:
    """
    Accumulator bound to one GroupSetup and one encoding.

    Parameters
    ----------
    setup : GroupSetup
        The public group parameters
    encode_type : EncodeType
        Encoding from elements to representatives
    budget : int, optional
        Parallelism budget for batch proofs

    Examples
    --------
    >>> from rsa_accumulator.groups import trusted_setup
    >>> acc = RSAAccumulator(trusted_setup())
    >>> result = acc.prove([b"a", b"b", b"c"])
    >>> acc.verify(result.acc, b"b", result.proofs[1])
    True
    """

    def __init__(self, setup: GroupSetup, encode_type: EncodeType = EncodeType.HASH_TO_PRIME,
                 budget: int = None):
        self.setup = setup
        self.encode_type = encode_type
        self.budget = config.parallelism_budget if budget is None else budget

    def encode(self, element: Element) -> int:
        return encode(element, self.encode_type)

    def accumulate(self, elements: Sequence[Element]) -> int:
        reps = gen_representatives(elements, self.encode_type)
        return accumulate(self.setup.G, reps, self.setup.N, self.budget)

    def prove(self, elements: Sequence[Element]) -> BatchResult:
        return acc_and_prove(elements, self.encode_type, self.setup, self.budget)

    def prove_element(self, elements: Sequence[Element], index: int) -> int:
        """Single membership proof for elements[index]."""
        if not 0 <= index < len(elements):
            raise PreconditionViolation(f"Index {index} out of range for {len(elements)} elements")
        others = [e for i, e in enumerate(elements) if i != index]
        reps = gen_representatives(others, self.encode_type)
        return accumulate(self.setup.G, reps, self.setup.N)

    def verify(self, acc: int, element: Element, proof: int) -> bool:
        return verify_membership(acc, self.encode(element), proof, self.setup.N)
