"""
Group Initialization and Setup
==============================

This module creates the hidden-order group used by every other module: the
RSA group Z*_N with N = p·q for safe primes p = 2p' + 1 and q = 2q' + 1,
together with two generators G and H of the quadratic-residue subgroup QR_N
(of order p'q').

Setup Modes:
------------
- setup(bits): fresh safe primes; returns the public GroupSetup and the
  Trapdoor (p, q), which must be discarded by a real deployment
- trusted_setup(): fixed 2048-bit parameters for tests and demonstrations

Security:
---------
Nobody but the setup generator knows the factorization of N or log_G(H).
"""

import logging
from dataclasses import dataclass
from typing import Tuple

from Crypto.Util.number import getPrime

from .bigint import gcd, is_probable_prime, jacobi, powmod, random_range
from .config import Config, config
from .errors import PreconditionViolation
from .pool import PrimeCache
from .racing import race, trials

logger = logging.getLogger(__name__)

N2048_STRING = (
    "22582513446883649683242153375773765418277977026848618150278436227443969113525388360965414596382292671632010154272027792498289390464326093128963474525925743125404187090638221587455285089494562751793489098182761320953828657439130044252338283109583198301789045090284695934345711523245381620643226632165168827411546661236460973389982263385406789443858985073091473529732325356098830825299275985202060852102775942940039443155227986748457261585440368528834910182851433705587223040610934954417065434756145769875043620201897615075786323297141320586481340831246603933018654794846594742280842668198512719618188992528830140149361"
)
G2048_STRING = (
    "3734320578166922768976307305081280303658237303482921793243310032002132951325426885895423150554487167609218974062079302792001919827304933109188668552532361245089029380294384169787606911401094856511916709999954764232948323779503820860893459514928713744983707360078264267038900798843893405664990521531326919997106338139056096176409033756102908667173913246197068450150318832809948977367751025873698025220766782003611956130604742644746610708520581969538416206455665972248047959779079118036299417601968576259426648158714614452861031491553305187113545916330322686053758561416773919173504690956803771722726889946697788319929"
)
H2048_STRING = (
    "1582433196042535773898642856814926874501199844772808209798545765882857391073717631360065816613373509202691737458490830509979879771883168398785856056110736083435040549860024938378796318753064835110482441115760897524667343221753799849207723195729358565521753697076761550453675996906942484179834968386568757636433579938945322152073309477120701766107272148535093122238519340372766971216124175473667780382425281013570558875523373504108433319932127851859684947025440123382599601611460274335280822834972913253420025827402904805226163959418839188054187383250553791823431534564282919675786841775533806609995586228017407921459"
)

# small primes used to pre-sieve safe-prime candidates
SIEVE_LIMIT = 1000
MIN_SETUP_BITS = 32


@dataclass(frozen=True)
class GroupSetup:
    """
    Public group parameters {N, G, H}.

    Invariant: 1 < G, H < N and gcd(G, N) = gcd(H, N) = 1.
    """
    N: int
    G: int
    H: int

    def __post_init__(self):
        if self.N < 3:
            raise PreconditionViolation(f"Modulus N must be at least 3, got {self.N}")
        for name, value in (('G', self.G), ('H', self.H)):
            if not 1 < value < self.N:
                raise PreconditionViolation(f"{name}={value} must lie in (1, N)")
            if gcd(value, self.N) != 1:
                raise PreconditionViolation(f"{name}={value} is not coprime to N")

    @classmethod
    def from_strings(cls, n: str, g: str, h: str) -> 'GroupSetup':
        return cls(int(n, 10), int(g, 10), int(h, 10))


# Every proof protocol consumes the same {N, G, H} triple
PublicParameters = GroupSetup


@dataclass(frozen=True)
class Trapdoor:
    """The factorization N = p·q; p and q are safe primes."""
    p: int
    q: int

    @property
    def N(self) -> int:
        return self.p * self.q

    @property
    def order(self) -> int:
        """Order p'q' of the quadratic-residue subgroup."""
        return (self.p // 2) * (self.q // 2)


def trusted_setup() -> GroupSetup:
    """Fixed 2048-bit parameters."""
    return GroupSetup.from_strings(N2048_STRING, G2048_STRING, H2048_STRING)


def _sieve_rejects(candidate: int, small_primes) -> bool:
    # 2c + 1 ≡ 0 mod r  <=>  c ≡ (r - 1) / 2 mod r
    return any(candidate % r == (r - 1) // 2 for r in small_primes)


def generate_safe_prime(bits: int, cfg: Config = None, primes: PrimeCache = None) -> int:
    """
    Generate a safe prime p = 2p' + 1 of bits bits.

    Parameters
    ----------
    bits : int
        Bit length of p
    cfg : Config, optional
        Worker count, trial budget and Miller-Rabin rounds
    primes : PrimeCache, optional
        Source of the small primes used for pre-sieving

    Returns
    -------
    int
        A probable safe prime

    Notes
    -----
    Candidates p' come from Crypto.Util.number.getPrime(bits - 1). A
    candidate is skipped without a primality test when 2p' + 1 has a small
    prime factor. Workers race; the first safe prime wins.
    """
    cfg = cfg or config
    if bits < MIN_SETUP_BITS // 2:
        raise PreconditionViolation(f"Safe primes need at least {MIN_SETUP_BITS // 2} bits, got {bits}")
    small_primes = [p for p in (primes or PrimeCache(SIEVE_LIMIT)).primes_below(SIEVE_LIMIT) if p > 2]

    def search(worker, num_workers, token):
        for _ in trials(cfg.max_trials):
            if token.cancelled:
                return None
            candidate = getPrime(bits - 1)
            if _sieve_rejects(candidate, small_primes):
                continue
            p = 2 * candidate + 1
            if is_probable_prime(p, cfg.safe_prime_rounds):
                return p
        return None

    return race(search, cfg.workers, what=f"{bits}-bit safe prime")


def is_qr_generator(g: int, trapdoor: Trapdoor) -> bool:
    """True when g generates QR_N: Jacobi +1 modulo p and q, and order p'q'."""
    p, q = trapdoor.p, trapdoor.q
    N = trapdoor.N
    if not 1 < g < N or gcd(g, N) != 1:
        return False
    if jacobi(g, p) != 1 or jacobi(g, q) != 1:
        return False
    # order divides p'q'; exclude orders 1, p', q'
    return powmod(g, p // 2, N) != 1 and powmod(g, q // 2, N) != 1


def find_qr_generator(trapdoor: Trapdoor) -> int:
    """Rejection-sample a generator of QR_N."""
    N = trapdoor.N
    while True:
        g = random_range(2, N - 1)
        if is_qr_generator(g, trapdoor):
            return g


def setup(bits: int = None, cfg: Config = None) -> Tuple[GroupSetup, Trapdoor]:
    """
    Generate fresh group parameters.

    Parameters
    ----------
    bits : int, optional
        Bit length of N; config.rsa_bits by default
    cfg : Config, optional
        Worker count, trial budget and Miller-Rabin rounds

    Returns
    -------
    Tuple[GroupSetup, Trapdoor]
        The public {N, G, H} and the secret factorization

    Examples
    --------
    >>> params, trapdoor = setup(256)
    >>> params.N == trapdoor.p * trapdoor.q
    True
    """
    cfg = cfg or config
    bits = bits or cfg.rsa_bits
    if bits < MIN_SETUP_BITS:
        raise PreconditionViolation(f"N must have at least {MIN_SETUP_BITS} bits, got {bits}")
    primes = PrimeCache(SIEVE_LIMIT)
    p = generate_safe_prime(bits // 2, cfg, primes)
    q = generate_safe_prime(bits - bits // 2, cfg, primes)
    while q == p:
        q = generate_safe_prime(bits - bits // 2, cfg, primes)
    trapdoor = Trapdoor(p, q)
    logger.debug("found safe primes of %d and %d bits", p.bit_length(), q.bit_length())
    G = find_qr_generator(trapdoor)
    r = random_range(1, trapdoor.order - 1)
    H = powmod(G, r, trapdoor.N)
    return GroupSetup(trapdoor.N, G, H), trapdoor
