"""
Paillier key model and integer-level arithmetic.

Plaintexts live in Z_n, ciphertexts in Z*_{n^2}. The functions here work on
plain ints; byte framing lives in the cipher engine.
"""

import math
import random as _random
import secrets
from dataclasses import dataclass, field
from typing import NamedTuple, Optional

from paillier_cipher.errors import CryptoError


SMALL_PRIMES = [2, 3, 5, 7, 11, 13, 17, 19, 23, 29, 31, 37, 41, 43, 47]


def default_random() -> _random.Random:
    """Return a fresh OS-backed random source."""
    return secrets.SystemRandom()


@dataclass(frozen=True)
class PublicKey:
    n: int
    g: int

    @property
    def n_sq(self) -> int:
        return self.n * self.n

    @property
    def bit_length(self) -> int:
        return self.n.bit_length()

    def random_r(self, random: _random.Random) -> int:
        """Draw r with 0 < r < n and gcd(r, n) = 1."""
        bits = self.n.bit_length()
        while True:
            r = random.getrandbits(bits)
            if 0 < r < self.n and math.gcd(r, self.n) == 1:
                return r


@dataclass(frozen=True)
class PrivateKey:
    n: int
    lam: int = field(repr=False)
    u: int = field(repr=False)

    @property
    def n_sq(self) -> int:
        return self.n * self.n

    @property
    def bit_length(self) -> int:
        return self.n.bit_length()


class KeyPair(NamedTuple):
    public: PublicKey
    private: PrivateKey


def lcm(a: int, b: int) -> int:
    return abs(a * b) // math.gcd(a, b)


def l_function(x: int, n: int) -> int:
    """L(x) = (x - 1) / n, raising CryptoError when the division is not exact."""
    quotient, rem = divmod(x - 1, n)
    if rem != 0:
        raise CryptoError("L(x) is not an integer: wrong key or corrupted ciphertext")
    return quotient


# ── Probable primes ────────────────────────────────
def miller_rabin_rounds(certainty: int) -> int:
    # each round lets a composite through with probability <= 1/4
    return max(1, (certainty + 1) // 2)


def is_probable_prime(n: int, certainty: int = 64, random: Optional[_random.Random] = None) -> bool:
    """
    Miller-Rabin test; a composite passes with probability <= 2^-certainty.
    """
    if n < 2:
        return False
    if n in SMALL_PRIMES:
        return True
    if any((n % p) == 0 for p in SMALL_PRIMES):
        return False
    if random is None:
        random = default_random()

    d = n - 1
    s = 0
    while d % 2 == 0:
        d //= 2
        s += 1

    for _ in range(miller_rabin_rounds(certainty)):
        a = random.randrange(2, n - 1)
        x = pow(a, d, n)
        if x == 1 or x == n - 1:
            continue
        for _ in range(s - 1):
            x = pow(x, 2, n)
            if x == n - 1:
                break
        else:
            return False
    return True


def generate_prime(bits: int, certainty: int = 64, random: Optional[_random.Random] = None) -> int:
    """Return a probable prime of exactly `bits` bits."""
    if bits < 2:
        raise ValueError("a prime needs at least 2 bits")
    if random is None:
        random = default_random()
    while True:
        candidate = random.getrandbits(bits) | 1 | (1 << (bits - 1))
        if is_probable_prime(candidate, certainty, random):
            return candidate


# ── Raw encryption ─────────────────────────────────
def encrypt(
    pub: PublicKey,
    m: int,
    r: Optional[int] = None,
    random: Optional[_random.Random] = None,
) -> int:
    """c = g^m * r^n mod n^2, with a fresh r unless one is supplied."""
    if not 0 <= m < pub.n:
        raise CryptoError("plaintext not in Z_n: m must satisfy 0 <= m < n")
    if r is None:
        r = pub.random_r(random if random is not None else default_random())
    n_sq = pub.n_sq
    c1 = pow(pub.g, m, n_sq)
    c2 = pow(r, pub.n, n_sq)
    return (c1 * c2) % n_sq


def decrypt(priv: PrivateKey, c: int) -> int:
    """m = L(c^lambda mod n^2) * u mod n."""
    n_sq = priv.n_sq
    if not 0 <= c < n_sq:
        raise CryptoError("ciphertext not in Z_{n^2}")
    x = pow(c, priv.lam, n_sq)
    return (l_function(x, priv.n) * priv.u) % priv.n


# ── Homomorphic operations ─────────────────────────
def add(pub: PublicKey, c1: int, c2: int) -> int:
    """Dec(add(c1, c2)) = m1 + m2 mod n."""
    return (c1 * c2) % pub.n_sq


def add_plain(pub: PublicKey, c: int, m: int) -> int:
    """Dec(add_plain(c, m)) = Dec(c) + m mod n."""
    return (c * pow(pub.g, m % pub.n, pub.n_sq)) % pub.n_sq


def scalar_mul(pub: PublicKey, c: int, k: int) -> int:
    """Dec(scalar_mul(c, k)) = k * Dec(c) mod n."""
    return pow(c, k % pub.n, pub.n_sq)
