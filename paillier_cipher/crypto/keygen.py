"""
Paillier key pair generation.
"""

import logging
import math
import random as _random
from typing import Optional

from paillier_cipher.config import KeyGenParams, keygen_params
from paillier_cipher.crypto.paillier import (
    KeyPair,
    PrivateKey,
    PublicKey,
    default_random,
    generate_prime,
    lcm,
)

logger = logging.getLogger(__name__)


def _pick_generator(n: int, lam: int, random: _random.Random) -> tuple[int, int]:
    """Draw g in Z*_{n^2} until L(g^lambda mod n^2) is invertible mod n; return (g, u)."""
    n_sq = n * n
    while True:
        g = random.randrange(n_sq)
        if math.gcd(g, n_sq) != 1:
            continue
        l_val = (pow(g, lam, n_sq) - 1) // n
        if math.gcd(l_val, n) == 1:
            return g, pow(l_val, -1, n)


def generate_keypair(
    key_bits: Optional[int] = None,
    certainty: Optional[int] = None,
    random: Optional[_random.Random] = None,
) -> KeyPair:
    """
    Generate a Paillier key pair.

    `key_bits` is the size of n; each prime gets key_bits // 2 bits.
    Out-of-range sizes fall back to the configured default.
    """
    params = keygen_params(key_bits=key_bits, certainty=certainty)
    return _generate(params, random if random is not None else default_random())


def _generate(params: KeyGenParams, random: _random.Random) -> KeyPair:
    prime_bits = params.key_bits // 2
    p = generate_prime(prime_bits, params.certainty, random)
    q = generate_prime(prime_bits, params.certainty, random)
    while q == p:
        q = generate_prime(prime_bits, params.certainty, random)

    n = p * q
    lam = lcm(p - 1, q - 1)
    g, u = _pick_generator(n, lam, random)

    logger.debug("generated Paillier key pair, n has %d bits", n.bit_length())
    return KeyPair(PublicKey(n=n, g=g), PrivateKey(n=n, lam=lam, u=u))


class KeyPairGenerator:
    """
    Stateful generator: configure once with `initialize`, then call
    `generate_key_pair` as often as needed.

    Usage:
        gen = KeyPairGenerator()
        gen.initialize(1024)
        pub, priv = gen.generate_key_pair()
    """

    def __init__(self, random: Optional[_random.Random] = None, certainty: Optional[int] = None):
        self._random = random if random is not None else default_random()
        self._params = keygen_params(certainty=certainty)

    @property
    def key_bits(self) -> int:
        return self._params.key_bits

    @property
    def certainty(self) -> int:
        return self._params.certainty

    def initialize(self, key_bits: int, random: Optional[_random.Random] = None) -> None:
        self._params = keygen_params(key_bits=key_bits, certainty=self._params.certainty)
        if random is not None:
            self._random = random

    def generate_key_pair(self) -> KeyPair:
        return _generate(self._params, self._random)
