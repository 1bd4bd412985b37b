import math
import random

import pytest

from paillier_cipher.config import DEFAULT_KEY_BITS, MAX_KEY_BITS, MIN_KEY_BITS
from paillier_cipher.crypto.keygen import KeyPairGenerator, generate_keypair
from paillier_cipher.crypto.paillier import KeyPair, PrivateKey, PublicKey, decrypt, encrypt, is_probable_prime
from paillier_cipher.errors import InvalidParameterError


def _assert_consistent(pub: PublicKey, priv: PrivateKey) -> None:
    n, n_sq = pub.n, pub.n_sq
    assert priv.n == n
    assert math.gcd(pub.g, n_sq) == 1
    l_val = (pow(pub.g, priv.lam, n_sq) - 1) // n
    assert math.gcd(l_val, n) == 1
    assert (priv.u * l_val) % n == 1


@pytest.mark.anyio
async def test_generated_pair_satisfies_key_invariants(keypair_256):
    pub, priv = keypair_256
    _assert_consistent(pub, priv)


@pytest.mark.parametrize("bits", [16, 64, 128])
@pytest.mark.anyio
async def test_modulus_size_follows_key_bits(bits):
    pub, priv = generate_keypair(key_bits=bits, certainty=32)
    assert pub.n.bit_length() in (bits - 1, bits)
    _assert_consistent(pub, priv)


@pytest.mark.anyio
async def test_lambda_is_lcm_of_prime_factors():
    # a seeded source makes the run reproducible; production code uses SystemRandom
    rng = random.Random(1234)
    pub, priv = generate_keypair(key_bits=32, certainty=40, random=rng)
    # 32-bit n factors instantly by trial division
    p = next(d for d in range(3, math.isqrt(pub.n) + 1, 2) if pub.n % d == 0)
    q = pub.n // p
    assert p != q
    assert is_probable_prime(p) and is_probable_prime(q)
    assert priv.lam == (p - 1) * (q - 1) // math.gcd(p - 1, q - 1)


@pytest.mark.anyio
async def test_same_seed_gives_same_pair():
    a = generate_keypair(key_bits=64, random=random.Random(7))
    b = generate_keypair(key_bits=64, random=random.Random(7))
    assert a == b


@pytest.mark.anyio
async def test_returns_named_pair():
    pair = generate_keypair(key_bits=32)
    assert isinstance(pair, KeyPair)
    assert isinstance(pair.public, PublicKey)
    assert isinstance(pair.private, PrivateKey)


@pytest.mark.parametrize("bits", [MIN_KEY_BITS - 1, 0, -5, MAX_KEY_BITS + 1])
@pytest.mark.anyio
async def test_out_of_range_key_bits_fall_back_to_default(bits):
    gen = KeyPairGenerator()
    gen.initialize(bits)
    assert gen.key_bits == DEFAULT_KEY_BITS


@pytest.mark.anyio
async def test_out_of_range_key_bits_is_logged(caplog):
    with caplog.at_level("WARNING", logger="paillier_cipher.config"):
        pub, _ = generate_keypair(key_bits=4)
    assert pub.n.bit_length() in (DEFAULT_KEY_BITS - 1, DEFAULT_KEY_BITS)
    assert "outside" in caplog.text


@pytest.mark.anyio
async def test_smallest_key_size_works():
    pub, priv = generate_keypair(key_bits=MIN_KEY_BITS)
    assert pub.n == 11 * 13
    _assert_consistent(pub, priv)
    for m in range(pub.n):
        assert decrypt(priv, encrypt(pub, m)) == m


@pytest.mark.anyio
async def test_invalid_certainty_is_rejected():
    with pytest.raises(InvalidParameterError):
        generate_keypair(key_bits=32, certainty=0)


@pytest.mark.anyio
async def test_generator_contract():
    gen = KeyPairGenerator(certainty=32)
    gen.initialize(96, random.SystemRandom())
    assert gen.key_bits == 96
    assert gen.certainty == 32
    first = gen.generate_key_pair()
    second = gen.generate_key_pair()
    assert first.public.n != second.public.n
    _assert_consistent(*first)
