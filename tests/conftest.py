"""Shared pytest fixtures for the Paillier cipher test suite."""

import pytest

from paillier_cipher.crypto.keygen import generate_keypair


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture(scope="session")
def keypair():
    """A 64-bit key pair, the size used by the reference scenario."""
    return generate_keypair(key_bits=64, certainty=64)


@pytest.fixture(scope="session")
def keypair_256():
    """A larger key pair for multi-block and homomorphism checks."""
    return generate_keypair(key_bits=256)
