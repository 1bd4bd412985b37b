"""
Exception taxonomy for the Paillier cipher.
"""


class PaillierError(Exception):
    """Base class for every error raised by this package."""


class CryptoError(PaillierError):
    """A block transform or a facade call failed.

    Raised for a plaintext outside Z_n, a ciphertext outside Z_{n^2},
    a non-exact L division (wrong key or corrupted ciphertext) and for
    misuse of an engine that was never (re)initialised.
    """


class InvalidKeyError(PaillierError):
    """The key does not match the requested role, or cannot be used at all."""


class InvalidParameterError(PaillierError, ValueError):
    """A generator or cipher parameter is out of range or unsupported."""
