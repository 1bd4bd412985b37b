"""
Block-oriented Paillier cipher engine.

Follows the init / update / do_final contract of a conventional block
cipher so that large inputs can be fed in chunks. Each plaintext block of
`plaintext_block_size` bytes becomes one ciphertext block of
`ciphertext_block_size` bytes (ECB, no padding).
"""

import logging
import random as _random
from enum import IntEnum
from typing import Optional, Union

from paillier_cipher.crypto import paillier
from paillier_cipher.crypto.paillier import PrivateKey, PublicKey, default_random
from paillier_cipher.errors import CryptoError, InvalidKeyError, InvalidParameterError

logger = logging.getLogger(__name__)

Key = Union[PublicKey, PrivateKey]


class Mode(IntEnum):
    ENCRYPT = 1
    DECRYPT = 2


class PaillierCipher:
    """
    Stateful Paillier cipher.

    Not thread-safe: mode, key and the pending-bytes buffer are carried
    from `init` through `update` to `do_final`. Share keys, not engines.

    Usage:
        cipher = PaillierCipher()
        cipher.init(Mode.ENCRYPT, public_key)
        out = cipher.update(chunk1) + cipher.update(chunk2) + cipher.do_final()
    """

    def __init__(self, random: Optional[_random.Random] = None):
        self._random = random if random is not None else default_random()
        self._reset()

    def _reset(self) -> None:
        self._mode: Optional[Mode] = None
        self._key: Optional[Key] = None
        self._plaintext_size = 0
        self._ciphertext_size = 0
        self._buffer = bytearray()

    # ── init ───────────────────────────────────────
    def init(self, mode: Mode, key: Key, random: Optional[_random.Random] = None) -> None:
        """
        Bind the cipher to a mode and a key, discarding any buffered input.

        ENCRYPT needs a PublicKey, DECRYPT a PrivateKey; anything else
        raises InvalidKeyError and leaves the cipher uninitialised.
        """
        self._reset()
        try:
            mode = Mode(mode)
        except ValueError as exc:
            raise InvalidParameterError(f"bad cipher mode: {mode!r}") from exc
        self._check_key(mode, key)

        bits = key.bit_length
        plaintext_size = (bits - 1) // 8
        if plaintext_size == 0:
            raise InvalidKeyError(f"a {bits}-bit modulus cannot carry a plaintext byte")

        self._mode = mode
        self._key = key
        self._plaintext_size = plaintext_size
        self._ciphertext_size = ((bits + 7) // 8) * 2
        if random is not None:
            self._random = random

        logger.debug(
            "cipher initialised: mode=%s plaintext_block=%d ciphertext_block=%d",
            mode.name, self._plaintext_size, self._ciphertext_size,
        )

    @staticmethod
    def _check_key(mode: Mode, key: Key) -> None:
        if mode is Mode.ENCRYPT and not isinstance(key, PublicKey):
            raise InvalidKeyError("encryption needs a PublicKey")
        if mode is Mode.DECRYPT and not isinstance(key, PrivateKey):
            raise InvalidKeyError("decryption needs a PrivateKey")

    # ── sizes ──────────────────────────────────────
    @property
    def mode(self) -> Optional[Mode]:
        return self._mode

    @property
    def plaintext_block_size(self) -> int:
        return self._plaintext_size

    @property
    def ciphertext_block_size(self) -> int:
        return self._ciphertext_size

    def get_block_size(self) -> int:
        """Input block size for the active mode."""
        self._require_ready()
        if self._mode is Mode.DECRYPT:
            return self._ciphertext_size
        return self._plaintext_size

    def _output_block_size(self) -> int:
        if self._mode is Mode.DECRYPT:
            return self._plaintext_size
        return self._ciphertext_size

    def get_output_size(self, input_len: int) -> int:
        """Bytes produced by transforming `input_len` new bytes plus what is buffered."""
        block_in = self.get_block_size()
        blocks = -(-(input_len + len(self._buffer)) // block_in)
        return blocks * self._output_block_size()

    def get_iv(self) -> None:
        return None

    def set_mode(self, name: str) -> None:
        if name.upper() != "ECB":
            raise InvalidParameterError(f"Paillier supports no mode but ECB, got {name!r}")

    def set_padding(self, name: str) -> None:
        if name.lower() != "nopadding":
            raise InvalidParameterError(f"Paillier supports no padding, got {name!r}")

    # ── update / do_final ──────────────────────────
    def update(self, data: bytes) -> bytes:
        """
        Buffer `data` and transform every complete block; a partial
        remainder stays buffered.
        """
        block = self.get_block_size()
        self._buffer += data

        ready = len(self._buffer) - len(self._buffer) % block

        chunk = bytes(self._buffer[:ready])
        del self._buffer[:ready]
        return self._run(chunk, block)

    def do_final(self, data: bytes = b"") -> bytes:
        """
        Transform buffered bytes plus `data`, including the trailing block.

        The buffer is empty afterwards and the cipher stays bound to the
        same mode and key.
        """
        block = self.get_block_size()
        total = bytes(self._buffer) + bytes(data)
        self._buffer = bytearray()

        if self._mode is Mode.DECRYPT and len(total) % block:
            self._reset()
            raise CryptoError(
                f"ciphertext length {len(total)} is not a multiple of {block}"
            )

        return self._run(total, block)

    def _run(self, chunk: bytes, block: int) -> bytes:
        try:
            out = [self._transform_block(chunk[i:i + block]) for i in range(0, len(chunk), block)]
        except CryptoError:
            self._reset()
            raise
        return b"".join(out)

    # ── block transforms ───────────────────────────
    def _transform_block(self, block: bytes) -> bytes:
        if self._mode is Mode.ENCRYPT:
            return self._encrypt_block(block)
        return self._decrypt_block(block)

    def _encrypt_block(self, block: bytes) -> bytes:
        # a short trailing chunk is left-aligned in the block, zero-filled on the right
        m = int.from_bytes(block.ljust(self._plaintext_size, b"\x00"), "big")
        c = paillier.encrypt(self._key, m, random=self._random)
        return c.to_bytes(self._ciphertext_size, "big")

    def _decrypt_block(self, block: bytes) -> bytes:
        m = paillier.decrypt(self._key, int.from_bytes(block, "big"))
        if m.bit_length() > 8 * self._plaintext_size:
            raise CryptoError("decrypted block does not fit the plaintext block size")
        return m.to_bytes(self._plaintext_size, "big")

    def _require_ready(self) -> None:
        if self._mode is None:
            raise CryptoError("cipher is not initialised")
