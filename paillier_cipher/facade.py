"""
Thread-safe whole-buffer Paillier encryption.
"""

import logging
import random as _random
import threading
from typing import Optional

from paillier_cipher.crypto.engine import Key, Mode, PaillierCipher
from paillier_cipher.crypto.keygen import generate_keypair
from paillier_cipher.crypto.paillier import PrivateKey, PublicKey
from paillier_cipher.errors import CryptoError, InvalidKeyError

logger = logging.getLogger(__name__)


class Paillier:
    """
    Paillier encryption over byte buffers.

    Holds a public key, a private key or both, and drives a single cipher
    engine under a lock, so one instance can be shared between threads.
    Callers wanting parallel throughput should build one instance per
    thread; keys are immutable and can be shared freely.

    Decryption returns whole plaintext blocks: a message whose length is
    not a multiple of the block size comes back zero-filled on the right.

    Usage:
        crypto = Paillier.generate(key_bits=512)
        ciphertext = crypto.encrypt(b"payload")
        assert crypto.decrypt(ciphertext).rstrip(b"\x00") == b"payload"
    """

    def __init__(
        self,
        private_key: Optional[PrivateKey] = None,
        public_key: Optional[PublicKey] = None,
        random: Optional[_random.Random] = None,
    ):
        if private_key is None and public_key is None:
            raise InvalidKeyError("a private key, a public key or both are required")
        self._private_key = private_key
        self._public_key = public_key
        self._random = random
        self._cipher = PaillierCipher(random)
        self._lock = threading.Lock()

    @classmethod
    def generate(
        cls,
        key_bits: Optional[int] = None,
        certainty: Optional[int] = None,
        random: Optional[_random.Random] = None,
    ) -> "Paillier":
        """Build a facade holding a freshly generated key pair."""
        pub, priv = generate_keypair(key_bits=key_bits, certainty=certainty, random=random)
        return cls(private_key=priv, public_key=pub, random=random)

    @property
    def public_key(self) -> Optional[PublicKey]:
        return self._public_key

    @property
    def private_key(self) -> Optional[PrivateKey]:
        return self._private_key

    def encrypt(self, data: bytes) -> bytes:
        """Encrypt `data` with the public key."""
        if self._public_key is None:
            raise CryptoError("encryption needs a public key")
        return self._do_final(Mode.ENCRYPT, self._public_key, data)

    def decrypt(self, data: bytes) -> bytes:
        """Decrypt `data` with the private key."""
        if self._private_key is None:
            raise CryptoError("decryption needs a private key")
        return self._do_final(Mode.DECRYPT, self._private_key, data)

    def encrypt_str(self, text: str, encoding: str = "utf-8") -> bytes:
        return self.encrypt(text.encode(encoding))

    def decrypt_str(self, data: bytes, encoding: str = "utf-8") -> str:
        """Decrypt and decode `data`, dropping the block fill NULs."""
        return self.decrypt(data).decode(encoding).rstrip("\x00")

    def _do_final(self, mode: Mode, key: Key, data: bytes) -> bytes:
        with self._lock:
            try:
                self._cipher.init(mode, key, self._random)
                return self._cipher.do_final(data)
            except CryptoError:
                logger.debug("%s failed", mode.name.lower(), exc_info=True)
                raise
            except Exception as exc:
                logger.debug("%s failed", mode.name.lower(), exc_info=True)
                raise CryptoError(f"{mode.name.lower()} failed: {exc}") from exc
