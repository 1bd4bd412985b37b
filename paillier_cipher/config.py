"""
Configuration for the Paillier cipher: environment defaults, validated
key-generation parameters and logging setup.
"""

import logging
import os
from typing import Optional

from pydantic import BaseModel, Field, ValidationError, ValidationInfo, field_validator

from paillier_cipher.errors import InvalidParameterError


# ── Configuration ──────────────────────────────────
# 64-bit moduli are trivially factorable; this default exists for tests and demos.
DEFAULT_KEY_BITS = int(os.getenv("PAILLIER_DEFAULT_KEY_BITS", "64"))
DEFAULT_CERTAINTY = int(os.getenv("PAILLIER_CERTAINTY", "64"))
STRICT_KEY_BITS = os.getenv("PAILLIER_STRICT_KEY_BITS", "false").lower() in {"1", "true", "yes"}
LOG_LEVEL = os.getenv("PAILLIER_LOG_LEVEL", "WARNING").upper()

MIN_KEY_BITS = 8
MAX_KEY_BITS = 3096

LOGGER_NAME = "paillier_cipher"

logger = logging.getLogger(__name__)


# ── Models ─────────────────────────────────────────
class KeyGenParams(BaseModel):
    """Key-generation parameters after the key-size policy has been applied."""

    strict_key_bits: bool = STRICT_KEY_BITS
    key_bits: int = DEFAULT_KEY_BITS
    certainty: int = Field(default=DEFAULT_CERTAINTY, ge=1)

    @field_validator("key_bits")
    @classmethod
    def clamp_key_bits(cls, value: int, info: ValidationInfo) -> int:
        if MIN_KEY_BITS <= value <= MAX_KEY_BITS:
            return value
        if info.data.get("strict_key_bits"):
            raise InvalidParameterError(
                f"key size must be in [{MIN_KEY_BITS}, {MAX_KEY_BITS}], got {value}"
            )
        logger.warning(
            "key size %d outside [%d, %d], using default %d",
            value, MIN_KEY_BITS, MAX_KEY_BITS, DEFAULT_KEY_BITS,
        )
        return DEFAULT_KEY_BITS


def keygen_params(
    key_bits: Optional[int] = None,
    certainty: Optional[int] = None,
    strict: Optional[bool] = None,
) -> KeyGenParams:
    """Build KeyGenParams, reporting any violation as InvalidParameterError."""
    values = {}
    if strict is not None:
        values["strict_key_bits"] = strict
    if key_bits is not None:
        values["key_bits"] = key_bits
    if certainty is not None:
        values["certainty"] = certainty
    try:
        return KeyGenParams(**values)
    except ValidationError as exc:
        raise InvalidParameterError(str(exc)) from exc


# ── Logging ────────────────────────────────────────
def setup_logging(level: Optional[str] = None) -> logging.Logger:
    """
    Attach a console handler to the package logger.

    Handlers from a previous call are replaced, so repeated calls leave
    exactly one handler in place.
    """
    pkg_logger = logging.getLogger(LOGGER_NAME)
    pkg_logger.setLevel(level or LOG_LEVEL)
    pkg_logger.handlers = []

    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )
    pkg_logger.addHandler(handler)

    return pkg_logger
