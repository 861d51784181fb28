import logging
from typing import Union

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from sealkit.core.exceptions import InvalidArgumentError
from sealkit.core.hashing import sha256_digest


logger = logging.getLogger(__name__)

# Used when the input has no non-zero byte to seed the iteration count
DEFAULT_ITERATION_BASE = 255
ITERATION_MULTIPLIER = 10


def _passphrase_bytes(passphrase: Union[str, bytes]) -> bytes:
    if isinstance(passphrase, str):
        return passphrase.encode("utf-8")
    return bytes(passphrase)


def iteration_count(value: bytes) -> int:
    """Return the PBKDF2 iteration count for ``value``.

    The first non-zero byte, times ten; 2550 when there is none.
    """
    base = next((b for b in value if b != 0), DEFAULT_ITERATION_BASE)
    return base * ITERATION_MULTIPLIER


def derive_digest(value: bytes, length: int) -> bytes:
    """
    Derive ``length`` pseudorandom bytes from ``value`` with PBKDF2-HMAC-SHA1.

    The salt is the SHA-256 of ``value`` and the iteration count comes from
    :func:`iteration_count`, so the result is a pure function of the input.
    """
    if length <= 0:
        raise InvalidArgumentError(f"digest length must be positive, got {length}")

    value = bytes(value)
    iterations = iteration_count(value)
    logger.debug("deriving %d bytes with %d PBKDF2 iterations", length, iterations)

    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA1(),
        length=length,
        salt=sha256_digest(value),
        iterations=iterations,
    )
    return kdf.derive(value)


def key_from_passphrase(passphrase: Union[str, bytes], length: int) -> bytes:
    """Derive a cipher key from the passphrase bytes."""
    return derive_digest(_passphrase_bytes(passphrase), length)


def iv_from_passphrase(passphrase: Union[str, bytes], length: int) -> bytes:
    """Derive an IV from the reversed passphrase bytes, so it differs from the key."""
    return derive_digest(_passphrase_bytes(passphrase)[::-1], length)
