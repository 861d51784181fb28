"""Security helpers: passphrase key derivation and AES envelopes for SealKit.

This package provides:
- PBKDF2 key/IV derivation that is a pure function of the passphrase
- ``AesEncryptionProvider``: random IV prepended to the ciphertext (default)
- ``HeaderFramedAesEncryptionProvider``: legacy deterministic-IV envelope
  with an OriginalDataSize header
"""

from .digest import derive_digest, iteration_count, key_from_passphrase, iv_from_passphrase
from .crypto import (
    EncryptionProvider,
    AesEncryptionProvider,
    HeaderFramedAesEncryptionProvider,
    validate_key_size,
    BLOCK_SIZE,
    LEGAL_KEY_SIZES,
    DEFAULT_KEY_SIZE,
)

__all__ = [
    "derive_digest",
    "iteration_count",
    "key_from_passphrase",
    "iv_from_passphrase",
    "EncryptionProvider",
    "AesEncryptionProvider",
    "HeaderFramedAesEncryptionProvider",
    "validate_key_size",
    "BLOCK_SIZE",
    "LEGAL_KEY_SIZES",
    "DEFAULT_KEY_SIZE",
]
