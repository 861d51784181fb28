"""Passphrase-based AES encryption of byte buffers and strings.

Two envelope formats are provided. They are not interchangeable.

``AesEncryptionProvider`` (default), all offsets in bytes:
- 16 bytes: random IV
- N bytes: AES-CBC ciphertext, PKCS7 padded

``HeaderFramedAesEncryptionProvider`` (legacy):
- 4 bytes: OriginalDataSize, little-endian int32
- N bytes: AES-CBC ciphertext, PKCS7 padded

The legacy format derives the IV from the passphrase, so every message under
the same passphrase shares one (key, IV) pair and equal plaintext prefixes
produce equal ciphertext prefixes. Use it only to read or write data that
must stay compatible with that format.

Neither format is authenticated. A wrong passphrase is detected only through
the padding (and, in the legacy format, the recorded length).
"""

from __future__ import annotations

import abc
import base64
import binascii
import logging
import os
from typing import Optional, Tuple

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from sealkit.core.container import DataContainer
from sealkit.core.exceptions import CryptographicError, FormatError, InvalidArgumentError
from sealkit.core.header import BinaryHeader, EntryType, HeaderEntry
from .digest import iv_from_passphrase, key_from_passphrase


logger = logging.getLogger(__name__)

BLOCK_SIZE = algorithms.AES.block_size // 8  # 16
LEGAL_KEY_SIZES = (128, 192, 256)
DEFAULT_KEY_SIZE = 256
DEFAULT_ENCODING = "utf-8"

ORIGINAL_DATA_SIZE = "OriginalDataSize"


def validate_key_size(key_size: int) -> int:
    """Return the key size in bytes, or raise if AES does not accept it."""
    if not isinstance(key_size, int) or isinstance(key_size, bool) or key_size not in LEGAL_KEY_SIZES:
        raise InvalidArgumentError(
            f"Invalid key size {key_size!r} for AES; expected one of {LEGAL_KEY_SIZES}"
        )
    return key_size // 8


def _encrypt_cbc(key: bytes, iv: bytes, data: bytes) -> bytes:
    padder = padding.PKCS7(algorithms.AES.block_size).padder()
    padded = padder.update(data) + padder.finalize()
    encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
    return encryptor.update(padded) + encryptor.finalize()


def _decrypt_cbc(key: bytes, iv: bytes, ciphertext: bytes) -> bytes:
    if not ciphertext or len(ciphertext) % BLOCK_SIZE:
        raise CryptographicError(
            f"ciphertext length {len(ciphertext)} is not a positive multiple of {BLOCK_SIZE}"
        )
    decryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).decryptor()
    padded = decryptor.update(ciphertext) + decryptor.finalize()
    unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
    try:
        return unpadder.update(padded) + unpadder.finalize()
    except ValueError as e:
        # Wrong passphrase and corrupted data look the same from here.
        raise CryptographicError("Padding is invalid and cannot be removed.") from e


class EncryptionProvider(abc.ABC):
    """
    Interface for passphrase-based encryption providers.

    ``encrypt_bytes``/``decrypt_bytes`` work on raw envelopes;
    ``encrypt_string``/``decrypt_string`` add a text encoding (UTF-8 unless
    ``encoding`` is given) on the plaintext side and base64 on the envelope
    side.
    """

    @property
    @abc.abstractmethod
    def is_nist_certified_algorithm(self) -> bool:
        """True if the underlying cipher is a NIST (FIPS 140-2) approved algorithm."""

    @abc.abstractmethod
    def encrypt_bytes(self, passphrase: str, value: bytes, key_size: int = DEFAULT_KEY_SIZE) -> bytes:
        ...

    @abc.abstractmethod
    def decrypt_bytes(self, passphrase: str, value: bytes, key_size: int = DEFAULT_KEY_SIZE) -> bytes:
        ...

    def encrypt_string(
        self,
        passphrase: str,
        value: str,
        encoding: Optional[str] = None,
        key_size: int = DEFAULT_KEY_SIZE,
    ) -> str:
        raw = value.encode(encoding or DEFAULT_ENCODING)
        return base64.b64encode(self.encrypt_bytes(passphrase, raw, key_size)).decode("ascii")

    def decrypt_string(
        self,
        passphrase: str,
        value: str,
        encoding: Optional[str] = None,
        key_size: int = DEFAULT_KEY_SIZE,
    ) -> str:
        validate_key_size(key_size)
        try:
            blob = base64.b64decode(value, validate=True)
        except (binascii.Error, ValueError) as e:
            raise FormatError(f"encrypted value is not valid base64: {e}") from e
        raw = self.decrypt_bytes(passphrase, blob, key_size)
        try:
            return raw.decode(encoding or DEFAULT_ENCODING)
        except UnicodeDecodeError as e:
            # garbage that slipped past the padding check is still a failed decryption
            raise CryptographicError("Decrypted data is not valid text in the requested encoding.") from e


class AesEncryptionProvider(EncryptionProvider):
    """
    AES-CBC with a fresh random IV per message, prepended to the ciphertext.

    The key is derived from the passphrase with
    :func:`sealkit.security.digest.key_from_passphrase`.
    """

    @property
    def is_nist_certified_algorithm(self) -> bool:
        return True

    def encrypt_bytes(self, passphrase: str, value: bytes, key_size: int = DEFAULT_KEY_SIZE) -> bytes:
        key_len = validate_key_size(key_size)
        iv = os.urandom(BLOCK_SIZE)
        key = key_from_passphrase(passphrase, key_len)
        ciphertext = _encrypt_cbc(key, iv, bytes(value))
        logger.debug("encrypted %d bytes with AES-%d (random IV)", len(value), key_size)
        return iv + ciphertext

    def decrypt_bytes(self, passphrase: str, value: bytes, key_size: int = DEFAULT_KEY_SIZE) -> bytes:
        key_len = validate_key_size(key_size)
        value = bytes(value)
        if len(value) < BLOCK_SIZE:
            raise CryptographicError(
                f"encrypted value is {len(value)} bytes, too short to hold a {BLOCK_SIZE}-byte IV"
            )
        iv, ciphertext = value[:BLOCK_SIZE], value[BLOCK_SIZE:]
        key = key_from_passphrase(passphrase, key_len)
        plaintext = _decrypt_cbc(key, iv, ciphertext)
        logger.debug("decrypted %d bytes with AES-%d (random IV)", len(plaintext), key_size)
        return plaintext


class HeaderFramedAesEncryptionProvider(EncryptionProvider):
    """
    Legacy AES-CBC envelope: passphrase-derived IV plus an OriginalDataSize header.

    Decryption trims the output to the recorded length instead of trusting
    whatever the padding leaves behind, and rejects the result if the two
    disagree.
    """

    @property
    def is_nist_certified_algorithm(self) -> bool:
        return True

    @staticmethod
    def header_schema() -> list:
        return [HeaderEntry.placeholder(ORIGINAL_DATA_SIZE, EntryType.INT32)]

    @staticmethod
    def _key_material(passphrase: str, key_len: int) -> Tuple[bytes, bytes]:
        return key_from_passphrase(passphrase, key_len), iv_from_passphrase(passphrase, BLOCK_SIZE)

    def encrypt_bytes(self, passphrase: str, value: bytes, key_size: int = DEFAULT_KEY_SIZE) -> bytes:
        key_len = validate_key_size(key_size)
        value = bytes(value)
        header = BinaryHeader([HeaderEntry(ORIGINAL_DATA_SIZE, len(value), EntryType.INT32)])
        key, iv = self._key_material(passphrase, key_len)
        container = DataContainer(header, _encrypt_cbc(key, iv, value))
        logger.debug("encrypted %d bytes with AES-%d (header framed)", len(value), key_size)
        return container.to_bytes()

    def decrypt_bytes(self, passphrase: str, value: bytes, key_size: int = DEFAULT_KEY_SIZE) -> bytes:
        key_len = validate_key_size(key_size)
        container = DataContainer.from_bytes(value, self.header_schema())
        original_size = container.header[ORIGINAL_DATA_SIZE].value
        if original_size < 0:
            raise CryptographicError(f"recorded data size {original_size} is negative")

        key, iv = self._key_material(passphrase, key_len)
        plaintext = _decrypt_cbc(key, iv, container.data)
        if len(plaintext) != original_size:
            raise CryptographicError(
                f"decrypted {len(plaintext)} bytes but the header records {original_size}"
            )
        logger.debug("decrypted %d bytes with AES-%d (header framed)", original_size, key_size)
        return plaintext
