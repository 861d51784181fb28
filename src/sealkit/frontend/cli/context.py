"""Small helper to build the runtime context for the command-line tool."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
import codecs
import getpass
import os

from sealkit.core.exceptions import InvalidArgumentError
from sealkit.security.crypto import (
    AesEncryptionProvider,
    DEFAULT_ENCODING,
    DEFAULT_KEY_SIZE,
    EncryptionProvider,
    HeaderFramedAesEncryptionProvider,
    validate_key_size,
)


ENV_PASSPHRASE = "SEALKIT_PASSPHRASE"
ENV_KEY_SIZE = "SEALKIT_KEY_SIZE"
ENV_ENCODING = "SEALKIT_ENCODING"
ENV_LEGACY = "SEALKIT_LEGACY"

_TRUTHY = ("1", "true", "yes", "on")


@dataclass
class ToolContext:
    """Container for the settings one command runs with."""

    provider: EncryptionProvider
    passphrase: str
    key_size: int = DEFAULT_KEY_SIZE
    encoding: str = DEFAULT_ENCODING
    legacy: bool = False


def _key_size_from_env() -> Optional[int]:
    raw = os.getenv(ENV_KEY_SIZE)
    if raw is None or not raw.strip():
        return None
    try:
        return int(raw)
    except ValueError as e:
        raise InvalidArgumentError(f"{ENV_KEY_SIZE} must be an integer, got {raw!r}") from e


def build_context(
    passphrase: Optional[str] = None,
    key_size: Optional[int] = None,
    encoding: Optional[str] = None,
    legacy: Optional[bool] = None,
    prompt: bool = True,
) -> ToolContext:
    """
    Resolve settings from explicit arguments, then the environment, then defaults.

    - ``SEALKIT_PASSPHRASE``: passphrase; when unset and ``prompt`` is true the
      user is asked for it with :func:`getpass.getpass`.
    - ``SEALKIT_KEY_SIZE``: AES key size in bits (128, 192 or 256).
    - ``SEALKIT_ENCODING``: text encoding used for the plaintext side.
    - ``SEALKIT_LEGACY``: ``1/true/yes/on`` selects the header-framed envelope.

    Raises:
        InvalidArgumentError: for an illegal key size, an unknown encoding or a
            missing passphrase.
    """
    if key_size is None:
        key_size = _key_size_from_env()
    if key_size is None:
        key_size = DEFAULT_KEY_SIZE
    # fail before anything prompts or touches the cipher
    validate_key_size(key_size)

    encoding = encoding or os.getenv(ENV_ENCODING) or DEFAULT_ENCODING
    try:
        codecs.lookup(encoding)
    except LookupError as e:
        raise InvalidArgumentError(f"unknown text encoding {encoding!r}") from e

    if legacy is None:
        legacy = os.getenv(ENV_LEGACY, "").strip().lower() in _TRUTHY

    if passphrase is None:
        passphrase = os.getenv(ENV_PASSPHRASE)
    if passphrase is None:
        if not prompt:
            raise InvalidArgumentError(f"no passphrase given and {ENV_PASSPHRASE} is not set")
        passphrase = getpass.getpass("Passphrase: ")

    provider = HeaderFramedAesEncryptionProvider() if legacy else AesEncryptionProvider()
    return ToolContext(
        provider=provider,
        passphrase=passphrase,
        key_size=key_size,
        encoding=encoding,
        legacy=legacy,
    )
