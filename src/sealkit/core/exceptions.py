"""
Exceptions for SealKit
Everything raised by the library derives from SealKitError so callers have one
general error catcher
"""


class SealKitError(Exception):
    # general container for errors
    pass


class FormatError(SealKitError):
    # raised when header/entry bytes are malformed or too short for a schema
    pass


class EntryNotFoundError(SealKitError):
    # raised when a header has no entry with the requested name
    pass


class InvalidArgumentError(SealKitError):
    # raised for illegal parameters (key size, unrepresentable entry values)
    pass


class CryptographicError(SealKitError):
    # raised when decryption fails (wrong passphrase or corrupted ciphertext alike)
    pass
