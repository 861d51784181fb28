"""SealKit: passphrase-based AES encryption with a self-describing binary envelope."""

__version__ = "1.0.0"
