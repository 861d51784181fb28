"""
Logging for the ``sealkit`` command.

Ciphertext and decrypted text go to stdout, so every log line goes to stderr.
Verbosity comes from the repeatable ``-v`` flag.
"""

import logging
import sys


LOG_FORMAT = "%(levelname)s sealkit[%(name)s]: %(message)s"


def level_for_verbosity(verbose: int) -> int:
    """Map the count of ``-v`` flags to a logging level."""
    if verbose <= 0:
        return logging.WARNING
    if verbose == 1:
        return logging.INFO
    return logging.DEBUG


def configure_logging(level: int = logging.WARNING) -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr)
    # basicConfig is a no-op once handlers exist; later calls still move the level
    logging.getLogger().setLevel(level)
