"""Clipboard utilities for the command-line tool.

Uses pyperclip for cross-platform clipboard access.
"""

from __future__ import annotations

import logging

import pyperclip


logger = logging.getLogger(__name__)


def copy_to_clipboard(text: str) -> bool:
    """Copy text to the system clipboard.

    Args:
        text: The text to copy. Empty text is not copied.

    Returns:
        True if the text reached the clipboard, False if there was nothing to
        copy or no clipboard mechanism is available.
    """
    if not text:
        return False
    try:
        pyperclip.copy(text)
    except pyperclip.PyperclipException as e:
        logger.warning("could not copy result to clipboard: %s", e)
        return False
    return True
