"""Copy text to the system clipboard.

pyperclip picks the platform mechanism (pbcopy, xclip/xsel/wl-copy, or the
Windows clipboard API).
"""

from __future__ import annotations

import logging

import pyperclip

from contextpilot.errors import ClipboardError

logger = logging.getLogger("contextpilot.clipboard")


def copy_to_clipboard(text: str) -> None:
    """Copy ``text`` to the clipboard.

    Raises:
        ClipboardError: If no clipboard mechanism is available or it fails.
    """
    try:
        pyperclip.copy(text)
    except pyperclip.PyperclipException as e:
        raise ClipboardError(f"no clipboard available: {e}")
    logger.debug("Copied %d characters to the clipboard", len(text))
