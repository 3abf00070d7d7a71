"""Clipboard access."""

import pyperclip

from .errors import ClipboardError


def copy_to_clipboard(text: str):
    """Copy text to the system clipboard.

    Raises:
        ClipboardError: If no clipboard mechanism is available
            (e.g. no xclip/xsel/wl-clipboard on Linux)
    """
    try:
        pyperclip.copy(text)
    except pyperclip.PyperclipException as e:
        raise ClipboardError(f"could not copy to clipboard: {e}") from e
