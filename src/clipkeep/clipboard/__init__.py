"""
Cross-platform clipboard access.

Each backend exposes the same pull-only interface: a change counter plus
text and image readers, and a single write path used to re-copy an entry.
"""

from clipkeep.clipboard.base import ClipboardBackend
from clipkeep.clipboard.factory import get_clipboard_class, get_clipboard_backend

__all__ = [
    'ClipboardBackend',
    'get_clipboard_class',
    'get_clipboard_backend',
]
