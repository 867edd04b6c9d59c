from clipkeep.models.clipboard_entry import (
    ClipboardContent,
    ClipboardEntry,
    ImageContent,
    TextContent,
)

__all__ = [
    'ClipboardContent',
    'ClipboardEntry',
    'ImageContent',
    'TextContent',
]
