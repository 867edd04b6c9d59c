from typing import Optional

try:
    from AppKit import NSPasteboard, NSPasteboardTypeString, NSPasteboardTypeTIFF
    from Foundation import NSData
    HAS_APPKIT = True
except ImportError:
    HAS_APPKIT = False

from clipkeep.clipboard.base import ClipboardBackend


class MacOSClipboard(ClipboardBackend):
    """General pasteboard access through pyobjc. Images are kept as TIFF."""

    def __init__(self):
        if not HAS_APPKIT:
            raise RuntimeError("pyobjc (AppKit) is required for the macOS clipboard")
        self._pasteboard = NSPasteboard.generalPasteboard()

    def change_count(self) -> int:
        return int(self._pasteboard.changeCount())

    def _read_text(self) -> Optional[str]:
        text = self._pasteboard.stringForType_(NSPasteboardTypeString)
        return str(text) if text is not None else None

    def _read_image(self) -> Optional[bytes]:
        data = self._pasteboard.dataForType_(NSPasteboardTypeTIFF)
        return bytes(data) if data is not None else None

    def _clear(self) -> None:
        self._pasteboard.clearContents()

    def _write_text(self, text: str) -> None:
        self._pasteboard.setString_forType_(text, NSPasteboardTypeString)

    def _write_image(self, data: bytes) -> None:
        ns_data = NSData.dataWithBytes_length_(data, len(data))
        self._pasteboard.setData_forType_(ns_data, NSPasteboardTypeTIFF)
