import io
import logging
import time
from typing import Optional

import win32clipboard as wc
import win32con
from PIL import Image, ImageGrab

from clipkeep.clipboard.base import ClipboardBackend
from clipkeep.models import ClipboardContent

logger = logging.getLogger(__name__)


class WindowsClipboard(ClipboardBackend):

    def change_count(self) -> int:
        return wc.GetClipboardSequenceNumber()

    def _open(self) -> bool:
        for _ in range(3):
            try:
                wc.OpenClipboard()
                return True
            except Exception:
                time.sleep(0.05)
        return False

    def _close(self) -> None:
        try:
            wc.CloseClipboard()
        except Exception:
            pass

    def _read_text(self) -> Optional[str]:
        if not self._open():
            return None
        try:
            if not wc.IsClipboardFormatAvailable(wc.CF_UNICODETEXT):
                return None
            return wc.GetClipboardData(wc.CF_UNICODETEXT)
        finally:
            self._close()

    def _read_image(self) -> Optional[bytes]:
        clipboard_data = ImageGrab.grabclipboard()
        # a list means files were copied, not image data
        if clipboard_data is None or not hasattr(clipboard_data, "save"):
            return None

        output = io.BytesIO()
        clipboard_data.save(output, format="PNG")
        return output.getvalue()

    def write(self, content: ClipboardContent) -> bool:
        # EmptyClipboard and SetClipboardData must share one open session
        if not self._open():
            logger.warning("Clipboard is locked by another application")
            return False
        try:
            return super().write(content)
        finally:
            self._close()

    def _clear(self) -> None:
        wc.EmptyClipboard()

    def _write_text(self, text: str) -> None:
        wc.SetClipboardData(wc.CF_UNICODETEXT, text)

    def _write_image(self, data: bytes) -> None:
        image = Image.open(io.BytesIO(data))

        if image.mode == "RGBA":
            background = Image.new("RGB", image.size, (255, 255, 255))
            background.paste(image, mask=image.split()[3])
            image = background
        elif image.mode != "RGB":
            image = image.convert("RGB")

        output = io.BytesIO()
        image.save(output, "BMP")
        bmp_data = output.getvalue()
        if len(bmp_data) <= 14:
            raise ValueError("Image could not be converted to a bitmap")

        # CF_DIB is the bitmap without its 14-byte file header
        wc.SetClipboardData(win32con.CF_DIB, bmp_data[14:])
