import logging
from abc import ABC, abstractmethod
from typing import Optional

from clipkeep.models import ClipboardContent, ImageContent, TextContent

logger = logging.getLogger(__name__)


class ClipboardBackend(ABC):

    @abstractmethod
    def change_count(self) -> int:
        pass

    @abstractmethod
    def _read_text(self) -> Optional[str]:
        pass

    @abstractmethod
    def _read_image(self) -> Optional[bytes]:
        pass

    @abstractmethod
    def _clear(self) -> None:
        pass

    @abstractmethod
    def _write_text(self, text: str) -> None:
        pass

    @abstractmethod
    def _write_image(self, data: bytes) -> None:
        pass

    def read_text(self) -> Optional[str]:
        try:
            text = self._read_text()
        except Exception:
            logger.debug("Text extraction failed", exc_info=True)
            return None
        return text

    def read_image_bytes(self) -> Optional[bytes]:
        try:
            data = self._read_image()
        except Exception:
            logger.debug("Image extraction failed", exc_info=True)
            return None
        return bytes(data) if data else None

    def write(self, content: ClipboardContent) -> bool:
        try:
            self._clear()
            if isinstance(content, TextContent):
                self._write_text(content.text)
            elif isinstance(content, ImageContent):
                self._write_image(content.data)
            else:
                raise TypeError(f"Unsupported clipboard content: {content!r}")
            return True
        except Exception:
            logger.exception("Failed to write to clipboard")
            return False
