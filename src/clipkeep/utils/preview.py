import io
import logging
from datetime import datetime

from PIL import Image, UnidentifiedImageError

from clipkeep.models import ClipboardEntry, ImageContent, TextContent

logger = logging.getLogger(__name__)


def describe_entry(entry: ClipboardEntry, max_length: int = 60) -> str:
    """One-line preview of an entry for listings."""
    content = entry.content
    if isinstance(content, TextContent):
        text = " ".join(content.text.split())
        if len(text) > max_length:
            text = text[: max_length - 1] + "…"
        return text
    if isinstance(content, ImageContent):
        return describe_image(content.data)
    raise TypeError(f"Unsupported clipboard content: {content!r}")


def describe_image(data: bytes) -> str:
    try:
        with Image.open(io.BytesIO(data)) as image:
            width, height = image.size
            return f"[image {width}x{height} {image.format or ''}]".replace(" ]", "]")
    except (UnidentifiedImageError, OSError):
        logger.debug("Could not identify image of %d bytes", len(data))
        return f"[image {len(data)} bytes]"


def format_time(captured_at: datetime, pattern: str) -> str:
    return captured_at.astimezone().strftime(pattern)
