from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Union


@dataclass(frozen=True)
class TextContent:
	"""Plain text copied to the clipboard."""
	text: str

	@property
	def kind(self) -> str:
		return "text"


@dataclass(frozen=True)
class ImageContent:
	"""Encoded image bytes (TIFF, PNG, ...) exactly as the clipboard returned them."""
	data: bytes

	@property
	def kind(self) -> str:
		return "image"


ClipboardContent = Union[TextContent, ImageContent]


def utc_now() -> datetime:
	return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ClipboardEntry:
	"""One history item. Two entries are equal when their content is equal."""
	content: ClipboardContent
	captured_at: datetime = field(default_factory=utc_now, compare=False)

	@classmethod
	def text(cls, text: str, captured_at: Optional[datetime] = None) -> "ClipboardEntry":
		return cls(TextContent(text), captured_at or utc_now())

	@classmethod
	def image(cls, data: bytes, captured_at: Optional[datetime] = None) -> "ClipboardEntry":
		return cls(ImageContent(data), captured_at or utc_now())

	@property
	def kind(self) -> str:
		return self.content.kind
