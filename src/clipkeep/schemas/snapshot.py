"""
Serialized form of the clipboard history.

Layout written to the key-value slot (UTF-8 JSON):

    {
        "version": 1,
        "items": [
            {"type": "text", "payload": "hello", "capturedAt": "2025-10-06T12:45:00+00:00"},
            {"type": "image", "payload": "<base64>", "capturedAt": "..."}
        ]
    }

A bare JSON array of item records is read as the unversioned (version 0)
layout.
"""

import base64
import binascii
import json
from datetime import datetime, timezone
from typing import Iterable, List, Literal

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from clipkeep.models import ClipboardEntry, ImageContent, TextContent

SNAPSHOT_VERSION = 1


class SnapshotError(ValueError):
    """Raised when a persisted snapshot cannot be decoded."""


class SnapshotRecord(BaseModel):
    type: Literal["text", "image"]
    payload: str
    capturedAt: datetime

    @field_validator("capturedAt")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @model_validator(mode="after")
    def _check_image_payload(self) -> "SnapshotRecord":
        if self.type == "image":
            try:
                base64.b64decode(self.payload, validate=True)
            except binascii.Error as exc:
                raise ValueError(f"image payload is not valid base64: {exc}") from exc
        return self

    @classmethod
    def from_entry(cls, entry: ClipboardEntry) -> "SnapshotRecord":
        content = entry.content
        if isinstance(content, TextContent):
            payload = content.text
        elif isinstance(content, ImageContent):
            payload = base64.b64encode(content.data).decode("ascii")
        else:
            raise TypeError(f"Unsupported clipboard content: {content!r}")
        return cls(type=content.kind, payload=payload, capturedAt=entry.captured_at)

    def to_entry(self) -> ClipboardEntry:
        if self.type == "text":
            return ClipboardEntry(TextContent(self.payload), self.capturedAt)
        return ClipboardEntry(ImageContent(base64.b64decode(self.payload)), self.capturedAt)


class Snapshot(BaseModel):
    version: int = Field(default=SNAPSHOT_VERSION, ge=0)
    items: List[SnapshotRecord] = Field(default_factory=list)


def encode_snapshot(entries: Iterable[ClipboardEntry]) -> bytes:
    snapshot = Snapshot(items=[SnapshotRecord.from_entry(entry) for entry in entries])
    return snapshot.model_dump_json().encode("utf-8")


def decode_snapshot(data: bytes) -> List[ClipboardEntry]:
    try:
        raw = json.loads(data)
    except (ValueError, RecursionError) as exc:
        raise SnapshotError(f"snapshot is not valid JSON: {exc}") from exc

    if isinstance(raw, list):
        raw = {"version": 0, "items": raw}

    try:
        snapshot = Snapshot.model_validate(raw)
    except ValidationError as exc:
        raise SnapshotError(f"snapshot failed validation: {exc}") from exc

    if snapshot.version > SNAPSHOT_VERSION:
        raise SnapshotError(f"unsupported snapshot version {snapshot.version}")

    return [record.to_entry() for record in snapshot.items]
