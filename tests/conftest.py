from datetime import datetime, timedelta, timezone
from typing import List, Optional

import pytest

from clipkeep.clipboard.base import ClipboardBackend
from clipkeep.config import HistorySettings
from clipkeep.database import MemoryKeyValueStore
from clipkeep.services import HistoryStore

NOW = datetime(2025, 10, 6, 12, 0, tzinfo=timezone.utc)


class FakeClipboard(ClipboardBackend):
    """In-memory clipboard with a manually driven change counter."""

    def __init__(self):
        self.count = 0
        self.text: Optional[str] = None
        self.image: Optional[bytes] = None
        self.fail_reads = False
        self.fail_writes = False
        self.text_reads = 0
        self.image_reads = 0
        self.writes: List[str] = []

    def copy(self, text: Optional[str] = None, image: Optional[bytes] = None) -> None:
        self.text = text
        self.image = image
        self.count += 1

    def change_count(self) -> int:
        return self.count

    def _read_text(self):
        self.text_reads += 1
        if self.fail_reads:
            raise OSError("clipboard busy")
        return self.text

    def _read_image(self):
        self.image_reads += 1
        if self.fail_reads:
            raise OSError("clipboard busy")
        return self.image

    def _clear(self) -> None:
        if self.fail_writes:
            raise OSError("clipboard locked")
        self.writes.append("clear")
        self.text = None
        self.image = None
        self.count += 1

    def _write_text(self, text: str) -> None:
        self.writes.append("text")
        self.text = text

    def _write_image(self, data: bytes) -> None:
        self.writes.append("image")
        self.image = data


class Clock:

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clipboard():
    return FakeClipboard()


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def storage():
    return MemoryKeyValueStore()


@pytest.fixture
def settings():
    return HistorySettings(history_limit=50)


@pytest.fixture
def history(storage, settings, clock):
    return HistoryStore(storage, settings, clock=clock)
