"""History store for clipkeep.

The store is the single owner of the clipboard history. Every mutation
funnels through :class:`HistoryStore`, which keeps the list unique by content,
most-recent-first and no longer than the configured limit, writes a snapshot
to the key-value slot after each change and notifies subscribers.
"""

import logging
import threading
from datetime import datetime
from typing import Callable, Iterator, List, Optional

from clipkeep.clipboard import ClipboardBackend
from clipkeep.config import HistorySettings
from clipkeep.database import KeyValueStore
from clipkeep.models import ClipboardEntry
from clipkeep.models.clipboard_entry import utc_now
from clipkeep.schemas import SnapshotError, decode_snapshot, encode_snapshot

logger = logging.getLogger(__name__)

HISTORY_KEY = "clipboardHistory"

HistoryObserver = Callable[[List[ClipboardEntry]], None]


class HistoryStore:
    """Ordered, bounded, de-duplicated clipboard history."""

    def __init__(
        self,
        storage: KeyValueStore,
        settings: Optional[HistorySettings] = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.storage = storage
        self.settings = settings or HistorySettings()
        self._clock = clock
        self._items: List[ClipboardEntry] = []
        self._observers: List[HistoryObserver] = []
        self._lock = threading.RLock()

    # ---------------------------------------------------------------------
    # Read access
    # ---------------------------------------------------------------------
    @property
    def items(self) -> List[ClipboardEntry]:
        with self._lock:
            return list(self._items)

    def get(self, index: int) -> ClipboardEntry:
        with self._lock:
            return self._items[index]

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def __iter__(self) -> Iterator[ClipboardEntry]:
        return iter(self.items)

    # ---------------------------------------------------------------------
    # Mutations
    # ---------------------------------------------------------------------
    def upsert(self, entry: ClipboardEntry) -> None:
        """Insert ``entry`` at the front, dropping any entry with equal content.

        With ``history_limit == 0`` the entry is inserted and immediately
        truncated away, so the history ends up empty.
        """
        with self._lock:
            self._remove_content(entry)
            self._items.insert(0, entry)
            self._apply_limit()
            logger.debug("Upserted %s entry (%d in history)", entry.kind, len(self._items))
            self.persist()
            items = list(self._items)
        self._notify(items)

    def delete(self, entry: ClipboardEntry) -> None:
        with self._lock:
            if not self._remove_content(entry):
                logger.debug("Delete ignored: %s entry not in history", entry.kind)
                return
            self.persist()
            items = list(self._items)
        self._notify(items)

    def clear(self) -> None:
        with self._lock:
            self._items = []
            self.persist()
            items = list(self._items)
        self._notify(items)

    def load(self) -> None:
        """Restore the history from storage, then expire and cap it.

        Missing, unreadable or corrupt snapshots leave an empty history.
        """
        with self._lock:
            self._items = self._read_snapshot()
            self._apply_expiration()
            self._apply_limit()
            logger.info("Loaded %d clipboard entries", len(self._items))
            items = list(self._items)
        self._notify(items)

    def persist(self) -> bool:
        with self._lock:
            try:
                self.storage.set(HISTORY_KEY, encode_snapshot(self._items))
            except Exception as exc:
                logger.warning("Could not persist clipboard history: %s", exc)
                return False
            return True

    # ---------------------------------------------------------------------
    # Presentation helpers
    # ---------------------------------------------------------------------
    def subscribe(self, observer: HistoryObserver) -> Callable[[], None]:
        """Call ``observer`` with the new item list after every change.

        Returns a function that removes the observer again.
        """
        with self._lock:
            self._observers.append(observer)

        def unsubscribe() -> None:
            with self._lock:
                if observer in self._observers:
                    self._observers.remove(observer)

        return unsubscribe

    def copy_to_clipboard(self, entry: ClipboardEntry, backend: ClipboardBackend) -> bool:
        return backend.write(entry.content)

    # ---------------------------------------------------------------------
    # Internals
    # ---------------------------------------------------------------------
    def _remove_content(self, entry: ClipboardEntry) -> bool:
        for index, existing in enumerate(self._items):
            if existing.content == entry.content:
                del self._items[index]
                return True
        return False

    def _apply_limit(self) -> None:
        limit = self.settings.history_limit
        if len(self._items) > limit:
            self._items = self._items[:limit]

    def _apply_expiration(self) -> None:
        policy = self.settings.expiration
        if not policy.enabled:
            return
        now = self._clock()
        before = len(self._items)
        self._items = [
            item for item in self._items if not policy.is_expired(item.captured_at, now)
        ]
        expired = before - len(self._items)
        if expired:
            logger.info("Expired %d clipboard entries older than %s", expired, policy.window)

    def _read_snapshot(self) -> List[ClipboardEntry]:
        try:
            data = self.storage.get(HISTORY_KEY)
        except Exception as exc:
            logger.warning("Could not read clipboard history: %s", exc)
            return []

        if data is None:
            return []

        try:
            entries = decode_snapshot(data)
        except SnapshotError as exc:
            logger.warning("Discarding unreadable clipboard history: %s", exc)
            return []

        unique: List[ClipboardEntry] = []
        seen = set()
        for entry in entries:
            if entry.content in seen:
                continue
            seen.add(entry.content)
            unique.append(entry)
        return unique

    def _notify(self, items: List[ClipboardEntry]) -> None:
        # called without the lock held so observers may call back into the store
        with self._lock:
            observers = list(self._observers)
        for observer in observers:
            try:
                observer(items)
            except Exception:
                logger.exception("Error while notifying history observer")
