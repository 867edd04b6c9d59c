"""Clipboard poller for clipkeep.

The OS clipboard is sampled on a background thread. A change is detected
through the backend's change counter; the new content is then read (text
first, image second) and handed to the capture callback as a
:class:`ClipboardEntry`.
"""

import logging
import threading
from datetime import datetime
from typing import Callable, Optional

from clipkeep.clipboard import ClipboardBackend, get_clipboard_backend
from clipkeep.models import ClipboardContent, ClipboardEntry, ImageContent, TextContent
from clipkeep.models.clipboard_entry import utc_now

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 1.0


class ClipboardService:
    """Polls the clipboard and reports every new piece of content once."""

    def __init__(
        self,
        on_capture: Optional[Callable[[ClipboardEntry], None]] = None,
        backend: Optional[ClipboardBackend] = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        clock: Callable[[], datetime] = utc_now,
        auto_register: bool = False,
    ) -> None:
        """Initialise the service.

        Args:
            on_capture: Receives each captured ``ClipboardEntry``; usually
                ``HistoryStore.upsert``.
            backend: Clipboard backend; defaults to the one for this platform.
            poll_interval: Seconds between two samples.
            clock: Source of capture timestamps.
            auto_register: When ``True`` polling starts immediately.
        """
        self._on_capture = on_capture or self._default_handler
        self.backend = backend or get_clipboard_backend()
        self.poll_interval = poll_interval
        self._clock = clock
        self._lock = threading.RLock()
        self._stop_event = threading.Event()
        self._poll_thread: Optional[threading.Thread] = None
        self._is_running = False
        self._last_change_count: Optional[int] = None

        if auto_register:
            self.start()

    @property
    def is_running(self) -> bool:
        return self._is_running

    # ---------------------------------------------------------------------
    # Lifecycle management
    # ---------------------------------------------------------------------
    def start(self) -> None:
        """Start background polling. Calling it again while running is a no-op.

        The counter value current at start is taken as already seen, so
        whatever is on the clipboard at launch is not captured.
        """
        with self._lock:
            if self._is_running:
                logger.debug("ClipboardService already running")
                return

            self._last_change_count = self._read_change_count()
            logger.info("Starting clipboard polling (interval=%ss)", self.poll_interval)
            self._stop_event.clear()
            self._is_running = True
            self._poll_thread = threading.Thread(
                target=self._poll_loop, name="clipkeep-poller", daemon=True)
            self._poll_thread.start()

    def stop(self) -> None:
        with self._lock:
            if not self._is_running:
                return

            logger.info("Stopping clipboard polling")
            self._is_running = False
            self._stop_event.set()

        # join outside the lock so a tick in progress can finish
        if self._poll_thread is not None:
            self._poll_thread.join(timeout=max(1.0, self.poll_interval * 2))
            self._poll_thread = None

    def run_forever(self) -> None:
        """Poll in the foreground until ``stop()`` is called or Ctrl+C."""
        try:
            if not self._is_running:
                self.start()

            while not self._stop_event.wait(timeout=self.poll_interval):
                continue
        except KeyboardInterrupt:
            logger.info("ClipboardService interrupted by user")
        finally:
            self.stop()

    # ---------------------------------------------------------------------
    # Polling
    # ---------------------------------------------------------------------
    def poll_once(self) -> Optional[ClipboardEntry]:
        """Run a single tick and return the captured entry, if any."""
        change_count = self._read_change_count()
        if change_count is None or change_count == self._last_change_count:
            return None

        # recorded before extraction so a failing read is not retried next tick
        self._last_change_count = change_count

        content = self._extract_content()
        if content is None:
            logger.debug("Clipboard changed to an unsupported format")
            return None

        entry = ClipboardEntry(content, self._clock())
        try:
            self._on_capture(entry)
        except Exception:
            logger.exception("Error while calling on_capture")
        return entry

    def _poll_loop(self) -> None:
        while not self._stop_event.is_set():
            self.poll_once()
            self._stop_event.wait(self.poll_interval)

    def _read_change_count(self) -> Optional[int]:
        try:
            return self.backend.change_count()
        except Exception:
            logger.debug("Could not read clipboard change counter", exc_info=True)
            return None

    def _extract_content(self) -> Optional[ClipboardContent]:
        text = self.backend.read_text()
        if text is not None:
            return TextContent(text)

        data = self.backend.read_image_bytes()
        if data is not None:
            return ImageContent(data)

        return None

    @staticmethod
    def _default_handler(entry: ClipboardEntry) -> None:
        logger.info("Clipboard captured @ %s | type=%s",
                    entry.captured_at.isoformat(), entry.kind)

    # ---------------------------------------------------------------------
    # Context manager helpers
    # ---------------------------------------------------------------------
    def __enter__(self) -> "ClipboardService":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
