import threading

from clipkeep.models import ImageContent, TextContent
from clipkeep.services import ClipboardService

from conftest import NOW


def make_service(clipboard, clock, captured=None, **kwargs):
    captured = captured if captured is not None else []
    service = ClipboardService(on_capture=captured.append, backend=clipboard,
                               clock=clock, **kwargs)
    return service, captured


def test_unchanged_counter_is_noop(clipboard, clock):
    clipboard.copy(text="hello")
    service, captured = make_service(clipboard, clock)
    service._last_change_count = clipboard.count

    assert service.poll_once() is None
    assert captured == []
    assert clipboard.text_reads == 0


def test_new_text_is_captured(clipboard, clock):
    service, captured = make_service(clipboard, clock)
    service._last_change_count = clipboard.count

    clipboard.copy(text="hello")
    entry = service.poll_once()

    assert entry is not None
    assert captured == [entry]
    assert entry.content == TextContent("hello")
    assert entry.captured_at == NOW


def test_text_wins_over_image(clipboard, clock):
    service, captured = make_service(clipboard, clock)

    clipboard.copy(text="caption", image=b"\x89PNG")
    service.poll_once()

    assert captured[0].content == TextContent("caption")
    assert clipboard.image_reads == 0


def test_image_used_when_no_text(clipboard, clock):
    service, captured = make_service(clipboard, clock)

    clipboard.copy(image=b"II*\x00")
    service.poll_once()

    assert captured[0].content == ImageContent(b"II*\x00")


def test_empty_text_ends_the_tick_at_text(clipboard, clock):
    service, captured = make_service(clipboard, clock)

    clipboard.copy(text="", image=b"II*\x00")
    service.poll_once()

    assert captured[0].content == TextContent("")
    assert clipboard.image_reads == 0


def test_unsupported_format_still_records_counter(clipboard, clock):
    service, captured = make_service(clipboard, clock)

    clipboard.copy()
    assert service.poll_once() is None
    assert service._last_change_count == clipboard.count

    reads = clipboard.text_reads
    service.poll_once()
    assert clipboard.text_reads == reads
    assert captured == []


def test_extraction_failure_is_silent_and_not_retried(clipboard, clock):
    service, captured = make_service(clipboard, clock)
    clipboard.fail_reads = True

    clipboard.copy(text="hello")
    assert service.poll_once() is None

    clipboard.fail_reads = False
    assert service.poll_once() is None
    assert captured == []

    clipboard.copy(text="again")
    assert service.poll_once().content == TextContent("again")


def test_counter_failure_is_silent(clipboard, clock):
    def broken():
        raise OSError("no display")

    clipboard.change_count = broken
    service, captured = make_service(clipboard, clock)

    assert service.poll_once() is None
    assert captured == []


def test_capture_callback_errors_are_contained(clipboard, clock):
    def explode(entry):
        raise RuntimeError("store failed")

    service = ClipboardService(on_capture=explode, backend=clipboard, clock=clock)
    clipboard.copy(text="hello")

    assert service.poll_once() is not None


def test_start_skips_content_present_at_launch(clipboard, clock):
    clipboard.copy(text="before launch")
    service, captured = make_service(clipboard, clock, poll_interval=60)

    service.start()
    try:
        assert service._last_change_count == clipboard.count
        assert service.poll_once() is None
    finally:
        service.stop()

    assert captured == []


def test_start_is_idempotent(clipboard, clock):
    service, _ = make_service(clipboard, clock, poll_interval=60)

    service.start()
    thread = service._poll_thread
    service.start()
    try:
        assert service._poll_thread is thread
        assert service.is_running
        assert [t for t in threading.enumerate() if t.name == "clipkeep-poller"] == [thread]
    finally:
        service.stop()

    assert not service.is_running


def test_background_thread_feeds_callback(clipboard, clock):
    got_entry = threading.Event()
    captured = []

    def on_capture(entry):
        captured.append(entry)
        got_entry.set()

    service = ClipboardService(on_capture=on_capture, backend=clipboard,
                               clock=clock, poll_interval=0.01)
    with service:
        clipboard.copy(text="from thread")
        assert got_entry.wait(timeout=5)

    assert captured[0].content == TextContent("from thread")


def test_poller_feeds_history_store(clipboard, clock, history):
    service = ClipboardService(on_capture=history.upsert, backend=clipboard, clock=clock)

    for text in ("a", "b", "a"):
        clipboard.copy(text=text)
        service.poll_once()

    assert [e.content.text for e in history.items] == ["a", "b"]


def test_recopy_from_history_promotes_entry(clipboard, clock, history):
    service = ClipboardService(on_capture=history.upsert, backend=clipboard, clock=clock)
    for text in ("a", "b", "c"):
        clipboard.copy(text=text)
        service.poll_once()

    assert history.copy_to_clipboard(history.get(2), clipboard)
    service.poll_once()

    assert [e.content.text for e in history.items] == ["a", "c", "b"]
