#!/usr/bin/env python3

import argparse
import logging
import signal
import sys
import time
from typing import List, Optional

from clipkeep.clipboard import get_clipboard_backend
from clipkeep.config import (
    EXPIRATION_PRESETS,
    STORAGE_BACKENDS,
    ConfigError,
    ExpirationPolicy,
    HistorySettings,
    StorageConfig,
)
from clipkeep.database import FileKeyValueStore, KeyValueStore, MemoryKeyValueStore
from clipkeep.services import ClipboardService, HistoryStore
from clipkeep.utils.preview import describe_entry, format_time

logger = logging.getLogger(__name__)


def create_storage(config: StorageConfig) -> KeyValueStore:
    if config.backend == "memory":
        return MemoryKeyValueStore()

    if config.backend == "redis":
        try:
            from clipkeep.database.redis_manager import RedisKeyValueStore
            store = RedisKeyValueStore(
                host=config.redis.host,
                port=config.redis.port,
                db=config.redis.db,
                password=config.redis.password,
            )
            logger.info("Redis connected - %s:%s/%s",
                        config.redis.host, config.redis.port, config.redis.db)
            return store
        except Exception as e:
            logger.warning(
                f"Redis unavailable, falling back to file storage: {e}")

    return FileKeyValueStore(config.data_dir)


class ClipkeepApp:

    def __init__(
        self,
        settings: HistorySettings,
        storage: KeyValueStore,
        poll_interval: float = 1.0,
    ):
        self.settings = settings
        self.storage = storage
        self.poll_interval = poll_interval
        self.history = HistoryStore(storage, settings)
        self.clipboard_service: Optional[ClipboardService] = None
        self.running = False

    def _on_history_changed(self, items) -> None:
        if items:
            logger.info(f"History updated: {len(items)} items, latest {items[0].kind}")
        else:
            logger.info("History is empty")

    def start(self):
        if self.running:
            return

        self.running = True

        try:
            self.history.load()
            self.history.subscribe(self._on_history_changed)
            self.clipboard_service = ClipboardService(
                on_capture=self.history.upsert,
                poll_interval=self.poll_interval,
                auto_register=True
            )
            print(f"clipkeep running ({len(self.history)} items). Press Ctrl+C to stop")
        except Exception as e:
            logger.error(f"Error starting: {e}")
            self.stop()

    def stop(self):
        if not self.running:
            return

        self.running = False

        if self.clipboard_service:
            self.clipboard_service.stop()

        self.storage.close()
        print("clipkeep stopped")

    def run_forever(self):
        self.start()

        try:
            while self.running:
                time.sleep(1.0)
        except KeyboardInterrupt:
            print("\nStopping...")
        finally:
            self.stop()

    def list_history(self) -> List[str]:
        self.history.load()
        lines = []
        for index, entry in enumerate(self.history):
            stamp = format_time(entry.captured_at, self.settings.time_format)
            lines.append(f"{index:>3}  {stamp}  {describe_entry(entry)}")
        return lines

    def copy_entry(self, index: int) -> bool:
        self.history.load()
        entry = self.history.get(index)
        return self.history.copy_to_clipboard(entry, get_clipboard_backend())

    def delete_entry(self, index: int) -> None:
        self.history.load()
        self.history.delete(self.history.get(index))

    def clear_history(self) -> None:
        self.history.clear()


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="clipkeep - Bounded, time-aware clipboard history"
    )

    parser.add_argument(
        "-l", "--limit",
        type=int,
        default=None,
        help="Maximum number of history items (default: CLIPKEEP_HISTORY_LIMIT or 50)"
    )

    parser.add_argument(
        "-e", "--expiration",
        choices=sorted(EXPIRATION_PRESETS),
        default=None,
        help="Drop items older than this when history is loaded (default: never)"
    )

    parser.add_argument(
        "-i", "--poll-interval",
        type=float,
        default=1.0,
        help="Clipboard polling interval in seconds (default: 1.0)"
    )

    parser.add_argument(
        "-s", "--storage",
        choices=STORAGE_BACKENDS,
        default=None,
        help="Where history is persisted (default: CLIPKEEP_STORAGE or file)"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose debug logging"
    )

    commands = parser.add_mutually_exclusive_group()
    commands.add_argument(
        "--list",
        action="store_true",
        help="Print the stored history and exit"
    )
    commands.add_argument(
        "--copy",
        type=int,
        metavar="INDEX",
        help="Copy history item INDEX back to the clipboard and exit"
    )
    commands.add_argument(
        "--delete",
        type=int,
        metavar="INDEX",
        help="Delete history item INDEX and exit"
    )
    commands.add_argument(
        "--clear",
        action="store_true",
        help="Delete the whole history and exit"
    )

    return parser.parse_args(argv)


def build_app(args) -> ClipkeepApp:
    settings = HistorySettings.from_env()
    if args.limit is not None:
        if args.limit < 0:
            raise ConfigError(f"--limit must not be negative, got {args.limit}")
        settings.history_limit = args.limit
    if args.expiration is not None:
        settings.expiration = ExpirationPolicy.from_name(args.expiration)

    storage_config = StorageConfig.from_env()
    if args.storage is not None:
        storage_config = StorageConfig(
            backend=args.storage,
            data_dir=storage_config.data_dir,
            redis=storage_config.redis,
        )

    return ClipkeepApp(
        settings=settings,
        storage=create_storage(storage_config),
        poll_interval=args.poll_interval,
    )


def main(argv=None):
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(levelname)s: %(message)s'
    )

    try:
        app = build_app(args)
    except ConfigError as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(2)

    try:
        if args.list:
            for line in app.list_history():
                print(line)
            return
        if args.copy is not None:
            if not app.copy_entry(args.copy):
                sys.exit(1)
            return
        if args.delete is not None:
            app.delete_entry(args.delete)
            return
        if args.clear:
            app.clear_history()
            return
    except IndexError:
        logger.error("No history item at that index")
        sys.exit(1)
    finally:
        if args.list or args.clear or args.copy is not None or args.delete is not None:
            app.storage.close()

    def signal_handler(signum, frame):
        app.stop()
        sys.exit(0)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    try:
        app.run_forever()
    except Exception as e:
        logger.error(f"Fatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
