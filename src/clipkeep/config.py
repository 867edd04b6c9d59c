"""Configuration for the clipboard history engine and its storage."""

import os
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

from dotenv import load_dotenv

DEFAULT_HISTORY_LIMIT = 50
HISTORY_LIMIT_CHOICES = (10, 20, 50, 100, 200)

EXPIRATION_PRESETS = {
    "never": None,
    "hour": timedelta(hours=1),
    "day": timedelta(days=1),
    "week": timedelta(weeks=1),
    "month": timedelta(days=30),
}

STORAGE_BACKENDS = ("file", "redis", "memory")


class ConfigError(ValueError):
    """Raised when a configuration value is invalid."""


@dataclass(frozen=True)
class ExpirationPolicy:
    """Either ``never`` (window is None) or "older than ``window``"."""
    window: Optional[timedelta] = None
    name: str = "never"

    @classmethod
    def never(cls) -> "ExpirationPolicy":
        return cls()

    @classmethod
    def older_than(cls, window: timedelta, name: Optional[str] = None) -> "ExpirationPolicy":
        if window <= timedelta(0):
            raise ConfigError(f"Expiration window must be positive, got {window}")
        return cls(window=window, name=name or f"older_than:{window}")

    @classmethod
    def from_name(cls, name: str) -> "ExpirationPolicy":
        key = name.strip().lower()
        if key not in EXPIRATION_PRESETS:
            raise ConfigError(
                f"Unknown expiration {name!r}; expected one of {', '.join(EXPIRATION_PRESETS)}")
        window = EXPIRATION_PRESETS[key]
        if window is None:
            return cls.never()
        return cls.older_than(window, name=key)

    @property
    def enabled(self) -> bool:
        return self.window is not None

    def cutoff(self, now: datetime) -> Optional[datetime]:
        if self.window is None:
            return None
        return now - self.window

    def is_expired(self, captured_at: datetime, now: datetime) -> bool:
        cutoff = self.cutoff(now)
        return cutoff is not None and captured_at < cutoff


def _to_int(name: str, raw: Optional[str], default: int) -> int:
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from exc


@dataclass
class HistorySettings:
    """Values the history store reads on every upsert and load.

    Mutating an instance takes effect at the next upsert (limit) or the next
    load (limit and expiration); the in-memory history is never re-filtered
    on the spot.
    """
    history_limit: int = DEFAULT_HISTORY_LIMIT
    expiration: ExpirationPolicy = field(default_factory=ExpirationPolicy.never)
    time_format: str = "%H:%M"

    def __post_init__(self) -> None:
        if self.history_limit < 0:
            raise ConfigError(f"history_limit must not be negative, got {self.history_limit}")

    @classmethod
    def from_env(cls, *, env_path: Optional[Path] = None) -> "HistorySettings":
        load_dotenv(env_path)

        limit = _to_int("CLIPKEEP_HISTORY_LIMIT", os.getenv("CLIPKEEP_HISTORY_LIMIT"),
                        DEFAULT_HISTORY_LIMIT)
        expiration = ExpirationPolicy.from_name(os.getenv("CLIPKEEP_EXPIRATION", "never"))
        time_format = os.getenv("CLIPKEEP_TIME_FORMAT") or "%H:%M"

        return cls(history_limit=limit, expiration=expiration, time_format=time_format)


@dataclass(frozen=True)
class RedisConfig:
    host: str = "localhost"
    port: int = 6379
    db: int = 0
    password: Optional[str] = None

    @classmethod
    def from_env(cls, *, env_path: Optional[Path] = None) -> "RedisConfig":
        load_dotenv(env_path)

        uri = os.getenv("REDIS_URI")
        if uri:
            return cls.from_uri(uri)

        host = os.getenv("REDIS_HOST", cls.host)
        port = _to_int("REDIS_PORT", os.getenv("REDIS_PORT"), cls.port)
        db = _to_int("REDIS_DB", os.getenv("REDIS_DB"), cls.db)
        password = os.getenv("REDIS_PASSWORD") or None

        return cls(host=host, port=port, db=db, password=password)

    @classmethod
    def from_uri(cls, uri: str) -> "RedisConfig":
        parsed = urlparse(uri)
        if parsed.scheme not in {"redis", "rediss"}:
            raise ConfigError(
                f"Unsupported Redis URI scheme: {parsed.scheme!r}")

        host = parsed.hostname or cls.host
        port = parsed.port or cls.port
        password = parsed.password or None
        db_fragment = parsed.path.lstrip("/")
        db = _to_int("REDIS_URI database", db_fragment, cls.db)

        return cls(host=host, port=port, db=db, password=password)


@dataclass(frozen=True)
class StorageConfig:
    backend: str = "file"
    data_dir: Path = field(default_factory=lambda: Path.home() / ".clipkeep")
    redis: RedisConfig = field(default_factory=RedisConfig)

    def __post_init__(self) -> None:
        if self.backend not in STORAGE_BACKENDS:
            raise ConfigError(
                f"Unknown storage backend {self.backend!r}; expected one of {', '.join(STORAGE_BACKENDS)}")

    @classmethod
    def from_env(cls, *, env_path: Optional[Path] = None) -> "StorageConfig":
        load_dotenv(env_path)

        backend = (os.getenv("CLIPKEEP_STORAGE") or "file").strip().lower()
        data_dir_raw = os.getenv("CLIPKEEP_DATA_DIR")
        data_dir = Path(data_dir_raw).expanduser() if data_dir_raw else Path.home() / ".clipkeep"

        return cls(backend=backend, data_dir=data_dir, redis=RedisConfig.from_env(env_path=env_path))
