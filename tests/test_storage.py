from unittest import mock

import pytest
import redis

from clipkeep.database import FileKeyValueStore, MemoryKeyValueStore, RedisKeyValueStore


def test_memory_store_roundtrip():
    store = MemoryKeyValueStore()

    assert store.get("clipboardHistory") is None
    store.set("clipboardHistory", b"[]")
    assert store.get("clipboardHistory") == b"[]"


def test_file_store_roundtrip(tmp_path):
    store = FileKeyValueStore(tmp_path / "data")

    assert store.get("clipboardHistory") is None
    store.set("clipboardHistory", b'{"version": 1, "items": []}')

    assert store.get("clipboardHistory") == b'{"version": 1, "items": []}'
    assert store.path_for("clipboardHistory").exists()
    assert not list((tmp_path / "data").glob("*.tmp"))


def test_file_store_overwrites(tmp_path):
    store = FileKeyValueStore(tmp_path)
    store.set("k", b"first")
    store.set("k", b"second")

    assert FileKeyValueStore(tmp_path).get("k") == b"second"


def test_file_store_sanitises_keys(tmp_path):
    store = FileKeyValueStore(tmp_path)

    assert store.path_for("../escape/key").parent == tmp_path


def test_redis_store_namespaces_keys():
    client = mock.MagicMock()
    client.get.return_value = b"payload"
    store = RedisKeyValueStore(client=client)

    store.set("clipboardHistory", b"data")
    value = store.get("clipboardHistory")

    client.ping.assert_called_once()
    client.set.assert_called_once_with("clipkeep:clipboardHistory", b"data")
    client.get.assert_called_once_with("clipkeep:clipboardHistory")
    assert value == b"payload"


def test_redis_store_missing_key():
    client = mock.MagicMock()
    client.get.return_value = None

    assert RedisKeyValueStore(client=client).get("nothing") is None


def test_redis_store_requires_connection():
    client = mock.MagicMock()
    client.ping.side_effect = redis.ConnectionError("refused")

    with pytest.raises(redis.ConnectionError):
        RedisKeyValueStore(client=client)
