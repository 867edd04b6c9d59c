import logging
from typing import Optional

import redis

from clipkeep.database.base import KeyValueStore

logger = logging.getLogger(__name__)


class RedisKeyValueStore(KeyValueStore):

    def __init__(self, host: str = 'localhost', port: int = 6379, db: int = 0,
                 password: Optional[str] = None, namespace: str = "clipkeep",
                 client: Optional[redis.Redis] = None):
        self.namespace = namespace
        self.client = client or redis.Redis(
            host=host,
            port=port,
            db=db,
            password=password,
            decode_responses=False
        )
        self._test_connection()

    def _test_connection(self):
        try:
            self.client.ping()
        except redis.ConnectionError:
            logger.warning("Redis is not reachable")
            raise

    def _key(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    def get(self, key: str) -> Optional[bytes]:
        value = self.client.get(self._key(key))
        if value is None:
            return None
        if isinstance(value, str):
            return value.encode("utf-8")
        return bytes(value)

    def set(self, key: str, value: bytes) -> None:
        self.client.set(self._key(key), value)

    def close(self):
        self.client.close()
