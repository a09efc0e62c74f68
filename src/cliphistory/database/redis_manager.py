import hashlib
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, Iterator, List, Optional

import redis

from cliphistory.database.base import Store
from cliphistory.exceptions import DuplicateContentError, StoreError
from cliphistory.models import ClipboardEntry


@contextmanager
def _store_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except redis.RedisError as e:
        raise StoreError(f"Redis {operation} failed", original_error=e) from e


class RedisStore(Store):
    """Clipboard history kept in Redis.

    Layout (``prefix`` defaults to ``cliphistory``)::

        {prefix}:entry:{entryId}     hash   entryId, content, timestamp, isFavourite
        {prefix}:content:{sha256}    string entryId owning that content
        {prefix}:entries             set    every entryId

    The content check, the index claim and the entry write run as one
    WATCH/MULTI transaction, so two writers racing on the same text cannot both
    create an entry. A content key whose owner differs always rejects the write;
    removing an entry hash by hand must remove its content key too.
    """

    def __init__(self, host: str = 'localhost', port: int = 6379, db: int = 0,
                 password: Optional[str] = None, key_prefix: str = 'cliphistory',
                 client: Optional[redis.Redis] = None):
        self.client = client or redis.Redis(
            host=host,
            port=port,
            db=db,
            password=password,
            decode_responses=True
        )
        self.key_prefix = key_prefix
        self._test_connection()

    def _test_connection(self):
        with _store_errors("ping"):
            self.client.ping()

    def _entry_key(self, entry_id: str) -> str:
        return f"{self.key_prefix}:entry:{entry_id}"

    def _content_key(self, content: str) -> str:
        digest = hashlib.sha256(content.encode('utf-8')).hexdigest()
        return f"{self.key_prefix}:content:{digest}"

    @property
    def _entries_key(self) -> str:
        return f"{self.key_prefix}:entries"

    @staticmethod
    def _serialize(entry: ClipboardEntry) -> Dict[str, str]:
        return {
            "entryId": entry.entry_id,
            "content": entry.content,
            "timestamp": entry.timestamp.isoformat(),
            "isFavourite": "1" if entry.is_favourite else "0",
        }

    @staticmethod
    def _deserialize(data: Dict[str, Any]) -> Optional[ClipboardEntry]:
        if not data:
            return None
        return ClipboardEntry(
            entry_id=data['entryId'],
            content=data['content'],
            timestamp=datetime.fromisoformat(data['timestamp']),
            is_favourite=data.get('isFavourite') == "1",
        )

    def find_by_content(self, content: str) -> Optional[ClipboardEntry]:
        with _store_errors("find_by_content"):
            entry_id = self.client.get(self._content_key(content))
            if not entry_id:
                return None
            entry = self._deserialize(self.client.hgetall(self._entry_key(entry_id)))

        # hash collisions are not trusted
        if entry is None or entry.content != content:
            return None
        return entry

    def get(self, entry_id: str) -> Optional[ClipboardEntry]:
        with _store_errors("get"):
            return self._deserialize(self.client.hgetall(self._entry_key(entry_id)))

    def upsert(self, entry: ClipboardEntry) -> ClipboardEntry:
        content_key = self._content_key(entry.content)

        def claim_and_write(pipe) -> None:
            owner = pipe.get(content_key)
            if owner and owner != entry.entry_id:
                raise DuplicateContentError(
                    f"Content already stored under {owner}")

            pipe.multi()
            pipe.set(content_key, entry.entry_id)
            pipe.hset(self._entry_key(entry.entry_id), mapping=self._serialize(entry))
            pipe.sadd(self._entries_key, entry.entry_id)

        with _store_errors("upsert"):
            self.client.transaction(claim_and_write, content_key)

        return entry

    def list_all(self) -> List[ClipboardEntry]:
        with _store_errors("list_all"):
            entry_ids = sorted(self.client.smembers(self._entries_key))
            if not entry_ids:
                return []

            pipe = self.client.pipeline()
            for entry_id in entry_ids:
                pipe.hgetall(self._entry_key(entry_id))
            rows = pipe.execute()

        entries = []
        for row in rows:
            entry = self._deserialize(row)
            if entry:
                entries.append(entry)
        return entries

    def count(self) -> int:
        with _store_errors("count"):
            return int(self.client.scard(self._entries_key))

    def health_check(self) -> Dict[str, Any]:
        with _store_errors("health_check"):
            info = self.client.info()
            return {
                "status": "healthy",
                "connected_clients": info.get('connected_clients', 0),
                "used_memory": info.get('used_memory_human', 'unknown'),
                "entries": self.count(),
            }

    def flush(self) -> bool:
        """Delete every key under this store's prefix."""
        with _store_errors("flush"):
            keys = list(self.client.scan_iter(match=f"{self.key_prefix}:*"))
            if keys:
                self.client.delete(*keys)
        return True

    def close(self):
        self.client.close()
