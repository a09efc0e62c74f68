from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

from dotenv import find_dotenv, load_dotenv

from cliphistory.database.redis_manager import RedisStore

DEFAULT_POLL_INTERVAL = 1.0
DEFAULT_RECENT_LIMIT = 20


def _load_env_file(env_path: Optional[Path] = None) -> None:
    # existing environment variables win over the file
    if env_path is not None:
        load_dotenv(env_path, override=False)
    else:
        load_dotenv(find_dotenv(usecwd=True), override=False)


def _to_bool(value: Optional[str], default: bool = True) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _to_float(value: Optional[str], default: Optional[float]) -> Optional[float]:
    if value is None or not value.strip():
        return default
    return float(value)


@dataclass(frozen=True)
class HistoryConfig:
    poll_interval: float = DEFAULT_POLL_INTERVAL
    recent_limit: int = DEFAULT_RECENT_LIMIT
    suppression_delay: Optional[float] = None
    use_redis: bool = True

    def __post_init__(self) -> None:
        if self.poll_interval <= 0:
            raise ValueError("poll_interval must be positive")
        if self.recent_limit < 0:
            raise ValueError("recent_limit must not be negative")
        if self.suppression_delay is not None and self.suppression_delay <= self.poll_interval:
            raise ValueError(
                "suppression_delay must exceed poll_interval so the echo of a "
                "self-write is always skipped")

    @property
    def effective_suppression_delay(self) -> float:
        if self.suppression_delay is None:
            return self.poll_interval * 1.5
        return self.suppression_delay

    @classmethod
    def from_env(cls, *, env_path: Optional[Path] = None) -> "HistoryConfig":
        _load_env_file(env_path)

        limit_raw = os.getenv("CLIPHISTORY_RECENT_LIMIT")

        return cls(
            poll_interval=_to_float(os.getenv("CLIPHISTORY_POLL_INTERVAL"), cls.poll_interval),
            recent_limit=int(limit_raw) if limit_raw else cls.recent_limit,
            suppression_delay=_to_float(os.getenv("CLIPHISTORY_SUPPRESSION_DELAY"), None),
            use_redis=_to_bool(os.getenv("CLIPHISTORY_USE_REDIS"), default=True),
        )


@dataclass(frozen=True)
class RedisConfig:
    host: str = "localhost"
    port: int = 6379
    db: int = 0
    password: Optional[str] = None
    key_prefix: str = "cliphistory"

    @classmethod
    def from_env(cls, *, env_path: Optional[Path] = None) -> "RedisConfig":
        _load_env_file(env_path)

        key_prefix = os.getenv("REDIS_KEY_PREFIX") or cls.key_prefix

        uri = os.getenv("REDIS_URI")
        if uri:
            return cls.from_uri(uri, key_prefix=key_prefix)

        host = os.getenv("REDIS_HOST", cls.host)
        port_raw = os.getenv("REDIS_PORT")
        db_raw = os.getenv("REDIS_DB")
        password = os.getenv("REDIS_PASSWORD") or None

        port = int(port_raw) if port_raw else cls.port
        db = int(db_raw) if db_raw else cls.db

        return cls(host=host, port=port, db=db, password=password, key_prefix=key_prefix)

    @classmethod
    def from_uri(cls, uri: str, *, key_prefix: Optional[str] = None) -> "RedisConfig":
        parsed = urlparse(uri)
        if parsed.scheme not in {"redis", "rediss"}:
            raise ValueError(
                f"Unsupported Redis URI scheme: {parsed.scheme!r}")

        host = parsed.hostname or cls.host
        port = parsed.port or cls.port
        password = parsed.password or None
        db_fragment = parsed.path.lstrip("/")
        db = int(db_fragment) if db_fragment else cls.db

        return cls(host=host, port=port, db=db, password=password,
                   key_prefix=key_prefix or cls.key_prefix)

    def create_store(self) -> RedisStore:
        return RedisStore(
            host=self.host,
            port=self.port,
            db=self.db,
            password=self.password,
            key_prefix=self.key_prefix,
        )
