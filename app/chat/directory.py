"""
Connection directory for the realtime gateway.

The directory records which channel names (one per open socket) belong to
which user, along with liveness timestamps. The gateway depends only on the
ConnectionDirectory protocol; the concrete backend is chosen by the
CHAT_CONNECTION_DIRECTORY setting.

Backends:
    LocalConnectionDirectory: Process-local mapping (single instance)
    RedisConnectionDirectory: Redis hash per user via django-redis
        (shared across gateway instances)

Entries:
    user_id -> {channel_name -> ConnectionEntry}

    A user may hold several sessions at once (one per device). Registering
    a new channel never evicts another, and unregistering only removes the
    caller's own channel, so a stale socket closing late cannot remove a
    newer session.

Usage:
    from chat.directory import get_connection_directory

    directory = get_connection_directory()
    await directory.register(user_id, self.channel_name)
    await directory.touch(user_id, self.channel_name)
    await directory.unregister(user_id, self.channel_name)
"""

from __future__ import annotations

import json
import logging
import threading
import time
from dataclasses import asdict, dataclass
from functools import lru_cache
from typing import Protocol, runtime_checkable

from asgiref.sync import sync_to_async
from django.conf import settings
from django.utils.module_loading import import_string

from chat.constants import DIRECTORY_CONFIG

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConnectionEntry:
    """One open socket of a user."""

    user_id: int
    channel_name: str
    connected_at: float
    last_seen: float


@runtime_checkable
class ConnectionDirectory(Protocol):
    """
    Protocol for connection directories.

    All methods are coroutines so that networked backends can be used from
    the consumer without blocking the event loop.
    """

    async def register(self, user_id: int, channel_name: str) -> ConnectionEntry:
        """Add a session for the user and return its entry."""
        ...

    async def unregister(self, user_id: int, channel_name: str) -> bool:
        """Remove this session; True if it was present."""
        ...

    async def touch(self, user_id: int, channel_name: str) -> bool:
        """Refresh the session's last_seen; False if it is not registered."""
        ...

    async def connections_for(self, user_id: int) -> list[ConnectionEntry]:
        """All live sessions of a user."""
        ...

    async def is_connected(self, user_id: int) -> bool:
        """Whether the user has at least one session."""
        ...


class LocalConnectionDirectory:
    """
    In-process connection directory.

    Suitable for a single gateway process. State is guarded by a lock so
    the directory can also be read from synchronous code running in
    worker threads.
    """

    def __init__(self):
        self._entries: dict[int, dict[str, ConnectionEntry]] = {}
        self._lock = threading.Lock()

    async def register(self, user_id: int, channel_name: str) -> ConnectionEntry:
        now = time.time()
        entry = ConnectionEntry(user_id, channel_name, connected_at=now, last_seen=now)
        with self._lock:
            self._entries.setdefault(user_id, {})[channel_name] = entry
        return entry

    async def unregister(self, user_id: int, channel_name: str) -> bool:
        with self._lock:
            sessions = self._entries.get(user_id)
            if not sessions or channel_name not in sessions:
                return False
            del sessions[channel_name]
            if not sessions:
                del self._entries[user_id]
            return True

    async def touch(self, user_id: int, channel_name: str) -> bool:
        with self._lock:
            sessions = self._entries.get(user_id, {})
            entry = sessions.get(channel_name)
            if entry is None:
                return False
            sessions[channel_name] = ConnectionEntry(
                user_id, channel_name, entry.connected_at, last_seen=time.time()
            )
            return True

    async def connections_for(self, user_id: int) -> list[ConnectionEntry]:
        with self._lock:
            return list(self._entries.get(user_id, {}).values())

    async def is_connected(self, user_id: int) -> bool:
        with self._lock:
            return bool(self._entries.get(user_id))

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


class RedisConnectionDirectory:
    """
    Redis-backed connection directory.

    Each user has one hash, keyed by channel name, whose values are JSON
    encoded ConnectionEntry dicts. The hash expires ENTRY_TTL_SECONDS after
    the last register/touch, so sessions of a crashed gateway instance age
    out on their own. Because that TTL covers the whole hash, a live device
    keeps a dead sibling's field around; connections_for() therefore skips
    and deletes entries whose last_seen is older than ENTRY_TTL_SECONDS.
    """

    # Keys: [user_hash_key]
    # Args: [channel_name, last_seen, ttl_seconds]
    LUA_TOUCH = """
    local raw = redis.call('HGET', KEYS[1], ARGV[1])
    if not raw then
        return 0
    end
    local entry = cjson.decode(raw)
    entry['last_seen'] = tonumber(ARGV[2])
    redis.call('HSET', KEYS[1], ARGV[1], cjson.encode(entry))
    redis.call('EXPIRE', KEYS[1], ARGV[3])
    return 1
    """

    def __init__(self, alias: str = "default"):
        self.alias = alias
        self.ttl = DIRECTORY_CONFIG.ENTRY_TTL_SECONDS
        self._lua_touch = None

    def _get_redis_client(self):
        """Raw Redis client from django-redis."""
        from django_redis import get_redis_connection

        return get_redis_connection(self.alias)

    @staticmethod
    def _key(user_id: int) -> str:
        return f"{DIRECTORY_CONFIG.KEY_PREFIX}:{user_id}"

    def _register(self, user_id: int, channel_name: str) -> ConnectionEntry:
        now = time.time()
        entry = ConnectionEntry(user_id, channel_name, connected_at=now, last_seen=now)
        pipe = self._get_redis_client().pipeline(transaction=True)
        pipe.hset(self._key(user_id), channel_name, json.dumps(asdict(entry)))
        pipe.expire(self._key(user_id), self.ttl)
        pipe.execute()
        return entry

    def _unregister(self, user_id: int, channel_name: str) -> bool:
        return bool(self._get_redis_client().hdel(self._key(user_id), channel_name))

    def _touch(self, user_id: int, channel_name: str) -> bool:
        client = self._get_redis_client()
        if self._lua_touch is None:
            self._lua_touch = client.register_script(self.LUA_TOUCH)
        return bool(
            self._lua_touch(
                keys=[self._key(user_id)],
                args=[channel_name, time.time(), self.ttl],
            )
        )

    def _connections_for(self, user_id: int) -> list[ConnectionEntry]:
        client = self._get_redis_client()
        key = self._key(user_id)
        now = time.time()
        live, stale = [], []
        for channel_name, value in client.hgetall(key).items():
            entry = ConnectionEntry(**json.loads(value))
            if now - entry.last_seen > self.ttl:
                stale.append(channel_name)
            else:
                live.append(entry)
        if stale:
            client.hdel(key, *stale)
            logger.info(f"Pruned {len(stale)} expired connection(s) of user {user_id}")
        return live

    async def register(self, user_id: int, channel_name: str) -> ConnectionEntry:
        return await sync_to_async(self._register)(user_id, channel_name)

    async def unregister(self, user_id: int, channel_name: str) -> bool:
        return await sync_to_async(self._unregister)(user_id, channel_name)

    async def touch(self, user_id: int, channel_name: str) -> bool:
        return await sync_to_async(self._touch)(user_id, channel_name)

    async def connections_for(self, user_id: int) -> list[ConnectionEntry]:
        return await sync_to_async(self._connections_for)(user_id)

    async def is_connected(self, user_id: int) -> bool:
        return bool(await self.connections_for(user_id))


@lru_cache(maxsize=1)
def get_connection_directory() -> ConnectionDirectory:
    """
    Return the process-wide directory configured by CHAT_CONNECTION_DIRECTORY.

    Call get_connection_directory.cache_clear() to rebuild it (tests do this
    after overriding the setting).
    """
    path = getattr(settings, "CHAT_CONNECTION_DIRECTORY", DIRECTORY_CONFIG.DEFAULT_BACKEND)
    directory = import_string(path)()
    logger.info(f"Using connection directory {path}")
    return directory
