"""Online presence held in the cache.

Each open messaging socket owns one entry in its user's presence map,
stamped with its own expiry.  A user counts as online while any entry is
unexpired.  Sockets refresh their entry on every frame they receive, so
clients keep an idle socket alive with a ``ping`` frame more often than
``PRESENCE_TTL_SECONDS``; an entry left by a crashed worker simply
expires.
"""
import math
import time

from django.conf import settings
from django.core.cache import cache


def _key(user_id) -> str:
    return f"presence:{user_id}"


def _live(entries, now: float) -> dict:
    return {conn: expires for conn, expires in (entries or {}).items() if expires > now}


def _store(key: str, entries: dict, now: float) -> None:
    if not entries:
        cache.delete(key)
        return
    ttl = max(1, math.ceil(max(entries.values()) - now))
    cache.set(key, entries, ttl)


def mark_online(user_id, connection_id: str) -> None:
    """Register (or refresh) one open connection for ``user_id``."""
    now = time.time()
    key = _key(user_id)
    entries = _live(cache.get(key), now)
    entries[connection_id] = now + settings.PRESENCE_TTL_SECONDS
    _store(key, entries, now)


touch = mark_online


def mark_offline(user_id, connection_id: str) -> None:
    now = time.time()
    key = _key(user_id)
    entries = _live(cache.get(key), now)
    entries.pop(connection_id, None)
    _store(key, entries, now)


def is_online(user_id) -> bool:
    return bool(_live(cache.get(_key(user_id)), time.time()))


def online_map(user_ids) -> dict:
    now = time.time()
    keys = {_key(uid): uid for uid in user_ids}
    found = cache.get_many(list(keys))
    return {uid: bool(_live(found.get(k), now)) for k, uid in keys.items()}
