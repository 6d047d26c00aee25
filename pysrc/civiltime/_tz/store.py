"""Timezone database access and caching."""

from __future__ import annotations

import logging
import os.path
from collections import OrderedDict
from typing import NewType
from weakref import WeakValueDictionary

from . import system
from .tzif import TzRules

__all__ = [
    "TimeZoneNotFoundError",
    "get_rules",
    "get_system_rules",
    "clear_cache",
    "clear_cache_by_keys",
    "set_tzpath",
    "reset_system_tz",
]

logger = logging.getLogger(__name__)

_TZPATH: tuple[str, ...] = ()

# Loaded zones stay alive while they're in use (weak lookup), and the
# most recently used ones are kept regardless (LRU), like `zoneinfo` does.
_TZCACHE_LRU_SIZE = 8
_tzcache_lru: OrderedDict[str, TzRules] = OrderedDict()
_tzcache_lookup: WeakValueDictionary[str, TzRules] = WeakValueDictionary()


class TimeZoneNotFoundError(ValueError):
    """A timezone with the given key was not found"""

    @classmethod
    def for_key(cls, key: str) -> TimeZoneNotFoundError:
        return cls(f"No time zone found for key: {key!r}")


def set_tzpath(to: tuple[str, ...]) -> None:
    global _TZPATH
    _TZPATH = to
    logger.debug("Timezone search path set to %r", to)


def clear_cache() -> None:
    _tzcache_lookup.clear()
    _tzcache_lru.clear()


def clear_cache_by_keys(keys: tuple[str, ...]) -> None:
    for k in keys:
        _tzcache_lookup.pop(k, None)
        _tzcache_lru.pop(k, None)


def get_rules(key: str) -> TzRules:
    instance = _tzcache_lookup.get(key)
    if instance is None:
        # Loaded rules are immutable, so concurrent loads of the same key
        # are harmless: the last one to write wins.
        instance = _tzcache_lookup.setdefault(
            key, _load_rules(validate_tzid(key))
        )

    _tzcache_lru[key] = _tzcache_lru.pop(key, instance)
    if len(_tzcache_lru) > _TZCACHE_LRU_SIZE:
        _tzcache_lru.popitem(last=False)
    return instance


# A key that has been checked for path traversal and odd characters
SafeTzId = NewType("SafeTzId", str)


def validate_tzid(key: str) -> SafeTzId:
    if (
        key.isascii()
        # There's no standard limit on the length of keys,
        # but we have to draw the line somewhere.
        and 0 < len(key) < 100
        and all(c.isalnum() or c in "-_+/." for c in key)
        and ".." not in key
        and "//" not in key
        and "/./" not in key
        and key[0] not in ".-+/"
        and key[-1] != "/"
    ):
        return SafeTzId(key)
    raise TimeZoneNotFoundError.for_key(key)


def _tzif_from_path(key: SafeTzId) -> bytes | None:
    for search_path in _TZPATH:
        target = os.path.join(search_path, key)
        if os.path.isfile(target):
            logger.debug("Loading timezone %r from %s", key, target)
            with open(target, "rb") as f:
                return f.read()
    return None


def _tzif_from_tzdata(key: SafeTzId) -> bytes:
    try:
        tzdata_path = __import__("tzdata.zoneinfo").zoneinfo.__path__[0]
        # Check before reading, since the resulting errors vary per platform
        relpath = os.path.join(tzdata_path, *key.split("/"))
        if not os.path.isfile(relpath):
            raise FileNotFoundError(relpath)
        logger.debug("Loading timezone %r from the tzdata package", key)
        with open(relpath, "rb") as f:
            return f.read()
    except (ImportError, FileNotFoundError, UnicodeEncodeError):
        raise TimeZoneNotFoundError.for_key(key) from None


def _load_rules(key: SafeTzId) -> TzRules:
    tzif = _tzif_from_path(key) or _tzif_from_tzdata(key)
    if not tzif.startswith(b"TZif"):
        # A file exists, but it isn't TZif data
        raise TimeZoneNotFoundError.for_key(key)
    return TzRules.parse_tzif(tzif, key)


_CACHED_SYSTEM_TZ: TzRules | None = None


def get_system_rules() -> TzRules:
    global _CACHED_SYSTEM_TZ
    # Lock-free: loading is side-effect free and the last writer wins
    if _CACHED_SYSTEM_TZ is None:
        _CACHED_SYSTEM_TZ = _read_system_tz()
    return _CACHED_SYSTEM_TZ


def reset_system_tz() -> None:
    """Re-read the system timezone, e.g. after changing ``TZ``"""
    global _CACHED_SYSTEM_TZ
    _CACHED_SYSTEM_TZ = _read_system_tz()


def _read_system_tz() -> TzRules:
    kind, value = system.get_tz()
    logger.debug("Detected system timezone %r (kind %d)", value, kind)
    if kind == system.KEY:
        return get_rules(value)
    elif kind == system.KEY_OR_POSIX:
        try:
            return get_rules(value)
        except TimeZoneNotFoundError:
            return TzRules.parse_posix(value)
    with open(value, "rb") as f:
        return TzRules.parse_tzif(f.read())
