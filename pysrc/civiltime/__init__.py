from __future__ import annotations

from ._pycivil import *
from ._pycivil import (  # for pickling and the docs
    __all__ as _pycivil_all,
    __version__,
    _unpkl_date,
    _unpkl_day,
    _unpkl_duration,
    _unpkl_inst,
    _unpkl_local,
    _unpkl_offset,
    _unpkl_time,
    _unpkl_tz,
    _unpkl_utc,
)

import os as _os
import sysconfig as _sysconfig
from importlib.resources import files as _resource_files
from pathlib import Path as _Path
from typing import Iterable as _Iterable, Iterator as _Iterator

from ._format import StrftimeItems
from ._tz.store import (
    clear_cache as _clear_tz_cache,
    clear_cache_by_keys as _clear_tz_cache_by_keys,
    reset_system_tz,
    set_tzpath as _set_tzpath,
)

__all__ = [
    *_pycivil_all,
    "StrftimeItems",
    "TZPATH",
    "reset_tzpath",
    "clear_tzcache",
    "available_timezones",
    "reset_system_tz",
]

TZPATH: tuple[str, ...] = ()
"""The paths in which ``civiltime`` searches for timezone data.
By default, this is determined the same way as :data:`zoneinfo.TZPATH`,
although you can override it using :func:`civiltime.reset_tzpath`.
"""


def reset_tzpath(target: _Iterable[str | _os.PathLike[str]] | None = None, /):
    """Reset or set the paths in which ``civiltime`` searches for timezone data.

    It does not affect the :mod:`zoneinfo` module or other libraries.

    Note
    ----
    Due to caching, looking up a timezone after setting the tzpath may
    not load the data from the new path. Call :func:`clear_tzcache`
    to force loading *all* timezones from the new path.

    Behaves similarly to :func:`zoneinfo.reset_tzpath`
    """
    global TZPATH

    if target is not None:
        # This is such a common mistake, that we raise a descriptive error
        if isinstance(target, (str, bytes)):
            raise TypeError("tzpath must be an iterable of paths")

        if not all(map(_os.path.isabs, target)):
            raise ValueError("tzpaths must be absolute paths")
        TZPATH = tuple(str(_Path(p)) for p in target)
    else:
        TZPATH = _tzpath_from_env()
    _set_tzpath(TZPATH)


def _tzpath_from_env() -> tuple[str, ...]:
    try:
        env_var = _os.environ["PYTHONTZPATH"]
    except KeyError:
        env_var = _sysconfig.get_config_var("TZPATH")

    if not env_var:
        return ()

    # invalid (relative) paths are silently ignored, like zoneinfo does
    return tuple(filter(_os.path.isabs, env_var.split(_os.pathsep)))


def clear_tzcache(*, only_keys: _Iterable[str] | None = None) -> None:
    """Clear the timezone cache. If ``only_keys`` is provided,
    only the cache for those keys is cleared.

    Caution
    -------
    :class:`TimeZone` instances created before and after clearing the
    cache may hold different data if the files changed in between.

    Behaves similarly to :meth:`zoneinfo.ZoneInfo.clear_cache`.
    """
    if only_keys is None:
        _clear_tz_cache()
    else:
        _clear_tz_cache_by_keys(tuple(only_keys))


def available_timezones() -> set[str]:
    """Gather the set of all available timezone keys, from the
    ``tzdata`` package (if installed) and the current :data:`TZPATH`.

    Warning
    -------
    This function may open a large number of files, since the first few
    bytes of each file are read to determine if it is TZif data.

    Note
    ----
    Like :func:`zoneinfo.available_timezones`, this ignores the "special"
    zones (e.g. posixrules, right/posix, etc.)
    """
    zones = set()
    try:
        with _resource_files("tzdata").joinpath("zones").open("r") as f:
            zones.update(filter(None, map(str.strip, f)))
    except (ImportError, FileNotFoundError):
        pass

    for base in TZPATH:
        zones.update(_find_all_tznames(_Path(base)))

    zones.discard("posixrules")
    return zones


def _find_all_tznames(base: _Path) -> _Iterator[str]:
    if not base.is_dir():
        return
    for entry in base.iterdir():
        if entry.is_dir():
            if entry.name in ("right", "posix"):
                continue
            for p in _find_nested_tzfiles(entry):
                yield p.relative_to(base).as_posix()
        elif _is_tzifile(entry):
            yield entry.name


def _find_nested_tzfiles(path: _Path) -> _Iterator[_Path]:
    for entry in path.iterdir():
        if entry.is_dir():
            yield from _find_nested_tzfiles(entry)
        elif _is_tzifile(entry):
            yield entry


def _is_tzifile(p: _Path) -> bool:
    try:
        with p.open("rb") as f:
            return f.read(4) == b"TZif"
    except OSError:
        return False


reset_tzpath()  # populate the tzpath once at startup
