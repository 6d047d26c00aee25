"""Detection of the system timezone"""

import os
import os.path
import platform
from typing import Literal, Optional

SYSTEM = platform.system()
LOCALTIME = "/etc/localtime"

# How the system timezone was found
KEY: Literal[0] = 0  # an IANA key
FILE: Literal[1] = 1  # a path to a TZif file, key unknown
KEY_OR_POSIX: Literal[2] = 2  # an IANA key or a POSIX TZ string

SystemTz = tuple[Literal[0, 1, 2], str]

# On unix-like systems, /etc/localtime is (usually) a symlink into a
# zoneinfo directory. Elsewhere, the tzlocal package knows where to look.
if SYSTEM in ("Linux", "Darwin"):  # pragma: no cover

    def _key_or_file() -> SystemTz:
        tzif_path = os.path.realpath(LOCALTIME)
        if tzif_path == LOCALTIME:
            return (FILE, LOCALTIME)
        tzid = tzid_from_path(tzif_path)
        if tzid is None:
            return (FILE, tzif_path)
        return (KEY, tzid)

else:  # pragma: no cover
    import tzlocal

    def _key_or_file() -> SystemTz:
        return (KEY, tzlocal.get_localzone_name())


def tzid_from_path(path: str) -> Optional[str]:
    """The IANA key from a path inside a zoneinfo directory
    (e.g. ``zoneinfo/`` or ``zoneinfo.default/``), if any."""
    marker = path.rfind("zoneinfo")
    if marker == -1:
        return None
    index = path.find("/", marker)
    if index == -1:
        return None
    return path[index + 1 :] or None


def get_tz() -> SystemTz:
    """The system timezone, according to the ``TZ`` environment variable
    or the platform's configuration."""
    tz_env = os.environ.get("TZ")
    if tz_env is None:  # pragma: no cover
        return _key_or_file()

    tz_env = tz_env.removeprefix(":")
    if not tz_env:
        # An empty TZ means UTC on POSIX systems
        return (KEY, "UTC")
    if os.path.isabs(tz_env):
        return (FILE, tz_env)
    # A digit hints at a POSIX TZ string, but keys may contain digits too
    elif any(c.isdigit() for c in tz_env):
        return (KEY_OR_POSIX, tz_env)
    return (KEY, tz_env)
