import os
import struct
from contextlib import contextmanager
from unittest.mock import patch

from civiltime import (
    Ambiguous,
    FixedOffset,
    LocalDateTime,
    OffsetProvider,
    Single,
    Skipped,
    TimeZone,
    reset_system_tz,
)

# The POSIX TZ string for the Amsterdam timezone.
AMS_TZ_POSIX = "CET-1CEST,M3.5.0,M10.5.0/3"
# Havana: DST starts and ends around midnight
HAVANA_TZ_POSIX = "CST5CDT,M3.2.0/0,M11.1.0/1"
# Sao Paulo (until 2019): DST started at midnight, southern hemisphere
SAO_PAULO_TZ_POSIX = "<-03>3<-02>,M11.1.0/0,M2.3.0/0"


class AlwaysEqual:
    def __eq__(self, _):
        return True


class NeverEqual:
    def __eq__(self, _):
        return False


class AlwaysLarger:
    def __lt__(self, _):
        return False

    def __le__(self, _):
        return False

    def __gt__(self, _):
        return True

    def __ge__(self, _):
        return True


class AlwaysSmaller:
    def __lt__(self, _):
        return True

    def __le__(self, _):
        return True

    def __gt__(self, _):
        return False

    def __ge__(self, _):
        return False


class SkipEverything(OffsetProvider):
    """A broken provider for which no local time exists"""

    def offset_for_utc(self, utc):
        return FixedOffset(0)

    def offset_for_local(self, local):
        return Skipped()

    def __str__(self):
        return "SkipEverything"


class FoldEveryHour(OffsetProvider):
    """A provider where the first half hour of each hour is repeated,
    and the offset alternates between +01:00 and +00:30."""

    def offset_for_utc(self, utc):
        return FixedOffset(3600 if utc.minute < 30 else 1800)

    def offset_for_local(self, local: LocalDateTime):
        if local.minute < 30:
            return Ambiguous(FixedOffset(3600), FixedOffset(1800))
        return Single(FixedOffset(1800))

    def __str__(self):
        return "FoldEveryHour"


def havana() -> TimeZone:
    return TimeZone.from_posix(HAVANA_TZ_POSIX)


def sao_paulo() -> TimeZone:
    return TimeZone.from_posix(SAO_PAULO_TZ_POSIX)


@contextmanager
def system_tz(name):
    try:
        with patch.dict(os.environ, {"TZ": name}):
            reset_system_tz()
            yield
    finally:
        reset_system_tz()  # don't forget to reset the timezone after the patch!


@contextmanager
def system_tz_ams():
    with system_tz("Europe/Amsterdam"):
        yield


def tzif(
    transitions: list[tuple[int, int]],
    types: list[tuple[int, int, int]],
    chars: bytes = b"\x00",
    *,
    version: int = 1,
    footer: str = "",
) -> bytes:
    """Build TZif data from (epoch, type index) transitions and
    (utoff, isdst, abbrind) types"""

    def block(time_fmt: str) -> bytes:
        return (
            struct.pack(
                ">6i", 0, 0, 0, len(transitions), len(types), len(chars)
            )
            + b"".join(struct.pack(time_fmt, t) for t, _ in transitions)
            + bytes(idx for _, idx in transitions)
            + b"".join(struct.pack(">ibB", *t) for t in types)
            + chars
        )

    header = (
        b"TZif"
        + (b"\x00" if version == 1 else str(version).encode())
        + bytes(15)
    )
    data = header + block(">i")
    if version >= 2:
        data += header + block(">q") + b"\n" + footer.encode() + b"\n"
    return data
