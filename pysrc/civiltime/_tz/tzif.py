"""Parsing of TZif files into transition tables"""

from __future__ import annotations

import struct
from io import BytesIO
from typing import IO, Optional, Sequence, final

from .._common import Ambiguous, Resolution, Single, Skipped
from .posix import TzStr

EpochSecs = int
Offset = int
OffsetDelta = int

# 0001-01-01T00:00:00 and 9999-12-31T23:59:59 as epoch seconds
EPOCH_SECS_MIN = -62135596800
EPOCH_SECS_MAX = 253402300799


@final
class TzRules:
    """The offset rules of a single zone: a table of transitions,
    followed by an optional POSIX TZ string for times after the last one.

    A zone created from only a POSIX TZ string has empty transition tables.
    """

    __slots__ = (
        "__weakref__",
        "key",
        "_offsets_by_utc",
        "_offsets_by_local",
        "_abbrs",
        "_end",
    )

    # The IANA key (e.g. "Europe/Amsterdam"), not part of the file itself
    key: Optional[str]

    # Read (X, Y) as "FROM epoch second X onwards the offset is Y".
    _offsets_by_utc: tuple[tuple[EpochSecs, Offset], ...]

    # Read (X, (Y, Z)) as "UNTIL local epoch second X the offset is Y,
    # then it changes by Z".
    _offsets_by_local: tuple[tuple[EpochSecs, tuple[Offset, OffsetDelta]], ...]

    # Abbreviations matching each entry of _offsets_by_utc
    _abbrs: tuple[str, ...]

    # If absent, both tables have at least one entry
    _end: Optional[TzStr]

    def __init__(
        self,
        key: Optional[str],
        offsets_by_utc: tuple[tuple[EpochSecs, Offset], ...],
        offsets_by_local: tuple[
            tuple[EpochSecs, tuple[Offset, OffsetDelta]], ...
        ],
        end: Optional[TzStr] = None,
        abbrs: tuple[str, ...] = (),
    ):
        self.key = key
        self._offsets_by_utc = offsets_by_utc
        self._offsets_by_local = offsets_by_local
        self._end = end
        self._abbrs = abbrs or ("",) * len(offsets_by_utc)

    def offset_for_utc(self, t: EpochSecs) -> Offset:
        """The offset at the given UTC epoch seconds"""
        idx = bisect(self._offsets_by_utc, t)
        if idx is not None:
            return self._offsets_by_utc[max(0, idx - 1)][1]
        elif self._end is not None:
            return self._end.offset_for_utc(t)
        # Without a TZ string, the last offset holds indefinitely
        return self._offsets_by_utc[-1][1]

    def abbreviation_for_utc(self, t: EpochSecs) -> str:
        idx = bisect(self._offsets_by_utc, t)
        if idx is not None:
            return self._abbrs[max(0, idx - 1)]
        elif self._end is not None:
            return self._end.abbreviation_for_utc(t)
        return self._abbrs[-1]

    def resolve_local(self, t: EpochSecs) -> Resolution[Offset]:
        """The offsets for the given *local* epoch seconds, with
        ambiguous offsets ordered by the instant they result in."""
        idx = bisect(self._offsets_by_local, t)
        if idx is not None:
            next_transition, (offset, change) = self._offsets_by_local[idx]
            if t < next_transition - abs(change):
                return Single(offset)
            elif change < 0:
                return Ambiguous(offset, offset + change)
            elif change > 0:
                return Skipped()
            return Single(offset)  # pragma: no cover
        elif self._end is not None:
            return self._end.resolve_local(t)
        elif not self._offsets_by_local:
            return Single(self._offsets_by_utc[-1][1])
        _, (prev_offset, last_shift) = self._offsets_by_local[-1]
        return Single(prev_offset + last_shift)

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        elif type(other) is TzRules:
            return (
                self.key == other.key
                and self._offsets_by_utc == other._offsets_by_utc
                and self._offsets_by_local == other._offsets_by_local
                and self._end == other._end
            )
        return NotImplemented  # pragma: no cover

    def __hash__(self) -> int:
        return hash((self.key, self._offsets_by_utc))

    @classmethod
    def parse_posix(cls, s: str) -> TzRules:
        """Create rules from a POSIX TZ string"""
        return cls(None, (), (), TzStr.parse(s))

    @classmethod
    def parse_tzif(cls, data: bytes, key: Optional[str] = None) -> TzRules:
        """Create rules from TZif file data"""
        read = BytesIO(data)
        return _parse_content(_parse_header(read), read, key)


def bisect(
    arr: Sequence[tuple[EpochSecs, object]], x: EpochSecs
) -> Optional[int]:
    """Find the index of the first entry after the given time,
    or None if there is none."""
    left, right = 0, len(arr)
    while left < right:
        mid = (left + right) // 2
        if x >= arr[mid][0]:
            left = mid + 1
        else:
            right = mid
    return left if left != len(arr) else None


def clamp_epoch_secs(value: int) -> EpochSecs:
    return max(EPOCH_SECS_MIN, min(EPOCH_SECS_MAX, value))


class Header:
    """TZif file header"""

    __slots__ = (
        "version",
        "isutcnt",
        "isstdcnt",
        "leapcnt",
        "timecnt",
        "typecnt",
        "charcnt",
    )

    def __init__(
        self,
        version: int,
        isutcnt: int,
        isstdcnt: int,
        leapcnt: int,
        timecnt: int,
        typecnt: int,
        charcnt: int,
    ):
        self.version = version
        self.isutcnt = isutcnt
        self.isstdcnt = isstdcnt
        self.leapcnt = leapcnt
        self.timecnt = timecnt
        self.typecnt = typecnt
        self.charcnt = charcnt

    def v1_data_size(self) -> int:
        return (
            self.timecnt * 5
            + self.typecnt * 6
            + self.charcnt
            + self.leapcnt * 8
            + self.isstdcnt
            + self.isutcnt
        )


def _parse_header(data: IO[bytes]) -> Header:
    if data.read(4) != b"TZif":
        raise ValueError("Invalid header value")

    version_byte = data.read(1)
    if version_byte == b"\x00":
        version = 1
    elif version_byte.isdigit():
        version = int(version_byte)
    else:
        raise ValueError("Invalid header value")

    data.read(15)  # reserved
    counts = data.read(24)
    if len(counts) != 24:
        raise ValueError("Invalid header value")
    return Header(version, *struct.unpack(">6i", counts))


def _parse_content(
    header: Header, data: IO[bytes], key: Optional[str]
) -> TzRules:
    if header.version >= 2:
        # The 64-bit data follows the v1 data and a second header
        data.read(header.v1_data_size())
        header = _parse_header(data)
        fmt, size = "q", 8
    else:
        fmt, size = "i", 4

    raw_times = data.read(size * header.timecnt)
    if len(raw_times) != size * header.timecnt:
        raise ValueError("Unexpected end of TZif data")
    times = [
        clamp_epoch_secs(t)
        for t in struct.unpack(f">{header.timecnt}{fmt}", raw_times)
    ]
    type_indices = list(data.read(header.timecnt))
    raw_types = data.read(6 * header.typecnt)
    chars = data.read(header.charcnt)
    if (
        len(type_indices) != header.timecnt
        or len(raw_types) != 6 * header.typecnt
        or len(chars) != header.charcnt
    ):
        raise ValueError("Unexpected end of TZif data")
    types = [
        (utoff, abbrind)
        for utoff, _, abbrind in struct.iter_unpack(">ibB", raw_types)
    ]

    if not types:
        raise ValueError("No offset data in file")
    elif any(idx >= len(types) for idx in type_indices):
        raise ValueError("Invalid transition type index")

    def abbr(abbrind: int) -> str:
        return chars[abbrind:].split(b"\x00", 1)[0].decode("ascii", "replace")

    offsets_by_utc = [(EPOCH_SECS_MIN, types[0][0])]
    abbrs = [abbr(types[0][1])]
    for epoch, idx in zip(times, type_indices):
        utoff, abbrind = types[idx]
        offsets_by_utc.append((epoch, utoff))
        abbrs.append(abbr(abbrind))

    end = None
    if header.version >= 2:
        # Skip leap second records and indicators, then the newline
        data.read(header.isutcnt + header.isstdcnt + header.leapcnt * 12 + 1)
        tz_string, *_ = data.read().split(b"\n", 1)
        if tz_string:
            end = TzStr.parse(tz_string.decode("ascii"))

    return TzRules(
        key,
        tuple(offsets_by_utc),
        tuple(_local_transitions(offsets_by_utc)),
        end,
        tuple(abbrs),
    )


def _local_transitions(
    transitions: Sequence[tuple[EpochSecs, Offset]],
) -> list[tuple[EpochSecs, tuple[Offset, OffsetDelta]]]:
    result: list[tuple[EpochSecs, tuple[Offset, OffsetDelta]]] = []
    (_, offset_prev), *remaining = transitions
    for epoch, offset in remaining:
        local_time = clamp_epoch_secs(epoch + max(offset_prev, offset))
        result.append((local_time, (offset_prev, offset - offset_prev)))
        offset_prev = offset
    return result
