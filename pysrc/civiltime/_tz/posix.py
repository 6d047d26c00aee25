"""POSIX TZ strings: parsing and offset rules.

A TZ string such as ``CET-1CEST,M3.5.0,M10.5.0/3`` describes a standard
offset, and optionally a DST offset with the rules for when it starts and
ends each year. Note that POSIX offsets are *west* of UTC, so they are
negated on parsing. All offsets here are in seconds east of UTC.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Optional, Union

from .._common import Ambiguous, Resolution, Single, Skipped
from .._math import days_in_month, epoch_for_date, is_leap, year_for_epoch

DEFAULT_DST = 3600
DEFAULT_RULE_TIME = 2 * 3600
MAX_OFFSET = 24 * 3600
# Rule times may be negative or exceed a day (RFC 8536 extension)
MAX_RULE_TIME = 167 * 3600
Weekday = int  # Different than usual! Sunday=0, Saturday=6


def _sunday0(d: date) -> Weekday:
    return d.isoweekday() % 7


class LastWeekday:
    """The last given weekday of a month (``M10.5.0``)"""

    __slots__ = ("month", "weekday")

    month: int
    weekday: Weekday

    def __init__(self, month: int, weekday: Weekday):
        self.month = month
        self.weekday = weekday

    def apply(self, year: int) -> date:
        last = date(year, self.month, days_in_month(year, self.month))
        return last - timedelta((_sunday0(last) - self.weekday) % 7)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LastWeekday):
            return NotImplemented  # pragma: no cover
        return self.month == other.month and self.weekday == other.weekday

    def __repr__(self) -> str:
        return f"LastWeekday({self.month}, {self.weekday})"


class NthWeekday:
    """The n-th (1-4) given weekday of a month (``M3.2.0``)"""

    __slots__ = ("month", "nth", "weekday")

    month: int
    nth: int
    weekday: Weekday

    def __init__(self, month: int, nth: int, weekday: Weekday):
        self.month = month
        self.nth = nth
        self.weekday = weekday

    def apply(self, year: int) -> date:
        first = date(year, self.month, 1)
        return first + timedelta(
            (self.weekday - _sunday0(first)) % 7 + 7 * (self.nth - 1)
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NthWeekday):
            return NotImplemented  # pragma: no cover
        return (
            self.month == other.month
            and self.nth == other.nth
            and self.weekday == other.weekday
        )

    def __repr__(self) -> str:
        return f"NthWeekday({self.month}, {self.nth}, {self.weekday})"


class DayOfYear:
    """Zero-based day of the year, counting Feb 29 (``nnn``)"""

    __slots__ = ("nth",)

    nth: int  # 1-366

    def __init__(self, nth: int):
        self.nth = nth

    def apply(self, year: int) -> date:
        return date(year, 1, 1) + timedelta(
            min(self.nth, 365 + is_leap(year)) - 1
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DayOfYear):
            return NotImplemented  # pragma: no cover
        return self.nth == other.nth

    def __repr__(self) -> str:
        return f"DayOfYear({self.nth})"


class JulianDayOfYear:
    """One-based day of the year, never counting Feb 29 (``Jnnn``)"""

    __slots__ = ("nth",)

    nth: int  # 1-365

    def __init__(self, nth: int):
        self.nth = nth

    def apply(self, year: int) -> date:
        day = self.nth + (is_leap(year) and self.nth > 59)
        return date(year, 1, 1) + timedelta(day - 1)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, JulianDayOfYear):
            return NotImplemented  # pragma: no cover
        return self.nth == other.nth

    def __repr__(self) -> str:
        return f"JulianDayOfYear({self.nth})"


Rule = Union[LastWeekday, NthWeekday, DayOfYear, JulianDayOfYear]


class Dst:
    """The DST part of a TZ string: its offset, name and yearly rules.
    Each rule is paired with the local time (in seconds) of the change."""

    __slots__ = ("offset", "abbr", "start", "end")

    offset: int
    abbr: str
    start: tuple[Rule, int]
    end: tuple[Rule, int]

    def __init__(
        self,
        offset: int,
        start: tuple[Rule, int],
        end: tuple[Rule, int],
        abbr: str = "",
    ):
        self.offset = offset
        self.start = start
        self.end = end
        self.abbr = abbr

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Dst):
            return NotImplemented  # pragma: no cover
        return (
            self.offset == other.offset
            and self.start == other.start
            and self.end == other.end
            and self.abbr == other.abbr
        )

    def __repr__(self) -> str:
        return f"Dst(offset={self.offset}, start={self.start}, end={self.end})"


class TzStr:
    """A parsed POSIX TZ string"""

    __slots__ = ("std", "std_abbr", "dst")

    std: int
    std_abbr: str
    dst: Optional[Dst]

    def __init__(self, std: int, dst: Optional[Dst] = None, std_abbr: str = ""):
        self.std = std
        self.dst = dst
        self.std_abbr = std_abbr

    def _is_dst(self, epoch: int) -> bool:
        assert self.dst is not None
        # The year of the transition is taken as the local year in
        # standard time. This agrees with what `zoneinfo` does.
        year = year_for_epoch(epoch + self.std)
        start_rule, start_time = self.dst.start
        end_rule, end_time = self.dst.end

        start = epoch_for_date(start_rule.apply(year)) + start_time - self.std
        end = epoch_for_date(end_rule.apply(year)) + end_time - self.dst.offset

        if start < end:
            return start <= epoch < end
        # DST spans the new year (southern hemisphere)
        return not (end <= epoch < start)

    def offset_for_utc(self, epoch: int) -> int:
        """The offset at the given UTC epoch seconds"""
        if self.dst is None:
            return self.std
        return self.dst.offset if self._is_dst(epoch) else self.std

    def abbreviation_for_utc(self, epoch: int) -> str:
        if self.dst is not None and self._is_dst(epoch):
            return self.dst.abbr
        return self.std_abbr

    def resolve_local(self, epoch: int) -> Resolution[int]:
        """The offsets for the given *local* epoch seconds.
        Ambiguous offsets are ordered by the instant they result in."""
        if self.dst is None:
            return Single(self.std)
        year = year_for_epoch(epoch)

        start_rule, start_time = self.dst.start
        end_rule, end_time = self.dst.end
        dst_offset = self.dst.offset

        start = epoch_for_date(start_rule.apply(year)) + start_time
        end = epoch_for_date(end_rule.apply(year)) + end_time

        if start < end:
            t1, t2 = start, end
            off1, off2 = self.std, dst_offset
        else:
            t1, t2 = end, start
            off1, off2 = dst_offset, self.std
        shift = off2 - off1

        # The larger offset yields the earlier instant
        if shift >= 0:
            if epoch < t1:
                return Single(off1)
            elif epoch < t1 + shift:
                return Skipped()
            elif epoch < t2 - shift:
                return Single(off2)
            elif epoch < t2:
                return Ambiguous(off2, off1)
            return Single(off1)
        else:
            if epoch < t1 + shift:
                return Single(off1)
            elif epoch < t1:
                return Ambiguous(off1, off2)
            elif epoch < t2:
                return Single(off2)
            elif epoch < t2 - shift:
                return Skipped()
            return Single(off1)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TzStr):
            return NotImplemented  # pragma: no cover
        return (
            self.std == other.std
            and self.dst == other.dst
            and self.std_abbr == other.std_abbr
        )

    def __hash__(self) -> int:
        return hash((self.std, self.std_abbr, self.dst is None))

    def __repr__(self) -> str:
        if self.dst is None:
            return f"TzStr(std={self.std})"
        return f"TzStr(std={self.std}, dst={self.dst})"

    @classmethod
    def parse(cls, s: str) -> TzStr:
        if not s.isascii():
            raise ValueError(
                "Invalid POSIX TZ string: non-ASCII characters found"
            )

        std_abbr, s = parse_tzname(s)
        std, s = parse_offset(s)

        # No DST part: a fixed offset
        if not s:
            return cls(std, None, std_abbr)

        dst_abbr, s = parse_tzname(s)

        if s[:1] == ",":
            # No offset given, the default is std + 1hr
            s = s[1:]
            dst = std + DEFAULT_DST
            if dst >= MAX_OFFSET:
                raise ValueError(
                    "Invalid POSIX TZ string: DST offset out of range"
                )
        else:
            dst, s = parse_offset(s)
            s = expect_char(s, ",")

        start, s = parse_rule(s)
        s = expect_char(s, ",")
        end, s = parse_rule(s)

        if s:
            raise ValueError(
                f"Invalid POSIX TZ string: unexpected trailing '{s}'"
            )
        return cls(std, Dst(dst, start, end, dst_abbr), std_abbr)


def parse_tzname(s: str) -> tuple[str, str]:
    """Split off the zone name, in either ``<+03>`` or ``ABC`` form"""
    if s[:1] == "<":
        stop = s.find(">")
        if stop < 2:  # not found or empty name
            raise ValueError("Invalid TZ string: missing or empty name")
        return s[1:stop], s[stop + 1 :]

    stop = 0
    while stop < len(s) and s[stop].isalpha():
        stop += 1
    if stop == len(s):
        raise ValueError("Invalid TZ string: missing or empty name")
    elif stop < 3:
        raise ValueError("Invalid TZ string: invalid name")
    return s[:stop], s[stop:]


def expect_char(s: str, char: str) -> str:
    if s[:1] != char:
        raise ValueError(f"Invalid TZ string: expected '{char}'")
    return s[1:]


def parse_offset(s: str) -> tuple[int, str]:
    seconds, s = parse_hms(s, max_hours=24)
    if abs(seconds) >= MAX_OFFSET:
        raise ValueError("Invalid POSIX TZ string: offset out of range")
    return -seconds, s


def parse_hms(s: str, max_hours: int = 167) -> tuple[int, str]:
    """Parse a signed ``h[hh][:mm[:ss]]``"""
    sign = 1
    if s[:1] in ("+", "-"):
        sign = -1 if s[0] == "-" else 1
        s = s[1:]

    hours, s = parse_digits(s, 1, 3)
    if hours > max_hours:
        raise ValueError(f"Invalid TZ string: hour out of range: {hours}")
    total = hours * 3600
    if s[:1] == ":":
        minutes, s = parse_00_to_59(s[1:])
        total += minutes * 60
        if s[:1] == ":":
            seconds, s = parse_00_to_59(s[1:])
            total += seconds
    return sign * total, s


def parse_digits(s: str, min_len: int, max_len: int) -> tuple[int, str]:
    stop = 0
    while stop < max_len and s[stop : stop + 1].isdigit():
        stop += 1
    if stop < min_len:
        raise ValueError(f"Invalid TZ string: expected digits, got '{s}'")
    return int(s[:stop]), s[stop:]


def parse_00_to_59(s: str) -> tuple[int, str]:
    if len(s) < 2 or not s[:2].isdigit():
        raise ValueError(f"Invalid TZ string: expected 2 digits, got '{s}'")
    value = int(s[:2])
    if value > 59:
        raise ValueError(f"Invalid TZ string: expected 00-59, got '{s[:2]}'")
    return value, s[2:]


def parse_rule(s: str) -> tuple[tuple[Rule, int], str]:
    rule: Rule
    if s[:1] == "M":  # Mm.n.d
        month, s = parse_digits(s[1:], 1, 2)
        s = expect_char(s, ".")
        nth, s = parse_digits(s, 1, 1)
        s = expect_char(s, ".")
        weekday, s = parse_digits(s, 1, 1)

        if not 1 <= month <= 12 or not 1 <= nth <= 5 or weekday > 6:
            raise ValueError("Invalid DST rule")
        if nth == 5:
            rule = LastWeekday(month, weekday)
        else:
            rule = NthWeekday(month, nth, weekday)
    elif s[:1] == "J":  # Jnnn
        nth, s = parse_digits(s[1:], 1, 3)
        if not 1 <= nth <= 365:
            raise ValueError(f"Invalid Julian day of year: {nth}")
        rule = JulianDayOfYear(nth)
    else:  # nnn
        nth, s = parse_digits(s, 1, 3)
        if nth > 365:
            raise ValueError(f"Invalid day of year: {nth}")
        rule = DayOfYear(nth + 1)

    if s[:1] == "/":
        time, s = parse_hms(s[1:], max_hours=MAX_RULE_TIME // 3600)
    else:
        time = DEFAULT_RULE_TIME
    return (rule, time), s
