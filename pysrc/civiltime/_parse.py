"""Parsing of RFC 3339 and RFC 2822 text into plain fields.

The functions here return a :data:`Fields` tuple, and leave it to the
public types to build values from them. A second value of ``60`` is
folded into the leap second band: it becomes second ``59`` with one
extra second worth of nanoseconds.
"""

from __future__ import annotations

import enum
import re
from datetime import date as _date
from typing import NoReturn

from ._math import days_in_month

# year, month, day, hour, minute, second, nanosecond, offset (seconds)
Fields = tuple[int, int, int, int, int, int, int, int]


class ParseErrorKind(enum.Enum):
    """What went wrong when parsing text"""

    OUT_OF_RANGE = "input is out of range"
    IMPOSSIBLE = "no possible date and time matching input"
    NOT_ENOUGH = "input is not enough for unique date and time"
    INVALID = "input contains invalid characters"
    TOO_SHORT = "premature end of input"
    TOO_LONG = "trailing input"
    BAD_FORMAT = "bad or unsupported format string"


class ParseError(ValueError):
    """Text could not be parsed. The ``kind`` attribute tells
    what went wrong."""

    kind: ParseErrorKind

    def __init__(self, kind: ParseErrorKind, s: str | None = None):
        self.kind = kind
        if s is None:
            super().__init__(kind.value)
        else:
            super().__init__(f"Invalid format: {s!r} ({kind.value})")


def _parse_err(s: str, kind: ParseErrorKind) -> NoReturn:
    raise ParseError(kind, s) from None


def check_fields(
    s: str,
    year: int,
    month: int,
    day: int,
    hour: int,
    minute: int,
    second: int,
    nanos: int,
    offset: int,
) -> Fields:
    """Validate the ranges of parsed fields and fold a leap second"""
    if not (
        1 <= year <= 9999
        and 1 <= month <= 12
        and 1 <= day <= days_in_month(year, month)
        and hour < 24
        and minute < 60
        and second <= 60
        and abs(offset) < 86_400
    ):
        _parse_err(s, ParseErrorKind.OUT_OF_RANGE)
    if second == 60:
        second = 59
        nanos += 1_000_000_000
    return (year, month, day, hour, minute, second, nanos, offset)


def _parse_nanos(digits: str) -> int:
    return int(digits[:9].ljust(9, "0"))


def _digits(s: str, pos: int, n: int) -> tuple[int, int]:
    chunk = s[pos : pos + n]
    if len(chunk) < n:
        _parse_err(
            s,
            (
                ParseErrorKind.TOO_SHORT
                if chunk.isdigit() or not chunk
                else ParseErrorKind.INVALID
            ),
        )
    if not chunk.isdigit():
        _parse_err(s, ParseErrorKind.INVALID)
    return int(chunk), pos + n


def _expect(s: str, pos: int, chars: str) -> int:
    if pos >= len(s):
        _parse_err(s, ParseErrorKind.TOO_SHORT)
    if s[pos] not in chars:
        _parse_err(s, ParseErrorKind.INVALID)
    return pos + 1


def parse_rfc3339(s: str) -> Fields:
    """Strict RFC 3339: ``YYYY-MM-DDThh:mm:ss[.f]Z`` or with ``±hh:mm``"""
    if not s.isascii():
        _parse_err(s, ParseErrorKind.INVALID)
    year, pos = _digits(s, 0, 4)
    pos = _expect(s, pos, "-")
    month, pos = _digits(s, pos, 2)
    pos = _expect(s, pos, "-")
    day, pos = _digits(s, pos, 2)
    pos = _expect(s, pos, "Tt ")
    hour, pos = _digits(s, pos, 2)
    pos = _expect(s, pos, ":")
    minute, pos = _digits(s, pos, 2)
    pos = _expect(s, pos, ":")
    second, pos = _digits(s, pos, 2)

    nanos = 0
    if s[pos : pos + 1] == ".":
        start = pos = pos + 1
        while pos < len(s) and s[pos].isdigit():
            pos += 1
        if pos == start:
            _parse_err(
                s,
                ParseErrorKind.TOO_SHORT
                if pos == len(s)
                else ParseErrorKind.INVALID,
            )
        elif pos - start > 9:
            _parse_err(s, ParseErrorKind.INVALID)
        nanos = _parse_nanos(s[start:pos])

    if pos >= len(s):
        _parse_err(s, ParseErrorKind.TOO_SHORT)
    elif s[pos] in "Zz":
        offset, pos = 0, pos + 1
    elif s[pos] in "+-":
        sign = -1 if s[pos] == "-" else 1
        off_h, pos = _digits(s, pos + 1, 2)
        pos = _expect(s, pos, ":")
        off_m, pos = _digits(s, pos, 2)
        if off_m > 59:
            _parse_err(s, ParseErrorKind.OUT_OF_RANGE)
        offset = sign * (off_h * 3600 + off_m * 60)
    else:
        _parse_err(s, ParseErrorKind.INVALID)

    if pos != len(s):
        _parse_err(s, ParseErrorKind.TOO_LONG)
    return check_fields(
        s, year, month, day, hour, minute, second, nanos, offset
    )


_LENIENT_DATETIME = (
    r"(\d{4,})-(\d{1,2})-(\d{1,2})"
    r"(?:[Tt]|\s+)"
    r"(\d{1,2}):(\d{1,2}):(\d{1,2})(?:\.(\d{0,9}))?"
)
_LENIENT_RE = re.compile(
    _LENIENT_DATETIME
    + r"\s*(?:([Zz]|[Uu][Tt][Cc])|([+-])(\d{2}):?(\d{2})(?::?(\d{2}))?)",
    re.ASCII,
)
_LENIENT_NO_OFFSET_RE = re.compile(_LENIENT_DATETIME + r"\s*", re.ASCII)


def parse_lenient(s: str) -> Fields:
    """The relaxed form of RFC 3339, as produced by ``str()``:
    one or two digit fields, optional fraction digits, a space before the
    offset, ``UTC`` as an offset, and offset seconds."""
    match = _LENIENT_RE.fullmatch(s)
    if match is None:
        if _LENIENT_NO_OFFSET_RE.fullmatch(s):
            _parse_err(s, ParseErrorKind.NOT_ENOUGH)
        _parse_err(s, ParseErrorKind.INVALID)

    (
        year,
        month,
        day,
        hour,
        minute,
        second,
        frac,
        zulu,
        sign,
        off_h,
        off_m,
        off_s,
    ) = match.groups()
    if zulu:
        offset = 0
    else:
        off_s = off_s or "0"
        if int(off_m) > 59 or int(off_s) > 59:
            _parse_err(s, ParseErrorKind.OUT_OF_RANGE)
        offset = (int(off_h) * 3600 + int(off_m) * 60 + int(off_s)) * (
            -1 if sign == "-" else 1
        )
    return check_fields(
        s,
        int(year),
        int(month),
        int(day),
        int(hour),
        int(minute),
        int(second),
        _parse_nanos(frac) if frac else 0,
        offset,
    )


RFC2822_WEEKDAYS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
RFC2822_MONTHS = [
    "Jan",
    "Feb",
    "Mar",
    "Apr",
    "May",
    "Jun",
    "Jul",
    "Aug",
    "Sep",
    "Oct",
    "Nov",
    "Dec",
]
_RFC2822_WEEKDAY_TO_ISO = {
    name.lower(): i for i, name in enumerate(RFC2822_WEEKDAYS, start=1)
}
_RFC2822_MONTH_NAMES = {
    name.lower(): i for i, name in enumerate(RFC2822_MONTHS, start=1)
}

# Obsolete zone names, in hours. Other alphabetic zones (including the
# military letters) are of unknown offset, which RFC 2822 says to
# treat as -0000.
_RFC2822_ZONES = {
    "EST": -5,
    "EDT": -4,
    "CST": -6,
    "CDT": -5,
    "MST": -7,
    "MDT": -6,
    "PST": -8,
    "PDT": -7,
    "UT": 0,
    "GMT": 0,
}

_COMMENT_RE = re.compile(r"\([^()]*\)")


def parse_rfc2822(s_orig: str) -> Fields:
    # Technically, only tab, space and CRLF are allowed in RFC2822,
    # but we allow any ASCII whitespace
    if not s_orig.isascii():
        _parse_err(s_orig, ParseErrorKind.INVALID)
    s = _COMMENT_RE.sub(" ", s_orig)

    parts = s.split()
    if len(parts) < 2:
        _parse_err(s_orig, ParseErrorKind.TOO_SHORT)

    # The optional weekday, in all its whitespace variations
    first, second, *rest = parts
    weekday_raw = None
    if first.isdigit():
        parts = [first, second, *rest]
    elif len(first) == 4 and first[3] == ",":  # Mon, 23 Jan
        weekday_raw = first[:3]
        parts = [second, *rest]
    elif len(first) == 3 and second == ",":  # Mon , 23 Jan
        weekday_raw = first
        parts = rest
    elif len(first) == 3 and second.startswith(","):  # Mon ,23 Jan
        weekday_raw = first
        parts = [second[1:], *rest]
    elif len(first) > 4 and first[3] == ",":  # Mon,23 Jan
        weekday_raw = first[:3]
        parts = [first[4:], second, *rest]
    else:
        _parse_err(s_orig, ParseErrorKind.INVALID)

    iso_weekday = None
    if weekday_raw is not None:
        try:
            iso_weekday = _RFC2822_WEEKDAY_TO_ISO[weekday_raw.lower()]
        except KeyError:
            _parse_err(s_orig, ParseErrorKind.INVALID)

    if len(parts) < 5:
        _parse_err(s_orig, ParseErrorKind.TOO_SHORT)
    day_raw, month_raw, year_raw, *time_parts, offset_raw = parts

    if not (day_raw.isdigit() and len(day_raw) <= 2):
        _parse_err(s_orig, ParseErrorKind.INVALID)
    try:
        month = _RFC2822_MONTH_NAMES[month_raw.lower()]
    except KeyError:
        _parse_err(s_orig, ParseErrorKind.INVALID)
    if not year_raw.isdigit() or not 2 <= len(year_raw) <= 4:
        _parse_err(s_orig, ParseErrorKind.INVALID)
    year = int(year_raw)
    if len(year_raw) == 2:
        year += 2000 if year < 50 else 1900
    elif len(year_raw) == 3:
        year += 1900

    # Time components may be separated by whitespace
    time_raw = "".join(time_parts)
    pieces = time_raw.split(":")
    if not (
        2 <= len(pieces) <= 3
        and all(len(p) == 2 and p.isdigit() for p in pieces)
    ):
        _parse_err(s_orig, ParseErrorKind.INVALID)
    hour, minute = int(pieces[0]), int(pieces[1])
    sec = int(pieces[2]) if len(pieces) == 3 else 0

    if offset_raw[:1] in ("+", "-"):
        if len(offset_raw) != 5 or not offset_raw[1:].isdigit():
            _parse_err(s_orig, ParseErrorKind.INVALID)
        off_h, off_m = int(offset_raw[1:3]), int(offset_raw[3:])
        if off_m > 59:
            _parse_err(s_orig, ParseErrorKind.OUT_OF_RANGE)
        offset = (off_h * 3600 + off_m * 60) * (
            -1 if offset_raw[0] == "-" else 1
        )
    elif offset_raw.isalpha():
        offset = _RFC2822_ZONES.get(offset_raw.upper(), 0) * 3600
    else:
        _parse_err(s_orig, ParseErrorKind.INVALID)

    fields = check_fields(
        s_orig, year, month, int(day_raw), hour, minute, sec, 0, offset
    )
    if iso_weekday is not None:
        if _date(year, month, int(day_raw)).isoweekday() != iso_weekday:
            _parse_err(s_orig, ParseErrorKind.IMPOSSIBLE)
    return fields
