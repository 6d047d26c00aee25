"""Formatting and parsing with ``strftime``-like format strings.

A format string is first compiled into *items*: literal text, whitespace,
numeric fields and fixed (named) fields. Items are then rendered against
a value, or used to scan text into a :class:`Parsed` accumulator.

Supported directives
--------------------

===========  ===============================================  ================
Directive    Meaning                                          Example
===========  ===============================================  ================
``%Y``       Year, zero-padded to 4 digits                    ``2001``
``%C``       Year divided by 100                              ``20``
``%y``       Year modulo 100 (parsed as 1970-2069)            ``01``
``%m``       Month                                            ``07``
``%b``       Abbreviated month name (also ``%h``)             ``Jul``
``%B``       Full month name                                  ``July``
``%d``       Day of the month                                 ``08``
``%e``       Day of the month, space-padded                   `` 8``
``%a``       Abbreviated weekday name                         ``Sun``
``%A``       Full weekday name                                ``Sunday``
``%w``       Weekday, Sunday = 0                              ``0``
``%u``       Weekday, Monday = 1                              ``7``
``%U``       Week number, weeks starting on Sunday            ``27``
``%W``       Week number, weeks starting on Monday            ``27``
``%G``       ISO week-based year                              ``2001``
``%g``       ISO week-based year modulo 100                   ``01``
``%V``       ISO week number                                  ``27``
``%j``       Day of the year                                  ``189``
``%D``       ``%m/%d/%y`` (also ``%x``)                       ``07/08/01``
``%F``       ``%Y-%m-%d``                                     ``2001-07-08``
``%v``       ``%e-%b-%Y``                                     `` 8-Jul-2001``
``%H``       Hour, 24-hour clock                              ``00``
``%k``       Hour, 24-hour clock, space-padded                `` 0``
``%I``       Hour, 12-hour clock                              ``12``
``%l``       Hour, 12-hour clock, space-padded                ``12``
``%p``       ``AM`` or ``PM``                                 ``AM``
``%P``       ``am`` or ``pm``                                 ``am``
``%M``       Minute                                           ``34``
``%S``       Second (``60`` for a leap second)                ``60``
``%f``       Nanoseconds since the last whole second          ``026490000``
``%.f``      Fraction with as many digits as needed (0/3/6/9) ``.026490``
``%.3f``     Fraction with 3 (or 6 or 9) digits               ``.026``
``%3f``      As ``%.3f`` (or 6 or 9) without the dot          ``026``
``%R``       ``%H:%M``                                        ``00:34``
``%T``       ``%H:%M:%S`` (also ``%X``)                       ``00:34:60``
``%r``       ``%I:%M:%S %p``                                  ``12:34:60 AM``
``%c``       ``%a %b %e %T %Y``                               ``Sun Jul  8 00:34:60 2001``
``%Z``       Timezone name or abbreviation                    ``ACST``
``%z``       Offset from UTC                                  ``+0930``
``%:z``      Offset from UTC with a colon                     ``+09:30``
``%+``       RFC 3339 with ``%.f`` fraction                   ``2001-07-08T00:34:60.026490+09:30``
``%s``       Seconds since the epoch                          ``994518299``
``%t``       Tab
``%n``       Newline
``%%``       A literal ``%``                                  ``%``
===========  ===============================================  ================

Numeric directives take a padding modifier after the ``%``:
``-`` for no padding, ``_`` for spaces, and ``0`` for zeros.
"""

from __future__ import annotations

import enum
import re
from datetime import date as _date, timedelta as _timedelta
from functools import lru_cache
from typing import Iterator, NamedTuple, NoReturn, Optional, Union

from ._math import (
    EPOCH_ORDINAL,
    MAX_ORDINAL,
    MIN_ORDINAL,
    date_from_week_of_year,
    days_in_year,
    week_of_year,
)
from ._parse import ParseError, ParseErrorKind, parse_rfc3339

__all__ = [
    "DelayedFormat",
    "Fixed",
    "FixedField",
    "Literal",
    "Numeric",
    "NumericField",
    "Pad",
    "Parsed",
    "Space",
    "StrftimeItems",
]

MONTH_NAMES = [
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
]
WEEKDAY_NAMES = [
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
]


class Pad(enum.Enum):
    NONE = "-"
    ZERO = "0"
    SPACE = "_"


class NumericField(enum.Enum):
    YEAR = enum.auto()
    YEAR_DIV_100 = enum.auto()
    YEAR_MOD_100 = enum.auto()
    ISO_YEAR = enum.auto()
    ISO_YEAR_DIV_100 = enum.auto()
    ISO_YEAR_MOD_100 = enum.auto()
    MONTH = enum.auto()
    DAY = enum.auto()
    WEEK_FROM_SUN = enum.auto()
    WEEK_FROM_MON = enum.auto()
    ISO_WEEK = enum.auto()
    NUM_DAYS_FROM_SUN = enum.auto()
    WEEKDAY_FROM_MON = enum.auto()
    ORDINAL = enum.auto()
    HOUR = enum.auto()
    HOUR12 = enum.auto()
    MINUTE = enum.auto()
    SECOND = enum.auto()
    NANOSECOND = enum.auto()
    TIMESTAMP = enum.auto()


_TIME_FIELDS = frozenset(
    [
        NumericField.HOUR,
        NumericField.HOUR12,
        NumericField.MINUTE,
        NumericField.SECOND,
        NumericField.NANOSECOND,
    ]
)

_WIDTHS = {
    NumericField.YEAR: 4,
    NumericField.ISO_YEAR: 4,
    NumericField.NUM_DAYS_FROM_SUN: 1,
    NumericField.WEEKDAY_FROM_MON: 1,
    NumericField.ORDINAL: 3,
    NumericField.NANOSECOND: 9,
    NumericField.TIMESTAMP: 1,
}


class FixedField(enum.Enum):
    SHORT_MONTH_NAME = enum.auto()
    LONG_MONTH_NAME = enum.auto()
    SHORT_WEEKDAY_NAME = enum.auto()
    LONG_WEEKDAY_NAME = enum.auto()
    LOWER_AMPM = enum.auto()
    UPPER_AMPM = enum.auto()
    NANOSECOND = enum.auto()
    NANOSECOND3 = enum.auto()
    NANOSECOND6 = enum.auto()
    NANOSECOND9 = enum.auto()
    NANOSECOND3_NO_DOT = enum.auto()
    NANOSECOND6_NO_DOT = enum.auto()
    NANOSECOND9_NO_DOT = enum.auto()
    TIMEZONE_NAME = enum.auto()
    TIMEZONE_OFFSET = enum.auto()
    TIMEZONE_OFFSET_COLON = enum.auto()
    RFC3339 = enum.auto()


# digits and whether a dot precedes them
_FIXED_FRACTIONS = {
    FixedField.NANOSECOND3: (3, True),
    FixedField.NANOSECOND6: (6, True),
    FixedField.NANOSECOND9: (9, True),
    FixedField.NANOSECOND3_NO_DOT: (3, False),
    FixedField.NANOSECOND6_NO_DOT: (6, False),
    FixedField.NANOSECOND9_NO_DOT: (9, False),
}


class Literal(NamedTuple):
    """Text that is rendered as-is, and must match exactly when parsing"""

    text: str


class Space(NamedTuple):
    """Whitespace. When parsing, it matches any amount of whitespace."""

    text: str


class Numeric(NamedTuple):
    field: NumericField
    pad: Pad

    @property
    def width(self) -> int:
        return _WIDTHS.get(self.field, 2)


class Fixed(NamedTuple):
    field: FixedField


Item = Union[Literal, Space, Numeric, Fixed]


def _num(field: NumericField, pad: Pad = Pad.ZERO) -> Numeric:
    return Numeric(field, pad)


_F = NumericField
_DIRECTIVES: dict[str, tuple[Item, ...]] = {
    "Y": (_num(_F.YEAR),),
    "C": (_num(_F.YEAR_DIV_100),),
    "y": (_num(_F.YEAR_MOD_100),),
    "G": (_num(_F.ISO_YEAR),),
    "g": (_num(_F.ISO_YEAR_MOD_100),),
    "m": (_num(_F.MONTH),),
    "b": (Fixed(FixedField.SHORT_MONTH_NAME),),
    "h": (Fixed(FixedField.SHORT_MONTH_NAME),),
    "B": (Fixed(FixedField.LONG_MONTH_NAME),),
    "d": (_num(_F.DAY),),
    "e": (_num(_F.DAY, Pad.SPACE),),
    "a": (Fixed(FixedField.SHORT_WEEKDAY_NAME),),
    "A": (Fixed(FixedField.LONG_WEEKDAY_NAME),),
    "w": (_num(_F.NUM_DAYS_FROM_SUN),),
    "u": (_num(_F.WEEKDAY_FROM_MON),),
    "U": (_num(_F.WEEK_FROM_SUN),),
    "W": (_num(_F.WEEK_FROM_MON),),
    "V": (_num(_F.ISO_WEEK),),
    "j": (_num(_F.ORDINAL),),
    "D": (
        _num(_F.MONTH),
        Literal("/"),
        _num(_F.DAY),
        Literal("/"),
        _num(_F.YEAR_MOD_100),
    ),
    "F": (
        _num(_F.YEAR),
        Literal("-"),
        _num(_F.MONTH),
        Literal("-"),
        _num(_F.DAY),
    ),
    "v": (
        _num(_F.DAY, Pad.SPACE),
        Literal("-"),
        Fixed(FixedField.SHORT_MONTH_NAME),
        Literal("-"),
        _num(_F.YEAR),
    ),
    "H": (_num(_F.HOUR),),
    "k": (_num(_F.HOUR, Pad.SPACE),),
    "I": (_num(_F.HOUR12),),
    "l": (_num(_F.HOUR12, Pad.SPACE),),
    "p": (Fixed(FixedField.UPPER_AMPM),),
    "P": (Fixed(FixedField.LOWER_AMPM),),
    "M": (_num(_F.MINUTE),),
    "S": (_num(_F.SECOND),),
    "f": (_num(_F.NANOSECOND),),
    ".f": (Fixed(FixedField.NANOSECOND),),
    ".3f": (Fixed(FixedField.NANOSECOND3),),
    ".6f": (Fixed(FixedField.NANOSECOND6),),
    ".9f": (Fixed(FixedField.NANOSECOND9),),
    "3f": (Fixed(FixedField.NANOSECOND3_NO_DOT),),
    "6f": (Fixed(FixedField.NANOSECOND6_NO_DOT),),
    "9f": (Fixed(FixedField.NANOSECOND9_NO_DOT),),
    "R": (_num(_F.HOUR), Literal(":"), _num(_F.MINUTE)),
    "T": (
        _num(_F.HOUR),
        Literal(":"),
        _num(_F.MINUTE),
        Literal(":"),
        _num(_F.SECOND),
    ),
    "r": (
        _num(_F.HOUR12),
        Literal(":"),
        _num(_F.MINUTE),
        Literal(":"),
        _num(_F.SECOND),
        Space(" "),
        Fixed(FixedField.UPPER_AMPM),
    ),
    "Z": (Fixed(FixedField.TIMEZONE_NAME),),
    "z": (Fixed(FixedField.TIMEZONE_OFFSET),),
    ":z": (Fixed(FixedField.TIMEZONE_OFFSET_COLON),),
    "+": (Fixed(FixedField.RFC3339),),
    "s": (_num(_F.TIMESTAMP, Pad.NONE),),
    "t": (Space("\t"),),
    "n": (Space("\n"),),
    "%": (Literal("%"),),
}
_DIRECTIVES["x"] = _DIRECTIVES["D"]
_DIRECTIVES["X"] = _DIRECTIVES["T"]
_DIRECTIVES["c"] = (
    _DIRECTIVES["a"]
    + (Space(" "),)
    + _DIRECTIVES["b"]
    + (Space(" "),)
    + _DIRECTIVES["e"]
    + (Space(" "),)
    + _DIRECTIVES["T"]
    + (Space(" "),)
    + _DIRECTIVES["Y"]
)
del _F

_PAD_MODIFIERS = {"-": Pad.NONE, "_": Pad.SPACE, "0": Pad.ZERO}


def _bad_format(fmt: str) -> NoReturn:
    raise ParseError(ParseErrorKind.BAD_FORMAT, fmt)


class StrftimeItems:
    """The items of a ``strftime``-like format string.

    Iterating raises :class:`~civiltime.ParseError` (with kind
    ``BAD_FORMAT``) when reaching an unknown or incomplete directive.

    Example
    -------
    >>> len(list(StrftimeItems("%H:%M")))
    3
    >>> list(StrftimeItems("%%"))
    [Literal(text='%')]
    """

    __slots__ = ("fmt",)

    def __init__(self, fmt: str):
        self.fmt = fmt

    def __iter__(self) -> Iterator[Item]:
        fmt = self.fmt
        i, n = 0, len(fmt)
        while i < n:
            c = fmt[i]
            if c == "%":
                i += 1
                pad = _PAD_MODIFIERS.get(fmt[i : i + 1])
                if pad is not None:
                    i += 1
                key = _directive_key(fmt, i)
                try:
                    items = _DIRECTIVES[key]
                except KeyError:
                    _bad_format(fmt)
                i += len(key)
                if pad is not None:
                    if len(items) != 1 or not isinstance(items[0], Numeric):
                        _bad_format(fmt)
                    items = (items[0]._replace(pad=pad),)
                yield from items
            elif c.isspace():
                j = i
                while j < n and fmt[j].isspace():
                    j += 1
                yield Space(fmt[i:j])
                i = j
            else:
                j = i
                while j < n and fmt[j] != "%" and not fmt[j].isspace():
                    j += 1
                yield Literal(fmt[i:j])
                i = j

    def __repr__(self) -> str:
        return f"StrftimeItems({self.fmt!r})"


def _directive_key(fmt: str, i: int) -> str:
    c = fmt[i : i + 1]
    if c == ".":
        if fmt[i + 1 : i + 2] == "f":
            return ".f"
        return fmt[i : i + 3]
    elif c in ("3", "6", "9"):
        return fmt[i : i + 2]
    elif c == ":":
        return fmt[i : i + 2]
    return c


@lru_cache(maxsize=128)
def compile_format(fmt: str) -> tuple[Item, ...]:
    return tuple(StrftimeItems(fmt))


class Subject(NamedTuple):
    """The data a value makes available for formatting"""

    date: Optional[_date] = None
    # hour, minute, second, nanosecond (leap second band included)
    time: Optional[tuple[int, int, int, int]] = None
    offset: Optional[int] = None
    tz_name: Optional[str] = None


def _missing(what: str) -> NoReturn:
    raise ValueError(
        f"The format requires {what}, which this value doesn't have"
    )


def _need_date(subj: Subject) -> _date:
    if subj.date is None:
        _missing("a date")
    return subj.date


def _need_time(subj: Subject) -> tuple[int, int, int, int]:
    if subj.time is None:
        _missing("a time")
    return subj.time


def _need_offset(subj: Subject) -> int:
    if subj.offset is None:
        _missing("an offset")
    return subj.offset


def _numeric_value(field: NumericField, subj: Subject) -> int:
    if field is NumericField.TIMESTAMP:
        d = _need_date(subj)
        hour, minute, second, _ = _need_time(subj)
        return (
            (d.toordinal() - EPOCH_ORDINAL) * 86_400
            + hour * 3600
            + minute * 60
            + second
            - (subj.offset or 0)
        )
    elif field in _TIME_FIELDS:
        hour, minute, second, nanos = _need_time(subj)
        if field is NumericField.HOUR:
            return hour
        elif field is NumericField.HOUR12:
            return hour % 12 or 12
        elif field is NumericField.MINUTE:
            return minute
        elif field is NumericField.SECOND:
            return second + (nanos >= 1_000_000_000)
        return nanos % 1_000_000_000

    d = _need_date(subj)
    if field is NumericField.YEAR:
        return d.year
    elif field is NumericField.YEAR_DIV_100:
        return d.year // 100
    elif field is NumericField.YEAR_MOD_100:
        return d.year % 100
    elif field is NumericField.ISO_YEAR:
        return d.isocalendar()[0]
    elif field is NumericField.ISO_YEAR_DIV_100:
        return d.isocalendar()[0] // 100
    elif field is NumericField.ISO_YEAR_MOD_100:
        return d.isocalendar()[0] % 100
    elif field is NumericField.MONTH:
        return d.month
    elif field is NumericField.DAY:
        return d.day
    elif field is NumericField.WEEK_FROM_SUN:
        return week_of_year(d, 6)
    elif field is NumericField.WEEK_FROM_MON:
        return week_of_year(d, 0)
    elif field is NumericField.ISO_WEEK:
        return d.isocalendar()[1]
    elif field is NumericField.NUM_DAYS_FROM_SUN:
        return d.isoweekday() % 7
    elif field is NumericField.WEEKDAY_FROM_MON:
        return d.isoweekday()
    assert field is NumericField.ORDINAL
    return d.timetuple().tm_yday


def format_offset(
    secs: int, colon: bool, with_seconds: bool = True
) -> str:
    """``±HHMM`` or ``±HH:MM``. Seconds are appended if nonzero, or
    truncated when ``with_seconds`` is false, as RFC 3339 and RFC 2822
    only allow whole minutes."""
    hours, rest = divmod(abs(secs), 3600)
    minutes, seconds = divmod(rest, 60)
    if not with_seconds:
        seconds = 0
    sign = "-" if secs < 0 and (hours or minutes or seconds) else "+"
    sep = ":" if colon else ""
    text = f"{sign}{hours:02}{sep}{minutes:02}"
    if seconds:
        text += f"{sep}{seconds:02}"
    return text


def format_fraction(nanos: int, digits: int | None) -> str:
    """The fraction of a second, including the dot. With ``digits`` of
    ``None``, as many digits as needed are used (0, 3, 6 or 9)."""
    nanos %= 1_000_000_000
    if digits is None:
        if nanos == 0:
            return ""
        elif nanos % 1_000_000 == 0:
            digits = 3
        elif nanos % 1_000 == 0:
            digits = 6
        else:
            digits = 9
    elif digits == 0:
        return ""
    return "." + f"{nanos:09}"[:digits]


def _fixed_text(field: FixedField, subj: Subject) -> str:
    if field is FixedField.SHORT_MONTH_NAME:
        return MONTH_NAMES[_need_date(subj).month - 1][:3]
    elif field is FixedField.LONG_MONTH_NAME:
        return MONTH_NAMES[_need_date(subj).month - 1]
    elif field is FixedField.SHORT_WEEKDAY_NAME:
        return WEEKDAY_NAMES[_need_date(subj).weekday()][:3]
    elif field is FixedField.LONG_WEEKDAY_NAME:
        return WEEKDAY_NAMES[_need_date(subj).weekday()]
    elif field is FixedField.UPPER_AMPM:
        return "PM" if _need_time(subj)[0] >= 12 else "AM"
    elif field is FixedField.LOWER_AMPM:
        return "pm" if _need_time(subj)[0] >= 12 else "am"
    elif field is FixedField.NANOSECOND:
        return format_fraction(_need_time(subj)[3], None)
    elif field in _FIXED_FRACTIONS:
        digits, dot = _FIXED_FRACTIONS[field]
        text = format_fraction(_need_time(subj)[3], digits)
        return text if dot else text[1:]
    elif field is FixedField.TIMEZONE_NAME:
        if subj.tz_name is None:
            _missing("a timezone")
        return subj.tz_name
    elif field is FixedField.TIMEZONE_OFFSET:
        return format_offset(_need_offset(subj), colon=False)
    elif field is FixedField.TIMEZONE_OFFSET_COLON:
        return format_offset(_need_offset(subj), colon=True)
    assert field is FixedField.RFC3339
    d = _need_date(subj)
    hour, minute, second, nanos = _need_time(subj)
    offset = format_offset(_need_offset(subj), colon=True, with_seconds=False)
    return (
        f"{d.year:04}-{d.month:02}-{d.day:02}T"
        f"{hour:02}:{minute:02}:{second + (nanos >= 1_000_000_000):02}"
        f"{format_fraction(nanos, None)}"
        f"{offset}"
    )


def render(items: tuple[Item, ...], subj: Subject) -> str:
    out = []
    for item in items:
        if isinstance(item, (Literal, Space)):
            out.append(item.text)
        elif isinstance(item, Numeric):
            value = _numeric_value(item.field, subj)
            text = str(abs(value))
            if item.pad is Pad.ZERO:
                text = text.rjust(item.width, "0")
            elif item.pad is Pad.SPACE:
                text = text.rjust(item.width)
            out.append("-" + text if value < 0 else text)
        else:
            out.append(_fixed_text(item.field, subj))
    return "".join(out)


class DelayedFormat:
    """A value paired with format items, rendered when converted to text.

    Besides ``str()``, it supports the format-spec mini language to align
    the rendered text as a whole:

    >>> f"{Date(2007, 1, 2).format('%Y'):>8}"
    '    2007'
    """

    __slots__ = ("_subject", "_items")

    def __init__(self, subject: Subject, items: tuple[Item, ...]):
        self._subject = subject
        self._items = items

    def __str__(self) -> str:
        return render(self._items, self._subject)

    def __format__(self, spec: str) -> str:
        return format(str(self), spec)

    def __repr__(self) -> str:
        return f"DelayedFormat({str(self)!r})"


def _err(kind: ParseErrorKind) -> NoReturn:
    raise ParseError(kind)


class Parsed:
    """Fields gathered while parsing, resolved into values afterwards.

    Setting a field twice to different values is an ``IMPOSSIBLE`` error.
    """

    __slots__ = (
        "year",
        "year_div_100",
        "year_mod_100",
        "isoyear",
        "isoyear_div_100",
        "isoyear_mod_100",
        "month",
        "week_from_sun",
        "week_from_mon",
        "isoweek",
        "weekday",
        "ordinal",
        "day",
        "hour_div_12",
        "hour_mod_12",
        "minute",
        "second",
        "nanosecond",
        "timestamp",
        "offset",
    )

    year: Optional[int]
    year_div_100: Optional[int]
    year_mod_100: Optional[int]
    isoyear: Optional[int]
    isoyear_div_100: Optional[int]
    isoyear_mod_100: Optional[int]
    month: Optional[int]
    week_from_sun: Optional[int]
    week_from_mon: Optional[int]
    isoweek: Optional[int]
    weekday: Optional[int]  # Monday=0
    ordinal: Optional[int]
    day: Optional[int]
    hour_div_12: Optional[int]
    hour_mod_12: Optional[int]
    minute: Optional[int]
    second: Optional[int]
    nanosecond: Optional[int]
    timestamp: Optional[int]
    offset: Optional[int]

    def __init__(self) -> None:
        for name in self.__slots__:
            setattr(self, name, None)

    def set(self, name: str, value: int) -> None:
        current = getattr(self, name)
        if current is None:
            setattr(self, name, value)
        elif current != value:
            _err(ParseErrorKind.IMPOSSIBLE)

    def __repr__(self) -> str:
        fields = ", ".join(
            f"{name}={getattr(self, name)}"
            for name in self.__slots__
            if getattr(self, name) is not None
        )
        return f"Parsed({fields})"

    def _resolve_year(
        self, full: int | None, div: int | None, mod: int | None
    ) -> int | None:
        if full is not None:
            if (div is not None and full // 100 != div) or (
                mod is not None and full % 100 != mod
            ):
                _err(ParseErrorKind.IMPOSSIBLE)
            return full
        elif mod is not None:
            if div is not None:
                return div * 100 + mod
            return mod + (2000 if mod < 70 else 1900)
        elif div is not None:
            _err(ParseErrorKind.NOT_ENOUGH)
        return None

    def _timestamp_local(self) -> tuple[_date, int]:
        """Date and second of the day from the timestamp and offset"""
        assert self.timestamp is not None
        days, secs = divmod(self.timestamp + (self.offset or 0), 86_400)
        ordinal = days + EPOCH_ORDINAL
        if not MIN_ORDINAL <= ordinal <= MAX_ORDINAL:
            _err(ParseErrorKind.OUT_OF_RANGE)
        return _date.fromordinal(ordinal), secs

    def _date_from_fields(self) -> _date | None:
        year = self._resolve_year(
            self.year, self.year_div_100, self.year_mod_100
        )
        isoyear = self._resolve_year(
            self.isoyear, self.isoyear_div_100, self.isoyear_mod_100
        )
        result: _date | None
        try:
            if year is not None and self.month is not None:
                if self.day is None:
                    _err(ParseErrorKind.NOT_ENOUGH)
                result = _date(year, self.month, self.day)
            elif year is not None and self.ordinal is not None:
                if self.ordinal > days_in_year(year):
                    _err(ParseErrorKind.OUT_OF_RANGE)
                result = _date(year, 1, 1) + _timedelta(self.ordinal - 1)
            elif (
                year is not None
                and self.week_from_sun is not None
                and self.weekday is not None
            ):
                result = date_from_week_of_year(
                    year, self.week_from_sun, self.weekday, 6
                )
            elif (
                year is not None
                and self.week_from_mon is not None
                and self.weekday is not None
            ):
                result = date_from_week_of_year(
                    year, self.week_from_mon, self.weekday, 0
                )
            elif (
                isoyear is not None
                and self.isoweek is not None
                and self.weekday is not None
            ):
                result = _date.fromisocalendar(
                    isoyear, self.isoweek, self.weekday + 1
                )
            else:
                return None
        except ValueError as e:
            if isinstance(e, ParseError):
                raise
            _err(ParseErrorKind.OUT_OF_RANGE)
        if result is None:
            _err(ParseErrorKind.OUT_OF_RANGE)

        # Verify the fields that weren't used to build the date
        if (
            (year is not None and result.year != year)
            or (self.weekday is not None and result.weekday() != self.weekday)
            or (
                self.ordinal is not None
                and result.timetuple().tm_yday != self.ordinal
            )
            or (
                isoyear is not None and result.isocalendar()[0] != isoyear
            )
            or (
                self.isoweek is not None
                and result.isocalendar()[1] != self.isoweek
            )
        ):
            _err(ParseErrorKind.IMPOSSIBLE)
        return result

    def to_date(self) -> _date:
        result = self._date_from_fields()
        if self.timestamp is not None:
            from_ts, _ = self._timestamp_local()
            if result is not None and result != from_ts:
                _err(ParseErrorKind.IMPOSSIBLE)
            return from_ts
        elif result is None:
            _err(ParseErrorKind.NOT_ENOUGH)
        return result

    def _time_from_fields(self) -> tuple[int, int, int, int] | None:
        if self.hour_mod_12 is None and self.hour_div_12 is None:
            if self.minute is not None or self.second is not None:
                _err(ParseErrorKind.NOT_ENOUGH)
            return None
        elif (
            self.hour_mod_12 is None
            or self.hour_div_12 is None
            or self.minute is None
        ):
            _err(ParseErrorKind.NOT_ENOUGH)
        hour = self.hour_div_12 * 12 + self.hour_mod_12
        second = self.second or 0
        nanos = self.nanosecond or 0
        if second == 60:
            second, nanos = 59, nanos + 1_000_000_000
        return (hour, self.minute, second, nanos)

    def to_time(self) -> tuple[int, int, int, int]:
        result = self._time_from_fields()
        if self.timestamp is not None:
            _, secs = self._timestamp_local()
            hour, rest = divmod(secs, 3600)
            from_ts = (hour, *divmod(rest, 60), self.nanosecond or 0)
            if result is not None and result[:3] != from_ts[:3]:
                _err(ParseErrorKind.IMPOSSIBLE)
            return result or from_ts
        elif result is None:
            _err(ParseErrorKind.NOT_ENOUGH)
        return result


def _scan_digits(s: str, pos: int, min_len: int, max_len: int) -> int:
    end = pos
    while end < len(s) and end - pos < max_len and "0" <= s[end] <= "9":
        end += 1
    if end - pos < min_len:
        _err(
            ParseErrorKind.TOO_SHORT if end == len(s) else ParseErrorKind.INVALID
        )
    return end


def _scan_name(s: str, pos: int, names: list[str]) -> tuple[int, int]:
    """Match a 3-letter abbreviation, optionally followed by the rest
    of the full name, case-insensitively."""
    prefix = s[pos : pos + 3].lower()
    if len(prefix) < 3:
        _err(ParseErrorKind.TOO_SHORT)
    for index, name in enumerate(names):
        if name[:3].lower() == prefix:
            end = pos + 3
            rest = name[3:].lower()
            if s[end : end + len(rest)].lower() == rest:
                end += len(rest)
            return index, end
    _err(ParseErrorKind.INVALID)


def _scan_offset(s: str, pos: int) -> tuple[int, int]:
    if pos >= len(s):
        _err(ParseErrorKind.TOO_SHORT)
    elif s[pos] not in "+-":
        _err(ParseErrorKind.INVALID)
    sign = -1 if s[pos] == "-" else 1
    end = _scan_digits(s, pos + 1, 2, 2)
    hours = int(s[pos + 1 : end])
    if s[end : end + 1] == ":":
        end += 1
    start = end
    end = _scan_digits(s, start, 2, 2)
    minutes = int(s[start:end])
    if minutes > 59 or hours > 23:
        _err(ParseErrorKind.OUT_OF_RANGE)
    return sign * (hours * 3600 + minutes * 60), end


_RFC3339_PREFIX = re.compile(
    r"\d{4}-\d{2}-\d{2}[Tt ]\d{2}:\d{2}:\d{2}(?:\.\d{1,9})?(?:[Zz]|[+-]\d{2}:\d{2})",
    re.ASCII,
)

_RANGES = {
    NumericField.MONTH: ("month", 1, 12),
    NumericField.DAY: ("day", 1, 31),
    NumericField.WEEK_FROM_SUN: ("week_from_sun", 0, 53),
    NumericField.WEEK_FROM_MON: ("week_from_mon", 0, 53),
    NumericField.ISO_WEEK: ("isoweek", 1, 53),
    NumericField.ORDINAL: ("ordinal", 1, 366),
    NumericField.MINUTE: ("minute", 0, 59),
    NumericField.SECOND: ("second", 0, 60),
    NumericField.YEAR: ("year", 1, 9999),
    NumericField.YEAR_DIV_100: ("year_div_100", 0, 99),
    NumericField.YEAR_MOD_100: ("year_mod_100", 0, 99),
    NumericField.ISO_YEAR: ("isoyear", 1, 9999),
    NumericField.ISO_YEAR_DIV_100: ("isoyear_div_100", 0, 99),
    NumericField.ISO_YEAR_MOD_100: ("isoyear_mod_100", 0, 99),
}


def _set_numeric(parsed: Parsed, field: NumericField, value: int) -> None:
    if field in _RANGES:
        name, low, high = _RANGES[field]
        if not low <= value <= high:
            _err(ParseErrorKind.OUT_OF_RANGE)
        parsed.set(name, value)
    elif field is NumericField.HOUR:
        if value > 23:
            _err(ParseErrorKind.OUT_OF_RANGE)
        parsed.set("hour_div_12", value // 12)
        parsed.set("hour_mod_12", value % 12)
    elif field is NumericField.HOUR12:
        if not 1 <= value <= 12:
            _err(ParseErrorKind.OUT_OF_RANGE)
        parsed.set("hour_mod_12", value % 12)
    elif field is NumericField.NUM_DAYS_FROM_SUN:
        if value > 6:
            _err(ParseErrorKind.OUT_OF_RANGE)
        parsed.set("weekday", (value - 1) % 7)
    elif field is NumericField.WEEKDAY_FROM_MON:
        if not 1 <= value <= 7:
            _err(ParseErrorKind.OUT_OF_RANGE)
        parsed.set("weekday", value - 1)
    elif field is NumericField.NANOSECOND:
        parsed.set("nanosecond", value)
    else:
        assert field is NumericField.TIMESTAMP
        parsed.set("timestamp", value)


def _scan_fraction(
    s: str, pos: int, parsed: Parsed, digits: int | None, dot: bool
) -> int:
    if dot:
        if s[pos : pos + 1] != ".":
            if digits is None:
                return pos  # the fraction is optional
            _err(
                ParseErrorKind.TOO_SHORT
                if pos >= len(s)
                else ParseErrorKind.INVALID
            )
        pos += 1
    end = (
        _scan_digits(s, pos, 1, 9)
        if digits is None
        else _scan_digits(s, pos, digits, digits)
    )
    parsed.set("nanosecond", int(s[pos:end].ljust(9, "0")))
    return end


def parse(s: str, items: tuple[Item, ...]) -> Parsed:
    """Scan the text according to the items"""
    parsed = Parsed()
    pos = 0
    for item in items:
        if isinstance(item, Space):
            while pos < len(s) and s[pos].isspace():
                pos += 1
        elif isinstance(item, Literal):
            if s[pos : pos + len(item.text)] != item.text:
                _err(
                    ParseErrorKind.TOO_SHORT
                    if len(s) - pos < len(item.text)
                    else ParseErrorKind.INVALID
                )
            pos += len(item.text)
        elif isinstance(item, Numeric):
            if item.pad is Pad.SPACE:
                while s[pos : pos + 1] == " ":
                    pos += 1
            if item.field is NumericField.TIMESTAMP:
                start = pos + (s[pos : pos + 1] in ("+", "-"))
                end = _scan_digits(s, start, 1, 20)
                value = int(s[pos:end])
            elif item.field is NumericField.NANOSECOND:
                end = _scan_digits(s, pos, 1, 9)
                value = int(s[pos:end].ljust(9, "0"))
            else:
                end = _scan_digits(s, pos, 1, item.width)
                value = int(s[pos:end])
            _set_numeric(parsed, item.field, value)
            pos = end
        else:
            pos = _scan_fixed(s, pos, item.field, parsed)
    if pos != len(s):
        _err(ParseErrorKind.TOO_LONG)
    return parsed


def _scan_fixed(s: str, pos: int, field: FixedField, parsed: Parsed) -> int:
    if field in (FixedField.SHORT_MONTH_NAME, FixedField.LONG_MONTH_NAME):
        index, pos = _scan_name(s, pos, MONTH_NAMES)
        parsed.set("month", index + 1)
    elif field in (
        FixedField.SHORT_WEEKDAY_NAME,
        FixedField.LONG_WEEKDAY_NAME,
    ):
        index, pos = _scan_name(s, pos, WEEKDAY_NAMES)
        parsed.set("weekday", index)
    elif field in (FixedField.LOWER_AMPM, FixedField.UPPER_AMPM):
        ampm = s[pos : pos + 2].lower()
        if len(ampm) < 2:
            _err(ParseErrorKind.TOO_SHORT)
        elif ampm not in ("am", "pm"):
            _err(ParseErrorKind.INVALID)
        parsed.set("hour_div_12", int(ampm == "pm"))
        pos += 2
    elif field is FixedField.NANOSECOND:
        pos = _scan_fraction(s, pos, parsed, None, dot=True)
    elif field in _FIXED_FRACTIONS:
        digits, dot = _FIXED_FRACTIONS[field]
        pos = _scan_fraction(s, pos, parsed, digits, dot)
    elif field is FixedField.TIMEZONE_NAME:
        while pos < len(s) and not s[pos].isspace():
            pos += 1
    elif field in (
        FixedField.TIMEZONE_OFFSET,
        FixedField.TIMEZONE_OFFSET_COLON,
    ):
        offset, pos = _scan_offset(s, pos)
        parsed.set("offset", offset)
    else:
        assert field is FixedField.RFC3339
        match = _RFC3339_PREFIX.match(s, pos)
        if match is None:
            _err(ParseErrorKind.INVALID)
        year, month, day, hour, minute, second, nanos, offset = (
            parse_rfc3339(match.group())
        )
        if nanos >= 1_000_000_000:
            second, nanos = 60, nanos - 1_000_000_000
        for name, value in (
            ("year", year),
            ("month", month),
            ("day", day),
            ("hour_div_12", hour // 12),
            ("hour_mod_12", hour % 12),
            ("minute", minute),
            ("second", second),
            ("nanosecond", nanos),
            ("offset", offset),
        ):
            parsed.set(name, value)
        pos = match.end()
    return pos


def parse_format(s: str, fmt: str) -> Parsed:
    return parse(s, compile_format(fmt))
