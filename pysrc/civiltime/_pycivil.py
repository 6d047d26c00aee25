# The MIT License (MIT)
#
# Copyright (c) Arie Bovenberg
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in all
# copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.

# Maintainer's notes:
#
# - All public value types live in this one file. The classes refer to
#   each other a lot, and keeping them together avoids circular imports.
# - Leap seconds are represented as in the "nanosecond" field:
#   a value in [1e9, 2e9) means the clock reads second 60.
from __future__ import annotations

__version__ = "0.1.0"

import enum
import re
from abc import ABC, abstractmethod
from datetime import (
    date as _date,
    datetime as _datetime,
    time as _time,
    timedelta as _timedelta,
    timezone as _timezone,
)
from struct import pack, unpack
from time import time_ns
from typing import (
    TYPE_CHECKING,
    Any,
    ClassVar,
    Generic,
    Literal,
    Optional,
    TypeVar,
    no_type_check,
)

from ._common import (
    LEAP_NANOS_MAX,
    MAX_OFFSET_SECS,
    NS_PER_SEC,
    Ambiguous,
    RepeatedTime,
    Resolution,
    Single,
    Skipped,
    SkippedTime,
)
from ._format import (
    DelayedFormat,
    Parsed,
    Subject,
    compile_format,
    format_fraction,
    format_offset,
    parse_format,
)
from ._math import (
    EPOCH_ORDINAL,
    MAX_ORDINAL,
    MIN_ORDINAL,
    is_leap,
    shift_days,
)
from ._parse import (
    RFC2822_MONTHS,
    RFC2822_WEEKDAYS,
    Fields,
    ParseError,
    ParseErrorKind,
    parse_lenient,
    parse_rfc2822,
    parse_rfc3339,
)
from ._tz.store import (
    TimeZoneNotFoundError,
    get_rules,
    get_system_rules,
)
from ._tz.tzif import TzRules

__all__ = [
    # Civil date and time
    "Date",
    "Time",
    "LocalDateTime",
    "Weekday",
    # Durations and units
    "Duration",
    "weeks",
    "days",
    "hours",
    "minutes",
    "seconds",
    "milliseconds",
    "microseconds",
    "nanoseconds",
    # Offset providers
    "OffsetProvider",
    "FixedOffset",
    "Utc",
    "UTC",
    "TimeZone",
    # Resolution of local times
    "Resolution",
    "Skipped",
    "Single",
    "Ambiguous",
    # Instants and days
    "Instant",
    "Day",
    # Text
    "SecondsFormat",
    "DelayedFormat",
    "ParseError",
    "ParseErrorKind",
    # Exceptions
    "SkippedTime",
    "RepeatedTime",
    "ProviderError",
    "TimeZoneNotFoundError",
    # Constants
    "MONDAY",
    "TUESDAY",
    "WEDNESDAY",
    "THURSDAY",
    "FRIDAY",
    "SATURDAY",
    "SUNDAY",
]


class Weekday(enum.Enum):
    """The days of the week; ``.value`` corresponds with ISO numbering."""

    MONDAY = 1
    TUESDAY = 2
    WEDNESDAY = 3
    THURSDAY = 4
    FRIDAY = 5
    SATURDAY = 6
    SUNDAY = 7


MONDAY = Weekday.MONDAY
TUESDAY = Weekday.TUESDAY
WEDNESDAY = Weekday.WEDNESDAY
THURSDAY = Weekday.THURSDAY
FRIDAY = Weekday.FRIDAY
SATURDAY = Weekday.SATURDAY
SUNDAY = Weekday.SUNDAY


class SecondsFormat(enum.Enum):
    """How many fractional digits to show in RFC 3339 output"""

    SECS = 0
    MILLIS = 3
    MICROS = 6
    NANOS = 9
    AUTO_SI = None
    """No fraction if it's zero, otherwise 3, 6 or 9 digits:
    whichever is the fewest without losing precision"""


class ProviderError(RuntimeError):
    """An offset provider broke its contract, for example by giving
    no valid local time near the start of a day.
    This indicates a bug in the provider, not invalid input."""


# Helpers that pre-compute/lookup as much as possible
_object_new = object.__new__
_MAX_DURATION_NANOS = (2**63 - 1) * 1_000_000
_SECS_PER_DAY = 86_400


class _ImmutableBase:
    __slots__ = ()

    # Immutable classes don't need to be copied
    @no_type_check
    def __copy__(self):
        return self

    @no_type_check
    def __deepcopy__(self, _):
        return self


if TYPE_CHECKING:
    from typing import final
else:

    def final(cls):

        def init_subclass_not_allowed(cls, **kwargs):  # pragma: no cover
            raise TypeError("Subclassing not allowed")

        cls.__init_subclass__ = init_subclass_not_allowed
        return cls


@final
class Date(_ImmutableBase):
    """A date on the proleptic Gregorian calendar, without a time component

    Example
    -------
    >>> d = Date(2021, 1, 2)
    Date(2021-01-02)
    """

    __slots__ = ("_py_date",)

    MIN: ClassVar[Date]
    """The minimum possible date"""
    MAX: ClassVar[Date]
    """The maximum possible date"""

    def __init__(self, year: int, month: int, day: int) -> None:
        self._py_date = _date(year, month, day)

    @classmethod
    def checked(cls, year: int, month: int, day: int) -> Date | None:
        """Like the constructor, but returns ``None`` instead of raising
        for invalid input.

        Example
        -------
        >>> Date.checked(2023, 2, 29) is None
        True
        """
        try:
            return cls(year, month, day)
        except ValueError:
            return None

    @property
    def year(self) -> int:
        return self._py_date.year

    @property
    def month(self) -> int:
        return self._py_date.month

    @property
    def day(self) -> int:
        return self._py_date.day

    def day_of_week(self) -> Weekday:
        """The day of the week

        Example
        -------
        >>> Date(2021, 1, 2).day_of_week()
        Weekday.SATURDAY
        >>> Weekday.SATURDAY.value
        6  # the ISO value
        """
        return Weekday(self._py_date.isoweekday())

    def day_of_year(self) -> int:
        """The day of the year, starting at 1 for January 1st"""
        return self._py_date.timetuple().tm_yday

    def is_leap_year(self) -> bool:
        return is_leap(self._py_date.year)

    def iso_week(self) -> tuple[int, int]:
        """The ISO week-numbering year and week number

        Example
        -------
        >>> Date(2021, 1, 2).iso_week()
        (2020, 53)
        """
        year, week, _ = self._py_date.isocalendar()
        return year, week

    def add_days(self, n: int, /) -> Date | None:
        """Shift by ``n`` days in either direction, or ``None``
        if the result is out of range.

        Example
        -------
        >>> Date(2021, 12, 31).add_days(1)
        Date(2022-01-01)
        >>> Date.MAX.add_days(1) is None
        True
        """
        shifted = shift_days(self._py_date, n)
        return None if shifted is None else self._from_py_unchecked(shifted)

    def succ(self) -> Date | None:
        """The next day, or ``None`` at :attr:`Date.MAX`"""
        return self.add_days(1)

    def pred(self) -> Date | None:
        """The previous day, or ``None`` at :attr:`Date.MIN`"""
        return self.add_days(-1)

    def days_until(self, other: Date, /) -> int:
        """Calculate the number of days from this date to another date.
        If the other date is before this date, the result is negative.

        Example
        -------
        >>> Date(2021, 1, 2).days_until(Date(2021, 1, 5))
        3
        """
        return other._py_date.toordinal() - self._py_date.toordinal()

    def days_since(self, other: Date, /) -> int:
        """Calculate the number of days this day is after another date.
        If the other date is after this date, the result is negative.

        Example
        -------
        >>> Date(2021, 1, 5).days_since(Date(2021, 1, 2))
        3
        """
        return self._py_date.toordinal() - other._py_date.toordinal()

    def years_since(self, other: Date, /) -> int | None:
        """The number of whole years from another date to this one,
        or ``None`` if the other date is later.

        Example
        -------
        >>> Date(2021, 3, 1).years_since(Date(2019, 3, 2))
        1
        >>> Date(2021, 3, 1).years_since(Date(2021, 3, 2)) is None
        True
        """
        years = self._py_date.year - other._py_date.year
        if (self._py_date.month, self._py_date.day) < (
            other._py_date.month,
            other._py_date.day,
        ):
            years -= 1
        return years if years >= 0 else None

    def at(self, t: Time, /) -> LocalDateTime:
        """Combine a date with a time to create a datetime

        Example
        -------
        >>> d = Date(2021, 1, 2)
        >>> d.at(Time(12, 30))
        LocalDateTime(2021-01-02 12:30:00)

        You can use methods like :meth:`~LocalDateTime.assume_utc`
        or :meth:`~LocalDateTime.assume_tz` to make the result aware.
        """
        return LocalDateTime._from_py_unchecked(
            _datetime.combine(self._py_date, t._py_time), t._nanos
        )

    def py_date(self) -> _date:
        """Convert to a standard library :class:`~datetime.date`"""
        return self._py_date

    @classmethod
    def from_py_date(cls, d: _date, /) -> Date:
        """Create from a :class:`~datetime.date`

        Example
        -------
        >>> Date.from_py_date(date(2021, 1, 2))
        Date(2021-01-02)
        """
        if type(d) is _datetime:
            d = d.date()
        elif type(d) is not _date:
            if not isinstance(d, _date):
                raise TypeError(f"Expected date, got {type(d)!r}")
            # the only subclass-safe way to ensure we have exactly a date
            d = _date(d.year, d.month, d.day)
        return cls._from_py_unchecked(d)

    def format_common_iso(self) -> str:
        """Format as the common ISO 8601 date format ``YYYY-MM-DD``

        Inverse of :meth:`parse_common_iso`.
        """
        return self._py_date.isoformat()

    @classmethod
    def parse_common_iso(cls, s: str, /) -> Date:
        """Create from the common ISO 8601 date format ``YYYY-MM-DD``.
        Does not accept more "exotic" ISO 8601 formats.

        Inverse of :meth:`format_common_iso`

        Example
        -------
        >>> Date.parse_common_iso("2021-01-02")
        Date(2021-01-02)
        """
        if _match_date(s) is None:
            raise ValueError(f"Invalid format: {s!r}")
        try:
            return cls._from_py_unchecked(_date.fromisoformat(s))
        except ValueError:
            raise ValueError(f"Invalid format: {s!r}") from None

    def format(self, fmt: str, /) -> DelayedFormat:
        """Format with a ``strftime``-like format string.
        Directives needing a time or offset raise ``ValueError``
        once the result is rendered.

        Example
        -------
        >>> str(Date(2007, 1, 2).format("%Y %B %d"))
        '2007 January 02'
        """
        return DelayedFormat(Subject(date=self._py_date), compile_format(fmt))

    @classmethod
    def parse_strftime(cls, s: str, /, fmt: str) -> Date:
        """Parse a date with a ``strftime``-like format string.

        Example
        -------
        >>> Date.parse_strftime("2015-09-05", "%Y-%m-%d")
        Date(2015-09-05)
        """
        return cls._from_py_unchecked(parse_format(s, fmt).to_date())

    def replace(self, **kwargs: Any) -> Date:
        """Create a new instance with the given fields replaced

        Example
        -------
        >>> d = Date(2021, 1, 2)
        >>> d.replace(day=4)
        Date(2021-01-04)
        """
        return self._from_py_unchecked(self._py_date.replace(**kwargs))

    __str__ = format_common_iso

    def __repr__(self) -> str:
        return f"Date({self})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Date):
            return NotImplemented
        return self._py_date == other._py_date

    def __hash__(self) -> int:
        return hash(self._py_date)

    def __lt__(self, other: Date) -> bool:
        if not isinstance(other, Date):
            return NotImplemented
        return self._py_date < other._py_date

    def __le__(self, other: Date) -> bool:
        if not isinstance(other, Date):
            return NotImplemented
        return self._py_date <= other._py_date

    def __gt__(self, other: Date) -> bool:
        if not isinstance(other, Date):
            return NotImplemented
        return self._py_date > other._py_date

    def __ge__(self, other: Date) -> bool:
        if not isinstance(other, Date):
            return NotImplemented
        return self._py_date >= other._py_date

    @classmethod
    def _from_py_unchecked(cls, d: _date, /) -> Date:
        self = _object_new(cls)
        self._py_date = d
        return self

    @no_type_check
    def __reduce__(self):
        return _unpkl_date, (pack("<HBB", self.year, self.month, self.day),)


# A separate unpickling function allows us to make backwards-compatible changes
# to the pickling format in the future
@no_type_check
def _unpkl_date(data: bytes) -> Date:
    return Date(*unpack("<HBB", data))


Date.MIN = Date._from_py_unchecked(_date.min)
Date.MAX = Date._from_py_unchecked(_date.max)

_match_date = re.compile(r"\d{4}-\d{2}-\d{2}", re.ASCII).fullmatch


def _check_nanos(second: int, nanosecond: int) -> None:
    if nanosecond < 0 or nanosecond >= LEAP_NANOS_MAX:
        raise ValueError(f"nanosecond out of range: {nanosecond}")
    elif nanosecond >= NS_PER_SEC and second != 59:
        raise ValueError("A leap second is only valid at second 59")


def _format_time(t: _time, nanos: int) -> str:
    # A leap second is shown as second 60
    second = t.second + (nanos >= NS_PER_SEC)
    return (
        f"{t.hour:02}:{t.minute:02}:{second:02}"
        f"{format_fraction(nanos, None)}"
    )


@final
class Time(_ImmutableBase):
    """Time of day without a date component

    The nanosecond field may be in ``[1_000_000_000, 2_000_000_000)``
    at second 59, which represents a positive leap second
    (the clock reading second 60).

    Example
    -------
    >>> t = Time(12, 30, 0)
    Time(12:30:00)
    >>> Time(23, 59, 59, nanosecond=1_500_000_000)
    Time(23:59:60.500)
    """

    __slots__ = ("_py_time", "_nanos")

    MIDNIGHT: ClassVar[Time]
    """The time at midnight"""
    NOON: ClassVar[Time]
    """The time at noon"""
    MAX: ClassVar[Time]
    """The maximum time, just before midnight"""

    def __init__(
        self,
        hour: int = 0,
        minute: int = 0,
        second: int = 0,
        *,
        nanosecond: int = 0,
    ) -> None:
        self._py_time = _time(hour, minute, second)
        _check_nanos(second, nanosecond)
        self._nanos = nanosecond

    @classmethod
    def checked(
        cls,
        hour: int = 0,
        minute: int = 0,
        second: int = 0,
        *,
        nanosecond: int = 0,
    ) -> Time | None:
        """Like the constructor, but returns ``None`` for invalid input"""
        try:
            return cls(hour, minute, second, nanosecond=nanosecond)
        except ValueError:
            return None

    @property
    def hour(self) -> int:
        return self._py_time.hour

    @property
    def minute(self) -> int:
        return self._py_time.minute

    @property
    def second(self) -> int:
        return self._py_time.second

    @property
    def nanosecond(self) -> int:
        return self._nanos

    def subsec_millis(self) -> int:
        """The nanosecond field in milliseconds, truncated.
        For a leap second, this is 1000 or more."""
        return self._nanos // 1_000_000

    def subsec_micros(self) -> int:
        return self._nanos // 1_000

    def subsec_nanos(self) -> int:
        return self._nanos

    def is_leap_second(self) -> bool:
        return self._nanos >= NS_PER_SEC

    def on(self, d: Date, /) -> LocalDateTime:
        """Combine a time with a date to create a datetime

        Example
        -------
        >>> t = Time(12, 30)
        >>> t.on(Date(2021, 1, 2))
        LocalDateTime(2021-01-02 12:30:00)
        """
        return LocalDateTime._from_py_unchecked(
            _datetime.combine(d._py_date, self._py_time),
            self._nanos,
        )

    def py_time(self) -> _time:
        """Convert to a standard library :class:`~datetime.time`.
        A leap second is clamped to the end of second 59."""
        if self._nanos >= NS_PER_SEC:
            return self._py_time.replace(microsecond=999_999)
        return self._py_time.replace(microsecond=self._nanos // 1_000)

    @classmethod
    def from_py_time(cls, t: _time, /) -> Time:
        """Create from a :class:`~datetime.time`

        Example
        -------
        >>> Time.from_py_time(time(12, 30, 0))
        Time(12:30:00)

        `fold` value is ignored.
        """
        if type(t) is _time:
            if t.tzinfo is not None:
                raise ValueError("Time must be naive")
        elif isinstance(t, _time):
            # subclass-safe way to ensure we have exactly a datetime.time
            t = _time(t.hour, t.minute, t.second, t.microsecond)
        else:
            raise TypeError(f"Expected datetime.time, got {type(t)!r}")
        return cls._from_py_unchecked(
            t.replace(microsecond=0), t.microsecond * 1_000
        )

    def format_common_iso(self) -> str:
        """Format as ``HH:MM:SS``, with 3, 6 or 9 fractional digits
        if needed.

        Inverse of :meth:`parse_common_iso`.

        Example
        -------
        >>> Time(12, 30, 0, nanosecond=5_000_000).format_common_iso()
        '12:30:00.005'
        """
        return _format_time(self._py_time, self._nanos)

    @classmethod
    def parse_common_iso(cls, s: str, /) -> Time:
        """Create from the format ``HH:MM:SS[.fff]``.
        Second 60 is read as a leap second.

        Inverse of :meth:`format_common_iso`

        Example
        -------
        >>> Time.parse_common_iso("12:30:00")
        Time(12:30:00)
        """
        if (match := _match_time(s)) is None:
            raise ValueError(f"Invalid format: {s!r}")
        hours, minutes, secs, frac = match.groups()
        nanos = int(frac.ljust(9, "0")) if frac else 0
        second = int(secs)
        if second == 60:
            second, nanos = 59, nanos + NS_PER_SEC
        try:
            return cls(int(hours), int(minutes), second, nanosecond=nanos)
        except ValueError:
            raise ValueError(f"Invalid format: {s!r}") from None

    def format(self, fmt: str, /) -> DelayedFormat:
        """Format with a ``strftime``-like format string

        Example
        -------
        >>> str(Time(23, 56, 4).format("%H:%M:%S"))
        '23:56:04'
        """
        return DelayedFormat(
            Subject(time=self._parts()), compile_format(fmt)
        )

    @classmethod
    def parse_strftime(cls, s: str, /, fmt: str) -> Time:
        """Parse a time with a ``strftime``-like format string.

        Example
        -------
        >>> Time.parse_strftime("23:56:04", "%H:%M:%S")
        Time(23:56:04)
        """
        hour, minute, second, nanos = parse_format(s, fmt).to_time()
        return cls._from_py_unchecked(_time(hour, minute, second), nanos)

    def replace(self, **kwargs: Any) -> Time:
        """Create a new instance with the given fields replaced

        Example
        -------
        >>> t = Time(12, 30, 0)
        >>> t.replace(minute=3, nanosecond=4_000)
        Time(12:03:00.000004)
        """
        if not _no_tzinfo_fold_or_ms(kwargs):
            raise TypeError(
                "tzinfo, fold, and microsecond are not allowed arguments"
            )
        nanos = kwargs.pop("nanosecond", self._nanos)
        py_time = self._py_time.replace(**kwargs)
        _check_nanos(py_time.second, nanos)
        return self._from_py_unchecked(py_time, nanos)

    def _parts(self) -> tuple[int, int, int, int]:
        return (
            self._py_time.hour,
            self._py_time.minute,
            self._py_time.second,
            self._nanos,
        )

    __str__ = format_common_iso

    def __repr__(self) -> str:
        return f"Time({self})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Time):
            return NotImplemented
        return (self._py_time, self._nanos) == (other._py_time, other._nanos)

    def __hash__(self) -> int:
        return hash((self._py_time, self._nanos))

    def __lt__(self, other: Time) -> bool:
        if not isinstance(other, Time):
            return NotImplemented
        return (self._py_time, self._nanos) < (other._py_time, other._nanos)

    def __le__(self, other: Time) -> bool:
        if not isinstance(other, Time):
            return NotImplemented
        return (self._py_time, self._nanos) <= (other._py_time, other._nanos)

    def __gt__(self, other: Time) -> bool:
        if not isinstance(other, Time):
            return NotImplemented
        return (self._py_time, self._nanos) > (other._py_time, other._nanos)

    def __ge__(self, other: Time) -> bool:
        if not isinstance(other, Time):
            return NotImplemented
        return (self._py_time, self._nanos) >= (other._py_time, other._nanos)

    @classmethod
    def _from_py_unchecked(cls, t: _time, nanos: int, /) -> Time:
        assert not t.microsecond
        self = _object_new(cls)
        self._py_time = t
        self._nanos = nanos
        return self

    @no_type_check
    def __reduce__(self):
        return _unpkl_time, (pack("<BBBI", *self._parts()),)


@no_type_check
def _unpkl_time(data: bytes) -> Time:
    h, m, s, ns = unpack("<BBBI", data)
    return Time._from_py_unchecked(_time(h, m, s), ns)


Time.MIDNIGHT = Time()
Time.NOON = Time(12)
Time.MAX = Time(23, 59, 59, nanosecond=999_999_999)

_match_time = re.compile(
    r"(\d{2}):(\d{2}):(\d{2})(?:\.(\d{1,9}))?", re.ASCII
).fullmatch


@final
class Duration(_ImmutableBase):
    """An exact, signed amount of time with nanosecond precision

    The inputs are normalized, so 90 minutes becomes 1 hour and 30 minutes,
    for example. Durations are limited to about 292 million years
    (``2**63 - 1`` milliseconds) in either direction: exceeding this
    raises :class:`OverflowError`.

    Examples
    --------
    >>> d = Duration(hours=1, minutes=30)
    Duration(01:30:00)
    >>> d.in_minutes()
    90.0

    Note
    ----
    A shorter way to instantiate a duration is to use the helper functions
    :func:`~civiltime.hours`, :func:`~civiltime.minutes`, etc.
    """

    __slots__ = ("_total_ns",)

    ZERO: ClassVar[Duration]
    """A duration of zero"""
    MAX: ClassVar[Duration]
    """The maximum possible duration"""
    MIN: ClassVar[Duration]
    """The minimum possible duration"""

    def __init__(
        self,
        *,
        weeks: float = 0,
        days: float = 0,
        hours: float = 0,
        minutes: float = 0,
        seconds: float = 0,
        milliseconds: float = 0,
        microseconds: float = 0,
        nanoseconds: int = 0,
    ) -> None:
        assert type(nanoseconds) is int  # catch this common mistake
        ns = self._total_ns = (
            # Cast individual components to int to avoid floating point errors
            int(weeks * 604_800_000_000_000)
            + int(days * 86_400_000_000_000)
            + int(hours * 3_600_000_000_000)
            + int(minutes * 60_000_000_000)
            + int(seconds * 1_000_000_000)
            + int(milliseconds * 1_000_000)
            + int(microseconds * 1_000)
            + nanoseconds
        )
        if abs(ns) > _MAX_DURATION_NANOS:
            raise OverflowError("Duration out of range")

    @classmethod
    def checked(cls, **kwargs: float) -> Duration | None:
        """Like the constructor, but returns ``None`` when out of range"""
        try:
            return cls(**kwargs)  # type: ignore[arg-type]
        except OverflowError:
            return None

    def in_days_of_24h(self) -> float:
        """The total size in days (of exactly 24 hours each)

        Note
        ----
        Note that this may not be the same as days on the calendar,
        since some days have 23 or 25 hours due to daylight saving time.
        """
        return self._total_ns / 86_400_000_000_000

    def in_hours(self) -> float:
        """The total size in hours

        Example
        -------
        >>> d = Duration(hours=1, minutes=30)
        >>> d.in_hours()
        1.5
        """
        return self._total_ns / 3_600_000_000_000

    def in_minutes(self) -> float:
        return self._total_ns / 60_000_000_000

    def in_seconds(self) -> float:
        return self._total_ns / 1_000_000_000

    def in_milliseconds(self) -> float:
        return self._total_ns / 1_000_000

    def in_microseconds(self) -> float:
        return self._total_ns / 1_000

    def in_nanoseconds(self) -> int:
        """The total size in nanoseconds, as an exact integer"""
        return self._total_ns

    def in_secs_nanos(self) -> tuple[int, int]:
        """Whole seconds and the nanoseconds remaining.
        The nanoseconds are always positive: the sign is in the seconds.

        Example
        -------
        >>> Duration(milliseconds=-1_500).in_secs_nanos()
        (-2, 500000000)
        """
        return divmod(self._total_ns, NS_PER_SEC)

    def in_hrs_mins_secs_nanos(self) -> tuple[int, int, int, int]:
        """Convert to a tuple of (hours, minutes, seconds, nanoseconds)

        Example
        -------
        >>> d = Duration(hours=1, minutes=30, microseconds=5_000_090)
        >>> d.in_hrs_mins_secs_nanos()
        (1, 30, 5, 90_000)
        """
        hours, rem = divmod(abs(self._total_ns), 3_600_000_000_000)
        mins, rem = divmod(rem, 60_000_000_000)
        secs, ns = divmod(rem, 1_000_000_000)
        if self._total_ns < 0:
            return (-hours, -mins, -secs, -ns)
        return (hours, mins, secs, ns)

    def py_timedelta(self) -> _timedelta:
        """Convert to a :class:`~datetime.timedelta`

        Inverse of :meth:`from_py_timedelta`

        Note
        ----
        Nanoseconds are truncated to microseconds.
        If you need more control over rounding, use :meth:`round` first.
        """
        return _timedelta(microseconds=self._total_ns // 1_000)

    @classmethod
    def from_py_timedelta(cls, td: _timedelta, /) -> Duration:
        """Create from a :class:`~datetime.timedelta`

        Inverse of :meth:`py_timedelta`

        Example
        -------
        >>> Duration.from_py_timedelta(timedelta(seconds=5400))
        Duration(01:30:00)
        """
        if type(td) is not _timedelta:
            raise TypeError("Expected datetime.timedelta exactly")
        return cls(
            microseconds=td.microseconds,
            seconds=td.seconds,
            days=td.days,
        )

    def format_common_iso(self) -> str:
        """Format as the *popular interpretation* of the ISO 8601
        duration format, with hours as the largest unit.

        Example
        -------
        >>> Duration(hours=1, minutes=30).format_common_iso()
        'PT1H30M'
        """
        hrs, mins, secs, ns = abs(self).in_hrs_mins_secs_nanos()
        seconds = (
            f"{secs}.{ns:09}".rstrip("0") if ns else str(secs)
        )
        return f"{(self._total_ns < 0) * '-'}PT" + (
            (
                f"{hrs}H" * bool(hrs)
                + f"{mins}M" * bool(mins)
                + f"{seconds}S" * bool(secs or ns)
            )
            or "0S"
        )

    def round(
        self,
        unit: Literal[
            "hour", "minute", "second", "millisecond", "microsecond", "nanosecond"
        ] = "second",
    ) -> Duration:
        """Round to a whole number of the given unit, half to even

        Example
        -------
        >>> Duration(seconds=90.5).round("minute")
        Duration(00:02:00)
        """
        try:
            increment = _UNIT_NANOS[unit]
        except KeyError:
            raise ValueError(f"Invalid unit: {unit!r}") from None
        quotient, remainder = divmod(self._total_ns, increment)
        if remainder * 2 > increment or (
            remainder * 2 == increment and quotient % 2
        ):
            quotient += 1
        return self._from_nanos_checked(quotient * increment)

    def checked_add(self, other: Duration, /) -> Duration | None:
        """Add, or ``None`` if the result is out of range"""
        try:
            return self + other
        except OverflowError:
            return None

    def checked_sub(self, other: Duration, /) -> Duration | None:
        """Subtract, or ``None`` if the result is out of range"""
        try:
            return self - other
        except OverflowError:
            return None

    def __add__(self, other: Duration) -> Duration:
        """Add two durations together

        Example
        -------
        >>> d = Duration(hours=1, minutes=30)
        >>> d + Duration(minutes=30)
        Duration(02:00:00)
        """
        if not isinstance(other, Duration):
            return NotImplemented
        return self._from_nanos_checked(self._total_ns + other._total_ns)

    def __sub__(self, other: Duration) -> Duration:
        if not isinstance(other, Duration):
            return NotImplemented
        return self._from_nanos_checked(self._total_ns - other._total_ns)

    def __mul__(self, other: int) -> Duration:
        """Multiply by a whole number

        Example
        -------
        >>> d = Duration(hours=1, minutes=30)
        >>> d * 2
        Duration(03:00:00)
        """
        if not isinstance(other, int):
            return NotImplemented
        return self._from_nanos_checked(self._total_ns * other)

    def __rmul__(self, other: int) -> Duration:
        return self * other

    def __neg__(self) -> Duration:
        return self._from_nanos_unchecked(-self._total_ns)

    def __pos__(self) -> Duration:
        return self

    def __abs__(self) -> Duration:
        return self._from_nanos_unchecked(abs(self._total_ns))

    def __bool__(self) -> bool:
        """True if the value is non-zero

        Example
        -------
        >>> bool(Duration())
        False
        """
        return bool(self._total_ns)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Duration):
            return NotImplemented
        return self._total_ns == other._total_ns

    def __hash__(self) -> int:
        return hash(self._total_ns)

    def __lt__(self, other: Duration) -> bool:
        if not isinstance(other, Duration):
            return NotImplemented
        return self._total_ns < other._total_ns

    def __le__(self, other: Duration) -> bool:
        if not isinstance(other, Duration):
            return NotImplemented
        return self._total_ns <= other._total_ns

    def __gt__(self, other: Duration) -> bool:
        if not isinstance(other, Duration):
            return NotImplemented
        return self._total_ns > other._total_ns

    def __ge__(self, other: Duration) -> bool:
        if not isinstance(other, Duration):
            return NotImplemented
        return self._total_ns >= other._total_ns

    __str__ = format_common_iso

    def __repr__(self) -> str:
        hrs, mins, secs, ns = abs(self).in_hrs_mins_secs_nanos()
        return (
            f"Duration({'-'*(self._total_ns < 0)}{hrs:02}:{mins:02}:{secs:02}"
            + f".{ns:0>9}".rstrip("0") * bool(ns)
            + ")"
        )

    @no_type_check
    def __reduce__(self):
        return _unpkl_duration, (pack("<qI", *self.in_secs_nanos()),)

    @classmethod
    def _from_nanos_unchecked(cls, ns: int) -> Duration:
        new = _object_new(cls)
        new._total_ns = ns
        return new

    @classmethod
    def _from_nanos_checked(cls, ns: int) -> Duration:
        if abs(ns) > _MAX_DURATION_NANOS:
            raise OverflowError("Duration out of range")
        return cls._from_nanos_unchecked(ns)


@no_type_check
def _unpkl_duration(data: bytes) -> Duration:
    s, ns = unpack("<qI", data)
    return Duration._from_nanos_unchecked(s * NS_PER_SEC + ns)


Duration.ZERO = Duration()
Duration.MAX = Duration._from_nanos_unchecked(_MAX_DURATION_NANOS)
Duration.MIN = Duration._from_nanos_unchecked(-_MAX_DURATION_NANOS)

_UNIT_NANOS = {
    "hour": 3_600_000_000_000,
    "minute": 60_000_000_000,
    "second": 1_000_000_000,
    "millisecond": 1_000_000,
    "microsecond": 1_000,
    "nanosecond": 1,
}


def weeks(i: int, /) -> Duration:
    """Create a :class:`Duration` with the given number of weeks.
    ``weeks(1) == Duration(weeks=1)``
    """
    return Duration(weeks=i)


def days(i: int, /) -> Duration:
    """Create a :class:`Duration` with the given number of days
    (of exactly 24 hours). ``days(1) == Duration(days=1)``
    """
    return Duration(days=i)


def hours(i: float, /) -> Duration:
    """Create a :class:`Duration` with the given number of hours.
    ``hours(1) == Duration(hours=1)``
    """
    return Duration(hours=i)


def minutes(i: float, /) -> Duration:
    """Create a :class:`Duration` with the given number of minutes.
    ``minutes(1) == Duration(minutes=1)``
    """
    return Duration(minutes=i)


def seconds(i: float, /) -> Duration:
    """Create a :class:`Duration` with the given number of seconds.
    ``seconds(1) == Duration(seconds=1)``
    """
    return Duration(seconds=i)


def milliseconds(i: float, /) -> Duration:
    """Create a :class:`Duration` with the given number of milliseconds.
    ``milliseconds(1) == Duration(milliseconds=1)``
    """
    return Duration(milliseconds=i)


def microseconds(i: float, /) -> Duration:
    """Create a :class:`Duration` with the given number of microseconds.
    ``microseconds(1) == Duration(microseconds=1)``
    """
    return Duration(microseconds=i)


def nanoseconds(i: int, /) -> Duration:
    """Create a :class:`Duration` with the given number of nanoseconds.
    ``nanoseconds(1) == Duration(nanoseconds=1)``
    """
    return Duration(nanoseconds=i)


@final
class LocalDateTime(_ImmutableBase):
    """A date and time without any timezone or offset: a wall clock
    reading. It is *not* a point on the timeline until you attach a
    timezone, using one of the ``assume_*()`` methods.

    Example
    -------
    >>> party_invite = LocalDateTime(2023, 10, 28, hour=22)
    LocalDateTime(2023-10-28 22:00:00)
    >>> party_invite.assume_tz("Europe/Amsterdam")
    Instant(2023-10-28T22:00:00+02:00[Europe/Amsterdam])

    Arithmetic on a leap second (nanoseconds of one billion or more at
    second 59) stays within the leap second as long as the result fits
    in it. Otherwise, the leap second is left, and the rest of the
    duration is applied to the normal timeline.
    """

    __slots__ = ("_py_dt", "_nanos")

    MIN: ClassVar[LocalDateTime]
    """The minimum representable date and time"""
    MAX: ClassVar[LocalDateTime]
    """The maximum representable date and time"""

    def __init__(
        self,
        year: int,
        month: int,
        day: int,
        hour: int = 0,
        minute: int = 0,
        second: int = 0,
        *,
        nanosecond: int = 0,
    ) -> None:
        self._py_dt = _datetime(year, month, day, hour, minute, second)
        _check_nanos(second, nanosecond)
        self._nanos = nanosecond

    @classmethod
    def checked(
        cls,
        year: int,
        month: int,
        day: int,
        hour: int = 0,
        minute: int = 0,
        second: int = 0,
        *,
        nanosecond: int = 0,
    ) -> LocalDateTime | None:
        """Like the constructor, but returns ``None`` for invalid input"""
        try:
            return cls(
                year, month, day, hour, minute, second, nanosecond=nanosecond
            )
        except ValueError:
            return None

    @property
    def year(self) -> int:
        return self._py_dt.year

    @property
    def month(self) -> int:
        return self._py_dt.month

    @property
    def day(self) -> int:
        return self._py_dt.day

    @property
    def hour(self) -> int:
        return self._py_dt.hour

    @property
    def minute(self) -> int:
        return self._py_dt.minute

    @property
    def second(self) -> int:
        return self._py_dt.second

    @property
    def nanosecond(self) -> int:
        return self._nanos

    def date(self) -> Date:
        return Date._from_py_unchecked(self._py_dt.date())

    def time(self) -> Time:
        return Time._from_py_unchecked(self._py_dt.time(), self._nanos)

    def checked_add(self, d: Duration, /) -> LocalDateTime | None:
        """Add a duration, or ``None`` if the result is out of range

        Example
        -------
        >>> LocalDateTime(2014, 5, 6, 7, 8, 9).checked_add(seconds(3661))
        LocalDateTime(2014-05-06 08:09:10)
        >>> LocalDateTime.MAX.checked_add(seconds(1)) is None
        True
        """
        return self._add_nanos(d._total_ns)

    def checked_sub(self, d: Duration, /) -> LocalDateTime | None:
        """Subtract a duration, or ``None`` if the result is out of range"""
        return self._add_nanos(-d._total_ns)

    def signed_duration_since(self, other: LocalDateTime, /) -> Duration:
        """The exact duration from ``other`` to this reading.

        A leap second counts only when it lies between the two readings:
        one second *past* a leap second is two seconds past second 59.

        Example
        -------
        >>> a = LocalDateTime(2015, 6, 30, 23, 59, 59, nanosecond=1_500_000_000)
        >>> a.signed_duration_since(LocalDateTime(2015, 6, 30, 23))
        Duration(01:00:00.5)
        """
        secs = self._secs_of_day() - other._secs_of_day()
        if secs > 0 and other._nanos >= NS_PER_SEC:
            secs += 1
        elif secs < 0 and self._nanos >= NS_PER_SEC:
            secs -= 1
        days = self._py_dt.toordinal() - other._py_dt.toordinal()
        return Duration._from_nanos_unchecked(
            (days * _SECS_PER_DAY + secs) * NS_PER_SEC
            + self._nanos
            - other._nanos
        )

    def __add__(self, d: Duration) -> LocalDateTime:
        """Add a duration. Raises :class:`OverflowError` if
        the result is out of range."""
        if not isinstance(d, Duration):
            return NotImplemented
        result = self._add_nanos(d._total_ns)
        if result is None:
            raise OverflowError("Result out of range")
        return result

    if TYPE_CHECKING:

        from typing import overload

        @overload
        def __sub__(self, other: Duration) -> LocalDateTime: ...

        @overload
        def __sub__(self, other: LocalDateTime) -> Duration: ...

        def __sub__(
            self, other: Duration | LocalDateTime
        ) -> LocalDateTime | Duration: ...

    else:

        def __sub__(self, other):
            """Subtract a duration, or calculate the duration between
            two readings"""
            if isinstance(other, LocalDateTime):
                return self.signed_duration_since(other)
            elif isinstance(other, Duration):
                result = self._add_nanos(-other._total_ns)
                if result is None:
                    raise OverflowError("Result out of range")
                return result
            return NotImplemented

    def assume_utc(self) -> Instant[Utc]:
        """Assume the reading is in UTC

        Example
        -------
        >>> LocalDateTime(2020, 8, 15, hour=23, minute=12).assume_utc()
        Instant(2020-08-15T23:12:00Z)
        """
        return Instant._from_parts(self, self, _UTC_OFFSET, UTC)

    def assume_fixed_offset(
        self, offset: int | Duration | FixedOffset, /
    ) -> Instant[FixedOffset]:
        """Assume the reading is at the given offset from UTC.
        An integer is taken as whole hours.

        Example
        -------
        >>> LocalDateTime(2020, 8, 15, 23, 12).assume_fixed_offset(+2)
        Instant(2020-08-15T23:12:00+02:00)

        Raises :class:`OverflowError` if the UTC reading would be
        out of range.
        """
        tz = _load_offset(offset)
        utc = self._shift_seconds(-tz._secs)
        if utc is None:
            raise OverflowError("Resulting instant out of range")
        return Instant._from_parts(utc, self, tz, tz)

    def assume_tz(
        self,
        tz: str | OffsetProvider,
        /,
        disambiguate: Literal["earlier", "later", "raise"] = "raise",
    ) -> Instant[Any]:
        """Assume the reading is in the given timezone, as an IANA key
        or any offset provider.

        Example
        -------
        >>> d = LocalDateTime(2020, 8, 15, hour=23, minute=12)
        >>> d.assume_tz("Europe/Amsterdam")
        Instant(2020-08-15T23:12:00+02:00[Europe/Amsterdam])
        >>> d.assume_tz(TimeZone("Europe/Amsterdam"), disambiguate="earlier")
        Instant(2020-08-15T23:12:00+02:00[Europe/Amsterdam])

        Important
        ---------
        A reading that is skipped (in a DST gap) always raises
        :class:`SkippedTime`. A repeated reading (in a DST fold) raises
        :class:`RepeatedTime` when ``disambiguate="raise"``; otherwise the
        earlier or later instant is chosen.
        """
        provider = TimeZone(tz) if isinstance(tz, str) else tz
        resolution = provider.resolve_local(self)
        if isinstance(resolution, Ambiguous):
            if disambiguate == "earlier":
                return resolution.earlier
            elif disambiguate == "later":
                return resolution.later
            elif disambiguate != "raise":
                raise ValueError(f"Invalid disambiguate setting: {disambiguate!r}")
        return resolution.unwrap()

    def format_common_iso(self) -> str:
        """Format as ``YYYY-MM-DDTHH:MM:SS``, with fractional digits
        if needed. Inverse of :meth:`parse_common_iso`.

        Example
        -------
        >>> LocalDateTime(2020, 8, 15, hour=23, minute=12).format_common_iso()
        '2020-08-15T23:12:00'
        """
        return self._format_sep("T")

    @classmethod
    def parse_common_iso(cls, s: str, /) -> LocalDateTime:
        """Parse the format ``YYYY-MM-DDTHH:MM:SS[.fff]``

        Example
        -------
        >>> LocalDateTime.parse_common_iso("2020-08-15T23:12:00")
        LocalDateTime(2020-08-15 23:12:00)
        """
        if len(s) < 19 or s[10] not in "Tt" or _match_date(s[:10]) is None:
            raise ValueError(f"Invalid format: {s!r}")
        try:
            d = Date.parse_common_iso(s[:10])
            t = Time.parse_common_iso(s[11:])
        except ValueError:
            raise ValueError(f"Invalid format: {s!r}") from None
        return d.at(t)

    def format(self, fmt: str, /) -> DelayedFormat:
        """Format with a ``strftime``-like format string.
        Offset and timezone directives raise ``ValueError`` once
        the result is rendered.

        Example
        -------
        >>> str(LocalDateTime(2015, 9, 5, 23, 56, 4).format("%Y-%m-%d %H:%M:%S"))
        '2015-09-05 23:56:04'
        """
        return DelayedFormat(self._subject(), compile_format(fmt))

    @classmethod
    def parse_strftime(cls, s: str, /, fmt: str) -> LocalDateTime:
        """Parse a date and time with a ``strftime``-like format string.

        Example
        -------
        >>> LocalDateTime.parse_strftime("2015-09-05 23:56:04", "%Y-%m-%d %H:%M:%S")
        LocalDateTime(2015-09-05 23:56:04)
        """
        return cls._from_parsed(parse_format(s, fmt))

    def replace(self, **kwargs: Any) -> LocalDateTime:
        """Construct a new instance with the given fields replaced.

        Example
        -------
        >>> d = LocalDateTime(2020, 8, 15, 23, 12)
        >>> d.replace(year=2021)
        LocalDateTime(2021-08-15 23:12:00)
        """
        if not _no_tzinfo_fold_or_ms(kwargs):
            raise TypeError(
                "tzinfo, fold, and microsecond are not allowed arguments"
            )
        nanos = kwargs.pop("nanosecond", self._nanos)
        py_dt = self._py_dt.replace(**kwargs)
        _check_nanos(py_dt.second, nanos)
        return self._from_py_unchecked(py_dt, nanos)

    def py_datetime(self) -> _datetime:
        """Convert to a naive :class:`~datetime.datetime`.
        Nanoseconds are truncated, and a leap second is clamped
        to the end of second 59."""
        if self._nanos >= NS_PER_SEC:
            return self._py_dt.replace(microsecond=999_999)
        return self._py_dt.replace(microsecond=self._nanos // 1_000)

    @classmethod
    def from_py_datetime(cls, d: _datetime, /) -> LocalDateTime:
        """Create from a naive :class:`~datetime.datetime`

        Example
        -------
        >>> LocalDateTime.from_py_datetime(datetime(2020, 8, 15, 23, 12))
        LocalDateTime(2020-08-15 23:12:00)
        """
        if type(d) is not _datetime:
            if not isinstance(d, _datetime):
                raise TypeError(f"Expected datetime, got {type(d)!r}")
            d = _datetime(*d.timetuple()[:6], d.microsecond, d.tzinfo)
        if d.tzinfo is not None:
            raise ValueError(
                "Can only create LocalDateTime from a naive datetime, "
                f"got datetime with tzinfo={d.tzinfo!r}"
            )
        return cls._from_py_unchecked(
            d.replace(microsecond=0, fold=0), d.microsecond * 1_000
        )

    def __str__(self) -> str:
        return self._format_sep("T")

    def __repr__(self) -> str:
        return f"LocalDateTime({self._format_sep(' ')})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LocalDateTime):
            return NotImplemented
        return (self._py_dt, self._nanos) == (other._py_dt, other._nanos)

    def __hash__(self) -> int:
        return hash((self._py_dt, self._nanos))

    def __lt__(self, other: LocalDateTime) -> bool:
        if not isinstance(other, LocalDateTime):
            return NotImplemented
        return (self._py_dt, self._nanos) < (other._py_dt, other._nanos)

    def __le__(self, other: LocalDateTime) -> bool:
        if not isinstance(other, LocalDateTime):
            return NotImplemented
        return (self._py_dt, self._nanos) <= (other._py_dt, other._nanos)

    def __gt__(self, other: LocalDateTime) -> bool:
        if not isinstance(other, LocalDateTime):
            return NotImplemented
        return (self._py_dt, self._nanos) > (other._py_dt, other._nanos)

    def __ge__(self, other: LocalDateTime) -> bool:
        if not isinstance(other, LocalDateTime):
            return NotImplemented
        return (self._py_dt, self._nanos) >= (other._py_dt, other._nanos)

    def _format_sep(self, sep: str) -> str:
        return (
            f"{self._py_dt.date().isoformat()}{sep}"
            f"{_format_time(self._py_dt.time(), self._nanos)}"
        )

    def _secs_of_day(self) -> int:
        dt = self._py_dt
        return dt.hour * 3600 + dt.minute * 60 + dt.second

    def _epoch_secs(self) -> int:
        return (
            self._py_dt.toordinal() - EPOCH_ORDINAL
        ) * _SECS_PER_DAY + self._secs_of_day()

    def _subject(
        self, offset: int | None = None, tz_name: str | None = None
    ) -> Subject:
        dt = self._py_dt
        return Subject(
            date=dt.date(),
            time=(dt.hour, dt.minute, dt.second, self._nanos),
            offset=offset,
            tz_name=tz_name,
        )

    def _add_nanos(self, rhs: int) -> LocalDateTime | None:
        secs, frac = self._epoch_secs(), self._nanos
        if frac >= NS_PER_SEC:
            remaining = LEAP_NANOS_MAX - frac
            if rhs >= remaining:
                # past the end of the leap second
                rhs -= remaining
                secs += 1
                frac = 0
            elif rhs < -frac:
                # before the start of second 59
                rhs += frac
                frac = 0
            else:
                return self._from_py_unchecked(self._py_dt, frac + rhs)
        extra_secs, frac = divmod(frac + rhs, NS_PER_SEC)
        return self._from_epoch(secs + extra_secs, frac)

    def _shift_seconds(self, secs: int) -> LocalDateTime | None:
        """Shift the clock reading by whole seconds, keeping
        the nanosecond field (and any leap second) as-is"""
        if not secs:
            return self
        return self._from_epoch(self._epoch_secs() + secs, self._nanos)

    @classmethod
    def _from_epoch(cls, secs: int, nanos: int) -> LocalDateTime | None:
        days, rem = divmod(secs, _SECS_PER_DAY)
        ordinal = days + EPOCH_ORDINAL
        if not MIN_ORDINAL <= ordinal <= MAX_ORDINAL:
            return None
        hour, rem = divmod(rem, 3600)
        return cls._from_py_unchecked(
            _datetime.combine(
                _date.fromordinal(ordinal), _time(hour, *divmod(rem, 60))
            ),
            nanos,
        )

    @classmethod
    def _from_parsed(cls, parsed: Parsed) -> LocalDateTime:
        d = parsed.to_date()
        hour, minute, second, nanos = parsed.to_time()
        return cls._from_py_unchecked(
            _datetime.combine(d, _time(hour, minute, second)), nanos
        )

    @classmethod
    def _from_fields(cls, fields: Fields) -> tuple[LocalDateTime, int]:
        """The local reading and offset of parsed RFC fields"""
        year, month, day, hour, minute, second, nanos, offset = fields
        return (
            cls._from_py_unchecked(
                _datetime(year, month, day, hour, minute, second), nanos
            ),
            offset,
        )

    @classmethod
    def _from_py_unchecked(cls, d: _datetime, nanos: int, /) -> LocalDateTime:
        assert not d.microsecond
        assert d.tzinfo is None
        self = _object_new(cls)
        self._py_dt = d
        self._nanos = nanos
        return self

    @no_type_check
    def __reduce__(self):
        return _unpkl_local, (self._pack(),)

    def _pack(self) -> bytes:
        dt = self._py_dt
        return pack(
            "<HBBBBBI",
            dt.year,
            dt.month,
            dt.day,
            dt.hour,
            dt.minute,
            dt.second,
            self._nanos,
        )


@no_type_check
def _unpkl_local(data: bytes) -> LocalDateTime:
    *args, nanos = unpack("<HBBBBBI", data)
    return LocalDateTime._from_py_unchecked(_datetime(*args), nanos)


LocalDateTime.MIN = LocalDateTime._from_py_unchecked(_datetime.min, 0)
LocalDateTime.MAX = LocalDateTime._from_py_unchecked(
    _datetime.max.replace(microsecond=0), 999_999_999
)


def _no_tzinfo_fold_or_ms(kwargs: dict[str, Any]) -> bool:
    return "tzinfo" not in kwargs and "fold" not in kwargs and (
        "microsecond" not in kwargs
    )


_Tz = TypeVar("_Tz", bound="OffsetProvider")
_Tz2 = TypeVar("_Tz2", bound="OffsetProvider")


class OffsetProvider(ABC):
    """Something that knows the offset from UTC for any instant:
    a fixed offset, UTC itself, or a timezone with DST rules.

    Subclasses implement :meth:`offset_for_utc` and
    :meth:`offset_for_local`, and should be immutable, comparable,
    hashable, and have a ``str()`` representation.
    The other methods are derived from these.

    Example
    -------
    >>> class Wobbly(OffsetProvider):
    ...     def offset_for_utc(self, utc):
    ...         return FixedOffset(3600 * (utc.hour % 2))
    ...     def offset_for_local(self, local):
    ...         ...
    """

    __slots__ = ()

    @abstractmethod
    def offset_for_utc(self, utc: LocalDateTime, /) -> FixedOffset:
        """The offset in effect at the given UTC reading.
        There is always exactly one."""

    @abstractmethod
    def offset_for_local(
        self, local: LocalDateTime, /
    ) -> Resolution[FixedOffset]:
        """The offset(s) for which the given local reading exists:
        none in a gap, two in a fold (ordered earliest instant first)."""

    def resolve_local(self, local: LocalDateTime, /) -> Resolution[Instant[Any]]:
        """The instant(s) with the given local reading in this timezone.

        Candidates whose UTC reading is out of range are left out.

        Example
        -------
        >>> tz = TimeZone("Europe/Amsterdam")
        >>> tz.resolve_local(LocalDateTime(2023, 10, 29, 2, 30))
        Ambiguous(Instant(2023-10-29T02:30:00+02:00[Europe/Amsterdam]),
                  Instant(2023-10-29T02:30:00+01:00[Europe/Amsterdam]))
        """
        candidates = []
        for offset in self.offset_for_local(local):
            utc = local._shift_seconds(-offset._secs)
            if utc is not None:
                candidates.append(Instant._from_parts(utc, local, offset, self))
        if len(candidates) == 2:
            return Ambiguous(*candidates)
        elif len(candidates) == 1:
            return Single(candidates[0])
        return Skipped()

    def from_utc(self, utc: LocalDateTime, /) -> Instant[Any]:
        """The instant at the given UTC reading, in this timezone"""
        return Instant.from_utc(utc, self)

    def abbreviation(self, utc: LocalDateTime, /) -> str:
        """The name of the offset at the given instant, as shown by ``%Z``.
        By default, the offset itself (e.g. ``+02:00``)."""
        return str(self.offset_for_utc(utc))

    def parse_strftime(self, s: str, /, fmt: str) -> Instant[Any]:
        """Parse an instant in this timezone with a ``strftime``-like
        format string.

        If the text contains an offset, it must be valid for the local
        time in this timezone. Otherwise, the local time must
        correspond to exactly one instant.

        Example
        -------
        >>> UTC.parse_strftime("Fri, 09 Aug 2013 23:54:35 GMT", "%a, %d %b %Y %H:%M:%S GMT")
        Instant(2013-08-09T23:54:35Z)
        """
        parsed = parse_format(s, fmt)
        local = LocalDateTime._from_parsed(parsed)
        resolution = self.resolve_local(local)
        if parsed.offset is not None:
            for candidate in resolution:
                if candidate._offset._secs == parsed.offset:
                    return candidate
            raise ParseError(ParseErrorKind.IMPOSSIBLE, s)
        elif isinstance(resolution, Single):
            return resolution.value
        raise ParseError(
            (
                ParseErrorKind.IMPOSSIBLE
                if isinstance(resolution, Skipped)
                else ParseErrorKind.NOT_ENOUGH
            ),
            s,
        )


@final
class FixedOffset(_ImmutableBase, OffsetProvider):
    """A constant offset from UTC in seconds, strictly less than
    24 hours in either direction. Positive offsets are east of UTC.

    Example
    -------
    >>> FixedOffset(9 * 3600)
    FixedOffset(+09:00)
    >>> FixedOffset.west(5 * 3600)
    FixedOffset(-05:00)
    """

    __slots__ = ("_secs",)

    def __init__(self, seconds: int = 0) -> None:
        if not isinstance(seconds, int):
            raise TypeError("offset must be an integer number of seconds")
        if not -MAX_OFFSET_SECS < seconds < MAX_OFFSET_SECS:
            raise ValueError(f"offset out of range: {seconds}")
        self._secs = seconds

    @classmethod
    def east(cls, seconds: int, /) -> FixedOffset:
        """An offset of the given seconds east of UTC (ahead of it)"""
        return cls(seconds)

    @classmethod
    def west(cls, seconds: int, /) -> FixedOffset:
        """An offset of the given seconds west of UTC (behind it)"""
        return cls(-seconds)

    @classmethod
    def checked(cls, seconds: int, /) -> FixedOffset | None:
        """Like the constructor, but returns ``None`` when out of range"""
        if -MAX_OFFSET_SECS < seconds < MAX_OFFSET_SECS:
            return cls._from_secs_unchecked(seconds)
        return None

    @property
    def total_seconds(self) -> int:
        """Seconds east of UTC, i.e. local minus UTC"""
        return self._secs

    def duration(self) -> Duration:
        return Duration(seconds=self._secs)

    def offset_for_utc(self, utc: LocalDateTime, /) -> FixedOffset:
        return self

    def offset_for_local(
        self, local: LocalDateTime, /
    ) -> Resolution[FixedOffset]:
        return Single(self)

    def __str__(self) -> str:
        return format_offset(self._secs, colon=True)

    def __repr__(self) -> str:
        return f"FixedOffset({self})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FixedOffset):
            return NotImplemented
        return self._secs == other._secs

    def __hash__(self) -> int:
        return hash((FixedOffset, self._secs))

    def __lt__(self, other: FixedOffset) -> bool:
        if not isinstance(other, FixedOffset):
            return NotImplemented
        return self._secs < other._secs

    def __le__(self, other: FixedOffset) -> bool:
        if not isinstance(other, FixedOffset):
            return NotImplemented
        return self._secs <= other._secs

    def __gt__(self, other: FixedOffset) -> bool:
        if not isinstance(other, FixedOffset):
            return NotImplemented
        return self._secs > other._secs

    def __ge__(self, other: FixedOffset) -> bool:
        if not isinstance(other, FixedOffset):
            return NotImplemented
        return self._secs >= other._secs

    @classmethod
    def _from_secs_unchecked(cls, secs: int) -> FixedOffset:
        self = _object_new(cls)
        self._secs = secs
        return self

    @no_type_check
    def __reduce__(self):
        return _unpkl_offset, (self._secs,)


@no_type_check
def _unpkl_offset(secs: int) -> FixedOffset:
    return FixedOffset(secs)


_UTC_OFFSET = FixedOffset._from_secs_unchecked(0)


def _load_offset(offset: int | Duration | FixedOffset, /) -> FixedOffset:
    if isinstance(offset, FixedOffset):
        return offset
    elif isinstance(offset, int):
        return FixedOffset(offset * 3600)
    elif isinstance(offset, Duration):
        secs, nanos = offset.in_secs_nanos()
        if nanos:
            raise ValueError("offset must be a whole number of seconds")
        return FixedOffset(secs)
    raise TypeError(
        "offset must be an int (hours), Duration, or FixedOffset, "
        f"got {type(offset)!r}"
    )


@final
class Utc(_ImmutableBase, OffsetProvider):
    """The UTC timezone: always a zero offset. Use the :data:`UTC` instance.

    Its instants display as ``UTC`` instead of ``+00:00``.
    """

    __slots__ = ()

    def offset_for_utc(self, utc: LocalDateTime, /) -> FixedOffset:
        return _UTC_OFFSET

    def offset_for_local(
        self, local: LocalDateTime, /
    ) -> Resolution[FixedOffset]:
        return Single(_UTC_OFFSET)

    def abbreviation(self, utc: LocalDateTime, /) -> str:
        return "UTC"

    def __str__(self) -> str:
        return "UTC"

    def __repr__(self) -> str:
        return "UTC"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Utc):
            return NotImplemented
        return True

    def __hash__(self) -> int:
        return hash(Utc)

    @no_type_check
    def __reduce__(self):
        return _unpkl_utc, ()


@no_type_check
def _unpkl_utc() -> Utc:
    return UTC


UTC = Utc()
"""The UTC timezone"""


@final
class TimeZone(_ImmutableBase, OffsetProvider):
    """A timezone with rules for its offsets over time: usually from the
    IANA database, such as ``Europe/Amsterdam``.

    The timezone data is searched for in :data:`~civiltime.TZPATH`
    first, and in the ``tzdata`` package second.

    Example
    -------
    >>> tz = TimeZone("Europe/Amsterdam")
    TimeZone('Europe/Amsterdam')
    >>> tz.offset_for_utc(LocalDateTime(2023, 7, 1))
    FixedOffset(+02:00)
    >>> TimeZone.from_posix("CET-1CEST,M3.5.0,M10.5.0/3")
    TimeZone.from_posix('CET-1CEST,M3.5.0,M10.5.0/3')

    Raises :class:`TimeZoneNotFoundError` for unknown keys.
    """

    __slots__ = ("_rules", "_posix")

    def __init__(self, key: str, /) -> None:
        self._rules = get_rules(key)
        self._posix: Optional[str] = None

    @classmethod
    def from_posix(cls, s: str, /) -> TimeZone:
        """A timezone from a POSIX TZ string, e.g. ``EST5EDT,M3.2.0,M11.1.0``"""
        return cls._from_rules(TzRules.parse_posix(s), s)

    @classmethod
    def from_tzif(cls, data: bytes, /, key: str | None = None) -> TimeZone:
        """A timezone from the contents of a TZif file"""
        return cls._from_rules(TzRules.parse_tzif(data, key))

    @classmethod
    def system(cls) -> TimeZone:
        """The system timezone, as configured by the ``TZ`` environment
        variable or the platform. The result is cached: use
        :func:`~civiltime.reset_system_tz` after changing the system
        timezone."""
        return cls._from_rules(get_system_rules())

    @property
    def key(self) -> str | None:
        """The IANA key, if known"""
        return self._rules.key

    def offset_for_utc(self, utc: LocalDateTime, /) -> FixedOffset:
        return self._check_offset(self._rules.offset_for_utc(utc._epoch_secs()))

    def offset_for_local(
        self, local: LocalDateTime, /
    ) -> Resolution[FixedOffset]:
        return self._rules.resolve_local(local._epoch_secs()).map(
            self._check_offset
        )

    def abbreviation(self, utc: LocalDateTime, /) -> str:
        abbr = self._rules.abbreviation_for_utc(utc._epoch_secs())
        return abbr or str(self.offset_for_utc(utc))

    def _check_offset(self, secs: int) -> FixedOffset:
        offset = FixedOffset.checked(secs)
        if offset is None:
            raise ProviderError(f"Offset of {secs}s out of range in {self}")
        return offset

    def __str__(self) -> str:
        if self._rules.key is not None:
            return self._rules.key
        elif self._posix is not None:
            return self._posix
        return "<unnamed>"

    def __repr__(self) -> str:
        if self._rules.key is not None:
            return f"TimeZone({self._rules.key!r})"
        elif self._posix is not None:
            return f"TimeZone.from_posix({self._posix!r})"
        return "TimeZone(<unnamed>)"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TimeZone):
            return NotImplemented
        return self._rules == other._rules

    def __hash__(self) -> int:
        return hash(self._rules)

    @classmethod
    def _from_rules(cls, rules: TzRules, posix: str | None = None) -> TimeZone:
        self = _object_new(cls)
        self._rules = rules
        self._posix = posix
        return self

    @no_type_check
    def __reduce__(self):
        if self._rules.key is not None:
            return _unpkl_tz, (self._rules.key, None)
        elif self._posix is not None:
            return _unpkl_tz, (None, self._posix)
        raise TypeError("Cannot pickle a TimeZone without a key")


@no_type_check
def _unpkl_tz(key: str | None, posix: str | None) -> TimeZone:
    if key is not None:
        return TimeZone(key)
    return TimeZone.from_posix(posix)


def _tz_suffix(tz: OffsetProvider, offset: FixedOffset) -> str:
    if isinstance(tz, TimeZone):
        return f"{offset}[{tz}]"
    elif isinstance(tz, Utc):
        return "Z"
    return str(offset)


@final
class Instant(_ImmutableBase, Generic[_Tz]):
    """A point on the timeline, together with the timezone (offset
    provider) used to show it as a local date and time.

    Equality, ordering and hashing are based on the point in time only:
    the same instant in different timezones compares equal.
    Use :meth:`exact_eq` to also compare the timezone.

    Example
    -------
    >>> from civiltime import Instant, FixedOffset, LocalDateTime
    >>> kst = FixedOffset(9 * 3600)
    >>> i = LocalDateTime(2014, 5, 6, 7, 8, 9).assume_fixed_offset(kst)
    Instant(2014-05-06T07:08:09+09:00)
    >>> i.format_rfc3339()
    '2014-05-06T07:08:09+09:00'
    >>> i + seconds(3661)
    Instant(2014-05-06T08:09:10+09:00)
    >>> i.with_timezone(UTC)
    Instant(2014-05-05T22:08:09Z)
    """

    __slots__ = ("_utc", "_local", "_offset", "_tz")

    MIN: ClassVar[Instant[Utc]]
    """The minimum representable instant, in UTC"""
    MAX: ClassVar[Instant[Utc]]
    """The maximum representable instant, in UTC"""

    _utc: LocalDateTime
    _local: LocalDateTime
    _offset: FixedOffset
    _tz: _Tz

    def __init__(self) -> None:
        raise TypeError(
            "Instant instances cannot be created through the constructor. "
            "Use `Instant.from_utc`, `Instant.now`, "
            "or the `assume_*` methods of LocalDateTime instead."
        )

    @classmethod
    def from_utc(cls, utc: LocalDateTime, tz: _Tz2 = UTC, /) -> Instant[_Tz2]:  # type: ignore[assignment]
        """The instant at the given UTC reading, shown in the given timezone

        Raises :class:`OverflowError` if the local reading would be out
        of range.
        """
        offset = tz.offset_for_utc(utc)
        if not isinstance(offset, FixedOffset):
            raise ProviderError(f"{tz!r} gave an invalid offset: {offset!r}")
        local = utc._shift_seconds(offset._secs)
        if local is None:
            raise OverflowError("Local date and time out of range")
        return cls._from_parts(utc, local, offset, tz)

    @classmethod
    def now(cls, tz: _Tz2 = UTC, /) -> Instant[_Tz2]:  # type: ignore[assignment]
        """The current time, according to the system clock"""
        return cls.from_timestamp_nanos(time_ns(), tz=tz)

    @classmethod
    def from_timestamp(
        cls, secs: int, nanos: int = 0, /, *, tz: _Tz2 = UTC  # type: ignore[assignment]
    ) -> Instant[_Tz2]:
        """The instant at the given UNIX timestamp in seconds, with
        additional nanoseconds. Nanoseconds from one billion on
        represent a leap second, which is only valid at second 59.

        The inverse of :meth:`timestamp` and :meth:`timestamp_subsec_nanos`.

        Example
        -------
        >>> Instant.from_timestamp(1_431_648_000, 0)
        Instant(2015-05-15T00:00:00Z)
        """
        if not isinstance(secs, int) or not isinstance(nanos, int):
            raise TypeError("timestamp must be an integer")
        if not 0 <= nanos < LEAP_NANOS_MAX:
            raise ValueError(f"nanoseconds out of range: {nanos}")
        elif nanos >= NS_PER_SEC and secs % 60 != 59:
            raise ValueError("A leap second is only valid at second 59")
        utc = LocalDateTime._from_epoch(secs, nanos)
        if utc is None:
            raise ValueError("timestamp out of range")
        return cls.from_utc(utc, tz)

    @classmethod
    def from_timestamp_millis(
        cls, millis: int, /, *, tz: _Tz2 = UTC  # type: ignore[assignment]
    ) -> Instant[_Tz2]:
        """The instant at the given UNIX timestamp in milliseconds"""
        if not isinstance(millis, int):
            raise TypeError("method requires an integer")
        secs, millis = divmod(millis, 1_000)
        return cls.from_timestamp(secs, millis * 1_000_000, tz=tz)

    @classmethod
    def from_timestamp_nanos(
        cls, nanos: int, /, *, tz: _Tz2 = UTC  # type: ignore[assignment]
    ) -> Instant[_Tz2]:
        """The instant at the given UNIX timestamp in nanoseconds"""
        if not isinstance(nanos, int):
            raise TypeError("method requires an integer")
        return cls.from_timestamp(*divmod(nanos, NS_PER_SEC), tz=tz)

    @classmethod
    def from_py_datetime(cls, d: _datetime, /) -> Instant[FixedOffset]:
        """Create from an aware standard library ``datetime``.
        Its UTC offset becomes a :class:`FixedOffset`.

        The inverse of the ``py_datetime()`` method.
        """
        if d.tzinfo is None:
            raise ValueError(
                "Cannot create Instant from a naive datetime. "
                "Use LocalDateTime.from_py_datetime() for this."
            )
        utcoffset = d.utcoffset()
        if utcoffset is None:
            raise ValueError(
                "Cannot create from datetime with utcoffset() None"
            )
        elif utcoffset.microseconds:
            raise ValueError("Sub-second offsets are not supported")
        local = LocalDateTime.from_py_datetime(d.replace(tzinfo=None))
        return local.assume_fixed_offset(
            FixedOffset(int(utcoffset.total_seconds()))
        )

    @property
    def tz(self) -> _Tz:
        """The timezone (offset provider) of this instant"""
        return self._tz

    @property
    def offset(self) -> FixedOffset:
        """The offset from UTC of the local reading"""
        return self._offset

    @property
    def year(self) -> int:
        return self._local._py_dt.year

    @property
    def month(self) -> int:
        return self._local._py_dt.month

    @property
    def day_of_month(self) -> int:
        return self._local._py_dt.day

    @property
    def hour(self) -> int:
        return self._local._py_dt.hour

    @property
    def minute(self) -> int:
        return self._local._py_dt.minute

    @property
    def second(self) -> int:
        return self._local._py_dt.second

    @property
    def nanosecond(self) -> int:
        return self._local._nanos

    def utc(self) -> LocalDateTime:
        """The UTC date and time of this instant"""
        return self._utc

    def local(self) -> LocalDateTime:
        """The date and time on the wall clock in this instant's timezone"""
        return self._local

    def date(self) -> Date:
        return self._local.date()

    def time(self) -> Time:
        return self._local.time()

    def day(self) -> Day[_Tz]:
        """The (local) day this instant is in"""
        return Day(self._local.date(), self._tz)

    def with_timezone(self, tz: _Tz2, /) -> Instant[_Tz2]:
        """The same instant in another timezone

        Example
        -------
        >>> i = LocalDateTime(2014, 5, 6, 7, 8, 9).assume_utc()
        >>> i.with_timezone(FixedOffset.west(4 * 3600))
        Instant(2014-05-06T03:08:09-04:00)
        """
        return Instant.from_utc(self._utc, tz)

    def exact_eq(self, other: Instant[Any], /) -> bool:
        """Compare the instant, its offset, *and* its timezone.
        Unlike ``==``, two instants in different timezones are
        not exactly equal.

        Example
        -------
        >>> a = LocalDateTime(2020, 8, 15, 23).assume_utc()
        >>> b = a.with_timezone(FixedOffset(0))
        >>> a == b
        True
        >>> a.exact_eq(b)
        False
        """
        return (
            self._utc == other._utc
            and self._offset == other._offset
            and type(self._tz) is type(other._tz)
            and self._tz == other._tz
        )

    def checked_add(self, d: Duration, /) -> Instant[_Tz] | None:
        """Add a duration, or ``None`` if the result is out of range"""
        utc = self._utc._add_nanos(d._total_ns)
        return None if utc is None else self._with_utc(utc)

    def checked_sub(self, d: Duration, /) -> Instant[_Tz] | None:
        """Subtract a duration, or ``None`` if the result is out of range"""
        utc = self._utc._add_nanos(-d._total_ns)
        return None if utc is None else self._with_utc(utc)

    def signed_duration_since(self, other: Instant[Any], /) -> Duration:
        """The exact duration from another instant to this one,
        regardless of their timezones

        Example
        -------
        >>> a = LocalDateTime(2014, 5, 6, 7, 8, 9).assume_utc()
        >>> b = LocalDateTime(2014, 5, 6, 10, 11, 12).assume_fixed_offset(-4)
        >>> a.signed_duration_since(b)
        Duration(-07:03:03)
        """
        return self._utc.signed_duration_since(other._utc)

    def __add__(self, d: Duration) -> Instant[_Tz]:
        """Add a duration. Raises :class:`OverflowError` if
        the result is out of range."""
        if not isinstance(d, Duration):
            return NotImplemented
        result = self.checked_add(d)
        if result is None:
            raise OverflowError("Result out of range")
        return result

    if TYPE_CHECKING:

        from typing import overload

        @overload
        def __sub__(self, other: Duration) -> Instant[_Tz]: ...

        @overload
        def __sub__(self, other: Instant[Any]) -> Duration: ...

        def __sub__(
            self, other: Duration | Instant[Any]
        ) -> Instant[_Tz] | Duration: ...

    else:

        def __sub__(self, other):
            """Subtract a duration, or calculate the duration between
            two instants"""
            if isinstance(other, Instant):
                return self.signed_duration_since(other)
            elif isinstance(other, Duration):
                result = self.checked_sub(other)
                if result is None:
                    raise OverflowError("Result out of range")
                return result
            return NotImplemented

    def timestamp(self) -> int:
        """The UNIX timestamp in whole seconds. A leap second
        counts as second 59.

        Example
        -------
        >>> LocalDateTime(1970, 1, 1, 0, 0, 1).assume_utc().timestamp()
        1
        """
        return self._utc._epoch_secs()

    def timestamp_millis(self) -> int:
        return self._utc._epoch_secs() * 1_000 + self._utc._nanos // 1_000_000

    def timestamp_nanos(self) -> int:
        return self._utc._epoch_secs() * NS_PER_SEC + self._utc._nanos

    def timestamp_subsec_millis(self) -> int:
        """The milliseconds since the last whole second.
        During a leap second, this is 1000 or more."""
        return self._utc._nanos // 1_000_000

    def timestamp_subsec_micros(self) -> int:
        return self._utc._nanos // 1_000

    def timestamp_subsec_nanos(self) -> int:
        return self._utc._nanos

    def py_datetime(self) -> _datetime:
        """Convert to an aware standard library ``datetime`` with a
        fixed-offset ``tzinfo``.

        Note
        ----
        Nanoseconds are truncated to microseconds. A leap second can't be
        represented: it becomes the start of the following second
        (or :attr:`datetime.datetime.max`, if that is out of range).
        """
        tzinfo = _timezone(_timedelta(seconds=self._offset._secs))
        py_dt, nanos = self._local._py_dt, self._local._nanos
        if nanos >= NS_PER_SEC:
            nanos -= NS_PER_SEC
            try:
                py_dt += _timedelta(seconds=1)
            except OverflowError:
                return _datetime.max.replace(tzinfo=tzinfo)
        return py_dt.replace(microsecond=nanos // 1_000, tzinfo=tzinfo)

    def trunc_subsecs(self, digits: int, /) -> Instant[_Tz]:
        """Truncate the fraction of the second to the given number of
        digits (0 to 9). A leap second stays a leap second.

        Example
        -------
        >>> i = LocalDateTime(2018, 1, 11, 10, 5, 13, nanosecond=84_660_000).assume_utc()
        >>> i.trunc_subsecs(2)
        Instant(2018-01-11T10:05:13.080Z)
        """
        span = _subsec_span(digits)
        remainder = self._utc._nanos % span
        if not remainder:
            return self
        return self - Duration._from_nanos_unchecked(remainder)

    def round_subsecs(self, digits: int, /) -> Instant[_Tz]:
        """Round the fraction of the second to the given number of
        digits (0 to 9), with halves rounded up.

        Example
        -------
        >>> i = LocalDateTime(2018, 1, 11, 10, 5, 13, nanosecond=84_660_000).assume_utc()
        >>> i.round_subsecs(1)
        Instant(2018-01-11T10:05:13.100Z)
        """
        span = _subsec_span(digits)
        down = self._utc._nanos % span
        if not down:
            return self
        up = span - down
        if up <= down:
            return self + Duration._from_nanos_unchecked(up)
        return self - Duration._from_nanos_unchecked(down)

    def format_rfc3339(
        self,
        precision: SecondsFormat = SecondsFormat.AUTO_SI,
        *,
        use_z: bool = False,
    ) -> str:
        """Format as RFC 3339, e.g. ``2018-01-11T10:05:13.084660+08:00``

        The inverse of :meth:`parse_rfc3339`.

        Example
        -------
        >>> i = LocalDateTime(2018, 1, 11, 2, 5, 13, nanosecond=84_660_000).assume_utc()
        >>> i.format_rfc3339(SecondsFormat.MILLIS)
        '2018-01-11T02:05:13.084+00:00'
        >>> i.format_rfc3339(SecondsFormat.SECS, use_z=True)
        '2018-01-11T02:05:13Z'

        Note
        ----
        A leap second shows as second ``60``, followed by the fraction
        of the leap second.
        The offset is written in whole minutes: the seconds of an offset
        such as ``+00:19:32`` are truncated.
        """
        local = self._local
        dt = local._py_dt
        second = dt.second + (local._nanos >= NS_PER_SEC)
        suffix = (
            "Z"
            if use_z and not self._offset._secs
            else format_offset(
                self._offset._secs, colon=True, with_seconds=False
            )
        )
        return (
            f"{dt.date().isoformat()}T"
            f"{dt.hour:02}:{dt.minute:02}:{second:02}"
            f"{format_fraction(local._nanos, precision.value)}{suffix}"
        )

    @classmethod
    def parse_rfc3339(cls, s: str, /) -> Instant[FixedOffset]:
        """Parse RFC 3339, e.g. ``2015-02-18T23:16:09Z``.

        The inverse of :meth:`format_rfc3339`.

        Example
        -------
        >>> Instant.parse_rfc3339("2015-02-18T23:59:60.234567+05:00")
        Instant(2015-02-18T23:59:60.234567+05:00)

        Raises :class:`ParseError` for invalid input.
        """
        return cls._from_fields(s, parse_rfc3339(s))

    @classmethod
    def parse(cls, s: str, /) -> Instant[FixedOffset]:
        """Parse a more relaxed form of RFC 3339, as produced by ``str()``.
        One-digit fields, a space before the offset, and ``UTC`` are
        accepted too. The offset can't be left out.

        Example
        -------
        >>> Instant.parse("2015-2-18T23:16:9.15Z")
        Instant(2015-02-18T23:16:09.150+00:00)
        >>> Instant.parse("2014-05-06 07:08:09 UTC")
        Instant(2014-05-06T07:08:09+00:00)
        """
        return cls._from_fields(s, parse_lenient(s))

    def format_rfc2822(self) -> str:
        """Format as RFC 2822, e.g. ``Wed, 18 Feb 2015 23:16:09 +0000``

        The inverse of :meth:`parse_rfc2822`. The fraction of the
        second is dropped, and a leap second shows as second ``60``.
        Like :meth:`format_rfc3339`, the offset is truncated to whole
        minutes.
        """
        local = self._local
        dt = local._py_dt
        second = dt.second + (local._nanos >= NS_PER_SEC)
        offset = format_offset(
            self._offset._secs, colon=False, with_seconds=False
        )
        return (
            f"{RFC2822_WEEKDAYS[dt.weekday()]}, {dt.day:02} "
            f"{RFC2822_MONTHS[dt.month - 1]} {dt.year:04} "
            f"{dt.hour:02}:{dt.minute:02}:{second:02} "
            f"{offset}"
        )

    @classmethod
    def parse_rfc2822(cls, s: str, /) -> Instant[FixedOffset]:
        """Parse RFC 2822, e.g. ``Wed, 18 Feb 2015 23:16:09 +0000``.

        The inverse of :meth:`format_rfc2822`.

        Example
        -------
        >>> Instant.parse_rfc2822("Wed, 18 Feb 2015 23:16:09 GMT")
        Instant(2015-02-18T23:16:09+00:00)

        Note
        ----
        Obsolete zone names such as ``EST`` are understood, and unknown
        ones (including military letters) are read as ``+0000``.
        Second ``60`` becomes a leap second without any fraction:
        compare it against :meth:`trunc_subsecs` ``(0)`` of a more
        precise value.
        """
        return cls._from_fields(s, parse_rfc2822(s))

    def format(self, fmt: str, /) -> DelayedFormat:
        """Format with a ``strftime``-like format string.

        Example
        -------
        >>> i = LocalDateTime(2007, 1, 2, 3, 4, 5).assume_utc()
        >>> str(i.format("%Y-%m-%d %H:%M:%S %Z"))
        '2007-01-02 03:04:05 UTC'
        >>> f"{i.format('%Y'):^6}"
        ' 2007 '
        """
        return DelayedFormat(
            self._local._subject(
                self._offset._secs, self._tz.abbreviation(self._utc)
            ),
            compile_format(fmt),
        )

    @classmethod
    def parse_strftime(cls, s: str, /, fmt: str) -> Instant[FixedOffset]:
        """Parse with a ``strftime``-like format string. The text must
        contain an offset (e.g. with ``%z``): use the ``parse_strftime``
        method of a timezone to parse text without one.

        Example
        -------
        >>> Instant.parse_strftime("2014-5-7T12:34:56+09:30", "%Y-%m-%dT%H:%M:%S%z")
        Instant(2014-05-07T12:34:56+09:30)
        """
        parsed = parse_format(s, fmt)
        if parsed.offset is None:
            raise ParseError(ParseErrorKind.NOT_ENOUGH, s)
        local = LocalDateTime._from_parsed(parsed)
        tz = FixedOffset._from_secs_unchecked(parsed.offset)
        utc = local._shift_seconds(-tz._secs)
        if utc is None:
            raise ParseError(ParseErrorKind.OUT_OF_RANGE, s)
        return cls._from_parts(utc, local, tz, tz)

    def __str__(self) -> str:
        """Like RFC 3339, but with a space as separator and before
        the offset, and ``UTC`` for the UTC timezone.

        Example
        -------
        >>> str(LocalDateTime(2014, 5, 6, 7, 8, 9).assume_utc())
        '2014-05-06 07:08:09 UTC'
        """
        suffix = "UTC" if isinstance(self._tz, Utc) else str(self._offset)
        return f"{self._local._format_sep(' ')} {suffix}"

    def __repr__(self) -> str:
        return (
            f"Instant({self._local._format_sep('T')}"
            f"{_tz_suffix(self._tz, self._offset)})"
        )

    def __eq__(self, other: object) -> bool:
        """Compare the point in time, regardless of timezone"""
        if not isinstance(other, Instant):
            return NotImplemented
        return self._utc == other._utc

    def __hash__(self) -> int:
        return hash(self._utc)

    def __lt__(self, other: Instant[Any]) -> bool:
        if not isinstance(other, Instant):
            return NotImplemented
        return self._utc < other._utc

    def __le__(self, other: Instant[Any]) -> bool:
        if not isinstance(other, Instant):
            return NotImplemented
        return self._utc <= other._utc

    def __gt__(self, other: Instant[Any]) -> bool:
        if not isinstance(other, Instant):
            return NotImplemented
        return self._utc > other._utc

    def __ge__(self, other: Instant[Any]) -> bool:
        if not isinstance(other, Instant):
            return NotImplemented
        return self._utc >= other._utc

    def _with_utc(self, utc: LocalDateTime) -> Instant[_Tz] | None:
        offset = self._tz.offset_for_utc(utc)
        local = utc._shift_seconds(offset._secs)
        if local is None:
            return None
        return self._from_parts(utc, local, offset, self._tz)

    @classmethod
    def _from_fields(cls, s: str, fields: Fields) -> Instant[FixedOffset]:
        local, secs = LocalDateTime._from_fields(fields)
        tz = FixedOffset._from_secs_unchecked(secs)
        utc = local._shift_seconds(-secs)
        if utc is None:
            raise ParseError(ParseErrorKind.OUT_OF_RANGE, s)
        return cls._from_parts(utc, local, tz, tz)

    @classmethod
    def _from_parts(
        cls,
        utc: LocalDateTime,
        local: LocalDateTime,
        offset: FixedOffset,
        tz: _Tz2,
    ) -> Instant[_Tz2]:
        self = _object_new(cls)
        self._utc = utc
        self._local = local
        self._offset = offset
        self._tz = tz
        return self  # type: ignore[return-value]

    @no_type_check
    def __reduce__(self):
        return _unpkl_inst, (self._utc._pack(), self._tz)


@no_type_check
def _unpkl_inst(data: bytes, tz: OffsetProvider) -> Instant:
    return Instant.from_utc(_unpkl_local(data), tz)


def _subsec_span(digits: int) -> int:
    if not isinstance(digits, int) or digits < 0:
        raise ValueError(f"Invalid number of digits: {digits!r}")
    return 10 ** (9 - min(digits, 9))


Instant.MIN = Instant._from_parts(
    LocalDateTime.MIN, LocalDateTime.MIN, _UTC_OFFSET, UTC
)
Instant.MAX = Instant._from_parts(
    LocalDateTime.MAX, LocalDateTime.MAX, _UTC_OFFSET, UTC
)

# Local readings probed at the start of a day, 15 minutes apart
_DAY_START_PROBES = 25
_DAY_START_STEP_NS = 15 * 60 * NS_PER_SEC


@final
class Day(_ImmutableBase, Generic[_Tz]):
    """A calendar day in a timezone: from its start (usually midnight)
    to the start of the next day.

    Equality, ordering and hashing are based on the date only.

    Example
    -------
    >>> d = Day(Date(2014, 5, 6), UTC)
    Day(2014-05-06 UTC)
    >>> d.start()
    Instant(2014-05-06T00:00:00Z)
    >>> d.succ()
    Day(2014-05-07 UTC)
    """

    __slots__ = ("_date", "_tz")

    _date: Date
    _tz: _Tz

    def __init__(self, date: Date, tz: _Tz, /) -> None:
        if not isinstance(date, Date):
            raise TypeError(f"Expected Date, got {type(date)!r}")
        self._date = date
        self._tz = tz

    @classmethod
    def from_instant(cls, instant: Instant[_Tz2], /) -> Day[_Tz2]:
        """The local day of the given instant"""
        return Day(instant.date(), instant.tz)

    @property
    def date(self) -> Date:
        return self._date

    @property
    def tz(self) -> _Tz:
        return self._tz

    def start(self) -> Instant[_Tz]:
        """The first instant of the day.

        This is usually midnight, but the first minutes or hours of a day
        may be skipped (e.g. DST starting at midnight). The local times
        from midnight onwards are tried in 15 minute steps, up to 06:00.
        If a time is ambiguous, the earlier instant is the start.

        Raises :class:`ProviderError` if none of these times exist,
        which no real-world timezone does.

        Example
        -------
        >>> havana = TimeZone.from_posix("CST5CDT,M3.2.0/0,M11.1.0/1")
        >>> Day(Date(2023, 3, 12), havana).start()
        Instant(2023-03-12T01:00:00-04:00[CST5CDT,M3.2.0/0,M11.1.0/1])
        """
        midnight = self._date.at(Time.MIDNIGHT)
        for k in range(_DAY_START_PROBES):
            local = midnight._add_nanos(k * _DAY_START_STEP_NS)
            assert local is not None  # stays within the day
            resolution = self._tz.resolve_local(local)
            if isinstance(resolution, Single):
                return resolution.value
            elif isinstance(resolution, Ambiguous):
                return min(resolution.earlier, resolution.later)
        raise ProviderError(
            f"No valid local time found at the start of {self}"
        )

    def length(self) -> Duration:
        """The duration from the start of this day to the start of the
        next. Raises :class:`OverflowError` for the last representable day.

        Example
        -------
        >>> cet = TimeZone.from_posix("CET-1CEST,M3.5.0,M10.5.0/3")
        >>> Day(Date(2023, 3, 26), cet).length()
        Duration(23:00:00)
        """
        following = self.succ()
        if following is None:
            raise OverflowError("There is no next day")
        return following.start() - self.start()

    def succ(self) -> Day[_Tz] | None:
        """The next day, or ``None`` at the end of the range"""
        return self.checked_add_days(1)

    def pred(self) -> Day[_Tz] | None:
        """The previous day, or ``None`` at the start of the range"""
        return self.checked_sub_days(1)

    def checked_add_days(self, n: int, /) -> Day[_Tz] | None:
        """Move ``n`` (zero or more) days ahead, or ``None`` if the
        result is out of range"""
        if n < 0:
            raise ValueError("Number of days must not be negative")
        return self._shifted(n)

    def checked_sub_days(self, n: int, /) -> Day[_Tz] | None:
        """Move ``n`` (zero or more) days back, or ``None`` if the
        result is out of range"""
        if n < 0:
            raise ValueError("Number of days must not be negative")
        return self._shifted(-n)

    def _shifted(self, n: int) -> Day[_Tz] | None:
        if not n:
            return self
        d = self._date.add_days(n)
        return None if d is None else Day(d, self._tz)

    def __add__(self, n: int) -> Day[_Tz]:
        if not isinstance(n, int):
            return NotImplemented
        result = self._shifted(n)
        if result is None:
            raise OverflowError("Day out of range")
        return result

    def __sub__(self, n: int) -> Day[_Tz]:
        if not isinstance(n, int):
            return NotImplemented
        result = self._shifted(-n)
        if result is None:
            raise OverflowError("Day out of range")
        return result

    def format(self, fmt: str, /) -> DelayedFormat:
        """Format with a ``strftime``-like format string.
        ``%Z`` shows the timezone.

        Example
        -------
        >>> str(Day(Date(2014, 5, 6), UTC).format("%d %b %Y (%Z)"))
        '06 May 2014 (UTC)'
        """
        return DelayedFormat(
            Subject(date=self._date._py_date, tz_name=str(self._tz)),
            compile_format(fmt),
        )

    def __str__(self) -> str:
        return f"{self._date} {self._tz}"

    def __repr__(self) -> str:
        return f"Day({self})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Day):
            return NotImplemented
        return self._date == other._date

    def __hash__(self) -> int:
        return hash(self._date)

    def __lt__(self, other: Day[Any]) -> bool:
        if not isinstance(other, Day):
            return NotImplemented
        return self._date < other._date

    def __le__(self, other: Day[Any]) -> bool:
        if not isinstance(other, Day):
            return NotImplemented
        return self._date <= other._date

    def __gt__(self, other: Day[Any]) -> bool:
        if not isinstance(other, Day):
            return NotImplemented
        return self._date > other._date

    def __ge__(self, other: Day[Any]) -> bool:
        if not isinstance(other, Day):
            return NotImplemented
        return self._date >= other._date

    @no_type_check
    def __reduce__(self):
        d = self._date
        return _unpkl_day, (pack("<HBB", d.year, d.month, d.day), self._tz)


@no_type_check
def _unpkl_day(data: bytes, tz: OffsetProvider) -> Day:
    return Day(Date(*unpack("<HBB", data)), tz)


# We expose the public members in the root of the module.
# For clarity, we remove the "_pycivil" part from the names,
# since this is an implementation detail.
for name in __all__:
    member = locals()[name]
    if getattr(member, "__module__", None) == __name__:  # pragma: no branch
        member.__module__ = "civiltime"

# clear up loop variables so they don't leak into the namespace
del name
del member

for _unpkl in (
    _unpkl_date,
    _unpkl_time,
    _unpkl_duration,
    _unpkl_local,
    _unpkl_offset,
    _unpkl_utc,
    _unpkl_tz,
    _unpkl_inst,
    _unpkl_day,
):
    _unpkl.__module__ = "civiltime"


# disable further subclassing
final(_ImmutableBase)
