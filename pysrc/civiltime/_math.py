"""Calendar arithmetic helpers."""

from __future__ import annotations

from datetime import date as _date

# Proleptic Gregorian ordinal of 1970-01-01
EPOCH_ORDINAL = 719_163
# Range of ordinals for which a date is representable
MIN_ORDINAL = 1
MAX_ORDINAL = _date.max.toordinal()


def is_leap(year: int) -> bool:
    return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)


# 1-indexed days per month
_MONTHDAYS = [0, 31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31]


def days_in_month(year: int, month: int) -> int:
    return _MONTHDAYS[month] + (month == 2 and is_leap(year))


def days_in_year(year: int) -> int:
    return 365 + is_leap(year)


def shift_days(d: _date, days: int) -> _date | None:
    """Shift a date by a number of days, or None if the result
    falls outside the representable range."""
    ordinal = d.toordinal() + days
    if MIN_ORDINAL <= ordinal <= MAX_ORDINAL:
        return _date.fromordinal(ordinal)
    return None


def year_for_epoch(ts: int) -> int:
    # fromtimestamp() fails on extreme values on some platforms
    ordinal = ts // 86_400 + EPOCH_ORDINAL
    return _date.fromordinal(
        min(max(ordinal, MIN_ORDINAL), MAX_ORDINAL)
    ).year


def epoch_for_date(d: _date) -> int:
    """Seconds from the epoch to midnight at the start of the given date"""
    return (d.toordinal() - EPOCH_ORDINAL) * 86_400


def week_of_year(d: _date, first_weekday: int) -> int:
    """Week number where weeks start on ``first_weekday``
    (0=Monday, 6=Sunday), and days before the first such weekday
    of the year are in week 0. Used by ``%U`` and ``%W``."""
    yday = d.timetuple().tm_yday - 1
    weekday_from_first = (d.weekday() - first_weekday) % 7
    return (yday + 7 - weekday_from_first) // 7


def date_from_week_of_year(
    year: int, week: int, weekday: int, first_weekday: int
) -> _date | None:
    """Inverse of :func:`week_of_year`. ``weekday`` is 0=Monday."""
    jan1 = _date(year, 1, 1)
    # offset of the first ``first_weekday`` of the year
    first = (first_weekday - jan1.weekday()) % 7
    delta = first + (week - 1) * 7 + (weekday - first_weekday) % 7
    result = shift_days(jan1, delta)
    if result is None or result.year != year:
        return None
    return result
