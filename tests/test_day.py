import pickle
from copy import copy, deepcopy

import pytest

from civiltime import (
    UTC,
    Date,
    Day,
    FixedOffset,
    Instant,
    LocalDateTime,
    ProviderError,
    TimeZone,
    hours,
)

from .common import (
    AMS_TZ_POSIX,
    FoldEveryHour,
    SkipEverything,
    havana,
    sao_paulo,
)


def test_init():
    d = Day(Date(2014, 5, 6), UTC)
    assert d.date == Date(2014, 5, 6)
    assert d.tz is UTC

    with pytest.raises(TypeError):
        Day("2014-05-06", UTC)  # type: ignore[arg-type]


def test_from_instant():
    kst = FixedOffset.east(9 * 3600)
    i = Instant.from_utc(LocalDateTime(2014, 5, 6, 20), kst)
    assert Day.from_instant(i) == Day(Date(2014, 5, 7), kst)
    assert i.day().tz is kst


class TestStart:

    def test_utc(self):
        start = Day(Date(2014, 5, 6), UTC).start()
        assert start.utc() == LocalDateTime(2014, 5, 6)
        assert start.tz is UTC

    def test_fixed_offset(self):
        tz = FixedOffset.west(5 * 3600)
        start = Day(Date(2014, 5, 6), tz).start()
        assert start.local() == LocalDateTime(2014, 5, 6)
        assert start.utc() == LocalDateTime(2014, 5, 6, 5)

    def test_midnight_skipped(self):
        start = Day(Date(2023, 3, 12), havana()).start()
        assert start.local() == LocalDateTime(2023, 3, 12, 1)
        assert start.offset == FixedOffset.west(4 * 3600)

    def test_midnight_repeated(self):
        start = Day(Date(2023, 11, 5), havana()).start()
        assert start.local() == LocalDateTime(2023, 11, 5)
        assert start.offset == FixedOffset.west(4 * 3600)
        assert start.utc() == LocalDateTime(2023, 11, 5, 4)

    def test_southern_hemisphere(self):
        start = Day(Date(2018, 11, 4), sao_paulo()).start()
        assert start.local() == LocalDateTime(2018, 11, 4, 1)
        assert start.offset == FixedOffset.west(2 * 3600)

    def test_ordinary_day_in_dst_zone(self):
        start = Day(Date(2023, 7, 1), havana()).start()
        assert start.local() == LocalDateTime(2023, 7, 1)

    def test_earliest_of_repeated_times(self):
        start = Day(Date(2020, 1, 1), FoldEveryHour()).start()
        assert start.utc() == LocalDateTime(2019, 12, 31, 23)
        assert start.offset == FixedOffset(3600)

    def test_no_valid_time(self):
        with pytest.raises(ProviderError, match="SkipEverything"):
            Day(Date(2020, 1, 1), SkipEverything()).start()


class TestLength:

    def test_regular(self):
        assert Day(Date(2014, 5, 6), UTC).length() == hours(24)
        assert Day(Date(2023, 3, 11), havana()).length() == hours(24)

    def test_dst_transitions(self):
        assert Day(Date(2023, 3, 12), havana()).length() == hours(23)
        assert Day(Date(2023, 11, 5), havana()).length() == hours(25)

        cet = TimeZone.from_posix(AMS_TZ_POSIX)
        assert Day(Date(2023, 3, 26), cet).length() == hours(23)
        assert Day(Date(2023, 10, 29), cet).length() == hours(25)

    def test_iana_key(self):
        tz = TimeZone("Europe/Amsterdam")
        assert Day(Date(2023, 3, 26), tz).length() == hours(23)

    def test_last_day(self):
        with pytest.raises(OverflowError):
            Day(Date.MAX, UTC).length()


class TestNavigation:

    def test_succ_pred(self):
        d = Day(Date(2014, 12, 31), UTC)
        assert d.succ() == Day(Date(2015, 1, 1), UTC)
        assert d.pred() == Day(Date(2014, 12, 30), UTC)
        assert Day(Date.MAX, UTC).succ() is None
        assert Day(Date.MIN, UTC).pred() is None

    def test_keeps_timezone(self):
        tz = havana()
        following = Day(Date(2023, 3, 11), tz).succ()
        assert following is not None
        assert following.tz is tz

    def test_checked_days(self):
        d = Day(Date(2014, 5, 6), UTC)
        assert d.checked_add_days(0) is d
        assert d.checked_add_days(30) == Day(Date(2014, 6, 5), UTC)
        assert d.checked_sub_days(6) == Day(Date(2014, 4, 30), UTC)
        assert Day(Date.MAX, UTC).checked_add_days(1) is None
        assert d.checked_sub_days(800_000) is None

    @pytest.mark.parametrize("n", [-1, -30])
    def test_negative_count(self, n):
        d = Day(Date(2014, 5, 6), UTC)
        with pytest.raises(ValueError):
            d.checked_add_days(n)
        with pytest.raises(ValueError):
            d.checked_sub_days(n)

    def test_operators(self):
        d = Day(Date(2014, 5, 6), UTC)
        assert d + 2 == Day(Date(2014, 5, 8), UTC)
        assert d - 6 == Day(Date(2014, 4, 30), UTC)
        assert d + -1 == d - 1
        with pytest.raises(OverflowError):
            Day(Date.MAX, UTC) + 1
        with pytest.raises(OverflowError):
            Day(Date.MIN, UTC) - 1
        with pytest.raises(TypeError):
            d + hours(24)  # type: ignore[operator]


def test_format():
    d = Day(Date(2014, 5, 6), UTC)
    assert str(d.format("%d %b %Y (%Z)")) == "06 May 2014 (UTC)"
    assert f"{d.format('%F %Z')}" == "2014-05-06 UTC"
    with pytest.raises(ValueError, match="requires a time"):
        str(d.format("%H"))


def test_str_repr():
    d = Day(Date(2014, 5, 6), UTC)
    assert str(d) == "2014-05-06 UTC"
    assert repr(d) == "Day(2014-05-06 UTC)"
    assert str(Day(Date(2014, 5, 6), FixedOffset(3600))) == "2014-05-06 +01:00"
    assert str(Day(Date(2014, 5, 6), TimeZone("Europe/Amsterdam"))) == (
        "2014-05-06 Europe/Amsterdam"
    )


def test_comparison():
    d = Day(Date(2014, 5, 6), UTC)
    # the timezone is ignored
    same = Day(Date(2014, 5, 6), FixedOffset(3600))
    later = Day(Date(2014, 5, 7), UTC)

    assert d == same
    assert hash(d) == hash(same)
    assert d != later
    assert d < later
    assert d <= same
    assert later > d
    assert later >= d
    assert d != Date(2014, 5, 6)  # type: ignore[comparison-overlap]
    with pytest.raises(TypeError):
        d < Date(2014, 5, 7)  # type: ignore[operator]


def test_pickle():
    for d in (
        Day(Date(2014, 5, 6), UTC),
        Day(Date(2014, 5, 6), FixedOffset(-3600)),
        Day(Date(2023, 3, 26), TimeZone.from_posix(AMS_TZ_POSIX)),
    ):
        restored = pickle.loads(pickle.dumps(d))
        assert restored == d
        assert restored.tz == d.tz


def test_copy():
    d = Day(Date(2014, 5, 6), UTC)
    assert copy(d) is d
    assert deepcopy(d) is d
