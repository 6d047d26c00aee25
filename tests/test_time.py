import pickle
from copy import copy, deepcopy
from datetime import time as py_time, timezone

import pytest

from civiltime import Date, LocalDateTime, ParseError, Time

from .common import AlwaysEqual, AlwaysLarger, AlwaysSmaller, NeverEqual


class TestInit:

    def test_all_args(self):
        t = Time(1, 2, 3, nanosecond=4_000)
        assert t.hour == 1
        assert t.minute == 2
        assert t.second == 3
        assert t.nanosecond == 4_000

    def test_all_optional(self):
        assert Time() == Time(0, 0, 0, nanosecond=0)

    def test_leap_second(self):
        t = Time(23, 59, 59, nanosecond=1_500_000_000)
        assert t.is_leap_second()
        assert not Time(23, 59, 59).is_leap_second()

    @pytest.mark.parametrize(
        "args, nanos",
        [
            ((24, 0, 0), 0),
            ((0, 60, 0), 0),
            ((0, 0, 60), 0),
            ((0, 0, 0), -1),
            ((0, 0, 0), 2_000_000_000),
            # a leap second at a second other than 59
            ((12, 30, 58), 1_000_000_000),
        ],
    )
    def test_invalid(self, args, nanos):
        with pytest.raises(ValueError):
            Time(*args, nanosecond=nanos)
        assert Time.checked(*args, nanosecond=nanos) is None


def test_subsec():
    t = Time(10, 0, 0, nanosecond=1_234_567)
    assert t.subsec_millis() == 1
    assert t.subsec_micros() == 1_234
    assert t.subsec_nanos() == 1_234_567

    leap = Time(23, 59, 59, nanosecond=1_234_567_890)
    assert leap.subsec_millis() == 1_234
    assert leap.subsec_micros() == 1_234_567
    assert leap.subsec_nanos() == 1_234_567_890


def test_py_time():
    t = Time(1, 2, 3, nanosecond=4_000_001)
    assert t.py_time() == py_time(1, 2, 3, 4_000)
    leap = Time(23, 59, 59, nanosecond=1_500_000_000)
    assert leap.py_time() == py_time(23, 59, 59, 999_999)


def test_from_py_time():
    assert Time.from_py_time(py_time(1, 2, 3, 4)) == Time(
        1, 2, 3, nanosecond=4_000
    )

    class SubclassTime(py_time):
        pass

    assert Time.from_py_time(SubclassTime(1, 2, 3)) == Time(1, 2, 3)

    with pytest.raises(ValueError, match="naive"):
        Time.from_py_time(py_time(1, tzinfo=timezone.utc))

    with pytest.raises(TypeError):
        Time.from_py_time(3)  # type: ignore[arg-type]


@pytest.mark.parametrize(
    "t, expect",
    [
        (Time(1, 2, 3), "01:02:03"),
        (Time(1, 2, 3, nanosecond=4_000_000), "01:02:03.004"),
        (Time(1, 2, 3, nanosecond=4_500), "01:02:03.000004500"),
        (Time(1, 2, 3, nanosecond=4_000), "01:02:03.000004"),
        (Time(23, 59, 59, nanosecond=1_000_000_000), "23:59:60"),
        (Time(23, 59, 59, nanosecond=1_250_000_000), "23:59:60.250"),
    ],
)
def test_format_common_iso(t, expect):
    assert t.format_common_iso() == expect
    assert str(t) == expect
    assert Time.parse_common_iso(expect) == t


class TestParseCommonIso:

    @pytest.mark.parametrize(
        "s, expected",
        [
            ("00:00:00", Time()),
            ("12:30:05.5", Time(12, 30, 5, nanosecond=500_000_000)),
            ("12:30:05.123456789", Time(12, 30, 5, nanosecond=123_456_789)),
        ],
    )
    def test_valid(self, s, expected):
        assert Time.parse_common_iso(s) == expected

    @pytest.mark.parametrize(
        "s",
        [
            "",
            "12:30",
            "12:30:05.",
            "12:30:05.1234567890",
            "24:00:00",
            "12:30:60.5x",
            # there is never a second 61
            "12:30:61",
            "12:30:05Z",
        ],
    )
    def test_invalid(self, s):
        with pytest.raises(ValueError, match="Invalid format"):
            Time.parse_common_iso(s)


def test_on():
    t = Time(1, 2, 3)
    assert t.on(Date(2021, 1, 2)) == LocalDateTime(2021, 1, 2, 1, 2, 3)


def test_eq():
    t = Time(1, 2, 3, nanosecond=4_000)
    same = Time(1, 2, 3, nanosecond=4_000)
    different = Time(1, 2, 3, nanosecond=5_000)

    assert t == same
    assert not t == different
    assert t != different
    assert not t != same

    assert hash(t) == hash(same)
    assert t != 42  # type: ignore[comparison-overlap]
    assert t == AlwaysEqual()
    assert t != NeverEqual()


def test_comparison():
    t = Time(23, 59, 59, nanosecond=999_999_999)
    leap = Time(23, 59, 59, nanosecond=1_000_000_000)
    assert t < leap
    assert t <= leap
    assert leap > t
    assert leap >= t
    assert Time(1) < Time(1, 0, 0, nanosecond=1)

    assert t < AlwaysLarger()
    assert t > AlwaysSmaller()
    with pytest.raises(TypeError):
        t < 42  # type: ignore[operator]


def test_constants():
    assert Time.MIDNIGHT == Time()
    assert Time.NOON == Time(12)
    assert Time.MAX == Time(23, 59, 59, nanosecond=999_999_999)


def test_repr():
    assert repr(Time(1, 2, 3, nanosecond=7_000)) == "Time(01:02:03.000007)"


def test_replace():
    t = Time(1, 2, 3, nanosecond=4_000)
    assert t.replace(hour=5) == Time(5, 2, 3, nanosecond=4_000)
    assert t.replace(nanosecond=0) == Time(1, 2, 3)
    with pytest.raises(ValueError):
        t.replace(nanosecond=1_000_000_000)
    with pytest.raises(ValueError):
        t.replace(minute=60)
    with pytest.raises(TypeError, match="microsecond"):
        t.replace(microsecond=5)  # type: ignore[call-arg]
    with pytest.raises(TypeError):
        t.replace(tzinfo=None)  # type: ignore[call-arg]
    with pytest.raises(TypeError):
        t.replace(fold=1)  # type: ignore[call-arg]


class TestFormat:

    def test_basic(self):
        t = Time(0, 34, 59, nanosecond=1_026_490_000)
        assert str(t.format("%H:%M:%S")) == "00:34:60"
        assert str(t.format("%I:%M %p")) == "12:34 AM"
        assert str(t.format("%l%P")) == "12am"
        assert str(t.format("%T%.f")) == "00:34:60.026490"
        assert str(t.format("%T%.3f|%6f|%f")) == "00:34:60.026|026490|026490000"

    def test_needs_date(self):
        with pytest.raises(ValueError, match="requires a date"):
            str(Time(1).format("%Y"))


class TestParseStrftime:

    def test_valid(self):
        assert Time.parse_strftime("23:56:04", "%H:%M:%S") == Time(23, 56, 4)
        assert Time.parse_strftime("11:56 PM", "%I:%M %p") == Time(23, 56)
        assert Time.parse_strftime("12:00:00.5 am", "%I:%M:%S%.f %P") == Time(
            0, 0, 0, nanosecond=500_000_000
        )

    def test_leap_second(self):
        assert Time.parse_strftime("23:59:60.25", "%H:%M:%S%.f") == Time(
            23, 59, 59, nanosecond=1_250_000_000
        )

    @pytest.mark.parametrize(
        "s, fmt",
        [
            ("23:56", "%H"),  # trailing input
            ("11:56", "%I:%M"),  # no AM/PM
            ("24:00", "%H:%M"),  # out of range
        ],
    )
    def test_invalid(self, s, fmt):
        with pytest.raises(ParseError):
            Time.parse_strftime(s, fmt)


def test_pickle():
    t = Time(1, 2, 3, nanosecond=4_000)
    assert pickle.loads(pickle.dumps(t)) == t
    leap = Time(23, 59, 59, nanosecond=1_999_999_999)
    assert pickle.loads(pickle.dumps(leap)) == leap


def test_copy():
    t = Time(1, 2, 3, nanosecond=4_000)
    assert copy(t) is t
    assert deepcopy(t) is t


def test_cannot_subclass():
    with pytest.raises(TypeError):

        class Subclass(Time):  # type: ignore[misc]
            pass
