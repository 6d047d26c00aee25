import pytest

from civiltime import (
    Date,
    FixedOffset,
    Instant,
    LocalDateTime,
    ParseError,
    ParseErrorKind,
    StrftimeItems,
    Time,
)
from civiltime._format import (
    Fixed,
    FixedField,
    Literal,
    Numeric,
    NumericField,
    Pad,
    Parsed,
    Space,
    parse_format,
)

# A Sunday, with a leap second
LEAP_LOCAL = LocalDateTime(2001, 7, 8, 0, 34, 59, nanosecond=1_026_490_000)
ACST = FixedOffset(9 * 3600 + 1800)


class TestStrftimeItems:

    def test_basic(self):
        assert list(StrftimeItems("%Y-%m-%d")) == [
            Numeric(NumericField.YEAR, Pad.ZERO),
            Literal("-"),
            Numeric(NumericField.MONTH, Pad.ZERO),
            Literal("-"),
            Numeric(NumericField.DAY, Pad.ZERO),
        ]

    def test_whitespace_and_literals(self):
        assert list(StrftimeItems("at  %H\th")) == [
            Literal("at"),
            Space("  "),
            Numeric(NumericField.HOUR, Pad.ZERO),
            Space("\t"),
            Literal("h"),
        ]
        assert list(StrftimeItems("a%%b")) == [
            Literal("a"),
            Literal("%"),
            Literal("b"),
        ]

    def test_padding_modifiers(self):
        assert list(StrftimeItems("%-d%_m%0e")) == [
            Numeric(NumericField.DAY, Pad.NONE),
            Numeric(NumericField.MONTH, Pad.SPACE),
            Numeric(NumericField.DAY, Pad.ZERO),
        ]

    def test_fractions_and_offsets(self):
        assert list(StrftimeItems("%.f%.3f%6f%z%:z")) == [
            Fixed(FixedField.NANOSECOND),
            Fixed(FixedField.NANOSECOND3),
            Fixed(FixedField.NANOSECOND6_NO_DOT),
            Fixed(FixedField.TIMEZONE_OFFSET),
            Fixed(FixedField.TIMEZONE_OFFSET_COLON),
        ]

    def test_composite(self):
        assert len(list(StrftimeItems("%c"))) == 13
        assert list(StrftimeItems("%x")) == list(StrftimeItems("%D"))
        assert list(StrftimeItems("%X")) == list(StrftimeItems("%T"))

    @pytest.mark.parametrize(
        "fmt", ["%Q", "%", "abc%", "%-a", "%_Z", "%.4f", "%4f", "%:", "%E"]
    )
    def test_bad_format(self, fmt):
        items = StrftimeItems(fmt)  # errors only surface on iteration
        with pytest.raises(ParseError) as exc:
            list(items)
        assert exc.value.kind is ParseErrorKind.BAD_FORMAT

    def test_repr(self):
        assert repr(StrftimeItems("%Y")) == "StrftimeItems('%Y')"


class TestFormatDate:

    @pytest.mark.parametrize(
        "fmt, expected",
        [
            ("%Y %C %y", "2001 20 01"),
            ("%G %g %V", "2001 01 27"),
            ("%m %b %h %B", "07 Jul Jul July"),
            ("%d|%e|%-d|%_d", "08| 8|8| 8"),
            ("%-m|%_m", "7| 7"),
            ("%a %A %w %u", "Sun Sunday 0 7"),
            ("%U %W %j", "27 27 189"),
            ("%D|%x|%F|%v", "07/08/01|07/08/01|2001-07-08| 8-Jul-2001"),
            ("%%Y|%t|%n", "%Y|\t|\n"),
        ],
    )
    def test_directives(self, fmt, expected):
        assert str(Date(2001, 7, 8).format(fmt)) == expected

    def test_year_padding(self):
        d = Date(33, 1, 5)
        assert str(d.format("%Y|%-Y|%_Y")) == "0033|33|  33"
        assert str(d.format("%j|%-j|%_j")) == "005|5|  5"

    def test_bad_format_raises_immediately(self):
        with pytest.raises(ParseError) as exc:
            Date(2001, 7, 8).format("%Q")
        assert exc.value.kind is ParseErrorKind.BAD_FORMAT

    @pytest.mark.parametrize(
        "fmt, missing",
        [
            ("%H", "a time"),
            ("%p", "a time"),
            ("%s", "a time"),
            ("%z", "an offset"),
            ("%Z", "a timezone"),
        ],
    )
    def test_missing_data(self, fmt, missing):
        formatted = Date(2001, 7, 8).format(fmt)
        with pytest.raises(ValueError, match=f"requires {missing}"):
            str(formatted)


class TestFormatTime:

    @pytest.mark.parametrize(
        "fmt, expected",
        [
            ("%H|%k|%I|%l", "00| 0|12|12"),
            ("%p %P", "AM am"),
            ("%M:%S", "34:60"),
            ("%R|%T|%X", "00:34|00:34:60|00:34:60"),
            ("%r", "12:34:60 AM"),
            ("%f", "026490000"),
            ("%.f|%.3f|%.6f|%.9f", ".026490|.026|.026490|.026490000"),
            ("%3f|%6f|%9f", "026|026490|026490000"),
            ("%c", "Sun Jul  8 00:34:60 2001"),
        ],
    )
    def test_directives(self, fmt, expected):
        assert str(LEAP_LOCAL.format(fmt)) == expected

    def test_fraction_of_whole_second(self):
        t = Time(13, 5)
        assert str(t.format("%T%.f")) == "13:05:00"
        assert str(t.format("%.3f")) == ".000"
        assert str(t.format("%-I %P")) == "1 pm"


class TestFormatOffset:

    def test_offsets(self):
        i = Instant.from_utc(LEAP_LOCAL, FixedOffset(0)).with_timezone(ACST)
        assert str(i.format("%z|%:z")) == "+0930|+09:30"
        neg = i.with_timezone(FixedOffset(-(3 * 3600 + 61)))
        assert str(neg.format("%z|%:z")) == "-030101|-03:01:01"

    def test_rfc3339_and_timestamp(self):
        utc = LocalDateTime(2001, 7, 7, 15, 4, 59, nanosecond=1_026_490_000)
        i = Instant.from_utc(utc, ACST)
        assert i.local() == LEAP_LOCAL
        assert str(i.format("%+")) == "2001-07-08T00:34:60.026490+09:30"
        assert str(i.format("%s")) == "994518299"
        assert str(i.format("%Z")) == "+09:30"


class TestDelayedFormat:

    def test_format_spec(self):
        formatted = Date(2001, 7, 8).format("%Y")
        assert f"{formatted:>8}" == "    2001"
        assert f"{formatted:*^8}" == "**2001**"
        assert f"{formatted}" == "2001"

    def test_repr(self):
        assert repr(Date(2001, 7, 8).format("%Y")) == "DelayedFormat('2001')"

    def test_rendered_each_time(self):
        formatted = Date(2001, 7, 8).format("%d")
        assert str(formatted) == str(formatted) == "08"


class TestParseDate:

    @pytest.mark.parametrize(
        "s, fmt",
        [
            ("2001-07-08", "%Y-%m-%d"),
            ("2001-07-08", "%F"),
            ("8 JULY 2001", "%e %B %Y"),
            ("Sun,  8 jul 2001", "%a, %e %b %Y"),
            ("01-07-08", "%y-%m-%d"),
            ("2001-189", "%Y-%j"),
            ("2001 27 Sun", "%Y %U %a"),
            ("2001 27 7", "%Y %W %u"),
            ("2001 27 0", "%Y %W %w"),
            ("2001-W27-7", "%G-W%V-%u"),
            ("20 01/07/08", "%C %y/%m/%d"),
            ("2001-07-08 CEST", "%F %Z"),
        ],
    )
    def test_valid(self, s, fmt):
        assert Date.parse_strftime(s, fmt) == Date(2001, 7, 8)

    @pytest.mark.parametrize(
        "s, expected",
        [
            ("69", 2069),
            ("70", 1970),
            ("00", 2000),
        ],
    )
    def test_two_digit_year(self, s, expected):
        assert Date.parse_strftime(f"{s}-01-01", "%y-%m-%d").year == expected

    @pytest.mark.parametrize(
        "s, fmt, kind",
        [
            ("2001-07", "%Y-%m", ParseErrorKind.NOT_ENOUGH),
            ("2001", "%Y", ParseErrorKind.NOT_ENOUGH),
            ("19-01-01", "%C-%m-%d", ParseErrorKind.NOT_ENOUGH),
            ("2001-02-30", "%F", ParseErrorKind.OUT_OF_RANGE),
            ("2001-13-01", "%F", ParseErrorKind.OUT_OF_RANGE),
            ("2001-366", "%Y-%j", ParseErrorKind.OUT_OF_RANGE),
            ("2001-07-08 Mon", "%F %a", ParseErrorKind.IMPOSSIBLE),
            ("2001-07-08 2002", "%F %Y", ParseErrorKind.IMPOSSIBLE),
            ("1901-01-01 20", "%F %C", ParseErrorKind.IMPOSSIBLE),
            ("2001-Jux-08", "%Y-%b-%d", ParseErrorKind.INVALID),
            ("2001/07/08", "%F", ParseErrorKind.INVALID),
            ("2001-07-", "%F", ParseErrorKind.TOO_SHORT),
            ("2001-07-08x", "%F", ParseErrorKind.TOO_LONG),
            ("2001-07-08", "%Q", ParseErrorKind.BAD_FORMAT),
        ],
    )
    def test_invalid(self, s, fmt, kind):
        with pytest.raises(ParseError) as exc:
            Date.parse_strftime(s, fmt)
        assert exc.value.kind is kind


class TestParseDateTime:

    def test_whitespace_is_flexible(self):
        assert LocalDateTime.parse_strftime(
            "2001-07-08    12:00", "%F %R"
        ) == LocalDateTime(2001, 7, 8, 12)
        assert LocalDateTime.parse_strftime(
            "2001-07-0812:00", "%F %R"
        ) == LocalDateTime(2001, 7, 8, 12)

    def test_leap_second(self):
        assert (
            LocalDateTime.parse_strftime(
                "2001-07-08 00:34:60.026490", "%F %T%.f"
            )
            == LEAP_LOCAL
        )

    def test_timestamp(self):
        assert LocalDateTime.parse_strftime(
            "994518299", "%s"
        ) == LocalDateTime(2001, 7, 7, 15, 4, 59)
        assert LocalDateTime.parse_strftime("-1", "%s") == LocalDateTime(
            1969, 12, 31, 23, 59, 59
        )
        # matching fields are fine
        assert LocalDateTime.parse_strftime(
            "994518299 2001-07-07", "%s %F"
        ) == LocalDateTime(2001, 7, 7, 15, 4, 59)

    def test_timestamp_conflict(self):
        with pytest.raises(ParseError) as exc:
            LocalDateTime.parse_strftime("994518299 2001-07-08", "%s %F")
        assert exc.value.kind is ParseErrorKind.IMPOSSIBLE

    def test_instant_with_rfc3339(self):
        i = Instant.parse_strftime("2001-07-08T00:34:60.026490+09:30", "%+")
        assert i.local() == LEAP_LOCAL
        assert i.offset == ACST
        assert i.utc() == LocalDateTime(
            2001, 7, 7, 15, 4, 59, nanosecond=1_026_490_000
        )

    def test_instant_needs_offset(self):
        with pytest.raises(ParseError) as exc:
            Instant.parse_strftime("2001-07-08 00:34", "%F %R")
        assert exc.value.kind is ParseErrorKind.NOT_ENOUGH


class TestParsed:

    def test_set(self):
        p = Parsed()
        p.set("year", 2001)
        p.set("year", 2001)
        assert p.year == 2001
        with pytest.raises(ParseError) as exc:
            p.set("year", 2002)
        assert exc.value.kind is ParseErrorKind.IMPOSSIBLE

    def test_repr(self):
        assert repr(parse_format("2001-07", "%Y-%m")) == (
            "Parsed(year=2001, month=7)"
        )
        assert repr(Parsed()) == "Parsed()"

    @pytest.mark.parametrize(
        "s, fmt, offset",
        [
            ("+0930", "%z", 34_200),
            ("-09:30", "%z", -34_200),
            ("+09:30", "%:z", 34_200),
            ("-0000", "%:z", 0),
        ],
    )
    def test_offset(self, s, fmt, offset):
        assert parse_format(s, fmt).offset == offset

    @pytest.mark.parametrize(
        "s, kind",
        [
            ("+2400", ParseErrorKind.OUT_OF_RANGE),
            ("+0960", ParseErrorKind.OUT_OF_RANGE),
            ("0930", ParseErrorKind.INVALID),
            ("+09", ParseErrorKind.TOO_SHORT),
        ],
    )
    def test_invalid_offset(self, s, kind):
        with pytest.raises(ParseError) as exc:
            parse_format(s, "%z")
        assert exc.value.kind is kind

    def test_fractions(self):
        assert parse_format("5", "%f").nanosecond == 500_000_000
        assert parse_format("12:00:00", "%T%.f").nanosecond is None
        assert parse_format("12:00:00.25", "%T%.f").nanosecond == 250_000_000
        assert parse_format("123", "%3f").nanosecond == 123_000_000
        with pytest.raises(ParseError) as exc:
            parse_format("12:00:00", "%T%.3f")
        assert exc.value.kind is ParseErrorKind.TOO_SHORT
        with pytest.raises(ParseError) as exc:
            parse_format("12:00:00.12", "%T%.3f")
        assert exc.value.kind is ParseErrorKind.TOO_SHORT

    def test_hour_fields(self):
        p = parse_format("11 PM", "%I %p")
        assert (p.hour_div_12, p.hour_mod_12) == (1, 11)
        p = parse_format("12 am", "%I %P")
        assert (p.hour_div_12, p.hour_mod_12) == (0, 0)
        with pytest.raises(ParseError) as exc:
            parse_format("13 PM", "%I %p")
        assert exc.value.kind is ParseErrorKind.OUT_OF_RANGE
        with pytest.raises(ParseError) as exc:
            parse_format("13 AM", "%H %p")
        assert exc.value.kind is ParseErrorKind.IMPOSSIBLE

    def test_error_message(self):
        with pytest.raises(ParseError, match="premature end of input"):
            Date.parse_strftime("2001-07-", "%F")
