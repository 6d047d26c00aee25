import pytest

from civiltime import ParseError, ParseErrorKind
from civiltime._parse import (
    check_fields,
    parse_lenient,
    parse_rfc2822,
    parse_rfc3339,
)

LEAP_NANOS = 1_000_000_000


def test_parse_error():
    err = ParseError(ParseErrorKind.TOO_LONG, "abc")
    assert isinstance(err, ValueError)
    assert err.kind is ParseErrorKind.TOO_LONG
    assert str(err) == "Invalid format: 'abc' (trailing input)"
    assert str(ParseError(ParseErrorKind.TOO_LONG)) == "trailing input"


class TestCheckFields:

    def test_folds_leap_second(self):
        assert check_fields("", 2016, 2, 29, 23, 59, 60, 5, 0) == (
            2016,
            2,
            29,
            23,
            59,
            59,
            LEAP_NANOS + 5,
            0,
        )

    @pytest.mark.parametrize(
        "fields",
        [
            (0, 1, 1, 0, 0, 0, 0, 0),
            (10_000, 1, 1, 0, 0, 0, 0, 0),
            (2015, 2, 29, 0, 0, 0, 0, 0),
            (2015, 13, 1, 0, 0, 0, 0, 0),
            (2015, 1, 1, 24, 0, 0, 0, 0),
            (2015, 1, 1, 0, 60, 0, 0, 0),
            (2015, 1, 1, 0, 0, 61, 0, 0),
            (2015, 1, 1, 0, 0, 0, 0, 86_400),
            (2015, 1, 1, 0, 0, 0, 0, -86_400),
        ],
    )
    def test_out_of_range(self, fields):
        with pytest.raises(ParseError) as exc:
            check_fields("x", *fields)
        assert exc.value.kind is ParseErrorKind.OUT_OF_RANGE


class TestRfc3339:

    @pytest.mark.parametrize(
        "s, expected",
        [
            ("2015-02-18T23:16:09Z", (2015, 2, 18, 23, 16, 9, 0, 0)),
            (
                "2015-02-18T23:16:09.153Z",
                (2015, 2, 18, 23, 16, 9, 153_000_000, 0),
            ),
            (
                "2015-02-18t23:16:09.000000001z",
                (2015, 2, 18, 23, 16, 9, 1, 0),
            ),
            (
                "2015-02-18 23:16:09+09:00",
                (2015, 2, 18, 23, 16, 9, 0, 32_400),
            ),
            (
                "2015-02-18T23:16:09-03:30",
                (2015, 2, 18, 23, 16, 9, 0, -12_600),
            ),
            (
                "2015-06-30T23:59:60.5Z",
                (2015, 6, 30, 23, 59, 59, LEAP_NANOS + 500_000_000, 0),
            ),
            ("0001-01-01T00:00:00Z", (1, 1, 1, 0, 0, 0, 0, 0)),
        ],
    )
    def test_valid(self, s, expected):
        assert parse_rfc3339(s) == expected

    @pytest.mark.parametrize(
        "s, kind",
        [
            ("", ParseErrorKind.TOO_SHORT),
            ("2015-02-18T23:16:09", ParseErrorKind.TOO_SHORT),
            ("2015-02-18T23:16:09.", ParseErrorKind.TOO_SHORT),
            ("2015-02-18T23:16:09+09:0", ParseErrorKind.TOO_SHORT),
            ("2015-02-18T23:16:09.Z", ParseErrorKind.INVALID),
            ("2015-02-18T23:16:09.1234567890Z", ParseErrorKind.INVALID),
            ("2015-02-18T23:16:09+0900", ParseErrorKind.INVALID),
            ("2015-02-18X23:16:09Z", ParseErrorKind.INVALID),
            ("2015-2-18T23:16:09Z", ParseErrorKind.INVALID),
            ("2015-02-18T23:16:09 Z", ParseErrorKind.INVALID),
            ("２０１５-02-18T23:16:09Z", ParseErrorKind.INVALID),
            ("2015-02-18T23:16:09Zx", ParseErrorKind.TOO_LONG),
            ("2015-02-30T23:16:09Z", ParseErrorKind.OUT_OF_RANGE),
            ("2015-02-18T23:16:61Z", ParseErrorKind.OUT_OF_RANGE),
            ("2015-02-18T23:16:09+09:60", ParseErrorKind.OUT_OF_RANGE),
            ("2015-02-18T23:16:09+24:00", ParseErrorKind.OUT_OF_RANGE),
            ("0000-01-01T00:00:00Z", ParseErrorKind.OUT_OF_RANGE),
        ],
    )
    def test_invalid(self, s, kind):
        with pytest.raises(ParseError) as exc:
            parse_rfc3339(s)
        assert exc.value.kind is kind
        assert repr(s) in str(exc.value)


class TestLenient:

    @pytest.mark.parametrize(
        "s, expected",
        [
            ("2015-2-18 23:16:9 UTC", (2015, 2, 18, 23, 16, 9, 0, 0)),
            ("2015-02-18  23:16:09z", (2015, 2, 18, 23, 16, 9, 0, 0)),
            (
                "2015-02-18T23:16:09.5 +0900",
                (2015, 2, 18, 23, 16, 9, 500_000_000, 32_400),
            ),
            (
                "2015-02-18 23:16:09.+09:00",
                (2015, 2, 18, 23, 16, 9, 0, 32_400),
            ),
            (
                "2015-06-30 23:59:60.25 utc",
                (2015, 6, 30, 23, 59, 59, LEAP_NANOS + 250_000_000, 0),
            ),
        ],
    )
    def test_valid(self, s, expected):
        assert parse_lenient(s) == expected

    @pytest.mark.parametrize(
        "s, kind",
        [
            ("2015-02-18 23:16:09", ParseErrorKind.NOT_ENOUGH),
            ("2015-02-18 23:16:09.5 ", ParseErrorKind.NOT_ENOUGH),
            ("foo", ParseErrorKind.INVALID),
            ("2015-02-18 23:16 UTC", ParseErrorKind.INVALID),
            ("2015-02-18 23:16:09 +9:00", ParseErrorKind.INVALID),
            ("2015-02-18 23:16:09 +09:60", ParseErrorKind.OUT_OF_RANGE),
            ("2015-02-18 25:16:09Z", ParseErrorKind.OUT_OF_RANGE),
            ("12015-02-18 23:16:09Z", ParseErrorKind.OUT_OF_RANGE),
        ],
    )
    def test_invalid(self, s, kind):
        with pytest.raises(ParseError) as exc:
            parse_lenient(s)
        assert exc.value.kind is kind


class TestRfc2822:

    @pytest.mark.parametrize(
        "s",
        [
            "Tue, 20 Jan 2015 17:35:20 -0800",
            "20 Jan 2015 17:35:20 -0800",
            "tue, 20 jan 2015 17:35:20 -0800",
            "Tue,20 Jan 2015 17:35:20 -0800",
            "Tue , 20 Jan 2015 17:35:20 -0800",
            "Tue ,20 Jan 2015 17:35:20 -0800",
            "Tue, 20 Jan 2015 17 : 35 : 20 -0800",
            "Tue,\t20  Jan\r\n 2015 17:35:20 -0800",
            "Tue, 20 Jan 2015 17:35:20 -0800 (PST)",
            "Tue, 20 (the day) Jan 2015 17:35:20 -0800",
            "Tue, 20 Jan 15 17:35:20 -0800",
            "Tue, 20 Jan 115 17:35:20 -0800",
            "Tue, 20 Jan 2015 17:35:20 PST",
            "Tue, 20 Jan 2015 17:35:20 pst",
        ],
    )
    def test_variants(self, s):
        assert parse_rfc2822(s) == (2015, 1, 20, 17, 35, 20, 0, -28_800)

    def test_no_seconds(self):
        assert parse_rfc2822("Tue, 20 Jan 2015 17:35 +0100") == (
            2015,
            1,
            20,
            17,
            35,
            0,
            0,
            3600,
        )

    @pytest.mark.parametrize(
        "year_text, year", [("49", 2049), ("50", 1950), ("99", 1999)]
    )
    def test_two_digit_years(self, year_text, year):
        assert parse_rfc2822(f"20 Jan {year_text} 17:35 +0000")[0] == year

    @pytest.mark.parametrize(
        "zone, offset",
        [
            ("GMT", 0),
            ("UT", 0),
            ("EST", -5 * 3600),
            ("EDT", -4 * 3600),
            ("CST", -6 * 3600),
            ("CDT", -5 * 3600),
            ("MST", -7 * 3600),
            ("MDT", -6 * 3600),
            ("PDT", -7 * 3600),
            # unknown and military zones are treated as -0000
            ("Z", 0),
            ("A", 0),
            ("CEST", 0),
        ],
    )
    def test_zones(self, zone, offset):
        assert parse_rfc2822(f"20 Jan 2015 17:35:20 {zone}")[7] == offset

    def test_leap_second(self):
        assert parse_rfc2822("Tue, 30 Jun 2015 23:59:60 +0000") == (
            2015,
            6,
            30,
            23,
            59,
            59,
            LEAP_NANOS,
            0,
        )

    @pytest.mark.parametrize(
        "s, kind",
        [
            ("", ParseErrorKind.TOO_SHORT),
            ("Tue,", ParseErrorKind.TOO_SHORT),
            ("Tue, 20 Jan 2015 17:35:20", ParseErrorKind.TOO_SHORT),
            ("Mon, 20 Jan 2015 17:35:20 -0800", ParseErrorKind.IMPOSSIBLE),
            ("Foo, 20 Jan 2015 17:35:20 -0800", ParseErrorKind.INVALID),
            ("Tuesday 20 Jan 2015 17:35:20 -0800", ParseErrorKind.INVALID),
            ("Tue, 20 Foo 2015 17:35:20 -0800", ParseErrorKind.INVALID),
            ("Tue, 200 Jan 2015 17:35:20 -0800", ParseErrorKind.INVALID),
            ("Tue, 20 Jan 20150 17:35:20 -0800", ParseErrorKind.INVALID),
            ("Tue, 20 Jan 2015 7:35:20 -0800", ParseErrorKind.INVALID),
            ("Tue, 20 Jan 2015 17:35:20:00 -0800", ParseErrorKind.INVALID),
            ("Tue, 20 Jan 2015 17:35:20 -080", ParseErrorKind.INVALID),
            ("Tue, 20 Jan 2015 17:35:20 +08:00", ParseErrorKind.INVALID),
            ("Tue, 20 Jan 2015 17:35:20 -0800 x", ParseErrorKind.INVALID),
            ("Tue, 20 Jan 2015 17:35:20 -0800 é", ParseErrorKind.INVALID),
            ("Tue, 32 Jan 2015 17:35:20 -0800", ParseErrorKind.OUT_OF_RANGE),
            ("Tue, 20 Jan 2015 24:00:00 -0800", ParseErrorKind.OUT_OF_RANGE),
            ("Tue, 20 Jan 2015 17:35:20 -0860", ParseErrorKind.OUT_OF_RANGE),
        ],
    )
    def test_invalid(self, s, kind):
        with pytest.raises(ParseError) as exc:
            parse_rfc2822(s)
        assert exc.value.kind is kind
