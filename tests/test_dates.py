import datetime

import pytest

from fastrssparser import InvalidDateFormat, parse_date

UTC = datetime.timezone.utc


@pytest.mark.parametrize(
    "value, expected",
    [
        ("Mon, 01 Jan 2024 00:00:00 GMT", datetime.datetime(2024, 1, 1, tzinfo=UTC)),
        (
            "Tue, 02 Jan 2024 10:30:00 +0100",
            datetime.datetime(2024, 1, 2, 9, 30, tzinfo=UTC),
        ),
        ("02 Jan 2024 10:30:00 EST", datetime.datetime(2024, 1, 2, 15, 30, tzinfo=UTC)),
        ("2024-01-15T10:30:00Z", datetime.datetime(2024, 1, 15, 10, 30, tzinfo=UTC)),
        (
            "2024-01-15T10:30:00+02:00",
            datetime.datetime(2024, 1, 15, 8, 30, tzinfo=UTC),
        ),
        ("2024-01-15 10:30:00", datetime.datetime(2024, 1, 15, 10, 30, tzinfo=UTC)),
    ],
)
def test_parse_date_formats(value, expected):
    assert parse_date(value) == expected


def test_parse_date_returns_utc():
    assert parse_date("Tue, 02 Jan 2024 10:30:00 +0100").tzinfo == UTC


def test_hour_24_rolls_over():
    assert parse_date("Mon, 01 Jan 2024 24:00:00 GMT") == datetime.datetime(
        2024, 1, 2, tzinfo=UTC
    )


def test_feb_29_in_non_leap_year():
    assert parse_date("2023-02-29T12:00:00Z") == datetime.datetime(
        2023, 2, 28, 12, tzinfo=UTC
    )


def test_whitespace_is_collapsed():
    assert parse_date("  Mon,  01 Jan 2024\n 00:00:00 GMT ") == datetime.datetime(
        2024, 1, 1, tzinfo=UTC
    )


@pytest.mark.parametrize("value", ["", "   ", "not-a-date"])
def test_invalid_dates_raise(value):
    with pytest.raises(InvalidDateFormat):
        parse_date(value)


def test_invalid_date_is_a_value_error():
    with pytest.raises(ValueError):
        parse_date("not-a-date")


@pytest.mark.parametrize(
    "value",
    ["2024-13-01T24:00:00Z", "2024-02-30 24:00:00", "9999-12-31T24:00:00Z"],
)
def test_hour_24_on_impossible_dates_only_raises_invalid_format(value):
    try:
        parse_date(value)
    except InvalidDateFormat:
        pass


def test_hour_24_rollover_leaves_impossible_date_untouched():
    from fastrssparser.dates import _clean_candidate

    assert _clean_candidate("2024-13-01T24:00:00Z") == "2024-13-01T24:00:00Z"
    assert _clean_candidate("2024-01-31T24:00:00Z") == "2024-02-01T00:00:00Z"
