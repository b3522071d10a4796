import pytest

from services.validators import (
    InvalidDateFormat,
    InvalidFieldName,
    normalize_date_value,
    parse_flexible_date,
    validate_field_name,
)


@pytest.mark.parametrize(
    "value, expected",
    [
        ("29/02/2024", "2024-02-29"),
        ("1/3/2020", "2020-03-01"),
        ("01-03-2020", "2020-03-01"),
        ("01.03.2020", "2020-03-01"),
        ("01 03   2020", "2020-03-01"),
        (" 5/6/99 ", "1999-06-05"),
        ("5/6/50", "1950-06-05"),
        ("5/6/49", "2049-06-05"),
        ("31/12/2023", "2023-12-31"),
    ],
)
def test_parse_flexible_date(value, expected):
    assert parse_flexible_date(value) == expected


@pytest.mark.parametrize(
    "value",
    [
        "30/02/2024",
        "29/02/2023",
        "31/04/2024",
        "32/01/2024",
        "0/01/2024",
        "10/13/2024",
        "10/0/2024",
        "10/2024",
        "1/2/3/4",
        "aa/bb/cccc",
        "",
        "12/05/20x4",
    ],
)
def test_parse_flexible_date_rejects(value):
    with pytest.raises(InvalidDateFormat):
        parse_flexible_date(value)


def test_invalid_date_is_value_error():
    with pytest.raises(ValueError, match="Некорректная дата"):
        parse_flexible_date("30/02/2024")


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, None),
        ("", None),
        ("   ", None),
        ("2024-02-29", "2024-02-29"),
        ("29/02/2024", "2024-02-29"),
    ],
)
def test_normalize_date_value(value, expected):
    assert normalize_date_value(value) == expected


def test_normalize_date_value_rejects_bad_iso():
    with pytest.raises(InvalidDateFormat):
        normalize_date_value("2023-02-29")


@pytest.mark.parametrize("name", ["allergies", "_x", "Field2", "a_b_c"])
def test_validate_field_name_accepts(name):
    assert validate_field_name(name) == name


@pytest.mark.parametrize(
    "name", ["", "2fast", "bad-name", "with space", "x;drop", "ёж", "tail\n", None]
)
def test_validate_field_name_rejects(name):
    with pytest.raises(InvalidFieldName):
        validate_field_name(name)
