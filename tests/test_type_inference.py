import pytest

from csvload.canonical.types import ClassifiedField, Date, DateTime, FieldType
from csvload.inference.type_inference import classify_field, coerce_to_column_type


@pytest.mark.parametrize(
    "text, expected_type, expected_value",
    [
        ("1", FieldType.INTEGER, 1),
        ("-17", FieldType.INTEGER, -17),
        ("+5", FieldType.INTEGER, 5),
        ("123456789012345678901234567890", FieldType.INTEGER, 123456789012345678901234567890),
        ("1.0", FieldType.FLOAT, 1.0),
        ("-2.5", FieldType.FLOAT, -2.5),
        ("1.5e3", FieldType.FLOAT, 1500.0),
        ("2021-01-01", FieldType.DATE, Date(2021, 1, 1)),
        ("2021-02-31", FieldType.DATE, Date(2021, 2, 31)),
        ("2021-01-01 00:00:00", FieldType.DATETIME, DateTime(2021, 1, 1, 0, 0, 0)),
        ("2021-01-01 00:00:00+01:00", FieldType.DATETIME, DateTime(2021, 1, 1, 0, 0, 0)),
        ("2021-01-01 00:00:00-01:00", FieldType.DATETIME, DateTime(2021, 1, 1, 0, 0, 0)),
        ("2021-06-30T23:59:59Z", FieldType.DATETIME, DateTime(2021, 6, 30, 23, 59, 59)),
        ("abc", FieldType.STRING, "abc"),
        ("", FieldType.NULL, None),
    ],
)
def test_classify_field(text, expected_type, expected_value):
    field = classify_field(text)
    assert field == ClassifiedField(expected_type, expected_value, text)


@pytest.mark.parametrize(
    "text",
    [
        "0999-01-01",           # year below range
        "2501-01-01",           # year above range
        "2021-13-01",
        "2021-00-10",
        "2021-01-32",
        "2021-01-00",
        "2021-01-01 24:00:00",
        "2021-01-01 10:60:00",
        "2021-01-01 10:00:60",
        "2021-01-01X",
        "2021-01-01 10:20",
        "2021-1-01",
        "1e5",
        "1.",
        "-",
        "+x",
        "12abc",
        " 1",
    ],
)
def test_classify_field_falls_back_to_string(text):
    assert classify_field(text).type is FieldType.STRING
    assert classify_field(text).value == text


def test_force_string_keeps_literal_text_but_not_for_empty():
    assert classify_field("42", force_string=True) == ClassifiedField(FieldType.STRING, "42", "42")
    assert classify_field("", force_string=True).type is FieldType.NULL


@pytest.mark.parametrize("text", ["7", "-3.25", "2020-05-17", "2020-05-17 08:09:10"])
def test_reclassifying_canonical_text_gives_same_type(text):
    field = classify_field(text)
    value = field.value
    canonical = value.isoformat() if isinstance(value, (Date, DateTime)) else str(value)
    assert classify_field(canonical).type is field.type


def test_coerce_to_column_type():
    assert coerce_to_column_type(classify_field("2"), FieldType.NUMBER) == 2.0
    assert isinstance(coerce_to_column_type(classify_field("2"), FieldType.NUMBER), float)
    assert coerce_to_column_type(classify_field("2"), FieldType.INTEGER) == 2
    assert coerce_to_column_type(classify_field("2"), FieldType.STRING) == "2"
    assert coerce_to_column_type(classify_field(""), FieldType.INTEGER) is None
    assert coerce_to_column_type(classify_field("2021-01-02"), FieldType.DATETIME) == DateTime(2021, 1, 2)
    assert coerce_to_column_type(classify_field("2021-01-02"), FieldType.DATE) == Date(2021, 1, 2)
    # past the sniffing window values stay literal text
    assert coerce_to_column_type(classify_field("5", force_string=True), FieldType.INTEGER) == "5"


def test_date_rendering():
    assert Date(2021, 2, 3).isoformat() == "2021-02-03"
    assert DateTime(2021, 2, 3, 4, 5, 6).isoformat() == "2021-02-03 04:05:06"
    assert DateTime(2021, 2, 3, 4, 5, 6).isoformat("T") == "2021-02-03T04:05:06"
    assert DateTime.from_date(Date(2021, 2, 3)).date == Date(2021, 2, 3)


@pytest.mark.parametrize("text", ["1.0e999", "-1.0e999", "+9.9E400"])
def test_overflowing_float_is_a_string(text):
    assert classify_field(text) == ClassifiedField(FieldType.STRING, text, text)


def test_huge_integer_in_number_column_keeps_text():
    text = "1" + "0" * 400
    field = classify_field(text)
    assert field.type is FieldType.INTEGER
    assert coerce_to_column_type(field, FieldType.NUMBER) == text
