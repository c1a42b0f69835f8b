import math
import re
from typing import Any

from csvload.canonical.types import ClassifiedField, Date, DateTime, FieldType

INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")
FLOAT_PATTERN = re.compile(r"[+-]?[0-9]+\.[0-9]+(?:[eE][+-]?[0-9]+)?")
DATE_PATTERN = re.compile(r"([0-9]{4})-([0-9]{2})-([0-9]{2})")
TIME_PATTERN = re.compile(r"([0-9]{2}):([0-9]{2}):([0-9]{2})")

DATE_LENGTH = 10
DATETIME_SEPARATORS = (" ", "T")
MIN_YEAR, MAX_YEAR = 1000, 2500


def _string(text: str) -> ClassifiedField:
    return ClassifiedField(FieldType.STRING, text, text)


def _parse_number(text: str):
    """
    Integer first, then float. Returns None when neither applies.
    """
    if INTEGER_PATTERN.fullmatch(text):
        try:
            return ClassifiedField(FieldType.INTEGER, int(text), text)
        except ValueError:
            # beyond the interpreter's int digit limit
            return None
    if FLOAT_PATTERN.fullmatch(text):
        value = float(text)
        # "1.0e999" overflows to inf: not a usable float
        if math.isfinite(value):
            return ClassifiedField(FieldType.FLOAT, value, text)
    return None


def _parse_temporal(text: str) -> ClassifiedField:
    """
    Recognize YYYY-MM-DD and YYYY-MM-DD{ |T}HH:MM:SS[anything].
    Any range failure makes the value a plain string.
    """
    m = DATE_PATTERN.match(text)
    if not m:
        return _string(text)

    year, month, day = (int(g) for g in m.groups())
    # no per-month day count check: 2021-02-31 is a date
    if not (MIN_YEAR <= year <= MAX_YEAR and 1 <= month <= 12 and 1 <= day <= 31):
        return _string(text)

    if len(text) == DATE_LENGTH:
        return ClassifiedField(FieldType.DATE, Date(year, month, day), text)

    if text[DATE_LENGTH] not in DATETIME_SEPARATORS:
        return _string(text)

    t = TIME_PATTERN.match(text, DATE_LENGTH + 1)
    if not t:
        return _string(text)

    hour, minute, second = (int(g) for g in t.groups())
    if hour > 23 or minute > 59 or second > 59:
        return _string(text)

    # trailing bytes (e.g. "+01:00") are ignored
    return ClassifiedField(
        FieldType.DATETIME,
        DateTime(year, month, day, hour, minute, second),
        text,
    )


def classify_field(text: str, force_string: bool = False) -> ClassifiedField:
    """
    Classify one raw field and decode it.

    - "" -> null (even when force_string is set)
    - force_string -> the literal text, tagged string
    - leading digit/sign -> integer, then float, then date/datetime/string
    - otherwise date/datetime/string
    """
    if text == "":
        return ClassifiedField(FieldType.NULL, None, text)

    if force_string:
        return _string(text)

    if text[0].isdigit() or text[0] in "+-":
        number = _parse_number(text)
        if number is not None:
            return number

    return _parse_temporal(text)


def coerce_to_column_type(field: ClassifiedField, column_type: FieldType) -> Any:
    """
    Decoded value of a field once its column's unified type is known.
    """
    if field.type is FieldType.NULL:
        return None

    if column_type is FieldType.STRING or field.type is FieldType.STRING:
        return field.text

    if column_type in (FieldType.FLOAT, FieldType.NUMBER):
        try:
            return float(field.value)
        except OverflowError:
            # integer too large for a double
            return field.text

    if column_type is FieldType.DATETIME and field.type is FieldType.DATE:
        return DateTime.from_date(field.value)

    return field.value
