from dataclasses import dataclass
from enum import Enum
from typing import Any


class FieldType(str, Enum):
    """
    Type tags for a single field or a unified column.

    NUMBER is produced only by column unification (integer + float).
    """
    NULL = "null"
    INTEGER = "integer"
    FLOAT = "float"
    NUMBER = "number"
    DATE = "date"
    DATETIME = "datetime"
    STRING = "string"


@dataclass(frozen=True, order=True)
class Date:
    """
    Calendar date as found in the data.

    Not a datetime.date: day-of-month is only range checked (1..31),
    so values like 2021-02-31 must be representable.
    """
    year: int
    month: int
    day: int

    def isoformat(self) -> str:
        return f"{self.year:04d}-{self.month:02d}-{self.day:02d}"

    def __str__(self) -> str:
        return self.isoformat()


@dataclass(frozen=True, order=True)
class DateTime:
    year: int
    month: int
    day: int
    hour: int = 0
    minute: int = 0
    second: int = 0

    @classmethod
    def from_date(cls, value: Date) -> "DateTime":
        return cls(value.year, value.month, value.day)

    @property
    def date(self) -> Date:
        return Date(self.year, self.month, self.day)

    def isoformat(self, sep: str = " ") -> str:
        return (
            f"{self.date.isoformat()}{sep}"
            f"{self.hour:02d}:{self.minute:02d}:{self.second:02d}"
        )

    def __str__(self) -> str:
        return self.isoformat()


@dataclass(frozen=True)
class ClassifiedField:
    """
    Raw classification of one field: type tag, decoded value, original text.
    """
    type: FieldType
    value: Any
    text: str
