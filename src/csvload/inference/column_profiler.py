"""
Column type inference over a table of raw field values.

For each column:
- every data row is classified; rows past the sniffing window are taken
  as literal strings and do not vote on the column type
- within the window, once a string is seen all later rows count as string
- nulls are counted apart, then the non-null types are merged:
    {T}                -> T
    {date, datetime}   -> datetime
    {float, integer}   -> number
    anything else      -> string
- the null threshold gate depends on InferenceConfig.null_policy
- max_width is the longest raw text over all data rows
"""

from typing import Iterable, List, Optional, Sequence, Set

from csvload.canonical.profile import ColumnProfile, InferenceResult
from csvload.canonical.types import ClassifiedField, FieldType
from csvload.inference.config import InferenceConfig, NullPolicy
from csvload.inference.type_inference import classify_field, coerce_to_column_type

_PAIR_MERGES = {
    frozenset({FieldType.DATE, FieldType.DATETIME}): FieldType.DATETIME,
    frozenset({FieldType.FLOAT, FieldType.INTEGER}): FieldType.NUMBER,
}


def unify_types(types: Iterable[FieldType]) -> FieldType:
    """
    Merge the non-null types observed in one column.
    """
    observed = frozenset(t for t in types if t is not FieldType.NULL)
    if len(observed) == 1:
        return next(iter(observed))
    return _PAIR_MERGES.get(observed, FieldType.STRING)


class _ColumnTally:
    def __init__(self):
        self.types: Set[FieldType] = set()
        self.null_count = 0
        self.max_width = 0
        self.saw_string = False

    def add(self, field: ClassifiedField, sniffed: bool):
        self.max_width = max(self.max_width, len(field.text))

        if field.type is FieldType.NULL:
            self.null_count += 1
            return
        if not sniffed:
            return

        if self.saw_string or field.type is FieldType.STRING:
            self.saw_string = True
            self.types.add(FieldType.STRING)
        else:
            self.types.add(field.type)

    def resolve(self, total_rows: int, config: InferenceConfig) -> FieldType:
        if not self.types:
            return FieldType.STRING

        merged = unify_types(self.types)
        if config.null_policy is NullPolicy.MERGE_ONLY or not self.null_count:
            return merged

        pct_null = self.null_count / total_rows * 100 if total_rows else 100.0
        if pct_null > config.null_threshold_pct:
            return FieldType.STRING
        return merged


def _column_count(has_header: bool, rows: Sequence[Sequence[str]]) -> int:
    if not rows:
        return 0
    if has_header:
        return len(rows[0])
    return max(len(row) for row in rows)


# a cell missing from a short row counts as empty
_MISSING = ClassifiedField(FieldType.NULL, None, "")


def infer_column_types(
    has_header: bool,
    rows: Sequence[Sequence[str]],
    config: Optional[InferenceConfig] = None,
) -> InferenceResult:
    """
    Infer one ColumnProfile per column and decode every data row.

    The input is not modified. A header row is excluded from inference and
    returned as-is at the top of the decoded rows.
    """
    config = config or InferenceConfig()
    width = _column_count(has_header, rows)
    header = list(rows[0]) if has_header and rows else None
    data_rows = rows[1:] if has_header else rows

    tallies = [_ColumnTally() for _ in range(width)]
    classified: List[List[ClassifiedField]] = []

    for row_number, row in enumerate(data_rows, start=1):
        sniffed = row_number <= config.sniff_row_limit
        fields = [classify_field(text, force_string=not sniffed) for text in row]
        for idx, tally in enumerate(tallies):
            tally.add(fields[idx] if idx < len(fields) else _MISSING, sniffed)
        classified.append(fields)

    total = len(data_rows)
    profiles = [
        ColumnProfile(
            type=tally.resolve(total, config),
            max_width=tally.max_width,
            null_count=tally.null_count,
            name=header[idx] if header is not None and idx < len(header) else None,
        )
        for idx, tally in enumerate(tallies)
    ]

    decoded: List[list] = [header] if header is not None else []
    for fields in classified:
        decoded.append([
            coerce_to_column_type(
                field,
                profiles[idx].type if idx < width else FieldType.STRING,
            )
            for idx, field in enumerate(fields)
        ])

    return InferenceResult(profiles=profiles, rows=decoded)


def max_field_lengths(has_header: bool, rows: Sequence[Sequence[str]]) -> List[int]:
    """
    Longest raw text per column, header row excluded when has_header.
    """
    width = _column_count(has_header, rows)
    data_rows = rows[1:] if has_header else rows
    lengths = [0] * width
    for row in data_rows:
        for idx, text in enumerate(row[:width]):
            lengths[idx] = max(lengths[idx], len(text))
    return lengths
