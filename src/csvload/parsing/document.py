from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Union

from csvload.parsing.line_tokenizer import LineScanner
from csvload.utils.exceptions import LineParseError

RawLine = Union[str, bytes]


@dataclass(frozen=True)
class ParseError:
    line_number: int            # 1-based physical line number
    reason: str
    line: Optional[RawLine] = None


@dataclass
class ParseResult:
    """
    Outcome of a document parse: either all rows, or a single error.
    """
    rows: List[List[str]] = field(default_factory=list)
    error: Optional[ParseError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> List[List[str]]:
        if self.error is not None:
            raise LineParseError(
                self.error.line_number,
                self.error.reason,
                self.error.line,
            )
        return self.rows


def _decode(raw: RawLine, encoding: str) -> str:
    if isinstance(raw, bytes):
        return raw.decode(encoding)
    return raw


def parse_document(lines: Iterable[RawLine], encoding: str = "utf-8") -> ParseResult:
    """
    Tokenize every line supplied by a line source.

    A physical line that ends inside a quoted field is joined with the
    following line(s), keeping the line break inside the field.
    Read or decode failures abort the parse; no partial rows are returned.
    """
    rows: List[List[str]] = []
    scanner = LineScanner()
    line_number = 0
    source = iter(lines)

    while True:
        try:
            raw = next(source)
        except StopIteration:
            break
        except OSError as e:
            return ParseResult(error=ParseError(line_number + 1, f"read failed: {e}"))

        line_number += 1
        try:
            text = _decode(raw, encoding)
        except UnicodeDecodeError as e:
            return ParseResult(
                error=ParseError(
                    line_number,
                    f"cannot decode line as {encoding}: {e.reason} at byte {e.start}",
                    raw,
                )
            )

        row = scanner.feed(text)
        if row is not None:
            rows.append(row)

    # unterminated quote at end of input: keep what was scanned
    row = scanner.finish()
    if row is not None:
        rows.append(row)

    return ParseResult(rows=rows)


def fix_column_count(target_width: int, row: List[str]) -> List[str]:
    """
    Truncate or pad (with "") a row to exactly target_width fields.
    """
    if len(row) >= target_width:
        return list(row[:target_width])
    return list(row) + [""] * (target_width - len(row))


def fix_lengths(rows: List[List[str]]) -> List[List[str]]:
    """
    Make every row as wide as the first (header) row.
    """
    if not rows:
        return []
    width = len(rows[0])
    return [fix_column_count(width, row) for row in rows]
