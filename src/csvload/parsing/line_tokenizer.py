"""
Line tokenizer: one line of delimited text -> list of field strings.

Rules:
- ',' separates fields outside quotes; the last field needs no delimiter.
- A '"' at the start of a field (after optional spaces) opens a quoted
  section, closed by the next single '"'. Inside it '""' is a literal quote
  and a backslash is kept verbatim (it escapes nothing).
- A '"' anywhere else in an unquoted field is an ordinary character.
- Leading/trailing ASCII spaces of every field are trimmed, quoted or not.
- Trailing CR, LF and spaces of the line are dropped before scanning.
- Total: every input yields at least one field ("" -> [""]).
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

DELIMITER = ","
QUOTE = '"'
ESCAPED_QUOTE = '""'
TRIM_CHAR = " "
EOL_CHARS = "\r\n "


class ScanState(Enum):
    UNQUOTED = "unquoted"
    QUOTED = "quoted"


@dataclass(frozen=True)
class LineScan:
    fields: List[str]
    # True when the line ended inside a quoted section
    open_quote: bool


def trim_line_end(text: str) -> str:
    return text.rstrip(EOL_CHARS)


def _finish_field(parts: List[str]) -> str:
    return "".join(parts).strip(TRIM_CHAR)


class LineScanner:
    """
    Two-state scanner that keeps its state between physical lines, so a
    quoted field spanning several lines is scanned once, line by line.

    feed() returns the finished row, or None while a quoted field is open.
    """

    def __init__(self):
        self.state = ScanState.UNQUOTED
        self.fields: List[str] = []
        self.parts: List[str] = []
        self.blank = True
        # line end trimmed off while a quoted field was open
        self.tail = ""

    @property
    def open_quote(self) -> bool:
        return self.state is ScanState.QUOTED

    def _append(self, ch: str):
        self.parts.append(ch)
        if ch != TRIM_CHAR:
            self.blank = False

    def _end_field(self):
        self.fields.append(_finish_field(self.parts))
        self.parts = []
        self.blank = True

    def _take_row(self) -> List[str]:
        self._end_field()
        row, self.fields = self.fields, []
        self.state = ScanState.UNQUOTED
        return row

    def feed(self, text: str) -> Optional[List[str]]:
        line = trim_line_end(text)
        if self.open_quote:
            self.parts.extend(self.tail)
            self.tail = ""

        i, n = 0, len(line)
        while i < n:
            ch = line[i]

            if self.state is ScanState.QUOTED:
                if ch != QUOTE:
                    self._append(ch)
                elif line.startswith(ESCAPED_QUOTE, i):
                    self._append(QUOTE)
                    i += 2
                    continue
                else:
                    self.state = ScanState.UNQUOTED

            elif ch == DELIMITER:
                self._end_field()

            elif ch == QUOTE and self.blank:
                # leading spaces before the opening quote are not part of the value
                self.parts = []
                self.state = ScanState.QUOTED

            else:
                self._append(ch)

            i += 1

        if self.open_quote:
            self.tail = text[len(line):]
            return None
        return self._take_row()

    def partial_fields(self) -> List[str]:
        """
        Fields scanned so far, the open quoted field included.
        """
        return self.fields + [_finish_field(self.parts)]

    def finish(self) -> Optional[List[str]]:
        """
        Close a quoted field left open at end of input; None when nothing is open.
        """
        if not self.open_quote:
            return None
        self.parts = list("".join(self.parts).rstrip(EOL_CHARS))
        self.tail = ""
        return self._take_row()


def scan_line(text: str) -> LineScan:
    """
    Run the two-state scanner over one line.
    """
    scanner = LineScanner()
    row = scanner.feed(text)
    if row is None:
        return LineScan(fields=scanner.partial_fields(), open_quote=True)
    return LineScan(fields=row, open_quote=False)


def tokenize_line(text: str) -> List[str]:
    """
    Split one line into trimmed, unquoted field values.
    """
    return scan_line(text).fields
