import os
from typing import Iterable, List, Optional

from csvload.adapters.line_source import iter_file_lines, iter_text_lines
from csvload.canonical.profile import ColumnProfile
from csvload.canonical.table import CsvTable
from csvload.canonical.types import FieldType
from csvload.inference.column_profiler import infer_column_types, max_field_lengths
from csvload.inference.config import InferenceConfig
from csvload.observability.logger import log_event
from csvload.parsing.document import fix_lengths as fix_row_lengths
from csvload.parsing.document import parse_document


# ------------------------------------------------------------------
# CSV Adapter
# ------------------------------------------------------------------
class CSVAdapter:
    """
    CSV ingestion adapter.
    Responsibilities:
    - Read lines from a file or an in-memory document
    - Tokenize them into rows (fails with the offending line number)
    - Optionally fix every row to the header width
    - Guess column types, widths and null counts
    - Produce a CsvTable
    DOES NOT:
    - Clean up column names
    - Generate SQL
    """
    def __init__(
        self,
        file_path: Optional[str] = None,
        content: Optional[str] = None,
        entity_name: Optional[str] = None,
        has_header: bool = True,
        fix_lengths: bool = True,
        guess_types: bool = True,
        inference: Optional[InferenceConfig] = None,
        encoding: str = "utf-8",
    ):
        if (file_path is None) == (content is None):
            raise ValueError("CSVAdapter needs exactly one of file_path or content")

        self.file_path = file_path
        self.content = content
        self.has_header = has_header
        self.fix_lengths = fix_lengths
        self.guess_types = guess_types
        self.inference = inference or InferenceConfig()
        self.encoding = encoding

        if entity_name:
            self.entity_name = entity_name
        elif file_path:
            self.entity_name = os.path.splitext(os.path.basename(file_path))[0]
        else:
            self.entity_name = "csv"

    # --------------------------------------------------
    # Entry point
    # --------------------------------------------------
    def parse(self) -> CsvTable:
        rows = self.read_rows()

        if self.guess_types:
            result = infer_column_types(self.has_header, rows, self.inference)
            columns = result.profiles
            data_rows = result.rows[1:] if self.has_header and rows else result.rows
        else:
            columns = self._untyped_columns(rows)
            data_rows = rows[1:] if self.has_header else rows

        header = list(rows[0]) if self.has_header and rows else None

        return CsvTable(
            name=self.entity_name,
            header=header,
            columns=columns,
            rows=data_rows,
            metadata={
                "row_count": len(data_rows),
                "source_file": self.file_path,
                "has_header": self.has_header,
                "guess_types": self.guess_types,
                "inference": self.inference.to_dict() if self.guess_types else None,
            },
        )

    def read_rows(self) -> List[List[str]]:
        """
        Parse the whole source; raises LineParseError on the first bad line.
        """
        result = parse_document(self._lines(), encoding=self.encoding)
        if not result.ok:
            log_event("CSV_PARSE_FAILED", {
                "entity": self.entity_name,
                "source_file": self.file_path,
                "line_number": result.error.line_number,
                "reason": result.error.reason,
            })
        rows = result.unwrap()

        if self.fix_lengths:
            rows = fix_row_lengths(rows)
        return rows

    # --------------------------------------------------
    # Internal helpers
    # --------------------------------------------------
    def _lines(self) -> Iterable:
        if self.file_path is not None:
            return iter_file_lines(self.file_path)
        return iter_text_lines(self.content)

    def _untyped_columns(self, rows: List[List[str]]) -> List[ColumnProfile]:
        header = rows[0] if self.has_header and rows else None
        return [
            ColumnProfile(
                type=FieldType.STRING,
                max_width=width,
                null_count=0,
                name=header[idx] if header and idx < len(header) else None,
            )
            for idx, width in enumerate(max_field_lengths(self.has_header, rows))
        ]
