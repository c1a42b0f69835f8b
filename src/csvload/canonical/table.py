from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from csvload.canonical.profile import ColumnProfile


@dataclass
class CsvTable:
    """
    Canonical representation of one parsed CSV source.
    Produced by the CSV adapter, consumed by the outputs.
    """
    name: str
    header: Optional[List[str]]
    columns: List[ColumnProfile]

    # Data rows only (header excluded), decoded when types were guessed
    rows: List[List[Any]] = field(default_factory=list)

    # e.g. row_count, source_file, sniff_row_limit
    metadata: Dict = field(default_factory=dict)

    @property
    def column_names(self) -> List[str]:
        if self.header is not None:
            return list(self.header)
        return [f"{self.name}_{idx}" for idx in range(1, len(self.columns) + 1)]
