from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from csvload.canonical.types import FieldType


@dataclass
class ColumnProfile:
    """
    Per-column result of type inference.

    max_width is measured on the raw field text over every data row,
    including rows outside the sniffing window.
    """
    type: FieldType
    max_width: int
    null_count: int

    name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out = {
            "type": self.type.value,
            "max_width": self.max_width,
            "null_count": self.null_count,
        }
        if self.name is not None:
            out = {"name": self.name, **out}
        return out


@dataclass
class InferenceResult:
    profiles: List[ColumnProfile]
    # Decoded rows; a header row, when present, is passed through unchanged
    rows: List[List[Any]] = field(default_factory=list)
