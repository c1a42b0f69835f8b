from typing import Any, Dict, List

from csvload.canonical.profile import ColumnProfile
from csvload.canonical.types import Date, DateTime


def to_jsonable(value: Any) -> Any:
    if isinstance(value, (Date, DateTime)):
        return value.isoformat()
    return value


def rows_to_jsonable(rows: List[List[Any]]) -> List[List[Any]]:
    return [[to_jsonable(v) for v in row] for row in rows]


def profiles_to_dicts(profiles: List[ColumnProfile]) -> List[Dict[str, Any]]:
    return [p.to_dict() for p in profiles]
