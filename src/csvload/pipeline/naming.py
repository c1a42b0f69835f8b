"""
Pipeline step: raw CSV header -> SQL-safe column names

Rules:
- Spaces become underscores
- Only [A-Za-z0-9_] are kept, everything else is dropped
- Case is preserved
"""

import re
from typing import List

_DISALLOWED = re.compile(r"[^A-Za-z0-9_]")


def cleanup_header(name: str) -> str:
    return _DISALLOWED.sub("", name.replace(" ", "_"))


def cleanup_headers(names: List[str]) -> List[str]:
    return [cleanup_header(n) for n in names]
