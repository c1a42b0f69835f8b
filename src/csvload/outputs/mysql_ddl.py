from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple, Union

from csvload.canonical.profile import ColumnProfile
from csvload.utils.exceptions import InvalidOptionError

ColumnTypeOverride = Union[str, Tuple[str, int], List]

ALLOWED_COLUMN_TYPES = {
    "blob",
    "date",
    "datetime",
    "integer",
    "float",
    "number",
    "string",
}

_SQL_TYPES = {
    "date": "DATE",
    "datetime": "DATETIME",
    "integer": "BIGINT",
    "float": "DOUBLE",
    "number": "DOUBLE",
}


@dataclass(frozen=True)
class ColumnSpec:
    name: str
    type: str
    width: int


def parse_column_type(name: str, value: ColumnTypeOverride) -> Tuple[str, Optional[int]]:
    """
    Accepts "integer" or ("string", 64) / ["string", 64] (YAML form).
    """
    if isinstance(value, str):
        col_type, width = value, None
    elif isinstance(value, (list, tuple)) and len(value) == 2:
        col_type, width = value
        if isinstance(width, bool) or not isinstance(width, int) or width < 0:
            raise InvalidOptionError("col_types", f"column '{name}': width must be a non-negative integer")
    else:
        raise InvalidOptionError("col_types", f"column '{name}': expected TYPE or [TYPE, WIDTH], got {value!r}")

    col_type = str(col_type).lower()
    if col_type not in ALLOWED_COLUMN_TYPES:
        raise InvalidOptionError(
            "col_types",
            f"column '{name}': unknown type '{col_type}'. Allowed: {sorted(ALLOWED_COLUMN_TYPES)}",
        )
    return col_type, width


def quote_identifier(name: str) -> str:
    return "`" + name.replace("`", "``") + "`"


class MySQLDDLGenerator:
    """
    Generates MySQL DDL statements from column profiles.

    Responsibilities:
    - Map inferred column types to MySQL column types
    - Apply per-column type/width overrides
    - Promote wide text columns to BLOB
    - CREATE / DROP / copy-structure / PRIMARY KEY statements
    """

    def __init__(
        self,
        columns: Sequence[ColumnProfile],
        col_types: Optional[Dict[str, ColumnTypeOverride]] = None,
        blob_size: int = 1000,
        primary_key: Sequence[str] = (),
    ):
        self.columns = list(columns)
        self.col_types = {
            name: parse_column_type(name, value)
            for name, value in (col_types or {}).items()
        }
        self.blob_size = blob_size
        self.primary_key = list(primary_key)

        for col in self.columns:
            if not col.name:
                raise ValueError("Every column needs a name to generate DDL")

    def column_specs(self) -> List[ColumnSpec]:
        specs = []
        for col in self.columns:
            col_type, width = self.col_types.get(col.name, (col.type.value, None))
            specs.append(ColumnSpec(col.name, col_type, col.max_width if width is None else width))
        return specs

    def render_column(self, spec: ColumnSpec) -> str:
        name = quote_identifier(spec.name)
        if spec.type == "blob" or spec.width > self.blob_size:
            return f"{name} BLOB"
        if spec.type in _SQL_TYPES:
            return f"{name} {_SQL_TYPES[spec.type]}"
        return f"{name} VARCHAR({spec.width})"

    # --------------------------------------------------
    # TABLE DDL
    # --------------------------------------------------

    def generate_create_table(self, table: str) -> str:
        columns = ",\n  ".join(self.render_column(s) for s in self.column_specs())
        return f"CREATE TABLE {quote_identifier(table)} (\n  {columns}\n);"

    def generate_drop_table(self, table: str) -> str:
        return f"DROP TABLE IF EXISTS {quote_identifier(table)};"

    def generate_copy_structure(self, target: str, source: str) -> str:
        return (
            f"CREATE TABLE {quote_identifier(target)} AS "
            f"SELECT * FROM {quote_identifier(source)} WHERE false;"
        )

    def generate_primary_key(self, table: str) -> Optional[str]:
        if not self.primary_key:
            return None
        keys = ",".join(quote_identifier(k) for k in self.primary_key)
        return f"ALTER TABLE {quote_identifier(table)} ADD PRIMARY KEY ({keys});"

    def generate(self, table: str) -> str:
        """
        Standalone DDL script: drop, create, primary key.
        """
        statements = [self.generate_drop_table(table), self.generate_create_table(table)]
        pk = self.generate_primary_key(table)
        if pk:
            statements.append(pk)
        return "\n".join(statements) + "\n"
