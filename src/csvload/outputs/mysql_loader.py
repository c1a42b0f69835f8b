"""
Bulk loading of a CSV file into a MySQL table over a DB-API 2.0 connection
(any driver using the "format" paramstyle, e.g. PyMySQL or mysqlclient).

Load types:
- recreate    : load into <table>_tmp, then atomically swap it in with RENAME
- replace     : load into <table>_tmp, then REPLACE INTO <table>
- ignore_dups : load into <table>_tmp, then INSERT IGNORE INTO <table>
- update_dups : load into <table>_tmp, then INSERT ... ON DUPLICATE KEY UPDATE
- upsert      : insert straight into <table> with ON DUPLICATE KEY UPDATE
"""

import logging
import os
from dataclasses import asdict, dataclass, field, replace
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Union

from csvload.adapters.csv_adapter import CSVAdapter
from csvload.canonical.types import Date, DateTime
from csvload.inference.config import InferenceConfig
from csvload.observability.logger import RequestTimer, generate_request_id, log_event
from csvload.outputs.mysql_ddl import MySQLDDLGenerator, parse_column_type, quote_identifier
from csvload.pipeline.naming import cleanup_headers
from csvload.utils.exceptions import (
    InvalidOptionError,
    LoadError,
    PrimaryKeyNotFoundError,
    TableNotFoundError,
)


class LoadType(str, Enum):
    RECREATE = "recreate"
    REPLACE = "replace"
    IGNORE_DUPS = "ignore_dups"
    UPDATE_DUPS = "update_dups"
    UPSERT = "upsert"

    @classmethod
    def parse(cls, value: Any) -> "LoadType":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise InvalidOptionError(
                "load_type", f"must be one of {[t.value for t in cls]}, got {value!r}"
            ) from None


def _positive_int(option: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidOptionError(option, f"must be a positive integer, got {value!r}")
    return value


@dataclass
class LoadOptions:
    """
    Options for MySQLLoader. Validated on construction.
    """
    load_type: LoadType = LoadType.RECREATE
    batch_size: int = 100                   # records per INSERT statement
    blob_size: int = 1000                   # width at which VARCHAR becomes BLOB
    create_table: bool = True               # allow creating a missing table
    col_types: Dict[str, Any] = field(default_factory=dict)
    transforms: Dict[str, Callable[[Any], Any]] = field(default_factory=dict)
    guess_types: bool = False
    inference: InferenceConfig = field(default_factory=InferenceConfig)
    primary_key: Union[str, Sequence[str]] = field(default_factory=list)
    drop_temp_table: bool = True
    encoding: Optional[str] = None
    save_create_sql_to_file: Union[bool, str, None] = None

    def __post_init__(self):
        self.load_type = LoadType.parse(self.load_type)
        _positive_int("batch_size", self.batch_size)
        _positive_int("blob_size", self.blob_size)

        if isinstance(self.primary_key, str):
            self.primary_key = [self.primary_key]
        elif isinstance(self.primary_key, (list, tuple)) and all(isinstance(k, str) for k in self.primary_key):
            self.primary_key = list(self.primary_key)
        else:
            raise InvalidOptionError("primary_key", f"expected a column name or a list of names, got {self.primary_key!r}")

        for name, value in self.col_types.items():
            parse_column_type(name, value)

        for name, fn in self.transforms.items():
            if not callable(fn):
                raise InvalidOptionError("transforms", f"transform for column '{name}' is not callable")

        if isinstance(self.inference, Mapping):
            self.inference = InferenceConfig.from_mapping(self.inference)

    @classmethod
    def from_mapping(cls, options: Optional[Mapping[str, Any]]) -> "LoadOptions":
        options = dict(options or {})
        allowed = set(cls.__dataclass_fields__) - {"transforms"}
        unknown = sorted(set(options) - allowed)
        if unknown:
            raise InvalidOptionError(unknown[0], "unknown load option")
        return cls(**options)


@dataclass
class LoadResult:
    columns: List[str]
    affected: int
    selected: int


def _db_value(value: Any) -> Any:
    if value == "":
        return None
    if isinstance(value, (Date, DateTime)):
        return value.isoformat()
    return value


class MySQLLoader:
    """
    Loads CSV files into MySQL tables.
    """

    def __init__(self, connection, options: Optional[LoadOptions] = None):
        self.connection = connection
        self.options = options or LoadOptions()

    # --------------------------------------------------
    # Entry point
    # --------------------------------------------------
    def load(self, file_path: str, table: str) -> LoadResult:
        opts = self.options
        request_id = generate_request_id("load")
        timer = RequestTimer()

        csv_table = CSVAdapter(
            file_path=file_path,
            entity_name=table,
            has_header=True,
            fix_lengths=True,
            guess_types=opts.guess_types,
            inference=opts.inference,
        ).parse()
        timer.mark("parse")

        if not csv_table.header:
            raise LoadError(f"CSV file {file_path} has no header row")

        header = cleanup_headers(csv_table.header)
        for key in opts.primary_key:
            if key not in header:
                raise PrimaryKeyNotFoundError(f"Primary key column '{key}' not found in header {header}")

        columns = [replace(col, name=name) for col, name in zip(csv_table.columns, header)]
        ddl = MySQLDDLGenerator(
            columns,
            col_types=opts.col_types,
            blob_size=opts.blob_size,
            primary_key=opts.primary_key,
        )

        log_event("MYSQL_LOAD_STARTED", {
            "request_id": request_id,
            "table": table,
            "source_file": file_path,
            "load_type": opts.load_type.value,
            "columns": [asdict(s) for s in ddl.column_specs()],
        })

        cursor = self.connection.cursor()
        try:
            exists = self._table_exists(cursor, table)
            target = table if opts.load_type is LoadType.UPSERT else f"{table}_tmp"

            create_sql = self._create_statements(ddl, table, target, exists)
            self._save_create_sql(file_path, create_sql)
            for sql in create_sql:
                self._execute(cursor, sql)
            timer.mark("create")

            if exists and opts.load_type is LoadType.UPDATE_DUPS:
                self._relax_not_null(cursor, table, target)

            for sql in self._encoding_statements():
                self._execute(cursor, sql)

            inserted = self._insert_rows(cursor, table, target, header, csv_table.rows)
            timer.mark("insert")
            affected, selected = self._merge(cursor, table, target, header, exists, inserted)
            self.connection.commit()
            timer.mark("merge")
        finally:
            cursor.close()

        log_event("MYSQL_LOAD_COMPLETED", {
            "request_id": request_id,
            "table": table,
            "inserted": inserted,
            "affected": affected,
            "selected": selected,
            "phases": timer.phases,
            "duration_seconds": timer.duration(),
        })
        return LoadResult(columns=header, affected=affected, selected=selected)

    # --------------------------------------------------
    # Statement helpers
    # --------------------------------------------------
    def _execute(self, cursor, sql: str, params=None):
        log_event("SQL_GENERATED", {"sql": sql}, level=logging.DEBUG)
        try:
            cursor.execute(sql, params)
        except Exception as e:
            raise LoadError(f"Statement failed: {e}", sql=sql) from e

    def _table_exists(self, cursor, table: str) -> bool:
        self._execute(
            cursor,
            "SELECT count(*) FROM information_schema.tables "
            "WHERE table_schema=database() AND table_name=%s",
            (table,),
        )
        (count,) = cursor.fetchone()
        return count > 0

    def _create_statements(self, ddl: MySQLDDLGenerator, table: str, target: str, exists: bool) -> List[str]:
        load_type = self.options.load_type
        statements: List[str] = []

        if load_type is not LoadType.UPSERT:
            statements.append(ddl.generate_drop_table(target))

        if exists and load_type is LoadType.UPSERT:
            return statements

        if exists and (load_type is not LoadType.RECREATE or not self.options.create_table):
            statements.append(ddl.generate_copy_structure(target, table))
        elif not exists and not self.options.create_table and load_type is not LoadType.RECREATE:
            raise TableNotFoundError(f"Table {table} doesn't exist and creation not allowed!")
        else:
            statements.append(ddl.generate_create_table(target))

        pk = ddl.generate_primary_key(target)
        if pk:
            statements.append(pk)
        return statements

    def _save_create_sql(self, file_path: str, statements: List[str]):
        dest = self.options.save_create_sql_to_file
        if not dest:
            return
        if dest is True:
            dest = os.path.splitext(file_path)[0] + ".sql"
        with open(dest, "w", encoding="utf-8") as f:
            f.write("\n".join(statements) + "\n")

    def _relax_not_null(self, cursor, table: str, target: str):
        """
        Drop NOT NULL from non-key columns so partial rows can update existing ones.
        """
        self._execute(
            cursor,
            "SELECT column_name, column_type, collation_name, column_default, extra "
            "FROM information_schema.columns "
            "WHERE table_schema=database() AND table_name=%s "
            "AND IS_NULLABLE='NO' AND COLUMN_KEY!='PRI'",
            (table,),
        )
        for name, col_type, collation, default, extra in cursor.fetchall():
            sql = f"ALTER TABLE {quote_identifier(target)} MODIFY {quote_identifier(name)} {col_type} NULL"
            if collation:
                sql += f" COLLATE {collation}"
            if default is not None:
                sql += f" DEFAULT {default}"
            if extra:
                sql += f" {extra}"
            self._execute(cursor, sql + ";")

    def _encoding_statements(self) -> List[str]:
        enc = self.options.encoding
        if not enc:
            return []
        charset = "utf8" if enc.startswith("utf8") else enc
        return [f"SET NAMES {enc};", f"SET CHARACTER SET {charset};"]

    def _on_duplicate_key_update(self, table: str, header: List[str]) -> str:
        updates = ",".join(
            f"{quote_identifier(col)}=IFNULL(VALUES({quote_identifier(col)}),"
            f"{quote_identifier(table)}.{quote_identifier(col)})"
            for col in header
            if col not in self.options.primary_key
        )
        return f" ON DUPLICATE KEY UPDATE {updates}"

    # --------------------------------------------------
    # Data
    # --------------------------------------------------
    def _prepare_rows(self, header: List[str], rows: List[List[Any]]) -> List[List[Any]]:
        transforms = [self.options.transforms.get(col) for col in header]
        prepared = []
        for row in rows:
            prepared.append([
                _db_value(fn(value) if fn else value)
                for fn, value in zip(transforms, row)
            ])
        return prepared

    def _insert_rows(self, cursor, table: str, target: str, header: List[str], rows: List[List[Any]]) -> int:
        columns = ",".join(quote_identifier(c) for c in header)
        placeholders = "(" + ",".join(["%s"] * len(header)) + ")"
        prefix = f"INSERT INTO {quote_identifier(target)} ({columns}) VALUES "
        tail = self._on_duplicate_key_update(table, header) if self.options.load_type is LoadType.UPSERT else ""

        prepared = self._prepare_rows(header, rows)
        size = self.options.batch_size
        inserted = 0

        for start in range(0, len(prepared), size):
            batch = prepared[start:start + size]
            sql = prefix + ",".join([placeholders] * len(batch)) + tail
            params = [v for row in batch for v in row]
            try:
                cursor.execute(sql, params)
                inserted += len(batch)
                continue
            except Exception:
                log_event("MYSQL_BATCH_FAILED", {
                    "table": target,
                    "first_row": start + 1,
                    "rows": len(batch),
                }, level=logging.WARNING)

            # retry one by one to find the offending record
            single = prefix + placeholders + tail
            for offset, row in enumerate(batch):
                try:
                    cursor.execute(single, row)
                except Exception as e:
                    raise LoadError(
                        f"Error inserting record {start + offset + 1}: {e}",
                        sql=single,
                        row=row,
                    ) from e
                inserted += 1

        return inserted

    def _merge(self, cursor, table: str, target: str, header: List[str], exists: bool, inserted: int):
        load_type = self.options.load_type
        if load_type is LoadType.UPSERT:
            return inserted, inserted

        tab, tmp = quote_identifier(table), quote_identifier(target)

        if load_type is LoadType.RECREATE:
            old = quote_identifier(f"{table}_OLD")
            self._execute(cursor, f"DROP TABLE IF EXISTS {old};")
            self._execute(cursor, f"SELECT count(*) FROM {tmp}")
            (count,) = cursor.fetchone()
            if exists:
                self._execute(cursor, f"RENAME TABLE {tab} TO {old}, {tmp} TO {tab};")
            else:
                self._execute(cursor, f"RENAME TABLE {tmp} TO {tab};")
            self._execute(cursor, f"DROP TABLE IF EXISTS {old};")
            return count, count

        columns = ",".join(quote_identifier(c) for c in header)
        select = f"({columns}) SELECT {columns} FROM {tmp}"
        if load_type is LoadType.REPLACE:
            sql = f"REPLACE INTO {tab} {select};"
        elif load_type is LoadType.IGNORE_DUPS:
            sql = f"INSERT IGNORE INTO {tab} {select};"
        else:
            sql = f"INSERT INTO {tab} {select}{self._on_duplicate_key_update(table, header)};"

        self._execute(cursor, sql)
        affected = max(cursor.rowcount, 0)

        if self.options.drop_temp_table:
            self._execute(cursor, f"DROP TABLE IF EXISTS {tmp};")
        return affected, inserted
