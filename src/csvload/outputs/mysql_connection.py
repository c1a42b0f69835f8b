import os
from dataclasses import dataclass, fields
from typing import Any, Callable, Mapping, Optional

import pymysql

from csvload.outputs.mysql_loader import LoadOptions, LoadResult, MySQLLoader
from csvload.utils.exceptions import InvalidOptionError, LoadError

PASSWORD_ENV = "CSVLOAD_MYSQL_PASSWORD"


@dataclass(frozen=True)
class MySQLSettings:
    """
    Connection settings; the password falls back to $CSVLOAD_MYSQL_PASSWORD.
    """
    host: str = "localhost"
    port: int = 3306
    user: str = "root"
    password: Optional[str] = None
    database: Optional[str] = None
    charset: str = "utf8mb4"

    def __post_init__(self):
        if isinstance(self.port, bool) or not isinstance(self.port, int) or not 0 < self.port < 65536:
            raise InvalidOptionError("port", f"must be a TCP port number, got {self.port!r}")
        if not self.database:
            raise InvalidOptionError("database", "a database name is required for loading")

    @classmethod
    def from_mapping(cls, options: Optional[Mapping[str, Any]]) -> "MySQLSettings":
        options = dict(options or {})
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(options) - known)
        if unknown:
            raise InvalidOptionError(unknown[0], f"unknown connection option (allowed: {sorted(known)})")
        return cls(**options)


def open_connection(settings: MySQLSettings):
    password = settings.password if settings.password is not None else os.getenv(PASSWORD_ENV, "")
    try:
        return pymysql.connect(
            host=settings.host,
            port=settings.port,
            user=settings.user,
            password=password,
            database=settings.database,
            charset=settings.charset,
            autocommit=False,
        )
    except pymysql.MySQLError as e:
        raise LoadError(
            f"Cannot connect to MySQL at {settings.host}:{settings.port}/{settings.database}: {e}"
        ) from e


def build_load_options(options: Mapping[str, Any], inference: Optional[Mapping[str, Any]] = None) -> LoadOptions:
    options = dict(options)
    if inference:
        options.setdefault("inference", dict(inference))
    return LoadOptions.from_mapping(options)


def load_file(
    file_path: str,
    table: str,
    options: LoadOptions,
    settings: MySQLSettings,
    connect: Callable[[MySQLSettings], Any] = open_connection,
) -> LoadResult:
    """
    Open a connection, load one CSV file into `table`, close the connection.
    """
    connection = connect(settings)
    try:
        return MySQLLoader(connection, options).load(file_path, table)
    finally:
        connection.close()
