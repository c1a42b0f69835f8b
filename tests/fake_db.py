"""Recording stand-in for a DB-API 2.0 connection used by the loader tests."""


class FakeCursor:
    def __init__(self, conn):
        self.conn = conn
        self.rowcount = -1
        self._result = []
        self.closed = False

    def execute(self, sql, params=None):
        self.conn.statements.append((sql, params))
        if self.conn.fail_when and self.conn.fail_when(sql, params):
            raise RuntimeError("duplicate entry")
        if "information_schema.tables" in sql:
            self._result = [(1 if self.conn.exists else 0,)]
        elif "information_schema.columns" in sql:
            self._result = list(self.conn.not_null_columns)
        elif sql.startswith("SELECT count(*) FROM `"):
            self._result = [(self.conn.tmp_count,)]
        self.rowcount = self.conn.rowcount

    def fetchone(self):
        return self._result[0]

    def fetchall(self):
        return list(self._result)

    def close(self):
        self.closed = True


class FakeConnection:
    def __init__(self, exists=False, tmp_count=0, rowcount=0, not_null_columns=(), fail_when=None):
        self.exists = exists
        self.tmp_count = tmp_count
        self.rowcount = rowcount
        self.not_null_columns = not_null_columns
        self.fail_when = fail_when
        self.statements = []
        self.cursors = []
        self.commits = 0
        self.closed = False

    def cursor(self):
        cursor = FakeCursor(self)
        self.cursors.append(cursor)
        return cursor

    def commit(self):
        self.commits += 1

    def close(self):
        self.closed = True

    @property
    def sql(self):
        return [s for s, _ in self.statements]
