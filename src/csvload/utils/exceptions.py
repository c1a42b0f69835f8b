class CsvLoadError(Exception):
    """
    Base exception for all csvload errors
    """
    pass


class InvalidOptionError(CsvLoadError, ValueError):
    """
    Raised eagerly when a configuration option is out of range or unknown
    """

    def __init__(self, option: str, reason: str):
        super().__init__(f"Invalid option '{option}': {reason}")
        self.option = option
        self.reason = reason


class LineParseError(CsvLoadError):
    """
    Raised when a document cannot be read, with the 1-based line that failed
    """

    def __init__(self, line_number: int, reason: str, line=None):
        super().__init__(f"Line {line_number}: {reason}")
        self.line_number = line_number
        self.reason = reason
        self.line = line


class LoadError(CsvLoadError):
    """
    Raised when a database statement fails during loading
    """

    def __init__(self, message: str, sql: str = None, row=None):
        super().__init__(message)
        self.sql = sql
        self.row = row


class TableNotFoundError(LoadError):
    pass


class PrimaryKeyNotFoundError(LoadError):
    pass
