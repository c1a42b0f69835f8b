"""
Line sources feeding the document parser.

File lines are yielded as raw bytes so that decoding errors are reported
by the parser together with the line number they occur on.
"""

import io
from typing import BinaryIO, Iterator

UTF8_BOM = b"\xef\xbb\xbf"


def _binary_lines(f: BinaryIO) -> Iterator[bytes]:
    with f:
        first = True
        for line in f:
            if first:
                first = False
                if line.startswith(UTF8_BOM):
                    line = line[len(UTF8_BOM):]
            yield line


def iter_file_lines(file_path: str) -> Iterator[bytes]:
    """
    Opens the file immediately (missing files fail here, not mid-parse).
    """
    return _binary_lines(open(file_path, "rb"))


def iter_text_lines(content: str) -> Iterator[str]:
    """
    Lines of an in-memory document; a leading BOM character is dropped.
    """
    if content.startswith("\ufeff"):
        content = content[1:]
    # newline="" keeps "\r\n" inside quoted fields intact
    return iter(io.StringIO(content, newline=""))
