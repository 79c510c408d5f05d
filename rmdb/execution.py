"""Rendering of query results: field formatting and the result log file."""

from __future__ import annotations

import os
import struct
from collections.abc import Iterable, Sequence
from typing import Union

from rmdb.keys import ColType

OUTPUT_FILE = "output.txt"

_INT = struct.Struct("<i")
_FLOAT = struct.Struct("<f")

PathLike = Union[str, "os.PathLike[str]"]


def format_field(col_type: ColType, raw: bytes, length: int) -> str:
    """Render one encoded column value as text.

    Integers print in decimal, floats with six decimals, and strings up to
    their first NUL byte within ``length`` bytes.
    """
    col_type = ColType(col_type)
    if col_type is ColType.INT:
        if len(raw) < _INT.size:
            raise ValueError("integer field needs 4 bytes")
        return str(_INT.unpack_from(raw)[0])
    if col_type is ColType.FLOAT:
        if len(raw) < _FLOAT.size:
            raise ValueError("float field needs 4 bytes")
        return f"{_FLOAT.unpack_from(raw)[0]:f}"
    if length < 0:
        raise ValueError("string length must not be negative")
    if len(raw) < length:
        raise ValueError(f"string field needs {length} bytes, got {len(raw)}")
    text, _, _ = bytes(raw[:length]).partition(b"\0")
    return text.decode("utf-8", errors="replace")


def format_output_line(fields: Iterable[str]) -> str:
    """Return a result row as written to the output file, without newline."""
    return "|" + "".join(f" {value} |" for value in fields)


def append_output(path: PathLike, captions: Sequence[str], rows: Iterable[Iterable[str]]) -> int:
    """Append a header line and one line per row to ``path``; return the row count."""
    count = 0
    with open(path, "a", encoding="utf-8") as outfile:
        outfile.write(format_output_line(captions) + "\n")
        for row in rows:
            outfile.write(format_output_line(row) + "\n")
            count += 1
    return count