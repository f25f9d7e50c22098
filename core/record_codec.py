r"""
Pipe-delimited record format shared by all data files.

One entity per line, fields joined by ``|``. Lines starting with ``#``
are comments and blank lines are ignored. Inside a field the following
characters are escaped::

    \\   backslash
    \|   pipe
    \n   newline
    \r   carriage return
    \#   leading hash of the first field (so a record is never a comment)

Decoding is a single left-to-right scan, so an escaped pipe never splits
a field. Unknown escape sequences are kept verbatim, which keeps files
written before backslash escaping was introduced readable.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterator, List, Optional, Sequence

from core.exceptions import RecordFormatError

FORMAT_VERSION = 1
FIELD_SEPARATOR = "|"
COMMENT_PREFIX = "#"

_ESCAPES = {
    "\\": "\\\\",
    "|": "\\|",
    "\n": "\\n",
    "\r": "\\r",
}

_UNESCAPES = {
    "\\": "\\",
    "|": "|",
    "n": "\n",
    "r": "\r",
    "#": "#",
}


def escape_field(value: Optional[object]) -> str:
    """Escape one field value. ``None`` becomes an empty field."""
    if value is None:
        return ""
    return "".join(_ESCAPES.get(ch, ch) for ch in str(value))


def unescape_field(value: Optional[str]) -> str:
    """Reverse escape_field() for a single, already separated field."""
    if not value:
        return ""
    out: List[str] = []
    i = 0
    while i < len(value):
        ch = value[i]
        if ch == "\\" and i + 1 < len(value) and value[i + 1] in _UNESCAPES:
            out.append(_UNESCAPES[value[i + 1]])
            i += 2
            continue
        out.append(ch)
        i += 1
    return "".join(out)


def encode_record(fields: Sequence[object]) -> str:
    """Join escaped fields into one line (without the trailing newline)."""
    line = FIELD_SEPARATOR.join(escape_field(field) for field in fields)
    if line.startswith(COMMENT_PREFIX):
        line = "\\" + line
    return line


def decode_record(line: str, min_fields: int = 1) -> List[str]:
    """
    Split a stored line into unescaped fields.

    Args:
        line: One data line, without its newline
        min_fields: Minimum number of fields the caller needs

    Returns:
        List of field values

    Raises:
        RecordFormatError: If the line has fewer than ``min_fields`` fields
    """
    fields: List[str] = []
    buf: List[str] = []
    i = 0
    while i < len(line):
        ch = line[i]
        if ch == "\\" and i + 1 < len(line) and line[i + 1] in _UNESCAPES:
            buf.append(_UNESCAPES[line[i + 1]])
            i += 2
            continue
        if ch == FIELD_SEPARATOR:
            fields.append("".join(buf))
            buf = []
        else:
            buf.append(ch)
        i += 1
    fields.append("".join(buf))

    if len(fields) < min_fields:
        raise RecordFormatError(
            line, f"expected at least {min_fields} fields, found {len(fields)}"
        )
    return fields


def is_data_line(line: str) -> bool:
    return bool(line.strip()) and not line.startswith(COMMENT_PREFIX)


def iter_data_lines(text: Optional[str]) -> Iterator[str]:
    """Yield the non-comment, non-blank lines of a data file."""
    if not text:
        return
    for raw in text.split("\n"):
        line = raw.rstrip("\r")
        if is_data_line(line):
            yield line


def build_header(title: str, format_spec: str, generated_at: Optional[datetime] = None) -> str:
    """Comment block written at the top of every data file."""
    generated_at = generated_at or datetime.now()
    return (
        f"{COMMENT_PREFIX} {title}\n"
        f"{COMMENT_PREFIX} Format-Version: {FORMAT_VERSION}\n"
        f"{COMMENT_PREFIX} Format: {format_spec}\n"
        f"{COMMENT_PREFIX} Generated: {generated_at.strftime('%Y-%m-%d %H:%M:%S')}\n"
        "\n"
    )


def parse_int(value: str, field_name: str, line: str) -> int:
    try:
        return int(value.strip())
    except ValueError as e:
        raise RecordFormatError(line, f"{field_name} is not an integer: {value!r}") from e


def parse_float(value: str, field_name: str, line: str) -> float:
    try:
        return float(value.strip())
    except ValueError as e:
        raise RecordFormatError(line, f"{field_name} is not a number: {value!r}") from e
