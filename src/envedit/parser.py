"""Line classification and index construction over a raw env buffer.

Lines are delimited by ``\\n``. Every valid UTF-8 line containing an ``=`` is a
declaration; its key is the text before the first ``=`` minus leading ``#``
and whitespace:

    FOO=1        -> Declaration(key="FOO")
    # FOO=1      -> Declaration(key="FOO")   (disabled, still indexed)
    export A=1   -> Declaration(key="export A")
    just text    -> Inert("no-separator")

Nothing is copied into the index: entries hold offsets into the buffer.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from envedit.models import Declaration, Entry, Inert, ParsedLine

if TYPE_CHECKING:
    from collections.abc import Iterator

_LEADING_MARKERS = re.compile(r"^[#\s]+")
_TERMINATORS = b"\r\n"


def classify(line: bytes) -> ParsedLine:
    """Classify one raw line; the terminator may or may not be included."""
    content = line.rstrip(_TERMINATORS)
    key_end = content.find(b"=")
    if key_end == -1:
        return Inert("no-separator")
    try:
        raw_key = content[:key_end].decode("utf-8")
        content.decode("utf-8")
    except UnicodeDecodeError:
        return Inert("invalid-utf8")

    key = _LEADING_MARKERS.sub("", raw_key)
    return Declaration(key=key, key_end=key_end, value_end=len(content))


def iter_lines(buf: bytes | bytearray) -> Iterator[tuple[int, bytes]]:
    """Yield (line_start, raw_line) with terminators kept."""
    pos = 0
    size = len(buf)
    while pos < size:
        nl = buf.find(b"\n", pos)
        end = size if nl == -1 else nl + 1
        yield pos, bytes(buf[pos:end])
        pos = end


def build_index(buf: bytes | bytearray) -> dict[str, Entry]:
    """Index every declaration in buf; a later duplicate key wins."""
    index: dict[str, Entry] = {}
    for line_start, line in iter_lines(buf):
        parsed = classify(line)
        if isinstance(parsed, Declaration):
            index[parsed.key] = parsed.to_entry(line_start)
    return index


# ---------------------------------------------------------------------------
# Line navigation
# ---------------------------------------------------------------------------


def line_end(buf: bytes | bytearray, line_start: int) -> int:
    """Offset just past the terminator of the line at line_start."""
    nl = buf.find(b"\n", line_start)
    return len(buf) if nl == -1 else nl + 1


def previous_line_start(buf: bytes | bytearray, line_start: int) -> int | None:
    """Start of the line above the one at line_start, None for the first line."""
    if line_start <= 0:
        return None
    nl = buf.rfind(b"\n", 0, line_start - 1)
    return nl + 1


def is_comment(line: bytes) -> bool:
    """True for a ``#`` line that does not declare a key."""
    stripped = line.lstrip()
    return stripped.startswith(b"#") and isinstance(classify(line), Inert)
