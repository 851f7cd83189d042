"""Data models for the indexed env-file store."""

from __future__ import annotations

import enum
from dataclasses import dataclass


class KeyStatus(enum.Enum):
    """Target state for EnvStore.toggle."""

    ENABLE = "enable"
    DISABLE = "disable"


@dataclass(frozen=True)
class Entry:
    """Byte offsets of one declaration inside the store buffer.

    line_start points at the first byte of the line (a leading ``#`` included),
    value_start just past the ``=``, value_end at the content end before the
    line terminator.
    """

    line_start: int
    value_start: int
    value_end: int

    def shifted(self, start: int, end: int, delta: int) -> Entry:
        """Return a copy adjusted for buffer[start:end] being replaced.

        Offsets at or past ``end`` move by ``delta``. A value offset equal to
        ``start`` stays put on a pure insertion, so appending after a line
        leaves that line's value span alone, while a line starting exactly at
        the insertion point moves down with it.
        """

        def move(offset: int, *, anchor_left: bool) -> int:
            if offset < end or (anchor_left and offset == start):
                return offset
            return offset + delta

        return Entry(
            line_start=move(self.line_start, anchor_left=False),
            value_start=move(self.value_start, anchor_left=True),
            value_end=move(self.value_end, anchor_left=True),
        )

    def is_valid(self, size: int) -> bool:
        return 0 <= self.line_start <= self.value_start <= self.value_end <= size


@dataclass(frozen=True)
class Declaration:
    """A ``[#][ws]KEY=VALUE`` line. Offsets are relative to the line start."""

    key: str
    key_end: int       # position of the first "="
    value_end: int     # content end, terminator excluded

    @property
    def value_start(self) -> int:
        return self.key_end + 1

    def to_entry(self, line_start: int) -> Entry:
        return Entry(
            line_start=line_start,
            value_start=line_start + self.value_start,
            value_end=line_start + self.value_end,
        )


@dataclass(frozen=True)
class Inert:
    """A line that is kept verbatim but never indexed."""

    reason: str        # no-separator | invalid-utf8


ParsedLine = Declaration | Inert
