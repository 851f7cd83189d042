"""Indexed, in-place editor for a single env file.

EnvStore is the public API:
    with EnvStore.open(".env") as store:
        store.get("DATABASE_URL")
        store.set("DEBUG", "1", descriptions=["Verbose logging"])
        store.disable("LEGACY_FLAG")

The whole file lives in one bytearray. The index maps each key to byte
offsets into that buffer; nothing else holds line content. Every edit goes
through splice(), which also shifts the cached offsets of all entries after
the edit point, so the index stays valid for the whole session.

Each mutator persists before returning (write at offset 0, then truncate).
A failing mutator leaves buffer and index exactly as they were before it.
"""

from __future__ import annotations

import contextlib
import logging
from dataclasses import replace
from pathlib import Path
from typing import IO, TYPE_CHECKING

from envedit.errors import (
    AlreadyEnabledError,
    IndexCorruptionError,
    InvalidEncodingError,
    KeyNotFoundError,
)
from envedit.models import Declaration, Entry, KeyStatus
from envedit.parser import build_index, classify, is_comment, line_end, previous_line_start

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator
    from types import TracebackType

logger = logging.getLogger("envedit.store")

INVALID_UTF8 = "<invalid utf-8>"


def _comment_line(text: str) -> bytes:
    if "\n" in text or "\r" in text:
        msg = f"Description must be a single line: {text!r}"
        raise ValueError(msg)
    line = f"# {text}\n".encode()
    if isinstance(classify(line), Declaration):
        msg = f"Description would be read back as a declaration: {text!r}"
        raise ValueError(msg)
    return line


def _check_key(key: str) -> None:
    parsed = classify(f"{key}=".encode())
    if not key or not isinstance(parsed, Declaration) or parsed.key != key:
        msg = f"Invalid key: {key!r}"
        raise ValueError(msg)


def _check_value(value: bytes) -> None:
    if b"\n" in value or b"\r" in value:
        msg = "Multi-line values are not supported"
        raise ValueError(msg)


class EnvStore:
    """Byte buffer + position index over one env file."""

    def __init__(self, path: Path | str | None = None) -> None:
        self.path = Path(path) if path is not None else None
        self._buf = bytearray()
        self._index: dict[str, Entry] = {}
        self._file: IO[bytes] | None = None

    @classmethod
    def open(cls, path: Path | str, *, create: bool = False) -> EnvStore:
        """Construct and load a store; a missing file is created when create is set."""
        store = cls(path)
        store.load(create=create)
        return store

    @classmethod
    def from_bytes(cls, data: bytes) -> EnvStore:
        """Detached store with no backing file. persist() is a no-op."""
        store = cls()
        store._buf = bytearray(data)
        store._index = build_index(store._buf)
        return store

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def load(self, *, create: bool = False) -> None:
        """Open the backing file read/write, read it and build the index."""
        if self.path is None:
            msg = "EnvStore has no backing path"
            raise ValueError(msg)
        try:
            f = self.path.open("r+b")
        except FileNotFoundError:
            if not create:
                raise
            self.path.parent.mkdir(parents=True, exist_ok=True)
            f = self.path.open("w+b")
            logger.info("created %s", self.path)

        try:
            data = f.read()
        except OSError:
            f.close()
            raise

        self.close()
        self._file = f
        self._buf = bytearray(data)
        self._index = build_index(self._buf)
        logger.debug("loaded %s: %d bytes, %d keys", self.path, len(self._buf), len(self._index))

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None

    @property
    def closed(self) -> bool:
        return self._file is None

    def __enter__(self) -> EnvStore:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    @property
    def buffer(self) -> bytes:
        return bytes(self._buf)

    def __bytes__(self) -> bytes:
        return bytes(self._buf)

    def __contains__(self, key: object) -> bool:
        return key in self._index

    def __len__(self) -> int:
        return len(self._index)

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def keys(self) -> list[str]:
        """Indexed keys in file order."""
        return sorted(self._index, key=lambda k: self._index[k].line_start)

    def entry(self, key: str) -> Entry:
        try:
            entry = self._index[key]
        except KeyError:
            raise KeyNotFoundError(key) from None
        if not entry.is_valid(len(self._buf)):
            msg = f"Entry for {key} out of bounds: {entry} (buffer is {len(self._buf)} bytes)"
            raise IndexCorruptionError(msg)
        return entry

    def get_bytes(self, key: str) -> bytes:
        entry = self.entry(key)
        return bytes(self._buf[entry.value_start:entry.value_end])

    def get(self, key: str) -> str:
        """Return the UTF-8 value of key, whether the line is enabled or not."""
        try:
            return self.get_bytes(key).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise InvalidEncodingError(key) from exc

    def items(self) -> Iterator[tuple[str, str | None]]:
        """(key, value) in file order; value is None when it is not valid UTF-8."""
        for key in self.keys():
            try:
                yield key, self.get(key)
            except InvalidEncodingError:
                yield key, None

    def is_disabled(self, key: str) -> bool:
        entry = self.entry(key)
        return self._buf[entry.line_start:entry.value_start].lstrip().startswith(b"#")

    def descriptions(self, key: str) -> list[str]:
        """Comment lines directly above key, without their "# " prefix."""
        entry = self.entry(key)
        start = self._description_start(entry.line_start)
        lines = []
        for raw in bytes(self._buf[start:entry.line_start]).splitlines():
            text = raw.lstrip()[1:].decode("utf-8", errors="replace")
            lines.append(text.removeprefix(" "))
        return lines

    def format_entries(self) -> str:
        """One "KEY = value" line per entry, in file order."""
        return "".join(
            f"{key} = {INVALID_UTF8 if value is None else value}\n"
            for key, value in self.items()
        )

    def __str__(self) -> str:
        return self.format_entries()

    def __repr__(self) -> str:
        return f"EnvStore(path={self.path!r}, keys={len(self._index)}, size={len(self._buf)})"

    # ------------------------------------------------------------------
    # Buffer primitive
    # ------------------------------------------------------------------

    def splice(self, start: int, end: int, replacement: bytes) -> None:
        """Replace buffer[start:end] and shift every entry past the edit.

        An empty range is a pure insertion, an empty replacement a pure
        deletion. Entries lying inside a deleted range are the caller's job.
        """
        size = len(self._buf)
        if not 0 <= start <= end <= size:
            msg = f"Splice range [{start}, {end}) outside buffer of {size} bytes"
            raise IndexCorruptionError(msg)

        delta = len(replacement) - (end - start)
        self._buf[start:end] = replacement
        if delta:
            self._index = {k: e.shifted(start, end, delta) for k, e in self._index.items()}
        logger.debug("splice [%d, %d) -> %d bytes (delta %+d)", start, end, len(replacement), delta)

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def set(self, key: str, value: bytes | str, descriptions: Iterable[str] = ()) -> None:
        """Update or create key.

        A new key is appended after a separator newline (also when the buffer
        is empty), preceded by one "# <desc>" line per description and without
        a trailing newline. For
        an existing key the value is replaced in place; when descriptions are
        given, the comment block directly above the line is replaced too.
        """
        _check_key(key)
        data = value.encode("utf-8") if isinstance(value, str) else bytes(value)
        _check_value(data)
        block = b"".join(_comment_line(d) for d in descriptions)

        with self._mutation("set", key):
            if key not in self._index:
                self._append(key, data, block)
            else:
                if block:
                    self._replace_descriptions(key, block)
                self._replace_value(key, data)

    def toggle(self, key: str, status: KeyStatus) -> None:
        """Comment out (DISABLE) or uncomment (ENABLE) the line of key.

        DISABLE always inserts one "#", so disabling twice leaves "##".
        ENABLE removes a "#" at the very start of the line and raises
        AlreadyEnabledError when there is none.
        """
        entry = self.entry(key)
        start = entry.line_start

        if status is KeyStatus.DISABLE:
            with self._mutation("disable", key):
                self.splice(start, start, b"#")
                self._index[key] = Entry(start, entry.value_start + 1, entry.value_end + 1)
            return

        if self._buf[start:start + 1] != b"#":
            raise AlreadyEnabledError(key)
        with self._mutation("enable", key):
            self.splice(start, start + 1, b"")
            self._index[key] = Entry(start, entry.value_start - 1, entry.value_end - 1)

    def disable(self, key: str) -> None:
        self.toggle(key, KeyStatus.DISABLE)

    def enable(self, key: str) -> None:
        self.toggle(key, KeyStatus.ENABLE)

    def delete(self, key: str) -> None:
        """Remove the line of key, leaving no blank line behind.

        Only the indexed (last) declaration is removed. Earlier lines declaring
        the same key stay in the file and are indexed again on the next load.
        """
        entry = self.entry(key)
        start, end = entry.line_start, line_end(self._buf, entry.line_start)
        if start > 0 and not self._buf.endswith(b"\n") and end == len(self._buf):
            # last line has no terminator: drop the one before it instead
            start -= 1
            if self._buf[start - 1:start] == b"\r":
                start -= 1

        with self._mutation("delete", key):
            del self._index[key]
            self.splice(start, end, b"")

    def persist(self) -> None:
        """Write the buffer at offset 0 and truncate the file to its length."""
        if self._file is None:
            if self.path is not None:
                msg = f"EnvStore for {self.path} is closed"
                raise ValueError(msg)
            return
        self._file.seek(0)
        self._file.write(self._buf)
        self._file.truncate(len(self._buf))
        self._file.flush()
        logger.debug("persisted %d bytes to %s", len(self._buf), self.path)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    @contextlib.contextmanager
    def _mutation(self, op: str, key: str) -> Iterator[None]:
        """Run one edit + persist; restore buffer and index if anything fails."""
        saved_buf, saved_index = bytes(self._buf), dict(self._index)
        try:
            yield
            self.persist()
        except Exception:
            self._buf = bytearray(saved_buf)
            self._index = saved_index
            logger.warning("%s %s failed; in-memory state restored", op, key)
            raise
        logger.info("%s %s", op, key)

    def _append(self, key: str, data: bytes, block: bytes) -> None:
        separator = b"\n"
        head = key.encode() + b"="
        start = len(self._buf)
        self.splice(start, start, separator + block + head + data)

        line_start = start + len(separator) + len(block)
        value_start = line_start + len(head)
        self._index[key] = Entry(line_start, value_start, value_start + len(data))

    def _replace_descriptions(self, key: str, block: bytes) -> None:
        entry = self.entry(key)
        start = self._description_start(entry.line_start)
        # entry.line_start sits at the end of the range, so splice moves it
        self.splice(start, entry.line_start, block)

    def _replace_value(self, key: str, data: bytes) -> None:
        entry = self.entry(key)
        self.splice(entry.value_start, entry.value_end, data)
        self._index[key] = replace(entry, value_end=entry.value_start + len(data))

    def _description_start(self, line_start: int) -> int:
        """Start of the run of comment lines directly above line_start."""
        start = line_start
        while True:
            prev = previous_line_start(self._buf, start)
            if prev is None or not is_comment(bytes(self._buf[prev:start])):
                return start
            start = prev
