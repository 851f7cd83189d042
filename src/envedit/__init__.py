"""In-place editor for KEY=value env files.

The file is held as one byte buffer with a position index on top:

    key -> Entry(line_start, value_start, value_end)

Edits splice the buffer and shift the index; comments, blank lines, ordering
and anything else not being edited are preserved byte for byte.

File format:
    FOO=1          enabled declaration
    #FOO=1         disabled declaration, still indexed as FOO
    # text         description comment (managed by `set` when it sits directly above a key)
    anything else  kept verbatim, never indexed
"""

from envedit.config import EnvEditConfig, init_config, load_config
from envedit.errors import (
    AlreadyEnabledError,
    EnvEditError,
    IndexCorruptionError,
    InvalidEncodingError,
    KeyNotFoundError,
)
from envedit.models import Entry, KeyStatus
from envedit.store import EnvStore

__all__ = [
    "AlreadyEnabledError",
    "Entry",
    "EnvEditConfig",
    "EnvEditError",
    "EnvStore",
    "IndexCorruptionError",
    "InvalidEncodingError",
    "KeyNotFoundError",
    "KeyStatus",
    "init_config",
    "load_config",
]
