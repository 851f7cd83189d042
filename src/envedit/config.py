"""EnvEditConfig: optional project-local settings for envedit.

The config file is looked up from the working directory upward:

    envedit.toml          # optional, git-tracked
    .env                  # the file being edited (default)

envedit.toml example:

    [envedit]
    path = ".env"            # relative to the directory holding envedit.toml
    create_missing = false   # let `envedit set` create the file when absent

    [logging]
    level = "WARNING"

The ENVEDIT_PATH environment variable and the CLI's --path option take
precedence over [envedit].path.
"""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

_CONFIG_FILENAME = "envedit.toml"
_DEFAULT_ENV_FILE = ".env"
_DEFAULT_LOG_LEVEL = "WARNING"
_PATH_ENV_VAR = "ENVEDIT_PATH"


@dataclass
class LoggingConfig:
    level: str = _DEFAULT_LOG_LEVEL

    @property
    def level_no(self) -> int:
        value = logging.getLevelName(self.level.upper())
        return value if isinstance(value, int) else logging.WARNING


@dataclass
class EnvEditConfig:
    """Resolved configuration for one project."""

    root: Path                      # directory that contains envedit.toml (or cwd)
    env_path: Path = field(default_factory=lambda: Path(_DEFAULT_ENV_FILE))
    create_missing: bool = False
    log: LoggingConfig = field(default_factory=LoggingConfig)

    @property
    def config_path(self) -> Path:
        return self.root / _CONFIG_FILENAME

    def with_path(self, path: Path | str | None) -> EnvEditConfig:
        """Return a copy pointing at path (relative to cwd), or self if path is None."""
        if path is None:
            return self
        return EnvEditConfig(
            root=self.root,
            env_path=Path(path),
            create_missing=self.create_missing,
            log=self.log,
        )


def load_config(root: Path | str | None = None) -> EnvEditConfig:
    """Load envedit.toml from root (or search upward from cwd if root is None)."""
    root_path = _find_root(Path(root) if root else Path.cwd())
    config_path = root_path / _CONFIG_FILENAME

    raw: dict[str, Any] = {}
    if config_path.exists():
        with config_path.open("rb") as f:
            raw = tomllib.load(f)

    section = raw.get("envedit", {})
    log_section = raw.get("logging", {})

    env_override = os.environ.get(_PATH_ENV_VAR)
    if env_override:
        env_path = Path(env_override)
    else:
        env_path = root_path / section.get("path", _DEFAULT_ENV_FILE)

    return EnvEditConfig(
        root=root_path,
        env_path=env_path,
        create_missing=bool(section.get("create_missing", False)),
        log=LoggingConfig(level=str(log_section.get("level", _DEFAULT_LOG_LEVEL))),
    )


def _find_root(start: Path) -> Path:
    """Walk upward from start looking for envedit.toml."""
    for directory in (start, *start.parents):
        if (directory / _CONFIG_FILENAME).exists():
            return directory
    return start


def init_config(root: Path, env_file: str = _DEFAULT_ENV_FILE) -> Path:
    """Write a default envedit.toml at root. Raises if already exists."""
    config_path = root / _CONFIG_FILENAME
    if config_path.exists():
        msg = f"envedit.toml already exists at {config_path}"
        raise FileExistsError(msg)

    content = f"""\
[envedit]
path = "{env_file}"
# create_missing = false   # let `envedit set` create the env file when absent

# [logging]
# level = "WARNING"        # DEBUG shows every splice and write
"""
    config_path.write_text(content)
    return config_path
