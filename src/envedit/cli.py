"""envedit CLI — edit KEY=value env files in place.

Commands:
    envedit print                  list every key (enabled or not)
    envedit get KEY                print one value
    envedit set KEY VALUE [-d ..]  update or create a key, optionally with description comments
    envedit delete KEY             remove a key's line
    envedit disable KEY            comment a key out
    envedit enable KEY             uncomment a key
    envedit describe KEY           show the description comments above a key
    envedit init                   write envedit.toml
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

import click

from envedit.config import EnvEditConfig, init_config, load_config
from envedit.errors import EnvEditError
from envedit.models import KeyStatus
from envedit.store import EnvStore

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _load_cfg(path: str | None) -> EnvEditConfig:
    try:
        return load_config().with_path(path)
    except Exception as exc:
        raise click.ClickException(str(exc)) from exc


def _setup_logging(cfg: EnvEditConfig, *, verbose: bool) -> None:
    level = logging.DEBUG if verbose else cfg.log.level_no
    logging.basicConfig(level=level, format="%(asctime)s %(name)s %(message)s")
    logging.getLogger("envedit").setLevel(level)


def _open_store(cfg: EnvEditConfig, *, create: bool = False) -> EnvStore:
    try:
        return EnvStore.open(cfg.env_path, create=create)
    except OSError as exc:
        raise click.ClickException(f"Failed to read {cfg.env_path}: {exc.strerror or exc}") from exc


def _run(store: EnvStore, action: str, key: str, status: KeyStatus | None = None) -> None:
    """Apply a single-key mutation, mapping store errors onto CLI errors."""
    try:
        if action == "delete":
            store.delete(key)
        elif status is not None:
            store.toggle(key, status)
    except EnvEditError as exc:
        raise click.ClickException(str(exc)) from exc
    except OSError as exc:
        raise click.ClickException(f"Failed to {action} {key}: {exc}") from exc


# ---------------------------------------------------------------------------
# Root group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="envedit")
@click.option(
    "--path", "-p", default=None, envvar="ENVEDIT_PATH",
    help="Env file to edit (default: [envedit].path from envedit.toml, else .env)",
)
@click.option("--verbose", "-v", is_flag=True, help="Log every splice and write")
@click.pass_context
def cli(ctx: click.Context, path: str | None, verbose: bool) -> None:
    """envedit — in-place KEY=value env file editor."""
    cfg = _load_cfg(path)
    _setup_logging(cfg, verbose=verbose)
    ctx.obj = cfg


# ---------------------------------------------------------------------------
# Read commands
# ---------------------------------------------------------------------------


@cli.command("print")
@click.option("--json", "as_json", is_flag=True, help="Print a JSON object instead")
@click.pass_obj
def print_(cfg: EnvEditConfig, as_json: bool) -> None:
    """Print all environment variables."""
    with _open_store(cfg) as store:
        if as_json:
            click.echo(json.dumps(dict(store.items()), indent=2))
        else:
            click.echo(store.format_entries(), nl=False)


@cli.command()
@click.argument("key")
@click.pass_obj
def get(cfg: EnvEditConfig, key: str) -> None:
    """Get environment value by providing key."""
    with _open_store(cfg) as store:
        try:
            value = store.get(key)
        except EnvEditError as exc:
            raise click.ClickException(str(exc)) from exc
    click.echo(f"Value: {value}")


@cli.command()
@click.argument("key")
@click.pass_obj
def describe(cfg: EnvEditConfig, key: str) -> None:
    """Show the description comments above a variable."""
    with _open_store(cfg) as store:
        try:
            lines = store.descriptions(key)
        except EnvEditError as exc:
            raise click.ClickException(str(exc)) from exc
    if not lines:
        click.echo(f"{key} has no description")
    for line in lines:
        click.echo(line)


# ---------------------------------------------------------------------------
# Write commands
# ---------------------------------------------------------------------------


@cli.command("set")
@click.argument("key")
@click.argument("value")
@click.option(
    "--description", "-d", "descriptions", multiple=True,
    help="Description comment written above the key (repeatable)",
)
@click.pass_obj
def set_(cfg: EnvEditConfig, key: str, value: str, descriptions: tuple[str, ...]) -> None:
    """Update variable value (creates it if missing)."""
    with _open_store(cfg, create=cfg.create_missing) as store:
        try:
            store.set(key, value, descriptions)
        except ValueError as exc:
            raise click.ClickException(str(exc)) from exc
        except OSError as exc:
            raise click.ClickException(f"Failed to update key: {exc}") from exc
    click.echo("Key updated successfully")


@cli.command()
@click.argument("key")
@click.pass_obj
def delete(cfg: EnvEditConfig, key: str) -> None:
    """Delete variable."""
    with _open_store(cfg) as store:
        _run(store, "delete", key)
    click.echo("Key deleted successfully")


@cli.command()
@click.argument("key")
@click.pass_obj
def disable(cfg: EnvEditConfig, key: str) -> None:
    """Disable/comment variable."""
    with _open_store(cfg) as store:
        _run(store, "disable", key, KeyStatus.DISABLE)
    click.echo("Key disabled successfully")


@cli.command()
@click.argument("key")
@click.pass_obj
def enable(cfg: EnvEditConfig, key: str) -> None:
    """Enable/uncomment variable."""
    with _open_store(cfg) as store:
        _run(store, "enable", key, KeyStatus.ENABLE)
    click.echo("Key enabled successfully")


# ---------------------------------------------------------------------------
# envedit init
# ---------------------------------------------------------------------------


@cli.command()
@click.option("--dir", "root", default=".", show_default=True, help="Project root")
@click.option("--env-file", default=".env", show_default=True, help="Env file path to record")
def init(root: str, env_file: str) -> None:
    """Create envedit.toml in the current project."""
    root_path = Path(root).resolve()
    try:
        config_path = init_config(root_path, env_file=env_file)
    except FileExistsError:
        click.echo("envedit.toml already exists, skipping init")
        return
    click.echo(f"Created {config_path}")
