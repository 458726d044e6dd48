# src/dough/cli.py
"""Dough Command Line Interface.

Entry point for the dough CLI tool.
"""

from __future__ import annotations

import importlib
from pathlib import Path
from types import ModuleType

import typer
from pydantic import ValidationError

from dough import __version__
from dough.core.document import parse_document, serialize_document
from dough.core.errors import DocumentParseError
from dough.core.manager import ConfigManager
from dough.core.settings import ConfigSettings, load_settings
from dough.core.store import config_files, load_all

__all__ = ["app"]

app = typer.Typer(
    name="dough",
    help="Dough: declarative, persisted runtime configuration.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"dough version {__version__}")
        raise typer.Exit()


def _load_dotenv(env_file: Path | None = None) -> bool:
    """Load environment variables (DOUGH_* overrides) from a .env file.

    Raises:
        typer.Exit: If explicit env_file path doesn't exist.
    """
    from dotenv import load_dotenv

    if env_file is not None:
        if not env_file.exists():
            typer.secho(
                f"Error: .env file not found: {env_file}",
                fg=typer.colors.RED,
                err=True,
            )
            raise typer.Exit(1)
        return load_dotenv(env_file, override=False)

    return load_dotenv(override=False)


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    no_dotenv: bool = typer.Option(
        False,
        "--no-dotenv",
        help="Skip loading .env file.",
    ),
    env_file: Path | None = typer.Option(
        None,
        "--env-file",
        help="Path to .env file (skips automatic search).",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose/debug logging.",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Output structured JSON logs (for machine processing).",
    ),
) -> None:
    """Dough: declarative, persisted runtime configuration."""
    from dough.core.logging import configure_logging

    configure_logging(json_output=json_logs, level="DEBUG" if verbose else "WARNING")

    if not no_dotenv:
        _load_dotenv(env_file=env_file)
    elif env_file is not None:
        typer.secho(
            "Warning: --env-file ignored because --no-dotenv is set.",
            fg=typer.colors.YELLOW,
            err=True,
        )


def _resolve_settings(settings_file: Path | None, directory: Path | None) -> ConfigSettings:
    """Settings from --settings (if given), with --dir taking precedence."""
    if settings_file is None:
        settings = ConfigSettings()
    else:
        try:
            settings = load_settings(settings_file)
        except FileNotFoundError:
            typer.echo(f"Error: Settings file not found: {settings_file}", err=True)
            raise typer.Exit(1) from None
        except ValidationError as e:
            typer.echo("Settings errors:", err=True)
            for error in e.errors():
                loc = ".".join(str(x) for x in error["loc"])
                typer.echo(f"  - {loc}: {error['msg']}", err=True)
            raise typer.Exit(1) from None
    if directory is not None:
        settings = settings.model_copy(update={"directory": directory})
    return settings


def _require_directory(directory: Path) -> None:
    if not directory.is_dir():
        typer.echo(f"Error: Config directory not found: {directory}", err=True)
        raise typer.Exit(1)


def _import_modules(names: list[str]) -> list[ModuleType]:
    modules = []
    for name in names:
        try:
            modules.append(importlib.import_module(name))
        except ImportError as e:
            typer.echo(f"Error: Cannot import module '{name}': {e}", err=True)
            raise typer.Exit(1) from None
    return modules


_DIR_OPTION = typer.Option(None, "--dir", "-d", help="Config directory (overrides settings).")
_SETTINGS_OPTION = typer.Option(None, "--settings", "-s", help="Path to settings YAML file.")


@app.command()
def init(
    modules: list[str] = typer.Argument(..., help="Dotted module paths declaring config values."),
    directory: Path | None = _DIR_OPTION,
    settings_file: Path | None = _SETTINGS_OPTION,
) -> None:
    """Bind the config values declared in MODULES and write missing defaults to disk."""
    settings = _resolve_settings(settings_file, directory)
    targets = _import_modules(modules)

    manager = ConfigManager(settings)
    manager.init_config(None, *targets)
    if manager.store.directory_failed:
        typer.echo(f"Error: Config directory cannot be created or read: {manager.directory}", err=True)
        raise typer.Exit(1)

    typer.echo(f"Bound {len(manager.registry)} config values in {len(manager.store)} files under {manager.directory}")


@app.command()
def show(
    directory: Path | None = _DIR_OPTION,
    settings_file: Path | None = _SETTINGS_OPTION,
    file_name: str | None = typer.Option(None, "--file", "-f", help="Only show this file."),
) -> None:
    """Print the config documents found in the config directory."""
    settings = _resolve_settings(settings_file, directory)
    _require_directory(settings.directory)

    store = load_all(settings.directory, settings.extensions)
    if file_name is not None and file_name not in store:
        typer.echo(f"Error: No loadable config file named '{file_name}' in {settings.directory}", err=True)
        raise typer.Exit(1)

    for name, document in store.items():
        if file_name is not None and name != file_name:
            continue
        typer.secho(f"[{name}]", bold=True)
        typer.echo(serialize_document(document), nl=False)


@app.command()
def check(
    directory: Path | None = _DIR_OPTION,
    settings_file: Path | None = _SETTINGS_OPTION,
) -> None:
    """Parse every config file and report the ones that are malformed."""
    settings = _resolve_settings(settings_file, directory)
    _require_directory(settings.directory)

    failures = 0
    paths = config_files(settings.directory, settings.extensions)
    for path in paths:
        try:
            parse_document(path.read_text(encoding="utf-8"), path.name)
        except (DocumentParseError, OSError, UnicodeDecodeError) as e:
            failures += 1
            typer.secho(f"FAIL {path.name}: {e}", fg=typer.colors.RED)
            continue
        typer.echo(f"ok   {path.name}")

    if failures:
        typer.echo(f"{failures} of {len(paths)} config files failed to parse", err=True)
        raise typer.Exit(1)
    typer.echo(f"All {len(paths)} config files parsed")
