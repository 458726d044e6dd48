# src/dough/core/settings.py
"""Settings of the configuration subsystem itself.

Uses Pydantic for validation and Dynaconf for loading a YAML file with
DOUGH_-prefixed environment variable overrides. Settings are frozen
(immutable) after construction.

Example YAML:
    directory: Config
    extensions: [".cfg"]
    atomic_writes: true
    backup_history: 3
"""

from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from dough.core.store import DEFAULT_EXTENSIONS

__all__ = ["ConfigSettings", "load_settings"]


class ConfigSettings(BaseModel):
    """Where config files live and how they are written."""

    model_config = {"frozen": True}

    directory: Path = Field(
        default=Path("Config"),
        description="Root directory of config files",
    )
    extensions: tuple[str, ...] = Field(
        default=DEFAULT_EXTENSIONS,
        min_length=1,
        description="File suffixes (dot included) recognized as config files",
    )
    atomic_writes: bool = Field(
        default=True,
        description="Write through a temporary file and rename over the target",
    )
    backup_history: int = Field(
        default=0,
        ge=0,
        description="Snapshots of the config files kept before each load (0 disables)",
    )

    @field_validator("extensions")
    @classmethod
    def validate_extensions(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Each extension is a dotted suffix; duplicates are dropped."""
        for extension in v:
            if len(extension) < 2 or not extension.startswith(".") or "/" in extension or "\\" in extension:
                raise ValueError(f"extension must look like '.cfg', got {extension!r}")
        return tuple(dict.fromkeys(v))


def load_settings(config_path: Path) -> ConfigSettings:
    """Load settings from YAML file with environment variable overrides.

    Precedence:
    1. Environment variables (DOUGH_*) - highest priority
    2. Config file
    3. Defaults from the Pydantic schema - lowest priority

    Raises:
        ValidationError: If the settings fail Pydantic validation
        FileNotFoundError: If the settings file doesn't exist
    """
    from dynaconf import Dynaconf

    # Dynaconf silently accepts missing files
    if not config_path.exists():
        raise FileNotFoundError(f"Settings file not found: {config_path}")

    dynaconf_settings = Dynaconf(
        envvar_prefix="DOUGH",
        settings_files=[str(config_path)],
        environments=False,
        load_dotenv=False,
        merge_enabled=True,
    )

    # Dynaconf returns uppercase keys; also filter out its internal settings
    internal_keys = {"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES"}
    raw_config = {k.lower(): v for k, v in dynaconf_settings.as_dict().items() if k not in internal_keys}

    return ConfigSettings(**raw_config)
