# tests/core/test_settings.py
"""Tests for configuration subsystem settings and loading."""

from pathlib import Path

import pytest
from pydantic import ValidationError


class TestConfigSettings:
    """Settings schema validation."""

    def test_defaults(self) -> None:
        from dough.core.settings import ConfigSettings

        settings = ConfigSettings()
        assert settings.directory == Path("Config")
        assert settings.extensions == (".cfg",)
        assert settings.atomic_writes is True
        assert settings.backup_history == 0

    def test_directory_accepts_string(self) -> None:
        from dough.core.settings import ConfigSettings

        assert ConfigSettings(directory="game/Config").directory == Path("game/Config")

    def test_settings_are_frozen(self) -> None:
        from dough.core.settings import ConfigSettings

        settings = ConfigSettings()
        with pytest.raises(ValidationError):
            settings.backup_history = 3  # type: ignore[misc]

    def test_backup_history_must_not_be_negative(self) -> None:
        from dough.core.settings import ConfigSettings

        with pytest.raises(ValidationError):
            ConfigSettings(backup_history=-1)

    def test_extensions_must_not_be_empty(self) -> None:
        from dough.core.settings import ConfigSettings

        with pytest.raises(ValidationError):
            ConfigSettings(extensions=())

    @pytest.mark.parametrize("extension", ["cfg", ".", "", "./cfg", ".a\\b"])
    def test_malformed_extension_rejected(self, extension: str) -> None:
        from dough.core.settings import ConfigSettings

        with pytest.raises(ValidationError, match="extension must look like"):
            ConfigSettings(extensions=(extension,))

    def test_duplicate_extensions_dropped(self) -> None:
        from dough.core.settings import ConfigSettings

        settings = ConfigSettings(extensions=(".cfg", ".yaml", ".cfg"))
        assert settings.extensions == (".cfg", ".yaml")


class TestLoadSettings:
    """Loading settings from YAML with environment overrides."""

    def test_load_from_yaml(self, tmp_path: Path) -> None:
        from dough.core.settings import load_settings

        config_file = tmp_path / "settings.yaml"
        config_file.write_text("""
directory: "game/Config"
extensions: [".cfg", ".ini"]
atomic_writes: false
backup_history: 3
""")
        settings = load_settings(config_file)
        assert settings.directory == Path("game/Config")
        assert settings.extensions == (".cfg", ".ini")
        assert settings.atomic_writes is False
        assert settings.backup_history == 3

    def test_empty_file_gives_defaults(self, tmp_path: Path) -> None:
        from dough.core.settings import ConfigSettings, load_settings

        config_file = tmp_path / "settings.yaml"
        config_file.write_text("")

        assert load_settings(config_file) == ConfigSettings()

    def test_load_with_env_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        from dough.core.settings import load_settings

        config_file = tmp_path / "settings.yaml"
        config_file.write_text("backup_history: 1\n")
        # Environment variable should override YAML
        monkeypatch.setenv("DOUGH_BACKUP_HISTORY", "5")

        settings = load_settings(config_file)
        assert settings.backup_history == 5

    def test_load_validates_schema(self, tmp_path: Path) -> None:
        from dough.core.settings import load_settings

        config_file = tmp_path / "settings.yaml"
        config_file.write_text("backup_history: -2\n")

        with pytest.raises(ValidationError):
            load_settings(config_file)

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        from dough.core.settings import load_settings

        with pytest.raises(FileNotFoundError, match="Settings file not found"):
            load_settings(tmp_path / "missing.yaml")
