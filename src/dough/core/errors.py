# src/dough/core/errors.py
"""Configuration subsystem exceptions.

Lower layers (document codec, value coercion, descriptor validation) raise
these. The store, registry, binder and manager catch them and log, so a
failure stays isolated to the offending file or descriptor and never aborts
an init/refresh pass.
"""

from pathlib import Path


class ConfigError(Exception):
    """Base class for configuration subsystem errors."""


class DirectoryCreationError(ConfigError):
    """Raised when the configuration directory cannot be created.

    This is the only early-abort condition of a load: the store stays empty.
    """

    def __init__(self, directory: Path, message: str) -> None:
        self.directory = directory
        self.message = message
        super().__init__(f"Cannot create config directory '{directory}': {message}")


class DocumentParseError(ConfigError):
    """Raised when a config file's text is not a valid document."""

    def __init__(self, file_name: str, message: str) -> None:
        self.file_name = file_name
        self.message = message
        super().__init__(f"Cannot parse config file '{file_name}': {message}")


class DescriptorValidationError(ConfigError):
    """Raised when a declared configurable variable is rejected at scan time.

    Attributes:
        target: Qualified name of the bound variable (``module.attr`` or
            ``module.Class.attr``)
        message: Human-readable reason
    """

    def __init__(self, target: str, message: str) -> None:
        self.target = target
        self.message = message
        super().__init__(f"Invalid config value '{target}': {message}")


class ValueCoercionError(ConfigError):
    """Raised when a value cannot be converted to or from its declared type."""

    def __init__(self, value_type: object, message: str) -> None:
        self.value_type = value_type
        self.message = message
        super().__init__(f"Cannot coerce value to {_type_name(value_type)}: {message}")


class DocumentWriteError(ConfigError):
    """Raised when a document cannot be written to disk."""

    def __init__(self, path: Path, message: str) -> None:
        self.path = path
        self.message = message
        super().__init__(f"Cannot write config file '{path}': {message}")


def _type_name(value_type: object) -> str:
    if isinstance(value_type, type):
        return value_type.__qualname__
    return repr(value_type)
