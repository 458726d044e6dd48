# src/dough/core/__init__.py
"""Core infrastructure: values, documents, store, descriptors, binding, logging."""

from dough.core.binder import bind, bind_all, refresh, refresh_all
from dough.core.descriptors import (
    BindingTarget,
    ConfigDescriptor,
    ConfigFiles,
    ConfigValue,
)
from dough.core.document import (
    ConfigDocument,
    parse_document,
    serialize_document,
)
from dough.core.errors import (
    ConfigError,
    DescriptorValidationError,
    DirectoryCreationError,
    DocumentParseError,
    DocumentWriteError,
    ValueCoercionError,
)
from dough.core.logging import (
    configure_logging,
    get_logger,
)
from dough.core.manager import (
    ConfigManager,
    get_manager,
    init_config,
    refresh_config_values,
    set_manager,
)
from dough.core.registry import DescriptorRegistry, scan, validate_descriptor
from dough.core.settings import ConfigSettings, load_settings
from dough.core.store import (
    DEFAULT_EXTENSIONS,
    ConfigStore,
    backup_documents,
    ensure_document,
    load_all,
    save_all,
)
from dough.core.values import TypedValue, ValueKind, zero_value

__all__ = [
    "DEFAULT_EXTENSIONS",
    "BindingTarget",
    "ConfigDescriptor",
    "ConfigDocument",
    "ConfigError",
    "ConfigFiles",
    "ConfigManager",
    "ConfigSettings",
    "ConfigStore",
    "ConfigValue",
    "DescriptorRegistry",
    "DescriptorValidationError",
    "DirectoryCreationError",
    "DocumentParseError",
    "DocumentWriteError",
    "TypedValue",
    "ValueCoercionError",
    "ValueKind",
    "backup_documents",
    "bind",
    "bind_all",
    "configure_logging",
    "ensure_document",
    "get_logger",
    "get_manager",
    "init_config",
    "load_all",
    "load_settings",
    "parse_document",
    "refresh",
    "refresh_all",
    "refresh_config_values",
    "save_all",
    "scan",
    "serialize_document",
    "set_manager",
    "validate_descriptor",
    "zero_value",
]
