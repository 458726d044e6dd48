# src/dough/core/binder.py
"""Reconciling bound variables with their documents.

Bind (at init), for a descriptor and the document of its file:

1. The document has the key: coerce the stored value to the declared type,
   assign it to the variable and put the normalized form back in the
   document (so "7" stored for an int is rewritten as 7).
2. The key is missing: assign the declared default, or the empty instance
   of the type when there is no default and the variable has no value,
   then write the variable's value into the document with the descriptor's
   comment (write-through default).

After a pass the document holds every key registered against it, so later
runs always take branch 1.

Refresh writes each variable's current value back into its document,
keeping the comment the document already has.

Failures are isolated to the descriptor: logged, and the variable keeps
its value.
"""

import copy
from collections.abc import Iterable

import structlog

from dough.core.descriptors import ConfigDescriptor
from dough.core.errors import ValueCoercionError
from dough.core.store import ConfigStore
from dough.core.values import TypedValue, zero_value

__all__ = [
    "bind",
    "bind_all",
    "refresh",
    "refresh_all",
]

logger = structlog.get_logger(__name__)


def bind(descriptor: ConfigDescriptor, store: ConfigStore) -> bool:
    """Bind one descriptor. Returns False if it failed (already logged)."""
    document = store.ensure_document(descriptor.file)
    target = descriptor.target
    entry = document.get(descriptor.name)

    if entry is not None:
        try:
            value = entry.to_python(descriptor.value_type)
            # the document holds the declared type from here on
            stored = TypedValue.from_python(descriptor.value_type, value, entry.comment)
        except ValueCoercionError as e:
            logger.error(
                "config.value_coercion_failed",
                file=descriptor.file,
                key=descriptor.name,
                target=target.qualname,
                error=e.message,
            )
            return False
        target.set(value)
        document.put(descriptor.name, stored)
        logger.debug("config.value_loaded", file=descriptor.file, key=descriptor.name, kind=stored.kind)
        return True

    try:
        if descriptor.default is not None:
            target.set(copy.deepcopy(descriptor.default))
        elif target.get() is None:
            target.set(zero_value(descriptor.value_type))
        stored = TypedValue.from_python(descriptor.value_type, target.get(), descriptor.comment)
    except ValueCoercionError as e:
        logger.error(
            "config.value_default_failed",
            file=descriptor.file,
            key=descriptor.name,
            target=target.qualname,
            error=e.message,
        )
        return False

    document.put(descriptor.name, stored)
    logger.debug("config.value_defaulted", file=descriptor.file, key=descriptor.name)
    return True


def bind_all(descriptors: Iterable[ConfigDescriptor], store: ConfigStore) -> int:
    """Bind every descriptor. Returns how many bound successfully."""
    return sum(bind(descriptor, store) for descriptor in descriptors)


def refresh(descriptor: ConfigDescriptor, store: ConfigStore) -> bool:
    """Overwrite the document entry with the variable's current value."""
    document = store.ensure_document(descriptor.file)
    existing = document.get(descriptor.name)
    comment = existing.comment if existing is not None else descriptor.comment
    try:
        stored = TypedValue.from_python(descriptor.value_type, descriptor.target.get(), comment)
    except ValueCoercionError as e:
        logger.error(
            "config.value_refresh_failed",
            file=descriptor.file,
            key=descriptor.name,
            target=descriptor.target.qualname,
            error=e.message,
        )
        return False
    document.put(descriptor.name, stored)
    return True


def refresh_all(descriptors: Iterable[ConfigDescriptor], store: ConfigStore) -> int:
    return sum(refresh(descriptor, store) for descriptor in descriptors)
