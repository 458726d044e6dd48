# src/dough/core/registry.py
"""Descriptor discovery, validation and the descriptor registry.

A scan target is a module or a class. Scanning a module visits its own
module-level annotations, then every class defined in it (nested classes
included) in definition order. Scanning a class visits the class and its
nested classes. Each annotation carrying a ConfigValue marker becomes a
ConfigDescriptor once it passes validation:

- the variable is process-wide (module attribute, or class attribute
  declared as ClassVar)
- the file is a bare file name with a recognized extension
- pydantic can build a schema for the declared type
- a declared default has exactly the declared type

A rejected variable is logged and skipped; the scan carries on.
"""

import inspect
import re
from collections.abc import Iterable, Iterator
from pathlib import PurePath
from types import ModuleType, UnionType
from typing import Annotated, Any, ClassVar, Union, get_args, get_origin

import structlog
from pydantic import ValidationError
from pydantic.errors import PydanticUserError

from dough.core.descriptors import BindingTarget, ConfigDescriptor, ConfigValue
from dough.core.errors import DescriptorValidationError
from dough.core.store import DEFAULT_EXTENSIONS
from dough.core.values import adapter_for

__all__ = [
    "DescriptorRegistry",
    "ScanTarget",
    "scan",
    "validate_descriptor",
]

logger = structlog.get_logger(__name__)

ScanTarget = ModuleType | type

_ANNOTATION_ERRORS = (NameError, SyntaxError, TypeError, AttributeError)
_CLASSVAR_PREFIX = re.compile(r"\s*(?:\w+\.)*ClassVar\b")


def _unwrap(annotation: Any) -> tuple[Any, ConfigValue | None, bool]:
    """Strip ClassVar/Annotated wrappers.

    Returns:
        (declared type, first ConfigValue marker or None, declared as ClassVar)
    """
    marker: ConfigValue | None = None
    class_var = False
    while True:
        origin = get_origin(annotation)
        if origin is ClassVar:
            class_var = True
            args = get_args(annotation)
            annotation = args[0] if args else Any
        elif origin is Annotated:
            base, *metadata = get_args(annotation)
            if marker is None:
                marker = next((item for item in metadata if isinstance(item, ConfigValue)), None)
            annotation = base
        else:
            return annotation, marker, class_var


def _owner_name(owner: ScanTarget) -> str:
    if isinstance(owner, ModuleType):
        return owner.__name__
    return f"{owner.__module__}.{owner.__qualname__}"


def _annotations(owner: ScanTarget) -> dict[str, Any]:
    """Resolved annotations declared directly on ``owner``.

    If string annotations cannot all be evaluated, the ones that could be are
    still returned, and unresolved ones naming ConfigValue are reported.
    """
    try:
        return inspect.get_annotations(owner, eval_str=True)
    except _ANNOTATION_ERRORS as e:
        error = e

    try:
        raw = inspect.get_annotations(owner)
    except _ANNOTATION_ERRORS:
        logger.error("config.annotations_unresolved", owner=_owner_name(owner), error=str(error))
        return {}

    for attribute, annotation in raw.items():
        if isinstance(annotation, str) and "ConfigValue" in annotation:
            logger.error(
                "config.descriptor_rejected",
                target=f"{_owner_name(owner)}.{attribute}",
                error=f"annotation could not be resolved: {error}",
            )
    return {attribute: annotation for attribute, annotation in raw.items() if not isinstance(annotation, str)}


def _classes_in(owner: ScanTarget, seen: set[type]) -> Iterator[type]:
    """Classes defined in ``owner`` (not imported or aliased), depth first."""
    module_name = owner.__name__ if isinstance(owner, ModuleType) else owner.__module__
    prefix = "" if isinstance(owner, ModuleType) else f"{owner.__qualname__}."
    for value in list(vars(owner).values()):
        if not isinstance(value, type) or value in seen:
            continue
        if value.__module__ != module_name or value.__qualname__ != f"{prefix}{value.__name__}":
            continue
        seen.add(value)
        yield value
        yield from _classes_in(value, seen)


def _owners(target: ScanTarget) -> list[ScanTarget]:
    if isinstance(target, ModuleType):
        return [target, *_classes_in(target, set())]
    if isinstance(target, type):
        return [target, *_classes_in(target, {target})]
    raise TypeError(f"Scan target must be a module or a class, got {type(target).__name__}")


def _is_instance_scoped(target: BindingTarget) -> bool:
    if isinstance(target.owner, ModuleType):
        return False
    try:
        annotation = inspect.get_annotations(target.owner, eval_str=True).get(target.attribute)
    except _ANNOTATION_ERRORS:
        try:
            annotation = inspect.get_annotations(target.owner).get(target.attribute)
        except _ANNOTATION_ERRORS:
            return False
    if annotation is None:
        # plain class attribute without annotation
        return False
    if isinstance(annotation, str):
        # unresolvable string annotation: accept any ClassVar spelling (t.ClassVar, typing.ClassVar)
        return _CLASSVAR_PREFIX.match(annotation) is None
    return not _unwrap(annotation)[2]


def _default_matches(default: Any, value_type: Any) -> bool:
    if value_type is Any:
        return True
    origin = get_origin(value_type)
    if origin is Union or origin is UnionType:
        return any(_default_matches(default, member) for member in get_args(value_type))
    if origin is Annotated:
        return _default_matches(default, get_args(value_type)[0])
    if origin is None and isinstance(value_type, type):
        return type(default) is value_type
    if isinstance(origin, type) and type(default) is not origin:
        return False
    try:
        adapter_for(value_type).validate_python(default, strict=True)
    except ValidationError:
        return False
    return True


def validate_descriptor(descriptor: ConfigDescriptor, extensions: Iterable[str] = DEFAULT_EXTENSIONS) -> None:
    """Check a descriptor before it is accepted.

    Raises:
        DescriptorValidationError: With the reason the descriptor is rejected.
    """
    target = descriptor.target.qualname

    if not isinstance(descriptor.name, str) or not descriptor.name:
        raise DescriptorValidationError(target, "name must be a non-empty string")

    file_name = descriptor.file
    if not isinstance(file_name, str) or not file_name or PurePath(file_name).name != file_name:
        raise DescriptorValidationError(target, f"file must be a bare file name, got {file_name!r}")
    recognized = tuple(extensions)
    if PurePath(file_name).suffix not in recognized:
        raise DescriptorValidationError(
            target,
            f"file '{file_name}' does not have a recognized extension {list(recognized)}; it would never be reloaded",
        )

    if _is_instance_scoped(descriptor.target):
        raise DescriptorValidationError(target, "must be process-wide: declare the class attribute as ClassVar[...]")

    try:
        adapter_for(descriptor.value_type)
    except (PydanticUserError, TypeError) as e:
        raise DescriptorValidationError(target, f"unsupported type {descriptor.value_type!r}: {e}") from e

    if descriptor.default is not None and not _default_matches(descriptor.default, descriptor.value_type):
        raise DescriptorValidationError(
            target,
            f"default value type {type(descriptor.default).__name__} does not match declared type {descriptor.value_type!r}",
        )


def scan(target: ScanTarget, *, extensions: Iterable[str] = DEFAULT_EXTENSIONS) -> list[ConfigDescriptor]:
    """Discover and validate the configurable variables declared in ``target``.

    Returns:
        Accepted descriptors in discovery order.

    Raises:
        TypeError: If ``target`` is neither a module nor a class.
    """
    recognized = tuple(extensions)
    descriptors: list[ConfigDescriptor] = []
    for owner in _owners(target):
        for attribute, annotation in _annotations(owner).items():
            value_type, marker, _ = _unwrap(annotation)
            if marker is None:
                continue
            descriptor = ConfigDescriptor.from_marker(marker, value_type, BindingTarget(owner, attribute))
            try:
                validate_descriptor(descriptor, recognized)
            except DescriptorValidationError as e:
                logger.error("config.descriptor_rejected", target=e.target, error=e.message)
                continue
            descriptors.append(descriptor)
    return descriptors


class DescriptorRegistry:
    """Accepted descriptors, in discovery order.

    A (file, name) key can be claimed by one descriptor only; later claims
    are rejected and logged.
    """

    def __init__(self, extensions: Iterable[str] = DEFAULT_EXTENSIONS) -> None:
        self._extensions = tuple(extensions)
        self._descriptors: list[ConfigDescriptor] = []
        self._by_key: dict[tuple[str, str], ConfigDescriptor] = {}

    def __iter__(self) -> Iterator[ConfigDescriptor]:
        return iter(self._descriptors)

    def __len__(self) -> int:
        return len(self._descriptors)

    def __contains__(self, key: object) -> bool:
        return key in self._by_key

    @property
    def descriptors(self) -> tuple[ConfigDescriptor, ...]:
        return tuple(self._descriptors)

    def get(self, file_name: str, name: str) -> ConfigDescriptor | None:
        return self._by_key.get((file_name, name))

    def clear(self) -> None:
        self._descriptors.clear()
        self._by_key.clear()

    def _add(self, descriptor: ConfigDescriptor) -> bool:
        existing = self._by_key.get(descriptor.key)
        if existing is None:
            self._descriptors.append(descriptor)
            self._by_key[descriptor.key] = descriptor
            return True
        if existing.target == descriptor.target:
            logger.debug("config.descriptor_already_registered", target=descriptor.target.qualname)
            return False
        error = DescriptorValidationError(
            descriptor.target.qualname,
            f"key '{descriptor.name}' in '{descriptor.file}' is already bound to {existing.target.qualname}",
        )
        logger.error("config.descriptor_rejected", target=error.target, error=error.message)
        return False

    def register(self, descriptor: ConfigDescriptor) -> bool:
        """Explicitly register a descriptor (same validation as a scan).

        Returns:
            True if the descriptor was accepted.
        """
        try:
            validate_descriptor(descriptor, self._extensions)
        except DescriptorValidationError as e:
            logger.error("config.descriptor_rejected", target=e.target, error=e.message)
            return False
        return self._add(descriptor)

    def scan(self, target: ScanTarget) -> list[ConfigDescriptor]:
        """Scan ``target`` and register what it declares.

        Returns:
            The descriptors this call added.
        """
        return [descriptor for descriptor in scan(target, extensions=self._extensions) if self._add(descriptor)]
