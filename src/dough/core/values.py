# src/dough/core/values.py
"""Typed values held by config documents.

A TypedValue stores the plain data form of a configuration value (the
shapes a document can represent: booleans, numbers, strings, dates, lists
and string-keyed tables) plus an optional human-readable comment.

Conversion between a declared Python type and that plain form goes through
a pydantic TypeAdapter, cached per type:

    declared type --validate + dump(json)--> plain data  (from_python)
    plain data    --validate (lax)-------->  declared type (to_python)

So tuples are stored as lists, enums as their values and models/dataclasses
as tables, and reading a document back restores the declared type.
"""

import datetime
import types
from dataclasses import dataclass
from enum import Enum, StrEnum
from functools import cache
from typing import Annotated, Any, Literal, Union, get_args, get_origin

from pydantic import TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError

from dough.core.errors import ValueCoercionError

__all__ = [
    "TypedValue",
    "ValueKind",
    "adapter_for",
    "kind_of",
    "zero_value",
]


class ValueKind(StrEnum):
    """Tag of the plain data held by a TypedValue."""

    BOOLEAN = "boolean"
    INTEGER = "integer"
    FLOAT = "float"
    STRING = "string"
    DATETIME = "datetime"
    ARRAY = "array"
    TABLE = "table"


def kind_of(data: Any) -> ValueKind:
    """Classify plain document data.

    Raises:
        TypeError: If the data is not representable in a document.
    """
    # bool before int: bool is an int subclass
    if isinstance(data, bool):
        return ValueKind.BOOLEAN
    if isinstance(data, int):
        return ValueKind.INTEGER
    if isinstance(data, float):
        return ValueKind.FLOAT
    if isinstance(data, str):
        return ValueKind.STRING
    if isinstance(data, (datetime.date, datetime.time)):
        return ValueKind.DATETIME
    if isinstance(data, list):
        return ValueKind.ARRAY
    if isinstance(data, dict):
        return ValueKind.TABLE
    raise TypeError(f"Unsupported config value type: {type(data).__name__}")


@cache
def adapter_for(value_type: Any) -> TypeAdapter[Any]:
    """Return the (cached) pydantic TypeAdapter for a declared type.

    Raises:
        pydantic.errors.PydanticUserError: If pydantic cannot build a schema
            for the type.
    """
    return TypeAdapter(value_type)


def _check_representable(value_type: Any, data: Any, location: str) -> None:
    if data is None:
        raise ValueCoercionError(value_type, f"None at {location} cannot be stored in a config document")
    if isinstance(data, list):
        for index, item in enumerate(data):
            _check_representable(value_type, item, f"{location}[{index}]")
    elif isinstance(data, dict):
        for key, item in data.items():
            if not isinstance(key, str):
                raise ValueCoercionError(value_type, f"non-string key {key!r} at {location}")
            _check_representable(value_type, item, f"{location}.{key}")
    else:
        try:
            kind_of(data)
        except TypeError as e:
            raise ValueCoercionError(value_type, f"{e} at {location}") from e


@dataclass(frozen=True, slots=True)
class TypedValue:
    """A document value with an optional comment.

    Attributes:
        value: Plain data (see ValueKind)
        comment: Single-line comment written next to the value, or None
    """

    value: Any
    comment: str | None = None

    @property
    def kind(self) -> ValueKind:
        return kind_of(self.value)

    @classmethod
    def from_python(cls, value_type: Any, value: Any, comment: str | None = None) -> "TypedValue":
        """Wrap an in-memory value of ``value_type``.

        The value is validated against the declared type first, so a host
        program that assigned the wrong type fails here rather than writing
        data that could not be read back.

        Raises:
            ValueCoercionError: If the value does not fit the declared type or
                its plain form contains something a document cannot hold.
        """
        adapter = adapter_for(value_type)
        try:
            validated = adapter.validate_python(value)
            data = adapter.dump_python(validated, mode="json")
        except (ValidationError, PydanticSerializationError) as e:
            raise ValueCoercionError(value_type, str(e)) from e
        _check_representable(value_type, data, "value")
        return cls(data, comment)

    def to_python(self, value_type: Any) -> Any:
        """Coerce the stored data to ``value_type``.

        Raises:
            ValueCoercionError: If the data does not validate as the type.
        """
        try:
            return adapter_for(value_type).validate_python(self.value)
        except ValidationError as e:
            raise ValueCoercionError(value_type, str(e)) from e


def zero_value(value_type: Any) -> Any:
    """Construct the empty instance of a declared type.

    ``bool()``, ``int()``, ``str()``, ``list()`` and friends for plain
    classes; fixed-size tuples element by element; the first member of an
    enum, a Literal or an optional type.

    Raises:
        ValueCoercionError: If no empty instance can be built.
    """
    origin = get_origin(value_type)
    args = get_args(value_type)

    if origin is Annotated:
        return zero_value(args[0])
    if origin is Union or origin is types.UnionType:
        members = [arg for arg in args if arg is not type(None)]
        return zero_value(members[0])
    if origin is Literal:
        return args[0]
    if origin is tuple and args and args[-1] is not Ellipsis and args != ((),):
        return tuple(zero_value(arg) for arg in args)

    factory = origin if origin is not None else value_type
    if not isinstance(factory, type):
        raise ValueCoercionError(value_type, "no empty instance for a non-class type")
    if issubclass(factory, Enum):
        return next(iter(factory))
    try:
        return factory()
    except (TypeError, ValueError, ValidationError) as e:
        raise ValueCoercionError(value_type, f"cannot construct an empty instance: {e}") from e
