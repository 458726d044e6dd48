# src/dough/core/descriptors.py
"""Declaring configurable variables.

A configurable variable is a process-wide attribute whose annotation carries
a ConfigValue marker:

    # module scope
    fullscreen: Annotated[bool, ConfigValue("Fullscreen", ConfigFiles.ENGINE_VIDEO)] = False

    # class scope: must be a ClassVar (a bare class annotation is per-instance)
    class Video:
        vsync: ClassVar[Annotated[bool, ConfigValue("VSync", ConfigFiles.ENGINE_VIDEO)]] = True

Scanning (see dough.core.registry) turns each marker into a ConfigDescriptor
that pairs the marker with the declared type and a BindingTarget.
"""

from dataclasses import dataclass
from types import ModuleType
from typing import Any

__all__ = [
    "BindingTarget",
    "ConfigDescriptor",
    "ConfigFiles",
    "ConfigValue",
]


class ConfigFiles:
    """File names used by the engine's own configuration."""

    ENGINE_CORE = "EngineCore.cfg"
    ENGINE_VIDEO = "EngineVideo.cfg"


@dataclass(frozen=True, slots=True)
class ConfigValue:
    """Annotation marker for a configurable variable.

    Attributes:
        name: Key the value is stored under
        file: File to store the value in, extension included
        comment: Written next to the value. Persists between sessions if
            edited by the user.
        default: Assigned when the file has no value yet. When None, the
            variable keeps its current value, or gets the empty instance of
            its type if it has none.
    """

    name: str
    file: str
    comment: str | None = None
    default: Any = None


@dataclass(frozen=True, slots=True)
class BindingTarget:
    """Get/set indirection to a process-wide attribute."""

    owner: ModuleType | type
    attribute: str

    @property
    def qualname(self) -> str:
        if isinstance(self.owner, ModuleType):
            return f"{self.owner.__name__}.{self.attribute}"
        return f"{self.owner.__module__}.{self.owner.__qualname__}.{self.attribute}"

    def get(self) -> Any:
        """Current value, or None if the attribute was declared but never assigned."""
        return getattr(self.owner, self.attribute, None)

    def set(self, value: Any) -> None:
        setattr(self.owner, self.attribute, value)


@dataclass(frozen=True, slots=True)
class ConfigDescriptor:
    """One discovered configurable variable.

    Identity is the (file, name) pair. Created during a scan and held for the
    process lifetime; only the bound variable's value changes afterwards.
    """

    name: str
    file: str
    value_type: Any
    target: BindingTarget
    comment: str | None = None
    default: Any = None

    @classmethod
    def from_marker(cls, marker: ConfigValue, value_type: Any, target: BindingTarget) -> "ConfigDescriptor":
        return cls(
            name=marker.name,
            file=marker.file,
            value_type=value_type,
            target=target,
            comment=marker.comment,
            default=marker.default,
        )

    @property
    def key(self) -> tuple[str, str]:
        return (self.file, self.name)
