"""Definition models for entity doubles.

A definition is an immutable description of a double: its identity,
its fields, the capabilities it satisfies and how unconfigured methods
behave. One definition can back any number of doubles; per-double
mutations live in a MutableOverlay and never touch the definition.

All models in this module use only Python standard library types.
"""

import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from .capabilities import FieldableEntity, find_declaring_capability
from .errors import ConfigurationError

# Context key under which callbacks find the definition itself.
CONTEXT_KEY = "_definition"


def is_callable_value(value: Any) -> bool:
    """Return True when a definition value should be called with the context.

    Classes are callable but are treated as plain values.
    """
    return callable(value) and not isinstance(value, type)


def resolve_value(value: Any, context: Mapping[str, Any], *args: Any) -> Any:
    """Call a callback with the context, or return a scalar unchanged."""
    if is_callable_value(value):
        return value(context, *args)
    return value


@dataclass(frozen=True)
class FieldDefinition:
    """The raw value of one field.

    The value is a scalar, a property map, a list of scalars, property
    maps or entity doubles, or a callback taking the context and
    returning any of these.
    """

    value: Any
    is_callback: bool = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "is_callback", is_callable_value(self.value))

    def resolve(self, context: Mapping[str, Any]) -> Any:
        """Return the raw value, calling the callback if there is one."""
        if self.is_callback:
            return self.value(context)
        return self.value


@dataclass(frozen=True, eq=False)
class EntityDoubleDefinition:
    """Immutable description of an entity double.

    ``id``, ``uuid``, ``label`` and ``url`` are scalars or callbacks
    receiving the context. ``methods`` maps method names to return
    values or callbacks receiving the context followed by the call
    arguments.

    The context always exposes the definition under CONTEXT_KEY once
    the definition has passed through ``with_context``.
    """

    entity_type: str
    bundle: str = ""
    id: Any = None
    uuid: Any = None
    label: Any = None
    fields: Mapping[str, FieldDefinition] = field(default_factory=dict)
    capabilities: tuple[type, ...] = ()
    methods: Mapping[str, Any] = field(default_factory=dict)
    context: Mapping[str, Any] = field(default_factory=dict)
    mutable: bool = False
    lenient: bool = False
    mixins: tuple[type, ...] = ()
    url: Any = None
    primary_capability: type | None = None

    def __post_init__(self) -> None:
        """Validate the definition and freeze its collections."""
        if not self.entity_type or not self.entity_type.strip():
            raise ValueError("entity_type must be a non-empty string")

        if not self.bundle:
            object.__setattr__(self, "bundle", self.entity_type)

        fields = {
            name: value if isinstance(value, FieldDefinition) else FieldDefinition(value)
            for name, value in self.fields.items()
        }
        object.__setattr__(self, "fields", MappingProxyType(fields))
        object.__setattr__(self, "methods", MappingProxyType(dict(self.methods)))
        object.__setattr__(self, "capabilities", tuple(self.capabilities))
        object.__setattr__(self, "mixins", tuple(self.mixins))

        # The reserved key always points at the definition holding the
        # context; with_context() injects it.
        context = {k: v for k, v in self.context.items() if k != CONTEXT_KEY}
        object.__setattr__(self, "context", MappingProxyType(context))

        if fields and not self.has_capability(FieldableEntity):
            raise ConfigurationError(
                f"Entity double '{self.entity_type}' defines fields "
                f"({', '.join(sorted(fields))}) but none of its capabilities "
                f"extends FieldableEntity."
            )

    def has_capability(self, capability: type) -> bool:
        """Return True if a declared capability is or extends ``capability``."""
        return any(issubclass(declared, capability) for declared in self.capabilities)

    def has_method(self, method: str) -> bool:
        return method in self.methods

    def get_method(self, method: str) -> Any:
        """Return the override for ``method``, or None."""
        return self.methods.get(method)

    def has_field(self, field_name: str) -> bool:
        return field_name in self.fields

    def get_field(self, field_name: str) -> FieldDefinition | None:
        return self.fields.get(field_name)

    def with_context(self, extra: Mapping[str, Any] | None = None) -> "EntityDoubleDefinition":
        """Return a definition whose context includes ``extra`` and itself.

        Raises:
            ConfigurationError: If ``extra`` uses the reserved key.
        """
        extra = dict(extra or {})
        if CONTEXT_KEY in extra:
            raise ConfigurationError(
                f"Context key '{CONTEXT_KEY}' is reserved for the entity double definition."
            )
        if not extra and self.context.get(CONTEXT_KEY) is self:
            return self

        merged = dataclasses.replace(self, context={**self.context, **extra})
        object.__setattr__(
            merged,
            "context",
            MappingProxyType({**merged.context, CONTEXT_KEY: merged}),
        )
        return merged

    def with_mutable(self, mutable: bool) -> "EntityDoubleDefinition":
        """Return a definition with the given mutability."""
        if self.mutable == mutable:
            return self
        return dataclasses.replace(self, mutable=mutable)

    def with_lenient(self, lenient: bool) -> "EntityDoubleDefinition":
        """Return a definition with the given lenient flag."""
        if self.lenient == lenient:
            return self
        return dataclasses.replace(self, lenient=lenient)

    def declaring_capability(self, method: str, capabilities: tuple[type, ...] | None = None) -> type | None:
        """Find the capability that declares ``method``, for error messages.

        The primary capability wins, then the capabilities in declaration
        order (or ``capabilities`` when given).
        """
        candidates = list(capabilities if capabilities is not None else self.capabilities)
        if self.primary_capability is not None:
            candidates.insert(0, self.primary_capability)
        for capability in candidates:
            declaring = find_declaring_capability(capability, method)
            if declaring is not None:
                return declaring
        return None


@dataclass
class MutableOverlay:
    """Per-double field overrides layered over a definition.

    Created only for mutable doubles and owned by exactly one of them.
    """

    field_overrides: dict[str, Any] = field(default_factory=dict)

    def has_field_value(self, field_name: str) -> bool:
        return field_name in self.field_overrides

    def get_field_value(self, field_name: str) -> Any:
        return self.field_overrides[field_name]

    def set_field_value(self, field_name: str, value: Any) -> None:
        self.field_overrides[field_name] = value
