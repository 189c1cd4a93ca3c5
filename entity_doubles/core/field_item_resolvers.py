"""Resolvers for field item methods."""

from collections.abc import Callable, Mapping
from typing import Any

from .errors import ImmutableMutationError, InvalidPropertyError
from .normalizer import ReferenceNormalizer

Resolver = Callable[..., Any]


class FieldItemResolverBuilder:
    """Builds the resolvers of the field item at one index of one field.

    The item holds its raw value (a scalar or a property map) directly.
    Writes change only this item; the owning list is not told.
    """

    def __init__(self, value: Any, index: int, field_name: str, mutable: bool = False):
        self._value = value
        self._index = index
        self._field_name = field_name
        self._mutable = mutable

    @property
    def value(self) -> Any:
        return self._value

    def get_resolvers(self) -> dict[str, Resolver]:
        return {
            "__getattr__": self._resolve_magic_get,
            "get_value": self._resolve_get_value,
            "set_value": self._resolve_set_value,
            "__setattr__": self._resolve_magic_set,
            "is_empty": self._resolve_is_empty,
        }

    def _resolve_magic_get(self, context: Mapping[str, Any], name: str) -> Any:
        if isinstance(self._value, Mapping):
            return self._value.get(name)
        if name == "value":
            return self._value
        return None

    def _resolve_get_value(self, context: Mapping[str, Any]) -> Any:
        return ReferenceNormalizer.ensure_property_structure(self._value)

    def _resolve_set_value(self, context: Mapping[str, Any], values: Any, notify: bool = True) -> None:
        if not self._mutable:
            raise ImmutableMutationError(self._field_name)
        self._value = values

    def _resolve_magic_set(self, context: Mapping[str, Any], name: str, value: Any) -> None:
        if not self._mutable:
            raise ImmutableMutationError(f"{self._field_name}.{name}")

        if name == "value":
            self._value = value
        elif isinstance(self._value, Mapping):
            # Copy so the definition's map is never written through.
            self._value = {**self._value, name: value}
        else:
            raise InvalidPropertyError(f"Cannot set property '{name}' on scalar field item.")

    def _resolve_is_empty(self, context: Mapping[str, Any]) -> bool:
        return self._value is None or (isinstance(self._value, str) and self._value == "")
