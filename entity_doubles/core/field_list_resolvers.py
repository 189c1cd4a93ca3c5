"""Resolvers for field item list methods."""

import logging
from collections.abc import Callable, Iterator, Mapping
from typing import Any

from .errors import (
    ConfigurationError,
    ImmutableMutationError,
    InvalidPropertyError,
    MissingReferenceError,
)
from .models import FieldDefinition
from .normalizer import ReferenceNormalizer

logger = logging.getLogger(__name__)

Resolver = Callable[..., Any]
FieldItemFactory = Callable[[int, Any, Mapping[str, Any]], Any]
StateUpdater = Callable[[str, Any], None]


class FieldListResolverBuilder:
    """Builds the resolvers of one field item list double.

    The field value is resolved lazily: the first read calls the
    callback (if any), normalizes the result into items and caches
    them. Every later read reuses the cache until a write resets it.

    Whether the list is a reference list is decided on the first
    resolution and never revisited by this builder.
    """

    def __init__(self, definition: FieldDefinition, field_name: str, mutable: bool = False):
        self._definition = definition
        self._field_name = field_name
        self._mutable = mutable
        self._items: list[Any] | None = None
        self._item_cache: dict[int, Any] = {}
        self._item_factory: FieldItemFactory | None = None
        self._state_updater: StateUpdater | None = None
        self._is_reference: bool | None = None

    @property
    def field_name(self) -> str:
        return self._field_name

    @property
    def definition(self) -> FieldDefinition:
        return self._definition

    def set_item_factory(self, factory: FieldItemFactory) -> None:
        """Set the factory called as ``factory(index, raw_item, context)``."""
        self._item_factory = factory

    def set_state_updater(self, updater: StateUpdater) -> None:
        """Set the hook called as ``updater(field_name, values)`` on writes."""
        self._state_updater = updater

    def is_reference_field(self, context: Mapping[str, Any]) -> bool:
        """Return True if the first resolution found entity references."""
        self.resolve_items(context)
        return bool(self._is_reference)

    def resolve_items(self, context: Mapping[str, Any]) -> list[Any]:
        """Return the raw value of every item, resolving on first use.

        Raises:
            ReferenceMismatchError: If a reference item's entity and
                target id disagree.
            ConfigurationError: If a reference item's entity is not an
                entity double.
        """
        if self._items is not None:
            return self._items

        raw = self._definition.resolve(context)
        if self._is_reference is None:
            self._is_reference = ReferenceNormalizer.contains_entity_references(raw)
        self._items = ReferenceNormalizer.to_items(raw, self._field_name)
        return self._items

    def get_resolvers(self) -> dict[str, Resolver]:
        """Return the resolvers keyed by method name."""
        return {
            "first": self._resolve_first,
            "is_empty": self._resolve_is_empty,
            "get_value": self._resolve_get_value,
            "get": self._resolve_get,
            "__getattr__": self._resolve_magic_get,
            "set_value": self._resolve_set_value,
            "__setattr__": self._resolve_magic_set,
            "referenced_entities": self._resolve_referenced_entities,
            "__iter__": self._resolve_iter,
            "count": self._resolve_count,
            "__len__": self._resolve_count,
        }

    def _resolve_first(self, context: Mapping[str, Any]) -> Any:
        items = self.resolve_items(context)
        if not items:
            return None
        return self._item_double(0, items[0], context)

    def _resolve_is_empty(self, context: Mapping[str, Any]) -> bool:
        return self.resolve_items(context) == []

    def _resolve_get_value(self, context: Mapping[str, Any]) -> list[Any]:
        return [
            ReferenceNormalizer.ensure_property_structure(item)
            for item in self.resolve_items(context)
        ]

    def _resolve_get(self, context: Mapping[str, Any], index: int) -> Any:
        items = self.resolve_items(context)
        if not isinstance(index, int) or not 0 <= index < len(items):
            return None
        return self._item_double(index, items[index], context)

    def _resolve_magic_get(self, context: Mapping[str, Any], name: str) -> Any:
        first = self._resolve_first(context)
        if first is None:
            return None
        return getattr(first, name)

    def _resolve_set_value(self, context: Mapping[str, Any], values: Any, notify: bool = True) -> None:
        if not self._mutable:
            raise ImmutableMutationError(self._field_name)

        if self._state_updater is not None:
            self._state_updater(self._field_name, values)

        self._items = None
        self._item_cache = {}
        self._definition = FieldDefinition(values)
        logger.debug(f"Reset cached items of field '{self._field_name}'")

    def _resolve_magic_set(self, context: Mapping[str, Any], name: str, value: Any) -> None:
        if name != "value":
            raise InvalidPropertyError(
                f"Setting property '{name}' on field item list is not supported."
            )
        self._resolve_set_value(context, value)

    def _resolve_referenced_entities(self, context: Mapping[str, Any]) -> list[Any]:
        items = self.resolve_items(context)
        if ReferenceNormalizer.has_target_id_only_items(items):
            raise MissingReferenceError(self._field_name)
        return ReferenceNormalizer.extract_entities(items)

    def _resolve_iter(self, context: Mapping[str, Any]) -> Iterator[Any]:
        items = self.resolve_items(context)
        return iter([
            self._item_double(index, item, context)
            for index, item in enumerate(items)
        ])

    def _resolve_count(self, context: Mapping[str, Any]) -> int:
        return len(self.resolve_items(context))

    def _item_double(self, index: int, item: Any, context: Mapping[str, Any]) -> Any:
        if index in self._item_cache:
            return self._item_cache[index]

        if self._item_factory is None:
            raise ConfigurationError(
                "Field item factory not set. Cannot create field item double."
            )

        double = self._item_factory(index, item, context)
        self._item_cache[index] = double
        return double
