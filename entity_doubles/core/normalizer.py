"""Normalization of raw field values into field items.

Pure functions over definition values; no state is kept between calls.
"""

from collections.abc import Mapping
from typing import Any

from .capabilities import Entity
from .errors import ConfigurationError, ReferenceMismatchError


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))


class ReferenceNormalizer:
    """Classifies and flattens raw field values.

    A reference item is an entity double, or a property map carrying an
    ``entity`` or ``target_id`` key. A field containing at least one
    reference item is a reference field.

    All methods are static as the class carries no state.
    """

    @staticmethod
    def is_entity(value: Any) -> bool:
        return isinstance(value, Entity)

    @staticmethod
    def is_reference_item(value: Any) -> bool:
        """Return True for an entity double or a map shaped as a reference."""
        if ReferenceNormalizer.is_entity(value):
            return True
        return isinstance(value, Mapping) and ("entity" in value or "target_id" in value)

    @staticmethod
    def contains_entity_references(value: Any) -> bool:
        """Return True if the value, or any item of it, is a reference item."""
        if _is_sequence(value):
            return any(ReferenceNormalizer.is_reference_item(item) for item in value)
        return ReferenceNormalizer.is_reference_item(value)

    @staticmethod
    def normalize(value: Any, field_name: str | None = None) -> list[Any]:
        """Normalize a reference field value into a list of items.

        - a bare entity becomes ``{"target_id": entity.id(), "entity": entity}``
        - ``{"entity": E, "target_id": X}`` is checked for agreement
        - ``{"entity": None}`` without a target id is dropped
        - ``{"target_id": X}`` is kept without an entity
        - any other map, and None, is kept unchanged
        - a bare scalar is taken as a target id

        Raises:
            ReferenceMismatchError: If an explicit target id disagrees with
                the id of the entity on the same item.
            ConfigurationError: If an ``entity`` key holds something other
                than an entity double.
        """
        items = value if _is_sequence(value) else [value]
        normalized = []
        for delta, item in enumerate(items):
            if ReferenceNormalizer.is_empty_reference(item):
                continue
            normalized.append(ReferenceNormalizer.normalize_item(item, field_name, delta))
        return normalized

    @staticmethod
    def is_empty_reference(item: Any) -> bool:
        """Return True for ``{"entity": None}`` carrying no target id."""
        return (
            isinstance(item, Mapping)
            and "entity" in item
            and item["entity"] is None
            and item.get("target_id") is None
        )

    @staticmethod
    def normalize_item(item: Any, field_name: str | None = None, delta: int = 0) -> Any:
        """Normalize one item of a reference field."""
        if ReferenceNormalizer.is_entity(item):
            return {"target_id": item.id(), "entity": item}

        if isinstance(item, Mapping):
            entity = item.get("entity")
            if entity is None:
                return dict(item)

            if not ReferenceNormalizer.is_entity(entity):
                location = f"field '{field_name}' item {delta}" if field_name else f"item {delta}"
                raise ConfigurationError(
                    f"Reference {location} has an 'entity' that is not an entity double: "
                    f"{type(entity).__name__}."
                )

            entity_id = entity.id()
            if "target_id" in item and not _same_id(item["target_id"], entity_id):
                raise ReferenceMismatchError(entity_id, item["target_id"])
            reference = dict(item)
            reference["target_id"] = entity_id
            return reference

        if item is None:
            return None
        return {"target_id": item}

    @staticmethod
    def has_target_id_only_items(items: list[Any]) -> bool:
        """Return True if any item has a target id but no entity."""
        return any(
            isinstance(item, Mapping)
            and item.get("target_id") is not None
            and item.get("entity") is None
            for item in items
        )

    @staticmethod
    def extract_entities(items: list[Any]) -> list[Any]:
        """Return the entities of the items in order, skipping absent ones."""
        return [
            item["entity"]
            for item in items
            if isinstance(item, Mapping) and item.get("entity") is not None
        ]

    @staticmethod
    def to_items(value: Any, field_name: str | None = None) -> list[Any]:
        """Turn a resolved field value into one raw value per item.

        None is an empty field, a list or tuple holds one item per index
        and anything else is a single item. Reference fields are
        normalized with ``normalize``.
        """
        if ReferenceNormalizer.contains_entity_references(value):
            return ReferenceNormalizer.normalize(value, field_name)
        if value is None:
            return []
        if _is_sequence(value):
            return list(value)
        return [value]

    @staticmethod
    def ensure_property_structure(value: Any) -> dict[str, Any]:
        """Return a property map for an item value.

        Maps are returned unchanged; anything else is wrapped as
        ``{"value": value}``.
        """
        if isinstance(value, Mapping):
            return value
        return {"value": value}


def _same_id(left: Any, right: Any) -> bool:
    # Identifiers arrive as ints or numeric strings depending on the caller.
    if left is None or right is None:
        return left is right
    return left == right or str(left) == str(right)
