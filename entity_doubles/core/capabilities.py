"""Capability contracts that entity doubles satisfy.

Each capability is an abstract base class. A double is built for a set
of capabilities; ``isinstance(double, Capability)`` holds for every
capability in that set, whichever back-end produced the double.

Capability Categories:

1. **Entity capabilities** (what the code under test consumes)
   - Entity: identity, metadata, URL, persistence and access
   - FieldableEntity: typed multi-value fields
   - ContentEntity: revisions and translations
   - EntityChanged, EntityPublished, EntityOwner: common traits
   - ConfigEntity: configuration entities
   - Node: a concrete content entity combining the above

2. **Value capabilities** (what entity doubles hand out)
   - FieldItemList, EntityReferenceFieldItemList, FieldItem
   - Url, GeneratedUrl

3. **MagicAccessor**: property-style access (``entity.field_tags``)
   merged into every synthesized double type.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterator
from typing import Any


MAGIC_ACCESSORS = frozenset({"__getattr__", "__setattr__"})


# ============================================================================
# ENTITY CAPABILITIES
# ============================================================================


class Entity(ABC):
    """Base contract of every entity."""

    @abstractmethod
    def uuid(self) -> str | None:
        """Return the universally unique identifier."""

    @abstractmethod
    def id(self) -> int | str | None:
        """Return the identifier, or None for an unsaved entity."""

    @abstractmethod
    def entity_type_id(self) -> str:
        """Return the entity type, e.g. "node" or "user"."""

    @abstractmethod
    def bundle(self) -> str:
        """Return the bundle, e.g. "article"."""

    @abstractmethod
    def label(self) -> str | None:
        """Return the human readable label."""

    @abstractmethod
    def to_url(self, rel: str | None = None, options: dict[str, Any] | None = None) -> "Url":
        """Return the canonical URL object for this entity."""

    @abstractmethod
    def to_link(self, text: str | None = None, rel: str | None = None,
                options: dict[str, Any] | None = None) -> Any:
        """Return a link to this entity."""

    @abstractmethod
    def access(self, operation: str, account: Any = None, return_as_object: bool = False) -> Any:
        """Check whether an account may perform an operation."""

    @abstractmethod
    def save(self) -> int:
        """Persist the entity."""

    @abstractmethod
    def delete(self) -> None:
        """Remove the entity from storage."""

    @abstractmethod
    def pre_save(self, storage: Any) -> None:
        """Lifecycle hook run before saving."""

    @abstractmethod
    def post_save(self, storage: Any, update: bool = True) -> None:
        """Lifecycle hook run after saving."""

    @abstractmethod
    def pre_delete(self, storage: Any) -> None:
        """Lifecycle hook run before deleting."""

    @abstractmethod
    def post_delete(self, storage: Any) -> None:
        """Lifecycle hook run after deleting."""

    @abstractmethod
    def post_load(self, storage: Any) -> None:
        """Lifecycle hook run after loading."""


class FieldableEntity(Entity):
    """An entity carrying typed multi-value fields."""

    @abstractmethod
    def has_field(self, field_name: str) -> bool:
        """Return True when the field exists on this entity."""

    @abstractmethod
    def get(self, field_name: str) -> "FieldItemList":
        """Return the item list of a field."""

    @abstractmethod
    def set(self, field_name: str, value: Any, notify: bool = True) -> "FieldableEntity":
        """Replace the value of a field and return the entity."""

    @abstractmethod
    def get_field_definition(self, field_name: str) -> Any:
        """Return the storage definition of a field."""

    @abstractmethod
    def get_field_definitions(self) -> dict[str, Any]:
        """Return the storage definitions of all fields."""

    @abstractmethod
    def get_typed_data(self) -> Any:
        """Return the typed data wrapper of this entity."""


class ContentEntity(FieldableEntity):
    """A revisionable, translatable fieldable entity."""

    @abstractmethod
    def is_default_revision(self, new_value: bool | None = None) -> bool:
        pass

    @abstractmethod
    def was_default_revision(self) -> bool:
        pass

    @abstractmethod
    def is_latest_revision(self) -> bool:
        pass

    @abstractmethod
    def is_latest_translation_affected_revision(self) -> bool:
        pass

    @abstractmethod
    def has_translation(self, langcode: str) -> bool:
        pass

    @abstractmethod
    def get_translation(self, langcode: str) -> "ContentEntity":
        pass


class EntityChanged(Entity):
    """An entity tracking its last change time."""

    @abstractmethod
    def get_changed_time(self) -> int:
        pass

    @abstractmethod
    def set_changed_time(self, timestamp: int) -> "EntityChanged":
        pass


class EntityPublished(Entity):
    """An entity with a published status."""

    @abstractmethod
    def is_published(self) -> bool:
        pass


class EntityOwner(Entity):
    """An entity owned by a user."""

    @abstractmethod
    def get_owner_id(self) -> int | None:
        pass


class ConfigEntity(Entity):
    """A configuration entity."""

    @abstractmethod
    def status(self) -> bool:
        pass


class Node(ContentEntity, EntityChanged, EntityOwner, EntityPublished):
    """A content node."""

    @abstractmethod
    def get_title(self) -> str:
        pass

    @abstractmethod
    def get_created_time(self) -> int:
        pass

    @abstractmethod
    def is_promoted(self) -> bool:
        pass

    @abstractmethod
    def is_sticky(self) -> bool:
        pass


# ============================================================================
# VALUE CAPABILITIES
# ============================================================================


class FieldItem(ABC):
    """A single value (delta) of a field."""

    @abstractmethod
    def get_value(self) -> dict[str, Any]:
        """Return the item as a property map."""

    @abstractmethod
    def set_value(self, values: Any, notify: bool = True) -> "FieldItem":
        """Replace the item's value and return the item."""

    @abstractmethod
    def is_empty(self) -> bool:
        """Return True when the item holds no value."""


class FieldItemList(ABC):
    """The ordered list of items of one field."""

    @abstractmethod
    def first(self) -> FieldItem | None:
        """Return the first item, or None when the list is empty."""

    @abstractmethod
    def is_empty(self) -> bool:
        pass

    @abstractmethod
    def get_value(self) -> list[dict[str, Any]]:
        """Return every item as a property map."""

    @abstractmethod
    def get(self, index: int) -> FieldItem | None:
        """Return the item at ``index``, or None when out of range."""

    @abstractmethod
    def set_value(self, values: Any, notify: bool = True) -> "FieldItemList":
        """Replace all items and return the list."""

    @abstractmethod
    def count(self) -> int:
        pass

    @abstractmethod
    def __iter__(self) -> Iterator[FieldItem]:
        pass

    @abstractmethod
    def __len__(self) -> int:
        pass


class EntityReferenceFieldItemList(FieldItemList):
    """A field list whose items point at other entities."""

    @abstractmethod
    def referenced_entities(self) -> list[Entity]:
        """Return the referenced entities in item order."""


class Url(ABC):
    """A routed URL."""

    @abstractmethod
    def to_string(self, collect_bubbleable_metadata: bool = False) -> "str | GeneratedUrl":
        """Return the URL string, or a GeneratedUrl when collecting metadata."""


class GeneratedUrl(ABC):
    """A generated URL string with cacheability metadata."""

    @abstractmethod
    def get_generated_url(self) -> str:
        pass


class MagicAccessor(ABC):
    """Property-style access to fields and item properties."""

    @abstractmethod
    def __getattr__(self, name: str) -> Any:
        pass

    @abstractmethod
    def __setattr__(self, name: str, value: Any) -> None:
        pass


# ============================================================================
# INTROSPECTION
# ============================================================================


def capability_name(capability: type) -> str:
    """Return the canonical ``module.qualname`` of a capability."""
    return f"{capability.__module__}.{capability.__qualname__}"


def capability_methods(capability: type) -> tuple[str, ...]:
    """List the abstract members of a capability, including inherited ones.

    The magic accessors are excluded: back-ends wire them separately.
    """
    abstract = getattr(capability, "__abstractmethods__", frozenset())
    return tuple(sorted(name for name in abstract if name not in MAGIC_ACCESSORS))


def find_declaring_capability(capability: type, method: str) -> type | None:
    """Return the most specific class in ``capability``'s MRO declaring ``method``."""
    for klass in capability.__mro__:
        if klass is object:
            break
        if method in vars(klass):
            return klass
    return None
