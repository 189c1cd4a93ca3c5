"""Fluent builder for entity double definitions.

Example:

    definition = (
        EntityDoubleDefinitionBuilder.create("node")
        .bundle("article")
        .id(42)
        .label("Test Article")
        .field("field_tags", [{"target_id": 1}, {"target_id": 2}])
        .build()
    )
"""

from collections.abc import Iterable, Mapping
from typing import Any

from .capabilities import Entity, FieldableEntity
from .errors import ConfigurationError
from .models import CONTEXT_KEY, EntityDoubleDefinition, FieldDefinition


class EntityDoubleDefinitionBuilder:
    """Accumulates definition settings and builds an immutable definition.

    Every setter returns the builder so calls can be chained.
    """

    def __init__(self, entity_type: str):
        self._entity_type = entity_type
        self._bundle = ""
        self._id: Any = None
        self._uuid: Any = None
        self._label: Any = None
        self._fields: dict[str, FieldDefinition] = {}
        self._capabilities: list[type] = []
        self._methods: dict[str, Any] = {}
        self._context: dict[str, Any] = {}
        self._lenient = False
        self._mixins: list[type] = []
        self._url: Any = None
        self._primary_capability: type | None = None

    @classmethod
    def create(cls, entity_type: str) -> "EntityDoubleDefinitionBuilder":
        """Start a definition for ``entity_type``."""
        return cls(entity_type)

    @classmethod
    def from_definition(cls, definition: EntityDoubleDefinition) -> "EntityDoubleDefinitionBuilder":
        """Start from a copy of an existing definition.

        Mutability is not copied; it is chosen when the double is created.
        """
        builder = cls(definition.entity_type)
        builder._bundle = definition.bundle
        builder._id = definition.id
        builder._uuid = definition.uuid
        builder._label = definition.label
        builder._fields = dict(definition.fields)
        builder._capabilities = list(definition.capabilities)
        builder._methods = dict(definition.methods)
        builder._context = {k: v for k, v in definition.context.items() if k != CONTEXT_KEY}
        builder._lenient = definition.lenient
        builder._mixins = list(definition.mixins)
        builder._url = definition.url
        builder._primary_capability = definition.primary_capability
        return builder

    @classmethod
    def from_capability(cls, entity_type: str, capability: type) -> "EntityDoubleDefinitionBuilder":
        """Start a definition satisfying ``capability`` and all its ancestors.

        The capability becomes the primary capability, which error
        messages name when a method is missing a resolver.

        Raises:
            ConfigurationError: If ``capability`` is not an Entity capability.
        """
        if not isinstance(capability, type) or not issubclass(capability, Entity):
            raise ConfigurationError(
                f"{capability!r} is not an entity capability; it must extend Entity."
            )

        builder = cls(entity_type)
        ancestors = [
            klass for klass in capability.__mro__
            if isinstance(klass, type) and issubclass(klass, Entity)
        ]
        builder.capabilities(ancestors)
        builder._primary_capability = capability
        return builder

    def bundle(self, bundle: str) -> "EntityDoubleDefinitionBuilder":
        self._bundle = bundle
        return self

    def id(self, value: Any) -> "EntityDoubleDefinitionBuilder":
        """Set the identifier: a scalar or a callback taking the context."""
        self._id = value
        return self

    def uuid(self, value: Any) -> "EntityDoubleDefinitionBuilder":
        self._uuid = value
        return self

    def label(self, value: Any) -> "EntityDoubleDefinitionBuilder":
        self._label = value
        return self

    def field(self, field_name: str, value: Any) -> "EntityDoubleDefinitionBuilder":
        """Define a field.

        ``value`` may be a scalar, a property map, a list of scalars,
        property maps or entity doubles, or a callback taking the
        context and returning one of those.
        """
        self._fields[field_name] = FieldDefinition(value)
        return self

    def fields(self, fields: Mapping[str, Any]) -> "EntityDoubleDefinitionBuilder":
        for field_name, value in fields.items():
            self.field(field_name, value)
        return self

    def capability(self, capability: type) -> "EntityDoubleDefinitionBuilder":
        """Add a capability the double must satisfy."""
        if not isinstance(capability, type):
            raise ConfigurationError(f"Capability must be a class, got {capability!r}.")
        if capability not in self._capabilities:
            self._capabilities.append(capability)
        return self

    def capabilities(self, capabilities: Iterable[type]) -> "EntityDoubleDefinitionBuilder":
        for capability in capabilities:
            self.capability(capability)
        return self

    def method(self, method: str, value: Any) -> "EntityDoubleDefinitionBuilder":
        """Override a method with a return value or a callback.

        A callback receives the context followed by the call arguments.
        """
        self._methods[method] = value
        return self

    def methods(self, methods: Mapping[str, Any]) -> "EntityDoubleDefinitionBuilder":
        self._methods.update(methods)
        return self

    def context(self, key: str, value: Any) -> "EntityDoubleDefinitionBuilder":
        """Add a context entry passed to every callback.

        Raises:
            ConfigurationError: If ``key`` is the reserved definition key.
        """
        if key == CONTEXT_KEY:
            raise ConfigurationError(
                f"Context key '{CONTEXT_KEY}' is reserved for the entity double definition."
            )
        self._context[key] = value
        return self

    def with_context(self, context: Mapping[str, Any]) -> "EntityDoubleDefinitionBuilder":
        for key, value in context.items():
            self.context(key, value)
        return self

    def lenient(self, lenient: bool = True) -> "EntityDoubleDefinitionBuilder":
        """Make unconfigured and unsupported methods return None instead of raising."""
        self._lenient = lenient
        return self

    def mixin(self, mixin: type) -> "EntityDoubleDefinitionBuilder":
        """Layer a behavior class over the double.

        The mixin's methods run with the double as ``self`` and observe
        the same resolved values.
        """
        if not isinstance(mixin, type):
            raise ConfigurationError(f"Mixin must be a class, got {mixin!r}.")
        if mixin not in self._mixins:
            self._mixins.append(mixin)
        return self

    def mixins(self, mixins: Iterable[type]) -> "EntityDoubleDefinitionBuilder":
        for mixin in mixins:
            self.mixin(mixin)
        return self

    def url(self, url: Any) -> "EntityDoubleDefinitionBuilder":
        """Set the URL returned by ``to_url()``: a string or a callback."""
        self._url = url
        return self

    def build(self) -> EntityDoubleDefinition:
        """Build the definition.

        FieldableEntity is added automatically when fields are defined
        and no declared capability already provides it.
        """
        capabilities = list(self._capabilities)
        if self._fields and not any(issubclass(c, FieldableEntity) for c in capabilities):
            capabilities.append(FieldableEntity)

        return EntityDoubleDefinition(
            entity_type=self._entity_type,
            bundle=self._bundle,
            id=self._id,
            uuid=self._uuid,
            label=self._label,
            fields=dict(self._fields),
            capabilities=tuple(capabilities),
            methods=dict(self._methods),
            context=dict(self._context),
            lenient=self._lenient,
            mixins=tuple(self._mixins),
            url=self._url,
            primary_capability=self._primary_capability,
        )
