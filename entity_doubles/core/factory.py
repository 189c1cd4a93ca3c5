"""Orchestration: assembling entity doubles from definitions.

EntityDoubleFactory composes the definition model, the resolver
builders, the guardrails and the type synthesis into finished doubles.
The concrete objects come from a DoubleBackendPort, so the same
assembly runs on every back-end.

Method precedence on an entity double:

1. a method override from the definition
2. a core resolver (id, label, get, set, to_url, ...)
3. the guardrail fallback (unsupported, missing resolver, or lenient None)
"""

import logging
from collections.abc import Callable, Mapping
from functools import partial
from typing import Any

from .capabilities import (
    MAGIC_ACCESSORS,
    Entity,
    EntityReferenceFieldItemList,
    FieldItem,
    FieldItemList,
    GeneratedUrl,
    Url,
    capability_methods,
    capability_name,
)
from .entity_resolvers import EntityResolverBuilder
from .errors import ConfigurationError
from .field_item_resolvers import FieldItemResolverBuilder
from .field_list_resolvers import FieldListResolverBuilder
from .guardrails import fallback_resolver
from .models import EntityDoubleDefinition, FieldDefinition, MutableOverlay
from .ports import DoubleBackendPort
from .synthesis import most_specific, synthesize_capability_type, synthesize_mixin_type
from .url_resolvers import UrlResolverBuilder

logger = logging.getLogger(__name__)

# Methods that return the double they were called on.
FLUENT_METHODS = frozenset({"set", "set_value"})


def resolve_capabilities(definition: EntityDoubleDefinition) -> list[type]:
    """Return the minimal capability list for a definition.

    Capabilities extended by another declared capability are dropped,
    and Entity is prepended when no declared capability covers it.
    """
    capabilities = most_specific(definition.capabilities)
    if not any(issubclass(capability, Entity) for capability in capabilities):
        capabilities.insert(0, Entity)
    return capabilities


class _DoubleRef:
    """Late-bound reference to the object handed back to the caller.

    Mixin layering replaces the double after its methods are wired, and
    fluent methods must return the final object.
    """

    def __init__(self, double: Any = None):
        self.double = double


class EntityDoubleFactory:
    """Creates entity doubles from definitions.

    Example:

        factory = EntityDoubleFactory(MockDoubleBackend())
        entity = factory.create(
            EntityDoubleDefinitionBuilder.create("node").id(1).build()
        )
    """

    def __init__(self, backend: DoubleBackendPort, lenient_by_default: bool = False):
        """Initialize with a back-end.

        Args:
            backend: Back-end creating and wiring the concrete doubles.
            lenient_by_default: Build every double in lenient mode.
        """
        self.backend = backend
        self.lenient_by_default = lenient_by_default

    def create(self, definition: EntityDoubleDefinition, context: Mapping[str, Any] | None = None) -> Any:
        """Create an immutable entity double.

        Args:
            definition: The double's definition.
            context: Extra context entries passed to every callback.

        Raises:
            ConfigurationError: If the definition or context is invalid.
        """
        return self._build_entity_double(self._prepare(definition, False, context))

    def create_mutable(self, definition: EntityDoubleDefinition, context: Mapping[str, Any] | None = None) -> Any:
        """Create an entity double whose fields can be written.

        Writes are kept in a per-double overlay; the definition stays
        untouched and can back other doubles.
        """
        return self._build_entity_double(self._prepare(definition, True, context))

    def _prepare(
        self,
        definition: EntityDoubleDefinition,
        mutable: bool,
        context: Mapping[str, Any] | None,
    ) -> EntityDoubleDefinition:
        definition = definition.with_mutable(mutable)
        if self.lenient_by_default:
            definition = definition.with_lenient(True)
        return definition.with_context(context)

    # ------------------------------------------------------------------
    # Entity doubles
    # ------------------------------------------------------------------

    def _build_entity_double(self, definition: EntityDoubleDefinition) -> Any:
        reserved = sorted(set(definition.fields) & self.backend.reserved_names())
        if reserved:
            raise ConfigurationError(
                f"Field names {', '.join(reserved)} are reserved by the "
                f"{type(self.backend).__name__} back-end and cannot be used on "
                f"entity double '{definition.entity_type}'."
            )

        capabilities = resolve_capabilities(definition)
        overlay = MutableOverlay() if definition.mutable else None

        builder = EntityResolverBuilder(definition, overlay)
        builder.set_field_list_factory(
            lambda field_name, field_definition, context: self._create_field_list(
                field_name, field_definition, definition, overlay, context
            )
        )
        if definition.url is not None:
            builder.set_url_factory(self._create_url)

        capability_type = synthesize_capability_type(capabilities)
        double = self.backend.create_double(capability_type)
        ref = _DoubleRef(double)

        methods = self._entity_methods(builder, definition, capability_type, capabilities, ref)
        self.backend.wire(double, methods)

        if definition.mixins:
            mixin_type = synthesize_mixin_type(self.backend.mixin_base_type(double), definition.mixins)
            double = self.backend.instantiate_mixin(double, mixin_type)
            ref.double = double

        logger.debug(
            f"Created {'mutable ' if definition.mutable else ''}entity double "
            f"{definition.entity_type}:{definition.bundle}",
            extra={
                "capabilities": [capability_name(c) for c in capabilities],
                "lenient": definition.lenient,
                "mixins": [capability_name(m) for m in definition.mixins],
            },
        )
        return double

    def _entity_methods(
        self,
        builder: EntityResolverBuilder,
        definition: EntityDoubleDefinition,
        capability_type: type,
        capabilities: list[type],
        ref: _DoubleRef,
    ) -> dict[str, Callable[..., Any]]:
        declared = capability_methods(capability_type)
        unknown = sorted(set(definition.methods) - set(declared) - MAGIC_ACCESSORS)
        if unknown:
            raise ConfigurationError(
                f"Method overrides {', '.join(unknown)} are not declared by any capability "
                f"of entity double '{definition.entity_type}'."
            )

        context = definition.context
        core = builder.get_resolvers()
        methods = {}
        for method in (*declared, *sorted(MAGIC_ACCESSORS)):
            if definition.has_method(method):
                resolver = builder.method_resolver(method)
            elif method in core:
                resolver = core[method]
                if method in FLUENT_METHODS:
                    resolver = _fluent(resolver, ref)
            else:
                declaring = definition.declaring_capability(method, tuple(capabilities))
                resolver = fallback_resolver(
                    method,
                    capability_name(declaring) if declaring else capability_name(capability_type),
                    definition.lenient,
                )
            methods[method] = partial(resolver, context)
        return methods

    # ------------------------------------------------------------------
    # Field list and field item doubles
    # ------------------------------------------------------------------

    def _create_field_list(
        self,
        field_name: str,
        field_definition: FieldDefinition,
        definition: EntityDoubleDefinition,
        overlay: MutableOverlay | None,
        context: Mapping[str, Any],
    ) -> Any:
        builder = FieldListResolverBuilder(field_definition, field_name, definition.mutable)
        builder.set_item_factory(
            lambda index, value, item_context: self._create_field_item(
                index, value, field_name, definition.mutable, item_context
            )
        )
        if overlay is not None:
            builder.set_state_updater(overlay.set_field_value)

        # Resolves the value once; the builder keeps it for every later read.
        is_reference = builder.is_reference_field(context)
        capability = EntityReferenceFieldItemList if is_reference else FieldItemList
        capability_type = synthesize_capability_type([capability])

        double = self.backend.create_double(capability_type)
        ref = _DoubleRef(double)
        self.backend.wire(double, self._bind(builder.get_resolvers(), capability_type, context, ref))
        return double

    def _create_field_item(
        self,
        index: int,
        value: Any,
        field_name: str,
        mutable: bool,
        context: Mapping[str, Any],
    ) -> Any:
        builder = FieldItemResolverBuilder(value, index, field_name, mutable)
        capability_type = synthesize_capability_type([FieldItem])

        double = self.backend.create_double(capability_type)
        ref = _DoubleRef(double)
        self.backend.wire(double, self._bind(builder.get_resolvers(), capability_type, context, ref))
        return double

    # ------------------------------------------------------------------
    # URL doubles
    # ------------------------------------------------------------------

    def _create_url(self, url: str, context: Mapping[str, Any]) -> Any:
        builder = UrlResolverBuilder(url)
        builder.set_generated_url_factory(lambda generated: self._create_generated_url(generated, context))
        capability_type = synthesize_capability_type([Url])

        double = self.backend.create_double(capability_type)
        self.backend.wire(double, self._bind(builder.get_resolvers(), capability_type, context))
        return double

    def _create_generated_url(self, url: str, context: Mapping[str, Any]) -> Any:
        capability_type = synthesize_capability_type([GeneratedUrl])
        resolvers = UrlResolverBuilder.generated_url_resolvers(url)

        double = self.backend.create_double(capability_type)
        self.backend.wire(double, self._bind(resolvers, capability_type, context))
        return double

    @staticmethod
    def _bind(
        resolvers: Mapping[str, Callable[..., Any]],
        capability_type: type,
        context: Mapping[str, Any],
        ref: _DoubleRef | None = None,
    ) -> dict[str, Callable[..., Any]]:
        """Bind the context to every resolver the capability type declares."""
        methods = {}
        for method in (*capability_methods(capability_type), *sorted(MAGIC_ACCESSORS)):
            resolver = resolvers.get(method)
            if resolver is None:
                continue
            if ref is not None and method in FLUENT_METHODS:
                resolver = _fluent(resolver, ref)
            methods[method] = partial(resolver, context)
        return methods


def _fluent(resolver: Callable[..., Any], ref: _DoubleRef) -> Callable[..., Any]:
    """Wrap a resolver so the call returns the double instead."""

    def call(*args: Any, **kwargs: Any) -> Any:
        resolver(*args, **kwargs)
        return ref.double

    return call
