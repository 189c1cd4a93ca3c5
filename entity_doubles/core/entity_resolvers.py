"""Resolvers for entity-level methods.

A resolver is a plain callable ``(context, *args) -> result``. The
orchestrator binds the context and hands the resolvers to a back-end,
which makes them answer method calls on a concrete double. Nothing in
this module creates a double itself; sub-doubles come from factories
injected by the orchestrator.
"""

import logging
from collections.abc import Callable, Mapping
from typing import Any

from .errors import ConfigurationError, ImmutableMutationError, UndefinedFieldError
from .models import EntityDoubleDefinition, FieldDefinition, MutableOverlay, resolve_value

logger = logging.getLogger(__name__)

Resolver = Callable[..., Any]
FieldListFactory = Callable[[str, FieldDefinition, Mapping[str, Any]], Any]
UrlFactory = Callable[[str, Mapping[str, Any]], Any]


class EntityResolverBuilder:
    """Builds the resolvers of one entity double.

    Holds the per-double caches: one field list double per field name
    and one URL double. The overlay is present only on mutable doubles.
    """

    def __init__(
        self,
        definition: EntityDoubleDefinition,
        overlay: MutableOverlay | None = None,
    ):
        self._definition = definition
        self._overlay = overlay
        self._field_list_cache: dict[str, Any] = {}
        self._field_list_factory: FieldListFactory | None = None
        self._url_factory: UrlFactory | None = None
        self._url_double: Any = None

    @property
    def definition(self) -> EntityDoubleDefinition:
        return self._definition

    def set_field_list_factory(self, factory: FieldListFactory) -> None:
        """Set the factory called as ``factory(field_name, field_definition, context)``."""
        self._field_list_factory = factory

    def set_url_factory(self, factory: UrlFactory) -> None:
        """Set the factory called as ``factory(url, context)``."""
        self._url_factory = factory

    def get_resolvers(self) -> dict[str, Resolver]:
        """Return the core resolvers keyed by method name."""
        return {
            "id": self._resolve_id,
            "uuid": self._resolve_uuid,
            "label": self._resolve_label,
            "bundle": self._resolve_bundle,
            "entity_type_id": self._resolve_entity_type_id,
            "has_field": self._resolve_has_field,
            "get": self._resolve_get,
            "__getattr__": self._resolve_get,
            "set": self._resolve_set,
            "__setattr__": self._resolve_set,
            "to_url": self._resolve_to_url,
        }

    def method_resolver(self, method: str) -> Resolver:
        """Return the resolver for a method override.

        A callable override is called with the context followed by the
        call arguments; anything else is returned as-is.
        """
        override = self._definition.get_method(method)

        def resolve_override(context: Mapping[str, Any], *args: Any, **kwargs: Any) -> Any:
            if callable(override) and not isinstance(override, type):
                return override(context, *args, **kwargs)
            return override

        return resolve_override

    def _resolve_id(self, context: Mapping[str, Any]) -> Any:
        return resolve_value(self._definition.id, context)

    def _resolve_uuid(self, context: Mapping[str, Any]) -> Any:
        return resolve_value(self._definition.uuid, context)

    def _resolve_label(self, context: Mapping[str, Any]) -> Any:
        return resolve_value(self._definition.label, context)

    def _resolve_bundle(self, context: Mapping[str, Any]) -> str:
        return self._definition.bundle

    def _resolve_entity_type_id(self, context: Mapping[str, Any]) -> str:
        return self._definition.entity_type

    def _resolve_has_field(self, context: Mapping[str, Any], field_name: str) -> bool:
        return self._definition.has_field(field_name)

    def _resolve_get(self, context: Mapping[str, Any], field_name: str) -> Any:
        if field_name in self._field_list_cache:
            return self._field_list_cache[field_name]

        field_definition = self._field_definition_for_access(field_name)

        if self._field_list_factory is None:
            raise ConfigurationError(
                f"Field list factory not set. Cannot create field list double for '{field_name}'."
            )

        field_list = self._field_list_factory(field_name, field_definition, context)
        self._field_list_cache[field_name] = field_list
        return field_list

    def _resolve_set(
        self,
        context: Mapping[str, Any],
        field_name: str,
        value: Any,
        notify: bool = True,
    ) -> None:
        if self._overlay is None:
            raise ImmutableMutationError(field_name)

        if not self._definition.has_field(field_name):
            raise UndefinedFieldError(field_name)

        self._overlay.set_field_value(field_name, value)
        if self._field_list_cache.pop(field_name, None) is not None:
            logger.debug(f"Evicted cached field list for '{field_name}'")

    def _resolve_to_url(
        self,
        context: Mapping[str, Any],
        rel: str | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> Any:
        if self._url_double is not None:
            return self._url_double

        if self._definition.url is None:
            raise ConfigurationError(
                "Method 'to_url' requires url() to be configured in the entity double "
                "definition. Add .url('/path/to/entity') to your builder."
            )

        url = resolve_value(self._definition.url, context)
        if not isinstance(url, str):
            raise ConfigurationError(
                f"The url() value must resolve to a string. Got: {type(url).__name__}"
            )

        if self._url_factory is None:
            raise ConfigurationError("Url double factory not set. Cannot create Url double.")

        self._url_double = self._url_factory(url, context)
        return self._url_double

    def _field_definition_for_access(self, field_name: str) -> FieldDefinition:
        if self._overlay is not None and self._overlay.has_field_value(field_name):
            return FieldDefinition(self._overlay.get_field_value(field_name))

        field_definition = self._definition.get_field(field_name)
        if field_definition is None:
            raise UndefinedFieldError(field_name)
        return field_definition
