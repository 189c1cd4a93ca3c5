"""Core logic for entity doubles.

This package contains zero external dependencies: definitions,
resolver builders, guardrails, type synthesis and the orchestrating
factory. Concrete doubles are produced by the back-ends in the adapters
package through DoubleBackendPort.
"""

from .capabilities import (
    ConfigEntity,
    ContentEntity,
    Entity,
    EntityChanged,
    EntityOwner,
    EntityPublished,
    EntityReferenceFieldItemList,
    FieldableEntity,
    FieldItem,
    FieldItemList,
    GeneratedUrl,
    MagicAccessor,
    Node,
    Url,
)
from .definition_builder import EntityDoubleDefinitionBuilder
from .errors import (
    ConfigurationError,
    DoubleError,
    ImmutableMutationError,
    InvalidPropertyError,
    MissingReferenceError,
    MissingResolverError,
    ReferenceMismatchError,
    UndefinedFieldError,
    UnsupportedOperationError,
)
from .factory import EntityDoubleFactory, resolve_capabilities
from .models import CONTEXT_KEY, EntityDoubleDefinition, FieldDefinition, MutableOverlay
from .ports import DoubleBackendPort

__all__ = [
    "CONTEXT_KEY",
    "ConfigEntity",
    "ConfigurationError",
    "ContentEntity",
    "DoubleBackendPort",
    "DoubleError",
    "Entity",
    "EntityChanged",
    "EntityDoubleDefinition",
    "EntityDoubleDefinitionBuilder",
    "EntityDoubleFactory",
    "EntityOwner",
    "EntityPublished",
    "EntityReferenceFieldItemList",
    "FieldDefinition",
    "FieldItem",
    "FieldItemList",
    "FieldableEntity",
    "GeneratedUrl",
    "ImmutableMutationError",
    "InvalidPropertyError",
    "MagicAccessor",
    "MissingReferenceError",
    "MissingResolverError",
    "MutableOverlay",
    "Node",
    "ReferenceMismatchError",
    "UndefinedFieldError",
    "UnsupportedOperationError",
    "Url",
    "resolve_capabilities",
]
