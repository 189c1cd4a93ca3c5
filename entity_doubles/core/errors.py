"""Error taxonomy for entity doubles.

Every error raised by the core derives from DoubleError so a test
can catch the whole family at once. Errors are raised synchronously
at the point of violation; nothing is collected or retried.
"""


class DoubleError(Exception):
    """Base exception for all entity double errors."""


class ConfigurationError(DoubleError):
    """A double was used without configuration it needs.

    Raised for invalid definitions, for optional configuration that is
    missing (such as a URL), and for missing downstream factories.
    """


class UnsupportedOperationError(DoubleError):
    """A capability method was invoked that the double does not support."""

    def __init__(self, method: str, category: str, message: str):
        self.method = method
        self.category = category
        super().__init__(message)


class MissingResolverError(UnsupportedOperationError, ConfigurationError):
    """A capability method was called but no override resolves it."""

    def __init__(self, method: str, capability: str):
        self.capability = capability
        super().__init__(
            method,
            "Unconfigured method",
            f"Method '{method}' on capability '{capability}' requires a resolver "
            f"in method overrides. Add method('{method}', callable) to the "
            f"definition builder, or build the double with lenient().",
        )


class UndefinedFieldError(DoubleError, AttributeError):
    """A field was accessed that is not defined on the double.

    Also an AttributeError, so ``hasattr(double, "field_x")`` answers
    False instead of raising.
    """

    def __init__(self, field_name: str):
        self.field_name = field_name
        super().__init__(f"Field '{field_name}' is not defined on this entity double.")


class ImmutableMutationError(DoubleError):
    """A write was attempted on an immutable double."""

    def __init__(self, field_name: str):
        self.field_name = field_name
        super().__init__(
            f"Cannot modify field '{field_name}' on immutable entity double. "
            f"Use create_mutable() if you need to test mutations."
        )


class ReferenceMismatchError(DoubleError):
    """An entity and an explicit target id disagree on the identifier."""

    def __init__(self, entity_id, target_id):
        self.entity_id = entity_id
        self.target_id = target_id
        super().__init__(
            f"Entity reference target_id mismatch: target_id is {target_id!r} "
            f"but the entity's id() is {entity_id!r}."
        )


class MissingReferenceError(DoubleError):
    """Referenced entities were requested for items carrying only a target id."""

    def __init__(self, field_name: str):
        self.field_name = field_name
        super().__init__(
            f"Cannot call referenced_entities() on field '{field_name}': field "
            f"contains target_id values without corresponding entity doubles. "
            f"Provide entity doubles or use {{'entity': None}} for empty references."
        )


class InvalidPropertyError(DoubleError):
    """A property was set that the field item or list does not expose."""
