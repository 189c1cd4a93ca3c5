"""Guardrails for capability methods without a resolver.

Some operations are deliberately unsupported: a double is a value
object, and saving, access checks or lifecycle hooks need services a
unit test does not have. Calling one of them fails with a message
pointing at an integration-level test. Any other unresolved method
fails with a message naming the override to add. Lenient doubles
return None for both.
"""

from collections.abc import Callable, Mapping
from types import MappingProxyType
from typing import Any

from .errors import MissingResolverError, UnsupportedOperationError

UNSUPPORTED_OPERATIONS: Mapping[str, str] = MappingProxyType({
    # Persistence
    "save": "Saving entities",
    "delete": "Deleting entities",
    # Access control
    "access": "Access checking",
    # Rendering
    "to_link": "Link generation",
    # Typed data
    "get_typed_data": "Typed data access",
    "get_field_definition": "Field definition access",
    "get_field_definitions": "Field definition access",
    # Revisions
    "is_default_revision": "Revision handling",
    "was_default_revision": "Revision handling",
    "is_latest_revision": "Revision handling",
    "is_latest_translation_affected_revision": "Revision handling",
    # Translations
    "has_translation": "Translation handling",
    "get_translation": "Translation handling",
    # Lifecycle hooks
    "pre_save": "Entity lifecycle hooks",
    "post_save": "Entity lifecycle hooks",
    "pre_delete": "Entity lifecycle hooks",
    "post_delete": "Entity lifecycle hooks",
    "post_load": "Entity lifecycle hooks",
})


def is_unsupported(method: str) -> bool:
    return method in UNSUPPORTED_OPERATIONS


def unsupported_error(method: str) -> UnsupportedOperationError:
    """Build the error for a guardrailed method."""
    category = UNSUPPORTED_OPERATIONS.get(method, "This operation")
    return UnsupportedOperationError(
        method,
        category,
        f"Method '{method}' is not supported. {category} requires runtime services. "
        f"This entity double is a synchronous value object and is not backed by "
        f"runtime services. Use an integration-level test for this behavior instead.",
    )


def missing_resolver_error(method: str, capability: str) -> MissingResolverError:
    return MissingResolverError(method, capability)


def lenient_default() -> None:
    """The value every unresolved method returns on a lenient double."""
    return None


def fallback_resolver(method: str, capability: str, lenient: bool) -> Callable[..., Any]:
    """Return the resolver for a capability method nothing else resolves.

    Args:
        method: Method name.
        capability: Name of the capability declaring the method, used in
            the missing-resolver message.
        lenient: Whether the double returns None instead of raising.
    """
    if lenient:
        return lambda context, *args, **kwargs: lenient_default()

    if is_unsupported(method):
        def raise_unsupported(context, *args, **kwargs):
            raise unsupported_error(method)
        return raise_unsupported

    def raise_missing(context, *args, **kwargs):
        raise missing_resolver_error(method, capability)
    return raise_missing
