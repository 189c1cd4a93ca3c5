"""Unit tests for EntityDoubleDefinitionBuilder."""

import pytest

from entity_doubles.core.capabilities import (
    ContentEntity,
    Entity,
    EntityChanged,
    EntityPublished,
    FieldableEntity,
    FieldItem,
    Node,
)
from entity_doubles.core.definition_builder import EntityDoubleDefinitionBuilder
from entity_doubles.core.errors import ConfigurationError
from entity_doubles.core.models import CONTEXT_KEY


class GreetingMixin:
    def greet(self) -> str:
        return f"Hello {self.label()}"


class TestBuild:
    """Tests for building definitions."""

    def test_minimal_definition(self) -> None:
        definition = EntityDoubleDefinitionBuilder.create("node").build()
        assert definition.entity_type == "node"
        assert definition.bundle == "node"
        assert definition.capabilities == ()
        assert definition.lenient is False
        assert definition.mutable is False

    def test_identity_values(self) -> None:
        label = lambda context: "Computed"  # noqa: E731
        definition = (
            EntityDoubleDefinitionBuilder.create("node")
            .bundle("article")
            .id(42)
            .uuid("abc-123")
            .label(label)
            .url("/node/42")
            .build()
        )
        assert definition.bundle == "article"
        assert definition.id == 42
        assert definition.uuid == "abc-123"
        assert definition.label is label
        assert definition.url == "/node/42"

    def test_fields_add_fieldable_capability(self) -> None:
        """Defining fields adds FieldableEntity automatically."""
        definition = (
            EntityDoubleDefinitionBuilder.create("node")
            .field("field_title", "Hello")
            .build()
        )
        assert definition.capabilities == (FieldableEntity,)

    def test_fields_keep_more_specific_fieldable_capability(self) -> None:
        """No FieldableEntity is added when a declared capability extends it."""
        definition = (
            EntityDoubleDefinitionBuilder.create("node")
            .capability(ContentEntity)
            .fields({"field_title": "Hello", "field_body": "Body"})
            .build()
        )
        assert definition.capabilities == (ContentEntity,)
        assert set(definition.fields) == {"field_title", "field_body"}

    def test_capabilities_are_deduplicated(self) -> None:
        definition = (
            EntityDoubleDefinitionBuilder.create("node")
            .capability(EntityChanged)
            .capabilities([EntityChanged, EntityPublished])
            .build()
        )
        assert definition.capabilities == (EntityChanged, EntityPublished)

    def test_capability_must_be_a_class(self) -> None:
        with pytest.raises(ConfigurationError):
            EntityDoubleDefinitionBuilder.create("node").capability("EntityChanged")  # type: ignore[arg-type]

    def test_methods(self) -> None:
        definition = (
            EntityDoubleDefinitionBuilder.create("node")
            .method("is_published", True)
            .methods({"get_owner_id": 3})
            .build()
        )
        assert dict(definition.methods) == {"is_published": True, "get_owner_id": 3}

    def test_lenient(self) -> None:
        assert EntityDoubleDefinitionBuilder.create("node").lenient().build().lenient is True

    def test_mixins_are_deduplicated(self) -> None:
        definition = (
            EntityDoubleDefinitionBuilder.create("node")
            .mixin(GreetingMixin)
            .mixins([GreetingMixin])
            .build()
        )
        assert definition.mixins == (GreetingMixin,)

    def test_mixin_must_be_a_class(self) -> None:
        with pytest.raises(ConfigurationError):
            EntityDoubleDefinitionBuilder.create("node").mixin(GreetingMixin())  # type: ignore[arg-type]


class TestContext:
    """Tests for context entries."""

    def test_context_entries(self) -> None:
        definition = (
            EntityDoubleDefinitionBuilder.create("node")
            .context("user", "u1")
            .with_context({"request": "r1"})
            .build()
        )
        assert dict(definition.context) == {"user": "u1", "request": "r1"}

    def test_reserved_key_rejected(self) -> None:
        with pytest.raises(ConfigurationError, match=CONTEXT_KEY):
            EntityDoubleDefinitionBuilder.create("node").context(CONTEXT_KEY, 1)


class TestFromDefinition:
    """Tests for copy-and-modify."""

    def test_copies_and_overrides(self) -> None:
        original = (
            EntityDoubleDefinitionBuilder.create("node")
            .bundle("article")
            .id(1)
            .field("field_title", "Original")
            .method("is_published", True)
            .context("user", "u1")
            .build()
        )
        copy = (
            EntityDoubleDefinitionBuilder.from_definition(original.with_context())
            .id(2)
            .field("field_title", "Copy")
            .build()
        )

        assert copy.id == 2
        assert copy.bundle == "article"
        assert copy.get_field("field_title").value == "Copy"
        assert copy.get_method("is_published") is True
        assert dict(copy.context) == {"user": "u1"}
        assert original.id == 1
        assert original.get_field("field_title").value == "Original"


class TestFromCapability:
    """Tests for from_capability."""

    def test_collects_ancestors_and_sets_primary(self) -> None:
        definition = EntityDoubleDefinitionBuilder.from_capability("node", Node).build()
        assert definition.primary_capability is Node
        assert definition.capabilities[0] is Node
        assert set(definition.capabilities) >= {Node, ContentEntity, FieldableEntity, EntityChanged, Entity}

    def test_rejects_non_entity_capability(self) -> None:
        with pytest.raises(ConfigurationError, match="Entity"):
            EntityDoubleDefinitionBuilder.from_capability("node", FieldItem)
