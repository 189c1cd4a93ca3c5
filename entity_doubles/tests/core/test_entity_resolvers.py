"""Unit tests for EntityResolverBuilder."""

import pytest

from entity_doubles.core.capabilities import FieldableEntity
from entity_doubles.core.entity_resolvers import EntityResolverBuilder
from entity_doubles.core.errors import (
    ConfigurationError,
    ImmutableMutationError,
    UndefinedFieldError,
)
from entity_doubles.core.models import (
    CONTEXT_KEY,
    EntityDoubleDefinition,
    FieldDefinition,
    MutableOverlay,
)

# ============================================================================
# Test Fixtures
# ============================================================================


class FieldListFactorySpy:
    """Field list factory recording its calls and returning marker objects."""

    def __init__(self):
        self.calls: list[tuple[str, FieldDefinition]] = []

    def __call__(self, field_name, field_definition, context):
        self.calls.append((field_name, field_definition))
        return object()


def make_definition(**overrides) -> EntityDoubleDefinition:
    values = {
        "entity_type": "node",
        "bundle": "article",
        "id": 42,
        "uuid": "uuid-42",
        "label": "Test Article",
        "fields": {"field_title": "Hello"},
        "capabilities": (FieldableEntity,),
        "context": {"user": "u1"},
    }
    values.update(overrides)
    return EntityDoubleDefinition(**values).with_context()


@pytest.fixture
def definition() -> EntityDoubleDefinition:
    return make_definition()


@pytest.fixture
def factory() -> FieldListFactorySpy:
    return FieldListFactorySpy()


@pytest.fixture
def builder(definition, factory) -> EntityResolverBuilder:
    builder = EntityResolverBuilder(definition)
    builder.set_field_list_factory(factory)
    return builder


# ============================================================================
# Tests
# ============================================================================


class TestIdentityResolvers:
    """Tests for id, uuid, label, bundle and entity_type_id."""

    def test_scalars(self, builder, definition) -> None:
        resolvers = builder.get_resolvers()
        context = definition.context
        assert resolvers["id"](context) == 42
        assert resolvers["uuid"](context) == "uuid-42"
        assert resolvers["label"](context) == "Test Article"
        assert resolvers["bundle"](context) == "article"
        assert resolvers["entity_type_id"](context) == "node"

    def test_callbacks_receive_full_context(self) -> None:
        """Callbacks see user context and the definition itself."""
        seen = {}

        def label(context):
            seen.update(context)
            return f"{context[CONTEXT_KEY].bundle} by {context['user']}"

        definition = make_definition(label=label)
        resolvers = EntityResolverBuilder(definition).get_resolvers()

        assert resolvers["label"](definition.context) == "article by u1"
        assert seen[CONTEXT_KEY] is definition

    def test_callback_results_are_not_validated(self) -> None:
        definition = make_definition(id=lambda context: ["not", "an", "id"])
        assert EntityResolverBuilder(definition).get_resolvers()["id"](definition.context) == ["not", "an", "id"]

    def test_has_field(self, builder, definition) -> None:
        has_field = builder.get_resolvers()["has_field"]
        assert has_field(definition.context, "field_title") is True
        assert has_field(definition.context, "field_body") is False


class TestGet:
    """Tests for field list access."""

    def test_get_caches_per_field(self, builder, definition, factory) -> None:
        get = builder.get_resolvers()["get"]
        first = get(definition.context, "field_title")
        assert get(definition.context, "field_title") is first
        assert len(factory.calls) == 1
        assert factory.calls[0][0] == "field_title"

    def test_magic_get_shares_cache(self, builder, definition) -> None:
        resolvers = builder.get_resolvers()
        assert resolvers["__getattr__"](definition.context, "field_title") is resolvers["get"](
            definition.context, "field_title"
        )

    def test_undefined_field(self, builder, definition) -> None:
        with pytest.raises(UndefinedFieldError, match="field_body") as exc_info:
            builder.get_resolvers()["get"](definition.context, "field_body")
        assert isinstance(exc_info.value, AttributeError)

    def test_missing_factory(self, definition) -> None:
        with pytest.raises(ConfigurationError, match="Field list factory not set"):
            EntityResolverBuilder(definition).get_resolvers()["get"](definition.context, "field_title")


class TestSet:
    """Tests for field writes."""

    def test_immutable_set_raises(self, builder, definition) -> None:
        with pytest.raises(ImmutableMutationError, match="field_title") as exc_info:
            builder.get_resolvers()["set"](definition.context, "field_title", "New")
        assert "create_mutable()" in str(exc_info.value)

    def test_mutable_set_writes_overlay_and_evicts(self, definition, factory) -> None:
        overlay = MutableOverlay()
        builder = EntityResolverBuilder(definition, overlay)
        builder.set_field_list_factory(factory)
        resolvers = builder.get_resolvers()

        before = resolvers["get"](definition.context, "field_title")
        resolvers["set"](definition.context, "field_title", "New")
        after = resolvers["get"](definition.context, "field_title")

        assert overlay.get_field_value("field_title") == "New"
        assert after is not before
        assert factory.calls[-1][1].value == "New"
        assert definition.get_field("field_title").value == "Hello"

    def test_mutable_set_undefined_field(self, definition) -> None:
        builder = EntityResolverBuilder(definition, MutableOverlay())
        with pytest.raises(UndefinedFieldError):
            builder.get_resolvers()["set"](definition.context, "field_body", "x")


class TestToUrl:
    """Tests for URL resolution."""

    def test_requires_url(self, builder, definition) -> None:
        with pytest.raises(ConfigurationError, match=r"url\(\)"):
            builder.get_resolvers()["to_url"](definition.context)

    def test_memoizes_url_double(self) -> None:
        created = []
        definition = make_definition(url=lambda context: f"/node/{context[CONTEXT_KEY].id}")
        builder = EntityResolverBuilder(definition)
        builder.set_url_factory(lambda url, context: created.append(url) or object())
        to_url = builder.get_resolvers()["to_url"]

        assert to_url(definition.context) is to_url(definition.context, "canonical")
        assert created == ["/node/42"]

    def test_url_must_be_string(self) -> None:
        definition = make_definition(url=lambda context: 42)
        builder = EntityResolverBuilder(definition)
        builder.set_url_factory(lambda url, context: object())
        with pytest.raises(ConfigurationError, match="must resolve to a string"):
            builder.get_resolvers()["to_url"](definition.context)

    def test_missing_url_factory(self) -> None:
        definition = make_definition(url="/node/42")
        with pytest.raises(ConfigurationError, match="Url double factory not set"):
            EntityResolverBuilder(definition).get_resolvers()["to_url"](definition.context)


class TestMethodResolver:
    """Tests for method overrides."""

    def test_callable_override_gets_context_and_args(self) -> None:
        definition = make_definition(methods={"access": lambda context, op, account=None: op == "view"})
        resolver = EntityResolverBuilder(definition).method_resolver("access")
        assert resolver(definition.context, "view") is True
        assert resolver(definition.context, "delete") is False

    def test_static_override(self) -> None:
        definition = make_definition(methods={"get_owner_id": 7})
        resolver = EntityResolverBuilder(definition).method_resolver("get_owner_id")
        assert resolver(definition.context, "ignored") == 7
