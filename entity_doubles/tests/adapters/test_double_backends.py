"""Tests specific to each double back-end.

Shared behavior lives in test_backends.py; these tests cover what one
back-end offers beyond the port: mock call assertions, fake call
recording and the shape of the generated types.
"""

from unittest.mock import NonCallableMagicMock

import pytest

from entity_doubles.adapters.backend import FakeDoubleBackend, MockDoubleBackend
from entity_doubles.adapters.backend.fake import FakeDouble, recorded_calls
from entity_doubles.core.capabilities import Entity, FieldItemList
from entity_doubles.core.definition_builder import EntityDoubleDefinitionBuilder
from entity_doubles.core.errors import ConfigurationError
from entity_doubles.core.factory import EntityDoubleFactory
from entity_doubles.core.synthesis import synthesize_capability_type


def article_definition():
    return (
        EntityDoubleDefinitionBuilder.create("node")
        .bundle("article")
        .id(42)
        .label("Test Article")
        .field("field_title", "Hello")
        .build()
    )


class TestMockDoubleBackend:
    """Tests for MockDoubleBackend."""

    @pytest.fixture
    def factory(self) -> EntityDoubleFactory:
        return EntityDoubleFactory(MockDoubleBackend())

    def test_double_is_a_mock(self, factory) -> None:
        article = factory.create(article_definition())
        assert isinstance(article, NonCallableMagicMock)
        assert isinstance(article, Entity)

    def test_calls_are_recorded(self, factory) -> None:
        article = factory.create(article_definition())

        article.label()
        article.get("field_title")

        article.label.assert_called_once_with()
        article.get.assert_called_once_with("field_title")
        article.id.assert_not_called()

    def test_spec_rejects_unknown_methods(self, factory) -> None:
        """Names outside the capabilities fall through to field access."""
        article = factory.create(article_definition())
        assert not hasattr(article, "get_title")

    def test_field_list_magic_methods(self, factory) -> None:
        field_list = factory.create(article_definition()).get("field_title")
        assert len(field_list) == 1
        assert [item.value for item in field_list] == ["Hello"]
        field_list.count.assert_not_called()

    def test_unwired_double(self) -> None:
        backend = MockDoubleBackend()
        double = backend.create_double(synthesize_capability_type([FieldItemList]))
        assert isinstance(double, FieldItemList)
        assert not hasattr(double, "target_id")

    def test_mixin_base_type_is_shared(self, factory) -> None:
        backend = factory.backend
        first = factory.create(article_definition())
        second = factory.create(article_definition())
        assert backend.mixin_base_type(first) is backend.mixin_base_type(second)

    def test_mock_state_without_matching_field(self, factory) -> None:
        article = factory.create(article_definition())
        assert article.called is False
        assert article.call_count == 0

    def test_reset_mock_with_state_named_field(self, factory) -> None:
        article = factory.create(
            EntityDoubleDefinitionBuilder.create("node").label("A").field("called", "yes").build()
        )
        article.label()

        article.reset_mock()

        article.label.assert_not_called()
        assert article.called.value == "yes"

    def test_reset_mock_on_item(self, factory) -> None:
        item = factory.create(article_definition()).field_title.first()
        item.get_value()

        item.reset_mock()

        item.get_value.assert_not_called()
        assert item.value == "Hello"

    @pytest.mark.parametrize("name", ["mock_calls", "method_calls"])
    def test_call_record_names_rejected(self, factory, name) -> None:
        definition = EntityDoubleDefinitionBuilder.create("node").field(name, "x").build()
        with pytest.raises(ConfigurationError, match=name):
            factory.create(definition)


class TestFakeDoubleBackend:
    """Tests for FakeDoubleBackend."""

    @pytest.fixture
    def factory(self) -> EntityDoubleFactory:
        return EntityDoubleFactory(FakeDoubleBackend())

    def test_double_is_a_real_subclass(self, factory) -> None:
        article = factory.create(article_definition())
        assert isinstance(article, FakeDouble)
        assert issubclass(type(article), Entity)
        assert not isinstance(article, NonCallableMagicMock)

    def test_recorded_calls(self, factory) -> None:
        article = factory.create(article_definition())

        article.label()
        article.get("field_title")

        assert recorded_calls(article) == [("label", (), {}), ("get", ("field_title",), {})]
        assert recorded_calls(article, "get") == [("get", ("field_title",), {})]

    def test_concrete_type_is_cached(self) -> None:
        backend = FakeDoubleBackend()
        capability_type = synthesize_capability_type([FieldItemList])
        assert backend.concrete_type(capability_type) is backend.concrete_type(capability_type)

    def test_unwired_method(self) -> None:
        backend = FakeDoubleBackend()
        double = backend.create_double(synthesize_capability_type([FieldItemList]))
        with pytest.raises(NotImplementedError, match="first"):
            double.first()

    def test_private_attributes_bypass_hooks(self, factory) -> None:
        article = factory.create(article_definition())
        with pytest.raises(AttributeError):
            article._missing

    def test_repr(self, factory) -> None:
        assert repr(factory.create(article_definition())).startswith("<Fake")

    def test_no_reserved_field_names(self, factory) -> None:
        article = factory.create(
            EntityDoubleDefinitionBuilder.create("node").field("mock_calls", "x").build()
        )
        assert article.mock_calls.value == "x"
