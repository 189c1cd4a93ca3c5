"""Unit tests for guardrails."""

import pytest

from entity_doubles.core.errors import (
    ConfigurationError,
    MissingResolverError,
    UnsupportedOperationError,
)
from entity_doubles.core.guardrails import (
    UNSUPPORTED_OPERATIONS,
    fallback_resolver,
    is_unsupported,
    unsupported_error,
)


class TestRegistry:
    """Tests for the unsupported operations registry."""

    @pytest.mark.parametrize(
        "method,category",
        [
            ("save", "Saving entities"),
            ("delete", "Deleting entities"),
            ("access", "Access checking"),
            ("to_link", "Link generation"),
            ("get_translation", "Translation handling"),
            ("is_latest_revision", "Revision handling"),
            ("post_load", "Entity lifecycle hooks"),
        ],
    )
    def test_categories(self, method, category) -> None:
        assert is_unsupported(method)
        assert UNSUPPORTED_OPERATIONS[method] == category

    def test_supported_methods(self) -> None:
        assert not is_unsupported("label")
        assert not is_unsupported("get_changed_time")

    def test_registry_is_read_only(self) -> None:
        with pytest.raises(TypeError):
            UNSUPPORTED_OPERATIONS["label"] = "x"  # type: ignore[index]

    def test_unsupported_error_message(self) -> None:
        error = unsupported_error("save")
        assert error.method == "save"
        assert error.category == "Saving entities"
        assert "Method 'save' is not supported" in str(error)
        assert "integration-level test" in str(error)


class TestFallbackResolver:
    """Tests for fallback_resolver."""

    def test_guardrailed_method_raises(self) -> None:
        resolver = fallback_resolver("save", "Entity", lenient=False)
        with pytest.raises(UnsupportedOperationError, match="Saving entities"):
            resolver({})

    def test_unconfigured_method_raises_missing_resolver(self) -> None:
        resolver = fallback_resolver("get_changed_time", "EntityChanged", lenient=False)
        with pytest.raises(MissingResolverError) as exc_info:
            resolver({}, "extra", flag=True)

        error = exc_info.value
        assert isinstance(error, UnsupportedOperationError)
        assert isinstance(error, ConfigurationError)
        assert "get_changed_time" in str(error)
        assert "EntityChanged" in str(error)
        assert "lenient()" in str(error)

    @pytest.mark.parametrize("method", ["save", "get_changed_time"])
    def test_lenient_returns_none(self, method) -> None:
        assert fallback_resolver(method, "Entity", lenient=True)({}, 1, 2) is None
