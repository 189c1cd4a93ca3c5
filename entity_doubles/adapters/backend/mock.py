"""unittest.mock back-end.

Implements DoubleBackendPort with NonCallableMagicMock objects spec'd
on the synthesized capability type. Every wired method is a child mock
whose side_effect is the resolver, so calls are recorded and the usual
``assert_called_once_with`` style assertions work on doubles.
"""

import logging
from collections.abc import Callable, Mapping
from typing import Any
from unittest.mock import NonCallableMagicMock

from entity_doubles.core.ports import DoubleBackendPort

logger = logging.getLogger(__name__)

# Keys in the mock's __dict__ holding the property-style accessors.
_GET_HOOK = "_double_getattr"
_SET_HOOK = "_double_setattr"
_RESETTING = "_double_resetting"

# Mock state attributes that belong to the double's properties first, so
# a field or item property named ``called`` reads the same on every
# back-end.
_ROUTED_STATE_ATTRIBUTES = frozenset({
    "called",
    "call_count",
    "call_args",
    "call_args_list",
    "return_value",
    "side_effect",
})

# Call records mock appends to on every parent of a called child mock.
# They always stay with the mock, so fields cannot use these names.
RESERVED_NAMES = frozenset({"mock_calls", "method_calls"})


class DoubleMock(NonCallableMagicMock):
    """A mock that answers unknown attribute names through the double.

    Names in the spec resolve to child mocks as usual. Any other public
    name is handed to the wired ``__getattr__`` / ``__setattr__``
    accessors, which is how ``entity.field_tags`` and
    ``item.target_id`` work.

    The mock state attributes ``called``, ``call_count``, ``call_args``,
    ``call_args_list``, ``return_value`` and ``side_effect`` are asked of
    the double first. An entity double answers only for defined fields
    and otherwise falls back to the mock attribute. Field list and item
    doubles answer every property name, so on them these names always
    read as properties. ``mock_calls`` and ``method_calls`` are never
    routed.
    """

    def __getattribute__(self, name: str) -> Any:
        if name in _ROUTED_STATE_ATTRIBUTES:
            state = object.__getattribute__(self, "__dict__")
            hook = state.get(_GET_HOOK)
            if hook is not None and not state.get(_RESETTING):
                try:
                    return hook(name)
                except AttributeError:
                    # Not a property of the double: use the mock's own state.
                    pass
        return super().__getattribute__(name)

    def __getattr__(self, name: str) -> Any:
        try:
            return super().__getattr__(name)
        except AttributeError:
            hook = self.__dict__.get(_GET_HOOK)
            if hook is None or name.startswith("_"):
                raise
            return hook(name)

    def __setattr__(self, name: str, value: Any) -> None:
        hook = self.__dict__.get(_SET_HOOK)
        if (
            hook is None
            or name.startswith("_")
            or self.__dict__.get(_RESETTING)
            or self._is_mock_attribute(name)
        ):
            super().__setattr__(name, value)
            return
        hook(name, value)

    def reset_mock(self, *args: Any, **kwargs: Any) -> None:
        # reset_mock() assigns the routed state names on the mock itself.
        if self.__dict__.get(_RESETTING):
            super().reset_mock(*args, **kwargs)
            return
        self.__dict__[_RESETTING] = True
        try:
            super().reset_mock(*args, **kwargs)
        finally:
            del self.__dict__[_RESETTING]

    def _is_mock_attribute(self, name: str) -> bool:
        if name in _ROUTED_STATE_ATTRIBUTES:
            return False
        methods = self.__dict__.get("_mock_methods") or ()
        return name in methods or hasattr(type(self), name)


class MockDoubleBackend(DoubleBackendPort):
    """Creates doubles as DoubleMock instances."""

    def create_double(self, capability_type: type) -> DoubleMock:
        return DoubleMock(spec=capability_type)

    def reserved_names(self) -> frozenset[str]:
        return RESERVED_NAMES

    def wire(self, double: Any, methods: Mapping[str, Callable[..., Any]]) -> None:
        for name, function in methods.items():
            if name == "__getattr__":
                double.__dict__[_GET_HOOK] = function
            elif name == "__setattr__":
                double.__dict__[_SET_HOOK] = function
            else:
                getattr(double, name).side_effect = function

    def mixin_base_type(self, double: Any) -> type:
        # Mocks get a private subclass each; share mixin types across them.
        return DoubleMock

    def instantiate_mixin(self, double: Any, mixin_type: type) -> Any:
        """Create a mixin instance sharing the mock's state.

        The instance dict is copied shallowly, so both objects share the
        same child mocks and therefore the same resolvers and call
        records. ``__class__`` still reports the capability type.
        """
        layered = object.__new__(mixin_type)
        layered.__dict__.update(double.__dict__)
        logger.debug(f"Layered mixin type {mixin_type.__name__} over mock double")
        return layered
