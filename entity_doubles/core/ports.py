"""Port interface between the core and double back-ends.

The core decides what every method of a double returns; a back-end
decides how a concrete object answers the calls. Implementations live
in the adapters/ package:

- MockDoubleBackend: unittest.mock objects spec'd on the capability type
- FakeDoubleBackend: generated concrete subclasses of the capability type

Both must pass the same behavior suite.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from typing import Any


class DoubleBackendPort(ABC):
    """Port for the mechanism that turns resolvers into a concrete double.

    A back-end holds no resolver logic. It receives ready-to-call
    functions, with the context already bound, and makes the double
    dispatch to them.
    """

    @abstractmethod
    def create_double(self, capability_type: type) -> Any:
        """Create an unwired double for a synthesized capability type.

        Args:
            capability_type: Abstract type from synthesize_capability_type().

        Returns:
            An object for which ``isinstance(obj, capability)`` holds for
            every capability ``capability_type`` extends.
        """

    @abstractmethod
    def wire(self, double: Any, methods: Mapping[str, Callable[..., Any]]) -> None:
        """Make each named method of the double call the given function.

        ``methods`` may contain ``__getattr__`` and ``__setattr__``. They
        receive ``(name)`` and ``(name, value)`` for attribute names the
        double does not otherwise answer, and implement property-style
        access.

        Args:
            double: A double returned by create_double().
            methods: Functions keyed by method name.
        """

    @abstractmethod
    def mixin_base_type(self, double: Any) -> type:
        """Return the type that mixin types for this double extend."""

    @abstractmethod
    def instantiate_mixin(self, double: Any, mixin_type: type) -> Any:
        """Create an instance of ``mixin_type`` sharing the double's wiring.

        The new instance must answer every call exactly as ``double``
        does, so mixin methods observe the same resolved values and the
        same mutable state.

        Args:
            double: A wired double.
            mixin_type: Type from synthesize_mixin_type() built on
                mixin_base_type(double).

        Returns:
            The layered double.
        """

    def reserved_names(self) -> frozenset[str]:
        """Return attribute names this back-end keeps for itself.

        Entity doubles cannot define fields with these names, because
        property-style access would never reach them.
        """
        return frozenset()
