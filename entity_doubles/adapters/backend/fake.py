"""Generated-class back-end.

Implements DoubleBackendPort without any mock machinery: for every
capability type a concrete subclass is generated whose methods dispatch
to the wired resolvers. Doubles are real instances of their capability
types and record the calls made on them.
"""

import logging
import threading
from collections.abc import Callable, Mapping
from typing import Any

from entity_doubles.core.capabilities import capability_methods
from entity_doubles.core.ports import DoubleBackendPort

logger = logging.getLogger(__name__)


class FakeDouble:
    """Base of every generated fake double.

    Instance state is limited to ``_wiring`` (resolver per method name)
    and ``_calls`` (recorded calls), both kept in the instance dict so a
    mixin instance can share them.
    """

    def __init__(self):
        object.__setattr__(self, "_wiring", {})
        object.__setattr__(self, "_calls", [])

    def _dispatch(self, method: str, args: tuple, kwargs: dict) -> Any:
        self._calls.append((method, args, kwargs))
        function = self._wiring.get(method)
        if function is None:
            raise NotImplementedError(f"{method}() is not wired on {type(self).__name__}")
        return function(*args, **kwargs)

    def __getattr__(self, name: str) -> Any:
        # Only reached for names normal lookup does not find.
        if name.startswith("_"):
            raise AttributeError(name)
        hook = self.__dict__.get("_wiring", {}).get("__getattr__")
        if hook is None:
            raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")
        return hook(name)

    def __setattr__(self, name: str, value: Any) -> None:
        hook = self.__dict__.get("_wiring", {}).get("__setattr__")
        if hook is None or name.startswith("_"):
            object.__setattr__(self, name, value)
            return
        hook(name, value)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} at {id(self):#x}>"


def _dispatcher(method: str) -> Callable[..., Any]:
    def dispatch(self, *args, **kwargs):
        return self._dispatch(method, args, kwargs)

    dispatch.__name__ = method
    return dispatch


def recorded_calls(double: FakeDouble, method: str | None = None) -> list[tuple[str, tuple, dict]]:
    """Return the calls recorded on a fake double, optionally for one method."""
    calls = double.__dict__["_calls"]
    if method is None:
        return list(calls)
    return [call for call in calls if call[0] == method]


class FakeDoubleBackend(DoubleBackendPort):
    """Creates doubles as instances of generated concrete classes."""

    def __init__(self):
        self._lock = threading.Lock()
        self._classes: dict[type, type] = {}

    def concrete_type(self, capability_type: type) -> type:
        """Return the generated concrete class for a capability type."""
        with self._lock:
            cached = self._classes.get(capability_type)
            if cached is not None:
                return cached

            namespace: dict[str, Any] = {
                method: _dispatcher(method) for method in capability_methods(capability_type)
            }
            namespace["__module__"] = __name__
            concrete = type(capability_type)(
                f"Fake{capability_type.__name__}",
                (FakeDouble, capability_type),
                namespace,
            )
            self._classes[capability_type] = concrete

        logger.debug(f"Generated fake class {concrete.__name__}")
        return concrete

    def create_double(self, capability_type: type) -> FakeDouble:
        return self.concrete_type(capability_type)()

    def wire(self, double: Any, methods: Mapping[str, Callable[..., Any]]) -> None:
        double.__dict__["_wiring"].update(methods)

    def mixin_base_type(self, double: Any) -> type:
        return type(double)

    def instantiate_mixin(self, double: Any, mixin_type: type) -> Any:
        layered = object.__new__(mixin_type)
        layered.__dict__.update(double.__dict__)
        return layered
