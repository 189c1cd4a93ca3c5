"""Runtime synthesis of double types.

Two process-wide caches, each keyed by a canonical signature:

- capability types: one abstract class extending every requested
  capability plus MagicAccessor, keyed by the sorted capability names
- mixin types: a subclass layering behavior mixins over a base double
  type, keyed by the base type followed by the mixins in the given order

Equivalent requests return the identical class object. Entries are
never evicted. Inserts are guarded by a lock so two threads asking for
the same signature get the same class.
"""

import hashlib
import logging
import threading
from abc import ABCMeta
from collections.abc import Iterable

from .capabilities import MagicAccessor, capability_name

logger = logging.getLogger(__name__)

_lock = threading.Lock()
_capability_types: dict[str, type] = {}
_mixin_types: dict[str, type] = {}


def capability_signature(capabilities: Iterable[type]) -> str:
    """Return the cache key of a capability set."""
    return "|".join(sorted({capability_name(c) for c in capabilities}))


def mixin_signature(base_type: type, mixins: Iterable[type]) -> str:
    """Return the cache key of a base type layered with mixins.

    Mixin order matters for method resolution, so the key keeps it.
    """
    return "|".join([capability_name(base_type), *(capability_name(m) for m in mixins)])


def _short_hash(key: str) -> str:
    return hashlib.md5(key.encode(), usedforsecurity=False).hexdigest()[:12]


def synthesize_capability_type(capabilities: Iterable[type]) -> type:
    """Return the merged abstract type for a set of capabilities.

    Capabilities that are ancestors of other requested capabilities add
    nothing and are dropped. The result extends the rest, in the given
    order, and MagicAccessor, so isinstance checks hold for all of them.
    """
    capabilities = most_specific(capabilities)
    if not capabilities:
        raise ValueError("At least one capability is required")

    key = capability_signature(capabilities)
    with _lock:
        cached = _capability_types.get(key)
        if cached is not None:
            return cached

        bases = tuple(c for c in capabilities if c is not MagicAccessor) + (MagicAccessor,)
        name = f"RuntimeCapability_{_short_hash(key)}"
        synthesized = ABCMeta(name, bases, {"__module__": __name__, "_signature": key})
        _capability_types[key] = synthesized

    logger.debug(f"Synthesized capability type {name}", extra={"signature": key})
    return synthesized


def synthesize_mixin_type(base_type: type, mixins: Iterable[type]) -> type:
    """Return a subclass of ``base_type`` layered with ``mixins``.

    Mixins come first in the MRO so their methods win over the double's
    wiring; everything they do not define falls through to the double.
    """
    mixins = _unique(mixins)
    if not mixins:
        return base_type

    key = mixin_signature(base_type, mixins)
    with _lock:
        cached = _mixin_types.get(key)
        if cached is not None:
            return cached

        name = f"MixinDouble_{_short_hash(key)}"
        synthesized = type(base_type)(name, (*mixins, base_type), {"__module__": __name__})
        _mixin_types[key] = synthesized

    logger.debug(f"Synthesized mixin type {name}", extra={"signature": key})
    return synthesized


def _unique(types: Iterable[type]) -> list[type]:
    seen: list[type] = []
    for klass in types:
        if klass not in seen:
            seen.append(klass)
    return seen


def most_specific(capabilities: Iterable[type]) -> list[type]:
    """Drop duplicates and capabilities that another requested one extends."""
    unique = _unique(capabilities)
    return [
        capability for capability in unique
        if not any(other is not capability and issubclass(other, capability) for other in unique)
    ]
