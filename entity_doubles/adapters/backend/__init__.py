"""Double back-ends.

Implementations of DoubleBackendPort:
- MockDoubleBackend: unittest.mock objects with call recording
- FakeDoubleBackend: plain generated classes, no mock machinery
"""

from .fake import FakeDoubleBackend
from .mock import MockDoubleBackend

__all__ = ["FakeDoubleBackend", "MockDoubleBackend"]
