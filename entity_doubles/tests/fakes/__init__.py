"""Fake implementations of core ports for testing.

- RecordingDoubleBackend: generated-class back-end that records which
  doubles were created and which methods were wired
"""

from .backend import RecordingDoubleBackend

__all__ = ["RecordingDoubleBackend"]
