"""Adapters for entity doubles.

This package provides the implementations of the core port interfaces.

Adapter Organization:

- backend/: Back-ends that create concrete doubles and dispatch calls
  to resolvers (unittest.mock objects, generated fake classes)
"""
