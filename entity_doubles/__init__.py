"""Entity doubles: declarative test doubles for entity-style contracts.

Build a definition, hand it to a factory, and get back an object that
satisfies the requested capabilities with values taken from the
definition.
"""

__version__ = "0.1.0"
