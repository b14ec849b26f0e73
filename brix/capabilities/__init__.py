"""Capability contracts and shipped capability providers.

A *capability* is an external collaborator referenced, not owned, by a unit.

- ``UnitCapabilities`` holds the optional, typed slots a unit exposes as
  ``unit.ai`` and ``unit.db``.
- ``Intelligence`` answers questions and generates images.
- ``Database`` stores data behind a key/value or SQL interface.

The execution engine never calls capabilities; action methods do.
"""

from .base import (
    DatabaseInterface,
    DatabaseProvider,
    IntelligenceProvider,
    KeyValueInterface,
    SQLInterface,
    UnitCapabilities,
)
from .database import Database, MemoryStore, SqlStore
from .intelligence import AskResult, ImageResult, Intelligence

__all__ = [
    "AskResult",
    "Database",
    "DatabaseInterface",
    "DatabaseProvider",
    "ImageResult",
    "Intelligence",
    "IntelligenceProvider",
    "KeyValueInterface",
    "MemoryStore",
    "SQLInterface",
    "SqlStore",
    "UnitCapabilities",
]
