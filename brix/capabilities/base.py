from __future__ import annotations

"""Capability contracts and the per-unit capability slots.

A capability is an external collaborator a unit holds a reference to, such as
an AI client or a storage backend. The engine never calls capabilities
itself; only action methods do, through the unit they receive.

Capabilities are attached at construction time through ``UnitCapabilities``,
which has one optional, typed slot per capability kind.
"""

from dataclasses import dataclass
from typing import Any, Optional, Protocol, Sequence, Union, runtime_checkable


@runtime_checkable
class IntelligenceProvider(Protocol):
    """Contract for AI-like capabilities."""

    async def ask(self, question: Any, context: Optional[Sequence[Any]] = None) -> Any: ...

    async def ask_for_image(self, prompt: str, size: str = "256x256") -> Any: ...


@runtime_checkable
class KeyValueInterface(Protocol):
    """Key/value storage contract. All methods are async."""

    async def get(self, key: str) -> Any: ...

    async def set(self, key: str, value: Any) -> None: ...

    async def delete(self, key: str) -> bool: ...

    async def dump(self) -> Any: ...

    async def load(self, data: Any) -> None: ...


@runtime_checkable
class SQLInterface(Protocol):
    """Query storage contract. All methods are async."""

    async def connect(self) -> None: ...

    async def disconnect(self) -> None: ...

    async def query(self, query: str, params: Any = None) -> Any: ...


DatabaseInterface = Union[KeyValueInterface, SQLInterface]


class DatabaseProvider(Protocol):
    """Contract for storage capabilities: a service label plus an interface."""

    service: str
    interface: Optional[DatabaseInterface]


@dataclass(frozen=True)
class UnitCapabilities:
    """Optional capability slots held by a unit.

    Attributes
    ----------
    intelligence:
        AI client used by actions through ``unit.ai``.
    database:
        Storage backend used by actions through ``unit.db``.
    """

    intelligence: Optional[IntelligenceProvider] = None
    database: Optional[DatabaseProvider] = None
