"""Storage capability.

``Database`` is the storage backend a unit can hold in its ``database`` slot.
It exposes one of two interfaces:

- ``memory``: ``MemoryStore``, a key/value store backed by a dict
  (``get/set/delete/dump/load``).
- ``sql``: ``SqlStore``, a query interface over an async SQLAlchemy engine
  (``connect/disconnect/query``).

All interface methods are async. The engine never calls them; actions do,
through ``unit.db.interface``.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from typing import Any, Dict, Literal, Optional, Union

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool

from ..core.config import BrixSettings, get_settings
from ..core.logging_config import get_logger

logger = get_logger(__name__)

DatabaseService = Literal["memory", "sql"]

_MISSING = object()


class MemoryStore:
    """In-process key/value store."""

    def __init__(self, data: Optional[Dict[str, Any]] = None) -> None:
        self.data: Dict[str, Any] = dict(data or {})

    async def get(self, key: str) -> Any:
        return self.data.get(key)

    async def set(self, key: str, value: Any) -> None:
        self.data[key] = value

    async def delete(self, key: str) -> bool:
        """Delete ``key``; returns whether it was present."""
        return self.data.pop(key, _MISSING) is not _MISSING

    async def dump(self) -> Dict[str, Any]:
        return dict(self.data)

    async def load(self, data: Mapping[str, Any]) -> None:
        """Replace the whole store with ``data``."""
        self.data = dict(data)


def create_engine(db_url: str) -> AsyncEngine:
    """Create an async SQLAlchemy engine.

    The helper rewrites plain driver URLs to their async variants
    (``postgresql://`` to ``postgresql+asyncpg://``, ``sqlite://`` to
    ``sqlite+aiosqlite://``). In-memory SQLite shares one connection so that
    every query sees the same database.

    Args:
        db_url: Database connection URL

    Returns:
        Configured AsyncEngine instance
    """
    url = re.sub(r"^postgres(?:ql)?(?:\+[a-z0-9_]+)?://", "postgresql+asyncpg://", db_url, count=1)
    url = re.sub(r"^sqlite(?:\+pysqlite)?://", "sqlite+aiosqlite://", url, count=1)
    if url.startswith("sqlite") and (":memory:" in url or url.rstrip("/").endswith("sqlite+aiosqlite:")):
        return create_async_engine(url, connect_args={"check_same_thread": False}, poolclass=StaticPool)
    return create_async_engine(url, pool_pre_ping=True)


class SqlStore:
    """Query interface over an async SQLAlchemy engine."""

    def __init__(self, uri: str, *, engine: Optional[AsyncEngine] = None) -> None:
        self.uri = uri
        self._engine = engine

    @property
    def engine(self) -> AsyncEngine:
        """The engine, created on first use."""
        if self._engine is None:
            self._engine = create_engine(self.uri)
        return self._engine

    async def connect(self) -> None:
        """Open a connection once to verify the database is reachable."""
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        logger.debug("SQL database connected")

    async def disconnect(self) -> None:
        """Close every pooled connection."""
        if self._engine is not None:
            await self._engine.dispose()
            logger.debug("SQL database disconnected")

    async def query(self, query: str, params: Union[Mapping[str, Any], Sequence[Any], None] = None) -> Any:
        """
        Execute one statement in its own transaction.

        Args:
            query: SQL text. Use ``:name`` placeholders with a mapping of
                parameters, or the driver's positional style (``?`` for
                SQLite) with a sequence.
            params: Named or positional parameters.

        Returns:
            A list of row dicts when the statement returns rows, otherwise the
            number of affected rows.
        """
        async with self.engine.begin() as conn:
            if params is None or isinstance(params, Mapping):
                result = await conn.execute(text(query), dict(params or {}))
            elif isinstance(params, (str, bytes)):
                raise TypeError("params must be a mapping or a sequence of values")
            else:
                result = await conn.exec_driver_sql(query, tuple(params))

            if result.returns_rows:
                return [dict(row._mapping) for row in result.fetchall()]
            return result.rowcount


class Database:
    """Storage backend used by unit actions through ``unit.db``."""

    def __init__(self, *, service: DatabaseService = "memory", uri: Optional[str] = None) -> None:
        """
        Create a storage backend.

        Args:
            service: ``memory`` or ``sql``.
            uri: SQLAlchemy URL, required for ``sql``. Without it the
                ``sql`` backend has no interface.

        Raises:
            ValueError: If ``service`` is not supported.
        """
        self.service: DatabaseService = service
        self._uri = uri
        self.interface: Optional[Union[MemoryStore, SqlStore]] = None

        if service == "memory":
            self.interface = MemoryStore()
        elif service == "sql":
            if uri:
                self.interface = SqlStore(uri)
            else:
                logger.warning("SQL database created without a URI; no interface available")
        else:
            raise ValueError(f"Invalid service: {service}")

    @classmethod
    def from_settings(cls, settings: Optional[BrixSettings] = None) -> "Database":
        """Build a ``Database`` from ``BrixSettings.database``."""
        cfg = (settings or get_settings()).database
        return cls(service=cfg.service, uri=cfg.url)

    @property
    def memory(self) -> Optional[Dict[str, Any]]:
        """Backing dict of the ``memory`` service, ``None`` otherwise."""
        if isinstance(self.interface, MemoryStore):
            return self.interface.data
        return None
