from __future__ import annotations

"""The unit: a composable execution node.

A ``Unit`` owns a ``ProgramRegistry``, a ``ProgramEngine``, an identity, an
``EventChannel`` and optional capability references. It may belong to one
``Container`` at a time, which it only knows through a weak reference used to
mirror its events.

Units are meant to be subclassed: a subclass registers its stock programs in
``__init__`` and adds helper methods its actions can call (see
``brix.units``).
"""

import logging
import weakref
from typing import TYPE_CHECKING, Any, Callable, Dict, Mapping, Optional, Union
from uuid import uuid4

from .capabilities.base import DatabaseProvider, IntelligenceProvider, UnitCapabilities
from .core.logging_config import get_logger
from .events.channel import EventChannel, EventKey
from .runtime.engine import ProgramEngine
from .runtime.registry import ProgramRegistry
from .schemas.events import EventName
from .schemas.program import Program

if TYPE_CHECKING:
    from .container import Container


class Unit:
    """An independently constructed execution node.

    Attributes:
        events: The unit's own event channel.
        log: Logger named ``brix.unit.<name>``.
    """

    def __init__(
        self,
        *,
        id: Optional[str] = None,
        name: Optional[str] = None,
        intelligence: Optional[IntelligenceProvider] = None,
        database: Optional[DatabaseProvider] = None,
        capabilities: Optional[UnitCapabilities] = None,
        container: Optional["Container"] = None,
        log_level: Optional[Union[int, str]] = None,
    ) -> None:
        """
        Create a unit.

        Args:
            id: Identifier; a random UUID when omitted.
            name: Display and lookup name; defaults to ``id``.
            intelligence: AI capability, shortcut for ``capabilities``.
            database: Storage capability, shortcut for ``capabilities``.
            capabilities: Full capability slots. Mutually exclusive with the
                ``intelligence``/``database`` shortcuts.
            container: Container to join once constructed.
            log_level: Level for this unit's logger.
        """
        if capabilities is not None and (intelligence is not None or database is not None):
            raise ValueError("pass either capabilities or intelligence/database, not both")

        self._id = id or str(uuid4())
        self._name = name or self._id
        self._capabilities = capabilities or UnitCapabilities(intelligence=intelligence, database=database)
        self._container_ref: Optional[Callable[[], Optional["Container"]]] = None

        self.log: logging.Logger = get_logger(f"brix.unit.{self._name}")
        if log_level is not None:
            self.log.setLevel(log_level.upper() if isinstance(log_level, str) else log_level)

        self.events = EventChannel(owner=self._name)
        self._registry = ProgramRegistry()
        self._engine = ProgramEngine(registry=self._registry, emit=self.emit)
        self.log.debug("Unit created")

        if container is not None:
            container.add(self)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self._id!r}, name={self._name!r})"

    @property
    def id(self) -> str:
        return self._id

    @property
    def name(self) -> str:
        return self._name

    @property
    def capabilities(self) -> UnitCapabilities:
        return self._capabilities

    @property
    def ai(self) -> Optional[IntelligenceProvider]:
        return self._capabilities.intelligence

    @property
    def db(self) -> Optional[DatabaseProvider]:
        return self._capabilities.database

    @property
    def programs(self) -> Mapping[str, Program]:
        """Read-only view of the registered programs."""
        return self._registry.view()

    @property
    def container(self) -> Optional["Container"]:
        """The container currently holding this unit, if any."""
        if self._container_ref is None:
            return None
        return self._container_ref()

    def register(self, program: Union[Program, Mapping[str, Any]]) -> Program:
        """
        Register a program on this unit.

        Args:
            program: A ``Program`` or a mapping validated into one.

        Returns:
            The registered program (with its name filled in if it was empty).

        Raises:
            DuplicateProgramError: If the name is already registered.
        """
        if not isinstance(program, Program):
            program = Program.model_validate(program)
        self._registry.register(program)
        self.emit(EventName.program_registered, {"program": program})
        self.log.info(f"Program Added: {program.name}")
        return program

    def deregister(self, name: str) -> Program:
        """
        Remove a program from this unit.

        Raises:
            ProgramNotFoundError: If ``name`` is not registered.
        """
        program = self._registry.deregister(name)
        self.emit(EventName.program_deregistered, {"name": name, "program": program})
        self.log.info(f"Program Removed: {name}")
        return program

    async def run(self, name: str, payload: Any = None) -> Any:
        """
        Run a registered program and return its final payload.

        Raises:
            ProgramNotFoundError: If ``name`` is not registered.
            ProgramExecutionError: If an action fails.
        """
        return await self._engine.run(name, payload, unit=self)

    def emit(self, event: EventKey, payload: Optional[Dict[str, Any]] = None) -> None:
        """
        Emit a unit-local event.

        The event fires on this unit's channel first, then, if the unit is in
        a container, on the container's channel with the unit attached as
        ``payload["unit"]``.
        """
        body = dict(payload or {})
        self.events.emit(event, body)
        container = self.container
        if container is not None:
            container.events.emit(event, {"unit": self, **body})

    def _attach_container(self, container: "Container") -> None:
        self._container_ref = weakref.ref(container)

    def _detach_container(self) -> None:
        self._container_ref = None
