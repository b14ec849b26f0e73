from __future__ import annotations

"""The container: composition root for units.

A ``Container`` owns an ordered collection of units, keeps both ``id`` and
``name`` unique across them and aggregates their event traffic:

- unit-local events are mirrored onto the container channel by the units
  themselves (see ``Unit.emit``);
- membership changes fire ``add``/``remove`` on the container channel and
  ``sibling-added``/``sibling-removed`` on the other members' channels.

Notification order matters because listeners may inspect membership while
being called. On ``add``, existing members hear ``sibling-added`` before the
new unit is appended. On ``remove``, the remaining members hear
``sibling-removed`` while the removed unit is still listed.
"""

import logging
from typing import Iterable, Iterator, List, Optional, Tuple, Union
from uuid import uuid4

from .core.logging_config import get_logger
from .errors import DuplicateMemberError, MemberNotFoundError
from .events.channel import EventChannel
from .schemas.events import EventName
from .unit import Unit


class Container:
    """Ordered, uniquely keyed collection of units.

    Attributes:
        events: The container's own event channel.
        log: Logger named ``brix.container.<name>``.
    """

    def __init__(
        self,
        *,
        name: Optional[str] = None,
        units: Iterable[Unit] = (),
        id: Optional[str] = None,
        log_level: Optional[Union[int, str]] = None,
    ) -> None:
        """
        Create a container.

        Args:
            name: Display name; defaults to ``id``.
            units: Initial members, added in order through ``add``.
            id: Identifier; a random UUID when omitted.
            log_level: Level for this container's logger.
        """
        self._id = id or str(uuid4())
        self._name = name or self._id
        self._units: List[Unit] = []
        self.events = EventChannel(owner=self._name)

        self.log: logging.Logger = get_logger(f"brix.container.{self._name}")
        if log_level is not None:
            self.log.setLevel(log_level.upper() if isinstance(log_level, str) else log_level)
        self.log.debug("Container created")

        for unit in units:
            self.add(unit)

    def __repr__(self) -> str:
        return f"Container(id={self._id!r}, name={self._name!r}, members={len(self._units)})"

    @property
    def id(self) -> str:
        return self._id

    @property
    def name(self) -> str:
        return self._name

    @property
    def members(self) -> Tuple[Unit, ...]:
        """Snapshot of the current members in insertion order."""
        return tuple(self._units)

    def __len__(self) -> int:
        return len(self._units)

    def __iter__(self) -> Iterator[Unit]:
        return iter(tuple(self._units))

    def __contains__(self, unit: object) -> bool:
        return isinstance(unit, Unit) and any(u.id == unit.id for u in self._units)

    def add(self, unit: Unit) -> None:
        """
        Add a unit to the container.

        Raises:
            DuplicateMemberError: If a member shares the unit's ``id`` or
                ``name``, or the unit already belongs to another container.
        """
        if any(u.id == unit.id or u.name == unit.name for u in self._units):
            raise DuplicateMemberError(unit.id, unit.name)
        current = unit.container
        if current is not None and current is not self:
            raise DuplicateMemberError(unit.id, unit.name, reason=f"already belongs to container '{current.name}'")

        unit._attach_container(self)
        for sibling in tuple(self._units):
            sibling.events.emit(EventName.sibling_added, {"unit": unit, "container": self})
        self._units.append(unit)
        self.events.emit(EventName.member_added, {"unit": unit, "container": self})
        self.log.debug(f"Added Unit: {unit.name}")

    def remove(self, unit: Unit) -> None:
        """
        Remove a unit from the container.

        Raises:
            MemberNotFoundError: If the unit is not a member.
        """
        member = self.get(unit.id)
        if member is None:
            raise MemberNotFoundError(unit.id, unit.name)

        member._detach_container()
        for sibling in tuple(self._units):
            if sibling is not member:
                sibling.events.emit(EventName.sibling_removed, {"unit": member, "container": self})
        self._units = [u for u in self._units if u is not member]
        self.events.emit(EventName.member_removed, {"unit": member, "container": self})
        self.log.debug(f"Removed Unit: {member.name}")

    def get(self, id: str) -> Optional[Unit]:
        """Return the member with identifier ``id``, or ``None``."""
        for unit in self._units:
            if unit.id == id:
                return unit
        return None

    def get_by_name(self, name: str) -> Optional[Unit]:
        """Return the member named ``name``, or ``None``."""
        for unit in self._units:
            if unit.name == name:
                return unit
        return None

    def demolish(self) -> None:
        """
        Unlink every member and empty the container.

        Each member hears ``demolished`` on its own channel (not mirrored)
        before its back-reference is cleared. The units themselves are left
        intact.
        """
        for unit in tuple(self._units):
            unit.events.emit(EventName.demolished, {"container": self})
            unit._detach_container()
        self._units = []
        self.events.emit(EventName.demolished, {"container": self})
        self.log.debug("Demolished Container")
