"""brix.

A minimal composable unit-of-behavior runtime.

High-level architecture
-----------------------

- A **Unit** holds a private registry of named programs. A program is an
  ordered tree of steps, each an ordered list of actions. Running a program
  folds a payload through every action in order; each action receives the
  current payload and the unit, and returns the next payload.
- A **Container** groups units, keeps their ``id`` and ``name`` unique, and
  aggregates their events: whatever a member emits on its own channel is
  re-emitted on the container channel with the member attached.
- **Capabilities** (AI client, storage) are optional references injected into
  a unit at construction and used by actions through ``unit.ai``/``unit.db``.

Typical workflow
----------------

1. Create units, optionally with capabilities.
2. Register programs on them.
3. Group them in a container and subscribe to its events.
4. ``await unit.run(name, payload)``.
"""

from .capabilities import Database, Intelligence, UnitCapabilities
from .container import Container
from .errors import (
    BrixError,
    CapabilityError,
    CapabilityMissingError,
    DuplicateMemberError,
    DuplicateProgramError,
    IntelligenceError,
    MemberNotFoundError,
    ProgramExecutionError,
    ProgramNotFoundError,
)
from .events import EventChannel
from .schemas import Action, EventName, Program, Step
from .unit import Unit

__all__ = [
    "Action",
    "BrixError",
    "CapabilityError",
    "CapabilityMissingError",
    "Container",
    "Database",
    "DuplicateMemberError",
    "DuplicateProgramError",
    "EventChannel",
    "EventName",
    "Intelligence",
    "IntelligenceError",
    "MemberNotFoundError",
    "Program",
    "ProgramExecutionError",
    "ProgramNotFoundError",
    "Step",
    "Unit",
    "UnitCapabilities",
]
