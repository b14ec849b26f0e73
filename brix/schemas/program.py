from __future__ import annotations

from typing import Any, Callable, List, Optional

from pydantic import Field

from .base import BaseSchema

ActionMethod = Callable[[Any, Any], Any]
"""
ActionMethod:
    A callable taking ``(payload, unit)`` and returning the next payload. It may
    be a coroutine function; the engine awaits awaitable results.
"""


class Action(BaseSchema):
    name: Optional[str] = None
    description: Optional[str] = None
    method: ActionMethod


class Step(BaseSchema):
    name: Optional[str] = None
    description: Optional[str] = None
    actions: List[Action] = Field(default_factory=list)


class Program(BaseSchema):
    """A named, ordered tree of steps and actions run as one pipeline.

    An empty ``name`` is replaced by a fresh identifier when the program is
    registered on a unit.
    """

    name: str = ""
    description: Optional[str] = None
    steps: List[Step] = Field(default_factory=list)

    @property
    def action_count(self) -> int:
        return sum(len(step.actions) for step in self.steps)
