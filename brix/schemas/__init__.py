"""Program and event schemas shared by the runtime, units and containers."""

from .base import BaseSchema
from .events import EventName
from .program import Action, ActionMethod, Program, Step

__all__ = [
    "BaseSchema",
    "EventName",
    "Action",
    "ActionMethod",
    "Program",
    "Step",
]
