"""Program registry and execution runtime.

A unit owns one ``ProgramRegistry`` and one ``ProgramEngine``:

- The registry maps program names to ``Program`` definitions.
- The engine resolves a name, then folds the payload through every action of
  every step in declared order.

The main entry point for users is ``brix.Unit.run``, which delegates here.
"""

from .engine import ActionRef, ProgramEngine, iter_actions
from .registry import ProgramRegistry

__all__ = [
    "ActionRef",
    "ProgramEngine",
    "ProgramRegistry",
    "iter_actions",
]
