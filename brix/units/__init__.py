"""Stock units.

These units wrap popular libraries or serve as samples of subclassing
``brix.Unit``:

- ``QAUnit``: answers questions through the AI capability.
- ``HttpUnit``: serves a FastAPI app that can reach the unit per request.
- ``TerminalUnit``: prints and reads lines through a ``rich`` console.
"""

from .http import HttpUnit, Route
from .qa import QA_PROGRAM, QAUnit
from .terminal import TerminalUnit

__all__ = [
    "HttpUnit",
    "QAUnit",
    "QA_PROGRAM",
    "Route",
    "TerminalUnit",
]
