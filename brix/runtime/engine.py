from __future__ import annotations

"""Program execution engine.

``ProgramEngine`` runs a named program from a unit's registry against an
initial payload.

Execution model
--------------

- The program is looked up once, at call time. The run holds on to that
  ``Program`` object, so registry changes made while the run is in flight do
  not affect it.
- ``run-started`` is emitted before any action executes so observers can
  instrument the run before side effects occur.
- Steps and actions are walked as one flat, ordered sequence (see
  ``iter_actions``). Each action receives the current payload and the owning
  unit; its result replaces the payload. There is no merging.
- The first action that raises aborts the run. The error surfaces as
  ``ProgramExecutionError`` with the step/action position and the original
  exception as cause. No partial payload is returned and nothing is retried.

The engine suspends only between actions: an action may await (for example a
capability call) but is never interrupted mid-way by the engine. Concurrent or
recursive runs on the same unit each keep their own payload.
"""

import inspect
from typing import Any, Callable, Dict, Iterator, NamedTuple, Optional

from ..core.logging_config import get_logger
from ..errors import ProgramExecutionError
from ..schemas.events import EventName
from ..schemas.program import Action, Program, Step
from .registry import ProgramRegistry

logger = get_logger(__name__)

Emitter = Callable[[EventName, Dict[str, Any]], None]


class ActionRef(NamedTuple):
    """Position of an action inside a program tree."""

    step_index: int
    action_index: int
    step: Step
    action: Action


def iter_actions(program: Program) -> Iterator[ActionRef]:
    """Yield every action of ``program`` in declared step/action order."""
    for step_index, step in enumerate(program.steps):
        for action_index, action in enumerate(step.actions):
            yield ActionRef(step_index, action_index, step, action)


class ProgramEngine:
    """Execute programs registered on a unit.

    Resolves the program, folds the payload through every action and reports
    lifecycle events through the ``emit`` callable supplied by the owning unit.
    """

    def __init__(self, *, registry: ProgramRegistry, emit: Optional[Emitter] = None) -> None:
        """
        Initialize the ProgramEngine.

        Args:
            registry: The registry programs are resolved from.
            emit: Callback used to publish run lifecycle events.
        """
        self._registry = registry
        self._emit = emit or (lambda _event, _payload: None)

    async def run(self, name: str, payload: Any = None, *, unit: Any = None) -> Any:
        """Run program ``name`` with ``payload`` and return the final payload.

        Raises
        ------
        ProgramNotFoundError
            If ``name`` is not registered.
        ProgramExecutionError
            If any action raises.
        """
        program = self._registry.get(name)
        self._emit(EventName.run_started, {"name": name, "payload": payload})
        logger.info(f"Running program {name}")

        current = payload
        for ref in iter_actions(program):
            try:
                current = await self._invoke(ref.action, current, unit)
            except Exception as exc:
                error = ProgramExecutionError(
                    name,
                    step_index=ref.step_index,
                    action_index=ref.action_index,
                    step_name=ref.step.name,
                    action_name=ref.action.name,
                    cause=exc,
                )
                logger.warning(str(error))
                self._emit(EventName.run_failed, {"name": name, "error": error})
                raise error from exc

        logger.debug(f"Program {name} finished after {program.action_count} action(s)")
        self._emit(EventName.run_completed, {"name": name, "result": current})
        return current

    @staticmethod
    async def _invoke(action: Action, payload: Any, unit: Any) -> Any:
        result = action.method(payload, unit)
        if inspect.isawaitable(result):
            result = await result
        return result
