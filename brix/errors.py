"""Error types for brix.

Defines a small hierarchy of exceptions raised by registries, the execution
engine, containers and capabilities. Every error is raised to the caller of
the triggering operation; none are retried.
"""

from __future__ import annotations

from typing import Optional


class BrixError(Exception):
    """Base error for all brix exceptions."""


class ProgramNotFoundError(BrixError, KeyError):
    """Raised when a program name is not present in a unit's registry."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Program does not exist: '{name}'")

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return str(self.args[0])


class DuplicateProgramError(BrixError):
    """Raised when registering a program under a name that is already taken."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Program already exists: '{name}'")


class DuplicateMemberError(BrixError):
    """Raised when adding a unit that clashes with a container member."""

    def __init__(self, unit_id: str, unit_name: str, reason: str = "already exists in container") -> None:
        self.unit_id = unit_id
        self.unit_name = unit_name
        super().__init__(f"Unit '{unit_name}' ({unit_id}) {reason}")


class MemberNotFoundError(BrixError):
    """Raised when operating on a unit that is not a container member."""

    def __init__(self, unit_id: str, unit_name: str) -> None:
        self.unit_id = unit_id
        self.unit_name = unit_name
        super().__init__(f"Unit '{unit_name}' ({unit_id}) does not exist in container")


class ProgramExecutionError(BrixError):
    """Raised when an action fails during a program run.

    The original exception is available as ``cause`` and as ``__cause__``.
    Indexes are zero-based positions of the failing step and of the failing
    action within that step.
    """

    def __init__(
        self,
        program: str,
        *,
        step_index: int,
        action_index: int,
        cause: BaseException,
        step_name: Optional[str] = None,
        action_name: Optional[str] = None,
    ) -> None:
        self.program = program
        self.step_index = step_index
        self.action_index = action_index
        self.step_name = step_name
        self.action_name = action_name
        self.cause = cause
        where = f"step {step_index}" + (f" ({step_name})" if step_name else "")
        where += f", action {action_index}" + (f" ({action_name})" if action_name else "")
        super().__init__(f"Program '{program}' failed at {where}: {cause!r}")


class CapabilityError(BrixError):
    """Base error for capability providers."""


class CapabilityMissingError(CapabilityError):
    """Raised when an action needs a capability the unit does not hold."""

    def __init__(self, capability: str, unit_name: str) -> None:
        self.capability = capability
        super().__init__(f"Unit '{unit_name}' has no {capability} configured")


class IntelligenceError(CapabilityError):
    """Raised when the AI backend returns an unusable response or fails."""
