from __future__ import annotations

"""Program registry.

The registry maps a program name to its ``Program`` definition. Each unit
owns exactly one registry; nothing else writes to it.

The registry itself is silent. ``Unit.register`` and ``Unit.deregister`` wrap
it and emit the corresponding events.
"""

from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping
from uuid import uuid4

from ..errors import DuplicateProgramError, ProgramNotFoundError
from ..schemas.program import Program


class ProgramRegistry:
    """
    In-memory mapping of program names to program definitions.

    Notes:
        - ``register`` rejects a name that is already taken and leaves the
          registry untouched.
        - ``get`` and ``deregister`` raise ``ProgramNotFoundError`` (a
          ``KeyError``) if the name is missing.
    """

    def __init__(self) -> None:
        """Initialize an empty program registry."""
        self._programs: Dict[str, Program] = {}

    def register(self, program: Program) -> Program:
        """
        Register a program definition.

        Args:
            program: The program to register. An empty name is replaced with a
                fresh identifier.

        Returns:
            The registered program.

        Raises:
            DuplicateProgramError: If a program with the same name exists.
        """
        if not program.name:
            program.name = str(uuid4())
        if program.name in self._programs:
            raise DuplicateProgramError(program.name)
        self._programs[program.name] = program
        return program

    def deregister(self, name: str) -> Program:
        """
        Remove a program by name.

        Returns:
            The removed program.

        Raises:
            ProgramNotFoundError: If no program is registered under ``name``.
        """
        try:
            return self._programs.pop(name)
        except KeyError as e:
            raise ProgramNotFoundError(name) from e

    def get(self, name: str) -> Program:
        """
        Retrieve a registered program by name.

        Raises:
            ProgramNotFoundError: If no program is registered under ``name``.
        """
        try:
            return self._programs[name]
        except KeyError as e:
            raise ProgramNotFoundError(name) from e

    def has(self, name: str) -> bool:
        return name in self._programs

    def names(self) -> List[str]:
        return list(self._programs)

    def view(self) -> Mapping[str, Program]:
        """Return a live, read-only view of the name to program mapping."""
        return MappingProxyType(self._programs)

    def __contains__(self, name: object) -> bool:
        return name in self._programs

    def __len__(self) -> int:
        return len(self._programs)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._programs))
