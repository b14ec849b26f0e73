from __future__ import annotations

import asyncio
from typing import Any, Optional

from rich.console import Console

from ..unit import Unit


class TerminalUnit(Unit):
    """Unit that talks to the terminal through a ``rich`` console.

    Example::

        unit = TerminalUnit()
        while True:
            unit.print("> ")
            line = await unit.input()
            if line.lower() == "exit":
                unit.print_success("Bye!")
                break
            unit.print_line(f"Command: {line}")
    """

    def __init__(self, *, console: Optional[Console] = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.console = console or Console()

    def _write(self, text: str, style: Optional[str] = None) -> None:
        self.console.print(text, style=style, end="", markup=False, highlight=False)

    def print(self, text: str) -> None:
        """Print ``text`` without a trailing newline."""
        self._write(text)

    def print_line(self, text: str) -> None:
        self._write(f"\n{text}\n")

    def print_error(self, text: str) -> None:
        self._write(f"\n{text}\n", style="red")

    def print_success(self, text: str) -> None:
        self._write(f"\n{text}\n", style="green")

    def print_warning(self, text: str) -> None:
        self._write(f"\n{text}\n", style="yellow")

    def print_info(self, text: str) -> None:
        self._write(f"\n{text}\n", style="blue")

    def print_debug(self, text: str) -> None:
        self._write(f"\n{text}\n", style="cyan")

    async def input(self, prompt: str = "", *, password: bool = False) -> str:
        """Read one line from the terminal without blocking the event loop."""
        line = await asyncio.to_thread(self.console.input, prompt, password=password)
        return line or ""
