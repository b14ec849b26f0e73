"""In-process publish/subscribe channel.

Every unit and every container owns one ``EventChannel``. Listeners are keyed
by event name; any number may subscribe to the same name and they are called
synchronously in registration order.

Emission is fire-and-forget from the emitter's point of view:

- a listener that raises is logged and skipped, the remaining listeners still
  run and the emitting operation carries on;
- a listener that returns an awaitable has it scheduled as a background task
  on the running event loop. The channel holds a reference to the task until
  it finishes so it is not garbage collected mid-flight.
"""

from __future__ import annotations

import asyncio
import inspect
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Set, Union

from ..core.logging_config import get_logger

logger = get_logger(__name__)

Listener = Callable[[Any], Any]
EventKey = Union[str, Enum]


def _key(event: EventKey) -> str:
    if isinstance(event, Enum):
        return str(event.value)
    return str(event)


@dataclass
class _Subscription:
    callback: Listener
    once: bool = False


class EventChannel:
    """Multi-subscriber event channel keyed by event name."""

    def __init__(self, owner: Optional[str] = None) -> None:
        """
        Initialize an empty channel.

        Args:
            owner: Label used in log messages (typically the owner's name).
        """
        self._owner = owner or "anonymous"
        self._subscriptions: Dict[str, List[_Subscription]] = {}
        self._background_tasks: Set[asyncio.Task[Any]] = set()

    def on(self, event: EventKey, listener: Listener) -> Listener:
        """
        Subscribe ``listener`` to ``event``.

        Returns the listener so the method can be used as a decorator.
        """
        self._subscriptions.setdefault(_key(event), []).append(_Subscription(listener))
        return listener

    def once(self, event: EventKey, listener: Listener) -> Listener:
        """Subscribe ``listener`` for the next emission of ``event`` only."""
        self._subscriptions.setdefault(_key(event), []).append(_Subscription(listener, once=True))
        return listener

    def off(self, event: EventKey, listener: Listener) -> bool:
        """
        Remove the first subscription of ``listener`` to ``event``.

        Returns:
            True if a subscription was removed, False otherwise.
        """
        subs = self._subscriptions.get(_key(event))
        if not subs:
            return False
        for idx, sub in enumerate(subs):
            if sub.callback is listener:
                del subs[idx]
                return True
        return False

    def clear(self, event: Optional[EventKey] = None) -> None:
        """Drop every subscription, or only those for ``event``."""
        if event is None:
            self._subscriptions.clear()
        else:
            self._subscriptions.pop(_key(event), None)

    def listeners(self, event: EventKey) -> List[Listener]:
        return [sub.callback for sub in self._subscriptions.get(_key(event), [])]

    def listener_count(self, event: EventKey) -> int:
        return len(self._subscriptions.get(_key(event), []))

    def emit(self, event: EventKey, payload: Any = None) -> int:
        """
        Deliver ``payload`` to every listener of ``event``.

        Listener failures are logged and never propagate to the caller.

        Returns:
            The number of listeners that were called.
        """
        name = _key(event)
        subs = self._subscriptions.get(name)
        if not subs:
            return 0

        # snapshot: listeners may subscribe/unsubscribe while being called
        snapshot = list(subs)
        for sub in snapshot:
            if sub.once:
                try:
                    subs.remove(sub)
                except ValueError:
                    continue
        called = 0
        for sub in snapshot:
            called += 1
            try:
                result = sub.callback(payload)
            except Exception:
                logger.exception(f"Listener for '{name}' on channel '{self._owner}' raised")
                continue
            if inspect.isawaitable(result):
                self._schedule(name, result)
        return called

    def _schedule(self, name: str, awaitable: Any) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning(f"Async listener for '{name}' on channel '{self._owner}' dropped: no running event loop")
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            return

        task = loop.create_task(self._guard(name, awaitable))
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)

    async def _guard(self, name: str, awaitable: Any) -> None:
        try:
            await awaitable
        except Exception:
            logger.exception(f"Async listener for '{name}' on channel '{self._owner}' raised")

    async def drain(self) -> None:
        """Wait for every scheduled async listener to finish."""
        while self._background_tasks:
            await asyncio.gather(*list(self._background_tasks), return_exceptions=True)
