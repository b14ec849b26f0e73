"""Event channels used by units and containers."""

from .channel import EventChannel, Listener

__all__ = [
    "EventChannel",
    "Listener",
]
