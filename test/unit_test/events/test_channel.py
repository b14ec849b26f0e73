from __future__ import annotations

import asyncio
import logging
from typing import Any, List

import pytest

from brix.events.channel import EventChannel
from brix.schemas.events import EventName


def test_publish_and_subscribe() -> None:
    channel = EventChannel()
    received: List[Any] = []
    channel.on("foo", received.append)

    assert channel.emit("foo", {"bar": "baz"}) == 1
    assert received == [{"bar": "baz"}]


def test_listeners_are_called_in_registration_order() -> None:
    channel = EventChannel()
    order: List[str] = []
    channel.on("e", lambda _p: order.append("first"))
    channel.on("e", lambda _p: order.append("second"))
    channel.on("e", lambda _p: order.append("third"))

    channel.emit("e")

    assert order == ["first", "second", "third"]


def test_enum_and_string_keys_are_the_same_event() -> None:
    channel = EventChannel()
    received: List[Any] = []
    channel.on(EventName.run_started, received.append)

    channel.emit("run-started", 1)
    channel.emit(EventName.run_started, 2)

    assert received == [1, 2]
    assert channel.listener_count("run-started") == 1


def test_emit_without_listeners_returns_zero() -> None:
    assert EventChannel().emit("nobody") == 0


def test_off_removes_listener() -> None:
    channel = EventChannel()
    received: List[Any] = []

    def listener(payload: Any) -> None:
        received.append(payload)

    channel.on("e", listener)
    assert channel.off("e", listener) is True
    channel.emit("e", 1)

    assert received == []
    assert channel.off("unknown", listener) is False


def test_once_listener_fires_a_single_time() -> None:
    channel = EventChannel()
    received: List[Any] = []
    channel.once("e", received.append)

    channel.emit("e", 1)
    channel.emit("e", 2)

    assert received == [1]
    assert channel.listener_count("e") == 0


def test_clear_single_event() -> None:
    channel = EventChannel()
    channel.on("a", lambda _p: None)
    channel.on("b", lambda _p: None)

    channel.clear("a")

    assert channel.listener_count("a") == 0
    assert channel.listener_count("b") == 1


def test_failing_listener_does_not_stop_others(caplog: pytest.LogCaptureFixture) -> None:
    channel = EventChannel(owner="unit-x")
    received: List[Any] = []

    def bad(_payload: Any) -> None:
        raise RuntimeError("listener broke")

    channel.on("e", bad)
    channel.on("e", received.append)

    with caplog.at_level(logging.ERROR, logger="brix.events.channel"):
        assert channel.emit("e", "payload") == 2

    assert received == ["payload"]
    assert "unit-x" in caplog.text
    assert "listener broke" in caplog.text


def test_listener_added_during_emit_waits_for_next_emit() -> None:
    channel = EventChannel()
    late: List[Any] = []

    def add_late(_payload: Any) -> None:
        channel.on("e", late.append)

    channel.on("e", add_late)
    channel.emit("e", 1)
    assert late == []

    channel.emit("e", 2)
    assert late == [2]


@pytest.mark.asyncio
async def test_async_listener_is_scheduled() -> None:
    channel = EventChannel()
    received: List[Any] = []

    async def listener(payload: Any) -> None:
        await asyncio.sleep(0)
        received.append(payload)

    channel.on("e", listener)
    channel.emit("e", "hello")
    assert received == []

    await channel.drain()
    assert received == ["hello"]


@pytest.mark.asyncio
async def test_async_listener_failure_is_logged(caplog: pytest.LogCaptureFixture) -> None:
    channel = EventChannel()

    async def listener(_payload: Any) -> None:
        raise ValueError("async broke")

    channel.on("e", listener)
    with caplog.at_level(logging.ERROR, logger="brix.events.channel"):
        channel.emit("e")
        await channel.drain()

    assert "async broke" in caplog.text


def test_async_listener_without_loop_is_dropped(caplog: pytest.LogCaptureFixture) -> None:
    channel = EventChannel()
    called: List[bool] = []

    async def listener(_payload: Any) -> None:
        called.append(True)

    channel.on("e", listener)
    with caplog.at_level(logging.WARNING, logger="brix.events.channel"):
        assert channel.emit("e") == 1

    assert called == []
    assert "no running event loop" in caplog.text
