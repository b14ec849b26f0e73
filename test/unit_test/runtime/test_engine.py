from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Tuple
from unittest.mock import Mock

import pytest

from brix.errors import ProgramExecutionError, ProgramNotFoundError
from brix.runtime.engine import ProgramEngine, iter_actions
from brix.runtime.registry import ProgramRegistry
from brix.schemas.events import EventName
from brix.schemas.program import Action, Program, Step


class _Emitter:
    def __init__(self) -> None:
        self.events: List[Tuple[EventName, Dict[str, Any]]] = []

    def __call__(self, event: EventName, payload: Dict[str, Any]) -> None:
        self.events.append((event, payload))

    def names(self) -> List[EventName]:
        return [e for e, _ in self.events]


@pytest.fixture
def registry() -> ProgramRegistry:
    return ProgramRegistry()


@pytest.fixture
def emitter() -> _Emitter:
    return _Emitter()


@pytest.fixture
def engine(registry: ProgramRegistry, emitter: _Emitter) -> ProgramEngine:
    return ProgramEngine(registry=registry, emit=emitter)


def _boom(_payload: Any, _unit: Any) -> Any:
    raise RuntimeError("boom")


def test_iter_actions_flattens_in_declared_order() -> None:
    a1, a2, a3 = (Action(name=n, method=lambda p, _u: p) for n in ("a1", "a2", "a3"))
    program = Program(name="p", steps=[Step(actions=[a1, a2]), Step(actions=[]), Step(actions=[a3])])

    refs = list(iter_actions(program))

    assert [r.action.name for r in refs] == ["a1", "a2", "a3"]
    assert [(r.step_index, r.action_index) for r in refs] == [(0, 0), (0, 1), (2, 0)]


@pytest.mark.asyncio
async def test_payload_threading_is_a_strict_fold(registry: ProgramRegistry, engine: ProgramEngine) -> None:
    registry.register(
        Program(
            name="calc",
            steps=[
                Step(actions=[Action(method=lambda x, _u: x + 1)]),
                Step(actions=[Action(method=lambda x, _u: x * 2)]),
            ],
        )
    )

    assert await engine.run("calc", 3) == 8


@pytest.mark.asyncio
async def test_async_and_sync_methods_mix(registry: ProgramRegistry, engine: ProgramEngine) -> None:
    async def add_bar(payload: Dict[str, Any], _unit: Any) -> Dict[str, Any]:
        await asyncio.sleep(0)
        return {**payload, "bar": "baz"}

    registry.register(
        Program(
            name="main",
            steps=[Step(actions=[Action(method=lambda p, _u: p), Action(method=add_bar)])],
        )
    )

    assert await engine.run("main", {"foo": "bar"}) == {"foo": "bar", "bar": "baz"}


@pytest.mark.asyncio
async def test_each_action_receives_owning_unit(registry: ProgramRegistry, engine: ProgramEngine) -> None:
    seen: List[Any] = []
    owner = object()
    registry.register(Program(name="p", steps=[Step(actions=[Action(method=lambda p, u: seen.append(u) or p)])]))

    await engine.run("p", 1, unit=owner)

    assert seen == [owner]


@pytest.mark.asyncio
async def test_empty_program_returns_input(registry: ProgramRegistry, engine: ProgramEngine) -> None:
    registry.register(Program(name="noop"))

    assert await engine.run("noop", {"x": 1}) == {"x": 1}


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [None, 0, "x", {"a": 1}])
async def test_unknown_program_raises_regardless_of_payload(engine: ProgramEngine, emitter: _Emitter, payload) -> None:
    with pytest.raises(ProgramNotFoundError):
        await engine.run("missing", payload)
    assert emitter.events == []


@pytest.mark.asyncio
@pytest.mark.parametrize("n,k", [(1, 1), (3, 1), (3, 2), (3, 3), (5, 4)])
async def test_failing_action_stops_the_run(registry: ProgramRegistry, engine: ProgramEngine, n: int, k: int) -> None:
    spies = [Mock(side_effect=lambda p, _u: p) for _ in range(n)]
    spies[k - 1].side_effect = _boom
    registry.register(Program(name="p", steps=[Step(actions=[Action(method=s) for s in spies])]))

    with pytest.raises(ProgramExecutionError) as exc_info:
        await engine.run("p", 0)

    for spy in spies[:k]:
        assert spy.call_count == 1
    for spy in spies[k:]:
        assert spy.call_count == 0
    assert exc_info.value.action_index == k - 1
    assert exc_info.value.step_index == 0


@pytest.mark.asyncio
async def test_execution_error_preserves_cause_and_position(registry: ProgramRegistry, engine: ProgramEngine) -> None:
    registry.register(
        Program(
            name="p",
            steps=[
                Step(name="first", actions=[Action(method=lambda p, _u: p)]),
                Step(name="second", actions=[Action(method=lambda p, _u: p), Action(name="explode", method=_boom)]),
            ],
        )
    )

    with pytest.raises(ProgramExecutionError) as exc_info:
        await engine.run("p", 1)

    err = exc_info.value
    assert err.program == "p"
    assert (err.step_index, err.action_index) == (1, 1)
    assert err.step_name == "second"
    assert err.action_name == "explode"
    assert isinstance(err.cause, RuntimeError)
    assert err.__cause__ is err.cause
    assert "explode" in str(err)


@pytest.mark.asyncio
async def test_async_failure_is_wrapped(registry: ProgramRegistry, engine: ProgramEngine) -> None:
    async def fail(_p: Any, _u: Any) -> Any:
        raise ValueError("nope")

    registry.register(Program(name="p", steps=[Step(actions=[Action(method=fail)])]))

    with pytest.raises(ProgramExecutionError) as exc_info:
        await engine.run("p")
    assert isinstance(exc_info.value.cause, ValueError)


@pytest.mark.asyncio
async def test_lifecycle_events(registry: ProgramRegistry, engine: ProgramEngine, emitter: _Emitter) -> None:
    registry.register(Program(name="ok", steps=[Step(actions=[Action(method=lambda p, _u: p * 10)])]))
    registry.register(Program(name="bad", steps=[Step(actions=[Action(method=_boom)])]))

    await engine.run("ok", 2)
    with pytest.raises(ProgramExecutionError):
        await engine.run("bad", 2)

    assert emitter.names() == [
        EventName.run_started,
        EventName.run_completed,
        EventName.run_started,
        EventName.run_failed,
    ]
    assert emitter.events[0][1] == {"name": "ok", "payload": 2}
    assert emitter.events[1][1] == {"name": "ok", "result": 20}
    assert isinstance(emitter.events[3][1]["error"], ProgramExecutionError)


@pytest.mark.asyncio
async def test_run_started_fires_before_first_action(registry: ProgramRegistry, emitter: _Emitter) -> None:
    order: List[str] = []

    def emit(event: EventName, payload: Dict[str, Any]) -> None:
        order.append(event.value)

    engine = ProgramEngine(registry=registry, emit=emit)
    registry.register(Program(name="p", steps=[Step(actions=[Action(method=lambda p, _u: order.append("action"))])]))

    await engine.run("p")

    assert order[:2] == ["run-started", "action"]


@pytest.mark.asyncio
async def test_in_flight_run_keeps_its_program(registry: ProgramRegistry, engine: ProgramEngine) -> None:
    gate = asyncio.Event()

    async def wait(payload: int, _u: Any) -> int:
        await gate.wait()
        return payload + 1

    registry.register(
        Program(name="p", steps=[Step(actions=[Action(method=wait), Action(method=lambda p, _u: p * 3)])])
    )

    task = asyncio.create_task(engine.run("p", 1))
    await asyncio.sleep(0)
    registry.deregister("p")
    gate.set()

    assert await task == 6


@pytest.mark.asyncio
async def test_concurrent_runs_do_not_share_payload(registry: ProgramRegistry, engine: ProgramEngine) -> None:
    async def slow_double(payload: int, _u: Any) -> int:
        await asyncio.sleep(0)
        return payload * 2

    registry.register(Program(name="p", steps=[Step(actions=[Action(method=slow_double), Action(method=slow_double)])]))

    results = await asyncio.gather(engine.run("p", 1), engine.run("p", 10))

    assert results == [4, 40]
