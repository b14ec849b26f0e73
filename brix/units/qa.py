from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..errors import CapabilityMissingError
from ..schemas.program import Action, Program, Step
from ..unit import Unit

QA_PROGRAM = "qa"


async def _get_answer(payload: Any, unit: Unit) -> Any:
    if unit.ai is None:
        raise CapabilityMissingError("intelligence", unit.name)
    question = payload["question"] if isinstance(payload, Mapping) else payload
    return await unit.ai.ask(question)


class QAUnit(Unit):
    """Question/answer unit.

    Registers the ``qa`` program, which sends ``payload["question"]`` (or the
    payload itself when it is not a mapping) to the unit's AI capability and
    returns the answer.
    """

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.register(
            Program(
                name=QA_PROGRAM,
                description="Return an answer to a question",
                steps=[
                    Step(
                        name="Get Answer",
                        description="Get the answer to the question",
                        actions=[
                            Action(
                                name="Get Answer",
                                description="Ask the AI capability",
                                method=_get_answer,
                            )
                        ],
                    )
                ],
            )
        )
