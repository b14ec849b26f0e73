"""AI capability.

``Intelligence`` is the AI client a unit can hold in its ``intelligence``
slot. Two services are supported:

- ``pydantic_ai``: questions are answered by a ``pydantic_ai.Agent`` built
  from the configured model, system prompt and tool functions. Images are
  requested from an OpenAI-compatible ``/images/generations`` endpoint over
  ``httpx``. Chat credentials are read by pydantic_ai from the provider's
  standard environment variables (e.g. ``OPENAI_API_KEY``).
- ``custom``: both calls are forwarded to a user supplied ``method`` and its
  result is returned unchanged.
"""

from __future__ import annotations

import inspect
import json
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Literal, Optional, Sequence, Union

import httpx
from pydantic_ai import Agent
from pydantic_ai.models import Model

from ..core.config import BrixSettings, get_settings
from ..core.logging_config import get_logger
from ..errors import IntelligenceError

logger = get_logger(__name__)

IntelligenceService = Literal["pydantic_ai", "custom"]

DEFAULT_MODEL = "openai:gpt-4o-mini"
DEFAULT_SYSTEM_PROMPT = "You are a friendly assistant, ready to help with any task"
DEFAULT_BASE_URL = "https://api.openai.com/v1"
DEFAULT_IMAGE_SIZE = "256x256"


@dataclass(frozen=True)
class AskResult:
    """Answer returned by ``Intelligence.ask``.

    Attributes:
        text: The model's text answer.
        context: Full message history; pass it back as ``context`` to continue
            the conversation.
        usage: Raw usage metadata reported by pydantic_ai.
    """

    text: str
    context: List[Any]
    usage: Any = None


@dataclass(frozen=True)
class ImageResult:
    """Images returned by ``Intelligence.ask_for_image``."""

    images: List[Dict[str, Any]]
    raw: Dict[str, Any] = field(default_factory=dict)


class Intelligence:
    """AI client used by unit actions through ``unit.ai``."""

    def __init__(
        self,
        *,
        service: IntelligenceService = "pydantic_ai",
        model: Union[str, Model] = DEFAULT_MODEL,
        system: str = DEFAULT_SYSTEM_PROMPT,
        api_key: Optional[str] = None,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 60.0,
        tools: Sequence[Callable[..., Any]] = (),
        method: Optional[Callable[[Any], Any]] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """
        Create an AI client.

        Args:
            service: ``pydantic_ai`` or ``custom``.
            model: pydantic_ai model name (``provider:model``) or model instance.
            system: System prompt for every conversation.
            api_key: Bearer token for the image endpoint.
            base_url: Base URL of the OpenAI-compatible image endpoint.
            timeout: HTTP timeout in seconds for image requests.
            tools: Functions the model may call while answering.
            method: Handler for the ``custom`` service; may be async. Defaults
                to echoing its input.
            http_client: Client used for image requests instead of a new one.

        Raises:
            ValueError: If ``service`` is not supported.
        """
        if service not in ("pydantic_ai", "custom"):
            raise ValueError(f"Invalid service: {service}")

        self.service: IntelligenceService = service
        self.model = model
        self.system = system
        self.tools = list(tools)
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._api_key = api_key
        self._http_client = http_client
        self._method: Callable[[Any], Any] = method or (lambda payload: payload)
        self._agent: Optional[Agent] = None

    @classmethod
    def from_settings(cls, settings: Optional[BrixSettings] = None, **overrides: Any) -> "Intelligence":
        """Build an ``Intelligence`` from ``BrixSettings.intelligence``."""
        cfg = (settings or get_settings()).intelligence
        kwargs: Dict[str, Any] = {
            "service": cfg.service,
            "model": cfg.model,
            "system": cfg.system_prompt,
            "api_key": cfg.api_key,
            "base_url": cfg.base_url,
            "timeout": cfg.timeout,
        }
        kwargs.update(overrides)
        return cls(**kwargs)

    @property
    def agent(self) -> Agent:
        """The pydantic_ai agent, built on first use."""
        if self._agent is None:
            self._agent = Agent(self.model, system_prompt=self.system, tools=self.tools)
        return self._agent

    async def ask(self, question: Any, context: Optional[Sequence[Any]] = None) -> Any:
        """
        Ask a question.

        Args:
            question: Prompt text; other values are JSON encoded.
            context: Message history from a previous ``AskResult.context``.

        Returns:
            ``AskResult`` for the ``pydantic_ai`` service, the handler's result
            for ``custom``.

        Raises:
            IntelligenceError: If the backend fails.
        """
        if self.service == "custom":
            return await self._call_custom(question)

        prompt = question if isinstance(question, str) else json.dumps(question, default=str)
        try:
            result = await self.agent.run(prompt, message_history=list(context) if context else None)
            # a method on older pydantic_ai releases, a property on newer ones
            usage = result.usage
            usage = usage() if callable(usage) else usage
            answer = AskResult(text=str(result.output), context=list(result.all_messages()), usage=usage)
        except Exception as e:
            logger.error(f"AI request failed: {e}")
            raise IntelligenceError(str(e)) from e

        return answer

    async def ask_for_image(self, prompt: str, size: str = DEFAULT_IMAGE_SIZE) -> Any:
        """
        Request an image.

        Returns:
            ``ImageResult`` for the ``pydantic_ai`` service, the handler's
            result for ``custom``.

        Raises:
            IntelligenceError: If the request fails or the response is malformed.
        """
        if self.service == "custom":
            return await self._call_custom(prompt)

        headers = {"Authorization": f"Bearer {self._api_key}"} if self._api_key else {}
        body = {"prompt": prompt, "size": size, "n": 1}
        url = f"{self.base_url}/images/generations"
        try:
            if self._http_client is not None:
                response = await self._http_client.post(url, json=body, headers=headers)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(url, json=body, headers=headers)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            logger.error(f"Image request failed: {e}")
            raise IntelligenceError(str(e)) from e

        images = data.get("data") if isinstance(data, dict) else None
        if not isinstance(images, list):
            raise IntelligenceError("Invalid response from AI")
        return ImageResult(images=images, raw=data)

    async def _call_custom(self, payload: Any) -> Any:
        result = self._method(payload)
        if inspect.isawaitable(result):
            result = await result
        return result
