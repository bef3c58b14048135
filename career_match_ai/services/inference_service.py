"""Inference capability: one ``generate`` operation plus ordered payload-text strategies."""

import json
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional

from openai import AsyncOpenAI

from career_match_ai.utils.logger import get_logger

logger = get_logger(__name__)

Message = Dict[str, str]


class InferenceService(ABC):
    """Opaque text-generation binding."""

    @abstractmethod
    async def generate(self, model: str, messages: List[Message]) -> Any:
        """Run the model once over messages. The result shape is provider-specific."""
        ...


class OpenAIInferenceService(InferenceService):
    """OpenAI (or any OpenAI-compatible endpoint) chat completions."""

    def __init__(
        self,
        api_key: str,
        base_url: Optional[str] = None,
        temperature: float = 0.1,
        client: Optional[AsyncOpenAI] = None,
    ) -> None:
        self._client = client or AsyncOpenAI(api_key=api_key, base_url=base_url or None)
        self._temperature = temperature

    async def generate(self, model: str, messages: List[Message]) -> Any:
        response = await self._client.chat.completions.create(
            model=model,
            messages=messages,
            temperature=self._temperature,
        )
        if hasattr(response, "model_dump"):
            return response.model_dump()
        return response


def _field(result: Any, name: str) -> Any:
    if isinstance(result, dict):
        return result.get(name)
    return getattr(result, name, None)


def _string_field(name: str) -> Callable[[Any], Optional[str]]:
    def strategy(result: Any) -> Optional[str]:
        value = _field(result, name)
        return value if isinstance(value, str) and value.strip() else None

    strategy.__name__ = f"field:{name}"
    return strategy


def _message_field(result: Any) -> Optional[str]:
    message = _field(result, "message")
    if isinstance(message, str):
        return message if message.strip() else None
    content = _field(message, "content") if message is not None else None
    return content if isinstance(content, str) and content.strip() else None


def _chat_choices(result: Any) -> Optional[str]:
    """OpenAI chat-completion shape: choices[0].message.content."""
    choices = _field(result, "choices")
    if not choices:
        return None
    message = _field(choices[0], "message")
    content = _field(message, "content") if message is not None else None
    return content if isinstance(content, str) and content.strip() else None


def _stringify(result: Any) -> Optional[str]:
    if result is None:
        return None
    if isinstance(result, str):
        return result
    try:
        return json.dumps(result)
    except (TypeError, ValueError):
        return str(result)


PAYLOAD_STRATEGIES: List[Callable[[Any], Optional[str]]] = [
    _string_field("response"),
    _string_field("text"),
    _string_field("content"),
    _message_field,
    _chat_choices,
    _stringify,
]


def response_text(result: Any) -> str:
    """Locate the textual payload of an inference result; first strategy with text wins."""
    for strategy in PAYLOAD_STRATEGIES:
        text = strategy(result)
        if text:
            return text
    return ""
