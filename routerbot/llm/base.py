from abc import ABC, abstractmethod
from typing import AsyncGenerator


class LLMProvider(ABC):
    """Abstract base class for LLM providers."""

    name: str

    @abstractmethod
    async def complete(
        self, messages: list[dict], model: str, **kwargs
    ) -> dict:
        """Send messages and return the assistant message as a dict.

        The dict has ``role`` and ``content`` and, when the model asked for
        tools, ``tool_calls`` in the OpenAI wire shape.
        """
        ...

    @abstractmethod
    async def stream(
        self, messages: list[dict], model: str, **kwargs
    ) -> AsyncGenerator[str, None]:
        """Send messages and stream response tokens."""
        ...

    @abstractmethod
    async def embed(self, text: str, model: str) -> list[float]:
        """Return the embedding vector for ``text``."""
        ...

    async def close(self) -> None:
        """Release network resources held by the provider."""
        return None
