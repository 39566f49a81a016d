from abc import ABC, abstractmethod
from typing import Any


class Tool(ABC):
    """A capability the model may call mid-generation.

    Tools never raise to the caller: failures come back as text the model
    can read.
    """

    name: str
    description: str
    parameters: dict[str, Any]

    @abstractmethod
    async def execute(self, params: dict[str, Any]) -> str:
        ...

    def schema(self) -> dict[str, Any]:
        """OpenAI function-tool definition."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }


def query_parameters(description: str) -> dict[str, Any]:
    return {
        "type": "object",
        "properties": {
            "query": {"type": "string", "description": description},
        },
        "required": ["query"],
    }
