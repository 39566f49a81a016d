import json
import logging
from typing import Any, Union

from routerbot.tools.base import Tool

logger = logging.getLogger(__name__)


class ToolRegistry:
    def __init__(self, tools: list[Tool]) -> None:
        self._tools: dict[str, Tool] = {t.name: t for t in tools}

    def get(self, name: str) -> Tool | None:
        return self._tools.get(name)

    def schemas(self) -> list[dict[str, Any]]:
        return [t.schema() for t in self._tools.values()]

    async def execute(self, name: str, arguments: Union[str, dict, None]) -> str:
        """Run a tool call and return its text output, never raising."""
        tool = self._tools.get(name)
        if not tool:
            return f"[TOOL_ERROR] Tool '{name}' is not available."

        if isinstance(arguments, str):
            try:
                params = json.loads(arguments) if arguments.strip() else {}
            except json.JSONDecodeError as e:
                logger.warning("Failed to parse arguments for %s: %s", name, e)
                return f"[TOOL_ERROR] Invalid arguments for '{name}': {e}"
        else:
            params = arguments or {}
        if not isinstance(params, dict):
            return f"[TOOL_ERROR] Invalid arguments for '{name}': expected an object"

        try:
            return await tool.execute(params)
        except Exception as e:
            logger.error("Tool '%s' execution failed: %s", name, e, exc_info=True)
            return f"[TOOL_ERROR] Tool '{name}' failed: {e}"
