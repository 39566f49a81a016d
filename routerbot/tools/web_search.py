from typing import Any

from routerbot.tools.base import Tool, query_parameters

NOT_IMPLEMENTED_MESSAGE = (
    "Web search is not implemented yet. For now, I'll rely on my existing "
    "knowledge about React Router."
)


class WebSearchTool(Tool):
    name = "web_search"
    description = (
        "Search the web for current information about React Router or related "
        "technologies."
    )
    parameters = query_parameters("The search query for the web search.")

    async def execute(self, params: dict[str, Any]) -> str:
        # TODO: back this with a search API (Tavily) once a key is provisioned.
        return NOT_IMPLEMENTED_MESSAGE
