import logging
from typing import Any

from routerbot.config import AppConfig
from routerbot.conversation.models import DocumentResult
from routerbot.db.supabase import SupabaseClient
from routerbot.errors import StoreError
from routerbot.llm.base import LLMProvider
from routerbot.tools.base import Tool, query_parameters

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "React Router Documentation"
DEFAULT_URL = "https://reactrouter.com/docs/en/v7"

NO_RESULTS_MESSAGE = (
    "No relevant documentation found for this query. Try a more general search "
    "term or check the official React Router documentation."
)
SEARCH_ERROR_MESSAGE = "Error searching documentation. Please try a different query."
GENERIC_ERROR_MESSAGE = (
    "An error occurred while searching the documentation. Please try again later."
)


def to_document(row: dict) -> DocumentResult:
    return DocumentResult(
        title=row.get("title") or DEFAULT_TITLE,
        content=row.get("content") or "",
        url=row.get("url") or DEFAULT_URL,
        similarity=row.get("similarity") or 0.0,
    )


def format_documents(docs: list[DocumentResult]) -> str:
    sections = "\n".join(
        f"## {doc.title}\n{doc.content}\n\nSource: {doc.url}\n\n" for doc in docs
    )
    return f"Here are the most relevant documentation sections:\n\n{sections}"


class DocsSearchTool(Tool):
    """Vector search over the React Router docs stored in Supabase."""

    name = "react_router_docs"
    description = (
        "Search the React Router documentation for information about specific "
        "features, concepts, or APIs."
    )
    parameters = query_parameters("The search query for React Router documentation.")

    def __init__(self, config: AppConfig, provider: LLMProvider, db: SupabaseClient) -> None:
        self._provider = provider
        self._db = db
        self._embedding_model = config.embedding_model
        self._threshold = config.match_threshold
        self._count = config.match_count

    async def search(self, query: str) -> list[DocumentResult]:
        embedding = await self._provider.embed(query, self._embedding_model)
        rows = await self._db.rpc(
            "match_documents",
            {
                "query_embedding": embedding,
                "match_threshold": self._threshold,
                "match_count": self._count,
            },
        )
        return [to_document(row) for row in rows or []]

    async def execute(self, params: dict[str, Any]) -> str:
        query = str(params.get("query") or "").strip()
        if not query:
            return "[TOOL_ERROR] Missing required parameter: query"

        try:
            docs = await self.search(query)
        except StoreError as e:
            logger.error("Error searching documentation: %s", e)
            return SEARCH_ERROR_MESSAGE
        except Exception as e:
            logger.error("Docs search failed: %s", e, exc_info=True)
            return GENERIC_ERROR_MESSAGE

        if not docs:
            return NO_RESULTS_MESSAGE
        return format_documents(docs)
