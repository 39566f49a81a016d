import logging
from contextlib import asynccontextmanager
from typing import Callable, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from routerbot.api.routes_chat import router as chat_router
from routerbot.api.routes_conversation import router as conversation_router
from routerbot.api.routes_diagnostics import router as diagnostics_router
from routerbot.api.routes_logs import router as logs_router
from routerbot.chat.exchange import ChatExchangeHandler
from routerbot.config import AppConfig, get_config
from routerbot.conversation.storage import ConversationStore
from routerbot.db.supabase import SupabaseClient
from routerbot.llm.base import LLMProvider
from routerbot.llm.openai_provider import OpenAIProvider
from routerbot.logging_setup import setup_logging
from routerbot.tools.docs_search import DocsSearchTool
from routerbot.tools.registry import ToolRegistry
from routerbot.tools.web_search import WebSearchTool

logger = logging.getLogger(__name__)

VERSION = "0.1.0"


def default_provider_factory(config: AppConfig) -> OpenAIProvider:
    return OpenAIProvider(api_key=config.openai_api_key, timeout=config.http_timeout)


def create_app(
    config: Optional[AppConfig] = None,
    *,
    supabase: Optional[SupabaseClient] = None,
    store: Optional[ConversationStore] = None,
    provider: Optional[LLMProvider] = None,
    provider_factory: Optional[Callable[[AppConfig], LLMProvider]] = None,
) -> FastAPI:
    """Build the app with its clients constructed once and injected.

    Anything passed in is treated as owned by the caller and is not closed
    on shutdown.
    """
    if config is None:
        config = get_config()
        setup_logging(config.log_level)

    provider_factory = provider_factory or default_provider_factory
    owned: list = []

    if supabase is None:
        supabase = SupabaseClient(
            config.supabase_url, config.supabase_key, timeout=config.http_timeout
        )
        owned.append(supabase)
    if provider is None:
        provider = provider_factory(config)
        owned.append(provider)
    if store is None:
        store = ConversationStore(supabase)

    tools = ToolRegistry([DocsSearchTool(config, provider, supabase), WebSearchTool()])
    handler = ChatExchangeHandler(config, store, provider, tools)

    @asynccontextmanager
    async def lifespan(app):
        await store.init_table()
        yield
        for client in owned:
            if isinstance(client, SupabaseClient):
                await client.aclose()
            else:
                await client.close()

    app = FastAPI(title="routerbot", version=VERSION, lifespan=lifespan)
    app.state.config = config
    app.state.store = store
    app.state.handler = handler
    app.state.provider_factory = provider_factory

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
        expose_headers=["X-Conversation-Id"],
    )

    app.include_router(chat_router)
    app.include_router(diagnostics_router)
    app.include_router(conversation_router)
    app.include_router(logs_router)

    @app.get("/api/health")
    async def health_check():
        return {"status": "ok", "version": VERSION}

    return app
