from fastapi import Request

from routerbot.chat.exchange import ChatExchangeHandler
from routerbot.config import AppConfig
from routerbot.conversation.storage import ConversationStore


def get_app_config(request: Request) -> AppConfig:
    return request.app.state.config


def get_store(request: Request) -> ConversationStore:
    return request.app.state.store


def get_handler(request: Request) -> ChatExchangeHandler:
    return request.app.state.handler
