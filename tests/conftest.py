"""
Shared fixtures: an in-memory Supabase stand-in, a scripted LLM provider
and an app wired with both.
"""

import asyncio
import json
from typing import Any, Optional

import pytest
from fastapi.testclient import TestClient

from routerbot.config import AppConfig
from routerbot.conversation.storage import ConversationStore
from routerbot.errors import StoreError
from routerbot.llm.base import LLMProvider
from routerbot.main import create_app


class FakeSupabase:
    """Implements the SupabaseClient calls used by the store and docs search."""

    def __init__(self) -> None:
        self.tables: dict[str, dict[str, dict]] = {"conversations": {}}
        self.rpc_rows: list[dict] = []
        self.rpc_calls: list[tuple[str, dict]] = []
        self.fail = False
        self.fail_rpc = False

    def _check(self) -> None:
        if self.fail:
            raise StoreError("STORE_UNREACHABLE", "connection refused")

    async def select_one(self, table: str, column: str, value: str) -> Optional[dict]:
        self._check()
        row = self.tables.setdefault(table, {}).get(value)
        return json.loads(json.dumps(row)) if row else None

    async def select(self, table: str, order: str = "", limit: Optional[int] = None) -> list[dict]:
        self._check()
        rows = list(self.tables.setdefault(table, {}).values())
        if order:
            column, _, direction = order.partition(".")
            rows.sort(key=lambda r: r.get(column) or "", reverse=direction == "desc")
        return rows[:limit] if limit is not None else rows

    async def upsert(self, table: str, row: dict) -> None:
        self._check()
        self.tables.setdefault(table, {})[row["id"]] = json.loads(json.dumps(row))

    async def delete(self, table: str, column: str, value: str) -> None:
        self._check()
        self.tables.setdefault(table, {}).pop(value, None)

    async def rpc(self, fn: str, params: dict[str, Any]) -> Any:
        self.rpc_calls.append((fn, params))
        if self.fail_rpc:
            raise StoreError("STORE_REQUEST_FAILED", "rpc failed", http_status=400)
        return self.rpc_rows

    async def aclose(self) -> None:
        return None


def tool_call(name: str, arguments: dict, call_id: str = "call_1") -> dict:
    return {
        "role": "assistant",
        "content": "",
        "tool_calls": [
            {
                "id": call_id,
                "type": "function",
                "function": {"name": name, "arguments": json.dumps(arguments)},
            }
        ],
    }


class FakeProvider(LLMProvider):
    """Replays scripted replies and records every call."""

    name = "fake"

    def __init__(
        self,
        replies: Optional[list[dict]] = None,
        tokens: Optional[list[str]] = None,
        delays: Optional[dict[str, float]] = None,
    ) -> None:
        self.replies = list(replies or [])
        self.tokens = tokens or ["Hello", " there"]
        self.delays = delays or {}
        self.complete_calls: list[tuple[list[dict], dict]] = []
        self.stream_calls: list[tuple[list[dict], dict]] = []
        self.embed_calls: list[str] = []
        self.error: Optional[Exception] = None
        self.embed_error: Optional[Exception] = None

    async def complete(self, messages: list[dict], model: str, **kwargs) -> dict:
        self.complete_calls.append((json.loads(json.dumps(messages)), kwargs))
        last = messages[-1].get("content") or ""
        await asyncio.sleep(self.delays.get(last, 0))
        if self.error:
            raise self.error
        if self.replies:
            return self.replies.pop(0)
        return {"role": "assistant", "content": f"echo: {last}"}

    async def stream(self, messages: list[dict], model: str, **kwargs):
        self.stream_calls.append((json.loads(json.dumps(messages)), kwargs))
        if self.error:
            raise self.error
        for token in self.tokens:
            yield token

    async def embed(self, text: str, model: str) -> list[float]:
        self.embed_calls.append(text)
        if self.embed_error:
            raise self.embed_error
        return [0.1, 0.2, 0.3]


@pytest.fixture
def config():
    return AppConfig(
        openai_api_key="sk-test-0123456789",
        supabase_url="https://example.supabase.co",
        supabase_key="service-key",
        node_env="test",
    )


@pytest.fixture
def supabase():
    return FakeSupabase()


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def store(supabase):
    return ConversationStore(supabase)


@pytest.fixture
def app(config, supabase, provider):
    return create_app(
        config,
        supabase=supabase,
        provider=provider,
        provider_factory=lambda cfg: FakeProvider(),
    )


@pytest.fixture
def client(app):
    return TestClient(app)
