import builtins

import httpx
import pytest

from routerbot.client.cli import _repl
from routerbot.client.session import STORAGE_KEY, ChatSession, MemoryStorage, PageLocation


def scripted_input(monkeypatch, lines):
    pending = list(lines)

    def fake_input(prompt=""):
        if not pending:
            raise EOFError
        return pending.pop(0)

    monkeypatch.setattr(builtins, "input", fake_input)


@pytest.mark.asyncio
async def test_repl_chats_and_starts_new_conversation(monkeypatch, capsys):
    def handler(request):
        return httpx.Response(
            200,
            json={"message": {"role": "assistant", "content": "Use a loader."}, "conversationId": "c1"},
            headers={"X-Conversation-Id": "c1"},
        )

    storage = MemoryStorage()
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://testserver")
    session = ChatSession(client, storage, PageLocation("http://testserver/ai"))
    scripted_input(monkeypatch, ["How do I load data?", "/new", "/quit", "never sent"])

    await _repl(session)

    out = capsys.readouterr().out
    assert "ai> Use a loader." in out
    assert "Started a new conversation." in out
    assert storage.get_item(STORAGE_KEY) is None
    assert session.messages == []


@pytest.mark.asyncio
async def test_repl_resumes_stored_conversation(monkeypatch, capsys):
    client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(500)))
    session = ChatSession(client, MemoryStorage({STORAGE_KEY: "old"}), PageLocation("http://testserver/ai"))
    scripted_input(monkeypatch, [])

    await _repl(session)

    assert "Continuing conversation old" in capsys.readouterr().out
