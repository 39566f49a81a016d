import json

import httpx
import pytest

from routerbot.client.session import (
    ERROR_REPLY,
    STORAGE_KEY,
    ChatSession,
    FileStorage,
    MemoryStorage,
    PageLocation,
)


def make_session(handler, storage=None, url="http://localhost:3000/ai-assistant"):
    client = httpx.AsyncClient(
        transport=httpx.MockTransport(handler), base_url="http://testserver"
    )
    return ChatSession(client, storage or MemoryStorage(), PageLocation(url))


def reply(content="Hi!", conversation_id="srv-1"):
    return httpx.Response(
        200,
        json={"message": {"role": "assistant", "content": content}, "conversationId": conversation_id},
        headers={"X-Conversation-Id": conversation_id},
    )


class TestHydrate:
    def test_url_id_overrides_storage(self):
        storage = MemoryStorage({STORAGE_KEY: "stored"})
        session = make_session(
            lambda r: reply(), storage, "http://localhost:3000/ai-assistant?conversationId=from-url"
        )

        assert session.hydrate() == "from-url"
        assert storage.get_item(STORAGE_KEY) == "from-url"

    def test_falls_back_to_storage(self):
        session = make_session(lambda r: reply(), MemoryStorage({STORAGE_KEY: "stored"}))
        assert session.hydrate() == "stored"

    def test_nothing_known(self):
        assert make_session(lambda r: reply()).hydrate() is None


class TestSubmit:
    @pytest.mark.asyncio
    async def test_optimistic_user_message_and_reply(self):
        seen = {}

        def handler(request):
            seen["body"] = json.loads(request.content)
            seen["visible"] = [(m.role, m.content) for m in session.messages]
            seen["loading"] = session.is_loading
            return reply("Loaders run before render.")

        session = make_session(handler)
        out = await session.submit("What is a loader?")

        assert seen["visible"] == [("user", "What is a loader?")]
        assert seen["loading"] is True
        assert [m["content"] for m in seen["body"]["messages"]] == ["What is a loader?"]
        assert out.content == "Loaders run before render."
        assert [m.role for m in session.messages] == ["user", "assistant"]
        assert session.is_loading is False
        assert session.input == ""

    @pytest.mark.asyncio
    async def test_captures_header_id(self):
        storage = MemoryStorage()
        session = make_session(lambda r: reply(conversation_id="srv-42"), storage)

        await session.submit("hi")

        assert session.conversation_id == "srv-42"
        assert storage.get_item(STORAGE_KEY) == "srv-42"
        assert session.location.get_param("conversationId") == "srv-42"

    @pytest.mark.asyncio
    async def test_known_id_is_sent_and_kept(self):
        seen = {}

        def handler(request):
            seen["params"] = dict(request.url.params)
            return reply(conversation_id="other")

        session = make_session(handler, MemoryStorage({STORAGE_KEY: "mine"}))
        session.hydrate()
        await session.submit("hi")

        assert seen["params"] == {"conversationId": "mine"}
        assert session.conversation_id == "mine"

    @pytest.mark.asyncio
    async def test_sends_whole_visible_history(self):
        bodies = []

        def handler(request):
            bodies.append(json.loads(request.content))
            return reply()

        session = make_session(handler)
        await session.submit("one")
        await session.submit("two")

        assert [m["content"] for m in bodies[1]["messages"]] == ["one", "Hi!", "two"]

    @pytest.mark.asyncio
    async def test_server_error_appends_apology(self):
        session = make_session(lambda r: httpx.Response(500, json={"error": "OpenAI API Error"}))
        out = await session.submit("hi")

        assert out.content == ERROR_REPLY
        assert [m.role for m in session.messages] == ["user", "assistant"]
        assert session.is_loading is False
        assert session.conversation_id is None

    @pytest.mark.asyncio
    async def test_network_error_appends_apology(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        session = make_session(handler)
        out = await session.submit("hi")
        assert out.content == ERROR_REPLY
        assert session.is_loading is False

    @pytest.mark.asyncio
    async def test_blank_input_is_ignored(self):
        calls = []

        def handler(request):
            calls.append(request)
            return reply()

        session = make_session(handler)
        assert await session.submit("   ") is None
        assert session.messages == []
        assert calls == []


@pytest.mark.asyncio
async def test_new_conversation_clears_state():
    storage = MemoryStorage()
    session = make_session(lambda r: reply(conversation_id="srv-1"), storage)
    await session.submit("hi")

    session.new_conversation()

    assert session.conversation_id is None
    assert session.messages == []
    assert storage.get_item(STORAGE_KEY) is None
    assert session.location.get_param("conversationId") is None


def test_file_storage_persists(tmp_path):
    path = tmp_path / "state" / "local_storage.json"
    FileStorage(path).set_item(STORAGE_KEY, "abc")

    again = FileStorage(path)
    assert again.get_item(STORAGE_KEY) == "abc"
    again.remove_item(STORAGE_KEY)
    assert FileStorage(path).get_item(STORAGE_KEY) is None


def test_file_storage_tolerates_corrupt_file(tmp_path):
    path = tmp_path / "local_storage.json"
    path.write_text("{oops", encoding="utf-8")
    assert FileStorage(path).get_item(STORAGE_KEY) is None


@pytest.mark.parametrize("content", ["[]", '"abc"', "42"])
def test_file_storage_ignores_non_object_json(tmp_path, content):
    path = tmp_path / "local_storage.json"
    path.write_text(content, encoding="utf-8")
    storage = FileStorage(path)

    assert storage.get_item(STORAGE_KEY) is None
    session = make_session(lambda r: reply(), storage)
    assert session.hydrate() is None

    storage.set_item(STORAGE_KEY, "abc")
    assert FileStorage(path).get_item(STORAGE_KEY) == "abc"
