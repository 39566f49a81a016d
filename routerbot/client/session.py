"""Client-side state of the assistant page.

Mirrors what the browser page keeps: the visible message list (not the
source of truth, the server store is), the pending input, a loading flag
and the conversation id, which lives both in local storage and in the
page URL's ``conversationId`` query parameter.
"""
import json
import logging
import time
from pathlib import Path
from typing import Literal, Optional, Protocol

import httpx
from pydantic import BaseModel

logger = logging.getLogger(__name__)

STORAGE_KEY = "aiConversationId"
URL_PARAM = "conversationId"
CONVERSATION_HEADER = "X-Conversation-Id"
ERROR_REPLY = "Sorry, there was an error processing your request."


def _timestamp_id() -> str:
    return str(int(time.time() * 1000))


class ClientMessage(BaseModel):
    id: str
    role: Literal["user", "assistant"]
    content: str


class KeyValueStorage(Protocol):
    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class MemoryStorage:
    def __init__(self, initial: Optional[dict[str, str]] = None) -> None:
        self._data = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)


class FileStorage:
    """Local storage persisted as a small JSON object on disk."""

    def __init__(self, path: Path) -> None:
        self._path = path

    def _load(self) -> dict[str, str]:
        if self._path.exists():
            try:
                data = json.loads(self._path.read_text(encoding="utf-8"))
            except (json.JSONDecodeError, OSError):
                data = None
            if isinstance(data, dict):
                return data
            logger.warning("Failed to read %s, starting empty", self._path)
        return {}

    def _save(self, data: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(data, indent=2), encoding="utf-8")

    def get_item(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def remove_item(self, key: str) -> None:
        data = self._load()
        if data.pop(key, None) is not None:
            self._save(data)


class PageLocation:
    """The page URL; query parameter edits replace it like history.pushState."""

    def __init__(self, url: str) -> None:
        self.url = httpx.URL(url)

    def get_param(self, name: str) -> Optional[str]:
        return self.url.params.get(name)

    def set_param(self, name: str, value: str) -> None:
        self.url = self.url.copy_set_param(name, value)

    def delete_param(self, name: str) -> None:
        self.url = self.url.copy_remove_param(name)


class ChatSession:
    def __init__(
        self,
        client: httpx.AsyncClient,
        storage: KeyValueStorage,
        location: PageLocation,
        endpoint: str = "/api/direct-chat",
    ) -> None:
        self._client = client
        self._storage = storage
        self.location = location
        self._endpoint = endpoint

        self.messages: list[ClientMessage] = []
        self.input = ""
        self.is_loading = False
        self.conversation_id: Optional[str] = None

    def hydrate(self) -> Optional[str]:
        """Pick up the conversation id; the URL wins over local storage."""
        url_id = self.location.get_param(URL_PARAM)
        if url_id:
            self.conversation_id = url_id
            self._storage.set_item(STORAGE_KEY, url_id)
        else:
            stored = self._storage.get_item(STORAGE_KEY)
            if stored:
                self.conversation_id = stored
        return self.conversation_id

    async def submit(self, text: Optional[str] = None) -> Optional[ClientMessage]:
        """Send the pending input and append the reply (or an apology)."""
        if text is not None:
            self.input = text
        if not self.input.strip():
            return None

        user_message = ClientMessage(id=_timestamp_id(), role="user", content=self.input)
        history = [m.model_dump() for m in self.messages]
        self.messages.append(user_message)
        self.input = ""
        self.is_loading = True

        try:
            params = {URL_PARAM: self.conversation_id} if self.conversation_id else None
            response = await self._client.post(
                self._endpoint,
                params=params,
                json={"messages": history + [user_message.model_dump()]},
            )
            response.raise_for_status()
            result = response.json()

            response_id = response.headers.get(CONVERSATION_HEADER)
            if response_id and not self.conversation_id:
                self.conversation_id = response_id
                self._storage.set_item(STORAGE_KEY, response_id)
                self.location.set_param(URL_PARAM, response_id)

            reply = ClientMessage(
                id=_timestamp_id(),
                role="assistant",
                content=result["message"]["content"],
            )
        except (httpx.HTTPError, ValueError, KeyError, TypeError) as e:
            logger.error("Error sending message: %s", e)
            reply = ClientMessage(id=_timestamp_id(), role="assistant", content=ERROR_REPLY)
        finally:
            self.is_loading = False

        self.messages.append(reply)
        return reply

    def new_conversation(self) -> None:
        self._storage.remove_item(STORAGE_KEY)
        self.conversation_id = None
        self.messages = []
        self.location.delete_param(URL_PARAM)
