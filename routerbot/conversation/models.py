from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict


class Message(BaseModel):
    model_config = ConfigDict(extra="ignore")

    role: Literal["system", "user", "assistant"]
    content: str
    id: Optional[str] = None


class Conversation(BaseModel):
    id: str
    messages: list[Message] = []
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class DocumentResult(BaseModel):
    """One similarity-search match, formatted for the model. Never stored."""

    title: str
    content: str
    url: str
    similarity: float = 0.0


class StoreStatus(str, Enum):
    OK = "ok"
    NOT_FOUND = "not_found"
    ERROR = "error"


class StoreResult(BaseModel):
    """Outcome of a conversation store call.

    Truthy only on success, so ``if await store.save(conv):`` still reads
    as a plain success check.
    """

    status: StoreStatus
    conversation: Optional[Conversation] = None
    error: str = ""

    def __bool__(self) -> bool:
        return self.status is StoreStatus.OK

    @property
    def found(self) -> bool:
        return self.status is StoreStatus.OK and self.conversation is not None
