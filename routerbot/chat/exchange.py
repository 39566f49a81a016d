"""One chat exchange: load history, call the model, save history.

Persistence is best effort and unguarded. Two exchanges on the same
conversation id each load, append and upsert the whole message list, so
the later save wins and the other exchange's messages are dropped.
"""
import logging
import uuid
from dataclasses import dataclass
from typing import AsyncGenerator, Optional

from routerbot.chat.prompts import DIRECT_SYSTEM_PROMPT, TOOL_SYSTEM_PROMPT
from routerbot.config import AppConfig
from routerbot.conversation.models import Conversation, Message
from routerbot.conversation.storage import ConversationStore
from routerbot.errors import UpstreamError
from routerbot.llm.base import LLMProvider
from routerbot.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)


def new_conversation_id() -> str:
    return str(uuid.uuid4())


def _chunk_text(text: str, chunk_size: int = 4) -> list[str]:
    """Split text into chunks for simulated streaming."""
    return [text[i : i + chunk_size] for i in range(0, len(text), chunk_size)]


def _to_wire(messages: list[Message]) -> list[dict]:
    return [{"role": m.role, "content": m.content} for m in messages]


@dataclass
class ExchangeResult:
    conversation_id: str
    message: Message


class StreamingExchange:
    """A prepared tool-enabled exchange whose reply is consumed as a stream."""

    def __init__(
        self,
        handler: "ChatExchangeHandler",
        conversation: Conversation,
        wire: list[dict],
        reply: Optional[str],
    ) -> None:
        self._handler = handler
        self._conversation = conversation
        self._wire = wire
        self._reply = reply

    @property
    def conversation_id(self) -> str:
        return self._conversation.id

    async def tokens(self) -> AsyncGenerator[str, None]:
        parts: list[str] = []
        try:
            if self._reply is not None:
                for chunk in _chunk_text(self._reply):
                    parts.append(chunk)
                    yield chunk
            else:
                async for token in self._handler._stream_final(self._wire):
                    parts.append(token)
                    yield token
        except Exception as e:
            logger.error(
                "Stream for conversation %s failed: %s", self.conversation_id, e,
                exc_info=True,
            )
            return

        self._conversation.messages.append(
            Message(role="assistant", content="".join(parts))
        )
        await self._handler.store.save(self._conversation)


class ChatExchangeHandler:
    def __init__(
        self,
        config: AppConfig,
        store: ConversationStore,
        provider: LLMProvider,
        tools: Optional[ToolRegistry] = None,
    ) -> None:
        self.config = config
        self.store = store
        self.provider = provider
        self.tools = tools

    def _llm_kwargs(self) -> dict:
        return {
            "temperature": self.config.temperature,
            "max_tokens": self.config.max_tokens,
        }

    async def load_history(self, conv_id: str, system_prompt: str) -> Conversation:
        result = await self.store.get(conv_id)
        if result.found and result.conversation.messages:
            return result.conversation
        if not result:
            logger.info("Unable to retrieve conversation %s, starting fresh", conv_id)
        return Conversation(
            id=conv_id,
            messages=[Message(role="system", content=system_prompt)],
            created_at=result.conversation.created_at if result.conversation else None,
        )

    async def prepare(
        self,
        incoming: list[Message],
        conversation_id: Optional[str],
        system_prompt: str,
    ) -> Conversation:
        conv_id = conversation_id or new_conversation_id()
        conv = await self.load_history(conv_id, system_prompt)

        if incoming:
            last = incoming[-1]
            logger.info("Incoming message for %s: role=%s", conv_id, last.role)
            if last.role == "user":
                conv.messages.append(Message(role="user", content=last.content))

        await self.store.save(conv)
        return conv

    async def direct(
        self,
        incoming: list[Message],
        conversation_id: Optional[str] = None,
    ) -> ExchangeResult:
        """Non-streamed exchange without tool calling."""
        conv = await self.prepare(incoming, conversation_id, DIRECT_SYSTEM_PROMPT)

        try:
            reply = await self.provider.complete(
                _to_wire(conv.messages), self.config.chat_model, **self._llm_kwargs()
            )
        except Exception as e:
            logger.error("OpenAI API error: %s", e)
            raise UpstreamError("LLM_ERROR", str(e)) from e

        assistant = Message(role="assistant", content=reply.get("content") or "")
        conv.messages.append(assistant)
        await self.store.save(conv)
        return ExchangeResult(conversation_id=conv.id, message=assistant)

    async def stream(
        self,
        incoming: list[Message],
        conversation_id: Optional[str] = None,
    ) -> StreamingExchange:
        """Tool-enabled exchange.

        Tool rounds run before the response starts, so upstream failures up
        to that point still raise UpstreamError. The returned object streams
        the reply and saves the history once the stream completes.

        Only the fallback after the tool-round limit streams tokens from the
        model. A normal answer arrives whole from ``complete`` and is
        re-chunked by ``_chunk_text`` for simulated streaming.
        """
        conv = await self.prepare(incoming, conversation_id, TOOL_SYSTEM_PROMPT)
        logger.info(
            "Starting OpenAI request for %s with message count: %d",
            conv.id, len(conv.messages),
        )
        wire = _to_wire(conv.messages)
        try:
            reply = await self._run_tool_rounds(wire)
        except Exception as e:
            logger.error("OpenAI API error: %s", e)
            raise UpstreamError("LLM_ERROR", str(e)) from e
        return StreamingExchange(self, conv, wire, reply)

    async def _run_tool_rounds(self, wire: list[dict]) -> Optional[str]:
        """Resolve tool calls in place on ``wire``.

        Returns the final text when the model answers without tools, or
        None when the round limit is reached and the answer still has to be
        generated.
        """
        if not self.tools:
            return None

        schemas = self.tools.schemas()
        for _ in range(self.config.max_tool_rounds):
            reply = await self.provider.complete(
                wire, self.config.chat_model, tools=schemas, **self._llm_kwargs()
            )
            calls = reply.get("tool_calls")
            if not calls:
                return reply.get("content") or ""

            wire.append(
                {"role": "assistant", "content": reply.get("content") or None, "tool_calls": calls}
            )
            for call in calls:
                fn = call["function"]
                logger.info("Tool call: %s", fn["name"])
                output = await self.tools.execute(fn["name"], fn.get("arguments"))
                wire.append({"role": "tool", "tool_call_id": call["id"], "content": output})
        return None

    def _stream_final(self, wire: list[dict]) -> AsyncGenerator[str, None]:
        kwargs = self._llm_kwargs()
        if self.tools:
            kwargs.update(tools=self.tools.schemas(), tool_choice="none")
        return self.provider.stream(wire, self.config.chat_model, **kwargs)
