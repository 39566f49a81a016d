import logging
from datetime import datetime, timezone

from pydantic import ValidationError

from routerbot.db.supabase import SupabaseClient
from routerbot.errors import StoreError
from routerbot.conversation.models import Conversation, StoreResult, StoreStatus

logger = logging.getLogger(__name__)

TABLE = "conversations"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class ConversationStore:
    """Best-effort persistence of conversations in the Supabase table.

    Nothing here raises: a user must be able to keep chatting when the
    store is down, so every failure is logged and reported in the result.
    """

    def __init__(self, client: SupabaseClient) -> None:
        self._client = client

    async def init_table(self) -> bool:
        # The table is provisioned in Supabase; nothing to create.
        logger.info("Using existing %s table", TABLE)
        return True

    async def get(self, conv_id: str) -> StoreResult:
        try:
            row = await self._client.select_one(TABLE, "id", conv_id)
        except StoreError as e:
            logger.warning("Error fetching conversation %s, starting new one: %s", conv_id, e)
            return StoreResult(status=StoreStatus.ERROR, error=str(e))

        if row is None:
            logger.info("Starting new conversation %s", conv_id)
            return StoreResult(status=StoreStatus.NOT_FOUND)

        try:
            conv = Conversation(**row)
        except ValidationError as e:
            logger.error("Stored conversation %s is malformed: %s", conv_id, e)
            return StoreResult(status=StoreStatus.ERROR, error=str(e))
        return StoreResult(status=StoreStatus.OK, conversation=conv)

    async def save(self, conv: Conversation) -> StoreResult:
        now = _now()
        row = {
            "id": conv.id,
            "messages": [m.model_dump(exclude_none=True) for m in conv.messages],
            "updated_at": now,
            "created_at": conv.created_at or now,
        }
        try:
            await self._client.upsert(TABLE, row)
        except StoreError as e:
            logger.warning("Chat will continue but history not saved: %s", e.message)
            return StoreResult(status=StoreStatus.ERROR, error=e.message)

        saved = conv.model_copy(
            update={"created_at": row["created_at"], "updated_at": now}
        )
        return StoreResult(status=StoreStatus.OK, conversation=saved)

    async def delete(self, conv_id: str) -> StoreResult:
        try:
            await self._client.delete(TABLE, "id", conv_id)
        except StoreError as e:
            logger.warning("Could not delete conversation %s: %s", conv_id, e.message)
            return StoreResult(status=StoreStatus.ERROR, error=e.message)
        return StoreResult(status=StoreStatus.OK)

    async def list(self, limit: int = 10) -> list[Conversation]:
        try:
            rows = await self._client.select(TABLE, order="updated_at.desc", limit=limit)
            return [Conversation(**row) for row in rows]
        except (StoreError, ValidationError) as e:
            logger.warning("Could not list conversations: %s", e)
            return []
