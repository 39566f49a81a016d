from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse

from routerbot.conversation.storage import ConversationStore
from routerbot.api.deps import get_store

router = APIRouter(prefix="/api/conversations", tags=["conversations"])


@router.get("")
async def list_conversations(
    limit: int = Query(10, ge=1, le=100),
    store: ConversationStore = Depends(get_store),
):
    convs = await store.list(limit)
    return {"conversations": [c.model_dump() for c in convs]}


@router.get("/{conv_id}")
async def get_conversation(conv_id: str, store: ConversationStore = Depends(get_store)):
    result = await store.get(conv_id)
    if not result.found:
        raise HTTPException(status_code=404, detail="Conversation not found")
    return {"conversation": result.conversation.model_dump()}


@router.delete("/{conv_id}")
async def delete_conversation(conv_id: str, store: ConversationStore = Depends(get_store)):
    result = await store.delete(conv_id)
    if not result:
        return JSONResponse(
            {"error": "Could not delete conversation", "details": result.error},
            status_code=500,
        )
    return {"status": "deleted"}
