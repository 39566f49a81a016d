from typing import Optional

from fastapi import APIRouter

from routerbot.logging_setup import log_handler

router = APIRouter(prefix="/api/logs", tags=["logs"])


@router.get("")
async def get_logs(level: Optional[str] = None):
    return {"logs": log_handler.get_buffer(level)}


@router.delete("")
async def clear_logs():
    log_handler.clear()
    return {"status": "ok"}
