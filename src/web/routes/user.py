"""User reading-permission routes."""

import asyncio

import structlog
from fastapi import APIRouter, Depends

from memory import ReadingStore
from memory.store import ANONYMOUS_PERMISSIONS, DEFAULT_PERMISSIONS
from web.deps import get_reading_store

logger = structlog.get_logger()

router = APIRouter(prefix="/api/user", tags=["user"])


@router.get("/reading-permissions/{user_id}")
async def reading_permissions(user_id: str, store: ReadingStore = Depends(get_reading_store)):
    if not user_id or user_id == "anonymous":
        return dict(ANONYMOUS_PERMISSIONS)
    permissions = await asyncio.to_thread(store.get_reading_permissions, user_id)
    if permissions is None:
        logger.info("permissions.defaulted", user_id=user_id)
        return dict(DEFAULT_PERMISSIONS)
    return permissions
