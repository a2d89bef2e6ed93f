"""Chat routes: the two reading phases, identity transfer and section reveal."""

import asyncio
import json

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from starlette.responses import StreamingResponse

from memory import ReadingStore
from observability import metrics
from oracle import AnonymousSessionCache, ChatOrchestrator
from oracle.orchestrator import STREAM_ERROR
from oracle.sections import SECTION_ORDER, sections_from_full_content
from web.conversation_store import get_message, transfer_conversation
from web.deps import get_db_path, get_orchestrator, get_reading_store, get_session_cache
from web.models import ChatMessageRequest, InterpretRequest, TransferRequest, TransferResponse
from web.rate_limit import chat_rate_limit

logger = structlog.get_logger()

router = APIRouter(prefix="/api/chat", tags=["chat"])


def format_sse(event: str, data: dict) -> str:
    return f"event: {event}\ndata: {json.dumps(data, ensure_ascii=False)}\n\n"


@router.post("/message", dependencies=[Depends(chat_rate_limit)])
async def chat_message(
    body: ChatMessageRequest,
    orchestrator: ChatOrchestrator = Depends(get_orchestrator),
):
    """Phase 1: answer, ask for context, or report readiness. Never streams."""
    return await orchestrator.handle_message(body.to_request())


@router.post("/interpret", dependencies=[Depends(chat_rate_limit)])
async def chat_interpret(
    body: InterpretRequest,
    request: Request,
    orchestrator: ChatOrchestrator = Depends(get_orchestrator),
):
    """Phase 2: stream the reading as server-sent events."""
    chat_request = body.to_request()
    log = logger.bind(conversation_id=chat_request.conversation_id)

    async def _sse_generator():
        stream = orchestrator.stream_interpretation(chat_request)
        try:
            async for event, data in stream:
                if await request.is_disconnected():
                    log.info("stream.client_disconnected", pending_event=event)
                    metrics.counter("streams_disconnected")
                    break
                yield format_sse(event, data)
        except asyncio.CancelledError:
            log.info("stream.client_disconnected")
            metrics.counter("streams_disconnected")
            raise
        except Exception as e:
            log.error("stream.unexpected_error", error=str(e))
            metrics.counter("streams_failed")
            yield format_sse("error", {"error": STREAM_ERROR})
        finally:
            await stream.aclose()

    return StreamingResponse(
        _sse_generator(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )


@router.post("/transfer", response_model=TransferResponse)
async def chat_transfer(
    body: TransferRequest,
    cache: AnonymousSessionCache = Depends(get_session_cache),
    db_path=Depends(get_db_path),
):
    """Hand an anonymous conversation to a newly identified user."""
    messages, source = cache.resolve_transfer_messages(body.conversation_id, body.messages)
    logger.info(
        "transfer.requested",
        conversation_id=body.conversation_id,
        messages=len(messages or []),
        source=source,
    )
    result = await asyncio.to_thread(
        transfer_conversation, body.conversation_id, body.new_user_id, messages, db_path
    )
    if result is None:
        raise HTTPException(
            status_code=404, detail="Chat no encontrado y no se proporcionaron mensajes"
        )
    metrics.counter("transfers")
    return TransferResponse(chatId=body.conversation_id, source=source)


@router.get("/message/{conversation_id}/{message_id}/full-sections")
async def full_sections(
    conversation_id: str,
    message_id: str,
    user_id: str = Query(..., alias="userId", min_length=1),
    store: ReadingStore = Depends(get_reading_store),
    db_path=Depends(get_db_path),
):
    """Unfiltered sections of a stored reading, for users who may see the future."""
    permissions = await asyncio.to_thread(store.get_reading_permissions, user_id) or {}
    if not (permissions.get("can_see_future") or permissions.get("is_premium")):
        raise HTTPException(status_code=403, detail="No tienes permiso para ver el futuro completo")

    message = await asyncio.to_thread(get_message, conversation_id, message_id, db_path)
    if message is None:
        raise HTTPException(status_code=404, detail="Mensaje no encontrado")
    if message["user_id"] != user_id:
        raise HTTPException(status_code=403, detail="No tienes acceso a este mensaje")

    sections = sections_from_full_content(message["content"])
    if sections is None:
        return {"sections": None, "rawText": message["content"]}
    return {
        "sections": {
            key: {"text": sections.parts[key], "isTeaser": False}
            for key in SECTION_ORDER
            if key in sections.parts
        }
    }
