from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from app.api.dependencies import (
    get_chat_analyze_service,
    get_persistence_sync,
    get_stream_broadcaster,
)
from app.core.background import spawn_detached
from app.core.security import optional_user
from app.models.advisory import ChatAnalyzeResult, InteractionRequest
from app.services.chat_analyze_service import ChatAnalyzeService
from app.services.persistence_sync import PersistenceSync
from app.services.stream_broadcaster import EventChannel, StreamBroadcaster, accept_request

router = APIRouter(prefix="/chat-analyze", tags=["Chat Analyze"])

SSE_HEADERS = {"Cache-Control": "no-cache", "Connection": "keep-alive"}


def _user_id(user_payload: Optional[dict]) -> Optional[str]:
    return user_payload.get("sub") if user_payload else None


@router.post("/stream")
async def chat_analyze_stream(
    http_request: Request,
    broadcaster: StreamBroadcaster = Depends(get_stream_broadcaster),
    user_payload: Optional[dict] = Depends(optional_user),
):
    """
    Server-sent events for one chat turn, ending with ``data: [DONE]``.
    The body is validated on the stream, so a malformed one still gets
    an ``error`` event instead of a 422.
    """
    body = await http_request.body()
    channel = EventChannel()
    # Runs to completion even when the client disconnects.
    spawn_detached(
        broadcaster.run(body, channel, user_id=_user_id(user_payload)),
        name="chat-analyze-stream",
    )

    async def event_stream():
        try:
            async for frame in channel.frames():
                yield frame
        finally:
            channel.detach()

    return StreamingResponse(event_stream(), media_type="text/event-stream", headers=SSE_HEADERS)


@router.post("", response_model=ChatAnalyzeResult, response_model_exclude_none=True)
async def chat_analyze(
    payload: InteractionRequest,
    service: ChatAnalyzeService = Depends(get_chat_analyze_service),
    persistence: PersistenceSync = Depends(get_persistence_sync),
    user_payload: Optional[dict] = Depends(optional_user),
):
    request = accept_request(payload, _user_id(user_payload))
    result = await service.process(request)
    persistence.schedule(request, result)
    return result
