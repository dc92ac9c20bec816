"""Server-sent event channel for one chat-analyze request.

A request's frames always follow the same shape::

    connected -> (processing -> analysis -> chunk*)? -> complete | error -> [DONE]

``EventChannel`` enforces that order; ``StreamBroadcaster`` drives one
request through it and never lets an exception escape.
"""

import asyncio
import json
import logging
import time
from typing import Any, AsyncIterator, Dict, Optional, Union

from fastapi import HTTPException
from pydantic import ValidationError

from app.models.advisory import ChatAnalyzeResult, InteractionRequest, InteractionType
from app.models.stream import ChannelState, StreamEventName
from app.services.chat_analyze_service import MISSING_INPUT, ChatAnalyzeService
from app.services.persistence_sync import PersistenceSync

logger = logging.getLogger(__name__)

DONE_FRAME = "data: [DONE]\n\n"
PROCESSING_ERROR = "PROCESSING_ERROR"
VALIDATION_ERROR = "VALIDATION_ERROR"
GENERIC_FAILURE = "Processing failed"

ANALYSIS_MESSAGES = {
    InteractionType.IMAGE_TEXT: "Analyzing image and text...",
    InteractionType.IMAGE_ONLY: "Analyzing image...",
    InteractionType.TEXT_ONLY: "Processing message...",
}

_IN_FLIGHT = frozenset(
    {
        StreamEventName.PROCESSING,
        StreamEventName.ANALYSIS,
        StreamEventName.CHUNK,
        StreamEventName.COMPLETE,
        StreamEventName.ERROR,
    }
)
_ACCEPTS = {
    ChannelState.OPEN: frozenset({StreamEventName.CONNECTED}),
    ChannelState.CONNECTED: _IN_FLIGHT,
    ChannelState.PROCESSING: _IN_FLIGHT,
    ChannelState.COMPLETE: frozenset(),
    ChannelState.ERROR: frozenset(),
}
_NEXT_STATE = {
    StreamEventName.CONNECTED: ChannelState.CONNECTED,
    StreamEventName.PROCESSING: ChannelState.PROCESSING,
    StreamEventName.ANALYSIS: ChannelState.PROCESSING,
    StreamEventName.CHUNK: ChannelState.PROCESSING,
    StreamEventName.COMPLETE: ChannelState.COMPLETE,
    StreamEventName.ERROR: ChannelState.ERROR,
}


class StreamStateError(RuntimeError):
    """An event was emitted out of order."""


class ChannelClosedError(StreamStateError):
    """The channel was already closed."""


def format_sse(event: StreamEventName, payload: Dict[str, Any]) -> str:
    return f"event: {event.value}\ndata: {json.dumps(payload, ensure_ascii=False)}\n\n"


def sanitize_http_error_message(detail: Any) -> str:
    if detail is None:
        return "Request failed"
    if isinstance(detail, str):
        return detail
    return str(detail)


def describe_validation_error(exc: ValidationError) -> str:
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    if location:
        return f"Invalid request: {location}: {first['msg']}"
    return f"Invalid request: {first['msg']}"


def accept_request(
    payload: Union[InteractionRequest, bytes, str, Dict[str, Any], None],
    user_id: Optional[str] = None,
) -> InteractionRequest:
    """Validate a raw chat-analyze body; raises ``ValidationError``."""
    if isinstance(payload, InteractionRequest):
        request = payload
    elif isinstance(payload, (bytes, str)):
        request = InteractionRequest.model_validate_json(payload or "{}")
    else:
        request = InteractionRequest.model_validate({} if payload is None else payload)
    if user_id and not request.user_id:
        request = request.model_copy(update={"user_id": user_id})
    return request


class EventChannel:
    def __init__(self) -> None:
        self._frames: asyncio.Queue = asyncio.Queue()
        self._state = ChannelState.OPEN
        self._detached = False

    @property
    def state(self) -> ChannelState:
        return self._state

    @property
    def detached(self) -> bool:
        return self._detached

    def emit(self, event: StreamEventName, payload: Dict[str, Any]) -> None:
        if self._state == ChannelState.CLOSED:
            raise ChannelClosedError(f"Cannot emit '{event.value}' on a closed channel")
        if event not in _ACCEPTS[self._state]:
            raise StreamStateError(
                f"Cannot emit '{event.value}' while channel is {self._state.value}"
            )
        self._state = _NEXT_STATE[event]
        self._push(format_sse(event, payload))

    def close(self) -> None:
        if self._state == ChannelState.CLOSED:
            raise ChannelClosedError("Channel is already closed")
        if self._state not in (ChannelState.COMPLETE, ChannelState.ERROR):
            raise StreamStateError(
                f"Cannot close while channel is {self._state.value}; emit complete or error first"
            )
        self._state = ChannelState.CLOSED
        self._push(DONE_FRAME)
        self._frames.put_nowait(None)

    def detach(self) -> None:
        """The consumer went away: keep enforcing order but stop buffering frames."""
        self._detached = True
        while not self._frames.empty():
            self._frames.get_nowait()

    def _push(self, frame: str) -> None:
        if not self._detached:
            self._frames.put_nowait(frame)

    async def frames(self) -> AsyncIterator[str]:
        while True:
            frame = await self._frames.get()
            if frame is None:
                return
            yield frame


class StreamBroadcaster:
    def __init__(
        self,
        service: ChatAnalyzeService,
        persistence: Optional[PersistenceSync] = None,
    ) -> None:
        self.service = service
        self.persistence = persistence

    @staticmethod
    def _fail(channel: EventChannel, message: str) -> None:
        if channel.state in (ChannelState.CONNECTED, ChannelState.PROCESSING):
            channel.emit(StreamEventName.ERROR, {"error": message, "code": PROCESSING_ERROR})
        if channel.state in (ChannelState.COMPLETE, ChannelState.ERROR):
            channel.close()

    async def run(
        self,
        payload: Union[InteractionRequest, bytes, str, Dict[str, Any], None],
        channel: EventChannel,
        user_id: Optional[str] = None,
    ) -> Optional[ChatAnalyzeResult]:
        channel.emit(
            StreamEventName.CONNECTED,
            {"status": "connected", "timestamp": int(time.time() * 1000)},
        )

        try:
            request = accept_request(payload, user_id)
        except ValidationError as exc:
            logger.warning("Rejected chat analyze body: %s", exc.errors()[0].get("type"))
            channel.emit(
                StreamEventName.ERROR,
                {"error": describe_validation_error(exc), "code": VALIDATION_ERROR},
            )
            channel.close()
            return None

        interaction_type = request.interaction_type
        if interaction_type is None:
            channel.emit(StreamEventName.ERROR, {"error": MISSING_INPUT})
            channel.close()
            return None

        async def forward_chunk(content: str) -> None:
            channel.emit(StreamEventName.CHUNK, {"content": content})

        try:
            channel.emit(
                StreamEventName.PROCESSING,
                {"status": "processing", "message": "Starting analysis..."},
            )
            channel.emit(
                StreamEventName.ANALYSIS,
                {"type": interaction_type.value, "message": ANALYSIS_MESSAGES[interaction_type]},
            )
            result = await self.service.process(request, on_chunk=forward_chunk)
            channel.emit(
                StreamEventName.COMPLETE,
                {
                    "status": "complete",
                    "result": result.model_dump(mode="json", exclude_none=True, by_alias=True),
                },
            )
            channel.close()
        except HTTPException as exc:
            logger.warning("Chat analyze stream failed with %s: %s", exc.status_code, exc.detail)
            self._fail(channel, sanitize_http_error_message(exc.detail))
            return None
        except Exception:
            logger.exception("Chat analyze stream failed")
            self._fail(channel, GENERIC_FAILURE)
            return None

        if self.persistence is not None:
            self.persistence.schedule(request, result)
        return result
