from enum import Enum


class StreamEventName(str, Enum):
    CONNECTED = "connected"
    PROCESSING = "processing"
    ANALYSIS = "analysis"
    CHUNK = "chunk"
    COMPLETE = "complete"
    ERROR = "error"


class ChannelState(str, Enum):
    OPEN = "open"
    CONNECTED = "connected"
    PROCESSING = "processing"
    COMPLETE = "complete"
    ERROR = "error"
    CLOSED = "closed"


TERMINAL_EVENTS = frozenset({StreamEventName.COMPLETE, StreamEventName.ERROR})
PROGRESS_EVENTS = frozenset(
    {StreamEventName.PROCESSING, StreamEventName.ANALYSIS, StreamEventName.CHUNK}
)
