from .events import CompleteEvent, DataEvent, ErrorEvent, Event, EventKind, format_sse_frame
from .pump import AsyncIteratorStream
from .source import EventSource, PushStream, Subscription, adapt, adapt_text
from .transport import EventStreamResponse, stream_server_events

__all__ = [
    "AsyncIteratorStream",
    "CompleteEvent",
    "DataEvent",
    "ErrorEvent",
    "Event",
    "EventKind",
    "EventSource",
    "EventStreamResponse",
    "PushStream",
    "Subscription",
    "adapt",
    "adapt_text",
    "format_sse_frame",
    "stream_server_events",
]
