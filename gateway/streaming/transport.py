"""SSE transport: renders a typed event source onto a streaming response."""

from __future__ import annotations

import asyncio
import logging
from functools import partial
from typing import AsyncGenerator, Awaitable, Callable, Generic, Optional, TypeVar

import anyio
from starlette.responses import StreamingResponse
from starlette.types import Receive, Scope, Send

from .events import DataEvent, ErrorEvent, Event, format_sse_frame
from .source import EventSource, Subscription

logger = logging.getLogger(__name__)

T = TypeVar("T")

SSE_HEADERS = {
    "Content-Type": "text/event-stream",
    "Transfer-Encoding": "chunked",
    "X-Content-Type-Options": "nosniff",
}


class EventStreamResponse(StreamingResponse, Generic[T]):
    """Streams one SSE frame per data event of ``source``.

    The subscription is tied to the client connection: an
    ``http.disconnect`` from the server unsubscribes, which releases the
    backend stream. Backend errors end the response without an error frame.
    """

    def __init__(self, source: EventSource[T], formatter: Callable[[T], str] = str) -> None:
        self._source = source
        self._formatter = formatter
        self._subscription: Optional[Subscription] = None
        super().__init__(self._frames(), headers=SSE_HEADERS)

    def close(self) -> None:
        """Cancel the subscription, or release the source if streaming never
        started. Safe to call any number of times."""
        if self._subscription is not None:
            self._subscription.unsubscribe()
        else:
            self._source.close()

    async def _frames(self) -> AsyncGenerator[str, None]:
        if self._source.released:
            return
        queue: asyncio.Queue[Event] = asyncio.Queue()
        self._subscription = self._source.subscribe(queue.put_nowait)
        try:
            while True:
                event = await queue.get()
                if isinstance(event, DataEvent):
                    yield format_sse_frame(self._formatter(event.value))
                elif isinstance(event, ErrorEvent):
                    logger.warning(f"Event stream terminated by backend error: {event.error!r}")
                    return
                else:
                    return
        finally:
            self.close()

    async def _listen_for_disconnect(self, receive: Receive) -> None:
        while True:
            message = await receive()
            if message["type"] == "http.disconnect":
                logger.debug("Client disconnected from event stream")
                self.close()
                break

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        try:
            async with anyio.create_task_group() as task_group:

                async def wrap(func: Callable[[], Awaitable[None]]) -> None:
                    await func()
                    task_group.cancel_scope.cancel()

                task_group.start_soon(wrap, partial(self.stream_response, send))
                await wrap(partial(self._listen_for_disconnect, receive))
        finally:
            self.close()

        if self.background is not None:
            await self.background()


def stream_server_events(
    source: EventSource[T], formatter: Callable[[T], str] = str
) -> EventStreamResponse[T]:
    return EventStreamResponse(source, formatter)
