"""Typed event source: wraps a push-based backend stream as a cancellable
sequence of Data / Error / Complete events."""

from __future__ import annotations

import logging
from typing import Any, Callable, Generic, Optional, Protocol, TypeVar

from .events import CompleteEvent, DataEvent, ErrorEvent, Event

logger = logging.getLogger(__name__)

T = TypeVar("T")

Observer = Callable[[Event], None]


class PushStream(Protocol):
    """Capability interface every backend adapter exposes."""

    def on_data(self, listener: Callable[[Any], None]) -> None: ...

    def on_end(self, listener: Callable[[], None]) -> None: ...

    def on_error(self, listener: Callable[[BaseException], None]) -> None: ...

    def remove_listeners(self) -> None: ...

    def close(self) -> None: ...


class Subscription:
    """The live association between one event source and its subscriber.

    Ends on the first terminal event or on ``unsubscribe()``, whichever
    comes first. Either way the backend listeners are detached and the
    backend is closed exactly once.
    """

    def __init__(self, stream: PushStream) -> None:
        self._stream = stream
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def unsubscribe(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._stream.remove_listeners()
        self._stream.close()


class EventSource(Generic[T]):
    """Cold, single-subscriber sequence over a push-based backend stream."""

    def __init__(self, stream: PushStream, convert: Callable[[Any], T]) -> None:
        self._stream = stream
        self._convert = convert
        self._subscribed = False
        self._released = False

    @property
    def released(self) -> bool:
        """Whether the backend was closed without ever being subscribed to."""
        return self._released

    def close(self) -> None:
        """Release the backend of a source nobody subscribed to.

        Once subscribed, the subscription owns the backend and this is a no-op.
        """
        if self._subscribed or self._released:
            return
        self._released = True
        self._stream.remove_listeners()
        self._stream.close()

    def subscribe(self, observer: Observer) -> Subscription:
        if self._released:
            raise RuntimeError("EventSource was closed before it was subscribed")
        if self._subscribed:
            raise RuntimeError("EventSource supports a single subscriber")
        self._subscribed = True
        subscription = Subscription(self._stream)

        def finish(event: Event) -> None:
            if subscription.closed:
                return
            subscription.unsubscribe()
            observer(event)

        def on_data(chunk: Any) -> None:
            if subscription.closed:
                return
            try:
                value = self._convert(chunk)
            except Exception as exc:
                logger.warning(f"Dropping session after chunk conversion failed: {exc}")
                finish(ErrorEvent(exc))
                return
            observer(DataEvent(value))

        self._stream.on_error(lambda exc: finish(ErrorEvent(exc)))
        self._stream.on_end(lambda: finish(CompleteEvent()))
        # Attaching the data listener last: some backends start flowing on it.
        self._stream.on_data(on_data)
        return subscription


def adapt(stream: PushStream, convert: Optional[Callable[[Any], T]] = None) -> EventSource[T]:
    """Wrap ``stream`` so each chunk is passed through ``convert``."""
    return EventSource(stream, convert or (lambda chunk: chunk))


def adapt_text(stream: PushStream, encoding: str = "utf-8") -> EventSource[str]:
    """Event source whose chunks are delivered as text."""

    def to_text(chunk: Any) -> str:
        if isinstance(chunk, (bytes, bytearray)):
            return chunk.decode(encoding, errors="replace")
        return str(chunk)

    return EventSource(stream, to_text)
