"""Push-stream adapter for pull-based async iterators (e.g. an aiohttp body)."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, AsyncIterator, Callable, Optional

logger = logging.getLogger(__name__)


class AsyncIteratorStream:
    """Pumps chunks from an async iterator into data/end/error listeners.

    Pumping starts once a data listener is attached and runs on the
    current event loop. ``close()`` stops the pump and releases the
    underlying resource through ``on_close``; it runs at most once.
    """

    def __init__(
        self,
        chunks: AsyncIterator[Any],
        on_close: Optional[Callable[[], None]] = None,
    ) -> None:
        self._chunks = chunks
        self._on_close = on_close
        self._data_listeners: list[Callable[[Any], None]] = []
        self._end_listeners: list[Callable[[], None]] = []
        self._error_listeners: list[Callable[[BaseException], None]] = []
        self._task: Optional[asyncio.Task] = None
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def on_data(self, listener: Callable[[Any], None]) -> None:
        self._data_listeners.append(listener)
        if self._task is None and not self._closed:
            self._task = asyncio.get_running_loop().create_task(self._pump())

    def on_end(self, listener: Callable[[], None]) -> None:
        self._end_listeners.append(listener)

    def on_error(self, listener: Callable[[BaseException], None]) -> None:
        self._error_listeners.append(listener)

    def remove_listeners(self) -> None:
        self._data_listeners.clear()
        self._end_listeners.clear()
        self._error_listeners.clear()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._task is not None and not self._task.done() and self._task is not asyncio.current_task():
            self._task.cancel()
        if self._on_close is not None:
            self._on_close()

    async def _pump(self) -> None:
        try:
            async for chunk in self._chunks:
                for listener in list(self._data_listeners):
                    listener(chunk)
                if self._closed:
                    return
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.debug(f"Backend stream failed: {exc}")
            for listener in list(self._error_listeners):
                listener(exc)
        else:
            for listener in list(self._end_listeners):
                listener()
        finally:
            self.close()
