"""Typed events for a single delivery session and their SSE wire format."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar, Union

T = TypeVar("T")

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


class EventKind(str, Enum):
    """Discriminator for the events a session can deliver."""

    DATA = "data"
    ERROR = "error"
    COMPLETE = "complete"


@dataclass(frozen=True)
class DataEvent(Generic[T]):
    value: T
    kind: EventKind = field(default=EventKind.DATA, init=False)

    @property
    def is_terminal(self) -> bool:
        return False


@dataclass(frozen=True)
class ErrorEvent:
    error: BaseException
    kind: EventKind = field(default=EventKind.ERROR, init=False)

    @property
    def is_terminal(self) -> bool:
        return True


@dataclass(frozen=True)
class CompleteEvent:
    kind: EventKind = field(default=EventKind.COMPLETE, init=False)

    @property
    def is_terminal(self) -> bool:
        return True


Event = Union[DataEvent[Any], ErrorEvent, CompleteEvent]


def format_sse_frame(payload: str) -> str:
    """Serialize one payload to SSE wire format.

    Format:
        data:<line>
        (one data line per line of the payload, terminated by a blank line)

    A payload without line breaks yields exactly ``data:<payload>\\n\\n``.
    SSE clients rejoin the data lines with LF, so ``\\r\\n`` and ``\\r`` inside
    a payload come back as ``\\n``.
    """
    lines = _LINE_BREAK.split(payload)
    return "".join(f"data:{line}\n" for line in lines) + "\n"
