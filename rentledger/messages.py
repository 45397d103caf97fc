"""
messages.py - Administrator broadcast log

Only the administrator may post; anyone may read. Each post is also
emitted as a StatusMessage to the configured EventSink. Delivery is
fire-and-forget: the log does not wait for or inspect the sink.
"""

from __future__ import annotations
from datetime import datetime
import logging
from typing import List, Protocol, runtime_checkable

from .core import Message, StatusMessage
from .guards import AccessGuard

logger = logging.getLogger(__name__)


@runtime_checkable
class EventSink(Protocol):
    """Receiver for ledger notifications."""

    def emit(self, event: StatusMessage) -> None:
        ...


class RecordingEventSink:
    """EventSink that keeps every event it receives, in order."""

    def __init__(self):
        self.events: List[StatusMessage] = []

    def emit(self, event: StatusMessage) -> None:
        self.events.append(event)

    def __len__(self) -> int:
        return len(self.events)


class MessageLog:

    def __init__(self, guard: AccessGuard, sink: EventSink):
        self._guard = guard
        self._sink = sink
        self._messages: List[Message] = []

    def append(self, text: str, caller: str, now: datetime) -> Message:
        """
        Post a message from the administrator.

        Raises:
            Unauthorized: If caller is not the administrator.
        """
        self._guard.admin_only(caller)
        message = Message(now, text)
        self._messages.append(message)
        try:
            self._sink.emit(StatusMessage(now, text))
        except Exception:
            logger.exception("Event sink failed to accept StatusMessage at %s", now.isoformat())
        return message

    def list(self, caller: str) -> List[Message]:
        return list(self._messages)

    def __len__(self) -> int:
        return len(self._messages)
