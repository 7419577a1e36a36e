"""Output emitter — serializes AG-UI events as SSE frames and tracks termination.

Every outbound frame is ``data: <json>\\n\\n``. Once a terminal frame
(RUN_FINISHED or RUN_ERROR) has gone out the emitter is closed and
refuses further events, so a client never sees anything after the end.
"""

from __future__ import annotations

import json
import logging

from agent_bridge.schemas import BaseEvent, EventType, RunErrorEvent

logger = logging.getLogger(__name__)

SSE_MEDIA_TYPE = "text/event-stream"
SSE_HEADERS = {
    "Cache-Control": "no-cache, no-transform",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}

_TERMINAL_TYPES = {EventType.RUN_FINISHED, EventType.RUN_ERROR}


def encode_event(event: BaseEvent) -> str:
    """One SSE frame. Unset optional fields are left out instead of sent as null."""
    body = {
        k: v
        for k, v in event.model_dump(mode="json", by_alias=True).items()
        if v is not None
    }
    return f"data: {json.dumps(body, ensure_ascii=False)}\n\n"


class OutputEmitter:
    """Frames the downstream events of one run."""

    def __init__(self, thread_id: str, run_id: str) -> None:
        self.thread_id = thread_id
        self.run_id = run_id
        self.emitted = 0
        self.closed = False

    def emit(self, event: BaseEvent) -> str:
        if self.closed:
            raise RuntimeError(f"Run {self.run_id} output already closed")
        self.emitted += 1
        if event.type in _TERMINAL_TYPES:
            self.closed = True
        return encode_event(event)

    def fail(self, message: str) -> str:
        """The single RUN_ERROR frame that ends a failed run."""
        logger.warning(f"Run {self.run_id} failed: {message}")
        return self.emit(
            RunErrorEvent(message=message, thread_id=self.thread_id, run_id=self.run_id)
        )

    def close(self) -> None:
        self.closed = True
