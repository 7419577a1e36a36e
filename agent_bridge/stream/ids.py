"""Correlation id allocation — short prefixed tokens for one run.

Ids only need to be unique within the run that issued them, so a
truncated UUID4 is plenty. The allocator remembers what it has handed
out and redraws on the rare collision.
"""

from __future__ import annotations

import uuid

MESSAGE_PREFIX = "msg"
TOOL_CALL_PREFIX = "tc"
_TOKEN_LENGTH = 8


def new_run_id() -> str:
    """Fresh run id for requests that arrive without one."""
    return str(uuid.uuid4())


class CorrelationIdAllocator:
    """Issues message and tool-call ids for a single run."""

    def __init__(self) -> None:
        self._issued: set[str] = set()

    def new_message_id(self) -> str:
        return self._allocate(MESSAGE_PREFIX)

    def new_tool_call_id(self) -> str:
        return self._allocate(TOOL_CALL_PREFIX)

    def _allocate(self, prefix: str) -> str:
        while True:
            token = f"{prefix}-{uuid.uuid4().hex[:_TOKEN_LENGTH]}"
            if token not in self._issued:
                self._issued.add(token)
                return token
