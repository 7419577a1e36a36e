"""SSE frame accumulation — turns arbitrary upstream reads into whole frames.

Reads arrive in whatever chunks the network hands us: a frame, half a
frame, or a UTF-8 character split across two reads. The accumulator
keeps one buffer per stream and only releases a frame once its blank-line
terminator has been seen.
"""

from __future__ import annotations

import codecs
import json
import logging

from pydantic import ValidationError

from agent_bridge.schemas import UpstreamEvent

logger = logging.getLogger(__name__)

FRAME_DELIMITER = "\n\n"
DATA_PREFIX = "data:"


class FrameAccumulator:
    """Buffers decoded text and yields the data payload of each complete frame.

    Usage::

        acc = FrameAccumulator()
        async for chunk in response.aiter_bytes():
            for payload in acc.feed(chunk):
                ...
        acc.close()
    """

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""
        self._trailing_cr = False  # a "\r" whose "\n" may arrive in the next read
        self.closed = False

    def feed(self, chunk: bytes | str) -> list[str]:
        """Append a read and return payloads of every frame it completed, in order."""
        if self.closed:
            raise RuntimeError("FrameAccumulator is closed")

        text = self._decoder.decode(chunk) if isinstance(chunk, bytes) else chunk
        if self._trailing_cr:
            text = "\r" + text
        self._trailing_cr = text.endswith("\r")
        if self._trailing_cr:
            text = text[:-1]

        # Only the new text is normalised and searched; a delimiter can start
        # at most one character before it.
        start = max(len(self._buffer) - 1, 0)
        self._buffer += text.replace("\r\n", "\n")

        payloads = []
        while (idx := self._buffer.find(FRAME_DELIMITER, start)) != -1:
            start = 0
            segment = self._buffer[:idx]
            self._buffer = self._buffer[idx + len(FRAME_DELIMITER):]
            payload = extract_payload(segment)
            if payload:
                payloads.append(payload)
        return payloads

    def close(self) -> None:
        """End of stream. Unterminated leftovers cannot be a frame and are discarded."""
        leftover = self._buffer + self._decoder.decode(b"", final=True)
        if leftover.strip():
            logger.debug(f"Discarding {len(leftover)} chars of unterminated frame")
        self._buffer = ""
        self._trailing_cr = False
        self.closed = True

    @property
    def pending(self) -> str:
        return self._buffer


def extract_payload(segment: str) -> str:
    """Return the text after ``data:`` in a frame.

    Several data lines are joined with newlines, as the SSE rules require.
    A consumer that keeps only the last data line would see just the final
    fragment of such a frame; single-line frames read the same either way.
    """
    lines = [
        line[len(DATA_PREFIX):].strip()
        for line in segment.split("\n")
        if line.startswith(DATA_PREFIX)
    ]
    return "\n".join(lines).strip()


def parse_upstream_event(payload: str) -> UpstreamEvent | None:
    """Parse one payload. Anything malformed is dropped, never raised."""
    try:
        raw = json.loads(payload)
    except json.JSONDecodeError:
        logger.debug(f"Dropping frame with invalid JSON: {payload[:80]!r}")
        return None

    if not isinstance(raw, dict):
        logger.debug(f"Dropping frame with non-object payload: {type(raw).__name__}")
        return None

    try:
        return UpstreamEvent.model_validate(raw)
    except ValidationError as e:
        logger.debug(f"Dropping frame that is not an event: {e.error_count()} errors")
        return None
