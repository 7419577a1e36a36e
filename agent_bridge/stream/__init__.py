"""Streaming core — frame parsing, event translation, and SSE output.

Data flows through these modules in order for each run::

    bytes → FrameAccumulator → UpstreamEvent → EventTranslator → OutputEmitter → SSE
"""

from agent_bridge.stream.emitter import OutputEmitter, encode_event
from agent_bridge.stream.frames import FrameAccumulator, parse_upstream_event
from agent_bridge.stream.ids import CorrelationIdAllocator
from agent_bridge.stream.translator import EventTranslator, RunCorrelationState, RunPhase

__all__ = [
    "CorrelationIdAllocator",
    "EventTranslator",
    "FrameAccumulator",
    "OutputEmitter",
    "RunCorrelationState",
    "RunPhase",
    "encode_event",
    "parse_upstream_event",
]
