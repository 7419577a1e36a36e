"""Request adapter — AG-UI RunAgentInput → agent service request body.

Pure transformation. The agent service only understands text content and
takes tool arguments from the agent itself, so structured content is
JSON-encoded and tool inputs are always sent empty.
"""

from __future__ import annotations

import json

from agent_bridge.schemas import (
    InboundMessage,
    RunRequest,
    UpstreamMessage,
    UpstreamRequest,
    UpstreamTool,
)
from agent_bridge.stream.ids import new_run_id


def adapt_request(request: RunRequest, fallback_thread_id: str) -> UpstreamRequest:
    """Fill in missing ids and reshape messages/tools for the upstream call."""
    return UpstreamRequest(
        thread_id=request.thread_id or fallback_thread_id,
        run_id=request.run_id or new_run_id(),
        messages=[_adapt_message(m) for m in request.messages or []],
        state=request.state if request.state is not None else {},
        tools=[UpstreamTool(name=t.name) for t in request.tools or []],
    )


def _adapt_message(message: InboundMessage) -> UpstreamMessage:
    content = message.content
    if content is None:
        content = ""
    elif not isinstance(content, str):
        content = json.dumps(content, ensure_ascii=False, separators=(",", ":"))
    return UpstreamMessage(role=message.role, content=content)
