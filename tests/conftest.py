"""
Pytest configuration for agent bridge tests.
"""
import json
import os
from pathlib import Path

import httpx
import pytest

# Point the app at the repo's config.yaml regardless of the working directory.
os.environ["BRIDGE_CONFIG"] = str(Path(__file__).resolve().parent.parent / "config.yaml")
os.environ.pop("BACKEND_URL", None)


def sse(*events, extra_line=None):
    """Encode upstream events the way the agent service frames them."""
    out = []
    for event in events:
        frame = ""
        if extra_line:
            frame += f"{extra_line}\n"
        frame += f"data:{json.dumps(event, ensure_ascii=False)}\n\n"
        out.append(frame)
    return "".join(out).encode("utf-8")


def parse_sse(text):
    """Decode the bridge's outbound stream into a list of JSON bodies."""
    bodies = []
    for frame in text.split("\n\n"):
        if not frame:
            continue
        assert frame.startswith("data: "), frame
        bodies.append(json.loads(frame[len("data: "):]))
    return bodies


async def chunked(*chunks):
    for chunk in chunks:
        yield chunk


@pytest.fixture
def upstream():
    """Fake agent service. Set ``.reply`` to an httpx.Response or an exception.

    Every request the bridge makes is recorded in ``.requests``.
    """

    class FakeUpstream:
        def __init__(self):
            self.reply = httpx.Response(200, content=b"")
            self.requests = []

        def __call__(self, request):
            self.requests.append(request)
            if isinstance(self.reply, Exception):
                raise self.reply
            return self.reply

        def stream(self, *chunks, status_code=200):
            self.reply = httpx.Response(
                status_code,
                headers={"content-type": "text/event-stream"},
                content=chunked(*chunks),
            )

        @property
        def last_body(self):
            return json.loads(self.requests[-1].content)

    return FakeUpstream()


@pytest.fixture
async def http_client(upstream):
    async with httpx.AsyncClient(transport=httpx.MockTransport(upstream)) as client:
        yield client
