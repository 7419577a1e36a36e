"""Runtime — bridges one AG-UI run to the agent service's SSE stream.

Opens the upstream stream, splits it into frames, translates each event
and yields outbound SSE frames. The upstream read is the only await, so
frames are handled strictly in arrival order.

Failure policy: the client always gets a terminal frame. Connect errors,
bad statuses, empty bodies, stalls and mid-stream drops each end the run
with exactly one RUN_ERROR. If the upstream simply ends without
RUN_FINISHED the output is closed as-is.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncGenerator

import httpx

from agent_bridge.config import BridgeConfig
from agent_bridge.schemas import UpstreamRequest
from agent_bridge.stream.emitter import SSE_MEDIA_TYPE, OutputEmitter
from agent_bridge.stream.frames import FrameAccumulator, parse_upstream_event
from agent_bridge.stream.translator import EventTranslator

logger = logging.getLogger(__name__)


def upstream_timeout(config: BridgeConfig) -> httpx.Timeout:
    """``read`` is the stall timeout: max silence between two upstream chunks."""
    upstream = config.upstream
    return httpx.Timeout(upstream.read_timeout, connect=upstream.connect_timeout)


async def execute_run(
    config: BridgeConfig,
    request: UpstreamRequest,
    client: httpx.AsyncClient,
) -> AsyncGenerator[str, None]:
    """Run the agent upstream and yield downstream SSE frames until the run ends."""
    thread_id, run_id = request.thread_id, request.run_id
    url = config.upstream.run_url

    emitter = OutputEmitter(thread_id, run_id)
    translator = EventTranslator(thread_id, run_id)
    frames = FrameAccumulator()

    logger.info(
        f"Executing run: run_id={run_id}, thread_id={thread_id}, "
        f"messages={len(request.messages)}, upstream={url}"
    )

    connected = False
    received = 0

    try:
        async with client.stream(
            "POST",
            url,
            json=request.model_dump(mode="json", by_alias=True),
            headers={"Accept": SSE_MEDIA_TYPE},
            timeout=upstream_timeout(config),
        ) as response:
            connected = True

            if not response.is_success:
                yield emitter.fail(f"Backend {response.status_code}")
                return

            async for chunk in response.aiter_bytes():
                received += len(chunk)
                for payload in frames.feed(chunk):
                    event = parse_upstream_event(payload)
                    if event is None:
                        continue
                    for out in translator.translate(event):
                        yield emitter.emit(out)
                if translator.finished:
                    break

            frames.close()

            if received == 0:
                yield emitter.fail(
                    f"Backend {response.status_code} returned an empty body"
                )
            elif not translator.finished:
                logger.warning(
                    f"Run {run_id}: backend stream ended without RUN_FINISHED "
                    f"after {emitter.emitted} events"
                )

    except httpx.HTTPError as e:
        if emitter.closed:
            logger.info(f"Run {run_id}: ignoring backend error after end of run: {e}")
        elif not connected:
            logger.error(f"Run {run_id}: backend unreachable at {url}: {e!r}")
            yield emitter.fail("Backend unreachable")
        elif isinstance(e, httpx.TimeoutException):
            logger.error(f"Run {run_id}: backend stream stalled: {e!r}")
            yield emitter.fail("Backend stream timed out")
        else:
            logger.error(f"Run {run_id}: backend stream interrupted: {e!r}")
            yield emitter.fail("Backend stream interrupted")

    except asyncio.CancelledError:
        logger.info(f"Run {run_id}: client disconnected, releasing backend stream")
        raise

    except Exception as e:
        logger.error(f"Run {run_id}: bridge error: {e}", exc_info=True)
        if not emitter.closed:
            yield emitter.fail("Bridge error")

    finally:
        emitter.close()
        logger.info(
            f"Run {run_id} closed: phase={translator.phase.value}, "
            f"events={emitter.emitted}"
        )
