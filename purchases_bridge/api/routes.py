"""
Channel API routes - Method calls over HTTP, events over WebSocket.
"""

import asyncio

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from structlog import get_logger

from purchases_bridge.api.dependencies import get_event_hub, get_plugin, require_channel
from purchases_bridge.config import settings
from purchases_bridge.models.api import (
    CallStatus,
    ChannelEvent,
    MethodCallRequest,
    MethodCallResponse,
)
from purchases_bridge.models.channel import CallResult, MethodCall
from purchases_bridge.services.events import EventHub
from purchases_bridge.services.plugin import PurchasesPlugin

logger = get_logger(__name__)
router = APIRouter(prefix="/v1/channels", tags=["channel"])


def to_response(result: CallResult | None) -> MethodCallResponse:
    """Translate a completion into the HTTP response body."""
    if result is None:
        return MethodCallResponse(status=CallStatus.NO_RESULT)
    if result.is_success:
        return MethodCallResponse(status=CallStatus.SUCCESS, result=result.value)
    if result.is_error:
        return MethodCallResponse(
            status=CallStatus.ERROR,
            code=result.code,
            message=result.message,
            details=result.details,
        )
    return MethodCallResponse(status=CallStatus.NOT_IMPLEMENTED)


@router.post("/{channel}/calls", response_model=MethodCallResponse)
async def invoke_method(
    request: MethodCallRequest,
    channel: str = Depends(require_channel),
    plugin: PurchasesPlugin = Depends(get_plugin),
) -> MethodCallResponse:
    """
    Invoke one channel method.

    Every outcome, including SDK errors, is HTTP 200 with the outcome in
    `status`.
    """
    result = await plugin.handle(MethodCall(method=request.method, arguments=request.arguments))
    return to_response(result)


async def _forward_events(websocket: WebSocket, queue: "asyncio.Queue[ChannelEvent]") -> None:
    while True:
        event = await queue.get()
        await websocket.send_json(event.model_dump())


async def _wait_for_disconnect(websocket: WebSocket) -> None:
    # Events are push only; anything the client sends is ignored
    while True:
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            return


@router.websocket("/{channel}/events")
async def stream_events(websocket: WebSocket, channel: str) -> None:
    """Stream outbound channel events until the client disconnects."""
    if channel != settings.channel_name:
        await websocket.close(code=1008)
        return

    hub: EventHub = get_event_hub(websocket)
    # Subscribe before accepting so no event after the handshake is missed
    queue = hub.subscribe()
    try:
        await websocket.accept()
        tasks = {
            asyncio.create_task(_forward_events(websocket, queue)),
            asyncio.create_task(_wait_for_disconnect(websocket)),
        }
        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        for task in pending:
            task.cancel()
        for task in done:
            task.result()
    except WebSocketDisconnect:
        pass
    finally:
        hub.unsubscribe(queue)
        logger.info("event_stream_closed", channel=channel)
