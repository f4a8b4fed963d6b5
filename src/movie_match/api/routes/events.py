"""WebSocket stream of room events (matches, filter changes)."""

from __future__ import annotations

import asyncio
import contextlib

import structlog
from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from movie_match.api.deps import get_context
from movie_match.context import AppContext
from movie_match.errors import RoomNotFoundError
from movie_match.events.bus import RoomSubscription
from movie_match.rooms.service import get_room

logger = structlog.get_logger()

router = APIRouter(prefix="/ws", tags=["events"])

# Application-defined close code for an unknown room
CLOSE_ROOM_NOT_FOUND = 4404


async def forward_room_events(websocket: WebSocket, subscription: RoomSubscription) -> int:
    """Send every event from ``subscription`` to the client as JSON.

    Returns the number of events sent once the subscription is closed.
    """
    sent = 0
    async for event in subscription:
        await websocket.send_json(event.to_dict())
        sent += 1
    return sent


@router.websocket("/rooms/{code}")
async def room_events(
    websocket: WebSocket,
    code: str,
    ctx: AppContext = Depends(get_context),
) -> None:
    """Push room events until the client disconnects.

    Incoming messages are read only to notice the disconnect.
    """
    try:
        room = await get_room(ctx, code)
    except RoomNotFoundError:
        await websocket.close(code=CLOSE_ROOM_NOT_FOUND)
        return

    await websocket.accept()
    log = logger.bind(room_id=room.id)
    log.info("room_stream_opened")

    async with ctx.events.subscribe(room.id) as subscription:
        forwarder = asyncio.create_task(forward_room_events(websocket, subscription))
        try:
            while True:
                await websocket.receive_text()
        except WebSocketDisconnect:
            log.info("room_stream_closed")
        finally:
            subscription.close()
            forwarder.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await forwarder
