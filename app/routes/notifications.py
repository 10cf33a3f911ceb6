"""
Real-time notification stream over WebSocket.

A connection receives every broadcast lifecycle event plus the events
addressed to its own user channel, as {"event": topic, "data": payload}
frames. Slow clients lose events once their buffer is full.
"""

import asyncio
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, WebSocket, WebSocketDisconnect, status
from fastapi.encoders import jsonable_encoder

from app.core.settings import settings
from app.models.notification import user_topic
from app.services.notification_fanout import BROADCAST_TOPICS, InProcessFanout, get_notification_fanout
from app.utils.security import decode_access_token

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ws", tags=["Notifications"])


@router.websocket("/notifications")
async def notifications_socket(
    websocket: WebSocket,
    token: str = Query(..., description="Bearer token of the connecting user"),
    fanout: InProcessFanout = Depends(get_notification_fanout),
):
    try:
        actor = decode_access_token(token)
    except HTTPException:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    loop = asyncio.get_running_loop()
    queue: asyncio.Queue = asyncio.Queue(maxsize=settings.NOTIFICATION_QUEUE_SIZE)

    def put(message: dict) -> None:
        try:
            queue.put_nowait(message)
        except asyncio.QueueFull:
            logger.warning(f"⚠️ Notification buffer full for {actor.id}, dropping {message['event']}")

    def enqueue(topic: str, payload: dict) -> None:
        # Publishers may run on another thread or event loop
        loop.call_soon_threadsafe(put, {"event": topic, "data": jsonable_encoder(payload)})

    # Subscribe before accepting so nothing published after the handshake is missed
    topics = BROADCAST_TOPICS + [user_topic(actor.id)]
    unsubscribes = [fanout.subscribe(topic, enqueue) for topic in topics]

    await websocket.accept()
    logger.info(f"🟢 Notification socket connected: {actor.id} ({actor.role})")

    async def forward() -> None:
        while True:
            message = await queue.get()
            await websocket.send_json(message)

    async def watch_disconnect() -> None:
        while True:
            await websocket.receive_text()

    tasks = [asyncio.create_task(forward()), asyncio.create_task(watch_disconnect())]
    try:
        done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        for task in done:
            exc = task.exception()
            if exc is not None and not isinstance(exc, WebSocketDisconnect):
                logger.warning(f"⚠️ Notification socket for {actor.id} failed: {exc}")
    finally:
        for task in tasks:
            task.cancel()
        for unsubscribe in unsubscribes:
            unsubscribe()
        logger.info(f"🔴 Notification socket disconnected: {actor.id}")
