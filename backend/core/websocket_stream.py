# backend/core/websocket_stream.py

import asyncio
import logging
from typing import Any, AsyncIterator, Callable

from fastapi import WebSocket, WebSocketDisconnect

logger = logging.getLogger(__name__)


async def stream_updates(
    websocket: WebSocket,
    updates: AsyncIterator[Any],
    encode: Callable[[Any], Any],
    channel: str,
) -> None:
    """
    Forward every update to the socket until the client goes away.

    The client may send "ping" and gets {"type": "pong"} back. On
    disconnect the update stream is closed, which closes its subscription.
    """

    async def forward():
        async for update in updates:
            await websocket.send_json({"type": "update", "data": encode(update)})

    sender = asyncio.create_task(forward())
    logger.info(f"WebSocket connected to {channel}")
    try:
        while True:
            message = await websocket.receive_text()
            if message == "ping":
                await websocket.send_json({"type": "pong"})
    except WebSocketDisconnect:
        logger.info(f"WebSocket disconnected from {channel}")
    finally:
        sender.cancel()
        try:
            await sender
        except asyncio.CancelledError:
            pass
        except WebSocketDisconnect:
            pass
        await updates.aclose()
