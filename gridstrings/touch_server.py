"""
WebSocket server for remote touch input.

A phone or browser client sends touch-down messages::

    {"type": "touch_down", "normalized": true,
     "touches": [{"id": 0, "x": 0.33, "y": 0.2}]}

Only the first touch of each message is kept. Points are handed to the
interaction thread through ``TouchInbox``.
"""

from __future__ import annotations

import asyncio
import logging
import queue
import socket
import threading
from typing import Callable, List, Optional

import websockets
from pydantic import BaseModel, ValidationError
from websockets.asyncio.server import serve as ws_serve

from .config import WS_PORT
from .models import Vec2, ViewportGeometry

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------
class TouchPoint(BaseModel):
    id: int = 0
    x: float
    y: float


class TouchMessage(BaseModel):
    type: str = "touch_down"
    touches: List[TouchPoint] = []
    normalized: bool = False


def parse_touch_message(
    raw: str | bytes,
    geometry: Optional[ViewportGeometry],
) -> Optional[Vec2]:
    """
    Extract the first touch-down point from *raw*, in view coordinates.

    Returns ``None`` for malformed messages, other message types, empty
    touch lists, and normalized touches arriving before any geometry.
    """
    try:
        message = TouchMessage.model_validate_json(raw)
    except ValidationError as exc:
        logger.debug("Ignoring malformed touch message: %s", exc.errors()[:1])
        return None

    if message.type != "touch_down" or not message.touches:
        return None

    first = message.touches[0]
    if not message.normalized:
        return Vec2(first.x, first.y)
    if geometry is None:
        return None
    return Vec2(first.x * geometry.width, first.y * geometry.height)


# ---------------------------------------------------------------------------
# Shared state
# ---------------------------------------------------------------------------
class TouchInbox:
    """Thread-safe hand-off from the server thread to the interaction thread."""

    def __init__(self) -> None:
        self._queue: queue.Queue[Vec2] = queue.Queue()
        self._lock = threading.Lock()
        self._clients = 0

    def put(self, point: Vec2) -> None:
        self._queue.put(point)

    def drain(self) -> list[Vec2]:
        points = []
        while True:
            try:
                points.append(self._queue.get_nowait())
            except queue.Empty:
                return points

    def client_connected(self) -> None:
        with self._lock:
            self._clients += 1

    def client_disconnected(self) -> None:
        with self._lock:
            self._clients = max(0, self._clients - 1)

    @property
    def connected(self) -> bool:
        with self._lock:
            return self._clients > 0


# ---------------------------------------------------------------------------
# Server
# ---------------------------------------------------------------------------
def start_touch_server(
    inbox: TouchInbox,
    geometry_fn: Callable[[], Optional[ViewportGeometry]],
    host: str = "0.0.0.0",
    port: int = WS_PORT,
) -> None:
    """Run the WebSocket server (blocking); meant for a daemon thread."""

    async def handler(websocket):
        logger.info("Touch client connected: %s", websocket.remote_address)
        inbox.client_connected()
        try:
            async for message in websocket:
                point = parse_touch_message(message, geometry_fn())
                if point is not None:
                    inbox.put(point)
        except websockets.exceptions.ConnectionClosed:
            pass
        finally:
            logger.info("Touch client disconnected.")
            inbox.client_disconnected()

    async def run():
        async with ws_serve(handler, host, port):
            local_ip = socket.gethostbyname(socket.gethostname())
            logger.info("Touch server listening on ws://%s:%d", host, port)
            logger.info("  -> Point the client at: %s", local_ip)
            await asyncio.Future()  # run forever

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    loop.run_until_complete(run())


def start_touch_server_thread(
    inbox: TouchInbox,
    geometry_fn: Callable[[], Optional[ViewportGeometry]],
    host: str = "0.0.0.0",
    port: int = WS_PORT,
) -> threading.Thread:
    thread = threading.Thread(
        target=start_touch_server,
        args=(inbox, geometry_fn, host, port),
        daemon=True,
    )
    thread.start()
    return thread
