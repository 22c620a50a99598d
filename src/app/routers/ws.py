"""WebSocket endpoint for live game events and frame snapshots.

Two producers feed ``/ws/live`` from outside the event loop: the
EventBus bridge thread and the LoopDriver's ``on_frame`` callback.  Both
hand their coroutines to the loop through ``_submit``, which refuses
once the loop has closed during shutdown.
"""

from __future__ import annotations

import asyncio
import json
import queue
import threading
import time
from datetime import datetime, timezone
from typing import Coroutine

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from loguru import logger

router = APIRouter(prefix="/ws", tags=["websocket"])


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


class ConnectionManager:
    """Set of live viewers of the game feed."""

    def __init__(self):
        self._clients: set[WebSocket] = set()
        self._lock = asyncio.Lock()

    @property
    def has_clients(self) -> bool:
        return bool(self._clients)

    def __len__(self) -> int:
        return len(self._clients)

    async def connect(self, websocket: WebSocket):
        await websocket.accept()
        async with self._lock:
            self._clients.add(websocket)
        logger.info(f"Viewer joined the live feed ({len(self)} watching)")

    async def disconnect(self, websocket: WebSocket):
        async with self._lock:
            self._clients.discard(websocket)
        logger.info(f"Viewer left the live feed ({len(self)} watching)")

    async def broadcast(self, message: dict):
        """Send *message* to every viewer, dropping those whose socket fails."""
        if not self._clients:
            return
        payload = json.dumps(message)
        async with self._lock:
            stale = [ws for ws in self._clients if not await self._send(ws, payload)]
            self._clients.difference_update(stale)

    async def send_to(self, websocket: WebSocket, message: dict):
        await self._send(websocket, json.dumps(message))

    @staticmethod
    async def _send(websocket: WebSocket, payload: str) -> bool:
        try:
            await websocket.send_text(payload)
        except Exception as e:
            logger.warning(f"Failed to send to websocket: {e}")
            return False
        return True


manager = ConnectionManager()


def _submit(coro: Coroutine, loop: asyncio.AbstractEventLoop) -> bool:
    """Schedule *coro* on *loop* from a worker thread.

    Returns False (and discards the coroutine) when the loop is closed.
    """
    if loop.is_closed():
        coro.close()
        logger.debug("Event loop closed; dropping live-feed message")
        return False
    try:
        asyncio.run_coroutine_threadsafe(coro, loop)
    except RuntimeError as e:
        coro.close()
        logger.warning(f"Could not schedule live-feed message: {e}")
        return False
    return True


@router.websocket("/live")
async def websocket_live(websocket: WebSocket):
    """Live game feed: EventBus events plus throttled frame snapshots."""
    await manager.connect(websocket)

    game = getattr(websocket.app.state, "game", None)
    await manager.send_to(
        websocket,
        {
            "type": "connected",
            "timestamp": _timestamp(),
            "snapshot": game.snapshot() if game is not None else None,
        },
    )

    try:
        while True:
            data = await websocket.receive_text()
            try:
                message = json.loads(data)
            except json.JSONDecodeError:
                await manager.send_to(
                    websocket, {"type": "error", "message": "Invalid JSON"}
                )
                continue
            await handle_client_message(websocket, message)
    except WebSocketDisconnect:
        await manager.disconnect(websocket)


async def handle_client_message(websocket: WebSocket, message):
    """Handle messages from WebSocket clients."""
    if not isinstance(message, dict):
        await manager.send_to(
            websocket, {"type": "error", "message": "Expected a JSON object"}
        )
        return

    msg_type = message.get("type")

    if msg_type == "ping":
        await manager.send_to(websocket, {"type": "pong", "timestamp": _timestamp()})
    elif msg_type == "snapshot":
        game = getattr(websocket.app.state, "game", None)
        await manager.send_to(
            websocket,
            {"type": "snapshot", "data": game.snapshot() if game is not None else None},
        )
    else:
        await manager.send_to(
            websocket,
            {"type": "error", "message": f"Unknown message type: {msg_type}"},
        )


async def broadcast_game_event(event_type: str, data: dict):
    """Broadcast a game event to all WebSocket clients."""
    await manager.broadcast(
        {
            "type": f"game_{event_type}",
            "data": data,
            "timestamp": _timestamp(),
        }
    )


class SnapshotThrottle:
    """LoopDriver ``on_frame`` callback that forwards at most *hz* snapshots/s."""

    def __init__(self, loop: asyncio.AbstractEventLoop, hz: float = 10.0):
        self._loop = loop
        self._interval = 1.0 / hz if hz > 0 else 0.0
        self._last_sent = 0.0

    def __call__(self, snapshot: dict) -> None:
        now = time.monotonic()
        if now - self._last_sent < self._interval:
            return
        self._last_sent = now
        if manager.has_clients:
            _submit(manager.broadcast({"type": "snapshot", "data": snapshot}), self._loop)


def start_game_event_bridge(
    event_bus, loop: asyncio.AbstractEventLoop,
) -> threading.Event:
    """Start a daemon thread that forwards EventBus events to WebSocket.

    This bridges the game's threaded EventBus to FastAPI's async WebSocket
    system.  Returns an Event; set it to stop the bridge.
    """
    sub = event_bus.subscribe()
    stop = threading.Event()

    def bridge_loop():
        while not stop.is_set():
            try:
                msg = sub.get(timeout=0.5)
            except queue.Empty:
                continue
            _submit(
                broadcast_game_event(msg.get("type", "unknown"), msg.get("data", {})),
                loop,
            )
        event_bus.unsubscribe(sub)

    thread = threading.Thread(target=bridge_loop, daemon=True, name="game-ws-bridge")
    thread.start()
    return stop
