"""
WebSocket-based EventBus implementation.

This module provides the server-side implementation of the EventBus protocol.
Each connected socket is wrapped in a WebSocketObserver whose bounded queue
is drained by its own writer task, so broadcasting never waits on a slow
client. An observer that is full or closed fails its send and is dropped
from the bus by broadcast_to_clients.
"""

import asyncio
import logging

from fastapi import WebSocket

from config.defaults import DEFAULT_OBSERVER_QUEUE_SIZE
from core import BroadcastResult, Event, broadcast_to_clients

logger = logging.getLogger(__name__)


class ObserverClosedError(Exception):
    """Raised when sending to an observer whose socket has gone away."""


class WebSocketObserver:
    """Queued writer for one WebSocket connection."""

    def __init__(self, websocket: WebSocket, queue_size: int = DEFAULT_OBSERVER_QUEUE_SIZE) -> None:
        self.websocket = websocket
        self.queue: asyncio.Queue[str] = asyncio.Queue(maxsize=queue_size)
        self.closed = False
        self._writer: asyncio.Task[None] | None = None

    def start(self) -> None:
        if self._writer is None:
            self._writer = asyncio.create_task(self._write_loop())

    def send(self, data: str) -> None:
        """
        Queue a frame for delivery.

        Raises:
            ObserverClosedError: If the socket is closed
            asyncio.QueueFull: If the client has fallen too far behind
        """
        if self.closed:
            raise ObserverClosedError("Observer is closed")
        self.queue.put_nowait(data)

    async def _write_loop(self) -> None:
        while True:
            data = await self.queue.get()
            try:
                await self.websocket.send_text(data)
            except Exception as e:
                logger.debug("WebSocket send failed, closing observer: %s", e)
                self.closed = True
                return

    async def close(self) -> None:
        self.closed = True
        if self._writer is not None:
            self._writer.cancel()
            try:
                await self._writer
            except asyncio.CancelledError:
                pass
            self._writer = None


class WebSocketEventBus:
    """
    EventBus implementation that broadcasts events to WebSocket observers.

    Events are serialized once per publish and fanned out to every attached
    observer.
    """

    def __init__(self) -> None:
        self.observers: set[WebSocketObserver] = set()

    async def publish(self, event: Event) -> None:
        """Publish an event to all observers."""
        result = self.broadcast(event)
        if result.failed:
            logger.info("Dropped %d observer(s) while publishing %s", result.failed, event.type)

    def broadcast(self, event: Event) -> BroadcastResult:
        return broadcast_to_clients(self.observers, event.to_wire())

    def attach(self, observer: WebSocketObserver) -> None:
        self.observers.add(observer)
        logger.debug("Observer attached (%d total)", len(self.observers))

    def detach(self, observer: WebSocketObserver) -> None:
        self.observers.discard(observer)
        logger.debug("Observer detached (%d total)", len(self.observers))


# Global event bus instance
_event_bus: WebSocketEventBus | None = None


def get_event_bus() -> WebSocketEventBus:
    """Get the global event bus instance, creating it if necessary."""
    global _event_bus
    if _event_bus is None:
        _event_bus = WebSocketEventBus()
    return _event_bus
