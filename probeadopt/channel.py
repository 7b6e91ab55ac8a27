"""Bidirectional control channel to the remote API."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable

import socketio

logger = logging.getLogger(__name__)

EventHandler = Callable[[Any], Awaitable[None]]


class Channel(ABC):
    """Named-event message channel."""

    @abstractmethod
    async def send(self, event: str, payload: dict[str, Any]) -> None:
        """Emit an event to the remote party."""
        ...

    @abstractmethod
    def on(self, event: str, handler: EventHandler) -> None:
        """Register a coroutine handler for an inbound event."""
        ...


class SocketIOChannel(Channel):
    """Channel backed by a socket.io client connection."""

    def __init__(self, url: str, client: socketio.AsyncClient | None = None):
        self.url = url
        self.client = client or socketio.AsyncClient(reconnection=True)

    async def send(self, event: str, payload: dict[str, Any]) -> None:
        await self.client.emit(event, payload)

    def on(self, event: str, handler: EventHandler) -> None:
        self.client.on(event, handler)

    async def connect(self) -> None:
        logger.info(f"Connecting to {self.url}")
        await self.client.connect(self.url, transports=["websocket"])

    async def wait(self) -> None:
        """Block until the connection ends."""
        await self.client.wait()

    async def disconnect(self) -> None:
        await self.client.disconnect()
