"""Reacts to adoption status events from the control channel."""

from __future__ import annotations

import logging
from typing import Any, Callable

from probeadopt.adoption_server import AdoptionServer
from probeadopt.channel import Channel
from probeadopt.config import is_hardware_probe
from probeadopt.local_ips import get_local_ips
from probeadopt.schemas import MAX_REPORTED_IPS, LogLevel, ReadinessPayload, StatusEvent

logger = logging.getLogger(__name__)

STATUS_EVENT = "probe:adoption:status"
READY_EVENT = "probe:adoption:ready"

_LOG_LEVELS = {
    LogLevel.INFO: logging.INFO,
    LogLevel.WARN: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
}


class AdoptionStatusHandler:
    """Starts or stops the adoption server according to the reported status.

    Holds no state between events; the server instance owns the lifecycle.
    """

    def __init__(
        self,
        channel: Channel,
        server: AdoptionServer,
        hardware_probe: Callable[[], bool] = is_hardware_probe,
        local_ips: Callable[[], list[str]] = get_local_ips,
    ):
        self.channel = channel
        self.server = server
        self._hardware_probe = hardware_probe
        self._local_ips = local_ips

    async def handle(self, event: StatusEvent | dict[str, Any]) -> None:
        if not isinstance(event, StatusEvent):
            event = StatusEvent.model_validate(event)

        logger.log(_LOG_LEVELS[event.level], event.message)

        if not event.adopted and self._hardware_probe():
            ticket = await self.server.start()
            ips = list(self._local_ips())[:MAX_REPORTED_IPS]

            payload = ReadinessPayload(token=ticket.token, expires_at=ticket.expires_at, ips=ips)
            await self.channel.send(READY_EVENT, payload.to_event())
        else:
            await self.server.stop()

    async def __call__(self, event: StatusEvent | dict[str, Any]) -> None:
        await self.handle(event)

    def register(self) -> None:
        """Subscribe to status events on the bound channel."""
        # socket.io only awaits plain coroutine functions, not awaitable instances
        self.channel.on(STATUS_EVENT, self.handle)
