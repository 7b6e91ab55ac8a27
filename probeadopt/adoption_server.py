"""Short-lived local HTTP endpoint serving a one-time adoption token."""

from __future__ import annotations

import asyncio
import contextlib
import errno
import json
import logging
import secrets
import socket
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Callable

import h11
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import Response

from probeadopt.config import AdoptionServerConfig
from probeadopt.schemas import AdoptionTicket

logger = logging.getLogger(__name__)

TOKEN_BYTES = 32

# Seconds between checks while waiting for uvicorn to start serving
STARTUP_POLL_INTERVAL = 0.01

ALLOWED_METHODS = ["GET", "OPTIONS"]

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": ", ".join(ALLOWED_METHODS),
    "Access-Control-Allow-Headers": "Content-Type",
    "Cache-Control": "no-cache, no-store, must-revalidate",
}

JSON_CONTENT_TYPE = "application/json; charset=utf-8"

# --- Transport noise ---

# Peers going away mid-request
IGNORED_ERRNOS = frozenset({errno.ECONNABORTED, errno.ECONNRESET, errno.EPIPE})

IGNORED_EXCEPTION_TYPES: tuple[type[BaseException], ...] = (
    ConnectionAbortedError,
    ConnectionResetError,
    BrokenPipeError,
    h11.RemoteProtocolError,  # malformed or truncated request framing
)

# What uvicorn logs (without exc_info) when h11 rejects a request
IGNORED_LOG_MESSAGES = frozenset({"Invalid HTTP request received."})


def is_ignored_error(exc: BaseException) -> bool:
    """Check whether an error belongs to the benign transport categories."""
    if isinstance(exc, IGNORED_EXCEPTION_TYPES):
        return True
    return isinstance(exc, OSError) and exc.errno in IGNORED_ERRNOS


class IgnoredTransportErrorFilter(logging.Filter):
    """Drop uvicorn log records caused by benign transport errors."""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.getMessage() in IGNORED_LOG_MESSAGES:
            return False
        if record.exc_info and record.exc_info[1] is not None:
            return not is_ignored_error(record.exc_info[1])
        return True


_transport_filter = IgnoredTransportErrorFilter()


# --- Request classification ---


@dataclass(frozen=True)
class ResponseDescriptor:
    """Transport-independent description of an HTTP response."""

    status_code: int
    headers: dict[str, str] = field(default_factory=lambda: dict(CORS_HEADERS))
    body: bytes = b""


def classify_request(method: str, path: str, token: str | None) -> ResponseDescriptor:
    """Map a request line to its response.

    `path` is the full request target, query string included, so only a bare
    "/" serves the token.
    """
    method = method.upper()

    if method == "OPTIONS":
        return ResponseDescriptor(204)

    if method not in ALLOWED_METHODS:
        return ResponseDescriptor(405)

    if path != "/":
        return ResponseDescriptor(404)

    return ResponseDescriptor(
        200,
        headers={**CORS_HEADERS, "Content-Type": JSON_CONTENT_TYPE},
        body=json.dumps({"token": token}).encode("utf-8"),
    )


def _request_target(request: Request) -> str:
    """Request target as sent on the wire, absolute-form URLs included."""
    raw_path = request.scope.get("raw_path")
    path = raw_path.decode("latin-1") if raw_path else request.url.path
    query = request.scope.get("query_string", b"").decode("latin-1")
    return f"{path}?{query}" if query else path


def create_app(get_token: Callable[[], str | None]) -> FastAPI:
    """Build the ASGI app answering every method and path via classify_request."""
    app = FastAPI(
        title="Probe Adoption Server",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    @app.middleware("http")
    async def adoption_endpoint(request: Request, call_next) -> Response:
        descriptor = classify_request(request.method, _request_target(request), get_token())
        return Response(
            content=descriptor.body,
            status_code=descriptor.status_code,
            headers=descriptor.headers,
        )

    return app


# --- Server lifecycle ---


class ServerState(str, Enum):
    """Lifecycle of the adoption listener."""

    STOPPED = "stopped"
    RUNNING = "running"


class _EmbeddedServer(uvicorn.Server):
    """uvicorn server that leaves signal handling to the host process."""

    @contextlib.contextmanager
    def capture_signals(self):
        yield


class AdoptionServer:
    """Ephemeral listener handing out a random token until it expires.

    One instance is constructed per process and shared by whoever needs to
    start or stop it. All transitions happen on the running event loop and are
    serialized by a lock, so a start never interleaves with a stop.
    """

    def __init__(self, config: AdoptionServerConfig | None = None):
        """Initialize the server.

        Args:
            config: Listen address and lifetime; read from the environment if omitted
        """
        self.config = config or AdoptionServerConfig.from_env()
        self.app = create_app(lambda: self._token)

        self._token: str | None = None
        self._server: uvicorn.Server | None = None
        self._serve_task: asyncio.Task | None = None
        self._socket: socket.socket | None = None
        self._expiry_task: asyncio.Task | None = None
        self._lock = asyncio.Lock()

        uvicorn_logger = logging.getLogger("uvicorn.error")
        if _transport_filter not in uvicorn_logger.filters:
            uvicorn_logger.addFilter(_transport_filter)

    @property
    def state(self) -> ServerState:
        return ServerState.RUNNING if self._server is not None else ServerState.STOPPED

    @property
    def is_running(self) -> bool:
        return self.state is ServerState.RUNNING

    @property
    def token(self) -> str | None:
        """Token currently served, or None once stopped."""
        return self._token

    async def start(self) -> AdoptionTicket:
        """Stop any running instance, then serve a fresh token.

        Returns once the listener accepts connections. A listener that fails
        to bind is logged; the ticket is returned regardless.
        """
        async with self._lock:
            await self._shutdown()

            self._token = secrets.token_hex(TOKEN_BYTES)
            started_at = datetime.now(timezone.utc)

            try:
                await self._listen()
            except OSError as e:
                self._report_error(e)
            else:
                logger.info(
                    f"Adoption server listening on {self.config.host}:{self.config.port} "
                    f"for {self.config.lifetime_ms} ms"
                )

            self._expiry_task = asyncio.create_task(
                self._expire_after(self.config.lifetime_seconds),
                name="adoption-server-expiry",
            )

            return AdoptionTicket(
                token=self._token,
                expires_at=started_at + timedelta(milliseconds=self.config.lifetime_ms),
            )

    async def stop(self) -> None:
        """Close the listener and cancel the expiry timer. Safe when stopped."""
        async with self._lock:
            await self._shutdown()

    async def _listen(self) -> None:
        host, port = self.config.host, self.config.port
        family = socket.AF_INET6 if ":" in host else socket.AF_INET

        sock = socket.socket(family, socket.SOCK_STREAM)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind((host, port))
        except OSError:
            sock.close()
            raise

        server = _EmbeddedServer(
            uvicorn.Config(
                self.app,
                http="h11",
                lifespan="off",
                log_config=None,
                log_level="warning",
                access_log=False,
            )
        )
        task = asyncio.create_task(server.serve(sockets=[sock]), name="adoption-server")
        task.add_done_callback(self._on_serve_done)

        self._server, self._serve_task, self._socket = server, task, sock

        while not server.started and not task.done():
            await asyncio.sleep(STARTUP_POLL_INTERVAL)

    async def _shutdown(self) -> None:
        """Release timer and listener. Caller must hold the lock."""
        expiry_task = self._expiry_task
        self._expiry_task = None
        # The expiry task itself ends up here when the lifetime elapses
        if expiry_task is not None and expiry_task is not asyncio.current_task():
            expiry_task.cancel()

        server, task, sock = self._server, self._serve_task, self._socket
        self._server = self._serve_task = self._socket = None

        if server is not None:
            server.should_exit = True
        if task is not None and not task.done():
            await asyncio.wait([task])
        if sock is not None:
            sock.close()

        if server is not None:
            logger.info("Adoption server stopped")
        self._token = None

    async def _expire_after(self, delay: float) -> None:
        await asyncio.sleep(delay)
        async with self._lock:
            logger.info("Adoption server lifetime elapsed")
            await self._shutdown()

    def _on_serve_done(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            self._report_error(exc)

    def _report_error(self, exc: BaseException) -> None:
        if is_ignored_error(exc):
            return
        logger.error(f"Adoption server error: {exc}", exc_info=exc)
