"""
Run the ASGI app under uvicorn with a bounded graceful shutdown.

The server runs as a background task while the calling task waits for a stop
signal (SIGINT/SIGTERM, or `stop` being set by the caller). Once stopped,
in-flight requests get `grace_s` seconds to finish; anything still running
after that is abandoned.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import signal

import uvicorn
from starlette.types import ASGIApp

from . import config

logger = logging.getLogger(__name__)

STOP_SIGNALS = (signal.SIGINT, signal.SIGTERM)


def build_server(
    app: ASGIApp,
    *,
    host: str | None = None,
    port: int | None = None,
    grace_s: float | None = None,
) -> uvicorn.Server:
    server_config = uvicorn.Config(
        app,
        host=host or config.http_host(),
        port=port if port is not None else config.http_port(),
        timeout_keep_alive=config.idle_timeout_s(),
        timeout_graceful_shutdown=grace_s if grace_s is not None else config.shutdown_grace_s(),
        # Logging is configured by core.log; keep uvicorn from replacing it.
        log_config=None,
    )
    return uvicorn.Server(server_config)


def _install_stop_handlers(stop: asyncio.Event) -> None:
    loop = asyncio.get_running_loop()
    for sig in STOP_SIGNALS:
        # Not available on every platform (e.g. Windows event loops).
        with contextlib.suppress(NotImplementedError, RuntimeError):
            loop.add_signal_handler(sig, stop.set)


async def serve(
    app: ASGIApp,
    *,
    stop: asyncio.Event | None = None,
    host: str | None = None,
    port: int | None = None,
    grace_s: float | None = None,
) -> None:
    grace = grace_s if grace_s is not None else config.shutdown_grace_s()
    server = build_server(app, host=host, port=port, grace_s=grace)

    if stop is None:
        stop = asyncio.Event()
        _install_stop_handlers(stop)

    serve_task = asyncio.create_task(server.serve(), name="http-server")
    stop_task = asyncio.create_task(stop.wait(), name="http-server-stop")
    logger.info("server_starting host=%s port=%s", server.config.host, server.config.port)

    try:
        await asyncio.wait({serve_task, stop_task}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        stop_task.cancel()

    if not serve_task.done():
        logger.info("server_stopping grace_s=%s", grace)
        server.should_exit = True
        try:
            # uvicorn enforces the grace period itself; the extra second covers
            # lifespan shutdown after connections are closed.
            await asyncio.wait_for(serve_task, timeout=grace + 1)
        except asyncio.TimeoutError:
            logger.warning("server_forced_shutdown grace_s=%s", grace)
            return

    if not serve_task.cancelled():
        exc = serve_task.exception()
        if exc is not None:
            raise exc
    logger.info("shutting down gracefully")
