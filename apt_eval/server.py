"""Process entrypoint: HTTPS listener, HTTP redirect listener, shutdown."""

import asyncio
import logging
import signal
import ssl
import sys
from collections.abc import Sequence
from contextlib import contextmanager
from typing import Protocol

import uvicorn
from pydantic import ValidationError as SettingsValidationError
from sqlalchemy.exc import SQLAlchemyError
from starlette.datastructures import Headers
from starlette.responses import PlainTextResponse, RedirectResponse
from starlette.types import ASGIApp, Receive, Scope, Send

from apt_eval.config import Settings, get_settings
from apt_eval.config.log import configure_logging
from apt_eval.db.session import dispose_engine, init_db
from apt_eval.errors import StartupError
from apt_eval.main import create_app

logger = logging.getLogger(__name__)

# ECDHE key exchange with AEAD ciphers only (TLS 1.2 names; 1.3 suites are fixed).
TLS_CIPHERS = ":".join(
    [
        "ECDHE-ECDSA-AES256-GCM-SHA384",
        "ECDHE-RSA-AES256-GCM-SHA384",
        "ECDHE-ECDSA-CHACHA20-POLY1305",
        "ECDHE-RSA-CHACHA20-POLY1305",
        "ECDHE-ECDSA-AES128-GCM-SHA256",
        "ECDHE-RSA-AES128-GCM-SHA256",
    ]
)

# Extra time granted after force_exit before tasks are cancelled.
FORCE_EXIT_WAIT_SECONDS = 1.0


def strip_port(host: str) -> str:
    """Return the host part of a Host header, keeping IPv6 brackets."""

    if host.startswith("["):
        end = host.find("]")
        return host[: end + 1] if end != -1 else host
    return host.split(":", 1)[0]


def build_redirect_target(host: str, https_port: int, path: str, query: str) -> str:
    target = f"https://{strip_port(host)}:{https_port}{path or '/'}"
    if query:
        target += f"?{query}"
    return target


class RedirectApp:
    """ASGI app that 301-redirects every request to the HTTPS listener."""

    def __init__(self, https_port: int) -> None:
        self.https_port = https_port

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            return

        host = Headers(scope=scope).get("host", "")
        if not host:
            response = PlainTextResponse("Missing Host header", status_code=400)
            await response(scope, receive, send)
            return

        raw_path = scope.get("raw_path")
        path = raw_path.decode("latin-1") if raw_path else scope.get("path", "/")
        query = scope.get("query_string", b"").decode("latin-1")

        target = build_redirect_target(host, self.https_port, path, query)
        response = RedirectResponse(target, status_code=301)
        await response(scope, receive, send)


class ManagedServer(uvicorn.Server):
    """uvicorn server that leaves signal handling to the process runner."""

    def install_signal_handlers(self) -> None:
        # uvicorn < 0.29
        return None

    @contextmanager
    def capture_signals(self):
        # uvicorn >= 0.29
        yield


class Stoppable(Protocol):
    should_exit: bool
    force_exit: bool

    async def serve(self, sockets: list | None = None) -> None: ...


def _tls_context_hardening(config: uvicorn.Config) -> None:
    try:
        config.load()
    except (OSError, ssl.SSLError) as exc:
        raise StartupError(f"failed to load TLS certificate: {exc}") from exc
    if config.ssl is not None:
        config.ssl.minimum_version = ssl.TLSVersion.TLSv1_2


def build_servers(app: ASGIApp, settings: Settings) -> list[ManagedServer]:
    """Create the listener(s) for the configured mode.

    With TLS enabled this is the secured app listener plus the plain redirect
    listener; without TLS a single plain listener serves the app.
    """

    grace = int(settings.shutdown_grace_seconds) or 1
    common = {
        "host": settings.host,
        "log_config": None,
        "timeout_graceful_shutdown": grace,
    }

    if not settings.tls_enabled:
        logger.warning("TLS disabled; serving plain HTTP on port %s", settings.http_port)
        plain = uvicorn.Config(app, port=settings.http_port, lifespan="on", **common)
        return [ManagedServer(plain)]

    for label, path in (("certificate", settings.cert_file), ("key", settings.key_file)):
        if not path.is_file():
            raise StartupError(f"TLS {label} file not found: {path}")

    secure = uvicorn.Config(
        app,
        port=settings.port,
        ssl_certfile=str(settings.cert_file),
        ssl_keyfile=str(settings.key_file),
        ssl_ciphers=TLS_CIPHERS,
        lifespan="on",
        **common,
    )
    _tls_context_hardening(secure)

    redirect = uvicorn.Config(
        RedirectApp(settings.port),
        port=settings.http_port,
        lifespan="off",
        **common,
    )
    return [ManagedServer(secure), ManagedServer(redirect)]


async def run_servers(
    servers: Sequence[Stoppable], stop_event: asyncio.Event, grace_seconds: float
) -> None:
    """Serve until ``stop_event`` is set or a listener exits on its own.

    On stop every server is told to exit at once; connections still open after
    ``grace_seconds`` are force-closed.
    """

    tasks = [asyncio.create_task(server.serve()) for server in servers]
    stop_waiter = asyncio.create_task(stop_event.wait())

    done, _ = await asyncio.wait(
        [*tasks, stop_waiter], return_when=asyncio.FIRST_COMPLETED
    )
    unexpected = stop_waiter not in done
    if unexpected:
        stop_waiter.cancel()
        logger.error("A listener exited unexpectedly; stopping the others")

    logger.info("Shutting down servers...")
    for server in servers:
        server.should_exit = True

    _, pending = await asyncio.wait(tasks, timeout=grace_seconds)
    if pending:
        logger.warning(
            "Grace period of %ss elapsed; forcing %d listener(s) to close",
            grace_seconds,
            len(pending),
        )
        for server in servers:
            server.force_exit = True
        _, pending = await asyncio.wait(pending, timeout=FORCE_EXIT_WAIT_SECONDS)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    for task in tasks:
        if task.cancelled():
            continue
        exc = task.exception()
        if exc is not None:
            raise StartupError(f"listener failed: {exc}") from exc

    if unexpected:
        raise StartupError("a listener stopped before shutdown was requested")

    logger.info("Servers exited properly")


def _request_stop(sig: signal.Signals, stop_event: asyncio.Event) -> None:
    logger.info("Received %s", sig.name)
    stop_event.set()


async def serve(settings: Settings) -> None:
    """Initialize persistence, bind listeners and block until shutdown."""

    try:
        await init_db(settings)
    except (OSError, SQLAlchemyError) as exc:
        raise StartupError(f"failed to initialize database: {exc}") from exc

    app = create_app(settings)
    servers = build_servers(app, settings)

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, _request_stop, sig, stop_event)

    if settings.tls_enabled:
        logger.info("Starting HTTP server (for redirects) on port %s", settings.http_port)
        logger.info("Starting secure server (HTTPS) on port %s", settings.port)

    try:
        await run_servers(servers, stop_event, settings.shutdown_grace_seconds)
    finally:
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.remove_signal_handler(sig)
        await dispose_engine()


def main() -> int:
    try:
        settings = get_settings()
    except SettingsValidationError as exc:
        configure_logging()
        logger.critical("Invalid configuration: %s", exc)
        return 1

    configure_logging(settings.log_level)

    try:
        asyncio.run(serve(settings))
    except StartupError as exc:
        logger.critical("Failed to start: %s", exc)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
