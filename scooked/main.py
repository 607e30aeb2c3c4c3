#!/usr/bin/env python3
"""
Scooked - Main Entry Point

This is the thin orchestration layer that:
1. Loads configuration
2. Resolves identity and connects the remote store
3. Runs the HTTP/SSE presentation adapter

All lifecycle logic is in the session module, following black box principles.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import uvicorn
from fastapi import FastAPI, HTTPException
from redis.exceptions import RedisError
from sse_starlette.sse import EventSourceResponse

from scooked import __version__
from scooked.config.provider import ConfigProvider, EnvConfigProvider
from scooked.errors import AuthUnavailable
from scooked.logging_config import configure_logging, get_logging_config
from scooked.modules.api import (
    BroadcastPresenter,
    CommandResponse,
    NavigateRequest,
    NavigateResponse,
    SessionStatusResponse,
    resolve_navigation,
)
from scooked.modules.auth import IdentityFactory
from scooked.modules.clock import SystemClock
from scooked.modules.retry import RetryExecutor
from scooked.modules.session import LogSeverity, SessionManager, SessionState
from scooked.modules.storage import StorageModule
from scooked.modules.store import RedisSessionStore

# Configuration provider (centralized config access)
config_provider: ConfigProvider = EnvConfigProvider()

configure_logging(config_provider.get_api_config().log_level)
logger = logging.getLogger(__name__)

# Module instances (initialized at startup)
presenter: Optional[BroadcastPresenter] = None
session_manager: Optional[SessionManager] = None
storage: Optional[StorageModule] = None


def build_session_manager(provider: ConfigProvider, view: BroadcastPresenter) -> SessionManager:
    """Wire the session manager from configuration."""
    session_config = provider.get_session_config()
    clock = SystemClock()
    retry = RetryExecutor(
        clock,
        max_attempts=session_config.retry_max_attempts,
        delay_ms=session_config.retry_delay_ms,
    )
    return SessionManager(
        clock=clock,
        presenter=view,
        retry=retry,
        duration_ms=session_config.duration_ms,
        tick_interval=session_config.tick_interval,
    )


async def connect_remote_store(
    provider: ConfigProvider, manager: SessionManager, view: BroadcastPresenter
) -> bool:
    """
    Resolve identity, connect the store and arm the session subscription.

    Every failure leaves the manager running as an offline timer.

    Returns:
        True if remote sync is live
    """
    global storage

    store_config = provider.get_store_config()
    if not store_config.is_configured:
        manager.report("Remote store config missing. Running offline.", LogSeverity.ERROR)
        return False

    try:
        identity = await IdentityFactory.build(provider.get_auth_config()).resolve()
    except AuthUnavailable as e:
        manager.report(f"Auth failed: {e}. Remote sync disabled.", LogSeverity.WARNING)
        return False

    view.identity = identity
    manager.report(f"Auth ready. UID: {identity[:8]}...", LogSeverity.NOTICE)

    storage = StorageModule(store_config)
    try:
        redis_client = await storage.connect()
    except (RedisError, OSError) as e:
        storage = None
        manager.report(f"Remote store unreachable: {e}. Running offline.", LogSeverity.ERROR)
        return False

    gateway = RedisSessionStore(redis_client, store_config.app_id, identity)
    attached = await manager.attach(gateway)
    view.online = manager.online
    return attached


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifecycle - initialize and cleanup resources.
    """
    global presenter, session_manager, storage

    logger.info("Starting Scooked session service...")

    presenter = BroadcastPresenter()
    session_manager = build_session_manager(config_provider, presenter)
    await connect_remote_store(config_provider, session_manager, presenter)

    logger.info("Scooked session service started")

    yield

    logger.info("Shutting down Scooked session service...")
    await session_manager.close()
    if storage:
        await storage.disconnect()
        storage = None
    logger.info("Scooked session service shutdown complete")


app = FastAPI(
    title="Scooked API",
    description="Scooked - Synchronized Session Timer",
    version=__version__,
    lifespan=lifespan,
)


def get_session_manager() -> SessionManager:
    if not session_manager or not presenter:
        raise HTTPException(503, "Service not initialized")
    return session_manager


def current_status() -> SessionStatusResponse:
    manager = get_session_manager()
    status = presenter.status()
    status["online"] = manager.online
    return SessionStatusResponse(**status, end_time_ms=manager.end_time_ms)


@app.get("/health")
async def health():
    """Liveness probe."""
    return {
        "status": "healthy",
        "state": session_manager.state.value if session_manager else None,
    }


@app.get("/session", response_model=SessionStatusResponse)
async def get_session():
    """
    Current session status and recent log lines.

    Returns:
        200: Status
        503: Service not initialized
    """
    return current_status()


@app.post("/session/start", response_model=CommandResponse)
async def start_session():
    """
    Start a session. Starting while connected is accepted but does nothing.
    """
    manager = get_session_manager()
    accepted = await manager.on_user_start()
    return CommandResponse(accepted=accepted, state=manager.state, end_time_ms=manager.end_time_ms)


@app.post("/session/stop", response_model=CommandResponse)
async def stop_session():
    """
    Stop the running session. Stopping while disconnected does nothing.
    """
    manager = get_session_manager()
    accepted = await manager.on_user_stop()
    return CommandResponse(accepted=accepted, state=manager.state, end_time_ms=manager.end_time_ms)


@app.post("/navigate", response_model=NavigateResponse)
async def navigate(request: NavigateRequest):
    """
    Resolve address bar input to a URL.

    Returns:
        200: Target URL
        400: Empty input
        409: No session running
    """
    manager = get_session_manager()
    if manager.state is not SessionState.CONNECTED:
        raise HTTPException(409, "Navigation requires an active session")

    url = resolve_navigation(request.query)
    if url is None:
        raise HTTPException(400, "Query must not be empty")

    manager.report(f"Routing to: {url[:50]}", LogSeverity.INFO)
    return NavigateResponse(url=url)


@app.get("/session/stream")
async def session_stream():
    """
    SSE stream of session events.

    Emits a ``status`` event on connect, then ``tick``, ``state`` and ``log``
    events as the session manager produces them.
    """
    get_session_manager()
    view = presenter

    async def event_generator() -> AsyncGenerator:
        queue = view.listen()
        logger.info(f"Stream listener connected ({view.listener_count} total)")
        try:
            while True:
                yield await queue.get()
        except asyncio.CancelledError:
            logger.info("Stream listener disconnecting")
            raise
        finally:
            view.unlisten(queue)

    return EventSourceResponse(event_generator())


def run() -> None:
    """Console entry point."""
    api_config = config_provider.get_api_config()
    uvicorn.run(
        "scooked.main:app",
        host=api_config.host,
        port=api_config.port,
        log_config=get_logging_config(api_config.log_level),
        reload=api_config.debug,
    )


if __name__ == "__main__":
    run()
