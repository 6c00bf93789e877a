"""
Server lifecycle: starting -> serving -> draining -> stopped.

SiteServer is a uvicorn.Server that only reacts to SIGINT. On the first
interrupt it stops accepting connections and gives in-flight requests up to
the configured grace period (uvicorn's timeout_graceful_shutdown) before
cancelling them. A second interrupt forces the exit.

Whether the drain finished or timed out, run_server() reports exit status 0.
"""

import contextlib
import enum
import signal
import threading
from typing import Generator, Optional

import structlog
import uvicorn
from fastapi import FastAPI

from homepage.core.config import Settings

logger = structlog.get_logger(__name__)


class LifecycleState(str, enum.Enum):
    STARTING = "starting"
    SERVING = "serving"
    DRAINING = "draining"
    STOPPED = "stopped"


def build_config(app: FastAPI, settings: Settings) -> uvicorn.Config:
    return uvicorn.Config(
        app,
        host=settings.HOST,
        port=settings.PORT,
        timeout_keep_alive=settings.KEEP_ALIVE_TIMEOUT,
        timeout_graceful_shutdown=settings.GRACEFUL_TIMEOUT,
        log_config=None,
    )


class SiteServer(uvicorn.Server):
    def __init__(self, config: uvicorn.Config):
        super().__init__(config)
        self.state = LifecycleState.STARTING

    def _transition(self, new_state: LifecycleState) -> None:
        if new_state is self.state:
            return
        logger.info("Lifecycle transition", from_state=self.state.value, to_state=new_state.value)
        self.state = new_state

    @contextlib.contextmanager
    def capture_signals(self) -> Generator[None, None, None]:
        # Signals can only be installed from the main thread
        if threading.current_thread() is not threading.main_thread():
            yield
            return

        original_handler = signal.signal(signal.SIGINT, self.handle_exit)
        try:
            yield
        finally:
            signal.signal(signal.SIGINT, original_handler)

    def handle_exit(self, sig: int, frame) -> None:
        if self.state is LifecycleState.DRAINING:
            logger.warning("Second interrupt received, forcing exit")
            self.force_exit = True
            return
        self._transition(LifecycleState.DRAINING)
        self.should_exit = True

    async def startup(self, sockets=None) -> None:
        await super().startup(sockets=sockets)
        if not self.should_exit:
            logger.info(f"Listening at http://{self.config.host}:{self.bound_port}")
            self._transition(LifecycleState.SERVING)

    async def serve(self, sockets=None) -> None:
        try:
            await super().serve(sockets=sockets)
        finally:
            self._transition(LifecycleState.STOPPED)

    @property
    def bound_port(self) -> Optional[int]:
        """Port actually bound, useful when configured with port 0."""
        for server in getattr(self, "servers", []):
            for sock in server.sockets:
                return sock.getsockname()[1]
        return None


def run_server(app: FastAPI, settings: Settings) -> int:
    """Serve until interrupted. Returns the process exit status."""
    server = SiteServer(build_config(app, settings))
    server.run()

    logger.info(
        "shutting down",
        graceful_timeout=settings.GRACEFUL_TIMEOUT,
        forced=server.force_exit,
    )
    return 0
