"""
Tests for the server lifecycle.

Tests cover:
- State transitions on SIGINT (serving -> draining -> stopped)
- Second interrupt forces exit
- uvicorn config built from settings
- Drain bounded by the grace period with a slow in-flight request
"""

import asyncio
import signal
import time
from unittest.mock import patch

import pytest
from fastapi import FastAPI

from homepage.core.config import Settings
from homepage.core.lifecycle import LifecycleState, SiteServer, build_config, run_server


def make_settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


class TestBuildConfig:
    """Tests for build_config."""

    def test_uses_settings(self):
        settings = make_settings(HOST="0.0.0.0", PORT=9001, GRACEFUL_TIMEOUT="1m", KEEP_ALIVE_TIMEOUT=30)
        config = build_config(FastAPI(), settings)

        assert config.host == "0.0.0.0"
        assert config.port == 9001
        assert config.timeout_graceful_shutdown == 60.0
        assert config.timeout_keep_alive == 30

    def test_default_grace_period(self):
        config = build_config(FastAPI(), make_settings())
        assert config.timeout_graceful_shutdown == 15.0


class TestSiteServerStates:
    """Tests for SiteServer signal handling without a socket."""

    def test_starts_in_starting_state(self):
        server = SiteServer(build_config(FastAPI(), make_settings()))
        assert server.state is LifecycleState.STARTING
        assert server.bound_port is None

    def test_interrupt_enters_draining(self):
        server = SiteServer(build_config(FastAPI(), make_settings()))
        server.state = LifecycleState.SERVING

        server.handle_exit(signal.SIGINT, None)

        assert server.state is LifecycleState.DRAINING
        assert server.should_exit is True
        assert server.force_exit is False

    def test_second_interrupt_forces_exit(self):
        server = SiteServer(build_config(FastAPI(), make_settings()))
        server.state = LifecycleState.SERVING

        server.handle_exit(signal.SIGINT, None)
        server.handle_exit(signal.SIGINT, None)

        assert server.state is LifecycleState.DRAINING
        assert server.force_exit is True

    def test_real_interrupt_enters_draining(self):
        server = SiteServer(build_config(FastAPI(), make_settings()))
        server.state = LifecycleState.SERVING
        sigint_before = signal.getsignal(signal.SIGINT)
        sigterm_before = signal.getsignal(signal.SIGTERM)

        with server.capture_signals():
            assert signal.getsignal(signal.SIGTERM) is sigterm_before
            signal.raise_signal(signal.SIGINT)

        assert server.state is LifecycleState.DRAINING
        assert server.should_exit is True
        assert signal.getsignal(signal.SIGINT) is sigint_before
        assert signal.getsignal(signal.SIGTERM) is sigterm_before

    def test_state_values(self):
        assert [s.value for s in LifecycleState] == ["starting", "serving", "draining", "stopped"]


class TestRunServer:
    """Tests for run_server exit status."""

    def test_exit_status_zero_after_drain(self, monkeypatch):
        monkeypatch.setattr(SiteServer, "run", lambda self, sockets=None: None)
        assert run_server(FastAPI(), make_settings()) == 0

    def test_exit_status_zero_after_forced_drain(self, monkeypatch):
        def forced_run(self, sockets=None):
            self.force_exit = True

        monkeypatch.setattr(SiteServer, "run", forced_run)
        assert run_server(FastAPI(), make_settings()) == 0


def slow_app(release: asyncio.Event) -> FastAPI:
    app = FastAPI()

    @app.get("/slow")
    async def slow():
        await release.wait()
        return {"done": True}

    @app.get("/fast")
    async def fast():
        return {"done": True}

    return app


async def wait_until_started(server: SiteServer, timeout: float = 5.0) -> None:
    deadline = time.monotonic() + timeout
    while not server.started:
        if time.monotonic() > deadline:
            raise AssertionError("server did not start")
        await asyncio.sleep(0.01)


@pytest.mark.integration
class TestGracefulDrain:
    """Drain behaviour against a real socket."""

    @pytest.mark.asyncio
    async def test_idle_server_stops_promptly(self):
        server = SiteServer(build_config(slow_app(asyncio.Event()), make_settings(PORT=0, GRACEFUL_TIMEOUT=5)))
        task = asyncio.create_task(server.serve())
        await wait_until_started(server)
        assert server.state is LifecycleState.SERVING

        server.handle_exit(signal.SIGINT, None)
        await asyncio.wait_for(task, timeout=3.0)

        assert server.state is LifecycleState.STOPPED

    @pytest.mark.asyncio
    async def test_drain_bounded_by_grace_period(self):
        grace = 1.0
        release = asyncio.Event()
        server = SiteServer(build_config(slow_app(release), make_settings(PORT=0, GRACEFUL_TIMEOUT=grace)))
        task = asyncio.create_task(server.serve())
        await wait_until_started(server)
        port = server.bound_port
        assert port

        reader, writer = await asyncio.open_connection("127.0.0.1", port)
        writer.write(b"GET /slow HTTP/1.1\r\nHost: localhost\r\n\r\n")
        await writer.drain()
        await asyncio.sleep(0.2)

        started = time.monotonic()
        server.handle_exit(signal.SIGINT, None)
        assert server.state is LifecycleState.DRAINING

        # Listener closes while the slow request is still in flight
        await asyncio.sleep(0.4)
        with pytest.raises(OSError):
            await asyncio.open_connection("127.0.0.1", port)

        await asyncio.wait_for(task, timeout=grace + 2.0)
        elapsed = time.monotonic() - started

        assert server.state is LifecycleState.STOPPED
        assert elapsed < grace + 1.0
        writer.close()

    @pytest.mark.asyncio
    async def test_in_flight_request_completes_within_grace(self):
        release = asyncio.Event()
        server = SiteServer(build_config(slow_app(release), make_settings(PORT=0, GRACEFUL_TIMEOUT=5)))
        task = asyncio.create_task(server.serve())
        await wait_until_started(server)

        reader, writer = await asyncio.open_connection("127.0.0.1", server.bound_port)
        writer.write(b"GET /slow HTTP/1.1\r\nHost: localhost\r\n\r\n")
        await writer.drain()
        await asyncio.sleep(0.2)

        server.handle_exit(signal.SIGINT, None)
        await asyncio.sleep(0.2)
        release.set()

        response = await asyncio.wait_for(reader.read(), timeout=3.0)
        await asyncio.wait_for(task, timeout=3.0)

        assert response.startswith(b"HTTP/1.1 200")
        assert b'{"done":true}' in response
        assert server.state is LifecycleState.STOPPED
        writer.close()

    @pytest.mark.asyncio
    async def test_logs_bound_port_once_listening(self):
        server = SiteServer(build_config(slow_app(asyncio.Event()), make_settings(PORT=0, GRACEFUL_TIMEOUT=5)))

        with patch("homepage.core.lifecycle.logger") as mock_logger:
            task = asyncio.create_task(server.serve())
            await wait_until_started(server)
            port = server.bound_port

            server.handle_exit(signal.SIGINT, None)
            await asyncio.wait_for(task, timeout=3.0)

        assert port
        messages = [c.args[0] for c in mock_logger.info.call_args_list if c.args]
        assert f"Listening at http://127.0.0.1:{port}" in messages
        assert "Listening at http://127.0.0.1:0" not in messages
