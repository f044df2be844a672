"""Application bootstrap for podwatch.

Wires all components in dependency order and manages the asyncio lifecycle.
Startup order: config → logging → cluster client → registry/store → poller
              → executor → broadcaster → facade → scheduler → REST

Shutdown is fully graceful: components are stopped in reverse startup order.
Each step's error is caught and logged independently so that a single
failure does not prevent the rest from shutting down cleanly.
"""

from __future__ import annotations

import asyncio
import signal
from typing import TYPE_CHECKING

from podwatch.actions.executor import ActionExecutor
from podwatch.api.facade import QueryFacade
from podwatch.broadcast.broadcaster import Broadcaster
from podwatch.cluster.base import ClusterClient
from podwatch.cluster.kube import KubernetesClusterClient
from podwatch.config import load_config
from podwatch.models.config import PodwatchConfig
from podwatch.observability.logging import get_logger, setup_logging
from podwatch.poller.poller import Poller
from podwatch.scheduler import Scheduler
from podwatch.state.registry import NamespaceRegistry
from podwatch.state.store import StateStore

if TYPE_CHECKING:
    import structlog

_SHUTDOWN_GRACE_SECONDS = 15


class _ComponentError(Exception):
    """Raised when a mandatory component fails to start."""

    def __init__(self, component: str, cause: Exception) -> None:
        super().__init__(f"Component '{component}' failed to start: {cause}")
        self.component = component
        self.cause = cause


class PodwatchApp:
    """Application root.  Owns every component and coordinates their lifecycle.

    ``stop()`` is safe to call on an app that was never started (or already
    stopped). Tests may pass a ready-made *config* and *cluster* and disable
    the REST server with ``serve_api=False``.
    """

    def __init__(
        self,
        config: PodwatchConfig | None = None,
        cluster: ClusterClient | None = None,
        serve_api: bool = True,
    ) -> None:
        self.config = config
        self.cluster = cluster
        self._serve_api = serve_api

        self.registry: NamespaceRegistry | None = None
        self.store: StateStore | None = None
        self.poller: Poller | None = None
        self.executor: ActionExecutor | None = None
        self.broadcaster: Broadcaster | None = None
        self.facade: QueryFacade | None = None
        self.scheduler: Scheduler | None = None

        self._rest_server: object | None = None
        self._rest_task: asyncio.Task[None] | None = None

        self._running = False
        self._log: structlog.stdlib.BoundLogger | None = None

    @property
    def running(self) -> bool:
        return self._running

    # ------------------------------------------------------------------
    # Startup
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Start all components in dependency order.

        Raises _ComponentError if a mandatory component cannot start.
        An unreachable cluster is not fatal: the poller keeps retrying.
        """
        # --- 1. Configuration -------------------------------------------
        if self.config is None:
            self.config = load_config()

        # --- 2. Logging -------------------------------------------------
        setup_logging(self.config.log.level)
        self._log = get_logger("app")
        self._log.info("podwatch starting", version=_podwatch_version())

        # --- 3. Cluster client ------------------------------------------
        await self._start_cluster()

        # --- 4. State ---------------------------------------------------
        self.registry = NamespaceRegistry(self.config.monitor.namespaces)
        self.store = StateStore()
        self._log.info("monitoring namespaces", namespaces=self.registry.names())

        # --- 5. Poller (one immediate cycle) -----------------------------
        await self._start_poller()

        # --- 6. Action executor, broadcaster, facade ---------------------
        assert self.cluster is not None
        self.executor = ActionExecutor(
            self.cluster,
            self.store,
            restore_annotation=self.config.cluster.restore_annotation,
        )
        self.broadcaster = Broadcaster(self.store, self.registry, self.cluster)
        self.facade = QueryFacade(self.store, self.registry, self.cluster, self.executor, self.broadcaster)

        # --- 7. Scheduler -----------------------------------------------
        self._start_scheduler()

        # --- 8. REST API ------------------------------------------------
        if self._serve_api:
            await self._start_rest()

        self._running = True
        self._log.info("podwatch started", port=self.config.api.port)

    # ------------------------------------------------------------------
    # Component startup helpers
    # ------------------------------------------------------------------

    async def _start_cluster(self) -> None:
        assert self._log is not None
        assert self.config is not None
        self._log.debug("starting cluster client")
        if self.cluster is None:
            self.cluster = KubernetesClusterClient(
                kubeconfig=self.config.cluster.kubeconfig,
                request_timeout=self.config.cluster.request_timeout,
            )
        connected = await self.cluster.connect()
        if not connected:
            self._log.warning("cluster unreachable at startup; retrying on next poll cycle")

    async def _start_poller(self) -> None:
        assert self._log is not None
        assert self.cluster is not None
        assert self.registry is not None
        assert self.store is not None
        self.poller = Poller(self.cluster, self.registry, self.store)
        if self.cluster.connected:
            try:
                await self.poller.tick()
            except Exception as exc:
                self._log.warning("initial poll cycle failed", error=str(exc))

    def _start_scheduler(self) -> None:
        assert self._log is not None
        assert self.config is not None
        assert self.poller is not None
        assert self.broadcaster is not None
        scheduler = Scheduler()
        scheduler.every("poller", self.config.monitor.poll_interval, self.poller.tick)
        scheduler.every("broadcaster", self.config.monitor.broadcast_interval, self.broadcaster.tick)
        scheduler.start()
        self.scheduler = scheduler

    async def _start_rest(self) -> None:
        """Start the uvicorn REST server."""
        assert self._log is not None
        assert self.config is not None
        assert self.facade is not None
        assert self.broadcaster is not None
        self._log.debug("starting rest api")
        try:
            import uvicorn

            from podwatch.api import build_app

            fastapi_app = build_app(facade=self.facade, broadcaster=self.broadcaster, config=self.config)
            uv_config = uvicorn.Config(
                app=fastapi_app,
                host=self.config.api.host,
                port=self.config.api.port,
                log_config=None,  # structlog handles all logging
                access_log=False,
            )
            server = uvicorn.Server(uv_config)
            self._rest_task = asyncio.create_task(server.serve(), name="rest-server")
            self._rest_server = server
            self._log.info("rest api started", host=self.config.api.host, port=self.config.api.port)
        except Exception as exc:
            raise _ComponentError("rest", exc) from exc

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    async def stop(self) -> None:
        """Gracefully stop all components in reverse startup order."""
        if not self._running and self._log is None:
            return

        log = self._log or get_logger("app")
        log.info("podwatch shutting down")
        self._running = False

        if self._rest_server is not None:
            self._rest_server.should_exit = True  # type: ignore[attr-defined]
        if self._rest_task is not None:
            try:
                await asyncio.wait_for(self._rest_task, timeout=_SHUTDOWN_GRACE_SECONDS)
            except TimeoutError:
                log.warning("rest server stop timed out", timeout=_SHUTDOWN_GRACE_SECONDS)
                self._rest_task.cancel()
            except Exception as exc:
                log.error("rest server stop raised an error", error=str(exc))
            self._rest_task = None
            self._rest_server = None

        if self.scheduler is not None:
            try:
                await self.scheduler.stop()
            except Exception as exc:
                log.error("scheduler stop raised an error", error=str(exc))
            self.scheduler = None

        if self.cluster is not None:
            try:
                await self.cluster.close()
            except Exception as exc:
                log.debug("cluster client close raised (non-fatal)", error=str(exc))

        log.info("podwatch stopped")


def _podwatch_version() -> str:
    from podwatch import __version__

    return __version__


# ---------------------------------------------------------------------------
# Async entrypoint
# ---------------------------------------------------------------------------


async def main(config: PodwatchConfig | None = None) -> None:
    """Create the app, register OS signals, run until shutdown is requested."""
    app = PodwatchApp(config=config)
    loop = asyncio.get_running_loop()

    shutdown_triggered = False

    def _request_shutdown() -> None:
        nonlocal shutdown_triggered
        if shutdown_triggered:
            return
        shutdown_triggered = True
        asyncio.create_task(app.stop(), name="shutdown")

    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, _request_shutdown)

    try:
        await app.start()
        while app.running:
            await asyncio.sleep(1)
    except _ComponentError as exc:
        log = get_logger("app")
        log.critical(
            "fatal startup error",
            component=exc.component,
            error=str(exc.cause),
        )
        await app.stop()
        raise SystemExit(1) from exc
    finally:
        if app.running:
            await app.stop()
