"""The application object: route table, lifecycle hooks, ASGI entry.

Routes go straight into a ``Router`` as they are registered, so pattern
and target mistakes surface at import time. The first request, lifespan
event or ``run()`` compiles the router; after that the app is read-only.
"""

import threading
from collections.abc import Callable
from typing import Any

from bodyrest._internal.asgi import Receive, Scope, Send
from bodyrest._internal.invoke import invoke
from bodyrest._internal.types import ErrorRenderer, RawHandler, TargetHandler
from bodyrest.config import AppConfig
from bodyrest.dispatch import handle_to
from bodyrest.errors import ConfigurationError
from bodyrest.routing.route import Route
from bodyrest.routing.router import Router
from bodyrest.server.handler import handle_request

type Hook = Callable[[], Any]


def _method_set(methods: list[str] | None) -> frozenset[str]:
    return frozenset(m.upper() for m in methods) if methods else frozenset({"GET"})


class App:
    """A bodyrest application.

    ``route()`` wraps a target handler with ``handle_to()`` on the spot,
    using the app's config and error renderer; ``handle()`` mounts a raw
    ``(writer, request)`` handler as is::

        app = App(error_renderer=render_problem)

        @app.route("/users/{user_id}", methods=["PUT"])
        def update_user(user_id: int, patch: UserPatch) -> RawHandler:
            ...

    Registration is meant for import time. Freezing takes a lock so only
    one thread compiles the router when several requests race in.
    """

    __slots__ = (
        "_error_renderer",
        "_freeze_lock",
        "_frozen",
        "_router",
        "_shutdown_hooks",
        "_startup_hooks",
        "config",
    )

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        error_renderer: ErrorRenderer | None = None,
    ) -> None:
        self.config: AppConfig = config or AppConfig()
        self._error_renderer = error_renderer
        self._router = Router()
        self._startup_hooks: list[Hook] = []
        self._shutdown_hooks: list[Hook] = []
        self._frozen = False
        self._freeze_lock = threading.Lock()

    def route(
        self,
        path: str,
        *,
        methods: list[str] | None = None,
        name: str | None = None,
    ) -> Callable[[TargetHandler], TargetHandler]:
        """Decorator registering a target handler under *path*.

        Scalar parameters of the target bind the ``{...}`` segments of
        *path* left to right. *methods* defaults to ``["GET"]``.

        Raises:
            ConfigurationError: Bad pattern, or the function is not a
                valid target handler.
        """

        def decorator(func: TargetHandler) -> TargetHandler:
            raw = handle_to(func, config=self.config, error_renderer=self._error_renderer)
            self._add(Route(path, raw, _method_set(methods), name=name, target=func))
            return func

        return decorator

    def handle(
        self,
        path: str,
        handler: RawHandler,
        *,
        methods: list[str] | None = None,
        name: str | None = None,
    ) -> None:
        """Mount a raw handler; no binding happens for it."""
        if not callable(handler):
            msg = f"Handler is not a function: {handler!r}"
            raise ConfigurationError(msg)
        self._add(Route(path, handler, _method_set(methods), name=name))

    def _add(self, route: Route) -> None:
        self._check_not_frozen()
        self._router.add(route)

    @property
    def routes(self) -> list[Route]:
        """Registered routes in order. Reading them freezes the app."""
        self._ensure_frozen()
        return self._router.routes

    def on_startup(self, func: Hook) -> Hook:
        """Run *func* (sync or async) on lifespan startup."""
        self._check_not_frozen()
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Hook) -> Hook:
        """Run *func* (sync or async) on lifespan shutdown."""
        self._check_not_frozen()
        self._shutdown_hooks.append(func)
        return func

    async def startup(self) -> None:
        """Freeze the app and run the startup hooks in registration order."""
        self._ensure_frozen()
        for hook in self._startup_hooks:
            await invoke(hook)

    async def shutdown(self) -> None:
        for hook in self._shutdown_hooks:
            await invoke(hook)

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Serve the app with uvicorn until interrupted."""
        self._ensure_frozen()

        from bodyrest.server.serve import run_server

        run_server(
            self,
            host or self.config.host,
            port or self.config.port,
            log_level="debug" if self.config.debug else self.config.log_level,
        )

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        kind = scope["type"]
        if kind == "lifespan":
            await self._lifespan(receive, send)
        elif kind == "http":
            self._ensure_frozen()
            await handle_request(
                scope,
                receive,
                send,
                router=self._router,
                error_renderer=self._error_renderer,
            )

    async def _lifespan(self, receive: Receive, send: Send) -> None:
        while True:
            message = await receive()
            if message["type"] == "lifespan.startup":
                try:
                    await self.startup()
                except Exception as exc:
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})
            elif message["type"] == "lifespan.shutdown":
                await self.shutdown()
                await send({"type": "lifespan.shutdown.complete"})
                return

    def _ensure_frozen(self) -> None:
        if self._frozen:
            return
        with self._freeze_lock:
            if not self._frozen:
                self._router.compile()
                self._frozen = True

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has started serving requests. "
                "Register routes and hooks before calling app.run()."
            )
            raise RuntimeError(msg)
