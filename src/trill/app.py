"""The trill application.

An ``App`` collects routes, formats, error handlers and middleware while
the module defining it is imported. The first request (or ``run()``, or
ASGI lifespan startup) compiles that into a router, a format resolver
and an error page presenter; from then on nothing can be registered.
"""

import inspect
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, overload

from jinja2 import Environment

from trill._internal.asgi import Receive, Scope, Send
from trill._internal.types import ErrorHandler, Handler
from trill.config import AppConfig
from trill.errors import ConfigurationError, UnknownCharset
from trill.middleware.protocol import Middleware
from trill.middleware.static import StaticFiles
from trill.mime import Format, MimeRegistry, default_registry
from trill.negotiation.content_type import check_charset
from trill.negotiation.context import NegotiationSettings
from trill.negotiation.resolver import FormatResolver
from trill.routing.route import Route
from trill.routing.router import Router
from trill.server.error_pages import ErrorPagePresenter
from trill.server.handler import handle_request
from trill.templating.integration import create_environment

logger = logging.getLogger("trill.server")


@dataclass(slots=True)
class _Registrations:
    """Everything registered before the app compiles."""

    routes: list[Route] = field(default_factory=list)
    middleware: list[Middleware] = field(default_factory=list)
    error_handlers: dict[int | type, ErrorHandler] = field(default_factory=dict)
    providers: dict[type, Callable[..., Any]] = field(default_factory=dict)
    template_filters: dict[str, Callable[..., Any]] = field(default_factory=dict)
    template_globals: dict[str, Any] = field(default_factory=dict)
    startup: list[Callable[..., Any]] = field(default_factory=list)
    shutdown: list[Callable[..., Any]] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class _Compiled:
    """The runtime state built by ``App._freeze``."""

    router: Router
    resolver: FormatResolver
    presenter: ErrorPagePresenter
    middleware: tuple[Callable[..., Any], ...]
    env: Environment


class App:
    """A content-negotiating ASGI application.

    Each app owns a mime registry, pre-populated with the common web
    formats; ``app.mime_type("ics", "text/calendar")`` adds more before
    the first request. Compilation happens once, under a lock, even when
    several workers hit ``__call__`` at the same moment.
    """

    __slots__ = ("_compiled", "_freeze_lock", "_registry", "_setup", "config")

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        registry: MimeRegistry | None = None,
    ) -> None:
        self.config: AppConfig = config or AppConfig()
        self._registry = registry.copy() if registry is not None else default_registry()
        self._setup = _Registrations()
        self._compiled: _Compiled | None = None
        self._freeze_lock = threading.Lock()

    # -- Registration --

    def route(
        self,
        path: str,
        *,
        methods: list[str] | None = None,
        name: str | None = None,
    ) -> Callable[[Handler], Handler]:
        """Register a handler for *path* (``{param}`` / ``{param:int}`` captures).

        Leave the format extension off: ``/resource`` answers
        ``/resource.xml`` with the ``xml`` format resolved. Methods
        default to GET, which also answers HEAD.
        """
        allowed = frozenset(m.upper() for m in (methods or ["GET"]))

        def decorator(func: Handler) -> Handler:
            self._check_not_frozen()
            self._setup.routes.append(Route(path=path, handler=func, methods=allowed, name=name))
            return func

        return decorator

    @overload
    def mime_type(self, format: Format) -> str: ...

    @overload
    def mime_type(self, format: Format, mime: str) -> None: ...

    def mime_type(self, format: Format, mime: str | None = None) -> str | None:
        """Look up (one argument) or register (two arguments) a format.

        Lookup of an unregistered format raises ``UnknownFormat``.
        """
        if mime is None:
            return self._registry.lookup(format)
        self._check_not_frozen()
        self._registry.register(format, mime)
        return None

    @property
    def registry(self) -> MimeRegistry:
        return self._registry

    @property
    def resolver(self) -> FormatResolver:
        """The compiled format resolver. Compiles the app."""
        return self._ensure_frozen().resolver

    def provide(self, annotation: type, factory: Callable[..., Any]) -> None:
        """Inject ``factory()`` into handler parameters annotated with *annotation*."""
        self._check_not_frozen()
        self._setup.providers[annotation] = factory

    def error(
        self,
        code_or_exception: int | type[Exception],
    ) -> Callable[[ErrorHandler], ErrorHandler]:
        """Register an error handler for a status code or exception class.

        ``@app.error(UnhandledFormat)`` and ``@app.error(MissingTemplate)``
        replace the built-in negotiation error pages.
        """

        def decorator(func: ErrorHandler) -> ErrorHandler:
            self._check_not_frozen()
            self._setup.error_handlers[code_or_exception] = func
            return func

        return decorator

    def add_middleware(self, middleware: Middleware) -> None:
        """Append *middleware*; it runs after static files, in registration order."""
        self._check_not_frozen()
        self._setup.middleware.append(middleware)

    def template_filter(
        self,
        name: str | None = None,
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Register a Jinja2 filter, named after the function unless *name* is given."""
        return self._template_registrar(self._setup.template_filters, name)

    def template_global(
        self,
        name: str | None = None,
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Register a Jinja2 global, named after the function unless *name* is given."""
        return self._template_registrar(self._setup.template_globals, name)

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Run *func* (sync or async) at lifespan startup, before any request."""
        self._check_not_frozen()
        self._setup.startup.append(func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Run *func* (sync or async) at lifespan shutdown."""
        self._check_not_frozen()
        self._setup.shutdown.append(func)
        return func

    # -- Serving --

    def run(
        self,
        host: str | None = None,
        port: int | None = None,
        *,
        app_path: str | None = None,
    ) -> None:
        """Compile the app and serve it with uvicorn.

        *app_path* (``"module:attribute"``) turns on auto-reload in debug mode.
        """
        self._ensure_frozen()

        from trill.server.runner import run_server

        run_server(
            self,
            host or self.config.host,
            port or self.config.port,
            log_level=self.config.log_level,
            app_path=app_path,
        )

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._lifespan(receive, send)
            return

        compiled = self._ensure_frozen()
        await handle_request(
            scope,
            receive,
            send,
            router=compiled.router,
            resolver=compiled.resolver,
            presenter=compiled.presenter,
            middleware=compiled.middleware,
            error_handlers=self._setup.error_handlers,
            env=compiled.env,
            debug=self.config.debug,
            diagnostics_prefix=self.config.diagnostics_prefix,
            providers=self._setup.providers or None,
        )

    async def run_hooks(self, phase: str) -> None:
        """Run the ``"startup"`` or ``"shutdown"`` hooks in registration order."""
        hooks = self._setup.startup if phase == "startup" else self._setup.shutdown
        for hook in hooks:
            result = hook()
            if inspect.isawaitable(result):
                await result

    async def _lifespan(self, receive: Receive, send: Send) -> None:
        self._ensure_frozen()
        while True:
            message = await receive()
            if message["type"] == "lifespan.startup":
                try:
                    await self.run_hooks("startup")
                except Exception as exc:
                    logger.exception("Startup hook failed")
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})
            elif message["type"] == "lifespan.shutdown":
                await self.run_hooks("shutdown")
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Compilation --

    def _ensure_frozen(self) -> _Compiled:
        """Compile once; double-checked so concurrent first requests agree."""
        compiled = self._compiled
        if compiled is not None:
            return compiled
        with self._freeze_lock:
            if self._compiled is None:
                self._compiled = self._freeze()
            return self._compiled

    @property
    def _frozen(self) -> bool:
        return self._compiled is not None

    def _freeze(self) -> _Compiled:
        """Build the runtime state. Called only while holding ``_freeze_lock``."""
        self._validate_config()
        config = self.config

        router = Router()
        for route in self._setup.routes:
            router.add(route)
        router.compile()

        middleware: list[Middleware] = []
        if config.static:
            middleware.append(StaticFiles(config.public_dir, cache_control=config.static_cache_control))
        middleware.extend(self._setup.middleware)

        compiled = _Compiled(
            router=router,
            # Literal routes such as /style.css keep their extension
            resolver=FormatResolver(
                self._registry,
                NegotiationSettings.from_config(config),
                literal_route=router.has_static_route,
            ),
            presenter=ErrorPagePresenter(
                debug=config.debug,
                diagnostics_prefix=config.diagnostics_prefix,
            ),
            middleware=tuple(middleware),
            env=create_environment(
                config,
                self._setup.template_filters,
                self._setup.template_globals,
            ),
        )
        logger.debug(
            "App compiled: %d routes, %d formats, default %s, static=%s",
            len(router.routes),
            len(self._registry),
            config.default_content,
            config.static,
        )
        return compiled

    def _validate_config(self) -> None:
        config = self.config
        if config.default_content not in self._registry:
            msg = (
                f"default_content {config.default_content!r} is not a registered format. "
                f"Register it with app.mime_type() first."
            )
            raise ConfigurationError(msg)
        if config.default_charset:
            try:
                check_charset(config.default_charset)
            except UnknownCharset as exc:
                msg = f"default_charset {config.default_charset!r} has no codec"
                raise ConfigurationError(msg) from exc
        if not config.diagnostics_prefix.startswith("/"):
            msg = f"diagnostics_prefix must start with '/', got {config.diagnostics_prefix!r}"
            raise ConfigurationError(msg)

    def _template_registrar(
        self,
        target: dict[str, Any],
        name: str | None,
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            self._check_not_frozen()
            target[name or func.__name__] = func
            return func

        return decorator

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has started serving requests. "
                "Register routes, formats, middleware, and filters before the first request."
            )
            raise RuntimeError(msg)
