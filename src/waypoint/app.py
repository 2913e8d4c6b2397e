"""Waypoint application class.

Mutable during setup (route registration, middleware, modules, shared
values). Frozen on the first dispatch or an explicit ``freeze()``.
"""

import logging
import threading
from collections.abc import Callable, Iterable, Mapping
from types import MappingProxyType
from typing import Any

from kida import Environment

from waypoint.config import AppConfig
from waypoint.context import AppContext, RequestContext
from waypoint.errors import ConfigurationError
from waypoint.http.response import Redirect, Response
from waypoint.middleware.protocol import Middleware
from waypoint.modules import ModuleRegistry
from waypoint.routing.route import Route, RouteMatch
from waypoint.routing.router import Router
from waypoint.server.handler import handle_request
from waypoint.server.wsgi import to_wsgi
from waypoint.templating import create_environment

logger = logging.getLogger("waypoint.app")

# Route handler: any callable, arguments resolved from its signature
type Handler = Callable[..., Any]

# Error handler: takes (), (request) or (request, exc)
type ErrorHandler = Callable[..., Any]


class App:
    """The waypoint application.

    Usage::

        app = App(AppConfig(base_path="/blog"))

        @app.get("/posts/[i:page]?", name="posts")
        def posts(page: int = 1):
            return Template("posts.html", page=page)

        response = app.dispatch("GET", "/blog/posts/2")

    Thread safety:
        The setup phase is single-threaded (decorators at import time).
        The freeze transition uses a Lock + double-check so exactly one
        thread builds the runtime state, even when several server
        threads dispatch their first request at the same time.
    """

    __slots__ = (
        "_context",
        "_error_handlers",
        "_freeze_lock",
        "_frozen",
        "_kida_env",
        "_middleware",
        "_middleware_list",
        "_modules",
        "_prefix_middleware",
        "_prefix_middleware_list",
        "_router",
        "_shared",
        "config",
    )

    def __init__(self, config: AppConfig | None = None) -> None:
        self.config: AppConfig = config or AppConfig()
        self._router = Router(
            base_path=self.config.base_path,
            match_types=self.config.match_types,
            strict_methods=self.config.strict_methods,
        )
        self._modules = ModuleRegistry()
        self._shared: dict[str, Any] = {}
        self._middleware_list: list[Middleware] = []
        self._prefix_middleware_list: list[tuple[str, Middleware]] = []
        self._error_handlers: dict[int | type[Exception], ErrorHandler] = {}
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()

        # Runtime state, set by _freeze()
        self._context: AppContext | None = None
        self._middleware: tuple[Middleware, ...] = ()
        self._prefix_middleware: tuple[tuple[str, Middleware], ...] = ()
        self._kida_env: Environment | None = None

    # -- Route registration --

    def map(
        self,
        methods: str | Iterable[str],
        pattern: str,
        handler: Handler,
        name: str | None = None,
    ) -> Route:
        """Register *handler* for *methods* on *pattern*.

        *methods* is a pipe-separated string (``"GET|POST"``) or an
        iterable of verbs. Raises ``DuplicateRouteNameError`` if *name*
        is taken.
        """
        self._check_not_frozen()
        if not isinstance(methods, str):
            methods = "|".join(methods)
        return self._router.add_route(methods, pattern, handler, name)

    def route(
        self,
        pattern: str,
        *,
        methods: str | Iterable[str] = "GET",
        name: str | None = None,
    ) -> Callable[[Handler], Handler]:
        """Register a route handler via decorator.

        Args:
            pattern: Route pattern. Use ``[type:name]`` for parameters.
            methods: HTTP methods. Defaults to ``"GET"``.
            name: Optional route name for ``url_for``.
        """

        def decorator(func: Handler) -> Handler:
            self.map(methods, pattern, func, name)
            return func

        return decorator

    def get(self, pattern: str, *, name: str | None = None) -> Callable[[Handler], Handler]:
        """Register a GET handler. Unnamed routes are named ``"<pattern>-GET"``."""
        return self._verb("GET", pattern, name)

    def post(self, pattern: str, *, name: str | None = None) -> Callable[[Handler], Handler]:
        """Register a POST handler. Unnamed routes are named ``"<pattern>-POST"``."""
        return self._verb("POST", pattern, name)

    def put(self, pattern: str, *, name: str | None = None) -> Callable[[Handler], Handler]:
        """Register a PUT handler. Unnamed routes are named ``"<pattern>-PUT"``."""
        return self._verb("PUT", pattern, name)

    def patch(self, pattern: str, *, name: str | None = None) -> Callable[[Handler], Handler]:
        """Register a PATCH handler. Unnamed routes are named ``"<pattern>-PATCH"``."""
        return self._verb("PATCH", pattern, name)

    def delete(self, pattern: str, *, name: str | None = None) -> Callable[[Handler], Handler]:
        """Register a DELETE handler. Unnamed routes are named ``"<pattern>-DELETE"``."""
        return self._verb("DELETE", pattern, name)

    def _verb(self, method: str, pattern: str, name: str | None) -> Callable[[Handler], Handler]:
        return self.route(pattern, methods=method, name=name or f"{pattern}-{method}")

    def register_match_types(self, match_types: Mapping[str, str]) -> None:
        """Add or override placeholder types (alias -> regex fragment)."""
        self._check_not_frozen()
        self._router.register_match_types(match_types)

    # -- Middleware --

    def add_middleware(self, middleware: Middleware, *, prefix: str | None = None) -> None:
        """Add middleware to the pipeline.

        Without *prefix* the middleware wraps every request, including
        ones that match no route. With *prefix* it wraps only the handler
        of matched requests whose path starts with *prefix*. Middleware
        runs in registration order.
        """
        self._check_not_frozen()
        if prefix is None:
            self._middleware_list.append(middleware)
        else:
            self._prefix_middleware_list.append((prefix, middleware))

    # -- Error handlers --

    def error(self, code_or_exception: int | type[Exception]) -> Callable[[ErrorHandler], ErrorHandler]:
        """Register an error handler for a status code or exception type.

        Handlers may take no arguments, ``(request)`` or ``(request, exc)``.
        A registered handler takes precedence over ``AppConfig.error_pages``.
        """

        def decorator(func: ErrorHandler) -> ErrorHandler:
            self._check_not_frozen()
            self._error_handlers[code_or_exception] = func
            return func

        return decorator

    # -- Modules and shared values --

    def register_module(self, name: str, instance: Any) -> None:
        """Attach a module instance under *name*."""
        self._modules.register(name, instance)

    def get_module(self, name: str) -> Any:
        """Return the module registered as *name*, or ``None``."""
        return self._modules.get(name)

    def set_global(self, name: str, value: Any) -> None:
        """Share *value* with every handler (``AppContext``) and template."""
        self._check_not_frozen()
        self._shared[name] = value

    # -- URLs --

    def url_for(self, name: str, /, **params: Any) -> str:
        """Generate the URL of a named route, base path included."""
        return self._router.resolve(name, params)

    def asset_url(self, path: str) -> str:
        """URL of a static file under ``AppConfig.static_url``."""
        return f"{self.config.base_path}{self.config.static_url.rstrip('/')}/{path.lstrip('/')}"

    def redirect(self, path: str, *, status: int = 302) -> Redirect:
        """Redirect to an app-relative *path*, base path included.

        ``Redirect(url)`` sends *url* unchanged; use this (or ``url_for``)
        for paths inside the app::

            @app.post("/logout")
            def logout():
                return app.redirect("/login")
        """
        return Redirect(self.config.base_path + path, status=status)

    # -- Introspection --

    @property
    def router(self) -> Router:
        return self._router

    @property
    def routes(self) -> tuple[Route, ...]:
        return self._router.routes

    @property
    def context(self) -> AppContext:
        """The frozen application context. Freezes the app if needed."""
        self._ensure_frozen()
        assert self._context is not None
        return self._context

    def match(self, path: str, method: str = "GET") -> RouteMatch | None:
        """Match without dispatching. Useful for debugging route tables."""
        return self._router.match(path, method)

    # -- Dispatch --

    def dispatch(
        self,
        method: str,
        target: str,
        *,
        headers: Mapping[str, str] | None = None,
        body: bytes = b"",
    ) -> Response:
        """Handle one request and return its Response.

        *target* is the request path as received, base path and query
        string included. Called exactly once per inbound request by the
        hosting adapter.
        """
        self._ensure_frozen()
        request = RequestContext.build(
            method,
            target,
            base_path=self.config.base_path,
            headers=headers,
            body=body,
            app=self._context,
        )
        response = handle_request(
            request,
            router=self._router,
            middleware=self._middleware,
            prefix_middleware=self._prefix_middleware,
            error_handlers=self._error_handlers,
            error_pages=self.config.error_pages,
            kida_env=self._kida_env,
            debug=self.config.debug,
        )
        logger.debug("%s %s -> %d", request.method, target, response.status)
        return response

    def __call__(self, environ: dict[str, Any], start_response: Callable[..., Any]) -> Iterable[bytes]:
        """WSGI entry point."""
        return to_wsgi(self)(environ, start_response)

    def freeze(self) -> None:
        """Finish setup explicitly. Further registration raises."""
        self._ensure_frozen()

    # -- Internal --

    def _ensure_frozen(self) -> None:
        """Thread-safe freeze with double-check locking."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Build the runtime state.

        MUST only be called while holding _freeze_lock.
        """
        self._router.freeze()
        self._modules.freeze()

        shared = MappingProxyType(dict(self._shared))
        self._context = AppContext(config=self.config, shared=shared, modules=self._modules)
        self._middleware = tuple(self._middleware_list)
        self._prefix_middleware = tuple(self._prefix_middleware_list)

        template_globals = {
            "url_for": self.url_for,
            "asset_url": self.asset_url,
            **shared,
        }
        self._kida_env = create_environment(self.config, template_globals)

        self._frozen = True
        logger.debug(
            "App frozen: %d routes, %d middleware, %d modules",
            len(self._router.routes),
            len(self._middleware) + len(self._prefix_middleware),
            len(self._modules),
        )

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has started handling requests. "
                "Register routes, middleware and modules before the first dispatch."
            )
            raise ConfigurationError(msg)
