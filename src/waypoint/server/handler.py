"""Request handler — runs one RequestContext through middleware and routing.

The only place where the router, middleware chain, handler call and
error mapping meet. Server adapters (WSGI, the test client) build a
RequestContext and call ``App.dispatch``, which lands here.
"""

import inspect
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from kida import Environment

from waypoint.context import AppContext, RequestContext
from waypoint.errors import HTTPError, NotFound
from waypoint.http.response import Response
from waypoint.middleware.protocol import Middleware, Next
from waypoint.routing.route import RouteMatch
from waypoint.routing.router import Router
from waypoint.server.errors import ErrorHandlers, handle_http_error, handle_internal_error
from waypoint.server.negotiation import negotiate


def handle_request(
    request: RequestContext,
    *,
    router: Router,
    middleware: tuple[Middleware, ...],
    prefix_middleware: tuple[tuple[str, Middleware], ...],
    error_handlers: ErrorHandlers,
    error_pages: Mapping[int, str],
    kida_env: Environment | None,
    debug: bool,
) -> Response:
    """Process a single request through the full pipeline."""
    try:

        def dispatch(req: RequestContext) -> Response:
            match = router.match(req.target, req.method)
            if match is None:
                raise NotFound(f"Cannot {req.method} {req.path}")

            def invoke(matched: RequestContext) -> Response:
                return _invoke_handler(match, matched, kida_env=kida_env)

            matched = req.with_match(match)
            scoped = (mw for prefix, mw in prefix_middleware if matched.path.startswith(prefix))
            return wrap_middleware(invoke, scoped)(matched)

        return wrap_middleware(dispatch, middleware)(request)

    except HTTPError as exc:
        return handle_http_error(
            exc,
            request,
            error_handlers,
            error_pages=error_pages,
            base_path=router.base_path,
            kida_env=kida_env,
        )
    except Exception as exc:
        return handle_internal_error(
            exc,
            request,
            error_handlers,
            error_pages=error_pages,
            base_path=router.base_path,
            kida_env=kida_env,
            debug=debug,
        )


def wrap_middleware(handler: Next, middleware: Iterable[Middleware]) -> Next:
    """Wrap *handler* so the first middleware runs outermost."""
    for mw in reversed(tuple(middleware)):

        def make_next(req: RequestContext, _mw: Middleware = mw, _next: Next = handler) -> Response:
            return _mw(req, _next)

        handler = make_next
    return handler


def _invoke_handler(
    match: RouteMatch,
    request: RequestContext,
    *,
    kida_env: Environment | None,
) -> Response:
    """Call the matched route target, converting path params and return value."""
    handler = match.target
    kwargs = _build_handler_kwargs(handler, request, request.params)
    return negotiate(handler(**kwargs), kida_env=kida_env)


def _build_handler_kwargs(
    handler: Callable[..., Any],
    request: RequestContext,
    path_params: Mapping[str, str],
) -> dict[str, Any]:
    """Inspect handler signature and build kwargs from request + path params.

    Resolution order:
    1. ``request`` parameter (by name or ``RequestContext`` annotation)
    2. ``app`` parameter (by name or ``AppContext`` annotation)
    3. Path parameters (by name, converted through the annotation if possible)

    Parameters for optional placeholders that did not match are left
    out, so their defaults apply.
    """
    sig = inspect.signature(handler, eval_str=True)
    kwargs: dict[str, Any] = {}

    for name, param in sig.parameters.items():
        if name == "request" or param.annotation is RequestContext:
            kwargs[name] = request
        elif name == "app" or param.annotation is AppContext:
            kwargs[name] = request.app
        elif name in path_params:
            value = path_params[name]
            if param.annotation is not inspect.Parameter.empty:
                try:
                    kwargs[name] = param.annotation(value)
                except (ValueError, TypeError):
                    kwargs[name] = value
            else:
                kwargs[name] = value

    return kwargs
