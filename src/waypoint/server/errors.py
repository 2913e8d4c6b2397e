"""Error handling pipeline for waypoint requests.

Maps HTTPError exceptions and unexpected failures to Response objects,
using registered error handlers, configured error pages, or plain
defaults, in that order.
"""

import inspect
import logging
from collections.abc import Callable, Mapping
from typing import Any

from kida import Environment

from waypoint.context import RequestContext
from waypoint.errors import HTTPError
from waypoint.http.response import Redirect, Response
from waypoint.server.negotiation import negotiate

logger = logging.getLogger("waypoint.server")

type ErrorHandlers = Mapping[int | type[Exception], Callable[..., Any]]


def call_error_handler(
    handler: Callable[..., Any],
    request: RequestContext,
    exc: Exception,
    kida_env: Environment | None,
) -> Response:
    """Invoke a user-registered error handler with introspected arguments.

    Error handlers may accept zero, one (request), or two (request, exc) args.
    """
    params = list(inspect.signature(handler).parameters.values())

    if len(params) >= 2:
        result = handler(request, exc)
    elif len(params) == 1:
        result = handler(request)
    else:
        result = handler()

    return negotiate(result, kida_env=kida_env)


def error_page_redirect(status: int, error_pages: Mapping[int, str], base_path: str) -> Response | None:
    """Redirect to the page configured for *status*, if there is one."""
    page = error_pages.get(status)
    if page is None:
        return None
    return negotiate(Redirect(base_path + page))


def handle_http_error(
    exc: HTTPError,
    request: RequestContext,
    error_handlers: ErrorHandlers,
    *,
    error_pages: Mapping[int, str],
    base_path: str,
    kida_env: Environment | None,
) -> Response:
    """Map an HTTPError to a Response."""
    logger.debug("%d %s %s — %s", exc.status, request.method, request.path, exc.detail)

    # Try exact exception type, then status code
    handler = error_handlers.get(type(exc)) or error_handlers.get(exc.status)
    if handler is not None:
        response = call_error_handler(handler, request, exc, kida_env)
        # Keep the error status unless the handler chose its own
        if response.status == 200:
            response = response.with_status(exc.status)
        return response

    redirect = error_page_redirect(exc.status, error_pages, base_path)
    if redirect is not None:
        return redirect

    resp = Response(body=exc.detail or f"Error {exc.status}", content_type="text/plain; charset=utf-8")
    resp = resp.with_status(exc.status)
    for name, value in exc.headers:
        resp = resp.with_header(name, value)
    return resp


def handle_internal_error(
    exc: Exception,
    request: RequestContext,
    error_handlers: ErrorHandlers,
    *,
    error_pages: Mapping[int, str],
    base_path: str,
    kida_env: Environment | None,
    debug: bool,
) -> Response:
    """Handle unexpected exceptions as 500 errors."""
    logger.exception("500 %s %s", request.method, request.path)

    handler = error_handlers.get(type(exc)) or error_handlers.get(500)
    if handler is not None:
        return call_error_handler(handler, request, exc, kida_env)

    redirect = error_page_redirect(500, error_pages, base_path)
    if redirect is not None:
        return redirect

    body = f"Internal Server Error: {exc!r}" if debug else "Internal Server Error"
    return Response(body=body, status=500, content_type="text/plain; charset=utf-8")
