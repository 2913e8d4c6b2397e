"""WSGI adapter — hosts an App behind any WSGI server.

Translates ``environ`` into the arguments of ``App.dispatch`` and the
returned Response into ``start_response`` + body. ``SCRIPT_NAME`` is
kept in the request target, so ``AppConfig.base_path`` should match
the mount point.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from http import HTTPStatus
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from waypoint.app import App

type StartResponse = Callable[[str, list[tuple[str, str]]], Any]
type WSGIApp = Callable[[dict[str, Any], StartResponse], Iterable[bytes]]


def to_wsgi(app: App) -> WSGIApp:
    """Return a WSGI callable that dispatches into *app*."""

    def wsgi_app(environ: dict[str, Any], start_response: StartResponse) -> Iterable[bytes]:
        method = environ.get("REQUEST_METHOD", "GET")
        target = _decode(environ.get("SCRIPT_NAME", "") + environ.get("PATH_INFO", "/"))
        if query := environ.get("QUERY_STRING"):
            target = f"{target}?{query}"

        response = app.dispatch(
            method,
            target,
            headers=_headers(environ),
            body=_read_body(environ),
        )

        body = response.body_bytes
        headers = [
            ("Content-Type", response.content_type),
            ("Content-Length", str(len(body))),
            *response.headers,
        ]
        start_response(status_line(response.status), headers)
        return [body]

    return wsgi_app


def status_line(status: int) -> str:
    """``200`` -> ``"200 OK"``."""
    try:
        phrase = HTTPStatus(status).phrase
    except ValueError:
        phrase = ""
    return f"{status} {phrase}".rstrip()


def _decode(path: str) -> str:
    # PEP 3333 hands the path over as latin-1 decoded bytes
    return path.encode("latin-1").decode("utf-8", "replace")


def _headers(environ: dict[str, Any]) -> dict[str, str]:
    headers = {
        key[5:].replace("_", "-").lower(): value
        for key, value in environ.items()
        if key.startswith("HTTP_")
    }
    for key in ("CONTENT_TYPE", "CONTENT_LENGTH"):
        if environ.get(key):
            headers[key.replace("_", "-").lower()] = environ[key]
    return headers


def _read_body(environ: dict[str, Any]) -> bytes:
    try:
        length = int(environ.get("CONTENT_LENGTH") or 0)
    except ValueError:
        length = 0
    if length <= 0:
        return b""
    return environ["wsgi.input"].read(length)
