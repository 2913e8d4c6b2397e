"""Response values produced by handlers, middleware and the error pipeline.

``Response`` is immutable; every ``with_*`` call returns a modified
copy, so middleware can decorate a response without side effects::

    response = next(request).with_header("X-Route", request.route_name or "")
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace

type HeaderPairs = tuple[tuple[str, str], ...]


@dataclass(frozen=True, slots=True)
class Response:
    """Status, content type, extra headers and a ``str`` or ``bytes`` body."""

    body: str | bytes = ""
    status: int = 200
    content_type: str = "text/html; charset=utf-8"
    headers: HeaderPairs = ()

    def with_status(self, status: int) -> Response:
        return replace(self, status=status)

    def with_content_type(self, content_type: str) -> Response:
        return replace(self, content_type=content_type)

    def with_header(self, name: str, value: str) -> Response:
        """Copy with one more header; earlier values for *name* are kept."""
        return self.with_headers(((name, value),))

    def with_headers(self, headers: Mapping[str, str] | Iterable[tuple[str, str]]) -> Response:
        """Copy with *headers* appended after the existing ones."""
        pairs = headers.items() if isinstance(headers, Mapping) else headers
        return replace(self, headers=self.headers + tuple(pairs))

    def header(self, name: str, default: str | None = None) -> str | None:
        """First value of header *name*, compared case-insensitively."""
        wanted = name.lower()
        return next((value for key, value in self.headers if key.lower() == wanted), default)

    @property
    def body_bytes(self) -> bytes:
        """Body encoded as UTF-8, ready for the WSGI layer."""
        return self.body.encode("utf-8") if isinstance(self.body, str) else self.body

    @property
    def text(self) -> str:
        return self.body.decode("utf-8") if isinstance(self.body, bytes) else self.body


@dataclass(frozen=True, slots=True)
class Redirect:
    """Send the client to *url*, exactly as given.

    Turned into a ``Location`` response by negotiation. For paths inside
    an app mounted under a base path, use ``App.redirect`` or ``url_for``.
    """

    url: str
    status: int = 302
    headers: HeaderPairs = ()
