"""Turn whatever a handler returns into a ``Response``."""

import json as json_module
from typing import Any

from kida import Environment

from waypoint.errors import ConfigurationError
from waypoint.http.response import Redirect, Response
from waypoint.templating import InlineTemplate, Template, render_inline, render_template

JSON_CONTENT_TYPE = "application/json; charset=utf-8"


def negotiate(value: Any, *, kida_env: Environment | None = None) -> Response:
    """Map a handler return value to a Response.

    ==========================  ==========================================
    ``Response``                returned unchanged
    ``Redirect``                its status, ``Location`` and headers
    ``Template``                rendered from the template directory
    ``InlineTemplate``          rendered from its source string
    ``None``                    204, empty body
    ``str``                     200, text/html
    ``bytes``                   200, application/octet-stream
    ``dict`` / ``list``         200, JSON
    ``(value, status)``         *value* negotiated, status replaced
    ``(value, status, dict)``   same, plus extra headers
    ==========================  ==========================================

    Anything else raises ``TypeError``, which dispatch reports as a 500.
    """
    match value:
        case Response():
            return value
        case Redirect(url=url, status=status, headers=headers):
            return Response(status=status, headers=(("Location", url), *headers))
        case Template():
            if kida_env is None:
                msg = f"Cannot render {value.name!r}: no template environment was configured."
                raise ConfigurationError(msg)
            return Response(render_template(kida_env, value))
        case InlineTemplate():
            return Response(render_inline(kida_env or Environment(), value))
        case None:
            return Response(status=204)
        case str():
            return Response(value)
        case bytes():
            return Response(value, content_type="application/octet-stream")
        case dict() | list():
            return Response(json_module.dumps(value, default=str), content_type=JSON_CONTENT_TYPE)
        case (inner, int() as status):
            return negotiate(inner, kida_env=kida_env).with_status(status)
        case (inner, int() as status, dict() as headers):
            return negotiate(inner, kida_env=kida_env).with_status(status).with_headers(headers)
        case _:
            msg = f"Cannot convert {type(value).__name__} to a response."
            raise TypeError(msg)
