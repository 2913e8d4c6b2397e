"""Waypoint — bracket-pattern routing and a small web framework around it.

Basic usage::

    from waypoint import App

    app = App()

    @app.get("/hello/[:name]", name="hello")
    def hello(name: str):
        return f"Hello, {name}!"

    app.url_for("hello", name="world")      # "/hello/world"
    app.dispatch("GET", "/hello/world")     # Response(body="Hello, world!")

The router works on its own too::

    from waypoint import Router

    router = Router()
    router.add_route("GET|POST", "/users/[i:id]", "users#show", "user")
    router.match("/users/42", "GET").params  # {"id": "42"}
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "AppConfig",
    "AppContext",
    "ConfigurationError",
    "DuplicateRouteNameError",
    "HTTPError",
    "InvalidRouteSourceError",
    "Middleware",
    "Next",
    "NotFound",
    "Redirect",
    "RequestContext",
    "Response",
    "RouteMatch",
    "Router",
    "Template",
    "UnknownRouteNameError",
    "WaypointError",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import waypoint`` fast and lets the router be used without
    importing the template layer.
    """
    if name == "App":
        from waypoint.app import App

        return App

    if name == "AppConfig":
        from waypoint.config import AppConfig

        return AppConfig

    if name in ("AppContext", "RequestContext"):
        from waypoint import context as _ctx

        return getattr(_ctx, name)

    if name == "Router":
        from waypoint.routing.router import Router

        return Router

    if name == "RouteMatch":
        from waypoint.routing.route import RouteMatch

        return RouteMatch

    if name in ("Response", "Redirect"):
        from waypoint.http import response as _resp

        return getattr(_resp, name)

    if name == "Template":
        from waypoint.templating import Template

        return Template

    if name in ("Middleware", "Next"):
        from waypoint.middleware import protocol as _mw

        return getattr(_mw, name)

    if name in (
        "ConfigurationError",
        "DuplicateRouteNameError",
        "HTTPError",
        "InvalidRouteSourceError",
        "NotFound",
        "UnknownRouteNameError",
        "WaypointError",
    ):
        from waypoint import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
