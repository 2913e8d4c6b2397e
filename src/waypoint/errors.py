"""Waypoint exception hierarchy.

Shared across Router, App, handler, and middleware so every module
raises and catches the same types.
"""

from dataclasses import dataclass


class WaypointError(Exception):
    """Base for all waypoint-specific errors."""


class ConfigurationError(WaypointError):
    """Raised when app or router configuration is invalid.

    Registration happens at startup, so these are expected to abort it.
    """


class DuplicateRouteNameError(ConfigurationError):
    """A route name is already bound to another route."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Cannot redeclare route {name!r}.")


class InvalidRouteSourceError(ConfigurationError, TypeError):
    """Bulk registration was given something that is not a sequence of routes."""


class InvalidRoutePatternError(ConfigurationError):
    """A route pattern did not compile to a valid regular expression."""

    def __init__(self, pattern: str, reason: str) -> None:
        self.pattern = pattern
        super().__init__(f"Route pattern {pattern!r} is not a valid expression: {reason}")


class DuplicateModuleError(ConfigurationError):
    """A module name is already registered on the app."""


class UnknownRouteNameError(WaypointError, LookupError):
    """Reverse routing was asked for a name that was never registered."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Route {name!r} does not exist.")


@dataclass(frozen=True, slots=True)
class HTTPError(WaypointError):
    """An error that maps directly to an HTTP status code.

    Raised by middleware or handlers. ``App.dispatch`` catches these and
    turns them into a response (or a redirect to a configured error page).
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818 — conventional name in web frameworks
    """404 — no route matched the request."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)
