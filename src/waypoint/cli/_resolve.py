"""Load the App named by a ``module:attribute`` string."""

import importlib

from waypoint.app import App


def resolve_app(import_string: str) -> App:
    """Import *import_string* and return the App it names.

    ``"blog.main:app"`` reads ``app`` from ``blog.main``; a bare
    ``"blog.main"`` assumes the attribute is called ``app``. If the
    attribute is a zero-argument factory rather than an App, it is
    called once and must return one.

    Raises ``ModuleNotFoundError`` or ``AttributeError`` when the import
    fails and ``TypeError`` when the result is not an App.
    """
    module_name, _, attribute = import_string.partition(":")
    target = getattr(importlib.import_module(module_name), attribute or "app")

    # An App is itself callable (WSGI), so only call non-App objects
    if not isinstance(target, App) and callable(target):
        try:
            target = target()
        except Exception as exc:
            msg = f"App factory {import_string!r} failed: {exc}"
            raise TypeError(msg) from exc

    if isinstance(target, App):
        return target

    msg = f"{import_string!r} is a {type(target).__name__}, not a waypoint.App instance"
    raise TypeError(msg)
