"""Kida template integration.

Handlers return ``Template`` values; the response layer renders them
through a kida ``Environment`` created once when the app freezes.
Values shared through ``App.set_global`` are registered as template
globals, so every template can read them.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from kida import Environment, FileSystemLoader

from waypoint.config import AppConfig


@dataclass(frozen=True, slots=True)
class Template:
    """Render a kida template file.

    Usage::

        return Template("profile.html", user=user)
    """

    name: str
    context: dict[str, Any] = field(default_factory=dict)

    def __init__(self, name: str, /, **context: Any) -> None:
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "context", context)

    @staticmethod
    def inline(source: str, /, **context: Any) -> InlineTemplate:
        """Create a template from a string.  For prototyping only.

        Usage::

            return Template.inline("<h1>{{ title }}</h1>", title="Hello")
        """
        return InlineTemplate(source, **context)


@dataclass(frozen=True, slots=True)
class InlineTemplate:
    """A template rendered from a string source."""

    source: str
    context: dict[str, Any] = field(default_factory=dict)

    def __init__(self, source: str, /, **context: Any) -> None:
        object.__setattr__(self, "source", source)
        object.__setattr__(self, "context", context)


def create_environment(config: AppConfig, globals_: Mapping[str, Any]) -> Environment:
    """Create a kida Environment for the app.

    Templates load from ``config.template_dir`` when it is set; without
    it only inline templates can be rendered.
    """
    if config.template_dir is not None:
        env = Environment(
            loader=FileSystemLoader(str(config.template_dir)),
            autoescape=config.autoescape,
            auto_reload=config.debug,
        )
    else:
        env = Environment(autoescape=config.autoescape)

    for name, value in globals_.items():
        env.add_global(name, value)
    return env


def render_template(env: Environment, tpl: Template) -> str:
    """Render a template file to string."""
    return env.get_template(tpl.name).render(tpl.context)


def render_inline(env: Environment, tpl: InlineTemplate) -> str:
    """Render a string template to string."""
    return env.from_string(tpl.source).render(tpl.context)
