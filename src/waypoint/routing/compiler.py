r"""Route pattern compilation.

A route pattern is a path with bracketed placeholders::

    /users/[i:id]          # typed, named
    /files/[**:path]       # catch-all
    /posts/[i:page]?       # optional, separator included
    /archive/[i]           # typed, unnamed (matched, not returned)

Each placeholder may be preceded by a ``/`` or ``.`` separator and
followed by ``?``. Compilation turns every placeholder into::

    (?:SEP(?P<slot>FRAGMENT)?)?

where the two ``?`` are present only for optional placeholders. Text
between placeholders is inserted as-is, so it keeps regex meaning.

Compiled expressions are never cached here; the ``re`` module keeps its
own cache keyed on the expression text, which changes whenever the
match-type registry does.
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from waypoint.errors import InvalidRoutePatternError
from waypoint.routing.match_types import MatchTypeRegistry
from waypoint.routing.route import RAW_REGEX_PREFIX, Placeholder

PLACEHOLDER_RE = re.compile(r"(/|\.|)\[([^:\]]*+)(?::([^:\]]*+))?\](\?|)")

PLACEHOLDER_OPEN = "["


@dataclass(frozen=True, slots=True)
class CompiledPattern:
    """A route pattern compiled against a match-type registry.

    ``slots`` pairs each regex group name with the route parameter it
    captures, in pattern order. Unnamed placeholders have no slot.
    """

    source: str
    regex: re.Pattern[str]
    slots: tuple[tuple[str, str], ...]

    def match(self, path: str) -> dict[str, str] | None:
        """Match the whole of *path*; return named params or ``None``."""
        m = self.regex.fullmatch(path)
        if m is None:
            return None
        params: dict[str, str] = {}
        for group, name in self.slots:
            value = m.group(group)
            if value is not None:
                params[name] = value
        return params


def scan_placeholders(pattern: str) -> list[Placeholder]:
    """Return the placeholders of *pattern*, left to right.

    Examples::

        "/users/[i:id]"   -> [Placeholder("/[i:id]", "/", "i", "id", False, 6, 13)]
        "/posts/[i:page]?" -> [Placeholder("/[i:page]?", "/", "i", "page", True, 6, 16)]
        "/static"         -> []
    """
    return [
        Placeholder(
            block=m.group(0),
            separator=m.group(1),
            type_alias=m.group(2),
            name=m.group(3) or None,
            optional=m.group(4) == "?",
            start=m.start(),
            end=m.end(),
        )
        for m in PLACEHOLDER_RE.finditer(pattern)
    ]


def literal_prefix(pattern: str) -> str:
    """The part of *pattern* before its first placeholder bracket."""
    position = pattern.find(PLACEHOLDER_OPEN)
    if position == -1:
        return pattern
    return pattern[:position]


def compile_pattern(pattern: str, match_types: MatchTypeRegistry) -> CompiledPattern:
    """Compile a placeholder pattern into a full-match expression.

    Raises ``InvalidRoutePatternError`` if the result is not a valid
    regular expression.
    """
    parts: list[str] = []
    slots: list[tuple[str, str]] = []
    last = 0

    for index, placeholder in enumerate(scan_placeholders(pattern)):
        parts.append(pattern[last : placeholder.start])
        last = placeholder.end

        separator = r"\." if placeholder.separator == "." else placeholder.separator
        optional = "?" if placeholder.optional else ""
        fragment = match_types.fragment(placeholder.type_alias)

        # Group names are generated so any parameter name text is accepted
        if placeholder.name is not None:
            group = f"p{index}"
            slots.append((group, placeholder.name))
            capture = f"(?P<{group}>{fragment})"
        else:
            capture = f"({fragment})"

        parts.append(f"(?:{separator}{capture}{optional}){optional}")

    parts.append(pattern[last:])
    return CompiledPattern(
        source=pattern,
        regex=_compile(pattern, "".join(parts)),
        slots=tuple(slots),
    )


def compile_raw(pattern: str) -> re.Pattern[str]:
    """Compile an ``@``-prefixed route into its expression."""
    return _compile(pattern, pattern.removeprefix(RAW_REGEX_PREFIX))


def _compile(pattern: str, expression: str) -> re.Pattern[str]:
    try:
        return re.compile(expression)
    except re.error as exc:
        raise InvalidRoutePatternError(pattern, str(exc)) from exc


def build_url(pattern: str, params: Mapping[str, Any], base_path: str = "") -> str:
    """Fill the placeholders of *pattern* from *params*.

    For each placeholder, left to right:

    - a supplied value (not ``None``) replaces the placeholder, keeping
      its separator;
    - a missing optional placeholder is dropped with its separator,
      unless it sits at the very start of the pattern;
    - anything else is dropped, leaving its separator behind.

    *base_path* is prepended to the result.
    """
    url: list[str] = [base_path]
    last = 0

    for placeholder in scan_placeholders(pattern):
        url.append(pattern[last : placeholder.start])
        last = placeholder.end

        value = params.get(placeholder.name) if placeholder.name is not None else None
        if value is not None:
            url.append(f"{placeholder.separator}{value}")
        elif placeholder.optional and placeholder.start != 0:
            continue
        else:
            url.append(placeholder.separator)

    url.append(pattern[last:])
    return "".join(url)
