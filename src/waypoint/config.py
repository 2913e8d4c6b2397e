"""Application configuration.

Every setting is a typed field on one frozen dataclass, read once when
the app is built. There are no string-keyed settings such as
``set("error 404", ...)``.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(base_path="/shop", error_pages={404: "/not-found"})
    """

    debug: bool = False
    env: str = "development"

    # Routing
    base_path: str = ""  # Prefix stripped from request paths, prepended to generated URLs
    strict_methods: bool = False  # True: exact verb match instead of substring containment
    match_types: Mapping[str, str] = field(default_factory=dict)  # Extra placeholder types

    # Templates (None disables kida integration)
    template_dir: str | Path | None = None
    autoescape: bool = True

    # Static files
    static_url: str = "/static"

    # Status code -> route path to redirect to (base path is prepended)
    error_pages: Mapping[int, str] = field(default_factory=dict)
