"""Module registry — named plugin instances attached to an app.

Modules (a database wrapper, a validator, a mailer...) are registered
by name during setup and looked up by name from handlers::

    app.register_module("db", Database(dsn))

    @app.get("/users")
    def users(app: AppContext):
        return app.module("db").fetch_all("users")
"""

from collections.abc import Iterator, Mapping
from typing import Any

from waypoint.errors import ConfigurationError, DuplicateModuleError


class ModuleRegistry(Mapping[str, Any]):
    """Name -> module instance. Names are unique; lookups never raise."""

    __slots__ = ("_frozen", "_modules")

    def __init__(self) -> None:
        self._modules: dict[str, Any] = {}
        self._frozen = False

    def register(self, name: str, instance: Any) -> None:
        """Register *instance* under *name*.

        Raises ``DuplicateModuleError`` if *name* is taken and
        ``ConfigurationError`` once the registry is frozen.
        """
        if self._frozen:
            msg = f"Cannot register module {name!r} after the app is frozen."
            raise ConfigurationError(msg)
        if not name:
            msg = "Module name must be a non-empty string."
            raise ConfigurationError(msg)
        if name in self._modules:
            msg = f"Module {name!r} is already registered."
            raise DuplicateModuleError(msg)
        self._modules[name] = instance

    def get(self, name: str, default: Any = None) -> Any:  # type: ignore[override]
        """Return the module called *name*, or *default* if there is none."""
        return self._modules.get(name, default)

    def freeze(self) -> None:
        self._frozen = True

    def __getitem__(self, name: str) -> Any:
        return self._modules[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._modules)

    def __len__(self) -> int:
        return len(self._modules)

    def __repr__(self) -> str:
        return f"<ModuleRegistry {sorted(self._modules)!r}>"
