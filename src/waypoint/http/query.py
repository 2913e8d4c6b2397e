"""Query string of a request target.

The router ignores everything after ``?``; handlers read it through
``RequestContext.query``.
"""

from collections.abc import Iterator, Mapping
from urllib.parse import parse_qsl


class QueryParams(Mapping[str, str]):
    """Parsed ``a=1&b=2`` pairs, in order, keeping blank values.

    Indexing gives the first value of a repeated key; ``get_list`` gives
    all of them::

        q = QueryParams("tag=a&tag=b&page=2")
        q["tag"]            # "a"
        q.get_list("tag")   # ["a", "b"]
        q.get_int("page")   # 2
    """

    __slots__ = ("_pairs", "_raw")

    def __init__(self, query_string: str | bytes = "") -> None:
        if isinstance(query_string, bytes):
            query_string = query_string.decode("latin-1")
        self._raw = query_string
        self._pairs: tuple[tuple[str, str], ...] = tuple(
            parse_qsl(query_string, keep_blank_values=True)
        )

    @property
    def raw(self) -> str:
        """The query string as received, without the ``?``."""
        return self._raw

    def __getitem__(self, key: str) -> str:
        for name, value in self._pairs:
            if name == key:
                return value
        raise KeyError(key)

    def __iter__(self) -> Iterator[str]:
        return iter(dict.fromkeys(name for name, _ in self._pairs))

    def __len__(self) -> int:
        return len(dict.fromkeys(name for name, _ in self._pairs))

    def __repr__(self) -> str:
        return f"QueryParams({self._raw!r})"

    def get(self, key: str, default: str | None = None) -> str | None:  # type: ignore[override]
        """First non-empty value for *key*, else *default*."""
        value = next((v for name, v in self._pairs if name == key), None)
        return value or default

    def get_list(self, key: str) -> list[str]:
        return [value for name, value in self._pairs if name == key]

    def get_int(self, key: str, default: int | None = None) -> int | None:
        """``int`` of the first value, or *default* when absent or not a number."""
        value = self.get(key)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            return default
