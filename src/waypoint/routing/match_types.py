"""Match types — named regex fragments for route placeholders.

``[i:id]`` looks up alias ``i``; ``[:slug]`` and ``[slug]`` use the
empty alias. Fragments use possessive quantifiers, so a placeholder
never gives back characters it has consumed.
"""

from collections.abc import Iterator, Mapping

# alias -> regex fragment
DEFAULT_MATCH_TYPES: dict[str, str] = {
    "i": r"[0-9]++",
    "a": r"[0-9A-Za-z]++",
    "h": r"[0-9A-Fa-f]++",
    "*": r".+?",
    "**": r".++",
    "": r"[^/\.]++",
}


class MatchTypeRegistry(Mapping[str, str]):
    """Alias -> regex fragment mapping seeded with the built-in types.

    Extended through :meth:`register`; later registrations replace
    earlier entries with the same alias.
    """

    __slots__ = ("_types",)

    def __init__(self, extra: Mapping[str, str] | None = None) -> None:
        self._types: dict[str, str] = dict(DEFAULT_MATCH_TYPES)
        if extra:
            self.register(extra)

    def register(self, match_types: Mapping[str, str]) -> None:
        """Merge *match_types* into the registry."""
        self._types.update(match_types)

    def fragment(self, alias: str) -> str:
        r"""Return the fragment for *alias*.

        An alias that is not registered is itself used as the fragment,
        which lets patterns carry inline expressions like ``[\d{4}:year]``.
        """
        return self._types.get(alias, alias)

    def __getitem__(self, alias: str) -> str:
        return self._types[alias]

    def __iter__(self) -> Iterator[str]:
        return iter(self._types)

    def __len__(self) -> int:
        return len(self._types)

    def __repr__(self) -> str:
        return f"MatchTypeRegistry({self._types!r})"
