"""Case-insensitive HTTP header mapping.

Header names are case-insensitive on the wire: ``Content-Type``,
``content-type`` and ``CONTENT-TYPE`` all name the same header.  The
mapping below looks names up case-insensitively while remembering the
spelling used the first time a header was set, and keeps headers in
insertion order so responses are written exactly as they were built.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, MutableMapping


class Headers(MutableMapping[str, str]):
    """An ordered, case-insensitive ``str → str`` mapping."""

    def __init__(self, initial: Mapping[str, str] | None = None, /, **kwargs: str) -> None:
        """Create a header mapping, optionally pre-populated.

        Args:
            initial: Starting headers (copied, not referenced).
            **kwargs: Extra headers given as keyword arguments.

        """
        # lower-cased name -> (original name, value)
        self._store: dict[str, tuple[str, str]] = {}
        if initial is not None:
            self.update(initial)
        if kwargs:
            self.update(kwargs)

    def __getitem__(self, name: str) -> str:
        """Return the value for *name* (any case)."""
        return self._store[name.lower()][1]

    def __setitem__(self, name: str, value: str) -> None:
        """Set *name* to *value*, keeping the first-seen spelling and position."""
        key = name.lower()
        existing = self._store.get(key)
        original = existing[0] if existing is not None else name
        self._store[key] = (original, value)

    def __delitem__(self, name: str) -> None:
        """Remove *name* (any case)."""
        del self._store[name.lower()]

    def __iter__(self) -> Iterator[str]:
        """Iterate over header names as originally spelled."""
        return (original for original, _ in self._store.values())

    def __len__(self) -> int:
        """Return the number of headers."""
        return len(self._store)

    def __contains__(self, name: object) -> bool:
        """Check whether *name* is present (any case)."""
        return isinstance(name, str) and name.lower() in self._store

    def __eq__(self, other: object) -> bool:
        """Compare case-insensitively against another mapping (order ignored)."""
        if not isinstance(other, Mapping):
            return NotImplemented
        theirs = {str(k).lower(): v for k, v in other.items()}  # pyright: ignore[reportUnknownVariableType, reportUnknownArgumentType]
        return {k: v for k, (_, v) in self._store.items()} == theirs

    def copy(self) -> Headers:
        """Return an independent copy of these headers."""
        return Headers(self)

    def __repr__(self) -> str:
        """Return a debug-friendly representation."""
        return f"Headers({dict(self.items())!r})"
