from __future__ import annotations

import collections.abc as cabc
import typing as t

from .mixins import ImmutableDictMixin

K = t.TypeVar("K")
V = t.TypeVar("V")


def iter_items(
    mapping: cabc.Mapping[K, V] | cabc.Iterable[tuple[K, V]],
) -> cabc.Iterator[tuple[K, V]]:
    """Iterates over the items of a mapping, or over an iterable of
    ``(key, value)`` pairs, yielding keys and values. Sequence values are
    yielded as they are, not flattened.

    :raise ValueError: an item of the iterable is not a pair.
    """
    if isinstance(mapping, cabc.Mapping):
        yield from mapping.items()
        return

    for item in mapping:
        if isinstance(item, (str, bytes)) or not isinstance(item, cabc.Sequence):
            raise ValueError(f"Expected a (key, value) pair, got {item!r}.")
        if len(item) != 2:
            raise ValueError(f"Expected a (key, value) pair, got {item!r}.")
        yield item[0], item[1]


class ImmutableDict(ImmutableDictMixin, dict[K, V]):  # type: ignore[misc]
    """An immutable :class:`dict`. Used for the request-scoped collections
    of a server request so readers can't change what other instances see.
    """

    def __repr__(self) -> str:
        return f"{type(self).__name__}({dict.__repr__(self)})"

    def copy(self) -> dict[K, V]:  # type: ignore[override]
        """Return a shallow mutable copy of this object."""
        return dict(self)

    def __copy__(self) -> ImmutableDict[K, V]:
        return self
