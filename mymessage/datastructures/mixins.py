from __future__ import annotations

import typing as t


def is_immutable(self: object) -> t.NoReturn:
    raise TypeError(f"{type(self).__name__!r} objects are immutable")


class ImmutableDictMixin:
    """Makes a :class:`dict` immutable. Unlike the header bag these are
    hashable, since their contents never change after construction.
    """

    _hash_cache: int | None = None

    def __hash__(self) -> int:
        if self._hash_cache is not None:
            return self._hash_cache
        rv = self._hash_cache = hash(frozenset(self.items()))  # type: ignore[attr-defined]
        return rv

    def __reduce_ex__(self, protocol: t.SupportsIndex) -> t.Any:
        return type(self), (dict(self),)  # type: ignore[call-overload]

    def setdefault(self, key: t.Any, default: t.Any = None) -> t.NoReturn:
        is_immutable(self)

    def update(self, arg: t.Any = None, /, **kwargs: t.Any) -> t.NoReturn:
        is_immutable(self)

    def __ior__(self, other: t.Any) -> t.NoReturn:
        is_immutable(self)

    def pop(self, key: t.Any, default: t.Any = None) -> t.NoReturn:
        is_immutable(self)

    def popitem(self) -> t.NoReturn:
        is_immutable(self)

    def __setitem__(self, key: t.Any, value: t.Any) -> t.NoReturn:
        is_immutable(self)

    def __delitem__(self, key: t.Any) -> t.NoReturn:
        is_immutable(self)

    def clear(self) -> t.NoReturn:
        is_immutable(self)


class ImmutableHeadersMixin:
    """Makes a :class:`HeaderBag` immutable. Every change goes through
    the copy-on-write methods (``set``, ``add``, ``remove``), which return
    a new bag.
    """

    def __setitem__(self, key: t.Any, value: t.Any) -> t.NoReturn:
        is_immutable(self)

    def __delitem__(self, key: t.Any) -> t.NoReturn:
        is_immutable(self)

    def __ior__(self, other: t.Any) -> t.NoReturn:
        is_immutable(self)
