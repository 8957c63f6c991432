from __future__ import annotations

import collections.abc as cabc
import typing as t

from ..exceptions import BadRequestKeyError
from ..exceptions import InvalidHeaderName
from ..exceptions import InvalidHeaderValue
from ..http import is_safe_header_value
from ..http import is_token
from .mixins import ImmutableHeadersMixin
from .structures import iter_items

HeaderValue = t.Union[str, int, float]
HeaderValues = t.Union[HeaderValue, t.Sequence[HeaderValue]]


class HeaderBag(ImmutableHeadersMixin, cabc.Mapping):  # type: ignore[type-arg]
    """An immutable, ordered collection of HTTP headers with
    case-insensitive lookup. Each name maps to one or more string values.
    The spelling a name was first stored with is kept for display.

    >>> headers = HeaderBag({"Content-Type": "text/plain"})
    >>> headers = headers.add("x-foo", ["a", "b"])
    >>> headers.get("X-FOO")
    ['a', 'b']
    >>> headers.get_line("x-foo")
    'a, b'

    ``set``, ``add`` and ``remove`` don't change the bag, they return a new
    one. Item assignment and deletion raise :exc:`TypeError`.

    Values are validated as they are stored: a name must be an HTTP token
    and a value must be a string or a number without CR/LF injection
    sequences. Bad input raises :exc:`~mymessage.exceptions.InvalidHeaderName`
    or :exc:`~mymessage.exceptions.InvalidHeaderValue`, it is never
    cleaned up silently.

    :param defaults: A mapping of names to a value or a sequence of values,
        an iterable of ``(name, value)`` pairs, or another :class:`HeaderBag`.
    """

    def __init__(
        self,
        defaults: (
            HeaderBag
            | cabc.Mapping[str, HeaderValues]
            | cabc.Iterable[tuple[str, HeaderValues]]
            | None
        ) = None,
    ) -> None:
        # lower-cased name -> (display name, values)
        self._headers: dict[str, tuple[str, tuple[str, ...]]] = {}

        if defaults is not None:
            self._extend(defaults)

    @classmethod
    def _from_dict(cls, headers: dict[str, tuple[str, tuple[str, ...]]]) -> HeaderBag:
        rv = cls.__new__(cls)
        rv._headers = headers
        return rv

    def _extend(self, arg: t.Any) -> None:
        # single pass construction, the only place the bag is changed in place
        if isinstance(arg, (str, bytes)) or not isinstance(arg, cabc.Iterable):
            raise InvalidHeaderName(
                "Invalid header name; headers must be given as a mapping or an"
                f" iterable of (name, value) pairs, got {type(arg).__name__}."
            )

        try:
            items = list(iter_items(arg))
        except ValueError as e:
            raise InvalidHeaderName(f"Invalid header name; {e}") from e

        for name, value in items:
            key, values = _validate(name, value)
            if key in self._headers:
                display, existing = self._headers[key]
                self._headers[key] = (display, existing + values)
            else:
                self._headers[key] = (name, values)

    def set(self, name: str, value: HeaderValues) -> HeaderBag:
        """Return a new bag where all values of ``name`` are replaced by
        ``value``. The new spelling of ``name`` is used for display.
        """
        key, values = _validate(name, value)
        headers = dict(self._headers)
        headers[key] = (name, values)
        return self._from_dict(headers)

    def add(self, name: str, value: HeaderValues) -> HeaderBag:
        """Return a new bag with ``value`` appended to the values of
        ``name``. If ``name`` is already present its original spelling wins.
        """
        key, values = _validate(name, value)
        headers = dict(self._headers)
        if key in headers:
            display, existing = headers[key]
            headers[key] = (display, existing + values)
        else:
            headers[key] = (name, values)
        return self._from_dict(headers)

    def remove(self, name: str) -> HeaderBag:
        """Return a new bag without ``name``. Missing names are ignored."""
        key = name.lower()
        if key not in self._headers:
            return self
        headers = dict(self._headers)
        del headers[key]
        return self._from_dict(headers)

    def get(self, name: str, default: t.Any = None) -> list[str]:  # type: ignore[override]
        """Return the values of ``name`` in the order they were added, or
        ``default`` (an empty list if not given) if it is missing.
        """
        try:
            return self[name]
        except KeyError:
            return [] if default is None else default

    def get_line(self, name: str) -> str:
        """Return the values of ``name`` joined with ``", "``, or an empty
        string if it is missing.
        """
        return ", ".join(self.get(name))

    def has(self, name: str) -> bool:
        return name in self

    def get_display_name(self, name: str) -> str | None:
        """The spelling ``name`` was stored with, or ``None``."""
        item = self._headers.get(name.lower()) if isinstance(name, str) else None
        return None if item is None else item[0]

    def __getitem__(self, name: str) -> list[str]:
        if isinstance(name, str):
            item = self._headers.get(name.lower())
            if item is not None:
                return list(item[1])
        raise BadRequestKeyError(name)

    def __contains__(self, name: object) -> bool:
        """Check if a name is present, ignoring case."""
        return isinstance(name, str) and name.lower() in self._headers

    def __iter__(self) -> t.Iterator[str]:
        """Yield the display names."""
        return (display for display, _ in self._headers.values())

    def __len__(self) -> int:
        return len(self._headers)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, HeaderBag):
            return self._headers == other._headers
        if isinstance(other, cabc.Mapping):
            return self.to_dict() == dict(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def to_dict(self) -> dict[str, list[str]]:
        """Display name -> list of values."""
        return {display: list(values) for display, values in self._headers.values()}

    def to_wsgi_list(self) -> list[tuple[str, str]]:
        """将headers转换为合适的WSGI格式, 每个值一个 ``(name, value)`` 元组"""
        return [
            (display, value)
            for display, values in self._headers.values()
            for value in values
        ]

    def __str__(self) -> str:
        """Returns formatted headers suitable for HTTP transmission."""
        strs = [f"{display}: {', '.join(values)}" for display, values in self._headers.values()]
        strs.append("\r\n")
        return "\r\n".join(strs)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.to_dict()!r})"


def _validate(name: t.Any, value: t.Any) -> tuple[str, tuple[str, ...]]:
    if not is_token(name):
        raise InvalidHeaderName(f"Invalid header name {name!r}; must be an HTTP token.")

    if isinstance(value, (list, tuple)):
        if not value:
            raise InvalidHeaderValue(
                f"Invalid header value for {name!r}; at least one value is required."
            )
        values = tuple(_str_header_value(name, v) for v in value)
    else:
        values = (_str_header_value(name, value),)

    return name.lower(), values


def _str_header_value(name: str, value: t.Any) -> str:
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise InvalidHeaderValue(
            f"Invalid header value type for {name!r}; must be a string or numeric,"
            f" got {type(value).__name__}."
        )

    if not isinstance(value, str):
        value = str(value)

    if not is_safe_header_value(value):
        raise InvalidHeaderValue(
            f"Invalid header value for {name!r}; newlines must be followed by"
            " whitespace and invisible characters are not allowed."
        )
    return value
