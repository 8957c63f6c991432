from __future__ import annotations

import typing as t

from .._internal import _clone
from ..datastructures import HeaderBag
from ..datastructures.headers import HeaderValues
from ..exceptions import InvalidProtocolVersion
from ..http import is_valid_protocol_version
from ..stream import make_body

_TMessage = t.TypeVar("_TMessage", bound="Message")


class Message:
    """The parts shared by requests and responses: protocol version,
    headers and body.

    Messages are immutable. Every ``with_*`` and ``without_*`` method
    returns a new message and leaves the original alone. Headers and the
    URI are values and can be shared freely; the body is a stream and is
    shared *by reference* between a message and everything derived from it
    until :meth:`with_body` replaces it, so reading it from one instance
    moves the position for all of them.

    :param body: A stream name (see :func:`~mymessage.stream.open_stream`)
        or a file-like object. Defaults to an empty in-memory stream.
    :param headers: A mapping or iterable of pairs, see :class:`HeaderBag`.
    :param protocol_version: The HTTP version, like ``"1.1"`` or ``"2"``.
    """

    #: Used when no protocol version is given.
    default_protocol_version = "1.1"
    #: Stream name opened when no body is given.
    default_body = "memory"

    def __init__(
        self,
        body: str | t.IO[bytes] | None = None,
        headers: t.Any = None,
        protocol_version: str | None = None,
    ) -> None:
        self._body = make_body(self.default_body if body is None else body)
        self._headers = HeaderBag(headers)
        if protocol_version is None:
            protocol_version = self.default_protocol_version
        self._protocol_version = self._filter_protocol_version(protocol_version)

    @staticmethod
    def _filter_protocol_version(version: t.Any) -> str:
        if not is_valid_protocol_version(version):
            raise InvalidProtocolVersion(
                f"Unsupported HTTP protocol version {version!r} provided."
            )
        return t.cast(str, version)

    @property
    def protocol_version(self) -> str:
        return self._protocol_version

    def with_protocol_version(self: _TMessage, version: str) -> _TMessage:
        return _clone(self, protocol_version=self._filter_protocol_version(version))

    @property
    def headers(self) -> HeaderBag:
        return self._headers

    def has_header(self, name: str) -> bool:
        return name in self._headers

    def get_header(self, name: str) -> list[str]:
        """All values of a header, or an empty list."""
        return self._headers.get(name)

    def get_header_line(self, name: str) -> str:
        """All values of a header joined with ``", "``, or an empty string."""
        return self._headers.get_line(name)

    def with_header(self: _TMessage, name: str, value: HeaderValues) -> _TMessage:
        """Replace a header. ``name`` is matched without regard to case."""
        return _clone(self, headers=self._headers.set(name, value))

    def with_added_header(self: _TMessage, name: str, value: HeaderValues) -> _TMessage:
        """Append values to a header, creating it if needed."""
        return _clone(self, headers=self._headers.add(name, value))

    def without_header(self: _TMessage, name: str) -> _TMessage:
        return _clone(self, headers=self._headers.remove(name))

    @property
    def body(self) -> t.IO[bytes]:
        return self._body

    def with_body(self: _TMessage, body: str | t.IO[bytes]) -> _TMessage:
        return _clone(self, body=make_body(body))
