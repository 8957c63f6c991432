from __future__ import annotations

import re
import typing as t

from .._internal import _clone
from ..exceptions import InvalidMethod
from ..exceptions import InvalidRequestTarget
from ..exceptions import InvalidUri
from ..http import is_token
from ..urls import Uri
from .message import Message
from .utils import get_host

_whitespace_re = re.compile(r"\s")

_TRequest = t.TypeVar("_TRequest", bound="Request")


class Request(Message):
    """Represents the non-IO parts of an outgoing or incoming HTTP request:
    the method, the target URI, the request-target, headers and body.

    >>> request = Request("http://example.com/foo?bar=baz", "GET")
    >>> request.get_header_line("Host")
    'example.com'
    >>> request.request_target
    '/foo?bar=baz'

    The arguments are validated in order, so the first bad one is the one
    reported.

    :param uri: A :class:`~mymessage.urls.Uri`, a string to parse, or
        ``None`` for an empty URI.
    :param method: The method, such as ``GET``. Any HTTP token is
        accepted. ``None`` or an empty string leaves it unset.
    :param body: A stream name or a file-like object.
    :param headers: A mapping or iterable of pairs. If there is no ``Host``
        header and the URI has a host, one is added from the URI.
    :param protocol_version: The HTTP version, like ``"1.1"``.

    :raise InvalidUri: ``uri`` is of the wrong type or can't be parsed.
    :raise InvalidMethod: ``method`` is not an HTTP token.
    :raise InvalidBodyResource: ``body`` is not a stream.
    :raise InvalidHeader: a header name or value is invalid.
    """

    def __init__(
        self,
        uri: Uri | str | None = None,
        method: str | None = None,
        body: str | t.IO[bytes] | None = None,
        headers: t.Any = None,
        protocol_version: str | None = None,
    ) -> None:
        self._uri = self._create_uri(uri)
        self._method = "" if method is None else self._filter_method(method)
        super().__init__(body, headers, protocol_version)
        # None means derived from the URI on every access
        self._request_target: str | None = None

        if self._uri.host and "host" not in self._headers:
            self._headers = self._headers.set("Host", self._host_from_uri())

    @staticmethod
    def _create_uri(uri: t.Any) -> Uri:
        if uri is None:
            return Uri()
        if isinstance(uri, Uri):
            return uri
        if isinstance(uri, str):
            try:
                return Uri(uri)
            except InvalidUri as e:
                raise InvalidUri(f"Invalid URI provided; {e.description}") from e
        raise InvalidUri(
            "Invalid URI provided; must be None, a string, or a Uri instance,"
            f" got {type(uri).__name__}."
        )

    @staticmethod
    def _filter_method(method: t.Any) -> str:
        if method == "":
            return method
        if not is_token(method):
            raise InvalidMethod(f"Unsupported HTTP method {method!r} provided.")
        return t.cast(str, method)

    def _host_from_uri(self) -> str:
        return get_host(self._uri.scheme, self._uri.host, self._uri.port)

    @property
    def method(self) -> str:
        """The request method, or an empty string if it isn't set."""
        return self._method

    def with_method(self: _TRequest, method: str) -> _TRequest:
        return _clone(self, method=self._filter_method(method))

    @property
    def uri(self) -> Uri:
        return self._uri

    def with_uri(self: _TRequest, uri: Uri | str, preserve_host: bool = False) -> _TRequest:
        """Return a request for a new URI.

        The ``Host`` header is replaced with the URI's host (and port, if
        it is not the default) when the new URI has a host, unless
        ``preserve_host`` is set and the request already has a non-empty
        ``Host`` header. A request-target set with
        :meth:`with_request_target` is dropped.
        """
        if not isinstance(uri, Uri):
            uri = self._create_uri(uri)

        new = _clone(self, uri=uri, request_target=None)

        if not uri.host:
            return new
        if preserve_host and self.get_header_line("host"):
            return new

        new._headers = self._headers.set("Host", new._host_from_uri())
        return new

    @property
    def request_target(self) -> str:
        """The target for the request line. Unless overridden with
        :meth:`with_request_target` it is derived from the current URI:
        the path and query, or ``"/"`` if both are empty.
        """
        if self._request_target is not None:
            return self._request_target

        target = self._uri.path
        if self._uri.query:
            target = f"{target}?{self._uri.query}"
        return target or "/"

    def with_request_target(self: _TRequest, request_target: str) -> _TRequest:
        """Override the request-target, for example with the asterisk
        form ``*`` or the authority form ``example.com:443``.
        """
        if not isinstance(request_target, str) or _whitespace_re.search(request_target):
            raise InvalidRequestTarget(
                f"Invalid request target {request_target!r} provided; cannot contain whitespace."
            )
        return _clone(self, request_target=request_target)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self._method or '-'} {str(self._uri)!r}>"
