from __future__ import annotations

import collections.abc as cabc
import typing as t

from .._internal import _clone
from ..datastructures import ImmutableDict
from ..datastructures import UploadedFile
from ..exceptions import InvalidUploadedFile
from ..sansio.request import Request as _SansIORequest
from ..urls import Uri

_TServerRequest = t.TypeVar("_TServerRequest", bound="ServerRequest")


class ServerRequest(_SansIORequest):
    """An incoming request as seen by the application, with everything
    the server environment provides on top of the message itself: the
    server variables, query and cookie parameters, the parsed body, the
    uploaded files and an attribute bag for request-scoped values such as
    routing results.

    Usually created by :func:`mymessage.wsgi.from_globals` or
    :func:`mymessage.wsgi.from_wsgi` rather than directly.

    The collections are read-only mappings. The ``with_*`` methods replace
    a collection as a whole; there is no way to update one in place.

    :param server_params: The server variables the request was built from.
    :param uploaded_files: A tree of mappings (or lists) whose leaves are
        :class:`~mymessage.datastructures.UploadedFile` objects.
    :param uri: See :class:`~mymessage.sansio.Request`.
    :param method: See :class:`~mymessage.sansio.Request`.
    :param body: See :class:`~mymessage.sansio.Request`.
    :param headers: See :class:`~mymessage.sansio.Request`.
    :param cookies: Cookie name to value.
    :param query_params: The deserialized query string.
    :param parsed_body: The deserialized body, in whatever shape the body
        parser produced.
    :param protocol_version: The HTTP version, like ``"1.1"``.

    :raise InvalidUploadedFile: a leaf of ``uploaded_files`` is not an
        :class:`~mymessage.datastructures.UploadedFile`.
    """

    def __init__(
        self,
        server_params: cabc.Mapping[str, t.Any] | None = None,
        uploaded_files: cabc.Mapping[str, t.Any] | None = None,
        uri: Uri | str | None = None,
        method: str | None = None,
        body: str | t.IO[bytes] | None = None,
        headers: t.Any = None,
        cookies: cabc.Mapping[str, str] | None = None,
        query_params: cabc.Mapping[str, t.Any] | None = None,
        parsed_body: t.Any = None,
        protocol_version: str | None = None,
    ) -> None:
        super().__init__(uri, method, body, headers, protocol_version)
        self._uploaded_files = _freeze_tree(uploaded_files or {})
        self._server_params = ImmutableDict(server_params or {})
        self._cookie_params = ImmutableDict(cookies or {})
        self._query_params = ImmutableDict(query_params or {})
        self._parsed_body = parsed_body
        self._attributes: ImmutableDict[str, t.Any] = ImmutableDict()

    @property
    def server_params(self) -> ImmutableDict[str, t.Any]:
        return self._server_params

    @property
    def uploaded_files(self) -> ImmutableDict[str, t.Any]:
        return self._uploaded_files

    def with_uploaded_files(
        self: _TServerRequest, uploaded_files: cabc.Mapping[str, t.Any]
    ) -> _TServerRequest:
        return _clone(self, uploaded_files=_freeze_tree(uploaded_files))

    @property
    def cookie_params(self) -> ImmutableDict[str, str]:
        return self._cookie_params

    def with_cookie_params(
        self: _TServerRequest, cookies: cabc.Mapping[str, str]
    ) -> _TServerRequest:
        return _clone(self, cookie_params=ImmutableDict(cookies))

    @property
    def query_params(self) -> ImmutableDict[str, t.Any]:
        return self._query_params

    def with_query_params(
        self: _TServerRequest, query: cabc.Mapping[str, t.Any]
    ) -> _TServerRequest:
        return _clone(self, query_params=ImmutableDict(query))

    @property
    def parsed_body(self) -> t.Any:
        return self._parsed_body

    def with_parsed_body(self: _TServerRequest, data: t.Any) -> _TServerRequest:
        return _clone(self, parsed_body=data)

    @property
    def attributes(self) -> ImmutableDict[str, t.Any]:
        return self._attributes

    def get_attribute(self, name: str, default: t.Any = None) -> t.Any:
        return self._attributes.get(name, default)

    def with_attribute(self: _TServerRequest, name: str, value: t.Any) -> _TServerRequest:
        attributes = self._attributes.copy()
        attributes[name] = value
        return _clone(self, attributes=ImmutableDict(attributes))

    def without_attribute(self: _TServerRequest, name: str) -> _TServerRequest:
        if name not in self._attributes:
            return self
        attributes = self._attributes.copy()
        del attributes[name]
        return _clone(self, attributes=ImmutableDict(attributes))


def _freeze_tree(files: t.Any) -> ImmutableDict[str, t.Any]:
    if not isinstance(files, cabc.Mapping):
        raise InvalidUploadedFile(
            f"Invalid uploaded files structure; expected a mapping, got {type(files).__name__}."
        )
    return t.cast("ImmutableDict[str, t.Any]", _freeze_files(files))


def _freeze_files(files: t.Any) -> t.Any:
    """递归校验上传文件树并转换为只读结构, 叶子必须是 :class:`UploadedFile`."""
    if isinstance(files, UploadedFile):
        return files
    if isinstance(files, cabc.Mapping):
        return ImmutableDict({key: _freeze_files(value) for key, value in files.items()})
    if isinstance(files, (list, tuple)):
        return tuple(_freeze_files(value) for value in files)
    raise InvalidUploadedFile(
        f"Invalid leaf in uploaded files structure; expected an UploadedFile, got {type(files).__name__}."
    )
