"""从服务器环境构建 :class:`~mymessage.wrappers.ServerRequest`.

The web server hands the application a flat map of variables: the CGI
meta-variables (``REQUEST_METHOD``, ``SERVER_NAME``, ``HTTP_*``, ...) plus
whatever the particular server, rewrite module or proxy adds. The
functions here turn that map into the parts of a request. They don't
touch any global state; the map is passed in and new values are returned.
:func:`from_globals` puts the parts together, :func:`from_wsgi` does the
same for a PEP 3333 environ.
"""
from __future__ import annotations

import collections.abc as cabc
import os
import re
import typing as t
from urllib.parse import parse_qsl

from ._internal import _log
from ._internal import _wsgi_decoding_dance
from .datastructures import HeaderBag
from .datastructures import UPLOAD_ERR_OK
from .datastructures import UploadedFile
from .exceptions import InvalidUploadedFile
from .exceptions import UnrecognizedProtocolVersion
from .http import parse_cookie
from .sansio.utils import split_host_port
from .stream import is_stream
from .urls import Uri
from .wrappers import ServerRequest

if t.TYPE_CHECKING:
    from _typeshed.wsgi import WSGIEnvironment

ApacheRequestHeaders = t.Callable[[], t.Mapping[str, str]]
ServerMap = t.Mapping[str, t.Any]

_content_headers = {
    "CONTENT_TYPE": "content-type",
    "CONTENT_LENGTH": "content-length",
    "CONTENT_MD5": "content-md5",
}
_absolute_uri_re = re.compile(r"^[^/:?#]+://[^/?#]+")
_ipv6_literal_re = re.compile(r"^\[[0-9a-fA-F:]+\]$")
_server_protocol_re = re.compile(r"^(?:HTTP/)?(?P<version>[1-9]\d*(?:\.\d)?)$")
_file_spec_keys = ("tmp_name", "size", "error", "name", "type")


class HostAndPort:
    """Accumulator filled by :func:`marshal_host_and_port_from_headers`."""

    def __init__(self, host: str = "", port: int | None = None) -> None:
        self.host = host
        self.port = port

    def __repr__(self) -> str:
        return f"{type(self).__name__}(host={self.host!r}, port={self.port!r})"


def no_apache_request_headers() -> dict[str, str]:
    """The default Apache headers provider: no headers available."""
    return {}


def normalize_server(
    server: ServerMap, apache_request_headers: ApacheRequestHeaders | None = None
) -> dict[str, t.Any]:
    """补全Apache下丢失的 ``HTTP_AUTHORIZATION``.

    Some Apache setups don't pass the ``Authorization`` header on as
    ``HTTP_AUTHORIZATION``, it is only visible through the server's own
    request-headers accessor. If the variable is missing, the given
    provider is asked for an ``Authorization`` (or ``authorization``)
    header and its value is copied in. A provider that raises is treated
    as having no headers.

    :param server: The server variables. Not modified.
    :param apache_request_headers: A callable returning the headers seen by
        Apache. Defaults to :func:`no_apache_request_headers`.
    :return: A new dict of server variables.
    """
    server = dict(server)

    if "HTTP_AUTHORIZATION" in server:
        return server

    if apache_request_headers is None:
        apache_request_headers = no_apache_request_headers

    try:
        headers = apache_request_headers()
    except Exception as e:
        _log("debug", "Apache request headers are not available: %s", e)
        return server

    for name in ("Authorization", "authorization"):
        if name in headers:
            server["HTTP_AUTHORIZATION"] = headers[name]
            break

    return server


def marshal_headers(server: ServerMap) -> dict[str, t.Any]:
    """从服务器变量中提取请求头.

    ``HTTP_FOO_BAR`` becomes ``foo-bar``; ``CONTENT_TYPE``,
    ``CONTENT_LENGTH`` and ``CONTENT_MD5`` become ``content-type``,
    ``content-length`` and ``content-md5``. Variables added by Apache
    rewrite rules carry a ``REDIRECT_`` prefix, which is dropped unless
    the variable also exists without it. Empty values are skipped.

    >>> marshal_headers({"HTTP_X_FOO_BAR": "1", "CONTENT_TYPE": "text/plain"})
    {'x-foo-bar': '1', 'content-type': 'text/plain'}
    """
    headers: dict[str, t.Any] = {}

    for key, value in server.items():
        if not isinstance(key, str):
            continue

        if key.startswith("REDIRECT_"):
            key = key[9:]
            if key in server:
                continue

        if not value:
            continue

        if key.startswith("HTTP_"):
            headers[key[5:].replace("_", "-").lower()] = value
        elif key in _content_headers:
            headers[_content_headers[key]] = value

    return headers


def strip_query_string(path: str) -> str:
    """Remove everything from the first ``?`` onwards."""
    return path.partition("?")[0]


def marshal_request_uri(server: ServerMap) -> str:
    """找出原始请求的URI (路径, 查询字符串和片段).

    Servers and rewrite modules report it in different places. The first
    of these that is set wins:

    1. ``UNENCODED_URL`` if ``IIS_WasUrlRewritten`` is ``1`` (IIS 7 URL
       Rewrite)
    2. ``HTTP_X_ORIGINAL_URL`` (IIS 7+ with ISAPI_Rewrite)
    3. ``HTTP_X_REWRITE_URL`` (older IIS rewriters)
    4. ``ORIG_PATH_INFO``, with any query string removed (CGI)
    5. ``REQUEST_URI``

    An absolute URI (``http://host:port/path``) is reduced to its path,
    query and fragment. Falls back to ``"/"``.
    """
    unencoded_url = server.get("UNENCODED_URL")
    if _is_flag_set(server.get("IIS_WasUrlRewritten")) and unencoded_url:
        _log("debug", "Request URI taken from UNENCODED_URL")
        return t.cast(str, unencoded_url)

    for key in ("HTTP_X_ORIGINAL_URL", "HTTP_X_REWRITE_URL"):
        value = server.get(key)
        if value:
            _log("debug", "Request URI taken from %s", key)
            return _strip_absolute(value)

    orig_path_info = server.get("ORIG_PATH_INFO")
    if orig_path_info:
        _log("debug", "Request URI taken from ORIG_PATH_INFO")
        return strip_query_string(orig_path_info)

    request_uri = server.get("REQUEST_URI")
    if request_uri:
        return _strip_absolute(request_uri)

    return "/"


def _strip_absolute(uri: str) -> str:
    stripped = _absolute_uri_re.sub("", uri)
    if stripped == uri:
        return uri
    if not stripped.startswith("/"):
        stripped = f"/{stripped}"
    return stripped


def _is_flag_set(value: t.Any) -> bool:
    return value is True or (not isinstance(value, bool) and str(value) == "1")


def marshal_host_and_port_from_headers(
    accumulator: HostAndPort, server: ServerMap, headers: t.Any
) -> HostAndPort:
    """获取请求的host和port, 写入 ``accumulator``.

    The ``Host`` header is used when present, with the port taken from a
    trailing ``:port`` (after the closing bracket of an IPv6 literal).
    Otherwise ``SERVER_NAME`` (or ``SERVER_ADDR``) and ``SERVER_PORT`` are
    used. Some clients make the server report an IPv6 address with the
    port inside the brackets as ``SERVER_NAME``, like
    ``[fe80::1:8080]``; in that case the host comes from ``SERVER_ADDR``
    and the port from what follows it inside the brackets, unless
    ``SERVER_PORT`` is set.

    Without a ``Host`` header or server name the host is ``""`` and the
    port ``None``.

    :param accumulator: Receives ``host`` and ``port``.
    :param server: The server variables.
    :param headers: A :class:`~mymessage.datastructures.HeaderBag` or a
        mapping of header names to values.
    :return: ``accumulator``.
    """
    host_header = _header_line(headers, "host")
    if host_header:
        accumulator.host, accumulator.port = split_host_port(host_header)
        return accumulator

    server_name = server.get("SERVER_NAME")
    server_addr = server.get("SERVER_ADDR")

    if not server_name:
        if not server_addr:
            return accumulator
        server_name = f"[{server_addr}]" if ":" in server_addr else server_addr

    accumulator.host = server_name
    accumulator.port = _to_int(server.get("SERVER_PORT"))

    if not server_addr or _ipv6_literal_re.match(server_name) is None:
        return accumulator

    # misinterpreted IPv6 address, the port may sit inside the brackets
    accumulator.host = f"[{server_addr}]"
    if accumulator.port is None:
        inner = server_name[1:-1]
        if inner.lower().startswith(f"{server_addr.lower()}:"):
            accumulator.port = _to_int(inner[len(server_addr) + 1 :])

    return accumulator


def _to_int(value: t.Any) -> int | None:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str) and value.isdigit():
        return int(value)
    return None


def _header_line(headers: t.Any, name: str) -> str:
    if isinstance(headers, HeaderBag):
        return headers.get_line(name)

    for key, value in headers.items():
        if isinstance(key, str) and key.lower() == name:
            if isinstance(value, (list, tuple)):
                return ", ".join(str(v) for v in value)
            return str(value)
    return ""


def marshal_uri_from_server(server: ServerMap, headers: t.Any) -> Uri:
    """从服务器变量和请求头重建请求的URI.

    - scheme: ``https`` if ``HTTPS`` is set to anything but ``off``, or
      the ``X-Forwarded-Proto`` header is ``https``; ``http`` otherwise.
    - host and port: see :func:`marshal_host_and_port_from_headers`.
    - path, query and fragment: split from :func:`marshal_request_uri`.
      ``QUERY_STRING``, when set, replaces the query.

    :raise InvalidUriComponent: the host or port reported by the client is
        not valid in a URI.
    """
    https = server.get("HTTPS")
    if (https and str(https).lower() != "off") or _header_line(
        headers, "x-forwarded-proto"
    ) == "https":
        scheme = "https"
    else:
        scheme = "http"

    uri = Uri().with_scheme(scheme)

    accumulator = marshal_host_and_port_from_headers(HostAndPort(), server, headers)
    if accumulator.host:
        uri = uri.with_host(accumulator.host)
        if accumulator.port:
            uri = uri.with_port(accumulator.port)

    path, _, fragment = marshal_request_uri(server).partition("#")
    path, _, query = path.partition("?")

    query_string = server.get("QUERY_STRING")
    if query_string is not None:
        query = query_string.lstrip("?")

    return uri.with_path(path).with_query(query).with_fragment(fragment)


def marshal_protocol_version(server: ServerMap) -> str:
    """从 ``SERVER_PROTOCOL`` 获取HTTP版本号, 如 ``HTTP/1.1`` -> ``1.1``.

    Defaults to ``"1.1"`` when the variable is missing.

    :raise UnrecognizedProtocolVersion: the value is not ``HTTP/<version>``.
    """
    if "SERVER_PROTOCOL" not in server:
        return "1.1"

    protocol = server["SERVER_PROTOCOL"]
    match = _server_protocol_re.match(protocol) if isinstance(protocol, str) else None

    if match is None:
        raise UnrecognizedProtocolVersion(f"Unrecognized protocol version {protocol!r}.")

    return match.group("version")


def normalize_files(files: cabc.Mapping[str, t.Any]) -> dict[str, t.Any]:
    """把上传文件描述树转换为以 :class:`UploadedFile` 为叶子的树.

    A file is described by the five keys ``tmp_name``, ``size``,
    ``error``, ``name`` and ``type``. For array-named form fields
    (``files[]``, ``files[avatar]``) each of the five holds a mapping (or
    list) with one entry per file instead of a single value; these
    parallel structures are zipped back into one file per key. Other
    mappings are walked recursively and existing :class:`UploadedFile`
    objects are kept.

    >>> normalize_files({"avatar": {"tmp_name": {"small": "/tmp/a"},
    ...     "size": {"small": 3}, "error": {"small": 0},
    ...     "name": {"small": "a.png"}, "type": {"small": "image/png"}}})
    {'avatar': {'small': <UploadedFile: 'a.png' ('image/png', error=0)>}}

    :raise InvalidUploadedFile: a leaf is neither a mapping nor an
        :class:`UploadedFile`, or a file description is invalid.
    """
    normalized: dict[str, t.Any] = {}

    for key, value in files.items():
        if isinstance(value, UploadedFile):
            normalized[key] = value
        elif isinstance(value, cabc.Mapping) and "tmp_name" in value:
            normalized[key] = _create_uploaded_file_from_spec(value)
        elif isinstance(value, cabc.Mapping):
            normalized[key] = normalize_files(value)
        else:
            raise InvalidUploadedFile(
                f"Invalid value in files specification for {key!r}; got {type(value).__name__}."
            )

    return normalized


def _create_uploaded_file_from_spec(spec: cabc.Mapping[str, t.Any]) -> t.Any:
    if isinstance(spec["tmp_name"], (cabc.Mapping, list, tuple)):
        return _normalize_nested_file_spec(spec)

    error = _to_int(spec.get("error"))
    return UploadedFile(
        spec["tmp_name"],
        _to_int(spec.get("size")),
        UPLOAD_ERR_OK if error is None else error,
        spec.get("name"),
        spec.get("type"),
    )


def _normalize_nested_file_spec(spec: cabc.Mapping[str, t.Any]) -> t.Any:
    tmp_names = spec["tmp_name"]
    keys: t.Iterable[t.Any]

    if isinstance(tmp_names, cabc.Mapping):
        keys = tmp_names.keys()
    else:
        keys = range(len(tmp_names))

    normalized = {
        key: _create_uploaded_file_from_spec(
            {field: _pick(spec.get(field), key) for field in _file_spec_keys}
        )
        for key in keys
    }

    if isinstance(tmp_names, cabc.Mapping):
        return normalized
    return list(normalized.values())


def _pick(container: t.Any, key: t.Any) -> t.Any:
    if isinstance(container, cabc.Mapping):
        return container.get(key)
    if isinstance(container, (list, tuple)) and key < len(container):
        return container[key]
    return None


def from_globals(
    server: ServerMap | None = None,
    query: cabc.Mapping[str, t.Any] | None = None,
    parsed_body: t.Any = None,
    cookies: cabc.Mapping[str, str] | None = None,
    files: cabc.Mapping[str, t.Any] | None = None,
    apache_request_headers: ApacheRequestHeaders | None = None,
) -> ServerRequest:
    """用服务器变量创建一个 :class:`~mymessage.wrappers.ServerRequest`.

    :param server: The server variables. Defaults to :data:`os.environ`,
        which is where a CGI script finds them.
    :param query: The query parameters. Parsed from ``QUERY_STRING`` if not
        given.
    :param parsed_body: The deserialized body, passed through unchanged.
    :param cookies: The cookies. Parsed from the ``Cookie`` header if not
        given.
    :param files: The raw upload tree, see :func:`normalize_files`.
    :param apache_request_headers: See :func:`normalize_server`.

    The method defaults to ``GET``. The body stream is ``wsgi.input``
    when the server map has one. Otherwise it is standard input when the
    variables come from :data:`os.environ` (CGI), and an empty in-memory
    stream when a server map was passed in.

    :raise BadRequest: the variables describe an invalid request, for
        example a header value with a newline or a malformed ``Host``.
    :raise UnrecognizedProtocolVersion: see :func:`marshal_protocol_version`.
    """
    default_body = "memory"
    if server is None:
        server, default_body = os.environ, "input"

    server = normalize_server(server, apache_request_headers)
    uploaded_files = normalize_files(files or {})
    headers = marshal_headers(server)

    if cookies is None:
        cookies = parse_cookie(_header_line(headers, "cookie"))

    if query is None:
        query = dict(parse_qsl(server.get("QUERY_STRING", ""), keep_blank_values=True))

    wsgi_input = server.get("wsgi.input")
    body = wsgi_input if is_stream(wsgi_input) else default_body

    return ServerRequest(
        server,
        uploaded_files,
        marshal_uri_from_server(server, headers),
        server.get("REQUEST_METHOD", "GET"),
        body,
        headers,
        cookies,
        query,
        parsed_body,
        marshal_protocol_version(server),
    )


def get_path_info(environ: WSGIEnvironment) -> str:
    """从 WSGI环境中获取 ``SCRIPT_NAME`` + ``PATH_INFO`` 返回

    PEP 3333 passes them as latin-1 decoded bytes; they are decoded as
    UTF-8 here.

    :param environ: 用于获取path的WSGI环境
    """
    path = environ.get("SCRIPT_NAME", "") + environ.get("PATH_INFO", "")
    return _wsgi_decoding_dance(path)


def from_wsgi(
    environ: WSGIEnvironment,
    parsed_body: t.Any = None,
    files: cabc.Mapping[str, t.Any] | None = None,
    apache_request_headers: ApacheRequestHeaders | None = None,
) -> ServerRequest:
    """用WSGI环境创建一个 :class:`~mymessage.wrappers.ServerRequest`.

    WSGI servers don't have to provide ``REQUEST_URI``; when it is missing
    it is rebuilt from ``SCRIPT_NAME`` and ``PATH_INFO``. ``wsgi.url_scheme``
    of ``https`` sets ``HTTPS``. The body is ``wsgi.input``.

    See :func:`from_globals` for the other parameters.
    """
    server = dict(environ)

    if "REQUEST_URI" not in server:
        server["REQUEST_URI"] = get_path_info(environ) or "/"

    if "HTTPS" not in server and environ.get("wsgi.url_scheme") == "https":
        server["HTTPS"] = "on"

    return from_globals(
        server, None, parsed_body, None, files, apache_request_headers
    )
