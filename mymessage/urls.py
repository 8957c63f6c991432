"""URI value object.

:class:`Uri` keeps the parts of a URI separately, validated and
normalized. Scheme and host are lower-cased, default ports are dropped,
and path, query and fragment are percent-encoded where needed without
double-encoding existing escapes. Like the messages, a :class:`Uri` is
never changed in place; the ``with_*`` methods return new instances.
"""
from __future__ import annotations

import re
import typing as t
from urllib.parse import quote
from urllib.parse import urlsplit

from ._internal import _clone
from .exceptions import InvalidUri
from .exceptions import InvalidUriComponent

#: Ports that are left out of the authority for their scheme.
DEFAULT_PORTS = {"http": 80, "ws": 80, "https": 443, "wss": 443}

_unreserved = r"a-zA-Z0-9_\-\.~"
_sub_delims = r"!\$&'\(\)\*\+,;="
_scheme_re = re.compile(r"^[a-z][a-z0-9+.\-]*$")
_path_encode_re = re.compile(
    rf"(?:[^{_unreserved}{_sub_delims}%:@/]+|%(?![A-Fa-f0-9]{{2}}))"
)
_query_encode_re = re.compile(
    rf"(?:[^{_unreserved}{_sub_delims}%:@/\?]+|%(?![A-Fa-f0-9]{{2}}))"
)
_bad_host_chars = frozenset("/?#@ \t\r\n")
_control_char_re = re.compile(r"[\x00-\x1f\x7f]")


def _encode_match(match: re.Match[str]) -> str:
    return quote(match.group(0), safe="")


def _filter_path(path: str) -> str:
    return _path_encode_re.sub(_encode_match, path)


def _filter_query_or_fragment(value: str) -> str:
    return _query_encode_re.sub(_encode_match, value)


def _filter_query(query: str) -> str:
    if query.startswith("?"):
        query = query[1:]

    parts = []
    for pair in query.split("&"):
        key, sep, value = pair.partition("=")
        parts.append(f"{_filter_query_or_fragment(key)}{sep}{_filter_query_or_fragment(value)}")
    return "&".join(parts)


def _filter_scheme(scheme: str) -> str:
    scheme = scheme.lower()
    scheme = re.sub(r"[:/]*$", "", scheme)
    if scheme and _scheme_re.match(scheme) is None:
        raise InvalidUriComponent(
            f"Invalid URI scheme {scheme!r}; must start with a letter followed by"
            " letters, digits, '+', '-' or '.'."
        )
    return scheme


def _filter_port(port: t.Any) -> int | None:
    if port is None:
        return None

    if isinstance(port, str) and port.isdigit():
        port = int(port)

    if isinstance(port, bool) or not isinstance(port, int) or not 1 <= port <= 65535:
        raise InvalidUriComponent(
            f"Invalid port {port!r} specified; must be a valid TCP/UDP port."
        )
    return port


def _split_netloc(netloc: str) -> tuple[str, str]:
    """Return ``(user_info, host)`` from an authority, dropping the port.
    IPv6 literals keep their brackets.
    """
    user_info, _, host_port = netloc.rpartition("@")

    if host_port.startswith("["):
        host = host_port[: host_port.find("]") + 1]
    else:
        host = host_port.partition(":")[0]

    return user_info, host.lower()


class Uri:
    """An immutable URI.

    >>> uri = Uri("HTTPS://User@Example.COM:443/foo bar?q=1#top")
    >>> uri.host, uri.port, uri.path
    ('example.com', None, '/foo bar')
    >>> str(uri)
    'https://User@example.com/foo%20bar?q=1#top'

    :param uri: The URI to parse. Defaults to an empty URI.
    :raise InvalidUri: ``uri`` is not a string or can't be parsed.
    """

    def __init__(self, uri: str = "") -> None:
        if not isinstance(uri, str):
            raise InvalidUri(f"Invalid URI; must be a string, got {type(uri).__name__}.")

        self._scheme = ""
        self._user_info = ""
        self._host = ""
        self._port: int | None = None
        self._path = ""
        self._query = ""
        self._fragment = ""

        if uri:
            self._parse(uri)

    def _parse(self, uri: str) -> None:
        # urlsplit drops tab, CR and LF without a word
        if _control_char_re.search(uri) is not None:
            raise InvalidUri(f"Invalid URI {uri!r}; must not contain control characters.")

        try:
            parts = urlsplit(uri)
            port = parts.port
        except ValueError as e:
            raise InvalidUri(f"Invalid URI {uri!r}; {e}.") from e

        try:
            self._scheme = _filter_scheme(parts.scheme)
            self._user_info, self._host = _split_netloc(parts.netloc)
            self._port = _filter_port(port)
        except InvalidUriComponent as e:
            raise InvalidUri(f"Invalid URI {uri!r}; {e.description}") from e

        self._path = _filter_path(parts.path)
        self._query = _filter_query(parts.query) if parts.query else ""
        self._fragment = _filter_query_or_fragment(parts.fragment)

    @classmethod
    def from_parts(
        cls,
        scheme: str = "",
        user_info: str = "",
        host: str = "",
        port: int | None = None,
        path: str = "",
        query: str = "",
        fragment: str = "",
    ) -> Uri:
        """Build a URI from separate components, validating each of them
        like the matching ``with_*`` method.
        """
        return (
            cls()
            .with_scheme(scheme)
            .with_user_info(user_info)
            .with_host(host)
            .with_port(port)
            .with_path(path)
            .with_query(query)
            .with_fragment(fragment)
        )

    @property
    def scheme(self) -> str:
        return self._scheme

    @property
    def user_info(self) -> str:
        return self._user_info

    @property
    def host(self) -> str:
        return self._host

    @property
    def port(self) -> int | None:
        """The port, or ``None`` if it isn't set or is the default port
        of the scheme.
        """
        if self._port is not None and DEFAULT_PORTS.get(self._scheme) == self._port:
            return None
        return self._port

    @property
    def path(self) -> str:
        return self._path

    @property
    def query(self) -> str:
        """The query string, without the leading ``?``."""
        return self._query

    @property
    def fragment(self) -> str:
        """The fragment, without the leading ``#``."""
        return self._fragment

    @property
    def authority(self) -> str:
        """``[user-info@]host[:port]``, or an empty string if there is
        no host.
        """
        if not self._host:
            return ""

        authority = self._host
        if self._user_info:
            authority = f"{self._user_info}@{authority}"

        port = self.port
        if port is not None:
            authority = f"{authority}:{port}"
        return authority

    def with_scheme(self, scheme: str) -> Uri:
        if not isinstance(scheme, str):
            raise InvalidUriComponent(
                f"Invalid URI scheme; must be a string, got {type(scheme).__name__}."
            )
        scheme = _filter_scheme(scheme)
        if scheme == self._scheme:
            return self
        return _clone(self, scheme=scheme)

    def with_user_info(self, user: str, password: str | None = None) -> Uri:
        if not isinstance(user, str) or not (password is None or isinstance(password, str)):
            raise InvalidUriComponent("Invalid user info; user and password must be strings.")
        info = f"{user}:{password}" if user and password else user
        if info == self._user_info:
            return self
        return _clone(self, user_info=info)

    def with_host(self, host: str) -> Uri:
        if not isinstance(host, str):
            raise InvalidUriComponent(f"Invalid host; must be a string, got {type(host).__name__}.")
        if not _bad_host_chars.isdisjoint(host):
            raise InvalidUriComponent(f"Invalid host {host!r}; contains URI delimiters or whitespace.")
        host = host.lower()
        if host == self._host:
            return self
        return _clone(self, host=host)

    def with_port(self, port: int | None) -> Uri:
        port = _filter_port(port)
        if port == self._port:
            return self
        return _clone(self, port=port)

    def with_path(self, path: str) -> Uri:
        if not isinstance(path, str):
            raise InvalidUriComponent(f"Invalid path; must be a string, got {type(path).__name__}.")
        if "?" in path:
            raise InvalidUriComponent("Invalid path provided; must not contain a query string.")
        if "#" in path:
            raise InvalidUriComponent("Invalid path provided; must not contain a URI fragment.")
        path = _filter_path(path)
        if path == self._path:
            return self
        return _clone(self, path=path)

    def with_query(self, query: str) -> Uri:
        if not isinstance(query, str):
            raise InvalidUriComponent(f"Invalid query; must be a string, got {type(query).__name__}.")
        if "#" in query:
            raise InvalidUriComponent("Query string must not include a URI fragment.")
        query = _filter_query(query) if query.lstrip("?") else ""
        if query == self._query:
            return self
        return _clone(self, query=query)

    def with_fragment(self, fragment: str) -> Uri:
        if not isinstance(fragment, str):
            raise InvalidUriComponent(
                f"Invalid fragment; must be a string, got {type(fragment).__name__}."
            )
        if fragment.startswith("#"):
            fragment = fragment[1:]
        fragment = _filter_query_or_fragment(fragment)
        if fragment == self._fragment:
            return self
        return _clone(self, fragment=fragment)

    def __str__(self) -> str:
        rv = ""
        if self._scheme:
            rv += f"{self._scheme}:"

        authority = self.authority
        if authority:
            rv += f"//{authority}"

        path = self._path
        if path:
            if authority and not path.startswith("/"):
                path = f"/{path}"
            elif not authority and path.startswith("//"):
                # would be read back as an authority
                path = "/" + path.lstrip("/")
            rv += path

        if self._query:
            rv += f"?{self._query}"
        if self._fragment:
            rv += f"#{self._fragment}"
        return rv

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Uri):
            return NotImplemented
        return str(self) == str(other)

    def __hash__(self) -> int:
        return hash(str(self))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self)!r})"
