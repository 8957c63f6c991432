from __future__ import annotations

import re

from ..urls import DEFAULT_PORTS

_port_re = re.compile(r":(\d+)$")


def get_host(scheme: str, host: str, port: int | None = None) -> str:
    """Return the ``Host`` header value for the given URI parts.

    The host will only contain the port if it is different than the
    standard port for the protocol.

    >>> get_host("http", "example.com", 8080)
    'example.com:8080'
    >>> get_host("https", "example.com", 443)
    'example.com'

    :param scheme: The protocol the request used, like ``https``.
    :param host: The host name or bracketed IPv6 literal.
    :param port: The port, or ``None``.
    """
    if not host:
        return ""

    if port is None or DEFAULT_PORTS.get(scheme) == port:
        return host

    return f"{host}:{port}"


def split_host_port(value: str) -> tuple[str, int | None]:
    """把 ``host[:port]`` 拆分为host和port. 无端口时port为 ``None``.

    IPv6字面量需要用方括号包裹, 只有 ``]`` 之后的 ``:port`` 才被当作端口::

        >>> split_host_port("[::1]:8080")
        ('[::1]', 8080)
        >>> split_host_port("[::1]")
        ('[::1]', None)
    """
    if not value.startswith("[") and value.count(":") > 1:
        # bare IPv6 address, the last group is not a port
        return value, None

    match = _port_re.search(value)

    if match is None:
        # "host:" with an empty port
        return (value[:-1] if value.endswith(":") else value), None

    return value[: match.start()], int(match.group(1))
