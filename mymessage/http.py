from __future__ import annotations

import re
import typing as t
from urllib.parse import unquote

_token_chars = frozenset(
    "!#$%&'*+-.0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ^_`abcdefghijklmnopqrstuvwxyz|~"
)
# \n not preceded by \r, \r not followed by \n, or \r\n not followed by
# space or horizontal tab.
_crlf_injection_re = re.compile(r"(?:(?<!\r)\n)|(?:\r(?!\n))|(?:\r\n(?![ \t]))")
_protocol_version_re = re.compile(r"^[1-9]\d*(?:\.\d)?$")

HTTP_STATUS_CODES = {
    100: "Continue",
    101: "Switching Protocols",
    102: "Processing",
    103: "Early Hints",
    200: "OK",
    201: "Created",
    202: "Accepted",
    203: "Non Authoritative Information",
    204: "No Content",
    205: "Reset Content",
    206: "Partial Content",
    207: "Multi Status",
    208: "Already Reported",
    226: "IM Used",
    300: "Multiple Choices",
    301: "Moved Permanently",
    302: "Found",
    303: "See Other",
    304: "Not Modified",
    305: "Use Proxy",
    307: "Temporary Redirect",
    308: "Permanent Redirect",
    400: "Bad Request",
    401: "Unauthorized",
    402: "Payment Required",
    403: "Forbidden",
    404: "Not Found",
    405: "Method Not Allowed",
    406: "Not Acceptable",
    407: "Proxy Authentication Required",
    408: "Request Timeout",
    409: "Conflict",
    410: "Gone",
    411: "Length Required",
    412: "Precondition Failed",
    413: "Request Entity Too Large",
    414: "Request URI Too Long",
    415: "Unsupported Media Type",
    416: "Requested Range Not Satisfiable",
    417: "Expectation Failed",
    418: "I'm a teapot",
    421: "Misdirected Request",
    422: "Unprocessable Entity",
    423: "Locked",
    424: "Failed Dependency",
    425: "Too Early",
    426: "Upgrade Required",
    428: "Precondition Required",
    429: "Too Many Requests",
    431: "Request Header Fields Too Large",
    451: "Unavailable For Legal Reasons",
    500: "Internal Server Error",
    501: "Not Implemented",
    502: "Bad Gateway",
    503: "Service Unavailable",
    504: "Gateway Timeout",
    505: "HTTP Version Not Supported",
    506: "Variant Also Negotiates",
    507: "Insufficient Storage",
    508: "Loop Detected",
    510: "Not Extended",
    511: "Network Authentication Failed",
}


def is_token(value: t.Any) -> bool:
    """Check that ``value`` is a non-empty string of HTTP token characters,
    as used for header names and request methods.

    >>> is_token("X-Foo")
    True
    >>> is_token("X Foo")
    False
    """
    return isinstance(value, str) and bool(value) and _token_chars.issuperset(value)


def is_safe_header_value(value: str) -> bool:
    """检查header值中是否有CRLF注入或不可见字符.

    只允许 ``\\r\\n`` 后紧跟空格或制表符的折叠形式. 除制表符和CR/LF之外的控制字符
    以及DEL会被拒绝. 非ASCII字符 (例如CGI下按UTF-8解码的值) 是允许的.
    """
    if _crlf_injection_re.search(value) is not None:
        return False

    for char in value:
        code = ord(char)
        if (code < 32 and code not in (9, 10, 13)) or code == 127:
            return False

    return True


def is_valid_protocol_version(version: t.Any) -> bool:
    """Check a bare protocol version such as ``1.1`` or ``2``."""
    return isinstance(version, str) and _protocol_version_re.match(version) is not None


def parse_cookie(cookie: str | None) -> dict[str, str]:
    """解析 ``Cookie`` 请求头为 name -> value 字典.

    值两端的双引号会被去掉并做百分号解码. 没有 ``=`` 的片段以及名称不是
    token的cookie会被忽略. 同名cookie以第一个为准.

    >>> parse_cookie('a=1; b="two%20words"')
    {'a': '1', 'b': 'two words'}

    :param cookie: ``Cookie`` 请求头的值
    """
    rv: dict[str, str] = {}
    if not cookie:
        return rv

    for pair in cookie.split(";"):
        name, sep, value = pair.partition("=")
        name = name.strip()
        if not sep or not is_token(name) or name in rv:
            continue

        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] == '"':
            value = value[1:-1]
        rv[name] = unquote(value)

    return rv
