"""Body resources.

Message bodies are plain binary file objects. This module only knows how
to open one from a stream name and how to tell whether an object can be
used as a body; reading, writing and seeking are left to the object.
"""
from __future__ import annotations

import io
import os
import sys
import tempfile
import typing as t

from .exceptions import InvalidBodyResource


def is_stream(obj: t.Any) -> bool:
    """Check if ``obj`` looks like a :class:`file`-like object that
    has a :meth:`~file.read` method.
    """
    return not isinstance(obj, (str, bytes)) and callable(getattr(obj, "read", None))


def open_stream(name: str, mode: str | None = None) -> t.IO[bytes]:
    """根据stream名称打开一个二进制stream.

    - ``"memory"``: 一个空的 :class:`io.BytesIO`
    - ``"temp"``: 超过1MB时写入磁盘的 :class:`tempfile.SpooledTemporaryFile`
    - ``"input"``: 进程的标准输入, 即CGI请求体
    - 其它字符串作为文件路径, 已存在时以 ``r+b`` 打开, 否则以 ``w+b`` 创建

    :param name: stream名称或文件路径
    :param mode: 覆盖打开文件路径时使用的模式
    :raise InvalidBodyResource: 名称为空或文件无法打开
    """
    if not isinstance(name, str) or not name:
        raise InvalidBodyResource(f"Invalid stream name {name!r}.")

    if name == "memory":
        return io.BytesIO()
    if name == "temp":
        return t.cast(t.IO[bytes], tempfile.SpooledTemporaryFile(max_size=1024 * 1024))
    if name == "input":
        return sys.stdin.buffer

    if mode is None:
        mode = "r+b" if os.path.exists(name) else "w+b"

    try:
        return t.cast(t.IO[bytes], open(name, mode))
    except OSError as e:
        raise InvalidBodyResource(f"Invalid stream {name!r}: {e.strerror}.") from e


def make_body(body: t.Any) -> t.IO[bytes]:
    """Turn a stream name or stream object into a message body.

    :raise InvalidBodyResource: ``body`` is neither.
    """
    if isinstance(body, str):
        return open_stream(body)
    if is_stream(body):
        return t.cast(t.IO[bytes], body)
    raise InvalidBodyResource(
        "Invalid stream provided; must be a stream name or a file-like object"
        f" with a read method, got {type(body).__name__}."
    )
