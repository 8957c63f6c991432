from __future__ import annotations

import copy
import logging
import sys
import typing as t

_logger: logging.Logger | None = None

_T = t.TypeVar("_T")


def _wsgi_decoding_dance(s: str) -> str:
    return s.encode("latin1").decode(errors="replace")


def _clone(obj: _T, **changes: t.Any) -> _T:
    """浅拷贝一个值对象并替换给定的私有属性, 原对象保持不变.

    未修改的子组件 (headers, body, uri) 在新旧实例之间共享引用.
    """
    new = copy.copy(obj)
    for name, value in changes.items():
        setattr(new, f"_{name}", value)
    return new


def _has_level_handler(logger: logging.Logger) -> bool:
    """检查logging chain中是否有处理给定logger level的handler"""
    level = logger.getEffectiveLevel()
    current = logger
    while current:
        if any(handler.level <= level for handler in current.handlers):
            return True
        if not current.propagate:
            break
        current = current.parent  # type: ignore[assignment]
    return False


class _ColorStreamHandler(logging.StreamHandler):  # type: ignore[type-arg]
    """在Win上，用Colorama包装stream以支持ANSI风格"""

    def __init__(self) -> None:
        try:
            import colorama
        except ImportError:
            stream = None
        else:
            stream = colorama.AnsiToWin32(sys.stderr)
        super().__init__(stream)


def _log(type: str, message: str, *args: t.Any, **kwargs: t.Any) -> None:
    """打印一条日志到'mymessage' logger中

    logger第一次被调用时会被创建.默认使用的等级为:data:`logging.INFO`. 如果没有针对
    日志记录器有效级别的处理程序，会增加一个:class:`logging.StreamHandler`
    """
    global _logger

    if _logger is None:
        _logger = logging.getLogger("mymessage")

        if _logger.level == logging.NOTSET:
            _logger.setLevel(logging.INFO)

        if not _has_level_handler(_logger):
            _logger.addHandler(_ColorStreamHandler())

    getattr(_logger, type)(message.rstrip(), *args, **kwargs)
