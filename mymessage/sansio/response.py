from __future__ import annotations

import typing as t
from http import HTTPStatus

from .._internal import _clone
from ..exceptions import InvalidStatus
from ..http import HTTP_STATUS_CODES
from .message import Message

_TResponse = t.TypeVar("_TResponse", bound="Response")


class Response(Message):
    """Represents the non-IO parts of an HTTP response: the status, the
    headers and a body stream. Like requests, responses are immutable.

    :param body: A stream name or a file-like object. Defaults to an empty
        in-memory stream.
    :param status: The status code for the response. Either an int, in
        which case the default reason phrase is added, or a string in
        the form ``{code} {reason}``, like ``404 Not Found``. Defaults
        to 200.
    :param headers: A mapping or iterable of ``(name, value)`` pairs.
    :param protocol_version: The HTTP version, like ``"1.1"``.
    """

    default_status = 200

    def __init__(
        self,
        body: str | t.IO[bytes] | None = None,
        status: int | str | HTTPStatus | None = None,
        headers: t.Any = None,
        protocol_version: str | None = None,
    ) -> None:
        super().__init__(body, headers, protocol_version)
        if status is None:
            status = self.default_status
        self._status_code, self._reason_phrase = self._clean_status(status)

    def _clean_status(self, value: t.Any) -> tuple[int, str]:
        if isinstance(value, str):
            value = value.strip()
            code_str, _, reason = value.partition(" ")
            try:
                status_code = int(code_str)
            except ValueError:
                raise InvalidStatus(f"Invalid status {value!r}; must start with a status code.") from None
            return self._filter_status_code(status_code), reason.strip() or _phrase(status_code)

        status_code = self._filter_status_code(value)
        return status_code, _phrase(status_code)

    @staticmethod
    def _filter_status_code(code: t.Any) -> int:
        if isinstance(code, bool) or not isinstance(code, int) or not 100 <= code <= 599:
            raise InvalidStatus(
                f"Invalid status code {code!r}; must be an integer between 100 and 599."
            )
        return int(code)

    @property
    def status_code(self) -> int:
        """The HTTP status code as a number."""
        return self._status_code

    @property
    def reason_phrase(self) -> str:
        return self._reason_phrase

    @property
    def status(self) -> str:
        """The HTTP status as a string, like ``200 OK``."""
        return f"{self._status_code} {self._reason_phrase}".rstrip()

    def with_status(
        self: _TResponse, code: int | HTTPStatus, reason_phrase: str = ""
    ) -> _TResponse:
        """Return a response with a new status. Without a reason phrase
        the standard one for the code is used.
        """
        status_code = self._filter_status_code(code)
        if not isinstance(reason_phrase, str) or not reason_phrase.isprintable():
            raise InvalidStatus("Invalid reason phrase; must be a printable string.")
        return _clone(
            self,
            status_code=status_code,
            reason_phrase=reason_phrase or _phrase(status_code),
        )

    def __repr__(self) -> str:
        return f"<{type(self).__name__} [{self.status}]>"


def _phrase(code: int) -> str:
    return HTTP_STATUS_CODES.get(code, "")
