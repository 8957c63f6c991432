"""Errors raised while building or deriving messages.

Every error is an :class:`HTTPException` so a dispatch layer can turn it
into an error response, and also a subclass of the matching builtin
(usually :exc:`ValueError`) so plain Python code can catch it without
knowing about HTTP::

    try:
        request = from_globals(environ)
    except BadRequest as e:
        response = e.get_response()
"""
from __future__ import annotations

import typing as t

from markupsafe import escape

if t.TYPE_CHECKING:
    from .sansio.response import Response


class HTTPException(Exception):
    """The base class for all HTTP exceptions. Catch the subclasses
    independently, or render a default error page from any of them with
    :meth:`get_response`.
    """

    code: int | None = None
    description: str | None = None

    def __init__(
        self,
        description: str | None = None,
        response: Response | None = None,
    ) -> None:
        super().__init__()
        if description is not None:
            self.description = description
        self.response = response

    @property
    def name(self) -> str:
        """The status name."""
        from .http import HTTP_STATUS_CODES

        return HTTP_STATUS_CODES.get(self.code, "Unknown Error")  # type: ignore

    def get_description(self) -> str:
        """Get the description."""
        if self.description is None:
            description = ""
        else:
            description = self.description

        description = escape(description).replace("\n", "<br>")
        return f"<p>{description}</p>"

    def get_body(self) -> str:
        """Get the HTML body."""
        return (
            "<!doctype html>\n"
            "<html lang=en>\n"
            f"<title>{self.code} {escape(self.name)}</title>\n"
            f"<h1>{escape(self.name)}</h1>\n"
            f"{self.get_description()}\n"
        )

    def get_headers(self) -> list[tuple[str, str]]:
        """Get a list of headers."""
        return [("Content-Type", "text/html; charset=utf-8")]

    def get_response(self) -> Response:
        """Get a response object with the rendered error page as its body.

        If a response was passed when creating the exception it is returned
        unchanged.
        """
        from .sansio.response import Response
        from .stream import open_stream

        if self.response is not None:
            return self.response

        body = open_stream("memory")
        body.write(self.get_body().encode())
        body.seek(0)
        return Response(body, self.code, dict(self.get_headers()))  # type: ignore[arg-type]

    def __str__(self) -> str:
        code = self.code if self.code is not None else "???"
        return f"{code} {self.name}: {self.description}"

    def __repr__(self) -> str:
        code = self.code if self.code is not None else "???"
        return f"<{type(self).__name__} '{code}: {self.name}'>"


class BadRequest(HTTPException):
    """*400* Bad Request

    Raise if the client sends something the application or server
    cannot handle.
    """

    code = 400
    description = (
        "The browser (or proxy) sent a request that this server could not understand."
    )


class BadRequestKeyError(BadRequest, KeyError):
    """An exception that is used to signal both a :exc:`KeyError` and a
    :exc:`BadRequest`. Raised by the header bag for missing keys.
    """

    def __init__(self, arg: object | None = None, *args: t.Any, **kwargs: t.Any):
        super().__init__(*args, **kwargs)

        if arg is None:
            KeyError.__init__(self)
        else:
            KeyError.__init__(self, arg)
            self.description = f"KeyError: {arg!r}"


class InvalidArgument(BadRequest, ValueError):
    """A value handed to a message constructor or ``with_*`` method
    violates the message invariants. Nothing is truncated or repaired;
    the whole operation is rejected.
    """


class InvalidMethod(InvalidArgument):
    """The request method is not an HTTP token."""


class InvalidUri(InvalidArgument):
    """A URI could not be parsed, or something that is not a URI was
    passed where one was expected.
    """


class InvalidUriComponent(InvalidArgument):
    """A single URI component (scheme, port, path, ...) is invalid."""


class InvalidHeader(InvalidArgument):
    """Base class for header name and value errors."""


class InvalidHeaderName(InvalidHeader):
    """A header name is not an HTTP token."""


class InvalidHeaderValue(InvalidHeader):
    """A header value has the wrong type or contains CR/LF injection
    sequences or invisible characters.
    """


class InvalidRequestTarget(InvalidArgument):
    """The request target contains whitespace."""


class InvalidBodyResource(InvalidArgument):
    """The body is neither a stream name nor a readable stream."""


class InvalidProtocolVersion(InvalidArgument):
    """The protocol version is not of the form ``1.1`` or ``2``."""


class InvalidStatus(InvalidArgument):
    """A response status code outside ``100..599``."""


class InvalidUploadedFile(InvalidArgument):
    """An uploaded file descriptor or files tree is malformed."""


class HTTPVersionNotSupported(HTTPException):
    """*505* HTTP Version Not Supported"""

    code = 505
    description = (
        "The server does not support the HTTP protocol version used in the request."
    )


class UnrecognizedProtocolVersion(HTTPVersionNotSupported, ValueError):
    """``SERVER_PROTOCOL`` does not look like ``HTTP/<version>``."""
