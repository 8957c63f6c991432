from __future__ import annotations

import typing as t

from ..exceptions import InvalidUploadedFile
from ..stream import is_stream
from ..stream import open_stream

UPLOAD_ERR_OK = 0
UPLOAD_ERR_INI_SIZE = 1
UPLOAD_ERR_FORM_SIZE = 2
UPLOAD_ERR_PARTIAL = 3
UPLOAD_ERR_NO_FILE = 4
UPLOAD_ERR_NO_TMP_DIR = 6
UPLOAD_ERR_CANT_WRITE = 7
UPLOAD_ERR_EXTENSION = 8

UPLOAD_ERRORS = {
    UPLOAD_ERR_OK: "There is no error, the file uploaded with success",
    UPLOAD_ERR_INI_SIZE: "The uploaded file exceeds the server's maximum upload size",
    UPLOAD_ERR_FORM_SIZE: "The uploaded file exceeds the MAX_FILE_SIZE given in the HTML form",
    UPLOAD_ERR_PARTIAL: "The uploaded file was only partially uploaded",
    UPLOAD_ERR_NO_FILE: "No file was uploaded",
    UPLOAD_ERR_NO_TMP_DIR: "Missing a temporary folder",
    UPLOAD_ERR_CANT_WRITE: "Failed to write file to disk",
    UPLOAD_ERR_EXTENSION: "A server extension stopped the file upload",
}


class UploadedFile:
    """Describes one file submitted by a client. Only the description is
    held here; where the bytes live is up to whatever produced the upload
    tree, usually a temporary file path.

    >>> f = UploadedFile("/tmp/upload-1", 12, UPLOAD_ERR_OK, "a.txt", "text/plain")
    >>> f.client_filename
    'a.txt'

    :param stream_or_file: A file path (or stream name) or an open stream.
        Only checked when ``error`` is ``UPLOAD_ERR_OK``.
    :param size: The size in bytes, or ``None`` if unknown.
    :param error: One of the ``UPLOAD_ERR_*`` codes.
    :param client_filename: The filename sent by the client, if any.
    :param client_media_type: The media type sent by the client, if any.
    """

    def __init__(
        self,
        stream_or_file: str | t.IO[bytes],
        size: int | None,
        error: int,
        client_filename: str | None = None,
        client_media_type: str | None = None,
    ) -> None:
        if isinstance(error, bool) or not isinstance(error, int) or not 0 <= error <= 8:
            raise InvalidUploadedFile(
                f"Invalid error status for UploadedFile; must be an UPLOAD_ERR_* code, got {error!r}."
            )

        if error == UPLOAD_ERR_OK and not (
            (isinstance(stream_or_file, str) and stream_or_file) or is_stream(stream_or_file)
        ):
            raise InvalidUploadedFile("Invalid stream or file provided for UploadedFile.")

        if size is not None and (isinstance(size, bool) or not isinstance(size, int)):
            raise InvalidUploadedFile(
                f"Invalid size provided for UploadedFile; must be an int, got {type(size).__name__}."
            )

        if client_filename is not None and not isinstance(client_filename, str):
            raise InvalidUploadedFile(
                "Invalid client filename provided for UploadedFile; must be None or a string."
            )

        if client_media_type is not None and not isinstance(client_media_type, str):
            raise InvalidUploadedFile(
                "Invalid client media type provided for UploadedFile; must be None or a string."
            )

        self._source = stream_or_file
        self._size = size
        self._error = error
        self._client_filename = client_filename
        self._client_media_type = client_media_type

    @property
    def size(self) -> int | None:
        return self._size

    @property
    def error(self) -> int:
        return self._error

    @property
    def client_filename(self) -> str | None:
        return self._client_filename

    @property
    def client_media_type(self) -> str | None:
        return self._client_media_type

    @property
    def file(self) -> str | None:
        """The path the upload was stored at, or ``None`` if it was given
        as a stream.
        """
        return self._source if isinstance(self._source, str) else None

    @property
    def stream(self) -> t.IO[bytes]:
        """The uploaded content. A path is opened read-only on every access.

        :raise InvalidUploadedFile: the upload failed.
        """
        if self._error != UPLOAD_ERR_OK:
            raise InvalidUploadedFile(
                f"Cannot retrieve stream due to upload error: {UPLOAD_ERRORS.get(self._error, self._error)}."
            )
        if isinstance(self._source, str):
            return open_stream(self._source, "rb")
        return self._source

    def _key(self) -> tuple[t.Any, ...]:
        return (
            self._source,
            self._size,
            self._error,
            self._client_filename,
            self._client_media_type,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, UploadedFile):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __repr__(self) -> str:
        return (
            f"<{type(self).__name__}: {self._client_filename!r}"
            f" ({self._client_media_type!r}, error={self._error})>"
        )
