import io
from http import HTTPStatus

import pytest

from mymessage.exceptions import InvalidBodyResource
from mymessage.exceptions import InvalidHeaderValue
from mymessage.exceptions import InvalidStatus
from mymessage.sansio import Response


def test_defaults():
    response = Response()
    assert response.status_code == 200
    assert response.reason_phrase == "OK"
    assert response.status == "200 OK"
    assert response.protocol_version == "1.1"
    assert len(response.headers) == 0
    assert response.body.read() == b""


@pytest.mark.parametrize(
    ("status", "code", "phrase"),
    [
        (404, 404, "Not Found"),
        (HTTPStatus.CREATED, 201, "Created"),
        ("404 Not Found", 404, "Not Found"),
        ("299 Custom Thing", 299, "Custom Thing"),
        ("418", 418, "I'm a teapot"),
    ],
)
def test_status_forms(status, code, phrase):
    response = Response(status=status)
    assert response.status_code == code
    assert response.reason_phrase == phrase


def test_unknown_code_has_empty_phrase():
    response = Response(status=599)
    assert response.reason_phrase == ""
    assert response.status == "599"


@pytest.mark.parametrize("status", [99, 600, True, 200.0, "abc", "", [200]])
def test_invalid_status(status):
    with pytest.raises(InvalidStatus):
        Response(status=status)


def test_with_status():
    response = Response()
    new = response.with_status(404)
    assert new is not response
    assert new.status == "404 Not Found"
    assert response.status_code == 200
    assert response.with_status(200, "Fine").status == "200 Fine"


@pytest.mark.parametrize(("code", "phrase"), [(1000, ""), ("200", ""), (200, "bad\nphrase"), (200, None)])
def test_with_status_rejects_invalid(code, phrase):
    with pytest.raises(InvalidStatus):
        Response().with_status(code, phrase)


def test_body_and_headers():
    body = io.BytesIO(b"hello")
    response = Response(body, 200, {"Content-Type": "text/plain"})
    assert response.body is body
    assert response.get_header_line("content-type") == "text/plain"
    assert response.with_header("X-Foo", "bar").has_header("x-foo")
    assert not response.has_header("x-foo")


def test_temp_body():
    response = Response("temp")
    response.body.write(b"data")
    response.body.seek(0)
    assert response.body.read() == b"data"


def test_file_path_body(tmp_path):
    path = tmp_path / "body.txt"
    path.write_bytes(b"from disk")
    response = Response(str(path))
    assert response.body.read() == b"from disk"
    response.body.close()


def test_invalid_body():
    with pytest.raises(InvalidBodyResource):
        Response(123)


def test_invalid_header():
    with pytest.raises(InvalidHeaderValue):
        Response(headers={"Location": "/foo\r\nSet-Cookie: a=b"})
