import pytest

from mymessage import ServerRequest
from mymessage.datastructures import UPLOAD_ERR_OK
from mymessage.datastructures import UploadedFile
from mymessage.exceptions import InvalidUploadedFile
from mymessage.urls import Uri


@pytest.fixture
def request_():
    return ServerRequest()


def test_collections_are_empty_by_default(request_):
    assert request_.server_params == {}
    assert request_.uploaded_files == {}
    assert request_.cookie_params == {}
    assert request_.query_params == {}
    assert request_.parsed_body is None
    assert request_.attributes == {}


def test_constructor_sets_everything():
    server = {"foo": "bar", "baz": "bat"}
    upload = UploadedFile("memory", 0, UPLOAD_ERR_OK)
    request = ServerRequest(
        server,
        {"files": upload},
        "http://example.com",
        "POST",
        "memory",
        {"host": ["example.com"]},
        {"boo": "foo"},
        {"bar": "bat"},
        {"bat": "baz"},
        "1.2",
    )

    assert request.server_params == server
    assert request.uploaded_files == {"files": upload}
    assert isinstance(request.uri, Uri)
    assert str(request.uri) == "http://example.com"
    assert request.method == "POST"
    assert request.get_header("Host") == ["example.com"]
    assert request.cookie_params == {"boo": "foo"}
    assert request.query_params == {"bar": "bat"}
    assert request.parsed_body == {"bat": "baz"}
    assert request.protocol_version == "1.2"


def test_server_params_are_copied():
    server = {"foo": "bar"}
    request = ServerRequest(server)
    server["foo"] = "changed"
    assert request.server_params["foo"] == "bar"


def test_collections_are_read_only(request_):
    with pytest.raises(TypeError):
        request_.query_params["foo"] = "bar"
    with pytest.raises(TypeError):
        request_.server_params.update(foo="bar")
    with pytest.raises(TypeError):
        request_.attributes.pop("foo")


def test_with_query_params(request_):
    new = request_.with_query_params({"foo": "bar"})
    assert new is not request_
    assert new.query_params == {"foo": "bar"}
    assert request_.query_params == {}


def test_with_cookie_params(request_):
    new = request_.with_cookie_params({"cookie": "value"})
    assert new.cookie_params == {"cookie": "value"}
    assert request_.cookie_params == {}


def test_with_parsed_body(request_):
    new = request_.with_parsed_body({"foo": "bar"})
    assert new.parsed_body == {"foo": "bar"}
    assert request_.parsed_body is None


def test_with_uploaded_files_accepts_nested_trees(request_):
    first = UploadedFile("memory", 0, UPLOAD_ERR_OK)
    second = UploadedFile("memory", 3, UPLOAD_ERR_OK, "b.txt")
    new = request_.with_uploaded_files({"avatar": first, "docs": {"list": [first, second]}})

    assert new.uploaded_files["avatar"] is first
    assert new.uploaded_files["docs"]["list"] == (first, second)
    assert request_.uploaded_files == {}


@pytest.mark.parametrize(
    "files",
    [
        {"avatar": "not a file"},
        {"docs": [UploadedFile("memory", 0, UPLOAD_ERR_OK), None]},
        {"nested": {"deeper": 1}},
        ["not", "a", "mapping"],
    ],
)
def test_invalid_uploaded_files_are_rejected(request_, files):
    with pytest.raises(InvalidUploadedFile):
        request_.with_uploaded_files(files)


def test_constructor_rejects_invalid_uploaded_files():
    with pytest.raises(InvalidUploadedFile):
        ServerRequest(uploaded_files={"avatar": object()})


def test_attributes(request_):
    new = request_.with_attribute("foo", "bar")
    assert new is not request_
    assert new.get_attribute("foo") == "bar"
    assert new.attributes == {"foo": "bar"}
    assert request_.get_attribute("foo") is None
    assert request_.get_attribute("foo", "default") == "default"


def test_attribute_value_can_be_none(request_):
    new = request_.with_attribute("foo", None)
    assert "foo" in new.attributes
    assert new.get_attribute("foo", "default") is None


def test_without_attribute(request_):
    new = request_.with_attribute("foo", "bar")
    removed = new.without_attribute("foo")
    assert removed is not new
    assert "foo" not in removed.attributes
    assert new.get_attribute("foo") == "bar"


def test_without_missing_attribute_returns_same_instance(request_):
    assert request_.without_attribute("foo") is request_


def test_derived_requests_keep_server_state():
    request = ServerRequest({"REMOTE_ADDR": "127.0.0.1"}, method="GET").with_attribute("id", 1)
    new = request.with_method("POST").with_header("X-Foo", "bar")
    assert new.server_params == {"REMOTE_ADDR": "127.0.0.1"}
    assert new.get_attribute("id") == 1
    assert new.method == "POST"
