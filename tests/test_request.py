import io

import pytest

from mymessage.exceptions import InvalidBodyResource
from mymessage.exceptions import InvalidHeader
from mymessage.exceptions import InvalidHeaderValue
from mymessage.exceptions import InvalidMethod
from mymessage.exceptions import InvalidProtocolVersion
from mymessage.exceptions import InvalidRequestTarget
from mymessage.exceptions import InvalidUri
from mymessage.sansio import Request
from mymessage.urls import Uri


@pytest.fixture
def request_():
    return Request()


def test_method_is_empty_by_default(request_):
    assert request_.method == ""


def test_with_method_returns_new_instance(request_):
    new = request_.with_method("GET")
    assert new is not request_
    assert new.method == "GET"
    assert request_.method == ""


def test_unpopulated_uri_by_default(request_):
    uri = request_.uri
    assert isinstance(uri, Uri)
    assert uri.scheme == ""
    assert uri.host == ""
    assert uri.port is None
    assert uri.path == ""


def test_with_uri_returns_new_instance(request_):
    request = request_.with_uri(Uri("https://example.com:10082/foo/bar?baz=bat"))
    request2 = request.with_uri(Uri("/baz/bat?foo=bar"))
    assert request is not request_
    assert request2 is not request
    assert str(request2.uri) == "/baz/bat?foo=bar"


def test_constructor_accepts_all_parts():
    uri = Uri("http://example.com/")
    body = io.BytesIO()
    request = Request(uri, "POST", body, {"x-foo": ["bar"]})

    assert request.uri is uri
    assert request.method == "POST"
    assert request.body is body
    assert request.headers.to_dict()["x-foo"] == ["bar"]


def test_default_body_is_writable():
    request = Request()
    request.body.write(b"test")
    request.body.seek(0)
    assert request.body.read() == b"test"


def test_body_is_shared_between_derived_instances():
    request = Request()
    derived = request.with_method("POST").with_header("X-Foo", "bar")
    assert derived.body is request.body


def test_with_body_replaces_body():
    request = Request()
    body = io.BytesIO(b"data")
    assert request.with_body(body).body is body
    assert request.body is not body


@pytest.mark.parametrize("uri", [True, False, 1, 1.1, ["http://example.com"], object()])
def test_constructor_rejects_invalid_uri(uri):
    with pytest.raises(InvalidUri, match="Invalid URI"):
        Request(uri)


def test_constructor_rejects_unparsable_uri():
    with pytest.raises(InvalidUri, match="Invalid URI"):
        Request("http://[::1")


@pytest.mark.parametrize("method", [True, False, 1, 1.1, "BOGUS METHOD", ["POST"], object()])
def test_constructor_rejects_invalid_method(method):
    with pytest.raises(InvalidMethod, match="Unsupported HTTP method"):
        Request(None, method)


@pytest.mark.parametrize(
    "method",
    ["TRACE", "PROPFIND", "PROPPATCH", "MKCOL", "COPY", "MOVE", "LOCK", "UNLOCK", "#!ALPHA-1234&%"],
)
def test_custom_methods_following_token_grammar(method):
    assert Request(None, method).method == method


def test_with_method_empty_string_unsets():
    assert Request(None, "GET").with_method("").method == ""


def test_with_method_rejects_none():
    with pytest.raises(InvalidMethod):
        Request().with_method(None)


@pytest.mark.parametrize("body", [True, False, 1, 1.1, ["BODY"], object()])
def test_constructor_rejects_invalid_body(body):
    with pytest.raises(InvalidBodyResource, match="stream"):
        Request(None, None, body)


@pytest.mark.parametrize(
    ("headers", "contains"),
    [
        ([["INVALID"]], "header name"),
        ({0: ["INVALID"]}, "header name"),
        ({"x-invalid-null": None}, "header value type"),
        ({"x-invalid-true": True}, "header value type"),
        ({"x-invalid-false": False}, "header value type"),
        ({"x-invalid-object": object()}, "header value type"),
    ],
)
def test_constructor_rejects_invalid_headers(headers, contains):
    with pytest.raises(InvalidHeader, match=contains):
        Request(None, None, "memory", headers)


def test_validation_order_reports_uri_first():
    with pytest.raises(InvalidUri):
        Request(1, "BAD METHOD", True, {"x": None})


def test_validation_order_reports_method_before_body():
    with pytest.raises(InvalidMethod):
        Request(None, "BAD METHOD", True, {"x": None})


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("X-Foo\r-Bar", "value"),
        ("X-Foo\n-Bar", "value"),
        ("X-Foo\r\n-Bar", "value"),
        ("X-Foo\r\n\r\n-Bar", "value"),
        ("X-Foo-Bar", "value\rinjection"),
        ("X-Foo-Bar", "value\ninjection"),
        ("X-Foo-Bar", "value\r\ninjection"),
        ("X-Foo-Bar", "value\r\n\r\ninjection"),
        ("X-Foo-Bar", ["value\rinjection"]),
        ("X-Foo-Bar", ["value\ninjection"]),
        ("X-Foo-Bar", ["value\r\ninjection"]),
        ("X-Foo-Bar", ["value\r\n\r\ninjection"]),
    ],
)
def test_constructor_rejects_crlf_injection(name, value):
    with pytest.raises(InvalidHeader):
        Request(None, None, "memory", {name: value})


def test_with_header_rejects_crlf_injection(request_):
    with pytest.raises(InvalidHeaderValue):
        request_.with_header("X-Foo", "bar\r\nSet-Cookie: x=y")
    with pytest.raises(InvalidHeaderValue):
        request_.with_added_header("X-Foo", "bar\nbaz")


def test_request_target_is_slash_without_uri():
    assert Request().request_target == "/"


def test_request_target_is_slash_when_uri_has_no_path_or_query():
    assert Request().with_uri(Uri("http://example.com")).request_target == "/"


@pytest.mark.parametrize(
    ("uri", "expected"),
    [
        ("https://api.example.com/user", "/user"),
        ("https://api.example.com/user?foo=bar", "/user?foo=bar"),
        ("/user", "/user"),
        ("/user?foo=bar", "/user?foo=bar"),
        ("/foo/bar?baz=bat", "/foo/bar?baz=bat"),
        ("?only=query", "?only=query"),
    ],
)
def test_request_target_from_uri(uri, expected):
    request = Request().with_uri(Uri(uri)).with_method("GET")
    assert request.request_target == expected


@pytest.mark.parametrize(
    "target",
    [
        "*",
        "api.example.com",
        "https://api.example.com/users",
        "https://api.example.com/users?foo=bar",
        "/users",
        "/users?id=foo",
    ],
)
def test_can_provide_request_target(target):
    assert Request().with_request_target(target).request_target == target


@pytest.mark.parametrize("target", ["foo bar baz", "/foo\tbar", "/foo\n"])
def test_request_target_cannot_contain_whitespace(target):
    with pytest.raises(InvalidRequestTarget, match="Invalid request target"):
        Request().with_request_target(target)


def test_request_target_is_not_cached_between_uris():
    request = Request().with_uri(Uri("https://example.com/foo/bar"))
    original = request.request_target
    new = request.with_uri(Uri("http://mwop.net/bar/baz"))
    assert new.request_target != original
    assert new.request_target == "/bar/baz"


def test_with_uri_resets_request_target_override():
    request = Request().with_request_target("*")
    new = request.with_uri(Uri("http://example.com/foo"))
    assert request.request_target == "*"
    assert new.request_target == "/foo"


def test_request_target_override_survives_other_changes():
    request = Request().with_request_target("*").with_method("OPTIONS")
    assert request.request_target == "*"


def test_host_header_added_from_uri():
    request = Request("http://example.com")
    assert "Host" in request.headers.to_dict()
    assert request.get_header("host") == ["example.com"]
    assert request.get_header_line("host") == "example.com"


def test_host_header_includes_non_standard_port():
    request = Request("http://example.com:8080/")
    assert request.get_header_line("Host") == "example.com:8080"


def test_explicit_host_header_is_kept():
    request = Request("http://example.com", headers={"host": "example.org"})
    assert request.get_header("Host") == ["example.org"]


@pytest.mark.parametrize("uri", [None, Uri()])
def test_no_host_header_without_uri_host(uri):
    request = Request(uri)
    assert "Host" not in request.headers.to_dict()
    assert request.get_header("host") == []
    assert request.get_header_line("host") == ""


def test_preserve_host_keeps_existing_host_header():
    request = Request().with_added_header("Host", "example.com")
    new = request.with_uri(Uri().with_host("www.example.com"), True)
    assert new.get_header_line("Host") == "example.com"


def test_preserve_host_sets_host_when_header_missing():
    new = Request().with_uri(Uri("http://www.example.com/"), preserve_host=True)
    assert new.get_header_line("Host") == "www.example.com"


def test_uri_without_host_does_not_change_host_header():
    request = Request().with_added_header("Host", "example.com")
    new = request.with_uri(Uri())
    assert new.get_header_line("Host") == "example.com"


def test_host_header_updates_to_uri_host_and_port():
    request = Request().with_added_header("Host", "example.com")
    uri = Uri().with_host("www.example.com").with_port(10081)
    new = request.with_uri(uri)
    assert new.get_header_line("Host") == "www.example.com:10081"


@pytest.mark.parametrize(
    "host_key",
    ["host", "hosT", "hoST", "hOST", "HOST", "HOSt", "HOst", "Host", "HosT", "HOsT", "HoST", "HoSt", "hOSt", "hOsT", "hOst", "hoSt"],
)
def test_with_uri_overwrites_host_regardless_of_case(host_key):
    request = Request().with_header(host_key, "example.com")
    new = request.with_uri(Uri("http://example.org/foo/bar"))

    assert new.get_header_line("host") == "example.org"
    headers = new.headers.to_dict()
    assert "Host" in headers
    if host_key != "Host":
        assert host_key not in headers


def test_header_helpers():
    request = Request(headers={"X-Foo": ["a", "b"]})
    assert request.has_header("x-foo")
    assert request.get_header("X-FOO") == ["a", "b"]
    assert request.get_header_line("x-foo") == "a, b"
    assert not request.without_header("X-Foo").has_header("x-foo")
    assert request.with_added_header("x-foo", "c").get_header("X-Foo") == ["a", "b", "c"]
    assert request.has_header("x-foo")


def test_protocol_version():
    request = Request()
    assert request.protocol_version == "1.1"
    assert request.with_protocol_version("2").protocol_version == "2"
    assert request.protocol_version == "1.1"


@pytest.mark.parametrize("version", ["HTTP/1.1", "1.", "", "x", 1.1])
def test_invalid_protocol_version(version):
    with pytest.raises(InvalidProtocolVersion):
        Request().with_protocol_version(version)


def test_uri_with_newline_is_rejected_not_repaired():
    with pytest.raises(InvalidUri, match="Invalid URI"):
        Request("http://exa\nmple.com")
