import pytest
import requests

import esputnik.common.http_client as http_mod
from esputnik.common.errors import ESputnikError
from esputnik.common.http_client import ApiResponse, Transport, build_session
from tests.helpers.fakes import DummyResp, DummySession


def _transport(session, **kwargs):
    return Transport("user", "secret", session=session, **kwargs)


def test_build_session_has_json_headers_auth_and_no_retries():
    s = build_session("user", "secret")

    assert s.auth == ("user", "secret")
    assert s.headers["Accept"] == "application/json"
    assert s.headers["Content-Type"] == "application/json"
    https_adapter = s.adapters.get("https://")
    assert https_adapter.max_retries.total == 0


def test_request_builds_url_with_query_and_sends_defaults():
    sess = DummySession(DummyResp(payload={"version": "1.0"}))
    t = _transport(sess)

    resp = t.request("GET", "v1/groups", {"startindex": 1, "maxrows": 500, "name": "vip list"})

    call = sess.calls[0]
    assert call["method"] == "GET"
    assert call["url"] == "https://esputnik.com.ua/api/v1/groups?startindex=1&maxrows=500&name=vip+list"
    assert call["json"] is None
    assert call["headers"]["Accept"] == "application/json"
    assert call["headers"]["Content-Type"] == "application/json"
    assert call["auth"] == ("user", "secret")
    assert resp.status_code == 200
    assert resp.data == {"version": "1.0"}


def test_request_without_query_has_no_question_mark():
    sess = DummySession(DummyResp(payload={}))
    _transport(sess).request("GET", "v1/version")
    assert sess.calls[0]["url"] == "https://esputnik.com.ua/api/v1/version"


def test_custom_base_url_gets_trailing_slash():
    sess = DummySession(DummyResp(payload={}))
    _transport(sess, base_url="https://example.test/api").request("GET", "/v1/version")
    assert sess.calls[0]["url"] == "https://example.test/api/v1/version"


def test_request_uses_connect_timeout_only():
    sess = DummySession(DummyResp(payload={}))
    _transport(sess).request("GET", "v1/version")
    assert sess.calls[0]["timeout"] == (2.0, None)

    sess = DummySession(DummyResp(payload={}))
    _transport(sess, connect_timeout=0.5).request("GET", "v1/version")
    assert sess.calls[0]["timeout"] == (0.5, None)


def test_request_sends_json_body():
    sess = DummySession(DummyResp(payload={"id": 5}))
    resp = _transport(sess).request("POST", "v1/contact", {}, {"firstName": "Ann"})
    assert sess.calls[0]["json"] == {"firstName": "Ann"}
    assert resp.data == {"id": 5}


def test_empty_body_decodes_to_none():
    sess = DummySession(DummyResp(status_code=200, text=""))
    resp = _transport(sess).request("DELETE", "v1/contact/1")
    assert resp.data is None


def test_headers_are_returned_for_total_count():
    sess = DummySession(DummyResp(payload=[], headers={"TotalCount": "42"}))
    resp = _transport(sess).request("GET", "v1/contacts")
    assert resp.headers["totalcount"] == "42"
    assert resp.header_int("TotalCount") == 42


@pytest.mark.parametrize(
    "status,message",
    [
        (404, "Not found"),
        (401, "Unauthorized"),
        (400, "Request error: bad field"),
    ],
)
def test_mapped_client_errors(status, message):
    sess = DummySession(DummyResp(status_code=status, text="bad field" if status == 400 else "x"))

    with pytest.raises(ESputnikError) as e:
        _transport(sess).request("GET", "v1/contact/1")

    assert e.value.code == status
    assert e.value.message == message
    assert isinstance(e.value.__cause__, requests.HTTPError)


@pytest.mark.parametrize("status", [403, 409, 429, 500, 503])
def test_other_http_errors_propagate_unchanged(status):
    sess = DummySession(DummyResp(status_code=status, text="nope"))

    with pytest.raises(requests.HTTPError) as e:
        _transport(sess).request("GET", "v1/version")

    assert not isinstance(e.value, ESputnikError)
    assert e.value.response.status_code == status


def test_connection_error_is_not_wrapped():
    sess = DummySession(exc=requests.ConnectionError("refused"))

    with pytest.raises(requests.ConnectionError):
        _transport(sess).request("GET", "v1/version")


def test_http_error_without_response_is_reraised():
    class NoResponse(DummyResp):
        def raise_for_status(self):
            raise requests.HTTPError("no response")

    sess = DummySession(NoResponse(status_code=418))

    with pytest.raises(requests.HTTPError) as e:
        _transport(sess).request("GET", "v1/version")
    assert not isinstance(e.value, ESputnikError)


def test_bad_request_is_logged_with_short_body(monkeypatch):
    logged = []

    class FakeLogger:
        def debug(self, msg):
            pass

        def warning(self, msg):
            logged.append(msg)

        def error(self, msg):
            logged.append(msg)

    monkeypatch.setattr(http_mod, "logger", FakeLogger())
    sess = DummySession(DummyResp(status_code=400, text="x" * 2000))

    with pytest.raises(ESputnikError):
        _transport(sess).request("POST", "v1/contact", {}, {})

    assert logged[0]["esputnik"] == "request_error"
    assert len(logged[0]["body"]) == 803


def test_api_response_header_int_handles_garbage():
    assert ApiResponse(200, None, {"TotalCount": "abc"}).header_int("TotalCount") is None
    assert ApiResponse(200, None, {}).header_int("TotalCount") is None


def test_close_closes_session():
    sess = DummySession()
    _transport(sess).close()
    assert sess.closed is True
