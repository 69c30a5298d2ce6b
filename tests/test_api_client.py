import pytest

from dashboard.api_client import ApiClient, ApiError, AuthenticationRequired

from .conftest import BASE_URL


class _Reply:
    def __init__(self, status_code, body):
        self.status_code = status_code
        self._body = body

    def json(self):
        if isinstance(self._body, Exception):
            raise self._body
        return self._body


class _ScriptedSession:
    def __init__(self, *replies):
        self.replies = list(replies)
        self.sent = []

    def request(self, method, url, **kwargs):
        self.sent.append((method, url, kwargs))
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


def test_returns_envelope_data_and_sends_token():
    session = _ScriptedSession(_Reply(200, {"success": True, "data": {"brands": []}}))
    client = ApiClient(BASE_URL, session=session, token="abc")
    assert client.get("/brands") == {"brands": []}
    method, url, kwargs = session.sent[0]
    assert (method, url) == ("GET", f"{BASE_URL}/brands")
    assert kwargs["headers"]["Authorization"] == "Bearer abc"


def test_error_envelope_becomes_api_error():
    errors = [{"field": "name", "message": "Brand name is required", "code": "missing"}]
    session = _ScriptedSession(_Reply(400, {"success": False, "message": "Validation failed", "errors": errors}))
    with pytest.raises(ApiError) as info:
        ApiClient(BASE_URL, session=session).post("/brands", {})
    assert info.value.status == 400
    assert info.value.first_error == "Brand name is required"


def test_success_false_on_2xx_is_still_an_error():
    session = _ScriptedSession(_Reply(200, {"success": False, "message": "Nope"}))
    with pytest.raises(ApiError, match="Nope"):
        ApiClient(BASE_URL, session=session).get("/x")


def test_auth_failure_clears_token_and_calls_back():
    seen = []
    session = _ScriptedSession(_Reply(401, {"success": False, "message": "Authentication required"}))
    client = ApiClient(BASE_URL, session=session, token="stale", on_auth_failure=seen.append)
    with pytest.raises(AuthenticationRequired):
        client.get("/configuration")
    assert client.token is None
    assert len(seen) == 1 and seen[0].status == 401
    assert len(session.sent) == 1


def test_transport_and_parse_failures_are_status_zero(connection_error):
    session = _ScriptedSession(connection_error, _Reply(502, ValueError("html page")))
    client = ApiClient(BASE_URL, session=session)
    with pytest.raises(ApiError) as first:
        client.get("/brands")
    assert first.value.status == 0
    with pytest.raises(ApiError) as second:
        client.get("/brands")
    assert second.value.status == 502


def test_login_against_app_stores_token(backed_session):
    client = ApiClient(BASE_URL, session=backed_session)
    data = client.login("admin", "correct-horse")
    assert client.token == data["token"]
    assert client.get("/configuration")["defaultCurrency"] == "NPR"
