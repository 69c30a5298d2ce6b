"""Shared fixtures: a store app on a temporary SQLite file plus a dashboard client wired to it."""

from io import BytesIO
from urllib.parse import urlsplit

import pytest
import requests
from PIL import Image
from werkzeug.security import generate_password_hash

from app import create_app
from config import StoreConfig
from dashboard.api_client import ApiClient

ADMIN_USER = "admin"
ADMIN_PASS = "correct-horse"
JWT_SECRET = "test-jwt-secret-that-is-at-least-32-bytes"
BASE_URL = "http://store.test/api/v1"


def png_bytes(size=(8, 8), color=(200, 30, 30)) -> bytes:
    buffer = BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture()
def store_config(tmp_path):
    return StoreConfig(
        secret_key="test-secret",
        database_url=f"sqlite:///{tmp_path / 'store.db'}",
        admin_username=ADMIN_USER,
        admin_password_hash=generate_password_hash(ADMIN_PASS),
        jwt_secret=JWT_SECRET,
        project_root=tmp_path,
        upload_root=tmp_path / "uploads",
        max_upload_bytes=64 * 1024,
        log_level="critical",
    )


@pytest.fixture()
def app(store_config):
    application = create_app(store_config)
    application.config["TESTING"] = True
    return application


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def admin_token(client):
    response = client.post("/api/v1/auth/login", json={"username": ADMIN_USER, "password": ADMIN_PASS})
    assert response.status_code == 200
    return response.get_json()["data"]["token"]


@pytest.fixture()
def admin_headers(admin_token):
    return {"Authorization": f"Bearer {admin_token}"}


class _Reply:
    def __init__(self, status_code, body):
        self.status_code = status_code
        self._body = body

    def json(self):
        if self._body is None:
            raise ValueError("response body is not JSON")
        return self._body


class FlaskBackedSession:
    """Stands in for ``requests.Session`` and routes calls into the Flask test client.

    ``fail(method, path, status=..., error=...)`` makes the next matching call
    return that status (or raise ``error``) without reaching the app.
    """

    def __init__(self, flask_client):
        self.flask_client = flask_client
        self.calls = []
        self._failures = {}

    def fail(self, method, path, status=500, message="Server exploded", error=None):
        self._failures[(method.upper(), path)] = (status, message, error)

    def request(self, method, url, params=None, json=None, files=None, headers=None, timeout=None, data=None):
        path = urlsplit(url).path
        self.calls.append((method.upper(), path, json))
        failure = self._failures.pop((method.upper(), path.replace("/api/v1", "", 1)), None)
        if failure is not None:
            status, message, error = failure
            if error is not None:
                raise error
            return _Reply(status, {"success": False, "message": message})

        kwargs = {"method": method, "headers": headers or {}, "query_string": params}
        if json is not None:
            kwargs["json"] = json
        if files:
            kwargs["data"] = {name: (fileobj, filename, ctype) for name, (filename, fileobj, ctype) in files.items()}
            kwargs["content_type"] = "multipart/form-data"
        response = self.flask_client.open(path, **kwargs)
        return _Reply(response.status_code, response.get_json(silent=True))


@pytest.fixture()
def backed_session(client):
    return FlaskBackedSession(client)


@pytest.fixture()
def api_client(backed_session):
    api = ApiClient(BASE_URL, session=backed_session)
    api.login(ADMIN_USER, ADMIN_PASS)
    return api


@pytest.fixture()
def connection_error():
    return requests.ConnectionError("connection refused")
