"""REST client the admin dashboard uses to talk to the store API.

Every response is the ``{success, data, message}`` envelope. Anything that is
not a 2xx with ``success: true`` becomes an :class:`ApiError`; 401/403 become
:class:`AuthenticationRequired`, which also drops the stored token.
"""

from __future__ import annotations

from typing import Any, BinaryIO, Callable, Dict, List, Optional

import requests

from shopcore.services.logging import log_event

GENERIC_ERROR = "Something went wrong. Please try again."


class ApiError(Exception):
    def __init__(self, status: int, message: str, errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.status = status
        self.message = message
        self.errors = errors or []

    @property
    def first_error(self) -> str:
        """Message of the first field error, or the envelope message."""
        if self.errors:
            return self.errors[0].get("message") or self.message
        return self.message


class AuthenticationRequired(ApiError):
    pass


class ApiClient:
    def __init__(
        self,
        base_url: str,
        *,
        session: Optional[requests.Session] = None,
        token: Optional[str] = None,
        timeout: float = 30.0,
        on_auth_failure: Optional[Callable[[AuthenticationRequired], None]] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.token = token
        self.timeout = timeout
        self.on_auth_failure = on_auth_failure

    def login(self, username: str, password: str) -> Dict[str, Any]:
        data = self.post("/auth/login", {"username": username, "password": password})
        self.token = data.get("token")
        return data

    def logout(self) -> None:
        try:
            self.post("/auth/logout")
        finally:
            self.token = None

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        return self.request("POST", path, json=payload)

    def put(self, path: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        return self.request("PUT", path, json=payload)

    def patch(self, path: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        return self.request("PATCH", path, json=payload)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)

    def upload(self, kind: str, fileobj: BinaryIO, filename: str, content_type: str = "application/octet-stream") -> Dict:
        """POST a file as multipart field ``image``; returns ``{url, path, ...}``."""
        return self.request("POST", f"/upload/{kind}", files={"image": (filename, fileobj, content_type)})

    def request(self, method: str, path: str, **kwargs) -> Any:
        """Send a request and return the envelope's ``data`` (or ``{}``)."""
        body = self.request_envelope(method, path, **kwargs)
        data = body.get("data")
        return data if data is not None else {}

    def request_envelope(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        headers = dict(kwargs.pop("headers", None) or {})
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        try:
            response = self.session.request(method, url, headers=headers, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            log_event("error", "api.transport_error", method=method, path=path, error=str(exc))
            raise ApiError(0, GENERIC_ERROR) from exc

        status = response.status_code
        try:
            body = response.json()
        except ValueError:
            body = None
        if not isinstance(body, dict):
            log_event("error", "api.invalid_response", method=method, path=path, status=status)
            raise ApiError(status, GENERIC_ERROR)

        message = body.get("message") or GENERIC_ERROR
        if status in (401, 403):
            self.token = None
            error = AuthenticationRequired(status, message, body.get("errors"))
            log_event("warning", "api.auth_failure", method=method, path=path, status=status)
            if self.on_auth_failure is not None:
                self.on_auth_failure(error)
            raise error
        if not 200 <= status < 300 or not body.get("success"):
            log_event("warning", "api.request_failed", method=method, path=path, status=status, message=message)
            raise ApiError(status, message, body.get("errors"))
        return body
