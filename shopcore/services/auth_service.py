import time
from typing import Any, Dict

import jwt
from werkzeug.security import check_password_hash

from .errors import AuthError, ForbiddenError
from .logging import log_event

ADMIN_ROLE = "ADMIN"


class AuthService:
    """Admin credential check plus HS256 bearer tokens."""

    algorithm = "HS256"

    def __init__(self, username: str, password_hash: str, secret: str, expires_minutes: int = 60 * 24 * 7):
        self._username = username
        self._password_hash = password_hash
        self._secret = secret
        self._expires_seconds = int(expires_minutes) * 60

    def login(self, username: str, password: str) -> Dict[str, Any]:
        if username != self._username or not check_password_hash(self._password_hash, password):
            log_event("warning", "auth.login_failed", username=username)
            raise AuthError("Invalid username or password")
        token = self.issue_token(username)
        log_event("info", "auth.login", username=username)
        return {
            "token": token,
            "expiresIn": self._expires_seconds,
            "user": {"username": username, "role": ADMIN_ROLE},
        }

    def issue_token(self, username: str, role: str = ADMIN_ROLE) -> str:
        now = int(time.time())
        payload = {
            "sub": username,
            "role": role,
            "iat": now,
            "exp": now + self._expires_seconds,
        }
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def verify_token(self, token: str) -> Dict[str, Any]:
        try:
            claims = jwt.decode(token, self._secret, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError as exc:
            raise AuthError("Token expired") from exc
        except jwt.InvalidTokenError as exc:
            raise AuthError("Invalid token") from exc
        return claims

    def require_admin(self, token: str) -> Dict[str, Any]:
        claims = self.verify_token(token)
        if claims.get("role") != ADMIN_ROLE:
            raise ForbiddenError("Admin access required")
        return claims
