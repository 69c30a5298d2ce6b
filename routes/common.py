"""Shared helpers for the /api/v1 blueprints."""

from __future__ import annotations

from functools import wraps
from typing import Any, Dict, Optional, Type, TypeVar

from flask import current_app, g, jsonify, request, session
from pydantic import BaseModel

from shopcore.services.errors import AuthError

API_PREFIX = "/api/v1"
SESSION_ADMIN_KEY = "store_admin"

SchemaT = TypeVar("SchemaT", bound=BaseModel)


def components() -> Dict[str, Any]:
    return current_app.extensions["store_components"]


def config():
    return current_app.config["STORE_CONFIG"]


def ok(data: Any = None, message: Optional[str] = None, status: int = 200):
    body: Dict[str, Any] = {"success": True}
    if data is not None:
        body["data"] = data
    if message:
        body["message"] = message
    return jsonify(body), status


def parse_body(schema: Type[SchemaT]) -> SchemaT:
    """Validate the JSON body; pydantic errors reach the app-level 400 handler."""
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        payload = {}
    return schema.model_validate(payload)


def _bearer_token() -> Optional[str]:
    header = request.headers.get("Authorization", "")
    if header.lower().startswith("bearer "):
        token = header[7:].strip()
        return token or None
    return None


def admin_required(view):
    """Allow the request through with an admin bearer token or admin session."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        token = _bearer_token()
        if token:
            g.admin_claims = components()["auth_service"].require_admin(token)
        elif session.get(SESSION_ADMIN_KEY):
            g.admin_claims = {"sub": session.get(SESSION_ADMIN_KEY), "role": "ADMIN"}
        else:
            raise AuthError("Authentication required")
        return view(*args, **kwargs)

    return wrapper
