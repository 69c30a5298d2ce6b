"""Admin login/logout."""

from __future__ import annotations

from flask import Blueprint, session

from shopcore.schemas import LoginRequest

from .common import API_PREFIX, SESSION_ADMIN_KEY, components, ok, parse_body

auth_bp = Blueprint("store_auth", __name__, url_prefix=f"{API_PREFIX}/auth")


@auth_bp.post("/login")
def login():
    payload = parse_body(LoginRequest)
    result = components()["auth_service"].login(payload.username, payload.password)
    session[SESSION_ADMIN_KEY] = payload.username
    return ok(result, "Login successful")


@auth_bp.post("/logout")
def logout():
    session.pop(SESSION_ADMIN_KEY, None)
    return ok(message="Logged out")
