"""Authentication endpoints: register, login, refresh, logout, profile, sessions."""

from __future__ import annotations

from flask import Blueprint, request

from ticketing.api.cookies import clear_refresh_cookie, get_refresh_cookie, set_refresh_cookie
from ticketing.api.deps import current_user, json_response, require_auth, service_errors, timing
from ticketing.core.errors import Unauthorized
from ticketing.infra.wiring import get_auth_service
from ticketing.schemas import (
    LoginSchema,
    ProfileSchema,
    RegisterSchema,
    SessionSchema,
    TokenResponseSchema,
)
from ticketing.services.auth.dto import LoginIn, RegisterIn, TokenPairOut

bp = Blueprint("auth", __name__)

register_schema = RegisterSchema()
login_schema = LoginSchema()
token_schema = TokenResponseSchema()
profile_schema = ProfileSchema()
session_list_schema = SessionSchema(many=True)


def _token_response(pair: TokenPairOut, *, status: int = 200):
    body = {"data": token_schema.dump({"access_token": pair.access_token})}
    return set_refresh_cookie(json_response(body, status=status), pair.refresh_token)


@bp.post("/register")
@timing
@service_errors
def register():
    """Create an account; the refresh token goes into the cookie only."""

    data = register_schema.load(request.get_json(silent=True) or {})
    pair = get_auth_service().register_user(RegisterIn(**data))
    return _token_response(pair, status=201)


@bp.post("/login")
@timing
@service_errors
def login():
    """Authenticate credentials and issue a token pair."""

    data = login_schema.load(request.get_json(silent=True) or {})
    pair = get_auth_service().authenticate_user(LoginIn(**data))
    return _token_response(pair)


@bp.post("/refresh")
@timing
@service_errors
def refresh():
    """Rotate the refresh cookie and return a new access token."""

    raw = get_refresh_cookie()
    if raw is None:
        raise Unauthorized("Missing refresh cookie")
    pair = get_auth_service().refresh_user_tokens(raw)
    return _token_response(pair)


@bp.post("/logout")
@timing
def logout():
    """Revoke the presented session, if any. Always succeeds and clears the cookie."""

    get_auth_service().logout_user(get_refresh_cookie())
    response = json_response({"data": {"message": "Logged out successfully"}})
    return clear_refresh_cookie(response)


@bp.get("/profile")
@require_auth
@timing
@service_errors
def profile():
    """Return the authenticated user's profile."""

    out = get_auth_service().get_user_profile(current_user().id)
    return json_response({"data": profile_schema.dump(out)})


@bp.get("/sessions")
@require_auth
@timing
@service_errors
def sessions():
    """List the caller's active refresh sessions, newest first."""

    views = get_auth_service().list_sessions(current_user().id)
    return json_response({"data": session_list_schema.dump(views)})
