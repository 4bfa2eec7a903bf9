"""Shared API helpers: responses, timing, service errors and auth guards."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar

from flask import Response, current_app, g, jsonify, request

from ticketing.core.errors import Unauthorized
from ticketing.infra.wiring import get_auth_service
from ticketing.services._shared.base import BaseService
from ticketing.services._shared.errors import ServiceError
from ticketing.services.auth.dto import CurrentUser

F = TypeVar("F", bound=Callable[..., Any])

BEARER_PREFIX = "bearer "


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request.endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]


def service_errors(func: F) -> F:
    """Re-raise :class:`ServiceError` as the matching HTTP ``APIError``."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        try:
            return func(*args, **kwargs)
        except ServiceError as exc:
            raise BaseService().translate_exceptions(exc) from exc

    return wrapper  # type: ignore[return-value]


def bearer_token() -> str | None:
    """Return the token of an ``Authorization: Bearer <token>`` header, if any."""

    header = request.headers.get("Authorization", "")
    if not header.lower().startswith(BEARER_PREFIX):
        return None
    token = header[len(BEARER_PREFIX) :].strip()
    return token or None


def current_user() -> CurrentUser:
    """Return the identity stored by :func:`require_auth`."""

    return g.current_user


def _authenticate() -> CurrentUser:
    try:
        user = get_auth_service().authenticate_request(bearer_token())
    except ServiceError as exc:
        raise Unauthorized(str(exc)) from exc
    g.current_user = user
    return user


def require_auth(func: F) -> F:
    """Ensure the request carries a valid access token for an existing user."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        _authenticate()
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def require_role(*roles: str) -> Callable[[F], F]:
    """Ensure the authenticated user holds one of ``roles`` (401, then 403)."""

    allowed = {str(getattr(r, "value", r)) for r in roles}

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any):
            user = _authenticate()
            try:
                get_auth_service().authorize(user, allowed)
            except ServiceError as exc:
                raise BaseService().translate_exceptions(exc) from exc
            return func(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator
