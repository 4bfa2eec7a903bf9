"""Administrative user endpoints."""

from __future__ import annotations

from flask import Blueprint, current_app

from ticketing.api.deps import current_user, json_response, require_role, service_errors, timing
from ticketing.infra.wiring import get_auth_service
from ticketing.models.user import UserRole
from ticketing.schemas import RevokedSessionsSchema

bp = Blueprint("users", __name__)

revoked_schema = RevokedSessionsSchema()


@bp.post("/<int:user_id>/sessions/revoke")
@require_role(UserRole.ADMIN)
@timing
@service_errors
def revoke_sessions(user_id: int):
    """Revoke every active refresh session of ``user_id`` (admin only)."""

    count = get_auth_service().revoke_all_sessions(user_id)
    current_app.logger.info(
        "admin.sessions.revoked",
        extra={"user_id": current_user().id, "event": f"target={user_id} count={count}"},
    )
    return json_response({"data": revoked_schema.dump({"user_id": user_id, "revoked": count})})
