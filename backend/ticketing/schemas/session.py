"""Refresh-session schemas."""

from __future__ import annotations

from marshmallow import Schema, fields


class SessionSchema(Schema):
    """One active refresh session. Never carries token material."""

    id = fields.Integer(required=True)
    created_at = fields.DateTime(required=True)
    expires_at = fields.DateTime(required=True)


class RevokedSessionsSchema(Schema):
    """Outcome of an administrative "log out everywhere"."""

    user_id = fields.Integer(required=True)
    revoked = fields.Integer(required=True)
