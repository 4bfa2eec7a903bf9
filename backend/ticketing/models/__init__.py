from ticketing.models.refresh_token import RefreshToken
from ticketing.models.user import User, UserRole

__all__ = [
    "RefreshToken",
    "User",
    "UserRole",
]
