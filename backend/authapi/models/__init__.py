from authapi.models.refresh_token import RefreshToken
from authapi.models.user import User

__all__ = [
    "RefreshToken",
    "User",
]
