"""API dependencies for authentication and authorization."""

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from typing import Optional

from services.auth_service import verify_token, get_user_by_id, to_user_response
from services.errors import AuthError
from models.user import UserResponse


bearer_scheme = HTTPBearer(auto_error=False)


async def get_token_from_request(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> Optional[str]:
    """Extract the bearer token from the Authorization header."""
    if credentials is None or not credentials.credentials:
        return None
    return credentials.credentials


async def get_current_user(token: Optional[str] = Depends(get_token_from_request)) -> UserResponse:
    """
    Resolve the bearer token to the user it was issued for.

    Any failure raises AuthError, so the route handler is never invoked for an
    unauthenticated request.
    """
    if not token:
        raise AuthError("Not authorized, no token")

    user_id = verify_token(token)

    user = await get_user_by_id(user_id)
    if user is None:
        raise AuthError("Not authorized, user not found")

    return to_user_response(user)
