import hmac
from typing import Annotated, Optional

from fastapi import Depends, Header, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from pydantic import ValidationError

from libs.auth.models import AuthUser
from libs.common.config import get_settings
from libs.common.errors import NotAuthenticated, PermissionDenied

security = HTTPBearer(auto_error=False)


async def get_current_user(
    request: Request,
    token: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
) -> AuthUser:
    """
    Validate the Supabase JWT and return the authenticated user.
    """
    if token is None:
        raise NotAuthenticated("Missing bearer token")

    settings = get_settings()
    try:
        # Supabase signs access tokens with HS256 and the project JWT secret
        payload = jwt.decode(
            token.credentials,
            settings.SUPABASE_JWT_SECRET,
            algorithms=["HS256"],
            options={"verify_aud": False},
        )
        user = AuthUser(**payload)
    except (JWTError, ValidationError):
        raise NotAuthenticated("Could not validate credentials")

    request.state.user = user
    return user


def is_admin_credential(email: Optional[str], password: Optional[str]) -> bool:
    """Check the admin header pair against the configured allow-list."""
    settings = get_settings()
    if not email or not password or not settings.ADMIN_PASSWORD:
        return False
    if email.strip().lower() not in settings.admin_email_list:
        return False
    return hmac.compare_digest(password, settings.ADMIN_PASSWORD)


async def require_admin(
    current_user: Annotated[AuthUser, Depends(get_current_user)],
    x_admin_email: Annotated[Optional[str], Header()] = None,
    x_admin_password: Annotated[Optional[str], Header()] = None,
) -> AuthUser:
    """
    Require an authenticated user plus a valid ``x-admin-email`` /
    ``x-admin-password`` pair from the allow-list.
    """
    if not is_admin_credential(x_admin_email, x_admin_password):
        raise PermissionDenied("Admin privileges required")
    return current_user
