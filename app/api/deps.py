"""
Shared Router Dependencies

Bearer-token authentication and permission checks.
"""

import logging
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import AuthError, AuthorizationError, NotFoundError
from app.database import get_db
from app.models import Permission, User
from app.services.auth import get_credential_service
from app.services.users import UserService

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Resolve the authenticated user from the Authorization header.

    Raises:
        AuthError: Missing, invalid or expired token, or a user that no
            longer exists or was deactivated
    """
    if credentials is None:
        raise AuthError("No token provided")

    claims = get_credential_service(db).decode_token(credentials.credentials)
    try:
        user = await UserService(db).get(claims.user_id)
    except NotFoundError:
        raise AuthError("User not found")

    if not user.is_active:
        raise AuthError("User is inactive")
    return user


def require_permission(permission: Permission):
    """Dependency factory: the current user's role must grant ``permission``."""

    async def checker(user: User = Depends(get_current_user)) -> User:
        if permission.value not in user.role.permission_names:
            logger.warning(f"User #{user.id} denied {permission.value}")
            raise AuthorizationError("You do not have permission to perform this action")
        return user

    return checker
