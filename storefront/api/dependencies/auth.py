from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.dependencies.database import get_db
from storefront.core.exceptions import ForbiddenError, UnauthorizedError
from storefront.core.security import access_token_subject
from storefront.models.orm.user import User
from storefront.repositories import user_repo

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Resolve the bearer token to an active storefront user.

    Tokens are issued elsewhere; a valid signature is not enough, the user
    must also still exist and be active.
    """
    if credentials is None:
        raise UnauthorizedError("Missing authentication token")
    user_id = access_token_subject(credentials.credentials)
    if user_id is None:
        raise UnauthorizedError("Invalid or expired token")

    user = await user_repo.get_by_id(db, user_id)
    if user is None or not user.is_active:
        raise UnauthorizedError("User not found or inactive")
    request.state.user = user
    return user


async def require_admin(user: User = Depends(get_current_user)) -> User:
    if user.role != "admin":
        raise ForbiddenError("Admin access required")
    return user
