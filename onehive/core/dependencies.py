"""
onehive/core/dependencies.py

Authentication and Authorization Dependencies

Provides authentication and role-based access control (RBAC) for FastAPI routes:
- Validates JWT tokens from Bearer header OR HttpOnly cookie
- Checks against blacklisted tokens (logout protection)
- Builds the caller principal from token claims (no user table lives here)
- Restricts access based on user roles

Pagination Dependency:
- Provides reusable dependency for pagination (skip, limit).
"""

import logging
from collections.abc import Callable, Coroutine
from typing import Annotated, Any

from fastapi import Cookie, Depends, Query
from fastapi.security import OAuth2PasswordBearer

from onehive.core.blacklist import is_token_blacklisted
from onehive.core.exceptions import ForbiddenError, UnauthorizedError
from onehive.core.schemas import CurrentUser
from onehive.core.tokens import decode_access_token
from onehive.database.enums import UserRole

# ---------------------------------------------------
# Logger Configuration
# ---------------------------------------------------
logger = logging.getLogger(__name__)

# ---------------------------------------------------
# OAuth2 Configuration
# ---------------------------------------------------
# auto_error=False so a missing header falls through to the cookie check
oauth2_scheme: OAuth2PasswordBearer = OAuth2PasswordBearer(
    tokenUrl="/api/auth/login", auto_error=False
)


# ---------------------------------------------------
# Pagination Dependency
# ---------------------------------------------------
class PaginationParams:
    """
    Dependency that provides pagination parameters from query parameters.
    """

    def __init__(
        self,
        skip: int = Query(0, ge=0, description="Number of records to skip for pagination"),
        limit: int = Query(10, ge=1, le=100, description="Maximum number of records to return"),
    ):
        self.skip = skip
        self.limit = limit


# ---------------------------------------------------
# Authentication Functions
# ---------------------------------------------------
async def get_current_user(
    token_header: Annotated[str | None, Depends(oauth2_scheme)] = None,
    token_cookie: Annotated[str | None, Cookie(alias="access_token")] = None,
) -> CurrentUser:
    """
    Authenticate the caller from the access token,
    checking Bearer header first, then HttpOnly cookie.

    Raises:
        UnauthorizedError: 401 if the token is missing, invalid or revoked.
    """
    token = token_header or token_cookie

    if token is None:
        logger.debug("[AUTH] No token found in Authorization header or access_token cookie.")
        raise UnauthorizedError(headers={"WWW-Authenticate": "Bearer"})

    token_data = decode_access_token(token)

    if token_data.jti and await is_token_blacklisted(token_data.jti):
        logger.warning(f"[AUTH] Blacklisted token detected: jti={token_data.jti}")
        raise UnauthorizedError()

    logger.debug(
        f"[AUTH] User {token_data.sub} authenticated via {'Header' if token_header else 'Cookie'}."
    )
    return CurrentUser(id=token_data.sub, role=token_data.role, email=token_data.email)


# ---------------------------------------------------
# Authorization Functions (Role-Based)
# ---------------------------------------------------
def require_roles(*roles: UserRole) -> Callable[..., Coroutine[Any, Any, CurrentUser]]:
    """
    Dependency to restrict access to users having any of the specified roles.
    """

    async def checker(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if user.role not in roles:
            logger.warning(
                f"[RBAC] Access denied: User {user.id} with role {user.role} attempted access (allowed roles: {roles})"
            )
            raise ForbiddenError(f"Access denied for role: {user.role.value}")
        return user

    return checker


# ---------------------------------------------------
# Annotated shortcuts used by the routers
# ---------------------------------------------------
AuthenticatedUserDep = Annotated[CurrentUser, Depends(get_current_user)]
AuthenticatedWorkerDep = Annotated[CurrentUser, Depends(require_roles(UserRole.WORKER))]
AuthenticatedAdminDep = Annotated[CurrentUser, Depends(require_roles(UserRole.ADMIN))]
WorkerOrAdminDep = Annotated[
    CurrentUser, Depends(require_roles(UserRole.WORKER, UserRole.ADMIN))
]
