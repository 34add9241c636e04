from fastapi import Depends, Header, HTTPException, Query, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.db import get_session
from app.core.security import decode_access_token
from app.models.user import User

security = HTTPBearer(auto_error=False)


def refresh_header(x_refresh_token: str | None = Header(default=None, alias="X-Refresh-Token")) -> str | None:
    """Extract X-Refresh-Token header for logout/refresh endpoints."""
    return x_refresh_token


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    session: AsyncSession = Depends(get_session),
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> User:
    if not credentials or credentials.scheme.lower() != "bearer":
        raise _unauthorized("Missing or invalid authorization header")
    user_id = decode_access_token(credentials.credentials)
    if not user_id:
        raise _unauthorized("Invalid or expired token")
    try:
        uid = int(user_id)
    except ValueError:
        raise _unauthorized("Invalid token")
    result = await session.execute(select(User).where(User.id == uid))
    user = result.scalar_one_or_none()
    if not user:
        raise _unauthorized("User not found")
    return user


async def get_company_id(current_user: User = Depends(get_current_user)) -> int:
    """Tenant of the caller; every clinic resource is scoped to it."""
    if current_user.company_id is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User must be associated with a company",
        )
    return current_user.company_id


class PageParams:
    def __init__(
        self,
        page: int = Query(1, ge=1),
        page_size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    ) -> None:
        self.page = page
        self.page_size = page_size
