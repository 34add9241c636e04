import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, refresh_header
from app.api.schemas.auth import LoginRequest, MeResponse, RefreshRequest, RegisterRequest, TokenPair
from app.core.db import get_session
from app.core.security import decode_refresh_token
from app.models.company import CompanyPublic
from app.models.user import User
from app.services.auth_service import (
    RegistrationError,
    TokenResult,
    login_user,
    refresh_tokens,
    register_user,
    revoke_refresh_token,
    user_to_public,
)
from app.services.company_service import get_company

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _token_pair(result: TokenResult) -> TokenPair:
    _, access, refresh, expires_in = result
    return TokenPair(access_token=access, refresh_token=refresh, expires_in=expires_in)


@router.post("/register", response_model=TokenPair, status_code=status.HTTP_201_CREATED)
async def register(
    body: RegisterRequest,
    session: AsyncSession = Depends(get_session),
) -> TokenPair:
    try:
        result, company = await register_user(
            session,
            email=body.email,
            password=body.password,
            name=body.name,
            phone=body.phone,
            company_name=body.company_name,
            company_document=body.company_document,
        )
    except RegistrationError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e
    logger.info(
        "Registered user id=%s company_id=%s",
        result[0].id,
        company.id if company else None,
    )
    return _token_pair(result)


@router.post("/login", response_model=TokenPair)
async def login(
    body: LoginRequest,
    session: AsyncSession = Depends(get_session),
) -> TokenPair:
    result = await login_user(session, body.email, body.password)
    if not result:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )
    return _token_pair(result)


@router.post("/refresh", response_model=TokenPair)
async def refresh(
    session: AsyncSession = Depends(get_session),
    x_refresh_token: str | None = Depends(refresh_header),
    body: RefreshRequest | None = None,
) -> TokenPair:
    token = x_refresh_token or (body.refresh_token if body else None)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Refresh token required (header X-Refresh-Token or body refresh_token)",
        )
    result = await refresh_tokens(session, token)
    if not result:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired refresh token",
        )
    return _token_pair(result)


@router.post("/logout")
async def logout(
    session: AsyncSession = Depends(get_session),
    x_refresh_token: str | None = Depends(refresh_header),
    body: RefreshRequest | None = None,
) -> dict:
    token = x_refresh_token or (body.refresh_token if body else None)
    if token:
        _, jti = decode_refresh_token(token)
        if jti:
            await revoke_refresh_token(session, jti)
    return {"message": "Logged out"}


@router.get("/me", response_model=MeResponse)
async def me(
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> MeResponse:
    company = None
    if current_user.company_id:
        found = await get_company(session, current_user.company_id)
        if found:
            company = CompanyPublic.model_validate(found)
    return MeResponse(user=user_to_public(current_user), company=company)
