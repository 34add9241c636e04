import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import PageParams, get_company_id
from app.api.schemas.common import Pagination
from app.api.schemas.professional import (
    ProfessionalCreateRequest,
    ProfessionalListResponse,
    ProfessionalUpdateRequest,
)
from app.core.db import get_session
from app.models.professional import ProfessionalPublic
from app.models.user import UserCreate, UserRole
from app.services.auth_service import create_user, get_user_by_email
from app.services.professional_service import (
    create_professional,
    delete_professional,
    get_professional,
    list_professionals,
    update_professional,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/professionals", tags=["professionals"])

_NOT_FOUND = "Professional not found"


@router.get("", response_model=ProfessionalListResponse)
async def list_company_professionals(
    search: str | None = Query(None),
    paging: PageParams = Depends(),
    session: AsyncSession = Depends(get_session),
    company_id: int = Depends(get_company_id),
) -> ProfessionalListResponse:
    professionals, total = await list_professionals(
        session, company_id, search=search, page=paging.page, page_size=paging.page_size
    )
    return ProfessionalListResponse(
        items=[ProfessionalPublic.model_validate(p) for p in professionals],
        pagination=Pagination.build(total, paging.page, paging.page_size),
    )


@router.post("", response_model=ProfessionalPublic, status_code=status.HTTP_201_CREATED)
async def create_company_professional(
    body: ProfessionalCreateRequest,
    session: AsyncSession = Depends(get_session),
    company_id: int = Depends(get_company_id),
) -> ProfessionalPublic:
    data = body.model_dump(exclude={"password"})
    if body.password:
        if await get_user_by_email(session, body.email):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="This email is already in use",
            )
        user = await create_user(
            session,
            UserCreate(
                email=body.email,
                password=body.password,
                name=body.name,
                phone=body.phone,
                role=UserRole.USER,
                company_id=company_id,
            ),
        )
        data["user_id"] = user.id
        logger.info("Created login user id=%s for professional %s", user.id, body.email)
    professional = await create_professional(session, company_id, data)
    return ProfessionalPublic.model_validate(professional)


@router.get("/{professional_id}", response_model=ProfessionalPublic)
async def read_professional(
    professional_id: int,
    session: AsyncSession = Depends(get_session),
    company_id: int = Depends(get_company_id),
) -> ProfessionalPublic:
    professional = await get_professional(session, company_id, professional_id)
    if not professional:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=_NOT_FOUND)
    return ProfessionalPublic.model_validate(professional)


@router.put("/{professional_id}", response_model=ProfessionalPublic)
async def update_company_professional(
    professional_id: int,
    body: ProfessionalUpdateRequest,
    session: AsyncSession = Depends(get_session),
    company_id: int = Depends(get_company_id),
) -> ProfessionalPublic:
    professional = await update_professional(
        session, company_id, professional_id, body.model_dump(exclude_unset=True)
    )
    if not professional:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=_NOT_FOUND)
    return ProfessionalPublic.model_validate(professional)


@router.delete("/{professional_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_company_professional(
    professional_id: int,
    session: AsyncSession = Depends(get_session),
    company_id: int = Depends(get_company_id),
) -> None:
    if not await delete_professional(session, company_id, professional_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=_NOT_FOUND)
