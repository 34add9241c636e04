from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_company_id
from app.core.db import get_session
from app.models.company import CompanyPublic, CompanyUpdate
from app.services.company_service import get_company, update_company

router = APIRouter(prefix="/companies", tags=["companies"])


@router.get("/me", response_model=CompanyPublic)
async def read_my_company(
    session: AsyncSession = Depends(get_session),
    company_id: int = Depends(get_company_id),
) -> CompanyPublic:
    company = await get_company(session, company_id)
    if not company:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Company not found")
    return CompanyPublic.model_validate(company)


@router.put("/me", response_model=CompanyPublic)
async def update_my_company(
    body: CompanyUpdate,
    session: AsyncSession = Depends(get_session),
    company_id: int = Depends(get_company_id),
) -> CompanyPublic:
    company = await update_company(session, company_id, body)
    if not company:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Company not found")
    return CompanyPublic.model_validate(company)
