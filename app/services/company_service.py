from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.company import Company, CompanyUpdate


async def get_company(session: AsyncSession, company_id: int) -> Company | None:
    result = await session.execute(select(Company).where(Company.id == company_id))
    return result.scalar_one_or_none()


async def get_company_by_document(session: AsyncSession, document: str) -> Company | None:
    result = await session.execute(select(Company).where(Company.document == document))
    return result.scalar_one_or_none()


async def create_company(
    session: AsyncSession,
    name: str,
    document: str,
    phone: str | None = None,
    address: str | None = None,
) -> Company:
    company = Company(name=name, document=document, phone=phone, address=address)
    session.add(company)
    await session.flush()
    await session.refresh(company)
    return company


async def update_company(session: AsyncSession, company_id: int, data: CompanyUpdate) -> Company | None:
    company = await get_company(session, company_id)
    if not company:
        return None
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(company, field, value)
    session.add(company)
    await session.flush()
    await session.refresh(company)
    return company
