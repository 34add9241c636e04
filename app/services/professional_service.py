from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.professional import Professional


async def list_professionals(
    session: AsyncSession,
    company_id: int,
    search: str | None = None,
    page: int = 1,
    page_size: int = 10,
) -> tuple[list[Professional], int]:
    conditions = [Professional.company_id == company_id]
    if search:
        pattern = f"%{search.lower()}%"
        conditions.append(
            or_(
                func.lower(Professional.name).like(pattern),
                func.lower(Professional.email).like(pattern),
                func.lower(Professional.specialty).like(pattern),
            )
        )
    total = await session.scalar(select(func.count()).select_from(Professional).where(*conditions))
    result = await session.execute(
        select(Professional)
        .where(*conditions)
        .order_by(Professional.name)
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    return list(result.scalars().all()), total or 0


async def get_professional(
    session: AsyncSession, company_id: int, professional_id: int
) -> Professional | None:
    result = await session.execute(
        select(Professional).where(
            Professional.id == professional_id,
            Professional.company_id == company_id,
        )
    )
    return result.scalar_one_or_none()


async def create_professional(session: AsyncSession, company_id: int, data: dict) -> Professional:
    professional = Professional(company_id=company_id, **data)
    session.add(professional)
    await session.flush()
    await session.refresh(professional)
    return professional


async def update_professional(
    session: AsyncSession, company_id: int, professional_id: int, data: dict
) -> Professional | None:
    professional = await get_professional(session, company_id, professional_id)
    if not professional:
        return None
    for field, value in data.items():
        setattr(professional, field, value)
    session.add(professional)
    await session.flush()
    await session.refresh(professional)
    return professional


async def delete_professional(session: AsyncSession, company_id: int, professional_id: int) -> bool:
    professional = await get_professional(session, company_id, professional_id)
    if not professional:
        return False
    await session.delete(professional)
    await session.flush()
    return True
