from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.patient import Patient


def _search_clause(search: str):
    pattern = f"%{search.lower()}%"
    return or_(
        func.lower(Patient.name).like(pattern),
        func.lower(Patient.email).like(pattern),
        func.lower(Patient.phone).like(pattern),
        Patient.document_number.like(f"%{search}%"),
    )


async def list_patients(
    session: AsyncSession,
    company_id: int,
    search: str | None = None,
    page: int = 1,
    page_size: int = 10,
) -> tuple[list[Patient], int]:
    conditions = [Patient.company_id == company_id]
    if search:
        conditions.append(_search_clause(search))
    total = await session.scalar(select(func.count()).select_from(Patient).where(*conditions))
    result = await session.execute(
        select(Patient)
        .where(*conditions)
        .order_by(Patient.name)
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    return list(result.scalars().all()), total or 0


async def get_patient(session: AsyncSession, company_id: int, patient_id: int) -> Patient | None:
    result = await session.execute(
        select(Patient).where(Patient.id == patient_id, Patient.company_id == company_id)
    )
    return result.scalar_one_or_none()


async def create_patient(session: AsyncSession, company_id: int, data: dict) -> Patient:
    patient = Patient(company_id=company_id, **data)
    session.add(patient)
    await session.flush()
    await session.refresh(patient)
    return patient


async def update_patient(
    session: AsyncSession, company_id: int, patient_id: int, data: dict
) -> Patient | None:
    patient = await get_patient(session, company_id, patient_id)
    if not patient:
        return None
    for field, value in data.items():
        setattr(patient, field, value)
    session.add(patient)
    await session.flush()
    await session.refresh(patient)
    return patient


async def delete_patient(session: AsyncSession, company_id: int, patient_id: int) -> bool:
    patient = await get_patient(session, company_id, patient_id)
    if not patient:
        return False
    await session.delete(patient)
    await session.flush()
    return True
