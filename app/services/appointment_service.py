import asyncio
import logging
import weakref
from collections.abc import AsyncIterator
from contextlib import AsyncExitStack, asynccontextmanager
from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.appointment import Appointment, AppointmentCreate, AppointmentStatus
from app.models.patient import Patient
from app.models.professional import Professional
from app.services.conflict_service import ConflictReason, find_conflict

logger = logging.getLogger(__name__)


class AppointmentConflictError(Exception):
    def __init__(self, reason: ConflictReason) -> None:
        super().__init__(reason.message)
        self.reason = reason


class AppointmentReferenceError(Exception):
    """Patient or professional does not exist in the caller's company."""


@dataclass
class AppointmentFilters:
    date: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    patient_id: int | None = None
    professional_id: int | None = None
    status: AppointmentStatus | None = None


# One lock per patient/professional key; entries vanish once no request holds them.
_booking_locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()


def _lock_for(key: str) -> asyncio.Lock:
    lock = _booking_locks.get(key)
    if lock is None:
        lock = asyncio.Lock()
        _booking_locks[key] = lock
    return lock


@asynccontextmanager
async def booking_lock(*appointments: AppointmentCreate | Appointment) -> AsyncIterator[None]:
    """Serialize check-then-write for every patient and professional involved.

    Locks are taken in sorted key order so overlapping requests cannot deadlock.
    This only serializes within one process; the partial unique index on
    (professional_id, date, start_time) covers multi-worker deployments.
    """
    keys: set[str] = set()
    for a in appointments:
        keys.add(f"patient:{a.patient_id}")
        keys.add(f"professional:{a.professional_id}")
    locks = [_lock_for(k) for k in sorted(keys)]
    async with AsyncExitStack() as stack:
        for lock in locks:
            await stack.enter_async_context(lock)
        yield


async def _ensure_references(session: AsyncSession, company_id: int, data: AppointmentCreate) -> None:
    patient = await session.execute(
        select(Patient.id).where(Patient.id == data.patient_id, Patient.company_id == company_id)
    )
    if patient.scalar_one_or_none() is None:
        raise AppointmentReferenceError("Patient not found")
    professional = await session.execute(
        select(Professional.id).where(
            Professional.id == data.professional_id,
            Professional.company_id == company_id,
        )
    )
    if professional.scalar_one_or_none() is None:
        raise AppointmentReferenceError("Professional not found")


async def _reject_if_conflicting(
    session: AsyncSession, data: AppointmentCreate, exclude_id: int | None = None
) -> None:
    reason = await find_conflict(session, data, exclude_id=exclude_id)
    if reason is not None:
        logger.info(
            "Rejected appointment for patient=%s professional=%s on %s %s-%s: %s",
            data.patient_id,
            data.professional_id,
            data.date,
            data.start_time,
            data.end_time,
            reason.value,
        )
        raise AppointmentConflictError(reason)


async def _commit(session: AsyncSession, appointment: Appointment) -> Appointment:
    try:
        await session.flush()
    except IntegrityError as e:
        await session.rollback()
        logger.warning("Slot uniqueness backstop triggered: %s", e.orig)
        raise AppointmentConflictError(ConflictReason.PROFESSIONAL_TIME_OVERLAP) from e
    await session.commit()
    await session.refresh(appointment)
    return appointment


async def get_appointment(
    session: AsyncSession, company_id: int, appointment_id: int
) -> Appointment | None:
    result = await session.execute(
        select(Appointment).where(
            Appointment.id == appointment_id,
            Appointment.company_id == company_id,
        )
    )
    return result.scalar_one_or_none()


async def create_appointment(
    session: AsyncSession, company_id: int, data: AppointmentCreate
) -> Appointment:
    await _ensure_references(session, company_id, data)
    async with booking_lock(data):
        await _reject_if_conflicting(session, data)
        appointment = Appointment(company_id=company_id, **data.model_dump())
        session.add(appointment)
        return await _commit(session, appointment)


async def update_appointment(
    session: AsyncSession, company_id: int, appointment_id: int, data: AppointmentCreate
) -> Appointment | None:
    appointment = await get_appointment(session, company_id, appointment_id)
    if not appointment:
        return None
    await _ensure_references(session, company_id, data)
    async with booking_lock(appointment, data):
        await _reject_if_conflicting(session, data, exclude_id=appointment_id)
        for field, value in data.model_dump().items():
            setattr(appointment, field, value)
        session.add(appointment)
        return await _commit(session, appointment)


async def set_appointment_status(
    session: AsyncSession, company_id: int, appointment_id: int, status: AppointmentStatus
) -> Appointment | None:
    """Change only the status. Any status may follow any other, but moving back
    to an active status is checked like an edit."""
    appointment = await get_appointment(session, company_id, appointment_id)
    if not appointment:
        return None
    candidate = AppointmentCreate.model_validate(appointment, update={"status": status})
    async with booking_lock(appointment):
        await _reject_if_conflicting(session, candidate, exclude_id=appointment_id)
        appointment.status = status
        session.add(appointment)
        return await _commit(session, appointment)


async def delete_appointment(session: AsyncSession, company_id: int, appointment_id: int) -> bool:
    appointment = await get_appointment(session, company_id, appointment_id)
    if not appointment:
        return False
    await session.delete(appointment)
    await session.flush()
    return True


async def list_appointments(
    session: AsyncSession,
    company_id: int,
    filters: AppointmentFilters,
    page: int = 1,
    page_size: int = 10,
) -> tuple[list[tuple[Appointment, str, str]], int]:
    """Returns ((appointment, patient_name, professional_name) rows, total count)."""
    conditions = [Appointment.company_id == company_id]
    if filters.start_date and filters.end_date:
        conditions.append(Appointment.date >= filters.start_date)
        conditions.append(Appointment.date <= filters.end_date)
    elif filters.date:
        conditions.append(Appointment.date == filters.date)
    if filters.patient_id is not None:
        conditions.append(Appointment.patient_id == filters.patient_id)
    if filters.professional_id is not None:
        conditions.append(Appointment.professional_id == filters.professional_id)
    if filters.status is not None:
        conditions.append(Appointment.status == filters.status)

    total = await session.scalar(select(func.count()).select_from(Appointment).where(*conditions))
    result = await session.execute(
        select(Appointment, Patient.name, Professional.name)
        .join(Patient, Patient.id == Appointment.patient_id)
        .join(Professional, Professional.id == Appointment.professional_id)
        .where(*conditions)
        .order_by(Appointment.date, Appointment.start_time, Appointment.id)
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    return [(a, patient_name, professional_name) for a, patient_name, professional_name in result.all()], total or 0
