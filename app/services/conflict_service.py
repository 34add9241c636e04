"""Decides whether a candidate appointment may be booked.

``check_conflict`` is the pure decision over an already-loaded set of
appointments; ``find_conflict`` loads that set with one filtered query and
delegates to it.
"""
from collections.abc import Iterable
from enum import Enum

from sqlalchemy import and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.appointment import (
    INERT_STATUSES,
    Appointment,
    AppointmentCreate,
    AppointmentStatus,
    is_in_progress,
    is_inert,
)
from app.services.time_utils import intervals_intersect


class ConflictReason(str, Enum):
    PATIENT_ALREADY_IN_PROGRESS = "PATIENT_ALREADY_IN_PROGRESS"
    PATIENT_DAILY_LIMIT = "PATIENT_DAILY_LIMIT"
    PROFESSIONAL_TIME_OVERLAP = "PROFESSIONAL_TIME_OVERLAP"

    @property
    def message(self) -> str:
        return _MESSAGES[self]


_MESSAGES = {
    ConflictReason.PATIENT_ALREADY_IN_PROGRESS: (
        "This patient already has an appointment in progress. "
        "A new one cannot be started until the current one is finished."
    ),
    ConflictReason.PATIENT_DAILY_LIMIT: (
        "This patient already has an appointment scheduled that day. "
        "Only one appointment per patient per day is allowed."
    ),
    ConflictReason.PROFESSIONAL_TIME_OVERLAP: (
        "Time conflict: this professional already has an appointment at this time."
    ),
}


def check_conflict(
    candidate: AppointmentCreate,
    existing: Iterable[Appointment],
    exclude_id: int | None = None,
) -> ConflictReason | None:
    """Return the first rule the candidate breaks, or None if it can be booked.

    Rules, in priority order:
      1. an IN_PROGRESS candidate while the patient has another IN_PROGRESS
         appointment on any date
      2. the patient already has an appointment on the same date
      3. the professional has an overlapping appointment on the same date

    Cancelled/no-show appointments and the appointment with ``exclude_id``
    are ignored.
    """
    others = [
        a for a in existing
        if not is_inert(a.status) and (exclude_id is None or a.id != exclude_id)
    ]

    if is_in_progress(candidate.status):
        for a in others:
            if a.patient_id == candidate.patient_id and is_in_progress(a.status):
                return ConflictReason.PATIENT_ALREADY_IN_PROGRESS

    for a in others:
        if a.patient_id == candidate.patient_id and a.date == candidate.date:
            return ConflictReason.PATIENT_DAILY_LIMIT

    for a in others:
        if (
            a.professional_id == candidate.professional_id
            and a.date == candidate.date
            and intervals_intersect(a.start_time, a.end_time, candidate.start_time, candidate.end_time)
        ):
            return ConflictReason.PROFESSIONAL_TIME_OVERLAP

    return None


async def load_conflict_candidates(
    session: AsyncSession,
    candidate: AppointmentCreate,
    exclude_id: int | None = None,
) -> list[Appointment]:
    """Appointments that could conflict with the candidate: the patient's on that
    date or in progress anywhere, and the professional's on that date."""
    q = select(Appointment).where(
        Appointment.status.not_in(list(INERT_STATUSES)),
        or_(
            and_(
                Appointment.patient_id == candidate.patient_id,
                or_(
                    Appointment.date == candidate.date,
                    Appointment.status == AppointmentStatus.IN_PROGRESS,
                ),
            ),
            and_(
                Appointment.professional_id == candidate.professional_id,
                Appointment.date == candidate.date,
            ),
        ),
    )
    if exclude_id is not None:
        q = q.where(Appointment.id != exclude_id)
    result = await session.execute(q)
    return list(result.scalars().all())


async def find_conflict(
    session: AsyncSession,
    candidate: AppointmentCreate,
    exclude_id: int | None = None,
) -> ConflictReason | None:
    existing = await load_conflict_candidates(session, candidate, exclude_id=exclude_id)
    return check_conflict(candidate, existing, exclude_id=exclude_id)
