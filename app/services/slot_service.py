from collections.abc import Iterable
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.models.appointment import INERT_STATUSES, Appointment, is_inert
from app.services.time_utils import contains_instant, iter_slot_times


@dataclass(frozen=True)
class WorkingHours:
    """Bookable window for a day: slot starts from day_start through day_end."""

    day_start: str = "08:00"
    day_end: str = "18:00"
    slot_minutes: int = 30


def default_working_hours() -> WorkingHours:
    return WorkingHours(
        day_start=settings.schedule_day_start,
        day_end=settings.schedule_day_end,
        slot_minutes=settings.slot_duration_minutes,
    )


def _blocking_appointments(
    professional_id: int,
    date: str,
    existing: Iterable[Appointment],
    exclude_id: int | None,
) -> list[Appointment]:
    return [
        a for a in existing
        if a.professional_id == professional_id
        and a.date == date
        and not is_inert(a.status)
        and (exclude_id is None or a.id != exclude_id)
    ]


def slot_board(
    professional_id: int,
    date: str,
    window: WorkingHours,
    existing: Iterable[Appointment],
    exclude_id: int | None = None,
) -> list[tuple[str, bool]]:
    """Every slot start in the window paired with whether it is still free.

    A slot is taken when it falls inside [start_time, end_time) of one of the
    professional's active appointments that day. Only the start instant is
    checked; a long appointment starting on a free slot may still overlap.
    """
    blocking = _blocking_appointments(professional_id, date, existing, exclude_id)
    board: list[tuple[str, bool]] = []
    for slot in iter_slot_times(window.day_start, window.day_end, window.slot_minutes):
        taken = any(contains_instant(a.start_time, a.end_time, slot) for a in blocking)
        board.append((slot, not taken))
    return board


def compute_available_slots(
    professional_id: int,
    date: str,
    window: WorkingHours,
    existing: Iterable[Appointment],
    exclude_id: int | None = None,
) -> list[str]:
    """Free slot start times for the professional on ``date``, in order."""
    return [
        slot
        for slot, available in slot_board(professional_id, date, window, existing, exclude_id)
        if available
    ]


async def get_professional_appointments_on_date(
    session: AsyncSession, professional_id: int, date: str
) -> list[Appointment]:
    result = await session.execute(
        select(Appointment)
        .where(
            Appointment.professional_id == professional_id,
            Appointment.date == date,
            Appointment.status.not_in(list(INERT_STATUSES)),
        )
        .order_by(Appointment.start_time)
    )
    return list(result.scalars().all())


async def get_available_slots_for_professional(
    session: AsyncSession,
    professional_id: int,
    date: str,
    exclude_id: int | None = None,
    window: WorkingHours | None = None,
) -> list[tuple[str, bool]]:
    """Returns list of (slot_start, available) for the professional's day."""
    existing = await get_professional_appointments_on_date(session, professional_id, date)
    return slot_board(
        professional_id,
        date,
        window or default_working_hours(),
        existing,
        exclude_id=exclude_id,
    )
