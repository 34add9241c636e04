import asyncio

import pytest

from app.models.appointment import Appointment, AppointmentCreate, AppointmentStatus
from app.services import appointment_service
from app.services.appointment_service import (
    AppointmentConflictError,
    AppointmentFilters,
    AppointmentReferenceError,
    booking_lock,
    create_appointment,
    delete_appointment,
    get_appointment,
    list_appointments,
    set_appointment_status,
    update_appointment,
)
from app.services.conflict_service import ConflictReason, find_conflict
from app.services.slot_service import WorkingHours, get_available_slots_for_professional

DAY = "2024-01-10"


def _data(patient, professional, start="09:00", end="09:30", date=DAY, status=AppointmentStatus.SCHEDULED):
    return AppointmentCreate(
        patient_id=patient.id,
        professional_id=professional.id,
        date=date,
        start_time=start,
        end_time=end,
        status=status,
    )


async def test_create_appointment_persists_and_stamps(session, clinic) -> None:
    appointment = await create_appointment(session, clinic.company.id, _data(clinic.ana, clinic.maria))

    assert appointment.id is not None
    assert appointment.company_id == clinic.company.id
    assert appointment.status == AppointmentStatus.SCHEDULED
    assert appointment.notes == ""
    assert appointment.created_at is not None
    assert appointment.updated_at is not None


async def test_create_rejects_professional_overlap(session, clinic) -> None:
    await create_appointment(session, clinic.company.id, _data(clinic.ana, clinic.maria, "09:00", "09:30"))

    with pytest.raises(AppointmentConflictError) as exc_info:
        await create_appointment(session, clinic.company.id, _data(clinic.bruno, clinic.maria, "09:15", "09:45"))

    assert exc_info.value.reason is ConflictReason.PROFESSIONAL_TIME_OVERLAP


async def test_create_accepts_back_to_back(session, clinic) -> None:
    await create_appointment(session, clinic.company.id, _data(clinic.ana, clinic.maria, "09:00", "09:30"))

    second = await create_appointment(
        session, clinic.company.id, _data(clinic.bruno, clinic.maria, "09:30", "10:00")
    )

    assert second.start_time == "09:30"


async def test_create_rejects_second_visit_same_day(session, clinic) -> None:
    await create_appointment(session, clinic.company.id, _data(clinic.ana, clinic.maria, "09:00", "09:30"))

    with pytest.raises(AppointmentConflictError) as exc_info:
        await create_appointment(session, clinic.company.id, _data(clinic.ana, clinic.carlos, "15:00", "15:30"))

    assert exc_info.value.reason is ConflictReason.PATIENT_DAILY_LIMIT


async def test_create_cancelled_on_booked_day_is_rejected(session, clinic) -> None:
    await create_appointment(session, clinic.company.id, _data(clinic.ana, clinic.maria))

    with pytest.raises(AppointmentConflictError) as exc_info:
        await create_appointment(
            session,
            clinic.company.id,
            _data(clinic.ana, clinic.carlos, "15:00", "15:30", status=AppointmentStatus.CANCELLED),
        )

    assert exc_info.value.reason is ConflictReason.PATIENT_DAILY_LIMIT


async def test_cancelled_appointment_frees_slot(session, clinic) -> None:
    first = await create_appointment(session, clinic.company.id, _data(clinic.ana, clinic.maria))
    await set_appointment_status(session, clinic.company.id, first.id, AppointmentStatus.CANCELLED)

    rebooked = await create_appointment(session, clinic.company.id, _data(clinic.bruno, clinic.maria))

    assert rebooked.id != first.id
    assert rebooked.start_time == first.start_time


async def test_create_rejects_patient_from_another_company(session, clinic) -> None:
    with pytest.raises(AppointmentReferenceError):
        await create_appointment(session, clinic.company.id, _data(clinic.outsider, clinic.maria))


async def test_update_unchanged_does_not_conflict_with_itself(session, clinic) -> None:
    created = await create_appointment(session, clinic.company.id, _data(clinic.ana, clinic.maria))

    updated = await update_appointment(
        session, clinic.company.id, created.id, _data(clinic.ana, clinic.maria)
    )

    assert updated is not None
    assert updated.id == created.id


async def test_update_moves_appointment_and_checks_others(session, clinic) -> None:
    await create_appointment(session, clinic.company.id, _data(clinic.ana, clinic.maria, "09:00", "09:30"))
    other = await create_appointment(session, clinic.company.id, _data(clinic.bruno, clinic.maria, "10:00", "10:30"))

    with pytest.raises(AppointmentConflictError):
        await update_appointment(
            session, clinic.company.id, other.id, _data(clinic.bruno, clinic.maria, "09:00", "10:00")
        )

    moved = await update_appointment(
        session, clinic.company.id, other.id, _data(clinic.bruno, clinic.maria, "11:00", "11:30")
    )
    assert moved.start_time == "11:00"


async def test_update_missing_appointment_returns_none(session, clinic) -> None:
    assert await update_appointment(session, clinic.company.id, 999, _data(clinic.ana, clinic.maria)) is None


async def test_status_change_to_in_progress_is_checked(session, clinic) -> None:
    await create_appointment(
        session,
        clinic.company.id,
        _data(clinic.ana, clinic.maria, date="2024-01-09", status=AppointmentStatus.IN_PROGRESS),
    )
    second = await create_appointment(session, clinic.company.id, _data(clinic.ana, clinic.carlos))

    with pytest.raises(AppointmentConflictError) as exc_info:
        await set_appointment_status(session, clinic.company.id, second.id, AppointmentStatus.IN_PROGRESS)

    assert exc_info.value.reason is ConflictReason.PATIENT_ALREADY_IN_PROGRESS


async def test_any_status_may_follow_any_other(session, clinic) -> None:
    appointment = await create_appointment(session, clinic.company.id, _data(clinic.ana, clinic.maria))

    for status in (
        AppointmentStatus.COMPLETED,
        AppointmentStatus.SCHEDULED,
        AppointmentStatus.NO_SHOW,
        AppointmentStatus.CONFIRMED,
    ):
        appointment = await set_appointment_status(session, clinic.company.id, appointment.id, status)
        assert appointment.status == status


async def test_delete_removes_row(session, clinic) -> None:
    appointment = await create_appointment(session, clinic.company.id, _data(clinic.ana, clinic.maria))

    assert await delete_appointment(session, clinic.company.id, appointment.id) is True
    assert await get_appointment(session, clinic.company.id, appointment.id) is None
    assert await delete_appointment(session, clinic.company.id, appointment.id) is False


async def test_appointments_are_scoped_to_company(session, clinic) -> None:
    appointment = await create_appointment(session, clinic.company.id, _data(clinic.ana, clinic.maria))

    assert await get_appointment(session, clinic.other_company.id, appointment.id) is None
    assert await delete_appointment(session, clinic.other_company.id, appointment.id) is False


async def test_list_filters_and_paginates(session, clinic) -> None:
    cid = clinic.company.id
    await create_appointment(session, cid, _data(clinic.ana, clinic.maria, "09:00", "09:30", date="2024-01-10"))
    await create_appointment(session, cid, _data(clinic.bruno, clinic.maria, "08:00", "08:30", date="2024-01-10"))
    await create_appointment(session, cid, _data(clinic.ana, clinic.carlos, "10:00", "10:30", date="2024-01-12"))
    await create_appointment(
        session,
        cid,
        _data(clinic.bruno, clinic.carlos, "10:00", "10:30", date="2024-01-20", status=AppointmentStatus.CANCELLED),
    )

    rows, total = await list_appointments(session, cid, AppointmentFilters(date="2024-01-10"))
    assert total == 2
    assert [a.start_time for a, _, _ in rows] == ["08:00", "09:00"]
    assert rows[0][1] == "Bruno Lima"
    assert rows[0][2] == "Dra. Maria Santos"

    rows, total = await list_appointments(
        session, cid, AppointmentFilters(start_date="2024-01-11", end_date="2024-01-31")
    )
    assert total == 2

    rows, total = await list_appointments(session, cid, AppointmentFilters(professional_id=clinic.carlos.id))
    assert total == 2

    rows, total = await list_appointments(session, cid, AppointmentFilters(status=AppointmentStatus.CANCELLED))
    assert total == 1

    rows, total = await list_appointments(session, cid, AppointmentFilters(), page=2, page_size=3)
    assert total == 4
    assert len(rows) == 1

    rows, total = await list_appointments(session, clinic.other_company.id, AppointmentFilters())
    assert (rows, total) == ([], 0)


async def test_find_conflict_queries_only_relevant_rows(session, clinic) -> None:
    cid = clinic.company.id
    await create_appointment(
        session, cid, _data(clinic.ana, clinic.maria, date="2024-01-02", status=AppointmentStatus.IN_PROGRESS)
    )
    candidate = _data(clinic.ana, clinic.carlos, status=AppointmentStatus.IN_PROGRESS)

    assert await find_conflict(session, candidate) is ConflictReason.PATIENT_ALREADY_IN_PROGRESS
    assert await find_conflict(session, _data(clinic.bruno, clinic.carlos)) is None


async def test_unique_slot_index_backstops_a_missed_check(session, clinic, monkeypatch) -> None:
    async def accept_everything(*args, **kwargs):
        return None

    await create_appointment(session, clinic.company.id, _data(clinic.ana, clinic.maria, "09:00", "09:30"))
    monkeypatch.setattr(appointment_service, "find_conflict", accept_everything)

    with pytest.raises(AppointmentConflictError) as exc_info:
        await create_appointment(session, clinic.company.id, _data(clinic.bruno, clinic.maria, "09:00", "10:00"))

    assert exc_info.value.reason is ConflictReason.PROFESSIONAL_TIME_OVERLAP


async def test_booking_lock_serializes_same_professional() -> None:
    order: list[str] = []
    first = Appointment(patient_id=1, professional_id=10)
    second = Appointment(patient_id=2, professional_id=10)

    async def book(name: str, appointment: Appointment) -> None:
        async with booking_lock(appointment):
            order.append(f"{name}-start")
            await asyncio.sleep(0.01)
            order.append(f"{name}-end")

    await asyncio.gather(book("a", first), book("b", second))

    assert order == ["a-start", "a-end", "b-start", "b-end"]


async def test_available_slots_for_professional_reads_store(session, clinic) -> None:
    cid = clinic.company.id
    editing = await create_appointment(session, cid, _data(clinic.ana, clinic.maria, "09:00", "10:00"))
    await create_appointment(session, cid, _data(clinic.bruno, clinic.maria, "11:00", "11:30"))
    window = WorkingHours("09:00", "12:00", 30)

    board = await get_available_slots_for_professional(session, clinic.maria.id, DAY, window=window)
    assert [s for s, free in board if not free] == ["09:00", "09:30", "11:00"]

    board = await get_available_slots_for_professional(
        session, clinic.maria.id, DAY, exclude_id=editing.id, window=window
    )
    assert [s for s, free in board if not free] == ["11:00"]
