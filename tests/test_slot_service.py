from app.models.appointment import Appointment, AppointmentStatus
from app.services.slot_service import WorkingHours, compute_available_slots, slot_board

PROFESSIONAL = 10
DAY = "2024-01-10"
WINDOW = WorkingHours(day_start="08:00", day_end="18:00", slot_minutes=30)


def _appt(
    id: int,
    start: str,
    end: str,
    professional_id: int = PROFESSIONAL,
    date: str = DAY,
    status: AppointmentStatus = AppointmentStatus.SCHEDULED,
) -> Appointment:
    return Appointment(
        id=id,
        company_id=1,
        patient_id=id,
        professional_id=professional_id,
        date=date,
        start_time=start,
        end_time=end,
        status=status,
    )


def test_empty_day_offers_every_slot_including_day_end() -> None:
    slots = compute_available_slots(PROFESSIONAL, DAY, WINDOW, [])

    assert len(slots) == 21
    assert slots[0] == "08:00"
    assert slots[1] == "08:30"
    assert slots[-1] == "18:00"


def test_appointment_removes_the_slots_it_covers_but_not_its_end() -> None:
    slots = compute_available_slots(PROFESSIONAL, DAY, WINDOW, [_appt(1, "09:00", "10:00")])

    assert "09:00" not in slots
    assert "09:30" not in slots
    assert "10:00" in slots
    assert "08:30" in slots
    assert len(slots) == 19


def test_appointment_off_the_grid_blocks_every_slot_it_touches() -> None:
    slots = compute_available_slots(PROFESSIONAL, DAY, WINDOW, [_appt(1, "09:15", "10:15")])

    assert "09:00" in slots
    assert "09:30" not in slots
    assert "10:00" not in slots
    assert "10:30" in slots


def test_only_active_appointments_of_that_professional_and_day_block() -> None:
    existing = [
        _appt(1, "09:00", "09:30", status=AppointmentStatus.CANCELLED),
        _appt(2, "10:00", "10:30", status=AppointmentStatus.NO_SHOW),
        _appt(3, "11:00", "11:30", professional_id=99),
        _appt(4, "12:00", "12:30", date="2024-01-11"),
        _appt(5, "13:00", "13:30", status=AppointmentStatus.COMPLETED),
    ]

    slots = compute_available_slots(PROFESSIONAL, DAY, WINDOW, existing)

    assert slots == [s for s in compute_available_slots(PROFESSIONAL, DAY, WINDOW, []) if s != "13:00"]


def test_excluded_appointment_frees_its_own_slot() -> None:
    existing = [_appt(1, "09:00", "09:30"), _appt(2, "09:30", "10:00")]

    slots = compute_available_slots(PROFESSIONAL, DAY, WINDOW, existing, exclude_id=1)

    assert "09:00" in slots
    assert "09:30" not in slots


def test_result_is_chronological_and_stable() -> None:
    existing = [_appt(2, "15:00", "16:00"), _appt(1, "08:00", "08:30")]

    first = compute_available_slots(PROFESSIONAL, DAY, WINDOW, existing)
    second = compute_available_slots(PROFESSIONAL, DAY, WINDOW, existing)

    assert first == second
    assert first == sorted(first)


def test_degenerate_windows_yield_no_slots() -> None:
    assert compute_available_slots(PROFESSIONAL, DAY, WorkingHours("18:00", "08:00", 30), []) == []
    assert compute_available_slots(PROFESSIONAL, DAY, WorkingHours("08:00", "08:00", 30), []) == []
    assert compute_available_slots(PROFESSIONAL, DAY, WorkingHours("08:00", "18:00", 0), []) == []


def test_slot_board_flags_each_slot() -> None:
    board = slot_board(PROFESSIONAL, DAY, WorkingHours("09:00", "10:00", 30), [_appt(1, "09:30", "10:00")])

    assert board == [("09:00", True), ("09:30", False), ("10:00", True)]
