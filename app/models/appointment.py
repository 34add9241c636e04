from datetime import UTC, datetime
from enum import Enum

from sqlalchemy import Index, text
from sqlmodel import Field, SQLModel


def _utc_naive_now() -> datetime:
    """Naive UTC for TIMESTAMP WITHOUT TIME ZONE columns."""
    return datetime.now(UTC).replace(tzinfo=None)


class AppointmentStatus(str, Enum):
    SCHEDULED = "SCHEDULED"
    CONFIRMED = "CONFIRMED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    NO_SHOW = "NO_SHOW"


# Appointments in these statuses never block a booking or a slot.
INERT_STATUSES = frozenset({AppointmentStatus.CANCELLED, AppointmentStatus.NO_SHOW})


def is_inert(status: AppointmentStatus) -> bool:
    return status in INERT_STATUSES


def is_in_progress(status: AppointmentStatus) -> bool:
    return status == AppointmentStatus.IN_PROGRESS


_ACTIVE_SLOT_PREDICATE = "status NOT IN ('CANCELLED', 'NO_SHOW')"


class AppointmentBase(SQLModel):
    patient_id: int = Field(foreign_key="patients.id", ondelete="CASCADE", index=True)
    professional_id: int = Field(foreign_key="professionals.id", ondelete="CASCADE", index=True)
    date: str = Field(index=True, max_length=10)  # YYYY-MM-DD
    start_time: str = Field(max_length=5)  # HH:MM
    end_time: str = Field(max_length=5)  # HH:MM
    status: AppointmentStatus = Field(default=AppointmentStatus.SCHEDULED, index=True)
    notes: str = ""
    treatment: str = ""


class Appointment(AppointmentBase, table=True):
    __tablename__ = "appointments"
    __table_args__ = (
        # Backstop against two concurrent writers booking the same start slot
        Index(
            "uq_appointments_professional_slot",
            "professional_id",
            "date",
            "start_time",
            unique=True,
            postgresql_where=text(_ACTIVE_SLOT_PREDICATE),
            sqlite_where=text(_ACTIVE_SLOT_PREDICATE),
        ),
    )
    id: int | None = Field(default=None, primary_key=True)
    company_id: int = Field(foreign_key="companies.id", index=True)
    created_at: datetime = Field(default_factory=_utc_naive_now)
    updated_at: datetime = Field(
        default_factory=_utc_naive_now,
        sa_column_kwargs={"onupdate": _utc_naive_now},
    )


class AppointmentCreate(AppointmentBase):
    """A candidate appointment, not yet persisted."""


class PersonRef(SQLModel):
    id: int
    name: str


class AppointmentPublic(AppointmentBase):
    id: int
    company_id: int
    created_at: datetime
    updated_at: datetime
    patient: PersonRef | None = None
    professional: PersonRef | None = None
