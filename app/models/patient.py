from datetime import UTC, date, datetime
from enum import Enum

from sqlmodel import Field, SQLModel


def _utc_naive_now() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


class Gender(str, Enum):
    M = "M"
    F = "F"
    O = "O"  # noqa: E741


class PatientBase(SQLModel):
    name: str = Field(index=True)
    email: str | None = None
    phone: str | None = None
    document_number: str | None = None
    date_of_birth: date | None = None
    gender: Gender | None = None
    address: str | None = None
    health_insurance: str | None = None
    health_insurance_number: str | None = None
    observations: str | None = None
    is_first_visit: bool = False


class Patient(PatientBase, table=True):
    __tablename__ = "patients"
    id: int | None = Field(default=None, primary_key=True)
    company_id: int = Field(foreign_key="companies.id", index=True)
    created_at: datetime = Field(default_factory=_utc_naive_now)
    updated_at: datetime = Field(
        default_factory=_utc_naive_now,
        sa_column_kwargs={"onupdate": _utc_naive_now},
    )


class PatientPublic(PatientBase):
    id: int
    company_id: int
    created_at: datetime
    updated_at: datetime
