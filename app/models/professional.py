from datetime import UTC, datetime

from sqlmodel import Field, SQLModel


def _utc_naive_now() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


class ProfessionalBase(SQLModel):
    name: str = Field(index=True)
    email: str | None = None
    phone: str | None = None
    document_number: str | None = None
    specialty: str | None = None
    registration_number: str | None = None
    is_active: bool = True


class Professional(ProfessionalBase, table=True):
    __tablename__ = "professionals"
    id: int | None = Field(default=None, primary_key=True)
    company_id: int = Field(foreign_key="companies.id", index=True)
    user_id: int | None = Field(default=None, foreign_key="users.id", index=True)
    created_at: datetime = Field(default_factory=_utc_naive_now)
    updated_at: datetime = Field(
        default_factory=_utc_naive_now,
        sa_column_kwargs={"onupdate": _utc_naive_now},
    )


class ProfessionalPublic(ProfessionalBase):
    id: int
    company_id: int
    user_id: int | None = None
    created_at: datetime
    updated_at: datetime
