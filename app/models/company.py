from datetime import UTC, datetime

from sqlmodel import Field, SQLModel


def _utc_naive_now() -> datetime:
    """Naive UTC for TIMESTAMP WITHOUT TIME ZONE columns."""
    return datetime.now(UTC).replace(tzinfo=None)


class CompanyBase(SQLModel):
    name: str
    document: str = Field(unique=True, index=True)
    phone: str | None = None
    address: str | None = None


class Company(CompanyBase, table=True):
    __tablename__ = "companies"
    id: int | None = Field(default=None, primary_key=True)
    created_at: datetime = Field(default_factory=_utc_naive_now)


class CompanyUpdate(SQLModel):
    name: str | None = None
    phone: str | None = None
    address: str | None = None


class CompanyPublic(CompanyBase):
    id: int
    created_at: datetime
