from datetime import UTC, datetime
from enum import Enum

from sqlmodel import Field, SQLModel


def _utc_naive_now() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


class UserRole(str, Enum):
    ADMIN = "ADMIN"
    USER = "USER"


class UserBase(SQLModel):
    email: str = Field(unique=True, index=True)
    name: str
    phone: str | None = None
    role: UserRole = UserRole.USER


class User(UserBase, table=True):
    __tablename__ = "users"
    id: int | None = Field(default=None, primary_key=True)
    hashed_password: str
    company_id: int | None = Field(default=None, foreign_key="companies.id", index=True)
    created_at: datetime = Field(default_factory=_utc_naive_now)


class UserCreate(SQLModel):
    email: str
    password: str
    name: str
    phone: str | None = None
    role: UserRole = UserRole.USER
    company_id: int | None = None


class UserPublic(SQLModel):
    id: int
    email: str
    name: str
    phone: str | None = None
    role: UserRole
    company_id: int | None = None
