from datetime import date

from pydantic import BaseModel, EmailStr, Field

from app.api.schemas.common import Pagination
from app.models.patient import Gender, PatientPublic

_PHONE_PATTERN = r"^[0-9()\-\s]+$"
_DOCUMENT_PATTERN = r"^[0-9.\-]+$"


class PatientCreateRequest(BaseModel):
    name: str = Field(min_length=3, max_length=100)
    email: EmailStr
    phone: str = Field(min_length=10, max_length=15, pattern=_PHONE_PATTERN)
    document_number: str = Field(min_length=11, max_length=14, pattern=_DOCUMENT_PATTERN)
    date_of_birth: date | None = None
    gender: Gender
    address: str = Field(min_length=5, max_length=200)
    health_insurance: str | None = Field(default=None, max_length=100)
    health_insurance_number: str | None = Field(default=None, max_length=20)
    observations: str | None = Field(default=None, max_length=500)
    is_first_visit: bool = False


class PatientUpdateRequest(BaseModel):
    name: str | None = Field(default=None, min_length=3, max_length=100)
    email: EmailStr | None = None
    phone: str | None = Field(default=None, min_length=10, max_length=15, pattern=_PHONE_PATTERN)
    document_number: str | None = Field(default=None, min_length=11, max_length=14, pattern=_DOCUMENT_PATTERN)
    date_of_birth: date | None = None
    gender: Gender | None = None
    address: str | None = Field(default=None, min_length=5, max_length=200)
    health_insurance: str | None = Field(default=None, max_length=100)
    health_insurance_number: str | None = Field(default=None, max_length=20)
    observations: str | None = Field(default=None, max_length=500)
    is_first_visit: bool | None = None


class PatientListResponse(BaseModel):
    items: list[PatientPublic]
    pagination: Pagination
