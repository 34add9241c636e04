from pydantic import BaseModel, EmailStr, Field

from app.api.schemas.common import Pagination
from app.models.professional import ProfessionalPublic

_PHONE_PATTERN = r"^[0-9()\-\s]+$"
_DOCUMENT_PATTERN = r"^[0-9.\-]+$"


class ProfessionalCreateRequest(BaseModel):
    name: str = Field(min_length=3, max_length=100)
    email: EmailStr
    phone: str = Field(min_length=10, max_length=15, pattern=_PHONE_PATTERN)
    document_number: str = Field(min_length=11, max_length=14, pattern=_DOCUMENT_PATTERN)
    specialty: str = Field(min_length=3, max_length=100)
    registration_number: str = Field(min_length=5, max_length=20)
    is_active: bool = True
    # When set, a login is created for the professional in the same company.
    password: str | None = Field(default=None, min_length=6)


class ProfessionalUpdateRequest(BaseModel):
    name: str | None = Field(default=None, min_length=3, max_length=100)
    email: EmailStr | None = None
    phone: str | None = Field(default=None, min_length=10, max_length=15, pattern=_PHONE_PATTERN)
    document_number: str | None = Field(default=None, min_length=11, max_length=14, pattern=_DOCUMENT_PATTERN)
    specialty: str | None = Field(default=None, min_length=3, max_length=100)
    registration_number: str | None = Field(default=None, min_length=5, max_length=20)
    is_active: bool | None = None


class ProfessionalListResponse(BaseModel):
    items: list[ProfessionalPublic]
    pagination: Pagination
