from pydantic import BaseModel, EmailStr, Field, model_validator

from app.models.company import CompanyPublic
from app.models.user import UserPublic


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class RegisterRequest(BaseModel):
    name: str = Field(min_length=2)
    email: EmailStr
    password: str = Field(min_length=6)
    phone: str | None = None
    company_name: str | None = None
    company_document: str | None = None

    @model_validator(mode="after")
    def company_fields_together(self) -> "RegisterRequest":
        if bool(self.company_name) != bool(self.company_document):
            raise ValueError("company_name and company_document must be given together.")
        return self


class TokenPair(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int  # seconds


class RefreshRequest(BaseModel):
    refresh_token: str


class MeResponse(BaseModel):
    user: UserPublic
    company: CompanyPublic | None = None
