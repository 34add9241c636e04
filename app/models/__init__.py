from app.models.company import Company, CompanyPublic, CompanyUpdate
from app.models.user import User, UserCreate, UserPublic, UserRole
from app.models.refresh_token import RefreshToken
from app.models.patient import Gender, Patient, PatientPublic
from app.models.professional import Professional, ProfessionalPublic
from app.models.appointment import (
    Appointment,
    AppointmentCreate,
    AppointmentPublic,
    AppointmentStatus,
)

__all__ = [
    "Company",
    "CompanyPublic",
    "CompanyUpdate",
    "User",
    "UserCreate",
    "UserPublic",
    "UserRole",
    "RefreshToken",
    "Gender",
    "Patient",
    "PatientPublic",
    "Professional",
    "ProfessionalPublic",
    "Appointment",
    "AppointmentCreate",
    "AppointmentPublic",
    "AppointmentStatus",
]
