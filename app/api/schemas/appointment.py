from pydantic import BaseModel, field_validator, model_validator

from app.api.schemas.common import Pagination
from app.models.appointment import AppointmentCreate, AppointmentPublic, AppointmentStatus
from app.services.time_utils import is_valid_hhmm, is_valid_iso_date, parse_hhmm


class AppointmentRequest(BaseModel):
    patient_id: int
    professional_id: int
    date: str  # YYYY-MM-DD
    start_time: str  # HH:MM
    end_time: str  # HH:MM
    status: AppointmentStatus = AppointmentStatus.SCHEDULED
    notes: str | None = None
    treatment: str | None = None

    @field_validator("date")
    @classmethod
    def validate_date(cls, value: str) -> str:
        value = value.strip()
        if not is_valid_iso_date(value):
            raise ValueError("Date must be a valid YYYY-MM-DD date.")
        return value

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, value: str) -> str:
        value = value.strip()
        if not is_valid_hhmm(value):
            raise ValueError("Time must use the 24-hour HH:MM format.")
        return value

    @model_validator(mode="after")
    def validate_time_range(self) -> "AppointmentRequest":
        if parse_hhmm(self.start_time) >= parse_hhmm(self.end_time):
            raise ValueError("start_time must be before end_time.")
        return self

    def to_candidate(self) -> AppointmentCreate:
        return AppointmentCreate(
            patient_id=self.patient_id,
            professional_id=self.professional_id,
            date=self.date,
            start_time=self.start_time,
            end_time=self.end_time,
            status=self.status,
            notes=self.notes or "",
            treatment=self.treatment or "",
        )


class AppointmentStatusUpdate(BaseModel):
    status: AppointmentStatus


class AppointmentListResponse(BaseModel):
    items: list[AppointmentPublic]
    pagination: Pagination


class SlotInfo(BaseModel):
    start_time: str
    end_time: str
    available: bool


class AvailableSlotsResponse(BaseModel):
    date: str  # YYYY-MM-DD
    professional_id: int
    slot_minutes: int
    slots: list[SlotInfo]
    available_times: list[str]
