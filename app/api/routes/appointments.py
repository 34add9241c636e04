import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import PageParams, get_company_id, get_session
from app.api.schemas.appointment import (
    AppointmentListResponse,
    AppointmentRequest,
    AppointmentStatusUpdate,
)
from app.api.schemas.common import ConflictResponse, Pagination
from app.models.appointment import Appointment, AppointmentPublic, AppointmentStatus, PersonRef
from app.services.appointment_service import (
    AppointmentConflictError,
    AppointmentFilters,
    AppointmentReferenceError,
    create_appointment,
    delete_appointment,
    get_appointment,
    list_appointments,
    set_appointment_status,
    update_appointment,
)
from app.services.time_utils import is_valid_iso_date

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/appointments", tags=["appointments"])

_NOT_FOUND = "Appointment not found"
_CONFLICT_RESPONSES = {status.HTTP_409_CONFLICT: {"model": ConflictResponse}}


def _to_public(
    a: Appointment, patient_name: str | None = None, professional_name: str | None = None
) -> AppointmentPublic:
    public = AppointmentPublic.model_validate(a)
    if patient_name is not None:
        public.patient = PersonRef(id=a.patient_id, name=patient_name)
    if professional_name is not None:
        public.professional = PersonRef(id=a.professional_id, name=professional_name)
    return public


def _conflict_response(e: AppointmentConflictError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": e.reason.message, "reason": e.reason.value},
    )


def _check_date_param(name: str, value: str | None) -> None:
    if value is not None and not is_valid_iso_date(value):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"{name} must be a valid YYYY-MM-DD date.",
        )


@router.get("", response_model=AppointmentListResponse)
async def list_company_appointments(
    date: str | None = Query(None),
    start_date: str | None = Query(None),
    end_date: str | None = Query(None),
    patient_id: int | None = Query(None),
    professional_id: int | None = Query(None),
    status_filter: AppointmentStatus | None = Query(None, alias="status"),
    paging: PageParams = Depends(),
    session: AsyncSession = Depends(get_session),
    company_id: int = Depends(get_company_id),
) -> AppointmentListResponse:
    for name, value in (("date", date), ("start_date", start_date), ("end_date", end_date)):
        _check_date_param(name, value)
    filters = AppointmentFilters(
        date=date,
        start_date=start_date,
        end_date=end_date,
        patient_id=patient_id,
        professional_id=professional_id,
        status=status_filter,
    )
    rows, total = await list_appointments(
        session, company_id, filters, page=paging.page, page_size=paging.page_size
    )
    return AppointmentListResponse(
        items=[_to_public(a, p, pr) for a, p, pr in rows],
        pagination=Pagination.build(total, paging.page, paging.page_size),
    )


@router.post(
    "",
    response_model=AppointmentPublic,
    status_code=status.HTTP_201_CREATED,
    responses=_CONFLICT_RESPONSES,
)
async def book_appointment(
    body: AppointmentRequest,
    session: AsyncSession = Depends(get_session),
    company_id: int = Depends(get_company_id),
):
    try:
        appointment = await create_appointment(session, company_id, body.to_candidate())
    except AppointmentConflictError as e:
        return _conflict_response(e)
    except AppointmentReferenceError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    logger.info(
        "Booked appointment id=%s professional=%s %s %s-%s",
        appointment.id,
        appointment.professional_id,
        appointment.date,
        appointment.start_time,
        appointment.end_time,
    )
    return _to_public(appointment)


@router.get("/{appointment_id}", response_model=AppointmentPublic)
async def read_appointment(
    appointment_id: int,
    session: AsyncSession = Depends(get_session),
    company_id: int = Depends(get_company_id),
) -> AppointmentPublic:
    appointment = await get_appointment(session, company_id, appointment_id)
    if not appointment:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=_NOT_FOUND)
    return _to_public(appointment)


@router.put("/{appointment_id}", response_model=AppointmentPublic, responses=_CONFLICT_RESPONSES)
async def edit_appointment(
    appointment_id: int,
    body: AppointmentRequest,
    session: AsyncSession = Depends(get_session),
    company_id: int = Depends(get_company_id),
):
    try:
        appointment = await update_appointment(session, company_id, appointment_id, body.to_candidate())
    except AppointmentConflictError as e:
        return _conflict_response(e)
    except AppointmentReferenceError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    if not appointment:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=_NOT_FOUND)
    return _to_public(appointment)


@router.patch(
    "/{appointment_id}/status",
    response_model=AppointmentPublic,
    responses=_CONFLICT_RESPONSES,
)
async def change_appointment_status(
    appointment_id: int,
    body: AppointmentStatusUpdate,
    session: AsyncSession = Depends(get_session),
    company_id: int = Depends(get_company_id),
):
    try:
        appointment = await set_appointment_status(session, company_id, appointment_id, body.status)
    except AppointmentConflictError as e:
        return _conflict_response(e)
    if not appointment:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=_NOT_FOUND)
    return _to_public(appointment)


@router.delete("/{appointment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_appointment(
    appointment_id: int,
    session: AsyncSession = Depends(get_session),
    company_id: int = Depends(get_company_id),
) -> None:
    ok = await delete_appointment(session, company_id, appointment_id)
    if not ok:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=_NOT_FOUND)
