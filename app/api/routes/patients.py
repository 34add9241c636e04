from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import PageParams, get_company_id
from app.api.schemas.common import Pagination
from app.api.schemas.patient import PatientCreateRequest, PatientListResponse, PatientUpdateRequest
from app.core.db import get_session
from app.models.patient import PatientPublic
from app.services.patient_service import (
    create_patient,
    delete_patient,
    get_patient,
    list_patients,
    update_patient,
)

router = APIRouter(prefix="/patients", tags=["patients"])

_NOT_FOUND = "Patient not found"


@router.get("", response_model=PatientListResponse)
async def list_company_patients(
    search: str | None = Query(None),
    paging: PageParams = Depends(),
    session: AsyncSession = Depends(get_session),
    company_id: int = Depends(get_company_id),
) -> PatientListResponse:
    patients, total = await list_patients(
        session, company_id, search=search, page=paging.page, page_size=paging.page_size
    )
    return PatientListResponse(
        items=[PatientPublic.model_validate(p) for p in patients],
        pagination=Pagination.build(total, paging.page, paging.page_size),
    )


@router.post("", response_model=PatientPublic, status_code=status.HTTP_201_CREATED)
async def create_company_patient(
    body: PatientCreateRequest,
    session: AsyncSession = Depends(get_session),
    company_id: int = Depends(get_company_id),
) -> PatientPublic:
    patient = await create_patient(session, company_id, body.model_dump())
    return PatientPublic.model_validate(patient)


@router.get("/{patient_id}", response_model=PatientPublic)
async def read_patient(
    patient_id: int,
    session: AsyncSession = Depends(get_session),
    company_id: int = Depends(get_company_id),
) -> PatientPublic:
    patient = await get_patient(session, company_id, patient_id)
    if not patient:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=_NOT_FOUND)
    return PatientPublic.model_validate(patient)


@router.put("/{patient_id}", response_model=PatientPublic)
async def update_company_patient(
    patient_id: int,
    body: PatientUpdateRequest,
    session: AsyncSession = Depends(get_session),
    company_id: int = Depends(get_company_id),
) -> PatientPublic:
    patient = await update_patient(session, company_id, patient_id, body.model_dump(exclude_unset=True))
    if not patient:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=_NOT_FOUND)
    return PatientPublic.model_validate(patient)


@router.delete("/{patient_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_company_patient(
    patient_id: int,
    session: AsyncSession = Depends(get_session),
    company_id: int = Depends(get_company_id),
) -> None:
    if not await delete_patient(session, company_id, patient_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=_NOT_FOUND)
