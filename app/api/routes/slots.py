from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_company_id, get_session
from app.api.schemas.appointment import AvailableSlotsResponse, SlotInfo
from app.services.professional_service import get_professional
from app.services.slot_service import default_working_hours, get_available_slots_for_professional
from app.services.time_utils import MINUTES_PER_DAY, format_hhmm, is_valid_iso_date, parse_hhmm

router = APIRouter(prefix="/slots", tags=["slots"])


def _slot_end(start: str, slot_minutes: int) -> str:
    return format_hhmm(min(parse_hhmm(start) + slot_minutes, MINUTES_PER_DAY - 1))


@router.get("/available", response_model=AvailableSlotsResponse)
async def available_slots(
    professional_id: int = Query(...),
    date_param: str = Query(..., alias="date"),
    exclude_id: int | None = Query(None),
    session: AsyncSession = Depends(get_session),
    company_id: int = Depends(get_company_id),
) -> AvailableSlotsResponse:
    """Slot grid for a professional's day. Pass exclude_id while editing an
    appointment so its own slot shows as free."""
    if not is_valid_iso_date(date_param):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="date must be a valid YYYY-MM-DD date.",
        )
    if not await get_professional(session, company_id, professional_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Professional not found")
    window = default_working_hours()
    board = await get_available_slots_for_professional(
        session, professional_id, date_param, exclude_id=exclude_id, window=window
    )
    return AvailableSlotsResponse(
        date=date_param,
        professional_id=professional_id,
        slot_minutes=window.slot_minutes,
        slots=[
            SlotInfo(start_time=s, end_time=_slot_end(s, window.slot_minutes), available=avail)
            for s, avail in board
        ],
        available_times=[s for s, avail in board if avail],
    )
