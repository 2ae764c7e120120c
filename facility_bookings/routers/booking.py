from uuid import UUID

from fastapi import APIRouter, Depends, status
from loguru import logger

from facility_bookings import authorized
from facility_bookings.deps import Claims, get_current_user
from facility_bookings.schemas import BookingData, BookingFilters, BookingWithEvent

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.get("/", response_model=list[BookingWithEvent])
async def list_bookings(
    filters: BookingFilters = Depends(),
    claims: Claims = Depends(get_current_user),
) -> list[BookingWithEvent]:
    return await authorized.list_bookings(claims, filters)


@router.post("/", response_model=BookingWithEvent, status_code=status.HTTP_201_CREATED)
async def create_booking(
    payload: BookingData,
    claims: Claims = Depends(get_current_user),
) -> BookingWithEvent:
    logger.debug(
        "Create booking requested by {} (event: {})",
        claims.subject_id,
        payload.event.kind if payload.event else None,
    )
    return await authorized.create_booking(claims, payload)


@router.get("/{booking_id}", response_model=BookingWithEvent)
async def get_booking(
    booking_id: UUID,
    claims: Claims = Depends(get_current_user),
) -> BookingWithEvent:
    return await authorized.find_booking(claims, booking_id)


@router.put("/{booking_id}", response_model=BookingWithEvent)
async def update_booking(
    booking_id: UUID,
    payload: BookingData,
    claims: Claims = Depends(get_current_user),
) -> BookingWithEvent:
    return await authorized.update_booking(claims, booking_id, payload)


@router.delete("/{booking_id}", response_model=BookingWithEvent)
async def delete_booking(
    booking_id: UUID,
    claims: Claims = Depends(get_current_user),
) -> BookingWithEvent:
    """Returns the booking and its event as they were before deletion."""
    return await authorized.delete_booking(claims, booking_id)
