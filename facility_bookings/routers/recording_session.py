from uuid import UUID

from fastapi import APIRouter, Depends, status

from facility_bookings import authorized
from facility_bookings.deps import Claims, Page, get_current_user, get_page
from facility_bookings.schemas import RecordingSessionData, RecordingSessionWithCameras

router = APIRouter(prefix="/recording-sessions", tags=["recording-sessions"])


@router.post(
    "/", response_model=RecordingSessionWithCameras, status_code=status.HTTP_201_CREATED
)
async def create_recording_session(
    payload: RecordingSessionData,
    claims: Claims = Depends(get_current_user),
) -> RecordingSessionWithCameras:
    return await authorized.create_recording_session(claims, payload)


@router.get("/by-booking/{booking_id}", response_model=list[RecordingSessionWithCameras])
async def list_recording_sessions(
    booking_id: UUID,
    page: Page = Depends(get_page),
    claims: Claims = Depends(get_current_user),
) -> list[RecordingSessionWithCameras]:
    return await authorized.list_recording_sessions(
        claims, booking_id, page.limit, page.offset
    )


@router.get("/{session_id}", response_model=RecordingSessionWithCameras)
async def get_recording_session(
    session_id: UUID,
    claims: Claims = Depends(get_current_user),
) -> RecordingSessionWithCameras:
    return await authorized.find_recording_session(claims, session_id)


@router.put("/{session_id}", response_model=RecordingSessionWithCameras)
async def update_recording_session(
    session_id: UUID,
    payload: RecordingSessionData,
    claims: Claims = Depends(get_current_user),
) -> RecordingSessionWithCameras:
    return await authorized.update_recording_session(claims, session_id, payload)


@router.delete("/{session_id}", response_model=RecordingSessionWithCameras)
async def delete_recording_session(
    session_id: UUID,
    claims: Claims = Depends(get_current_user),
) -> RecordingSessionWithCameras:
    return await authorized.delete_recording_session(claims, session_id)
