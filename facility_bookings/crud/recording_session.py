from __future__ import annotations

from collections.abc import Iterable
from uuid import UUID

from loguru import logger

from facility_bookings.crud import cascade
from facility_bookings.crud.base import atomic
from facility_bookings.crud.lookup import find_booking_row, find_recording_session_row
from facility_bookings.errors import NotFound
from facility_bookings.models import Camera, CameraSession, RecordingSession
from facility_bookings.schemas import (
    CameraResponse,
    RecordingSessionData,
    RecordingSessionResponse,
    RecordingSessionWithCameras,
)


def calculate_differences(
    current: Iterable[UUID], desired: Iterable[UUID]
) -> tuple[set[UUID], set[UUID]]:
    """Return (to_add, to_remove) turning `current` into `desired`."""
    current_set, desired_set = set(current), set(desired)
    return desired_set - current_set, current_set - desired_set


async def _ensure_cameras_exist(camera_ids: Iterable[UUID]) -> None:
    wanted = set(camera_ids)
    if not wanted:
        return
    found = set(await Camera.filter(id__in=list(wanted)).values_list("id", flat=True))
    missing = sorted(wanted - found, key=str)
    if missing:
        raise NotFound(f"Camera {missing[0]} not found", resource_id=missing[0])


async def _cameras_by_session(session_ids: list[UUID]) -> dict[UUID, list[CameraResponse]]:
    pairs = await CameraSession.filter(session_id__in=session_ids).values_list(
        "session_id", "camera_id"
    )
    cameras = {
        c.id: CameraResponse.model_validate(c, from_attributes=True)
        for c in await Camera.filter(id__in=list({cid for _, cid in pairs}))
    }
    grouped: dict[UUID, list[CameraResponse]] = {sid: [] for sid in session_ids}
    for session_id, camera_id in pairs:
        grouped[session_id].append(cameras[camera_id])
    for cams in grouped.values():
        cams.sort(key=lambda c: str(c.id))
    return grouped


def _with_cameras(
    session: RecordingSession, cameras: list[CameraResponse]
) -> RecordingSessionWithCameras:
    return RecordingSessionWithCameras(
        recording_session=RecordingSessionResponse.model_validate(session, from_attributes=True),
        cameras=cameras,
    )


class RecordingSessionCRUD:
    async def sync_cameras(self, session_id: UUID, desired: Iterable[UUID]) -> tuple[int, int]:
        """
        Make the camera set of a session equal to `desired`.
        Returns (inserted, deleted); a second call with the same set returns (0, 0).
        """
        current = await CameraSession.filter(session_id=session_id).values_list(
            "camera_id", flat=True
        )
        to_add, to_remove = calculate_differences(current, desired)

        if to_remove:
            await CameraSession.filter(
                session_id=session_id, camera_id__in=list(to_remove)
            ).delete()
        if to_add:
            await CameraSession.bulk_create(
                [CameraSession(session_id=session_id, camera_id=cid) for cid in to_add]
            )

        logger.debug(
            "Synced cameras of recording session {}: +{} -{}",
            session_id,
            len(to_add),
            len(to_remove),
        )
        return len(to_add), len(to_remove)

    async def create_recording_session(
        self, author_id: UUID, data: RecordingSessionData
    ) -> RecordingSessionWithCameras:
        await find_booking_row(data.booking_id)
        await _ensure_cameras_exist(data.camera_ids)

        async with atomic("create a recording session", data.booking_id):
            session = await RecordingSession.create(
                author_id=author_id,
                booking_id=data.booking_id,
                start_datetime=data.start_datetime,
                end_datetime=data.end_datetime,
            )
            await self.sync_cameras(session.id, data.camera_ids)

        logger.info("Recording session {} created for booking {}", session.id, data.booking_id)
        return await self.find_recording_session(session.id)

    async def find_recording_session(self, session_id: UUID) -> RecordingSessionWithCameras:
        session = await find_recording_session_row(session_id)
        cameras = await _cameras_by_session([session.id])
        return _with_cameras(session, cameras[session.id])

    async def list_by_booking(
        self, booking_id: UUID, limit: int = 100, offset: int = 0
    ) -> list[RecordingSessionWithCameras]:
        await find_booking_row(booking_id)
        sessions = (
            await RecordingSession.filter(booking_id=booking_id)
            .order_by("start_datetime", "id")
            .offset(offset)
            .limit(limit)
        )
        if not sessions:
            return []
        cameras = await _cameras_by_session([s.id for s in sessions])
        return [_with_cameras(s, cameras[s.id]) for s in sessions]

    async def update_recording_session(
        self, session_id: UUID, data: RecordingSessionData
    ) -> RecordingSessionWithCameras:
        await find_recording_session_row(session_id)
        await find_booking_row(data.booking_id)
        await _ensure_cameras_exist(data.camera_ids)

        async with atomic("update the recording session", session_id):
            await RecordingSession.filter(id=session_id).update(
                booking_id=data.booking_id,
                start_datetime=data.start_datetime,
                end_datetime=data.end_datetime,
            )
            await self.sync_cameras(session_id, data.camera_ids)

        return await self.find_recording_session(session_id)

    async def delete_recording_session(self, session_id: UUID) -> RecordingSessionWithCameras:
        async with atomic("delete the recording session", session_id):
            snapshot = await self.find_recording_session(session_id)
            await cascade.delete_recording_session(session_id)

        logger.info("Recording session {} deleted", session_id)
        return snapshot
