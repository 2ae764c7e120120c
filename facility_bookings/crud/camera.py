from __future__ import annotations

from uuid import UUID

from facility_bookings.crud.lookup import find_camera
from facility_bookings.models import Camera
from facility_bookings.schemas import CameraResponse


class CameraCRUD:
    async def list_cameras(self) -> list[CameraResponse]:
        cameras = await Camera.all().order_by("ipv4_address", "port", "id")
        return [CameraResponse.model_validate(c, from_attributes=True) for c in cameras]

    async def find_camera(self, camera_id: UUID) -> CameraResponse:
        return CameraResponse.model_validate(await find_camera(camera_id), from_attributes=True)
