from uuid import UUID

from fastapi import APIRouter, Depends
from loguru import logger

from facility_bookings import authorized
from facility_bookings.cache import get_cameras_cache, set_cameras_cache
from facility_bookings.deps import Claims, get_current_user
from facility_bookings.schemas import CameraResponse

router = APIRouter(prefix="/cameras", tags=["cameras"])


@router.get("/", response_model=list[CameraResponse])
async def list_cameras(claims: Claims = Depends(get_current_user)) -> list[CameraResponse]:
    """Camera catalog, served from Redis when warm. Credentials are never exposed."""
    cached = await get_cameras_cache()
    if cached is not None:
        logger.debug("Cache hit for cameras")
        return [CameraResponse(**c) for c in cached]

    logger.debug("Cache miss for cameras")
    cameras = await authorized.list_cameras(claims)
    await set_cameras_cache([c.model_dump(mode="json") for c in cameras])
    return cameras


@router.get("/{camera_id}", response_model=CameraResponse)
async def get_camera(
    camera_id: UUID,
    claims: Claims = Depends(get_current_user),
) -> CameraResponse:
    return await authorized.find_camera(claims, camera_id)
