from uuid import UUID

from fastapi import APIRouter, Depends, status
from loguru import logger

from facility_bookings import authorized
from facility_bookings.deps import Claims, Page, get_current_user, get_page
from facility_bookings.schemas import ClubCreate, ClubResponse, ClubUpdate

router = APIRouter(prefix="/clubs", tags=["clubs"])


@router.get("/", response_model=list[ClubResponse])
async def list_clubs(
    page: Page = Depends(get_page),
    claims: Claims = Depends(get_current_user),
) -> list[ClubResponse]:
    return await authorized.list_clubs(claims, page.limit, page.offset)


@router.post("/", response_model=ClubResponse, status_code=status.HTTP_201_CREATED)
async def create_club(
    payload: ClubCreate,
    claims: Claims = Depends(get_current_user),
) -> ClubResponse:
    logger.debug("Create sports club {} requested by {}", payload.vat_number, claims.subject_id)
    return await authorized.create_club(claims, payload)


@router.get("/{club_id}", response_model=ClubResponse)
async def get_club(
    club_id: str,
    claims: Claims = Depends(get_current_user),
) -> ClubResponse:
    return await authorized.find_club(claims, club_id)


@router.put("/{club_id}", response_model=ClubResponse)
async def update_club(
    club_id: str,
    payload: ClubUpdate,
    claims: Claims = Depends(get_current_user),
) -> ClubResponse:
    return await authorized.update_club(claims, club_id, payload)


@router.delete("/{club_id}", response_model=ClubResponse)
async def delete_club(
    club_id: str,
    claims: Claims = Depends(get_current_user),
) -> ClubResponse:
    return await authorized.delete_club(claims, club_id)


# ---------------------------------------------------------------------------
# Responsibles
# ---------------------------------------------------------------------------


@router.get("/{club_id}/responsibles", response_model=list[UUID])
async def list_responsibles(
    club_id: str,
    claims: Claims = Depends(get_current_user),
) -> list[UUID]:
    return await authorized.list_club_responsibles(claims, club_id)


@router.put("/{club_id}/responsibles/{user_id}", response_model=list[UUID])
async def add_responsible(
    club_id: str,
    user_id: UUID,
    claims: Claims = Depends(get_current_user),
) -> list[UUID]:
    return await authorized.add_club_responsible(claims, club_id, user_id)


@router.delete("/{club_id}/responsibles/{user_id}", response_model=list[UUID])
async def remove_responsible(
    club_id: str,
    user_id: UUID,
    claims: Claims = Depends(get_current_user),
) -> list[UUID]:
    return await authorized.remove_club_responsible(claims, club_id, user_id)
