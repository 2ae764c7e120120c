from uuid import UUID

from fastapi import APIRouter, Depends, status

from facility_bookings import authorized
from facility_bookings.deps import Claims, Page, get_current_user, get_page
from facility_bookings.schemas import TeamCreate, TeamResponse, TeamUpdate

router = APIRouter(prefix="/teams", tags=["teams"])


@router.get("/", response_model=list[TeamResponse])
async def list_teams(
    club_id: str | None = None,
    sport: str | None = None,
    page: Page = Depends(get_page),
    claims: Claims = Depends(get_current_user),
) -> list[TeamResponse]:
    return await authorized.list_teams(claims, club_id, sport, page.limit, page.offset)


@router.post("/", response_model=TeamResponse, status_code=status.HTTP_201_CREATED)
async def create_team(
    payload: TeamCreate,
    claims: Claims = Depends(get_current_user),
) -> TeamResponse:
    return await authorized.create_team(claims, payload)


@router.get("/{team_id}", response_model=TeamResponse)
async def get_team(
    team_id: UUID,
    claims: Claims = Depends(get_current_user),
) -> TeamResponse:
    return await authorized.find_team(claims, team_id)


@router.put("/{team_id}", response_model=TeamResponse)
async def update_team(
    team_id: UUID,
    payload: TeamUpdate,
    claims: Claims = Depends(get_current_user),
) -> TeamResponse:
    return await authorized.update_team(claims, team_id, payload)


@router.delete("/{team_id}", response_model=TeamResponse)
async def delete_team(
    team_id: UUID,
    claims: Claims = Depends(get_current_user),
) -> TeamResponse:
    return await authorized.delete_team(claims, team_id)
