from uuid import UUID

from fastapi import APIRouter, Depends

from facility_bookings import authorized
from facility_bookings.deps import Claims, get_current_user
from facility_bookings.schemas import (
    JoinInfo,
    LeaveInfo,
    NewProfile,
    PersonUpdate,
    PersonWithProfiles,
    TeamMembership,
    TeamStaff,
)

router = APIRouter(prefix="/persons", tags=["persons"])


@router.get("/by-team/{team_id}", response_model=TeamStaff)
async def list_team_staff(
    team_id: UUID,
    claims: Claims = Depends(get_current_user),
) -> TeamStaff:
    return await authorized.list_team_staff(claims, team_id)


@router.get("/by-club/{club_id}", response_model=list[TeamStaff])
async def list_club_staff(
    club_id: str,
    claims: Claims = Depends(get_current_user),
) -> list[TeamStaff]:
    return await authorized.list_club_staff(claims, club_id)


@router.get("/{person_id}", response_model=PersonWithProfiles)
async def get_person(
    person_id: UUID,
    claims: Claims = Depends(get_current_user),
) -> PersonWithProfiles:
    return await authorized.find_person(claims, person_id)


@router.put("/{person_id}", response_model=PersonWithProfiles)
async def update_person(
    person_id: UUID,
    payload: PersonUpdate,
    claims: Claims = Depends(get_current_user),
) -> PersonWithProfiles:
    return await authorized.update_person(claims, person_id, payload)


@router.post("/{person_id}/profiles", response_model=PersonWithProfiles)
async def add_profile(
    person_id: UUID,
    payload: NewProfile,
    claims: Claims = Depends(get_current_user),
) -> PersonWithProfiles:
    return await authorized.add_profile(claims, person_id, payload)


# ---------------------------------------------------------------------------
# Team membership
# ---------------------------------------------------------------------------


@router.post("/{person_id}/teams/{team_id}", response_model=TeamMembership)
async def join_team(
    person_id: UUID,
    team_id: UUID,
    payload: JoinInfo,
    claims: Claims = Depends(get_current_user),
) -> TeamMembership:
    return await authorized.join_team(claims, person_id, team_id, payload)


@router.delete("/{person_id}/teams/{team_id}", response_model=TeamMembership)
async def leave_team(
    person_id: UUID,
    team_id: UUID,
    payload: LeaveInfo,
    claims: Claims = Depends(get_current_user),
) -> TeamMembership:
    return await authorized.leave_team(claims, person_id, team_id, payload)
