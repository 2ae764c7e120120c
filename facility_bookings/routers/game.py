from uuid import UUID

from fastapi import APIRouter, Depends

from facility_bookings import authorized
from facility_bookings.deps import Claims, get_current_user
from facility_bookings.schemas import (
    FormationPlayerTagsData,
    FormationPlayerWithTags,
    GameResponse,
    PlayerIds,
)

router = APIRouter(prefix="/games", tags=["games"])


@router.delete("/{game_id}", response_model=GameResponse)
async def delete_game(
    game_id: UUID,
    claims: Claims = Depends(get_current_user),
) -> GameResponse:
    return await authorized.delete_game(claims, game_id)


# ---------------------------------------------------------------------------
# Formation rosters
# ---------------------------------------------------------------------------


@router.get(
    "/{game_id}/formations/{formation_id}/players",
    response_model=list[FormationPlayerWithTags],
)
async def get_formation_players(
    game_id: UUID,
    formation_id: UUID,
    claims: Claims = Depends(get_current_user),
) -> list[FormationPlayerWithTags]:
    return await authorized.find_formation_players(claims, game_id, formation_id)


@router.post(
    "/{game_id}/formations/{formation_id}/players",
    response_model=list[FormationPlayerWithTags],
)
async def add_formation_players(
    game_id: UUID,
    formation_id: UUID,
    payload: list[FormationPlayerTagsData],
    claims: Claims = Depends(get_current_user),
) -> list[FormationPlayerWithTags]:
    return await authorized.add_formation_players(claims, game_id, formation_id, payload)


@router.delete(
    "/{game_id}/formations/{formation_id}/players",
    response_model=list[FormationPlayerWithTags],
)
async def remove_formation_players(
    game_id: UUID,
    formation_id: UUID,
    payload: PlayerIds,
    claims: Claims = Depends(get_current_user),
) -> list[FormationPlayerWithTags]:
    return await authorized.remove_formation_players(
        claims, game_id, formation_id, payload.player_ids
    )
