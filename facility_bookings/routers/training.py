from uuid import UUID

from fastapi import APIRouter, Depends

from facility_bookings import authorized
from facility_bookings.deps import Claims, get_current_user
from facility_bookings.schemas import (
    PlayerIds,
    TrainingPlayerTagsData,
    TrainingPlayerWithTags,
    TrainingResponse,
)

router = APIRouter(prefix="/trainings", tags=["trainings"])


@router.delete("/{training_id}", response_model=TrainingResponse)
async def delete_training(
    training_id: UUID,
    claims: Claims = Depends(get_current_user),
) -> TrainingResponse:
    return await authorized.delete_training(claims, training_id)


@router.get("/{training_id}/players", response_model=list[TrainingPlayerWithTags])
async def get_training_players(
    training_id: UUID,
    claims: Claims = Depends(get_current_user),
) -> list[TrainingPlayerWithTags]:
    return await authorized.find_training_players(claims, training_id)


@router.post("/{training_id}/players", response_model=list[TrainingPlayerWithTags])
async def add_training_players(
    training_id: UUID,
    payload: list[TrainingPlayerTagsData],
    claims: Claims = Depends(get_current_user),
) -> list[TrainingPlayerWithTags]:
    return await authorized.add_training_players(claims, training_id, payload)


@router.delete("/{training_id}/players", response_model=list[TrainingPlayerWithTags])
async def remove_training_players(
    training_id: UUID,
    payload: PlayerIds,
    claims: Claims = Depends(get_current_user),
) -> list[TrainingPlayerWithTags]:
    return await authorized.remove_training_players(claims, training_id, payload.player_ids)
