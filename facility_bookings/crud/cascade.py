"""
Ordered deletion of the booking aggregate.

The store does not cascade, so children are always removed before the rows
they reference. Callers run these inside `atomic()`.
"""

from __future__ import annotations

from uuid import UUID

from loguru import logger

from facility_bookings.models import (
    Booking,
    CameraSession,
    Formation,
    FormationPlayer,
    FormationPlayerTag,
    Game,
    RecordingSession,
    Training,
    TrainingPlayer,
    TrainingPlayerTag,
)


async def delete_formation_children(formation_id: UUID) -> None:
    await FormationPlayerTag.filter(formation_id=formation_id).delete()
    await FormationPlayer.filter(formation_id=formation_id).delete()


async def delete_game(game: Game) -> None:
    """Tags, players, the game row, then its formations (the game references them)."""
    formation_ids = [game.home_formation_id]
    if game.visiting_formation_id is not None:
        formation_ids.append(game.visiting_formation_id)

    for formation_id in formation_ids:
        await delete_formation_children(formation_id)
    await Game.filter(id=game.id).delete()
    await Formation.filter(id__in=formation_ids).delete()
    logger.debug("Deleted game {} with formations {}", game.id, formation_ids)


async def delete_training(training: Training) -> None:
    await TrainingPlayerTag.filter(training_id=training.id).delete()
    await TrainingPlayer.filter(training_id=training.id).delete()
    await Training.filter(id=training.id).delete()
    logger.debug("Deleted training {}", training.id)


async def delete_event(event: Game | Training | None) -> None:
    if isinstance(event, Game):
        await delete_game(event)
    elif isinstance(event, Training):
        await delete_training(event)


async def delete_recording_session(session_id: UUID) -> None:
    await CameraSession.filter(session_id=session_id).delete()
    await RecordingSession.filter(id=session_id).delete()


async def delete_booking(booking: Booking, event: Game | Training | None) -> None:
    """Recording sessions, then the event subtree, then the booking row."""
    session_ids = await RecordingSession.filter(booking_id=booking.id).values_list(
        "id", flat=True
    )
    if session_ids:
        await CameraSession.filter(session_id__in=session_ids).delete()
        await RecordingSession.filter(id__in=session_ids).delete()

    await delete_event(event)
    await Booking.filter(id=booking.id).delete()
    logger.debug(
        "Deleted booking {} ({} recording sessions)", booking.id, len(session_ids)
    )
