from __future__ import annotations

from enum import StrEnum
from uuid import UUID

from loguru import logger

from facility_bookings.crud import cascade
from facility_bookings.crud.base import atomic
from facility_bookings.crud.lookup import (
    ensure_persons_exist,
    ensure_teams_exist,
    find_booking_row,
    find_event,
    find_game,
    find_training,
)
from facility_bookings.errors import InvalidTransition
from facility_bookings.models import Booking, EventKind, Formation, Game, Training
from facility_bookings.schemas import (
    BookingData,
    BookingFilters,
    BookingResponse,
    BookingWithEvent,
    EventData,
    GameData,
    GameResponse,
    TrainingResponse,
)


class EventTransition(StrEnum):
    KEEP_NONE = "keep_none"
    CREATE = "create"
    UPDATE_IN_PLACE = "update_in_place"
    REJECT_SWITCH = "reject_switch"
    REJECT_REMOVAL = "reject_removal"


# (existing event kind, requested event kind) -> what an update does with the event
_EVENT_TRANSITIONS: dict[tuple[EventKind | None, EventKind | None], EventTransition] = {
    (None, None): EventTransition.KEEP_NONE,
    (None, EventKind.GAME): EventTransition.CREATE,
    (None, EventKind.TRAINING): EventTransition.CREATE,
    (EventKind.GAME, EventKind.GAME): EventTransition.UPDATE_IN_PLACE,
    (EventKind.TRAINING, EventKind.TRAINING): EventTransition.UPDATE_IN_PLACE,
    (EventKind.GAME, EventKind.TRAINING): EventTransition.REJECT_SWITCH,
    (EventKind.TRAINING, EventKind.GAME): EventTransition.REJECT_SWITCH,
    (EventKind.GAME, None): EventTransition.REJECT_REMOVAL,
    (EventKind.TRAINING, None): EventTransition.REJECT_REMOVAL,
}


def event_kind(event: Game | Training | None) -> EventKind | None:
    if isinstance(event, Game):
        return EventKind.GAME
    if isinstance(event, Training):
        return EventKind.TRAINING
    return None


def resolve_event_transition(
    existing: EventKind | None,
    requested: EventKind | None,
    booking_id: UUID | None = None,
) -> EventTransition:
    """Raise InvalidTransition for the changes an update may not make in place."""
    transition = _EVENT_TRANSITIONS[(existing, requested)]
    if transition is EventTransition.REJECT_SWITCH:
        raise InvalidTransition(
            f"Cannot change the event of booking {booking_id} from {existing} to "
            f"{requested}: delete the {existing} first",
            resource_id=booking_id,
        )
    if transition is EventTransition.REJECT_REMOVAL:
        raise InvalidTransition(
            f"Cannot remove the {existing} of booking {booking_id} with an update: "
            f"delete the {existing} instead",
            resource_id=booking_id,
        )
    return transition


def event_response(event: Game | Training | None) -> GameResponse | TrainingResponse | None:
    if isinstance(event, Game):
        return GameResponse.model_validate(event, from_attributes=True)
    if isinstance(event, Training):
        return TrainingResponse.model_validate(event, from_attributes=True)
    return None


def with_event(booking: Booking, event: Game | Training | None) -> BookingWithEvent:
    return BookingWithEvent(
        booking=BookingResponse.model_validate(booking, from_attributes=True),
        event=event_response(event),
    )


class BookingCRUD:
    async def _create_event(self, booking_id: UUID, data: EventData) -> Game | Training:
        if isinstance(data, GameData):
            home = await Formation.create(team_id=data.home_team_id)
            visiting = None
            if data.visiting_team_id is not None:
                visiting = await Formation.create(team_id=data.visiting_team_id)
            return await Game.create(
                booking_id=booking_id,
                home_formation_id=home.id,
                visiting_formation_id=visiting.id if visiting else None,
                start_datetime=data.start_datetime,
                end_datetime=data.end_datetime,
            )

        return await Training.create(
            booking_id=booking_id,
            team_id=data.team_id,
            start_datetime=data.start_datetime,
            end_datetime=data.end_datetime,
        )

    async def create_booking(self, author_id: UUID, data: BookingData) -> BookingWithEvent:
        """
        Persist a booking and, when given, its event in a single transaction:
        booking row, then formations, then the game (or the training).
        """
        await ensure_persons_exist([author_id])
        if data.event is not None:
            await ensure_teams_exist(data.event.team_ids())

        async with atomic("create a booking"):
            booking = await Booking.create(author_id=author_id, **data.booking.model_dump())
            event = None
            if data.event is not None:
                event = await self._create_event(booking.id, data.event)

        logger.info(
            "Booking {} created by {} with event {}", booking.id, author_id, event_kind(event)
        )
        return with_event(booking, event)

    async def find_booking(self, booking_id: UUID) -> BookingWithEvent:
        booking = await find_booking_row(booking_id)
        return with_event(booking, await find_event(booking_id))

    async def list_bookings(self, filters: BookingFilters) -> list[BookingWithEvent]:
        qs = Booking.all()

        if filters.author_id is not None:
            qs = qs.filter(author_id=filters.author_id)
        if filters.from_date is not None:
            qs = qs.filter(start_datetime__gte=filters.from_date)
        if filters.to_date is not None:
            qs = qs.filter(end_datetime__lte=filters.to_date)
        if filters.sport is not None:
            qs = qs.filter(sport=filters.sport)

        bookings = await qs.offset(filters.offset).limit(filters.limit)
        if not bookings:
            return []

        ids = [b.id for b in bookings]
        events: dict[UUID, Game | Training] = {}
        for game in await Game.filter(booking_id__in=ids):
            events[game.booking_id] = game
        for training in await Training.filter(booking_id__in=ids):
            events[training.booking_id] = training

        return [with_event(b, events.get(b.id)) for b in bookings]

    async def update_booking(self, booking_id: UUID, data: BookingData) -> BookingWithEvent:
        """
        Update the booking fields and apply the event transition.

        An existing event only gets its start/end updated; its teams never change.
        """
        requested = EventKind(data.event.kind) if data.event is not None else None

        async with atomic("update the booking", booking_id):
            booking = await find_booking_row(booking_id, lock=True)
            event = await find_event(booking_id)
            transition = resolve_event_transition(event_kind(event), requested, booking_id)

            if transition is EventTransition.CREATE:
                await ensure_teams_exist(data.event.team_ids())  # type: ignore[union-attr]

            booking.update_from_dict(data.booking.model_dump())
            await booking.save()

            if transition is EventTransition.CREATE:
                event = await self._create_event(booking.id, data.event)  # type: ignore[arg-type]
            elif transition is EventTransition.UPDATE_IN_PLACE:
                event.start_datetime = data.event.start_datetime  # type: ignore[union-attr]
                event.end_datetime = data.event.end_datetime  # type: ignore[union-attr]
                await event.save(update_fields=["start_datetime", "end_datetime"])  # type: ignore[union-attr]

        logger.debug("Booking {} updated ({})", booking_id, transition)
        return with_event(booking, event)

    async def delete_booking(self, booking_id: UUID) -> BookingWithEvent:
        """Delete the booking with its event and recording sessions. Returns the pre-delete snapshot."""
        async with atomic("delete the booking", booking_id):
            booking = await find_booking_row(booking_id, lock=True)
            event = await find_event(booking_id)
            snapshot = with_event(booking, event)
            await cascade.delete_booking(booking, event)

        logger.info("Booking {} deleted", booking_id)
        return snapshot

    async def delete_game(self, game_id: UUID) -> GameResponse:
        async with atomic("delete the game", game_id):
            game = await find_game(game_id)
            snapshot = GameResponse.model_validate(game, from_attributes=True)
            await cascade.delete_game(game)
        return snapshot

    async def delete_training(self, training_id: UUID) -> TrainingResponse:
        async with atomic("delete the training", training_id):
            training = await find_training(training_id)
            snapshot = TrainingResponse.model_validate(training, from_attributes=True)
            await cascade.delete_training(training)
        return snapshot
