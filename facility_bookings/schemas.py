from __future__ import annotations

from datetime import datetime, timezone
from enum import StrEnum
from typing import Annotated, Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from facility_bookings.models import RelationState


def _to_utc(v: datetime | None) -> datetime | None:
    if v is None:
        return None
    if v.tzinfo is None:
        raise ValueError("datetime must be timezone-aware (include UTC offset)")
    return v.astimezone(timezone.utc)


def _check_period(start: datetime, end: datetime | None, what: str) -> None:
    if end is not None and end <= start:
        raise ValueError(f"{what} end_datetime must be after start_datetime")


# ---------------------------------------------------------------------------
# Booking + event payloads
# ---------------------------------------------------------------------------


class BookingFields(BaseModel):
    start_datetime: datetime
    end_datetime: datetime
    sport: str = Field(min_length=1, max_length=50)
    notes: str | None = Field(default=None, max_length=1000)

    @field_validator("start_datetime", "end_datetime", mode="after")
    @classmethod
    def require_timezone(cls, v: datetime) -> datetime:
        return _to_utc(v)  # type: ignore[return-value]

    @model_validator(mode="after")
    def validate_time_range(self) -> BookingFields:
        _check_period(self.start_datetime, self.end_datetime, "Booking")
        return self


class GameData(BaseModel):
    kind: Literal["game"] = "game"
    start_datetime: datetime
    end_datetime: datetime | None = None
    home_team_id: UUID
    visiting_team_id: UUID | None = None

    @field_validator("start_datetime", "end_datetime", mode="after")
    @classmethod
    def require_timezone(cls, v: datetime | None) -> datetime | None:
        return _to_utc(v)

    @model_validator(mode="after")
    def validate_game(self) -> GameData:
        _check_period(self.start_datetime, self.end_datetime, "Game")
        if self.visiting_team_id is not None and self.visiting_team_id == self.home_team_id:
            raise ValueError("visiting_team_id must differ from home_team_id")
        return self

    def team_ids(self) -> list[UUID]:
        ids = [self.home_team_id]
        if self.visiting_team_id is not None:
            ids.append(self.visiting_team_id)
        return ids


class TrainingData(BaseModel):
    kind: Literal["training"] = "training"
    start_datetime: datetime
    end_datetime: datetime | None = None
    team_id: UUID

    @field_validator("start_datetime", "end_datetime", mode="after")
    @classmethod
    def require_timezone(cls, v: datetime | None) -> datetime | None:
        return _to_utc(v)

    @model_validator(mode="after")
    def validate_training(self) -> TrainingData:
        _check_period(self.start_datetime, self.end_datetime, "Training")
        return self

    def team_ids(self) -> list[UUID]:
        return [self.team_id]


EventData = Annotated[GameData | TrainingData, Field(discriminator="kind")]


class BookingData(BaseModel):
    """Body of create and update: the booking fields plus an optional event."""

    booking: BookingFields
    event: EventData | None = None


class BookingFilters(BaseModel):
    """Bind to a FastAPI route via Depends(BookingFilters)."""

    author_id: UUID | None = None
    from_date: datetime | None = None
    to_date: datetime | None = None
    sport: str | None = None

    # Pagination
    limit: int = Field(default=100, ge=1, le=500)
    offset: int = Field(default=0, ge=0)


# ---------------------------------------------------------------------------
# Booking + event responses
# ---------------------------------------------------------------------------


class BookingResponse(BaseModel):
    id: UUID
    author_id: UUID
    start_datetime: datetime
    end_datetime: datetime
    sport: str
    notes: str | None

    model_config = ConfigDict(from_attributes=True)


class GameResponse(BaseModel):
    kind: Literal["game"] = "game"
    id: UUID
    booking_id: UUID
    home_formation_id: UUID
    visiting_formation_id: UUID | None
    start_datetime: datetime
    end_datetime: datetime | None

    model_config = ConfigDict(from_attributes=True)


class TrainingResponse(BaseModel):
    kind: Literal["training"] = "training"
    id: UUID
    booking_id: UUID
    team_id: UUID
    start_datetime: datetime
    end_datetime: datetime | None

    model_config = ConfigDict(from_attributes=True)


BookingEvent = Annotated[GameResponse | TrainingResponse, Field(discriminator="kind")]


class BookingWithEvent(BaseModel):
    booking: BookingResponse
    event: BookingEvent | None = None


# ---------------------------------------------------------------------------
# Rosters
# ---------------------------------------------------------------------------


class FormationPlayerTagsData(BaseModel):
    player_id: UUID
    rfid_tag_ids: list[int] = Field(default_factory=list)
    starting: bool = False
    entry_minute: int | None = Field(default=None, ge=0)
    exit_minute: int | None = Field(default=None, ge=0)

    @model_validator(mode="after")
    def validate_minutes(self) -> FormationPlayerTagsData:
        if (
            self.entry_minute is not None
            and self.exit_minute is not None
            and self.entry_minute >= self.exit_minute
        ):
            raise ValueError("entry_minute must be before exit_minute")
        return self


class TrainingPlayerTagsData(BaseModel):
    player_id: UUID
    rfid_tag_ids: list[int] = Field(default_factory=list)


class PlayerIds(BaseModel):
    player_ids: list[UUID] = Field(min_length=1)


class FormationPlayerWithTags(BaseModel):
    id: UUID
    formation_id: UUID
    player_id: UUID
    starting: bool
    entry_minute: int | None
    exit_minute: int | None
    rfid_tag_ids: list[int]


class TrainingPlayerWithTags(BaseModel):
    id: UUID
    training_id: UUID
    player_id: UUID
    rfid_tag_ids: list[int]


# ---------------------------------------------------------------------------
# Recording sessions and cameras
# ---------------------------------------------------------------------------


class RecordingSessionData(BaseModel):
    booking_id: UUID
    start_datetime: datetime
    end_datetime: datetime
    camera_ids: list[UUID] = Field(default_factory=list)

    @field_validator("start_datetime", "end_datetime", mode="after")
    @classmethod
    def require_timezone(cls, v: datetime) -> datetime:
        return _to_utc(v)  # type: ignore[return-value]

    @model_validator(mode="after")
    def validate_time_range(self) -> RecordingSessionData:
        _check_period(self.start_datetime, self.end_datetime, "Recording session")
        return self


class CameraResponse(BaseModel):
    """Camera as exposed to clients: credentials are never returned."""

    id: UUID
    ipv4_address: str
    ipv6_address: str | None
    port: int
    username: str

    model_config = ConfigDict(from_attributes=True)


class RecordingSessionResponse(BaseModel):
    id: UUID
    author_id: UUID
    booking_id: UUID
    start_datetime: datetime
    end_datetime: datetime

    model_config = ConfigDict(from_attributes=True)


class RecordingSessionWithCameras(BaseModel):
    recording_session: RecordingSessionResponse
    cameras: list[CameraResponse]


# ---------------------------------------------------------------------------
# Clubs, teams, persons
# ---------------------------------------------------------------------------


class ClubUpdate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    address: str | None = None
    city: str | None = None
    phone: str | None = Field(
        default=None, pattern=r"^(\+\d{1,2}\s?)?\(?\d{3}\)?[\s.-]?\d{3}[\s.-]?\d{4}$"
    )


class ClubCreate(ClubUpdate):
    vat_number: str = Field(min_length=1, max_length=32)


class ClubResponse(BaseModel):
    vat_number: str
    name: str
    address: str | None
    city: str | None
    phone: str | None

    model_config = ConfigDict(from_attributes=True)


class TeamUpdate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    sport: str = Field(min_length=1, max_length=50)


class TeamCreate(TeamUpdate):
    club_id: str


class TeamResponse(BaseModel):
    id: UUID
    name: str
    club_id: str
    sport: str

    model_config = ConfigDict(from_attributes=True)


class TeamRole(StrEnum):
    PLAYER = "player"
    COACH = "coach"


class PersonUpdate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    surname: str = Field(min_length=1, max_length=100)


class PersonResponse(BaseModel):
    id: UUID
    name: str
    surname: str

    model_config = ConfigDict(from_attributes=True)


class NewCoachProfile(BaseModel):
    role: str = Field(min_length=1, max_length=100)


class NewProfile(BaseModel):
    administrator: bool = False
    coach: NewCoachProfile | None = None
    fan: bool = False
    player: bool = False


class PersonWithProfiles(PersonResponse):
    has_user: bool
    administrator: bool
    coach_role: str | None
    fan: bool
    player: bool


class JoinInfo(BaseModel):
    role: TeamRole
    since_date: datetime
    until_date: datetime | None = None

    @field_validator("since_date", "until_date", mode="after")
    @classmethod
    def require_timezone(cls, v: datetime | None) -> datetime | None:
        return _to_utc(v)

    @model_validator(mode="after")
    def validate_period(self) -> JoinInfo:
        if self.until_date is not None and self.since_date >= self.until_date:
            raise ValueError("since_date must be before until_date")
        return self


class LeaveInfo(BaseModel):
    role: TeamRole
    until_date: datetime | None = None

    @field_validator("until_date", mode="after")
    @classmethod
    def require_timezone(cls, v: datetime | None) -> datetime | None:
        return _to_utc(v)


class TeamMembership(BaseModel):
    person_id: UUID
    team_id: UUID
    role: TeamRole
    since_date: datetime
    until_date: datetime | None
    state: RelationState


class TeamStaff(BaseModel):
    """Active players and coaches of one team."""

    team_id: UUID
    players: list[PersonResponse]
    coaches: list[PersonResponse]
