from datetime import datetime, timezone
from enum import StrEnum

from tortoise import fields
from tortoise.models import Model
from tortoise.queryset import QuerySet


class EventKind(StrEnum):
    GAME = "game"
    TRAINING = "training"


class RelationState(StrEnum):
    ACTIVE = "active"  # until_date not set yet
    ENDED = "ended"  # closed by a leave / removal


class AbstractModel(Model):
    id = fields.UUIDField(primary_key=True)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:  # type: ignore
        abstract = True


class TemporalRelation(AbstractModel):
    """
    Base for role edges (player/coach of a team, responsible of a club).
    Edges are never deleted when the relation ends: `until_date` is stamped instead.
    """

    since_date = fields.DatetimeField()
    until_date = fields.DatetimeField(null=True)

    class Meta:  # type: ignore
        abstract = True

    @property
    def state(self) -> RelationState:
        return RelationState.ACTIVE if self.until_date is None else RelationState.ENDED

    @classmethod
    def active(cls) -> QuerySet:
        return cls.filter(until_date__isnull=True)

    async def close(self, at: datetime | None = None) -> None:
        self.until_date = at or datetime.now(timezone.utc)
        await self.save(update_fields=["until_date"])


# ---------------------------------------------------------------------------
# People and profiles
# ---------------------------------------------------------------------------


class Person(AbstractModel):
    name = fields.CharField(max_length=100)
    surname = fields.CharField(max_length=100)

    class Meta:  # type: ignore
        table = "person"


class User(AbstractModel):
    """Login-capable identity of a person. Credentials live in the auth service."""

    person = fields.OneToOneField("models.Person", related_name="user")
    email = fields.CharField(max_length=255, unique=True)
    verified = fields.BooleanField(default=False)

    class Meta:  # type: ignore
        table = "user"


class Administrator(AbstractModel):
    person = fields.OneToOneField("models.Person", related_name="administrator")

    class Meta:  # type: ignore
        table = "administrator"


class Coach(AbstractModel):
    person = fields.OneToOneField("models.Person", related_name="coach")
    role = fields.CharField(max_length=100)

    class Meta:  # type: ignore
        table = "coach"


class Fan(AbstractModel):
    person = fields.OneToOneField("models.Person", related_name="fan")

    class Meta:  # type: ignore
        table = "fan"


class Player(AbstractModel):
    person = fields.OneToOneField("models.Person", related_name="player")

    class Meta:  # type: ignore
        table = "player"


# ---------------------------------------------------------------------------
# Clubs, teams and role edges
# ---------------------------------------------------------------------------


class SportsClub(Model):
    vat_number = fields.CharField(max_length=32, primary_key=True)
    name = fields.CharField(max_length=255)
    address = fields.CharField(max_length=255, null=True)
    city = fields.CharField(max_length=100, null=True)
    phone = fields.CharField(max_length=32, null=True)

    class Meta:  # type: ignore
        table = "sports_club"


class Team(AbstractModel):
    name = fields.CharField(max_length=255)
    club = fields.ForeignKeyField("models.SportsClub", related_name="teams")
    sport = fields.CharField(max_length=50)

    class Meta:  # type: ignore
        table = "team"


class PlayerTeam(TemporalRelation):
    player = fields.ForeignKeyField("models.Person", related_name="player_teams")
    team = fields.ForeignKeyField("models.Team", related_name="player_edges")

    class Meta:  # type: ignore
        table = "player_team"


class CoachTeam(TemporalRelation):
    coach = fields.ForeignKeyField("models.Person", related_name="coach_teams")
    team = fields.ForeignKeyField("models.Team", related_name="coach_edges")

    class Meta:  # type: ignore
        table = "coach_team"


class UserClub(TemporalRelation):
    user = fields.ForeignKeyField("models.Person", related_name="club_responsibilities")
    club = fields.ForeignKeyField("models.SportsClub", related_name="responsibles")

    class Meta:  # type: ignore
        table = "user_club"


# ---------------------------------------------------------------------------
# Booking aggregate
# ---------------------------------------------------------------------------


class Booking(AbstractModel):
    author = fields.ForeignKeyField("models.Person", related_name="bookings")

    start_datetime = fields.DatetimeField()
    end_datetime = fields.DatetimeField()
    sport = fields.CharField(max_length=50)

    notes = fields.TextField(null=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:  # type: ignore
        table = "booking"
        ordering = ["start_datetime", "id"]


class Formation(AbstractModel):
    team = fields.ForeignKeyField("models.Team", related_name="formations")

    class Meta:  # type: ignore
        table = "formation"


class Game(AbstractModel):
    booking = fields.OneToOneField("models.Booking", related_name="game")
    home_formation = fields.ForeignKeyField(
        "models.Formation", related_name="home_games"
    )
    visiting_formation = fields.ForeignKeyField(
        "models.Formation", related_name="visiting_games", null=True
    )
    start_datetime = fields.DatetimeField()
    end_datetime = fields.DatetimeField(null=True)

    class Meta:  # type: ignore
        table = "game"


class Training(AbstractModel):
    booking = fields.OneToOneField("models.Booking", related_name="training")
    team = fields.ForeignKeyField("models.Team", related_name="trainings")
    start_datetime = fields.DatetimeField()
    end_datetime = fields.DatetimeField(null=True)

    class Meta:  # type: ignore
        table = "training"


class RfidTag(Model):
    id = fields.IntField(primary_key=True, generated=False)  # hardware id printed on the sensor

    class Meta:  # type: ignore
        table = "rfid_tag"


class FormationPlayer(AbstractModel):
    # Surrogate key: a player can enter the same formation more than once (substitutions)
    formation = fields.ForeignKeyField("models.Formation", related_name="players")
    player = fields.ForeignKeyField("models.Person", related_name="formation_entries")
    starting = fields.BooleanField(default=False)
    entry_minute = fields.IntField(null=True)
    exit_minute = fields.IntField(null=True)

    class Meta:  # type: ignore
        table = "formation_player"


class FormationPlayerTag(AbstractModel):
    formation = fields.ForeignKeyField("models.Formation", related_name="player_tags")
    player = fields.ForeignKeyField("models.Person", related_name="formation_tags")
    rfid_tag = fields.ForeignKeyField("models.RfidTag", related_name="formation_uses")

    class Meta:  # type: ignore
        table = "formation_player_tag"
        unique_together = (("formation", "player", "rfid_tag"),)


class TrainingPlayer(AbstractModel):
    training = fields.ForeignKeyField("models.Training", related_name="players")
    player = fields.ForeignKeyField("models.Person", related_name="training_entries")

    class Meta:  # type: ignore
        table = "training_player"


class TrainingPlayerTag(AbstractModel):
    training = fields.ForeignKeyField("models.Training", related_name="player_tags")
    player = fields.ForeignKeyField("models.Person", related_name="training_tags")
    rfid_tag = fields.ForeignKeyField("models.RfidTag", related_name="training_uses")

    class Meta:  # type: ignore
        table = "training_player_tag"
        unique_together = (("training", "player", "rfid_tag"),)


# ---------------------------------------------------------------------------
# Recording
# ---------------------------------------------------------------------------


class Camera(AbstractModel):
    ipv4_address = fields.CharField(max_length=15)
    ipv6_address = fields.CharField(max_length=45, null=True)
    port = fields.IntField()
    username = fields.CharField(max_length=100)
    password = fields.CharField(max_length=255)

    class Meta:  # type: ignore
        table = "camera"


class RecordingSession(AbstractModel):
    author = fields.ForeignKeyField("models.Person", related_name="recording_sessions")
    booking = fields.ForeignKeyField(
        "models.Booking", related_name="recording_sessions"
    )
    start_datetime = fields.DatetimeField()
    end_datetime = fields.DatetimeField()

    class Meta:  # type: ignore
        table = "recording_session"


class CameraSession(AbstractModel):
    session = fields.ForeignKeyField("models.RecordingSession", related_name="cameras")
    camera = fields.ForeignKeyField("models.Camera", related_name="sessions")

    class Meta:  # type: ignore
        table = "camera_session"
        unique_together = (("session", "camera"),)
