from enum import StrEnum


class Action(StrEnum):
    # Booking aggregate
    BOOKING_CREATE = "booking:create"
    BOOKING_UPDATE = "booking:update"
    BOOKING_DELETE = "booking:delete"
    GAME_DELETE = "game:delete"
    TRAINING_DELETE = "training:delete"

    # Rosters
    FORMATION_ROSTER_READ = "formation:roster:read"
    FORMATION_ROSTER_EDIT = "formation:roster:edit"
    TRAINING_ROSTER_READ = "training:roster:read"
    TRAINING_ROSTER_EDIT = "training:roster:edit"

    # Recording sessions
    RECORDING_SESSION_CREATE = "recording-session:create"
    RECORDING_SESSION_READ = "recording-session:read"
    RECORDING_SESSION_LIST = "recording-session:list"  # target is a booking
    RECORDING_SESSION_UPDATE = "recording-session:update"
    RECORDING_SESSION_DELETE = "recording-session:delete"

    # Clubs and teams
    CLUB_UPDATE = "club:update"
    CLUB_DELETE = "club:delete"
    CLUB_MANAGE_RESPONSIBLES = "club:responsibles"
    TEAM_CREATE = "team:create"
    TEAM_UPDATE = "team:update"
    TEAM_DELETE = "team:delete"

    # Persons
    PERSON_UPDATE = "person:update"
    PERSON_ADD_PROFILE = "person:profile:add"
    TEAM_JOIN = "team:join"
    TEAM_LEAVE = "team:leave"


ACTION_DESCRIPTIONS: dict[str, str] = {
    Action.BOOKING_CREATE: "create a booking for the given teams",
    Action.BOOKING_UPDATE: "update this booking",
    Action.BOOKING_DELETE: "delete this booking",
    Action.GAME_DELETE: "delete this game",
    Action.TRAINING_DELETE: "delete this training",
    Action.FORMATION_ROSTER_READ: "read this formation",
    Action.FORMATION_ROSTER_EDIT: "edit the players of this formation",
    Action.TRAINING_ROSTER_READ: "read the players of this training",
    Action.TRAINING_ROSTER_EDIT: "edit the players of this training",
    Action.RECORDING_SESSION_CREATE: "create a recording session for this booking",
    Action.RECORDING_SESSION_READ: "read this recording session",
    Action.RECORDING_SESSION_LIST: "read the recording sessions of this booking",
    Action.RECORDING_SESSION_UPDATE: "update this recording session",
    Action.RECORDING_SESSION_DELETE: "delete this recording session",
    Action.CLUB_UPDATE: "update this club",
    Action.CLUB_DELETE: "delete this club",
    Action.CLUB_MANAGE_RESPONSIBLES: "manage the responsibles of this club",
    Action.TEAM_CREATE: "create a team in this club",
    Action.TEAM_UPDATE: "update this team",
    Action.TEAM_DELETE: "delete this team",
    Action.PERSON_UPDATE: "update this person",
    Action.PERSON_ADD_PROFILE: "add a profile to this person",
    Action.TEAM_JOIN: "add this person to the team",
    Action.TEAM_LEAVE: "remove this person from the team",
}
