from facility_bookings.crud.booking import BookingCRUD
from facility_bookings.crud.camera import CameraCRUD
from facility_bookings.crud.club import ClubCRUD
from facility_bookings.crud.person import PersonCRUD
from facility_bookings.crud.recording_session import RecordingSessionCRUD
from facility_bookings.crud.roster import RosterCRUD
from facility_bookings.crud.team import TeamCRUD

booking_crud = BookingCRUD()
camera_crud = CameraCRUD()
club_crud = ClubCRUD()
person_crud = PersonCRUD()
recording_session_crud = RecordingSessionCRUD()
roster_crud = RosterCRUD()
team_crud = TeamCRUD()
