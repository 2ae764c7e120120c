from facility_bookings.routers import (
    booking,
    camera,
    club,
    game,
    person,
    recording_session,
    team,
    training,
)

ROUTERS = (
    booking.router,
    game.router,
    training.router,
    recording_session.router,
    camera.router,
    club.router,
    team.router,
    person.router,
)
