import sys

from fastapi import FastAPI
from loguru import logger
from tortoise.contrib.fastapi import register_tortoise

from facility_bookings import settings
from facility_bookings.routers import ROUTERS


def configure_logging(level: str = settings.LOG_LEVEL) -> None:
    logger.remove()
    logger.add(sys.stderr, level=level)


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title="facility-bookings")
    for router in ROUTERS:
        app.include_router(router)

    register_tortoise(
        app,
        db_url=settings.db_url,
        modules=settings.TORTOISE_MODULES,
        generate_schemas=settings.GENERATE_SCHEMAS,
    )
    logger.info("Facility bookings app created ({} routers)", len(ROUTERS))
    return app


app = create_app()
