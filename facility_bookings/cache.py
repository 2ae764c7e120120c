import json

from loguru import logger
from redis.asyncio import Redis

from facility_bookings.settings import REDIS_URL

_redis: Redis | None = None
CAMERAS_TTL = 60  # 1 minute
CAMERAS_KEY = "cameras"


def get_redis() -> Redis:
    global _redis
    if _redis is None:
        _redis = Redis.from_url(REDIS_URL, decode_responses=True)
    return _redis


async def get_cameras_cache() -> list | None:
    try:
        data = await get_redis().get(CAMERAS_KEY)
        return json.loads(data) if data else None
    except Exception:
        logger.warning("Redis get failed, skipping cameras cache", exc_info=True)
        return None


async def set_cameras_cache(cameras: list) -> None:
    try:
        await get_redis().setex(CAMERAS_KEY, CAMERAS_TTL, json.dumps(cameras))
    except Exception:
        logger.warning("Redis set failed, skipping cameras cache", exc_info=True)

