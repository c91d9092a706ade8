import logging

from fastapi import Request
from motor.motor_asyncio import AsyncIOMotorClient

import config

logger = logging.getLogger(__name__)


def create_client() -> AsyncIOMotorClient:
    logger.info("Connecting to MongoDB database '%s'", config.MONGODB_DB)
    return AsyncIOMotorClient(config.MONGODB_URL)


async def ensure_indexes(db):
    """Create the indexes the API relies on. Safe to call on every startup."""
    await db["users"].create_index("email", unique=True)
    await db["bookings"].create_index("user_id")
    await db["bookings"].create_index("package_id")
    await db["packages"].create_index([("created_at", -1)])


async def get_database(request: Request):
    return request.app.mongodb
