"""MongoDB connection and Beanie document registration."""
from beanie import init_beanie
from motor.motor_asyncio import AsyncIOMotorClient

from classroom.config import settings
from classroom.models import (
    User,
    ClassRecord,
    AttendanceRecord,
    Assignment,
    Submission,
)


_client = None


async def db_startup():
    """Connect to MongoDB and initialize Beanie ODM."""
    global _client
    _client = AsyncIOMotorClient(
        settings.mongodb_url,
        serverSelectionTimeoutMS=settings.mongodb_timeout_ms,
    )
    await init_beanie(
        database=_client[settings.mongodb_db_name],
        document_models=[
            User,
            ClassRecord,
            AttendanceRecord,
            Assignment,
            Submission,
        ],
    )


async def db_shutdown():
    """Close MongoDB connection."""
    global _client
    if _client:
        _client.close()
        _client = None
