"""Ensure the bootstrap admin account exists."""
import logging

from classroom.config import settings
from classroom.models.user import UserRole
from classroom.repositories import UserRepository
from classroom.services.identity import IdentityService, normalize_email

logger = logging.getLogger(__name__)


async def seed_admin():
    if not settings.admin_password:
        logger.warning("ADMIN_PASSWORD not set. Bootstrap admin will not be created.")
        return
    users = UserRepository()
    if await users.get(normalize_email(settings.admin_email)):
        return
    await IdentityService(users).create_user(
        settings.admin_email,
        settings.admin_password,
        settings.admin_name,
        UserRole.ADMIN,
    )
