"""Seed the bootstrap admin account.

Called at startup for the in-memory stores; run as a script against the
configured database:

    python -m backend.docchat.db.seed_dev
"""

import asyncio
import logging

from backend.docchat.config import Settings, get_settings
from backend.docchat.db.engine import create_async_engine_from_settings, create_session_factory
from backend.docchat.db.repositories import UserRepository
from backend.docchat.db.sql_repositories import SqlUserRepository
from backend.docchat.models.auth import Role
from backend.docchat.security import hash_password

logger = logging.getLogger(__name__)


async def seed_admin(users: UserRepository, settings: Settings) -> bool:
    """Create the admin account if neither its username nor email exists.

    This function is idempotent - safe to run multiple times.

    Returns:
        True if the account was created
    """
    username = settings.bootstrap_admin_username
    email = settings.bootstrap_admin_email

    if await users.exists(username=username, email=email):
        logger.info(f"Admin account already exists: {username}")
        return False

    await users.create_user(
        email=email,
        username=username,
        password_hash=hash_password(settings.bootstrap_admin_password.get_secret_value()),
        role=Role.admin,
    )
    logger.info(f"Created admin account: {username}")
    return True


async def seed_database(settings: Settings) -> None:
    """Seed the admin account into the configured SQL database."""
    engine = create_async_engine_from_settings(settings)
    try:
        async with create_session_factory(engine)() as session:
            await seed_admin(SqlUserRepository(session), settings)
    finally:
        await engine.dispose()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(seed_database(get_settings()))
