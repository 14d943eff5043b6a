"""
Database Initialization and Admin Seed

Creates all tables and, when SEED_ADMIN_PASSWORD is set, an admin account
for SEED_ADMIN_EMAIL. Running it again is harmless: an existing account is
left untouched.

Usage:
    unirecords-seed              # Create tables and seed the admin
    unirecords-seed --check      # Only check connectivity
"""

import argparse
import asyncio
import sys

from sqlalchemy import select, text

from unirecords.core.config import settings
from unirecords.core.database import close_db, init_db, session_scope
from unirecords.core.logging_config import logger
from unirecords.core.security import get_password_hash
from unirecords.models.user import User, UserRole


async def check_connection() -> bool:
    """SELECT 1 against the configured database"""
    try:
        async with session_scope() as session:
            await session.execute(text("SELECT 1"))
        logger.info("[Seed] Database connection successful")
        return True
    except Exception as e:
        logger.error(f"[Seed] Database connection failed: {e}")
        return False


async def seed_admin() -> bool:
    """Create the admin account if it does not exist yet"""
    if not settings.SEED_ADMIN_PASSWORD:
        logger.warning("[Seed] SEED_ADMIN_PASSWORD not set - skipping admin account")
        return False

    async with session_scope() as session:
        result = await session.execute(select(User).where(User.email == settings.SEED_ADMIN_EMAIL))
        if result.scalar_one_or_none():
            logger.info(f"[Seed] Admin {settings.SEED_ADMIN_EMAIL} already exists")
            return False

        session.add(User(
            email=settings.SEED_ADMIN_EMAIL,
            first_name="System",
            last_name="Administrator",
            hashed_password=get_password_hash(settings.SEED_ADMIN_PASSWORD),
            role=UserRole.ADMIN,
            is_active=True,
        ))

    logger.info(f"[Seed] Created admin {settings.SEED_ADMIN_EMAIL}")
    return True


async def run(check_only: bool = False) -> int:
    try:
        if not await check_connection():
            return 1
        if check_only:
            return 0

        await init_db()
        logger.info("[Seed] Tables created")
        await seed_admin()
        return 0
    finally:
        await close_db()


def main():
    parser = argparse.ArgumentParser(description="Initialize the UniRecords database")
    parser.add_argument("--check", action="store_true", help="Only check database connectivity")
    args = parser.parse_args()

    sys.exit(asyncio.run(run(check_only=args.check)))


if __name__ == "__main__":
    main()
