"""
Unit Tests for the database seed script
"""
import pytest
from sqlalchemy import select

from unirecords.core.config import settings
from unirecords.core.database import close_db
from unirecords.core.security import verify_password
from unirecords.models.user import User, UserRole
from unirecords.scripts.seed import check_connection, seed_admin


@pytest.fixture
async def seed_settings(engine, monkeypatch):
    """Seed runs on the app's own engine; the test tables already exist"""
    monkeypatch.setattr(settings, 'SEED_ADMIN_EMAIL', 'registrar@example.com')
    monkeypatch.setattr(settings, 'SEED_ADMIN_PASSWORD', 'seed-password-123')
    yield settings
    await close_db()


class TestSeed:

    async def test_connection_check(self, seed_settings):
        assert await check_connection() is True

    async def test_admin_created_once(self, seed_settings, db_session):
        assert await seed_admin() is True
        assert await seed_admin() is False

        admins = (await db_session.execute(
            select(User).where(User.email == 'registrar@example.com')
        )).scalars().all()
        assert len(admins) == 1
        assert admins[0].role == UserRole.ADMIN
        assert verify_password('seed-password-123', admins[0].hashed_password)

    async def test_skipped_without_password(self, seed_settings, monkeypatch):
        monkeypatch.setattr(settings, 'SEED_ADMIN_PASSWORD', '')

        assert await seed_admin() is False
