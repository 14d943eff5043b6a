"""
UniRecords - Test Configuration and Fixtures
"""
import os
from typing import AsyncGenerator, Callable, Dict
import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy import select
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import NullPool
from faker import Faker

# Set testing environment
os.environ['ENVIRONMENT'] = 'testing'
os.environ['DATABASE_URL'] = 'sqlite+aiosqlite:///./test_unirecords.db'
os.environ['JWT_SECRET_KEY'] = 'test-jwt-secret-key-for-testing'
os.environ['BCRYPT_ROUNDS'] = '4'
os.environ['RATE_LIMIT_ENABLED'] = 'false'
os.environ['REDIS_URL'] = ''
os.environ['LOG_FILE'] = ''

from unirecords.main import app
from unirecords.api.v1.deps import get_cache, get_file_store, get_notifier
from unirecords.core.database import Base, get_db
from unirecords.core.security import get_password_hash
from unirecords.models.faculty import Faculty
from unirecords.models.student import Student
from unirecords.models.user import User, UserRole
from unirecords.services.auth_service import token_for

fake = Faker()

TEST_DATABASE_URL = os.environ['DATABASE_URL']
TEST_PASSWORD = 'testpassword123'


# ============================================
# Collaborator fakes
# ============================================

class FakeFileStore:
    """In-memory stand-in for the S3 file store"""

    bucket_name = 'test-bucket'

    def __init__(self):
        self.uploaded = []
        self.deleted = []
        self.reachable = True

    async def upload_file(self, upload, folder: str) -> str:
        key = f"{folder}/{upload.filename}"
        self.uploaded.append(key)
        return key

    async def upload_files(self, uploads, folder: str):
        return [await self.upload_file(upload, folder) for upload in uploads]

    async def delete_file(self, key: str) -> bool:
        self.deleted.append(key)
        return True

    def get_presigned_url(self, key: str, expiration=None) -> str:
        return f"https://files.test/{key}"

    def get_presigned_urls(self, keys):
        return [self.get_presigned_url(key) for key in keys or []]

    async def ping(self) -> bool:
        if not self.reachable:
            raise ConnectionError("bucket unreachable")
        return True


class FakeNotifier:
    """Records notifications instead of sending email"""

    provider = 'fake'

    def __init__(self):
        self.sent = []
        self.deliver = True
        self.is_configured = True

    async def notify(self, event, to_email: str, context=None) -> bool:
        self.sent.append((event, to_email, context or {}))
        return self.deliver

    def events(self):
        return [event for event, _, _ in self.sent]


class FakeCache:
    """Dict-backed cache with the RedisClient interface"""

    enabled = True

    def __init__(self):
        self.store: Dict[str, dict] = {}

    async def ping(self) -> bool:
        return True

    async def cache_get(self, key: str):
        return self.store.get(key)

    async def cache_set(self, key: str, value: dict, expire=None) -> bool:
        self.store[key] = value
        return True

    async def cache_delete(self, key: str) -> bool:
        return self.store.pop(key, None) is not None


# ============================================
# Database
# ============================================

@pytest.fixture
async def engine():
    """Fresh schema for each test"""
    test_engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield test_engine

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def files() -> FakeFileStore:
    return FakeFileStore()


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture
def cache() -> FakeCache:
    return FakeCache()


# ============================================
# HTTP client
# ============================================

@pytest.fixture
async def client(session_factory, files, notifier, cache) -> AsyncGenerator[AsyncClient, None]:
    """Test client wired to the test database and collaborator fakes"""
    async def override_get_db():
        async with session_factory() as session:
            yield session
            if session.new or session.dirty or session.deleted:
                await session.commit()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_file_store] = lambda: files
    app.dependency_overrides[get_notifier] = lambda: notifier
    app.dependency_overrides[get_cache] = lambda: cache
    app.state.audit_session_factory = session_factory

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()
    app.state.audit_session_factory = None


# ============================================
# Users and profiles
# ============================================

@pytest.fixture
def make_user(db_session: AsyncSession) -> Callable:
    """Factory: await make_user(UserRole.FACULTY, email=...)"""
    async def _make_user(role: UserRole = UserRole.STUDENT, **overrides) -> User:
        user = User(
            email=overrides.pop('email', fake.unique.email()).lower(),
            hashed_password=get_password_hash(overrides.pop('password', TEST_PASSWORD)),
            first_name=overrides.pop('first_name', fake.first_name()),
            last_name=overrides.pop('last_name', fake.last_name()),
            role=role,
            is_active=overrides.pop('is_active', True),
            **overrides,
        )
        db_session.add(user)
        await db_session.commit()
        return user

    return _make_user


@pytest.fixture
async def admin_user(make_user) -> User:
    return await make_user(UserRole.ADMIN)


@pytest.fixture
async def faculty_user(make_user) -> User:
    return await make_user(UserRole.FACULTY)


@pytest.fixture
async def student_user(make_user) -> User:
    return await make_user(UserRole.STUDENT)


@pytest.fixture
async def staff_user(make_user) -> User:
    return await make_user(UserRole.STAFF)


@pytest.fixture
async def committee_user(make_user) -> User:
    return await make_user(UserRole.GRIEVANCE_COMMITTEE)


@pytest.fixture
async def student(db_session: AsyncSession, student_user: User) -> Student:
    profile = Student(
        registration_number=f"2024CSE{fake.unique.random_int(1000, 9999)}",
        batch="2024",
        program="B.Tech",
        department="Computer Science",
        semester=1,
        academic_status="active",
        user_id=student_user.id,
    )
    profile.user = student_user
    db_session.add(profile)
    await db_session.commit()
    return profile


@pytest.fixture
async def faculty(db_session: AsyncSession, faculty_user: User) -> Faculty:
    profile = Faculty(
        employee_id=f"EMP{fake.unique.random_int(1000, 9999)}",
        department="Computer Science",
        designation="Associate Professor",
        experience=8,
        user_id=faculty_user.id,
    )
    profile.user = faculty_user
    db_session.add(profile)
    await db_session.commit()
    return profile


def auth_headers(user: User) -> dict:
    """Bearer headers for `user`"""
    return {'Authorization': f'Bearer {token_for(user)}'}


@pytest.fixture
def headers_for() -> Callable[[User], dict]:
    return auth_headers


@pytest.fixture
def stored_status(db_session: AsyncSession) -> Callable:
    """Status column as persisted, bypassing the identity map"""
    async def _stored_status(model, record_id: str):
        result = await db_session.execute(select(model.status).where(model.id == record_id))
        return result.scalar_one()

    return _stored_status
