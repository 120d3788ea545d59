"""
NITP Student Portal - Test Configuration and Fixtures
"""
import os
from typing import AsyncGenerator
from unittest.mock import AsyncMock
import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool
from faker import Faker

# Set testing environment
os.environ['TESTING'] = 'true'
os.environ['DATABASE_URL'] = 'sqlite+aiosqlite:///./test.db'
os.environ['SECRET_KEY'] = 'test-secret-key-for-testing-only'
os.environ['JWT_SECRET_KEY'] = 'test-jwt-secret-key-for-testing'
os.environ['RATE_LIMIT_ENABLED'] = 'false'
os.environ['LOG_FILE'] = ''
os.environ['BCRYPT_ROUNDS'] = '4'
os.environ['SENDGRID_API_KEY'] = ''

from portal.main import app
from portal.core.database import Base, get_db
from portal.models.role import Role
from portal.models.student import Student
from portal.models.system_setting import SystemSetting
from portal.modules.auth.validators import allowed_roll_year_codes
from portal.api.v1.endpoints.students import get_email_sender

fake = Faker()

# Test database setup
TEST_DATABASE_URL = 'sqlite+aiosqlite:///./test.db'
test_engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)
TestSessionLocal = async_sessionmaker(
    bind=test_engine,
    class_=AsyncSession,
    expire_on_commit=False
)


def institute_email() -> str:
    """Random address on the institute domain"""
    return f"{fake.user_name().replace('-', '_')}.ug{fake.numerify('##')}.cse@nitp.ac.in"


def current_roll_number() -> str:
    """Roll number inside today's admission window"""
    return f"{allowed_roll_year_codes()[1]}{fake.numerify('#####')}"


async def set_registration_flag(db: AsyncSession, key: str, value) -> None:
    db.add(SystemSetting(key=key, value=value, category="registration"))
    await db.commit()


@pytest.fixture(scope='function')
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for each test"""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session
        await session.rollback()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def student_role(db_session: AsyncSession) -> Role:
    """The role every self-registered student gets"""
    role = Role(name='Student', type='student', description='Self-registered student account')
    db_session.add(role)
    await db_session.commit()
    await db_session.refresh(role)
    return role


@pytest.fixture
async def student_record(db_session: AsyncSession) -> Student:
    """A student in the institute records"""
    student = Student(
        roll=current_roll_number(),
        institute_email_id=institute_email(),
        name=fake.name(),
    )
    db_session.add(student)
    await db_session.commit()
    await db_session.refresh(student)
    return student


@pytest.fixture
def email_sender() -> AsyncMock:
    """Confirmation email sender that always succeeds"""
    sender = AsyncMock()
    sender.send_confirmation_email.return_value = True
    return sender


@pytest.fixture
async def client(db_session: AsyncSession, email_sender: AsyncMock) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database and email overrides"""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_email_sender] = lambda: email_sender

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def make_registration_body():
    """Factory for registration bodies; keyword overrides replace fields"""
    def _make(**overrides) -> dict:
        body = {
            'email': institute_email(),
            'password': 'securePassword123!',
            'username': current_roll_number(),
        }
        body.update(overrides)
        return body
    return _make


@pytest.fixture
def registration_flag(db_session: AsyncSession):
    """Store a registration.* switch in system_settings"""
    async def _set(key: str, value) -> None:
        await set_registration_flag(db_session, key, value)
    return _set


@pytest.fixture
def registration_body(make_registration_body) -> dict:
    """A registration body that passes every check today"""
    return make_registration_body()


@pytest.fixture
def session_factory(db_session: AsyncSession) -> async_sessionmaker:
    """Open extra sessions on the test database, e.g. to race two requests"""
    return TestSessionLocal
