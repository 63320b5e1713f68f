"""Test config and shared fixtures."""
import itertools
import pytest
from typing import Callable, Dict, Generator, List
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

import apps.models  # noqa: F401  (registers table models on SQLModel metadata)
from apps.directory.models import Company, User
from apps.directory.repository import CompanyRepository, SiteSettingRepository, UserRepository


# In-memory SQLite for tests
TEST_DATABASE_URL = "sqlite://"


@pytest.fixture(scope="function")
def engine():
    """Create test database engine with a fresh schema."""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope="function")
def session(engine) -> Generator[Session, None, None]:
    """Create test database session."""
    with Session(engine, expire_on_commit=False) as session:
        yield session
        session.rollback()


@pytest.fixture
def user_repository(session: Session) -> UserRepository:
    return UserRepository(session)


@pytest.fixture
def company_repository(session: Session) -> CompanyRepository:
    return CompanyRepository(session)


@pytest.fixture
def site_setting_repository(session: Session) -> SiteSettingRepository:
    return SiteSettingRepository(session)


@pytest.fixture
def user_data() -> Callable[..., Dict]:
    """Factory of unique user attribute maps."""
    counter = itertools.count(1)

    def _make(**overrides) -> Dict:
        n = next(counter)
        data = {
            "name": f"User {n:03d}",
            "email": f"user{n}@example.com",
            "password": f"hashed-{n}",
        }
        data.update(overrides)
        return data
    return _make


@pytest.fixture
def create_users(session: Session, user_data) -> Callable[[int], List[User]]:
    """Insert users straight through the session, bypassing the repository."""
    def _create(count: int, **overrides) -> List[User]:
        users = [User(**user_data(**overrides)) for _ in range(count)]
        session.add_all(users)
        session.flush()
        for user in users:
            session.refresh(user)
        return users
    return _create


@pytest.fixture
def create_company(session: Session) -> Callable[[str], Company]:
    def _create(name: str) -> Company:
        company = Company(name=name)
        session.add(company)
        session.flush()
        session.refresh(company)
        return company
    return _create


@pytest.fixture
def client(session: Session) -> Generator[TestClient, None, None]:
    """Create test client bound to the test session."""
    from main import app
    from apps.directory.api.router import get_db

    def _get_db():
        yield session

    app.dependency_overrides[get_db] = _get_db
    # Not used as a context manager: the lifespan would open the configured database
    yield TestClient(app)
    app.dependency_overrides.clear()
