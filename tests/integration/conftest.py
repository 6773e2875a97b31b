import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.depends import get_unit_of_work

INSPECTOR_KEY = "integration-inspector-key"
PASSWORD = "SecurePass123!"


@pytest.fixture(autouse=True)
def test_config(monkeypatch):
    monkeypatch.setattr(ApplicationConfig, "BCRYPT_ROUNDS", 4)
    monkeypatch.setattr(ApplicationConfig, "INSPECTOR_API_KEY", INSPECTOR_KEY)
    monkeypatch.setattr(ApplicationConfig, "SESSION_CLEANUP_ENABLED", False)
    monkeypatch.setattr(ApplicationConfig, "ENABLE_LOGGING_MIDDLEWARE", False)


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine("sqlite+aiosqlite:///./test.db")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine):
    Session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with Session() as session:
        yield session


@pytest_asyncio.fixture
async def client(db_session):
    from src.api.app import create_app

    app = create_app(ApplicationConfig)

    async def override_get_unit_of_work():
        yield SqlAlchemyUnitOfWork(db_session)

    app.dependency_overrides[get_unit_of_work] = override_get_unit_of_work

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


def _parse_set_cookie(response) -> dict:
    cookies = {}
    for header in response.headers.get_list("set-cookie"):
        name, _, rest = header.partition("=")
        cookies[name.strip()] = rest.split(";", 1)[0].strip().strip('"')
    return cookies


@pytest.fixture
def token_cookies():
    """Token cookies set by a response, as {name: value}"""
    return _parse_set_cookie


@pytest.fixture
def cookie_header():
    """Explicit Cookie header so requests never depend on the client jar"""

    def _cookie_header(**cookies) -> dict:
        return {"Cookie": "; ".join(f"{name}={value}" for name, value in cookies.items())}

    return _cookie_header


@pytest.fixture
def register_user(client):
    async def _register_user(username="alice", password=PASSWORD, **extra):
        response = await client.post(
            "/auth/register", json={"username": username, "password": password, **extra}
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _register_user


@pytest.fixture
def login_user(client):
    """Log in and return the token cookies of the new session"""

    async def _login_user(username="alice", password=PASSWORD):
        response = await client.post(
            "/auth/login", json={"username": username, "password": password}
        )
        assert response.status_code == 200, response.text
        client.cookies.clear()
        return _parse_set_cookie(response)

    return _login_user
