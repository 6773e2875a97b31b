import pytest
import pytest_asyncio
from sqlalchemy.orm import sessionmaker
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.adapter.repositories.user_repository import UserRepository
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.api.utils.jwt import create_token_issuer
from src.app.repositories.user_repository import DuplicateUserError
from src.app.services.hashing import hash_secret
from src.app.use_cases.auth import (
    ClientInfo,
    InspectorLoginUseCase,
    RegisterCommand,
    RegisterUseCase,
)
from src.domain.entities import Session, User


@pytest_asyncio.fixture
async def other_session(engine):
    """Second connection, standing in for a concurrent request"""
    SessionLocal = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with SessionLocal() as session:
        yield session


def _lookup_misses_once(monkeypatch):
    """Make the next username lookup miss, as if it ran before the other commit"""
    original = UserRepository.get_by_username
    calls = []

    async def get_by_username(self, username):
        calls.append(username)
        if len(calls) == 1:
            return None
        return await original(self, username)

    monkeypatch.setattr(UserRepository, "get_by_username", get_by_username)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "duplicate, field",
    [
        (dict(username="carol", email="other@example.com"), "username"),
        (dict(username="other", email="carol@example.com"), "email"),
    ],
)
async def test_duplicate_insert_is_reported_by_field(db_session, other_session, duplicate, field):
    db_session.add(
        User(username="carol", email="carol@example.com", password_hash=hash_secret("x"))
    )
    await db_session.commit()

    repository = UserRepository(other_session)
    with pytest.raises(DuplicateUserError) as exc_info:
        await repository.create(User(password_hash=hash_secret("x"), **duplicate))

    assert exc_info.value.field == field
    await other_session.rollback()


@pytest.mark.asyncio
async def test_register_race_returns_username_taken(db_session, other_session, monkeypatch):
    first = await RegisterUseCase(SqlAlchemyUnitOfWork(db_session)).execute(
        RegisterCommand(username="carol", password="SecurePass123!")
    )
    assert first.is_ok()

    # The second request checked before the first one committed
    _lookup_misses_once(monkeypatch)
    second = await RegisterUseCase(SqlAlchemyUnitOfWork(other_session)).execute(
        RegisterCommand(username="carol", password="SecurePass123!")
    )

    assert second.is_err()
    assert second.error.code == "USERNAME_TAKEN"


@pytest.mark.asyncio
async def test_inspector_race_reuses_provisioned_account(
    db_session, other_session, monkeypatch
):
    tokens = create_token_issuer(ApplicationConfig)
    client = ClientInfo(user_agent="pytest", ip="127.0.0.1")

    def use_case(session):
        return InspectorLoginUseCase(
            SqlAlchemyUnitOfWork(session),
            tokens,
            inspector_key="shared-key",
            inspector_username="inspector_tecnico",
        )

    first = await use_case(db_session).execute("shared-key", "tablet-01", client)
    assert first.is_ok()

    _lookup_misses_once(monkeypatch)
    second = await use_case(other_session).execute("shared-key", "tablet-02", client)

    assert second.is_ok()
    assert second.value.user.id == first.value.user.id
    assert len((await other_session.exec(select(User))).all()) == 1
    assert len((await other_session.exec(select(Session))).all()) == 2
