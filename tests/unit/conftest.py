from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from config import ApplicationConfig
from src.api.utils.jwt import create_token_issuer
from src.app.services.hashing import hash_secret
from src.app.services.two_factor import TwoFactorManager
from src.app.use_cases.auth import ClientInfo
from src.domain.entities import User, UserStatus

PASSWORD = "SecurePass123!"


@pytest.fixture(autouse=True)
def fast_bcrypt(monkeypatch):
    monkeypatch.setattr(ApplicationConfig, "BCRYPT_ROUNDS", 4)


@pytest.fixture
def mock_uow():
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()

    uow.users = MagicMock()
    uow.users.get_by_username = AsyncMock(return_value=None)
    uow.users.get_by_email = AsyncMock(return_value=None)
    uow.users.get_by_id = AsyncMock(return_value=None)
    uow.users.create = AsyncMock(side_effect=lambda user: user)
    uow.users.update = AsyncMock(side_effect=lambda user: user)

    uow.sessions = MagicMock()
    uow.sessions.create = AsyncMock(side_effect=lambda session: session)
    uow.sessions.get_active_by_user_id = AsyncMock(return_value=[])
    uow.sessions.get_unrevoked_by_user_id = AsyncMock(return_value=[])
    uow.sessions.rotate = AsyncMock(return_value=True)
    uow.sessions.revoke_by_id = AsyncMock(return_value=True)
    uow.sessions.delete_stale = AsyncMock(return_value=0)
    return uow


@pytest.fixture
def tokens():
    return create_token_issuer(ApplicationConfig)


@pytest.fixture
def two_factor():
    return TwoFactorManager(issuer_name="Inspecciones")


@pytest.fixture
def client_info():
    return ClientInfo(user_agent="pytest", ip="127.0.0.1")


@pytest.fixture
def make_user():
    def _make_user(**overrides):
        fields = dict(
            id=uuid4(),
            username="alice",
            email="alice@example.com",
            full_name="Alice",
            password_hash=hash_secret(PASSWORD),
            roles=["user"],
            status=UserStatus.active,
        )
        fields.update(overrides)
        return User(**fields)

    return _make_user
