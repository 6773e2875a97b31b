import pytest

from src.app.use_cases.auth import AuthenticatedResponse, LoginUseCase, TwoFactorChallenge
from src.app.services.hashing import check_token
from src.domain.entities import TokenType, UserStatus


@pytest.mark.asyncio
async def test_successful_login(mock_uow, tokens, client_info, make_user):
    """Valid credentials without 2FA create a session and a token pair"""
    user = make_user()
    mock_uow.users.get_by_username.return_value = user

    result = await LoginUseCase(mock_uow, tokens).execute("alice", "SecurePass123!", client_info)

    assert result.is_ok()
    data = result.value
    assert isinstance(data, AuthenticatedResponse)
    assert data.user.username == "alice"
    assert data.user.two_factor_enabled is False

    access = tokens.verify(TokenType.access, data.access_token)
    refresh = tokens.verify(TokenType.refresh, data.refresh_token)
    assert access["sub"] == str(user.id)
    assert access["roles"] == ["user"]
    assert refresh["sub"] == str(user.id)

    mock_uow.sessions.create.assert_called_once()
    session = mock_uow.sessions.create.call_args.args[0]
    assert session.user_id == user.id
    assert session.user_agent == "pytest"
    assert session.ip == "127.0.0.1"
    assert session.revoked is False
    assert check_token(data.refresh_token, session.refresh_token_hash)
    assert data.refresh_token not in session.refresh_token_hash
    mock_uow.commit.assert_called_once()


@pytest.mark.asyncio
async def test_login_wrong_password(mock_uow, tokens, client_info, make_user):
    mock_uow.users.get_by_username.return_value = make_user()

    result = await LoginUseCase(mock_uow, tokens).execute("alice", "WrongPass123!", client_info)

    assert result.is_err()
    assert result.error.code == "INVALID_CREDENTIALS"
    mock_uow.sessions.create.assert_not_called()
    mock_uow.commit.assert_not_called()


@pytest.mark.asyncio
async def test_login_unknown_username_same_error(mock_uow, tokens, client_info):
    """Unknown username is indistinguishable from a wrong password"""
    mock_uow.users.get_by_username.return_value = None

    result = await LoginUseCase(mock_uow, tokens).execute("nobody", "SecurePass123!", client_info)

    assert result.is_err()
    assert result.error.code == "INVALID_CREDENTIALS"
    assert result.error.message == "Invalid username or password"
    mock_uow.sessions.create.assert_not_called()


@pytest.mark.asyncio
async def test_login_disabled_account(mock_uow, tokens, client_info, make_user):
    mock_uow.users.get_by_username.return_value = make_user(status=UserStatus.disabled)

    result = await LoginUseCase(mock_uow, tokens).execute("alice", "SecurePass123!", client_info)

    assert result.is_err()
    assert result.error.code == "INVALID_CREDENTIALS"
    mock_uow.sessions.create.assert_not_called()


@pytest.mark.asyncio
async def test_login_with_two_factor_returns_challenge(mock_uow, tokens, client_info, make_user):
    """2FA accounts get a temp token and no session"""
    user = make_user(two_factor_enabled=True, two_factor_secret="JBSWY3DPEHPK3PXP")
    mock_uow.users.get_by_username.return_value = user

    result = await LoginUseCase(mock_uow, tokens).execute("alice", "SecurePass123!", client_info)

    assert result.is_ok()
    challenge = result.value
    assert isinstance(challenge, TwoFactorChallenge)
    assert challenge.requires_2fa is True

    payload = tokens.verify(TokenType.temp_2fa, challenge.temp_token)
    assert payload["sub"] == str(user.id)
    assert tokens.verify(TokenType.access, challenge.temp_token) is None

    mock_uow.sessions.create.assert_not_called()
    mock_uow.commit.assert_not_called()


@pytest.mark.asyncio
async def test_login_session_persist_failure_propagates(mock_uow, tokens, client_info, make_user):
    mock_uow.users.get_by_username.return_value = make_user()
    mock_uow.commit.side_effect = RuntimeError("database is locked")

    with pytest.raises(RuntimeError):
        await LoginUseCase(mock_uow, tokens).execute("alice", "SecurePass123!", client_info)


@pytest.mark.asyncio
async def test_login_service_account_refused(mock_uow, tokens, client_info, make_user):
    mock_uow.users.get_by_username.return_value = make_user(
        username="inspector_tecnico", is_service_account=True
    )

    result = await LoginUseCase(mock_uow, tokens).execute(
        "inspector_tecnico", "SecurePass123!", client_info
    )

    assert result.is_err()
    assert result.error.code == "INVALID_CREDENTIALS"
    mock_uow.sessions.create.assert_not_called()
