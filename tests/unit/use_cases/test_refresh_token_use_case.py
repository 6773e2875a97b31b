from datetime import timedelta

import pytest

from src.app.services.hashing import check_token, hash_token
from src.app.use_cases.auth import RefreshTokenUseCase
from src.app.use_cases.auth.session_issuer import token_claims
from src.domain.base import utcnow
from src.domain.entities import Session, TokenType, UserStatus


def _session_for(user, refresh_token):
    return Session(
        user_id=user.id,
        refresh_token_hash=hash_token(refresh_token),
        expires_at=utcnow() + timedelta(days=7),
    )


@pytest.mark.asyncio
async def test_successful_refresh_rotates_session(mock_uow, tokens, client_info, make_user):
    user = make_user()
    refresh_token = tokens.sign(TokenType.refresh, token_claims(user))
    session = _session_for(user, refresh_token)
    old_hash = session.refresh_token_hash

    mock_uow.sessions.get_active_by_user_id.return_value = [session]
    mock_uow.users.get_by_id.return_value = user

    result = await RefreshTokenUseCase(mock_uow, tokens).execute(refresh_token, client_info)

    assert result.is_ok()
    data = result.value
    assert data.refresh_token != refresh_token
    assert data.session_id == str(session.id)
    assert tokens.verify(TokenType.access, data.access_token)["sub"] == str(user.id)

    mock_uow.sessions.rotate.assert_called_once()
    call = mock_uow.sessions.rotate.call_args
    assert call.args[0] == session.id
    assert call.kwargs["expected_hash"] == old_hash
    assert check_token(data.refresh_token, call.kwargs["new_hash"])
    assert call.kwargs["expires_at"] > utcnow() + timedelta(days=6)
    mock_uow.sessions.create.assert_not_called()
    mock_uow.commit.assert_called_once()


@pytest.mark.asyncio
async def test_refresh_with_garbage_token(mock_uow, tokens, client_info):
    result = await RefreshTokenUseCase(mock_uow, tokens).execute("not-a-jwt", client_info)

    assert result.is_err()
    assert result.error.code == "INVALID_TOKEN"
    mock_uow.sessions.get_active_by_user_id.assert_not_called()


@pytest.mark.asyncio
async def test_refresh_rejects_access_token(mock_uow, tokens, client_info, make_user):
    access_token = tokens.sign(TokenType.access, token_claims(make_user()))

    result = await RefreshTokenUseCase(mock_uow, tokens).execute(access_token, client_info)

    assert result.is_err()
    assert result.error.code == "INVALID_TOKEN"


@pytest.mark.asyncio
async def test_refresh_without_matching_session(mock_uow, tokens, client_info, make_user):
    """A valid token whose session was revoked or rotated away is rejected"""
    user = make_user()
    refresh_token = tokens.sign(TokenType.refresh, token_claims(user))
    other_token = tokens.sign(TokenType.refresh, token_claims(user))
    mock_uow.sessions.get_active_by_user_id.return_value = [_session_for(user, other_token)]

    result = await RefreshTokenUseCase(mock_uow, tokens).execute(refresh_token, client_info)

    assert result.is_err()
    assert result.error.code == "SESSION_INVALID"
    mock_uow.sessions.rotate.assert_not_called()
    mock_uow.commit.assert_not_called()


@pytest.mark.asyncio
async def test_refresh_disabled_account(mock_uow, tokens, client_info, make_user):
    user = make_user(status=UserStatus.disabled)
    refresh_token = tokens.sign(TokenType.refresh, token_claims(user))
    mock_uow.sessions.get_active_by_user_id.return_value = [_session_for(user, refresh_token)]
    mock_uow.users.get_by_id.return_value = user

    result = await RefreshTokenUseCase(mock_uow, tokens).execute(refresh_token, client_info)

    assert result.is_err()
    assert result.error.code == "ACCOUNT_DISABLED"
    mock_uow.sessions.rotate.assert_not_called()


@pytest.mark.asyncio
async def test_refresh_lost_rotation_race(mock_uow, tokens, client_info, make_user):
    """Second of two concurrent refreshes with the same token fails"""
    user = make_user()
    refresh_token = tokens.sign(TokenType.refresh, token_claims(user))
    mock_uow.sessions.get_active_by_user_id.return_value = [_session_for(user, refresh_token)]
    mock_uow.users.get_by_id.return_value = user
    mock_uow.sessions.rotate.return_value = False

    result = await RefreshTokenUseCase(mock_uow, tokens).execute(refresh_token, client_info)

    assert result.is_err()
    assert result.error.code == "SESSION_INVALID"
    mock_uow.commit.assert_not_called()
