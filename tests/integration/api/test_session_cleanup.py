from datetime import timedelta
from uuid import uuid4

import pytest
from sqlmodel import select

from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.hashing import hash_secret
from src.app.use_cases.sessions import CleanupSessionsUseCase
from src.domain.base import utcnow
from src.domain.entities import Session, User


@pytest.mark.asyncio
async def test_cleanup_removes_only_stale_sessions(db_session):
    now = utcnow()
    user_id = uuid4()
    user = User(id=user_id, username="alice", password_hash=hash_secret("SecurePass123!"))
    db_session.add(user)

    def session(**fields):
        values = dict(
            user_id=user_id,
            refresh_token_hash=hash_secret("x"),
            created_at=now - timedelta(days=1),
            updated_at=now - timedelta(days=1),
            expires_at=now + timedelta(days=6),
        )
        values.update(fields)
        row = Session(**values)
        db_session.add(row)
        return row.id

    live = session()
    expired = session(expires_at=now - timedelta(days=1))
    revoked_recently = session(
        revoked=True, revoked_at=now - timedelta(days=3), updated_at=now - timedelta(days=3)
    )
    revoked_long_ago = session(
        revoked=True, revoked_at=now - timedelta(days=8), updated_at=now - timedelta(days=8)
    )
    abandoned = session(created_at=now - timedelta(days=31))
    refreshed_lately = session(
        created_at=now - timedelta(days=40), last_refreshed_at=now - timedelta(days=2)
    )
    refreshed_long_ago = session(
        created_at=now - timedelta(days=60), last_refreshed_at=now - timedelta(days=31)
    )
    await db_session.commit()

    deleted = await CleanupSessionsUseCase(SqlAlchemyUnitOfWork(db_session)).execute(now=now)

    assert deleted == 4
    remaining = {row.id for row in (await db_session.exec(select(Session))).all()}
    assert remaining == {live, revoked_recently, refreshed_lately}
    assert remaining.isdisjoint({expired, revoked_long_ago, abandoned, refreshed_long_ago})


@pytest.mark.asyncio
async def test_cleanup_with_nothing_to_delete(db_session):
    deleted = await CleanupSessionsUseCase(SqlAlchemyUnitOfWork(db_session)).execute()

    assert deleted == 0
