"""
Session Entity

One record per refresh-token lineage (one per login).
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow


class Session(SQLModel, table=True):
    """
    Session entity - stores the hashed refresh token of a login.

    Business Rules:
    - Refresh tokens are hashed (bcrypt over their SHA-256 digest); the
      plaintext is never stored, so lookups scan the owner's sessions
    - Refresh rotates the hash of this same row, it never inserts a new one
    - Revoked sessions block token refresh
    - Expires 7 days after the last issuance
    - Stale rows are deleted by the session reaper
    """

    __tablename__ = "sessions"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    user_id: UUID = Field(foreign_key="users.id", nullable=False, index=True)

    refresh_token_hash: str = Field(max_length=60)  # Bcrypt output
    user_agent: str = Field(default="unknown", max_length=512)
    ip: str = Field(default="unknown", max_length=64)
    device_id: Optional[str] = Field(default=None, max_length=255)

    revoked: bool = Field(default=False)
    revoked_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    last_refreshed_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime)
    )

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    updated_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    expires_at: datetime = Field(sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_session_expires_at", "expires_at"),
        Index("idx_session_user_revoked", "user_id", "revoked"),
        Index("idx_session_revoked_updated", "revoked", "updated_at"),
    )
