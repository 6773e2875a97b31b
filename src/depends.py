from contextlib import asynccontextmanager
from typing import Optional
from uuid import UUID

from fastapi import Depends, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.api.error import ClientError
from src.api.utils.jwt import TokenIssuer, create_token_issuer
from src.app.services.two_factor import TwoFactorManager
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth import ClientInfo, CurrentUser
from src.domain.entities import TokenType
from src.libs.result import Error

ACCESS_TOKEN_COOKIE = "access_token"
REFRESH_TOKEN_COOKIE = "refresh_token"

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)

security = HTTPBearer(auto_error=False)


async def get_unit_of_work():
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


@asynccontextmanager
async def unit_of_work_scope():
    """Unit of work outside a request (background jobs)"""
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


def get_token_issuer() -> TokenIssuer:
    return create_token_issuer(ApplicationConfig)


def get_two_factor_manager() -> TwoFactorManager:
    return TwoFactorManager(issuer_name=ApplicationConfig.APP_NAME)


def get_client_info(request: Request) -> ClientInfo:
    """User agent and IP recorded on the session"""
    user_agent = request.headers.get("user-agent") or "unknown"
    ip = request.client.host if request.client else "unknown"
    return ClientInfo(user_agent=user_agent, ip=ip)


def _unauthorized(code: str, message: str) -> ClientError:
    return ClientError(Error(code, message), status_code=status.HTTP_401_UNAUTHORIZED)


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    tokens: TokenIssuer = Depends(get_token_issuer),
    uow: UnitOfWork = Depends(get_unit_of_work),
) -> CurrentUser:
    """
    Dependency to extract and verify the access token.

    The access_token cookie is used first; an Authorization: Bearer header is
    accepted for non-browser clients. The account is reloaded so disabled
    users are rejected even while their token is still valid.

    Raises:
        ClientError: 401 if the token is missing, invalid, expired or of
        another class; 403 if the account is disabled
    """
    token = request.cookies.get(ACCESS_TOKEN_COOKIE)
    if not token and credentials is not None:
        token = credentials.credentials

    if not token:
        raise _unauthorized("UNAUTHORIZED", "Authentication required")

    payload = tokens.verify(TokenType.access, token)
    if payload is None:
        raise _unauthorized("INVALID_TOKEN", "Invalid or expired token")

    async with uow:
        user = await uow.users.get_by_id(UUID(payload["sub"]))
        if user is None:
            raise _unauthorized("UNAUTHORIZED", "User not authorized")
        if not user.is_active:
            raise ClientError(
                Error("ACCOUNT_DISABLED", "User account is disabled"),
                status_code=status.HTTP_403_FORBIDDEN,
            )

        return CurrentUser(id=str(user.id), username=user.username, roles=list(user.roles))
