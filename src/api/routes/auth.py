import re
from typing import List, Optional, Union
from uuid import UUID

from fastapi import APIRouter, Depends, Request, Response, status
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from config import ApplicationConfig
from src.api.error import ClientError, ServerError
from src.api.utils.jwt import TokenIssuer
from src.app.services.two_factor import TwoFactorManager
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth import (
    AuthenticatedResponse,
    ClientInfo,
    CurrentUser,
    GetProfileUseCase,
    InspectorLoginUseCase,
    LoginUseCase,
    LogoutUseCase,
    MessageResponse,
    RefreshTokenUseCase,
    RegisterCommand,
    RegisterUseCase,
    TwoFactorChallenge,
    UserProfile,
    VerifyTwoFactorUseCase,
)
from src.app.use_cases.two_factor import (
    DisableTwoFactorUseCase,
    EnableTwoFactorUseCase,
    SetupTwoFactorUseCase,
    TwoFactorEnabledResponse,
    TwoFactorSetupResponse,
)
from src.depends import (
    ACCESS_TOKEN_COOKIE,
    REFRESH_TOKEN_COOKIE,
    get_client_info,
    get_current_user,
    get_token_issuer,
    get_two_factor_manager,
    get_unit_of_work,
)
from src.domain.entities import Role, TokenType
from src.libs.result import Error

router = APIRouter(prefix="/auth", tags=["Authentication"])

USERNAME_PATTERN = r"^[a-zA-Z0-9_-]+$"
PASSWORD_COMPLEXITY = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&])")


# ============================================================================
# Cookies
# ============================================================================


def set_token_cookies(
    response: Response, tokens: TokenIssuer, access_token: str, refresh_token: str
) -> None:
    """Issue HttpOnly access and refresh token cookies"""
    secure = ApplicationConfig.ENVIRONMENT == "production"
    response.set_cookie(
        key=ACCESS_TOKEN_COOKIE,
        value=access_token,
        max_age=int(tokens.lifetime(TokenType.access).total_seconds()),
        httponly=True,
        secure=secure,
        samesite="lax",
        path="/",
    )
    response.set_cookie(
        key=REFRESH_TOKEN_COOKIE,
        value=refresh_token,
        max_age=int(tokens.lifetime(TokenType.refresh).total_seconds()),
        httponly=True,
        secure=secure,
        samesite="lax",
        path="/",
    )


def clear_token_cookies(response: Response) -> None:
    secure = ApplicationConfig.ENVIRONMENT == "production"
    for key in (ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE):
        response.delete_cookie(key=key, path="/", secure=secure, httponly=True, samesite="lax")


class UserEnvelope(BaseModel):
    """Body of every response that also sets token cookies"""

    user: UserProfile


def _authenticated(
    response: Response, tokens: TokenIssuer, result: AuthenticatedResponse
) -> UserEnvelope:
    set_token_cookies(response, tokens, result.access_token, result.refresh_token)
    return UserEnvelope(user=result.user)


# ============================================================================
# Register
# ============================================================================


class RegisterRequest(BaseModel):
    """
    Register HTTP request payload

    Validates incoming HTTP request before converting to RegisterCommand.
    """

    model_config = ConfigDict(populate_by_name=True)

    username: str = Field(..., min_length=3, max_length=30, pattern=USERNAME_PATTERN)
    email: Optional[EmailStr] = Field(default=None, description="Optional email address")
    password: str = Field(..., min_length=8, description="Password (min 8 chars)")
    full_name: Optional[str] = Field(default=None, alias="fullName", max_length=255)
    roles: Optional[List[Role]] = None

    @field_validator("password")
    @classmethod
    def password_complexity(cls, value: str) -> str:
        if len(value.encode("utf-8")) > 72:
            raise ValueError("Password must be at most 72 bytes")
        if not PASSWORD_COMPLEXITY.match(value):
            raise ValueError(
                "Password must contain upper and lower case letters, a number and one of @$!%*?&"
            )
        return value


@router.post("/register", status_code=status.HTTP_201_CREATED, response_model=UserProfile)
async def register(request: RegisterRequest, uow: UnitOfWork = Depends(get_unit_of_work)):
    """
    Register

    Creates a new account. Roles default to [user].

    Raises:
        - 409 Conflict: Username or email already in use
        - 422 Unprocessable Entity: Invalid input (handled by FastAPI)
    """
    command = RegisterCommand(
        username=request.username,
        password=request.password,
        email=request.email,
        full_name=request.full_name,
        roles=[role.value for role in request.roles] if request.roles else None,
    )

    use_case = RegisterUseCase(
        uow, reserved_usernames=[ApplicationConfig.INSPECTOR_USERNAME]
    )
    result = await use_case.execute(command)

    if result.is_err():
        error = result.error
        if error.code in ("USERNAME_TAKEN", "EMAIL_TAKEN"):
            raise ClientError(error, status_code=status.HTTP_409_CONFLICT)
        raise ServerError(error)

    return result.value


# ============================================================================
# Login / 2FA verification
# ============================================================================


class LoginRequest(BaseModel):
    """Login HTTP request payload"""

    username: str = Field(..., min_length=3, max_length=30, pattern=USERNAME_PATTERN)
    password: str = Field(..., min_length=8, description="User password")


@router.post(
    "/login",
    status_code=status.HTTP_200_OK,
    response_model=Union[UserEnvelope, TwoFactorChallenge],
)
async def login(
    request: LoginRequest,
    response: Response,
    client: ClientInfo = Depends(get_client_info),
    tokens: TokenIssuer = Depends(get_token_issuer),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Password Login

    Returns {user} and sets token cookies, or {requires2FA, tempToken, message}
    when the account has two-factor authentication enabled.

    Raises:
        - 401 Unauthorized: Invalid credentials (never says which part)
    """
    result = await LoginUseCase(uow, tokens).execute(request.username, request.password, client)

    if result.is_err():
        error = result.error
        if error.code == "INVALID_CREDENTIALS":
            raise ClientError(error, status_code=status.HTTP_401_UNAUTHORIZED)
        raise ServerError(error)

    if isinstance(result.value, TwoFactorChallenge):
        return result.value

    return _authenticated(response, tokens, result.value)


class VerifyTwoFactorRequest(BaseModel):
    """Second login step: temp token plus a TOTP or backup code"""

    model_config = ConfigDict(populate_by_name=True)

    temp_token: str = Field(..., alias="tempToken")
    code: str = Field(..., min_length=6, max_length=16)


@router.post("/verify-2fa", status_code=status.HTTP_200_OK, response_model=UserEnvelope)
async def verify_two_factor(
    request: VerifyTwoFactorRequest,
    response: Response,
    client: ClientInfo = Depends(get_client_info),
    tokens: TokenIssuer = Depends(get_token_issuer),
    two_factor: TwoFactorManager = Depends(get_two_factor_manager),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Complete Two-Factor Login

    Raises:
        - 401 Unauthorized: Invalid/expired temp token, 2FA not enabled, invalid code
        - 403 Forbidden: Account disabled
    """
    use_case = VerifyTwoFactorUseCase(uow, tokens, two_factor)
    result = await use_case.execute(request.temp_token, request.code, client)

    if result.is_err():
        error = result.error
        if error.code in ("INVALID_TOKEN", "UNAUTHORIZED", "INVALID_CODE"):
            raise ClientError(error, status_code=status.HTTP_401_UNAUTHORIZED)
        elif error.code == "ACCOUNT_DISABLED":
            raise ClientError(error, status_code=status.HTTP_403_FORBIDDEN)
        raise ServerError(error)

    return _authenticated(response, tokens, result.value)


# ============================================================================
# Refresh / logout
# ============================================================================


@router.post("/refresh", status_code=status.HTTP_200_OK, response_model=UserEnvelope)
async def refresh(
    request: Request,
    response: Response,
    client: ClientInfo = Depends(get_client_info),
    tokens: TokenIssuer = Depends(get_token_issuer),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Refresh Tokens

    Rotates the session owning the refresh_token cookie and sets new cookies.

    Raises:
        - 401 Unauthorized: Missing/invalid token, or no live session owns it
        - 403 Forbidden: Account disabled
    """
    refresh_token = request.cookies.get(REFRESH_TOKEN_COOKIE)
    if not refresh_token:
        raise ClientError(
            Error("INVALID_TOKEN", "No refresh token"),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    result = await RefreshTokenUseCase(uow, tokens).execute(refresh_token, client)

    if result.is_err():
        error = result.error
        if error.code in ("INVALID_TOKEN", "SESSION_INVALID"):
            raise ClientError(error, status_code=status.HTTP_401_UNAUTHORIZED)
        elif error.code == "ACCOUNT_DISABLED":
            raise ClientError(error, status_code=status.HTTP_403_FORBIDDEN)
        raise ServerError(error)

    return _authenticated(response, tokens, result.value)


@router.post("/logout", status_code=status.HTTP_200_OK, response_model=MessageResponse)
async def logout(
    request: Request,
    response: Response,
    current_user: CurrentUser = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Logout

    Revokes the session owning the refresh_token cookie (if any) and clears
    both cookies. Always succeeds for an authenticated caller.
    """
    refresh_token = request.cookies.get(REFRESH_TOKEN_COOKIE)
    if refresh_token:
        result = await LogoutUseCase(uow).execute(UUID(current_user.id), refresh_token)
        if result.is_err():
            raise ServerError(result.error)

    clear_token_cookies(response)
    return MessageResponse(message="Logged out")


# ============================================================================
# Profile
# ============================================================================


@router.get("/me", status_code=status.HTTP_200_OK, response_model=UserProfile)
async def get_me(
    current_user: CurrentUser = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Current Account

    Raises:
        - 401 Unauthorized: Invalid or expired access token
        - 403 Forbidden: Account disabled
    """
    result = await GetProfileUseCase(uow).execute(UUID(current_user.id))

    if result.is_err():
        error = result.error
        if error.code == "USER_NOT_FOUND":
            raise ClientError(error, status_code=status.HTTP_401_UNAUTHORIZED)
        elif error.code == "ACCOUNT_DISABLED":
            raise ClientError(error, status_code=status.HTTP_403_FORBIDDEN)
        raise ServerError(error)

    return result.value


# ============================================================================
# Two-factor enrollment
# ============================================================================


class TwoFactorCodeRequest(BaseModel):
    """Six-digit TOTP code"""

    code: str = Field(..., min_length=6, max_length=6, pattern=r"^\d{6}$")


@router.post("/2fa/setup", status_code=status.HTTP_200_OK, response_model=TwoFactorSetupResponse)
async def setup_two_factor(
    current_user: CurrentUser = Depends(get_current_user),
    two_factor: TwoFactorManager = Depends(get_two_factor_manager),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Begin Two-Factor Enrollment

    Returns the base32 secret and a QR code (PNG data URL) of the otpauth URI.

    Raises:
        - 409 Conflict: Two-factor already enabled
    """
    result = await SetupTwoFactorUseCase(uow, two_factor).execute(UUID(current_user.id))

    if result.is_err():
        error = result.error
        if error.code == "TWO_FACTOR_ALREADY_ENABLED":
            raise ClientError(error, status_code=status.HTTP_409_CONFLICT)
        elif error.code == "USER_NOT_FOUND":
            raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
        raise ServerError(error)

    return result.value


@router.post("/2fa/enable", status_code=status.HTTP_200_OK, response_model=TwoFactorEnabledResponse)
async def enable_two_factor(
    request: TwoFactorCodeRequest,
    current_user: CurrentUser = Depends(get_current_user),
    two_factor: TwoFactorManager = Depends(get_two_factor_manager),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Confirm Two-Factor Enrollment

    Returns 10 single-use backup codes; they are never shown again.

    Raises:
        - 400 Bad Request: Setup not started or invalid code
    """
    result = await EnableTwoFactorUseCase(uow, two_factor).execute(
        UUID(current_user.id), request.code
    )

    if result.is_err():
        error = result.error
        if error.code in ("TWO_FACTOR_NOT_SETUP", "INVALID_CODE"):
            raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
        raise ServerError(error)

    return result.value


@router.post("/2fa/disable", status_code=status.HTTP_200_OK, response_model=MessageResponse)
async def disable_two_factor(
    request: TwoFactorCodeRequest,
    current_user: CurrentUser = Depends(get_current_user),
    two_factor: TwoFactorManager = Depends(get_two_factor_manager),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Remove Two-Factor Authentication

    Raises:
        - 400 Bad Request: Two-factor not enabled or invalid code
    """
    result = await DisableTwoFactorUseCase(uow, two_factor).execute(
        UUID(current_user.id), request.code
    )

    if result.is_err():
        error = result.error
        if error.code in ("TWO_FACTOR_NOT_ENABLED", "INVALID_CODE"):
            raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
        raise ServerError(error)

    return MessageResponse(message=result.value)


# ============================================================================
# Inspector (field device) login
# ============================================================================


class InspectorLoginRequest(BaseModel):
    """Pre-shared key login for field devices"""

    model_config = ConfigDict(populate_by_name=True)

    inspector_key: str = Field(..., alias="inspectorKey", min_length=1)
    device_id: Optional[str] = Field(default=None, alias="deviceId", max_length=255)


@router.post("/inspector", status_code=status.HTTP_200_OK, response_model=UserEnvelope)
async def inspector_login(
    request: InspectorLoginRequest,
    response: Response,
    client: ClientInfo = Depends(get_client_info),
    tokens: TokenIssuer = Depends(get_token_issuer),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Inspector Login

    Authenticates an unattended field device with the configured pre-shared
    key and issues a standard session for the shared inspector account.

    Raises:
        - 401 Unauthorized: Invalid key
        - 403 Forbidden: Inspector account deactivated
        - 409 Conflict: Inspector handle held by a regular account
    """
    use_case = InspectorLoginUseCase(
        uow,
        tokens,
        inspector_key=ApplicationConfig.INSPECTOR_API_KEY,
        inspector_username=ApplicationConfig.INSPECTOR_USERNAME,
    )
    result = await use_case.execute(request.inspector_key, request.device_id, client)

    if result.is_err():
        error = result.error
        if error.code == "INVALID_INSPECTOR_KEY":
            raise ClientError(error, status_code=status.HTTP_401_UNAUTHORIZED)
        elif error.code == "INSPECTOR_ACCOUNT_CONFLICT":
            raise ClientError(error, status_code=status.HTTP_409_CONFLICT)
        elif error.code == "ACCOUNT_DISABLED":
            raise ClientError(error, status_code=status.HTTP_403_FORBIDDEN)
        raise ServerError(error)

    return _authenticated(response, tokens, result.value)
