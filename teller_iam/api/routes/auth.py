from datetime import UTC, datetime

from fastapi import APIRouter, Depends, Response, status
from pydantic import EmailStr, Field

from teller_iam.api.error import ClientError, ServerError
from teller_iam.api.routes.cookies import clear_session_cookie, set_session_cookie
from teller_iam.api.utils.jwt import decode_token, slide_token
from teller_iam.app.services.session_claims import SessionClaims
from teller_iam.app.services.unit_of_work import UnitOfWork
from teller_iam.app.use_cases.auth import (
    LoginResponse,
    LoginUseCase,
    LogoutResponse,
    LogoutUseCase,
    RefreshTokenUseCase,
    SessionResponse,
    UserInfo,
)
from teller_iam.app.use_cases.dtos import CamelModel
from teller_iam.depends import get_current_user, get_unit_of_work

router = APIRouter(prefix="/auth", tags=["Authentication"])


class LoginRequest(CamelModel):
    """
    Login HTTP request payload

    Validates incoming login request.
    """

    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., min_length=1, description="User password")


@router.post("/login", status_code=status.HTTP_200_OK, response_model=LoginResponse)
async def login(
    request: LoginRequest,
    response: Response,
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    User Login

    Verifies credentials, opens a session and sets the session cookie.

    Raises:
        - 400 Bad Request: Malformed email or empty password
        - 401 Unauthorized: Invalid credentials or locked account
        - 403 Forbidden: Account not active yet
        - 500 Internal Server Error: Server error
    """
    use_case = LoginUseCase(uow)
    result = await use_case.execute(request.email, request.password)

    if result.is_err():
        error = result.error
        if error.code in ("INVALID_CREDENTIALS", "ACCOUNT_LOCKED"):
            raise ClientError(error, status_code=status.HTTP_401_UNAUTHORIZED)
        elif error.code == "ACCOUNT_INACTIVE":
            raise ClientError(error, status_code=status.HTTP_403_FORBIDDEN)
        raise ServerError(error)

    set_session_cookie(response, result.value.token)
    return result.value


class RefreshRequest(CamelModel):
    refresh_token: str = Field(..., min_length=1, description="Refresh token")


@router.post("/refresh", status_code=status.HTTP_200_OK, response_model=LoginResponse)
async def refresh(
    request: RefreshRequest,
    response: Response,
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Refresh Session Token

    Exchanges a refresh token for a new token pair (rotation).
    Any failure means the client must sign in again.

    Raises:
        - 401 Unauthorized: Invalid, expired, reused or revoked refresh token
        - 500 Internal Server Error: Server error
    """
    use_case = RefreshTokenUseCase(uow)
    result = await use_case.execute(request.refresh_token)

    if result.is_err():
        error = result.error
        if error.code in (
            "INVALID_TOKEN",
            "SESSION_REVOKED",
            "SESSION_EXPIRED",
            "ACCOUNT_LOCKED",
        ):
            raise ClientError(error, status_code=status.HTTP_401_UNAUTHORIZED)
        raise ServerError(error)

    set_session_cookie(response, result.value.token)
    return result.value


@router.post("/logout", status_code=status.HTTP_200_OK, response_model=LogoutResponse)
async def logout(
    response: Response,
    claims: SessionClaims = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    use_case = LogoutUseCase(uow)
    result = await use_case.execute(claims.user_id, claims.session_id)

    if result.is_err():
        error = result.error
        if error.code == "SESSION_NOT_FOUND":
            raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
        raise ServerError(error)

    clear_session_cookie(response)
    return result.value


@router.get("/session", status_code=status.HTTP_200_OK, response_model=SessionResponse)
async def session(response: Response, claims: SessionClaims = Depends(get_current_user)):
    """
    Current Session

    Returns the caller's claims. Once the token is older than the update
    age a fresh one is issued, never past the session's absolute limit.
    """
    token = slide_token(claims)
    exp = claims.exp
    if token is not None:
        exp = decode_token(token).exp
        set_session_cookie(response, token)

    return SessionResponse(
        user=UserInfo(
            id=claims.sub, email=claims.email, name=claims.name, role=claims.role.value
        ),
        permissions=claims.permissions,
        expires_at=datetime.fromtimestamp(exp, UTC).isoformat(),
        token=token,
    )
