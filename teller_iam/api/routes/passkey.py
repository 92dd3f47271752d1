from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Response, status
from pydantic import EmailStr, Field

from teller_iam.api.error import ClientError, ServerError
from teller_iam.api.routes.cookies import set_session_cookie
from teller_iam.app.services.challenge_store import IChallengeStore
from teller_iam.app.services.session_claims import SessionClaims
from teller_iam.app.services.unit_of_work import UnitOfWork
from teller_iam.app.use_cases.auth import LoginResponse
from teller_iam.app.use_cases.dtos import CamelModel
from teller_iam.app.use_cases.passkeys import (
    BeginPasskeyAuthenticationUseCase,
    BeginPasskeyRegistrationUseCase,
    FinishPasskeyAuthenticationUseCase,
    FinishPasskeyRegistrationUseCase,
    PasskeyInfo,
)
from teller_iam.depends import get_challenge_store, get_current_user, get_unit_of_work

router = APIRouter(prefix="/passkey", tags=["Passkeys"])

CLIENT_ERRORS = {
    "CHALLENGE_NOT_FOUND": status.HTTP_400_BAD_REQUEST,
    "PASSKEY_VERIFICATION_FAILED": status.HTTP_400_BAD_REQUEST,
    "PASSKEY_REPLAY_DETECTED": status.HTTP_401_UNAUTHORIZED,
    "ACCOUNT_LOCKED": status.HTTP_401_UNAUTHORIZED,
    "ACCOUNT_INACTIVE": status.HTTP_403_FORBIDDEN,
    "USER_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "NO_PASSKEYS": status.HTTP_404_NOT_FOUND,
    "PASSKEY_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "PASSKEY_ALREADY_REGISTERED": status.HTTP_409_CONFLICT,
}


def _raise_for(error):
    if error.code in CLIENT_ERRORS:
        raise ClientError(error, status_code=CLIENT_ERRORS[error.code])
    raise ServerError(error)


@router.post("/register/options", status_code=status.HTTP_200_OK)
async def registration_options(
    claims: SessionClaims = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    challenges: IChallengeStore = Depends(get_challenge_store),
):
    """Start passkey registration for the signed-in user"""
    use_case = BeginPasskeyRegistrationUseCase(uow, challenges)
    result = await use_case.execute(claims.user_id)

    if result.is_err():
        _raise_for(result.error)

    return result.value


class RegisterPasskeyRequest(CamelModel):
    credential: Dict[str, Any] = Field(..., description="navigator.credentials.create() result")
    name: Optional[str] = Field(default=None, max_length=100)


@router.post("/register/verify", status_code=status.HTTP_200_OK, response_model=PasskeyInfo)
async def verify_registration(
    request: RegisterPasskeyRequest,
    claims: SessionClaims = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    challenges: IChallengeStore = Depends(get_challenge_store),
):
    use_case = FinishPasskeyRegistrationUseCase(uow, challenges)
    result = await use_case.execute(claims.user_id, request.credential, request.name)

    if result.is_err():
        _raise_for(result.error)

    return result.value


class AuthenticationOptionsRequest(CamelModel):
    email: EmailStr


@router.post("/authenticate/options", status_code=status.HTTP_200_OK)
async def authentication_options(
    request: AuthenticationOptionsRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    challenges: IChallengeStore = Depends(get_challenge_store),
):
    use_case = BeginPasskeyAuthenticationUseCase(uow, challenges)
    result = await use_case.execute(request.email)

    if result.is_err():
        _raise_for(result.error)

    return result.value


class AuthenticatePasskeyRequest(CamelModel):
    email: EmailStr
    credential: Dict[str, Any] = Field(..., description="navigator.credentials.get() result")


@router.post("/authenticate/verify", status_code=status.HTTP_200_OK, response_model=LoginResponse)
async def verify_authentication(
    request: AuthenticatePasskeyRequest,
    response: Response,
    uow: UnitOfWork = Depends(get_unit_of_work),
    challenges: IChallengeStore = Depends(get_challenge_store),
):
    """
    Passkey Login

    Verifies the assertion and opens a session exactly like password login.
    """
    use_case = FinishPasskeyAuthenticationUseCase(uow, challenges)
    result = await use_case.execute(request.email, request.credential)

    if result.is_err():
        _raise_for(result.error)

    set_session_cookie(response, result.value.token)
    return result.value
