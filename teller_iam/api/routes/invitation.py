from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from pydantic import EmailStr, Field

from teller_iam.api.error import ClientError, ServerError
from teller_iam.app.services.session_claims import SessionClaims
from teller_iam.app.services.unit_of_work import UnitOfWork
from teller_iam.app.use_cases.dtos import CamelModel
from teller_iam.app.use_cases.invitations import (
    InvitationValidationResponse,
    InviteUserResponse,
    InviteUserUseCase,
    RegisterInviteeResponse,
    RegisterInviteeUseCase,
    ValidateInvitationUseCase,
)
from teller_iam.depends import get_unit_of_work, require_admin
from teller_iam.libs.result import Error

router = APIRouter(prefix="/user", tags=["Invitations"])

TOKEN_ERRORS = {
    "INVITATION_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "INVITATION_EXPIRED": status.HTTP_400_BAD_REQUEST,
    "INVITATION_ALREADY_USED": status.HTTP_400_BAD_REQUEST,
}


class InviteUserRequest(CamelModel):
    """Invite user HTTP request payload"""

    email: EmailStr = Field(..., description="Email address to invite")
    role: str = Field(..., min_length=1, description="Role granted on registration")
    organization_id: Optional[UUID] = None
    agent_id: Optional[UUID] = None
    department: Optional[str] = Field(default=None, max_length=100)
    position: Optional[str] = Field(default=None, max_length=100)


@router.post("/invite", status_code=status.HTTP_200_OK, response_model=InviteUserResponse)
async def invite_user(
    request: InviteUserRequest,
    claims: SessionClaims = Depends(require_admin),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Invite User

    Creates a 72-hour single-use invitation and returns its registration link.

    Raises:
        - 400 Bad Request: Invalid role
        - 401 Unauthorized: No valid session
        - 403 Forbidden: Caller is not an administrator or cannot grant the role
        - 409 Conflict: User or live invitation already exists for the email
    """
    use_case = InviteUserUseCase(uow)
    result = await use_case.execute(
        inviter_id=claims.user_id,
        email=request.email,
        role=request.role,
        organization_id=request.organization_id,
        agent_id=request.agent_id,
        department=request.department,
        position=request.position,
    )

    if result.is_err():
        error = result.error
        if error.code == "INVALID_ROLE":
            raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
        elif error.code == "FORBIDDEN":
            raise ClientError(error, status_code=status.HTTP_403_FORBIDDEN)
        elif error.code in ("EMAIL_ALREADY_EXISTS", "INVITE_ALREADY_EXISTS"):
            raise ClientError(error, status_code=status.HTTP_409_CONFLICT)
        raise ServerError(error)

    return result.value


@router.get(
    "/invite/validate",
    status_code=status.HTTP_200_OK,
    response_model=InvitationValidationResponse,
)
async def validate_invitation(
    token: Optional[str] = Query(default=None),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Validate Invitation Token

    Raises:
        - 400 Bad Request: Missing, expired or already used token
        - 404 Not Found: Unknown token
    """
    if not token:
        raise ClientError(Error("TOKEN_REQUIRED", "Token required"))

    use_case = ValidateInvitationUseCase(uow)
    result = await use_case.execute(token)

    if result.is_err():
        error = result.error
        if error.code in TOKEN_ERRORS:
            raise ClientError(error, status_code=TOKEN_ERRORS[error.code])
        raise ServerError(error)

    return InvitationValidationResponse(invite=result.value)


class RegisterRequest(CamelModel):
    """Registration completion HTTP request payload"""

    token: str = Field(..., min_length=1)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=8, description="Password (min 8 chars)")
    phone: Optional[str] = Field(default=None, max_length=50)
    department: Optional[str] = Field(default=None, max_length=100)
    position: Optional[str] = Field(default=None, max_length=100)


@router.post("/register", status_code=status.HTTP_200_OK, response_model=RegisterInviteeResponse)
async def register(request: RegisterRequest, uow: UnitOfWork = Depends(get_unit_of_work)):
    """
    Complete Registration

    Redeems the invitation and creates an ACTIVE user with the invited role.

    Raises:
        - 400 Bad Request: Invalid input, expired or already used token
        - 404 Not Found: Unknown token
        - 409 Conflict: A user with the invited email already exists
    """
    use_case = RegisterInviteeUseCase(uow)
    result = await use_case.execute(
        token=request.token,
        first_name=request.first_name,
        last_name=request.last_name,
        password=request.password,
        phone=request.phone,
        department=request.department,
        position=request.position,
    )

    if result.is_err():
        error = result.error
        if error.code in TOKEN_ERRORS:
            raise ClientError(error, status_code=TOKEN_ERRORS[error.code])
        elif error.code == "INVALID_PASSWORD":
            raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
        elif error.code == "EMAIL_ALREADY_EXISTS":
            raise ClientError(error, status_code=status.HTTP_409_CONFLICT)
        raise ServerError(error)

    return result.value
