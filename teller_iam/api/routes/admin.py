from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from pydantic import Field

from teller_iam.api.error import ClientError, ServerError
from teller_iam.app.services.session_claims import SessionClaims
from teller_iam.app.services.unit_of_work import UnitOfWork
from teller_iam.app.use_cases.audit import GetAuditEventsUseCase
from teller_iam.app.use_cases.dtos import CamelModel
from teller_iam.app.use_cases.invitations import (
    InvitationListResponse,
    InviteUserResponse,
    ListInvitationsUseCase,
    ResendInvitationUseCase,
    RevokeInvitationResponse,
    RevokeInvitationUseCase,
)
from teller_iam.app.use_cases.users import ChangeUserRoleUseCase, ChangeUserStatusUseCase
from teller_iam.depends import get_unit_of_work, require_permissions
from teller_iam.domain.rbac import Permission

router = APIRouter(prefix="/admin", tags=["Admin"])

CLIENT_ERRORS = {
    "INVALID_ROLE": status.HTTP_400_BAD_REQUEST,
    "INVALID_STATUS": status.HTTP_400_BAD_REQUEST,
    "CANNOT_CHANGE_SELF": status.HTTP_400_BAD_REQUEST,
    "INVITATION_ALREADY_USED": status.HTTP_400_BAD_REQUEST,
    "INVITATION_CANCELLED": status.HTTP_400_BAD_REQUEST,
    "FORBIDDEN": status.HTTP_403_FORBIDDEN,
    "USER_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "INVITATION_NOT_FOUND": status.HTTP_404_NOT_FOUND,
}


def _raise_for(error):
    if error.code in CLIENT_ERRORS:
        raise ClientError(error, status_code=CLIENT_ERRORS[error.code])
    raise ServerError(error)


@router.get("/invitations", status_code=status.HTTP_200_OK, response_model=InvitationListResponse)
async def list_invitations(
    invitation_status: Optional[str] = Query(default=None, alias="status"),
    email: Optional[str] = Query(default=None),
    claims: SessionClaims = Depends(require_permissions(Permission.users_read)),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    use_case = ListInvitationsUseCase(uow)
    result = await use_case.execute(invitation_status, email)

    if result.is_err():
        _raise_for(result.error)

    return result.value


@router.delete(
    "/invitations/{invitation_id}",
    status_code=status.HTTP_200_OK,
    response_model=RevokeInvitationResponse,
)
async def revoke_invitation(
    invitation_id: UUID,
    claims: SessionClaims = Depends(require_permissions(Permission.users_create)),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Cancel Invitation

    Raises:
        - 400 Bad Request: Invitation already redeemed
        - 403 Forbidden: Caller cannot manage the invited role
        - 404 Not Found: Unknown invitation
    """
    use_case = RevokeInvitationUseCase(uow)
    result = await use_case.execute(claims.user_id, invitation_id)

    if result.is_err():
        _raise_for(result.error)

    return result.value


@router.post(
    "/invitations/{invitation_id}/resend",
    status_code=status.HTTP_200_OK,
    response_model=InviteUserResponse,
)
async def resend_invitation(
    invitation_id: UUID,
    claims: SessionClaims = Depends(require_permissions(Permission.users_create)),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Resend Invitation

    Issues a new token with a full expiry window; the previous link stops working.
    """
    use_case = ResendInvitationUseCase(uow)
    result = await use_case.execute(claims.user_id, invitation_id)

    if result.is_err():
        _raise_for(result.error)

    return result.value


class ChangeStatusRequest(CamelModel):
    status: str = Field(..., description="ACTIVE, LOCKED, SUSPENDED or PENDING")


@router.patch("/users/{user_id}/status", status_code=status.HTTP_200_OK)
async def change_user_status(
    user_id: UUID,
    request: ChangeStatusRequest,
    claims: SessionClaims = Depends(require_permissions(Permission.users_update)),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Change User Status

    Soft activation, locking and suspension. Leaving ACTIVE revokes the
    user's refresh tokens; returning to ACTIVE clears failed attempts.
    """
    use_case = ChangeUserStatusUseCase(uow)
    result = await use_case.execute(claims.user_id, user_id, request.status)

    if result.is_err():
        _raise_for(result.error)

    return result.value


class ChangeRoleRequest(CamelModel):
    role: str = Field(..., description="New portal role")


@router.patch("/users/{user_id}/role", status_code=status.HTTP_200_OK)
async def change_user_role(
    user_id: UUID,
    request: ChangeRoleRequest,
    claims: SessionClaims = Depends(require_permissions(Permission.roles_update)),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Change User Role

    Tokens issued before the change keep the old role until they expire.
    """
    use_case = ChangeUserRoleUseCase(uow)
    result = await use_case.execute(claims.user_id, user_id, request.role)

    if result.is_err():
        _raise_for(result.error)

    return result.value


@router.get("/audit-events", status_code=status.HTTP_200_OK)
async def get_audit_events(
    user_id: Optional[UUID] = Query(default=None, alias="userId"),
    limit: int = Query(default=50, ge=1, le=100),
    cursor: Optional[str] = Query(default=None),
    claims: SessionClaims = Depends(require_permissions(Permission.audit_read)),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    use_case = GetAuditEventsUseCase(uow)
    result = await use_case.execute(user_id=user_id, limit=limit, cursor=cursor)

    if result.is_err():
        _raise_for(result.error)

    return result.value
