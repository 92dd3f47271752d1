"""
Validate Invitation Use Case

Read-only check behind the registration page.
"""

from teller_iam.app.services.unit_of_work import UnitOfWork
from teller_iam.domain.base import utcnow
from teller_iam.libs.result import Result, Return

from .dtos import InvitationInfo
from .rules import invitation_error


class ValidateInvitationUseCase:
    """
    Use case for validating an invitation token.

    Business Rules:
    - Writes nothing
    - Unknown token: INVITATION_NOT_FOUND
    - Expired or cancelled: INVITATION_EXPIRED
    - Redeemed: INVITATION_ALREADY_USED
    - Only the invitation's own email/role and the inviter's email are returned
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, token: str) -> Result[InvitationInfo]:
        async with self.uow:
            invitation = await self.uow.invitations.get_by_token(token)

            error = invitation_error(invitation, utcnow())
            if error:
                return Return.err(error)

            inviter = await self.uow.users.get_by_id(invitation.invited_by)

            return Return.ok(
                InvitationInfo(
                    email=invitation.email,
                    role=invitation.role.value,
                    expires_at=invitation.expires_at.isoformat(),
                    invited_by=inviter.email if inviter else None,
                    valid=True,
                )
            )
