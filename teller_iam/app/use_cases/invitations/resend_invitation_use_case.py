"""
Resend Invitation Use Case

Issues a fresh token and expiry for an invitation that was not redeemed.
"""

from uuid import UUID

from teller_iam.app.services.unit_of_work import UnitOfWork
from teller_iam.app.use_cases.guards import actor_error
from teller_iam.domain.base import utcnow
from teller_iam.domain.entities import AuditEvent
from teller_iam.domain.rbac import Permission
from teller_iam.libs.result import Error, Result, Return

from .dtos import InviteUserResponse
from .rules import (
    INVITATION_ALREADY_USED,
    invitation_expiry,
    invite_link,
    new_invitation_token,
)


class ResendInvitationUseCase:
    """
    Use case for resending an invitation.

    Business Rules:
    - Actor needs users:create and must outrank the invited role
    - Redeemed invitations cannot be resent
    - Cancelled invitations cannot be resent
    - The old token stops working; the new one gets a full TTL
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self, actor_id: UUID, invitation_id: UUID
    ) -> Result[InviteUserResponse]:
        async with self.uow:
            invitation = await self.uow.invitations.get_by_id(invitation_id)
            if invitation is None:
                return Return.err(Error("INVITATION_NOT_FOUND", "Invitation not found"))

            actor = await self.uow.users.get_by_id(actor_id)
            error = actor_error(actor, Permission.users_create, invitation.role)
            if error:
                return Return.err(error)

            if invitation.used_at is not None:
                return Return.err(INVITATION_ALREADY_USED)

            if invitation.revoked_at is not None:
                return Return.err(
                    Error("INVITATION_CANCELLED", "Cancelled invitations cannot be resent")
                )

            token = new_invitation_token()
            invitation.token = token
            invitation.expires_at = invitation_expiry(utcnow())
            await self.uow.invitations.update(invitation)

            await self.uow.audit_events.create(
                AuditEvent(
                    user_id=actor_id,
                    action="invitation_resent",
                    event_metadata={
                        "invitation_id": str(invitation.id),
                        "email": invitation.email,
                    },
                )
            )

            await self.uow.commit()

            return Return.ok(
                InviteUserResponse(
                    invite_id=str(invitation.id),
                    invite_link=invite_link(token),
                    expires_at=invitation.expires_at.isoformat(),
                )
            )
