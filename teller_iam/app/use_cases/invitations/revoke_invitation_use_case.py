"""
Revoke Invitation Use Case

Cancels an invitation that has not been redeemed.
"""

from uuid import UUID

from teller_iam.app.services.unit_of_work import UnitOfWork
from teller_iam.app.use_cases.guards import actor_error
from teller_iam.domain.base import utcnow
from teller_iam.domain.entities import AuditEvent
from teller_iam.domain.rbac import Permission
from teller_iam.libs.result import Error, Result, Return

from .dtos import RevokeInvitationResponse
from .rules import INVITATION_ALREADY_USED


class RevokeInvitationUseCase:
    """
    Use case for cancelling an invitation.

    Business Rules:
    - Actor needs users:create and must outrank the invited role
    - Redeemed invitations cannot be cancelled
    - Cancelling twice is a no-op
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self, actor_id: UUID, invitation_id: UUID
    ) -> Result[RevokeInvitationResponse]:
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

            if invitation.revoked_at is None:
                invitation.revoked_at = utcnow()
                await self.uow.invitations.update(invitation)

                await self.uow.audit_events.create(
                    AuditEvent(
                        user_id=actor_id,
                        action="invitation_revoked",
                        event_metadata={
                            "invitation_id": str(invitation.id),
                            "email": invitation.email,
                        },
                    )
                )
                await self.uow.commit()

            return Return.ok(RevokeInvitationResponse(status="CANCELLED"))
