"""
Invite User Use Case

Issues a single-use registration invitation for an email and a role.
"""

from typing import Optional
from uuid import UUID

from teller_iam.app.services.unit_of_work import UnitOfWork
from teller_iam.app.use_cases.guards import actor_error
from teller_iam.domain.base import utcnow
from teller_iam.domain.entities import AuditEvent, Invitation, UserRole
from teller_iam.domain.rbac import ADMIN_ROLES, Permission
from teller_iam.libs.result import Error, Result, Return

from .dtos import InviteUserResponse
from .rules import invitation_expiry, invite_link, new_invitation_token


class InviteUserUseCase:
    """
    Use case for inviting a new portal user.

    Business Rules:
    - Only ORG_ADMIN and AGENT_ADMIN can invite
    - The inviter's role must outrank the invited role
    - No invitation for an email that already has a user
    - At most one live invitation per email
    - Token: 256 bits of randomness; expires after INVITATION_TTL_HOURS
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self,
        inviter_id: UUID,
        email: str,
        role: str,
        organization_id: Optional[UUID] = None,
        agent_id: Optional[UUID] = None,
        department: Optional[str] = None,
        position: Optional[str] = None,
    ) -> Result[InviteUserResponse]:
        """
        Execute invite user use case.

        Args:
            inviter_id: User ID of the administrator sending the invite
            email: Email address to invite
            role: Role granted on registration

        Returns:
            Result with InviteUserResponse DTO, or Error
        """
        async with self.uow:
            try:
                target_role = UserRole(role)
            except ValueError:
                allowed = ", ".join(r.value for r in UserRole)
                return Return.err(
                    Error("INVALID_ROLE", f"Invalid role: {role}. Must be one of: {allowed}")
                )

            inviter = await self.uow.users.get_by_id(inviter_id)
            if inviter is None or inviter.role not in ADMIN_ROLES:
                return Return.err(
                    Error("FORBIDDEN", "Only administrators can invite users")
                )

            error = actor_error(inviter, Permission.users_create, target_role)
            if error:
                return Return.err(error)

            email = email.strip().lower()

            if await self.uow.users.get_by_email(email):
                return Return.err(
                    Error("EMAIL_ALREADY_EXISTS", "A user with this email already exists")
                )

            now = utcnow()
            if await self.uow.invitations.get_pending_by_email(email, now):
                return Return.err(
                    Error(
                        "INVITE_ALREADY_EXISTS",
                        "A pending invitation already exists for this email",
                    )
                )

            token = new_invitation_token()
            invitation = Invitation(
                token=token,
                email=email,
                role=target_role,
                invited_by=inviter.id,
                organization_id=organization_id,
                agent_id=agent_id,
                department=department,
                position=position,
                expires_at=invitation_expiry(now),
            )
            invitation = await self.uow.invitations.create(invitation)

            await self.uow.audit_events.create(
                AuditEvent(
                    user_id=inviter.id,
                    action="invite_sent",
                    event_metadata={
                        "invitation_id": str(invitation.id),
                        "invited_email": email,
                        "role": target_role.value,
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
