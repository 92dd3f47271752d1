"""
Register Invitee Use Case

Redeems an invitation token and creates the invited user.
"""

import logging
from typing import Optional

from teller_iam.app.services.passwords import hash_password
from teller_iam.app.services.unit_of_work import UnitOfWork
from teller_iam.domain.base import utcnow
from teller_iam.domain.entities import AuditEvent, User, UserStatus
from teller_iam.libs.result import Error, Result, Return

from .dtos import RegisterInviteeResponse, RegisteredUser
from .rules import INVITATION_ALREADY_USED, invitation_error

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


class RegisterInviteeUseCase:
    """
    Use case for completing registration from an invitation.

    Business Rules:
    - Same three token failures as validation
    - Password at least 8 characters
    - Email must not already belong to a user
    - Marking the invitation and creating the user commit together; the
      mark is a conditional update, so of two concurrent redemptions only
      one can succeed
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self,
        token: str,
        first_name: str,
        last_name: str,
        password: str,
        phone: Optional[str] = None,
        department: Optional[str] = None,
        position: Optional[str] = None,
    ) -> Result[RegisterInviteeResponse]:
        """
        Execute register invitee use case.

        Args:
            token: Invitation token from the invite link
            first_name, last_name, phone, department, position: Profile fields
            password: Plain text password

        Returns:
            Result with the created user, or Error
        """
        async with self.uow:
            now = utcnow()
            invitation = await self.uow.invitations.get_by_token(token)

            error = invitation_error(invitation, now)
            if error:
                return Return.err(error)

            if len(password) < MIN_PASSWORD_LENGTH:
                return Return.err(
                    Error(
                        "INVALID_PASSWORD",
                        f"Password must be at least {MIN_PASSWORD_LENGTH} characters long",
                    )
                )

            if await self.uow.users.get_by_email(invitation.email):
                return Return.err(
                    Error("EMAIL_ALREADY_EXISTS", "A user with this email already exists")
                )

            if not await self.uow.invitations.mark_used(invitation.id, now):
                await self.uow.rollback()
                return Return.err(INVITATION_ALREADY_USED)

            user = User(
                email=invitation.email,
                password_hash=hash_password(password),
                first_name=first_name.strip(),
                last_name=last_name.strip(),
                phone=phone,
                department=department or invitation.department,
                position=position or invitation.position,
                role=invitation.role,
                status=UserStatus.active,
                invited_by=invitation.invited_by,
            )
            user = await self.uow.users.create(user)

            await self.uow.audit_events.create(
                AuditEvent(
                    user_id=user.id,
                    action="invitation_accepted",
                    event_metadata={
                        "invitation_id": str(invitation.id),
                        "role": invitation.role.value,
                    },
                )
            )

            await self.uow.commit()
            logger.info(f"Invitation {invitation.id} redeemed by user {user.id}")

            return Return.ok(
                RegisterInviteeResponse(
                    user=RegisteredUser(
                        id=str(user.id),
                        email=user.email,
                        name=user.full_name,
                        role=user.role.value,
                        status=user.status.value,
                    )
                )
            )
