"""
List Invitations Use Case
"""

from typing import Optional

from teller_iam.app.services.unit_of_work import UnitOfWork
from teller_iam.domain.base import utcnow
from teller_iam.domain.entities import InvitationStatus
from teller_iam.libs.result import Error, Result, Return

from .dtos import InvitationListResponse, InvitationSummary


class ListInvitationsUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self, status: Optional[str] = None, email: Optional[str] = None
    ) -> Result[InvitationListResponse]:
        """
        List invitations newest first.

        Args:
            status: PENDING, ACCEPTED, EXPIRED or CANCELLED (any case)
            email: Exact email filter (any case)
        """
        status_filter = None
        if status:
            try:
                status_filter = InvitationStatus(status.upper())
            except ValueError:
                allowed = ", ".join(s.value for s in InvitationStatus)
                return Return.err(
                    Error("INVALID_STATUS", f"Invalid status: {status}. Must be one of: {allowed}")
                )

        async with self.uow:
            now = utcnow()
            invitations = await self.uow.invitations.list(now, status_filter, email)

            return Return.ok(
                InvitationListResponse(
                    invitations=[
                        InvitationSummary(
                            id=str(i.id),
                            email=i.email,
                            role=i.role.value,
                            status=i.status_at(now).value,
                            invited_by=str(i.invited_by),
                            expires_at=i.expires_at.isoformat(),
                            used_at=i.used_at.isoformat() if i.used_at else None,
                            created_at=i.created_at.isoformat(),
                        )
                        for i in invitations
                    ]
                )
            )
