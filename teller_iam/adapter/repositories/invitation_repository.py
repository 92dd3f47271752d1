from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import func, update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from teller_iam.app.repositories.invitation_repository import IInvitationRepository
from teller_iam.domain.entities import Invitation, InvitationStatus


def _redeemable(now: datetime):
    return (
        Invitation.used_at.is_(None),
        Invitation.revoked_at.is_(None),
        Invitation.expires_at > now,
    )


class InvitationRepository(IInvitationRepository):
    """Invitation repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, invitation_id: UUID) -> Optional[Invitation]:
        """Get invitation by ID"""
        stmt = select(Invitation).where(Invitation.id == invitation_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_token(self, token: str) -> Optional[Invitation]:
        """Get invitation by token"""
        stmt = select(Invitation).where(Invitation.token == token)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_pending_by_email(self, email: str, now: datetime) -> Optional[Invitation]:
        """Get an unused, uncancelled, unexpired invitation for the email"""
        stmt = (
            select(Invitation)
            .where(func.lower(Invitation.email) == email.strip().lower(), *_redeemable(now))
            .order_by(Invitation.created_at.desc())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list(
        self,
        now: datetime,
        status: Optional[InvitationStatus] = None,
        email: Optional[str] = None,
    ) -> List[Invitation]:
        """List invitations, newest first, optionally filtered by derived status and email"""
        stmt = select(Invitation)

        if email:
            stmt = stmt.where(func.lower(Invitation.email) == email.strip().lower())

        if status == InvitationStatus.pending:
            stmt = stmt.where(*_redeemable(now))
        elif status == InvitationStatus.accepted:
            stmt = stmt.where(Invitation.used_at.is_not(None))
        elif status == InvitationStatus.cancelled:
            stmt = stmt.where(
                Invitation.used_at.is_(None), Invitation.revoked_at.is_not(None)
            )
        elif status == InvitationStatus.expired:
            stmt = stmt.where(
                Invitation.used_at.is_(None),
                Invitation.revoked_at.is_(None),
                Invitation.expires_at <= now,
            )

        stmt = stmt.order_by(Invitation.created_at.desc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def create(self, invitation: Invitation) -> Invitation:
        """Create a new invitation"""
        invitation.email = invitation.email.strip().lower()
        self.session.add(invitation)
        await self.session.flush()
        await self.session.refresh(invitation)
        return invitation

    async def update(self, invitation: Invitation) -> Invitation:
        """Update existing invitation"""
        self.session.add(invitation)
        await self.session.flush()
        await self.session.refresh(invitation)
        return invitation

    async def mark_used(self, invitation_id: UUID, now: datetime) -> bool:
        """Conditional UPDATE; the WHERE clause is the single-use guarantee"""
        stmt = (
            update(Invitation)
            .where(Invitation.id == invitation_id, *_redeemable(now))
            .values(used_at=now)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        if result.rowcount != 1:
            return False

        reload = (
            select(Invitation)
            .where(Invitation.id == invitation_id)
            .execution_options(populate_existing=True)
        )
        await self.session.execute(reload)
        return True
