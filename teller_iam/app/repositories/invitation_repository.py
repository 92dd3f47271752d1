from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from teller_iam.domain.entities import Invitation, InvitationStatus


class IInvitationRepository(ABC):
    """Invitation repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, invitation_id: UUID) -> Optional[Invitation]:
        """Get invitation by ID"""
        pass

    @abstractmethod
    async def get_by_token(self, token: str) -> Optional[Invitation]:
        """Get invitation by token"""
        pass

    @abstractmethod
    async def get_pending_by_email(self, email: str, now: datetime) -> Optional[Invitation]:
        """Get an unused, uncancelled, unexpired invitation for the email"""
        pass

    @abstractmethod
    async def list(
        self,
        now: datetime,
        status: Optional[InvitationStatus] = None,
        email: Optional[str] = None,
    ) -> List[Invitation]:
        """List invitations, newest first, optionally filtered by derived status and email"""
        pass

    @abstractmethod
    async def create(self, invitation: Invitation) -> Invitation:
        """Create a new invitation"""
        pass

    @abstractmethod
    async def update(self, invitation: Invitation) -> Invitation:
        """Update existing invitation"""
        pass

    @abstractmethod
    async def mark_used(self, invitation_id: UUID, now: datetime) -> bool:
        """
        Set used_at only if the invitation is still redeemable.

        Returns False when another redemption got there first, or the
        invitation expired or was cancelled in the meantime.
        """
        pass
