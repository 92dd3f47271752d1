"""
Invitation Entity

Single-use registration grants bound to an email and a role.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from teller_iam.domain.base import utcnow

from .enums import InvitationStatus, UserRole


class Invitation(SQLModel, table=True):
    """
    Invitation entity - an admin's offer for someone to register.

    Business Rules:
    - Created by ORG_ADMIN / AGENT_ADMIN only
    - Token is 32 random bytes, hex encoded (256 bits)
    - Redeemable iff used_at is null, revoked_at is null and expires_at > now
    - used_at is written exactly once, by a conditional update
    """

    __tablename__ = "invitations"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    token: str = Field(unique=True, index=True, max_length=64)
    email: str = Field(max_length=255, nullable=False, index=True)
    role: UserRole = Field(nullable=False)

    invited_by: UUID = Field(foreign_key="users.id", nullable=False)
    organization_id: Optional[UUID] = Field(default=None)
    agent_id: Optional[UUID] = Field(default=None)
    department: Optional[str] = Field(default=None, max_length=100)
    position: Optional[str] = Field(default=None, max_length=100)

    # Timestamps
    expires_at: datetime = Field(sa_column=Column(DateTime, nullable=False))
    used_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    revoked_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (Index("idx_invitation_expires_at", "expires_at"),)

    def status_at(self, now: datetime) -> InvitationStatus:
        if self.used_at is not None:
            return InvitationStatus.accepted
        if self.revoked_at is not None:
            return InvitationStatus.cancelled
        if self.expires_at <= now:
            return InvitationStatus.expired
        return InvitationStatus.pending
