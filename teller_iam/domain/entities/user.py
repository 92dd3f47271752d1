"""
User Entity

A portal operator: admin, agent, teller, compliance officer or plain org user.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from teller_iam.domain.base import utcnow

from .enums import UserRole, UserStatus


class User(SQLModel, table=True):
    """
    User entity - identity record for the teller portal.

    Business Rules:
    - Email is unique and stored lower-cased (lookups are case-insensitive)
    - Password stored as bcrypt hash
    - failed_attempts grows by one per bad password, resets on success
    - locked_until is a temporary lockout set by repeated bad passwords;
      LOCKED/SUSPENDED are admin decisions and never expire on their own
    - Never hard-deleted; access is withdrawn through status changes
    """

    __tablename__ = "users"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    email: str = Field(unique=True, index=True, max_length=255)
    password_hash: str = Field(max_length=60)  # Bcrypt output is 60 chars

    first_name: str = Field(default="", max_length=100)
    last_name: str = Field(default="", max_length=100)
    phone: Optional[str] = Field(default=None, max_length=50)
    department: Optional[str] = Field(default=None, max_length=100)
    position: Optional[str] = Field(default=None, max_length=100)

    role: UserRole = Field(default=UserRole.org_user)
    status: UserStatus = Field(default=UserStatus.active)
    failed_attempts: int = Field(default=0, ge=0)
    locked_until: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    invited_by: Optional[UUID] = Field(default=None, foreign_key="users.id")

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    last_login_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    __table_args__ = (Index("idx_user_role_status", "role", "status"),)

    def lockout_active(self, now: datetime) -> bool:
        return self.locked_until is not None and self.locked_until > now

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip() or self.email
