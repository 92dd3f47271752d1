"""
Passkey Entity

WebAuthn public-key credentials registered by a user.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID, uuid4

from sqlmodel import JSON, Column, DateTime, Field, SQLModel

from teller_iam.domain.base import utcnow


class Passkey(SQLModel, table=True):
    """
    Passkey entity - one WebAuthn credential owned by exactly one user.

    Business Rules:
    - credential_id is unique across all users (base64url)
    - sign_count only moves forward; a stale count is a cloned authenticator
    """

    __tablename__ = "passkeys"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(foreign_key="users.id", nullable=False, index=True)

    credential_id: str = Field(unique=True, index=True, max_length=1024)
    public_key: str
    sign_count: int = Field(default=0, ge=0)
    transports: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    name: str = Field(default="Default Passkey", max_length=100)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    last_used_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
