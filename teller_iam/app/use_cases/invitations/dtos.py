"""
Invitation Use Case DTOs (Data Transfer Objects)

All Response classes for the invitation domain.
"""

from typing import List, Optional

from teller_iam.app.use_cases.dtos import CamelModel


class InviteUserResponse(CamelModel):
    """Response for invite and resend"""

    invite_id: str
    invite_link: str
    expires_at: str


class InvitationInfo(CamelModel):
    """What the registration page shows for a valid token"""

    email: str
    role: str
    expires_at: str
    invited_by: Optional[str]
    valid: bool


class InvitationValidationResponse(CamelModel):
    invite: InvitationInfo


class RegisteredUser(CamelModel):
    id: str
    email: str
    name: str
    role: str
    status: str


class RegisterInviteeResponse(CamelModel):
    user: RegisteredUser


class InvitationSummary(CamelModel):
    id: str
    email: str
    role: str
    status: str
    invited_by: str
    expires_at: str
    used_at: Optional[str] = None
    created_at: str


class InvitationListResponse(CamelModel):
    invitations: List[InvitationSummary]


class RevokeInvitationResponse(CamelModel):
    status: str
