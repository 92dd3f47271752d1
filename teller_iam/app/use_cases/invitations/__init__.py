"""
Invitation Use Cases

Issuing, validating and redeeming registration invitations.
"""

from .dtos import (
    InvitationInfo,
    InvitationListResponse,
    InvitationSummary,
    InvitationValidationResponse,
    InviteUserResponse,
    RegisteredUser,
    RegisterInviteeResponse,
    RevokeInvitationResponse,
)
from .invite_user_use_case import InviteUserUseCase
from .list_invitations_use_case import ListInvitationsUseCase
from .register_invitee_use_case import RegisterInviteeUseCase
from .resend_invitation_use_case import ResendInvitationUseCase
from .revoke_invitation_use_case import RevokeInvitationUseCase
from .validate_invitation_use_case import ValidateInvitationUseCase

__all__ = [
    "InviteUserUseCase",
    "ValidateInvitationUseCase",
    "RegisterInviteeUseCase",
    "ListInvitationsUseCase",
    "RevokeInvitationUseCase",
    "ResendInvitationUseCase",
    "InviteUserResponse",
    "InvitationInfo",
    "InvitationValidationResponse",
    "RegisteredUser",
    "RegisterInviteeResponse",
    "InvitationSummary",
    "InvitationListResponse",
    "RevokeInvitationResponse",
]
