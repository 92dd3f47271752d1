"""
Teller IAM Domain Entities

All domain entities organized by model.
Each entity in its own file for better maintainability.
"""

# Export all enums
from .enums import InvitationStatus, UserRole, UserStatus

# Export all entities
from .user import User
from .invitation import Invitation
from .session import Session
from .passkey import Passkey
from .audit_event import AuditEvent

__all__ = [
    # Enums
    "UserRole",
    "UserStatus",
    "InvitationStatus",
    # Entities
    "User",
    "Invitation",
    "Session",
    "Passkey",
    "AuditEvent",
]
