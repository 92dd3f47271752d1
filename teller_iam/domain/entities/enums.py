"""
Teller IAM Domain Enums

All enumeration types used across domain entities.
"""

from enum import Enum


class UserRole(str, Enum):
    """Portal role; drives permissions and the default landing page"""

    org_admin = "ORG_ADMIN"
    agent_admin = "AGENT_ADMIN"
    agent_user = "AGENT_USER"
    compliance_user = "COMPLIANCE_USER"
    org_user = "ORG_USER"


class UserStatus(str, Enum):
    """User account status"""

    active = "ACTIVE"
    locked = "LOCKED"
    suspended = "SUSPENDED"
    pending = "PENDING"


class InvitationStatus(str, Enum):
    """Derived invitation state (never stored, computed from timestamps)"""

    pending = "PENDING"
    accepted = "ACCEPTED"
    expired = "EXPIRED"
    cancelled = "CANCELLED"
