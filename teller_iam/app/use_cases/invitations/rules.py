import secrets
from datetime import datetime, timedelta
from typing import Optional

from config import ApplicationConfig
from teller_iam.domain.entities import Invitation
from teller_iam.libs.result import Error

INVITATION_NOT_FOUND = Error("INVITATION_NOT_FOUND", "Invalid invitation token")
INVITATION_EXPIRED = Error("INVITATION_EXPIRED", "Invitation has expired")
INVITATION_ALREADY_USED = Error(
    "INVITATION_ALREADY_USED", "Invitation has already been accepted"
)


def new_invitation_token() -> str:
    # 32 random bytes, 64 hex characters
    return secrets.token_hex(32)


def invitation_expiry(now: datetime) -> datetime:
    return now + timedelta(hours=ApplicationConfig.INVITATION_TTL_HOURS)


def invite_link(token: str) -> str:
    base_url = ApplicationConfig.APP_BASE_URL.rstrip("/")
    return f"{base_url}{ApplicationConfig.REGISTER_PATH}?token={token}"


def invitation_error(invitation: Optional[Invitation], now: datetime) -> Optional[Error]:
    """
    Redeemability check.

    Expiry is checked before use, so an expired token reports
    INVITATION_EXPIRED whether or not it was ever redeemed. Cancelled
    invitations report as expired.
    """
    if invitation is None:
        return INVITATION_NOT_FOUND
    if invitation.revoked_at is not None or invitation.expires_at <= now:
        return INVITATION_EXPIRED
    if invitation.used_at is not None:
        return INVITATION_ALREADY_USED
    return None
