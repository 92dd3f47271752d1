"""
Refresh Token Use Case

Exchanges a refresh token for a new access token, rotating the refresh token.
"""

from teller_iam.app.services.unit_of_work import UnitOfWork
from teller_iam.domain.base import utcnow
from teller_iam.domain.entities import AuditEvent, UserStatus
from teller_iam.libs.result import Error, Result, Return

from .dtos import LoginResponse
from .login_use_case import ACCOUNT_LOCKED
from .sessions import (
    hash_refresh_token,
    new_refresh_token,
    refresh_expiry,
    session_response,
)


class RefreshTokenUseCase:
    """
    Use case for the refresh-token exchange.

    Business Rules:
    - Lookup by SHA-256 digest of the presented token
    - Revoked or expired sessions are rejected
    - Rotation is a compare-and-set, so a token can be exchanged once
    - New claims are built from the user as stored now (current role)
    - A user who is no longer ACTIVE loses the session
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, refresh_token: str) -> Result[LoginResponse]:
        async with self.uow:
            token_hash = hash_refresh_token(refresh_token)
            session = await self.uow.sessions.get_by_refresh_token_hash(token_hash)

            if session is None:
                return Return.err(Error("INVALID_TOKEN", "Invalid refresh token"))

            if session.revoked:
                return Return.err(Error("SESSION_REVOKED", "Session has been revoked"))

            now = utcnow()
            if session.expires_at <= now:
                return Return.err(Error("SESSION_EXPIRED", "Session has expired"))

            user = await self.uow.users.get_by_id(session.user_id)
            if user is None:
                return Return.err(Error("INVALID_TOKEN", "Invalid refresh token"))

            if user.status != UserStatus.active:
                await self.uow.sessions.revoke_by_id(session.id)
                await self.uow.commit()
                return Return.err(ACCOUNT_LOCKED)

            new_token, new_hash = new_refresh_token()
            rotated = await self.uow.sessions.rotate(
                session.id, token_hash, new_hash, refresh_expiry(now)
            )
            if not rotated:
                return Return.err(
                    Error("SESSION_REVOKED", "Refresh token has already been used")
                )

            await self.uow.audit_events.create(
                AuditEvent(
                    user_id=user.id,
                    action="token_refresh",
                    event_metadata={"session_id": str(session.id)},
                )
            )

            await self.uow.commit()

            return Return.ok(session_response(user, session, new_token, now))
