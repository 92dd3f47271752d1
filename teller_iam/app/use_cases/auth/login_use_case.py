"""
Login Use Case

Verifies email/password credentials and opens a session.
"""

import logging
from datetime import timedelta

from config import ApplicationConfig
from teller_iam.app.services.passwords import burn_password_check, verify_password
from teller_iam.app.services.unit_of_work import UnitOfWork
from teller_iam.domain.base import utcnow
from teller_iam.domain.entities import AuditEvent, UserStatus
from teller_iam.libs.result import Error, Result, Return

from .dtos import LoginResponse
from .sessions import open_session, session_response

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = Error("INVALID_CREDENTIALS", "Invalid email or password")
ACCOUNT_LOCKED = Error("ACCOUNT_LOCKED", "Account is locked. Please contact support.")
ACCOUNT_TEMPORARILY_LOCKED = Error(
    "ACCOUNT_LOCKED",
    "Account is temporarily locked due to multiple failed login attempts. Try again later.",
)
ACCOUNT_INACTIVE = Error("ACCOUNT_INACTIVE", "Account is not active yet")


class LoginUseCase:
    """
    Use case for password login.

    Business Rules:
    - Unknown email and wrong password give the same error
    - Unknown email writes nothing
    - Wrong password adds exactly one to failed_attempts; reaching
      MAX_FAILED_ATTEMPTS sets locked_until = now + LOCKOUT_MINUTES
    - Correct password before locked_until gives ACCOUNT_LOCKED; once it
      passes, the next attempt clears locked_until and the counter
    - Correct password on a LOCKED/SUSPENDED account gives ACCOUNT_LOCKED
      and leaves failed_attempts alone
    - Success resets failed_attempts, stamps last_login_at and opens a session
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, email: str, password: str) -> Result[LoginResponse]:
        """
        Execute login use case.

        Args:
            email: User email (any case)
            password: Plain text password

        Returns:
            Result with LoginResponse, or Error
        """
        async with self.uow:
            user = await self.uow.users.get_by_email(email)

            if user is None:
                burn_password_check(password)
                return Return.err(INVALID_CREDENTIALS)

            now = utcnow()
            if user.locked_until is not None and not user.lockout_active(now):
                user.failed_attempts = 0
                user.locked_until = None
                await self.uow.users.update(user)
                await self.uow.commit()
                logger.info(f"Lockout expired for account {user.id}")

            if not verify_password(password, user.password_hash):
                attempts = await self.uow.users.increment_failed_attempts(user.id)
                await self.uow.audit_events.create(
                    AuditEvent(
                        user_id=user.id,
                        action="login_failed",
                        event_metadata={"failed_attempts": attempts},
                    )
                )

                limit = ApplicationConfig.MAX_FAILED_ATTEMPTS
                lockout = timedelta(minutes=ApplicationConfig.LOCKOUT_MINUTES)
                if (
                    limit > 0
                    and attempts >= limit
                    and lockout
                    and not user.lockout_active(now)
                ):
                    user.locked_until = now + lockout
                    await self.uow.users.update(user)
                    await self.uow.audit_events.create(
                        AuditEvent(
                            user_id=user.id,
                            action="account_locked",
                            event_metadata={
                                "failed_attempts": attempts,
                                "locked_until": user.locked_until.isoformat(),
                            },
                        )
                    )
                    logger.info(
                        f"Account {user.id} locked until {user.locked_until} "
                        f"after {attempts} failed logins"
                    )

                await self.uow.commit()
                return Return.err(INVALID_CREDENTIALS)

            if user.status in (UserStatus.locked, UserStatus.suspended):
                return Return.err(ACCOUNT_LOCKED)

            if user.lockout_active(now):
                return Return.err(ACCOUNT_TEMPORARILY_LOCKED)

            if user.status != UserStatus.active:
                return Return.err(ACCOUNT_INACTIVE)

            user.failed_attempts = 0
            user.last_login_at = now
            await self.uow.users.update(user)

            session, refresh_token = await open_session(self.uow, user, now)

            await self.uow.audit_events.create(
                AuditEvent(
                    user_id=user.id,
                    action="login",
                    event_metadata={"method": "password", "session_id": str(session.id)},
                )
            )

            await self.uow.commit()

            return Return.ok(session_response(user, session, refresh_token, now))
