"""
Logout Use Case

Revokes the session behind the caller's access token.
"""

from uuid import UUID

from teller_iam.app.services.unit_of_work import UnitOfWork
from teller_iam.domain.entities import AuditEvent
from teller_iam.libs.result import Error, Result, Return

from .dtos import LogoutResponse


class LogoutUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, user_id: UUID, session_id: UUID) -> Result[LogoutResponse]:
        async with self.uow:
            session = await self.uow.sessions.get_by_id(session_id)
            if session is None or session.user_id != user_id:
                return Return.err(Error("SESSION_NOT_FOUND", "Session not found"))

            await self.uow.sessions.revoke_by_id(session_id)
            await self.uow.audit_events.create(
                AuditEvent(
                    user_id=user_id,
                    action="logout",
                    event_metadata={"session_id": str(session_id)},
                )
            )
            await self.uow.commit()

            return Return.ok(LogoutResponse(status="logged_out"))
