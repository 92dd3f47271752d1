from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from teller_iam.app.repositories.session_repository import ISessionRepository
from teller_iam.domain.base import utcnow
from teller_iam.domain.entities import Session


class SessionRepository(ISessionRepository):
    """Session repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, session_id: UUID) -> Optional[Session]:
        """Get session by ID"""
        stmt = select(Session).where(Session.id == session_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_refresh_token_hash(self, token_hash: str) -> Optional[Session]:
        """
        Find session by refresh token digest.

        Revoked and expired sessions are returned too; the use case
        inspects them to pick the right error.
        """
        stmt = select(Session).where(Session.refresh_token_hash == token_hash)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, session_obj: Session) -> Session:
        """Create a new session"""
        self.session.add(session_obj)
        await self.session.flush()
        await self.session.refresh(session_obj)
        return session_obj

    async def rotate(
        self, session_id: UUID, old_hash: str, new_hash: str, expires_at: datetime
    ) -> bool:
        """Compare-and-set on the refresh token hash"""
        stmt = (
            update(Session)
            .where(
                Session.id == session_id,
                Session.refresh_token_hash == old_hash,
                Session.revoked == False,  # noqa: E712
            )
            .values(refresh_token_hash=new_hash, expires_at=expires_at)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self._reload(session_id)
        return result.rowcount == 1

    async def revoke_by_id(self, session_id: UUID) -> bool:
        """Revoke a specific session by ID"""
        stmt = (
            update(Session)
            .where(Session.id == session_id, Session.revoked == False)  # noqa: E712
            .values(revoked=True, revoked_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self._reload(session_id)
        return result.rowcount > 0

    async def revoke_all_by_user_id(self, user_id: UUID) -> int:
        """Revoke all active sessions for a user"""
        stmt = (
            update(Session)
            .where(Session.user_id == user_id, Session.revoked == False)  # noqa: E712
            .values(revoked=True, revoked_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        reload = (
            select(Session)
            .where(Session.user_id == user_id)
            .execution_options(populate_existing=True)
        )
        await self.session.execute(reload)
        return result.rowcount

    async def _reload(self, session_id: UUID) -> None:
        stmt = (
            select(Session)
            .where(Session.id == session_id)
            .execution_options(populate_existing=True)
        )
        await self.session.execute(stmt)
