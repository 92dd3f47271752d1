from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from teller_iam.app.repositories.passkey_repository import IPasskeyRepository
from teller_iam.domain.entities import Passkey


class PasskeyRepository(IPasskeyRepository):
    """Passkey repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_user_id(self, user_id: UUID) -> List[Passkey]:
        """Get all passkeys registered by a user"""
        stmt = select(Passkey).where(Passkey.user_id == user_id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_by_credential_id(self, credential_id: str) -> Optional[Passkey]:
        """Get passkey by its base64url credential ID"""
        stmt = select(Passkey).where(Passkey.credential_id == credential_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, passkey: Passkey) -> Passkey:
        """Create a new passkey"""
        self.session.add(passkey)
        await self.session.flush()
        await self.session.refresh(passkey)
        return passkey

    async def advance_sign_count(
        self, passkey_id: UUID, new_count: int, used_at: datetime
    ) -> bool:
        """Compare-and-set on sign_count"""
        if new_count > 0:
            forward = Passkey.sign_count < new_count
        else:
            forward = Passkey.sign_count == 0

        stmt = (
            update(Passkey)
            .where(Passkey.id == passkey_id, forward)
            .values(sign_count=new_count, last_used_at=used_at)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)

        reload = (
            select(Passkey)
            .where(Passkey.id == passkey_id)
            .execution_options(populate_existing=True)
        )
        await self.session.execute(reload)
        return result.rowcount == 1
